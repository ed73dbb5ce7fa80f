# app/services/user_service.py
import re

from sqlalchemy.orm import Session

from app.data.models.user import UserModel
from app.domain.errors import Unauthorized, ValidationError
from app.domain.roles import Role
from app.repos.user_repo import UserRepo
from app.utils.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

EMAIL_RE = re.compile(r".+@.+\..+")
MIN_PASSWORD_LENGTH = 6


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, name: str | None, email: str | None, password: str | None, role: str | None = None):
        """Zwraca (user, token)."""
        name = (name or "").strip()
        email = (email or "").strip().lower()

        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        if not EMAIL_RE.match(email):
            raise ValidationError("Please provide a valid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self.repo.get_user_by_email(email):
            raise ValidationError("User already exists")

        normalized_role = Role.normalize(role)
        user = self.repo.create_user(
            UserModel(
                name=name,
                email=email,
                password_hash=get_password_hash(password),
                role=normalized_role.value,
            )
        )
        logger.info(f"Zarejestrowano uzytkownika {user.id} z rola {user.role}")
        return user, create_access_token(user.id, user.role)

    def login(self, email: str | None, password: str | None):
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.repo.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise ValidationError("Invalid credentials")

        return user, create_access_token(user.id, user.role)

    def authenticate(self, token: str) -> UserModel:
        payload = decode_access_token(token)
        if not payload or payload.get("sub") is None:
            raise Unauthorized("Invalid or expired token")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise Unauthorized("Invalid or expired token")

        user = self.repo.get_user(user_id)
        if not user:
            raise Unauthorized("User not found")
        return user
