# app/api/deps.py
from typing import Iterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.data.database import Datastore
from app.data.models.user import UserModel
from app.domain.errors import DatastoreUnavailable, Forbidden, Unauthorized
from app.domain.roles import Capability, has_capability
from app.services.lock_service import LockService
from app.services.storage_service import ImageStorage
from app.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_datastore(request: Request) -> Datastore:
    return request.app.state.datastore


def get_db(datastore: Datastore = Depends(get_datastore)) -> Iterator[Session]:
    db = datastore.session()
    try:
        yield db
    finally:
        db.close()


def require_datastore(datastore: Datastore = Depends(get_datastore)) -> Datastore:
    if not datastore.is_ready and not datastore.check():
        raise DatastoreUnavailable()
    return datastore


def get_lock_service(request: Request) -> LockService | None:
    return request.app.state.lock_service


def get_storage(request: Request) -> ImageStorage:
    return request.app.state.storage


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserModel:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("Authorization header missing")
    return UserService(db).authenticate(credentials.credentials)


def require_capability(capability: Capability):
    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if not has_capability(user, capability):
            raise Forbidden()
        return user

    return dependency
