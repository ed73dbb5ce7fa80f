# app/api/routers/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.domain.schemas import AuthOut, LoginIn, RegisterIn
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    user, token = UserService(db).register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return {"message": "User registered successfully", "token": token, "user": user}


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    user, token = UserService(db).login(payload.email, payload.password)
    return {"token": token, "user": user}
