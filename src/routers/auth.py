# src/routers/auth.py
"""
Роутер авторизации: регистрация по email/паролю, логин (выдаёт bearer-токен), логаут.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.connection import MessageOut
from src.schemas.user import LoginIn, LoginOut, RegisterIn
from src.utils.errors import InvalidArgument
from src.utils.security import create_access_token, hash_password, verify_password

log = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    if db.query(User.id).filter(User.email == body.email).first():
        raise InvalidArgument("E-mail já cadastrado")

    user = User(
        name=body.name.strip(),
        email=body.email,
        password_hash=hash_password(body.password),
        interests=[],
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # гонка двух регистраций на один email — uq по users.email
        db.rollback()
        raise InvalidArgument("E-mail já cadastrado")

    log.info("user registered: id=%s", user.id)
    return {"message": "Usuário registrado com sucesso"}


@router.post("/login", response_model=LoginOut)
def login(body: LoginIn, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()
    if not user or not verify_password(body.password, user.password_hash):
        raise InvalidArgument("Credenciais inválidas")

    token = create_access_token(user.id, user.email, user.is_admin)
    return LoginOut(token=token, user_id=user.id, first_login=user.first_login)


@router.post("/logout")
def logout():
    """Токены stateless: клиент просто выбрасывает свой."""
    return {"message": "Logout realizado com sucesso", "token": None}
