# src/utils/auth_dep.py
"""
FastAPI-зависимости авторизации:
- get_current_user: bearer-токен -> пользователь из БД
- require_admin: то же, но только для администраторов
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.utils.errors import Forbidden, Unauthorized
from src.utils.security import decode_access_token

# auto_error=False: отсутствие токена отдаём как 403 сами, битый токен — 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Forbidden("Token não fornecido")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Falha na autenticação do token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthorized("Usuário não encontrado")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden("Acesso restrito a administradores")
    return current_user


def require_self_or_admin(user_id: int, current_user: User) -> None:
    """Чужие списки связей видит только администратор."""
    if user_id != current_user.id and not current_user.is_admin:
        raise Forbidden("Acesso negado")
