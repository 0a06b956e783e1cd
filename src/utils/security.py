# src/utils/security.py
"""
Пароли (passlib) и bearer-токены (PyJWT, HS256).
Настройки берутся из окружения (.env подхватывается в src.db).
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from src.utils.errors import Unauthorized

ENV = os.getenv("ENV", "dev").lower()
JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))

if ENV != "dev" and JWT_SECRET == "change_me_for_prod":
    raise RuntimeError("JWT_SECRET must be set to a non-default value outside dev")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: int, email: str, is_admin: bool) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=JWT_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "email": email,
        "is_admin": bool(is_admin),
        "exp": expire,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Проверяет подпись и срок жизни токена.
    Любая проблема -> Unauthorized (401).
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expirado")
    except jwt.InvalidTokenError:
        raise Unauthorized("Falha na autenticação do token")
