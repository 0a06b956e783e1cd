# src/routers/users.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from src.db import get_db
from src.models.user import User
from src.schemas.connection import MessageOut
from src.schemas.user import (
    PasswordUpdate,
    ProfileUpdate,
    UserOut,
    UserPublicOut,
    UserSearchOut,
)
from src.services import connections
from src.services.suggestions import interest_overlap
from src.utils.auth_dep import get_current_user
from src.utils.errors import InvalidArgument, NotFound
from src.utils.security import hash_password, verify_password
from src.utils.user import interest_keys

router = APIRouter()


def _escape_like(value: str) -> str:
    """Экранируем спецсимволы LIKE, чтобы "%" и "_" из запроса искались буквально."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    """Полный профиль текущего пользователя."""
    return current_user


@router.put("/me", response_model=MessageOut)
def update_me(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Обновить профиль. Пришедшие поля перезаписываются,
    first_login сбрасывается (профиль заполнен).
    """
    for field, value in body.model_dump(exclude_unset=True).items():
        if field == "name" and not (value or "").strip():
            raise InvalidArgument("Nome não pode ser vazio")
        if field == "interests" and value is None:
            value = []
        setattr(current_user, field, value)
    current_user.first_login = False
    db.commit()
    return {"message": "Perfil atualizado com sucesso"}


@router.put("/me/senha", response_model=MessageOut)
def update_password(
    body: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(body.old_password, current_user.password_hash):
        raise InvalidArgument("Senha antiga inválida")
    current_user.password_hash = hash_password(body.new_password)
    db.commit()
    return {"message": "Senha atualizada com sucesso"}


@router.get("/search", response_model=List[UserSearchOut])
def search_users(
    name: Optional[str] = Query(None, description="Подстрока имени"),
    course: Optional[str] = Query(None, description="Точное совпадение курса"),
    interests: Optional[str] = Query(None, description="Интересы через запятую"),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, gt=0, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Поиск пользователей по имени/курсу/интересам.
    Скрываем себя и всех, с кем уже есть связь в любом статусе.
    """
    wanted = interest_keys(interests)
    if not name and not course and not wanted:
        raise InvalidArgument("Pelo menos um filtro (nome, curso ou interesses) é obrigatório.")

    excluded = connections.excluded_id_set(db, current_user.id)

    q = db.query(User).filter(User.id.notin_(list(excluded)))
    if name:
        q = q.filter(User.name.ilike(f"%{_escape_like(name)}%", escape="\\"))
    if course:
        q = q.filter(User.course == course)
    if wanted:
        q = q.filter(interest_overlap(db, wanted))

    return (
        q.order_by(User.name.asc(), User.id.asc())
        .offset(offset).limit(limit)
        .all()
    )


@router.get("/{user_id}", response_model=UserPublicOut)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    """Публичный профиль по user_id. НЕ требует связи."""
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise NotFound("Usuário não encontrado.")
    return user
