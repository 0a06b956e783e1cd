# src/routers/admins.py
"""
Модерация флага is_admin. Все ручки — только для администраторов.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.connection import MessageOut
from src.schemas.user import AdminGrantIn, UserAdminOut
from src.services.events import log_event, ADMIN_GRANTED, ADMIN_REVOKED
from src.utils.auth_dep import require_admin
from src.utils.errors import NotFound

log = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


def _set_admin(db: Session, actor: User, user_id: int, value: bool) -> None:
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise NotFound("Usuário não encontrado.")
    user.is_admin = value
    db.commit()

    try:
        log_event(db, type=ADMIN_GRANTED if value else ADMIN_REVOKED, actor_id=actor.id, target_user_id=user_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.warning("admins: failed to write audit for user %s", user_id, exc_info=True)


@router.get("/admins", response_model=List[UserAdminOut])
def list_admins(db: Session = Depends(get_db), _admin: User = Depends(require_admin)):
    return db.query(User).filter(User.is_admin.is_(True)).order_by(User.id).all()


@router.post("/admins", response_model=MessageOut)
def grant_admin(
    body: AdminGrantIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    _set_admin(db, admin, body.user_id, True)
    return {"message": "Administrador adicionado com sucesso!"}


@router.delete("/admins/{user_id}", response_model=MessageOut)
def revoke_admin(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    _set_admin(db, admin, user_id, False)
    return {"message": "Administrador removido com sucesso!"}


@router.get("/admin/users", response_model=List[UserAdminOut])
def list_all_users(db: Session = Depends(get_db), _admin: User = Depends(require_admin)):
    """Список всех пользователей (id, имя, email, флаг админа)."""
    return db.query(User).order_by(User.id).all()
