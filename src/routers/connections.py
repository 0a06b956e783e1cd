# src/routers/connections.py
# РОУТЕР СВЯЗЕЙ (conexões) МЕЖДУ ПОЛЬЗОВАТЕЛЯМИ
# -----------------------------------------------------------------------------
# Тонкий слой: берём actor из токена, id второй стороны из пути,
# всю логику переходов делает src.services.connections.

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from src.db import get_db
from src.models.user import User
from src.schemas.connection import (
    AcceptedConnectionOut,
    ConnectionHistoryOut,
    ConnectionUserOut,
    MessageOut,
    SuggestionOut,
)
from src.services import connections
from src.utils.auth_dep import get_current_user, require_self_or_admin

router = APIRouter(tags=["Conexões"])


# =========================
# ПЕРЕХОДЫ
# =========================

@router.post("/{user_id}/conexoes", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_request(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.request(db, current_user.id, user_id)
    return {"message": "Solicitação de conexão enviada com sucesso."}


@router.delete("/{user_id}/conexoes", response_model=MessageOut)
def cancel_request(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.cancel(db, current_user.id, user_id)
    return {"message": "Solicitação de conexão cancelada com sucesso."}


@router.put("/{user_id}/conexoes/aceitar", response_model=MessageOut)
def accept_request(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.accept(db, current_user.id, user_id)
    return {"message": "Conexão aceita com sucesso."}


@router.put("/{user_id}/conexoes/recusar", response_model=MessageOut)
def refuse_request(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.refuse(db, current_user.id, user_id)
    return {"message": "Conexão recusada com sucesso."}


@router.put("/{user_id}/conexoes/bloquear", response_model=MessageOut)
def block_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.block(db, current_user.id, user_id)
    return {"message": "Conexão bloqueada com sucesso."}


@router.delete("/{amigo_id}/conexoes/desfazer", response_model=MessageOut)
def undo_connection(
    amigo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    connections.undo(db, current_user.id, amigo_id)
    return {"message": "Conexão desfeita com sucesso."}


# =========================
# СПИСКИ
# =========================

@router.get("/{user_id}/conexoes", response_model=List[AcceptedConnectionOut])
def get_connections(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Принятые связи: в каждом элементе профиль ДРУГА."""
    require_self_or_admin(user_id, current_user)
    return connections.list_accepted(db, user_id)


@router.get("/{user_id}/conexoes/pendentes", response_model=List[ConnectionUserOut])
def get_pending(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_self_or_admin(user_id, current_user)
    return connections.list_pending(db, user_id)


@router.get("/{user_id}/conexoes/enviadas", response_model=List[ConnectionUserOut])
def get_sent(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_self_or_admin(user_id, current_user)
    return connections.list_sent(db, user_id)


@router.get("/{user_id}/conexoes/historico", response_model=List[ConnectionHistoryOut])
def get_history(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_self_or_admin(user_id, current_user)
    return connections.history(db, user_id)


@router.get("/{user_id}/sugestoes", response_model=List[SuggestionOut])
def get_suggestions(
    user_id: int,
    limit: int = Query(20, gt=0, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_self_or_admin(user_id, current_user)
    return connections.suggestions(db, user_id, limit=limit)
