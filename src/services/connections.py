# src/services/connections.py
"""
Жизненный цикл связей между пользователями.

Одна строка на пару (user_min, user_max), статус и инициатор (requester_id):
  NONE --request(A→B)--> pending
  pending --accept(B)--> accepted      (+ уведомление A, запись аудита — best effort)
  pending --refuse(B)--> refused
  pending --cancel(A)--> NONE
  accepted --undo(A|B)--> NONE
  любое существующее --block(A→B)--> blocked (requester = A); без связи — no-op

Сервис не делает HTTP: бросает доменные ошибки из src.utils.errors,
ошибки БД заворачивает в StorageError (с rollback и логом).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.models.connection import Connection, ConnectionStatus
from src.models.user import User
from src.services.events import log_event, CONNECTION_ACCEPTED
from src.services.notifications import notify
from src.services.suggestions import rank_suggestions
from src.utils.errors import Conflict, InvalidArgument, NotFound, StorageError

log = logging.getLogger(__name__)

# Сообщения для повторного запроса при уже существующей связи
_EXISTING_MESSAGES = {
    ConnectionStatus.accepted: "Você já está conectado com este usuário.",
    ConnectionStatus.pending: "Já existe uma solicitação de conexão pendente.",
    ConnectionStatus.refused: "A conexão foi recusada anteriormente.",
    ConnectionStatus.blocked: "A conexão com este usuário está bloqueada.",
}


def _pair_min_max(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)


def _validate_pair(a: Optional[int], b: Optional[int]) -> None:
    if not a or not b or a == b:
        raise InvalidArgument("IDs de usuário inválidos. Verifique os dados enviados.")


@contextmanager
def _storage(db: Session, action: str) -> Iterator[None]:
    """Любая ошибка БД внутри блока -> rollback + лог + StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("connections: storage failure while trying to %s", action)
        raise StorageError(f"Erro ao {action}.") from e


def _pair_query(db: Session, a: int, b: int):
    umin, umax = _pair_min_max(a, b)
    return db.query(Connection).filter(Connection.user_min == umin, Connection.user_max == umax)


def _involving(db: Session, user_id: int):
    return db.query(Connection).filter(
        or_(Connection.user_min == user_id, Connection.user_max == user_id)
    )


def _profile_item(user: User) -> Dict:
    return {
        "id": user.id,
        "name": user.name,
        "course": user.course,
        "semester": user.semester,
        "interests": list(user.interests or []),
    }


def _load_profiles(db: Session, ids: Set[int]) -> Dict[int, User]:
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


# =========================
# ПЕРЕХОДЫ
# =========================

def request(db: Session, requester_id: int, target_id: int) -> Connection:
    _validate_pair(requester_id, target_id)

    with _storage(db, "verificar conexões existentes"):
        target = db.query(User.id).filter(User.id == target_id).first()
        existing = _pair_query(db, requester_id, target_id).first()

    if not target:
        raise NotFound("Usuário não encontrado.")
    if existing:
        raise Conflict(_EXISTING_MESSAGES[existing.status])

    umin, umax = _pair_min_max(requester_id, target_id)
    link = Connection(
        user_min=umin,
        user_max=umax,
        requester_id=requester_id,
        status=ConnectionStatus.pending,
    )
    try:
        db.add(link)
        db.commit()
    except IntegrityError:
        # параллельный запрос по той же паре успел раньше — uq_connection_pair
        db.rollback()
        raise Conflict(_EXISTING_MESSAGES[ConnectionStatus.pending])
    except SQLAlchemyError as e:
        db.rollback()
        log.exception("connections: failed to insert request %s -> %s", requester_id, target_id)
        raise StorageError("Erro ao enviar solicitação de conexão.") from e

    db.refresh(link)
    log.info("connection requested: %s -> %s", requester_id, target_id)
    return link


def accept(db: Session, actor_id: int, requester_id: int) -> Connection:
    """
    actor_id принимает запрос, отправленный requester_id.
    Смена статуса — одна строка, один UPDATE; побочные эффекты после commit и не валят операцию.
    """
    _validate_pair(actor_id, requester_id)

    with _storage(db, "verificar a solicitação no banco"):
        link = (
            _pair_query(db, actor_id, requester_id)
            .filter(Connection.requester_id == requester_id)
            .first()
        )

    if not link:
        raise NotFound("Solicitação de conexão não encontrada.")
    if link.status == ConnectionStatus.accepted:
        raise Conflict("Conexão já foi aceita anteriormente.")
    if link.status == ConnectionStatus.refused:
        raise Conflict("Conexão foi recusada anteriormente.")
    if link.status != ConnectionStatus.pending:
        raise Conflict("Estado inválido da solicitação.")

    with _storage(db, "atualizar a conexão no banco"):
        updated = (
            _pair_query(db, actor_id, requester_id)
            .filter(
                Connection.requester_id == requester_id,
                Connection.status == ConnectionStatus.pending,
            )
            .update({Connection.status: ConnectionStatus.accepted}, synchronize_session=False)
        )
        db.commit()

    if not updated:
        # строку успели изменить/удалить между чтением и UPDATE
        raise Conflict("Estado inválido da solicitação.")

    db.refresh(link)
    log.info("connection accepted: %s -> %s", requester_id, actor_id)
    _after_accept(db, link, actor_id, requester_id)
    return link


def _after_accept(db: Session, link: Connection, actor_id: int, requester_id: int) -> None:
    """Аудит + уведомление инициатору. Ошибки только логируем."""
    try:
        log_event(
            db,
            type=CONNECTION_ACCEPTED,
            actor_id=actor_id,
            target_user_id=requester_id,
            data={"connection_id": link.id, "requester_id": requester_id},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.warning("connections: failed to write audit for %s -> %s", requester_id, actor_id, exc_info=True)

    try:
        actor = db.query(User).filter(User.id == actor_id).first()
        who = actor.name if actor else "Um usuário"
        notify(db, requester_id, f"{who} aceitou sua solicitação de conexão.")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.warning("connections: failed to notify user %s", requester_id, exc_info=True)


def refuse(db: Session, actor_id: int, requester_id: int) -> int:
    """Отклонить входящий запрос. Ноль затронутых строк — не ошибка."""
    _validate_pair(actor_id, requester_id)
    with _storage(db, "recusar solicitação de conexão"):
        updated = (
            _pair_query(db, actor_id, requester_id)
            .filter(
                Connection.requester_id == requester_id,
                Connection.status == ConnectionStatus.pending,
            )
            .update({Connection.status: ConnectionStatus.refused}, synchronize_session=False)
        )
        db.commit()
    log.info("connection refused: %s -> %s (rows=%s)", requester_id, actor_id, updated)
    return updated


def block(db: Session, actor_id: int, target_id: int) -> int:
    """
    actor_id блокирует target_id: существующая связь пары уходит в blocked,
    инициатором становится блокирующий. Если связи нет — ноль строк, не ошибка.
    """
    _validate_pair(actor_id, target_id)
    with _storage(db, "bloquear conexão"):
        updated = _pair_query(db, actor_id, target_id).update(
            {
                Connection.status: ConnectionStatus.blocked,
                Connection.requester_id: actor_id,
            },
            synchronize_session="fetch",
        )
        db.commit()
    log.info("connection blocked: %s -> %s (rows=%s)", actor_id, target_id, updated)
    return updated


def cancel(db: Session, actor_id: int, target_id: int) -> int:
    """Отменить свой pending-запрос. Ноль удалённых строк — не ошибка."""
    _validate_pair(actor_id, target_id)
    with _storage(db, "cancelar a solicitação de conexão"):
        deleted = (
            _pair_query(db, actor_id, target_id)
            .filter(
                Connection.requester_id == actor_id,
                Connection.status == ConnectionStatus.pending,
            )
            .delete(synchronize_session="fetch")
        )
        db.commit()
    log.info("connection request cancelled: %s -> %s (rows=%s)", actor_id, target_id, deleted)
    return deleted


def undo(db: Session, actor_id: int, other_id: int) -> int:
    """Удалить связь пары в любом статусе."""
    _validate_pair(actor_id, other_id)
    with _storage(db, "desfazer conexão"):
        deleted = _pair_query(db, actor_id, other_id).delete(synchronize_session="fetch")
        db.commit()
    log.info("connection removed: %s <-> %s (rows=%s)", actor_id, other_id, deleted)
    return deleted


# =========================
# ВЫБОРКИ
# =========================

def list_accepted(db: Session, user_id: int) -> List[Dict]:
    """Друзья user_id с точки зрения user_id: профиль второй стороны, без повторов."""
    with _storage(db, "buscar conexões"):
        links = (
            _involving(db, user_id)
            .filter(Connection.status == ConnectionStatus.accepted)
            .order_by(Connection.updated_at.desc(), Connection.id.desc())
            .all()
        )
        profiles = _load_profiles(db, {l.other_id(user_id) for l in links})

    result: Dict[int, Dict] = {}
    for link in links:
        other = profiles.get(link.other_id(user_id))
        if not other or other.id in result:
            continue
        result[other.id] = {"connection_id": link.id, **_profile_item(other)}
    return list(result.values())


def _list_pending(db: Session, user_id: int, *, incoming: bool) -> List[Dict]:
    q = _involving(db, user_id).filter(Connection.status == ConnectionStatus.pending)
    if incoming:
        q = q.filter(Connection.requester_id != user_id)
    else:
        q = q.filter(Connection.requester_id == user_id)

    links = q.order_by(Connection.created_at.desc(), Connection.id.desc()).all()
    profiles = _load_profiles(db, {l.other_id(user_id) for l in links})
    return [
        _profile_item(profiles[l.other_id(user_id)])
        for l in links
        if l.other_id(user_id) in profiles
    ]


def list_pending(db: Session, user_id: int) -> List[Dict]:
    """Входящие запросы: user_id — адресат."""
    with _storage(db, "buscar solicitações pendentes"):
        return _list_pending(db, user_id, incoming=True)


def list_sent(db: Session, user_id: int) -> List[Dict]:
    """Исходящие запросы: user_id — инициатор."""
    with _storage(db, "buscar solicitações enviadas"):
        return _list_pending(db, user_id, incoming=False)


def history(db: Session, user_id: int) -> List[Dict]:
    with _storage(db, "buscar histórico de conexões"):
        links = _involving(db, user_id).order_by(Connection.updated_at.desc(), Connection.id.desc()).all()

    return [
        {
            "other_id": l.other_id(user_id),
            "status": l.status.value,
            "direction": "sent" if l.requester_id == user_id else "received",
            "created_at": l.created_at,
            "updated_at": l.updated_at,
        }
        for l in links
    ]


def excluded_id_set(db: Session, user_id: int) -> Set[int]:
    """Сам пользователь + все, с кем есть связь в любом статусе (включая refused/blocked)."""
    with _storage(db, "buscar conexões existentes"):
        pairs = (
            db.query(Connection.user_min, Connection.user_max)
            .filter(or_(Connection.user_min == user_id, Connection.user_max == user_id))
            .all()
        )
    excluded = {user_id}
    for umin, umax in pairs:
        excluded.add(umax if umin == user_id else umin)
    return excluded


def suggestions(db: Session, user_id: int, limit: int = 20) -> List[Dict]:
    with _storage(db, "obter dados do usuário logado"):
        me = db.query(User).filter(User.id == user_id).first()
    if not me:
        raise NotFound("Usuário não encontrado.")

    excluded = excluded_id_set(db, user_id)
    with _storage(db, "buscar sugestões de conexões"):
        return rank_suggestions(
            db,
            course=me.course,
            interests=me.interests or [],
            excluded_ids=excluded,
            limit=limit,
        )

