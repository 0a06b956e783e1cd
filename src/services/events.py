# src/services/events.py
from __future__ import annotations
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from src.models.event import Event

# Константы типов событий (используй в сервисах/роутерах)
CONNECTION_ACCEPTED = "connection_accepted"
ADMIN_GRANTED = "admin_granted"
ADMIN_REVOKED = "admin_revoked"

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def log_event(
    db: Session,
    *,
    type: str,
    actor_id: int,
    target_user_id: Optional[int] = None,
    data: Optional[Dict[str, Any]] = None,
    idempotency_key: Optional[str] = None,
) -> Event:
    """
    Единая точка записи событий аудита. Не делает commit.
    Если задан idempotency_key — обеспечиваем идемпотентность без IntegrityError
    (ON CONFLICT DO NOTHING по уникальному ключу).
    """
    payload = {
        "type": type,
        "actor_id": actor_id,
        "target_user_id": target_user_id,
        "data": (data or {}),
        "idempotency_key": idempotency_key,
    }

    insert = _DIALECT_INSERTS.get(db.get_bind().dialect.name)
    if idempotency_key and insert is not None:
        stmt = (
            insert(Event.__table__)
            .values(**payload)
            .on_conflict_do_nothing(index_elements=["idempotency_key"])
            .returning(Event.id)
        )
        inserted_id = db.execute(stmt).scalar_one_or_none()
        if inserted_id is not None:
            return db.query(Event).filter(Event.id == inserted_id).first()  # type: ignore
        # конфликт: запись уже есть — вернём существующую
        existing = db.query(Event).filter(Event.idempotency_key == idempotency_key).first()
        if existing:
            return existing

    # без идемпотентности — обычная ORM-вставка
    ev = Event(**payload)
    db.add(ev)
    return ev
