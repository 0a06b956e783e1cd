# src/models/event.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from src.db import Base


class Event(Base):
    """Запись аудита: кто, над кем и что сделал."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)

    # кто совершил действие
    actor_id = Column(Integer, nullable=False, index=True)

    # над кем действие (например, вторая сторона связи) — может быть NULL
    target_user_id = Column(Integer, nullable=True, index=True)

    # тип события
    type = Column(String(64), nullable=False)

    # произвольные данные события (JSONB в Postgres, JSON в SQLite)
    data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True, default={})

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    # идемпотентный ключ, чтобы не записывать дубль при ретраях
    idempotency_key = Column(String(64), nullable=True)

    __table_args__ = (
        UniqueConstraint("idempotency_key", name="uq_events_idempotency_key"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id} type={self.type} actor={self.actor_id} target={self.target_user_id}>"
