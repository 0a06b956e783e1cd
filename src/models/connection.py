# src/models/connection.py
from __future__ import annotations

import enum

from sqlalchemy import (
    Column, Integer, ForeignKey, DateTime, Enum,
    UniqueConstraint, func, Index, CheckConstraint
)
from sqlalchemy.orm import relationship
from src.db import Base


class ConnectionStatus(enum.Enum):
    pending = "pending"
    accepted = "accepted"
    refused = "refused"
    blocked = "blocked"


class Connection(Base):
    """
    Каноническая модель связи: одна строка на пару пользователей.
    Пара хранится как (user_min, user_max) с инвариантом user_min < user_max.
    requester_id — кто привёл связь в текущее состояние (отправил запрос или заблокировал),
    вторая сторона пары — адресат.
    """
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)

    user_min = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user_max = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    status = Column(
        Enum(ConnectionStatus, name="connection_status"),
        nullable=False,
        default=ConnectionStatus.pending,
        comment="Статус связи: pending|accepted|refused|blocked",
    )

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_min", "user_max", name="uq_connection_pair"),
        CheckConstraint("user_min < user_max", name="ck_connection_min_lt_max"),
        CheckConstraint(
            "requester_id = user_min OR requester_id = user_max",
            name="ck_connection_requester_in_pair",
        ),
        Index("ix_connections_user_min", "user_min"),
        Index("ix_connections_user_max", "user_max"),
    )

    user_min_rel = relationship("User", foreign_keys=[user_min])
    user_max_rel = relationship("User", foreign_keys=[user_max])

    @property
    def target_id(self) -> int:
        return self.user_max if self.requester_id == self.user_min else self.user_min

    def other_id(self, viewer_id: int) -> int:
        """id "второй стороны" связи относительно viewer_id."""
        return self.user_max if viewer_id == self.user_min else self.user_min

    def __repr__(self):
        return (
            f"<Connection(user_min={self.user_min}, user_max={self.user_max}, "
            f"requester_id={self.requester_id}, status={self.status})>"
        )
