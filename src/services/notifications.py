# src/services/notifications.py
from __future__ import annotations

from sqlalchemy.orm import Session

from src.models.notification import Notification


def notify(db: Session, user_id: int, message: str) -> Notification:
    """Поставить уведомление пользователю. Не делает commit."""
    note = Notification(user_id=user_id, message=message, read=False)
    db.add(note)
    return note
