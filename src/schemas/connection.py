# src/schemas/connection.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class MessageOut(BaseModel):
    message: str


class ConnectionUserOut(BaseModel):
    """
    Профиль второй стороны связи (для входящих/исходящих запросов).
    """
    id: int
    name: str
    course: Optional[str] = None
    semester: Optional[int] = None
    interests: List[str] = []


class AcceptedConnectionOut(ConnectionUserOut):
    """Друг: id — профиль ДРУГА, connection_id — строка связи."""
    connection_id: int


class ConnectionHistoryOut(BaseModel):
    other_id: int
    status: str
    direction: str  # sent | received
    created_at: datetime
    updated_at: datetime


class SuggestionOut(ConnectionUserOut):
    shared_interests: int
    same_course: bool
