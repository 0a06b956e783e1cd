# src/models/user.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Text, func
from src.db import Base


class User(Base):
    """
    Пользователь платформы (студент). Логин по email + пароль,
    профиль заполняется после первого входа (first_login сбрасывается при обновлении профиля).
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    # --- Профиль ---
    course = Column(String, index=True, nullable=True)
    age = Column(Integer, nullable=True)
    semester = Column(Integer, nullable=True)
    interests = Column(JSON, nullable=False, default=list)
    bio = Column(Text, nullable=True)

    # --- Флаги ---
    is_admin = Column(Boolean, default=False, nullable=False, comment="Администратор платформы")
    first_login = Column(Boolean, default=True, nullable=False, comment="Профиль ещё не заполнен")

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, name={self.name}, is_admin={self.is_admin})>"
