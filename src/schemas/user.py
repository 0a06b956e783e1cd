# src/schemas/user.py

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from src.utils.user import normalize_interests


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("E-mail inválido")
        return v


class LoginIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class LoginOut(BaseModel):
    token: str
    user_id: int
    first_login: bool


class PasswordUpdate(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Все поля необязательные: обновляем только пришедшие."""
    name: Optional[str] = None
    bio: Optional[str] = None
    course: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    semester: Optional[int] = Field(None, ge=0)
    interests: Optional[List[str]] = None

    @field_validator("interests")
    @classmethod
    def _interests(cls, v):
        return None if v is None else normalize_interests(v)


class UserOut(BaseModel):
    """Полный профиль (для самого пользователя)."""
    id: int
    name: str
    email: str
    bio: Optional[str] = None
    course: Optional[str] = None
    age: Optional[int] = None
    semester: Optional[int] = None
    interests: List[str] = []
    is_admin: bool
    first_login: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserPublicOut(BaseModel):
    """Публичный профиль (минимум данных)."""
    id: int
    name: str
    email: str
    course: Optional[str] = None
    age: Optional[int] = None
    semester: Optional[int] = None
    interests: List[str] = []
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class UserSearchOut(BaseModel):
    id: int
    name: str
    email: str
    course: Optional[str] = None
    semester: Optional[int] = None
    interests: List[str] = []

    class Config:
        from_attributes = True


class UserAdminOut(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool

    class Config:
        from_attributes = True


class AdminGrantIn(BaseModel):
    user_id: int
