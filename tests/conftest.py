import os

# окружение выставляем ДО импорта src.* — движок создаётся при импорте src.db
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENV"] = "dev"

import pytest
from fastapi.testclient import TestClient

from src.db import Base, SessionLocal, engine
from src.main import app
from src.models.user import User
from src.utils.security import create_access_token, hash_password


@pytest.fixture(autouse=True)
def reset_db():
    """Чистая схема на каждый тест (in-memory SQLite, одно соединение)."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    """Создаёт пользователя в отдельной сессии и возвращает его id."""
    counter = {"n": 0}

    def _make(name=None, course=None, interests=None, is_admin=False, password="secret"):
        counter["n"] += 1
        n = counter["n"]
        session = SessionLocal()
        try:
            user = User(
                name=name or f"User {n}",
                email=f"user{n}@uni.example",
                password_hash=hash_password(password),
                course=course,
                interests=interests or [],
                is_admin=is_admin,
            )
            session.add(user)
            session.commit()
            return user.id
        finally:
            session.close()

    return _make


@pytest.fixture
def auth():
    """Заголовки с bearer-токеном для user_id."""
    def _headers(user_id, is_admin=False):
        token = create_access_token(user_id, f"user{user_id}@uni.example", is_admin)
        return {"Authorization": f"Bearer {token}"}

    return _headers
