# src/main.py
# Главная точка входа FastAPI для бэкенда университетской сети.
#  • Роутеры: /api (auth), /api/users (профиль, поиск, связи), /api (админка)
#  • Все ошибки отдаются фронту одинаково: {"message": "..."}
#  • Таблицы создаём сами только по флагу (ENV: DB_CREATE_ALL=1), иначе — alembic.

from __future__ import annotations

import logging
import os
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dotenv import load_dotenv
load_dotenv()

from src.db import Base, engine  # инициализация БД/пула соединений
from src.utils.errors import AppError

from src.routers.auth import router as auth_router
from src.routers.users import router as users_router
from src.routers.connections import router as connections_router
from src.routers.admins import router as admins_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

app = FastAPI(
    title="Campus Connect Backend",
    description="Backend университетской сети: аккаунты, профили, связи между студентами, модерация.",
)

# --- CORS (список доменов можно переопределить через CORS_ORIGINS="a,b") ---
_cors_env = os.getenv("CORS_ORIGINS")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _cors_env.split(",") if o.strip()] if _cors_env else DEFAULT_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Единый формат ошибок ---
@app.exception_handler(AppError)
async def _app_error_handler(_request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(_request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else (first.get("msg") or "Dados inválidos")
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(SQLAlchemyError)
async def _storage_error_handler(request: Request, exc: SQLAlchemyError):
    log.error("unhandled storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Erro no servidor."})


# --- Подключение роутеров ---
app.include_router(auth_router,        prefix="/api",       tags=["Autenticação"])
app.include_router(users_router,       prefix="/api/users", tags=["Usuários"])
app.include_router(connections_router, prefix="/api/users")
app.include_router(admins_router,      prefix="/api")


@app.get("/")
def root():
    """Простой healthcheck."""
    return {"message": "Campus Connect backend работает!", "docs": "/docs"}


@app.on_event("startup")
def _startup_schema():
    if os.getenv("DB_CREATE_ALL") == "1":
        # Для локальной разработки без миграций
        Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
