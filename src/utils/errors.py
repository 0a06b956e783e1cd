# src/utils/errors.py
"""
Доменные ошибки сервисного слоя.
Сервисы бросают их вместо HTTPException; main.py превращает их в ответ {"message": ...}
с нужным HTTP-статусом.
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(AppError):
    status_code = 400


class Conflict(AppError):
    # переход недопустим из текущего статуса — для фронта это обычная 400
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class StorageError(AppError):
    status_code = 500
