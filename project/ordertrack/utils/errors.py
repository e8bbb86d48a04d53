# ordertrack/utils/errors.py

"""
Типизированные ошибки приложения и их перевод в HTTP-ответы.

Тело ответа об ошибке всегда имеет вид {"message": str, "details"?: list}.
Подробности (статус Airtable, причина, трассировка) пишутся только в лог.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Базовая ошибка: несёт публичное сообщение и HTTP-статус."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload = {"message": self.message}
        if self.details is not None:
            payload["details"] = jsonable_encoder(self.details)
        return payload


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class OrderNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class AdapterError(AppError):
    """
    Ошибка обращения к Airtable: HTTP не 2xx, сетевой сбой или ответ не той формы.
    Клиенту уходит только общее сообщение, status/reason остаются в логе.
    """

    PUBLIC_MESSAGE = "Failed to fetch order information"

    def __init__(self, reason: str, upstream_status: Optional[int] = None):
        super().__init__(self.PUBLIC_MESSAGE)
        self.reason = reason
        self.upstream_status = upstream_status

    def __str__(self) -> str:
        if self.upstream_status is not None:
            return f"Airtable API error: {self.upstream_status} {self.reason}"
        return f"Airtable API error: {self.reason}"

    def to_payload(self) -> dict:
        return {"message": self.message}


def register_exception_handlers(app: FastAPI) -> None:
    """Подключает обработчики ошибок к приложению."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        log = getattr(request.app.state, "log", None)
        if log:
            data = {"path": request.url.path, "status": exc.status_code}
            if exc.status_code >= 500:
                await log.log_error("errors", str(exc), data)
            else:
                await log.log_warning("errors", str(exc), data)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = jsonable_encoder(exc.errors())
        log = getattr(request.app.state, "log", None)
        if log:
            await log.log_warning("errors", "Некорректный запрос", {"path": request.url.path, "details": details})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request data", "details": details},
        )

    @app.exception_handler(Exception)
    async def handle_unknown_error(request: Request, exc: Exception):
        log = getattr(request.app.state, "log", None)
        if log:
            await log.log_error("errors", f"Необработанная ошибка: {exc!r}", {"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )
