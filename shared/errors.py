"""
Error taxonomy shared by every service.

Services raise ServiceError subclasses; register_error_handlers() maps them
to HTTP responses in one place. There is no Conflict kind:
duplicate payment notifications are absorbed by the idempotent mark-paid.
"""
from enum import Enum
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"


class ServiceError(Exception):
    kind: ErrorKind
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidInput(ServiceError):
    kind = ErrorKind.INVALID_INPUT
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    body = {"ok": False, "error": exc.message}
    if exc.field:
        body["field"] = exc.field
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHENTICATED else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = first.get("loc") or ()
    body = {"ok": False, "error": first.get("msg", "invalid request")}
    if loc:
        body["field"] = str(loc[-1])
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("order_store_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"ok": False, "error": "db error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
