"""Domain error taxonomy and the JSON error handlers that render it."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from driveeasy.core.config import get_settings

logger = logging.getLogger(__name__)

GENERIC_INTERNAL_MESSAGE = "Something went wrong"


class DriveEasyError(Exception):
    """Base error carrying the HTTP status and the `{error, message}` body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, message: str | None = None) -> None:
        self.error = error
        self.message = message
        super().__init__(error)

    def to_body(self) -> dict[str, str]:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(DriveEasyError):
    """Bad input shape or format."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidStatus(ValidationError):
    def __init__(self, error: str = "Invalid status", message: str | None = None) -> None:
        super().__init__(error, message)


class InvalidCredentials(DriveEasyError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, error: str = "Invalid email or password", message: str | None = None) -> None:
        super().__init__(error, message)


class AuthenticationRequired(DriveEasyError):
    """No session, or the session expired."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(
        self,
        error: str = "Authentication required",
        message: str | None = "Please login to access this resource",
    ) -> None:
        super().__init__(error, message)


class Forbidden(DriveEasyError):
    """Authenticated, but the session role is not the required one."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(
            f"{role.capitalize()} access required",
            "You do not have permission to access this resource",
        )


class NotFound(DriveEasyError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateActiveBooking(DriveEasyError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        error: str = "You already have an active booking. Please wait for it to be processed or contact admin.",
        message: str | None = None,
    ) -> None:
        super().__init__(error, message)


class InstructorRequired(DriveEasyError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        error: str = "Instructor must be assigned when approving",
        message: str | None = None,
    ) -> None:
        super().__init__(error, message)


class InternalError(DriveEasyError):
    """Storage or session failure; the cause is logged, never returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _internal_error_body(exc: Exception) -> dict[str, Any]:
    settings = get_settings()
    expose = settings.APP_ENV == "dev" and settings.DEBUG
    return {
        "error": "Internal server error",
        "message": str(exc) if expose else GENERIC_INTERNAL_MESSAGE,
    }


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "Invalid value")
    return f"{location}: {msg}" if location else msg


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as a JSON `{error, message?}` body."""

    @app.exception_handler(DriveEasyError)
    async def domain_error_handler(request: Request, exc: DriveEasyError) -> JSONResponse:
        if isinstance(exc, InternalError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.error)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "message": _first_validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            content = {
                "error": "Route not found",
                "message": f"Cannot {request.method} {request.url.path}",
            }
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_internal_error_body(exc),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_internal_error_body(exc),
        )
