"""Error taxonomy and its mapping onto HTTP responses.

Learn: Services never raise HTTPException. They raise one of the small,
closed set of errors below; a single exception handler installed by
create_app() turns each one into a status code and a {"message": ...}
body. "Not found" and "not yours" are deliberately the same error, and
so are "unknown email" and "wrong password".
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class TaskTrackError(Exception):
    """Base for every error a core operation may raise."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(TaskTrackError):
    """Missing or malformed input."""

    status_code = 400
    message = "Invalid input"


class DuplicateIdentity(TaskTrackError):
    status_code = 400
    message = "User already exists"


class InvalidCredentials(TaskTrackError):
    """Unknown email or wrong password. Callers can't tell which."""

    status_code = 400
    message = "Invalid email or password"


class MissingToken(TaskTrackError):
    status_code = 401
    message = "Access denied. No token provided."


class InvalidToken(TaskTrackError):
    status_code = 401
    message = "Invalid token"


class ExpiredToken(InvalidToken):
    message = "Token has expired"


class NotFoundOrForbidden(TaskTrackError):
    """Task doesn't exist, or belongs to someone else."""

    status_code = 404
    message = "Task not found or unauthorized"


class InternalError(TaskTrackError):
    status_code = 500
    message = "Internal server error"


# ─── Handlers ────────────────────────────────────────────


async def _handle_tasktrack_error(request: Request, exc: TaskTrackError):
    headers = None
    if exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, error=type(exc).__name__)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError):
    """Body/path validation failures are plain 400s, not FastAPI's 422."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        text = first.get("msg", "Invalid input")
        message = f"{field}: {text}" if field else text
    else:
        message = ValidationError.message
    return JSONResponse(status_code=400, content={"message": message})


async def _handle_http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = "Route not found"
    elif exc.status_code == 405:
        message = "Method not allowed"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def _handle_db_error(request: Request, exc: SQLAlchemyError):
    logger.exception("db.error", path=request.url.path)
    return await _handle_tasktrack_error(request, InternalError())


async def _handle_unexpected(request: Request, exc: Exception):
    logger.exception("request.unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=500, content={"message": InternalError.message}
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the taxonomy → HTTP mapping on an app."""
    app.add_exception_handler(TaskTrackError, _handle_tasktrack_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(SQLAlchemyError, _handle_db_error)
    app.add_exception_handler(Exception, _handle_unexpected)
