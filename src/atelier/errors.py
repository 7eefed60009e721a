"""Error taxonomy and the centralized JSON error formatter."""

import logging
from functools import wraps
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class AtelierError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AtelierError):
    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(AtelierError):
    status_code = 401
    default_message = "Unauthorized"


class Expired(Unauthenticated):
    default_message = "Session expired"


class Forbidden(AtelierError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AtelierError):
    status_code = 404
    default_message = "Not found"


class RateLimited(AtelierError):
    status_code = 429
    default_message = "Rate limit exceeded"


class UpstreamError(AtelierError):
    """A data-store call failed; the cause is logged, never returned."""

    status_code = 500


def store_operation(operation_name: str) -> Callable:
    """Decorator turning data-store failures into :class:`UpstreamError`.

    The wrapped function must take the SQLAlchemy session as its first
    argument so the failed transaction can be rolled back.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(session, *args, **kwargs):
            try:
                return func(session, *args, **kwargs)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("data store error during %s", operation_name)
                raise UpstreamError() from exc

        return wrapper

    return decorator


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse({"error": message, **extra}, status_code=status_code, headers=headers)


async def atelier_error_handler(request: Request, exc: AtelierError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.__cause__ or exc)
    return _error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return _error_response(400, "Invalid JSON payload")
    details = [{"loc": list(error.get("loc", ())), "msg": error.get("msg", "")} for error in errors]
    return _error_response(400, "Invalid request", details=details)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = _error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    """Register the formatter for every error the API can produce."""
    app.add_exception_handler(AtelierError, atelier_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
