"""
Application error type and FastAPI exception handlers.

Services raise ``AppError`` with an HTTP status code; the handlers
registered by ``register_exception_handlers`` turn every error into the
``{"success": false, "error": ...}`` envelope.
"""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Error carrying an HTTP status code and a client-facing message."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = True

    def __repr__(self) -> str:
        return f"<AppError(status_code={self.status_code}, message='{self.message}')>"


def _error_body(message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": message}
    body.update(extra)
    return body


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else "unknown",
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("app_error %s %s", exc.message, _request_context(request))
    else:
        logger.info("app_error %s %s", exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route not found - {request.url.path}"
    else:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details: List[Dict[str, str]] = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" location prefix
        loc = [str(part) for part in error.get("loc", ())[1:]]
        details.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation error", details=details),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_error %s", _request_context(request))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("A record with this value already exists"),
    )


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body("Record not found"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error %s", _request_context(request))
    message = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
