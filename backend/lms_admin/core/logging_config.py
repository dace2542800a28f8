"""
Logging setup and request logging middleware.
"""

import logging
import time
import uuid

from fastapi import Request, Response


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("lms_admin.api")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the whole application."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    else:
        root.setLevel(level.upper())


async def request_logging_middleware(request: Request, call_next) -> Response:
    """Tag each request with an ``X-Request-ID`` and log its outcome."""
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed id=%s %s %s duration_ms=%s",
            req_id, request.method, request.url.path, elapsed_ms,
        )
        raise
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    response.headers["X-Request-ID"] = req_id
    logger.info(
        "request_done id=%s %s %s status=%s duration_ms=%s",
        req_id, request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response
