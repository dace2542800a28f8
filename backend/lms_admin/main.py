"""FastAPI application entrypoint for the LMS admin backend.

Wires logging, the request-ID middleware, CORS, the error envelope
handlers and the API routers. Tables are created and the first admin and
default settings are seeded on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lms_admin.core.config import settings
from lms_admin.core.database import DatabaseManager, SessionLocal, init_db
from lms_admin.core.errors import register_exception_handlers
from lms_admin.core.logging_config import configure_logging, request_logging_middleware
from lms_admin.routers import api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    DatabaseManager.create_all_tables()
    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("%s %s started (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    yield


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
    )

    app.middleware("http")(request_logging_middleware)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": settings.VERSION}

    return app


app = create_app()
