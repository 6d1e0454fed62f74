"""Application factory and top-level wiring for the intake/metrics service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import (
    IntakeServiceError,
    http_exception_handler,
    intake_error_handler,
    store_error_handler,
    validation_exception_handler,
)
from .core.logging import configure_logging
from .core.settings import Settings, settings
from .db.migrate import run_migrations
from .db.session import engine
from .middlewares import RequestIdMiddleware
from .routers import data as data_router
from .routers import jrm as jrm_router
from .routers import metrics as metrics_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Tables are created once per process, before the first request.
    run_migrations(engine)
    logger.info("store.ready", extra={"extra_data": {"url": engine.url.render_as_string(hide_password=True)}})
    yield
    engine.dispose()


def create_app(config: Settings = settings) -> FastAPI:
    app = FastAPI(title=config.APP_NAME, lifespan=lifespan)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(IntakeServiceError, intake_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(data_router.router)
    app.include_router(jrm_router.router)
    app.include_router(metrics_router.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    if config.ENABLE_METRICS:
        Instrumentator().instrument(app).expose(app, endpoint=config.METRICS_ENDPOINT)

    # Mounted last so API routes win over same-named files.
    if config.STATIC_DIR is not None:
        app.mount("/", StaticFiles(directory=str(config.STATIC_DIR), html=True), name="static")

    return app


configure_logging(settings.LOG_LEVEL, service=settings.APP_NAME, environment=settings.APP_ENV)
app = create_app()


def run() -> None:
    """Console entry point: serve ``app`` with uvicorn on HOST/PORT."""

    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


__all__ = ["app", "create_app", "run"]
