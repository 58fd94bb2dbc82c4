"""DocSense ─ FastAPI application
================================

This module hosts the production ASGI application.

Usage
-----
Run locally with::

    uvicorn src.api.app:app --reload

The FastAPI instance is exposed as ``app`` and re-exported from
``src/api/__init__.py``.
"""

from __future__ import annotations

import asyncio

# third-party
import structlog
from fastapi import APIRouter, FastAPI

# local imports
from src.api.errors import add_exception_handlers
from src.api.routes import admin as admin_router_module
from src.api.routes import classifications as classifications_router_module
from src.api.routes import files as files_router_module
from src.api.routes import model as model_router_module
from src.classification.pipeline import get_classifier
from src.core.config import get_settings
from src.core.exceptions import ModelTrainingError
from src.core.logging import RequestLoggingMiddleware, configure_logging

# Prometheus instrumentation is optional and enabled via PROMETHEUS_ENABLED
# (see src/core/config.py). The application still boots when the package is
# not installed; _PROM_AVAILABLE guards the instrumentation call.

try:
    from prometheus_fastapi_instrumentator import Instrumentator  # type: ignore

    _PROM_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover – optional dependency missing
    _PROM_AVAILABLE = False

__all__: list[str] = ["app", "create_app"]

# ---------------------------------------------------------------------------
# Initialise process-wide logging before any logger instantiation.
# ---------------------------------------------------------------------------
settings = get_settings()
configure_logging(settings.debug)
logger = structlog.get_logger(__name__)


def _register_routes(app_instance: FastAPI) -> None:
    """Include every API router into the FastAPI application."""
    routers: list[APIRouter] = [
        files_router_module.router,
        classifications_router_module.router,
        model_router_module.router,
        admin_router_module.router,
    ]
    for router in routers:
        app_instance.include_router(router)


async def _warm_up_model() -> None:
    """Train the model in the background so the first upload need not wait.

    Failure is logged and swallowed here: uploads keep working through the
    fallback classifier and the next request triggers a fresh attempt.
    """
    try:
        await get_classifier().model.ensure_trained()
    except ModelTrainingError as e:
        logger.error("startup_training_failed", error=str(e))
    except Exception as e:  # noqa: BLE001 – nothing awaits this task
        logger.error("startup_training_failed", error=str(e), exc_info=True)


def create_app() -> FastAPI:  # noqa: D401 – factory
    """Build and configure the FastAPI application."""

    app_settings = get_settings()

    app_instance = FastAPI(
        title="DocSense Sensitivity Classifier",
        version="0.1.0",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
    )
    app_instance.state.training_task = None

    # ------------------------------------------------------------------
    # Middleware: logging comes first so later handlers inherit context vars.
    # ------------------------------------------------------------------
    app_instance.add_middleware(RequestLoggingMiddleware)

    # ------------------------------------------------------------------
    # Lifespan events
    # ------------------------------------------------------------------
    @app_instance.on_event("startup")
    async def _on_startup() -> None:
        logger.info(
            "fastapi_startup",
            commit_sha=app_settings.commit_sha,
            train_on_startup=app_settings.train_on_startup,
        )
        if app_settings.train_on_startup:
            app_instance.state.training_task = asyncio.create_task(_warm_up_model())

    @app_instance.on_event("shutdown")
    async def _on_shutdown() -> None:
        task = app_instance.state.training_task
        if task is not None and not task.done():
            task.cancel()
        logger.info("fastapi_shutdown")

    @app_instance.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:  # noqa: D401
        return {"message": "DocSense Sensitivity Classifier"}

    _register_routes(app_instance)
    add_exception_handlers(app_instance)

    # ------------------------------------------------------------------
    # Prometheus metrics, exposed under /metrics and excluded from OpenAPI.
    # ------------------------------------------------------------------
    if app_settings.prometheus_enabled and _PROM_AVAILABLE:  # pragma: no cover
        Instrumentator().instrument(app_instance).expose(  # noqa: WPS437 fluent chain
            app_instance,
            endpoint="/metrics",
            include_in_schema=False,
        )
        logger.info("prometheus_instrumentation_enabled")
    elif app_settings.prometheus_enabled and not _PROM_AVAILABLE:
        logger.warning(
            "prometheus_instrumentation_requested_but_package_missing",
            advice="Install the 'prometheus-fastapi-instrumentator' package",
        )

    return app_instance


# Instantiate once at import time.
app: FastAPI = create_app()
