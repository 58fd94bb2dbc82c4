from __future__ import annotations

import logging
import sys
import time
import uuid
from typing import Any, Awaitable, Callable

# structlog must be imported before its typing helpers
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from structlog.types import EventDict, Processor

__all__: list[str] = [
    "configure_logging",
    "RequestLoggingMiddleware",
]


def _fill_request_keys(
    logger: Any,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Make sure every event carries *request_id*, *path* and *method* keys.

    Background work (training kicked off at startup) runs outside a request,
    so the keys are present but ``None`` there.
    """

    for key in ("request_id", "path", "method"):
        event_dict.setdefault(key, None)
    return event_dict


_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    _fill_request_keys,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def _configure_stdlib_logging(level: int) -> None:
    """Send stdlib log records (uvicorn, torch warnings) to *stderr*."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))

    root_logger.handlers.clear()
    root_logger.addHandler(handler)


_LOGGING_CONFIGURED: bool = False


def configure_logging(debug: bool = False) -> None:
    """Initialise `structlog` for the entire process.

    Idempotent: only the first call has any effect.

    Parameters
    ----------
    debug:
        When *True* lowers the log level to ``DEBUG`` so per-epoch training
        events become visible; otherwise ``INFO``.
    """

    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    level: int = logging.DEBUG if debug else logging.INFO

    _configure_stdlib_logging(level)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        processors=_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _LOGGING_CONFIGURED = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context variables and log one event per HTTP request."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start: float = time.perf_counter()
        request_id: str = request.headers.get("x-request-id") or uuid.uuid4().hex

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
        finally:
            structlog.get_logger("http").info(
                "request_completed",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        return response
