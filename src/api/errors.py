from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.exceptions import ModelNotAvailableError, ModelTrainingError

__all__: list[str] = ["add_exception_handlers"]

logger = structlog.get_logger("errors")


def _request_id(request: Request) -> str | None:
    """Prefer the client-supplied id, else the one bound by the middleware."""
    return request.headers.get("x-request-id") or structlog.contextvars.get_contextvars().get(
        "request_id"
    )


def _build_error_payload(
    code: str | int,
    message: str,
    request_id: str | None = None,
    extra: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Return a JSON-serialisable error envelope.

    Parameters
    ----------
    code:
        A machine-readable error code (snake_case) or HTTP status integer.
    message:
        Human-readable description (English, sentence-cased).
    request_id:
        Correlation ID of the failing request.
    extra:
        Optional additional payload (e.g. validation details).
    """

    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "request_id": request_id,
        }
    }
    if extra:
        payload["error"].update(extra)
    return payload


async def _http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle exceptions explicitly raised by the routers (400/413/415/503)."""

    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )

    payload = _build_error_payload(
        code=exc.status_code,
        message=str(exc.detail),
        request_id=_request_id(request),
    )
    # Clients read ``response.json()['detail']`` as with stock FastAPI errors.
    payload["detail"] = str(exc.detail)

    return JSONResponse(status_code=exc.status_code, content=payload)


async def _validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle body/query/path parameter validation failures (422)."""

    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=_jsonable_errors(exc),
    )

    payload = _build_error_payload(
        code="validation_error",
        message="Invalid request parameters.",
        request_id=_request_id(request),
        extra={"details": _jsonable_errors(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload
    )


def _jsonable_errors(exc: RequestValidationError) -> list[Dict[str, Any]]:
    """Strip the non-serialisable ``ctx``/``input`` members pydantic attaches."""
    return [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in exc.errors()
    ]


async def _model_unavailable_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Training failures and a missing model surface as 503."""

    logger.error(
        "model_unavailable",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )

    payload = _build_error_payload(
        code="model_unavailable",
        message=str(exc) or "The classification model is not available.",
        request_id=_request_id(request),
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload
    )


async def _unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:  # noqa: D401 – FastAPI handler sig
    """Catch-all for unexpected errors, returns HTTP 500."""

    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
    )

    payload = _build_error_payload(
        code="internal_server_error",
        message="An unexpected error occurred.",
        request_id=_request_id(request),
    )
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,  # 500
        content=payload,
    )


def add_exception_handlers(app: FastAPI) -> None:  # noqa: D401 – imperative
    """Register all global exception handlers on **app**."""

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ModelTrainingError, _model_unavailable_handler)
    app.add_exception_handler(ModelNotAvailableError, _model_unavailable_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
