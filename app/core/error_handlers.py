"""Map domain errors to HTTP responses.

Every handled error returns ``{"detail": message, "error": type}`` so
clients can branch on the error type without parsing the message.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AnalysisError,
    NormalizationError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[AnalysisError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ProviderError: 502,
    NormalizationError: 502,
    PersistenceError: 500,
}


def status_for(exc: AnalysisError) -> int:
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """Register domain error handlers on the application."""

    @app.exception_handler(AnalysisError)
    async def _analysis_error(request: Request, exc: AnalysisError):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        else:
            logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(
            {"detail": str(exc), "error": type(exc).__name__},
            status_code=status,
        )


__all__ = ["STATUS_BY_ERROR", "register_error_handlers", "status_for"]
