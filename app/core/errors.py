"""Typed failures for the search pipeline and their HTTP rendering."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Base class for failures surfaced to API callers."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProviderError(SearchError):
    """Embedding or summarization backend failed or answered garbage."""

    code = "PROVIDER_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        provider: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, {"provider": provider, **(details or {})})
        self.provider = provider


class ValidationError(SearchError):
    """Request rejected before any network call."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(SearchError):
    code = "NOT_FOUND"
    status_code = 404


class DataIntegrityWarning(UserWarning):
    """A matched recommendation points at a place/service row that is gone."""


def error_payload(exc: SearchError) -> dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": exc.code,
            "message": exc.message,
            "details": exc.details or None,
        },
    }


async def _search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # malformed bodies share the envelope and status of ValidationError
    fields = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return await _search_error_handler(
        request, ValidationError("Request failed validation", {"errors": fields})
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Render every :class:`SearchError` and request validation failure as the standard envelope."""
    app.add_exception_handler(SearchError, _search_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
