"""
Exception handlers rendering the API error envelope.

Every error response has the shape::

    {"status", "title", "detail", "errorCode", "path", "timestamp",
     "requestId", "errors"?}

Outside development mode only not-found and validation errors expose their
message; everything else gets a generic detail.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .domain.exceptions import (
    BankingException,
    BusinessValidationException,
    DataAccessException,
    ResourceNotFoundException,
)

logger = structlog.get_logger(__name__)

GENERIC_DETAIL = "An unexpected error occurred. Please try again later."
UNAVAILABLE_DETAIL = "The service is temporarily unavailable. Please try again later."


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    return request_id or request.headers.get("X-Request-ID") or f"req-{id(request)}"


def error_response(
    request: Request,
    status: int,
    title: str,
    detail: str,
    error_code: str,
    errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    """Build the error envelope; ``errors`` is omitted when empty."""
    body: Dict[str, Any] = {
        "status": status,
        "title": title,
        "detail": detail,
        "errorCode": error_code,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "requestId": get_request_id(request),
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status, content=body)


def classify(exc: Exception) -> tuple:
    """Map an exception to (status, title, error_code)."""
    if isinstance(exc, ResourceNotFoundException):
        return 404, "Resource Not Found", exc.error_code
    if isinstance(exc, BusinessValidationException):
        return 400, "Validation Error", exc.error_code
    if isinstance(exc, DataAccessException):
        return 503, "Service Unavailable", exc.error_code
    if isinstance(exc, BankingException):
        return 500, "Internal Server Error", exc.error_code
    return 500, "Internal Server Error", "INTERNAL_SERVER_ERROR"


def register_exception_handlers(app: FastAPI, development: bool) -> None:
    """
    Attach handlers for domain errors, request validation and uncaught exceptions.

    Args:
        app: FastAPI application
        development: Expose exception messages and details in responses
    """

    def render(request: Request, exc: Exception) -> JSONResponse:
        status, title, error_code = classify(exc)
        message = getattr(exc, "message", None) or str(exc)

        if status >= 500:
            logger.error(
                "Request failed",
                path=request.url.path,
                method=request.method,
                error_code=error_code,
                error=message,
                exc_info=exc,
            )
        else:
            logger.info(
                "Request rejected", path=request.url.path, status=status, error=message
            )

        if development:
            detail = message
            errors = {"exceptionDetails": traceback.format_exception_only(type(exc), exc)}
        else:
            if status in (400, 404):
                detail = message
            elif status == 503:
                detail = UNAVAILABLE_DETAIL
            else:
                detail = GENERIC_DETAIL
            errors = None
        return error_response(request, status, title, detail, error_code, errors)

    @app.exception_handler(BankingException)
    async def banking_exception_handler(request: Request, exc: BankingException):
        return render(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            errors.setdefault(field or "request", []).append(error.get("msg", "Invalid value"))
        return error_response(
            request,
            400,
            "Validation Error",
            "One or more validation errors occurred.",
            "REQUEST_VALIDATION_ERROR",
            errors,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        return render(request, exc)
