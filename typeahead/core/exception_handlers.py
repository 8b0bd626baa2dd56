"""Exception handlers for the FastAPI app.

Every error body has the same shape as TypeaheadException.to_dict():
{"error": <code>, "message": <text>, "details": {...}}. Register with
register_exception_handlers(app).

Source failures normally never get here: the aggregator turns them into a
classified round outcome. Reaching a handler with one means a route called
an adapter directly, which is reported as a bad gateway.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from typeahead.core.config import get_settings
from typeahead.domain.exceptions import (
    SearchSessionClosedException,
    SourceQueryException,
    TypeaheadException,
    UnknownSourceKindException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# First match wins; anything else derived from TypeaheadException is a 400.
_STATUS_BY_TYPE: tuple[tuple[type[TypeaheadException], int], ...] = (
    (ValidationException, 400),
    (SearchSessionClosedException, 409),
    (SourceQueryException, 502),
    (UnknownSourceKindException, 500),
)


def _error_body(error: str, message: str, details: object = None) -> dict:
    return {"error": error, "message": message, "details": details if details is not None else {}}


def status_for(exc: TypeaheadException) -> int:
    for exc_type, status in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status
    return 400


def _typeahead_exception_handler(request: Request, exc: TypeaheadException) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with location and message per invalid field (no raw input echoed)."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", errors),
    )


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content=_error_body("RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"),
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is only exposed when debug is on."""
    logger.exception("Unhandled exception on %s: %s", request.url.path, exc)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""
    app.add_exception_handler(TypeaheadException, _typeahead_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
