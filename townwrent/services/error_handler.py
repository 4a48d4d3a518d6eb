"""
Turns exceptions into the API's error body:

    {"error": {"code", "message", "timestamp", "request_id", "details"?}}

Service exceptions keep their own status and code. Request parsing errors
and refused database writes are client errors (400). Everything else is a
500 whose message says nothing about the cause.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from townwrent.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# Substrings of driver messages mapped to something a client can act on
_CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


def request_id_for(request: Optional[Request]) -> str:
    """The id assigned by the request middleware, or a fresh one."""
    request_id = getattr(request.state, "request_id", None) if request is not None else None
    return request_id or uuid.uuid4().hex[:8]


def error_body(
    code: str,
    message: str,
    request_id: str,
    details: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {
        "code": code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "request_id": request_id,
    }
    if details:
        error["details"] = details
    return {"error": error}


def api_error_response(exc: APIException, request: Optional[Request] = None) -> JSONResponse:
    request_id = request_id_for(request)
    path = request.url.path if request else None
    logger.warning(f"[{request_id}] {exc.status_code} {exc.error_code} on {path}: {exc.detail}")

    details = exc.field_errors if isinstance(exc, ValidationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_code, exc.detail, request_id, details),
        headers=exc.headers
    )


def request_validation_response(exc: RequestValidationError, request: Optional[Request] = None) -> JSONResponse:
    """Body/query parsing failures, one detail entry per offending field."""
    request_id = request_id_for(request)
    details = [
        {
            "field": " -> ".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"[{request_id}] Request validation failed with {len(details)} field errors")

    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", "Request validation failed", request_id, details)
    )


def database_error_response(exc: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
    request_id = request_id_for(request)

    if isinstance(exc, IntegrityError):
        reason = str(exc.orig).lower()
        message = next(
            (f"Constraint violation: {text}" for marker, text in _CONSTRAINT_MESSAGES if marker in reason),
            "Data integrity constraint violation"
        )
        logger.warning(f"[{request_id}] Integrity error: {exc.orig}")
        return JSONResponse(status_code=400, content=error_body("INTEGRITY_ERROR", message, request_id))

    logger.error(f"[{request_id}] Database error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body("DATABASE_ERROR", "Database operation failed", request_id)
    )


def http_error_response(exc: StarletteHTTPException, request: Optional[Request] = None) -> JSONResponse:
    """Framework-raised errors such as unknown routes and wrong methods."""
    request_id = request_id_for(request)
    logger.warning(f"[{request_id}] HTTP {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"HTTP_{exc.status_code}", str(exc.detail), request_id),
        headers=getattr(exc, "headers", None)
    )


def unexpected_error_response(exc: Exception, request: Optional[Request] = None) -> JSONResponse:
    request_id = request_id_for(request)
    logger.error(f"[{request_id}] Unhandled {type(exc).__name__}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_SERVER_ERROR", UNEXPECTED_ERROR_MESSAGE, request_id)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers; the most specific exception types go first."""

    @app.exception_handler(APIException)
    async def handle_api_exception(request: Request, exc: APIException):
        return api_error_response(exc, request)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return request_validation_response(exc, request)

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        return database_error_response(exc, request)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return http_error_response(exc, request)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return unexpected_error_response(exc, request)
