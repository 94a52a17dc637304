import logging
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from todo_api.schemas.common import error_body
from todo_api.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

# Leading loc entries that name the request part rather than the field.
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in _LOCATION_PREFIXES]
    return ".".join(parts) or "unknown"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render any AppException in the shared error envelope, keeping its headers."""
    error = exc.detail["error"]
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail["message"], error["code"], error["details"], error["field"]),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with one {field, message} entry per failed constraint."""
    details = [
        {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Validation error. Please check your input.", ErrorCode.VALIDATION_ERROR, details),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    A constraint the services did not pre-check, e.g. two registrations racing
    for the same email. The raw database message stays in the log.
    """
    logger.warning(f"Constraint violation on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("A record with this data already exists.", ErrorCode.DUPLICATE_ENTRY),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort: log the traceback and answer 500.
    Exception type and message are echoed back only in development.
    """
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}\n{trace}")

    details = None
    if request.app.state.settings.is_development:
        details = [{"field": type(exc).__name__, "message": str(exc)}]
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred. Please try again later.",
                           ErrorCode.INTERNAL_SERVER_ERROR, details),
    )
