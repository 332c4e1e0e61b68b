import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from fleet_api.models.car_operator_assignment import ClosedAssignmentError
from fleet_api.utils.exceptions import AppException, ErrorCode, conflict_from_integrity

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    code: str,
    details: list | None = None,
    field: str | None = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": {"code": code, "details": details, "field": field},
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """AppException subclasses already carry their envelope in `detail`."""
    detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": detail.get("message", "An error occurred"),
            "error": detail.get("error", {"code": ErrorCode.INTERNAL_SERVER_ERROR}),
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Request validation errors (422), one detail per offending field.
    The location prefix ("body", "query", "path") is dropped from the field name.
    """
    details = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l not in ("body", "query", "path")) if loc else "unknown"
        details.append({"field": field, "message": error.get("msg", "Invalid value")})

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error. Please check your input.",
        ErrorCode.VALIDATION_ERROR,
        details=details,
        field=details[0]["field"] if len(details) == 1 else None,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    IntegrityError that escaped the services. Violations of the active-assignment
    indexes keep their specific conflict code; anything else is a generic 409.
    """
    logger.warning(f"IntegrityError on {request.method} {request.url}: {exc.orig}")
    conflict = conflict_from_integrity(str(exc.orig))
    if conflict is not None:
        return await app_exception_handler(request, conflict)
    return error_response(
        status.HTTP_409_CONFLICT,
        "The change conflicts with existing data.",
        ErrorCode.DUPLICATE_ENTRY,
    )


async def closed_assignment_handler(request: Request, exc: ClosedAssignmentError) -> JSONResponse:
    """A flush tried to modify an assignment that has already ended."""
    logger.warning(f"Rejected change to closed assignment on {request.method} {request.url}: {exc}")
    return error_response(
        status.HTTP_409_CONFLICT,
        "This assignment has ended and can no longer be modified.",
        ErrorCode.ASSIGNMENT_CLOSED,
    )


async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """Database unreachable or connection lost mid-request; writes are not retried."""
    logger.error(f"Database error on {request.method} {request.url}: {exc.orig}")
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "The database is temporarily unavailable. Please try again later.",
        ErrorCode.DATABASE_UNAVAILABLE,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log the full traceback, return a safe 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        ErrorCode.INTERNAL_SERVER_ERROR,
    )
