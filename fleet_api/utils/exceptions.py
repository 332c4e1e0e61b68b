from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR          = "VALIDATION_ERROR"
    UNAUTHORIZED              = "UNAUTHORIZED"
    TOKEN_EXPIRED             = "TOKEN_EXPIRED"
    FORBIDDEN                 = "FORBIDDEN"
    ACCOUNT_INACTIVE          = "ACCOUNT_INACTIVE"
    NOT_FOUND                 = "NOT_FOUND"
    DUPLICATE_ENTRY           = "DUPLICATE_ENTRY"
    CAR_ALREADY_ASSIGNED      = "CAR_ALREADY_ASSIGNED"
    OPERATOR_ALREADY_ASSIGNED = "OPERATOR_ALREADY_ASSIGNED"
    NO_ACTIVE_ASSIGNMENT      = "NO_ACTIVE_ASSIGNMENT"
    INVALID_END_DATE          = "INVALID_END_DATE"
    INVALID_START_DATE        = "INVALID_START_DATE"
    INVALID_DATE_RANGE        = "INVALID_DATE_RANGE"
    OPERATOR_INACTIVE         = "OPERATOR_INACTIVE"
    OPERATOR_HAS_ACTIVE_ASSIGNMENT = "OPERATOR_HAS_ACTIVE_ASSIGNMENT"
    ASSIGNMENT_CLOSED         = "ASSIGNMENT_CLOSED"
    DATABASE_UNAVAILABLE      = "DATABASE_UNAVAILABLE"
    INTERNAL_SERVER_ERROR     = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        self.error_code = error_code
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token has expired", ErrorCode.TOKEN_EXPIRED)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class AccountInactiveException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "Your account has been deactivated. Contact admin.",
            ErrorCode.ACCOUNT_INACTIVE,
        )


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class CarAlreadyAssignedException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Car already has an active operator assignment",
            ErrorCode.CAR_ALREADY_ASSIGNED,
            field="car_id",
        )


class OperatorAlreadyAssignedException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Operator already has an active car assignment",
            ErrorCode.OPERATOR_ALREADY_ASSIGNED,
            field="operator_id",
        )


class NoActiveAssignmentException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "No active assignment found for this car",
            ErrorCode.NO_ACTIVE_ASSIGNMENT,
        )


class InvalidEndDateException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "End date must be on or after the assignment start date",
            ErrorCode.INVALID_END_DATE,
            field="end_date",
        )


class InvalidStartDateException(AppException):
    def __init__(self, max_days: int):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            f"Start date cannot be more than {max_days} days in the past",
            ErrorCode.INVALID_START_DATE,
            field="start_date",
        )


class InvalidDateRangeException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "End of range must be on or after start of range",
            ErrorCode.INVALID_DATE_RANGE,
        )


class OperatorInactiveException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Operator is already deactivated",
            ErrorCode.OPERATOR_INACTIVE,
        )


class OperatorHasActiveAssignmentException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Cannot deactivate an operator with an active car assignment. Unassign the car first.",
            ErrorCode.OPERATOR_HAS_ACTIVE_ASSIGNMENT,
            field="operator_id",
        )


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRITY ERROR MAPPING
# ═══════════════════════════════════════════════════════════════════════════════
def conflict_from_integrity(message: str) -> AppException | None:
    """
    Map a violation of the active-assignment indexes to its conflict error.
    Postgres names the index; SQLite names the indexed column.
    """
    if "uq_active_car_assignment" in message or "car_operator_assignments.carId" in message:
        return CarAlreadyAssignedException()
    if "uq_active_operator_assignment" in message or "car_operator_assignments.operatorId" in message:
        return OperatorAlreadyAssignedException()
    return None
