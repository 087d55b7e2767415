from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: Machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR        = "VALIDATION_ERROR"
    INVALID_DATE_RANGE      = "INVALID_DATE_RANGE"
    START_DATE_IN_PAST      = "START_DATE_IN_PAST"
    MISSING_DATES           = "MISSING_DATES"
    UNAUTHORIZED            = "UNAUTHORIZED"
    TOKEN_EXPIRED           = "TOKEN_EXPIRED"
    FORBIDDEN               = "FORBIDDEN"
    NOT_FOUND               = "NOT_FOUND"
    CONFLICT                = "CONFLICT"
    DUPLICATE_ENTRY         = "DUPLICATE_ENTRY"
    REFERENCE_VIOLATION     = "REFERENCE_VIOLATION"
    VEHICLE_UNAVAILABLE     = "VEHICLE_UNAVAILABLE"
    VEHICLE_IN_USE          = "VEHICLE_IN_USE"
    REQUEST_ALREADY_DECIDED = "REQUEST_ALREADY_DECIDED"
    ACCESS_CODE_EXHAUSTED   = "ACCESS_CODE_EXHAUSTED"
    INTERNAL_SERVER_ERROR   = "INTERNAL_SERVER_ERROR"


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
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })


# ═══════════════════════════════════════════════════════════════════════════════
# FAMILIES: 400 / 404 / 409
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationException(AppException):
    """Malformed input, bad date ordering, start date in the past."""
    def __init__(self, message: str = "Invalid request data",
                 error_code: str = ErrorCode.VALIDATION_ERROR, field: str | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, error_code, field=field)


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class ConflictException(AppException):
    def __init__(self, message: str = "Conflict with current state",
                 error_code: str = ErrorCode.CONFLICT, field: str | None = None):
        super().__init__(status.HTTP_409_CONFLICT, message, error_code, field=field)


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


class InvalidDateRangeException(ValidationException):
    def __init__(self):
        super().__init__("End date must be after start date", ErrorCode.INVALID_DATE_RANGE, field="endDate")


class PastStartDateException(ValidationException):
    def __init__(self):
        super().__init__("Start date cannot be in the past", ErrorCode.START_DATE_IN_PAST, field="startDate")


class MissingDatesException(ValidationException):
    def __init__(self):
        super().__init__("Start date and end date are required", ErrorCode.MISSING_DATES)


class DuplicateEntryException(ConflictException):
    def __init__(self, message: str = "Record already exists", field: str | None = None):
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, field=field)


class VehicleUnavailableException(ConflictException):
    def __init__(self):
        super().__init__("Vehicle is not available for the selected dates", ErrorCode.VEHICLE_UNAVAILABLE)


class VehicleInUseException(ConflictException):
    def __init__(self):
        super().__init__("Vehicle is referenced by booking requests and cannot be deleted",
                         ErrorCode.VEHICLE_IN_USE)


class RequestAlreadyDecidedException(ConflictException):
    def __init__(self, current_status: str):
        super().__init__(f"Request has already been {current_status}", ErrorCode.REQUEST_ALREADY_DECIDED)


class AccessCodeExhaustedException(ConflictException):
    def __init__(self):
        super().__init__("Could not issue a unique access code, try again", ErrorCode.ACCESS_CODE_EXHAUSTED)


# ═══════════════════════════════════════════════════════════════════════════════
# NON-HTTP: data-model corruption, never caught and retried
# ═══════════════════════════════════════════════════════════════════════════════

class DataIntegrityException(RuntimeError):
    """A stored row references an entity that no longer exists."""
    pass
