from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR        = "VALIDATION_ERROR"
    BAD_REQUEST             = "BAD_REQUEST"
    UNAUTHORIZED            = "UNAUTHORIZED"
    INVALID_CREDENTIALS     = "INVALID_CREDENTIALS"
    INVALID_ASSERTION       = "INVALID_ASSERTION"
    TOKEN_EXPIRED           = "TOKEN_EXPIRED"
    INVALID_RENEWAL         = "INVALID_RENEWAL"
    INVALID_PROJECT         = "INVALID_PROJECT"
    DUPLICATE_EMAIL         = "DUPLICATE_EMAIL"
    NOT_FOUND               = "NOT_FOUND"
    DUPLICATE_ENTRY         = "DUPLICATE_ENTRY"
    INTERNAL_SERVER_ERROR   = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# NON-HTTP ERRORS
# ═══════════════════════════════════════════════════════════════════════════════
class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class InvalidTokenError(Exception):
    """An access token failed signature, issuer, audience or algorithm checks."""


class InvalidAssertionError(Exception):
    """An external identity assertion could not be verified."""


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
        headers: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        }, headers=headers)


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required", error_code: str = ErrorCode.UNAUTHORIZED):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED, message, error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpiredException(UnauthorizedException):
    def __init__(self):
        super().__init__("Access token has expired", ErrorCode.TOKEN_EXPIRED)


class InvalidCredentialsException(UnauthorizedException):
    def __init__(self):
        super().__init__("Invalid credentials", ErrorCode.INVALID_CREDENTIALS)


class InvalidAssertionException(UnauthorizedException):
    def __init__(self):
        super().__init__("Invalid Google token", ErrorCode.INVALID_ASSERTION)


class BadRequestException(AppException):
    def __init__(self, message: str = "Bad request", error_code: str = ErrorCode.BAD_REQUEST,
                 field: str | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, error_code, field=field)


class InvalidRenewalException(BadRequestException):
    """Single outcome for every failed renewal check."""
    def __init__(self):
        super().__init__("Invalid access token or refresh token", ErrorCode.INVALID_RENEWAL)


class InvalidProjectException(BadRequestException):
    def __init__(self):
        super().__init__("Invalid ProjectId.", ErrorCode.INVALID_PROJECT, field="projectId")


class DuplicateEmailException(BadRequestException):
    def __init__(self):
        super().__init__("Email already registered", ErrorCode.DUPLICATE_EMAIL, field="email")


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)
