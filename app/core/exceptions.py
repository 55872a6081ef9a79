"""Domain exceptions raised by the auth services."""

from typing import Any, Dict, Optional

from fastapi import status


class AuthError(Exception):
    """Base class for every failure a flow can report to the client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "ERROR"
    message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, **self.extra}


class ValidationError(AuthError):
    """400 Missing or malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid input"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        if field:
            super().__init__(message, field=field)
        else:
            super().__init__(message)
        self.field = field


class DuplicateKeyError(AuthError):
    """409 Unique field already taken"""
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE_KEY"
    message = "Duplicate value error. Please provide a unique value."

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field.capitalize()} already exists.", field=field)
        self.field = field


class UnauthorizedError(AuthError):
    """401 Missing, invalid or expired token"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Invalid or expired token"


class InvalidCredentialsError(AuthError):
    """401 Wrong username or password"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Invalid username or password."


class OtpUnverifiedError(AuthError):
    """401 Account has not completed OTP verification"""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "OTP_UNVERIFIED"
    message = "Please verify your OTP."


class OtpAlreadyVerifiedError(AuthError):
    """409 OTP flow already completed"""
    status_code = status.HTTP_409_CONFLICT
    code = "OTP_ALREADY_VERIFIED"
    message = "You have already verified."


class OtpExpiredError(AuthError):
    """400 Code expired or absent"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "OTP_EXPIRED"
    message = "The OTP has expired. Please request a new one."


class OtpAttemptsExhaustedError(AuthError):
    """400 No attempts left on the current code"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "OTP_ATTEMPTS_EXHAUSTED"
    message = "You have exceeded the maximum number of OTP attempts"


class InvalidOtpError(AuthError):
    """400 Code mismatch; reports the attempts left"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_OTP"
    message = "Invalid OTP"

    def __init__(self, remain_chance: int):
        super().__init__(remainChance=remain_chance)
        self.remain_chance = remain_chance


class ForbiddenError(AuthError):
    """403 Ownership mismatch"""
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Forbidden"


class NotFoundError(AuthError):
    """404 Not Found"""
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class StoreError(AuthError):
    """500 Persistence failure"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORE_ERROR"
    message = "Database operation failed"
