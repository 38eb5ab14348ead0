from typing import Optional, Any

class SleepHavenError(Exception):
    """
    Base exception for the Sleep Haven application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ValidationError(SleepHavenError):
    """
    Raised when required input is missing or a payment session is not usable.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)

class ConflictError(SleepHavenError):
    """
    Raised when an account with the same email already exists.
    """
    def __init__(self, message: str = "User already exists", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=400, details=details)

class AuthenticationError(SleepHavenError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class ResourceNotFoundError(SleepHavenError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class ExternalServiceError(SleepHavenError):
    """
    Raised when an external service (Stripe, MongoDB, SMTP) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=500, details=details)
