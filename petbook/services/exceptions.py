class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DownstreamServiceError(ServiceError):
    """Raised when the persistence backend returns an error response."""

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class ValidationError(ServiceError):
    """Raised when a booking intent carries malformed or out-of-range values."""

    def __init__(self, message: str, field: str | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.field = field


class InvalidStateError(ServiceError):
    """Raised when an operation is not allowed from the appointment's current status."""

    def __init__(self, message: str, *, current: str | None = None, requested: str | None = None):
        super().__init__(message)
        self.current = current
        self.requested = requested


class NotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""
