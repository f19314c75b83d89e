"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    code = "app_error"
    retryable = False

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class ConflictException(AppException):
    """Conflict exception."""

    code = "conflict"

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class ValidationException(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class InvalidTransitionException(ConflictException):
    """Mutation attempted on an appointment that does not allow it."""

    code = "invalid_transition"

    def __init__(self, message: str = "Invalid appointment state transition"):
        """Initialize with 409 status code."""
        super().__init__(message)


class AlreadyFinalizedException(ConflictException):
    """A prescription was already issued for the appointment."""

    code = "already_finalized"

    def __init__(self, message: str = "Appointment already finalized"):
        """Initialize with 409 status code."""
        super().__init__(message)


class EmptyPrescriptionException(ValidationException):
    """Prescription has neither items nor notes."""

    code = "empty_prescription"

    def __init__(self, message: str = "Prescription must have items or notes"):
        """Initialize with 422 status code."""
        super().__init__(message)


class StoreUnavailableException(AppException):
    """Underlying storage could not be reached. Safe to retry."""

    code = "store_unavailable"
    retryable = True

    def __init__(self, message: str = "Storage temporarily unavailable"):
        """Initialize with 503 status code."""
        super().__init__(message, status_code=503)
