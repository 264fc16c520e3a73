class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record, student or QR token does not exist."""


class ConflictError(DomainError):
    """Raised when an attendance record already exists for the same subject and day."""


class ExpiredError(DomainError):
    """Raised when a QR token is used after its expiry time."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
