class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class CapacityExceededError(ValidationError):
    """Raised when a write would push a month past the present cap."""


class NotFoundError(DomainError):
    """Raised when a record addressed by id does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a request lacks a valid session."""


class StudentNotFoundError(DomainError):
    """Raised when the cached student id no longer matches a row."""
