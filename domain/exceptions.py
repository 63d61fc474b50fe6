"""Domain exceptions for storage rule violations."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ValidationError(DomainError):
    """Raised when input validation fails."""


class ObjectNotFoundError(DomainError):
    """Raised when an object path cannot be resolved to a stored file."""

    def __init__(self, message: str = "Object not found") -> None:
        super().__init__(message)

