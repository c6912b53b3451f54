class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a write would double-book a slot or duplicate a record."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist or is soft-deleted."""


class AuthenticationError(DomainError):
    """Raised when the request carries no authenticated user."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
