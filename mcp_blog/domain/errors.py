"""Domain-level errors and exceptions."""

from typing import Optional


class DomainError(Exception):
    """Base domain error."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(DomainError):
    """Validation error."""
    pass


class NotFoundError(DomainError):
    """Raised when an operation addresses a post that does not exist."""
    pass


class SessionError(DomainError):
    """Session-related error."""
    pass


class TransportSessionError(SessionError):
    """Raised when a request carries a missing, unknown or expired session ID."""
    pass


class AuthenticationError(DomainError):
    """Authentication error."""
    pass
