"""
Exception classes for the domain scout system.

All exceptions inherit from DomainScoutError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainScoutError(Exception):
    """Base exception for all domain scout errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainScoutError):
    """Raised when user input (base name, domain, keyword) is invalid."""

    pass


class NetworkError(DomainScoutError):
    """Raised when network operations fail or time out."""

    pass


class ProtocolError(DomainScoutError):
    """Raised when an upstream payload is malformed (trends, RDAP, registrar)."""

    pass


class PersistenceError(DomainScoutError):
    """Raised when persistence operations fail (cache or price file I/O)."""

    pass


class TamperingError(PersistenceError):
    """Raised when HMAC validation of a persisted file fails."""

    pass


class AuthorizationError(DomainScoutError):
    """Raised when the price refresh trigger presents a bad bearer token."""

    pass
