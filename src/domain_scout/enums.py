"""
Enumeration types for the domain scout system.

These enums provide type-safe constants for candidate states, demand labels,
lookup outcomes and error codes throughout the system.
"""

from enum import Enum


class Availability(Enum):
    """Availability state of a candidate domain."""

    LOADING = "loading"
    AVAILABLE = "available"
    TAKEN = "taken"


class DemandLabel(Enum):
    """Search demand classification for a keyword."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NOT_APPLICABLE = "N/A"


class DemandSource(Enum):
    """Where a search demand result came from."""

    TRENDS = "trends"
    HEURISTIC = "heuristic"
    CACHE = "cache"


class DNSOutcome(Enum):
    """Outcome of an address lookup for a domain."""

    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    ERROR = "error"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ValidationErrorCode(Enum):
    """Error codes for input validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    INVALID_TLD = "invalid_tld"
    IDNA_ERROR = "idna_error"


class RDAPErrorCode(Enum):
    """Error codes for RDAP client operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"


class RDAPStatus(Enum):
    """RDAP query result status."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"
