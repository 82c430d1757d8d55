"""Candidate domain generation from a base name."""

from typing import Optional

from .domain_validator import normalize_base_name
from .enums import ValidationErrorCode
from .exceptions import ValidationError
from .tld_registry import SUPPORTED_TLDS


def generate_suggestions(base_name: str, tlds: Optional[list[str]] = None) -> list[str]:
    """
    Emit one ``{base}.{tld}`` domain per supported TLD, in registry order.

    Args:
        base_name: An already-normalized base name
        tlds: Optional TLD list overriding the supported set

    Raises:
        ValidationError: If the base name is empty
    """
    if not base_name:
        raise ValidationError(
            code=ValidationErrorCode.EMPTY_INPUT.value,
            message="Search term is empty after normalization",
        )
    return [f"{base_name}.{tld}" for tld in (tlds or SUPPORTED_TLDS)]


def suggest_from_input(raw: str) -> list[str]:
    """Normalize free-form input and generate candidate domains."""
    return generate_suggestions(normalize_base_name(raw))
