"""
Input normalization and validation.

Provides normalization of free-form search input into a base name, and
validation of single-domain parameters passed to the lookup endpoints.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .enums import ValidationErrorCode
from .exceptions import ValidationError


WHITESPACE_PATTERN = re.compile(r"\s+")
BASE_NAME_FORBIDDEN = re.compile(r"[^a-z0-9-]")

# Control characters, whitespace and symbols that never appear in a hostname
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~_]'
)

LABEL_PATTERN = re.compile(r"^[a-z0-9-]{1,63}$")


def normalize_base_name(raw: str) -> str:
    """
    Reduce user input to a bare second-level name.

    Lowercases, removes all whitespace, keeps only the part before the first
    dot (so ``Example.com`` becomes ``example``) and strips every character
    outside ``[a-z0-9-]``. May return an empty string.
    """
    if not raw:
        return ""
    cleaned = WHITESPACE_PATTERN.sub("", raw.lower())
    cleaned = cleaned.split(".", 1)[0]
    return BASE_NAME_FORBIDDEN.sub("", cleaned)


@dataclass
class DomainValidationResult:
    """Result of domain validation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[ValidationError]


class DomainValidator:
    """
    Validates and normalizes a fully qualified domain parameter.

    Handles lowercase canonical form, IDNA encoding of international names,
    rejection of forbidden characters and, optionally, a TLD allow-list.
    """

    def __init__(self, allowed_tlds: Optional[list[str]] = None) -> None:
        """
        Args:
            allowed_tlds: Optional list of allowed TLDs; None allows any TLD
        """
        self._allowed_tlds = (
            set(tld.lower() for tld in allowed_tlds) if allowed_tlds else None
        )

    def validate(self, raw_domain: Optional[str]) -> DomainValidationResult:
        try:
            canonical = self.canonicalize(raw_domain)
        except ValidationError as e:
            return DomainValidationResult(valid=False, canonical_domain=None, error=e)
        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def canonicalize(self, raw_domain: Optional[str]) -> str:
        """
        Return the canonical form of a domain or raise.

        Raises:
            ValidationError: If the domain is empty, malformed, or not allowed
        """
        if not raw_domain or not raw_domain.strip():
            raise ValidationError(
                code=ValidationErrorCode.EMPTY_INPUT.value,
                message="Domain parameter is required",
                details={"raw_input": raw_domain},
            )

        domain = raw_domain.strip().rstrip(".")

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            raise ValidationError(
                code=ValidationErrorCode.FORBIDDEN_CHARS.value,
                message="Domain contains forbidden characters",
                details={
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        canonical = self.normalize_to_canonical(domain)

        labels = canonical.split(".")
        if len(labels) < 2 or not all(LABEL_PATTERN.match(label) for label in labels):
            raise ValidationError(
                code=ValidationErrorCode.INVALID_TLD.value,
                message="Domain must be a name followed by a TLD",
                details={"raw_input": raw_domain, "canonical": canonical},
            )

        tld = labels[-1]
        if self._allowed_tlds is not None and tld not in self._allowed_tlds:
            raise ValidationError(
                code=ValidationErrorCode.INVALID_TLD.value,
                message=f"TLD '{tld}' is not supported",
                details={"tld": tld, "allowed_tlds": sorted(self._allowed_tlds)},
            )

        return canonical

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()
        if not any(ord(c) > 127 for c in domain_lower):
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=ValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def is_valid_tld(self, tld: str) -> bool:
        if self._allowed_tlds is None:
            return True
        return tld.lower() in self._allowed_tlds
