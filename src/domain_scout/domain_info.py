"""
Registration info for taken domains.

Turns an RDAP domain object into age, auto-renewal and days-to-expiry for
display. An expiry countdown is only reported when no auto-renew, grace or
redemption status is present, since such a domain is not really expiring
from a buyer's point of view.
"""

import asyncio
import math
from datetime import datetime, timezone
from typing import Callable, Optional

from .audit_logger import AuditLogger, LoggingMixin
from .enums import RDAPErrorCode, RDAPStatus
from .models import DomainInfo
from .rdap_client import RDAPClient, RDAPParsedFields

AUTO_RENEWAL_INDICATORS = (
    "auto renew period",
    "autorenew",
    "auto-renew",
    "auto renew",
    "renewal grace period",
    "redemption period",
)

SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_YEAR = 365


def parse_rdap_date(value: str) -> Optional[datetime]:
    """Parse an RDAP ISO-8601 timestamp into an aware UTC datetime."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def has_auto_renewal(statuses: list[str]) -> bool:
    """Case-insensitive substring match against the auto-renewal indicators."""
    return any(
        indicator in status.lower()
        for status in statuses
        for indicator in AUTO_RENEWAL_INDICATORS
    )


def build_domain_info(parsed: RDAPParsedFields, now: datetime) -> DomainInfo:
    """
    Derive display metadata from parsed RDAP fields.

    Args:
        parsed: Parsed RDAP domain object
        now: Reference time (aware)
    """
    registration = parsed.find_event("registration")
    expiration = parsed.find_event("expiration")

    registration_date = registration.event_date if registration else None
    age = None
    registered_at = parse_rdap_date(registration_date) if registration_date else None
    if registered_at is not None:
        elapsed_days = (now - registered_at).total_seconds() / SECONDS_PER_DAY
        age = math.floor(elapsed_days / DAYS_PER_YEAR)

    auto_renewal = has_auto_renewal(parsed.status)

    days_until_expiration = None
    if not auto_renewal and expiration is not None:
        expires_at = parse_rdap_date(expiration.event_date)
        if expires_at is not None:
            days_until_expiration = math.ceil(
                (expires_at - now).total_seconds() / SECONDS_PER_DAY
            )

    return DomainInfo(
        registration_date=registration_date,
        age=age,
        has_auto_renewal=auto_renewal,
        days_until_expiration=days_until_expiration,
    )


class DomainInfoEnricher(LoggingMixin):
    """Fetches registration info for domains already classified as taken."""

    COMPONENT = "DomainInfoEnricher"

    def __init__(
        self,
        rdap_client: Optional[RDAPClient] = None,
        logger: Optional[AuditLogger] = None,
        timeout_seconds: float = 10.0,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._rdap = rdap_client or RDAPClient()
        self._logger = logger
        self._timeout_seconds = timeout_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def fetch(self, domain: str) -> Optional[DomainInfo]:
        """
        Look up registration info; returns None when nothing usable came back.
        """
        try:
            response = await asyncio.wait_for(
                self._rdap.query(domain), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError:
            self._log_warn(
                f"RDAP lookup for {domain} exceeded {self._timeout_seconds}s",
                {"domain": domain, "reason": "timeout"},
            )
            return None

        if response.status != RDAPStatus.FOUND or response.parsed_fields is None:
            data = {"domain": domain, "status": response.status.value}
            if response.error is not None:
                data["reason"] = response.error.code.value
                data["error"] = response.error.message
            self._log_warn(
                f"RDAP lookup failed for {domain}: HTTP {response.http_status_code}",
                data,
            )
            return None

        parsed = response.parsed_fields
        if parsed.find_event("registration") is None and parsed.find_event("expiration") is None:
            self._log_warn(
                f"RDAP response for {domain} has no usable lifecycle events",
                {"domain": domain, "reason": RDAPErrorCode.PARSE_ERROR.value},
            )
            return None

        info = build_domain_info(parsed, self._clock())
        self._log_info(f"RDAP info for {domain}", {"domain": domain, **info.to_dict()})
        return info

    async def close(self) -> None:
        await self._rdap.close()
