"""
Offline price refresh job.

Fetches the registrar's public search page for ``example.{tld}`` for a few
key TLDs, picks a plausible registration price out of the page, and merges
it into the offline price table. TLDs whose fetch fails keep their previous
values. Requests are spaced out by a polite delay.
"""

import asyncio
import hmac
import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import httpx

from .audit_logger import AuditLogger, LoggingMixin
from .config import PricingConfig
from .exceptions import AuthorizationError, NetworkError
from .pricing import NAMECHEAP_DEFAULT_RENEWAL, PriceTable, affiliate_link
from .retry_manager import RetryManager


USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

PRICE_PATTERN = re.compile(r"\$(\d+(?:\.\d+)?)")
MIN_DOMAIN_PRICE = 5.0
MAX_DOMAIN_PRICE = 200.0


def authorize_refresh(authorization_header: Optional[str], secret: Optional[str]) -> None:
    """
    Check a ``Bearer <secret>`` header.

    Raises:
        AuthorizationError: If no secret is configured or the token does not match
    """
    if not secret:
        raise AuthorizationError(
            code="not_configured",
            message="Price refresh secret is not configured",
        )
    expected = f"Bearer {secret}"
    if not authorization_header or not hmac.compare_digest(
        authorization_header.encode("utf-8"), expected.encode("utf-8")
    ):
        raise AuthorizationError(code="unauthorized", message="Unauthorized")


def extract_price(page_text: str) -> Optional[str]:
    """
    Pick the registration price out of a registrar search page.

    Prices outside $5-$200 are ignored (add-ons, premium listings); of the
    rest the median is taken.
    """
    amounts = []
    for match in PRICE_PATTERN.finditer(page_text):
        value = float(match.group(1))
        if MIN_DOMAIN_PRICE <= value <= MAX_DOMAIN_PRICE:
            amounts.append((value, match.group(0)))
    if not amounts:
        return None
    amounts.sort(key=lambda item: item[0])
    return amounts[len(amounts) // 2][1]


@dataclass
class RefreshReport:
    """Outcome of one refresh run."""

    last_updated: str
    updated: dict[str, str] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "lastUpdated": self.last_updated,
            "updated": self.updated,
            "failed": self.failed,
        }


class PriceRefreshJob(LoggingMixin):
    """Refreshes Namecheap initial prices in the offline price table."""

    COMPONENT = "PriceRefreshJob"
    REGISTRAR = "namecheap"

    def __init__(
        self,
        config: Optional[PricingConfig] = None,
        logger: Optional[AuditLogger] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry_manager: Optional[RetryManager] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or PricingConfig()
        self._logger = logger
        self._client = client
        self._retry = retry_manager or RetryManager(max_retries=self._config.max_retries)
        self._sleep = sleep

    async def _fetch_page(self, tld: str) -> str:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.request_timeout_seconds),
                follow_redirects=True,
            )
        url = affiliate_link(self.REGISTRAR, f"example.{tld}")
        try:
            response = await self._client.get(url, headers={"User-Agent": USER_AGENT})
        except httpx.TimeoutException as e:
            raise NetworkError(code="timeout", message=f"Timed out fetching {url}",
                               details={"tld": tld, "error": str(e)})
        except httpx.HTTPError as e:
            raise NetworkError(code="network_error", message=f"Failed to fetch {url}: {e}",
                               details={"tld": tld})
        if response.status_code == 429:
            raise NetworkError(code="rate_limited", message="Rate limited by registrar",
                               details={"tld": tld, "http_status_code": 429})
        if response.status_code >= 500:
            raise NetworkError(code="server_error",
                               message=f"Registrar returned HTTP {response.status_code}",
                               details={"tld": tld, "http_status_code": response.status_code})
        if response.status_code != 200:
            raise NetworkError(code="http_error",
                               message=f"Registrar returned HTTP {response.status_code}",
                               details={"tld": tld, "http_status_code": response.status_code})
        return response.text

    async def refresh_tld(self, tld: str) -> Optional[str]:
        """Fetch one TLD's current price; None when nothing usable was found."""
        outcome = await self._retry.execute_with_retry(lambda: self._fetch_page(tld))
        if not outcome.success:
            self._log_error(
                f"Price fetch for .{tld} failed after {outcome.attempts} attempts",
                error=outcome.last_error,
                data={"tld": tld, "registrar": self.REGISTRAR},
            )
            return None

        price = extract_price(outcome.result or "")
        if price is None:
            self._log_warn(f"No price found for .{tld}", {"tld": tld})
        return price

    async def run(self, table: Optional[PriceTable] = None) -> RefreshReport:
        """
        Refresh the configured TLDs and write the price file.

        Args:
            table: Table to update; loaded from the configured file when omitted

        Raises:
            PersistenceError: If the price file cannot be read or written
        """
        if table is None:
            table = PriceTable.load(self._config.price_file_path)

        self._log_info("Starting price refresh", {"tlds": self._config.refresh_tlds})
        updated: dict[str, str] = {}
        failed: list[str] = []

        for index, tld in enumerate(self._config.refresh_tlds):
            if index > 0:
                await self._sleep(self._config.request_delay_seconds)

            price = await self.refresh_tld(tld)
            if price is None:
                failed.append(tld)
                continue

            previous = table.get_price(self.REGISTRAR, tld) or {}
            table.set_price(
                self.REGISTRAR,
                tld,
                initial=price,
                renewal=previous.get("renewal") or NAMECHEAP_DEFAULT_RENEWAL,
            )
            updated[tld] = price
            self._log_info(f"Updated .{tld} price", {"tld": tld, "initial": price})

        last_updated = table.stamp()
        table.save(self._config.price_file_path)

        report = RefreshReport(last_updated=last_updated, updated=updated, failed=failed)
        self._log_info("Price refresh complete", report.to_dict())
        return report

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
