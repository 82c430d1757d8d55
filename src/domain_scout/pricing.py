"""
Registrar pricing.

Two sources of prices:
- PriceTable: the offline price file ``{lastUpdated, prices: {registrar:
  {tld: {initial, renewal}}}}`` with per-registrar defaults for anything
  missing, shown next to every candidate together with affiliate links
- RegistrarPriceClient: live availability/price checks against the
  Namecheap, GoDaddy and Porkbun APIs, each skipped when its credentials
  are not configured
"""

import asyncio
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx

from .audit_logger import AuditLogger, LoggingMixin
from .config import GoDaddyConfig, NamecheapConfig, PorkbunConfig, RegistrarConfig
from .exceptions import NetworkError, PersistenceError, ProtocolError
from .models import PriceSnapshot, RegistrarPriceRow, RegistrarQuote


REGISTRARS = ("namecheap", "godaddy", "porkbun")

DISPLAY_NAMES = {
    "namecheap": "Namecheap",
    "godaddy": "GoDaddy",
    "porkbun": "Porkbun",
}

# registrar -> (initial, renewal, priority)
DEFAULT_PRICES = {
    "namecheap": ("$9.48", "$13.98", "Best Value"),
    "godaddy": ("$1.99", "$19.99", "Popular"),
    "porkbun": ("$8.56", "$8.56", "Developer Friendly"),
}

AFFILIATE_PARAMS = "utm_source=domainnamesearch&utm_medium=affiliate"

AFFILIATE_SEARCH_URLS = {
    "namecheap": "https://www.namecheap.com/domains/registration/results/?domain=",
    "godaddy": "https://www.godaddy.com/domainsearch/find?domainToCheck=",
    "porkbun": "https://porkbun.com/checkout/search?q=",
}

NAMECHEAP_DEFAULT_RENEWAL = "$13.98"
GODADDY_AVAILABLE_PRICE = "$19.99"
PORKBUN_AVAILABLE_PRICE = "$8.56"
UNAVAILABLE_PRICE = "$0"

NAMECHEAP_PRICE_PATTERN = re.compile(r"Price[^>]*>([^<]+)<")
NAMECHEAP_RENEWAL_PATTERN = re.compile(r"RenewalPrice[^>]*>([^<]+)<")
NAMECHEAP_UNAVAILABLE_MARKER = "Domain name is not available"


def affiliate_link(registrar: str, domain: str) -> Optional[str]:
    """Registrar search URL for a domain with affiliate tracking parameters."""
    base = AFFILIATE_SEARCH_URLS.get(registrar.lower())
    if base is None:
        return None
    return f"{base}{quote(domain, safe='.-')}&{AFFILIATE_PARAMS}"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class PriceTable:
    """
    The offline price table.

    Reads never fail for a missing registrar or TLD: the registrar's
    default prices are used instead.
    """

    def __init__(
        self,
        prices: Optional[dict[str, dict[str, dict[str, str]]]] = None,
        last_updated: Optional[str] = None,
    ) -> None:
        self._prices = {registrar: dict(tlds) for registrar, tlds in (prices or {}).items()}
        self._last_updated = last_updated

    @classmethod
    def load(cls, file_path: Path) -> "PriceTable":
        """
        Load the price table from disk.

        Raises:
            PersistenceError: If the file cannot be read or is malformed
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise PersistenceError(
                code="file_not_found",
                message=f"Price file not found: {file_path}",
                details={"file_path": str(file_path)},
            )
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(
                code="invalid_format",
                message=f"Failed to read price file: {e}",
                details={"file_path": str(file_path)},
            )

        prices = data.get("prices") if isinstance(data, dict) else None
        if not isinstance(prices, dict):
            raise PersistenceError(
                code="invalid_format",
                message="Price file has no 'prices' object",
                details={"file_path": str(file_path)},
            )
        return cls(prices=prices, last_updated=data.get("lastUpdated"))

    @property
    def last_updated(self) -> Optional[str]:
        return self._last_updated

    def get_price(self, registrar: str, tld: str) -> Optional[dict[str, str]]:
        return self._prices.get(registrar, {}).get(tld.lower())

    def set_price(self, registrar: str, tld: str, initial: str, renewal: str) -> None:
        self._prices.setdefault(registrar, {})[tld.lower()] = {
            "initial": initial,
            "renewal": renewal,
        }

    def stamp(self, timestamp: Optional[str] = None) -> str:
        self._last_updated = timestamp or _utc_now_iso()
        return self._last_updated

    def get_rows(self, domain: str) -> list[RegistrarPriceRow]:
        """
        Price rows for every registrar, in display order.

        The TLD is the last label of the domain; a bare name counts as .com.
        """
        tld = domain.rsplit(".", 1)[-1].lower() if "." in domain else "com"
        rows = []
        for registrar in REGISTRARS:
            default_initial, default_renewal, priority = DEFAULT_PRICES[registrar]
            entry = self.get_price(registrar, tld) or {}
            rows.append(RegistrarPriceRow(
                registrar=DISPLAY_NAMES[registrar],
                initial=entry.get("initial") or default_initial,
                renewal=entry.get("renewal") or default_renewal,
                priority=priority,
                affiliate_url=affiliate_link(registrar, domain),
            ))
        return rows

    def to_dict(self) -> dict:
        return {"lastUpdated": self._last_updated, "prices": self._prices}

    def save(self, file_path: Path) -> None:
        """
        Raises:
            PersistenceError: If the file cannot be written
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write price file: {e}",
                details={"file_path": str(file_path)},
            )


class RegistrarPriceClient(LoggingMixin):
    """Live price checks against registrar APIs, queried concurrently."""

    COMPONENT = "RegistrarPriceClient"

    def __init__(
        self,
        config: Optional[RegistrarConfig] = None,
        logger: Optional[AuditLogger] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or RegistrarConfig()
        self._logger = logger
        self._client = client

    async def __aenter__(self) -> "RegistrarPriceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
            )
        return self._client

    async def _send(self, registrar: str, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http().request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(
                code="timeout",
                message=f"{DISPLAY_NAMES[registrar]} request timed out",
                details={"registrar": registrar, "error": str(e)},
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                code="network_error",
                message=f"{DISPLAY_NAMES[registrar]} request failed: {e}",
                details={"registrar": registrar},
            )
        if response.status_code != 200:
            raise NetworkError(
                code="server_error",
                message=f"{DISPLAY_NAMES[registrar]} API error: {response.status_code}",
                details={"registrar": registrar, "http_status_code": response.status_code},
            )
        return response

    async def get_namecheap_quote(
        self, domain: str, config: NamecheapConfig
    ) -> Optional[RegistrarQuote]:
        """Namecheap domains.check; None when the response has no price."""
        response = await self._send(
            "namecheap",
            "GET",
            config.endpoint,
            params={
                "ApiUser": config.api_user,
                "ApiKey": config.api_key,
                "UserName": config.api_user,
                "Command": "namecheap.domains.check",
                "ClientIp": config.client_ip,
                "DomainList": domain,
            },
        )
        text = response.text
        price = NAMECHEAP_PRICE_PATTERN.search(text)
        if price is None:
            return None
        renewal = NAMECHEAP_RENEWAL_PATTERN.search(text)
        return RegistrarQuote(
            initial=f"${price.group(1)}",
            renewal=f"${renewal.group(1)}" if renewal else NAMECHEAP_DEFAULT_RENEWAL,
            available=NAMECHEAP_UNAVAILABLE_MARKER not in text,
        )

    async def get_godaddy_quote(self, domain: str, config: GoDaddyConfig) -> RegistrarQuote:
        # The availability endpoint carries no price; list price is assumed.
        response = await self._send(
            "godaddy",
            "GET",
            config.endpoint,
            params={"domain": domain},
            headers={
                "Authorization": f"sso-key {config.api_key}:{config.api_secret}",
                "Content-Type": "application/json",
            },
        )
        data = self._json(response, "godaddy")
        if data.get("available"):
            return RegistrarQuote(GODADDY_AVAILABLE_PRICE, GODADDY_AVAILABLE_PRICE, True)
        return RegistrarQuote(UNAVAILABLE_PRICE, UNAVAILABLE_PRICE, False)

    async def get_porkbun_quote(self, domain: str, config: PorkbunConfig) -> RegistrarQuote:
        response = await self._send(
            "porkbun",
            "POST",
            config.endpoint,
            json={
                "domain": domain,
                "apiKey": config.api_key,
                "secretKey": config.secret_key,
            },
        )
        data = self._json(response, "porkbun")
        if data.get("status") == "SUCCESS" and data.get("available"):
            return RegistrarQuote(PORKBUN_AVAILABLE_PRICE, PORKBUN_AVAILABLE_PRICE, True)
        return RegistrarQuote(UNAVAILABLE_PRICE, UNAVAILABLE_PRICE, False)

    def _json(self, response: httpx.Response, registrar: str) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(
                code="parse_error",
                message=f"{DISPLAY_NAMES[registrar]} returned invalid JSON: {e}",
                details={"registrar": registrar},
            )
        if not isinstance(data, dict):
            raise ProtocolError(
                code="parse_error",
                message=f"{DISPLAY_NAMES[registrar]} returned an unexpected payload",
                details={"registrar": registrar},
            )
        return data

    async def get_snapshot(self, domain: str) -> PriceSnapshot:
        """
        Query every configured registrar at once.

        Registrars without credentials, and those whose request fails, are
        left out of the snapshot.
        """
        calls = {}
        if self._config.namecheap is not None:
            calls["namecheap"] = self.get_namecheap_quote(domain, self._config.namecheap)
        if self._config.godaddy is not None:
            calls["godaddy"] = self.get_godaddy_quote(domain, self._config.godaddy)
        if self._config.porkbun is not None:
            calls["porkbun"] = self.get_porkbun_quote(domain, self._config.porkbun)

        for registrar in REGISTRARS:
            if registrar not in calls:
                self._log_debug(
                    f"{DISPLAY_NAMES[registrar]} API credentials not configured",
                    {"registrar": registrar},
                )

        results = await asyncio.gather(*calls.values(), return_exceptions=True)

        prices: dict[str, RegistrarQuote] = {}
        for registrar, result in zip(calls.keys(), results):
            if isinstance(result, Exception):
                self._log_error(
                    f"{DISPLAY_NAMES[registrar]} price lookup failed",
                    error=result,
                    data={"registrar": registrar, "domain": domain},
                )
            elif result is not None:
                prices[registrar] = result

        return PriceSnapshot(domain=domain, prices=prices, timestamp=_utc_now_iso())

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
