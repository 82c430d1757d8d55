"""
RDAP client for registration metadata.

Async client that fetches a domain object over HTTPS and extracts only the
fields the enricher needs: status flags and lifecycle events.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from .enums import RDAPErrorCode, RDAPStatus
from .exceptions import NetworkError

USER_AGENT = "DomainScout/0.1"


@dataclass
class RDAPEvent:
    """A single RDAP event (e.g., registration, expiration)."""

    event_action: str
    event_date: str


@dataclass
class RDAPParsedFields:
    """Parsed RDAP response fields; all other fields are ignored."""

    domain_name: str
    status: list[str]
    events: list[RDAPEvent]

    def find_event(self, action: str) -> Optional[RDAPEvent]:
        for event in self.events:
            if event.event_action.lower() == action:
                return event
        return None


@dataclass
class RDAPError:
    """Error information from an RDAP query."""

    code: RDAPErrorCode
    message: str
    http_status_code: Optional[int] = None


@dataclass
class RDAPResponse:
    """Complete RDAP query response."""

    status: RDAPStatus
    http_status_code: int
    raw_response: Optional[Any]
    parsed_fields: Optional[RDAPParsedFields]
    error: Optional[RDAPError]
    response_time_ms: float = 0.0


class RDAPClient:
    """
    Async RDAP client with TLS enforcement.

    Queries ``{endpoint}/domain/{name}``. By default every TLD goes through
    the public bootstrap redirector; registry endpoints can be pinned per TLD.
    """

    def __init__(
        self,
        default_endpoint: str = "https://rdap.org",
        tld_endpoints: Optional[dict[str, str]] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Args:
            default_endpoint: Endpoint used for TLDs without a pinned registry
            tld_endpoints: Optional mapping of TLD to registry RDAP base URL
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        self._default_endpoint = default_endpoint
        self._tld_endpoints = {k.lower(): v for k, v in (tld_endpoints or {}).items()}
        self._timeout = timeout
        self._client = client

    async def __aenter__(self) -> "RDAPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def get_endpoint_for_tld(self, tld: str) -> str:
        return self._tld_endpoints.get(tld.lower(), self._default_endpoint)

    def _validate_endpoint_url(self, endpoint: str) -> None:
        """
        Raises:
            NetworkError: If the endpoint does not use HTTPS
        """
        parsed = urlparse(endpoint)
        if parsed.scheme.lower() != "https":
            raise NetworkError(
                code="tls_error",
                message=f"RDAP endpoint must use HTTPS: {endpoint}",
                details={"endpoint": endpoint, "scheme": parsed.scheme},
            )

    def _parse_response(self, json_data: dict) -> RDAPParsedFields:
        domain_name = json_data.get("ldhName") or json_data.get("unicodeName", "")

        status = json_data.get("status", [])
        if not isinstance(status, list):
            status = [status] if status else []
        status = [str(s) for s in status]

        events = []
        raw_events = json_data.get("events", [])
        if isinstance(raw_events, list):
            for event in raw_events:
                if isinstance(event, dict):
                    event_action = event.get("eventAction")
                    event_date = event.get("eventDate")
                    if (
                        isinstance(event_action, str) and event_action
                        and isinstance(event_date, str) and event_date
                    ):
                        events.append(RDAPEvent(
                            event_action=event_action,
                            event_date=event_date,
                        ))

        return RDAPParsedFields(domain_name=domain_name, status=status, events=events)

    def build_url(self, domain: str) -> str:
        tld = domain.rsplit(".", 1)[-1] if "." in domain else ""
        endpoint = self.get_endpoint_for_tld(tld)
        return f"{endpoint.rstrip('/')}/domain/{domain}"

    async def query(self, domain: str) -> RDAPResponse:
        """
        Query RDAP for a domain. Never raises; errors are in the response.
        """
        start_time = time.perf_counter()
        rdap_url = self.build_url(domain)

        try:
            self._validate_endpoint_url(rdap_url)
        except NetworkError as e:
            return self._error(RDAPErrorCode.NETWORK_ERROR, e.message, start_time)

        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )

        try:
            response = await self._client.get(
                rdap_url,
                headers={
                    "Accept": "application/rdap+json, application/json",
                    "User-Agent": USER_AGENT,
                },
            )
        except httpx.TimeoutException:
            return self._error(
                RDAPErrorCode.TIMEOUT,
                f"RDAP request timed out after {self._timeout}s",
                start_time,
            )
        except httpx.HTTPError as e:
            return self._error(
                RDAPErrorCode.NETWORK_ERROR, f"Connection error: {e}", start_time
            )

        response_time_ms = self._elapsed_ms(start_time)

        if response.status_code == 404:
            return RDAPResponse(
                status=RDAPStatus.NOT_FOUND,
                http_status_code=404,
                raw_response=None,
                parsed_fields=None,
                error=None,
                response_time_ms=response_time_ms,
            )

        if response.status_code == 429:
            return self._error(
                RDAPErrorCode.RATE_LIMITED,
                "Rate limited by RDAP server",
                start_time,
                http_status_code=429,
            )

        if response.status_code != 200:
            return self._error(
                RDAPErrorCode.SERVER_ERROR,
                f"Unexpected HTTP status: {response.status_code}",
                start_time,
                http_status_code=response.status_code,
            )

        try:
            json_data = response.json()
        except ValueError as e:
            return self._error(
                RDAPErrorCode.PARSE_ERROR,
                f"Failed to parse RDAP response: {e}",
                start_time,
                http_status_code=200,
            )

        if not isinstance(json_data, dict):
            return self._error(
                RDAPErrorCode.PARSE_ERROR,
                "Response does not contain a domain object",
                start_time,
                http_status_code=200,
            )

        return RDAPResponse(
            status=RDAPStatus.FOUND,
            http_status_code=200,
            raw_response=json_data,
            parsed_fields=self._parse_response(json_data),
            error=None,
            response_time_ms=response_time_ms,
        )

    def _error(
        self,
        code: RDAPErrorCode,
        message: str,
        start_time: float,
        http_status_code: int = 0,
    ) -> RDAPResponse:
        return RDAPResponse(
            status=RDAPStatus.ERROR,
            http_status_code=http_status_code,
            raw_response=None,
            parsed_fields=None,
            error=RDAPError(
                code=code,
                message=message,
                http_status_code=http_status_code or None,
            ),
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
