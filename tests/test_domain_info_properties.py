"""
Property-based tests for RDAP lookups and registration info derivation.

The RDAP client is exercised against httpx.MockTransport so no network
traffic is generated.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from io import StringIO

import httpx
from fastapi.testclient import TestClient
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_scout.api import create_app
from domain_scout.audit_logger import AuditLogger
from domain_scout.config import ResolverConfig, create_default_config
from domain_scout.dns_resolver import AvailabilityResolver
from domain_scout.domain_info import (
    DomainInfoEnricher,
    build_domain_info,
    has_auto_renewal,
    parse_rdap_date,
)
from domain_scout.enums import LogLevel, RDAPErrorCode, RDAPStatus
from domain_scout.orchestrator import SearchOrchestrator
from domain_scout.price_refresh import PriceRefreshJob
from domain_scout.pricing import RegistrarPriceClient
from domain_scout.rdap_client import RDAPClient, RDAPEvent, RDAPParsedFields
from domain_scout.search_demand import SearchDemandEstimator


NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def rdap_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def parsed(status: list, registered: datetime = None, expires: datetime = None) -> RDAPParsedFields:
    events = []
    if registered is not None:
        events.append(RDAPEvent(event_action="registration", event_date=rdap_date(registered)))
    if expires is not None:
        events.append(RDAPEvent(event_action="expiration", event_date=rdap_date(expires)))
    return RDAPParsedFields(domain_name="tapr.com", status=status, events=events)


def rdap_body(status: list, registered: str, expires: str) -> dict:
    return {
        "objectClassName": "domain",
        "ldhName": "TAPR.COM",
        "status": status,
        "events": [
            {"eventAction": "registration", "eventDate": registered},
            {"eventAction": "expiration", "eventDate": expires},
            {"eventAction": "last update of RDAP database", "eventDate": "2025-06-01T00:00:00Z"},
        ],
    }


def mock_client(handler) -> RDAPClient:
    return RDAPClient(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestDomainInfoProperty:
    """Age rounds down, days to expiry round up, auto-renew hides the countdown."""

    @given(days=st.integers(min_value=0, max_value=365 * 40))
    @settings(max_examples=100)
    def test_age_in_whole_years(self, days: int) -> None:
        info = build_domain_info(parsed(["active"], registered=NOW - timedelta(days=days)), NOW)

        assert info.age == days // 365
        assert info.registration_date == rdap_date(NOW - timedelta(days=days))

    @given(
        days=st.integers(min_value=-30, max_value=3650),
        hours=st.integers(min_value=1, max_value=23),
    )
    @settings(max_examples=100)
    def test_days_until_expiration_rounds_up(self, days: int, hours: int) -> None:
        expires = NOW + timedelta(days=days, hours=hours)

        info = build_domain_info(parsed(["client transfer prohibited"], expires=expires), NOW)

        assert info.days_until_expiration == days + 1
        assert not info.has_auto_renewal

    @given(
        status=st.sampled_from([
            "auto renew period", "autoRenewPeriod", "Auto-Renew", "renewal grace period",
            "redemption period", "pending delete redemption period",
        ]),
    )
    @settings(max_examples=30)
    def test_auto_renewal_suppresses_countdown(self, status: str) -> None:
        info = build_domain_info(
            parsed(["active", status], registered=NOW - timedelta(days=800),
                   expires=NOW + timedelta(days=20)),
            NOW,
        )

        assert info.has_auto_renewal
        assert info.days_until_expiration is None
        assert "daysUntilExpiration" not in info.to_dict()

    def test_missing_events(self) -> None:
        info = build_domain_info(parsed(["active"]), NOW)

        assert info.registration_date is None
        assert info.age is None
        assert info.days_until_expiration is None

    def test_helpers(self) -> None:
        assert parse_rdap_date("2020-01-01T00:00:00Z") == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert parse_rdap_date("not a date") is None
        assert parse_rdap_date("") is None
        assert not has_auto_renewal(["active", "client delete prohibited"])


class TestRDAPClient:
    """HTTP status codes map to RDAP statuses and error codes."""

    def test_found(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=rdap_body(
                ["client transfer prohibited"], "2015-03-01T00:00:00Z", "2026-03-01T00:00:00Z",
            ))

        async def run():
            async with mock_client(handler) as client:
                return await client.query("tapr.com")

        response = asyncio.run(run())

        assert seen == ["https://rdap.org/domain/tapr.com"]
        assert response.status == RDAPStatus.FOUND
        assert response.parsed_fields.domain_name == "TAPR.COM"
        assert response.parsed_fields.find_event("expiration").event_date == "2026-03-01T00:00:00Z"

    def test_error_statuses(self) -> None:
        cases = {
            429: RDAPErrorCode.RATE_LIMITED,
            500: RDAPErrorCode.SERVER_ERROR,
            503: RDAPErrorCode.SERVER_ERROR,
        }
        for status_code, expected in cases.items():
            async def run():
                async with mock_client(lambda request: httpx.Response(status_code)) as client:
                    return await client.query("tapr.com")

            response = asyncio.run(run())

            assert response.status == RDAPStatus.ERROR
            assert response.error.code == expected
            assert response.http_status_code == status_code

    def test_not_found(self) -> None:
        async def run():
            async with mock_client(lambda request: httpx.Response(404)) as client:
                return await client.query("tapr.com")

        response = asyncio.run(run())

        assert response.status == RDAPStatus.NOT_FOUND
        assert response.error is None

    def test_invalid_json(self) -> None:
        async def run():
            async with mock_client(lambda request: httpx.Response(200, text="<html>")) as client:
                return await client.query("tapr.com")

        response = asyncio.run(run())

        assert response.error.code == RDAPErrorCode.PARSE_ERROR

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async def run():
            async with mock_client(handler) as client:
                return await client.query("tapr.com")

        assert asyncio.run(run()).error.code == RDAPErrorCode.TIMEOUT

    def test_registry_endpoint_and_https_enforcement(self) -> None:
        client = RDAPClient(tld_endpoints={"io": "https://rdap.nic.io/"})
        assert client.build_url("tapr.io") == "https://rdap.nic.io/domain/tapr.io"
        assert client.build_url("tapr.com") == "https://rdap.org/domain/tapr.com"

        insecure = RDAPClient(default_endpoint="http://rdap.example")
        response = asyncio.run(insecure.query("tapr.com"))
        assert response.error.code == RDAPErrorCode.NETWORK_ERROR


class TestDomainInfoEnricher:
    """The enricher returns None instead of raising on lookup failures."""

    def test_success(self) -> None:
        body = rdap_body(["active"], "2015-03-01T00:00:00Z", "2025-06-10T00:00:00Z")
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        enricher = DomainInfoEnricher(
            rdap_client=mock_client(lambda request: httpx.Response(200, json=body)),
            logger=logger,
            clock=lambda: NOW,
        )

        async def run():
            try:
                return await enricher.fetch("tapr.com")
            finally:
                await enricher.close()

        info = asyncio.run(run())

        assert info.to_dict() == {
            "registrationDate": "2015-03-01T00:00:00Z",
            "age": 10,
            "hasAutoRenewal": False,
            "daysUntilExpiration": 9,
        }
        assert logger.entries[-1].level == LogLevel.INFO

    def test_failure_returns_none(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        enricher = DomainInfoEnricher(
            rdap_client=mock_client(lambda request: httpx.Response(500)),
            logger=logger,
        )

        assert asyncio.run(enricher.fetch("tapr.com")) is None
        assert logger.entries[-1].level == LogLevel.WARN
        assert logger.entries[-1].data["reason"] == "server_error"

    def test_timeout_returns_none(self) -> None:
        class _SlowRDAP:
            async def query(self, domain):
                await asyncio.sleep(1.0)

            async def close(self):
                pass

        enricher = DomainInfoEnricher(rdap_client=_SlowRDAP(), timeout_seconds=0.01)

        assert asyncio.run(enricher.fetch("tapr.com")) is None


MALFORMED_EVENTS = [
    {"eventAction": "registration", "eventDate": 12345},
    {"eventAction": ["registration"], "eventDate": "2015-03-01T00:00:00Z"},
    {"eventAction": {"action": "expiration"}, "eventDate": None},
    {"eventAction": "expiration", "eventDate": ["2026-03-01T00:00:00Z"]},
]


def malformed_body(event: dict) -> dict:
    return {"objectClassName": "domain", "ldhName": "TAPR.COM", "status": ["active"], "events": [event]}


class TestMalformedEvents:
    """Events with non-string fields are dropped and the lookup degrades to no info."""

    @given(event=st.sampled_from(MALFORMED_EVENTS))
    @settings(max_examples=10)
    def test_non_string_fields_dropped(self, event: dict) -> None:
        async def run():
            async with mock_client(lambda request: httpx.Response(200, json=malformed_body(event))) as client:
                return await client.query("tapr.com")

        response = asyncio.run(run())

        assert response.status == RDAPStatus.FOUND
        assert response.parsed_fields.events == []
        assert response.parsed_fields.find_event("registration") is None

    def test_parse_date_rejects_non_strings(self) -> None:
        assert parse_rdap_date(12345) is None
        assert parse_rdap_date(["2020-01-01T00:00:00Z"]) is None
        assert parse_rdap_date(None) is None

    @given(event=st.sampled_from(MALFORMED_EVENTS))
    @settings(max_examples=10)
    def test_enricher_returns_none(self, event: dict) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        enricher = DomainInfoEnricher(
            rdap_client=mock_client(lambda request: httpx.Response(200, json=malformed_body(event))),
            logger=logger,
            clock=lambda: NOW,
        )

        assert asyncio.run(enricher.fetch("tapr.com")) is None
        assert logger.entries[-1].level == LogLevel.WARN
        assert logger.entries[-1].data["reason"] == RDAPErrorCode.PARSE_ERROR.value

    def test_valid_events_survive_next_to_malformed_ones(self) -> None:
        body = malformed_body({"eventAction": "registration", "eventDate": 12345})
        body["events"].append({"eventAction": "expiration", "eventDate": "2025-06-10T00:00:00Z"})
        enricher = DomainInfoEnricher(
            rdap_client=mock_client(lambda request: httpx.Response(200, json=body)),
            clock=lambda: NOW,
        )

        info = asyncio.run(enricher.fetch("tapr.com"))

        assert info.registration_date is None
        assert info.days_until_expiration == 9

    def test_api_answers_not_found(self) -> None:
        config = create_default_config()
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        enricher = DomainInfoEnricher(
            rdap_client=mock_client(
                lambda request: httpx.Response(200, json=malformed_body(MALFORMED_EVENTS[0]))
            ),
            logger=logger,
        )
        orchestrator = SearchOrchestrator(
            resolver=AvailabilityResolver(ResolverConfig(), logger=logger),
            demand_estimator=SearchDemandEstimator(logger=logger),
            enricher=enricher,
            logger=logger,
        )
        app = create_app(
            config=config,
            logger=logger,
            orchestrator=orchestrator,
            price_client=RegistrarPriceClient(config.registrars, logger=logger),
            refresh_job=PriceRefreshJob(config.pricing, logger=logger),
        )

        response = TestClient(app).get("/api/domainInfo", params={"domain": "tapr.com"})

        assert response.status_code == 404
        assert response.json() == {
            "domain": "tapr.com",
            "error": "Domain information not available",
            "message": "Unable to fetch domain details",
        }
