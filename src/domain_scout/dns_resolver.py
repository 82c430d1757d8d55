"""
DNS-based availability resolver.

Looks up a domain's A records with a bounded timeout and hands the outcome
to the DecisionEngine. Timeouts and other failures are kept distinct in the
lookup outcome and in the logs even though both end up as "taken".
"""

import time
from typing import Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from .audit_logger import AuditLogger, LoggingMixin
from .config import ResolverConfig
from .decision_engine import DecisionEngine, RandomNameHeuristic
from .enums import DNSOutcome
from .models import AvailabilityResult, DNSLookup


class AvailabilityResolver(LoggingMixin):
    """
    Best-effort availability classifier backed by DNS.

    DNS presence is a free, unauthenticated proxy for registration, not
    ground truth. Errors are biased toward "taken": a user skipping an
    available name loses little, a user chasing a taken one wastes money.
    Each domain is checked once per search; there is no automatic retry.
    """

    COMPONENT = "AvailabilityResolver"

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        logger: Optional[AuditLogger] = None,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
    ) -> None:
        """
        Args:
            config: Resolver configuration (timeout, parking addresses, heuristic)
            logger: Optional logger
            resolver: Optional preconfigured dnspython async resolver
        """
        self._config = config or ResolverConfig()
        self._logger = logger
        self._resolver = resolver
        self._decision_engine = DecisionEngine(
            parking_addresses=set(self._config.parking_addresses),
            heuristic=RandomNameHeuristic(self._config.random_name_min_alpha_run),
        )

    @property
    def decision_engine(self) -> DecisionEngine:
        return self._decision_engine

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver()
            if self._config.nameservers:
                resolver.nameservers = list(self._config.nameservers)
            resolver.timeout = self._config.timeout_seconds
            resolver.lifetime = self._config.timeout_seconds
            self._resolver = resolver
        return self._resolver

    async def lookup(self, domain: str) -> DNSLookup:
        """
        Resolve the domain's A records.

        Never raises; every failure is mapped to a DNSOutcome.
        """
        start_time = time.perf_counter()
        try:
            answer = await self._get_resolver().resolve(
                domain, "A", lifetime=self._config.timeout_seconds
            )
            addresses = [rdata.to_text() for rdata in answer]
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.RESOLVED,
                addresses=addresses,
                response_time_ms=self._elapsed_ms(start_time),
            )
        except dns.resolver.NXDOMAIN:
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.NOT_FOUND,
                response_time_ms=self._elapsed_ms(start_time),
            )
        except dns.exception.Timeout as e:
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.TIMEOUT,
                error_message=f"DNS lookup timed out after {self._config.timeout_seconds}s: {e}",
                response_time_ms=self._elapsed_ms(start_time),
            )
        except dns.resolver.NoAnswer:
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.ERROR,
                error_message="Name exists but has no A records",
                response_time_ms=self._elapsed_ms(start_time),
            )
        except dns.exception.DNSException as e:
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.ERROR,
                error_message=f"DNS lookup failed: {type(e).__name__}: {e}",
                response_time_ms=self._elapsed_ms(start_time),
            )
        except OSError as e:
            return DNSLookup(
                domain=domain,
                outcome=DNSOutcome.ERROR,
                error_message=f"Network error during DNS lookup: {e}",
                response_time_ms=self._elapsed_ms(start_time),
            )

    async def check(self, domain: str) -> AvailabilityResult:
        """Look up and classify a single domain."""
        lookup = await self.lookup(domain)
        result = self._decision_engine.build_result(lookup)

        data = {
            "domain": domain,
            "outcome": lookup.outcome.value,
            "available": result.available,
            "addresses": lookup.addresses,
            "duration_ms": round(lookup.response_time_ms, 1),
        }
        if lookup.outcome == DNSOutcome.TIMEOUT:
            self._log_warn(f"DNS timeout for {domain}, reporting taken", data)
        elif lookup.outcome == DNSOutcome.ERROR:
            data["error"] = lookup.error_message
            self._log_warn(f"DNS failure for {domain}, reporting taken", data)
        else:
            self._log_info(f"Availability resolved for {domain}: {result.message}", data)

        return result

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000
