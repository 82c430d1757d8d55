"""
Decision Engine for domain availability inference.

This module turns a raw DNS lookup into an available/taken decision. DNS is
only a proxy for registration, so the policy deliberately prefers reporting
an available domain as taken over reporting a taken domain as available:

- NXDOMAIN (name does not exist)           -> available
- resolves to real addresses               -> taken
- resolves only to parking/sinkhole hosts  -> available, but only when the
                                              name looks randomly generated
- timeout or any other failure             -> taken
"""

import re
from dataclasses import dataclass
from typing import Optional

from .enums import Availability, DNSOutcome
from .models import AvailabilityResult, DNSLookup
from .scoring import split_domain


DEFAULT_PARKING_ADDRESSES = frozenset({
    "143.244.220.150",  # registrar parking host
    "0.0.0.0",
    "127.0.0.1",
})

MESSAGES = {
    "not_found": "Domain appears to be available (no DNS records found)",
    "parked_random": "Domain appears to be available (parking IP detected)",
    "parked_brand": "Domain appears to be registered (parked on a placeholder address)",
    "resolved": "Domain is already registered (has A records)",
    "timeout": "Domain appears to be registered (DNS lookup timed out)",
    "error": "Domain appears to be registered (DNS lookup failed)",
}


@dataclass
class RandomNameHeuristic:
    """
    Decide whether a second-level name looks machine generated.

    A name qualifies when it contains no digits or hyphens and has a run of
    at least ``min_alpha_run`` letters. The threshold is a tunable policy.
    """

    min_alpha_run: int = 6

    def matches(self, name: str) -> bool:
        if not name or re.search(r"[0-9-]", name):
            return False
        pattern = r"[a-z]{%d,}" % max(1, self.min_alpha_run)
        return re.search(pattern, name.lower()) is not None


class DecisionEngine:
    """
    Best-effort availability classifier over DNS lookups.

    This is not a registration check: a registered domain without an
    address record is reported as taken only because every non-NXDOMAIN
    outcome is treated conservatively.
    """

    def __init__(
        self,
        parking_addresses: Optional[set[str]] = None,
        heuristic: Optional[RandomNameHeuristic] = None,
    ) -> None:
        self._parking_addresses = frozenset(
            parking_addresses if parking_addresses is not None else DEFAULT_PARKING_ADDRESSES
        )
        self._heuristic = heuristic or RandomNameHeuristic()

    @property
    def parking_addresses(self) -> frozenset[str]:
        return self._parking_addresses

    def is_parked(self, addresses: list[str]) -> bool:
        """True when there is at least one address and all are parking hosts."""
        return bool(addresses) and all(
            address in self._parking_addresses for address in addresses
        )

    def evaluate(self, lookup: Optional[DNSLookup]) -> Availability:
        """
        Classify a DNS lookup as AVAILABLE or TAKEN.

        Args:
            lookup: Raw lookup result; None means no lookup happened

        Returns:
            Availability.AVAILABLE or Availability.TAKEN, never LOADING
        """
        return self._decide(lookup)[0]

    def build_result(self, lookup: DNSLookup) -> AvailabilityResult:
        availability, message_key = self._decide(lookup)
        return AvailabilityResult(
            domain=lookup.domain,
            available=availability == Availability.AVAILABLE,
            message=MESSAGES[message_key],
            outcome=lookup.outcome,
        )

    def _decide(self, lookup: Optional[DNSLookup]) -> tuple[Availability, str]:
        if lookup is None:
            return Availability.TAKEN, "error"

        if lookup.outcome == DNSOutcome.NOT_FOUND:
            return Availability.AVAILABLE, "not_found"

        if lookup.outcome == DNSOutcome.RESOLVED:
            if not lookup.addresses:
                return Availability.TAKEN, "resolved"
            if self.is_parked(lookup.addresses):
                name, _ = split_domain(lookup.domain)
                if self._heuristic.matches(name):
                    return Availability.AVAILABLE, "parked_random"
                return Availability.TAKEN, "parked_brand"
            return Availability.TAKEN, "resolved"

        if lookup.outcome == DNSOutcome.TIMEOUT:
            return Availability.TAKEN, "timeout"

        return Availability.TAKEN, "error"
