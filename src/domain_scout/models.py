"""
Data models for the domain scout system.

This module defines the data structures used for search candidates,
availability and demand results, registration info, cache entries and
registrar pricing.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .enums import Availability, DemandLabel, DemandSource, DNSOutcome


def format_value(value: Optional[int]) -> str:
    """Render an estimated value as ``$1,234`` or ``N/A``."""
    if value is None:
        return "N/A"
    return f"${value:,}"


@dataclass(frozen=True)
class DomainInfo:
    """Registration metadata for a taken domain."""

    registration_date: Optional[str]
    age: Optional[int]
    has_auto_renewal: bool
    days_until_expiration: Optional[int] = None

    def __post_init__(self) -> None:
        if self.has_auto_renewal and self.days_until_expiration is not None:
            raise ValueError(
                "days_until_expiration must be omitted when auto-renewal is reported"
            )

    def to_dict(self) -> dict:
        data = {
            "registrationDate": self.registration_date,
            "age": self.age,
            "hasAutoRenewal": self.has_auto_renewal,
        }
        if self.days_until_expiration is not None:
            data["daysUntilExpiration"] = self.days_until_expiration
        return data


@dataclass(frozen=True)
class Candidate:
    """
    One generated domain and everything known about it so far.

    Score, value and demand are only populated once the candidate is
    AVAILABLE; loading and taken candidates carry 0 / None / N/A.
    """

    domain: str
    tld: str
    availability: Availability = Availability.LOADING
    brandability_score: int = 0
    estimated_value: Optional[int] = None
    search_demand: DemandLabel = DemandLabel.NOT_APPLICABLE
    domain_info: Optional[DomainInfo] = None

    def __post_init__(self) -> None:
        if self.availability != Availability.AVAILABLE:
            if (
                self.brandability_score != 0
                or self.estimated_value is not None
                or self.search_demand != DemandLabel.NOT_APPLICABLE
            ):
                raise ValueError(
                    f"{self.domain}: score, value and demand are only allowed "
                    f"for available candidates (got {self.availability.value})"
                )
        if self.domain_info is not None and self.availability != Availability.TAKEN:
            raise ValueError(f"{self.domain}: domain info is only allowed when taken")

    @property
    def name(self) -> str:
        """Second-level name of the domain."""
        return self.domain.rsplit(".", 1)[0]

    @classmethod
    def loading(cls, domain: str) -> "Candidate":
        return cls(domain=domain, tld=domain.rsplit(".", 1)[-1])

    def resolved_available(
        self,
        brandability_score: int,
        estimated_value: int,
        search_demand: DemandLabel = DemandLabel.NOT_APPLICABLE,
    ) -> "Candidate":
        return replace(
            self,
            availability=Availability.AVAILABLE,
            brandability_score=brandability_score,
            estimated_value=estimated_value,
            search_demand=search_demand,
            domain_info=None,
        )

    def resolved_taken(self, domain_info: Optional[DomainInfo] = None) -> "Candidate":
        return replace(
            self,
            availability=Availability.TAKEN,
            brandability_score=0,
            estimated_value=None,
            search_demand=DemandLabel.NOT_APPLICABLE,
            domain_info=domain_info,
        )

    def with_search_demand(self, search_demand: DemandLabel) -> "Candidate":
        return replace(self, search_demand=search_demand)

    def with_domain_info(self, domain_info: Optional[DomainInfo]) -> "Candidate":
        return replace(self, domain_info=domain_info)

    def to_dict(self) -> dict:
        data = {
            "domain": self.domain,
            "tld": self.tld,
            "availability": self.availability.value,
            "brandabilityScore": self.brandability_score,
            "estimatedValue": format_value(self.estimated_value),
            "searchDemand": self.search_demand.value,
        }
        if self.domain_info is not None:
            data["domainInfo"] = self.domain_info.to_dict()
        return data


@dataclass
class DNSLookup:
    """Raw result of an address lookup, before classification."""

    domain: str
    outcome: DNSOutcome
    addresses: list[str] = field(default_factory=list)
    error_message: Optional[str] = None
    response_time_ms: float = 0.0


@dataclass
class AvailabilityResult:
    """Classified availability of a single domain."""

    domain: str
    available: bool
    message: str
    outcome: DNSOutcome

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "available": self.available,
            "message": self.message,
        }


@dataclass
class SearchDemandResult:
    """Demand estimate for a keyword."""

    keyword: str
    score: float
    label: DemandLabel
    source: DemandSource

    def to_dict(self) -> dict:
        return {"score": self.score, "label": self.label.value}


@dataclass
class CacheEntry:
    """Cached search demand for a lowercased keyword."""

    label: str
    score: float
    timestamp: float  # seconds since epoch

    def to_dict(self) -> dict:
        return {"label": self.label, "score": self.score, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        return cls(
            label=data["label"],
            score=float(data["score"]),
            timestamp=float(data["timestamp"]),
        )


@dataclass
class RegistrarPriceRow:
    """Static price row for one registrar and TLD."""

    registrar: str
    initial: str
    renewal: str
    priority: str
    affiliate_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "registrar": self.registrar,
            "initial": self.initial,
            "renewal": self.renewal,
            "priority": self.priority,
            "affiliateUrl": self.affiliate_url,
        }


@dataclass
class RegistrarQuote:
    """Live price and availability reported by a registrar API."""

    initial: str
    renewal: str
    available: bool

    def to_dict(self) -> dict:
        return {
            "initial": self.initial,
            "renewal": self.renewal,
            "available": self.available,
        }


@dataclass
class PriceSnapshot:
    """Live quotes from all configured registrars for one domain."""

    domain: str
    prices: dict[str, RegistrarQuote]
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "prices": {name: quote.to_dict() for name, quote in self.prices.items()},
            "timestamp": self.timestamp,
        }
