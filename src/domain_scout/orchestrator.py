"""
Search orchestrator for the domain scout system.

Coordinates one search end to end:
- normalizes the input and generates one candidate per supported TLD
- starts one asyncio task per candidate, all at once
- each task resolves availability, then either scores the candidate and
  looks up search demand (available) or fetches registration info (taken)
- every completion swaps in a new sorted snapshot of the result set

A new search supersedes the previous one; late completions from the old
search are discarded by generation check in the ResultSet.
"""

import asyncio
import time
from typing import AsyncIterator, Callable, Optional

from .aggregator import ResultSet
from .audit_logger import AuditLogger, LoggingMixin
from .cache_store import InMemoryStore, JsonFileStore, KeyValueStore
from .config import SystemConfig
from .domain_info import DomainInfoEnricher
from .domain_validator import normalize_base_name
from .dns_resolver import AvailabilityResolver
from .enums import Availability, DemandLabel
from .models import Candidate, DomainInfo
from .rdap_client import RDAPClient
from .scoring import calculate_brandability_score, calculate_estimated_value
from .search_demand import SearchDemandEstimator, TrendsClient
from .suggestions import generate_suggestions
from .tld_registry import get_rdap_endpoints

Snapshot = tuple[Candidate, ...]


class SearchOrchestrator(LoggingMixin):
    """
    Main orchestrator for domain searches.

    Each candidate's checks run as an isolated task: a failure in one
    candidate marks only that candidate taken and never aborts the others.
    """

    COMPONENT = "SearchOrchestrator"

    def __init__(
        self,
        resolver: AvailabilityResolver,
        demand_estimator: SearchDemandEstimator,
        enricher: Optional[DomainInfoEnricher] = None,
        result_set: Optional[ResultSet] = None,
        logger: Optional[AuditLogger] = None,
        demand_timeout_seconds: float = 8.0,
    ) -> None:
        """
        Args:
            resolver: Availability resolver
            demand_estimator: Search demand estimator
            enricher: Optional registration info enricher for taken domains
            result_set: Optional shared result set (one per client session)
            logger: Optional logger
            demand_timeout_seconds: Upper bound on one demand lookup
        """
        self._resolver = resolver
        self._demand = demand_estimator
        self._enricher = enricher
        self._results = result_set or ResultSet()
        self._logger = logger
        self._demand_timeout_seconds = demand_timeout_seconds

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        logger: Optional[AuditLogger] = None,
        cache: Optional[KeyValueStore] = None,
    ) -> "SearchOrchestrator":
        """Wire up all components from a system configuration."""
        if cache is None:
            if config.cache.file_path is not None:
                cache = JsonFileStore(
                    config.cache.file_path, config.cache.hmac_secret, logger=logger
                )
            else:
                cache = InMemoryStore()

        trends_client = (
            TrendsClient(config.trends, logger=logger) if config.trends.enabled else None
        )
        demand = SearchDemandEstimator(
            cache=cache,
            trends_client=trends_client,
            logger=logger,
            ttl_seconds=config.cache.ttl_seconds,
            timeout_seconds=config.trends.timeout_seconds,
        )

        rdap_client = RDAPClient(
            default_endpoint=config.rdap.bootstrap_endpoint,
            tld_endpoints=get_rdap_endpoints() if config.rdap.use_registry_endpoints else None,
            timeout=config.rdap.timeout_seconds,
        )
        enricher = DomainInfoEnricher(
            rdap_client=rdap_client,
            logger=logger,
            timeout_seconds=config.info_timeout_seconds,
        )

        return cls(
            resolver=AvailabilityResolver(config.resolver, logger=logger),
            demand_estimator=demand,
            enricher=enricher,
            logger=logger,
            demand_timeout_seconds=config.demand_timeout_seconds,
        )

    def session(self) -> "SearchOrchestrator":
        """A new orchestrator sharing this one's clients with its own result set."""
        return SearchOrchestrator(
            resolver=self._resolver,
            demand_estimator=self._demand,
            enricher=self._enricher,
            result_set=ResultSet(),
            logger=self._logger,
            demand_timeout_seconds=self._demand_timeout_seconds,
        )

    async def __aenter__(self) -> "SearchOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def results(self) -> ResultSet:
        return self._results

    @property
    def resolver(self) -> AvailabilityResolver:
        return self._resolver

    @property
    def demand_estimator(self) -> SearchDemandEstimator:
        return self._demand

    @property
    def enricher(self) -> Optional[DomainInfoEnricher]:
        return self._enricher

    def start(self, raw_input: str) -> tuple[int, list[str]]:
        """
        Begin a new search generation with every candidate loading.

        Raises:
            ValidationError: If the input normalizes to an empty base name
        """
        base_name = normalize_base_name(raw_input)
        domains = generate_suggestions(base_name)
        generation = self._results.begin(Candidate.loading(d) for d in domains)
        self._log_info(
            f"Starting search for {base_name}",
            {"raw_input": raw_input, "base_name": base_name,
             "generation": generation, "candidates": len(domains)},
        )
        return generation, domains

    async def stream(self, raw_input: str) -> AsyncIterator[Snapshot]:
        """
        Run a search, yielding the ranked snapshot after every update.

        The first snapshot has every candidate loading. Iteration ends once
        all candidate tasks have settled.
        """
        generation, domains = self.start(raw_input)
        queue: asyncio.Queue = asyncio.Queue()
        done = object()

        yield self._results.snapshot

        async def run_all() -> None:
            try:
                await asyncio.gather(*(
                    self._check_candidate(generation, domain, queue.put_nowait)
                    for domain in domains
                ))
            finally:
                queue.put_nowait(done)

        runner = asyncio.ensure_future(run_all())
        try:
            while True:
                item = await queue.get()
                if item is done:
                    break
                yield item
        finally:
            if not runner.done():
                runner.cancel()
            await asyncio.gather(runner, return_exceptions=True)

    async def search(self, raw_input: str) -> list[Candidate]:
        """Run a search to completion and return the final ranked list."""
        start_time = time.perf_counter()
        last: Snapshot = ()
        async for snapshot in self.stream(raw_input):
            last = snapshot

        self._log_info(
            "Search completed",
            {
                "raw_input": raw_input,
                "available": sum(1 for c in last if c.availability == Availability.AVAILABLE),
                "taken": sum(1 for c in last if c.availability == Availability.TAKEN),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 1),
            },
        )
        return list(last)

    async def _check_candidate(
        self,
        generation: int,
        domain: str,
        emit: Callable[[Snapshot], None],
    ) -> None:
        def apply(update: Callable[[Candidate], Candidate]) -> bool:
            snapshot = self._results.apply(generation, domain, update)
            if snapshot is None:
                self._log_debug(
                    f"Discarding stale result for {domain}",
                    {"domain": domain, "generation": generation},
                )
                return False
            emit(snapshot)
            return True

        try:
            result = await self._resolver.check(domain)

            if result.available:
                score = calculate_brandability_score(domain)
                value = calculate_estimated_value(domain)
                if not apply(lambda c: c.resolved_available(score, value)):
                    return
                label = await self._lookup_demand(domain.rsplit(".", 1)[0])
                apply(lambda c: c.with_search_demand(label))
            else:
                if not apply(lambda c: c.resolved_taken()):
                    return
                info = await self._lookup_info(domain)
                if info is not None:
                    apply(lambda c: c.with_domain_info(info))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._log_error(f"Candidate check failed for {domain}", error=e, data={"domain": domain})
            apply(
                lambda c: c.resolved_taken()
                if c.availability == Availability.LOADING
                else c
            )

    async def _lookup_demand(self, name: str) -> DemandLabel:
        try:
            result = await asyncio.wait_for(
                self._demand.estimate(name), timeout=self._demand_timeout_seconds
            )
            return result.label
        except asyncio.TimeoutError:
            self._log_warn(f"Search demand for {name} timed out", {"keyword": name})
        except Exception as e:
            self._log_error(f"Search demand failed for {name}", error=e, data={"keyword": name})
        return DemandLabel.LOW

    async def _lookup_info(self, domain: str) -> Optional[DomainInfo]:
        if self._enricher is None:
            return None
        try:
            return await self._enricher.fetch(domain)
        except Exception as e:
            self._log_error(f"Domain info failed for {domain}", error=e, data={"domain": domain})
            return None

    async def close(self) -> None:
        if self._enricher is not None:
            await self._enricher.close()
        await self._demand.close()
