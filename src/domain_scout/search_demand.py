"""
Search demand estimation.

A keyword is classified High / Medium / Low from public search interest.
The primary signal is a trends timeline; when that is unavailable the
estimator falls back to a local heuristic. Results from either path are
cached per lowercased keyword for 24 hours, and the cache is always
consulted before any network call.
"""

import asyncio
import json
import re
import time
from typing import Callable, Optional

import httpx

from .audit_logger import AuditLogger, LoggingMixin
from .cache_store import InMemoryStore, KeyValueStore
from .config import TrendsConfig
from .enums import DemandLabel, DemandSource, ValidationErrorCode
from .exceptions import DomainScoutError, NetworkError, ProtocolError, ValidationError
from .models import CacheEntry, SearchDemandResult


CACHE_TTL_SECONDS = 24 * 60 * 60

HIGH_THRESHOLD = 70
MEDIUM_THRESHOLD = 30

COMMON_WORDS = frozenset({
    "the", "and", "for", "with", "from", "this", "that", "have", "will", "your",
})
TECH_KEYWORDS = ("app", "tech", "dev", "io", "ai", "api", "web", "cloud", "data", "code")
CVC_PATTERN = re.compile(r"^[bcdfghjklmnpqrstvwxyz][aeiou][bcdfghjklmnpqrstvwxyz]$", re.IGNORECASE)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def label_for_score(score: float) -> DemandLabel:
    if score >= HIGH_THRESHOLD:
        return DemandLabel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return DemandLabel.MEDIUM
    return DemandLabel.LOW


def heuristic_demand_score(keyword: str) -> int:
    """
    Additive demand score from the keyword's shape alone, clamped to 100.

    Short length, common words, consonant-vowel-consonant shape, tech
    keywords and "get"/"go" or "my"/"me" fragments each add fixed points.
    """
    lowered = keyword.lower()
    score = 0

    if len(keyword) <= 4:
        score += 40
    elif len(keyword) <= 6:
        score += 30
    elif len(keyword) <= 8:
        score += 20
    elif len(keyword) <= 10:
        score += 10

    if lowered in COMMON_WORDS:
        score += 30

    if CVC_PATTERN.match(keyword):
        score += 25

    if any(tech in lowered for tech in TECH_KEYWORDS):
        score += 20

    if "get" in lowered or "go" in lowered:
        score += 15
    if "my" in lowered or "me" in lowered:
        score += 15

    return min(100, score)


def parse_trends_payload(text: str) -> float:
    """
    Average the interest values of a trends timeline response.

    The body starts with an anti-JSON-hijacking prefix such as ``)]}',``
    which is skipped up to the first ``{``.

    Returns:
        Mean interest clamped to [0, 100]

    Raises:
        ProtocolError: If the body is malformed or has no data points
    """
    start = text.find("{")
    if start < 0:
        raise ProtocolError(code="parse_error", message="Trends response has no JSON body")
    try:
        data = json.loads(text[start:])
    except json.JSONDecodeError as e:
        raise ProtocolError(code="parse_error", message=f"Trends response is not JSON: {e}")

    timeline = data.get("timelineData")
    if timeline is None and isinstance(data.get("default"), dict):
        timeline = data["default"].get("timelineData")
    if not timeline:
        raise ProtocolError(code="no_data", message="No trends data available")

    try:
        values = [float(point["value"][0]) for point in timeline]
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ProtocolError(code="parse_error", message=f"Malformed trends data point: {e}")

    average = sum(values) / len(values)
    return min(100.0, max(0.0, average))


class TrendsClient(LoggingMixin):
    """Async client for the public trends timeline endpoint."""

    COMPONENT = "TrendsClient"

    def __init__(
        self,
        config: Optional[TrendsConfig] = None,
        logger: Optional[AuditLogger] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or TrendsConfig()
        self._logger = logger
        self._client = client

    async def __aenter__(self) -> "TrendsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _build_params(self, keyword: str) -> dict:
        request = {"time": self._config.window, "keyword": keyword, "cat": "0"}
        return {
            "hl": "en-US",
            "tz": "-240",
            "req": json.dumps(request, separators=(",", ":")),
            "token": f"APP6_UEAAAAAY_{int(time.time() * 1000)}",
            "tzp": "-240",
        }

    async def fetch_interest(self, keyword: str) -> float:
        """
        Fetch and average the interest timeline for a keyword.

        Raises:
            NetworkError: On timeout, connection failure or non-2xx status
            ProtocolError: On a malformed or empty payload
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=True,
            )

        try:
            response = await self._client.get(
                self._config.endpoint,
                params=self._build_params(keyword),
                headers={"User-Agent": USER_AGENT},
            )
        except httpx.TimeoutException as e:
            raise NetworkError(
                code="timeout",
                message=f"Trends request timed out after {self._config.timeout_seconds}s",
                details={"keyword": keyword, "error": str(e)},
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                code="network_error",
                message=f"Trends request failed: {e}",
                details={"keyword": keyword},
            )

        if response.status_code != 200:
            raise NetworkError(
                code="server_error",
                message=f"Trends API failed with HTTP {response.status_code}",
                details={"keyword": keyword, "http_status_code": response.status_code},
            )

        return parse_trends_payload(response.text)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None


class SearchDemandEstimator(LoggingMixin):
    """
    Keyword to demand label, with cache, trends lookup and heuristic fallback.
    """

    COMPONENT = "SearchDemandEstimator"

    def __init__(
        self,
        cache: Optional[KeyValueStore] = None,
        trends_client: Optional[TrendsClient] = None,
        logger: Optional[AuditLogger] = None,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        timeout_seconds: float = 8.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            cache: Key-value store for cached results (in-memory by default)
            trends_client: Primary data source; None uses the heuristic only
            logger: Optional logger
            ttl_seconds: Freshness window of cache entries
            timeout_seconds: Upper bound on the trends lookup
            clock: Time source in epoch seconds, injectable for tests
        """
        self._cache = cache if cache is not None else InMemoryStore()
        self._trends = trends_client
        self._logger = logger
        self._ttl_seconds = ttl_seconds
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    @property
    def cache(self) -> KeyValueStore:
        return self._cache

    def get_cached(self, keyword: str) -> Optional[SearchDemandResult]:
        """Return a fresh cached result, or None. Never touches the network."""
        key = keyword.lower()
        try:
            entry = self._cache.get(key)
        except DomainScoutError as e:
            self._log_error("Failed to read search demand cache", error=e, data={"keyword": key})
            return None

        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self._ttl_seconds:
            return None
        try:
            label = DemandLabel(entry.label)
        except ValueError:
            return None
        return SearchDemandResult(
            keyword=keyword,
            score=entry.score,
            label=label,
            source=DemandSource.CACHE,
        )

    async def estimate(self, keyword: str) -> SearchDemandResult:
        """
        Estimate demand for a keyword.

        Raises:
            ValidationError: If the keyword is empty
        """
        if not keyword or not keyword.strip():
            raise ValidationError(
                code=ValidationErrorCode.EMPTY_INPUT.value,
                message="Keyword parameter is required",
            )
        keyword = keyword.strip()

        cached = self.get_cached(keyword)
        if cached is not None:
            self._log_debug(f"Search demand cache hit for {keyword}", {"label": cached.label.value})
            return cached

        result = await self._lookup(keyword)
        await self._store(keyword, result)
        return result

    async def _lookup(self, keyword: str) -> SearchDemandResult:
        if self._trends is not None:
            try:
                score = await asyncio.wait_for(
                    self._trends.fetch_interest(keyword),
                    timeout=self._timeout_seconds,
                )
                return SearchDemandResult(
                    keyword=keyword,
                    score=score,
                    label=label_for_score(score),
                    source=DemandSource.TRENDS,
                )
            except asyncio.TimeoutError:
                self._log_warn(
                    f"Trends lookup for {keyword} exceeded {self._timeout_seconds}s, using heuristic",
                    {"keyword": keyword, "reason": "timeout"},
                )
            except DomainScoutError as e:
                self._log_warn(
                    f"Trends lookup for {keyword} failed, using heuristic",
                    {"keyword": keyword, "reason": e.code, "error": e.message},
                )

        score = heuristic_demand_score(keyword)
        return SearchDemandResult(
            keyword=keyword,
            score=score,
            label=label_for_score(score),
            source=DemandSource.HEURISTIC,
        )

    async def _store(self, keyword: str, result: SearchDemandResult) -> None:
        entry = CacheEntry(
            label=result.label.value,
            score=result.score,
            timestamp=self._clock(),
        )
        # File-backed stores write synchronously; keep that off the event loop.
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._cache.set, keyword.lower(), entry)
        except DomainScoutError as e:
            self._log_error("Failed to write search demand cache", error=e, data={"keyword": keyword})

    async def close(self) -> None:
        if self._trends is not None:
            await self._trends.close()
