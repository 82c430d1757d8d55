"""
Result aggregation and ranking.

Candidates are ranked available first, then by brandability, then by TLD
priority (.com first), with the domain string as the last tie-break so the
order is total and independent of completion order.

ResultSet holds the current search's candidates as an immutable snapshot.
Each search is a new generation; updates carry the generation they were
started under and are dropped once a newer search has begun.
"""

import threading
from typing import Callable, Iterable, Optional

from .enums import Availability
from .models import Candidate
from .tld_registry import tld_priority

AVAILABILITY_RANK = {
    Availability.AVAILABLE: 0,
    Availability.LOADING: 1,
    Availability.TAKEN: 2,
}


def sort_key(candidate: Candidate) -> tuple[int, int, int, str]:
    return (
        AVAILABILITY_RANK[candidate.availability],
        -candidate.brandability_score,
        tld_priority(candidate.tld),
        candidate.domain,
    )


def sort_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    return sorted(candidates, key=sort_key)


class ResultSet:
    """
    Generation-tagged, snapshot-and-swap collection of candidates.

    The snapshot is a tuple that is never mutated; every update builds a new
    sorted tuple and swaps it in under a lock, so readers always see a
    consistent list and no update is lost.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._generation = 0
        self._snapshot: tuple[Candidate, ...] = ()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def snapshot(self) -> tuple[Candidate, ...]:
        return self._snapshot

    def begin(self, candidates: Iterable[Candidate]) -> int:
        """Replace the whole set for a new search and return its generation."""
        with self._lock:
            self._generation += 1
            self._snapshot = tuple(sort_candidates(candidates))
            return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def apply(
        self,
        generation: int,
        domain: str,
        update: Callable[[Candidate], Candidate],
    ) -> Optional[tuple[Candidate, ...]]:
        """
        Apply an update to one candidate if the generation is still current.

        Args:
            generation: Generation the caller's task was started under
            domain: Domain of the candidate to update
            update: Function from the current candidate to its replacement

        Returns:
            The new snapshot, or None when the update was stale or the
            domain is not part of the current search
        """
        with self._lock:
            if generation != self._generation:
                return None

            updated = []
            found = False
            for candidate in self._snapshot:
                if candidate.domain == domain:
                    updated.append(update(candidate))
                    found = True
                else:
                    updated.append(candidate)
            if not found:
                return None

            self._snapshot = tuple(sort_candidates(updated))
            return self._snapshot

    def pending(self) -> list[Candidate]:
        return [c for c in self._snapshot if c.availability == Availability.LOADING]
