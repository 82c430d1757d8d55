"""
Property-based tests for result ranking and the generation-tagged ResultSet.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_scout.aggregator import ResultSet, sort_candidates, sort_key
from domain_scout.enums import Availability, DemandLabel
from domain_scout.models import Candidate, DomainInfo
from domain_scout.tld_registry import SUPPORTED_TLDS


@st.composite
def candidate_strategy(draw) -> Candidate:
    """Generate candidates in any of the three states."""
    name = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=10))
    tld = draw(st.sampled_from(SUPPORTED_TLDS))
    candidate = Candidate.loading(f"{name}.{tld}")
    state = draw(st.sampled_from(list(Availability)))
    if state == Availability.AVAILABLE:
        return candidate.resolved_available(
            draw(st.integers(min_value=0, max_value=10)),
            draw(st.integers(min_value=0, max_value=500)),
            draw(st.sampled_from(list(DemandLabel))),
        )
    if state == Availability.TAKEN:
        return candidate.resolved_taken()
    return candidate


def candidate_list_strategy():
    return st.lists(candidate_strategy(), max_size=20, unique_by=lambda c: c.domain)


class TestRankingProperty:
    """Available before loading before taken, then score, TLD priority, domain."""

    @given(candidates=candidate_list_strategy())
    @settings(max_examples=200)
    def test_order_is_sorted_by_key(self, candidates: list) -> None:
        ranked = sort_candidates(candidates)

        keys = [sort_key(c) for c in ranked]
        assert keys == sorted(keys)
        assert sorted(c.domain for c in ranked) == sorted(c.domain for c in candidates)

    @given(candidates=candidate_list_strategy(), seed=st.randoms())
    @settings(max_examples=100)
    def test_order_independent_of_input_order(self, candidates: list, seed) -> None:
        shuffled = list(candidates)
        seed.shuffle(shuffled)

        assert sort_candidates(shuffled) == sort_candidates(candidates)

    def test_availability_groups(self) -> None:
        taken = Candidate.loading("tapr.com").resolved_taken()
        loading = Candidate.loading("tapr.io")
        available = Candidate.loading("tapr.xyz").resolved_available(1, 40)

        ranked = sort_candidates([taken, loading, available])

        assert [c.domain for c in ranked] == ["tapr.xyz", "tapr.io", "tapr.com"]

    def test_tld_priority_breaks_score_ties(self) -> None:
        io = Candidate.loading("tapr.io").resolved_available(5, 117)
        com = Candidate.loading("tapr.com").resolved_available(5, 130)
        xyz = Candidate.loading("tapr.xyz").resolved_available(7, 52)

        ranked = sort_candidates([io, com, xyz])

        assert [c.domain for c in ranked] == ["tapr.xyz", "tapr.com", "tapr.io"]


class TestCandidateInvariant:
    """Only available candidates carry score, value and demand."""

    def test_loading_defaults(self) -> None:
        candidate = Candidate.loading("tapr.dev")

        assert candidate.tld == "dev"
        assert candidate.availability == Availability.LOADING
        assert candidate.to_dict() == {
            "domain": "tapr.dev",
            "tld": "dev",
            "availability": "loading",
            "brandabilityScore": 0,
            "estimatedValue": "N/A",
            "searchDemand": "N/A",
        }

    def test_taken_with_score_rejected(self) -> None:
        try:
            Candidate(domain="tapr.com", tld="com", availability=Availability.TAKEN,
                      brandability_score=3)
        except ValueError:
            return
        assert False, "Expected ValueError"

    def test_info_only_when_taken(self) -> None:
        info = DomainInfo(registration_date="2015-01-01T00:00:00Z", age=10, has_auto_renewal=True)
        try:
            Candidate.loading("tapr.com").resolved_available(5, 130).with_domain_info(info)
        except ValueError:
            return
        assert False, "Expected ValueError"

    def test_taken_resets_metrics(self) -> None:
        candidate = Candidate.loading("tapr.com").resolved_available(6, 130, DemandLabel.HIGH)
        taken = candidate.resolved_taken()

        assert taken.brandability_score == 0
        assert taken.estimated_value is None
        assert taken.search_demand == DemandLabel.NOT_APPLICABLE

    def test_value_formatting(self) -> None:
        candidate = Candidate.loading("tapr.com").resolved_available(6, 1250)
        assert candidate.to_dict()["estimatedValue"] == "$1,250"


class TestGenerationProperty:
    """Updates started under an older generation never land."""

    @given(candidates=candidate_list_strategy(), searches=st.integers(min_value=1, max_value=5))
    @settings(max_examples=50)
    def test_stale_updates_dropped(self, candidates: list, searches: int) -> None:
        results = ResultSet()
        first = results.begin([Candidate.loading("old.com")])
        for _ in range(searches):
            results.begin(candidates)

        before = results.snapshot
        outcome = results.apply(first, "old.com", lambda c: c.resolved_taken())

        assert outcome is None
        assert results.snapshot == before
        assert not results.is_current(first)
        assert results.generation == first + searches

    def test_current_update_applied_and_resorted(self) -> None:
        results = ResultSet()
        generation = results.begin(
            Candidate.loading(d) for d in ("tapr.com", "tapr.io", "tapr.app")
        )

        snapshot = results.apply(
            generation, "tapr.app", lambda c: c.resolved_available(7, 78)
        )

        assert snapshot is results.snapshot
        assert snapshot[0].domain == "tapr.app"
        assert snapshot[0].availability == Availability.AVAILABLE
        assert [c.domain for c in results.pending()] == ["tapr.com", "tapr.io"]

    def test_unknown_domain_ignored(self) -> None:
        results = ResultSet()
        generation = results.begin([Candidate.loading("tapr.com")])

        assert results.apply(generation, "other.com", lambda c: c.resolved_taken()) is None
        assert results.snapshot[0].availability == Availability.LOADING

    def test_snapshot_is_immutable(self) -> None:
        results = ResultSet()
        generation = results.begin([Candidate.loading("tapr.com")])
        before = results.snapshot

        results.apply(generation, "tapr.com", lambda c: c.resolved_taken())

        assert before[0].availability == Availability.LOADING
        assert results.snapshot[0].availability == Availability.TAKEN
