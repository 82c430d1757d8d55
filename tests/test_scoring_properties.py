"""
Property-based tests for brandability and resale value heuristics.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from domain_scout.scoring import (
    DEFAULT_VALUE_MULTIPLIER,
    TLD_VALUE_MULTIPLIERS,
    calculate_brandability_score,
    calculate_estimated_value,
    is_pronounceable,
    split_domain,
)
from domain_scout.tld_registry import SUPPORTED_TLDS


name_strategy = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-", min_size=1, max_size=40)


class TestBrandabilityProperty:
    """Brandability is an integer between 0 and 10 that depends only on the domain."""

    @given(name=name_strategy, tld=st.sampled_from(SUPPORTED_TLDS))
    @settings(max_examples=200)
    def test_range_and_determinism(self, name: str, tld: str) -> None:
        domain = f"{name}.{tld}"
        score = calculate_brandability_score(domain)

        assert isinstance(score, int)
        assert 0 <= score <= 10
        assert calculate_brandability_score(domain) == score

    @given(name=name_strategy, tld=st.sampled_from([t for t in SUPPORTED_TLDS if t != "com"]))
    @settings(max_examples=100)
    def test_com_adds_one_point(self, name: str, tld: str) -> None:
        other = calculate_brandability_score(f"{name}.{tld}")
        com = calculate_brandability_score(f"{name}.com")
        assert com == min(10, other + 1)

    def test_examples(self) -> None:
        # 4 letters (+3), ends in consonant (+2), vowel ratio 0.25 (+0), .com (+1)
        assert calculate_brandability_score("tapr.com") == 6
        # 4 letters (+3), ends in vowel, vowel ratio 0.5 (+2)
        assert calculate_brandability_score("zola.io") == 5
        # 15 letters (+0), ends in consonant (+2), vowel ratio 0.4 (+2)
        assert calculate_brandability_score("extraordinarily.net") == 4

    def test_explicit_tld_overrides(self) -> None:
        assert calculate_brandability_score("tapr", tld="com") == 6
        assert calculate_brandability_score("tapr") == 5


class TestEstimatedValueProperty:
    """Value follows the length, keyword and TLD multiplier formula."""

    @given(name=st.text(alphabet="bcdfghjklmnp", min_size=1, max_size=30),
           tld=st.sampled_from(SUPPORTED_TLDS))
    @settings(max_examples=200)
    def test_formula(self, name: str, tld: str) -> None:
        multiplier = TLD_VALUE_MULTIPLIERS.get(tld, DEFAULT_VALUE_MULTIPLIER)
        raw = (100 + max(0, 10 - len(name)) * 5) * multiplier

        value = calculate_estimated_value(f"{name}.{tld}")

        assert isinstance(value, int)
        assert abs(value - raw) <= 0.5
        assert value == calculate_estimated_value(f"{name}.{tld}")

    @given(length=st.integers(min_value=1, max_value=20))
    @settings(max_examples=50)
    def test_shorter_is_never_cheaper(self, length: int) -> None:
        longer = calculate_estimated_value("b" * (length + 1) + ".com")
        shorter = calculate_estimated_value("b" * length + ".com")
        assert shorter >= longer

    def test_examples(self) -> None:
        assert calculate_estimated_value("myquote.io") == 126
        assert calculate_estimated_value("ab.com") == 140
        assert calculate_estimated_value("tapr.ai") == 52
        assert calculate_estimated_value("verylongdomainname.xyz") == 40

    def test_keyword_bonus(self) -> None:
        assert calculate_estimated_value("quotes.com") - calculate_estimated_value("quites.com") == 25


class TestHelpers:
    """Splitting and pronounceability helpers."""

    def test_split_domain(self) -> None:
        assert split_domain("Tapr.COM") == ("tapr", "com")
        assert split_domain("www.tapr.io") == ("tapr", "io")
        assert split_domain("tapr") == ("tapr", "")

    def test_is_pronounceable(self) -> None:
        assert is_pronounceable("tapr.com")
        assert not is_pronounceable("xyz.com")
        assert not is_pronounceable("aeiou.com")
