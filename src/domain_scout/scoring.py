"""
Brandability and resale value heuristics.

Both functions are pure: the same domain always yields the same number.
"""

import math
from typing import Optional

VOWELS = "aeiou"
CONSONANTS = "bcdfghjklmnpqrstvwxyz"

MAX_BRANDABILITY = 10

BASE_VALUE = 100
LENGTH_PENALTY_PIVOT = 10
LENGTH_PENALTY_STEP = 5
KEYWORD_BONUS = 25
BONUS_KEYWORD = "quote"

TLD_VALUE_MULTIPLIERS: dict[str, float] = {
    "com": 1.0,
    "io": 0.9,
    "net": 0.8,
    "org": 0.7,
    "app": 0.6,
    "dev": 0.5,
    "tech": 0.5,
}
DEFAULT_VALUE_MULTIPLIER = 0.4


def split_domain(domain: str) -> tuple[str, str]:
    """Split ``name.tld`` into (second-level name, tld); tld may be empty."""
    domain = domain.lower()
    if "." not in domain:
        return domain, ""
    name, tld = domain.rsplit(".", 1)
    return name.split(".")[-1], tld


def calculate_brandability_score(domain: str, tld: Optional[str] = None) -> int:
    """
    Score how brandable a domain name is, from 0 to 10.

    Length, a consonant ending and a balanced vowel ratio each add points;
    a .com adds one more. Only the second-level name is scored.

    Args:
        domain: Domain (``tapr.com``) or bare name
        tld: Optional TLD; defaults to the domain's own TLD
    """
    name, own_tld = split_domain(domain)
    if tld is None:
        tld = own_tld
    if not name:
        return 0

    score = 0

    if len(name) <= 4:
        score += 3
    elif len(name) <= 6:
        score += 2
    elif len(name) <= 8:
        score += 1

    if name[-1] in CONSONANTS:
        score += 2

    vowel_ratio = sum(1 for c in name if c in VOWELS) / len(name)
    if 0.3 <= vowel_ratio <= 0.6:
        score += 2

    if tld.lower() == "com":
        score += 1

    return min(MAX_BRANDABILITY, score)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_estimated_value(domain: str) -> int:
    """
    Estimate a resale value in whole currency units.

    ``round((100 + max(0, 10 - len(name)) * 5 + quote_bonus) * multiplier)``
    where the multiplier depends on the TLD.
    """
    name, tld = split_domain(domain)
    length_penalty = max(0, LENGTH_PENALTY_PIVOT - len(name)) * LENGTH_PENALTY_STEP
    keyword_bonus = KEYWORD_BONUS if BONUS_KEYWORD in name else 0
    multiplier = TLD_VALUE_MULTIPLIERS.get(tld, DEFAULT_VALUE_MULTIPLIER)
    return _round_half_up((BASE_VALUE + length_penalty + keyword_bonus) * multiplier)


def is_pronounceable(domain: str) -> bool:
    """True when the name has at least one vowel and at least one non-vowel."""
    name, _ = split_domain(domain)
    vowel_count = sum(1 for c in name if c in VOWELS)
    return 1 <= vowel_count <= len(name) - 1
