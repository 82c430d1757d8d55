"""
TLD Registry - the fixed set of TLDs offered for every search.

The order of SUPPORTED_TLDS is both the generation order of candidates and
the tie-break priority used when ranking results (.com first). Each entry
also carries the registry RDAP endpoint used for registration-data lookups.
"""

from dataclasses import dataclass
from typing import Optional

# RDAP bootstrap redirector for TLDs without a pinned registry endpoint
RDAP_FALLBACK = "https://rdap.org"


@dataclass(frozen=True)
class TLDInfo:
    """A supported top-level domain."""

    tld: str
    name: str
    rdap_endpoint: str


SUPPORTED = [
    TLDInfo(tld="com", name="Commercial", rdap_endpoint="https://rdap.verisign.com/com/v1"),
    TLDInfo(tld="io", name="Tech Startup", rdap_endpoint="https://rdap.nic.io"),
    TLDInfo(tld="app", name="Application", rdap_endpoint="https://rdap.nic.google"),
    TLDInfo(tld="ai", name="Artificial Intelligence", rdap_endpoint=RDAP_FALLBACK),
    TLDInfo(tld="co", name="Company", rdap_endpoint="https://rdap.nic.co"),
    TLDInfo(tld="dev", name="Developer", rdap_endpoint="https://rdap.nic.google"),
    TLDInfo(tld="tech", name="Technology", rdap_endpoint="https://rdap.centralnic.com/tech"),
    TLDInfo(tld="net", name="Network", rdap_endpoint="https://rdap.verisign.com/net/v1"),
    TLDInfo(tld="xyz", name="Generic", rdap_endpoint="https://rdap.nic.xyz"),
]

SUPPORTED_TLDS: list[str] = [info.tld for info in SUPPORTED]

_BY_TLD = {info.tld: info for info in SUPPORTED}


def get_tld_info(tld: str) -> Optional[TLDInfo]:
    """Look up a supported TLD (case-insensitive)."""
    return _BY_TLD.get(tld.lower().lstrip("."))


def tld_priority(tld: str) -> int:
    """Rank of a TLD for ordering; unknown TLDs sort after all supported ones."""
    try:
        return SUPPORTED_TLDS.index(tld.lower())
    except ValueError:
        return len(SUPPORTED_TLDS)


def get_rdap_endpoints() -> dict[str, str]:
    """Mapping of supported TLD to registry RDAP endpoint."""
    return {info.tld: info.rdap_endpoint for info in SUPPORTED}
