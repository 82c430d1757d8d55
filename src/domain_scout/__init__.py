"""
Domain Scout - domain name research engine.

Generates candidate domains for a name across popular TLDs, classifies
availability conservatively from DNS, and enriches each candidate with a
brandability score, an estimated value, search demand and registration info.
"""

__version__ = "0.1.0"
__author__ = "Domain Scout Team"

from domain_scout.exceptions import (
    DomainScoutError,
    ValidationError,
    NetworkError,
    ProtocolError,
    PersistenceError,
    TamperingError,
    AuthorizationError,
)
from domain_scout.enums import (
    Availability,
    DemandLabel,
    DemandSource,
    DNSOutcome,
    LogLevel,
    ValidationErrorCode,
    RDAPErrorCode,
    RDAPStatus,
)
from domain_scout.config import (
    ResolverConfig,
    TrendsConfig,
    RDAPConfig,
    CacheConfig,
    NamecheapConfig,
    GoDaddyConfig,
    PorkbunConfig,
    RegistrarConfig,
    PricingConfig,
    LoggingConfig,
    SystemConfig,
    create_default_config,
    load_config_from_env,
    load_config_from_file,
)
from domain_scout.models import (
    Candidate,
    DomainInfo,
    DNSLookup,
    AvailabilityResult,
    SearchDemandResult,
    CacheEntry,
    RegistrarPriceRow,
    RegistrarQuote,
    PriceSnapshot,
    format_value,
)
from domain_scout.tld_registry import (
    SUPPORTED_TLDS,
    get_tld_info,
    tld_priority,
)
from domain_scout.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    normalize_base_name,
)
from domain_scout.suggestions import (
    generate_suggestions,
    suggest_from_input,
)
from domain_scout.scoring import (
    calculate_brandability_score,
    calculate_estimated_value,
    is_pronounceable,
)
from domain_scout.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_scout.decision_engine import (
    DecisionEngine,
    RandomNameHeuristic,
)
from domain_scout.dns_resolver import (
    AvailabilityResolver,
)
from domain_scout.cache_store import (
    KeyValueStore,
    InMemoryStore,
    JsonFileStore,
)
from domain_scout.search_demand import (
    SearchDemandEstimator,
    TrendsClient,
    heuristic_demand_score,
    label_for_score,
)
from domain_scout.rdap_client import (
    RDAPClient,
    RDAPResponse,
    RDAPParsedFields,
    RDAPEvent,
    RDAPError,
)
from domain_scout.domain_info import (
    DomainInfoEnricher,
    build_domain_info,
)
from domain_scout.aggregator import (
    ResultSet,
    sort_candidates,
    sort_key,
)
from domain_scout.retry_manager import (
    RetryManager,
    RetryResult,
)
from domain_scout.pricing import (
    PriceTable,
    RegistrarPriceClient,
    affiliate_link,
)
from domain_scout.price_refresh import (
    PriceRefreshJob,
    RefreshReport,
    authorize_refresh,
)
from domain_scout.orchestrator import (
    SearchOrchestrator,
)
from domain_scout.api import (
    create_app,
)
from domain_scout.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "DomainScoutError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "PersistenceError",
    "TamperingError",
    "AuthorizationError",
    # Enums
    "Availability",
    "DemandLabel",
    "DemandSource",
    "DNSOutcome",
    "LogLevel",
    "ValidationErrorCode",
    "RDAPErrorCode",
    "RDAPStatus",
    # Configuration
    "ResolverConfig",
    "TrendsConfig",
    "RDAPConfig",
    "CacheConfig",
    "NamecheapConfig",
    "GoDaddyConfig",
    "PorkbunConfig",
    "RegistrarConfig",
    "PricingConfig",
    "LoggingConfig",
    "SystemConfig",
    "create_default_config",
    "load_config_from_env",
    "load_config_from_file",
    # Models
    "Candidate",
    "DomainInfo",
    "DNSLookup",
    "AvailabilityResult",
    "SearchDemandResult",
    "CacheEntry",
    "RegistrarPriceRow",
    "RegistrarQuote",
    "PriceSnapshot",
    "format_value",
    # TLD Registry
    "SUPPORTED_TLDS",
    "get_tld_info",
    "tld_priority",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "normalize_base_name",
    # Suggestions
    "generate_suggestions",
    "suggest_from_input",
    # Scoring
    "calculate_brandability_score",
    "calculate_estimated_value",
    "is_pronounceable",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Decision Engine
    "DecisionEngine",
    "RandomNameHeuristic",
    # DNS
    "AvailabilityResolver",
    # Cache
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    # Search Demand
    "SearchDemandEstimator",
    "TrendsClient",
    "heuristic_demand_score",
    "label_for_score",
    # RDAP Client
    "RDAPClient",
    "RDAPResponse",
    "RDAPParsedFields",
    "RDAPEvent",
    "RDAPError",
    # Domain Info
    "DomainInfoEnricher",
    "build_domain_info",
    # Aggregator
    "ResultSet",
    "sort_candidates",
    "sort_key",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Pricing
    "PriceTable",
    "RegistrarPriceClient",
    "affiliate_link",
    "PriceRefreshJob",
    "RefreshReport",
    "authorize_refresh",
    # Orchestrator
    "SearchOrchestrator",
    # API / CLI
    "create_app",
    "cli_main",
    "create_parser",
]
