"""
Configuration dataclasses for the domain scout system.

This module defines all configuration structures used throughout the system,
including DNS resolution, trends lookups, RDAP enrichment, the search demand
cache, registrar credentials, price table location and logging. Configuration
can be built from defaults, a JSON file, or the process environment (with
``.env`` support via python-dotenv).
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ValidationError


DEFAULT_PRICE_FILE = Path(__file__).resolve().parent / "data" / "domain_prices.json"


@dataclass
class ResolverConfig:
    """DNS availability resolver configuration."""

    timeout_seconds: float = 5.0
    nameservers: list[str] = field(default_factory=list)
    parking_addresses: list[str] = field(
        default_factory=lambda: ["143.244.220.150", "0.0.0.0", "127.0.0.1"]
    )
    random_name_min_alpha_run: int = 6


@dataclass
class TrendsConfig:
    """Search trends lookup configuration."""

    endpoint: str = "https://trends.google.com/trends/api/widgetdata/multiline"
    window: str = "2024-01-01 2025-01-31"
    timeout_seconds: float = 8.0
    enabled: bool = True


@dataclass
class RDAPConfig:
    """RDAP registration-data lookup configuration."""

    bootstrap_endpoint: str = "https://rdap.org"
    timeout_seconds: float = 10.0
    use_registry_endpoints: bool = False


@dataclass
class CacheConfig:
    """Search demand cache configuration."""

    file_path: Optional[Path] = None
    hmac_secret: str = "default-secret-change-me"
    ttl_seconds: float = 24 * 60 * 60


@dataclass
class NamecheapConfig:
    """Namecheap API credentials."""

    api_user: str
    api_key: str
    client_ip: str
    endpoint: str = "https://api.sandbox.namecheap.com/xml.response"


@dataclass
class GoDaddyConfig:
    """GoDaddy API credentials."""

    api_key: str
    api_secret: str
    endpoint: str = "https://api.godaddy.com/v1/domains/available"


@dataclass
class PorkbunConfig:
    """Porkbun API credentials."""

    api_key: str
    secret_key: str
    endpoint: str = "https://porkbun.com/api/json/v3/domain/available"


@dataclass
class RegistrarConfig:
    """Live registrar API configuration; unset registrars are skipped."""

    namecheap: Optional[NamecheapConfig] = None
    godaddy: Optional[GoDaddyConfig] = None
    porkbun: Optional[PorkbunConfig] = None
    timeout_seconds: float = 10.0


@dataclass
class PricingConfig:
    """Static price table and refresh job configuration."""

    price_file_path: Path = DEFAULT_PRICE_FILE
    cron_secret: Optional[str] = None
    refresh_tlds: list[str] = field(default_factory=lambda: ["com", "io", "app", "ai"])
    request_delay_seconds: float = 5.0
    request_timeout_seconds: float = 30.0
    max_retries: int = 2


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    trends: TrendsConfig = field(default_factory=TrendsConfig)
    rdap: RDAPConfig = field(default_factory=RDAPConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    registrars: RegistrarConfig = field(default_factory=RegistrarConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    demand_timeout_seconds: float = 8.0
    info_timeout_seconds: float = 10.0


def create_default_config() -> SystemConfig:
    """Create a configuration with all defaults and no registrar credentials."""
    return SystemConfig()


def _float_env(env: dict, name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValidationError(
            code="invalid_config",
            message=f"Environment variable {name} must be a number",
            details={"name": name, "value": value},
        )


def load_config_from_env(
    env: Optional[dict] = None,
    dotenv_path: Optional[Path] = None,
) -> SystemConfig:
    """
    Build a configuration from environment variables.

    When ``env`` is not given, a ``.env`` file is loaded into the process
    environment first (existing variables win) and ``os.environ`` is read.

    Args:
        env: Optional mapping to read instead of the process environment
        dotenv_path: Optional explicit path of the .env file

    Returns:
        SystemConfig populated from the environment
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path)
        env = dict(os.environ)

    config = create_default_config()

    config.resolver.timeout_seconds = _float_env(
        env, "DNS_TIMEOUT", config.resolver.timeout_seconds
    )
    nameservers = env.get("DNS_NAMESERVERS", "").strip()
    if nameservers:
        config.resolver.nameservers = [
            ns.strip() for ns in nameservers.split(",") if ns.strip()
        ]

    if env.get("TRENDS_ENABLED", "1") == "0":
        config.trends.enabled = False

    if env.get("DEMAND_CACHE_FILE"):
        config.cache.file_path = Path(env["DEMAND_CACHE_FILE"])
    if env.get("CACHE_HMAC_SECRET"):
        config.cache.hmac_secret = env["CACHE_HMAC_SECRET"]

    if env.get("NAMECHEAP_API_USER") and env.get("NAMECHEAP_API_KEY") and env.get("NAMECHEAP_CLIENT_IP"):
        config.registrars.namecheap = NamecheapConfig(
            api_user=env["NAMECHEAP_API_USER"],
            api_key=env["NAMECHEAP_API_KEY"],
            client_ip=env["NAMECHEAP_CLIENT_IP"],
        )
    if env.get("GODADDY_API_KEY") and env.get("GODADDY_API_SECRET"):
        config.registrars.godaddy = GoDaddyConfig(
            api_key=env["GODADDY_API_KEY"],
            api_secret=env["GODADDY_API_SECRET"],
        )
    if env.get("PORKBUN_API_KEY") and env.get("PORKBUN_SECRET_KEY"):
        config.registrars.porkbun = PorkbunConfig(
            api_key=env["PORKBUN_API_KEY"],
            secret_key=env["PORKBUN_SECRET_KEY"],
        )

    if env.get("PRICE_FILE"):
        config.pricing.price_file_path = Path(env["PRICE_FILE"])
    if env.get("CRON_SECRET"):
        config.pricing.cron_secret = env["CRON_SECRET"]

    config.logging.level = (env.get("LOG_LEVEL") or config.logging.level).lower()
    config.logging.output_format = (
        env.get("LOG_FORMAT") or config.logging.output_format
    ).lower()

    return config


def load_config_from_file(config_path: Path) -> SystemConfig:
    """
    Load configuration from a JSON file.

    Missing sections fall back to their defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig built from the file

    Raises:
        ValidationError: If the file is missing or not valid JSON
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ValidationError(
            code="config_not_found",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": str(config_path)},
        )
    except json.JSONDecodeError as e:
        raise ValidationError(
            code="invalid_config",
            message=f"Configuration file is not valid JSON: {e}",
            details={"config_path": str(config_path)},
        )

    config = create_default_config()

    resolver_data = data.get("resolver", {})
    config.resolver = ResolverConfig(
        timeout_seconds=resolver_data.get("timeout_seconds", 5.0),
        nameservers=resolver_data.get("nameservers", []),
        parking_addresses=resolver_data.get(
            "parking_addresses", config.resolver.parking_addresses
        ),
        random_name_min_alpha_run=resolver_data.get("random_name_min_alpha_run", 6),
    )

    trends_data = data.get("trends", {})
    config.trends = TrendsConfig(
        endpoint=trends_data.get("endpoint", config.trends.endpoint),
        window=trends_data.get("window", config.trends.window),
        timeout_seconds=trends_data.get("timeout_seconds", 8.0),
        enabled=trends_data.get("enabled", True),
    )

    rdap_data = data.get("rdap", {})
    config.rdap = RDAPConfig(
        bootstrap_endpoint=rdap_data.get("bootstrap_endpoint", "https://rdap.org"),
        timeout_seconds=rdap_data.get("timeout_seconds", 10.0),
        use_registry_endpoints=rdap_data.get("use_registry_endpoints", False),
    )

    cache_data = data.get("cache", {})
    cache_file = cache_data.get("file_path")
    config.cache = CacheConfig(
        file_path=Path(cache_file) if cache_file else None,
        hmac_secret=cache_data.get("hmac_secret", "default-secret-change-me"),
        ttl_seconds=cache_data.get("ttl_seconds", 24 * 60 * 60),
    )

    registrar_data = data.get("registrars", {})
    namecheap_data = registrar_data.get("namecheap") or {}
    if namecheap_data.get("api_user") and namecheap_data.get("api_key"):
        config.registrars.namecheap = NamecheapConfig(
            api_user=namecheap_data["api_user"],
            api_key=namecheap_data["api_key"],
            client_ip=namecheap_data.get("client_ip", ""),
        )
    godaddy_data = registrar_data.get("godaddy") or {}
    if godaddy_data.get("api_key") and godaddy_data.get("api_secret"):
        config.registrars.godaddy = GoDaddyConfig(
            api_key=godaddy_data["api_key"],
            api_secret=godaddy_data["api_secret"],
        )
    porkbun_data = registrar_data.get("porkbun") or {}
    if porkbun_data.get("api_key") and porkbun_data.get("secret_key"):
        config.registrars.porkbun = PorkbunConfig(
            api_key=porkbun_data["api_key"],
            secret_key=porkbun_data["secret_key"],
        )

    pricing_data = data.get("pricing", {})
    price_file = pricing_data.get("price_file_path")
    config.pricing = PricingConfig(
        price_file_path=Path(price_file) if price_file else DEFAULT_PRICE_FILE,
        cron_secret=pricing_data.get("cron_secret"),
        refresh_tlds=pricing_data.get("refresh_tlds", config.pricing.refresh_tlds),
        request_delay_seconds=pricing_data.get("request_delay_seconds", 5.0),
        request_timeout_seconds=pricing_data.get("request_timeout_seconds", 30.0),
        max_retries=pricing_data.get("max_retries", 2),
    )

    logging_data = data.get("logging", {})
    config.logging = LoggingConfig(
        level=logging_data.get("level", "info"),
        output_format=logging_data.get("output_format", "text"),
    )

    config.demand_timeout_seconds = data.get("demand_timeout_seconds", 8.0)
    config.info_timeout_seconds = data.get("info_timeout_seconds", 10.0)

    return config
