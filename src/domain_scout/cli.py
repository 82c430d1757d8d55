"""
Command-line interface for the domain scout system.

Commands:
- search: Generate, check and rank candidates for a name
- check: Check a single domain for availability
- info: Registration info for a taken domain
- demand: Search demand for a keyword
- prices: Registrar prices for a domain (offline table or live APIs)
- refresh-prices: Run the offline price refresh job
- serve: Run the HTTP API with uvicorn

Exit codes: 0 success / available, 1 taken or failure, 2 input error.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from . import __version__
from .api import create_app
from .audit_logger import AuditLogger
from .config import SystemConfig, load_config_from_env, load_config_from_file
from .domain_validator import DomainValidator
from .enums import Availability
from .exceptions import DomainScoutError, ValidationError
from .orchestrator import SearchOrchestrator
from .price_refresh import PriceRefreshJob
from .pricing import PriceTable, RegistrarPriceClient

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2


def load_config(args: argparse.Namespace) -> SystemConfig:
    """Config file when given, otherwise the environment (and .env)."""
    if getattr(args, "config", None):
        return load_config_from_file(Path(args.config))
    return load_config_from_env()


def create_logger(config: SystemConfig, verbose: bool) -> Optional[AuditLogger]:
    if not verbose:
        return None
    return AuditLogger(
        output_format=config.logging.output_format,
        level="debug" if config.logging.level == "info" else config.logging.level,
    )


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def run_search(raw: str, config: SystemConfig, as_json: bool, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    async with SearchOrchestrator.from_config(config, logger=logger) as orchestrator:
        candidates = await orchestrator.search(raw)

    if as_json:
        print_json([c.to_dict() for c in candidates])
    else:
        for c in candidates:
            if c.availability == Availability.AVAILABLE:
                print(
                    f"  {c.domain:<24} available  score {c.brandability_score:>3}  "
                    f"value {c.to_dict()['estimatedValue']:>8}  demand {c.search_demand.value}"
                )
            else:
                line = f"  {c.domain:<24} taken"
                if c.domain_info is not None and c.domain_info.age is not None:
                    line += f"     registered {c.domain_info.age}y ago"
                print(line)

    available = sum(1 for c in candidates if c.availability == Availability.AVAILABLE)
    if not as_json:
        print(f"\nSummary: {available}/{len(candidates)} domain(s) available")
    return EXIT_OK if available > 0 else EXIT_FAILURE


async def run_check(domain: str, config: SystemConfig, as_json: bool, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    async with SearchOrchestrator.from_config(config, logger=logger) as orchestrator:
        result = await orchestrator.resolver.check(domain)

    if as_json:
        print_json(result.to_dict())
    else:
        status = "available" if result.available else "taken"
        print(f"{result.domain}: {status} ({result.message})")
    return EXIT_OK if result.available else EXIT_FAILURE


async def run_info(domain: str, config: SystemConfig, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    async with SearchOrchestrator.from_config(config, logger=logger) as orchestrator:
        info = await orchestrator.enricher.fetch(domain)

    if info is None:
        print(f"Domain information not available for {domain}", file=sys.stderr)
        return EXIT_FAILURE
    print_json({"domain": domain, **info.to_dict()})
    return EXIT_OK


async def run_demand(keyword: str, config: SystemConfig, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    async with SearchOrchestrator.from_config(config, logger=logger) as orchestrator:
        result = await orchestrator.demand_estimator.estimate(keyword)
    print_json(result.to_dict())
    return EXIT_OK


async def run_live_prices(domain: str, config: SystemConfig, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    async with RegistrarPriceClient(config.registrars, logger=logger) as client:
        snapshot = await client.get_snapshot(domain)
    print_json(snapshot.to_dict())
    return EXIT_OK if snapshot.prices else EXIT_FAILURE


async def run_refresh(config: SystemConfig, verbose: bool) -> int:
    logger = create_logger(config, verbose)
    job = PriceRefreshJob(config.pricing, logger=logger)
    try:
        report = await job.run()
    finally:
        await job.close()
    print_json(report.to_dict())
    return EXIT_OK if report.updated else EXIT_FAILURE


def cmd_search(args: argparse.Namespace) -> int:
    """Handle the 'search' command."""
    return asyncio.run(run_search(args.name, load_config(args), args.json, args.verbose))


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    domain = DomainValidator().canonicalize(args.domain)
    return asyncio.run(run_check(domain, load_config(args), args.json, args.verbose))


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    domain = DomainValidator().canonicalize(args.domain)
    return asyncio.run(run_info(domain, load_config(args), args.verbose))


def cmd_demand(args: argparse.Namespace) -> int:
    """Handle the 'demand' command."""
    return asyncio.run(run_demand(args.keyword, load_config(args), args.verbose))


def cmd_prices(args: argparse.Namespace) -> int:
    """Handle the 'prices' command."""
    domain = DomainValidator().canonicalize(args.domain)
    config = load_config(args)
    if args.live:
        return asyncio.run(run_live_prices(domain, config, args.verbose))

    try:
        table = PriceTable.load(config.pricing.price_file_path)
    except DomainScoutError as e:
        print(f"Warning: {e.message}; showing default prices", file=sys.stderr)
        table = PriceTable()
    print_json({
        "domain": domain,
        "prices": [row.to_dict() for row in table.get_rows(domain)],
        "lastUpdated": table.last_updated,
    })
    return EXIT_OK


def cmd_refresh_prices(args: argparse.Namespace) -> int:
    """Handle the 'refresh-prices' command."""
    return asyncio.run(run_refresh(load_config(args), args.verbose))


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command."""
    config = load_config(args)
    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return EXIT_OK


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to JSON configuration file (default: environment / .env)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Write structured log output to stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-scout",
        description="Domain name research: availability, value, demand and pricing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser(
        "search",
        help="Check a name across all supported TLDs and rank the results",
    )
    search_parser.add_argument("name", help="Name or domain to search (e.g., tapr)")
    search_parser.add_argument("--json", action="store_true", help="Print results as JSON")
    _add_common_arguments(search_parser)
    search_parser.set_defaults(func=cmd_search)

    check_parser = subparsers.add_parser(
        "check",
        help="Check a single domain for availability",
    )
    check_parser.add_argument("domain", help="Domain to check (e.g., example.com)")
    check_parser.add_argument("--json", action="store_true", help="Print result as JSON")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    info_parser = subparsers.add_parser(
        "info",
        help="Show registration info for a taken domain",
    )
    info_parser.add_argument("domain", help="Domain to look up")
    _add_common_arguments(info_parser)
    info_parser.set_defaults(func=cmd_info)

    demand_parser = subparsers.add_parser(
        "demand",
        help="Estimate search demand for a keyword",
    )
    demand_parser.add_argument("keyword", help="Keyword to estimate")
    _add_common_arguments(demand_parser)
    demand_parser.set_defaults(func=cmd_demand)

    prices_parser = subparsers.add_parser(
        "prices",
        help="Show registrar prices for a domain",
    )
    prices_parser.add_argument("domain", help="Domain to price")
    prices_parser.add_argument(
        "--live",
        action="store_true",
        help="Query registrar APIs instead of the offline price table",
    )
    _add_common_arguments(prices_parser)
    prices_parser.set_defaults(func=cmd_prices)

    refresh_parser = subparsers.add_parser(
        "refresh-prices",
        help="Refresh the offline price table from registrar pages",
    )
    _add_common_arguments(refresh_parser)
    refresh_parser.set_defaults(func=cmd_refresh_prices)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
    )
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    _add_common_arguments(serve_parser)
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        return args.func(args)
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except DomainScoutError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
