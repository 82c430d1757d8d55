"""
HTTP API for the domain scout system.

FastAPI application exposing the availability, registration info, search
demand and pricing services. Input errors answer 400 with ``{error}``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .audit_logger import AuditLogger
from .config import SystemConfig, load_config_from_env
from .domain_validator import DomainValidator
from .enums import LogLevel
from .exceptions import AuthorizationError, DomainScoutError, ValidationError
from .orchestrator import SearchOrchestrator
from .price_refresh import PriceRefreshJob, authorize_refresh
from .pricing import PriceTable, RegistrarPriceClient


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_app(
    config: Optional[SystemConfig] = None,
    logger: Optional[AuditLogger] = None,
    orchestrator: Optional[SearchOrchestrator] = None,
    price_client: Optional[RegistrarPriceClient] = None,
    refresh_job: Optional[PriceRefreshJob] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: System configuration; read from the environment when omitted
        logger: Optional logger; built from the logging config when omitted
        orchestrator: Optional prebuilt orchestrator (tests inject stubs here)
        price_client: Optional live registrar price client
        refresh_job: Optional price refresh job
    """
    config = config or load_config_from_env()
    logger = logger or AuditLogger(
        output_format=config.logging.output_format,
        level=config.logging.level,
    )
    orchestrator = orchestrator or SearchOrchestrator.from_config(config, logger=logger)
    price_client = price_client or RegistrarPriceClient(config.registrars, logger=logger)
    refresh_job = refresh_job or PriceRefreshJob(config.pricing, logger=logger)
    validator = DomainValidator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await orchestrator.close()
        await price_client.close()
        await refresh_job.close()

    app = FastAPI(
        title="Domain Scout API",
        description="Domain name research: availability, value, demand and pricing",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    def canonical(domain: Optional[str]) -> str:
        if not domain or not domain.strip():
            raise ValidationError(code="empty_input", message="Domain parameter is required")
        return validator.canonicalize(domain)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request, exc: ValidationError):
        return _error(400, exc.message)

    @app.get("/api/check")
    async def check(domain: Optional[str] = Query(None)):
        result = await orchestrator.resolver.check(canonical(domain))
        return result.to_dict()

    @app.get("/api/domainInfo")
    async def domain_info(domain: Optional[str] = Query(None)):
        name = canonical(domain)
        info = None
        if orchestrator.enricher is not None:
            info = await orchestrator.enricher.fetch(name)
        if info is None:
            return JSONResponse(
                status_code=404,
                content={
                    "domain": name,
                    "error": "Domain information not available",
                    "message": "Unable to fetch domain details",
                },
            )
        return {"domain": name, **info.to_dict()}

    @app.get("/api/searchDemand")
    async def search_demand(keyword: Optional[str] = Query(None)):
        if not keyword or not keyword.strip():
            return _error(400, "Keyword parameter is required")
        result = await orchestrator.demand_estimator.estimate(keyword)
        return result.to_dict()

    @app.get("/api/search")
    async def search(q: Optional[str] = Query(None)):
        candidates = await orchestrator.session().search(q or "")
        return {"candidates": [c.to_dict() for c in candidates]}

    @app.get("/api/domain-prices")
    async def domain_prices(domain: Optional[str] = Query(None)):
        name = canonical(domain)
        snapshot = await price_client.get_snapshot(name)
        return snapshot.to_dict()

    @app.get("/api/registrar-prices")
    async def registrar_prices(domain: Optional[str] = Query(None)):
        name = canonical(domain)
        try:
            table = PriceTable.load(config.pricing.price_file_path)
        except DomainScoutError as e:
            logger.log_error("API", "Price table unavailable, using defaults", e)
            table = PriceTable()
        return {
            "domain": name,
            "prices": [row.to_dict() for row in table.get_rows(name)],
            "lastUpdated": table.last_updated,
        }

    async def update_prices(authorization: Optional[str]):
        try:
            authorize_refresh(authorization, config.pricing.cron_secret)
        except AuthorizationError as e:
            logger.log(
                LogLevel.WARN, "API", "Rejected price refresh request", {"reason": e.code}
            )
            return _error(401, "Unauthorized")

        try:
            await refresh_job.run()
        except DomainScoutError as e:
            logger.log_error("API", "Price refresh failed", e)
            return _error(500, "Failed to update prices", details=e.message)

        return {
            "success": True,
            "message": "Domain prices updated successfully",
            "timestamp": _utc_now_iso(),
        }

    @app.get("/api/cron/update-prices")
    async def update_prices_scheduled(authorization: Optional[str] = Header(None)):
        return await update_prices(authorization)

    @app.post("/api/cron/update-prices")
    async def update_prices_manual(authorization: Optional[str] = Header(None)):
        return await update_prices(authorization)

    return app
