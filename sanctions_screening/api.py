"""FastAPI application for the Sanctions Screening API."""

from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import structlog

from .config import Settings, get_settings
from .exceptions import InvalidQueryError
from .models import ScreeningResult
from .services import SanctionsScreener, build_query
from .sources import build_sources, create_http_client, provider_status

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Sanctions Screening API",
    description="""
    Screen individuals, companies, vessels and aircraft against multiple
    sanctions and watchlist sources in one call.

    ## Features
    - Concurrent screening across providers with per-source timeouts
    - Fuzzy name matching and cross-source deduplication
    - Consolidated risk tier with recommended actions
    - Per-source outcome reporting (success / error / timeout)
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============ Request/Response Models ============

class ScreenRequest(BaseModel):
    name: str = Field(..., description="Name of the entity to screen")
    entity_type: str = Field(
        default="INDIVIDUAL",
        description="INDIVIDUAL, CORPORATE, VESSEL or AIRCRAFT"
    )
    address: Optional[str] = None
    country: Optional[str] = None
    date_of_birth: Optional[str] = None
    nationality: Optional[str] = None


class BatchScreenRequest(BaseModel):
    entities: list[ScreenRequest] = Field(..., max_length=1000)


class FindingResponse(BaseModel):
    identity_key: str
    representative_name: str
    best_score: float
    contributing_sources: list[str]
    aliases: list[str] = []


class SourceOutcomeResponse(BaseModel):
    status: str
    match_count: int
    error_detail: Optional[str] = None


class ScreenResponse(BaseModel):
    request_id: str
    entity_name: str
    matches_found: bool
    findings: list[FindingResponse] = []
    risk_level: str
    recommendations: list[str] = []
    source_outcomes: dict[str, SourceOutcomeResponse] = {}
    timestamp: datetime


def to_response(result: ScreeningResult) -> ScreenResponse:
    return ScreenResponse(
        request_id=result.request_id,
        entity_name=result.entity_name,
        matches_found=result.matches_found,
        findings=[
            FindingResponse(
                identity_key=f.identity_key,
                representative_name=f.representative_name,
                best_score=f.best_score,
                contributing_sources=sorted(f.contributing_sources),
                aliases=sorted(f.aliases)
            )
            for f in result.findings
        ],
        risk_level=result.risk_level.value,
        recommendations=list(result.recommendations),
        source_outcomes={
            source_id: SourceOutcomeResponse(
                status=outcome.status.value,
                match_count=outcome.match_count,
                error_detail=outcome.error_detail
            )
            for source_id, outcome in result.source_outcomes.items()
        },
        timestamp=result.timestamp
    )


def get_screener(request: Request) -> SanctionsScreener:
    """Screener built at startup."""
    return request.app.state.screener


# ============ Startup/Shutdown ============

@app.on_event("startup")
async def startup():
    """Initialize services."""
    logger.info("Sanctions Screening API starting...")

    settings = get_settings()
    app.state.http_client = create_http_client(settings)
    sources = build_sources(settings, app.state.http_client)
    app.state.screener = SanctionsScreener.from_settings(sources, settings)

    logger.info("Sanctions Screening API started", sources=app.state.screener.source_ids)


@app.on_event("shutdown")
async def shutdown():
    """Cleanup."""
    client = getattr(app.state, "http_client", None)
    if client is not None:
        await client.aclose()
    logger.info("Sanctions Screening API stopped")


# ============ Health & Info ============

@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check with the configuration state of each provider."""
    providers = provider_status(settings)
    return {
        "status": "healthy",
        "mode": "providers" if "configured" in providers.values() else "demo",
        "providers": providers,
        "timestamp": datetime.now(timezone.utc)
    }


@app.get("/v1/info")
async def api_info(
    screener: SanctionsScreener = Depends(get_screener),
    settings: Settings = Depends(get_settings)
):
    """API information and configured sources."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "sources": screener.source_ids,
        "per_source_timeout": screener.per_source_timeout,
        "thresholds": _thresholds(screener)
    }


@app.get("/v1/thresholds")
async def get_thresholds(screener: SanctionsScreener = Depends(get_screener)):
    """Match admission and risk tier thresholds."""
    return _thresholds(screener)


def _thresholds(screener: SanctionsScreener) -> dict:
    return {
        "admission": screener.admission_threshold,
        "medium": screener.thresholds.medium,
        "high": screener.thresholds.high,
        "critical": screener.thresholds.critical
    }


# ============ Screening Endpoints ============

@app.post("/v1/screen", response_model=ScreenResponse)
async def screen_entity(
    request: ScreenRequest,
    screener: SanctionsScreener = Depends(get_screener)
):
    """
    Screen an entity against all configured sanctions sources.

    Source failures do not fail the request; inspect ``source_outcomes`` to
    tell "no matches" apart from "no source could be queried".
    """
    try:
        query = build_query(**request.model_dump())
        result = await screener.screen(query)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return to_response(result)


@app.post("/v1/batch-screen")
async def batch_screen(
    request: BatchScreenRequest,
    screener: SanctionsScreener = Depends(get_screener),
    settings: Settings = Depends(get_settings)
):
    """Screen multiple entities in one call."""
    try:
        queries = [build_query(**entity.model_dump()) for entity in request.entities]
        results = await screener.screen_batch(queries, settings.batch_max_concurrent)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "total": len(results),
        "matches_count": len([r for r in results if r.matches_found]),
        "results": [
            {
                "request_id": r.request_id,
                "entity_name": r.entity_name,
                "matches_found": r.matches_found,
                "risk_level": r.risk_level.value,
                "findings": len(r.findings)
            }
            for r in results
        ]
    }


def create_app() -> FastAPI:
    """Factory function for creating the app."""
    return app
