"""Sanctions list sources."""

import httpx
import structlog

from ..config import Settings
from .base import HTTPSource, SourceGateway
from .providers import (
    EUSanctionsSource,
    ListFeedSource,
    MoovWatchmanSource,
    OFACApiSource,
    UKSanctionsSource,
    UNSanctionsSource,
)
from .static import DEMO_WATCHLISTS, StaticListSource, WatchlistEntry, demo_sources

logger = structlog.get_logger()


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client shared by all provider adapters."""
    return httpx.AsyncClient(
        timeout=settings.http_timeout,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/json, application/xml, text/xml"
        }
    )


def provider_status(settings: Settings) -> dict[str, str]:
    """``configured`` or ``not_configured`` for each provider.

    Moov needs both halves of its key pair.
    """
    credentials = {
        "moov": settings.moov_public_key and settings.moov_private_key,
        "ofac": settings.ofac_api_key,
        "eu": settings.eu_sanctions_api_key,
        "un": settings.un_sanctions_api_key,
        "uk": settings.uk_sanctions_api_key,
    }
    return {
        provider: "configured" if credential else "not_configured"
        for provider, credential in credentials.items()
    }


def build_sources(settings: Settings, client: httpx.AsyncClient) -> list[SourceGateway]:
    """Provider sources when any provider credential is configured.

    Without credentials, falls back to the in-memory demo lists.
    """

    status = provider_status(settings)
    has_moov = status["moov"] == "configured"
    threshold = settings.admission_threshold

    if "configured" not in status.values():
        logger.warning("No sanctions providers configured, using demo watchlists")
        return demo_sources(threshold)

    sources: list[SourceGateway] = []
    if has_moov:
        sources.append(MoovWatchmanSource(
            settings.moov_watchman_endpoint,
            client,
            settings.moov_public_key,
            settings.moov_private_key
        ))
    sources.extend([
        OFACApiSource(settings.ofac_api_endpoint, client, settings.ofac_api_key),
        EUSanctionsSource(settings.eu_sanctions_endpoint, client, settings.eu_sanctions_api_key, threshold),
        UNSanctionsSource(settings.un_sanctions_endpoint, client, settings.un_sanctions_api_key, threshold),
        UKSanctionsSource(settings.uk_sanctions_endpoint, client, settings.uk_sanctions_api_key, threshold),
    ])

    logger.info(
        "Sanctions sources configured",
        sources=[source.source_id for source in sources]
    )
    return sources


__all__ = [
    "SourceGateway",
    "HTTPSource",
    "ListFeedSource",
    "OFACApiSource",
    "MoovWatchmanSource",
    "EUSanctionsSource",
    "UNSanctionsSource",
    "UKSanctionsSource",
    "StaticListSource",
    "WatchlistEntry",
    "DEMO_WATCHLISTS",
    "demo_sources",
    "create_http_client",
    "build_sources",
    "provider_status",
]
