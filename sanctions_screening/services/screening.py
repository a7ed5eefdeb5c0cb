"""Sanctions screening service."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

import structlog

from ..config import Settings
from ..exceptions import InvalidQueryError
from ..models import EntityQuery, EntityType, ScreeningResult
from ..sources.base import SourceGateway
from .consolidation import consolidate
from .fanout import DEFAULT_PER_SOURCE_TIMEOUT, screen_all
from .matching import DEFAULT_ADMISSION_THRESHOLD, normalize
from .risk import DEFAULT_THRESHOLDS, RiskThresholds, classify

logger = structlog.get_logger()


class SanctionsScreener:
    """Screen entities against multiple sanctions sources."""

    def __init__(
        self,
        sources: Sequence[SourceGateway],
        per_source_timeout: float = DEFAULT_PER_SOURCE_TIMEOUT,
        admission_threshold: float = DEFAULT_ADMISSION_THRESHOLD,
        thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    ):
        source_ids = [source.source_id for source in sources]
        duplicates = sorted({sid for sid in source_ids if source_ids.count(sid) > 1})
        if duplicates:
            raise ValueError(f"Duplicate source ids: {', '.join(duplicates)}")

        self.sources = list(sources)
        self.per_source_timeout = per_source_timeout
        self.admission_threshold = admission_threshold
        self.thresholds = thresholds

    @classmethod
    def from_settings(
        cls,
        sources: Sequence[SourceGateway],
        settings: Settings
    ) -> "SanctionsScreener":
        return cls(
            sources,
            per_source_timeout=settings.per_source_timeout,
            admission_threshold=settings.admission_threshold,
            thresholds=RiskThresholds.from_settings(settings),
        )

    @property
    def source_ids(self) -> list[str]:
        return [source.source_id for source in self.sources]

    async def screen(self, query: EntityQuery) -> ScreeningResult:
        """Screen a single entity against all sources.

        Raises InvalidQueryError when the name is empty after normalization;
        source failures are reported in ``source_outcomes`` only.
        """

        if not normalize(query.name):
            raise InvalidQueryError("Entity name must contain at least one letter or digit")

        request_id = f"screening-{uuid.uuid4().hex}"

        logger.info(
            "Starting sanctions screening",
            request_id=request_id,
            entity_name=query.name,
            entity_type=query.entity_type.value,
            sources=len(self.sources)
        )

        candidates_by_source, outcomes = await screen_all(
            query, self.sources, self.per_source_timeout
        )

        findings = consolidate(candidates_by_source, query, self.admission_threshold)
        risk_level, recommendations = classify(findings, self.thresholds)

        result = ScreeningResult(
            request_id=request_id,
            entity_name=query.name,
            matches_found=len(findings) > 0,
            findings=tuple(findings),
            risk_level=risk_level,
            recommendations=tuple(recommendations),
            source_outcomes=outcomes,
            timestamp=datetime.now(timezone.utc)
        )

        logger.info(
            "Sanctions screening completed",
            request_id=request_id,
            entity_name=query.name,
            findings=len(findings),
            risk_level=risk_level.value,
            sources={sid: outcome.status.value for sid, outcome in outcomes.items()}
        )

        return result

    async def screen_batch(
        self,
        queries: Sequence[EntityQuery],
        max_concurrent: int = 10
    ) -> list[ScreeningResult]:
        """Screen multiple entities concurrently."""

        for query in queries:
            if not normalize(query.name):
                raise InvalidQueryError(f"Entity name {query.name!r} cannot be screened")

        semaphore = asyncio.Semaphore(max_concurrent)

        async def screen_with_semaphore(query: EntityQuery) -> ScreeningResult:
            async with semaphore:
                return await self.screen(query)

        tasks = [screen_with_semaphore(query) for query in queries]
        results = await asyncio.gather(*tasks)

        return list(results)


def build_query(
    name: str,
    entity_type: str = "INDIVIDUAL",
    address: Optional[str] = None,
    country: Optional[str] = None,
    date_of_birth: Optional[str] = None,
    nationality: Optional[str] = None,
) -> EntityQuery:
    """Build an EntityQuery from loosely typed input (API or CLI)."""
    try:
        parsed_type = EntityType(entity_type.upper())
    except (ValueError, AttributeError):
        raise InvalidQueryError(f"Invalid entity type: {entity_type}")

    return EntityQuery(
        name=name,
        entity_type=parsed_type,
        address=address,
        country=country,
        date_of_birth=date_of_birth,
        nationality=nationality,
    )
