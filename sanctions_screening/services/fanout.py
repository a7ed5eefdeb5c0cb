"""Concurrent dispatch of a query to every configured source."""

import asyncio
from typing import Any, Sequence

import structlog

from ..exceptions import SourceError
from ..models import EntityQuery, MatchCandidate, SourceOutcome, SourceStatus
from ..sources.base import SourceGateway

logger = structlog.get_logger()

DEFAULT_PER_SOURCE_TIMEOUT = 10.0


def _collect_candidates(source_id: str, returned: Any) -> list[MatchCandidate]:
    """Keep the MatchCandidate items of a source's return value.

    Anything other than a list or tuple is a failed call. Stray items in an
    otherwise valid list are dropped.
    """
    if not isinstance(returned, (list, tuple)):
        raise SourceError(
            source_id,
            f"returned {type(returned).__name__}, expected a list of candidates"
        )

    candidates = []
    for item in returned:
        if isinstance(item, MatchCandidate):
            candidates.append(item)
        else:
            logger.warning(
                "Dropping non-candidate result",
                source=source_id,
                item_type=type(item).__name__
            )
    return candidates


async def _call(source: SourceGateway, query: EntityQuery) -> Any:
    return await source.screen(query)


async def _screen_one(
    query: EntityQuery,
    source: SourceGateway,
    timeout: float
) -> tuple[list[MatchCandidate], SourceOutcome]:
    """Run one source call to a terminal state. Never raises for source failures.

    Only the per-source deadline maps to ``timeout``; a TimeoutError raised
    inside the source call is an ``error`` like any other exception.
    """

    task = asyncio.ensure_future(_call(source, query))
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            task.cancel()
            logger.warning(
                "Source timed out",
                source=source.source_id,
                timeout=timeout
            )
            return [], SourceOutcome(
                status=SourceStatus.TIMEOUT,
                error_detail=f"no response within {timeout}s"
            )

        candidates = _collect_candidates(source.source_id, task.result())
    except Exception as e:
        logger.error(
            "Source screening failed",
            source=source.source_id,
            error=str(e)
        )
        return [], SourceOutcome(
            status=SourceStatus.ERROR,
            error_detail=str(e) or type(e).__name__
        )
    finally:
        if not task.done():
            task.cancel()

    return candidates, SourceOutcome(
        status=SourceStatus.SUCCESS,
        match_count=len(candidates)
    )


async def screen_all(
    query: EntityQuery,
    sources: Sequence[SourceGateway],
    per_source_timeout: float = DEFAULT_PER_SOURCE_TIMEOUT
) -> tuple[dict[str, list[MatchCandidate]], dict[str, SourceOutcome]]:
    """Query all sources concurrently and wait for every one to finish.

    Each source is bounded by its own timeout; a timeout or error on one
    source is recorded in its outcome and does not affect the others.

    Returns:
        (candidates keyed by source id, outcome keyed by source id)
    """

    results = await asyncio.gather(*(
        _screen_one(query, source, per_source_timeout)
        for source in sources
    ))

    candidates_by_source: dict[str, list[MatchCandidate]] = {}
    outcomes: dict[str, SourceOutcome] = {}

    for source, (candidates, outcome) in zip(sources, results):
        candidates_by_source[source.source_id] = candidates
        outcomes[source.source_id] = outcome

    return candidates_by_source, outcomes
