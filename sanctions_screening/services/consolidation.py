"""Merging of candidates from all sources into findings."""

from dataclasses import dataclass, field
from typing import Mapping

import structlog

from ..models import EntityQuery, Finding, MatchCandidate
from .matching import DEFAULT_ADMISSION_THRESHOLD, effective_score, is_admitted, normalize

logger = structlog.get_logger()


def identity_key(candidate: MatchCandidate) -> str:
    """Key under which candidates are considered the same entity."""
    return f"{normalize(candidate.name)}|{candidate.type}|{normalize(candidate.jurisdiction)}"


def _rank(score: float, candidate: MatchCandidate) -> tuple:
    # Highest score first, then shortest source id; the rest keeps it total
    return (-score, len(candidate.source_id), candidate.source_id, candidate.name)


@dataclass
class _Group:
    best_score: float
    best_rank: tuple
    representative_name: str
    sources: set[str] = field(default_factory=set)
    aliases: set[str] = field(default_factory=set)


def consolidate(
    candidates_by_source: Mapping[str, list[MatchCandidate]],
    query: EntityQuery,
    admission_threshold: float = DEFAULT_ADMISSION_THRESHOLD
) -> list[Finding]:
    """Group admitted candidates by identity key into one finding each.

    The result does not depend on the iteration order of sources or
    candidates. Findings are returned by best score descending, then
    representative name ascending.
    """

    groups: dict[str, _Group] = {}
    dropped = 0

    for source_id, candidates in candidates_by_source.items():
        for candidate in candidates:
            if not normalize(candidate.name):
                logger.warning(
                    "Dropping candidate without a usable name",
                    source=source_id,
                    name=candidate.name
                )
                dropped += 1
                continue

            score = effective_score(query, candidate)
            if not is_admitted(score, admission_threshold):
                dropped += 1
                continue

            key = identity_key(candidate)
            rank = _rank(score, candidate)
            group = groups.get(key)

            if group is None:
                group = groups[key] = _Group(
                    best_score=score,
                    best_rank=rank,
                    representative_name=candidate.name
                )
            elif rank < group.best_rank:
                group.best_score = score
                group.best_rank = rank
                group.representative_name = candidate.name

            group.sources.add(candidate.source_id)
            group.aliases.update(candidate.aliases)

    findings = [
        Finding(
            identity_key=key,
            best_score=group.best_score,
            contributing_sources=frozenset(group.sources),
            aliases=frozenset(group.aliases),
            representative_name=group.representative_name
        )
        for key, group in groups.items()
    ]

    logger.debug(
        "Consolidated candidates",
        findings=len(findings),
        dropped=dropped
    )

    return sorted(findings, key=lambda f: (-f.best_score, f.representative_name, f.identity_key))
