"""Name normalization and similarity scoring."""

import re
from typing import Optional

from ..models import EntityQuery, EntityType, MatchCandidate

DEFAULT_ADMISSION_THRESHOLD = 0.6

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(raw: Optional[str]) -> str:
    """Lower-case and drop everything outside [a-z0-9]."""
    if not raw:
        return ""
    return _NON_ALNUM.sub("", raw.lower())


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            ))
        previous = current
    return previous[-1]


def similarity(a: Optional[str], b: Optional[str]) -> float:
    """Normalized Levenshtein similarity of two names, in [0, 1]."""
    norm_a = normalize(a)
    norm_b = normalize(b)

    if norm_a == norm_b:
        return 1.0

    distance = levenshtein_distance(norm_a, norm_b)
    max_length = max(len(norm_a), len(norm_b))
    return min(1.0, max(0.0, 1.0 - distance / max_length))


def effective_score(query: EntityQuery, candidate: MatchCandidate) -> float:
    """Score from the source when it provides one, otherwise name similarity."""
    if candidate.source_score is not None:
        return candidate.source_score
    return similarity(query.name, candidate.name)


def is_admitted(score: float, threshold: float = DEFAULT_ADMISSION_THRESHOLD) -> bool:
    return score > threshold


def best_name_similarity(query_name: str, name: str, aliases=()) -> float:
    """Highest similarity of the query against a name and its aliases."""
    scores = [similarity(query_name, name)]
    scores.extend(similarity(query_name, alias) for alias in aliases)
    return max(scores)


# Weights for the attribute-based score used by in-memory watchlists
ATTRIBUTE_WEIGHTS = {
    "name": 0.4,
    "alias": 0.2,
    "entity_type": 0.2,
    "jurisdiction": 0.1,
    "date_of_birth": 0.1,
    "nationality": 0.1,
}

GLOBAL_JURISDICTION = "Global"


def attribute_score(
    query: EntityQuery,
    name: str,
    entity_type: str = "",
    jurisdiction: str = "",
    aliases=(),
    date_of_birth: Optional[str] = None,
    nationality: Optional[str] = None,
) -> float:
    """Weighted score of a watchlist entry across name and identifying attributes.

    Name always counts. The other factors only count when they can be
    compared and agree, so the result is the weighted mean over the factors
    that contributed.
    """
    score = similarity(query.name, name) * ATTRIBUTE_WEIGHTS["name"]
    weight = ATTRIBUTE_WEIGHTS["name"]

    if aliases:
        alias_score = max(similarity(query.name, alias) for alias in aliases)
        score += alias_score * ATTRIBUTE_WEIGHTS["alias"]
        weight += ATTRIBUTE_WEIGHTS["alias"]

    matched = []
    if entity_type and query.entity_type.value == entity_type:
        matched.append("entity_type")

    if query.country and jurisdiction:
        if query.country == jurisdiction or jurisdiction == GLOBAL_JURISDICTION:
            matched.append("jurisdiction")

    is_individual = query.entity_type == EntityType.INDIVIDUAL
    if is_individual and query.date_of_birth and date_of_birth == query.date_of_birth:
        matched.append("date_of_birth")
    if is_individual and query.nationality and nationality == query.nationality:
        matched.append("nationality")

    for factor in matched:
        score += ATTRIBUTE_WEIGHTS[factor]
        weight += ATTRIBUTE_WEIGHTS[factor]

    return min(1.0, score / weight) if weight > 0 else 0.0
