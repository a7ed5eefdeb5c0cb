"""Sanctions screening services."""

from .matching import normalize, similarity, effective_score, levenshtein_distance
from .fanout import screen_all
from .consolidation import consolidate, identity_key
from .risk import RiskThresholds, RECOMMENDATIONS, classify, score_to_level
from .screening import SanctionsScreener, build_query

__all__ = [
    "normalize",
    "similarity",
    "effective_score",
    "levenshtein_distance",
    "screen_all",
    "consolidate",
    "identity_key",
    "RiskThresholds",
    "RECOMMENDATIONS",
    "classify",
    "score_to_level",
    "SanctionsScreener",
    "build_query",
]
