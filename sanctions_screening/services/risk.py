"""Risk classification of consolidated findings."""

from dataclasses import dataclass
from typing import Sequence

from ..config import Settings
from ..models import Finding, RiskLevel


@dataclass(frozen=True)
class RiskThresholds:
    """Lower bounds (inclusive) of each risk tier on the best match score."""
    medium: float = 0.7
    high: float = 0.8
    critical: float = 0.9

    @classmethod
    def from_settings(cls, settings: Settings) -> "RiskThresholds":
        return cls(
            medium=settings.medium_threshold,
            high=settings.high_threshold,
            critical=settings.critical_threshold
        )


DEFAULT_THRESHOLDS = RiskThresholds()

# Downstream case handling matches on these strings; keep them verbatim.
RECOMMENDATIONS: dict[RiskLevel, tuple[str, ...]] = {
    RiskLevel.CRITICAL: (
        "IMMEDIATE ACTION REQUIRED: Block transaction and escalate to compliance team",
        "Conduct enhanced due diligence review",
        "Consider filing Suspicious Activity Report (SAR)",
        "Notify senior management and legal team",
    ),
    RiskLevel.HIGH: (
        "Block transaction pending manual review",
        "Conduct additional verification",
        "Document decision rationale",
        "Escalate to compliance team for review",
    ),
    RiskLevel.MEDIUM: (
        "Flag for manual review",
        "Request additional documentation",
        "Monitor for similar patterns",
        "Conduct enhanced due diligence",
    ),
    RiskLevel.LOW: (
        "Proceed with standard due diligence",
        "Monitor for any changes in sanctions status",
        "Maintain regular screening schedule",
    ),
}


def score_to_level(score: float, thresholds: RiskThresholds = DEFAULT_THRESHOLDS) -> RiskLevel:
    """Convert a match score to a risk level."""
    if score >= thresholds.critical:
        return RiskLevel.CRITICAL
    elif score >= thresholds.high:
        return RiskLevel.HIGH
    elif score >= thresholds.medium:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def classify(
    findings: Sequence[Finding],
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS
) -> tuple[RiskLevel, list[str]]:
    """Risk level from the strongest finding, plus the tier's recommendations."""

    if not findings:
        level = RiskLevel.LOW
    else:
        level = score_to_level(max(f.best_score for f in findings), thresholds)

    return level, list(RECOMMENDATIONS[level])
