"""Tests for risk classification."""

import pytest

from sanctions_screening.models import Finding, RiskLevel
from sanctions_screening.services.risk import (
    RECOMMENDATIONS,
    RiskThresholds,
    classify,
    score_to_level,
)


def finding(score, name="Jon Smith"):
    return Finding(
        identity_key=f"{name.lower()}|INDIVIDUAL|us",
        best_score=score,
        contributing_sources=frozenset({"ofac"}),
        aliases=frozenset(),
        representative_name=name,
    )


def test_no_findings_is_low():
    level, recommendations = classify([])
    assert level == RiskLevel.LOW
    assert recommendations == [
        "Proceed with standard due diligence",
        "Monitor for any changes in sanctions status",
        "Maintain regular screening schedule",
    ]


@pytest.mark.parametrize("score,expected", [
    (1.0, RiskLevel.CRITICAL),
    (0.9, RiskLevel.CRITICAL),
    (0.8999, RiskLevel.HIGH),
    (0.8, RiskLevel.HIGH),
    (0.7999, RiskLevel.MEDIUM),
    (0.7, RiskLevel.MEDIUM),
    (0.6999, RiskLevel.LOW),
    (0.61, RiskLevel.LOW),
])
def test_tier_boundaries(score, expected):
    assert score_to_level(score) == expected
    assert classify([finding(score)])[0] == expected


def test_uses_maximum_score():
    level, _ = classify([finding(0.65, "A"), finding(0.93, "B"), finding(0.72, "C")])
    assert level == RiskLevel.CRITICAL


def test_critical_recommendations_verbatim():
    _, recommendations = classify([finding(0.95)])
    assert recommendations == [
        "IMMEDIATE ACTION REQUIRED: Block transaction and escalate to compliance team",
        "Conduct enhanced due diligence review",
        "Consider filing Suspicious Activity Report (SAR)",
        "Notify senior management and legal team",
    ]


def test_high_recommendations_verbatim():
    _, recommendations = classify([finding(0.85)])
    assert recommendations == [
        "Block transaction pending manual review",
        "Conduct additional verification",
        "Document decision rationale",
        "Escalate to compliance team for review",
    ]


def test_medium_recommendations_verbatim():
    _, recommendations = classify([finding(0.75)])
    assert recommendations == [
        "Flag for manual review",
        "Request additional documentation",
        "Monitor for similar patterns",
        "Conduct enhanced due diligence",
    ]


def test_recommendations_are_copies():
    _, recommendations = classify([finding(0.95)])
    recommendations.append("mutated")
    assert "mutated" not in RECOMMENDATIONS[RiskLevel.CRITICAL]


def test_custom_thresholds():
    strict = RiskThresholds(medium=0.5, high=0.6, critical=0.65)
    assert classify([finding(0.66)], strict)[0] == RiskLevel.CRITICAL
    assert classify([finding(0.62)], strict)[0] == RiskLevel.HIGH
