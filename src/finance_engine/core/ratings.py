"""Threshold tables that turn raw scores into labels and narratives.

Every table is scanned from the highest band down and the first matching band
wins. Bands are either inclusive (``>=``) or strict (``>``) lower bounds; the
final band of each table is the catch-all.
"""

from __future__ import annotations

import operator
from typing import Callable, NamedTuple, Sequence

_GE = operator.ge
_GT = operator.gt


class Band(NamedTuple):
    threshold: float
    label: str
    narrative: str = ""


def classify(
    value: float,
    bands: Sequence[Band],
    fallback: Band,
    compare: Callable[[float, float], bool] = _GE,
) -> Band:
    """Return the first band whose threshold ``value`` reaches."""
    for band in bands:
        if compare(value, band.threshold):
            return band
    return fallback


# ─── Company health ──────────────────────────────────────────────────────────

HEALTH_BANDS = (
    Band(80.0, "LOW", "Company health is excellent across all dimensions."),
    Band(65.0, "MEDIUM", "Company health is good but some areas need attention for optimal performance."),
    Band(50.0, "HIGH", "Company faces significant challenges in multiple areas requiring strategic intervention."),
)
HEALTH_FALLBACK = Band(float("-inf"), "CRITICAL", "Company health is critical with severe issues across key performance indicators.")


def health_risk(overall_score: float) -> Band:
    return classify(overall_score, HEALTH_BANDS, HEALTH_FALLBACK)


# ─── Revenue quality ─────────────────────────────────────────────────────────

QUALITY_TARGET_SCORE = 0.75

QUALITY_BANDS = (
    Band(0.80, "A", "Excellent revenue quality. Continue investing in high-growth segments and maintain momentum."),
    Band(0.65, "B", "Good revenue quality with room for improvement. Focus on accelerating growth in stable segments."),
    Band(0.50, "C", "Moderate revenue quality. Strategic pivot needed to increase high-growth revenue proportion."),
    Band(0.35, "D", "Poor revenue quality. Urgent action required to address declining revenue and stimulate growth."),
)
QUALITY_FALLBACK = Band(float("-inf"), "F", "Critical revenue quality issues. Immediate restructuring needed to reverse declining trends.")


def quality_grade(quality_score: float) -> Band:
    return classify(quality_score, QUALITY_BANDS, QUALITY_FALLBACK)


# ─── Concentration (HHI) ─────────────────────────────────────────────────────

DOMINANT_SHARE = 0.50
SEVERE_HHI = 0.35
MIN_EFFECTIVE_SEGMENTS = 3.0


def hhi_risk(hhi: float) -> str:
    """LOW below 0.15, MEDIUM up to and including 0.25, HIGH above."""
    if hhi < 0.15:
        return "LOW"
    if hhi <= 0.25:
        return "MEDIUM"
    return "HIGH"


def hhi_assessment(risk_level: str, hhi: float, effective_n: float) -> str:
    return (
        f"Revenue concentration is {risk_level.lower()} with HHI of {hhi:.3f}. "
        f"The portfolio behaves like {effective_n:.1f} equal-sized segments."
    )


def concentration_issues(largest_share: float, hhi: float, effective_n: float) -> list[str]:
    """Independent warnings; any combination may apply."""
    issues = []
    if largest_share > DOMINANT_SHARE:
        issues.append(f"Single segment dominance: {largest_share * 100:.1f}% of revenue")
    if hhi > SEVERE_HHI:
        issues.append(f"HHI exceeds {SEVERE_HHI} indicating severe concentration")
    if effective_n < MIN_EFFECTIVE_SEGMENTS:
        issues.append(f"Effective segment count ({effective_n:.1f}) is below recommended minimum of 3")
    return issues


# ─── Operating leverage ──────────────────────────────────────────────────────

LEVERAGE_BANDS = (
    Band(1.5, "Excellent"),
    Band(1.2, "Good"),
    Band(1.0, "Adequate"),
)
LEVERAGE_FALLBACK = Band(float("-inf"), "Poor")


def leverage_rating(operating_leverage: float) -> str:
    return classify(operating_leverage, LEVERAGE_BANDS, LEVERAGE_FALLBACK).label


def leverage_interpretation(operating_leverage: float) -> str:
    return f"Revenue growing {operating_leverage:.1f}x faster than costs"


# ─── Portfolio momentum ──────────────────────────────────────────────────────

MOMENTUM_BANDS = (
    Band(0.10, "Strong"),
    Band(0.05, "Moderate"),
    Band(0.0, "Weak"),
)
MOMENTUM_FALLBACK = Band(float("-inf"), "Declining")


def momentum_rating(momentum: float) -> str:
    return classify(momentum, MOMENTUM_BANDS, MOMENTUM_FALLBACK, compare=_GT).label


# ─── Gini concentration ──────────────────────────────────────────────────────

# Keeps effective_segments finite as gini approaches zero
GINI_EPSILON = 0.0001


def gini_concentration(gini: float) -> str:
    if gini < 0.25:
        return "Low"
    if gini < 0.40:
        return "Moderate"
    return "High"


def gini_effective_segments(gini: float, segment_count: int) -> float:
    if gini > 0.0:
        return 1.0 / (gini + GINI_EPSILON)
    return float(segment_count)


# ─── Organic growth ──────────────────────────────────────────────────────────

GROWTH_BANDS = (
    Band(0.15, "Exceptional"),
    Band(0.10, "Strong"),
    Band(0.05, "Moderate"),
    Band(0.0, "Weak"),
)
GROWTH_FALLBACK = Band(float("-inf"), "Declining")


def growth_rating(growth_rate: float) -> str:
    return classify(growth_rate, GROWTH_BANDS, GROWTH_FALLBACK, compare=_GT).label
