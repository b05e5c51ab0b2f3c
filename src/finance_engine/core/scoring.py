"""Financial metric calculations.

Seven closed-form metrics over already-parsed inputs: company health,
revenue quality, HHI concentration, operating leverage, portfolio momentum,
Gini inequality, and organic growth. Each function validates its domain,
computes at full precision, classifies via ``ratings`` and rounds via
``rounding`` only when assembling the result model.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping

from . import ratings
from .errors import CalculationError
from .models import (
    CompanyHealthScore,
    GiniCoefficient,
    HHIResult,
    OperatingLeverage,
    OrganicGrowth,
    PortfolioMomentum,
    PortfolioSegment,
    RevenueQualityScore,
    SegmentContribution,
)
from .rounding import round_to, to_basis_points, to_percent

# Revenue growth at or above this rate earns the full 100 points
FULL_MARKS_REVENUE_GROWTH = 0.15

HEALTH_WEIGHTS = {
    "revenue": 0.30,
    "sla": 0.25,
    "innovation": 0.20,
    "satisfaction": 0.15,
    "pipeline": 0.10,
}

QUALITY_WEIGHTS = {
    "high_growth": 1.0,
    "stable": 0.7,
    "declining": 0.0,
}

# Category sums may differ from the stated total by up to 1%
QUALITY_SUM_TOLERANCE = 0.01


def _running_sum(values: Iterable[float]) -> float:
    # Plain left-to-right accumulation; builtin sum() compensates on 3.12+
    total = 0.0
    for value in values:
        total += value
    return total


def calculate_company_health_score(
    revenue_growth: float,
    sla_compliance: float,
    modern_revenue_pct: float,
    customer_satisfaction: float,
    pipeline_coverage: float,
) -> CompanyHealthScore:
    """Composite 0-100 health score from five weighted dimensions.

    Each dimension is first mapped onto a 0-100 scale:
    revenue growth scales linearly to 100 at 15% (clamped to [0, 100]),
    SLA compliance and modern revenue share are direct percentages,
    satisfaction is already 0-100, and pipeline coverage caps at 100%.
    """
    if sla_compliance < 0.0 or sla_compliance > 1.0:
        raise CalculationError("SLA compliance must be between 0.0 and 1.0")
    if modern_revenue_pct < 0.0 or modern_revenue_pct > 1.0:
        raise CalculationError("Modern revenue percentage must be between 0.0 and 1.0")
    if customer_satisfaction < 0.0 or customer_satisfaction > 100.0:
        raise CalculationError("Customer satisfaction must be between 0.0 and 100.0")
    if pipeline_coverage < 0.0:
        raise CalculationError("Pipeline coverage must be >= 0.0")

    components = {
        "revenue": max(min((revenue_growth / FULL_MARKS_REVENUE_GROWTH) * 100.0, 100.0), 0.0),
        "sla": sla_compliance * 100.0,
        "innovation": modern_revenue_pct * 100.0,
        "satisfaction": customer_satisfaction,
        "pipeline": min(pipeline_coverage * 100.0, 100.0),
    }

    weighted_contributions = {}
    overall_score = 0.0
    for name, weight in HEALTH_WEIGHTS.items():
        contribution = components[name] * weight
        weighted_contributions[name] = contribution
        overall_score += contribution

    risk = ratings.health_risk(overall_score)

    return CompanyHealthScore(
        overall_score=overall_score,
        components=components,
        weighted_contributions=weighted_contributions,
        risk_level=risk.label,
        interpretation=risk.narrative,
    )


def calculate_revenue_quality_score(
    high_growth_revenue: float,
    stable_revenue: float,
    declining_revenue: float,
    total_revenue: float,
) -> RevenueQualityScore:
    """Weight revenue by growth category into a 0-1 quality score.

    High-growth revenue (>15% YoY) counts fully, stable revenue (0-15%) at
    0.7, declining revenue not at all.
    """
    if high_growth_revenue < 0.0 or stable_revenue < 0.0 or declining_revenue < 0.0 or total_revenue <= 0.0:
        raise CalculationError("All revenue amounts must be non-negative and total must be positive")

    category_sum = high_growth_revenue + stable_revenue + declining_revenue
    if abs(category_sum - total_revenue) > QUALITY_SUM_TOLERANCE * total_revenue:
        raise CalculationError("Revenue categories must sum to total revenue")

    shares = {
        "high_growth": high_growth_revenue / total_revenue,
        "stable": stable_revenue / total_revenue,
        "declining": declining_revenue / total_revenue,
    }

    quality_score = 0.0
    for category, weight in QUALITY_WEIGHTS.items():
        quality_score += shares[category] * weight

    grade = ratings.quality_grade(quality_score)

    return RevenueQualityScore(
        quality_score=quality_score,
        distribution={category: share * 100.0 for category, share in shares.items()},
        grade=grade.label,
        recommendation=grade.narrative,
        target_score=ratings.QUALITY_TARGET_SCORE,
        gap_to_target=quality_score - ratings.QUALITY_TARGET_SCORE,
    )


def calculate_hhi_and_diversification(revenues: list[float]) -> HHIResult:
    """Herfindahl-Hirschman Index over segment revenue shares.

    HHI is the sum of squared shares; ``1 / HHI`` is the number of equal-sized
    segments that would give the same concentration.
    """
    if len(revenues) < 2:
        raise CalculationError("Must contain at least 2 segments")

    for index, revenue in enumerate(revenues):
        if revenue < 0.0:
            raise CalculationError(f"Revenue at index {index} cannot be negative")

    total = _running_sum(revenues)
    if total <= 0.0:
        raise CalculationError("Total revenue must be positive")
    if not math.isfinite(total):
        raise CalculationError("Total revenue must be finite")

    market_shares = [revenue / total for revenue in revenues]
    hhi = _running_sum(share * share for share in market_shares)
    diversification_score = 1.0 - hhi
    effective_n = 1.0 / hhi
    largest_share = max(market_shares)

    risk_level = ratings.hhi_risk(hhi)

    return HHIResult(
        hhi=hhi,
        diversification_score=diversification_score,
        effective_n=effective_n,
        risk_level=risk_level,
        assessment=ratings.hhi_assessment(risk_level, hhi, effective_n),
        market_shares=market_shares,
        largest_share=largest_share,
        concentration_issues=ratings.concentration_issues(largest_share, hhi, effective_n),
    )


def calculate_operating_leverage(revenue_growth_rate: float, cost_growth_rate: float) -> OperatingLeverage:
    """Ratio of revenue growth to cost growth, plus implied margin expansion."""
    if cost_growth_rate == 0.0:
        raise CalculationError("Cost growth rate cannot be zero")

    operating_leverage = revenue_growth_rate / cost_growth_rate

    return OperatingLeverage(
        operating_leverage=round_to(operating_leverage, 2),
        revenue_growth_pct=to_percent(revenue_growth_rate, 1),
        cost_growth_pct=to_percent(cost_growth_rate, 1),
        margin_expansion_bps=to_basis_points(revenue_growth_rate - cost_growth_rate),
        efficiency_rating=ratings.leverage_rating(operating_leverage),
        interpretation=ratings.leverage_interpretation(operating_leverage),
    )


def calculate_portfolio_momentum(segments: Mapping[str, PortfolioSegment]) -> PortfolioMomentum:
    """Revenue-weighted average growth rate across segments.

    The top contributor is the first segment, in input order, with the
    strictly largest positive contribution; it is empty when no segment
    contributes positively.
    """
    if not segments:
        raise CalculationError("Segments cannot be empty")

    total_revenue = _running_sum(segment.revenue for segment in segments.values())
    if total_revenue == 0.0:
        raise CalculationError("Total revenue cannot be zero")

    momentum = 0.0
    max_contribution = 0.0
    top_contributor = ""
    contributions = {}

    for name, segment in segments.items():
        weight = segment.revenue / total_revenue
        contribution = weight * segment.growth_rate
        momentum += contribution

        contribution_pct = contribution * 100.0
        if contribution_pct > max_contribution:
            max_contribution = contribution_pct
            top_contributor = name

        contributions[name] = SegmentContribution(
            revenue=round_to(segment.revenue, 2),
            revenue_pct=to_percent(weight, 1),
            growth_rate=to_percent(segment.growth_rate, 1),
            contribution_to_momentum=round_to(contribution_pct, 2),
        )

    return PortfolioMomentum(
        portfolio_momentum=round_to(momentum, 4),
        portfolio_momentum_pct=to_percent(momentum, 2),
        total_revenue=round_to(total_revenue, 2),
        segment_contributions=contributions,
        top_contributor=top_contributor,
        momentum_rating=ratings.momentum_rating(momentum),
    )


def calculate_gini_coefficient(revenues: list[float]) -> GiniCoefficient:
    """Gini coefficient of revenue across segments (0 = equal, 1 = concentrated)."""
    if not revenues:
        raise CalculationError("Revenue list cannot be empty")

    if any(revenue < 0.0 for revenue in revenues):
        raise CalculationError("Revenues cannot be negative")

    total_revenue = _running_sum(revenues)
    if total_revenue == 0.0:
        raise CalculationError("Total revenue cannot be zero")

    sorted_revenues = sorted(revenues)
    n = float(len(sorted_revenues))
    rank_weighted = _running_sum((rank + 1.0) * revenue for rank, revenue in enumerate(sorted_revenues))

    gini = (2.0 * rank_weighted) / (n * total_revenue) - (n + 1.0) / n
    diversification_score = 1.0 - gini

    largest_share = max(revenues) / total_revenue * 100.0
    smallest_share = min(revenues) / total_revenue * 100.0
    effective_segments = ratings.gini_effective_segments(gini, len(revenues))

    return GiniCoefficient(
        gini_coefficient=round_to(gini, 3),
        diversification_score=round_to(diversification_score, 3),
        concentration_level=ratings.gini_concentration(gini),
        largest_segment_share=round_to(largest_share, 1),
        smallest_segment_share=round_to(smallest_share, 1),
        effective_segments=round_to(effective_segments, 2),
        sorted_revenues=[round_to(revenue, 2) for revenue in sorted_revenues],
    )


def calculate_organic_growth(revenue_prior: float, revenue_current: float) -> OrganicGrowth:
    """Period-over-period organic revenue growth.

    ``annualized_cagr`` is reported equal to the simple growth percentage; no
    period length is taken as input.
    """
    if revenue_prior <= 0.0:
        raise CalculationError("Prior period revenue must be positive")

    absolute_growth = revenue_current - revenue_prior
    growth_rate = absolute_growth / revenue_prior

    return OrganicGrowth(
        organic_growth_rate=round_to(growth_rate, 4),
        organic_growth_pct=to_percent(growth_rate, 2),
        absolute_growth=round_to(absolute_growth, 2),
        revenue_prior=round_to(revenue_prior, 2),
        revenue_current=round_to(revenue_current, 2),
        growth_rating=ratings.growth_rating(growth_rate),
        annualized_cagr=to_percent(growth_rate, 2),
    )
