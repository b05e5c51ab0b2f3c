"""Pydantic data models for tool parameters and calculation results.

The field descriptions here are the documentation of every input and output;
they surface through the JSON schema generated for each model.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

# JSON numbers only; booleans are rejected rather than coerced to 0 or 1
StrictNumber = Union[StrictFloat, StrictInt]

# A JSON number or a decorated numeric string, parsed by core.parsing
FlexibleNumber = Union[StrictFloat, StrictInt, str]


class ResultModel(BaseModel):
    """Base for calculation results; results are immutable once produced."""

    model_config = ConfigDict(frozen=True)


# ─── Company health score ────────────────────────────────────────────────────


class CompanyHealthScoreParams(BaseModel):
    """Inputs to the company health score."""

    revenue_growth: FlexibleNumber = Field(description="Year-over-year revenue growth rate as decimal (e.g., 0.09 for 9%)")
    sla_compliance: FlexibleNumber = Field(description="Service Level Agreement compliance rate as decimal (e.g., 0.985 for 98.5%)")
    modern_revenue_pct: FlexibleNumber = Field(description="Percentage of revenue from subscription/recurring revenue streams as decimal (e.g., 0.377 for 37.7%)")
    customer_satisfaction: FlexibleNumber = Field(description="Customer satisfaction score on 0-100 scale")
    pipeline_coverage: FlexibleNumber = Field(description="Ratio of active sales pipeline value to annual revenue as decimal (e.g., 0.849 for 84.9%)")


class CompanyHealthScore(ResultModel):
    """Weighted 0-100 health score with its risk level."""

    overall_score: float = Field(description="Composite health score 0-100")
    components: dict[str, float] = Field(description="Individual dimension scores before weighting")
    weighted_contributions: dict[str, float] = Field(description="Point contribution of each dimension to final score")
    risk_level: str = Field(description="Risk level: LOW, MEDIUM, HIGH, or CRITICAL")
    interpretation: str = Field(description="Human-readable assessment of health status")


# ─── Revenue quality score ───────────────────────────────────────────────────


class RevenueQualityScoreParams(BaseModel):
    """Revenue split by growth category."""

    high_growth_revenue: FlexibleNumber = Field(description="Dollar amount of revenue growing above 15% year-over-year")
    stable_revenue: FlexibleNumber = Field(description="Dollar amount of revenue growing 0-15% year-over-year")
    declining_revenue: FlexibleNumber = Field(description="Dollar amount of revenue with negative year-over-year growth")
    total_revenue: FlexibleNumber = Field(description="Total company revenue for normalization")


class RevenueQualityScore(ResultModel):
    """Growth-weighted revenue quality score and grade."""

    quality_score: float = Field(description="Composite quality score 0.0-1.0 scale where 1.0 is perfect")
    distribution: dict[str, float] = Field(description="Percentage breakdown of revenue by growth category")
    grade: str = Field(description="Letter grade A through F based on quality score")
    recommendation: str = Field(description="Actionable strategic guidance based on score")
    target_score: float = Field(description="Industry benchmark for comparison")
    gap_to_target: float = Field(description="Distance from benchmark, negative means exceeding target")


# ─── HHI and diversification ─────────────────────────────────────────────────


class HHIParams(BaseModel):
    """Segment revenues for the concentration index."""

    revenues: list[StrictNumber] = Field(description="Revenue values for each business segment")


class HHIResult(ResultModel):
    """Herfindahl-Hirschman concentration and diversification."""

    hhi: float = Field(description="Herfindahl-Hirschman Index value 0.0-1.0")
    diversification_score: float = Field(description="Inverse of HHI, where higher means more diversified")
    effective_n: float = Field(description="Effective number of equal-sized segments")
    risk_level: str = Field(description="Risk level: LOW, MEDIUM, or HIGH")
    assessment: str = Field(description="Risk interpretation in plain language")
    market_shares: list[float] = Field(description="Individual segment shares as decimals")
    largest_share: float = Field(description="Highest individual segment share")
    concentration_issues: list[str] = Field(description="Specific warnings about concentration risks")


# ─── Operating leverage ──────────────────────────────────────────────────────


class OperatingLeverageParams(BaseModel):
    """Revenue and cost growth rates."""

    revenue_growth_rate: FlexibleNumber = Field(description="Year-over-year revenue growth rate as decimal (e.g., 0.09 for 9%)")
    cost_growth_rate: FlexibleNumber = Field(description="Year-over-year operating cost growth rate as decimal (e.g., 0.06 for 6%)")


class OperatingLeverage(ResultModel):
    """Operating leverage ratio and margin expansion."""

    operating_leverage: float = Field(description="Operating leverage ratio (revenue growth / cost growth)")
    revenue_growth_pct: float = Field(description="Revenue growth rate as percentage")
    cost_growth_pct: float = Field(description="Cost growth rate as percentage")
    margin_expansion_bps: float = Field(description="Margin expansion in basis points")
    efficiency_rating: str = Field(description="Efficiency rating: Excellent, Good, Adequate, or Poor")
    interpretation: str = Field(description="Plain language interpretation of the leverage")


# ─── Portfolio momentum ──────────────────────────────────────────────────────


class PortfolioSegment(BaseModel):
    """Revenue and growth rate of one portfolio segment."""

    revenue: StrictNumber = Field(description="Segment revenue in millions")
    growth_rate: StrictNumber = Field(description="Year-over-year growth rate as decimal (e.g., 0.20 for 20%)")


class PortfolioMomentumParams(BaseModel):
    """Named portfolio segments."""

    segments: dict[str, PortfolioSegment] = Field(description="Dictionary of segment names to revenue and growth rate data")


class SegmentContribution(ResultModel):
    """One segment's share of revenue and of momentum."""

    revenue: float = Field(description="Segment revenue")
    revenue_pct: float = Field(description="Segment revenue as percentage of total")
    growth_rate: float = Field(description="Segment growth rate as percentage")
    contribution_to_momentum: float = Field(description="Contribution to overall momentum as percentage")


class PortfolioMomentum(ResultModel):
    """Revenue-weighted growth across the portfolio."""

    portfolio_momentum: float = Field(description="Portfolio momentum as decimal")
    portfolio_momentum_pct: float = Field(description="Portfolio momentum as percentage")
    total_revenue: float = Field(description="Total revenue across all segments")
    segment_contributions: dict[str, SegmentContribution] = Field(description="Individual segment contributions to momentum")
    top_contributor: str = Field(description="Name of segment contributing most to momentum")
    momentum_rating: str = Field(description="Momentum rating: Strong, Moderate, Weak, or Declining")


# ─── Gini coefficient ────────────────────────────────────────────────────────


class GiniCoefficientParams(BaseModel):
    """Segment revenues for the inequality measure."""

    revenues: list[StrictNumber] = Field(description="List of revenue values by segment (any order)")


class GiniCoefficient(ResultModel):
    """Gini coefficient of revenue across segments."""

    gini_coefficient: float = Field(description="Gini coefficient (0-1 scale, higher = more concentrated)")
    diversification_score: float = Field(description="Diversification score (1 - Gini, higher = more diversified)")
    concentration_level: str = Field(description="Concentration level: Low, Moderate, or High")
    largest_segment_share: float = Field(description="Largest segment share as percentage")
    smallest_segment_share: float = Field(description="Smallest segment share as percentage")
    effective_segments: float = Field(description="Effective number of equal-sized segments")
    sorted_revenues: list[float] = Field(description="Revenue values sorted in ascending order")


# ─── Organic growth ──────────────────────────────────────────────────────────


class OrganicGrowthParams(BaseModel):
    """Prior and current period revenue."""

    revenue_prior: FlexibleNumber = Field(description="Revenue from prior period")
    revenue_current: FlexibleNumber = Field(description="Revenue from current period")


class OrganicGrowth(ResultModel):
    """Period-over-period organic growth and rating."""

    organic_growth_rate: float = Field(description="Organic growth rate as decimal")
    organic_growth_pct: float = Field(description="Organic growth rate as percentage")
    absolute_growth: float = Field(description="Absolute dollar growth")
    revenue_prior: float = Field(description="Prior period revenue")
    revenue_current: float = Field(description="Current period revenue")
    growth_rating: str = Field(description="Growth rating: Exceptional, Strong, Moderate, Weak, or Declining")
    annualized_cagr: float = Field(description="Annualized CAGR as percentage (currently equal to organic_growth_pct)")
