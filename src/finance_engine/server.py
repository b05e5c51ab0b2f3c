"""Finance Engine MCP Server.

FastMCP server exposing seven financial calculation tools, plus /health and
/metrics endpoints on the HTTP transports.
Run: finance-engine-mcp [--transport stdio|sse|streamable-http]
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.server.transport_security import TransportSecuritySettings
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from .config import ConfigError, ServerConfig, load_config
from .core.errors import FinanceEngineError
from .core.models import (
    CompanyHealthScoreParams,
    FlexibleNumber,
    GiniCoefficientParams,
    HHIParams,
    OperatingLeverageParams,
    OrganicGrowthParams,
    PortfolioMomentumParams,
    PortfolioSegment,
    RevenueQualityScoreParams,
    StrictNumber,
)
from .engine import FinanceEngine
from .metrics import METRICS_CONTENT_TYPE, PrometheusMetrics

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)

INSTRUCTIONS = """Finance Engine providing seven calculation functions for financial analysis and business intelligence:

**Critical Business Metrics**
1. calculate_company_health_score - Comprehensive 0-100 health score combining five weighted dimensions: revenue growth (30%), SLA compliance (25%), modern revenue percentage (20%), customer satisfaction (15%), and pipeline coverage (10%)
2. calculate_revenue_quality_score - Revenue quality evaluation with high-growth, stable, and declining categorization
3. calculate_hhi_and_diversification - Herfindahl-Hirschman Index for revenue concentration risk assessment

**Operational Metrics**
4. calculate_operating_leverage - Operating leverage ratio measuring revenue growth vs cost growth for scalability assessment

**Portfolio Analytics**
5. calculate_portfolio_momentum - Revenue-weighted portfolio momentum index showing aggregate growth trajectory
6. calculate_gini_coefficient - Gini coefficient for revenue concentration and diversification risk analysis
7. calculate_organic_growth - Year-over-year organic revenue growth excluding inorganic factors

Numeric arguments accept plain numbers or strings with currency symbols, thousands separators, or percent signs (e.g. "$1,250.50", "12.5%")."""

LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")

metrics = PrometheusMetrics()
engine = FinanceEngine(metrics)

mcp = FastMCP(
    "finance-engine",
    instructions=INSTRUCTIONS,
    sse_path="/sse",
    message_path="/message/",
)


def _report(call):
    """Run an engine call, turning engine failures into MCP tool errors."""
    try:
        return call()
    except FinanceEngineError as exc:
        raise ToolError(exc.user_message) from exc


# ─── Health & Metrics Endpoints ──────────────────────────────────────────────


@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> Response:
    return PlainTextResponse("OK")


@mcp.custom_route("/metrics", methods=["GET"])
async def metrics_endpoint(request: Request) -> Response:
    return Response(content=metrics.render(), media_type=METRICS_CONTENT_TYPE)


# ─── Tool 1: Company Health Score ────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_company_health_score(
    revenue_growth: FlexibleNumber,
    sla_compliance: FlexibleNumber,
    modern_revenue_pct: FlexibleNumber,
    customer_satisfaction: FlexibleNumber,
    pipeline_coverage: FlexibleNumber,
) -> dict:
    """Calculate comprehensive company health score (0-100) by combining five weighted dimensions: revenue growth (30%), Service Level Agreement compliance (25%), modern revenue percentage (20%), customer satisfaction (15%), and pipeline coverage (10%). Returns overall score, individual components, weighted contributions, risk level classification (LOW/MEDIUM/HIGH/CRITICAL), and interpretation.

    Args:
        revenue_growth: Year-over-year revenue growth rate as decimal (e.g., 0.09 for 9%).
        sla_compliance: SLA compliance rate as decimal between 0 and 1 (e.g., 0.985).
        modern_revenue_pct: Share of subscription/recurring revenue as decimal between 0 and 1.
        customer_satisfaction: Customer satisfaction score on a 0-100 scale.
        pipeline_coverage: Active sales pipeline value relative to annual revenue (e.g., 0.849).
    """
    params = CompanyHealthScoreParams(
        revenue_growth=revenue_growth,
        sla_compliance=sla_compliance,
        modern_revenue_pct=modern_revenue_pct,
        customer_satisfaction=customer_satisfaction,
        pipeline_coverage=pipeline_coverage,
    )
    return _report(lambda: engine.company_health_score(params))


# ─── Tool 2: Revenue Quality Score ───────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_revenue_quality_score(
    high_growth_revenue: FlexibleNumber,
    stable_revenue: FlexibleNumber,
    declining_revenue: FlexibleNumber,
    total_revenue: FlexibleNumber,
) -> dict:
    """Evaluate revenue quality and sustainability by categorizing revenue into high-growth (>15% YoY), stable (0-15% YoY), and declining (<0% YoY) segments. Applies quality weights (1.0, 0.7, 0.0) to calculate composite quality score (0.0-1.0). Returns quality score, distribution breakdown, letter grade (A-F), strategic recommendation, and gap to industry benchmark (0.75).

    Args:
        high_growth_revenue: Revenue growing above 15% year-over-year.
        stable_revenue: Revenue growing 0-15% year-over-year.
        declining_revenue: Revenue with negative year-over-year growth.
        total_revenue: Total company revenue; the three categories must sum to it within 1%.
    """
    params = RevenueQualityScoreParams(
        high_growth_revenue=high_growth_revenue,
        stable_revenue=stable_revenue,
        declining_revenue=declining_revenue,
        total_revenue=total_revenue,
    )
    return _report(lambda: engine.revenue_quality_score(params))


# ─── Tool 3: HHI & Diversification ───────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_hhi_and_diversification(revenues: list[StrictNumber]) -> dict:
    """Compute Herfindahl-Hirschman Index (HHI) to measure revenue concentration risk across business segments. HHI is sum of squared market shares (0.0-1.0). Returns HHI, diversification score (1-HHI), effective number of segments (1/HHI), risk classification (LOW <0.15, MEDIUM 0.15-0.25, HIGH >0.25), market shares, largest share, and concentration warnings.

    Args:
        revenues: Revenue values for each business segment (at least 2).
    """
    params = HHIParams(revenues=revenues)
    return _report(lambda: engine.hhi_and_diversification(params))


# ─── Tool 4: Operating Leverage ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_operating_leverage(revenue_growth_rate: FlexibleNumber, cost_growth_rate: FlexibleNumber) -> dict:
    """Calculate operating leverage ratio measuring relationship between revenue growth and cost growth to assess operational scalability. Ratio > 1.0 indicates positive operating leverage (revenue growing faster than costs). Returns operating leverage ratio, growth rates, margin expansion in basis points, efficiency rating (Excellent/Good/Adequate/Poor), and interpretation.

    Args:
        revenue_growth_rate: Year-over-year revenue growth rate as decimal (e.g., 0.09 for 9%).
        cost_growth_rate: Year-over-year operating cost growth rate as decimal; must not be zero.
    """
    params = OperatingLeverageParams(revenue_growth_rate=revenue_growth_rate, cost_growth_rate=cost_growth_rate)
    return _report(lambda: engine.operating_leverage(params))


# ─── Tool 5: Portfolio Momentum ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_portfolio_momentum(segments: dict[str, PortfolioSegment]) -> dict:
    """Calculate revenue-weighted portfolio momentum index measuring aggregate growth trajectory across business segments. Computes weighted average growth rate where each segment's contribution is proportional to its revenue share. Returns portfolio momentum (decimal and percentage), total revenue, per-segment contributions, top contributor, and momentum rating (Strong >10%, Moderate 5-10%, Weak 0-5%, Declining <0%).

    Args:
        segments: Segment name mapped to {"revenue": ..., "growth_rate": ...}, growth rate as decimal.
    """
    params = PortfolioMomentumParams(segments=segments)
    return _report(lambda: engine.portfolio_momentum(params))


# ─── Tool 6: Gini Coefficient ────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_gini_coefficient(revenues: list[StrictNumber]) -> dict:
    """Calculate Gini coefficient measuring revenue distribution inequality across segments for concentration risk assessment. Gini ranges 0-1 (0=perfect equality, 1=complete inequality). Returns Gini coefficient, diversification score (1-Gini), concentration level (Low <0.25, Moderate 0.25-0.40, High >0.40), largest/smallest segment shares, effective number of segments, and sorted revenues.

    Args:
        revenues: Revenue values by segment, in any order.
    """
    params = GiniCoefficientParams(revenues=revenues)
    return _report(lambda: engine.gini_coefficient(params))


# ─── Tool 7: Organic Growth ──────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def calculate_organic_growth(revenue_prior: FlexibleNumber, revenue_current: FlexibleNumber) -> dict:
    """Calculate year-over-year organic revenue growth excluding acquisitions, divestitures, and other inorganic factors. This is the purest measure of underlying business performance. Returns organic growth rate (decimal and percentage), absolute dollar growth, prior/current revenue values, growth rating (Exceptional >15%, Strong 10-15%, Moderate 5-10%, Weak 0-5%, Declining <0%), and annualized CAGR.

    Args:
        revenue_prior: Revenue from the prior period; must be positive.
        revenue_current: Revenue from the current period.
    """
    params = OrganicGrowthParams(revenue_prior=revenue_prior, revenue_current=revenue_current)
    return _report(lambda: engine.organic_growth(params))


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the stdio transport."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def transport_security_for(config: ServerConfig) -> TransportSecuritySettings:
    """Host/Origin checks for the HTTP transports.

    Loopback binds only answer requests addressed to a loopback name. Any
    other bind is reachable under names the server cannot know in advance, so
    DNS rebinding protection is switched off there.
    """
    if config.host not in LOOPBACK_HOSTS:
        return TransportSecuritySettings(enable_dns_rebinding_protection=False)

    hosts = [f"127.0.0.1:{config.port}", f"localhost:{config.port}", f"[::1]:{config.port}"]
    return TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=hosts,
        allowed_origins=[f"http://{host}" for host in hosts],
    )


def apply_config(config: ServerConfig) -> None:
    """Point the HTTP transports at the configured bind address."""
    mcp.settings.host = config.host
    mcp.settings.port = config.port
    mcp.settings.transport_security = transport_security_for(config)


def run(config: ServerConfig) -> None:
    """Start the server on the configured transport."""
    if config.transport == "stdio":
        logger.info("Starting Finance Engine MCP server using stdio transport")
    else:
        apply_config(config)
        logger.info("Starting %s Finance Engine MCP server on %s", config.transport, config.bind_address)
    mcp.run(transport=config.transport)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the CLI command."""
    try:
        config = load_config(argv)
    except ConfigError as exc:
        configure_logging("INFO")
        logger.error("Configuration error: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(config.log_level)
    run(config)


if __name__ == "__main__":
    main()
