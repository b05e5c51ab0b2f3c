"""Instrumented entry points for the seven calculations.

``FinanceEngine`` is what the server calls. Each operation parses its flexible
inputs, runs the pure calculation from ``core.scoring``, and serializes the
result, all inside a request timer. Failures are counted and re-raised as
``FinanceEngineError`` for the transport layer to report.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from pydantic import BaseModel

from .core import scoring
from .core.errors import FinanceEngineError, SerializationError
from .core.models import (
    CompanyHealthScoreParams,
    GiniCoefficientParams,
    HHIParams,
    OperatingLeverageParams,
    OrganicGrowthParams,
    PortfolioMomentumParams,
    ResultModel,
    RevenueQualityScoreParams,
)
from .core.parsing import parse_field
from .metrics import NullMetrics, RequestMetrics, request_timer

logger = logging.getLogger(__name__)


def serialize_result(result: ResultModel) -> dict:
    """Dump a result model to plain JSON-compatible data.

    Raises:
        SerializationError: if the result holds values JSON cannot carry (NaN, infinity).
    """
    payload = result.model_dump()
    try:
        json.dumps(payload, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc
    return payload


def _parse_flexible(params: BaseModel) -> dict[str, float]:
    """Parse every flexible numeric field of a params model, in declaration order."""
    return {name: parse_field(name, value) for name, value in params}


class FinanceEngine:
    """Runs calculations and reports each invocation to a metrics collaborator."""

    def __init__(self, metrics: Optional[RequestMetrics] = None):
        self.metrics = metrics if metrics is not None else NullMetrics()

    def _run(self, operation: str, compute: Callable[[], ResultModel]) -> dict:
        with request_timer(self.metrics):
            self.metrics.increment_requests()
            try:
                payload = serialize_result(compute())
            except FinanceEngineError as exc:
                self.metrics.increment_errors()
                logger.warning("%s rejected: %s", operation, exc.user_message)
                raise
            except Exception:
                self.metrics.increment_errors()
                logger.exception("%s failed unexpectedly", operation)
                raise
            logger.debug("%s completed", operation)
            return payload

    def company_health_score(self, params: CompanyHealthScoreParams) -> dict:
        return self._run(
            "calculate_company_health_score",
            lambda: scoring.calculate_company_health_score(**_parse_flexible(params)),
        )

    def revenue_quality_score(self, params: RevenueQualityScoreParams) -> dict:
        return self._run(
            "calculate_revenue_quality_score",
            lambda: scoring.calculate_revenue_quality_score(**_parse_flexible(params)),
        )

    def hhi_and_diversification(self, params: HHIParams) -> dict:
        return self._run(
            "calculate_hhi_and_diversification",
            lambda: scoring.calculate_hhi_and_diversification(params.revenues),
        )

    def operating_leverage(self, params: OperatingLeverageParams) -> dict:
        return self._run(
            "calculate_operating_leverage",
            lambda: scoring.calculate_operating_leverage(**_parse_flexible(params)),
        )

    def portfolio_momentum(self, params: PortfolioMomentumParams) -> dict:
        return self._run(
            "calculate_portfolio_momentum",
            lambda: scoring.calculate_portfolio_momentum(params.segments),
        )

    def gini_coefficient(self, params: GiniCoefficientParams) -> dict:
        return self._run(
            "calculate_gini_coefficient",
            lambda: scoring.calculate_gini_coefficient(params.revenues),
        )

    def organic_growth(self, params: OrganicGrowthParams) -> dict:
        return self._run(
            "calculate_organic_growth",
            lambda: scoring.calculate_organic_growth(**_parse_flexible(params)),
        )
