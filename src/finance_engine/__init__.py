"""Finance Engine MCP Server.

Business and financial health metrics (company health, revenue quality,
HHI and Gini concentration, operating leverage, portfolio momentum, organic
growth) exposed as MCP tools.
"""

__version__ = "2.0.0"

from .engine import FinanceEngine

__all__ = ["FinanceEngine", "__version__"]
