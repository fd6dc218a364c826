"""
DEX cycle arbitrage detection.

Builds a token graph from constant-product pool reserves, finds negative
cycles anchored at a base token, sizes each route with a ternary search and
ranks the results.
"""

from cycle_arbitrage.analyzer import MultiPathAnalyzer
from cycle_arbitrage.config import AnalysisConfig, ExecutionCostModel
from cycle_arbitrage.constants import OptimizationStrategy, ReportFormat
from cycle_arbitrage.cycle_finder import find_arbitrage_cycles
from cycle_arbitrage.path_evaluator import (
    PathEvaluator,
    find_best_input,
    find_triangular_opportunity,
)
from cycle_arbitrage.pool_edge import PoolEdge
from cycle_arbitrage.ranker import rank, select_best
from cycle_arbitrage.token_graph import TokenGraph
from cycle_arbitrage.types import (
    ArbitrageOpportunity,
    ArbitragePath,
    MultiPathOpportunity,
    ReserveSnapshot,
    Token,
)
from cycle_arbitrage.version import PROJECT_NAME, VERSION, __version__

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "__version__",
    "MultiPathAnalyzer",
    "AnalysisConfig",
    "ExecutionCostModel",
    "OptimizationStrategy",
    "ReportFormat",
    "find_arbitrage_cycles",
    "PathEvaluator",
    "find_best_input",
    "find_triangular_opportunity",
    "PoolEdge",
    "rank",
    "select_best",
    "TokenGraph",
    "ArbitrageOpportunity",
    "ArbitragePath",
    "MultiPathOpportunity",
    "ReserveSnapshot",
    "Token",
]
