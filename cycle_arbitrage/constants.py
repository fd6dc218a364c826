"""
Constants and enums for the cycle arbitrage system.

Centralizes default parameters, search method tags and the strategy/report
enums so the detection core and the runners agree on their spelling.
"""

from enum import Enum


class OptimizationStrategy(Enum):
    """Objective used to pick one opportunity among many."""

    MAX_PROFIT = "max_profit"
    MAX_PROFIT_PERCENT = "max_profit_percent"
    MIN_RISK = "min_risk"
    BALANCED_RISK_RETURN = "balanced_risk_return"


class ReportFormat(Enum):
    """Where pass results are reported."""

    CONSOLE = "console"
    CSV = "csv"
    BOTH = "both"


class PathType(Enum):
    """Hop-count classification of an arbitrage path."""

    THREE_HOP = "3-hop"
    FOUR_HOP = "4-hop"
    CUSTOM = "custom"


# Search method tags carried on every opportunity
SEARCH_METHOD_TERNARY = "ternary_search"
SEARCH_METHOD_MULTI_PATH = "multi_path_ternary"

# Reserves at or below this are treated as an empty pool
RESERVE_EPSILON = 1e-10

# Upper bound of the ternary search as a fraction of the first hop's input reserve
MAX_INPUT_RESERVE_FRACTION = 0.999

# Arrow used in human-readable path descriptions
PATH_SEPARATOR = " → "

# Default configuration values
DEFAULT_DEX_FEE = 0.003  # 0.3% fee for most constant-product DEXes
DEFAULT_TERNARY_SEARCH_ITERATIONS = 100
DEFAULT_MAX_HOPS = 4
DEFAULT_BLOCK_TIME_SECONDS = 2
DEFAULT_MAX_RETRIES = 3
DEFAULT_BATCH_SIZE = 50
DEFAULT_CSV_FILE_PATH = "arbitrage_opportunities.csv"
DEFAULT_GAS_PRICE_GWEI = 0.02
DEFAULT_MIN_LIQUIDITY = 1000.0
DEFAULT_TOKEN_DECIMALS = 18

# Gas units per route shape
GAS_UNITS_3_HOPS = 700_000
GAS_UNITS_4_HOPS = 900_000
GAS_UNITS_PER_EXTRA_HOP = 200_000

# 1 gwei expressed in the chain's native token
GWEI_TO_NATIVE_MULTIPLIER = 1e-9
