"""
Profit optimization for a fixed swap route.

The chained constant-product output minus the input is concave in the input
amount, so a fixed number of ternary-search rounds over
``[0, 0.999 * first reserve_in]`` brackets the most profitable trade size.
"""

from typing import List, Optional, Sequence, Tuple

from .config import AnalysisConfig
from .constants import (
    MAX_INPUT_RESERVE_FRACTION,
    SEARCH_METHOD_MULTI_PATH,
    SEARCH_METHOD_TERNARY,
)
from .pool_edge import swap
from .token_graph import TokenGraph
from .types import ArbitrageOpportunity, ArbitragePath, ReserveSnapshot, Token
from .utils import get_logger, raw_to_units

logger = get_logger(__name__)

# (reserve_in, reserve_out) of one hop, in token units
HopReserves = Tuple[float, float]


def chained_output(amount_in: float, pools: Sequence[HopReserves], fee: float) -> float:
    """Output after swapping ``amount_in`` through every pool in order."""
    amount = amount_in
    for reserve_in, reserve_out in pools:
        amount = swap(reserve_in, reserve_out, amount, fee)
    return amount


def arbitrage_profit(amount_in: float, pools: Sequence[HopReserves], fee: float) -> float:
    """Final output minus input for a round trip; may be negative."""
    return chained_output(amount_in, pools, fee) - amount_in


def find_best_input(
    pools: Sequence[HopReserves], fee: float, iterations: int
) -> Tuple[float, float]:
    """
    Ternary search for the input that maximizes round-trip profit.

    Runs exactly ``iterations`` rounds; no convergence test is applied, so
    the result is deterministic for identical inputs.

    Args:
        pools: Per-hop reserves in swap order, first hop spends the base token
        fee: Fee applied on every hop
        iterations: Number of narrowing rounds

    Returns:
        (best_input, gross_profit at best_input)
    """
    if not pools:
        return 0.0, 0.0

    left = 0.0
    right = pools[0][0] * MAX_INPUT_RESERVE_FRACTION

    for _ in range(iterations):
        m1 = left + (right - left) / 3.0
        m2 = right - (right - left) / 3.0
        if arbitrage_profit(m1, pools, fee) < arbitrage_profit(m2, pools, fee):
            left = m1
        else:
            right = m2

    best_input = (left + right) / 2.0
    return best_input, arbitrage_profit(best_input, pools, fee)


def path_reserves(
    token_graph: TokenGraph, path: ArbitragePath
) -> Optional[List[HopReserves]]:
    """
    Oriented reserves for every hop of ``path``.

    Includes the closing hop back to the base token when the path does not
    already end there. Returns None if any hop has no pool.
    """
    hops = [(token_in, token_out) for token_in, token_out, _ in path.hops()]
    if path.tokens[-1] != token_graph.base_token:
        hops.append((path.tokens[-1], token_graph.base_token))

    pools: List[HopReserves] = []
    for token_in, token_out in hops:
        pool = token_graph.get_pool_info(token_in, token_out)
        if pool is None:
            return None
        reserves = pool.reserves_for(token_in)
        if reserves is None:
            return None
        pools.append(reserves)
    return pools


def build_opportunity(
    best_input: float,
    gross_profit: float,
    execution_cost: float,
    search_method: str,
    path: Optional[ArbitragePath] = None,
) -> ArbitrageOpportunity:
    """Derive net profit and percentage from a search result."""
    net_profit = gross_profit - execution_cost
    profit_percentage = (net_profit / best_input) * 100.0 if best_input > 0.0 else 0.0
    return ArbitrageOpportunity(
        optimal_input=best_input,
        final_output=best_input + gross_profit,
        gross_profit=gross_profit,
        net_profit=net_profit,
        profit_percentage=profit_percentage,
        search_method=search_method,
        path=path,
        execution_cost=execution_cost,
    )


class PathEvaluator:
    """Evaluates candidate routes against a read-only token graph."""

    def __init__(self, token_graph: TokenGraph, config: AnalysisConfig):
        self.token_graph = token_graph
        self.config = config

    def evaluate(self, path: ArbitragePath) -> Optional[ArbitrageOpportunity]:
        """
        Optimal input, gross and net profit for one route.

        Returns:
            The opportunity, or None when a hop cannot be resolved
        """
        pools = path_reserves(self.token_graph, path)
        if pools is None:
            logger.debug(f"Skipping {path.description()}: missing pool")
            return None

        best_input, gross_profit = find_best_input(
            pools, self.config.fee, self.config.ternary_search_iterations
        )
        execution_cost = self.config.cost_model.execution_cost(path.hop_count)
        return build_opportunity(
            best_input, gross_profit, execution_cost, SEARCH_METHOD_MULTI_PATH, path
        )


def prepare_triangle_pools(
    snapshots: Sequence[ReserveSnapshot], route: Sequence[Token]
) -> Optional[List[HopReserves]]:
    """
    Oriented token-unit reserves for a fixed base -> mid -> alt -> base route.

    Args:
        snapshots: One snapshot per hop, in hop order
        route: base, mid, alt tokens

    Returns:
        Per-hop reserves, or None if a snapshot does not hold its hop's tokens
    """
    base, mid, alt = route
    hops = [(base, mid), (mid, alt), (alt, base)]
    if len(snapshots) != len(hops):
        return None

    pools: List[HopReserves] = []
    for snapshot, (token_in, token_out) in zip(snapshots, hops):
        raw = snapshot.reserves_for_pair(token_in, token_out)
        if raw is None:
            return None
        pools.append(
            (
                raw_to_units(raw[0], token_in.decimals),
                raw_to_units(raw[1], token_out.decimals),
            )
        )
    return pools


def find_triangular_opportunity(
    snapshots: Sequence[ReserveSnapshot],
    route: Sequence[Token],
    config: AnalysisConfig,
) -> Optional[ArbitrageOpportunity]:
    """Evaluate the legacy fixed triangle without building a graph."""
    pools = prepare_triangle_pools(snapshots, route)
    if pools is None:
        return None

    best_input, gross_profit = find_best_input(
        pools, config.fee, config.ternary_search_iterations
    )
    execution_cost = config.cost_model.execution_cost(
        ArbitrageOpportunity.LEGACY_HOP_COUNT
    )
    return build_opportunity(best_input, gross_profit, execution_cost, SEARCH_METHOD_TERNARY)
