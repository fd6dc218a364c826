"""
Multi-path arbitrage analyzer.

Owns the token graph for a run and drives one analysis pass: apply the
latest reserves, search for negative cycles, then evaluate every candidate
route on a thread pool.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .config import AnalysisConfig
from .cycle_finder import find_arbitrage_cycles
from .path_evaluator import PathEvaluator
from .ranker import select_best
from .token_graph import TokenGraph
from .types import (
    ArbitrageOpportunity,
    ArbitragePath,
    MultiPathOpportunity,
    ReserveSnapshot,
    Token,
)
from .utils import get_logger

logger = get_logger(__name__)


class MultiPathAnalyzer:
    """
    Graph-wide arbitrage analysis anchored at a base token.

    Reserve updates and cycle search run on the caller's thread; only route
    evaluation is fanned out, and it reads the graph without mutating it.
    """

    def __init__(self, base_token: Token, config: Optional[AnalysisConfig] = None):
        self.base_token = base_token
        self.config = config or AnalysisConfig()
        self.graph = TokenGraph(base_token)
        self.evaluator = PathEvaluator(self.graph, self.config)
        self._known_pools: Set[str] = set()
        self._shadowed_pools: Set[str] = set()

    def add_pool(self, snapshot: ReserveSnapshot) -> None:
        """
        Register a pool, or refresh it if it is already in the graph.

        The graph holds one pool per token pair: the first one registered
        wins and later pools on the same pair are skipped with a warning.
        """
        if snapshot.pool_id in self._known_pools:
            self.graph.update_pool(snapshot)
            return
        if snapshot.pool_id in self._shadowed_pools:
            return
        existing = self.graph.get_pool_info(snapshot.token_a, snapshot.token_b)
        if existing is not None:
            self._shadowed_pools.add(snapshot.pool_id)
            logger.warning(
                f"Skipping pool {snapshot.pool_id}: "
                f"{snapshot.token_a.symbol}/{snapshot.token_b.symbol} "
                f"already served by {existing.pool_id}"
            )
            return
        self.graph.add_pool(snapshot, self.config.fee)
        self._known_pools.add(snapshot.pool_id)

    def update_pool_reserves(self, reserves: Dict[str, ReserveSnapshot]) -> None:
        """Apply one poll's reserve map; unseen pools are added on the fly."""
        for snapshot in reserves.values():
            self.add_pool(snapshot)

    def load_pools(self, snapshots: Iterable[ReserveSnapshot]) -> None:
        for snapshot in snapshots:
            self.add_pool(snapshot)
        nodes, edges = self.graph_stats()
        logger.info(f"Graph initialized: {nodes} tokens, {edges} directed edges")

    def get_all_paths(self) -> List[ArbitragePath]:
        return find_arbitrage_cycles(self.graph, self.config.max_hops)

    def _evaluate_safely(self, path: ArbitragePath) -> Optional[ArbitrageOpportunity]:
        # One degenerate route must not fail the whole pass
        try:
            return self.evaluator.evaluate(path)
        except (ArithmeticError, ValueError) as e:
            logger.debug(f"Dropping {path.description()}: {e}")
            return None

    def find_all_opportunities(self) -> MultiPathOpportunity:
        """
        Run cycle search and evaluate every candidate route.

        Returns:
            All evaluated opportunities (profitable or not) with timing
        """
        start = time.perf_counter()

        cycles = self.get_all_paths()
        if cycles:
            workers = min(self.config.max_workers, len(cycles))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self._evaluate_safely, cycles))
        else:
            results = []

        opportunities = [opp for opp in results if opp is not None]
        analysis_time_ms = int((time.perf_counter() - start) * 1000)

        logger.debug(
            f"Analysis pass: {len(cycles)} candidate cycles, "
            f"{len(opportunities)} evaluated in {analysis_time_ms}ms"
        )
        return MultiPathOpportunity(
            opportunities=opportunities,
            analysis_time_ms=analysis_time_ms,
            candidate_count=len(cycles),
        )

    def best_opportunity(
        self, result: MultiPathOpportunity
    ) -> Optional[ArbitrageOpportunity]:
        """Pick from a pass result with the configured strategy."""
        return select_best(result.opportunities, self.config.strategy)

    def graph_stats(self) -> Tuple[int, int]:
        return self.graph.stats()
