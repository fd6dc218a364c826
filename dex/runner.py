"""
Polling runners for the DEX arbitrage monitor.

Each pass reads the current block, fetches reserves only when the block
advanced, skips analysis when no reserve moved, then analyzes and reports.
MultiPathRunner searches the whole pool graph; TriangularRunner evaluates
one fixed base -> mid -> alt -> base triangle.
"""

import time
from typing import Dict, List, Optional, Sequence, Tuple

from web3 import Web3

from cycle_arbitrage.analyzer import MultiPathAnalyzer
from cycle_arbitrage.constants import ReportFormat
from cycle_arbitrage.exceptions import (
    CycleArbitrageError,
    DataError,
    NetworkError,
    ReportingError,
)
from cycle_arbitrage.path_evaluator import find_triangular_opportunity
from cycle_arbitrage.ranker import rank
from cycle_arbitrage.types import (
    ArbitrageOpportunity,
    MultiPathOpportunity,
    ReserveSnapshot,
)
from cycle_arbitrage.utils import get_logger

from .adapters.v2 import fetch_all_reserves
from .cache import ReservesCache
from .config import ConfigError, DexConfig
from .liquidity import analyze_liquidity_distribution, arbitrage_ready_pools
from .pools import find_pool, pools_from_config
from .reporting import (
    format_single_pool_reserves,
    init_csv_file,
    print_pass_summary,
    write_opportunity,
)
from .types import PoolSpec

logger = get_logger(__name__)

# (block number, reserves by pool id, fetch time in ms)
PollResult = Tuple[int, Dict[str, ReserveSnapshot], int]


class BaseRunner:
    """
    Shared polling loop: connect, load pools, poll, analyze, report.

    Subclasses implement ``analyze``.
    """

    title = "DEX ARBITRAGE MONITOR"

    def __init__(self, config: DexConfig, web3: Optional[Web3] = None):
        """
        Initialize runner with config.

        Args:
            config: Validated DexConfig instance
            web3: Pre-built Web3 instance; connect() creates one when None
        """
        self.config = config
        self.web3 = web3
        self.analysis_config = config.analysis_config()
        self.pools: List[PoolSpec] = []
        self.cache = ReservesCache()
        self.pass_count = 0

    def connect(self) -> None:
        """
        Connect to the configured RPC endpoint and check it answers.

        Raises:
            NetworkError: If the endpoint cannot be queried
        """
        if self.web3 is None:
            logger.info(f"Connecting to RPC: {self.config.rpc_url}")
            self.web3 = Web3(
                Web3.HTTPProvider(self.config.rpc_url, request_kwargs={"timeout": 10})
            )

        block = self.current_block()
        logger.info(f"✓ Connected (block #{block:,})")

    def current_block(self) -> int:
        try:
            return int(self.web3.eth.block_number)
        except Exception as e:
            raise NetworkError(
                f"Failed to read block number: {e}", endpoint=self.config.rpc_url
            ) from e

    def load_pools(self) -> None:
        """
        Load the pool registry from config.

        Raises:
            DataError: If no pool could be loaded
        """
        self.pools = pools_from_config(self.config)
        if not self.pools:
            raise DataError("No pools configured", source="config")
        logger.info(f"Loaded {len(self.pools)} pools")

    def poll(self) -> Optional[PollResult]:
        """
        Fetch reserves if the chain moved.

        Returns:
            (block, reserves, fetch_ms), or None when the block did not
            advance or no reserve changed
        """
        block = self.current_block()
        if not self.cache.has_changed(block):
            return None

        start = time.perf_counter()
        reserves = fetch_all_reserves(
            self.web3,
            self.pools,
            block_number=block,
            max_retries=self.config.max_retries,
            batch_size=self.config.batch_size,
        )
        fetch_ms = int((time.perf_counter() - start) * 1000)

        if not reserves:
            logger.warning(f"No reserves fetched at block {block}")
            return None

        if not self.cache.reserves_changed(reserves):
            self.cache.update_block_number(block)
            logger.debug(f"Block {block}: reserves unchanged, skipping analysis")
            return None

        self.cache.update_all(reserves)
        self.cache.update_block_number(block)
        return block, reserves, fetch_ms

    def analyze(
        self, block: int, reserves: Dict[str, ReserveSnapshot], fetch_ms: int
    ) -> Optional[MultiPathOpportunity]:
        raise NotImplementedError

    def run_once(self) -> Optional[MultiPathOpportunity]:
        """Poll once and analyze if anything changed."""
        polled = self.poll()
        if polled is None:
            return None
        self.pass_count += 1
        return self.analyze(*polled)

    def report(
        self,
        result: MultiPathOpportunity,
        ranked: Sequence[ArbitrageOpportunity],
        block: int,
        fetch_ms: int,
    ) -> None:
        """Print the pass summary and append the best opportunity to the CSV."""
        report_format = self.config.report_format

        if report_format in (ReportFormat.CONSOLE, ReportFormat.BOTH):
            print_pass_summary(
                result,
                ranked,
                block,
                self.analysis_config.ternary_search_iterations,
                fetch_ms,
            )

        if report_format in (ReportFormat.CSV, ReportFormat.BOTH) and ranked:
            try:
                write_opportunity(
                    self.config.csv_file_path,
                    ranked[0],
                    block,
                    self.analysis_config.cost_model,
                    fetch_ms,
                    result.analysis_time_ms,
                )
            except ReportingError as e:
                logger.warning(f"⚠️ {e}")
            else:
                logger.info(f"✅ Logged to CSV: {self.config.csv_file_path}")

    def print_banner(self) -> None:
        cfg = self.config
        print(f"\n{'═' * 80}")
        print(f"  🚀 {self.title}")
        print(f"{'═' * 80}")
        print(
            f"  Base: {cfg.base_token} | Pools: {len(self.pools)} | "
            f"Max hops: {cfg.max_hops} | Strategy: {cfg.strategy.value}"
        )
        print(
            f"  Fee: {cfg.dex_fee * 100:.2f}% | Gas: {cfg.gas_price_gwei} gwei | "
            f"Poll: {cfg.block_time_seconds}s | Report: {cfg.report_format.value}"
        )
        print(f"{'═' * 80}\n")

    def run(self) -> None:
        """
        Main loop: poll, analyze, report, sleep.

        Runs indefinitely unless config.once=True.
        """
        if not self.pools:
            raise RuntimeError("No pools loaded. Call load_pools() before run().")

        if self.config.report_format in (ReportFormat.CSV, ReportFormat.BOTH):
            init_csv_file(self.config.csv_file_path)

        self.print_banner()

        while True:
            try:
                self.run_once()
            except CycleArbitrageError as e:
                logger.error(f"Pass failed: {e}")
                if self.config.once:
                    raise

            if self.config.once:
                break

            time.sleep(self.config.block_time_seconds)


class MultiPathRunner(BaseRunner):
    """Graph-wide cycle search over every configured pool."""

    title = "MULTI-PATH ARBITRAGE MONITOR"

    def __init__(self, config: DexConfig, web3: Optional[Web3] = None):
        super().__init__(config, web3)
        self.analyzer = MultiPathAnalyzer(config.base(), self.analysis_config)

    def load_pools(self) -> None:
        """Load pools and seed the graph with any known reserves."""
        super().load_pools()
        seeds = [pool.seed_snapshot() for pool in self.pools if pool.has_seed_reserves()]
        self.analyzer.load_pools(seeds)

    def analyze(
        self, block: int, reserves: Dict[str, ReserveSnapshot], fetch_ms: int
    ) -> MultiPathOpportunity:
        if self.pass_count == 1:
            self._log_liquidity(reserves)

        self.analyzer.update_pool_reserves(reserves)
        result = self.analyzer.find_all_opportunities()
        ranked = rank(result.opportunities, self.config.strategy)

        logger.info(
            f"Pass {self.pass_count}: {result.candidate_count} cycles, "
            f"{result.profitable_count()} profitable"
        )
        self.report(result, ranked, block, fetch_ms)
        return result

    def _log_liquidity(self, reserves: Dict[str, ReserveSnapshot]) -> None:
        stats = analyze_liquidity_distribution(reserves)
        ready = arbitrage_ready_pools(reserves, self.config.min_liquidity)
        logger.debug("\n" + stats.format_analysis())
        logger.info(
            f"{len(ready)}/{stats.total_pools} pools have both reserves "
            f">= {self.config.min_liquidity}"
        )


class TriangularRunner(BaseRunner):
    """Fixed base -> mid -> alt -> base triangle over three pools."""

    title = "TRIANGULAR ARBITRAGE MONITOR"

    def __init__(self, config: DexConfig, web3: Optional[Web3] = None):
        super().__init__(config, web3)
        route = config.triangle_route()
        if route is None:
            raise ConfigError("triangle {mid, alt} must be configured")
        self.route = route
        self.route_pools: List[PoolSpec] = []

    def load_pools(self) -> None:
        """
        Resolve the three triangle pools; only those are polled.

        Raises:
            ConfigError: If a leg of the triangle has no pool
        """
        super().load_pools()
        base, mid, alt = self.route

        route_pools = []
        for token_x, token_y in ((base, mid), (mid, alt), (alt, base)):
            pool = find_pool(self.pools, token_x, token_y)
            if pool is None:
                raise ConfigError(f"No pool configured for {token_x}-{token_y}")
            route_pools.append(pool)

        self.route_pools = route_pools
        self.pools = route_pools

    def analyze(
        self, block: int, reserves: Dict[str, ReserveSnapshot], fetch_ms: int
    ) -> Optional[MultiPathOpportunity]:
        snapshots = [reserves.get(pool.pool_id) for pool in self.route_pools]
        if any(snapshot is None for snapshot in snapshots):
            logger.warning(f"Block {block}: missing reserves for a triangle pool")
            return None

        for pool, snapshot in zip(self.route_pools, snapshots):
            logger.debug(f"📊 {pool.name}: {format_single_pool_reserves(snapshot)}")

        start = time.perf_counter()
        opportunity = find_triangular_opportunity(
            snapshots, self.route, self.analysis_config
        )
        analysis_ms = int((time.perf_counter() - start) * 1000)

        if opportunity is None:
            logger.warning(f"Block {block}: failed to analyze triangle pools")
            return None

        result = MultiPathOpportunity(
            opportunities=[opportunity],
            analysis_time_ms=analysis_ms,
            candidate_count=1,
        )
        ranked = [opportunity] if opportunity.is_profitable() else []
        self.report(result, ranked, block, fetch_ms)
        return result
