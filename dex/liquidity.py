"""
Liquidity statistics over a reserve map.

Liquidity of a pool is the sum of its two reserves in token units; this is
only meaningful as a rough ranking since the tokens are not priced.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from cycle_arbitrage.types import ReserveSnapshot


@dataclass
class LiquidityStats:
    """
    Distribution of pool liquidity.

    Attributes:
        total_pools: Number of pools analyzed
        total_liquidity: Sum of all pool liquidities
        mean_liquidity: Average pool liquidity
        median_liquidity: Median pool liquidity
        max_liquidity: Largest pool liquidity
        min_liquidity: Smallest pool liquidity
        top_10_pools: Ten largest liquidities, descending
    """

    total_pools: int = 0
    total_liquidity: float = 0.0
    mean_liquidity: float = 0.0
    median_liquidity: float = 0.0
    max_liquidity: float = 0.0
    min_liquidity: float = 0.0
    top_10_pools: List[float] = field(default_factory=list)

    def format_analysis(self) -> str:
        lines = [
            "📊 Liquidity Analysis:",
            f"├─ Total Pools: {self.total_pools}",
            f"├─ Total Liquidity: {self.total_liquidity:.2f}",
            f"├─ Mean Liquidity: {self.mean_liquidity:.2f}",
            f"├─ Median Liquidity: {self.median_liquidity:.2f}",
            f"├─ Max Liquidity: {self.max_liquidity:.2f}",
            f"├─ Min Liquidity: {self.min_liquidity:.2f}",
            "└─ Top 10 Pools by Liquidity:",
        ]
        for i, liquidity in enumerate(self.top_10_pools):
            prefix = "   └─" if i == len(self.top_10_pools) - 1 else "   ├─"
            lines.append(f"{prefix}  #{i + 1}: {liquidity:.2f}")
        return "\n".join(lines)


def analyze_liquidity_distribution(
    reserves: Dict[str, ReserveSnapshot]
) -> LiquidityStats:
    liquidities = sorted(
        (sum(snapshot.reserves_in_units()) for snapshot in reserves.values()),
        reverse=True,
    )
    count = len(liquidities)
    if count == 0:
        return LiquidityStats()

    total = sum(liquidities)
    if count % 2 == 0:
        median = (liquidities[count // 2 - 1] + liquidities[count // 2]) / 2.0
    else:
        median = liquidities[count // 2]

    return LiquidityStats(
        total_pools=count,
        total_liquidity=total,
        mean_liquidity=total / count,
        median_liquidity=median,
        max_liquidity=liquidities[0],
        min_liquidity=liquidities[-1],
        top_10_pools=liquidities[:10],
    )


def arbitrage_ready_pools(
    reserves: Dict[str, ReserveSnapshot], min_liquidity: float
) -> List[str]:
    """Pool ids whose both reserves (token units) reach ``min_liquidity``."""
    ready = []
    for pool_id, snapshot in reserves.items():
        reserve_a, reserve_b = snapshot.reserves_in_units()
        if reserve_a >= min_liquidity and reserve_b >= min_liquidity:
            ready.append(pool_id)
    return sorted(ready)
