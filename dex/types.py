"""
Data types for the DEX side of the monitor.
"""

from dataclasses import dataclass

from cycle_arbitrage.types import ReserveSnapshot, Token
from cycle_arbitrage.utils import units_to_raw


@dataclass(frozen=True)
class PoolSpec:
    """
    A constant-product pool the monitor watches.

    Attributes:
        name: Human-readable pair name (e.g., "MOE-WMNT")
        address: On-chain address of the pair contract
        token_a: First token of the pair name
        token_b: Second token of the pair name
        seed_reserve_a: Known reserve of token_a in token units, 0 if unknown
        seed_reserve_b: Known reserve of token_b in token units, 0 if unknown
        protocol: DEX the pool belongs to (e.g., "MerchantMoe")
    """

    name: str
    address: str
    token_a: Token
    token_b: Token
    seed_reserve_a: float = 0.0
    seed_reserve_b: float = 0.0
    protocol: str = ""

    @property
    def pool_id(self) -> str:
        return self.address.lower()

    def has_seed_reserves(self) -> bool:
        return self.seed_reserve_a > 0 and self.seed_reserve_b > 0

    def seed_snapshot(self) -> ReserveSnapshot:
        """Snapshot built from the seed reserves, used before the first poll."""
        return ReserveSnapshot(
            pool_id=self.pool_id,
            token_a=self.token_a,
            token_b=self.token_b,
            reserve_a=units_to_raw(self.seed_reserve_a, self.token_a.decimals),
            reserve_b=units_to_raw(self.seed_reserve_b, self.token_b.decimals),
        )
