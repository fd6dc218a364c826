"""
Core data types for DEX cycle arbitrage detection.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .constants import DEFAULT_TOKEN_DECIMALS, PATH_SEPARATOR, PathType
from .exceptions import ValidationError
from .utils import raw_to_units


@dataclass(frozen=True, eq=False)
class Token:
    """
    On-chain token identity.

    Two tokens are equal when their addresses match (case-insensitive);
    symbol and decimals are descriptive only.

    Attributes:
        address: Contract address of the token
        symbol: Ticker symbol (e.g., "WMNT")
        decimals: Token decimals used to scale raw reserves
    """

    address: str
    symbol: str
    decimals: int = DEFAULT_TOKEN_DECIMALS

    def __eq__(self, other) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.address.lower() == other.address.lower()

    def __hash__(self) -> int:
        return hash(self.address.lower())

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class ReserveSnapshot:
    """
    Reserves of one pool at a given block, as read from the pair contract.

    Attributes:
        pool_id: Pair contract address
        token_a: token0 of the pair
        token_b: token1 of the pair
        reserve_a: Raw integer reserve of token_a
        reserve_b: Raw integer reserve of token_b
        block_number: Block the reserves were read at
        timestamp: When the snapshot was taken
    """

    pool_id: str
    token_a: Token
    token_b: Token
    reserve_a: int
    reserve_b: int
    block_number: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def reserves_in_units(self) -> Tuple[float, float]:
        """Reserves scaled to whole token units using each token's decimals."""
        return (
            raw_to_units(self.reserve_a, self.token_a.decimals),
            raw_to_units(self.reserve_b, self.token_b.decimals),
        )

    def reserves_for_pair(
        self, token_in: Token, token_out: Token
    ) -> Optional[Tuple[int, int]]:
        """Raw (reserve_in, reserve_out) for a swap direction, None if tokens don't match."""
        if self.token_a == token_in and self.token_b == token_out:
            return self.reserve_a, self.reserve_b
        if self.token_a == token_out and self.token_b == token_in:
            return self.reserve_b, self.reserve_a
        return None


@dataclass(frozen=True)
class ArbitragePath:
    """
    Ordered token route with the pool used for each hop.

    Attributes:
        tokens: Tokens visited, first == last == base token for a closed cycle
        pools: Pool id per hop (len(tokens) - 1 entries)
    """

    tokens: Tuple[Token, ...]
    pools: Tuple[str, ...]

    def __post_init__(self):
        # Accept lists from callers while keeping the instance immutable
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "pools", tuple(self.pools))
        if len(self.tokens) < 3:
            raise ValidationError(
                f"Arbitrage path needs at least 3 tokens, got {len(self.tokens)}"
            )
        if len(self.pools) != len(self.tokens) - 1:
            raise ValidationError(
                f"Arbitrage path has {len(self.tokens)} tokens but {len(self.pools)} pools",
                details={"tokens": len(self.tokens), "pools": len(self.pools)},
            )

    @property
    def hop_count(self) -> int:
        return len(self.tokens) - 1

    @property
    def path_type(self) -> PathType:
        if self.hop_count == 3:
            return PathType.THREE_HOP
        if self.hop_count == 4:
            return PathType.FOUR_HOP
        return PathType.CUSTOM

    @property
    def is_closed(self) -> bool:
        return self.tokens[0] == self.tokens[-1]

    def description(self) -> str:
        """Human-readable route, e.g. "WMNT → MOE → JOE → WMNT"."""
        return PATH_SEPARATOR.join(token.symbol for token in self.tokens)

    def hops(self) -> List[Tuple[Token, Token, str]]:
        """(token_in, token_out, pool_id) per hop in swap order."""
        return [
            (self.tokens[i], self.tokens[i + 1], self.pools[i])
            for i in range(self.hop_count)
        ]


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """
    Evaluated arbitrage route.

    Attributes:
        optimal_input: Input amount (base token units) maximizing profit
        final_output: Base token returned for optimal_input
        gross_profit: final_output - optimal_input
        net_profit: gross_profit minus execution cost
        profit_percentage: net_profit / optimal_input * 100 (0 if no input)
        search_method: Tag of the optimizer that produced the result
        path: Route evaluated, None for the legacy fixed triangle
        execution_cost: Execution cost subtracted from gross profit
    """

    optimal_input: float
    final_output: float
    gross_profit: float
    net_profit: float
    profit_percentage: float
    search_method: str
    path: Optional[ArbitragePath] = None
    execution_cost: float = 0.0

    # The legacy triangle has no path object but is always three swaps
    LEGACY_HOP_COUNT = 3

    def is_profitable(self) -> bool:
        return self.net_profit > 0.0

    def hop_count(self) -> int:
        if self.path is None:
            return self.LEGACY_HOP_COUNT
        return self.path.hop_count

    def path_type(self) -> str:
        if self.path is None:
            return "legacy"
        return self.path.path_type.value

    def description(self) -> str:
        if self.path is None:
            return "legacy triangle"
        return self.path.description()


@dataclass
class MultiPathOpportunity:
    """
    Result of one analysis pass over the whole graph.

    Attributes:
        opportunities: Every evaluated candidate (profitable or not)
        analysis_time_ms: Wall time of cycle search plus evaluation
        candidate_count: Cycles returned by the cycle finder
    """

    opportunities: List[ArbitrageOpportunity]
    analysis_time_ms: int = 0
    candidate_count: int = 0

    def profitable_opportunities(self) -> List[ArbitrageOpportunity]:
        return [opp for opp in self.opportunities if opp.is_profitable()]

    def profitable_count(self) -> int:
        return len(self.profitable_opportunities())

    def best_attempt(self) -> Optional[ArbitrageOpportunity]:
        """Highest net profit among all candidates, profitable or not."""
        if not self.opportunities:
            return None
        return max(self.opportunities, key=lambda opp: opp.net_profit)
