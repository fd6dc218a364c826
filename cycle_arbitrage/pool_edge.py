"""
Constant-product pool model used as the edge payload of the token graph.

Each pool carries two directed weights, ``-ln(rate)`` with
``rate = reserve_out * (1 - fee) / reserve_in``, so a cycle whose weights sum
below zero has an exchange-rate product above one.
"""

import math
from typing import Optional, Tuple

from .constants import RESERVE_EPSILON
from .exceptions import ValidationError
from .types import Token


def swap(reserve_in: float, reserve_out: float, amount_in: float, fee: float) -> float:
    """
    Output of one constant-product swap, 0.0 for non-positive inputs.

    Formula (fee taken from the input):
        amount_in_with_fee = amount_in * (1 - fee)
        amount_out = amount_in_with_fee * reserve_out / (reserve_in + amount_in_with_fee)
    """
    if amount_in <= 0.0 or reserve_in <= 0.0 or reserve_out <= 0.0:
        return 0.0
    amount_in_with_fee = amount_in * (1.0 - fee)
    return (reserve_out * amount_in_with_fee) / (reserve_in + amount_in_with_fee)


def calculate_log_weights(
    reserve_a: float, reserve_b: float, fee: float
) -> Tuple[float, float]:
    """
    Negative log weights for both swap directions of a pool.

    Returns:
        (weight_a_to_b, weight_b_to_a); both +inf when either reserve is empty
    """
    if reserve_a <= RESERVE_EPSILON or reserve_b <= RESERVE_EPSILON:
        return math.inf, math.inf

    effective_fee = 1.0 - fee
    rate_a_to_b = (reserve_b * effective_fee) / reserve_a
    rate_b_to_a = (reserve_a * effective_fee) / reserve_b

    weight_a_to_b = -math.log(rate_a_to_b) if rate_a_to_b > RESERVE_EPSILON else math.inf
    weight_b_to_a = -math.log(rate_b_to_a) if rate_b_to_a > RESERVE_EPSILON else math.inf
    return weight_a_to_b, weight_b_to_a


class PoolEdge:
    """
    One AMM pool between two tokens with reserves in token units.

    Weights are derived state: they are recomputed in full whenever reserves
    change and never patched individually.
    """

    def __init__(
        self,
        pool_id: str,
        token_a: Token,
        token_b: Token,
        reserve_a: float,
        reserve_b: float,
        fee: float,
    ):
        if not 0.0 <= fee < 1.0:
            raise ValidationError(
                f"Pool fee must be in [0, 1): {fee}", details={"pool": pool_id}
            )
        self.pool_id = pool_id
        self.token_a = token_a
        self.token_b = token_b
        self.fee = fee
        self.reserve_a = 0.0
        self.reserve_b = 0.0
        self.weight_a_to_b = math.inf
        self.weight_b_to_a = math.inf
        self.update_reserves(reserve_a, reserve_b)

    def __repr__(self):
        return (
            f"PoolEdge({self.pool_id} {self.token_a.symbol}/{self.token_b.symbol}, "
            f"reserves={self.reserve_a:.4f}/{self.reserve_b:.4f}, fee={self.fee})"
        )

    def update_reserves(self, reserve_a: float, reserve_b: float) -> None:
        """Store fresh reserves and recompute both directed weights."""
        self.reserve_a = float(reserve_a)
        self.reserve_b = float(reserve_b)
        self.weight_a_to_b, self.weight_b_to_a = calculate_log_weights(
            self.reserve_a, self.reserve_b, self.fee
        )

    def weight_from(self, token_in: Token) -> float:
        """Directed weight for swapping out of ``token_in``; +inf for a foreign token."""
        if token_in == self.token_a:
            return self.weight_a_to_b
        if token_in == self.token_b:
            return self.weight_b_to_a
        return math.inf

    def reserves_for(self, token_in: Token) -> Optional[Tuple[float, float]]:
        """(reserve_in, reserve_out) oriented for a swap out of ``token_in``."""
        if token_in == self.token_a:
            return self.reserve_a, self.reserve_b
        if token_in == self.token_b:
            return self.reserve_b, self.reserve_a
        return None

    def rate_a_to_b(self) -> float:
        """Spot price of token_a in token_b, fee excluded."""
        if self.reserve_a > 0.0:
            return self.reserve_b / self.reserve_a
        return 0.0

    def rate_b_to_a(self) -> float:
        """Spot price of token_b in token_a, fee excluded."""
        if self.reserve_b > 0.0:
            return self.reserve_a / self.reserve_b
        return 0.0

    def calculate_output(self, input_amount: float, token_in: Token) -> Optional[float]:
        """
        Output of swapping ``input_amount`` of ``token_in`` through this pool.

        Returns:
            Output amount, or None when ``token_in`` is not in the pool or any
            reserve/input is non-positive
        """
        reserves = self.reserves_for(token_in)
        if reserves is None:
            return None
        reserve_in, reserve_out = reserves

        if reserve_in <= 0.0 or reserve_out <= 0.0 or input_amount <= 0.0:
            return None

        return swap(reserve_in, reserve_out, input_amount, self.fee)
