"""
Immutable analysis parameters consumed by the detection core.

The DEX runner builds these from its YAML/env configuration; tests build them
directly to pin gas constants per scenario.
"""

from dataclasses import dataclass, field

from .constants import (
    DEFAULT_DEX_FEE,
    DEFAULT_GAS_PRICE_GWEI,
    DEFAULT_MAX_HOPS,
    DEFAULT_TERNARY_SEARCH_ITERATIONS,
    GAS_UNITS_3_HOPS,
    GAS_UNITS_4_HOPS,
    GAS_UNITS_PER_EXTRA_HOP,
    GWEI_TO_NATIVE_MULTIPLIER,
    OptimizationStrategy,
)
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ExecutionCostModel:
    """
    Gas cost of executing a route, in the base token's native currency.

    3-hop and 4-hop routes have their own unit counts; longer routes add
    ``gas_units_per_extra_hop`` per hop beyond three.
    """

    gas_units_3_hops: int = GAS_UNITS_3_HOPS
    gas_units_4_hops: int = GAS_UNITS_4_HOPS
    gas_units_per_extra_hop: int = GAS_UNITS_PER_EXTRA_HOP
    gas_price_gwei: float = DEFAULT_GAS_PRICE_GWEI
    gwei_to_native: float = GWEI_TO_NATIVE_MULTIPLIER

    def __post_init__(self):
        if self.gas_price_gwei < 0:
            raise ConfigurationError(
                f"gas_price_gwei must be non-negative: {self.gas_price_gwei}"
            )
        for name in ("gas_units_3_hops", "gas_units_4_hops", "gas_units_per_extra_hop"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative")

    def gas_units(self, hop_count: int) -> int:
        if hop_count == 3:
            return self.gas_units_3_hops
        if hop_count == 4:
            return self.gas_units_4_hops
        extra_hops = max(hop_count - 3, 0)
        return self.gas_units_3_hops + self.gas_units_per_extra_hop * extra_hops

    def execution_cost(self, hop_count: int) -> float:
        """Gas units for ``hop_count`` priced at the configured gas price."""
        return self.gas_units(hop_count) * self.gas_price_gwei * self.gwei_to_native


@dataclass(frozen=True)
class AnalysisConfig:
    """Scalar parameters of one analysis pass."""

    fee: float = DEFAULT_DEX_FEE
    ternary_search_iterations: int = DEFAULT_TERNARY_SEARCH_ITERATIONS
    max_hops: int = DEFAULT_MAX_HOPS
    cost_model: ExecutionCostModel = field(default_factory=ExecutionCostModel)
    strategy: OptimizationStrategy = OptimizationStrategy.MAX_PROFIT
    max_workers: int = 4

    def __post_init__(self):
        if not 0.0 <= self.fee < 1.0:
            raise ConfigurationError(f"fee must be in [0, 1): {self.fee}")
        if self.ternary_search_iterations < 1:
            raise ConfigurationError(
                "ternary_search_iterations must be at least 1, "
                f"got {self.ternary_search_iterations}"
            )
        if self.max_hops < 3:
            raise ConfigurationError(
                f"max_hops must be at least 3, got {self.max_hops}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be at least 1, got {self.max_workers}"
            )
