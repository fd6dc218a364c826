"""
Configuration loading and validation for the DEX cycle arbitrage monitor.

Settings come from a YAML file; a handful of operational values can be
overridden from the environment (or a ``.env`` file) so the same config can
be pointed at different RPC endpoints and gas prices.
"""

import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from cycle_arbitrage.config import AnalysisConfig, ExecutionCostModel
from cycle_arbitrage.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_BLOCK_TIME_SECONDS,
    DEFAULT_CSV_FILE_PATH,
    DEFAULT_DEX_FEE,
    DEFAULT_GAS_PRICE_GWEI,
    DEFAULT_MAX_HOPS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MIN_LIQUIDITY,
    DEFAULT_TERNARY_SEARCH_ITERATIONS,
    GAS_UNITS_3_HOPS,
    GAS_UNITS_4_HOPS,
    GAS_UNITS_PER_EXTRA_HOP,
    OptimizationStrategy,
    ReportFormat,
)
from cycle_arbitrage.exceptions import ConfigurationError
from cycle_arbitrage.types import Token


class ConfigError(ConfigurationError):
    """Raised when config is invalid or missing required fields."""

    pass


# Checked in order; the first one set wins
RPC_URL_ENV_VARS = ("RPC_URL", "MANTLE_RPC_URL")

# Environment variable -> (config key, parser)
ENV_OVERRIDES: Dict[str, Tuple[str, type]] = {
    "GAS_PRICE_GWEI": ("gas_price_gwei", float),
    "BLOCK_TIME_SECONDS": ("block_time_seconds", float),
    "MAX_RETRIES": ("max_retries", int),
    "CSV_FILE_PATH": ("csv_file_path", str),
    "DEX_FEE": ("dex_fee", float),
    "TERNARY_SEARCH_ITERATIONS": ("ternary_search_iterations", int),
    "MAX_HOPS": ("max_hops", int),
}


def apply_env_overrides(
    config_dict: Dict[str, Any], environ: Mapping[str, str]
) -> Dict[str, Any]:
    """
    Return a copy of ``config_dict`` with environment overrides applied.

    ``RPC_URL`` wins over ``MANTLE_RPC_URL`` when both are set.

    Raises:
        ConfigError: If an override cannot be parsed
    """
    merged = dict(config_dict)
    for env_name in RPC_URL_ENV_VARS:
        if environ.get(env_name):
            merged["rpc_url"] = environ[env_name]
            break

    for env_name, (key, parser) in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            merged[key] = parser(raw)
        except ValueError as e:
            raise ConfigError(f"Invalid value for {env_name}: {raw!r}") from e
    return merged


class DexConfig:
    """
    Parsed and validated configuration for the arbitrage monitor.

    Attributes:
        rpc_url: HTTP(S) RPC endpoint
        base_token: Symbol of the token every cycle starts and ends at
        tokens: Dict of {symbol -> Token}
        pools: List of pool dicts {name, address, token_a, token_b, reserve_a, reserve_b}
        pools_csv: Optional CSV file with additional pools
        dex_fee: Swap fee applied on every hop (e.g., 0.003)
        ternary_search_iterations: Rounds of the input-size search
        max_hops: Longest cycle kept by the cycle finder
        gas_price_gwei: Gas price used for execution cost
        gas_units: Dict with three_hop, four_hop and per_extra_hop unit counts
        block_time_seconds: Seconds between polls
        max_retries: RPC retry attempts per pool
        batch_size: Pools fetched per batch
        csv_file_path: Where opportunity rows are appended
        report_format: Console, CSV or both
        strategy: Objective used to pick the reported opportunity
        max_workers: Threads used to evaluate candidate cycles
        min_liquidity: Per-reserve threshold for arbitrage-ready pools
        triangle: Optional {mid, alt} symbols for the fixed triangle
        once: If True, run a single pass and exit
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config (env overrides already applied)

        Raises:
            ConfigError: If required fields missing or invalid
        """
        self.rpc_url: str = self._get_required(config_dict, "rpc_url", str)
        self.once: bool = bool(config_dict.get("once", False))

        self.tokens: Dict[str, Token] = self._parse_tokens(
            config_dict.get("tokens", {})
        )
        if not self.tokens:
            raise ConfigError("At least one token must be configured")

        self.base_token: str = self._get_required(config_dict, "base_token", str)
        if self.base_token not in self.tokens:
            raise ConfigError(
                f"base_token '{self.base_token}' not found in tokens config"
            )

        self.pools: List[Dict[str, Any]] = self._parse_pools(
            config_dict.get("pools", []), self.tokens
        )
        self.pools_csv: Optional[str] = config_dict.get("pools_csv")
        if not self.pools and not self.pools_csv:
            raise ConfigError("Either pools or pools_csv must be configured")

        # Analysis parameters
        self.dex_fee: float = float(config_dict.get("dex_fee", DEFAULT_DEX_FEE))
        self.ternary_search_iterations: int = int(
            config_dict.get(
                "ternary_search_iterations", DEFAULT_TERNARY_SEARCH_ITERATIONS
            )
        )
        self.max_hops: int = int(config_dict.get("max_hops", DEFAULT_MAX_HOPS))
        self.max_workers: int = int(config_dict.get("max_workers", 4))

        # Gas settings
        self.gas_price_gwei: float = float(
            config_dict.get("gas_price_gwei", DEFAULT_GAS_PRICE_GWEI)
        )
        self.gas_units: Dict[str, int] = self._parse_gas_units(
            config_dict.get("gas_units", {})
        )

        # Polling and fetching
        self.block_time_seconds: float = float(
            config_dict.get("block_time_seconds", DEFAULT_BLOCK_TIME_SECONDS)
        )
        self.max_retries: int = int(config_dict.get("max_retries", DEFAULT_MAX_RETRIES))
        self.batch_size: int = max(int(config_dict.get("batch_size", DEFAULT_BATCH_SIZE)), 1)
        self.min_liquidity: float = float(
            config_dict.get("min_liquidity", DEFAULT_MIN_LIQUIDITY)
        )
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be at least 1, got {self.max_retries}")

        # Reporting
        self.csv_file_path: str = config_dict.get("csv_file_path", DEFAULT_CSV_FILE_PATH)
        self.report_format: ReportFormat = self._parse_enum(
            config_dict, "report_format", ReportFormat, ReportFormat.BOTH
        )
        self.strategy: OptimizationStrategy = self._parse_enum(
            config_dict, "strategy", OptimizationStrategy, OptimizationStrategy.MAX_PROFIT
        )

        self.triangle: Optional[Dict[str, str]] = self._parse_triangle(
            config_dict.get("triangle"), self.tokens, self.base_token
        )

    @staticmethod
    def _get_required(d: Dict, key: str, expected_type: type) -> Any:
        """Get required config field with type validation."""
        if key not in d:
            raise ConfigError(f"Missing required config field: {key}")
        val = d[key]
        if not isinstance(val, expected_type):
            raise ConfigError(
                f"Config field '{key}' must be {expected_type.__name__}, got {type(val).__name__}"
            )
        return val

    @staticmethod
    def _parse_enum(d: Dict, key: str, enum_type, default):
        raw = d.get(key)
        if raw is None:
            return default
        try:
            return enum_type(str(raw).lower())
        except ValueError:
            choices = ", ".join(member.value for member in enum_type)
            raise ConfigError(f"Invalid {key} '{raw}' (must be one of: {choices})")

    @staticmethod
    def _parse_tokens(tokens_raw: Dict[str, Any]) -> Dict[str, Token]:
        """Parse and validate tokens config."""
        if not isinstance(tokens_raw, dict):
            raise ConfigError("tokens must be a dict of symbol -> {address, decimals}")

        tokens = {}
        for symbol, info in tokens_raw.items():
            if not isinstance(info, dict):
                raise ConfigError(f"Token '{symbol}' config must be a dict")
            if "address" not in info:
                raise ConfigError(f"Token '{symbol}' missing 'address'")

            tokens[symbol] = Token(
                address=str(info["address"]),
                symbol=symbol,
                decimals=int(info.get("decimals", 18)),
            )
        return tokens

    @staticmethod
    def _parse_pools(
        pools_raw: List[Any], tokens: Dict[str, Token]
    ) -> List[Dict[str, Any]]:
        """Parse and validate pools config."""
        if not isinstance(pools_raw, list):
            raise ConfigError("pools must be a list")

        pools = []
        for i, pool in enumerate(pools_raw):
            if not isinstance(pool, dict):
                raise ConfigError(f"Pool config {i} must be a dict")

            name = pool.get("name")
            address = pool.get("address")
            token_a = pool.get("token_a")
            token_b = pool.get("token_b")
            if not all([name, address, token_a, token_b]):
                raise ConfigError(
                    f"Pool config {i} missing required fields (name, address, token_a, token_b)"
                )

            for symbol in (token_a, token_b):
                if symbol not in tokens:
                    raise ConfigError(
                        f"Pool '{name}' references unknown token '{symbol}'"
                    )

            pools.append(
                {
                    "name": name,
                    "address": address,
                    "token_a": token_a,
                    "token_b": token_b,
                    "reserve_a": float(pool.get("reserve_a", 0.0)),
                    "reserve_b": float(pool.get("reserve_b", 0.0)),
                }
            )
        return pools

    @staticmethod
    def _parse_gas_units(gas_raw: Dict[str, Any]) -> Dict[str, int]:
        if not isinstance(gas_raw, dict):
            raise ConfigError("gas_units must be a dict")
        return {
            "three_hop": int(gas_raw.get("three_hop", GAS_UNITS_3_HOPS)),
            "four_hop": int(gas_raw.get("four_hop", GAS_UNITS_4_HOPS)),
            "per_extra_hop": int(gas_raw.get("per_extra_hop", GAS_UNITS_PER_EXTRA_HOP)),
        }

    @staticmethod
    def _parse_triangle(
        triangle_raw: Optional[Dict[str, Any]], tokens: Dict[str, Token], base: str
    ) -> Optional[Dict[str, str]]:
        if not triangle_raw:
            return None
        if not isinstance(triangle_raw, dict):
            raise ConfigError("triangle must be a dict with 'mid' and 'alt'")

        mid = triangle_raw.get("mid")
        alt = triangle_raw.get("alt")
        if not mid or not alt:
            raise ConfigError("triangle missing 'mid' or 'alt'")
        for symbol in (mid, alt):
            if symbol not in tokens:
                raise ConfigError(f"triangle references unknown token '{symbol}'")
        if len({base, mid, alt}) != 3:
            raise ConfigError("triangle tokens must differ from each other and the base token")
        return {"mid": mid, "alt": alt}

    def base(self) -> Token:
        return self.tokens[self.base_token]

    def triangle_route(self) -> Optional[Tuple[Token, Token, Token]]:
        """(base, mid, alt) tokens of the fixed triangle, if configured."""
        if self.triangle is None:
            return None
        return (
            self.base(),
            self.tokens[self.triangle["mid"]],
            self.tokens[self.triangle["alt"]],
        )

    def cost_model(self) -> ExecutionCostModel:
        return ExecutionCostModel(
            gas_units_3_hops=self.gas_units["three_hop"],
            gas_units_4_hops=self.gas_units["four_hop"],
            gas_units_per_extra_hop=self.gas_units["per_extra_hop"],
            gas_price_gwei=self.gas_price_gwei,
        )

    def analysis_config(self) -> AnalysisConfig:
        """
        Immutable analysis parameters for the detection core.

        Raises:
            ConfigError: If a value is out of range
        """
        try:
            return AnalysisConfig(
                fee=self.dex_fee,
                ternary_search_iterations=self.ternary_search_iterations,
                max_hops=self.max_hops,
                cost_model=self.cost_model(),
                strategy=self.strategy,
                max_workers=self.max_workers,
            )
        except ConfigurationError as e:
            raise ConfigError(str(e), details=e.details) from e


def load_config(config_path: str, use_env: bool = True) -> DexConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file
        use_env: Apply overrides from the environment and a ``.env`` file

    Returns:
        Validated DexConfig instance

    Raises:
        ConfigError: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError("Config file must contain a YAML dictionary")

    if use_env:
        load_dotenv()
        config_dict = apply_env_overrides(config_dict, os.environ)

    config = DexConfig(config_dict)
    # Surface range errors at load time rather than on the first pass
    config.analysis_config()
    return config
