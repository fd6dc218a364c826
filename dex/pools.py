"""
Pool registry loading.

Pools come from the ``pools`` list of the YAML config and, optionally, from
a CSV export with the columns
``Protocol,Pair Name,Pair Address,TokenA Reserves,TokenB Reserves``.
Pair names are ``"A-B"`` token symbols; rows naming a symbol that is not in
the token config are skipped.
"""

import csv
import os
from dataclasses import replace
from typing import Dict, List, Optional

from cycle_arbitrage.exceptions import DataError
from cycle_arbitrage.types import Token
from cycle_arbitrage.utils import get_logger

from .config import DexConfig
from .types import PoolSpec

logger = get_logger(__name__)

CSV_COLUMNS = [
    "Protocol",
    "Pair Name",
    "Pair Address",
    "TokenA Reserves",
    "TokenB Reserves",
]


def _parse_reserve(raw: Optional[str]) -> float:
    if raw is None or raw.strip() == "":
        return 0.0
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return 0.0


def split_pair_name(pair_name: str) -> Optional[List[str]]:
    """Split "MOE-WMNT" into ["MOE", "WMNT"]; None if not exactly two symbols."""
    symbols = [part.strip() for part in pair_name.split("-")]
    if len(symbols) != 2 or not all(symbols):
        return None
    return symbols


def load_pools_csv(csv_path: str, tokens: Dict[str, Token]) -> List[PoolSpec]:
    """
    Load pools from a CSV export.

    Args:
        csv_path: Path to the CSV file
        tokens: Known tokens by symbol

    Returns:
        Pools whose both symbols are known, in file order

    Raises:
        DataError: If the file is missing or lacks required columns
    """
    if not os.path.exists(csv_path):
        raise DataError(f"Pool CSV not found: {csv_path}", source=csv_path)

    pools: List[PoolSpec] = []
    skipped = 0

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        missing = [col for col in CSV_COLUMNS[1:3] if col not in (reader.fieldnames or [])]
        if missing:
            raise DataError(
                f"Pool CSV {csv_path} missing columns: {', '.join(missing)}",
                source=csv_path,
            )

        for row in reader:
            symbols = split_pair_name(row.get("Pair Name") or "")
            address = (row.get("Pair Address") or "").strip()
            if symbols is None or not address:
                skipped += 1
                continue

            symbol_a, symbol_b = symbols
            if symbol_a not in tokens or symbol_b not in tokens:
                skipped += 1
                continue

            pools.append(
                PoolSpec(
                    name=f"{symbol_a}-{symbol_b}",
                    address=address,
                    token_a=tokens[symbol_a],
                    token_b=tokens[symbol_b],
                    seed_reserve_a=_parse_reserve(row.get("TokenA Reserves")),
                    seed_reserve_b=_parse_reserve(row.get("TokenB Reserves")),
                    protocol=(row.get("Protocol") or "").strip(),
                )
            )

    logger.info(f"Loaded {len(pools)} pools from {csv_path} ({skipped} skipped)")
    return pools


def pools_from_config(config: DexConfig) -> List[PoolSpec]:
    """
    All pools of a config: the YAML list first, then the CSV file.

    Pools are de-duplicated by address; the first occurrence wins, but it
    takes seed reserves from a later duplicate when it has none of its own.
    """
    pools = [
        PoolSpec(
            name=pool["name"],
            address=pool["address"],
            token_a=config.tokens[pool["token_a"]],
            token_b=config.tokens[pool["token_b"]],
            seed_reserve_a=pool["reserve_a"],
            seed_reserve_b=pool["reserve_b"],
        )
        for pool in config.pools
    ]
    if config.pools_csv:
        pools.extend(load_pools_csv(config.pools_csv, config.tokens))

    unique: Dict[str, PoolSpec] = {}
    for pool in pools:
        existing = unique.get(pool.pool_id)
        if existing is None:
            unique[pool.pool_id] = pool
        elif not existing.has_seed_reserves() and pool.has_seed_reserves():
            seeds = (pool.seed_reserve_a, pool.seed_reserve_b)
            if pool.token_a != existing.token_a:
                seeds = seeds[::-1]
            unique[pool.pool_id] = replace(
                existing, seed_reserve_a=seeds[0], seed_reserve_b=seeds[1]
            )
    return list(unique.values())


def find_pool(pools: List[PoolSpec], token_x: Token, token_y: Token) -> Optional[PoolSpec]:
    """First pool trading the unordered pair {token_x, token_y}."""
    for pool in pools:
        if {pool.token_a, pool.token_b} == {token_x, token_y}:
            return pool
    return None
