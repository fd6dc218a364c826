"""
Uniswap V2 style adapter for constant-product AMM pools.

Reads ``token0``/``token1``/``getReserves`` from pair contracts and turns
them into ReserveSnapshot objects keyed by pool id.
"""

import time
from typing import Dict, List, Sequence, Tuple

from web3 import Web3

from cycle_arbitrage.constants import DEFAULT_BATCH_SIZE, DEFAULT_MAX_RETRIES
from cycle_arbitrage.exceptions import DataError, NetworkError
from cycle_arbitrage.types import ReserveSnapshot
from cycle_arbitrage.utils import get_logger

from ..types import PoolSpec

logger = get_logger(__name__)

UNISWAP_V2_PAIR_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "getReserves",
        "outputs": [
            {"name": "_reserve0", "type": "uint112"},
            {"name": "_reserve1", "type": "uint112"},
            {"name": "_blockTimestampLast", "type": "uint32"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "token0",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "token1",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def _is_rate_limit(error_msg: str) -> bool:
    return (
        "429" in error_msg
        or "Too Many Requests" in error_msg
        or "-32005" in error_msg
        or "limit exceeded" in error_msg.lower()
    )


def fetch_pool(
    web3: Web3, pair_addr: str, max_retries: int = DEFAULT_MAX_RETRIES
) -> Tuple[str, str, int, int]:
    """
    Fetch token addresses and reserves from a Uniswap V2 style pair.

    Args:
        web3: Web3 instance connected to the chain
        pair_addr: Address of the pair contract
        max_retries: Maximum number of attempts (default: 3)

    Returns:
        Tuple of (token0_addr, token1_addr, reserve0, reserve1), reserves raw

    Raises:
        NetworkError: If RPC calls fail after all retries
        ValueError: If pair address is invalid
    """
    if not Web3.is_address(pair_addr):
        raise ValueError(f"Invalid pair address: {pair_addr}")

    pair = web3.eth.contract(
        address=Web3.to_checksum_address(pair_addr), abi=UNISWAP_V2_PAIR_ABI
    )

    last_error = None
    for attempt in range(max_retries):
        try:
            token0 = pair.functions.token0().call()
            token1 = pair.functions.token1().call()
            reserves = pair.functions.getReserves().call()

            return (
                Web3.to_checksum_address(token0),
                Web3.to_checksum_address(token1),
                int(reserves[0]),
                int(reserves[1]),
            )
        except Exception as e:
            last_error = e
            if _is_rate_limit(str(e)) and attempt < max_retries - 1:
                # Exponential backoff: 1s, 2s, 4s
                wait_time = 2**attempt
                logger.warning(
                    f"Rate limited fetching {pair_addr}, retrying in {wait_time}s"
                )
                time.sleep(wait_time)
                continue
            # For non-rate-limit errors, fail immediately
            raise NetworkError(
                f"Failed to fetch pool {pair_addr}: {e}",
                endpoint=pair_addr,
                status_code=429 if _is_rate_limit(str(e)) else None,
            ) from e

    # Only reached when max_retries < 1
    raise NetworkError(
        f"Failed to fetch pool {pair_addr} after {max_retries} retries: {last_error}",
        endpoint=pair_addr,
    )


def fetch_pool_reserves(
    web3: Web3,
    pool: PoolSpec,
    block_number: int = 0,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> ReserveSnapshot:
    """
    Read one pool and orient the snapshot to the pair's on-chain token order.

    Raises:
        NetworkError: If the RPC calls fail
        DataError: If the pair's tokens do not match the configured ones
    """
    token0, token1, reserve0, reserve1 = fetch_pool(web3, pool.pool_id, max_retries)
    token0 = token0.lower()
    token1 = token1.lower()

    address_a = pool.token_a.address.lower()
    address_b = pool.token_b.address.lower()

    if token0 == address_a and token1 == address_b:
        first, second = pool.token_a, pool.token_b
    elif token0 == address_b and token1 == address_a:
        first, second = pool.token_b, pool.token_a
    else:
        raise DataError(
            f"Pool {pool.name} tokens do not match pair contract",
            source="rpc",
            pool=pool.address,
            details={"token0": token0, "token1": token1},
        )

    return ReserveSnapshot(
        pool_id=pool.pool_id,
        token_a=first,
        token_b=second,
        reserve_a=reserve0,
        reserve_b=reserve1,
        block_number=block_number,
    )


def chunked(items: Sequence, size: int) -> List[Sequence]:
    size = max(size, 1)
    return [items[i : i + size] for i in range(0, len(items), size)]


def fetch_all_reserves(
    web3: Web3,
    pools: Sequence[PoolSpec],
    block_number: int = 0,
    max_retries: int = DEFAULT_MAX_RETRIES,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay_sec: float = 0.1,
) -> Dict[str, ReserveSnapshot]:
    """
    Fetch reserves for many pools in batches.

    Pools that fail are logged and left out of the result.

    Returns:
        Dict of {pool_id -> ReserveSnapshot}
    """
    all_reserves: Dict[str, ReserveSnapshot] = {}
    batches = chunked(pools, batch_size)

    for index, batch in enumerate(batches):
        for pool in batch:
            try:
                snapshot = fetch_pool_reserves(web3, pool, block_number, max_retries)
            except (NetworkError, DataError, ValueError) as e:
                logger.warning(f"Failed to fetch reserves for {pool.name}: {e}")
                continue
            all_reserves[snapshot.pool_id] = snapshot

        # Small delay between batches to be gentle on RPC
        if index < len(batches) - 1 and batch_delay_sec > 0:
            time.sleep(batch_delay_sec)

    logger.debug(f"Fetched reserves for {len(all_reserves)}/{len(pools)} pools")
    return all_reserves
