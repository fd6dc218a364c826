"""
DEX adapter modules for different AMM types.
"""

from .v2 import fetch_all_reserves, fetch_pool, fetch_pool_reserves

__all__ = ["fetch_pool", "fetch_pool_reserves", "fetch_all_reserves"]
