"""
DEX collaborators of the cycle arbitrage monitor: config, pool registry,
reserve fetching, caching and reporting.
"""
