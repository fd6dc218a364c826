"""Version information for the cycle arbitrage engine."""

PROJECT_NAME = "dex-cycle-arbitrage"

__version__ = "0.3.0"
__version_info__ = tuple(int(i) for i in __version__.split("."))

VERSION = __version__


def get_version() -> str:
    """Get the current version string."""
    return __version__
