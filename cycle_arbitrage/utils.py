"""
Common utilities and helper functions for the cycle arbitrage system.

Logging setup, raw reserve scaling and small formatting helpers shared
by the detection core and the DEX collaborators.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union


# Formatting
def format_duration(seconds: float) -> str:
    """Format a duration as milliseconds below one second, seconds above."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


# Reserve scaling
def raw_to_units(raw_amount: int, decimals: int = 18) -> float:
    """
    Convert a raw on-chain integer amount to float token units.

    The division happens in Decimal so large uint112 reserves keep their
    leading digits before the final float conversion.

    Args:
        raw_amount: Integer amount in the token's smallest unit (wei)
        decimals: Token decimals

    Returns:
        Amount in whole token units
    """
    return float(Decimal(int(raw_amount)) / (Decimal(10) ** decimals))


def units_to_raw(amount: float, decimals: int = 18) -> int:
    """Convert float token units back to the raw integer representation."""
    return int(Decimal(str(amount)) * (Decimal(10) ** decimals))


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
    minimal: bool = False,
) -> logging.Logger:
    """
    Get a structured logger with consistent formatting and extra context.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        extra: Additional context fields to include in all log messages
        minimal: If True, use simplified format (time + message only)

    Returns:
        Configured logger with structured output
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()

        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = (
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
            )

        if extra:
            extra_fields = " | ".join([f"{k}=%(extra_{k})s" for k in extra.keys()])
            format_str = format_str.replace(
                " | %(message)s", f" | {extra_fields} | %(message)s"
            )

        formatter = logging.Formatter(format_str, datefmt="%H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if extra:
            logger = logging.LoggerAdapter(
                logger, {"extra_" + k: v for k, v in extra.items()}
            )

    return logger


def format_percentage(percentage: float) -> str:
    """Format a percentage value with an explicit sign for gains.

    Examples:
        >>> format_percentage(5.25)
        '+5.25%'
        >>> format_percentage(-2.1)
        '-2.10%'
        >>> format_percentage(0.0)
        '0.00%'
    """
    if percentage > 0:
        return f"+{percentage:.2f}%"
    return f"{percentage:.2f}%"
