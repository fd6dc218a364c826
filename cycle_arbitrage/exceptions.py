"""
Exception hierarchy for the cycle arbitrage system.

The detection core itself never raises for a malformed pool (it drops the
candidate instead); these types cover construction-time validation and the
I/O collaborators around the core.
"""

from typing import Any, Dict, Optional


class CycleArbitrageError(Exception):
    """Base exception for all cycle arbitrage related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(CycleArbitrageError):
    """Raised when there are configuration-related issues."""

    pass


class ValidationError(CycleArbitrageError):
    """Raised when validation of data or configuration fails."""

    pass


class DataError(CycleArbitrageError):
    """Raised when pool or reserve data cannot be interpreted."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        pool: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.source = source
        self.pool = pool


class NetworkError(CycleArbitrageError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ReportingError(CycleArbitrageError):
    """Raised when an opportunity report cannot be written."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.path = path
