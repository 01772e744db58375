"""
Exception hierarchy for the cycle arbitrage engine.

Each poll cycle classifies its failures into one of these types so the
network worker can report them distinctly instead of swallowing them.
"""

from typing import Any, Dict, Optional


class CycleArbitrageError(Exception):
    """Base exception for all cycle arbitrage related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(CycleArbitrageError):
    """Raised when required startup configuration is missing or invalid."""

    pass


class ChainReadFailure(CycleArbitrageError):
    """Raised when a batched read against the chain fails as a whole."""

    def __init__(
        self,
        message: str,
        network: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.network = network


class DispatchRejected(CycleArbitrageError):
    """Raised when signing, broadcasting or preflighting a strike fails."""

    def __init__(
        self,
        message: str,
        network: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.network = network
        self.reason = reason or message
