"""
Common helpers for the cycle arbitrage engine.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from web3 import Web3


def get_logger(
    name: str,
    level: Optional[Union[str, int]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Get a module logger with optional fixed level and extra context.

    Handlers and format are installed once on the root logger by
    logging_config.setup(); module loggers only propagate to it.

    Args:
        name: Logger name (typically __name__)
        level: Logging level; inherited from the parent when omitted
        extra: Additional context fields attached to every record

    Returns:
        Logger, or a LoggerAdapter when extra context is given
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    if extra:
        return logging.LoggerAdapter(logger, dict(extra))

    return logger


def format_wei(amount: int) -> str:
    """Format a signed wei amount for log output (e.g. '-0.000010 ETH')."""
    value = Web3.from_wei(abs(amount), "ether")
    sign = "-" if amount < 0 else ""
    return f"{sign}{Decimal(value):.6f} ETH"


def short_address(address: str) -> str:
    """Shorten an address for log lines: 0xB4e1...C9Dc."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"
