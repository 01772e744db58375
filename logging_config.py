"""
Logging configuration for the strike runner.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys

# Loggers that emit SIGNAL / STRIKE lines
OUTCOME_LOGGERS = ("cycle_arbitrage.worker", "cycle_arbitrage.dispatcher")

NOISY_LOGGERS = ("web3", "urllib3", "uvicorn.access")


def setup(level=logging.INFO, outcome_level=None):
    """
    Configure root logging for the strike runner.

    Args:
        level: Level for the engine and the root logger
        outcome_level: Separate level for signal and strike lines; follows
            `level` when omitted
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    # No handler level: logger levels alone decide what is shown
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
        )
    )
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger("cycle_arbitrage").setLevel(level)
    for name in OUTCOME_LOGGERS:
        logging.getLogger(name).setLevel(
            outcome_level if outcome_level is not None else logging.NOTSET
        )


def setup_minimal():
    """
    Warnings and errors, plus every SIGNAL DETECTED / STRIKE line.

    No-signal pulses and per-cycle chatter are hidden.
    """
    setup(level=logging.WARNING, outcome_level=logging.INFO)


def setup_debug():
    """
    Verbose logging, including every no-signal pulse, skipped tick and
    uvicorn request.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
