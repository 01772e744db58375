"""Tests for the runner's logging setup."""

import logging

import pytest

import logging_config


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in ("cycle_arbitrage",) + logging_config.OUTCOME_LOGGERS + logging_config.NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)


def test_setup_installs_single_handler():
    logging_config.setup()
    logging_config.setup()

    assert len(logging.getLogger().handlers) == 1
    assert logging.getLogger("cycle_arbitrage.snapshot").getEffectiveLevel() == logging.INFO
    assert logging.getLogger("web3").getEffectiveLevel() == logging.WARNING


def test_minimal_keeps_signal_lines():
    logging_config.setup_minimal()

    worker = logging.getLogger("cycle_arbitrage.worker")
    assert worker.isEnabledFor(logging.INFO)
    assert not worker.isEnabledFor(logging.DEBUG)
    assert logging.getLogger("cycle_arbitrage.dispatcher").isEnabledFor(logging.INFO)
    assert not logging.getLogger("cycle_arbitrage.snapshot").isEnabledFor(logging.INFO)
    assert logging.getLogger().handlers[0].level == logging.NOTSET


def test_debug_shows_pulses_and_resets_outcome_level():
    logging_config.setup_minimal()
    logging_config.setup_debug()

    assert logging.getLogger("cycle_arbitrage.worker").isEnabledFor(logging.DEBUG)
    assert logging.getLogger("uvicorn.access").getEffectiveLevel() == logging.INFO
    assert logging.getLogger("web3").getEffectiveLevel() == logging.WARNING
