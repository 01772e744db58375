"""Tests for the exceptions module."""

import pytest

from cycle_arbitrage.exceptions import (
    ChainReadFailure,
    ConfigurationError,
    CycleArbitrageError,
    DispatchRejected,
)


def test_base_exception():
    """Test the base exception class."""
    error = CycleArbitrageError("Test error")
    assert str(error) == "Test error"
    assert error.details == {}


def test_base_exception_with_details():
    error = CycleArbitrageError("Test error", details={"pool": "0xabc"})
    assert error.details == {"pool": "0xabc"}


@pytest.mark.parametrize("cls", [ConfigurationError, ChainReadFailure, DispatchRejected])
def test_inheritance(cls):
    assert issubclass(cls, CycleArbitrageError)
    with pytest.raises(CycleArbitrageError):
        raise cls("boom")


def test_chain_read_failure_carries_network():
    error = ChainReadFailure("multicall failed", network="base")
    assert error.network == "base"
    assert str(error) == "multicall failed"


def test_dispatch_rejected_reason_defaults_to_message():
    assert DispatchRejected("reverted").reason == "reverted"
    assert DispatchRejected("reverted", reason="Price Impact").reason == "Price Impact"
