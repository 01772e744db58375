"""
Unit tests for the strike dispatcher.

Verifies that the strike payload encodes the evaluated path, that exactly
one submission happens per dispatch, and that every failure surfaces as a
Rejected result instead of an exception.
"""

import pytest
from eth_abi import decode
from eth_utils import ValidationError
from web3.exceptions import ContractLogicError

from cycle_arbitrage.abi import EXECUTE_CYCLE_ARG_TYPES
from cycle_arbitrage.dispatcher import (
    DRY_RUN_TX_REF,
    EXECUTE_CYCLE_SELECTOR,
    StrikeDispatcher,
    build_execution_calldata,
)
from cycle_arbitrage.exceptions import DispatchRejected
from cycle_arbitrage.types import AttemptStatus, Rejected, Submitted


def test_calldata_encodes_path_and_amount(make_path, pool_addresses):
    path = make_path(n_pools=3, profit_threshold=50, reverse=(False, True, False))

    data = build_execution_calldata(path, 10**17)

    assert data[:4] == bytes(EXECUTE_CYCLE_SELECTOR)
    pools, directions, amount_in, min_amount_out = decode(EXECUTE_CYCLE_ARG_TYPES, data[4:])
    assert [p.lower() for p in pools] == [a.lower() for a in pool_addresses[:3]]
    assert list(directions) == [False, True, False]
    assert amount_in == 10**17
    assert min_amount_out == 10**17 + 50


def test_selector_matches_signature():
    from web3 import Web3

    assert bytes(EXECUTE_CYCLE_SELECTOR) == bytes(
        Web3.keccak(text="executeCycle(address[],bool[],uint256,uint256)")[:4]
    )


@pytest.mark.asyncio
async def test_live_dispatch_submits_once(fake_client, make_path, make_network):
    client = fake_client(tx_ref="0xfeed")
    path = make_path()
    network = make_network([path])
    dispatcher = StrikeDispatcher(client, dry_run=False)

    result = await dispatcher.dispatch(network, 100, path)

    assert isinstance(result, Submitted)
    assert result.tx_ref == "0xfeed"
    assert result.attempt.status is AttemptStatus.SUBMITTED
    assert result.attempt.tx_ref == "0xfeed"
    assert len(client.submissions) == 1

    submission = client.submissions[0]
    assert submission["to"] == network.executor_address
    assert submission["data"] == build_execution_calldata(path, 100)
    assert submission["value"] == 100
    assert submission["gas_limit"] == 500_000


@pytest.mark.asyncio
async def test_value_not_attached_when_disabled(fake_client, make_path, make_network):
    client = fake_client()
    path = make_path()

    await StrikeDispatcher(client, dry_run=False).dispatch(
        make_network([path], attach_value=False), 100, path
    )

    assert client.submissions[0]["value"] == 0


@pytest.mark.asyncio
async def test_revert_becomes_rejected(fake_client, make_path, make_network):
    """A revert thrown by the client is reported, never raised."""
    client = fake_client(submit_error=ContractLogicError("execution reverted: Price Impact"))
    path = make_path()
    dispatcher = StrikeDispatcher(client, dry_run=False)

    result = await dispatcher.dispatch(make_network([path]), 100, path)

    assert isinstance(result, Rejected)
    assert "Price Impact" in result.reason
    assert result.attempt.status is AttemptStatus.REJECTED
    assert len(client.submissions) == 1
    assert dispatcher.get_stats() == {"attempts": 1, "submitted": 0, "rejected": 1}


@pytest.mark.asyncio
async def test_dispatch_rejected_reason_is_kept(fake_client, make_path, make_network):
    client = fake_client(submit_error=DispatchRejected("nope", network="testnet", reason="nonce too low"))
    path = make_path()

    result = await StrikeDispatcher(client, dry_run=False).dispatch(make_network([path]), 100, path)

    assert isinstance(result, Rejected)
    assert result.reason == "nonce too low"


@pytest.mark.asyncio
async def test_transport_error_becomes_rejected(fake_client, make_path, make_network):
    client = fake_client(submit_error=TimeoutError("read timed out"))
    path = make_path()

    result = await StrikeDispatcher(client, dry_run=False).dispatch(make_network([path]), 100, path)

    assert isinstance(result, Rejected)
    assert "timed out" in result.reason


@pytest.mark.asyncio
async def test_no_retry_after_rejection(fake_client, make_path, make_network):
    client = fake_client(submit_error=ContractLogicError("execution reverted"))
    path = make_path()

    await StrikeDispatcher(client, dry_run=False).dispatch(make_network([path]), 100, path)

    assert len(client.submissions) == 1


@pytest.mark.asyncio
async def test_dry_run_never_submits(fake_client, make_path, make_network):
    client = fake_client()
    path = make_path()
    dispatcher = StrikeDispatcher(client, dry_run=True)

    result = await dispatcher.dispatch(make_network([path]), 100, path)

    assert isinstance(result, Submitted)
    assert result.tx_ref == DRY_RUN_TX_REF
    assert client.submissions == []


@pytest.mark.asyncio
async def test_missing_executor_is_rejected(fake_client, make_path, make_network):
    client = fake_client()
    path = make_path()

    result = await StrikeDispatcher(client, dry_run=False).dispatch(
        make_network([path], executor_address=None), 100, path
    )

    assert isinstance(result, Rejected)
    assert client.submissions == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        RuntimeError("execution reverted"),
        ValidationError("invalid signature v"),
        TypeError("from field must match key's address"),
    ],
)
async def test_any_client_error_becomes_rejected(fake_client, make_path, make_network, error):
    """Errors outside the web3 hierarchy are still reported, never raised."""
    client = fake_client(submit_error=error)
    path = make_path()
    dispatcher = StrikeDispatcher(client, dry_run=False)

    result = await dispatcher.dispatch(make_network([path]), 100, path)

    assert isinstance(result, Rejected)
    assert result.reason == str(error)
    assert result.attempt.status is AttemptStatus.REJECTED
    assert dispatcher.get_stats() == {"attempts": 1, "submitted": 0, "rejected": 1}


@pytest.mark.asyncio
async def test_empty_error_message_uses_type_name(fake_client, make_path, make_network):
    client = fake_client(submit_error=RuntimeError())
    path = make_path()

    result = await StrikeDispatcher(client, dry_run=False).dispatch(make_network([path]), 100, path)

    assert isinstance(result, Rejected)
    assert result.reason == "RuntimeError"
