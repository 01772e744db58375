"""
Shared fixtures: an in-memory chain client and path/network builders.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from eth_abi import encode
from web3 import Web3

from cycle_arbitrage.types import Network, PathSpec, PoolReference

POOL_ADDRESSES = [Web3.to_checksum_address("0x" + f"{i:02x}" * 20) for i in range(1, 8)]
EXECUTOR_ADDRESS = Web3.to_checksum_address("0x" + "ee" * 20)


class FakeChainClient:
    """
    ChainClient double holding raw (reserve0, reserve1, timestamp) per pool.

    Pools listed in `failing` (or unknown) report success=False in the batch.
    """

    def __init__(
        self,
        reserves: Optional[Dict[str, Tuple[int, int, int]]] = None,
        failing: Iterable[str] = (),
        batch_error: Optional[Exception] = None,
        submit_error: Optional[Exception] = None,
        tx_ref: str = "0x" + "ab" * 32,
        read_delay: float = 0.0,
    ):
        self.reserves = dict(reserves or {})
        self.failing = set(failing)
        self.batch_error = batch_error
        self.submit_error = submit_error
        self.tx_ref = tx_ref
        self.read_delay = read_delay

        self.batch_calls: List[List[Tuple[str, bytes]]] = []
        self.submissions: List[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def batch_read(self, calls: Sequence[Tuple[str, bytes]]) -> List[Tuple[bool, bytes]]:
        self.batch_calls.append(list(calls))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.read_delay:
                await asyncio.sleep(self.read_delay)
            if self.batch_error is not None:
                raise self.batch_error

            replies = []
            for target, _data in calls:
                if target in self.failing or target not in self.reserves:
                    replies.append((False, b""))
                else:
                    raw = encode(["uint112", "uint112", "uint32"], list(self.reserves[target]))
                    replies.append((True, raw))
            return replies
        finally:
            self.in_flight -= 1

    async def submit(self, to: str, data: bytes, value: int, gas_limit: int) -> str:
        self.submissions.append({"to": to, "data": data, "value": value, "gas_limit": gas_limit})
        if self.submit_error is not None:
            raise self.submit_error
        return self.tx_ref


def build_path(
    n_pools: int = 2,
    amount_in: int = 100,
    profit_threshold: int = 0,
    reverse: Sequence[bool] = (),
    name: str = "test-path",
) -> PathSpec:
    pools = tuple(
        PoolReference(
            address=POOL_ADDRESSES[i],
            position=i,
            reverse=reverse[i] if i < len(reverse) else False,
        )
        for i in range(n_pools)
    )
    return PathSpec(name=name, pools=pools, amount_in=amount_in, profit_threshold=profit_threshold)


def build_network(
    paths: Sequence[PathSpec] = (),
    name: str = "testnet",
    poll_interval_sec: float = 0.01,
    executor_address: Optional[str] = EXECUTOR_ADDRESS,
    attach_value: bool = True,
    enabled: bool = True,
) -> Network:
    return Network(
        name=name,
        chain_id=31337,
        rpc_url="http://127.0.0.1:8545",
        poll_interval_sec=poll_interval_sec,
        enabled=enabled,
        executor_address=executor_address,
        gas_limit=500_000,
        attach_value=attach_value,
        paths=tuple(paths),
    )


@pytest.fixture
def fake_client():
    return FakeChainClient


@pytest.fixture
def make_path():
    return build_path


@pytest.fixture
def make_network():
    return build_network


@pytest.fixture
def pool_addresses():
    return list(POOL_ADDRESSES)
