"""
Reserve snapshots: every pool of a path read in a single batched call.
"""

import time
from typing import List, Sequence

from .adapters.v2 import decode_reserves, encode_get_reserves, orient_reserves
from .chain_client import CHAIN_ERRORS, ChainClient
from .exceptions import ChainReadFailure
from .types import Network, PoolReference, ReservePair
from .utils import get_logger, short_address

logger = get_logger(__name__)


class ReserveSnapshotter:
    """
    Reads current reserves for an ordered list of pools.

    The batch either succeeds as a whole or raises ChainReadFailure. Pools
    whose sub-call failed or returned garbage are left out of the result,
    which is then shorter than the request; the evaluator reads that as
    "no signal this cycle".
    """

    def __init__(self, client: ChainClient):
        self.client = client

    async def snapshot(
        self, network: Network, pools: Sequence[PoolReference]
    ) -> List[ReservePair]:
        """
        Snapshot reserves for pools on one network.

        Args:
            network: Network the pools live on
            pools: Non-empty pools in swap order

        Returns:
            Oriented reserve pairs for every pool that answered, in order

        Raises:
            ChainReadFailure: If the batched call itself fails
            ValueError: If pools is empty
        """
        if not pools:
            raise ValueError("snapshot requires at least one pool")

        query = encode_get_reserves()
        calls = [(pool.address, query) for pool in pools]

        try:
            replies = await self.client.batch_read(calls)
        except ChainReadFailure:
            raise
        except CHAIN_ERRORS as e:
            raise ChainReadFailure(
                f"Batched read failed on {network.name}: {e}", network=network.name
            ) from e

        if len(replies) != len(calls):
            raise ChainReadFailure(
                f"Batched read on {network.name} returned {len(replies)} results "
                f"for {len(calls)} calls",
                network=network.name,
            )

        observed_at = time.time()
        reserves: List[ReservePair] = []
        for pool, (success, raw) in zip(pools, replies):
            if not success:
                logger.debug(
                    f"[{network.name}] getReserves failed for {short_address(pool.address)}"
                )
                continue
            try:
                reserve0, reserve1, block_timestamp = decode_reserves(raw)
            except ValueError as e:
                logger.debug(
                    f"[{network.name}] undecodable reserves for "
                    f"{short_address(pool.address)}: {e}"
                )
                continue

            reserve_in, reserve_out = orient_reserves(reserve0, reserve1, pool.reverse)
            reserves.append(
                ReservePair(
                    reserve_a=reserve_in,
                    reserve_b=reserve_out,
                    fee_bps=pool.fee_bps,
                    block_timestamp=block_timestamp,
                    observed_at=observed_at,
                )
            )

        return reserves
