"""
Chain client: batched reads through Multicall3 and signed submissions.

The engine depends only on the ChainClient protocol. Web3ChainClient is
the production implementation; blocking web3 calls run in the default
thread pool so one network's slow endpoint never stalls the event loop.
"""

import asyncio
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception
from web3.types import TxParams, Wei

from .abi import MULTICALL3_ABI
from .exceptions import ChainReadFailure, DispatchRejected
from .types import Network
from .utils import get_logger

logger = get_logger(__name__)

BatchCall = Tuple[str, bytes]
BatchReply = Tuple[bool, bytes]

# Transport-level failures surfaced by web3 and its HTTP provider
CHAIN_ERRORS = (Web3Exception, ValueError, OSError)


@runtime_checkable
class ChainClient(Protocol):
    """Capability consumed by the snapshotter and the dispatcher."""

    async def batch_read(self, calls: Sequence[BatchCall]) -> List[BatchReply]:
        """Execute read-only calls in one round trip, in order."""
        ...

    async def submit(self, to: str, data: bytes, value: int, gas_limit: int) -> str:
        """Sign and broadcast a transaction, returning its hash."""
        ...


class Web3ChainClient:
    """
    ChainClient backed by a web3 HTTP provider.

    Each network gets its own client, provider and signer account.
    """

    def __init__(
        self,
        network: Network,
        account: Optional[LocalAccount] = None,
        timeout: float = 10.0,
        simulate: bool = True,
        web3: Optional[Web3] = None,
    ):
        """
        Initialize client for one network.

        Args:
            network: Network the client talks to
            account: Signer used for submissions (None = read-only)
            timeout: HTTP timeout per RPC request in seconds
            simulate: If True, preflight submissions with eth_call
            web3: Pre-built Web3 instance (mainly for tests)
        """
        self.network = network
        self.account = account
        self.simulate = simulate
        self.web3 = web3 or Web3(
            Web3.HTTPProvider(network.rpc_url, request_kwargs={"timeout": timeout})
        )
        self.multicall = self.web3.eth.contract(
            address=Web3.to_checksum_address(network.multicall_address),
            abi=MULTICALL3_ABI,
        )

    async def batch_read(self, calls: Sequence[BatchCall]) -> List[BatchReply]:
        payload = [(Web3.to_checksum_address(target), data) for target, data in calls]
        loop = asyncio.get_running_loop()
        try:
            results = await loop.run_in_executor(
                None, self.multicall.functions.tryAggregate(False, payload).call
            )
        except CHAIN_ERRORS as e:
            raise ChainReadFailure(
                f"Batched read failed on {self.network.name}: {e}",
                network=self.network.name,
            ) from e

        return [(bool(success), bytes(data)) for success, data in results]

    async def submit(self, to: str, data: bytes, value: int, gas_limit: int) -> str:
        if self.account is None:
            raise DispatchRejected(
                f"No signer loaded for {self.network.name}",
                network=self.network.name,
                reason="no signer",
            )

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, self._sign_and_send, to, data, value, gas_limit
            )
        except ContractLogicError as e:
            raise DispatchRejected(
                f"Strike reverted on {self.network.name}: {e}",
                network=self.network.name,
                reason=_revert_reason(e),
            ) from e
        except Exception as e:
            # Signing raises TypeError and eth_utils ValidationError, not web3 errors
            raise DispatchRejected(
                f"Strike submission failed on {self.network.name}: {e}",
                network=self.network.name,
                reason=str(e) or type(e).__name__,
            ) from e

    def _sign_and_send(self, to: str, data: bytes, value: int, gas_limit: int) -> str:
        tx: TxParams = {
            "from": self.account.address,
            "to": Web3.to_checksum_address(to),
            "value": Wei(value),
            "gas": gas_limit,
            "gasPrice": self.web3.eth.gas_price,
            "nonce": self.web3.eth.get_transaction_count(self.account.address),
            "chainId": self.network.chain_id,
            "data": data,
        }

        if self.simulate:
            # Raises ContractLogicError when the strike would revert
            self.web3.eth.call(tx)

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = Web3.to_hex(self.web3.eth.send_raw_transaction(signed_tx.raw_transaction))
        logger.debug(f"[{self.network.name}] broadcast {tx_hash} (nonce {tx['nonce']})")
        return tx_hash


def _revert_reason(error: ContractLogicError) -> str:
    message = getattr(error, "message", None) or str(error)
    return message or "execution reverted"
