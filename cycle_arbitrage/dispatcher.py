"""
Strike dispatch: the only component with real-world side effects.

Handles:
- Encoding the evaluated path and amount into an executeCycle() call
- Exactly one submission per strike decision
- Dry-run mode (build and log, never broadcast)
- Converting every submission failure into a Rejected result
"""

from dataclasses import replace
from typing import Dict

from eth_abi import encode
from web3 import Web3

from .abi import EXECUTE_CYCLE_ARG_TYPES, EXECUTE_CYCLE_SIGNATURE
from .chain_client import ChainClient
from .exceptions import DispatchRejected
from .types import (
    AttemptStatus,
    DispatchResult,
    Network,
    PathSpec,
    Rejected,
    StrikeAttempt,
    Submitted,
)
from .utils import format_wei, get_logger

logger = get_logger(__name__)

EXECUTE_CYCLE_SELECTOR = Web3.keccak(text=EXECUTE_CYCLE_SIGNATURE)[:4]
DRY_RUN_TX_REF = "dry-run"


def build_execution_calldata(path: PathSpec, amount_in: int) -> bytes:
    """
    Encode executeCycle(pools, reverse, amountIn, minAmountOut).

    minAmountOut is amount_in plus the path's threshold, so the execution
    contract reverts on-chain if the opportunity has shrunk below the bar.
    """
    pools = [Web3.to_checksum_address(pool.address) for pool in path.pools]
    directions = [pool.reverse for pool in path.pools]
    min_amount_out = amount_in + path.profit_threshold
    args = encode(EXECUTE_CYCLE_ARG_TYPES, [pools, directions, amount_in, min_amount_out])
    return bytes(EXECUTE_CYCLE_SELECTOR) + args


class StrikeDispatcher:
    """
    Submits one execution transaction per strike decision.

    There is no retry loop: resubmitting without re-reading reserves is
    unsafe, so the worker simply re-evaluates on its next tick.
    """

    def __init__(self, client: ChainClient, dry_run: bool = True):
        """
        Initialize dispatcher.

        Args:
            client: Chain client holding the network's signer
            dry_run: If True, build and log strikes without broadcasting
        """
        self.client = client
        self.dry_run = dry_run

        self.attempts = 0
        self.submitted = 0
        self.rejected = 0

    async def dispatch(
        self, network: Network, amount_in: int, path: PathSpec
    ) -> DispatchResult:
        """
        Build and submit the strike transaction.

        Args:
            network: Network to strike on
            amount_in: Amount the strike routes through the path (wei)
            path: Evaluated path

        Returns:
            Submitted(tx_ref) or Rejected(reason); never raises for
            signing, broadcast or revert failures
        """
        self.attempts += 1
        attempt = StrikeAttempt(path=path, amount_in=amount_in)

        if not network.executor_address:
            return self._reject(network, attempt, "no executor address configured")

        data = build_execution_calldata(path, amount_in)
        value = amount_in if network.attach_value else 0

        if self.dry_run:
            logger.info(
                f"[{network.name}] [DRY RUN] Would strike {path.name} with "
                f"{format_wei(amount_in)} ({len(data)} bytes calldata)"
            )
            return self._submit_ok(attempt, DRY_RUN_TX_REF)

        logger.info(f"[{network.name}] [STRIKE] Broadcasting {path.name}...")
        try:
            tx_ref = await self.client.submit(
                network.executor_address, data, value, network.gas_limit
            )
        except DispatchRejected as e:
            return self._reject(network, attempt, e.reason)
        except Exception as e:
            # The client is opaque; whatever it raises is a rejected strike
            return self._reject(network, attempt, str(e) or type(e).__name__)

        return self._submit_ok(attempt, tx_ref)

    def _submit_ok(self, attempt: StrikeAttempt, tx_ref: str) -> Submitted:
        self.submitted += 1
        attempt = replace(attempt, status=AttemptStatus.SUBMITTED, tx_ref=tx_ref)
        return Submitted(tx_ref=tx_ref, attempt=attempt)

    def _reject(self, network: Network, attempt: StrikeAttempt, reason: str) -> Rejected:
        self.rejected += 1
        logger.debug(f"[{network.name}] strike on {attempt.path.name} rejected: {reason}")
        attempt = replace(attempt, status=AttemptStatus.REJECTED, reason=reason)
        return Rejected(reason=reason, attempt=attempt)

    def get_stats(self) -> Dict[str, int]:
        """Get dispatch statistics."""
        return {
            "attempts": self.attempts,
            "submitted": self.submitted,
            "rejected": self.rejected,
        }
