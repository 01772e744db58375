"""
Core data types for cycle arbitrage detection and dispatch.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Tuple, Union

DEFAULT_FEE_BPS = 30
DEFAULT_MULTICALL_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"


@dataclass(frozen=True)
class PoolReference:
    """
    A constant-product pool taking part in a cyclic path.

    Attributes:
        address: Checksum address of the pair contract
        position: Zero-based position of the pool within its path
        reverse: If True, reserve1 is the input side of the swap
        fee_bps: Swap fee in basis points (30 = 0.3%)
    """

    address: str
    position: int = 0
    reverse: bool = False
    fee_bps: int = DEFAULT_FEE_BPS


@dataclass(frozen=True)
class PathSpec:
    """
    Ordered sequence of pools forming a cycle (asset X -> ... -> asset X).

    Attributes:
        name: Human-readable path name used in logs
        pools: Pools in swap order
        amount_in: Fixed test input amount (wei)
        profit_threshold: Minimum absolute gain required to strike (wei)
    """

    name: str
    pools: Tuple[PoolReference, ...]
    amount_in: int
    profit_threshold: int = 0


@dataclass(frozen=True)
class Network:
    """
    One configured chain and the paths polled on it.

    Attributes:
        name: Network identifier (e.g., "ethereum", "base")
        chain_id: EIP-155 chain id
        rpc_url: HTTP(S) RPC endpoint
        poll_interval_sec: Seconds between poll ticks
        enabled: Disabled networks are never started
        multicall_address: Multicall3 contract used for batched reads
        executor_address: Execution contract receiving strike transactions
        private_key_env: Environment variable holding the signer key
        gas_limit: Gas limit attached to strike transactions
        attach_value: If True, strikes send amount_in as native value
        paths: Cyclic paths evaluated on every tick
    """

    name: str
    chain_id: int
    rpc_url: str
    poll_interval_sec: float = 2.0
    enabled: bool = True
    multicall_address: str = DEFAULT_MULTICALL_ADDRESS
    executor_address: Optional[str] = None
    private_key_env: str = "PRIVATE_KEY"
    gas_limit: int = 500_000
    attach_value: bool = True
    paths: Tuple[PathSpec, ...] = ()


@dataclass(frozen=True)
class ReservePair:
    """
    Reserves of one pool, oriented in swap direction.

    reserve_a is the input-side reserve and reserve_b the output-side
    reserve. Observation markers are ignored when comparing snapshots.
    """

    reserve_a: int
    reserve_b: int
    fee_bps: int = DEFAULT_FEE_BPS
    block_timestamp: int = field(default=0, compare=False)
    observed_at: float = field(default_factory=time.time, compare=False)

    @property
    def is_dead(self) -> bool:
        return self.reserve_a == 0 or self.reserve_b == 0


@dataclass(frozen=True)
class ProfitResult:
    """Net result of routing amount_in through a path. Never persisted."""

    profit: int
    amount_in: int
    amount_out: int
    path: Optional[PathSpec] = None


@dataclass(frozen=True)
class Strike:
    """Positive signal: the path clears its profit threshold."""

    path: PathSpec
    amount_in: int
    profit: int


@dataclass(frozen=True)
class NoSignal:
    """No opportunity this cycle."""

    reason: Literal["below_threshold", "partial_snapshot"]
    profit: Optional[int] = None


Evaluation = Union[Strike, NoSignal]


class AttemptStatus(Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class StrikeAttempt:
    """
    One strike dispatch. Terminal once submitted or rejected.

    Attributes:
        path: Path the strike encodes
        amount_in: Input amount encoded in the strike
        status: Attempt lifecycle status
        tx_ref: Transaction hash when submitted
        reason: Rejection reason when rejected
    """

    path: PathSpec
    amount_in: int
    status: AttemptStatus = AttemptStatus.PENDING
    tx_ref: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Submitted:
    tx_ref: str
    attempt: StrikeAttempt


@dataclass(frozen=True)
class Rejected:
    reason: str
    attempt: StrikeAttempt


DispatchResult = Union[Submitted, Rejected]


class CycleOutcome(Enum):
    """Observable outcome of one path evaluation within a poll cycle."""

    NO_SIGNAL = "no_signal"
    OPPORTUNITY = "opportunity"
    STRIKE_SUBMITTED = "strike_submitted"
    STRIKE_REJECTED = "strike_rejected"
    READ_FAILURE = "read_failure"
