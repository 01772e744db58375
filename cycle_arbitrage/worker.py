"""
Per-network polling loop.

Each tick runs snapshot -> evaluate -> (dispatch) for every path of the
network. Ticks fire on a fixed interval; a tick that arrives while the
previous cycle is still running is skipped, never queued, so one network
never has overlapping cycles hitting its endpoint.
"""

import asyncio
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from .dispatcher import StrikeDispatcher
from .evaluator import OpportunityEvaluator
from .exceptions import ChainReadFailure
from .snapshot import ReserveSnapshotter
from .types import CycleOutcome, Network, NoSignal, PathSpec, Submitted
from .utils import format_wei, get_logger

logger = get_logger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    POLLING = "polling"
    EVALUATING = "evaluating"
    DISPATCHING = "dispatching"


class NetworkWorker:
    """
    Owns one network's poll cycles.

    Every per-cycle failure is classified, logged and contained here; none
    of them reaches the scheduler or another network's worker.
    """

    def __init__(
        self,
        network: Network,
        snapshotter: ReserveSnapshotter,
        evaluator: Optional[OpportunityEvaluator] = None,
        dispatcher: Optional[StrikeDispatcher] = None,
    ):
        """
        Initialize worker.

        Args:
            network: Network this worker polls
            snapshotter: Reserve snapshotter bound to the network's client
            evaluator: Opportunity evaluator (default: new instance)
            dispatcher: Strike dispatcher; None means paper mode (detect only)
        """
        self.network = network
        self.snapshotter = snapshotter
        self.evaluator = evaluator or OpportunityEvaluator()
        self.dispatcher = dispatcher

        self.state = WorkerState.IDLE
        self.cycles_run = 0
        self.cycle_errors = 0
        self.skipped_ticks = 0
        self.last_outcome: Optional[CycleOutcome] = None
        self.last_outcome_at: Optional[float] = None
        self.outcome_counts: Dict[str, int] = {o.value: 0 for o in CycleOutcome}

        self._cycle_task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    async def run_forever(self) -> None:
        """Tick at the network's interval until cancelled."""
        logger.info(
            f"[{self.network.name}] worker started "
            f"({len(self.network.paths)} paths, every {self.network.poll_interval_sec}s)"
        )
        try:
            while True:
                self.tick()
                await asyncio.sleep(self.network.poll_interval_sec)
        finally:
            if self.busy:
                self._cycle_task.cancel()
            logger.info(f"[{self.network.name}] worker stopped")

    def tick(self) -> bool:
        """
        Start a cycle unless one is already running.

        Returns:
            True if a cycle was started, False if the tick was skipped
        """
        if self.busy:
            self.skipped_ticks += 1
            logger.debug(
                f"[{self.network.name}] previous cycle still running, tick skipped "
                f"({self.skipped_ticks} total)"
            )
            return False

        self._cycle_task = asyncio.create_task(self.run_cycle_safely())
        return True

    async def run_cycle_safely(self) -> List[CycleOutcome]:
        """run_cycle(), with unexpected errors logged instead of raised."""
        try:
            return await self.run_cycle()
        except Exception:
            self.cycle_errors += 1
            self.state = WorkerState.IDLE
            logger.exception(f"[{self.network.name}] unexpected error in poll cycle")
            return []

    async def run_cycle(self) -> List[CycleOutcome]:
        """
        Run one full poll cycle over all of the network's paths.

        Returns:
            One CycleOutcome per path, in configuration order
        """
        outcomes = []
        try:
            for path in self.network.paths:
                outcomes.append(await self._run_path(path))
        finally:
            self.state = WorkerState.IDLE
        self.cycles_run += 1
        return outcomes

    async def _run_path(self, path: PathSpec) -> CycleOutcome:
        name = self.network.name

        self.state = WorkerState.POLLING
        try:
            reserves = await self.snapshotter.snapshot(self.network, path.pools)
        except ChainReadFailure as e:
            logger.warning(f"[{name}] read failure on {path.name}: {e}")
            return self._record(CycleOutcome.READ_FAILURE)

        self.state = WorkerState.EVALUATING
        decision = self.evaluator.evaluate_path(path, reserves)

        if isinstance(decision, NoSignal):
            if decision.reason == "partial_snapshot":
                logger.info(
                    f"[{name}] partial snapshot on {path.name} "
                    f"({len(reserves)}/{len(path.pools)} pools), no signal"
                )
            else:
                logger.debug(
                    f"[{name}] . {path.name} profit {format_wei(decision.profit)}"
                )
            return self._record(CycleOutcome.NO_SIGNAL)

        logger.info(
            f"[{name}] SIGNAL DETECTED on {path.name}: "
            f"profit {format_wei(decision.profit)}"
        )
        self._record(CycleOutcome.OPPORTUNITY)
        if self.dispatcher is None:
            return CycleOutcome.OPPORTUNITY

        self.state = WorkerState.DISPATCHING
        result = await self.dispatcher.dispatch(self.network, decision.amount_in, decision.path)

        if isinstance(result, Submitted):
            logger.info(f"[{name}] STRIKE SUBMITTED on {path.name}: {result.tx_ref}")
            return self._record(CycleOutcome.STRIKE_SUBMITTED)

        logger.warning(f"[{name}] STRIKE REJECTED on {path.name}: {result.reason}")
        return self._record(CycleOutcome.STRIKE_REJECTED)

    def _record(self, outcome: CycleOutcome) -> CycleOutcome:
        self.outcome_counts[outcome.value] += 1
        self.last_outcome = outcome
        self.last_outcome_at = time.time()
        return outcome

    def status(self) -> Dict[str, Any]:
        """Snapshot of the worker's progress for the health endpoint."""
        return {
            "network": self.network.name,
            "chain_id": self.network.chain_id,
            "state": self.state.value,
            "mode": self._mode(),
            "paths": len(self.network.paths),
            "cycles_run": self.cycles_run,
            "cycle_errors": self.cycle_errors,
            "skipped_ticks": self.skipped_ticks,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "last_outcome_at": self.last_outcome_at,
            "outcomes": dict(self.outcome_counts),
            "dispatch": self.dispatcher.get_stats() if self.dispatcher else None,
        }

    def _mode(self) -> str:
        if self.dispatcher is None:
            return "paper"
        return "dry_run" if self.dispatcher.dry_run else "live"
