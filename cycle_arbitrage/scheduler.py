"""
Scheduler: one independent worker per enabled network.

There is no cross-network coordination; pools on different chains never
share a cycle, so each worker runs, fails and recovers on its own.
"""

import asyncio
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from .chain_client import Web3ChainClient
from .config import load_signer
from .dispatcher import StrikeDispatcher
from .evaluator import OpportunityEvaluator
from .snapshot import ReserveSnapshotter
from .types import CycleOutcome, Network
from .utils import get_logger
from .worker import NetworkWorker

logger = get_logger(__name__)

MODES = ("paper", "dry_run", "live")

RESTART_DELAY_SEC = 1.0
MAX_RESTART_DELAY_SEC = 60.0

WorkerFactory = Callable[[Network], NetworkWorker]


def build_worker(
    network: Network,
    mode: str = "paper",
    rpc_timeout_sec: float = 10.0,
    simulate_strikes: bool = True,
) -> NetworkWorker:
    """
    Wire a network's chain client, snapshotter, evaluator and dispatcher.

    Args:
        network: Enabled network to poll
        mode: "paper" (detect only), "dry_run" (build strikes, never send)
              or "live" (sign and broadcast)
        rpc_timeout_sec: HTTP timeout per RPC request
        simulate_strikes: Preflight live strikes with eth_call

    Raises:
        ConfigurationError: In live mode, if the network's signer is missing
        ValueError: On an unknown mode
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode '{mode}' (expected one of {', '.join(MODES)})")

    account = load_signer(network) if mode == "live" else None
    client = Web3ChainClient(
        network, account=account, timeout=rpc_timeout_sec, simulate=simulate_strikes
    )

    dispatcher = None
    if mode != "paper":
        dispatcher = StrikeDispatcher(client, dry_run=(mode == "dry_run"))

    return NetworkWorker(
        network,
        ReserveSnapshotter(client),
        OpportunityEvaluator(),
        dispatcher,
    )


class Scheduler:
    """
    Starts and supervises one NetworkWorker per enabled network.

    Workers are built before any task starts, so a configuration problem on
    one network halts startup instead of leaving a partial fleet running.
    """

    def __init__(
        self,
        networks: Sequence[Network],
        worker_factory: Optional[WorkerFactory] = None,
        restart_delay_sec: float = RESTART_DELAY_SEC,
    ):
        self.networks = list(networks)
        self.worker_factory = worker_factory or build_worker
        self.restart_delay_sec = restart_delay_sec
        self.workers: Dict[str, NetworkWorker] = {}
        self.restarts: Dict[str, int] = {}

        self._tasks: Dict[str, asyncio.Task] = {}
        self._pending_restarts: Dict[str, asyncio.TimerHandle] = {}
        self._stopping = False
        self._stopped: Optional[asyncio.Event] = None

    def build_workers(self) -> Dict[str, NetworkWorker]:
        if self.workers:
            return self.workers

        for network in self.networks:
            if not network.enabled:
                logger.info(f"[{network.name}] disabled, not starting a worker")
                continue
            self.workers[network.name] = self.worker_factory(network)
            self.restarts[network.name] = 0
        return self.workers

    def start(self) -> None:
        """Start every worker's polling loop as its own task."""
        self.build_workers()
        self._stopping = False
        self._stopped = asyncio.Event()

        for worker in self.workers.values():
            self._spawn(worker)

        logger.info(f"Scheduler started {len(self._tasks)} network worker(s)")

    def _spawn(self, worker: NetworkWorker) -> None:
        name = worker.network.name
        task = asyncio.create_task(worker.run_forever(), name=f"worker-{name}")
        task.add_done_callback(partial(self._on_worker_done, worker))
        self._tasks[name] = task

    def _on_worker_done(self, worker: NetworkWorker, task: asyncio.Task) -> None:
        if self._stopping or task.cancelled():
            return

        name = worker.network.name
        self.restarts[name] += 1
        delay = self._restart_delay(self.restarts[name])
        logger.error(
            f"[{name}] worker exited unexpectedly, restarting in {delay:.1f}s",
            exc_info=task.exception(),
        )
        self._pending_restarts[name] = asyncio.get_running_loop().call_later(
            delay, self._respawn, worker
        )

    def _restart_delay(self, attempt: int) -> float:
        """Exponential backoff: base, 2x base, 4x base ... capped."""
        return min(self.restart_delay_sec * 2 ** (attempt - 1), MAX_RESTART_DELAY_SEC)

    def _respawn(self, worker: NetworkWorker) -> None:
        self._pending_restarts.pop(worker.network.name, None)
        if not self._stopping:
            self._spawn(worker)

    async def run(self) -> None:
        """Start all workers and wait until stop() is called."""
        self.start()
        await self._stopped.wait()

    async def stop(self) -> None:
        """Cancel all workers and wait for them to finish."""
        self._stopping = True
        for handle in self._pending_restarts.values():
            handle.cancel()
        self._pending_restarts.clear()
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        if self._stopped is not None:
            self._stopped.set()
        logger.info("Scheduler stopped")

    async def run_once(self) -> Dict[str, List[CycleOutcome]]:
        """Run a single cycle on every enabled network concurrently."""
        workers = list(self.build_workers().values())
        results = await asyncio.gather(*(w.run_cycle_safely() for w in workers))
        return {w.network.name: outcomes for w, outcomes in zip(workers, results)}

    def status(self) -> List[Dict[str, Any]]:
        statuses = []
        for name, worker in self.workers.items():
            entry = worker.status()
            task = self._tasks.get(name)
            entry["running"] = task is not None and not task.done()
            entry["restarts"] = self.restarts.get(name, 0)
            statuses.append(entry)
        return statuses
