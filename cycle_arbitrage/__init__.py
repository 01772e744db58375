"""
Cycle Arbitrage Engine.

Polls constant-product pools on one or more chains, simulates routing a
fixed test amount around configured cycles, and dispatches a strike
transaction when a cycle clears its profit threshold.
"""

from cycle_arbitrage.calculator import compute_profit, get_amount_out, simulate
from cycle_arbitrage.dispatcher import StrikeDispatcher
from cycle_arbitrage.evaluator import OpportunityEvaluator
from cycle_arbitrage.scheduler import Scheduler
from cycle_arbitrage.snapshot import ReserveSnapshotter
from cycle_arbitrage.version import __version__
from cycle_arbitrage.worker import NetworkWorker

__all__ = [
    "__version__",
    "get_amount_out",
    "simulate",
    "compute_profit",
    "ReserveSnapshotter",
    "OpportunityEvaluator",
    "StrikeDispatcher",
    "NetworkWorker",
    "Scheduler",
]
