"""
Opportunity evaluation: turns a reserve snapshot into a strike decision.
"""

from typing import Sequence

from .calculator import profit_result
from .types import Evaluation, NoSignal, PathSpec, ReservePair, Strike


class OpportunityEvaluator:
    """
    Applies the cyclic profit calculator to a path and a threshold.

    Has no reference to the dispatcher; the worker acts on its decision.
    """

    def evaluate(
        self,
        amount_in: int,
        path: PathSpec,
        reserves: Sequence[ReservePair],
        profit_threshold: int,
    ) -> Evaluation:
        """
        Decide whether the path is worth striking.

        Args:
            amount_in: Test input amount (wei)
            path: Path the reserves were snapshotted for
            reserves: Oriented reserves, one per pool in path order
            profit_threshold: Minimum absolute gain (wei); strike iff profit > threshold

        Returns:
            Strike or NoSignal. A snapshot missing pools is NoSignal.
        """
        if profit_threshold < 0:
            raise ValueError(f"profit_threshold must be non-negative: {profit_threshold}")

        if not reserves or len(reserves) != len(path.pools):
            return NoSignal(reason="partial_snapshot")

        result = profit_result(amount_in, reserves, path)
        if result.profit > profit_threshold:
            return Strike(path=path, amount_in=amount_in, profit=result.profit)

        return NoSignal(reason="below_threshold", profit=result.profit)

    def evaluate_path(self, path: PathSpec, reserves: Sequence[ReservePair]) -> Evaluation:
        """Evaluate with the path's configured amount and threshold."""
        return self.evaluate(path.amount_in, path, reserves, path.profit_threshold)
