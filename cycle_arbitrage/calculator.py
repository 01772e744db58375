"""
Cyclic swap profit calculator.

Integer form of the constant-product getAmountOut formula:

    amountInWithFee = amountIn * (10000 - fee_bps)
    amountOut = amountInWithFee * reserveOut / (reserveIn * 10000 + amountInWithFee)

With the default 30 bps fee this is the 997/1000 formula. Every division
floors, as in the pair contract.
"""

from typing import Optional, Sequence

from .types import DEFAULT_FEE_BPS, PathSpec, ProfitResult, ReservePair

BPS_DENOMINATOR = 10_000


def get_amount_out(
    amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int = DEFAULT_FEE_BPS
) -> int:
    """
    Output of a single swap against a constant-product pool.

    Args:
        amount_in: Input amount (native units)
        reserve_in: Reserve of the input token
        reserve_out: Reserve of the output token
        fee_bps: Pool fee in basis points

    Returns:
        Output amount, or 0 if the input or either reserve is 0

    Raises:
        ValueError: On negative amounts/reserves or a fee outside [0, 10000)
    """
    if amount_in < 0 or reserve_in < 0 or reserve_out < 0:
        raise ValueError(
            f"Amounts must be non-negative: in={amount_in}, "
            f"reserves=({reserve_in}, {reserve_out})"
        )
    if not 0 <= fee_bps < BPS_DENOMINATOR:
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOMINATOR}): {fee_bps}")

    if amount_in == 0 or reserve_in == 0 or reserve_out == 0:
        return 0

    amount_in_with_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def simulate(amount_in: int, reserves: Sequence[ReservePair]) -> int:
    """
    Feed amount_in through every pool in order and return the final amount.

    Reserves must already be oriented in swap direction. A dead pool
    anywhere in the sequence yields 0.
    """
    if amount_in < 0:
        raise ValueError(f"amount_in must be non-negative: {amount_in}")

    amount = amount_in
    for pair in reserves:
        if amount == 0 or pair.is_dead:
            return 0
        amount = get_amount_out(amount, pair.reserve_a, pair.reserve_b, pair.fee_bps)
    return amount


def compute_profit(amount_in: int, reserves: Sequence[ReservePair]) -> int:
    """Signed net gain of the cycle; negative when it loses money."""
    return simulate(amount_in, reserves) - amount_in


def profit_result(
    amount_in: int, reserves: Sequence[ReservePair], path: Optional[PathSpec] = None
) -> ProfitResult:
    amount_out = simulate(amount_in, reserves)
    return ProfitResult(
        profit=amount_out - amount_in,
        amount_in=amount_in,
        amount_out=amount_out,
        path=path,
    )
