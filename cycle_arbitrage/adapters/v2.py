"""
Uniswap V2 style adapter for constant-product pools.

Builds the raw getReserves() query carried inside a batched read and
decodes each sub-result back into integer reserves.
"""

from typing import Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from ..abi import GET_RESERVES_OUTPUT_TYPES, GET_RESERVES_SELECTOR


def encode_get_reserves() -> bytes:
    """Calldata for getReserves(); the call takes no arguments."""
    return GET_RESERVES_SELECTOR


def decode_reserves(raw: bytes) -> Tuple[int, int, int]:
    """
    Decode getReserves() return data.

    Args:
        raw: ABI-encoded (uint112, uint112, uint32)

    Returns:
        Tuple of (reserve0, reserve1, block_timestamp_last)

    Raises:
        ValueError: If the payload is empty or malformed
    """
    if not raw:
        raise ValueError("empty getReserves() result")
    try:
        reserve0, reserve1, block_timestamp_last = decode(
            GET_RESERVES_OUTPUT_TYPES, bytes(raw)
        )
    except DecodingError as e:
        raise ValueError(f"malformed getReserves() result: {e}") from e
    return int(reserve0), int(reserve1), int(block_timestamp_last)


def orient_reserves(reserve0: int, reserve1: int, reverse: bool) -> Tuple[int, int]:
    """Return (reserve_in, reserve_out) for the pool's swap direction."""
    if reverse:
        return reserve1, reserve0
    return reserve0, reserve1
