"""
Pool adapters for reserve encoding and decoding.
"""

from .v2 import decode_reserves, encode_get_reserves, orient_reserves

__all__ = ["encode_get_reserves", "decode_reserves", "orient_reserves"]
