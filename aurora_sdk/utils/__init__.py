"""
Utility helpers for the SDK.

Re-exports:
- bytes: hex helpers and fixed-width big-endian integers
- hash: Keccak-256 (selectors) and SHA-256 (host transaction hashing)
"""

from .bytes import (BytesLike, ensure_bytes, from_hex, int_from_be32,
                    to_hex)
from .hash import keccak256, sha256

__all__ = [
    # bytes
    "BytesLike",
    "ensure_bytes",
    "from_hex",
    "to_hex",
    "int_from_be32",
    # hash
    "keccak256",
    "sha256",
]
