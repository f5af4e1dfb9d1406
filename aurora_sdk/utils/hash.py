from __future__ import annotations

import hashlib

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes

# --- Keccak-256 (Ethereum-style) ----------------------------------------------
# hashlib exposes NIST SHA3 but not the original Keccak padding used for EVM
# function selectors, so we go through pycryptodome.


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256 digest of *data* (bytes)."""
    h = _keccak.new(digest_bits=256)
    h.update(ensure_bytes(data))
    return h.digest()


# --- SHA-256 ------------------------------------------------------------------
# Host-chain transactions are signed over sha256(borsh(tx)).


def sha256(data: BytesLike) -> bytes:
    """Return SHA-256 digest of *data*."""
    return hashlib.sha256(ensure_bytes(data)).digest()


__all__ = [
    "keccak256",
    "sha256",
]
