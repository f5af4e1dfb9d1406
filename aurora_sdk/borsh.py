"""
Deterministic Borsh encoder.

The host chain serializes transactions and the engine's call arguments with
Borsh: little-endian fixed-width integers, u32 length-prefixed byte vectors
and strings, and u8-tagged enums. Only the encoder is needed here, plus a
length-prefixed vector reader for engine answers.

Supported writers
-----------------
- u8 / u32 / u64 / u128 (range checked)
- fixed byte arrays (length checked)
- Vec<u8> and String (u32 length prefix)
- enum variant tags (u8)

API
---
- BorshWriter: chainable writer, `.getvalue()` returns the bytes
- read_vec_u8(buf) -> (payload, consumed)
- BorshEncodeError / BorshDecodeError
- new_call_args / function_call_args / deploy_erc20_args: engine argument structs
"""

from __future__ import annotations

import struct
from typing import Tuple

from .utils.bytes import BytesLike

__all__ = [
    "BorshEncodeError",
    "BorshDecodeError",
    "BorshWriter",
    "read_vec_u8",
    "new_call_args",
    "function_call_args",
    "deploy_erc20_args",
]


class BorshEncodeError(ValueError):
    pass


class BorshDecodeError(ValueError):
    pass


_U32_MAX = (1 << 32) - 1


def _check_range(name: str, value: int, bits: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise BorshEncodeError(f"{name} expects an int, got {type(value).__name__}")
    if not 0 <= value < (1 << bits):
        raise BorshEncodeError(f"{name} value out of range: {value}")
    return value


class BorshWriter:
    """Append-only Borsh writer."""

    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf = bytearray()

    def u8(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<B", _check_range("u8", value, 8))
        return self

    def u32(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<I", _check_range("u32", value, 32))
        return self

    def u64(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<Q", _check_range("u64", value, 64))
        return self

    def u128(self, value: int) -> "BorshWriter":
        self._buf += _check_range("u128", value, 128).to_bytes(16, "little")
        return self

    def fixed(self, data: BytesLike, length: int) -> "BorshWriter":
        raw = bytes(data)
        if len(raw) != length:
            raise BorshEncodeError(f"fixed array expects {length} bytes, got {len(raw)}")
        self._buf += raw
        return self

    def bytes_vec(self, data: BytesLike) -> "BorshWriter":
        raw = bytes(data)
        if len(raw) > _U32_MAX:
            raise BorshEncodeError("byte vector too long")
        self.u32(len(raw))
        self._buf += raw
        return self

    def string(self, value: str) -> "BorshWriter":
        if not isinstance(value, str):
            raise BorshEncodeError(f"string expects str, got {type(value).__name__}")
        return self.bytes_vec(value.encode("utf-8"))

    def variant(self, index: int) -> "BorshWriter":
        return self.u8(index)

    def raw(self, data: BytesLike) -> "BorshWriter":
        self._buf += bytes(data)
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def read_vec_u8(buf: BytesLike, *, offset: int = 0) -> Tuple[bytes, int]:
    """
    Read a u32 length-prefixed byte vector starting at `offset`.

    Returns:
        (payload, length_consumed)
    """
    view = memoryview(buf)[offset:]
    if len(view) < 4:
        raise BorshDecodeError("vector length prefix truncated")
    (size,) = struct.unpack_from("<I", view, 0)
    if 4 + size > len(view):
        raise BorshDecodeError(f"vector declares {size} bytes, only {len(view) - 4} present")
    return view[4 : 4 + size].tobytes(), 4 + size


# -----------------------------------------------------------------------------
# Engine argument structs
# -----------------------------------------------------------------------------


def new_call_args(
    *,
    chain_id: int,
    owner_id: str,
    bridge_prover_id: str,
    upgrade_delay_blocks: int,
) -> bytes:
    """Arguments of the engine's `new` initializer. chain_id is a big-endian u256."""
    return (
        BorshWriter()
        .fixed(_check_range("chain_id", chain_id, 256).to_bytes(32, "big"), 32)
        .string(owner_id)
        .string(bridge_prover_id)
        .u64(upgrade_delay_blocks)
        .getvalue()
    )


def function_call_args(contract: BytesLike, input_data: BytesLike) -> bytes:
    """Arguments of the engine's `call` method: target address + EVM input."""
    return BorshWriter().fixed(contract, 20).bytes_vec(input_data).getvalue()


def deploy_erc20_args(nep141: str) -> bytes:
    """Arguments of `deploy_erc20_token`: the bridged host-chain token account."""
    return BorshWriter().string(nep141).getvalue()
