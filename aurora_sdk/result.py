"""
Decoder for the engine's binary submission response.

Layout (little-endian integers):

    offset  length         field
    0       1              status        (0 = failure, nonzero = success)
    1       8              gas_used      (u64)
    9       4              result_length (i32)
    13      result_length  result bytes

Bytes past ``13 + result_length`` are ignored; the engine may append
metadata the caller does not know about.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Dict

from .errors import TruncatedBuffer
from .utils.bytes import BytesLike, to_hex

HEADER_LEN = 13

_HEADER = struct.Struct("<BQi")

__all__ = ["HEADER_LEN", "SubmitResult", "decode_submit_result"]


@dataclass(frozen=True)
class SubmitResult:
    status: bool
    gas_used: int
    result: bytes

    @property
    def result_hex(self) -> str:
        return to_hex(self.result)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "gasUsed": self.gas_used,
            "result": self.result_hex,
        }


def decode_submit_result(buffer: BytesLike) -> SubmitResult:
    """
    Decode a raw engine response into a SubmitResult.

    Raises TruncatedBuffer if the header is incomplete, the declared result
    length is negative, or the buffer ends before the declared result does.
    """
    view = memoryview(buffer)
    if len(view) < HEADER_LEN:
        raise TruncatedBuffer("submit result header incomplete", HEADER_LEN, len(view))

    status, gas_used, size = _HEADER.unpack_from(view, 0)
    if size < 0:
        raise TruncatedBuffer(f"negative result length {size}")
    end = HEADER_LEN + size
    if end > len(view):
        raise TruncatedBuffer("result shorter than declared length", end, len(view))

    return SubmitResult(
        status=status != 0,
        gas_used=gas_used,
        result=view[HEADER_LEN:end].tobytes(),
    )
