import struct

import pytest

from aurora_sdk.errors import TruncatedBuffer
from aurora_sdk.result import HEADER_LEN, SubmitResult, decode_submit_result


def _le64(n: int) -> bytes:
    return struct.pack("<Q", n)


def _le32(n: int) -> bytes:
    return struct.pack("<i", n)


def test_success_with_empty_result():
    buf = b"\x01" + _le64(21000) + _le32(0)
    assert decode_submit_result(buf) == SubmitResult(status=True, gas_used=21000, result=b"")


def test_failure_with_revert_payload():
    buf = b"\x00" + _le64(0) + _le32(3) + bytes([0xAA, 0xBB, 0xCC])
    out = decode_submit_result(buf)
    assert out.status is False
    assert out.gas_used == 0
    assert out.result == b"\xaa\xbb\xcc"


def test_any_nonzero_status_byte_is_success():
    buf = b"\x07" + _le64(5) + _le32(0)
    assert decode_submit_result(buf).status is True


def test_gas_used_is_unsigned_64_bit():
    buf = b"\x01" + b"\xff" * 8 + _le32(0)
    assert decode_submit_result(buf).gas_used == 2**64 - 1


@pytest.mark.parametrize("size", [0, 1, 5, 12])
def test_short_header_is_truncated(size):
    with pytest.raises(TruncatedBuffer):
        decode_submit_result(b"\x01" * size)


def test_declared_length_past_end_is_truncated():
    buf = b"\x01" + _le64(1) + _le32(4) + b"\x01\x02\x03"
    with pytest.raises(TruncatedBuffer):
        decode_submit_result(buf)


def test_negative_length_is_rejected():
    buf = b"\x01" + _le64(1) + _le32(-1) + b"\x00" * 8
    with pytest.raises(TruncatedBuffer):
        decode_submit_result(buf)


def test_trailing_bytes_are_ignored():
    buf = b"\x01" + _le64(42) + _le32(2) + b"\x10\x20" + b"metadata"
    out = decode_submit_result(buf)
    assert out.result == b"\x10\x20"
    assert out.gas_used == 42


def test_accepts_bytearray_and_memoryview():
    buf = bytearray(b"\x01" + _le64(9) + _le32(1) + b"\x05")
    assert decode_submit_result(buf).result == b"\x05"
    assert decode_submit_result(memoryview(bytes(buf))).result == b"\x05"
    assert HEADER_LEN == 13


def test_to_dict_renders_hex():
    out = SubmitResult(status=True, gas_used=3, result=b"\xde\xad")
    assert out.to_dict() == {"status": True, "gasUsed": 3, "result": "0xdead"}
