"""
aurora_sdk.address
==================

EVM address value type used by the embedded engine.

Format
------
An address is exactly 20 raw bytes. Its canonical text form is ``0x``
followed by 40 lowercase hex digits. Parsing accepts an optional ``0x``/``0X``
prefix and mixed case (EIP-55 checksummed input parses, but the checksum is
not verified).

This module provides:
- Address.parse(text) -> Address
- Address.from_bytes(raw) -> Address
- Address.zero() -> Address          (all-zero sentinel, e.g. "no admin")
- Address.to_string() / str(addr)    (canonical lowercase form)
- parse / zero / to_string           (module-level aliases)

Round trip: ``Address.parse(a.to_string()) == a`` for every address ``a``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .errors import InvalidAddressFormat

ADDRESS_LENGTH = 20

_HEX_RE = re.compile(r"[0-9a-fA-F]*")

__all__ = [
    "ADDRESS_LENGTH",
    "Address",
    "AddressLike",
    "parse",
    "zero",
    "to_string",
    "as_address",
]


@dataclass(frozen=True, slots=True)
class Address:
    """Immutable 20-byte EVM address."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise InvalidAddressFormat("address must be built from bytes", repr(self.raw))
        if len(self.raw) != ADDRESS_LENGTH:
            raise InvalidAddressFormat(
                f"address must be exactly {ADDRESS_LENGTH} bytes", bytes(self.raw).hex()
            )
        if isinstance(self.raw, bytearray):
            object.__setattr__(self, "raw", bytes(self.raw))

    # ---- constructors -------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "Address":
        """
        Parse ``0x``-prefixed (or bare) hex text into an Address.

        Raises InvalidAddressFormat for non-hex characters or a decoded length
        other than 20 bytes.
        """
        if not isinstance(text, str):
            raise InvalidAddressFormat("address text must be a string", repr(text))
        body = text[2:] if text.startswith(("0x", "0X")) else text
        if not _HEX_RE.fullmatch(body):
            raise InvalidAddressFormat("address contains non-hex characters", text)
        if len(body) != ADDRESS_LENGTH * 2:
            raise InvalidAddressFormat(
                f"address must decode to {ADDRESS_LENGTH} bytes", text
            )
        return cls(bytes.fromhex(body))

    @classmethod
    def from_bytes(cls, raw: Union[bytes, bytearray, memoryview]) -> "Address":
        return cls(bytes(raw))

    @classmethod
    def zero(cls) -> "Address":
        return cls(b"\x00" * ADDRESS_LENGTH)

    # ---- views --------------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return self.raw == b"\x00" * ADDRESS_LENGTH

    def to_string(self) -> str:
        return "0x" + self.raw.hex()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Address({self.to_string()})"

    def __bytes__(self) -> bytes:
        return self.raw


AddressLike = Union[Address, str, bytes]


def as_address(value: AddressLike) -> Address:
    """Coerce an Address, hex text or 20 raw bytes into an Address."""
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        return Address.parse(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Address.from_bytes(value)
    raise InvalidAddressFormat("unsupported address value", repr(value))


# Friendly aliases
parse = Address.parse
zero = Address.zero


def to_string(address: Address) -> str:
    return address.to_string()
