"""
ed25519 signer credentials in the host chain's text format.

Keys are written as ``ed25519:<base58>``: the public key is 32 bytes, the
secret key is either the 64-byte expanded form (seed || public key) stored by
host wallets, or a bare 32-byte seed.
"""

from __future__ import annotations

from dataclasses import dataclass

import base58
from nacl import signing
from nacl.encoding import RawEncoder
from nacl.exceptions import BadSignatureError

from ..errors import ConfigError

KEY_TYPE_ED25519 = 0
_PREFIX = "ed25519:"

__all__ = ["KEY_TYPE_ED25519", "PublicKey", "KeyPair"]


def _decode_key_text(text: str) -> bytes:
    if not isinstance(text, str) or not text.startswith(_PREFIX):
        raise ConfigError("key must use the 'ed25519:<base58>' form")
    try:
        return base58.b58decode(text[len(_PREFIX):])
    except ValueError as e:
        raise ConfigError(f"key is not valid base58: {e}") from e


@dataclass(frozen=True)
class PublicKey:
    data: bytes
    key_type: int = KEY_TYPE_ED25519

    @classmethod
    def from_string(cls, text: str) -> "PublicKey":
        raw = _decode_key_text(text)
        if len(raw) != 32:
            raise ConfigError(f"ed25519 public key must be 32 bytes, got {len(raw)}")
        return cls(raw)

    def to_string(self) -> str:
        return _PREFIX + base58.b58encode(self.data).decode("ascii")

    def __str__(self) -> str:
        return self.to_string()


class KeyPair:
    """Signing key for the host-chain signer account."""

    __slots__ = ("_sk", "_public_key")

    def __init__(self, signing_key: signing.SigningKey) -> None:
        self._sk = signing_key
        self._public_key = PublicKey(bytes(signing_key.verify_key))

    @classmethod
    def from_seed(cls, seed: bytes) -> "KeyPair":
        if len(seed) != 32:
            raise ConfigError("ed25519 seed must be 32 bytes")
        return cls(signing.SigningKey(bytes(seed)))

    @classmethod
    def from_string(cls, text: str) -> "KeyPair":
        """
        Parse ``ed25519:<base58>`` secret key text (64-byte expanded key or
        32-byte seed). For the expanded form the embedded public key must match
        the seed.
        """
        raw = _decode_key_text(text)
        if len(raw) == 32:
            return cls.from_seed(raw)
        if len(raw) != 64:
            raise ConfigError(f"ed25519 secret key must be 32 or 64 bytes, got {len(raw)}")
        pair = cls.from_seed(raw[:32])
        if pair.public_key.data != raw[32:]:
            raise ConfigError("secret key does not match its embedded public key")
        return pair

    @classmethod
    def generate(cls) -> "KeyPair":
        return cls(signing.SigningKey.generate())

    @property
    def public_key(self) -> PublicKey:
        return self._public_key

    def secret_key_string(self) -> str:
        expanded = bytes(self._sk) + self._public_key.data
        return _PREFIX + base58.b58encode(expanded).decode("ascii")

    def sign(self, message: bytes) -> bytes:
        """Detached 64-byte ed25519 signature over *message*."""
        return self._sk.sign(bytes(message), encoder=RawEncoder).signature

    def verify(self, message: bytes, signature: bytes) -> bool:
        try:
            self._sk.verify_key.verify(bytes(message), bytes(signature))
            return True
        except BadSignatureError:
            return False

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self._public_key})"
