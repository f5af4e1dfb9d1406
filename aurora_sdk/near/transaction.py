"""
Host-chain transactions: construction, Borsh serialization, signing.

Wire shape (Borsh)
------------------
    Transaction {
        signer_id:   String
        public_key:  PublicKey   (u8 key type || 32 bytes)
        nonce:       u64
        receiver_id: String
        block_hash:  [u8; 32]
        actions:     Vec<Action>
    }
    SignedTransaction { transaction: Transaction, signature: (u8 key type || 64 bytes) }

Only the two actions the engine lifecycle needs are modelled: DeployContract
(installing the engine image) and FunctionCall (every engine method). The
signature covers ``sha256(borsh(Transaction))``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from ..borsh import BorshWriter
from ..utils.hash import sha256
from .keys import KeyPair, PublicKey

# Action enum indices in the host protocol
_ACTION_DEPLOY_CONTRACT = 1
_ACTION_FUNCTION_CALL = 2

__all__ = [
    "DeployContract",
    "FunctionCall",
    "Action",
    "Transaction",
    "sign_transaction",
]


@dataclass(frozen=True)
class DeployContract:
    code: bytes = field(repr=False)

    def encode(self, w: BorshWriter) -> None:
        w.variant(_ACTION_DEPLOY_CONTRACT).bytes_vec(self.code)


@dataclass(frozen=True)
class FunctionCall:
    method_name: str
    args: bytes = field(repr=False)
    gas: int
    deposit: int = 0

    def encode(self, w: BorshWriter) -> None:
        (
            w.variant(_ACTION_FUNCTION_CALL)
            .string(self.method_name)
            .bytes_vec(self.args)
            .u64(self.gas)
            .u128(self.deposit)
        )


Action = Union[DeployContract, FunctionCall]


@dataclass(frozen=True)
class Transaction:
    signer_id: str
    public_key: PublicKey
    nonce: int
    receiver_id: str
    block_hash: bytes
    actions: Tuple[Action, ...]

    def serialize(self) -> bytes:
        w = (
            BorshWriter()
            .string(self.signer_id)
            .u8(self.public_key.key_type)
            .fixed(self.public_key.data, 32)
            .u64(self.nonce)
            .string(self.receiver_id)
            .fixed(self.block_hash, 32)
            .u32(len(self.actions))
        )
        for action in self.actions:
            action.encode(w)
        return w.getvalue()

    def hash(self) -> bytes:
        return sha256(self.serialize())


def sign_transaction(tx: Transaction, key: KeyPair) -> Tuple[bytes, bytes]:
    """
    Sign *tx* with *key*.

    Returns:
        (signed_transaction_bytes, transaction_hash)
    """
    if key.public_key != tx.public_key:
        raise ValueError("transaction public key does not belong to the signing key")
    body = tx.serialize()
    tx_hash = sha256(body)
    signature = key.sign(tx_hash)
    signed = (
        BorshWriter()
        .raw(body)
        .u8(key.public_key.key_type)
        .fixed(signature, 64)
        .getvalue()
    )
    return signed, tx_hash
