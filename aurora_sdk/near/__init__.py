"""
aurora_sdk.near
---------------

Host-chain transport for the engine client.

This package exposes:
- NearRpc:       async JSON-RPC client for a host node (see .rpc)
- KeyPair:       ed25519 signer credentials (see .keys)
- Transaction:   unsigned host transaction + Borsh/signing helpers (see .transaction)
"""

from __future__ import annotations

from .keys import KeyPair, PublicKey
from .rpc import NearRpc
from .transaction import (DeployContract, FunctionCall, Transaction,
                          sign_transaction)

__all__ = [
    "KeyPair",
    "PublicKey",
    "NearRpc",
    "Transaction",
    "DeployContract",
    "FunctionCall",
    "sign_transaction",
]
