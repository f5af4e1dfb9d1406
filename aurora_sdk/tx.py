"""
aurora_sdk.tx
=============

Builders for EVM call payloads submitted through the engine.

`TransactionBuilder` binds a `ContractInterface` to a deployed contract
address and turns ``(function, args)`` into an immutable `CallPayload`.
It performs no network I/O: building is a pure, deterministic encoding step.

Examples
--------
    iface = ContractInterface.from_artifact(artifact_dict)
    token = TransactionBuilder(iface, token_address)

    token.build("balanceOf", holder)              # (address)
    token.build("mint", holder, 256)              # (address, uint256)
    token.build("withdrawToNear", recipient, 201) # (bytes|address, uint256)
    token.build("decimals")                       # no arguments

    payload = token.build("mint", holder, 256)
    outcome = await engine.submit(payload.to, payload.data)
    (balance,) = token.decode_result("balanceOf", outcome)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

from .abi import ContractInterface
from .address import Address, AddressLike, as_address
from .errors import AbiError
from .result import SubmitResult
from .utils.bytes import to_hex

__all__ = ["CallPayload", "TransactionBuilder", "deploy_data"]


@dataclass(frozen=True)
class CallPayload:
    """Unsigned call descriptor: target contract + EVM input bytes."""

    to: Address
    data: bytes = field(repr=False)

    @property
    def data_hex(self) -> str:
        return to_hex(self.data)

    def to_dict(self) -> dict:
        return {"to": self.to.to_string(), "data": self.data_hex}


def deploy_data(interface: ContractInterface, *constructor_args: Any) -> bytes:
    """
    Creation payload for `EngineClient.deploy_code`: bytecode followed by the
    ABI-encoded constructor arguments.
    """
    if not interface.bytecode:
        raise AbiError("interface carries no creation bytecode", function="constructor")
    return interface.bytecode + interface.encode_constructor(constructor_args)


class TransactionBuilder:
    """ABI-driven payload builder bound to one contract address."""

    def __init__(self, interface: ContractInterface, target: AddressLike) -> None:
        self._interface = interface
        self._target = as_address(target)

    @property
    def target(self) -> Address:
        return self._target

    @property
    def interface(self) -> ContractInterface:
        return self._interface

    def at(self, target: AddressLike) -> "TransactionBuilder":
        """Same interface, different deployment."""
        return TransactionBuilder(self._interface, target)

    def encode(self, fn: str, *args: Any) -> bytes:
        return self._interface.function(fn).encode_input(args)

    def build(self, fn: str, *args: Any) -> CallPayload:
        return CallPayload(to=self._target, data=self.encode(fn, *args))

    def decode_result(self, fn: str, outcome: SubmitResult) -> Tuple[Any, ...]:
        """
        Decode the return data of a successful call to `fn`.

        A reverted call (``status=False``) carries revert data, not return
        values, and is rejected here.
        """
        if not outcome.status:
            raise AbiError("cannot decode return values of a failed call", function=fn)
        return self._interface.function(fn).decode_output(outcome.result)
