from __future__ import annotations

"""
Contract interface descriptions & Ethereum ABI encoding.

This module defines:
- Frozen dataclasses describing a contract interface (functions, params,
  constructor, creation bytecode). They are plain values: build them in code
  or from an artifact mapping the caller has already loaded.
- Argument encoding/decoding for the Ethereum contract ABI through `eth_abi`,
  restricted to the elementary types:

      address, bool, uint<M>, int<M>, bytes<M>   (static)
      bytes, string                              (dynamic)

  Arrays and tuples are rejected with `AbiError`.
- Selector helpers: ``keccak256("name(type,...)")[:4]``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError

from .address import Address, as_address
from .errors import AbiError
from .utils.bytes import ensure_bytes
from .utils.hash import keccak256

__all__ = [
    "AbiParam",
    "FunctionAbi",
    "ContractInterface",
    "canonical_type",
    "function_selector",
    "encode_arguments",
    "decode_arguments",
    "encode_call",
]


# --- Type-string parsing -----------------------------------------------------

_INT_BITS = tuple(range(8, 257, 8))
_ALIASES = {"uint": "uint256", "int": "int256", "byte": "bytes1"}


def canonical_type(type_str: str) -> str:
    """Normalize an ABI type string and reject unsupported shapes."""
    if not isinstance(type_str, str):
        raise AbiError(f"type must be a string, got {type(type_str).__name__}")
    t = "".join(type_str.split()).lower()
    t = _ALIASES.get(t, t)
    if t in ("address", "bool", "bytes", "string"):
        return t
    if "[" in t or "(" in t:
        raise AbiError(f"Unsupported composite type: {type_str}")
    for prefix in ("uint", "int"):
        if t.startswith(prefix) and t[len(prefix):].isdigit():
            bits = int(t[len(prefix):])
            if bits not in _INT_BITS:
                raise AbiError(f"Invalid integer width: {type_str}")
            return t
    if t.startswith("bytes") and t[5:].isdigit():
        size = int(t[5:])
        if not 1 <= size <= 32:
            raise AbiError(f"Invalid fixed bytes width: {type_str}")
        return t
    raise AbiError(f"Unsupported base type: {type_str}")


# --- Interface description ---------------------------------------------------


@dataclass(frozen=True)
class AbiParam:
    name: str
    type: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", canonical_type(self.type))

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "AbiParam":
        return cls(name=str(obj.get("name", "")), type=str(obj.get("type", "")))


@dataclass(frozen=True)
class FunctionAbi:
    name: str
    inputs: Tuple[AbiParam, ...] = ()
    outputs: Tuple[AbiParam, ...] = ()
    state_mutability: str = "nonpayable"

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(p.type for p in self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_selector(self.signature)

    @property
    def is_view(self) -> bool:
        return self.state_mutability in ("view", "pure")

    def encode_input(self, args: Sequence[Any]) -> bytes:
        if len(args) != len(self.inputs):
            raise AbiError(
                f"expected {len(self.inputs)} argument(s), got {len(args)}",
                function=self.signature,
            )
        return self.selector + encode_arguments(
            [p.type for p in self.inputs], args, function=self.signature,
            names=[p.name for p in self.inputs],
        )

    def decode_output(self, data: bytes) -> Tuple[Any, ...]:
        return decode_arguments([p.type for p in self.outputs], data, function=self.signature)

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "FunctionAbi":
        return cls(
            name=str(obj["name"]),
            inputs=tuple(AbiParam.from_json(p) for p in obj.get("inputs") or ()),
            outputs=tuple(AbiParam.from_json(p) for p in obj.get("outputs") or ()),
            state_mutability=str(obj.get("stateMutability", "nonpayable")),
        )


@dataclass(frozen=True)
class ContractInterface:
    """
    Typed description of a compiled contract: callable functions, constructor
    inputs and (optionally) creation bytecode.
    """

    functions: Tuple[FunctionAbi, ...]
    constructor_inputs: Tuple[AbiParam, ...] = ()
    bytecode: bytes = field(default=b"", repr=False)

    @classmethod
    def from_artifact(cls, artifact: Mapping[str, Any]) -> "ContractInterface":
        """
        Build from a compiled artifact mapping: ``{"abi": [...], "bytecode": "0x..."}``.
        A bare ABI list is accepted too. Events, errors, fallback and receive
        entries are skipped.
        """
        if isinstance(artifact, Mapping):
            entries: Iterable[Mapping[str, Any]] = artifact.get("abi") or ()
            bytecode = artifact.get("bytecode") or b""
        elif isinstance(artifact, (list, tuple)):
            entries, bytecode = artifact, b""
        else:
            raise AbiError("artifact must be a mapping or an ABI list")

        functions: List[FunctionAbi] = []
        ctor: Tuple[AbiParam, ...] = ()
        for entry in entries:
            kind = entry.get("type", "function")
            if kind == "function":
                functions.append(FunctionAbi.from_json(entry))
            elif kind == "constructor":
                ctor = tuple(AbiParam.from_json(p) for p in entry.get("inputs") or ())
        try:
            code = ensure_bytes(bytecode) if bytecode else b""
        except ValueError as e:
            raise AbiError(f"artifact bytecode is not valid hex: {e}") from e
        return cls(functions=tuple(functions), constructor_inputs=ctor, bytecode=code)

    def function(self, name: str) -> FunctionAbi:
        """
        Look up a function by name, or by full signature ``name(type,...)``
        when the name is overloaded.
        """
        if "(" in name:
            wanted = name.replace(" ", "")
            for fn in self.functions:
                if fn.signature == wanted:
                    return fn
            raise AbiError("Unknown function signature", function=name)
        matches = [fn for fn in self.functions if fn.name == name]
        if not matches:
            raise AbiError("Unknown function", function=name)
        if len(matches) > 1:
            sigs = ", ".join(fn.signature for fn in matches)
            raise AbiError(f"Overloaded function; use one of: {sigs}", function=name)
        return matches[0]

    def encode_constructor(self, args: Sequence[Any]) -> bytes:
        if len(args) != len(self.constructor_inputs):
            raise AbiError(
                f"expected {len(self.constructor_inputs)} constructor argument(s), got {len(args)}",
                function="constructor",
            )
        return encode_arguments(
            [p.type for p in self.constructor_inputs], args, function="constructor",
            names=[p.name for p in self.constructor_inputs],
        )


def function_selector(signature: str) -> bytes:
    return keccak256(signature.encode("ascii"))[:4]


def encode_call(interface: ContractInterface, fn: str, args: Sequence[Any]) -> bytes:
    """Selector + encoded arguments for `fn` on `interface`."""
    return interface.function(fn).encode_input(args)


# --- Encoding / decoding -----------------------------------------------------
# Word layout is eth_abi's; this layer checks values against the declared
# types first so errors name the offending parameter.


def _as_bytes(value: Any, where: Dict[str, Optional[str]]) -> bytes:
    try:
        return ensure_bytes(value)
    except (TypeError, ValueError) as e:
        raise AbiError(f"expected bytes or hex string: {e}", **where) from e


def _to_abi_value(t: str, value: Any, where: Dict[str, Optional[str]]) -> Any:
    if t == "address":
        try:
            return as_address(value).to_string()
        except ValueError as e:
            raise AbiError(f"invalid address argument: {e}", **where) from e
    if t == "bool":
        if not isinstance(value, bool):
            raise AbiError("bool argument must be True/False", **where)
        return value
    if t.startswith(("uint", "int")):
        if not isinstance(value, int) or isinstance(value, bool):
            raise AbiError(f"{t} argument must be an int", **where)
        return value
    if t == "string":
        if not isinstance(value, str):
            raise AbiError("string argument must be str", **where)
        return value
    raw = _as_bytes(value, where)
    if t != "bytes" and len(raw) != int(t[5:]):
        raise AbiError(f"{t} argument must be exactly {int(t[5:])} bytes, got {len(raw)}", **where)
    return raw


def _from_abi_value(t: str, value: Any) -> Any:
    if t == "address":
        return Address.parse(value)
    return value


def encode_arguments(
    types: Sequence[str],
    values: Sequence[Any],
    *,
    function: Optional[str] = None,
    names: Optional[Sequence[str]] = None,
) -> bytes:
    """
    ABI-encode `values` as a tuple of `types` (no selector).

    Deterministic: identical inputs always produce identical bytes.
    """
    if len(types) != len(values):
        raise AbiError(f"expected {len(types)} value(s), got {len(values)}", function=function)
    canon = [canonical_type(t) for t in types]
    args = []
    for i, (t, v) in enumerate(zip(canon, values)):
        where = {"function": function, "parameter": (names[i] if names and names[i] else f"#{i}")}
        args.append(_to_abi_value(t, v, where))
    try:
        return abi_encode(canon, args)
    except (EncodingError, ABITypeError) as e:
        raise AbiError(f"cannot encode arguments: {e}", function=function) from e


def decode_arguments(
    types: Sequence[str],
    data: bytes,
    *,
    function: Optional[str] = None,
) -> Tuple[Any, ...]:
    """Decode ABI-encoded `data` as a tuple of `types`."""
    canon = [canonical_type(t) for t in types]
    try:
        values = abi_decode(canon, bytes(data))
    except (DecodingError, ABITypeError, UnicodeDecodeError) as e:
        raise AbiError(f"cannot decode return data: {e}", function=function) from e
    return tuple(_from_abi_value(t, v) for t, v in zip(canon, values))
