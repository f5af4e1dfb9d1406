"""
Typed error classes for the Aurora engine SDK.

These are raised by the address codec, the result decoder, the engine client
and the ABI helpers so callers can catch specific failure modes while still
being able to catch the base `AuroraSdkError`.

A decoded `SubmitResult` with ``status=False`` is *not* an error: the EVM ran
and reverted, and the caller inspects the outcome. Nothing in this module is
raised for that case.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .engine import EngineState
    from .result import SubmitResult

__all__ = [
    "AuroraSdkError",
    "InvalidAddressFormat",
    "InvalidAccountId",
    "TruncatedBuffer",
    "EngineNotReady",
    "TransportFailure",
    "RemoteExecutionError",
    "UnexpectedResponse",
    "DeploymentFailed",
    "AbiError",
    "ConfigError",
    "JsonRpcCode",
    "from_jsonrpc_error",
]


class AuroraSdkError(Exception):
    """Base class for all SDK errors."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 spec
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # Local codes used when no JSON-RPC error object exists
    NETWORK_ERROR = -32098
    HTTP_ERROR = -32097
    EXECUTION_FAILURE = -32096


@dataclass(slots=True, eq=False)
class InvalidAddressFormat(AuroraSdkError, ValueError):
    """Raised for malformed or wrong-length address text/bytes."""

    message: str
    value: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.value is None:
            return f"InvalidAddressFormat: {self.message}"
        return f"InvalidAddressFormat: {self.message} (got {self.value!r})"


@dataclass(slots=True, eq=False)
class InvalidAccountId(AuroraSdkError, ValueError):
    """Raised for an empty or non-string host account id."""

    message: str
    value: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"InvalidAccountId: {self.message} (got {self.value})"


@dataclass(slots=True, eq=False)
class TruncatedBuffer(AuroraSdkError, ValueError):
    """
    Raised when a response is shorter than its declared layout.

    Fields:
      - expected: minimum number of bytes the layout requires
      - actual: number of bytes available
    """

    message: str
    expected: Optional[int] = None
    actual: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.expected is None:
            return f"TruncatedBuffer: {self.message}"
        return f"TruncatedBuffer: {self.message} (need {self.expected} bytes, have {self.actual})"


@dataclass(slots=True, eq=False)
class EngineNotReady(AuroraSdkError):
    """Raised when an engine operation is issued before its lifecycle step ran."""

    operation: str
    state: "EngineState"
    required: "EngineState"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return (
            f"EngineNotReady: {self.operation} requires state {self.required.name}, "
            f"engine is {self.state.name}"
        )


@dataclass(slots=True, eq=False)
class TransportFailure(AuroraSdkError):
    """Raised when a host RPC call could not complete (network, HTTP or JSON-RPC error)."""

    method: Optional[str]
    code: int
    message: str
    data: Optional[Any] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True, eq=False)
class RemoteExecutionError(TransportFailure):
    """
    The host chain accepted the transaction but its outcome is ``Failure``
    (engine panic, out of host gas, missing method, ...).
    """


@dataclass(slots=True, eq=False)
class UnexpectedResponse(AuroraSdkError):
    """Raised when response bytes have a shape the protocol does not allow."""

    message: str
    raw: Optional[bytes] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.raw is None:
            return f"UnexpectedResponse: {self.message}"
        return f"UnexpectedResponse: {self.message} (raw=0x{self.raw.hex()})"


@dataclass(slots=True, eq=False)
class DeploymentFailed(AuroraSdkError):
    """Raised when `deploy_code` executes but the EVM reports failure."""

    message: str
    outcome: Optional["SubmitResult"] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.outcome is None:
            return f"DeploymentFailed: {self.message}"
        return f"DeploymentFailed: {self.message} (gas_used={self.outcome.gas_used})"


@dataclass(slots=True, eq=False)
class AbiError(AuroraSdkError):
    """
    Raised when ABI encoding/decoding or validation fails.

    Typical causes: unknown function, wrong arg count/types, out-of-range integers.
    """

    message: str
    function: Optional[str] = None
    parameter: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = []
        if self.function:
            where.append(f"fn={self.function}")
        if self.parameter:
            where.append(f"param={self.parameter}")
        where_s = (" [" + ", ".join(where) + "]") if where else ""
        return f"AbiError{where_s}: {self.message}"


class ConfigError(AuroraSdkError, ValueError):
    """Raised for invalid engine connection configuration."""


def from_jsonrpc_error(
    err_obj: Any,
    *,
    method: Optional[str] = None,
    http_status: Optional[int] = None,
) -> TransportFailure:
    """
    Convert a JSON-RPC error object into TransportFailure.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}.
    The host node also nests a structured cause under "cause"; it is kept in `data`.
    """
    if not isinstance(err_obj, dict):
        return TransportFailure(
            method=method,
            code=JsonRpcCode.SERVER_ERROR,
            message=str(err_obj),
            http_status=http_status,
        )
    code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    message = str(err_obj.get("message", "Unknown JSON-RPC error"))
    data: Dict[str, Any] | Any = err_obj.get("data")
    if "cause" in err_obj:
        data = {"data": data, "cause": err_obj["cause"]}
    return TransportFailure(
        method=method,
        code=code,
        message=message,
        data=data,
        http_status=http_status,
    )
