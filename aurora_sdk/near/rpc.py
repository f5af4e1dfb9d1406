"""
Async JSON-RPC client for a host-chain node.

- One request per call over ``httpx.AsyncClient``; no retry, backoff or
  cancellation here. Network errors, HTTP errors and JSON-RPC error objects
  all surface as `TransportFailure`.
- Typed helpers for the handful of endpoints the engine client uses:
  * query/view_access_key  (nonce + recent block hash for signing)
  * query/view_code        (is an engine image installed?)
  * query/call_function    (read-only engine views)
  * broadcast_tx_commit    (submit a signed transaction, wait for its outcome)

Notes
-----
* Signed transactions are submitted as base64 of their Borsh bytes.
* A committed transaction whose ``status`` is ``Failure`` raises
  `RemoteExecutionError`; ``SuccessValue`` is returned as raw bytes.
"""

from __future__ import annotations

import base64
import json
import logging
from itertools import count
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import base58
import httpx

from ..errors import (JsonRpcCode, RemoteExecutionError, TransportFailure,
                      from_jsonrpc_error)
from ..version import user_agent

log = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]

__all__ = ["NearRpc", "success_value"]


def _build_headers(extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    hdrs = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": user_agent(),
    }
    if extra:
        hdrs.update(extra)
    return hdrs


def success_value(outcome: Mapping[str, Any], *, method: Optional[str] = None) -> bytes:
    """
    Extract the raw return bytes of a committed transaction outcome.

    Raises RemoteExecutionError for ``Failure`` (or any status that is not a
    success) so an engine panic is never mistaken for an empty answer.
    """
    status = outcome.get("status")
    if isinstance(status, dict):
        if "SuccessValue" in status:
            return base64.b64decode(status["SuccessValue"] or "")
        if "Failure" in status:
            raise RemoteExecutionError(
                method=method,
                code=JsonRpcCode.EXECUTION_FAILURE,
                message="transaction execution failed",
                data=status["Failure"],
            )
    raise RemoteExecutionError(
        method=method,
        code=JsonRpcCode.EXECUTION_FAILURE,
        message="transaction outcome carries no success value",
        data=status,
    )


class NearRpc:
    """
    Minimal async JSON-RPC client for a host node.

    Parameters
    ----------
    url : node RPC endpoint (http/https).
    timeout : per-request timeout in seconds, enforced by httpx.
    finality : block finality used for `query` requests.
    transport : optional httpx transport (tests inject ``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        finality: str = "final",
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._finality = finality
        self._headers = _build_headers(headers)
        self._transport = transport
        self._ids: Iterator[int] = count(1)
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    # ---------- lifecycle ----------

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NearRpc":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    # ---------- core transport ----------

    async def request(self, method: str, params: Any = None) -> JSON:
        """Perform a single JSON-RPC request and return `result` or raise TransportFailure."""
        if self._client is None:
            await self.start()
        assert self._client is not None  # for type-checkers

        rid = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": rid, "method": method, "params": params if params is not None else []}
        log.debug("rpc request id=%s method=%s", rid, method)

        try:
            resp = await self._client.post(self._url, content=json.dumps(payload, separators=(",", ":")))
        except (httpx.TimeoutException, httpx.TransportError) as e:
            raise TransportFailure(
                method=method,
                code=JsonRpcCode.NETWORK_ERROR,
                message="Network error",
                data=str(e),
            ) from e

        try:
            body = resp.json()
        except ValueError as e:
            raise TransportFailure(
                method=method,
                code=JsonRpcCode.HTTP_ERROR if resp.status_code >= 400 else JsonRpcCode.INTERNAL_ERROR,
                message="Non-JSON response from RPC",
                data=f"HTTP {resp.status_code}: {resp.text[:256]}",
                http_status=resp.status_code,
            ) from e

        if not isinstance(body, dict):
            raise TransportFailure(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid JSON-RPC response type",
                data=type(body).__name__,
                http_status=resp.status_code,
            )
        if body.get("error") is not None:
            raise from_jsonrpc_error(body["error"], method=method, http_status=resp.status_code)
        if resp.status_code >= 400:
            raise TransportFailure(
                method=method,
                code=JsonRpcCode.HTTP_ERROR,
                message=f"HTTP {resp.status_code}",
                data=resp.text[:256],
                http_status=resp.status_code,
            )
        if "result" not in body:
            raise TransportFailure(
                method=method,
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Malformed JSON-RPC response",
                data=body,
            )
        return body["result"]

    async def query(self, request_type: str, **fields: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {"request_type": request_type, "finality": self._finality}
        params.update(fields)
        result = await self.request("query", params)
        if not isinstance(result, dict):
            raise TransportFailure(
                method=f"query/{request_type}",
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid query result",
                data=result,
            )
        # Older nodes report query failures inside an otherwise successful result
        if result.get("error"):
            raise TransportFailure(
                method=f"query/{request_type}",
                code=JsonRpcCode.SERVER_ERROR,
                message=str(result["error"]),
                data=result.get("logs"),
            )
        return result

    # ---------- typed methods ----------

    async def view_access_key(self, account_id: str, public_key: str) -> Dict[str, Any]:
        """Return ``{"nonce", "block_hash", ...}`` for the signer's access key."""
        return await self.query("view_access_key", account_id=account_id, public_key=public_key)

    async def view_code(self, account_id: str) -> bytes:
        result = await self.query("view_code", account_id=account_id)
        return base64.b64decode(result.get("code_base64") or "")

    async def call_function(self, account_id: str, method_name: str, args: bytes = b"") -> bytes:
        """Run a read-only contract method and return its raw answer."""
        result = await self.query(
            "call_function",
            account_id=account_id,
            method_name=method_name,
            args_base64=base64.b64encode(bytes(args)).decode("ascii"),
        )
        raw: List[int] = result.get("result") or []
        return bytes(raw)

    async def broadcast_tx_commit(self, signed_tx: bytes) -> Dict[str, Any]:
        """Submit a signed transaction and wait until its outcome is final."""
        result = await self.request(
            "broadcast_tx_commit", [base64.b64encode(bytes(signed_tx)).decode("ascii")]
        )
        if not isinstance(result, dict):
            raise TransportFailure(
                method="broadcast_tx_commit",
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid transaction outcome",
                data=result,
            )
        return result

    # ---------- convenience ----------

    @staticmethod
    def decode_block_hash(block_hash: str) -> bytes:
        raw = base58.b58decode(block_hash)
        if len(raw) != 32:
            raise TransportFailure(
                method="query/view_access_key",
                code=JsonRpcCode.INTERNAL_ERROR,
                message="block hash must decode to 32 bytes",
                data=block_hash,
            )
        return raw
