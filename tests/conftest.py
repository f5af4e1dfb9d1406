from __future__ import annotations

import base64
import json
import struct
from typing import Any, Dict, List, Optional, Tuple

import base58
import httpx
import pytest

from aurora_sdk.config import EngineConfig
from aurora_sdk.engine import EngineClient, EngineState
from aurora_sdk.near.keys import KeyPair
from aurora_sdk.near.rpc import NearRpc

ENGINE_ACCOUNT = "evm.node0"
BLOCK_HASH = bytes(range(32))


def submit_result_bytes(status: bool, gas_used: int, result: bytes, trailer: bytes = b"") -> bytes:
    return struct.pack("<BQi", 1 if status else 0, gas_used, len(result)) + result + trailer


def signed_nonce(signed: bytes) -> int:
    offset = 4 + len(ENGINE_ACCOUNT) + 1 + 32
    return int.from_bytes(signed[offset : offset + 8], "little")


def _borsh_name(method: str) -> bytes:
    return struct.pack("<I", len(method)) + method.encode()


class FakeNearNode:
    """
    In-memory host node behind ``httpx.MockTransport``.

    `answers` maps an engine method name to the raw bytes its SuccessValue
    carries; `failures` maps a method name to a Failure payload. A signed
    transaction without a FunctionCall for a known method is treated as an
    engine install (DeployContract).
    """

    METHODS = ("deploy_erc20_token", "deploy_code", "call", "new")

    def __init__(self) -> None:
        self.requests: List[Dict[str, Any]] = []
        self.broadcasts: List[Tuple[str, bytes]] = []
        self.answers: Dict[str, bytes] = {"install": b"", "new": b""}
        self.failures: Dict[str, Any] = {}
        self.views: Dict[str, bytes] = {}
        self.code: bytes = b""
        self.access_key_nonce = 41
        self.jsonrpc_error: Optional[Dict[str, Any]] = None
        self.unreachable = False

    # --- helpers ----------------------------------------------------------

    def method_of(self, signed: bytes) -> str:
        for name in self.METHODS:
            if _borsh_name(name) in signed:
                return name
        return "install"

    def broadcast_methods(self) -> List[str]:
        return [m for m, _ in self.broadcasts]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    # --- handler ----------------------------------------------------------

    def _handle(self, request: httpx.Request) -> httpx.Response:
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        body = json.loads(request.content)
        self.requests.append(body)
        if self.jsonrpc_error is not None:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": self.jsonrpc_error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": self._result(body)})

    def _result(self, body: Dict[str, Any]) -> Any:
        method, params = body["method"], body["params"]
        if method == "query":
            kind = params["request_type"]
            if kind == "view_access_key":
                return {
                    "nonce": self.access_key_nonce,
                    "block_hash": base58.b58encode(BLOCK_HASH).decode(),
                    "block_height": 7,
                    "permission": "FullAccess",
                }
            if kind == "view_code":
                if not self.code:
                    return {"error": f"wasm execution failed: contract {params['account_id']} has no code"}
                return {"code_base64": base64.b64encode(self.code).decode(), "hash": "x"}
            if kind == "call_function":
                name = params["method_name"]
                if name not in self.views:
                    return {"error": f"MethodNotFound: {name}", "logs": []}
                return {"result": list(self.views[name]), "logs": [], "block_height": 7}
            raise AssertionError(f"unexpected query {kind}")
        if method == "broadcast_tx_commit":
            signed = base64.b64decode(params[0])
            name = self.method_of(signed)
            self.broadcasts.append((name, signed))
            if name in self.failures:
                return {"status": {"Failure": self.failures[name]}}
            if name == "install":
                self.code = b"\x00asm"
            value = self.answers.get(name, b"")
            return {"status": {"SuccessValue": base64.b64encode(value).decode()}}
        raise AssertionError(f"unexpected rpc method {method}")


@pytest.fixture
def key() -> KeyPair:
    return KeyPair.from_seed(bytes(range(32)))


@pytest.fixture
def config(key: KeyPair) -> EngineConfig:
    return EngineConfig(
        network_id="local",
        rpc_url="http://127.0.0.1:3030/",
        contract_id=ENGINE_ACCOUNT,
        signer_id=ENGINE_ACCOUNT,
        signer_key=key.secret_key_string(),
    )


@pytest.fixture
def node() -> FakeNearNode:
    return FakeNearNode()


@pytest.fixture
def make_engine(config: EngineConfig, node: FakeNearNode):
    def _make(state: EngineState = EngineState.UNINSTALLED) -> EngineClient:
        rpc = NearRpc(config.rpc_url, transport=node.transport())
        return EngineClient(config, rpc=rpc, state=state)

    return _make


ERC20_ARTIFACT: Dict[str, Any] = {
    "contractName": "EvmErc20",
    "abi": [
        {
            "type": "constructor",
            "inputs": [
                {"name": "name", "type": "string"},
                {"name": "symbol", "type": "string"},
                {"name": "decimals", "type": "uint8"},
                {"name": "admin", "type": "address"},
            ],
        },
        {
            "type": "function",
            "name": "balanceOf",
            "inputs": [{"name": "account", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
            "stateMutability": "view",
        },
        {
            "type": "function",
            "name": "decimals",
            "inputs": [],
            "outputs": [{"name": "", "type": "uint8"}],
            "stateMutability": "view",
        },
        {
            "type": "function",
            "name": "mint",
            "inputs": [
                {"name": "account", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [],
            "stateMutability": "nonpayable",
        },
        {
            "type": "function",
            "name": "withdrawToNear",
            "inputs": [
                {"name": "recipient", "type": "bytes"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [],
            "stateMutability": "nonpayable",
        },
        {
            "type": "function",
            "name": "name",
            "inputs": [],
            "outputs": [{"name": "", "type": "string"}],
            "stateMutability": "view",
        },
        {
            "type": "event",
            "name": "Transfer",
            "inputs": [
                {"name": "from", "type": "address", "indexed": True},
                {"name": "to", "type": "address", "indexed": True},
                {"name": "value", "type": "uint256", "indexed": False},
            ],
        },
    ],
    "bytecode": "0x6080604052",
}


@pytest.fixture
def erc20_artifact() -> Dict[str, Any]:
    return ERC20_ARTIFACT
