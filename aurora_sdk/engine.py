"""
aurora_sdk.engine
=================

Async client for the embedded EVM engine deployed as a host-chain contract.

The client signs host transactions with the configured signer key, submits
them to one host node, and tracks the engine lifecycle locally:

    UNINSTALLED -> INSTALLED -> INITIALIZED -> READY

- `install(bytecode)` deploys the engine image on the engine account.
  **Destructive**: installing again replaces the engine code and everything
  the engine keeps on that account; it is not idempotent.
- `initialize(args)` runs the engine's `new` initializer (requires INSTALLED).
- `deploy_code`, `deploy_erc20_token`, `call`, `submit` and the read-only
  views require READY.

Precondition failures raise `EngineNotReady` before any request is sent.
Transport problems surface as `TransportFailure` with no retry. An EVM call
that reverts is a normal `SubmitResult` with ``status=False``.

Example
-------
    from aurora_sdk import EngineClient, EngineConfig

    cfg = EngineConfig(
        network_id="local",
        rpc_url="http://127.0.0.1:3030",
        contract_id="evm.node0",
        signer_id="evm.node0",
        signer_key="ed25519:...",
    )
    async with EngineClient(cfg) as engine:
        await engine.install(wasm_bytes)
        await engine.initialize()
        raw = await engine.call(token_address, call_data)

Concurrency
-----------
Submissions on one client are serialized (nonce lookup + broadcast run under
an `asyncio.Lock`) and never reuse a nonce the client already signed with,
even when the node's finalized view still reports an older one. Several
clients or processes driving the same signer or engine account are not
coordinated; the local state can go stale, and
`sync_state()` re-derives it from the node.
"""

from __future__ import annotations

import asyncio
import logging
from enum import IntEnum
from typing import Optional, Sequence, Union

from .address import Address, AddressLike, as_address
from .borsh import deploy_erc20_args, function_call_args, new_call_args
from .config import EngineConfig, EngineInitArgs
from .errors import (ConfigError, DeploymentFailed, EngineNotReady,
                     InvalidAccountId, JsonRpcCode, TransportFailure,
                     UnexpectedResponse)
from .near.keys import KeyPair
from .near.rpc import NearRpc, success_value
from .near.transaction import (Action, DeployContract, FunctionCall,
                               Transaction, sign_transaction)
from .result import SubmitResult, decode_submit_result
from .utils.bytes import BytesLike, ensure_bytes, int_from_be32

log = logging.getLogger(__name__)

__all__ = ["EngineState", "EngineClient"]


class EngineState(IntEnum):
    UNINSTALLED = 0
    INSTALLED = 1
    INITIALIZED = 2
    READY = 3


# Failures that say nothing about the remote engine (the node was not reached)
_UNREACHABLE = (JsonRpcCode.NETWORK_ERROR, JsonRpcCode.HTTP_ERROR)


class EngineClient:
    """
    Engine lifecycle + submission client bound to one engine account.

    Parameters
    ----------
    config : explicit connection configuration.
    rpc : optional pre-built `NearRpc` (tests inject one over a mock transport).
    key : optional signer `KeyPair`; defaults to ``config.signer_key``.
    state : initial lifecycle state, for attaching to an engine set up elsewhere.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        rpc: Optional[NearRpc] = None,
        key: Optional[KeyPair] = None,
        state: EngineState = EngineState.UNINSTALLED,
    ) -> None:
        self._config = config
        self._rpc = rpc or NearRpc(
            config.rpc_url,
            timeout=config.request_timeout,
            finality=config.finality,
            headers=config.http_headers(),
        )
        if key is None and config.signer_key:
            key = KeyPair.from_string(config.signer_key)
        self._key = key
        self._state = EngineState(state)
        self._lock = asyncio.Lock()
        self._last_nonce: Optional[int] = None

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "EngineClient":
        await self._rpc.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    async def close(self) -> None:
        await self._rpc.close()

    # --- accessors -------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def rpc(self) -> NearRpc:
        return self._rpc

    # --- lifecycle -------------------------------------------------------

    async def install(self, bytecode: BytesLike) -> None:
        """
        Upload the engine runtime image to the engine account.

        Allowed in any state. Re-installing overwrites all engine-resident
        state on the account.
        """
        code = bytes(bytecode)
        if self._state is not EngineState.UNINSTALLED:
            log.warning(
                "re-installing engine on %s (state %s); engine-resident state is overwritten",
                self._config.contract_id,
                self._state.name,
            )
        await self._submit("install", [DeployContract(code)])
        self._set_state(EngineState.INSTALLED)

    async def initialize(self, args: Optional[EngineInitArgs] = None) -> None:
        """Run the engine's `new` initializer. Requires INSTALLED."""
        self._require("initialize", EngineState.INSTALLED)
        args = args or EngineInitArgs.for_config(self._config)
        await self._function_call(
            "new",
            new_call_args(
                chain_id=args.chain_id,
                owner_id=args.owner_id,
                bridge_prover_id=args.bridge_prover_id,
                upgrade_delay_blocks=args.upgrade_delay_blocks,
            ),
        )
        self._set_state(EngineState.INITIALIZED)
        self._set_state(EngineState.READY)

    async def sync_state(self) -> EngineState:
        """
        Re-derive the lifecycle state from the node: no code on the engine
        account means UNINSTALLED; code that cannot answer `get_chain_id`
        means INSTALLED; otherwise READY.
        """
        try:
            code = await self._rpc.view_code(self._config.contract_id)
        except TransportFailure as e:
            if e.code in _UNREACHABLE:
                raise
            code = b""
        if not code:
            self._set_state(EngineState.UNINSTALLED)
            return self._state
        try:
            await self._rpc.call_function(self._config.contract_id, "get_chain_id")
        except TransportFailure as e:
            if e.code in _UNREACHABLE:
                raise
            self._set_state(EngineState.INSTALLED)
            return self._state
        self._set_state(EngineState.READY)
        return self._state

    # --- engine operations -----------------------------------------------

    async def deploy_code(self, data: Union[BytesLike, str]) -> Address:
        """
        Deploy raw EVM creation bytecode and return the new contract's address.

        Raises DeploymentFailed when the EVM reports failure.
        """
        self._require("deploy_code", EngineState.READY)
        raw = await self._function_call("deploy_code", ensure_bytes(data))
        outcome = decode_submit_result(raw)
        if not outcome.status:
            raise DeploymentFailed("engine reported failure for deploy_code", outcome)
        if len(outcome.result) != 20:
            raise UnexpectedResponse("deploy_code result is not a 20-byte address", outcome.result)
        address = Address.from_bytes(outcome.result)
        log.info("deployed EVM contract at %s (gas_used=%d)", address, outcome.gas_used)
        return address

    async def deploy_erc20_token(self, source_id: str) -> bytes:
        """
        Deploy the bridged ERC-20 for host token account `source_id`.

        Returns the raw answer; see `aurora_sdk.deployer.extract_token_address`.
        """
        self._require("deploy_erc20_token", EngineState.READY)
        if not isinstance(source_id, str) or not source_id:
            raise InvalidAccountId("source_id must be a non-empty account id", repr(source_id))
        return await self._function_call("deploy_erc20_token", deploy_erc20_args(source_id))

    async def call(self, target: AddressLike, data: Union[BytesLike, str]) -> bytes:
        """Submit an EVM call; returns the raw submit-result buffer."""
        self._require("call", EngineState.READY)
        address = as_address(target)
        return await self._function_call("call", function_call_args(address.raw, ensure_bytes(data)))

    async def submit(self, target: AddressLike, data: Union[BytesLike, str]) -> SubmitResult:
        """`call` followed by `decode_submit_result`."""
        return decode_submit_result(await self.call(target, data))

    # --- read-only views -------------------------------------------------

    async def get_code(self, address: AddressLike) -> bytes:
        self._require("get_code", EngineState.READY)
        return await self._view("get_code", as_address(address).raw)

    async def get_balance(self, address: AddressLike) -> int:
        self._require("get_balance", EngineState.READY)
        return int_from_be32(await self._view("get_balance", as_address(address).raw))

    async def get_nonce(self, address: AddressLike) -> int:
        self._require("get_nonce", EngineState.READY)
        return int_from_be32(await self._view("get_nonce", as_address(address).raw))

    async def get_chain_id(self) -> int:
        self._require("get_chain_id", EngineState.READY)
        return int_from_be32(await self._view("get_chain_id"))

    # --- internals -------------------------------------------------------

    def _require(self, operation: str, required: EngineState) -> None:
        if self._state < required:
            raise EngineNotReady(operation, self._state, required)

    def _set_state(self, state: EngineState) -> None:
        if state is not self._state:
            log.info("engine %s: %s -> %s", self._config.contract_id, self._state.name, state.name)
        self._state = state

    async def _view(self, method: str, args: bytes = b"") -> bytes:
        return await self._rpc.call_function(self._config.contract_id, method, args)

    async def _function_call(self, method: str, args: bytes) -> bytes:
        action = FunctionCall(method_name=method, args=args, gas=int(self._config.attached_gas))
        return await self._submit(method, [action])

    async def _submit(self, label: str, actions: Sequence[Action]) -> bytes:
        if self._key is None:
            raise ConfigError("a signer_key is required to submit transactions")
        async with self._lock:
            access_key = await self._rpc.view_access_key(
                self._config.signer_id, self._key.public_key.to_string()
            )
            # finalized views lag; never go below a nonce this client already used
            nonce = int(access_key["nonce"]) + 1
            if self._last_nonce is not None:
                nonce = max(nonce, self._last_nonce + 1)
            tx = Transaction(
                signer_id=self._config.signer_id,
                public_key=self._key.public_key,
                nonce=nonce,
                receiver_id=self._config.contract_id,
                block_hash=NearRpc.decode_block_hash(access_key["block_hash"]),
                actions=tuple(actions),
            )
            signed, tx_hash = sign_transaction(tx, self._key)
            self._last_nonce = nonce
            log.debug(
                "submitting %s to %s nonce=%d size=%d tx=%s",
                label,
                self._config.contract_id,
                tx.nonce,
                len(signed),
                tx_hash.hex(),
            )
            outcome = await self._rpc.broadcast_tx_commit(signed)
        return success_value(outcome, method=label)
