"""
aurora_sdk.deployer
===================

Sequence engine installation, initialization and token deployment.

This module:
- Installs the engine image on the engine account
- Runs the engine's `new` initializer (skippable, for engines that are
  already initialized out of band)
- Deploys the bridged ERC-20 for a host-chain token account
- Extracts the token's EVM address and returns a `DeploymentRecord`

Failure semantics
-----------------
The first failing step raises and the sequence stops. Nothing is rolled back:
the engine is left in whatever state the last successful step produced (for
example installed but not initialized). Re-run the missing steps on the same
`EngineClient` to continue.

Token address answer
--------------------
`deploy_erc20_token` answers with a Borsh byte vector: a little-endian u32
length tag followed by the 20 address bytes. `extract_token_address` checks
that tag instead of blindly slicing, and also accepts a bare 20-byte answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .address import ADDRESS_LENGTH, Address
from .borsh import BorshDecodeError, read_vec_u8
from .config import EngineInitArgs
from .engine import EngineClient
from .errors import UnexpectedResponse
from .utils.bytes import BytesLike

log = logging.getLogger(__name__)

__all__ = ["DeploymentRecord", "DeploymentOrchestrator", "extract_token_address"]


@dataclass(frozen=True)
class DeploymentRecord:
    source_id: str
    deployed_address: Address

    def to_dict(self) -> Dict[str, Any]:
        return {"sourceId": self.source_id, "deployedAddress": self.deployed_address.to_string()}


def extract_token_address(raw: BytesLike) -> Address:
    """
    Read the token address out of a `deploy_erc20_token` answer.

    Accepts ``u32_le(20) || address`` (24 bytes) or a bare 20-byte address;
    raises UnexpectedResponse for any other shape.
    """
    data = bytes(raw)
    if len(data) == ADDRESS_LENGTH:
        return Address.from_bytes(data)
    try:
        payload, consumed = read_vec_u8(data)
    except BorshDecodeError as e:
        raise UnexpectedResponse(f"token deploy answer is not a byte vector: {e}", data) from e
    if consumed != len(data) or len(payload) != ADDRESS_LENGTH:
        raise UnexpectedResponse(f"token deploy answer has {len(data)} bytes", data)
    return Address.from_bytes(payload)


class DeploymentOrchestrator:
    """Drives an `EngineClient` through install -> initialize -> deploy."""

    def __init__(self, engine: EngineClient) -> None:
        self._engine = engine

    @property
    def engine(self) -> EngineClient:
        return self._engine

    async def deploy_bridged_token(
        self,
        bytecode: BytesLike,
        source_id: str,
        *,
        init_args: Optional[EngineInitArgs] = None,
        initialize: bool = True,
    ) -> DeploymentRecord:
        """
        Install the engine from `bytecode`, initialize it, deploy the ERC-20
        bound to `source_id`, and return where it landed.

        With ``initialize=False`` the engine must already be READY after
        install, which a fresh install never is: the token step then fails
        with EngineNotReady without sending a request.
        """
        log.info("installing engine on %s", self._engine.config.contract_id)
        await self._engine.install(bytecode)

        if initialize:
            await self._engine.initialize(init_args)

        raw = await self._engine.deploy_erc20_token(source_id)
        record = DeploymentRecord(source_id=source_id, deployed_address=extract_token_address(raw))
        log.info("bridged token %s deployed at %s", source_id, record.deployed_address)
        return record

    async def deploy_contract(self, creation_data: Union[BytesLike, str]) -> Address:
        """Deploy raw EVM creation bytecode on an already-ready engine."""
        return await self._engine.deploy_code(creation_data)
