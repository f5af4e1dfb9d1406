import pytest

from aurora_sdk.address import Address
from aurora_sdk.deployer import (DeploymentOrchestrator, DeploymentRecord,
                                 extract_token_address)
from aurora_sdk.engine import EngineState
from aurora_sdk.errors import EngineNotReady, RemoteExecutionError, UnexpectedResponse

from .conftest import signed_nonce, submit_result_bytes

TOKEN = Address.parse("0x3a0b970f2ab76c554eaef7e153d89f243d3491ee")


def _vec(data: bytes) -> bytes:
    return len(data).to_bytes(4, "little") + data


def test_extract_token_address_shapes():
    assert extract_token_address(_vec(TOKEN.raw)) == TOKEN
    assert extract_token_address(TOKEN.raw) == TOKEN
    with pytest.raises(UnexpectedResponse):
        extract_token_address((21).to_bytes(4, "little") + TOKEN.raw)
    with pytest.raises(UnexpectedResponse):
        extract_token_address(b"\x00" * 4 + TOKEN.raw + b"\x00")
    with pytest.raises(UnexpectedResponse):
        extract_token_address(b"")
    with pytest.raises(UnexpectedResponse):
        extract_token_address((0).to_bytes(4, "little"))


@pytest.mark.asyncio
async def test_full_sequence_returns_record(make_engine, node):
    node.answers["deploy_erc20_token"] = _vec(TOKEN.raw)
    engine = make_engine()
    record = await DeploymentOrchestrator(engine).deploy_bridged_token(b"\x00asm", "token.node0")

    assert record == DeploymentRecord(source_id="token.node0", deployed_address=TOKEN)
    assert record.to_dict() == {"sourceId": "token.node0", "deployedAddress": TOKEN.to_string()}
    assert node.broadcast_methods() == ["install", "new", "deploy_erc20_token"]
    assert [signed_nonce(signed) for _, signed in node.broadcasts] == [42, 43, 44]
    assert engine.state is EngineState.READY
    assert b"\x0b\x00\x00\x00token.node0" in node.broadcasts[-1][1]


@pytest.mark.asyncio
async def test_skipping_initialize_fails_before_token_deploy(make_engine, node):
    engine = make_engine()
    with pytest.raises(EngineNotReady):
        await DeploymentOrchestrator(engine).deploy_bridged_token(b"\x00asm", "token.node0", initialize=False)
    assert node.broadcast_methods() == ["install"]
    assert engine.state is EngineState.INSTALLED


@pytest.mark.asyncio
async def test_first_failure_aborts_without_rollback(make_engine, node):
    node.failures["new"] = {"ActionError": "ERR_ALREADY_INITIALIZED"}
    engine = make_engine()
    with pytest.raises(RemoteExecutionError):
        await DeploymentOrchestrator(engine).deploy_bridged_token(b"\x00asm", "token.node0")
    assert node.broadcast_methods() == ["install", "new"]
    assert engine.state is EngineState.INSTALLED


@pytest.mark.asyncio
async def test_malformed_token_answer_propagates(make_engine, node):
    node.answers["deploy_erc20_token"] = b"\x01\x02"
    engine = make_engine()
    with pytest.raises(UnexpectedResponse):
        await DeploymentOrchestrator(engine).deploy_bridged_token(b"\x00asm", "token.node0")
    assert engine.state is EngineState.READY


@pytest.mark.asyncio
async def test_deploy_contract_on_ready_engine(make_engine, node):
    node.answers["deploy_code"] = submit_result_bytes(True, 1, TOKEN.raw)
    orchestrator = DeploymentOrchestrator(make_engine(EngineState.READY))
    assert await orchestrator.deploy_contract(b"\x60\x80") == TOKEN
