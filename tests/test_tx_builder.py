import pytest

from aurora_sdk.abi import ContractInterface
from aurora_sdk.address import Address
from aurora_sdk.errors import AbiError
from aurora_sdk.result import SubmitResult
from aurora_sdk.tx import CallPayload, TransactionBuilder, deploy_data

TOKEN = Address.parse("0x3a0b970f2ab76c554eaef7e153d89f243d3491ee")
HOLDER = Address.parse("0x6161616161616161616161616161616161616162")


@pytest.fixture
def token(erc20_artifact) -> TransactionBuilder:
    return TransactionBuilder(ContractInterface.from_artifact(erc20_artifact), TOKEN)


def test_payload_targets_bound_address(token):
    payload = token.build("balanceOf", HOLDER)
    assert isinstance(payload, CallPayload)
    assert payload.to == TOKEN
    assert payload.data[:4].hex() == "70a08231"
    assert payload.to_dict() == {"to": TOKEN.to_string(), "data": payload.data_hex}


def test_two_argument_payload_is_deterministic(token):
    first = token.build("mint", HOLDER, 201)
    second = token.build("mint", HOLDER, 201)
    assert first == second
    assert first.data == second.data
    assert len(first.data) == 4 + 64


def test_payload_is_immutable(token):
    payload = token.build("decimals")
    with pytest.raises(AttributeError):
        payload.data = b""  # type: ignore[misc]


def test_at_rebinds_target(token):
    other = token.at(HOLDER)
    assert other.target == HOLDER
    assert other.build("decimals").data == token.build("decimals").data


def test_decode_result(token):
    outcome = SubmitResult(status=True, gas_used=1, result=(256).to_bytes(32, "big"))
    assert token.decode_result("balanceOf", outcome) == (256,)


def test_decode_result_rejects_reverted_call(token):
    outcome = SubmitResult(status=False, gas_used=1, result=b"\x08\xc3\x79\xa0")
    with pytest.raises(AbiError):
        token.decode_result("balanceOf", outcome)


def test_deploy_data_appends_constructor_args(erc20_artifact):
    iface = ContractInterface.from_artifact(erc20_artifact)
    data = deploy_data(iface, "TestToken", "TT", 18, Address.zero())
    assert data.startswith(iface.bytecode)
    assert data[len(iface.bytecode):] == iface.encode_constructor(["TestToken", "TT", 18, Address.zero()])


def test_deploy_data_needs_bytecode(erc20_artifact):
    iface = ContractInterface.from_artifact(erc20_artifact["abi"])
    with pytest.raises(AbiError):
        deploy_data(iface, "TestToken", "TT", 18, Address.zero())
