import pytest

from aurora_sdk.config import DEFAULT_ATTACHED_GAS, EngineConfig, EngineInitArgs
from aurora_sdk.errors import ConfigError


def _cfg(**overrides):
    base = dict(network_id="local", rpc_url="http://127.0.0.1:3030/", contract_id="evm.node0", signer_id="evm.node0")
    base.update(overrides)
    return EngineConfig(**base)


def test_defaults_and_headers():
    cfg = _cfg()
    assert cfg.attached_gas == DEFAULT_ATTACHED_GAS
    assert cfg.finality == "final"
    assert cfg.http_headers()["Content-Type"] == "application/json"
    assert cfg.to_dict()["signer_key"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"rpc_url": "ws://127.0.0.1:3030"},
        {"contract_id": ""},
        {"signer_key": "secp256k1:abc"},
        {"finality": "instant"},
        {"request_timeout": 0},
        {"attached_gas": 2**64},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ConfigError):
        _cfg(**overrides)


def test_from_env_reads_explicit_mapping():
    env = {
        "AURORA_ENGINE": "aurora.test.near",
        "AURORA_ENDPOINT": "https://rpc.testnet.example",
        "AURORA_GAS": "0x10",
        "AURORA_TIMEOUT": "5",
    }
    cfg = EngineConfig.from_env(env)
    assert cfg.contract_id == "aurora.test.near"
    assert cfg.signer_id == "aurora.test.near"
    assert cfg.network_id == "local"
    assert cfg.attached_gas == 16
    assert cfg.request_timeout == 5.0
    assert cfg.signer_key is None


def test_from_env_requires_engine_account():
    with pytest.raises(ConfigError):
        EngineConfig.from_env({})


def test_with_overrides_keeps_secret_and_ignores_unknown():
    cfg = _cfg(signer_key="ed25519:abc")
    other = cfg.with_overrides(finality="optimistic", bogus=1)
    assert other.finality == "optimistic"
    assert other.signer_key == "ed25519:abc"
    assert "abc" not in repr(other)


def test_init_args_default_to_signer_owner():
    args = EngineInitArgs.for_config(_cfg(signer_id="owner.node0"))
    assert args.owner_id == "owner.node0"
    assert args.chain_id == 1313161556
    assert args.upgrade_delay_blocks == 1
    assert EngineInitArgs.for_config(_cfg(), owner_id="x.node0").owner_id == "x.node0"
