"""
Engine connection configuration: host RPC endpoint, engine/signer accounts,
signer credentials, timeouts and attached host gas.

- Configuration is an explicit value handed to `EngineClient`; nothing is read
  from the process environment implicitly.
- `EngineConfig.from_env(environ)` builds one from a mapping the caller passes
  in (typically ``os.environ``), for scripts that keep settings there.
- `EngineInitArgs` holds the arguments of the engine's `new` initializer.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError
from .version import user_agent

DEFAULT_RPC = "http://127.0.0.1:3030"
DEFAULT_CHAIN_ID = 1313161556
DEFAULT_BRIDGE_PROVER = "prover.test.near"
# 300 TGas: the host chain's per-call ceiling
DEFAULT_ATTACHED_GAS = 300_000_000_000_000

_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")
_FINALITIES = ("optimistic", "near-final", "final")


def _parse_int(val: Any, default: int) -> int:
    """
    Accepts int, decimal str, or 0x-hex str and returns int.
    """
    if val is None or val == "":
        return int(default)
    if isinstance(val, int):
        return val
    s = str(val).strip()
    if _HEX_RE.match(s):
        return int(s, 16)
    return int(s, 10)


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ConfigError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(slots=True)
class EngineConfig:
    # Host node / accounts
    network_id: str
    rpc_url: str
    contract_id: str
    signer_id: str
    # "ed25519:<base58 secret>"; None for read-only clients
    signer_key: Optional[str] = field(default=None, repr=False)
    # HTTP behavior
    request_timeout: float = 30.0
    # Host-side execution
    attached_gas: int = DEFAULT_ATTACHED_GAS
    finality: str = "final"
    user_agent: str = field(default_factory=user_agent)

    def __post_init__(self) -> None:
        for name in ("network_id", "rpc_url", "contract_id", "signer_id"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{name} must be a non-empty string")
        _ensure_scheme(self.rpc_url, ("http", "https"))
        if self.signer_key is not None and not self.signer_key.startswith("ed25519:"):
            raise ConfigError("signer_key must use the 'ed25519:<base58>' form")
        if self.finality not in _FINALITIES:
            raise ConfigError(f"finality must be one of {_FINALITIES}, got {self.finality!r}")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if not 0 < int(self.attached_gas) < (1 << 64):
            raise ConfigError("attached_gas must fit in a u64 and be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str], prefix: str = "AURORA_") -> "EngineConfig":
        """
        Create config from an explicit environment mapping:

        AURORA_NETWORK          (network id, default "local")
        AURORA_ENDPOINT         (http/https host RPC url)
        AURORA_ENGINE           (engine contract account)
        AURORA_SIGNER           (signer account, defaults to the engine account)
        AURORA_SIGNER_KEY       ("ed25519:<base58>" secret key) optional
        AURORA_TIMEOUT          (float seconds, HTTP)
        AURORA_GAS              (int or 0x-hex, host gas attached to calls)
        """
        contract = environ.get(f"{prefix}ENGINE")
        if not contract:
            raise ConfigError(f"{prefix}ENGINE is required")
        return cls(
            network_id=environ.get(f"{prefix}NETWORK", "local"),
            rpc_url=environ.get(f"{prefix}ENDPOINT", DEFAULT_RPC),
            contract_id=contract,
            signer_id=environ.get(f"{prefix}SIGNER", contract),
            signer_key=environ.get(f"{prefix}SIGNER_KEY") or None,
            request_timeout=float(environ.get(f"{prefix}TIMEOUT", "30.0")),
            attached_gas=_parse_int(environ.get(f"{prefix}GAS"), DEFAULT_ATTACHED_GAS),
        )

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """
        Copy of this config with keyword overrides applied.
        Unknown keys are ignored.
        """
        data = self.to_dict(include_secret=True)
        data.update({k: v for k, v in overrides.items() if k in data})
        return EngineConfig(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self, *, include_secret: bool = False) -> Dict[str, Any]:
        return {
            "network_id": self.network_id,
            "rpc_url": self.rpc_url,
            "contract_id": self.contract_id,
            "signer_id": self.signer_id,
            "signer_key": self.signer_key if include_secret else None,
            "request_timeout": float(self.request_timeout),
            "attached_gas": int(self.attached_gas),
            "finality": self.finality,
            "user_agent": self.user_agent,
        }


@dataclass(frozen=True)
class EngineInitArgs:
    """Arguments of the engine's `new` initializer."""

    owner_id: str
    chain_id: int = DEFAULT_CHAIN_ID
    bridge_prover_id: str = DEFAULT_BRIDGE_PROVER
    upgrade_delay_blocks: int = 1

    @classmethod
    def for_config(cls, config: EngineConfig, **overrides: Any) -> "EngineInitArgs":
        """Deployment defaults: the signer account owns the engine."""
        return cls(owner_id=overrides.pop("owner_id", config.signer_id), **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "DEFAULT_RPC",
    "DEFAULT_CHAIN_ID",
    "DEFAULT_BRIDGE_PROVER",
    "DEFAULT_ATTACHED_GAS",
    "EngineConfig",
    "EngineInitArgs",
]
