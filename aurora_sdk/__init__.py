"""
Aurora engine SDK for Python
Convenience exports for installing the embedded EVM engine on its host
chain, deploying contracts into it, and submitting/decoding EVM calls.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import EngineConfig, EngineInitArgs  # noqa: F401
from .errors import (  # noqa: F401
    AuroraSdkError,
    InvalidAddressFormat,
    InvalidAccountId,
    TruncatedBuffer,
    EngineNotReady,
    TransportFailure,
    RemoteExecutionError,
    UnexpectedResponse,
    DeploymentFailed,
    AbiError,
    ConfigError,
)

# Values & codecs
from .address import Address  # noqa: F401
from .result import SubmitResult, decode_submit_result  # noqa: F401
from .abi import AbiParam, ContractInterface, FunctionAbi  # noqa: F401

# Engine
from .engine import EngineClient, EngineState  # noqa: F401
from .tx import CallPayload, TransactionBuilder, deploy_data  # noqa: F401
from .deployer import (  # noqa: F401
    DeploymentOrchestrator,
    DeploymentRecord,
    extract_token_address,
)

__all__ = [
    "__version__",
    # Core
    "EngineConfig", "EngineInitArgs",
    "AuroraSdkError", "InvalidAddressFormat", "InvalidAccountId", "TruncatedBuffer",
    "EngineNotReady",
    "TransportFailure", "RemoteExecutionError", "UnexpectedResponse",
    "DeploymentFailed", "AbiError", "ConfigError",
    # Values & codecs
    "Address", "SubmitResult", "decode_submit_result",
    "AbiParam", "ContractInterface", "FunctionAbi",
    # Engine
    "EngineClient", "EngineState",
    "CallPayload", "TransactionBuilder", "deploy_data",
    "DeploymentOrchestrator", "DeploymentRecord", "extract_token_address",
]
