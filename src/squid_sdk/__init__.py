"""Squid cross-chain route execution SDK."""

from squid_sdk.client import Squid
from squid_sdk.config import ExecutionSettings, Settings, get_settings
from squid_sdk.cosmos.fees import Coin, GasPrice, StdFee
from squid_sdk.cosmos.messages import CosmosMessage, MessageRegistry
from squid_sdk.errors import (
    ErrorType,
    InitError,
    RouteResponseError,
    SquidError,
    TransactionRevertedError,
    ValidationError,
)
from squid_sdk.models import (
    ChainData,
    GetRoute,
    GetStatus,
    RouteData,
    RouteResponse,
    StatusResponse,
    TokenData,
    TransactionRequest,
)
from squid_sdk.signers import (
    ChainFamily,
    CosmosSigner,
    CosmpySigner,
    EvmSigner,
    RouteSigner,
    SubmittedTransaction,
)

__version__ = "0.1.0"

__all__ = [
    "ChainData",
    "ChainFamily",
    "Coin",
    "CosmosMessage",
    "CosmosSigner",
    "CosmpySigner",
    "ErrorType",
    "EvmSigner",
    "ExecutionSettings",
    "GasPrice",
    "GetRoute",
    "GetStatus",
    "InitError",
    "MessageRegistry",
    "RouteData",
    "RouteResponse",
    "RouteResponseError",
    "RouteSigner",
    "Settings",
    "Squid",
    "SquidError",
    "StatusResponse",
    "StdFee",
    "SubmittedTransaction",
    "TokenData",
    "TransactionRequest",
    "TransactionRevertedError",
    "ValidationError",
    "get_settings",
]
