"""Pytest configuration and fixtures."""

import json
import os
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account

# Keep developer SQUID_* settings out of the tests
for _key in [key for key in os.environ if key.startswith("SQUID_")]:
    del os.environ[_key]

from squid_sdk.constants import IBC_TRANSFER_TYPE, NATIVE_TOKEN_ADDRESS
from squid_sdk.cosmos.fees import Coin
from squid_sdk.models import ChainData, RouteData, TokenData
from squid_sdk.signers import CosmosSigner, EvmSigner

TEST_PRIVATE_KEY = "0x" + "11" * 32
SQUID_ROUTER = "0xce16F69375520ab01377ce7B88f5BA8C48F8D666"
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
RECIPIENT = "0x00000000000000000000000000000000000000aa"
OSMO_ADDRESS = "osmo1qnk2n4nlkpw9xfqntladh74w6ujtulwnmxnh3k"

CHAINS = [
    {
        "chainId": 1,
        "chainName": "Ethereum",
        "chainType": "evm",
        "rpc": "https://eth.rpc.test",
        "nativeCurrency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    },
    {
        "chainId": 43114,
        "chainName": "Avalanche",
        "chainType": "evm",
        "rpc": "https://avax.rpc.test",
        "nativeCurrency": {"name": "Avalanche", "symbol": "AVAX", "decimals": 18},
    },
    {
        "chainId": "osmosis-1",
        "chainName": "osmosis",
        "chainType": "cosmos",
        "rpc": "https://osmosis.rpc.test",
        "rest": "https://osmosis.rest.test",
        "nativeCurrency": {"name": "Osmosis", "symbol": "OSMO", "decimals": 6},
    },
    {
        "chainId": "axelar-dojo-1",
        "chainName": "axelar",
        "chainType": "cosmos",
        "rpc": "https://axelar.rpc.test",
        "nativeCurrency": {"name": "Axelar", "symbol": "AXL", "decimals": 6},
    },
]

ETH = {"chainId": 1, "address": NATIVE_TOKEN_ADDRESS, "symbol": "ETH", "decimals": 18}
USDC = {"chainId": 1, "address": USDC_ADDRESS, "symbol": "USDC", "decimals": 6}
AVAX = {"chainId": 43114, "address": NATIVE_TOKEN_ADDRESS, "symbol": "AVAX", "decimals": 18}
OSMO = {"chainId": "osmosis-1", "address": "uosmo", "symbol": "OSMO", "decimals": 6}
AXL = {"chainId": "axelar-dojo-1", "address": "uaxl", "symbol": "AXL", "decimals": 6}

TOKENS = [ETH, USDC, AVAX, OSMO, AXL]


def evm_route_data(
    from_token: Optional[dict] = None,
    from_amount: str = "1000",
    transaction_request: Optional[dict] = None,
    **tx_fields: Any,
) -> dict:
    """Raw route JSON from Ethereum to Avalanche."""
    tx_request = {
        "routeType": "CALL_BRIDGE_CALL",
        "targetAddress": SQUID_ROUTER,
        "data": "0xabcdef",
        "value": from_amount,
        "gasLimit": "250000",
        "gasPrice": "30000000000",
        "maxFeePerGas": "40000000000",
        "maxPriorityFeePerGas": "1500000000",
    }
    tx_request.update(tx_fields)
    return {
        "params": {
            "fromChain": 1,
            "toChain": 43114,
            "fromToken": from_token or ETH,
            "toToken": AVAX,
            "fromAmount": from_amount,
            "toAddress": RECIPIENT,
            "slippage": 1,
        },
        "estimate": {"toAmount": "990"},
        "transactionRequest": transaction_request if transaction_request is not None else tx_request,
    }


def cosmos_route_data(
    msg_type_url: str = IBC_TRANSFER_TYPE,
    msg: Optional[Any] = None,
    from_token: Optional[dict] = None,
    from_amount: str = "1000000",
    **tx_fields: Any,
) -> dict:
    """Raw route JSON from Osmosis to Axelar."""
    if msg is None:
        msg = {
            "sourcePort": "transfer",
            "sourceChannel": "channel-208",
            "token": {"denom": "uosmo", "amount": from_amount},
            "sender": OSMO_ADDRESS,
            "receiver": "axelar1dv4u5k73pzqrxlzujxg3qp8kvc3pje7jtdvu72",
            "timeoutTimestamp": "1700000000000000000",
        }
    tx_request = {
        "routeType": "CALL_BRIDGE",
        "targetAddress": "",
        "data": json.dumps({"msgTypeUrl": msg_type_url, "msg": msg}),
        "value": "0",
        "gasPrice": "0.025uosmo",
    }
    tx_request.update(tx_fields)
    return {
        "params": {
            "fromChain": "osmosis-1",
            "toChain": "axelar-dojo-1",
            "fromToken": from_token or OSMO,
            "toToken": AXL,
            "fromAmount": from_amount,
            "toAddress": "axelar1dv4u5k73pzqrxlzujxg3qp8kvc3pje7jtdvu72",
            "slippage": 1,
        },
        "transactionRequest": tx_request,
    }


class FakeTransaction:
    """Submitted transaction stand-in that records ``wait`` calls."""

    def __init__(self, tx_hash: str, events: list):
        self.tx_hash = tx_hash
        self._events = events

    async def wait(self, *args, **kwargs) -> dict:
        self._events.append(("wait", self.tx_hash))
        return {"status": 1, "transactionHash": self.tx_hash}


class FakeToken:
    """ERC-20 stand-in with fixed balance and allowance."""

    def __init__(self, address: str, events: list, balance: int = 0, allowance: int = 0, symbol: str = "USDC"):
        self.address = address
        self.events = events
        self.balance = balance
        self.allowance_value = allowance
        self.symbol_value = symbol

    async def balance_of(self, owner: str) -> int:
        return self.balance

    async def allowance(self, owner: str, spender: str) -> int:
        return self.allowance_value

    async def symbol(self) -> str:
        return self.symbol_value

    async def approve(self, signer, spender: str, amount: int, overrides=None) -> FakeTransaction:
        self.events.append(("approve", spender, amount, dict(overrides or {})))
        return FakeTransaction("0xapprove", self.events)


class RecordingEvmSigner(EvmSigner):
    """EVM signer that records transactions instead of broadcasting them."""

    def __init__(self, account, web3=None, events: Optional[list] = None):
        super().__init__(account, web3)
        self.events = events if events is not None else []

    def connect(self, web3) -> "RecordingEvmSigner":
        return RecordingEvmSigner(self.account, web3, self.events)

    async def send_transaction(self, tx) -> FakeTransaction:
        self.events.append(("send", dict(tx)))
        return FakeTransaction("0xroute", self.events)


class FakeCosmosSigner(CosmosSigner):
    """Cosmos signer with a fixed balance and simulated gas."""

    def __init__(self, balance: str = "10000000", simulated_gas: int = 100000):
        super().__init__()
        self.balance = balance
        self.simulated_gas = simulated_gas
        self.simulated: list = []
        self.signed: list = []

    async def get_balance(self, address: str, denom: str) -> Coin:
        return Coin(denom=denom, amount=self.balance)

    async def simulate(self, address, messages, memo) -> int:
        self.simulated.append((address, messages, memo))
        return self.simulated_gas

    async def sign(self, address, messages, fee, memo) -> bytes:
        self.signed.append((address, messages, fee, memo))
        return b"signed-tx"


@pytest.fixture
def events() -> list:
    """Ordered record of approvals, waits and submissions."""
    return []


@pytest.fixture
def chains() -> list[ChainData]:
    return [ChainData.model_validate(chain) for chain in CHAINS]


@pytest.fixture
def tokens() -> list[TokenData]:
    return [TokenData.model_validate(token) for token in TOKENS]


@pytest.fixture
def fake_web3():
    """Async web3 stand-in with a 1 ETH native balance."""
    web3 = MagicMock()
    web3.eth.get_balance = AsyncMock(return_value=10**18)
    return web3


@pytest.fixture
def fake_token(events) -> FakeToken:
    return FakeToken(USDC_ADDRESS, events, balance=10**9, allowance=0)


@pytest.fixture
def web3_factory(fake_web3):
    return lambda rpc_url: fake_web3


@pytest.fixture
def token_factory(fake_token):
    return lambda web3, address: fake_token


@pytest.fixture
def evm_signer(fake_web3, events) -> RecordingEvmSigner:
    return RecordingEvmSigner(Account.from_key(TEST_PRIVATE_KEY), fake_web3, events)


@pytest.fixture
def cosmos_signer() -> FakeCosmosSigner:
    return FakeCosmosSigner()


@pytest.fixture
def native_route() -> RouteData:
    return RouteData.model_validate(evm_route_data())


@pytest.fixture
def token_route() -> RouteData:
    return RouteData.model_validate(evm_route_data(from_token=USDC, from_amount="500", value="0"))


@pytest.fixture
def ibc_route() -> RouteData:
    return RouteData.model_validate(cosmos_route_data())
