"""Signers accepted by ``Squid.execute_route``.

Callers declare the chain family of their signer by the class they use:

- ``EvmSigner``: an eth_account key plus an async web3 client
- ``CosmosSigner``: anything that can query balances, simulate and sign
  Cosmos messages; ``CosmpySigner`` is the cosmpy-backed implementation
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted

from squid_sdk.cosmos.fees import Coin, StdFee
from squid_sdk.cosmos.messages import CosmosMessage, MessageRegistry
from squid_sdk.errors import TransactionRevertedError, ValidationError

logger = logging.getLogger(__name__)


class ChainFamily(str, Enum):
    """Signing model of a chain."""
    EVM = "evm"
    COSMOS = "cosmos"


class RouteSigner(ABC):
    """Base class for signers; ``family`` selects the execution path."""

    family: ChainFamily


@dataclass
class SubmittedTransaction:
    """Handle to a broadcast EVM transaction."""

    tx_hash: str
    web3: AsyncWeb3 = field(repr=False)
    params: dict = field(default_factory=dict, repr=False)

    async def wait(
        self,
        confirmations: int = 1,
        timeout: float = 120,
        poll_interval: float = 2,
    ) -> dict:
        """Wait for the transaction to be mined.

        Raises:
            TransactionRevertedError: if the receipt reports failure
            web3.exceptions.TimeExhausted: if not mined and confirmed within ``timeout``
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        receipt = await self.web3.eth.wait_for_transaction_receipt(
            self.tx_hash, timeout=timeout, poll_latency=poll_interval
        )
        if receipt["status"] == 0:
            raise TransactionRevertedError(self.tx_hash)

        while confirmations > 1:
            current_block = await self.web3.eth.block_number
            if current_block - receipt["blockNumber"] + 1 >= confirmations:
                break
            if loop.time() >= deadline:
                raise TimeExhausted(
                    f"Transaction {self.tx_hash} did not reach {confirmations} confirmations "
                    f"within {timeout} seconds"
                )
            await asyncio.sleep(poll_interval)

        return dict(receipt)


class EvmSigner(RouteSigner):
    """Signs and sends EVM transactions with a local key."""

    family = ChainFamily.EVM

    def __init__(self, account: LocalAccount, web3: Optional[AsyncWeb3] = None):
        self.account = account
        self.web3 = web3

    @classmethod
    def from_key(cls, private_key: str, rpc_url: Optional[str] = None) -> "EvmSigner":
        web3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url)) if rpc_url else None
        return cls(Account.from_key(private_key), web3)

    @property
    def address(self) -> str:
        return self.account.address

    def connect(self, web3: AsyncWeb3) -> "EvmSigner":
        """Return a signer for the same key bound to ``web3``."""
        return type(self)(self.account, web3)

    def _require_web3(self) -> AsyncWeb3:
        if self.web3 is None:
            raise ValidationError("EVM signer is not connected to a chain client")
        return self.web3

    async def send_transaction(self, tx: Mapping[str, Any]) -> SubmittedTransaction:
        """Fill missing fields, sign and broadcast ``tx``."""
        web3 = self._require_web3()
        params = dict(tx)
        params["to"] = Web3.to_checksum_address(params["to"])
        params.setdefault("from", self.address)

        if "nonce" not in params:
            params["nonce"] = await web3.eth.get_transaction_count(self.address, "pending")
        if "chainId" not in params:
            params["chainId"] = await web3.eth.chain_id
        if "gas" not in params:
            params["gas"] = await web3.eth.estimate_gas(params)
        if "gasPrice" not in params and "maxFeePerGas" not in params:
            params["gasPrice"] = await web3.eth.gas_price

        signed_tx = self.account.sign_transaction(params)
        # eth-account >= 0.13 renamed rawTransaction
        raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
        tx_hash = Web3.to_hex(await web3.eth.send_raw_transaction(raw_tx))

        logger.info(f"Submitted transaction {tx_hash} to {params['to']} nonce={params['nonce']}")
        return SubmittedTransaction(tx_hash=tx_hash, web3=web3, params=params)


class CosmosSigner(RouteSigner, ABC):
    """Capabilities a Cosmos signing client must offer."""

    family = ChainFamily.COSMOS

    def __init__(self, registry: Optional[MessageRegistry] = None):
        self.registry = registry or MessageRegistry()

    @abstractmethod
    async def get_balance(self, address: str, denom: str) -> Coin:
        """Balance of ``address`` in ``denom``."""

    @abstractmethod
    async def simulate(self, address: str, messages: list[CosmosMessage], memo: str) -> int:
        """Simulated gas usage of ``messages``."""

    @abstractmethod
    async def sign(
        self, address: str, messages: list[CosmosMessage], fee: StdFee, memo: str
    ) -> bytes:
        """Sign ``messages`` without broadcasting; returns the raw signed tx bytes."""


class CosmpySigner(CosmosSigner):
    """Cosmos signer backed by a cosmpy ``LedgerClient`` and ``LocalWallet``.

    cosmpy is synchronous, so network calls run in a worker thread.
    """

    def __init__(self, client, wallet, registry: Optional[MessageRegistry] = None):
        super().__init__(registry)
        self.client = client
        self.wallet = wallet

    @property
    def address(self) -> str:
        return str(self.wallet.address())

    async def get_balance(self, address: str, denom: str) -> Coin:
        from cosmpy.crypto.address import Address

        amount = await asyncio.to_thread(self.client.query_bank_balance, Address(address), denom)
        return Coin(denom=denom, amount=str(amount))

    def _build_signed_tx(
        self, address: str, messages: list[CosmosMessage], fee: StdFee, memo: str
    ):
        from cosmpy.aerial.coins import Coin as CosmpyCoin
        from cosmpy.aerial.tx import SigningCfg, Transaction, TxFee
        from cosmpy.crypto.address import Address

        tx = Transaction()
        for message in messages:
            tx.add_message(self.registry.encode(message))

        account = self.client.query_account(Address(address))
        tx.seal(
            signing_cfgs=[SigningCfg.direct(self.wallet.public_key(), sequence_num=account.sequence)],
            fee=TxFee(
                amount=[CosmpyCoin(amount=int(coin.amount), denom=coin.denom) for coin in fee.amount],
                gas_limit=fee.gas_limit,
            ),
            memo=memo,
        )
        tx.sign(
            signer=self.wallet.signer(),
            chain_id=self.client.network_config.chain_id,
            account_number=account.number,
        )
        tx.complete()
        return tx

    async def simulate(self, address: str, messages: list[CosmosMessage], memo: str) -> int:
        def _simulate() -> int:
            tx = self._build_signed_tx(address, messages, StdFee(amount=[], gas="0"), memo)
            return int(self.client.simulate_tx(tx))

        return await asyncio.to_thread(_simulate)

    async def sign(
        self, address: str, messages: list[CosmosMessage], fee: StdFee, memo: str
    ) -> bytes:
        def _sign() -> bytes:
            tx = self._build_signed_tx(address, messages, fee, memo)
            return tx.tx.SerializeToString()

        return await asyncio.to_thread(_sign)
