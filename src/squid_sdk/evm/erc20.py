"""ERC-20 contract binding used for balance, allowance and approval calls."""

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from web3 import AsyncWeb3, Web3

if TYPE_CHECKING:
    from squid_sdk.signers import EvmSigner, SubmittedTransaction

logger = logging.getLogger(__name__)

ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)

ERC20_ABI = [
    {
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
]


def encode_approve(spender: str, amount: int) -> str:
    """Encode ``approve(spender, amount)`` calldata."""
    spender_padded = spender.lower().replace("0x", "").zfill(64)
    amount_hex = hex(amount)[2:].zfill(64)
    return f"{ERC20_APPROVE_SELECTOR}{spender_padded}{amount_hex}"


class Erc20Token:
    """ERC-20 token bound to a read-only web3 client.

    Reads go through the client the token was created with; approvals are
    submitted through the signer passed to ``approve``.
    """

    def __init__(self, web3: AsyncWeb3, address: str):
        self.web3 = web3
        self.address = Web3.to_checksum_address(address)
        self.contract = web3.eth.contract(address=self.address, abi=ERC20_ABI)

    async def balance_of(self, owner: str) -> int:
        balance = await self.contract.functions.balanceOf(Web3.to_checksum_address(owner)).call()
        return int(balance)

    async def allowance(self, owner: str, spender: str) -> int:
        allowance = await self.contract.functions.allowance(
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        ).call()
        return int(allowance)

    async def symbol(self) -> str:
        return await self.contract.functions.symbol().call()

    async def approve(
        self,
        signer: "EvmSigner",
        spender: str,
        amount: int,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "SubmittedTransaction":
        """Submit an approval from ``signer``; does not wait for it to be mined."""
        tx = {
            **(overrides or {}),
            "to": self.address,
            "data": encode_approve(Web3.to_checksum_address(spender), amount),
            "value": 0,
        }
        logger.info(f"Submitting approval of {amount} on {self.address} for spender {spender}")
        return await signer.send_transaction(tx)
