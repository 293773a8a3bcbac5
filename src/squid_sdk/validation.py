"""Balance pre-flight checks.

All comparisons are on integer base-unit amounts.
"""

import logging
from typing import TYPE_CHECKING, Union

from web3 import AsyncWeb3, Web3

from squid_sdk.errors import ValidationError
from squid_sdk.models import ChainId

if TYPE_CHECKING:
    from squid_sdk.cosmos.fees import Coin
    from squid_sdk.evm.erc20 import Erc20Token
    from squid_sdk.signers import CosmosSigner

logger = logging.getLogger(__name__)

Amount = Union[int, str]


def _insufficient_funds(address: str, chain_id: ChainId) -> ValidationError:
    return ValidationError(f"Insufficient funds for account: {address} on chain {chain_id}")


def ensure_sufficient(balance: Amount, amount: Amount, address: str, chain_id: ChainId) -> None:
    """Raise ``ValidationError`` when ``amount`` exceeds ``balance``."""
    if int(amount) > int(balance):
        logger.debug(f"Balance {balance} below required {amount} for {address} on {chain_id}")
        raise _insufficient_funds(address, chain_id)


async def validate_native_balance(
    web3: AsyncWeb3, address: str, amount: Amount, chain_id: ChainId
) -> int:
    """Check the native balance of ``address`` covers ``amount``; return the balance."""
    balance = int(await web3.eth.get_balance(Web3.to_checksum_address(address)))
    ensure_sufficient(balance, amount, address, chain_id)
    return balance


async def validate_token_balance(
    token: "Erc20Token", address: str, amount: Amount, chain_id: ChainId
) -> int:
    """Check the token balance of ``address`` covers ``amount``; return the balance."""
    balance = await token.balance_of(address)
    ensure_sufficient(balance, amount, address, chain_id)
    return balance


async def validate_cosmos_balance(
    signer: "CosmosSigner", address: str, coin: "Coin", chain_id: ChainId
) -> int:
    """Check the signer's balance in ``coin.denom`` covers ``coin.amount``."""
    balance = await signer.get_balance(address, coin.denom)
    if int(coin.amount) > int(balance.amount):
        raise ValidationError(
            f"Transfer amount {coin.amount}{coin.denom} is greater than the balance of "
            f"account {address} on chain {chain_id}"
        )
    return int(balance.amount)
