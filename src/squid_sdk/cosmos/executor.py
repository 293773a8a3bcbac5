"""Cosmos route execution: build, check balance, simulate, sign.

The signed transaction is returned, not broadcast.
"""

import logging
from typing import TYPE_CHECKING

from squid_sdk.cosmos.fees import (
    Coin,
    GasPrice,
    apply_gas_multiplier,
    calculate_fee,
    resolve_gas_multiplier,
)
from squid_sdk.cosmos.messages import build_cosmos_messages
from squid_sdk.errors import ValidationError
from squid_sdk.models import RouteData
from squid_sdk.validation import validate_cosmos_balance

if TYPE_CHECKING:
    from squid_sdk.signers import CosmosSigner

logger = logging.getLogger(__name__)

MEMO = ""


async def execute_cosmos_route(
    signer: "CosmosSigner",
    signer_address: str,
    route: RouteData,
) -> bytes:
    """Sign a Cosmos route with a fee derived from simulated gas.

    Returns:
        Signed transaction bytes, ready for the caller to broadcast
    """
    tx_request = route.transaction_request
    if tx_request is None:
        raise ValidationError("transactionRequest property is missing in route object")
    if not tx_request.gas_price:
        raise ValidationError("gasPrice is missing in route transactionRequest")
    gas_price = GasPrice.from_string(tx_request.gas_price)

    messages = build_cosmos_messages(route, signer, signer_address)

    params = route.params
    await validate_cosmos_balance(
        signer,
        signer_address,
        Coin(denom=params.from_token.address, amount=params.from_amount),
        params.from_chain,
    )

    estimated_gas = await signer.simulate(signer_address, messages, MEMO)
    multiplier = resolve_gas_multiplier(tx_request)
    gas_limit = apply_gas_multiplier(estimated_gas, multiplier)
    fee = calculate_fee(gas_limit, gas_price)

    logger.debug(
        f"Cosmos gas simulated={estimated_gas} multiplier={multiplier} "
        f"limit={gas_limit} fee={fee.amount[0].amount}{gas_price.denom}"
    )
    return await signer.sign(signer_address, messages, fee, MEMO)
