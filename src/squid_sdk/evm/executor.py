"""EVM route execution.

Pipeline: resolve chain params -> resolve gas -> check balance -> approve
(tokens only) -> build -> submit. Each step gates the next.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from squid_sdk.chains import TokenFactory, Web3Factory, resolve_route_params
from squid_sdk.config import ResolvedExecutionSettings
from squid_sdk.constants import SEND_ROUTE_TYPE
from squid_sdk.errors import ValidationError
from squid_sdk.evm.approval import ensure_approved
from squid_sdk.evm.gas import resolve_gas_params, to_int
from squid_sdk.evm.serialization import serialize_unsigned_transaction
from squid_sdk.models import ChainData, RouteData, TransactionRequest
from squid_sdk.signers import EvmSigner, SubmittedTransaction
from squid_sdk.validation import validate_native_balance, validate_token_balance

logger = logging.getLogger(__name__)


def require_transaction_request(route: RouteData) -> TransactionRequest:
    if route.transaction_request is None:
        raise ValidationError("transactionRequest property is missing in route object")
    return route.transaction_request


def build_route_transaction(
    tx_request: TransactionRequest, gas_params: Mapping[str, Any]
) -> dict[str, Any]:
    """Transaction dict for the route call.

    ``value`` is attached for every route type except plain ``SEND``.
    """
    tx: dict[str, Any] = {
        "to": tx_request.target_address,
        "data": tx_request.data,
        **gas_params,
    }
    if tx_request.route_type != SEND_ROUTE_TYPE:
        tx["value"] = to_int(tx_request.value or 0)
    return tx


async def execute_evm_route(
    signer: EvmSigner,
    route: RouteData,
    chains: Sequence[ChainData],
    settings: ResolvedExecutionSettings,
    overrides: Optional[Mapping[str, Any]] = None,
    web3_factory: Optional[Web3Factory] = None,
    token_factory: Optional[TokenFactory] = None,
) -> SubmittedTransaction:
    """Validate, approve if needed, and submit an EVM route."""
    tx_request = require_transaction_request(route)
    if not tx_request.target_address:
        raise ValidationError("targetAddress is missing in route transactionRequest")

    factories = {}
    if web3_factory is not None:
        factories["web3_factory"] = web3_factory
    if token_factory is not None:
        factories["token_factory"] = token_factory
    resolved = resolve_route_params(chains, route.params, **factories)

    if signer.web3 is None:
        signer = signer.connect(resolved.from_provider)

    gas_params = resolve_gas_params(tx_request, settings, overrides)
    amount = int(route.params.from_amount)
    chain_id = resolved.from_chain.chain_id

    if resolved.from_is_native:
        await validate_native_balance(resolved.from_provider, signer.address, amount, chain_id)
    else:
        await validate_token_balance(resolved.from_token_contract, signer.address, amount, chain_id)
        await ensure_approved(
            signer.address,
            tx_request.target_address,
            amount,
            resolved.from_token_contract,
            signer,
            infinite_approval=settings.infinite_approval,
            overrides=gas_params,
        )

    tx = build_route_transaction(tx_request, gas_params)
    logger.info(
        f"Executing {tx_request.route_type or 'route'} on chain {chain_id} "
        f"to {tx_request.target_address} amount={amount}"
    )
    return await signer.send_transaction(tx)


def build_signable_hex(
    nonce: int,
    route: RouteData,
    settings: ResolvedExecutionSettings,
    overrides: Optional[Mapping[str, Any]] = None,
) -> str:
    """Unsigned serialized transaction for offline signing.

    No balance or approval checks: those need a live signer.
    """
    tx_request = require_transaction_request(route)
    try:
        chain_id = int(str(route.params.from_chain))
    except ValueError as exc:
        raise ValidationError(f"fromChain {route.params.from_chain} is not an EVM chain id") from exc

    gas_params = resolve_gas_params(tx_request, settings, overrides)
    # An offline transaction always needs a price; fall back to the route's legacy price
    if "gasPrice" not in gas_params and "maxFeePerGas" not in gas_params and tx_request.gas_price:
        gas_params["gasPrice"] = to_int(tx_request.gas_price)

    tx = {
        "chainId": chain_id,
        "to": tx_request.target_address,
        "data": tx_request.data,
        "value": to_int(tx_request.value or 0),
        "nonce": nonce,
        **gas_params,
    }
    return serialize_unsigned_transaction(tx)
