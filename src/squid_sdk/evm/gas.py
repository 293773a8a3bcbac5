"""Gas parameter resolution for EVM routes.

Precedence is fixed: execution settings decide whether fee fields are used
at all, the route supplies defaults, caller overrides win per field. Keys
follow web3 ``TxParams`` naming (``gas`` is the gas limit).
"""

import logging
from typing import Any, Mapping, Optional

from squid_sdk.config import ResolvedExecutionSettings
from squid_sdk.models import TransactionRequest

logger = logging.getLogger(__name__)

GAS_FIELDS = ("gas", "gasPrice", "maxFeePerGas", "maxPriorityFeePerGas")

# Accepted spellings for caller overrides
_OVERRIDE_ALIASES = {
    "gasLimit": "gas",
    "gas_limit": "gas",
    "gas_price": "gasPrice",
    "max_fee_per_gas": "maxFeePerGas",
    "max_priority_fee_per_gas": "maxPriorityFeePerGas",
}


def to_int(value: Any) -> int:
    """Big-integer normalisation for decimal or 0x-prefixed hex values."""
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def normalize_overrides(overrides: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Map override keys onto web3 names; numeric gas fields become ints."""
    normalized: dict[str, Any] = {}
    for key, value in (overrides or {}).items():
        name = _OVERRIDE_ALIASES.get(key, key)
        if value is None:
            continue
        normalized[name] = to_int(value) if name in GAS_FIELDS else value
    return normalized


def resolve_gas_params(
    tx_request: TransactionRequest,
    settings: ResolvedExecutionSettings,
    overrides: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Merge route gas fields with settings and overrides.

    Returns either ``{gasPrice, gas}``, ``{maxFeePerGas, maxPriorityFeePerGas, gas}``
    or, with ``set_gas_price`` disabled, ``{gas}`` alone. Missing route values
    are omitted rather than sent as ``None``.
    """
    if not settings.set_gas_price:
        route_params = {"gas": tx_request.gas_limit}
    elif tx_request.max_priority_fee_per_gas:
        route_params = {
            "maxFeePerGas": tx_request.max_fee_per_gas,
            "maxPriorityFeePerGas": tx_request.max_priority_fee_per_gas,
            "gas": tx_request.gas_limit,
        }
    else:
        route_params = {"gasPrice": tx_request.gas_price, "gas": tx_request.gas_limit}

    params = {key: to_int(value) for key, value in route_params.items() if value is not None}
    params.update(normalize_overrides(overrides))

    logger.debug(f"Resolved gas params: {params}")
    return params
