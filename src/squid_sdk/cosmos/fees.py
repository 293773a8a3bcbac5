"""Cosmos fee primitives: gas prices, fees and gas multipliers."""

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Optional, Union

from squid_sdk.constants import DEFAULT_COSMOS_GAS_MULTIPLIER
from squid_sdk.errors import ValidationError
from squid_sdk.models import TransactionRequest

logger = logging.getLogger(__name__)

# Amount followed by a denom, e.g. "0.025uatom" or "0.1ibc/27394FB0..."
_GAS_PRICE_RE = re.compile(r"^([0-9.]+)([a-zA-Z][a-zA-Z0-9/:._-]{2,127})$")


@dataclass(frozen=True)
class Coin:
    """Amount of a denomination, in base units."""
    denom: str
    amount: str

    def to_dict(self) -> dict:
        return {"denom": self.denom, "amount": self.amount}


@dataclass(frozen=True)
class GasPrice:
    """Price of one unit of gas."""
    amount: Decimal
    denom: str

    @classmethod
    def from_string(cls, value: str) -> "GasPrice":
        match = _GAS_PRICE_RE.match(value or "")
        if match is None:
            raise ValidationError(f"Invalid gas price string: {value!r}")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as exc:
            raise ValidationError(f"Invalid gas price amount: {value!r}") from exc
        return cls(amount=amount, denom=match.group(2))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


@dataclass(frozen=True)
class StdFee:
    """Fee attached to a Cosmos transaction."""
    amount: list[Coin] = field(default_factory=list)
    gas: str = "0"

    @property
    def gas_limit(self) -> int:
        return int(self.gas)


def calculate_fee(gas_limit: int, gas_price: Union[GasPrice, str]) -> StdFee:
    """Fee for ``gas_limit`` units at ``gas_price``, rounded up to a whole base unit."""
    if isinstance(gas_price, str):
        gas_price = GasPrice.from_string(gas_price)
    fee_amount = (gas_price.amount * gas_limit).to_integral_value(rounding=ROUND_CEILING)
    return StdFee(
        amount=[Coin(denom=gas_price.denom, amount=str(int(fee_amount)))],
        gas=str(gas_limit),
    )


def _parse_multiplier(value: Optional[str]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        multiplier = Decimal(str(value))
    except InvalidOperation:
        return None
    if not multiplier.is_finite() or multiplier <= 0:
        return None
    return multiplier


def resolve_gas_multiplier(tx_request: TransactionRequest) -> Decimal:
    """Pick the multiplier applied to simulated gas.

    ``gas_multiplier`` wins; routes that still carry the multiplier in
    ``max_fee_per_gas`` are honoured; otherwise 1.3.
    """
    multiplier = _parse_multiplier(tx_request.gas_multiplier)
    if multiplier is not None:
        return multiplier

    multiplier = _parse_multiplier(tx_request.max_fee_per_gas)
    if multiplier is not None:
        logger.debug(f"Using max_fee_per_gas={multiplier} as Cosmos gas multiplier")
        return multiplier

    return DEFAULT_COSMOS_GAS_MULTIPLIER


def apply_gas_multiplier(simulated_gas: int, multiplier: Decimal) -> int:
    """``ceil(simulated_gas * multiplier)``."""
    return int(math.ceil(Decimal(simulated_gas) * multiplier))
