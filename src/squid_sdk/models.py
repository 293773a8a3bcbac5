"""Typed shapes for routing service requests and responses.

Field names are snake_case; the wire format (camelCase) is handled through
aliases, so models validate raw API JSON directly and dump back with
``by_alias=True``.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChainId = Union[int, str]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class NativeCurrency(_WireModel):
    name: Optional[str] = None
    symbol: str
    decimals: int = 18
    icon: Optional[str] = None


class ChainData(_WireModel):
    """Static metadata for a chain, as returned by ``/v1/sdk-info``."""

    chain_id: ChainId = Field(..., description="EVM chain id or Cosmos chain name")
    chain_name: Optional[str] = None
    chain_type: str = Field(default="evm", description="evm or cosmos")
    rpc: str = Field(..., description="RPC endpoint")
    rest: Optional[str] = Field(default=None, description="Cosmos REST endpoint")
    native_currency: NativeCurrency


class TokenData(_WireModel):
    """Static metadata for a token; decimals/symbol are for display only."""

    chain_id: ChainId
    address: str
    symbol: str
    decimals: int
    name: Optional[str] = None
    logo_uri: Optional[str] = Field(default=None, alias="logoURI")
    coingecko_id: Optional[str] = None


class RouteParams(_WireModel):
    """Parameters the route was computed for."""

    model_config = ConfigDict(extra="allow")

    from_chain: ChainId
    to_chain: ChainId
    from_token: TokenData
    to_token: TokenData
    from_amount: str = Field(..., description="Integer amount in base units")
    to_address: Optional[str] = None
    slippage: Optional[float] = None


class TransactionRequest(_WireModel):
    """Chain-specific payload to execute.

    For Cosmos routes ``data`` is a JSON envelope (see ``CosmosMsg``) and
    ``gas_price`` is a Cosmos gas price string such as ``"0.025uatom"``.
    """

    route_type: Optional[str] = None
    target_address: Optional[str] = None
    data: str = "0x"
    value: Optional[str] = "0"
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None
    gas_multiplier: Optional[str] = Field(
        default=None, description="Multiplier applied to simulated Cosmos gas"
    )


class RouteData(_WireModel):
    """A previously fetched route; treated as immutable."""

    model_config = ConfigDict(frozen=True)

    params: RouteParams
    estimate: dict[str, Any] = Field(default_factory=dict)
    transaction_request: Optional[TransactionRequest] = None


class RouteResponse(_WireModel):
    route: RouteData
    request_id: Optional[str] = None
    integrator_id: Optional[str] = None


class StatusResponse(_WireModel):
    id: Optional[str] = None
    status: Optional[str] = None
    gas_status: Optional[str] = None
    is_gmp_transaction: Optional[bool] = Field(default=None, alias="isGMPTransaction")
    axelar_transaction_url: Optional[str] = None
    from_chain: Optional[dict[str, Any]] = None
    to_chain: Optional[dict[str, Any]] = None
    time_spent: Optional[dict[str, Any]] = None
    squid_transaction_status: Optional[str] = None
    error: Optional[Any] = None
    request_id: Optional[str] = None
    integrator_id: Optional[str] = None


class SdkInfo(_WireModel):
    chains: list[ChainData] = Field(default_factory=list)
    tokens: list[TokenData] = Field(default_factory=list)
    axelarscan_url: Optional[str] = Field(default=None, alias="axelarscanURL")
    is_in_maintenance_mode: bool = False
    maintenance_message: Optional[str] = None


class GetRoute(_WireModel):
    """Query parameters for ``/v1/route``."""

    model_config = ConfigDict(extra="allow")

    from_chain: ChainId
    to_chain: ChainId
    from_token: str
    to_token: str
    from_amount: str
    to_address: str
    slippage: float
    enable_forecall: Optional[bool] = None
    quote_only: Optional[bool] = None


class GetStatus(_WireModel):
    """Query parameters for ``/v1/status``."""

    transaction_id: str
    from_chain_id: Optional[ChainId] = None
    to_chain_id: Optional[ChainId] = None
    request_id: Optional[str] = None
    integrator_id: Optional[str] = None


class WasmHook(_WireModel):
    contract: str
    msg: Any


class WasmHookMsg(_WireModel):
    wasm: WasmHook


class CosmosMsg(_WireModel):
    """Envelope carried in a Cosmos route's ``transaction_request.data``."""

    msg_type_url: str
    msg: Any


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    return headers.get(name)


def parse_sdk_info_response(data: Mapping[str, Any]) -> SdkInfo:
    return SdkInfo.model_validate(data)


def parse_route_response(
    data: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None
) -> RouteResponse:
    """Build a ``RouteResponse`` from the JSON body and response headers."""
    return RouteResponse(
        route=RouteData.model_validate(data["route"]),
        request_id=_header(headers, "x-request-id"),
        integrator_id=_header(headers, "x-integrator-id"),
    )


def parse_status_response(
    data: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None
) -> StatusResponse:
    status = StatusResponse.model_validate(data)
    return status.model_copy(
        update={
            "request_id": _header(headers, "x-request-id"),
            "integrator_id": _header(headers, "x-integrator-id"),
        }
    )
