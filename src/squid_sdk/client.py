"""Squid SDK client.

Entry point for fetching routes and executing them:

    async with Squid(Settings(base_url=...)) as squid:
        await squid.init()
        route = (await squid.get_route(params)).route
        tx = await squid.execute_route(signer=EvmSigner.from_key(key), route=route)
        await tx.wait()
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Union

import httpx

from squid_sdk.api import SquidApi
from squid_sdk.chains import (
    TokenFactory,
    Web3Factory,
    default_web3_factory,
    get_chain_data,
    get_token_data,
    resolve_route_params,
)
from squid_sdk.config import (
    ExecutionSettingsLike,
    Settings,
    get_settings,
    resolve_execution_settings,
)
from squid_sdk.constants import UINT256_MAX
from squid_sdk.cosmos.executor import execute_cosmos_route
from squid_sdk.errors import InitError, RouteResponseError, SquidError, ValidationError
from squid_sdk.evm.approval import approval_amount, check_approved
from squid_sdk.evm.erc20 import Erc20Token
from squid_sdk.evm.executor import build_signable_hex, execute_evm_route, require_transaction_request
from squid_sdk.evm.gas import normalize_overrides
from squid_sdk.models import (
    ChainData,
    ChainId,
    GetRoute,
    GetStatus,
    RouteData,
    RouteResponse,
    StatusResponse,
    TokenData,
    parse_route_response,
    parse_sdk_info_response,
    parse_status_response,
)
from squid_sdk.signers import ChainFamily, CosmosSigner, EvmSigner, RouteSigner, SubmittedTransaction
from squid_sdk.validation import validate_native_balance, validate_token_balance

logger = logging.getLogger(__name__)


class Squid:
    """Routing service client and route executor."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        web3_factory: Optional[Web3Factory] = None,
        token_factory: Optional[TokenFactory] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_settings()
        self.web3_factory = web3_factory or default_web3_factory
        self.token_factory = token_factory or Erc20Token
        self._transport = transport
        self.api = SquidApi(self.config, transport=transport)

        self.initialized = False
        self.tokens: list[TokenData] = []
        self.chains: list[ChainData] = []
        self.axelarscan_url: Optional[str] = None
        self.is_in_maintenance_mode = False
        self.maintenance_message: Optional[str] = None

    async def __aenter__(self) -> "Squid":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.api.close()

    @contextmanager
    def _error_hints(self) -> Iterator[None]:
        """Apply the configured logging hints to SDK errors raised inside."""
        try:
            yield
        except SquidError as exc:
            if self.config.logging and not exc.logging:
                exc.logging = True
                exc.log_level = self.config.log_level
                exc.log()
            raise

    def _validate_init(self) -> None:
        if not self.initialized:
            raise InitError("SquidSdk must be initialized! Please call the Squid.init method")

    # ======================
    # Routing service
    # ======================

    async def init(self) -> None:
        """Load chain and token tables from the routing service."""
        with self._error_hints():
            response = await self.api.sdk_info()
            if response.status_code != 200:
                raise InitError("SDK initialization failed")

            info = parse_sdk_info_response(response.json())
            self.tokens = info.tokens
            self.chains = info.chains
            self.axelarscan_url = info.axelarscan_url
            self.is_in_maintenance_mode = info.is_in_maintenance_mode
            self.maintenance_message = info.maintenance_message
            self.initialized = True
            logger.info(f"Squid SDK initialized: {len(self.chains)} chains, {len(self.tokens)} tokens")

    async def set_config(self, config: Settings) -> None:
        """Replace the configuration and rebuild the HTTP client."""
        await self.api.close()
        self.config = config
        self.api = SquidApi(config, transport=self._transport)

    async def get_route(self, params: Union[GetRoute, Mapping[str, Any]]) -> RouteResponse:
        with self._error_hints():
            self._validate_init()
            if isinstance(params, GetRoute):
                query = params.model_dump(by_alias=True, exclude_none=True)
            else:
                query = dict(params)

            response = await self.api.route(query)
            if response.status_code != 200:
                raise RouteResponseError(_error_message(response))

            return parse_route_response(response.json(), response.headers)

    async def get_status(self, params: Union[GetStatus, Mapping[str, Any]]) -> StatusResponse:
        with self._error_hints():
            if not isinstance(params, GetStatus):
                params = GetStatus.model_validate(dict(params))

            headers = {}
            if params.request_id:
                headers["x-request-id"] = params.request_id
            if params.integrator_id:
                headers["x-integrator-id"] = params.integrator_id

            response = await self.api.status(
                params.model_dump(by_alias=True, exclude_none=True), headers=headers
            )
            if response.is_error:
                raise RouteResponseError(_error_message(response))

            return parse_status_response(response.json(), response.headers)

    async def get_token_price(self, token_address: str, chain_id: ChainId) -> Any:
        response = await self.api.token_price(token_address, chain_id)
        response.raise_for_status()
        return response.json().get("price")

    # ======================
    # Execution
    # ======================

    async def execute_route(
        self,
        signer: RouteSigner,
        route: RouteData,
        signer_address: Optional[str] = None,
        execution_settings: ExecutionSettingsLike = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Union[SubmittedTransaction, bytes]:
        """Execute ``route`` with ``signer``.

        EVM signers get a ``SubmittedTransaction``; Cosmos signers get the
        signed transaction bytes to broadcast.

        Raises:
            InitError: if ``init`` has not completed
            ValidationError: for missing route data, unsupported signers and
                failed balance checks
        """
        with self._error_hints():
            self._validate_init()
            if route.transaction_request is None:
                raise ValidationError("transactionRequest property is missing in route object")

            family = getattr(signer, "family", None)

            if family is ChainFamily.COSMOS and isinstance(signer, CosmosSigner):
                address = signer_address or getattr(signer, "address", None)
                if not address:
                    raise ValidationError("signerAddress is required for Cosmos routes")
                return await execute_cosmos_route(signer, address, route)

            if family is ChainFamily.EVM and isinstance(signer, EvmSigner):
                settings = resolve_execution_settings(self.config.execution, execution_settings)
                return await execute_evm_route(
                    signer,
                    route,
                    self.chains,
                    settings,
                    overrides,
                    web3_factory=self.web3_factory,
                    token_factory=self.token_factory,
                )

            raise ValidationError(f"Unsupported signer type: {type(signer).__name__}")

    def get_raw_tx_hex(
        self,
        nonce: int,
        route: RouteData,
        execution_settings: ExecutionSettingsLike = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Unsigned serialized EVM transaction for ``route``, for external signing."""
        with self._error_hints():
            settings = resolve_execution_settings(self.config.execution, execution_settings)
            return build_signable_hex(nonce, route, settings, overrides)

    # ======================
    # Approvals
    # ======================

    async def is_route_approved(self, route: RouteData, sender: str) -> dict[str, Any]:
        """Check balance and allowance for ``sender`` without sending anything.

        Raises:
            ValidationError: on insufficient balance or allowance
        """
        with self._error_hints():
            self._validate_init()
            resolved = resolve_route_params(
                self.chains, route.params, self.web3_factory, self.token_factory
            )
            tx_request = require_transaction_request(route)
            from_amount = route.params.from_amount
            chain_id = resolved.from_chain.chain_id

            if not resolved.from_is_native:
                token = resolved.from_token_contract
                await validate_token_balance(token, sender, from_amount, chain_id)
                await check_approved(sender, tx_request.target_address, int(from_amount), token, chain_id)
                return {
                    "is_approved": True,
                    "message": f"User has approved Squid to use {from_amount} of {await token.symbol()}",
                }

            await validate_native_balance(resolved.from_provider, sender, from_amount, chain_id)
            return {
                "is_approved": True,
                "message": (
                    f"User has the expected balance {from_amount} of "
                    f"{resolved.from_chain.native_currency.symbol}"
                ),
            }

    async def approve_route(
        self,
        route: RouteData,
        signer: EvmSigner,
        execution_settings: ExecutionSettingsLike = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Approve the route's spender for the source token and wait for it to be mined."""
        with self._error_hints():
            self._validate_init()
            resolved = resolve_route_params(
                self.chains, route.params, self.web3_factory, self.token_factory
            )
            tx_request = require_transaction_request(route)

            if resolved.from_is_native:
                return True

            settings = resolve_execution_settings(self.config.execution, execution_settings)
            amount = approval_amount(int(route.params.from_amount), settings.infinite_approval)

            if signer.web3 is None:
                signer = signer.connect(resolved.from_provider)
            approve_tx = await resolved.from_token_contract.approve(
                signer, tx_request.target_address, amount, normalize_overrides(overrides)
            )
            await approve_tx.wait()
            return True

    def _token_and_chain(self, token_address: str, chain_id: ChainId) -> tuple[TokenData, ChainData]:
        token = get_token_data(self.tokens, token_address, chain_id)
        if token is None:
            raise ValidationError(f"Token not found for {token_address}")

        chain = get_chain_data(self.chains, token.chain_id)
        if chain is None:
            raise ValidationError(f"Chain not found for {token.chain_id}")
        return token, chain

    async def allowance(
        self, owner: str, spender: str, token_address: str, chain_id: ChainId
    ) -> int:
        """Current allowance of ``spender`` over ``owner``'s tokens."""
        with self._error_hints():
            self._validate_init()
            token, chain = self._token_and_chain(token_address, chain_id)
            contract = self.token_factory(self.web3_factory(chain.rpc), token.address)
            return await contract.allowance(owner, spender)

    async def approve(
        self,
        signer: EvmSigner,
        spender: str,
        token_address: str,
        chain_id: ChainId,
        amount: Optional[int] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> SubmittedTransaction:
        """Submit an approval (max uint256 by default); does not wait for it."""
        with self._error_hints():
            self._validate_init()
            token, chain = self._token_and_chain(token_address, chain_id)
            if signer.web3 is None:
                signer = signer.connect(self.web3_factory(chain.rpc))
            contract = self.token_factory(signer.web3, token.address)
            return await contract.approve(
                signer,
                spender,
                UINT256_MAX if amount is None else int(amount),
                normalize_overrides(overrides),
            )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        error = body["error"]
        return error if isinstance(error, str) else str(error)
    return f"HTTP {response.status_code}"
