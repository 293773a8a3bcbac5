"""Tests for the Squid client: routing service calls and execution dispatch."""

import logging

import httpx
import pytest
import pytest_asyncio

from conftest import (
    CHAINS,
    OSMO_ADDRESS,
    SQUID_ROUTER,
    TOKENS,
    USDC_ADDRESS,
    FakeCosmosSigner,
    evm_route_data,
)
from squid_sdk import ExecutionSettings, Settings, Squid
from squid_sdk.constants import NATIVE_TOKEN_ADDRESS, UINT256_MAX
from squid_sdk.errors import InitError, RouteResponseError, ValidationError
from squid_sdk.models import GetRoute, RouteData
from squid_sdk.signers import RouteSigner

SDK_INFO = {
    "chains": CHAINS,
    "tokens": TOKENS,
    "axelarscanURL": "https://testnet.axelarscan.io",
    "isInMaintenanceMode": False,
}


class SquidApiStub:
    """Routing service stand-in for httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.sdk_info_status = 200
        self.route_status = 200
        self.route_body = {"route": evm_route_data()}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/sdk-info":
            return httpx.Response(self.sdk_info_status, json=SDK_INFO)
        if path == "/v1/route":
            return httpx.Response(
                self.route_status,
                json=self.route_body,
                headers={"x-request-id": "req-1", "x-integrator-id": "test-integrator"},
            )
        if path == "/v1/status":
            return httpx.Response(
                200,
                json={"id": request.url.params["transactionId"], "status": "destination_executed"},
                headers={"x-request-id": request.headers.get("x-request-id", "")},
            )
        if path == "/v1/token-price":
            return httpx.Response(200, json={"price": 1.001})
        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def api_stub() -> SquidApiStub:
    return SquidApiStub()


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url="https://api.squid.test", integrator_id="test-integrator")


@pytest.fixture
def squid(settings, api_stub, web3_factory, token_factory) -> Squid:
    return Squid(
        settings,
        web3_factory=web3_factory,
        token_factory=token_factory,
        transport=httpx.MockTransport(api_stub),
    )


@pytest_asyncio.fixture
async def ready_squid(squid):
    await squid.init()
    yield squid
    await squid.close()


class TestInit:
    """Tests for loading chain and token tables."""

    @pytest.mark.asyncio
    async def test_init_loads_tables(self, squid, api_stub):
        """init stores chains, tokens and service metadata."""
        await squid.init()

        assert squid.initialized is True
        assert len(squid.chains) == 4
        assert len(squid.tokens) == 5
        assert squid.axelarscan_url == "https://testnet.axelarscan.io"
        assert api_stub.requests[0].headers["x-integrator-id"] == "test-integrator"

    @pytest.mark.asyncio
    async def test_init_failure(self, squid, api_stub):
        """A non-200 response raises InitError."""
        api_stub.sdk_info_status = 500

        with pytest.raises(InitError):
            await squid.init()

        assert squid.initialized is False

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self, settings, api_stub):
        """The async context manager closes the HTTP client."""
        async with Squid(settings, transport=httpx.MockTransport(api_stub)) as squid:
            await squid.init()

        assert squid.api._http_client is None


class TestRoutingService:
    """Tests for route, status and price calls."""

    @pytest.mark.asyncio
    async def test_get_route_requires_init(self, squid):
        """Routes cannot be requested before init."""
        with pytest.raises(InitError):
            await squid.get_route({"fromChain": 1})

    @pytest.mark.asyncio
    async def test_get_route(self, ready_squid, api_stub):
        """Route responses carry request and integrator ids from headers."""
        params = GetRoute(
            from_chain=1,
            to_chain=43114,
            from_token=NATIVE_TOKEN_ADDRESS,
            to_token=NATIVE_TOKEN_ADDRESS,
            from_amount="1000",
            to_address=SQUID_ROUTER,
            slippage=1,
            quote_only=False,
        )

        response = await ready_squid.get_route(params)

        assert response.request_id == "req-1"
        assert response.integrator_id == "test-integrator"
        assert response.route.transaction_request.target_address == SQUID_ROUTER
        query = api_stub.requests[-1].url.params
        assert query["fromChain"] == "1"
        assert query["quoteOnly"] == "false"

    @pytest.mark.asyncio
    async def test_get_route_error(self, ready_squid, api_stub):
        """Service errors surface as RouteResponseError with the service message."""
        api_stub.route_status = 400
        api_stub.route_body = {"error": "Low liquidity"}

        with pytest.raises(RouteResponseError, match="Low liquidity"):
            await ready_squid.get_route({"fromChain": 1})

    @pytest.mark.asyncio
    async def test_get_status_sends_request_id_header(self, squid, api_stub):
        """Request id is forwarded as a header and echoed in the result."""
        status = await squid.get_status({"transactionId": "0xfeed", "requestId": "req-9"})

        assert status.id == "0xfeed"
        assert status.request_id == "req-9"
        assert api_stub.requests[-1].headers["x-request-id"] == "req-9"

    @pytest.mark.asyncio
    async def test_get_token_price(self, squid):
        """Token price returns the price field."""
        assert await squid.get_token_price(USDC_ADDRESS, 1) == 1.001


class TestExecuteRoute:
    """Tests for execute_route dispatch."""

    @pytest.mark.asyncio
    async def test_requires_init(self, squid, native_route, evm_signer):
        """Execution before init raises InitError."""
        with pytest.raises(InitError):
            await squid.execute_route(signer=evm_signer, route=native_route)

    @pytest.mark.asyncio
    async def test_missing_transaction_request(self, ready_squid, evm_signer):
        """A route without a transaction request is rejected."""
        data = evm_route_data()
        data["transactionRequest"] = None

        with pytest.raises(ValidationError, match="transactionRequest"):
            await ready_squid.execute_route(signer=evm_signer, route=RouteData.model_validate(data))

    @pytest.mark.asyncio
    async def test_evm_dispatch(self, ready_squid, native_route, evm_signer, events):
        """EVM signers submit the route transaction."""
        result = await ready_squid.execute_route(signer=evm_signer, route=native_route)

        assert result.tx_hash == "0xroute"
        assert events[-1][0] == "send"

    @pytest.mark.asyncio
    async def test_call_settings_override_client_settings(
        self, settings, api_stub, web3_factory, token_factory, token_route, evm_signer, events, fake_token
    ):
        """Per-call execution settings win over client defaults field by field."""
        settings = Settings(
            base_url=settings.base_url,
            execution=ExecutionSettings(infinite_approval=True, set_gas_price=False),
        )
        squid = Squid(
            settings,
            web3_factory=web3_factory,
            token_factory=token_factory,
            transport=httpx.MockTransport(api_stub),
        )
        await squid.init()
        fake_token.allowance_value = 0

        await squid.execute_route(
            signer=evm_signer, route=token_route, execution_settings={"infiniteApproval": False}
        )

        assert events[0][:3] == ("approve", SQUID_ROUTER, 500)
        assert "maxFeePerGas" not in events[-1][1]
        await squid.close()

    @pytest.mark.asyncio
    async def test_cosmos_dispatch(self, ready_squid, ibc_route):
        """Cosmos signers return signed bytes."""
        signer = FakeCosmosSigner()

        result = await ready_squid.execute_route(
            signer=signer, route=ibc_route, signer_address=OSMO_ADDRESS
        )

        assert result == b"signed-tx"
        assert signer.signed[0][0] == OSMO_ADDRESS

    @pytest.mark.asyncio
    async def test_cosmos_requires_address(self, ready_squid, ibc_route):
        """Cosmos execution needs the signer address."""
        with pytest.raises(ValidationError, match="signerAddress"):
            await ready_squid.execute_route(signer=FakeCosmosSigner(), route=ibc_route)

    @pytest.mark.asyncio
    async def test_unsupported_signer(self, ready_squid, native_route):
        """Signers without a known family are rejected."""

        class UnknownSigner(RouteSigner):
            pass

        with pytest.raises(ValidationError, match="Unsupported signer type"):
            await ready_squid.execute_route(signer=UnknownSigner(), route=native_route)

    def test_get_raw_tx_hex(self, squid, native_route):
        """Offline hex does not need init."""
        assert squid.get_raw_tx_hex(0, native_route).startswith("0x02")

    @pytest.mark.asyncio
    async def test_errors_logged_when_enabled(self, api_stub, native_route, evm_signer, caplog):
        """With logging enabled, SDK errors are logged at the configured level."""
        squid = Squid(
            Settings(logging=True, log_level="warning"), transport=httpx.MockTransport(api_stub)
        )

        with caplog.at_level(logging.WARNING, logger="squid_sdk"):
            with pytest.raises(InitError):
                await squid.execute_route(signer=evm_signer, route=native_route)

        assert any("InitError" in record.getMessage() for record in caplog.records)


class TestApprovals:
    """Tests for is_route_approved, approve_route, allowance and approve."""

    @pytest.mark.asyncio
    async def test_native_route_approved(self, ready_squid, native_route, evm_signer):
        """Native routes only need balance."""
        result = await ready_squid.is_route_approved(native_route, evm_signer.address)

        assert result == {"is_approved": True, "message": "User has the expected balance 1000 of ETH"}

    @pytest.mark.asyncio
    async def test_token_route_approved(self, ready_squid, token_route, evm_signer, fake_token):
        """Token routes need balance and allowance."""
        fake_token.allowance_value = 500

        result = await ready_squid.is_route_approved(token_route, evm_signer.address)

        assert result["is_approved"] is True
        assert result["message"] == "User has approved Squid to use 500 of USDC"

    @pytest.mark.asyncio
    async def test_token_route_not_approved(self, ready_squid, token_route, evm_signer, events):
        """A short allowance raises without sending an approval."""
        with pytest.raises(ValidationError, match="Insufficient allowance"):
            await ready_squid.is_route_approved(token_route, evm_signer.address)

        assert events == []

    @pytest.mark.asyncio
    async def test_cosmos_route_rejected(self, ready_squid, ibc_route, evm_signer, events):
        """Allowance checks and approvals only apply to routes from EVM chains."""
        with pytest.raises(ValidationError, match="fromChain osmosis-1 is not an EVM chain"):
            await ready_squid.is_route_approved(ibc_route, OSMO_ADDRESS)

        with pytest.raises(ValidationError, match="is not an EVM chain"):
            await ready_squid.approve_route(ibc_route, evm_signer)

        assert events == []

    @pytest.mark.asyncio
    async def test_approve_route_native(self, ready_squid, native_route, evm_signer, events):
        """Native routes need no approval."""
        assert await ready_squid.approve_route(native_route, evm_signer) is True
        assert events == []

    @pytest.mark.asyncio
    async def test_approve_route_token(self, ready_squid, token_route, evm_signer, events):
        """Token routes are approved and the approval is awaited."""
        assert await ready_squid.approve_route(
            token_route, evm_signer, execution_settings={"infinite_approval": False}
        ) is True

        assert events == [("approve", SQUID_ROUTER, 500, {}), ("wait", "0xapprove")]

    @pytest.mark.asyncio
    async def test_allowance(self, ready_squid, fake_token, evm_signer):
        """Allowance is read through the token binding."""
        fake_token.allowance_value = 42

        assert await ready_squid.allowance(evm_signer.address, SQUID_ROUTER, USDC_ADDRESS, 1) == 42

    @pytest.mark.asyncio
    async def test_allowance_unknown_token(self, ready_squid, evm_signer):
        """Unknown tokens are rejected."""
        with pytest.raises(ValidationError, match="Token not found"):
            await ready_squid.allowance(evm_signer.address, SQUID_ROUTER, "0x" + "00" * 20, 1)

    @pytest.mark.asyncio
    async def test_approve_defaults_to_max(self, ready_squid, evm_signer, events):
        """approve without an amount approves max uint256 and does not wait."""
        tx = await ready_squid.approve(evm_signer, SQUID_ROUTER, USDC_ADDRESS, 1)

        assert tx.tx_hash == "0xapprove"
        assert events == [("approve", SQUID_ROUTER, UINT256_MAX, {})]
