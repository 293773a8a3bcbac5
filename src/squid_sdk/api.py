"""Async HTTP client for the Squid routing service.

API endpoints:
- GET /v1/sdk-info: chain and token tables
- GET /v1/route: route computation
- GET /v1/status: cross-chain transaction status
- GET /v1/token-price: token USD price
"""

import logging
from typing import Any, Mapping, Optional

import httpx

from squid_sdk.config import Settings

logger = logging.getLogger(__name__)


async def _log_request(request: httpx.Request) -> None:
    logger.debug(f"Squid API request: {request.method} {request.url}")


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(
        f"Squid API response: {request.method} {request.url.path} -> {response.status_code}"
    )


class SquidApi:
    """Thin wrapper around the routing service endpoints.

    Responses are returned as ``httpx.Response`` objects; status handling and
    parsing belong to the caller, which owns the SDK error semantics.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self.settings.integrator_id:
            headers["x-integrator-id"] = self.settings.integrator_id
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers=self._headers(),
                timeout=self.settings.timeout,
                transport=self._transport,
                event_hooks={"request": [_log_request], "response": [_log_response]},
            )
        return self._http_client

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        client = self._get_client()
        return await client.get(path, params=_query(params), headers=headers)

    async def sdk_info(self) -> httpx.Response:
        return await self.get("/v1/sdk-info")

    async def route(self, params: Mapping[str, Any]) -> httpx.Response:
        return await self.get("/v1/route", params=params)

    async def status(
        self, params: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None
    ) -> httpx.Response:
        return await self.get("/v1/status", params=params, headers=headers)

    async def token_price(self, token_address: str, chain_id: Any) -> httpx.Response:
        return await self.get(
            "/v1/token-price", params={"tokenAddress": token_address, "chainId": chain_id}
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


def _query(params: Optional[Mapping[str, Any]]) -> Optional[dict[str, Any]]:
    """Drop unset values and render booleans the way the API expects."""
    if params is None:
        return None
    query: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        query[key] = str(value).lower() if isinstance(value, bool) else value
    return query
