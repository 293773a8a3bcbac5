"""Chain and token lookups plus route parameter resolution.

Resolution only builds clients; no network call happens here.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from web3 import AsyncWeb3

from squid_sdk.constants import NATIVE_TOKEN_ADDRESS
from squid_sdk.errors import ValidationError
from squid_sdk.evm.erc20 import Erc20Token
from squid_sdk.models import ChainData, ChainId, RouteParams, TokenData

logger = logging.getLogger(__name__)

Web3Factory = Callable[[str], AsyncWeb3]
TokenFactory = Callable[[AsyncWeb3, str], Erc20Token]


def default_web3_factory(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))


def _same_id(left: ChainId, right: ChainId) -> bool:
    return str(left) == str(right)


def get_chain_data(chains: Sequence[ChainData], chain_id: ChainId) -> Optional[ChainData]:
    return next((chain for chain in chains if _same_id(chain.chain_id, chain_id)), None)


def get_token_data(
    tokens: Sequence[TokenData], address: str, chain_id: ChainId
) -> Optional[TokenData]:
    return next(
        (
            token
            for token in tokens
            if token.address.lower() == address.lower() and _same_id(token.chain_id, chain_id)
        ),
        None,
    )


def is_native_token(address: str) -> bool:
    return address.lower() == NATIVE_TOKEN_ADDRESS.lower()


@dataclass
class RouteParamsData:
    """Source/target chain context for a route."""
    from_chain: ChainData
    to_chain: ChainData
    from_token: TokenData
    to_token: TokenData
    from_is_native: bool
    from_provider: AsyncWeb3
    from_token_contract: Optional[Erc20Token] = None


def resolve_route_params(
    chains: Sequence[ChainData],
    params: RouteParams,
    web3_factory: Web3Factory = default_web3_factory,
    token_factory: TokenFactory = Erc20Token,
) -> RouteParamsData:
    """Look up chain metadata and build clients for the route's source chain.

    Raises:
        ValidationError: if either chain is missing from ``chains`` or the
            source chain is not an EVM chain
    """
    from_chain = get_chain_data(chains, params.from_chain)
    if from_chain is None:
        raise ValidationError(f"fromChain not found for {params.from_chain}")
    if from_chain.chain_type != "evm":
        raise ValidationError(f"fromChain {params.from_chain} is not an EVM chain")

    to_chain = get_chain_data(chains, params.to_chain)
    if to_chain is None:
        raise ValidationError(f"toChain not found for {params.to_chain}")

    from_provider = web3_factory(from_chain.rpc)
    from_is_native = is_native_token(params.from_token.address)

    from_token_contract = None
    if not from_is_native:
        from_token_contract = token_factory(from_provider, params.from_token.address)

    return RouteParamsData(
        from_chain=from_chain,
        to_chain=to_chain,
        from_token=params.from_token,
        to_token=params.to_token,
        from_is_native=from_is_native,
        from_provider=from_provider,
        from_token_contract=from_token_contract,
    )
