"""Protocol constants shared by the EVM and Cosmos execution paths."""

from decimal import Decimal

# Routing service
DEFAULT_BASE_URL = "https://testnet.api.0xsquid.com/"
DEFAULT_INTEGRATOR_ID = "squid-sdk"

# Sentinel address used by the routing service for every chain's native asset
NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

# Max uint256, used for infinite approvals
UINT256_MAX = 2**256 - 1

# Route type tag for plain native transfers
SEND_ROUTE_TYPE = "SEND"

# Cosmos message type URLs
IBC_TRANSFER_TYPE = "/ibc.applications.transfer.v1.MsgTransfer"
WASM_TYPE = "/cosmwasm.wasm.v1.MsgExecuteContract"

# Applied to simulated Cosmos gas when the route carries no usable hint
DEFAULT_COSMOS_GAS_MULTIPLIER = Decimal("1.3")
