"""Cosmos message building.

A Cosmos route carries its payload as a JSON envelope in
``transaction_request.data``::

    {"msgTypeUrl": "/ibc.applications.transfer.v1.MsgTransfer", "msg": {...}}

The envelope is turned into ``CosmosMessage`` objects (type URL + JSON-like
value). A signer's ``MessageRegistry`` maps type URLs to protobuf classes
when the messages are encoded for simulation and signing.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from cosmpy.protos.cosmwasm.wasm.v1.tx_pb2 import MsgExecuteContract
from cosmpy.protos.ibc.applications.transfer.v1.tx_pb2 import MsgTransfer
from google.protobuf import json_format
from google.protobuf.message import Message
from pydantic import ValidationError as PydanticValidationError

from squid_sdk.constants import IBC_TRANSFER_TYPE, WASM_TYPE
from squid_sdk.cosmos.fees import Coin
from squid_sdk.errors import ValidationError
from squid_sdk.models import CosmosMsg, RouteData, WasmHookMsg

if TYPE_CHECKING:
    from squid_sdk.signers import CosmosSigner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CosmosMessage:
    """A message ready to be encoded: type URL plus its JSON-like value."""
    type_url: str
    value: dict[str, Any]


class MessageRegistry:
    """Type URL -> protobuf class mapping used to encode messages."""

    def __init__(self, types: Optional[dict[str, type[Message]]] = None):
        self._types: dict[str, type[Message]] = {IBC_TRANSFER_TYPE: MsgTransfer}
        if types:
            self._types.update(types)

    def register(self, type_url: str, message_type: type[Message]) -> None:
        """Register ``message_type``; registering the same pair twice is a no-op."""
        self._types[type_url] = message_type

    def lookup(self, type_url: str) -> Optional[type[Message]]:
        return self._types.get(type_url)

    def encode(self, message: CosmosMessage) -> Message:
        """Build the protobuf message for ``message``."""
        message_type = self.lookup(message.type_url)
        if message_type is None:
            raise ValidationError(f"Unregistered Cosmos message type: {message.type_url}")
        return json_format.ParseDict(
            _to_proto_json(message.value), message_type(), ignore_unknown_fields=True
        )


def _to_proto_json(value: Any) -> Any:
    # Protobuf JSON carries bytes fields as base64 strings
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dict):
        return {key: _to_proto_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_proto_json(item) for item in value]
    return value


def parse_cosmos_envelope(data: str) -> CosmosMsg:
    """Parse the JSON envelope carried in ``transaction_request.data``."""
    try:
        return CosmosMsg.model_validate(json.loads(data))
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        raise ValidationError(f"Invalid Cosmos message payload: {exc}") from exc


def build_cosmos_messages(
    route: RouteData,
    signer: "CosmosSigner",
    signer_address: str,
) -> list[CosmosMessage]:
    """Turn a Cosmos route into the messages to simulate and sign.

    Raises:
        ValidationError: missing transaction request, malformed envelope or
            unsupported message type
    """
    if route.transaction_request is None:
        raise ValidationError("transactionRequest property is missing in route object")

    envelope = parse_cosmos_envelope(route.transaction_request.data)

    if envelope.msg_type_url == IBC_TRANSFER_TYPE:
        return [CosmosMessage(type_url=IBC_TRANSFER_TYPE, value=envelope.msg)]

    if envelope.msg_type_url == WASM_TYPE:
        signer.registry.register(WASM_TYPE, MsgExecuteContract)

        try:
            hook = WasmHookMsg.model_validate(envelope.msg)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid wasm hook message: {exc}") from exc

        params = route.params
        funds = Coin(denom=params.from_token.address, amount=params.from_amount)
        return [
            CosmosMessage(
                type_url=WASM_TYPE,
                value={
                    "sender": signer_address,
                    "contract": hook.wasm.contract,
                    "msg": json.dumps(hook.wasm.msg, separators=(",", ":")).encode("utf-8"),
                    "funds": [funds.to_dict()],
                },
            )
        ]

    raise ValidationError(f"Unsupported Cosmos message type: {envelope.msg_type_url}")
