"""Unsigned EVM transaction encoding for external signers.

Legacy transactions are encoded EIP-155 style (chain id plus empty r/s);
transactions with priority-fee fields are encoded as EIP-1559 type 2.
"""

from typing import Any, Mapping

import rlp
from eth_utils import to_bytes, to_canonical_address

EIP1559_TX_TYPE = b"\x02"


def _address(value: Any) -> bytes:
    return to_canonical_address(value) if value else b""


def _data(value: Any) -> bytes:
    if not value:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def _uint(tx: Mapping[str, Any], key: str) -> int:
    return int(tx.get(key) or 0)


def serialize_unsigned_transaction(tx: Mapping[str, Any]) -> str:
    """Encode ``tx`` (web3 ``TxParams`` keys) to 0x-prefixed hex."""
    if "maxFeePerGas" in tx or "maxPriorityFeePerGas" in tx:
        fields = [
            _uint(tx, "chainId"),
            _uint(tx, "nonce"),
            _uint(tx, "maxPriorityFeePerGas"),
            _uint(tx, "maxFeePerGas"),
            _uint(tx, "gas"),
            _address(tx.get("to")),
            _uint(tx, "value"),
            _data(tx.get("data")),
            [],  # access list
        ]
        return "0x" + (EIP1559_TX_TYPE + rlp.encode(fields)).hex()

    fields = [
        _uint(tx, "nonce"),
        _uint(tx, "gasPrice"),
        _uint(tx, "gas"),
        _address(tx.get("to")),
        _uint(tx, "value"),
        _data(tx.get("data")),
    ]
    chain_id = _uint(tx, "chainId")
    if chain_id:
        fields.extend([chain_id, 0, 0])
    return "0x" + rlp.encode(fields).hex()
