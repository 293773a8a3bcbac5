"""Error types raised by the SDK.

Every failure surfaced by the SDK itself is a ``SquidError`` carrying a
human readable message, the error kind, and optional logging hints. Errors
raised by the chain clients (web3, cosmpy) and by httpx are not wrapped.
"""

import logging
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    """Kind of SDK failure."""
    INIT_ERROR = "InitError"
    VALIDATION_ERROR = "ValidationError"
    ROUTE_RESPONSE_ERROR = "RouteResponseError"


class SquidError(Exception):
    """Base class for SDK errors.

    Args:
        message: Human readable description
        error_type: Kind of failure
        logging: Log the error when it is created
        log_level: Level name or number used when ``logging`` is enabled
    """

    error_type: ErrorType = ErrorType.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        error_type: Optional[ErrorType] = None,
        logging: bool = False,
        log_level: Union[str, int, None] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type
        self.logging = logging
        self.log_level = log_level

        if logging:
            self.log()

    def log(self) -> None:
        logger.log(_level_number(self.log_level), f"{self.error_type.value}: {self.message}")

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"message": self.message, "error_type": self.error_type.value}


class InitError(SquidError):
    """Raised when an operation runs before ``Squid.init`` loaded metadata."""

    error_type = ErrorType.INIT_ERROR


class ValidationError(SquidError):
    """Raised for missing route fields, unknown chains/tokens and failed pre-flight checks."""

    error_type = ErrorType.VALIDATION_ERROR


class RouteResponseError(SquidError):
    """Raised when the routing service rejects a route request."""

    error_type = ErrorType.ROUTE_RESPONSE_ERROR


class TransactionRevertedError(RuntimeError):
    """Raised when a submitted EVM transaction is mined with a failed status."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} failed (reverted)")


def _level_number(level: Union[str, int, None]) -> int:
    if level is None:
        return logging.ERROR
    if isinstance(level, int):
        return level
    # Accept both "warn" style and stdlib names
    number = logging.getLevelName(level.upper())
    if isinstance(number, int):
        return number
    if level.lower() == "warn":
        return logging.WARNING
    return logging.ERROR
