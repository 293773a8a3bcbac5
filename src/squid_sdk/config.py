"""SDK configuration using pydantic-settings.

Settings can be passed explicitly to ``Squid`` or loaded from ``SQUID_*``
environment variables / a ``.env`` file.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from squid_sdk.constants import DEFAULT_BASE_URL, DEFAULT_INTEGRATOR_ID


class ExecutionSettings(BaseModel):
    """Execution options.

    ``None`` means "not set at this layer"; see ``resolve_execution_settings``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    set_gas_price: Optional[bool] = Field(
        default=None, description="Forward route fee fields to the transaction (default True)"
    )
    infinite_approval: Optional[bool] = Field(
        default=None, description="Approve max uint256 instead of the exact amount (default True)"
    )


@dataclass(frozen=True)
class ResolvedExecutionSettings:
    """Execution options after layering, every field decided."""
    set_gas_price: bool = True
    infinite_approval: bool = True


class Settings(BaseSettings):
    """SDK settings."""

    model_config = SettingsConfigDict(
        env_prefix="SQUID_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ======================
    # Routing API
    # ======================
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Routing service base URL")
    integrator_id: Optional[str] = Field(
        default=DEFAULT_INTEGRATOR_ID, description="Sent as the x-integrator-id header"
    )
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # ======================
    # Logging hints
    # ======================
    logging: bool = Field(default=False, description="Log SDK errors when they are raised")
    log_level: str = Field(default="error", description="Level used for logged SDK errors")

    # ======================
    # Execution defaults
    # ======================
    execution: ExecutionSettings = Field(
        default_factory=ExecutionSettings, description="Client-wide execution defaults"
    )


ExecutionSettingsLike = Union[ExecutionSettings, Mapping[str, Any], None]


def coerce_execution_settings(value: ExecutionSettingsLike) -> Optional[ExecutionSettings]:
    """Accept a model, a plain mapping (snake or camel case keys) or None."""
    if value is None or isinstance(value, ExecutionSettings):
        return value
    return ExecutionSettings.model_validate(dict(value))


def resolve_execution_settings(
    client: ExecutionSettingsLike = None,
    call: ExecutionSettingsLike = None,
) -> ResolvedExecutionSettings:
    """Layer library defaults, client-level settings and per-call settings.

    Later layers win field by field; only explicitly set values override.
    """
    resolved = {"set_gas_price": True, "infinite_approval": True}
    for layer in (coerce_execution_settings(client), coerce_execution_settings(call)):
        if layer is None:
            continue
        for name in resolved:
            value = getattr(layer, name)
            if value is not None:
                resolved[name] = value
    return ResolvedExecutionSettings(**resolved)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
