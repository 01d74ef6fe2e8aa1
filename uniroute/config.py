"""Settings for the routing pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from uniroute.constants import (
    DEFAULT_DEADLINE_MINUTES,
    DEFAULT_SLIPPAGE,
    DEFAULT_WATCH_INTERVAL_SECONDS,
)
from uniroute.errors import ConfigurationError, ErrorCode
from uniroute.models.network import CloneContracts, CustomNetwork
from uniroute.models.route import ProtocolVersion

if TYPE_CHECKING:
    from uniroute.chain.prices import GasPriceSource

_CLONE_FIELDS = ("v2_router", "v2_factory", "v3_router", "v3_factory", "v3_quoter")


@dataclass(frozen=True)
class Settings:
    """Caller-supplied settings, immutable for the lifetime of a pipeline.

    Attributes:
        slippage: Tolerated deviation as a fraction in [0, 1), e.g. 0.005
        deadline_minutes: Minutes until a built transaction expires
        disable_multihops: If True, only direct routes are discovered
        protocol_versions: Protocol versions to route through
        custom_network: Description of a non-canonical network
        clone_contracts: Address overrides for a forked deployment
        gas_price_source: Enables gas-aware route re-ranking on mainnet
        watch_interval_seconds: Poll interval of the live watchers
    """

    slippage: Decimal = DEFAULT_SLIPPAGE
    deadline_minutes: int = DEFAULT_DEADLINE_MINUTES
    disable_multihops: bool = False
    protocol_versions: tuple[ProtocolVersion, ...] = (ProtocolVersion.V2, ProtocolVersion.V3)
    custom_network: CustomNetwork | None = None
    clone_contracts: CloneContracts | None = None
    gas_price_source: GasPriceSource | None = field(default=None, compare=False)
    watch_interval_seconds: float = DEFAULT_WATCH_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        object.__setattr__(self, "slippage", Decimal(str(self.slippage)))
        if not Decimal(0) <= self.slippage < Decimal(1):
            raise ConfigurationError(
                f"Slippage must be in [0, 1), got {self.slippage}", ErrorCode.INVALID_SETTINGS
            )
        if self.deadline_minutes <= 0:
            raise ConfigurationError(
                f"Deadline must be positive, got {self.deadline_minutes} minutes",
                ErrorCode.INVALID_SETTINGS,
            )
        if not self.protocol_versions:
            raise ConfigurationError(
                "At least one protocol version must be enabled", ErrorCode.INVALID_SETTINGS
            )
        if self.watch_interval_seconds <= 0:
            raise ConfigurationError(
                f"Watch interval must be positive, got {self.watch_interval_seconds}",
                ErrorCode.INVALID_SETTINGS,
            )

    @property
    def deadline_seconds(self) -> int:
        return self.deadline_minutes * 60

    def uses(self, version: ProtocolVersion) -> bool:
        """True if routing through `version` is enabled."""
        return version in self.protocol_versions

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from UNIROUTE_* environment variables.

        Recognized variables:
        - UNIROUTE_SLIPPAGE: fraction, e.g. "0.005"
        - UNIROUTE_DEADLINE_MINUTES: integer minutes
        - UNIROUTE_DISABLE_MULTIHOPS: "true"/"1"/"yes"
        - UNIROUTE_PROTOCOL_VERSIONS: comma-separated, e.g. "v2,v3"
        - UNIROUTE_V2_ROUTER, UNIROUTE_V2_FACTORY, UNIROUTE_V3_ROUTER,
          UNIROUTE_V3_FACTORY, UNIROUTE_V3_QUOTER: clone deployment addresses
        """
        env = os.environ if environ is None else environ
        try:
            slippage = Decimal(env.get("UNIROUTE_SLIPPAGE", str(DEFAULT_SLIPPAGE)))
            deadline = int(env.get("UNIROUTE_DEADLINE_MINUTES", str(DEFAULT_DEADLINE_MINUTES)))
            versions = tuple(
                ProtocolVersion(v.strip().lower())
                for v in env.get("UNIROUTE_PROTOCOL_VERSIONS", "v2,v3").split(",")
                if v.strip()
            )
        except (InvalidOperation, ValueError) as err:
            raise ConfigurationError(
                f"Invalid settings in environment: {err}", ErrorCode.INVALID_SETTINGS
            ) from err

        disable_multihops = env.get("UNIROUTE_DISABLE_MULTIHOPS", "false").lower() in (
            "true",
            "1",
            "yes",
        )
        overrides = {
            name: env[f"UNIROUTE_{name.upper()}"]
            for name in _CLONE_FIELDS
            if env.get(f"UNIROUTE_{name.upper()}")
        }
        return cls(
            slippage=slippage,
            deadline_minutes=deadline,
            disable_multihops=disable_multihops,
            protocol_versions=versions,
            clone_contracts=CloneContracts(**overrides) if overrides else None,
        )


DEFAULT_SETTINGS = Settings()


__all__ = ["Settings", "DEFAULT_SETTINGS"]
