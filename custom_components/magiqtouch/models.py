"""Data models for the MagIQtouch integration."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .const import (
    FIELD_EVAP_RUNNING,
    FIELD_FIXED_AOC_RUNNING,
    FIELD_HEATER_RUNNING,
    FIELD_INVERTER_AOC_RUNNING,
)

RemoteState = dict[str, int | float]


@dataclass(frozen=True)
class AuthSession:
    """Represents a bearer token with its expiry as epoch seconds."""

    token: str
    expires_at: float

    def is_valid(self, now: float, skew: float) -> bool:
        """Return True while the token outlives now by more than skew."""
        return self.expires_at > now + skew


@dataclass(frozen=True)
class MagIQTouchDevice:
    """Represents a MagIQtouch controller.

    Attributes:
        id: Stable hardware identifier (MAC address).
        name: Human-readable device name.
        metadata: Remaining fields of the device listing record.

    """

    id: str
    name: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)


class CoolingVariant(Enum):
    """Cooling hardware variants, each with its own running-flag field."""

    FIXED_AOC = FIELD_FIXED_AOC_RUNNING
    INVERTER_AOC = FIELD_INVERTER_AOC_RUNNING
    EVAP = FIELD_EVAP_RUNNING

    @property
    def state_key(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ModeRange:
    """Temperature range of a heating or cooling unit."""

    minimum: float
    maximum: float
    state_key: str


@dataclass(frozen=True, slots=True)
class CoolingRange(ModeRange):
    """Temperature range of the selected cooling unit."""

    variant: CoolingVariant = CoolingVariant.EVAP


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Which control modes a device has; absent modes are None."""

    heating: ModeRange | None = None
    cooling: CoolingRange | None = None


def heating_range(minimum: float, maximum: float) -> ModeRange:
    return ModeRange(minimum=minimum, maximum=maximum, state_key=FIELD_HEATER_RUNNING)


def cooling_range(
    variant: CoolingVariant, minimum: float, maximum: float
) -> CoolingRange:
    return CoolingRange(
        minimum=minimum,
        maximum=maximum,
        state_key=variant.state_key,
        variant=variant,
    )
