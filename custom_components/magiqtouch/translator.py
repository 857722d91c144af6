"""Translation of control intents into MagIQtouch field changes.

Every function here is pure: it reads an effective state and the device
capabilities and returns the fields to change. Nothing is sent to the
device from this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, StrEnum

from .api import MagIQTouchValidationError
from .const import (
    CONTROL_FAN,
    CONTROL_TEMPERATURE,
    COOLING_RUNNING_FIELDS,
    FAN_ONLY_FIELDS,
    FAN_SPEED_MAX,
    FAN_SPEED_MIN,
    FAN_SPEED_STEP,
    FIELD_COOLER_FAN_ONLY,
    FIELD_COOLER_FAN_SPEED,
    FIELD_COOLER_TEMP,
    FIELD_FAN_OR_TEMP_CONTROL,
    FIELD_HEATER_FAN_ONLY,
    FIELD_HEATER_FAN_SPEED,
    FIELD_HEATER_RUNNING,
    FIELD_HEATER_TEMP,
    FIELD_INTERNAL_TEMP,
    FIELD_SYSTEM_ON,
    TEMPERATURE_STEP,
)
from .models import Capabilities, ModeRange, RemoteState

_LOGGER = logging.getLogger(__name__)

STEP_EPSILON = 0.0001


class HvacTarget(StrEnum):
    """Target operating mode."""

    HEAT = "heat"
    COOL = "cool"


class HeaterCoolerState(IntEnum):
    """What the unit is currently doing."""

    INACTIVE = 0
    IDLE = 1
    HEATING = 2
    COOLING = 3


# Fields belonging to each mode: (setpoint, fan speed, fan only)
MODE_FIELDS = {
    HvacTarget.HEAT: (FIELD_HEATER_TEMP, FIELD_HEATER_FAN_SPEED, FIELD_HEATER_FAN_ONLY),
    HvacTarget.COOL: (FIELD_COOLER_TEMP, FIELD_COOLER_FAN_SPEED, FIELD_COOLER_FAN_ONLY),
}


@dataclass(frozen=True)
class SetActive:
    active: bool


@dataclass(frozen=True)
class SetMode:
    mode: HvacTarget


@dataclass(frozen=True)
class SetSetpoint:
    mode: HvacTarget
    celsius: float


@dataclass(frozen=True)
class SetFanSpeed:
    percent: float


@dataclass(frozen=True)
class SetFanOnly:
    enabled: bool


@dataclass(frozen=True)
class SetManualFanOverride:
    enabled: bool


Intent = (
    SetActive
    | SetMode
    | SetSetpoint
    | SetFanSpeed
    | SetFanOnly
    | SetManualFanOverride
)


def normalize_value(
    value: float, minimum: float, maximum: float, step: float
) -> float:
    """Clamp value to [minimum, maximum] and snap it onto the step grid.

    Values between grid points are rounded down, except that a request
    rounded down onto the minimum moves up one step instead, so that a
    request clearly above the minimum is never collapsed onto it.
    """
    if value < minimum:
        value = minimum
    if value > maximum:
        value = maximum

    steps, diff = divmod(value - minimum, step)
    if step - diff < STEP_EPSILON:
        steps, diff = steps + 1, 0
    if not diff and minimum + steps * step == value:
        return value

    if steps == 0 and diff > STEP_EPSILON and minimum + step <= maximum:
        steps = 1
    if minimum + steps * step > maximum:
        steps -= 1
    return minimum + steps * step


def mode_range(capabilities: Capabilities, mode: HvacTarget) -> ModeRange:
    """Return the range of a mode, or raise if the device lacks it."""
    mode_range_ = (
        capabilities.heating if mode is HvacTarget.HEAT else capabilities.cooling
    )
    if mode_range_ is None:
        error_msg = f"Device has no {mode} capability"
        raise MagIQTouchValidationError(error_msg)
    return mode_range_


def supported_modes(capabilities: Capabilities) -> list[HvacTarget]:
    modes = []
    if capabilities.heating is not None:
        modes.append(HvacTarget.HEAT)
    if capabilities.cooling is not None:
        modes.append(HvacTarget.COOL)
    return modes


# Derived reads


def is_active(state: RemoteState) -> bool:
    return state.get(FIELD_SYSTEM_ON) == 1


def is_heating_running(state: RemoteState, capabilities: Capabilities) -> bool:
    heating = capabilities.heating
    return heating is not None and state.get(heating.state_key) == 1


def is_cooling_running(state: RemoteState, capabilities: Capabilities) -> bool:
    cooling = capabilities.cooling
    return cooling is not None and state.get(cooling.state_key) == 1


def current_state(
    state: RemoteState, capabilities: Capabilities
) -> HeaterCoolerState:
    """Return whether the unit is heating, cooling, idle or off."""
    if not is_active(state):
        return HeaterCoolerState.INACTIVE
    if is_heating_running(state, capabilities):
        return HeaterCoolerState.HEATING
    if is_cooling_running(state, capabilities):
        return HeaterCoolerState.COOLING
    return HeaterCoolerState.IDLE


def target_mode(state: RemoteState, capabilities: Capabilities) -> HvacTarget:
    if is_heating_running(state, capabilities):
        return HvacTarget.HEAT
    if capabilities.cooling is None and capabilities.heating is not None:
        return HvacTarget.HEAT
    return HvacTarget.COOL


def current_temperature(state: RemoteState) -> float | None:
    return state.get(FIELD_INTERNAL_TEMP)


def setpoint(
    state: RemoteState, capabilities: Capabilities, mode: HvacTarget
) -> float | None:
    """Return the normalized setpoint of a mode, or None if unsupported."""
    mode_range_ = (
        capabilities.heating if mode is HvacTarget.HEAT else capabilities.cooling
    )
    value = state.get(MODE_FIELDS[mode][0])
    if mode_range_ is None or value is None:
        return None
    return normalize_value(
        value, mode_range_.minimum, mode_range_.maximum, TEMPERATURE_STEP
    )


def fan_speed_percent(state: RemoteState, capabilities: Capabilities) -> float:
    """Return the fan speed of the running mode as a percentage."""
    speed_field = (
        FIELD_HEATER_FAN_SPEED
        if is_heating_running(state, capabilities)
        else FIELD_COOLER_FAN_SPEED
    )
    return normalize_value(
        (state.get(speed_field) or 0) * 10,
        FAN_SPEED_MIN,
        FAN_SPEED_MAX,
        FAN_SPEED_STEP,
    )


def is_fan_only(state: RemoteState, capabilities: Capabilities) -> bool:
    return any(
        state.get(MODE_FIELDS[mode][2]) == 1 for mode in supported_modes(capabilities)
    )


def is_manual_fan_override(state: RemoteState) -> bool:
    return state.get(FIELD_FAN_OR_TEMP_CONTROL) == CONTROL_FAN


# Intent translation


def set_active(state: RemoteState, active: bool) -> RemoteState:  # noqa: FBT001
    """Return the power change, or nothing if already in that state."""
    value = 1 if active else 0
    if state.get(FIELD_SYSTEM_ON) == value:
        return {}
    return {FIELD_SYSTEM_ON: value}


def set_mode(capabilities: Capabilities, mode: HvacTarget) -> RemoteState:
    """Switch to heating or cooling, clearing every other running flag."""
    state_key = mode_range(capabilities, mode).state_key
    delta: RemoteState = {FIELD_SYSTEM_ON: 1, FIELD_HEATER_RUNNING: 0}
    delta.update(dict.fromkeys(COOLING_RUNNING_FIELDS, 0))
    delta.update(dict.fromkeys(FAN_ONLY_FIELDS, 0))
    delta[state_key] = 1
    return delta


def set_setpoint(
    capabilities: Capabilities, mode: HvacTarget, celsius: float
) -> RemoteState:
    """Set a mode's target temperature and hand the fan to temperature control."""
    mode_range_ = mode_range(capabilities, mode)
    temp_field, _, fan_only_field = MODE_FIELDS[mode]
    value = normalize_value(
        celsius, mode_range_.minimum, mode_range_.maximum, TEMPERATURE_STEP
    )
    return {
        FIELD_FAN_OR_TEMP_CONTROL: CONTROL_TEMPERATURE,
        temp_field: value,
        fan_only_field: 0,
    }


def set_fan_speed(
    state: RemoteState, capabilities: Capabilities, percent: float
) -> RemoteState:
    """Set a fixed fan speed; 0 hands the fan back to temperature control."""
    minimum = FAN_SPEED_STEP if is_fan_only(state, capabilities) else FAN_SPEED_MIN
    value = normalize_value(percent, minimum, FAN_SPEED_MAX, FAN_SPEED_STEP)
    speed = round(value / 10)
    return {
        FIELD_FAN_OR_TEMP_CONTROL: CONTROL_TEMPERATURE if speed == 0 else CONTROL_FAN,
        FIELD_COOLER_FAN_SPEED: speed,
        FIELD_HEATER_FAN_SPEED: speed,
    }


def _ensure_fan_running(
    state: RemoteState, modes: list[HvacTarget], delta: RemoteState
) -> None:
    for mode in modes:
        speed_field = MODE_FIELDS[mode][1]
        delta[speed_field] = max(1, state.get(speed_field) or 0)


def set_fan_only(
    state: RemoteState,
    capabilities: Capabilities,
    enabled: bool,  # noqa: FBT001
) -> RemoteState:
    """Toggle fan-only operation for every supported mode."""
    if not enabled:
        return dict.fromkeys(FAN_ONLY_FIELDS, 0)

    modes = supported_modes(capabilities)
    if not modes:
        error_msg = "Device has neither heating nor cooling capability"
        raise MagIQTouchValidationError(error_msg)

    delta: RemoteState = {MODE_FIELDS[mode][2]: 1 for mode in modes}
    _ensure_fan_running(state, modes, delta)
    return delta


def set_manual_fan_override(
    state: RemoteState,
    capabilities: Capabilities,
    enabled: bool,  # noqa: FBT001
) -> RemoteState:
    """Switch between a fixed fan speed and temperature control."""
    if not enabled:
        return {FIELD_FAN_OR_TEMP_CONTROL: CONTROL_TEMPERATURE}

    delta: RemoteState = {FIELD_FAN_OR_TEMP_CONTROL: CONTROL_FAN}
    _ensure_fan_running(state, supported_modes(capabilities), delta)
    return delta


def apply_intent(
    intent: Intent, state: RemoteState, capabilities: Capabilities
) -> RemoteState:
    """Translate an intent into the field changes it requires.

    Raises:
        MagIQTouchValidationError: If the intent needs a mode the device lacks.

    """
    if isinstance(intent, SetActive):
        delta = set_active(state, intent.active)
    elif isinstance(intent, SetMode):
        delta = set_mode(capabilities, intent.mode)
    elif isinstance(intent, SetSetpoint):
        delta = set_setpoint(capabilities, intent.mode, intent.celsius)
    elif isinstance(intent, SetFanSpeed):
        delta = set_fan_speed(state, capabilities, intent.percent)
    elif isinstance(intent, SetFanOnly):
        delta = set_fan_only(state, capabilities, intent.enabled)
    elif isinstance(intent, SetManualFanOverride):
        delta = set_manual_fan_override(state, capabilities, intent.enabled)
    else:
        error_msg = f"Unsupported intent: {intent!r}"
        raise MagIQTouchValidationError(error_msg)

    _LOGGER.debug("Translated %s into %s", intent, delta)
    return delta
