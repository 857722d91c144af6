"""Climate entities for MagIQtouch controllers.

This module exposes each controller as a Home Assistant climate entity
with power, heat/cool mode and per-mode target temperature control.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.exceptions import ServiceValidationError

from . import translator
from .api import MagIQTouchValidationError
from .const import DOMAIN, TEMPERATURE_STEP
from .entity import MagIQTouchEntity
from .models import ModeRange
from .translator import HeaterCoolerState, HvacTarget

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MagIQTouchDeviceCoordinator

_LOGGER = logging.getLogger(__name__)

HVAC_MODE_MAP = {
    HvacTarget.HEAT: HVACMode.HEAT,
    HvacTarget.COOL: HVACMode.COOL,
}
HVAC_MODE_REVERSE_MAP = {value: key for key, value in HVAC_MODE_MAP.items()}
HVAC_ACTION_MAP = {
    HeaterCoolerState.INACTIVE: HVACAction.OFF,
    HeaterCoolerState.IDLE: HVACAction.IDLE,
    HeaterCoolerState.HEATING: HVACAction.HEATING,
    HeaterCoolerState.COOLING: HVACAction.COOLING,
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up climate entities for MagIQtouch devices."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        MagIQTouchClimateEntity(coordinator)
        for coordinator in entry_data["coordinators"].values()
    )


class MagIQTouchClimateEntity(MagIQTouchEntity, ClimateEntity):
    """Climate entity for a MagIQtouch controller.

    Reads come from the coordinator's effective state, so a value set here
    is reported back before the device confirms it.
    """

    _attr_name = None
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = TEMPERATURE_STEP
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, coordinator: MagIQTouchDeviceCoordinator) -> None:
        super().__init__(coordinator, "")
        self._attr_hvac_modes = [HVACMode.OFF] + [
            HVAC_MODE_MAP[mode]
            for mode in translator.supported_modes(coordinator.capabilities)
        ]

    @property
    def _target(self) -> HvacTarget:
        return translator.target_mode(self._state, self._capabilities)

    @property
    def hvac_mode(self) -> HVACMode:
        if not translator.is_active(self._state):
            return HVACMode.OFF
        return HVAC_MODE_MAP[self._target]

    @property
    def hvac_action(self) -> HVACAction:
        return HVAC_ACTION_MAP[
            translator.current_state(self._state, self._capabilities)
        ]

    @property
    def current_temperature(self) -> float | None:
        return translator.current_temperature(self._state)

    @property
    def target_temperature(self) -> float | None:
        return translator.setpoint(self._state, self._capabilities, self._target)

    @property
    def min_temp(self) -> float:
        mode_range = self._mode_range()
        return mode_range.minimum if mode_range else super().min_temp

    @property
    def max_temp(self) -> float:
        mode_range = self._mode_range()
        return mode_range.maximum if mode_range else super().max_temp

    def _mode_range(self) -> ModeRange | None:
        try:
            return translator.mode_range(self._capabilities, self._target)
        except MagIQTouchValidationError:
            return None

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode.

        Args:
            hvac_mode: The HVAC mode to set.

        """
        _LOGGER.debug("%s: Set HVAC mode %s", self.entity_id, hvac_mode)
        if hvac_mode == HVACMode.OFF:
            self._apply(translator.SetActive(active=False))
            return

        target = HVAC_MODE_REVERSE_MAP.get(hvac_mode)
        if target is None:
            error_msg = f"Unsupported HVAC mode: {hvac_mode}"
            raise ServiceValidationError(error_msg)
        self._apply(translator.SetMode(mode=target))

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature of the current or requested mode."""
        if (hvac_mode := kwargs.get("hvac_mode")) is not None:
            await self.async_set_hvac_mode(hvac_mode)

        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        self._apply(translator.SetSetpoint(mode=self._target, celsius=temperature))

    async def async_turn_on(self) -> None:
        self._apply(translator.SetActive(active=True))

    async def async_turn_off(self) -> None:
        self._apply(translator.SetActive(active=False))
