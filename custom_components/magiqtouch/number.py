"""Number entities for MagIQtouch fan speed control."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.const import PERCENTAGE

from . import translator
from .const import DOMAIN, FAN_SPEED_MAX, FAN_SPEED_MIN, FAN_SPEED_STEP
from .entity import MagIQTouchEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MagIQTouchDeviceCoordinator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up fan speed entities."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        MagIQTouchFanSpeedNumber(coordinator)
        for coordinator in entry_data["coordinators"].values()
    )


class MagIQTouchFanSpeedNumber(MagIQTouchEntity, NumberEntity):
    """Fan speed of the running mode, 0% meaning temperature control."""

    _attr_name = "Fan speed"
    _attr_icon = "mdi:fan"
    _attr_mode = NumberMode.SLIDER
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_native_min_value = FAN_SPEED_MIN
    _attr_native_max_value = FAN_SPEED_MAX
    _attr_native_step = FAN_SPEED_STEP

    def __init__(self, coordinator: MagIQTouchDeviceCoordinator) -> None:
        super().__init__(coordinator, "fan_speed")

    @property
    def native_value(self) -> float:
        return translator.fan_speed_percent(self._state, self._capabilities)

    async def async_set_native_value(self, value: float) -> None:
        """Set the fan speed percentage."""
        _LOGGER.debug("%s: Set fan speed %s", self.entity_id, value)
        self._apply(translator.SetFanSpeed(percent=value))
