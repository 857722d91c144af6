"""Switch entities for MagIQtouch auxiliary controls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.switch import SwitchEntity

from . import translator
from .const import DOMAIN
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
    """Set up switch entities."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    entities: list[SwitchEntity] = []

    for coordinator in entry_data["coordinators"].values():
        if translator.supported_modes(coordinator.capabilities):
            entities.append(MagIQTouchFanOnlySwitch(coordinator))
        entities.append(MagIQTouchManualFanSwitch(coordinator))

    async_add_entities(entities)


class MagIQTouchFanOnlySwitch(MagIQTouchEntity, SwitchEntity):
    """Run the fan without heating or cooling."""

    _attr_name = "Fan only"
    _attr_icon = "mdi:fan"

    def __init__(self, coordinator: MagIQTouchDeviceCoordinator) -> None:
        super().__init__(coordinator, "fan_only")

    @property
    def is_on(self) -> bool:
        return translator.is_fan_only(self._state, self._capabilities)

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        _LOGGER.debug("%s: Enable fan only", self.entity_id)
        self._apply(translator.SetFanOnly(enabled=True))

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        _LOGGER.debug("%s: Disable fan only", self.entity_id)
        self._apply(translator.SetFanOnly(enabled=False))


class MagIQTouchManualFanSwitch(MagIQTouchEntity, SwitchEntity):
    """Hold a fixed fan speed instead of following the target temperature."""

    _attr_name = "Manual fan speed"
    _attr_icon = "mdi:fan-chevron-up"

    def __init__(self, coordinator: MagIQTouchDeviceCoordinator) -> None:
        super().__init__(coordinator, "manual_fan")

    @property
    def is_on(self) -> bool:
        return translator.is_manual_fan_override(self._state)

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        _LOGGER.debug("%s: Enable manual fan speed", self.entity_id)
        self._apply(translator.SetManualFanOverride(enabled=True))

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        _LOGGER.debug("%s: Disable manual fan speed", self.entity_id)
        self._apply(translator.SetManualFanOverride(enabled=False))
