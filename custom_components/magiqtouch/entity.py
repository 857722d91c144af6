"""Base entity for MagIQtouch devices."""

from __future__ import annotations

import logging

from homeassistant.exceptions import ServiceValidationError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .api import MagIQTouchValidationError
from .const import DOMAIN, MANUFACTURER, MODEL
from .coordinator import MagIQTouchDeviceCoordinator
from .models import Capabilities, RemoteState
from .translator import Intent

_LOGGER = logging.getLogger(__name__)


class MagIQTouchEntity(CoordinatorEntity[MagIQTouchDeviceCoordinator]):
    """Entity backed by a device coordinator's effective state."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: MagIQTouchDeviceCoordinator, key: str) -> None:
        super().__init__(coordinator)
        device = coordinator.device
        self._attr_unique_id = f"{device.id}_{key}" if key else device.id
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, device.id)},
            name=device.name,
            manufacturer=MANUFACTURER,
            model=MODEL,
            serial_number=device.id,
        )

    @property
    def available(self) -> bool:
        # Stale data is still served after a failed refresh
        return bool(self.coordinator.data)

    @property
    def _state(self) -> RemoteState:
        return self.coordinator.effective_state

    @property
    def _capabilities(self) -> Capabilities:
        return self.coordinator.capabilities

    def _apply(self, intent: Intent) -> None:
        """Submit an intent, surfacing capability errors to the caller."""
        try:
            self.coordinator.async_apply(intent)
        except MagIQTouchValidationError as err:
            _LOGGER.warning("%s: Rejected %s: %s", self.entity_id, intent, err)
            raise ServiceValidationError(str(err)) from err
