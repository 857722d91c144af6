from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME, Platform
from homeassistant.core import HomeAssistant

from . import api
from .api import MagIQTouchApi, SessionCache, create_session_client
from .const import DOMAIN
from .coordinator import MagIQTouchDeviceCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE, Platform.NUMBER, Platform.SWITCH]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up MagIQtouch integration for entry %s", entry.entry_id)

    if CONF_USERNAME not in entry.data or CONF_PASSWORD not in entry.data:
        _LOGGER.error("Missing credentials in configuration for entry %s", entry.entry_id)
        return False

    session = create_session_client(hass)
    session_cache = SessionCache(entry.data[CONF_USERNAME], entry.data[CONF_PASSWORD])
    client = MagIQTouchApi(session, session_cache)

    coordinators: dict[str, MagIQTouchDeviceCoordinator] = {}
    try:
        devices = await client.async_get_devices()
        _LOGGER.info("Successfully retrieved %d devices from MagIQtouch API", len(devices))
        for device in devices:
            capabilities = await client.async_detect_capabilities(device.id)
            coordinators[device.id] = MagIQTouchDeviceCoordinator(
                hass, entry, client, device, capabilities
            )
    except api.MagIQTouchApiAuthError as err:
        _LOGGER.warning(
            "Authentication failed for entry %s: %s", entry.entry_id, str(err)
        )
        return False
    except api.MagIQTouchApiClientError as err:
        _LOGGER.error("API client error for entry %s: %s", entry.entry_id, str(err))
        return False

    for coordinator in coordinators.values():
        await coordinator.async_refresh()
        if not coordinator.last_update_success:
            _LOGGER.warning(
                "Initial state of %s unavailable, retrying on next poll",
                coordinator.device.id,
            )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "client": client,
        "coordinators": coordinators,
    }
    _LOGGER.debug("Stored data for entry %s: %d devices", entry.entry_id, len(coordinators))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.info("Successfully setup MagIQtouch integration for entry %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading MagIQtouch integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        for coordinator in entry_data["coordinators"].values():
            await coordinator.async_shutdown()
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    _LOGGER.info("Successfully unloaded MagIQtouch integration for entry %s", entry.entry_id)
    return True
