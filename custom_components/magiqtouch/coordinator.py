"""Coordinator for the MagIQtouch integration."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .const import DEFAULT_POLL_INTERVAL, DOMAIN
from .models import Capabilities, MagIQTouchDevice, RemoteState
from .translator import Intent, apply_intent

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class MagIQTouchDeviceCoordinator(DataUpdateCoordinator[RemoteState]):
    """Reconciles the polled state of one device with local changes.

    ``data`` holds the last snapshot fetched from the device. Fields set by
    commands are kept in a pending overlay until the next successful
    refresh replaces the snapshot, so reads reflect local intent straight
    away.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry | None,
        client: api.MagIQTouchApi,
        device: MagIQTouchDevice,
        capabilities: Capabilities,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{device.id}",
            update_interval=timedelta(seconds=DEFAULT_POLL_INTERVAL),
        )
        self.client = client
        self.device = device
        self.capabilities = capabilities
        self.data = {}
        self._pending: RemoteState = {}
        self._write_lock = asyncio.Lock()
        self._write_tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> RemoteState:
        """Return a copy of the fields set locally since the last refresh."""
        return dict(self._pending)

    @property
    def effective_state(self) -> RemoteState:
        """Return the snapshot with pending local changes applied on top."""
        return {**(self.data or {}), **self._pending}

    async def _async_update_data(self) -> RemoteState:
        """Fetch a fresh snapshot and discard the pending overlay."""
        try:
            snapshot = await self.client.async_get_state(self.device.id)
        except api.MagIQTouchApiAuthError as err:
            _LOGGER.exception("Authentication error fetching state of %s", self.name)
            error_msg = f"Authentication error while polling {self.device.id}: {err}"
            raise UpdateFailed(error_msg) from err
        except api.MagIQTouchApiClientError as err:
            _LOGGER.exception("Error fetching current state of %s", self.name)
            error_msg = f"Error while polling {self.device.id}: {err}"
            raise UpdateFailed(error_msg) from err

        if self._pending:
            _LOGGER.debug(
                "%s: Discarding pending fields %s", self.device.id, self._pending
            )
        # No await between clearing and returning: the snapshot is installed
        # in the same step
        self._pending = {}
        return snapshot

    @callback
    def async_submit(self, delta: RemoteState) -> asyncio.Task[None] | None:
        """Record local changes and write the effective state to the device.

        The overlay is updated before returning, the write runs in the
        background. Write failures are logged and never reach the caller;
        the next successful refresh reconciles any divergence.
        """
        if not delta:
            return None

        self._pending.update(delta)
        state = self.effective_state
        self.async_update_listeners()

        write = self._async_write_state(state)
        if self.config_entry is not None:
            task = self.config_entry.async_create_background_task(
                self.hass, write, f"{self.name} state write"
            )
        else:
            task = asyncio.create_task(write)
        self._write_tasks.add(task)
        task.add_done_callback(self._write_tasks.discard)
        return task

    @callback
    def async_apply(self, intent: Intent) -> asyncio.Task[None] | None:
        """Translate an intent against the effective state and submit it.

        Raises:
            MagIQTouchValidationError: If the intent needs an absent capability.

        """
        delta = apply_intent(intent, self.effective_state, self.capabilities)
        return self.async_submit(delta)

    async def _async_write_state(self, state: RemoteState) -> None:
        # Writes are sent in submission order
        async with self._write_lock:
            try:
                await self.client.async_update_state(self.device.id, state)
            except api.MagIQTouchApiClientError:
                _LOGGER.exception("Error updating state of %s", self.device.id)
            except Exception:
                _LOGGER.exception(
                    "Unexpected error updating state of %s", self.device.id
                )

    async def async_wait_for_writes(self) -> None:
        """Wait until every submitted write has finished."""
        if self._write_tasks:
            await asyncio.gather(*self._write_tasks)

    async def async_shutdown(self) -> None:
        """Stop polling and let in-flight writes finish."""
        await super().async_shutdown()
        await self.async_wait_for_writes()
