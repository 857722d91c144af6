"""Pytest configuration and fixtures for MagIQtouch tests."""

import base64
import json
import time
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.magiqtouch import api
from custom_components.magiqtouch.coordinator import MagIQTouchDeviceCoordinator
from custom_components.magiqtouch.models import (
    Capabilities,
    CoolingVariant,
    MagIQTouchDevice,
    cooling_range,
    heating_range,
)

DEVICE_ID = "00:11:22:33:44:55"


def create_test_jwt(exp_timestamp: int | None = None) -> str:
    """Create a test JWT token with optional expiration timestamp.

    Args:
        exp_timestamp: Optional expiration timestamp. If None, defaults to
            1 hour from now.

    Returns:
        A JWT token string with header, payload, and signature.

    """
    if exp_timestamp is None:
        exp_timestamp = int(time.time()) + 3600

    header = {"alg": "RS256", "typ": "JWT"}
    payload = {"exp": exp_timestamp, "sub": "test_user"}

    header_encoded = (
        base64.urlsafe_b64encode(json.dumps(header).encode()).decode().rstrip("=")
    )
    payload_encoded = (
        base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip("=")
    )

    return f"{header_encoded}.{payload_encoded}.signature"


@pytest.fixture
def make_jwt() -> Callable[[int | None], str]:
    """Fixture providing the JWT builder."""
    return create_test_jwt


@pytest.fixture
def sample_id_token() -> str:
    """Fixture providing an id token that expires in one hour."""
    return create_test_jwt()


@pytest.fixture
def sample_authenticate_response(sample_id_token: str) -> dict[str, Any]:
    """Fixture providing a Cognito InitiateAuth response."""
    return {
        "AuthenticationResult": {
            "AccessToken": "access",
            "ExpiresIn": 3600,
            "IdToken": sample_id_token,
            "RefreshToken": "refresh",
            "TokenType": "Bearer",
        },
        "ChallengeParameters": {},
    }


@pytest.fixture
def sample_devices_response() -> list[dict[str, Any]]:
    """Fixture providing a device listing response."""
    return [
        {"MacAddressId": DEVICE_ID, "Name": "Living room"},
        {"MacAddressId": "66:77:88:99:AA:BB"},
    ]


@pytest.fixture
def sample_state() -> dict[str, Any]:
    """Fixture providing a running-state snapshot of an evaporative cooler."""
    return {
        "MacAddressId": DEVICE_ID,
        "SystemOn": 1,
        "HRunning": 0,
        "EvapCRunning": 1,
        "FAOCRunning": 0,
        "IAOCRunning": 0,
        "HFanOnly": 0,
        "CFanOnlyOrCool": 0,
        "FanOrTempControl": 1,
        "CFanSpeed": 0,
        "HFanSpeed": 0,
        "CTemp": 24,
        "HTemp": 21,
        "InternalTemp": 26,
    }


def _system_details(
    *,
    heater: bool = False,
    fixed_aoc: bool = False,
    inverter_aoc: bool = False,
    evap_count: int = 0,
) -> dict[str, Any]:
    """Build a system details record with the requested hardware."""
    return {
        "HeaterInSystem": 1 if heater else 0,
        "AOCFixedInSystem": 1 if fixed_aoc else 0,
        "AOCInverterInSystem": 1 if inverter_aoc else 0,
        "NoOfEVAPInSystem": evap_count,
        "Heater": {"MinimumTemperature": 18, "MaximumTemperature": 28},
        "AOCFixed": {"MinimumTemperature": 17, "MaximumTemperature": 30},
        "AOCInverter": {"MinimumTemperature": 16, "MaximumTemperature": 31},
        "EVAPCooler": {"MinimumTemperature": 19, "MaximumTemperature": 28},
    }


@pytest.fixture
def make_system_details() -> Callable[..., dict[str, Any]]:
    """Fixture providing a system details record builder."""
    return _system_details


@pytest.fixture
def device() -> MagIQTouchDevice:
    """Fixture providing a MagIQtouch device."""
    return MagIQTouchDevice(id=DEVICE_ID, name="Living room")


@pytest.fixture
def evap_only() -> Capabilities:
    """Fixture for a device with evaporative cooling and no heater."""
    return Capabilities(cooling=cooling_range(CoolingVariant.EVAP, 19, 28))


@pytest.fixture
def heat_and_cool() -> Capabilities:
    """Fixture for a device with a heater and inverter cooling."""
    return Capabilities(
        heating=heating_range(18, 28),
        cooling=cooling_range(CoolingVariant.INVERTER_AOC, 16, 31),
    )


@pytest.fixture
def make_coordinator(
    device: MagIQTouchDevice,
) -> Callable[[Capabilities, dict[str, Any]], MagIQTouchDeviceCoordinator]:
    """Fixture building a coordinator already holding a snapshot."""

    def _make(
        capabilities: Capabilities, state: dict[str, Any]
    ) -> MagIQTouchDeviceCoordinator:
        client = Mock(spec=api.MagIQTouchApi)
        client.async_update_state = AsyncMock()
        coordinator = MagIQTouchDeviceCoordinator(
            Mock(), None, client, device, capabilities
        )
        coordinator.data = dict(state)
        return coordinator

    return _make
