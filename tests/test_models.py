"""Tests for MagIQtouch data models."""

import dataclasses

import pytest

from custom_components.magiqtouch.models import (
    AuthSession,
    CoolingVariant,
    MagIQTouchDevice,
    cooling_range,
    heating_range,
)


class TestCoolingVariant:
    """Tests for CoolingVariant."""

    @pytest.mark.parametrize(
        ("variant", "state_key"),
        [
            (CoolingVariant.FIXED_AOC, "FAOCRunning"),
            (CoolingVariant.INVERTER_AOC, "IAOCRunning"),
            (CoolingVariant.EVAP, "EvapCRunning"),
        ],
    )
    def test_state_key(self, variant: CoolingVariant, state_key: str) -> None:
        """Test that each variant carries its own running flag."""
        assert variant.state_key == state_key


class TestRanges:
    """Tests for the range helpers."""

    def test_heating_range_uses_heater_flag(self) -> None:
        """Test that heating is toggled through HRunning."""
        mode_range = heating_range(18, 28)
        assert (mode_range.minimum, mode_range.maximum) == (18, 28)
        assert mode_range.state_key == "HRunning"

    def test_cooling_range_keeps_variant(self) -> None:
        """Test that a cooling range records its variant and flag."""
        mode_range = cooling_range(CoolingVariant.INVERTER_AOC, 16, 31)
        assert mode_range.variant is CoolingVariant.INVERTER_AOC
        assert mode_range.state_key == "IAOCRunning"

    def test_ranges_are_immutable(self) -> None:
        """Test that capability ranges cannot be changed after detection."""
        mode_range = heating_range(18, 28)
        with pytest.raises(dataclasses.FrozenInstanceError):
            mode_range.minimum = 10  # type: ignore[misc]


class TestAuthSession:
    """Tests for AuthSession."""

    def test_is_valid_honours_skew(self) -> None:
        """Test that a token is stale once it expires within the skew."""
        session = AuthSession(token="token", expires_at=1000.0)
        assert session.is_valid(now=939.0, skew=60)
        assert not session.is_valid(now=940.0, skew=60)


class TestMagIQTouchDevice:
    """Tests for MagIQTouchDevice."""

    def test_metadata_ignored_in_equality(self) -> None:
        """Test that devices compare by identity fields only."""
        first = MagIQTouchDevice(id="a", name="A", metadata={"x": 1})
        second = MagIQTouchDevice(id="a", name="A")
        assert first == second
