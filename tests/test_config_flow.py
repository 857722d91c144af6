"""Tests for the MagIQtouch Config Flow."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.data_entry_flow import FlowResultType

from custom_components.magiqtouch import api
from custom_components.magiqtouch.config_flow import MagIQTouchConfigFlow
from custom_components.magiqtouch.const import (
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)
from custom_components.magiqtouch.models import AuthSession

AUTHENTICATE = "custom_components.magiqtouch.config_flow.api.async_authenticate"


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def flow(mock_hass: Mock) -> MagIQTouchConfigFlow:
    """Create a MagIQTouchConfigFlow instance for testing."""
    flow_instance = MagIQTouchConfigFlow()
    flow_instance.hass = mock_hass
    flow_instance.async_set_unique_id = AsyncMock()
    flow_instance._abort_if_unique_id_configured = Mock()
    flow_instance.async_create_entry = Mock(
        return_value={"type": FlowResultType.CREATE_ENTRY},
    )
    flow_instance.async_show_form = Mock(return_value={"type": FlowResultType.FORM})
    return flow_instance


@pytest.fixture
def user_input() -> dict[str, str]:
    """Return valid credentials as entered in the form."""
    return {CONF_USERNAME: "user@example.com", CONF_PASSWORD: "password123"}


@pytest.fixture
def auth_session() -> AuthSession:
    """Return a session as returned by a successful sign-in."""
    return AuthSession(token="id-token", expires_at=1_700_003_600.0)


class TestMagIQTouchConfigFlowAsyncStepUser:
    """Tests for async_step_user method."""

    @pytest.mark.asyncio
    async def test_async_step_user_shows_form_when_no_input(
        self,
        flow: MagIQTouchConfigFlow,
    ) -> None:
        """Test that async_step_user shows form when no input provided."""
        result = await flow.async_step_user()
        flow.async_show_form.assert_called_once()
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_async_step_user_shows_form_with_schema(
        self,
        flow: MagIQTouchConfigFlow,
    ) -> None:
        """Test that the form asks for a username and password."""
        await flow.async_step_user()
        call_args = flow.async_show_form.call_args
        assert call_args[1]["step_id"] == "user"
        schema = call_args[1]["data_schema"]
        assert {str(key) for key in schema.schema} == {CONF_USERNAME, CONF_PASSWORD}

    @pytest.mark.asyncio
    async def test_async_step_user_creates_entry_on_successful_auth(
        self,
        flow: MagIQTouchConfigFlow,
        user_input: dict[str, str],
        auth_session: AuthSession,
    ) -> None:
        """Test that only the credentials are stored on success."""
        with patch(AUTHENTICATE, return_value=auth_session) as mock_authenticate:
            result = await flow.async_step_user(user_input)

        mock_authenticate.assert_awaited_once_with("user@example.com", "password123")
        flow._abort_if_unique_id_configured.assert_called_once()
        call_args = flow.async_create_entry.call_args
        assert call_args[1]["title"] == "MagIQtouch (user@example.com)"
        assert call_args[1]["data"] == user_input
        assert result["type"] == FlowResultType.CREATE_ENTRY

    @pytest.mark.asyncio
    async def test_async_step_user_lowercases_username_for_unique_id(
        self,
        flow: MagIQTouchConfigFlow,
        auth_session: AuthSession,
    ) -> None:
        """Test that async_step_user lowercases the username for the unique ID."""
        user_input = {CONF_USERNAME: "User@Example.COM", CONF_PASSWORD: "password123"}
        with patch(AUTHENTICATE, return_value=auth_session):
            await flow.async_step_user(user_input)
        flow.async_set_unique_id.assert_called_once_with("user@example.com")

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (api.MagIQTouchApiAuthError("Bad credentials"), ERROR_INVALID_AUTH),
            (api.MagIQTouchTimeoutError("Request timeout"), ERROR_TIMEOUT),
            (api.MagIQTouchNetworkError("Connection error"), ERROR_CANNOT_CONNECT),
            (api.MagIQTouchApiClientError("API error"), ERROR_API_ERROR),
            (ValueError("Unexpected error"), ERROR_UNKNOWN),
        ],
    )
    @pytest.mark.asyncio
    async def test_async_step_user_shows_error(
        self,
        flow: MagIQTouchConfigFlow,
        user_input: dict[str, str],
        error: Exception,
        expected: str,
    ) -> None:
        """Test that each failure maps to its form error."""
        with patch(AUTHENTICATE, side_effect=error):
            result = await flow.async_step_user(user_input)

        flow.async_create_entry.assert_not_called()
        call_args = flow.async_show_form.call_args
        assert call_args[1]["errors"]["base"] == expected
        assert result["type"] == FlowResultType.FORM
