"""API client for MagIQtouch controllers.

This module provides functions to interact with the MagIQtouch cloud API,
including authentication, device discovery, capability detection and
state reads and writes.
"""

import asyncio
import base64
import json
import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport
from pycognito.aws_srp import AWSSRP
from pycognito.exceptions import WarrantException

from .const import (
    BASE_URL,
    COGNITO_CLIENT_ID,
    COGNITO_REGION,
    COGNITO_USER_POOL_ID,
    STATE_URL,
    TOKEN_REFRESH_SKEW,
    WRITABLE_FIELDS,
)
from .models import (
    AuthSession,
    Capabilities,
    CoolingVariant,
    MagIQTouchDevice,
    RemoteState,
    cooling_range,
    heating_range,
)

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403

COGNITO_AUTH_ERRORS = (
    "NotAuthorizedException",
    "UserNotFoundException",
    "UserNotConfirmedException",
    "PasswordResetRequiredException",
)


class MagIQTouchApiClientError(Exception):
    """Base exception for MagIQtouch API client errors."""


class MagIQTouchApiAuthError(MagIQTouchApiClientError):
    """Exception raised when the credential exchange fails or is rejected."""


class MagIQTouchNetworkError(MagIQTouchApiClientError):
    """Exception raised for transport failures."""


class MagIQTouchTimeoutError(MagIQTouchNetworkError):
    """Exception raised when the service does not respond in time."""


class MagIQTouchValidationError(MagIQTouchApiClientError):
    """Exception raised when a command references an absent capability."""


def create_headers(auth_header: dict[str, str] | None = None) -> dict[str, str]:
    """Create HTTP headers for MagIQtouch API requests.

    Args:
        auth_header: Optional authorization header to merge in.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "content-type": "application/json",
        "accept": "application/json, text/plain, */*",
    }
    if auth_header:
        headers.update(auth_header)
    return headers


def create_auth_header(auth_session: AuthSession) -> dict[str, str]:
    """Create the bearer authorization header for a session."""
    return {"Authorization": f"Bearer {auth_session.token}"}


def device_url(base: str, path: str, device_id: str) -> str:
    """Build a device URL with the device id URL-escaped as a query value."""
    return f"{base}/{path}?macAddressId={quote(device_id, safe='')}"


def is_http_error(status: int) -> bool:
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def validate_response(response: httpx.Response) -> Any:  # noqa: ANN401
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response, or None for an empty body.

    Raises:
        MagIQTouchApiAuthError: If the token was rejected.
        MagIQTouchNetworkError: If the request failed.

    """
    if is_auth_error(response.status_code):
        auth_error = f"Authentication error: {response.status_code}"
        raise MagIQTouchApiAuthError(auth_error)

    if is_http_error(response.status_code):
        client_error = f"Request failed: {response.status_code}"
        raise MagIQTouchNetworkError(client_error)

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON response: {err}"
        raise MagIQTouchNetworkError(error_msg) from err


def _extract_jwt_expiry(token: str) -> float:
    """Extract the 'exp' claim of a JWT token as epoch seconds.

    Args:
        token: JWT token string.

    Returns:
        Expiration timestamp from the JWT.

    Raises:
        MagIQTouchApiAuthError: If token is malformed or missing 'exp' claim.

    """
    jwt_parts_count = 3
    base64_padding_mod = 4

    def _raise_value_error(message: str) -> None:
        raise ValueError(message)

    try:
        parts = token.split(".")
        if len(parts) != jwt_parts_count:
            error_msg = "Invalid JWT format: expected 3 parts"
            _raise_value_error(error_msg)

        payload_encoded = parts[1]
        padding = len(payload_encoded) % base64_padding_mod
        if padding:
            payload_encoded += "=" * (base64_padding_mod - padding)

        payload = json.loads(base64.urlsafe_b64decode(payload_encoded).decode("utf-8"))

        exp_timestamp = payload.get("exp")
        if exp_timestamp is None:
            error_msg = "JWT token missing 'exp' claim"
            _raise_value_error(error_msg)

        return float(exp_timestamp)

    except (ValueError, json.JSONDecodeError, KeyError, IndexError) as err:
        error_msg = f"Failed to extract expiry from JWT token: {err}"
        _LOGGER.exception(error_msg)
        raise MagIQTouchApiAuthError(error_msg) from err


def extract_auth_session(data: dict[str, Any]) -> AuthSession:
    """Extract the id token and its expiry from an InitiateAuth response."""
    try:
        token = data["AuthenticationResult"]["IdToken"]
    except (KeyError, TypeError) as err:
        error_msg = "Authentication response did not contain an id token"
        raise MagIQTouchApiAuthError(error_msg) from err
    return AuthSession(token=token, expires_at=_extract_jwt_expiry(token))


def extract_devices(data: list[dict[str, Any]] | None) -> list[MagIQTouchDevice]:
    """Extract device list from a device listing response.

    Args:
        data: API response data list.

    Returns:
        List of MagIQTouchDevice objects.

    """
    devices = []
    for record in data or []:
        device_id = str(record["MacAddressId"])
        name = record.get("Name") or record.get("DeviceName") or device_id
        devices.append(
            MagIQTouchDevice(
                id=device_id,
                name=str(name),
                metadata={k: v for k, v in record.items() if k != "MacAddressId"},
            )
        )
    return devices


def detect_capabilities(details: dict[str, Any]) -> Capabilities:
    """Derive the heating and cooling capabilities from system details.

    Cooling variants are tried in order: fixed-speed add-on cooling,
    inverter add-on cooling, then evaporative cooling. Only the first
    present variant is used.
    """
    try:
        heating = None
        if details.get("HeaterInSystem"):
            heater = details["Heater"]
            heating = heating_range(
                heater["MinimumTemperature"], heater["MaximumTemperature"]
            )

        cooling = None
        if details.get("AOCFixedInSystem"):
            cooler, variant = details["AOCFixed"], CoolingVariant.FIXED_AOC
        elif details.get("AOCInverterInSystem"):
            cooler, variant = details["AOCInverter"], CoolingVariant.INVERTER_AOC
        elif (details.get("NoOfEVAPInSystem") or 0) > 0:
            cooler, variant = details["EVAPCooler"], CoolingVariant.EVAP
        else:
            cooler, variant = None, None

        if variant is not None:
            cooling = cooling_range(
                variant, cooler["MinimumTemperature"], cooler["MaximumTemperature"]
            )
    except (KeyError, TypeError) as err:
        error_msg = f"Unexpected system details response: {err!r}"
        raise MagIQTouchNetworkError(error_msg) from err

    return Capabilities(heating=heating, cooling=cooling)


def new_state_request(state: RemoteState) -> dict[str, int | float]:
    """Build the body of a desired-state write from an effective state."""
    return {key: state[key] for key in WRITABLE_FIELDS if key in state}


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the MagIQtouch API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=10.0)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def _async_request(
    session: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,  # noqa: ANN401
) -> httpx.Response:
    """Send a request, mapping transport failures onto MagIQTouchNetworkError."""
    try:
        return await session.request(method, url, **kwargs)
    except httpx.TimeoutException as err:
        error_msg = f"Request timeout: {err}"
        raise MagIQTouchTimeoutError(error_msg) from err
    except httpx.RequestError as err:
        error_msg = f"Connection error: {err}"
        raise MagIQTouchNetworkError(error_msg) from err


def _authenticate_srp(username: str, password: str) -> dict[str, Any]:
    """Run the Cognito SRP password check. Blocks on boto3 network calls."""
    aws_srp = AWSSRP(
        username=username,
        password=password,
        pool_id=COGNITO_USER_POOL_ID,
        client_id=COGNITO_CLIENT_ID,
        pool_region=COGNITO_REGION,
    )
    return aws_srp.authenticate_user()


async def async_authenticate(username: str, password: str) -> AuthSession:
    """Exchange username and password for a bearer token.

    Args:
        username: Account username (email address).
        password: Account password.

    Returns:
        AuthSession holding the id token and its expiry.

    Raises:
        MagIQTouchApiAuthError: If the credentials are rejected.
        MagIQTouchTimeoutError: If the user pool does not respond in time.
        MagIQTouchNetworkError: If the request fails.

    """
    _LOGGER.debug("Authenticating with MagIQtouch API")
    try:
        data = await asyncio.to_thread(_authenticate_srp, username, password)
    except ClientError as err:
        error = err.response.get("Error", {})
        message = error.get("Message") or str(err)
        if error.get("Code") in COGNITO_AUTH_ERRORS:
            raise MagIQTouchApiAuthError(message) from err
        raise MagIQTouchNetworkError(message) from err
    except WarrantException as err:
        # New password or MFA challenges cannot be answered here
        error_msg = f"Sign-in requires an unsupported challenge: {err}"
        raise MagIQTouchApiAuthError(error_msg) from err
    except (ConnectTimeoutError, ReadTimeoutError) as err:
        error_msg = f"Request timeout: {err}"
        raise MagIQTouchTimeoutError(error_msg) from err
    except BotoCoreError as err:
        error_msg = f"Connection error: {err}"
        raise MagIQTouchNetworkError(error_msg) from err

    auth_session = extract_auth_session(data)
    _LOGGER.debug("Successfully authenticated with MagIQtouch API")
    return auth_session


class SessionCache:
    """Owns the bearer token shared by every API call of a config entry.

    A cached token is reused while it outlives the current time by more
    than ``skew`` seconds. Concurrent callers that find the token stale
    share a single credential exchange.
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        skew: float = TOKEN_REFRESH_SKEW,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._username = username
        self._password = password
        self._skew = skew
        self._clock = clock
        self._auth_session: AuthSession | None = None
        self._lock = asyncio.Lock()

    @property
    def auth_session(self) -> AuthSession | None:
        """Return the cached session, if any."""
        return self._auth_session

    def _valid_session(self) -> AuthSession | None:
        auth_session = self._auth_session
        if auth_session is not None and auth_session.is_valid(
            self._clock(), self._skew
        ):
            return auth_session
        return None

    async def async_get_auth_header(self) -> dict[str, str]:
        """Return an authorization header, refreshing the token if stale.

        Raises:
            MagIQTouchApiAuthError: If the credential exchange is rejected.
            MagIQTouchNetworkError: If the credential exchange fails.

        """
        if (auth_session := self._valid_session()) is not None:
            return create_auth_header(auth_session)

        async with self._lock:
            # Another caller may have refreshed while we waited
            if (auth_session := self._valid_session()) is None:
                _LOGGER.info("Refreshing authentication token")
                try:
                    auth_session = await async_authenticate(
                        self._username, self._password
                    )
                except MagIQTouchApiClientError as err:
                    _LOGGER.error("Error logging in: %s", err)
                    raise
                self._auth_session = auth_session
                _LOGGER.info("Authentication token successfully refreshed")

        return create_auth_header(auth_session)

    def invalidate(self) -> None:
        """Drop the cached token so the next call re-authenticates."""
        self._auth_session = None


class MagIQTouchApi:
    """Authenticated access to the MagIQtouch device endpoints."""

    def __init__(self, session: httpx.AsyncClient, session_cache: SessionCache) -> None:
        self._session = session
        self._session_cache = session_cache

    async def _async_get(self, url: str) -> Any:  # noqa: ANN401
        headers = create_headers(await self._session_cache.async_get_auth_header())
        response = await _async_request(self._session, "GET", url, headers=headers)
        try:
            return validate_response(response)
        except MagIQTouchApiAuthError:
            self._session_cache.invalidate()
            raise

    async def async_get_devices(self) -> list[MagIQTouchDevice]:
        """Fetch the devices registered to the account."""
        _LOGGER.debug("Fetching devices from MagIQtouch API")
        devices = extract_devices(await self._async_get(f"{BASE_URL}/loadmobiledevice"))
        _LOGGER.debug("Retrieved %d devices from MagIQtouch API", len(devices))
        return devices

    async def async_get_state(self, device_id: str) -> RemoteState:
        """Fetch the current running state of a device."""
        data = await self._async_get(
            device_url(BASE_URL, "loadsystemrunning", device_id)
        )
        if not isinstance(data, dict):
            error_msg = f"Unexpected state response for {device_id}"
            raise MagIQTouchNetworkError(error_msg)
        return data

    async def async_get_system_details(self, device_id: str) -> dict[str, Any]:
        """Fetch the hardware description of a device."""
        data = await self._async_get(
            device_url(BASE_URL, "loadsystemdetails", device_id)
        )
        if not isinstance(data, dict):
            error_msg = f"Unexpected system details response for {device_id}"
            raise MagIQTouchNetworkError(error_msg)
        return data

    async def async_detect_capabilities(self, device_id: str) -> Capabilities:
        """Fetch system details once and derive the device capabilities."""
        details = await self.async_get_system_details(device_id)
        _LOGGER.debug("System details for %s: %s", device_id, details)
        capabilities = detect_capabilities(details)
        _LOGGER.debug("Supported modes for %s: %s", device_id, capabilities)
        return capabilities

    async def async_update_state(self, device_id: str, state: RemoteState) -> None:
        """Write a full desired state to a device.

        Raises:
            MagIQTouchApiAuthError: If the token was rejected.
            MagIQTouchNetworkError: If the request fails.

        """
        request = new_state_request(state)
        _LOGGER.debug("Update state for %s: %s", device_id, request)
        headers = create_headers(await self._session_cache.async_get_auth_header())
        response = await _async_request(
            self._session,
            "PUT",
            f"{STATE_URL}/devices/{quote(device_id, safe='')}",
            headers=headers,
            json=request,
        )
        try:
            validate_response(response)
        except MagIQTouchApiAuthError:
            self._session_cache.invalidate()
            raise
