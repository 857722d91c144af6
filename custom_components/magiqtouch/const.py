"""Constants for the MagIQtouch integration.

This module contains the constants used throughout the integration,
including API endpoints, configuration keys and remote field names.
"""

DOMAIN = "magiqtouch"

MANUFACTURER = "Seeley International"
MODEL = "MagIQtouch Next Generation Controller"

BASE_URL = "https://57uh36mbv1.execute-api.ap-southeast-2.amazonaws.com/api"
STATE_URL = "https://tgjgb3bcf3.execute-api.ap-southeast-2.amazonaws.com/prod/v1"

COGNITO_REGION = "ap-southeast-2"
COGNITO_USER_POOL_ID = "ap-southeast-2_uw5VVNlib"
COGNITO_CLIENT_ID = "6e1lu9fchv82uefiarsp0290v9"

DEFAULT_POLL_INTERVAL = 5  # Seconds between state refreshes per device
TOKEN_REFRESH_SKEW = 60  # Seconds before expiry a token is treated as stale

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

# Remote state fields
FIELD_SYSTEM_ON = "SystemOn"
FIELD_HEATER_RUNNING = "HRunning"
FIELD_EVAP_RUNNING = "EvapCRunning"
FIELD_FIXED_AOC_RUNNING = "FAOCRunning"
FIELD_INVERTER_AOC_RUNNING = "IAOCRunning"
FIELD_HEATER_FAN_ONLY = "HFanOnly"
FIELD_COOLER_FAN_ONLY = "CFanOnlyOrCool"
FIELD_FAN_OR_TEMP_CONTROL = "FanOrTempControl"
FIELD_COOLER_FAN_SPEED = "CFanSpeed"
FIELD_HEATER_FAN_SPEED = "HFanSpeed"
FIELD_COOLER_TEMP = "CTemp"
FIELD_HEATER_TEMP = "HTemp"
FIELD_INTERNAL_TEMP = "InternalTemp"

# FanOrTempControl values
CONTROL_FAN = 0
CONTROL_TEMPERATURE = 1

COOLING_RUNNING_FIELDS = (
    FIELD_EVAP_RUNNING,
    FIELD_FIXED_AOC_RUNNING,
    FIELD_INVERTER_AOC_RUNNING,
)
FAN_ONLY_FIELDS = (FIELD_HEATER_FAN_ONLY, FIELD_COOLER_FAN_ONLY)

# Fields the controller accepts in a desired-state write
WRITABLE_FIELDS = (
    FIELD_SYSTEM_ON,
    FIELD_HEATER_RUNNING,
    *COOLING_RUNNING_FIELDS,
    *FAN_ONLY_FIELDS,
    FIELD_FAN_OR_TEMP_CONTROL,
    FIELD_COOLER_FAN_SPEED,
    FIELD_HEATER_FAN_SPEED,
    FIELD_COOLER_TEMP,
    FIELD_HEATER_TEMP,
)

FAN_SPEED_MIN = 0
FAN_SPEED_MAX = 100
FAN_SPEED_STEP = 10
TEMPERATURE_STEP = 1
