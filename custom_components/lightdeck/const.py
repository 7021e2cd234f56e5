"""Constants for the Lightdeck integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, command names and the Tuya
data point codes that unified commands are translated into.
"""

DOMAIN = "lightdeck"

CONF_CLIENT_ID = "client_id"
CONF_CLIENT_SECRET = "client_secret"
CONF_BASE_URL = "base_url"
CONF_GOVEE_API_KEY = "govee_api_key"

# Tuya data centres
TUYA_BASE_URL_US = "https://openapi.tuyaus.com"
TUYA_BASE_URL_EU = "https://openapi.tuyaeu.com"
TUYA_BASE_URL_CN = "https://openapi.tuyacn.com"
TUYA_BASE_URL_IN = "https://openapi.tuyain.com"
TUYA_BASE_URLS = [
    TUYA_BASE_URL_US,
    TUYA_BASE_URL_EU,
    TUYA_BASE_URL_CN,
    TUYA_BASE_URL_IN,
]
DEFAULT_BASE_URL = TUYA_BASE_URL_US

TUYA_TOKEN_PATH = "/v1.0/token?grant_type=1"
TUYA_DEVICES_PATH = "/v1.0/iot-03/devices"
TUYA_DEVICES_FALLBACK_PATH = "/v2.0/cloud/thing/device?page_size=20"
TUYA_DEVICE_COMMANDS_PATH = "/v1.0/iot-03/devices/{device_id}/commands"
TUYA_DEVICE_STATUS_PATH = "/v1.0/iot-03/devices/{device_id}/status"

SIGN_METHOD = "HMAC-SHA256"
# Tokens are refreshed this long before the vendor's real expiry
TOKEN_REFRESH_MARGIN_MS = 60_000

GOVEE_BASE_URL = "https://developer-api.govee.com/v1"
GOVEE_DEVICES_URL = f"{GOVEE_BASE_URL}/devices"
GOVEE_CONTROL_URL = f"{GOVEE_BASE_URL}/devices/control"
GOVEE_SCENES_URL = (
    "https://openapi.api.govee.com/router/api/v1/device/queryDynamicScene"
)
GOVEE_API_KEY_HEADER = "Govee-API-Key"

HTTP_TIMEOUT = 10.0

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

# Unified command vocabulary
CMD_TURN = "turn"
CMD_BRIGHTNESS = "brightness"
CMD_COLOR = "color"
CMD_COLOR_TEMP = "colorTemp"
CMD_SCENE = "scene"
CMD_COUNTDOWN = "countdown"

# Tuya data point codes
CODE_SWITCH = "switch_led"
CODE_WORK_MODE = "work_mode"
CODE_BRIGHTNESS = "bright_value_v2"
CODE_TEMPERATURE = "temp_value_v2"
CODE_COLOUR_DATA = "colour_data"
CODE_SCENE_DATA = "scene_data_v2"
CODE_COUNTDOWN = "countdown"

WORK_MODE_COLOUR = "colour"
WORK_MODE_WHITE = "white"

BRIGHTNESS_MIN = 10
BRIGHTNESS_MAX = 1000
TEMPERATURE_MIN = 0
TEMPERATURE_MAX = 1000

# Govee names colorTemp differently
GOVEE_COMMAND_NAME_MAP = {
    CMD_COLOR_TEMP: "colorTem",
}

MIN_COLOR_TEMP_KELVIN = 2700
MAX_COLOR_TEMP_KELVIN = 6500

ATTR_SECONDS = "seconds"
SERVICE_SET_COUNTDOWN = "set_countdown"

# Tuya product categories that are lights
TUYA_LIGHT_CATEGORIES = {"dj", "dd", "dc", "fwd", "xdd", "fsd", "tgq", "tgkg", "gyd"}
