"""
Configuration flow for the Lightdeck integration.

This module collects the Tuya cloud project credentials (and an optional
Govee API key) and validates them by requesting a Tuya access token.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    CONF_BASE_URL,
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_GOVEE_API_KEY,
    DEFAULT_BASE_URL,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    TUYA_BASE_URLS,
)

_LOGGER = logging.getLogger(__name__)


class LightdeckConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for the Lightdeck integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input containing Tuya credentials and the
                optional Govee API key.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            client_id = user_input[CONF_CLIENT_ID].strip()
            client_secret = user_input[CONF_CLIENT_SECRET].strip()
            base_url = user_input.get(CONF_BASE_URL, DEFAULT_BASE_URL)

            try:
                session = get_async_client(self.hass)
                client = api.TuyaApiClient(session, client_id, client_secret, base_url)
                await client.async_ensure_token()
                _LOGGER.info("Successfully authenticated with Tuya API")

            except api.TuyaApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except api.LightdeckConfigurationError as err:
                _LOGGER.warning("Missing credentials (%s): %s", ERROR_INVALID_AUTH, err)
                errors["base"] = ERROR_INVALID_AUTH
            except api.LightdeckTransportError as err:
                if isinstance(err.__cause__, httpx.TimeoutException):
                    _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                    errors["base"] = ERROR_TIMEOUT
                else:
                    _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                    errors["base"] = ERROR_CANNOT_CONNECT
            except api.LightdeckApiError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during authentication (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(client_id)
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Lightdeck ({client_id})",
                    data={
                        CONF_CLIENT_ID: client_id,
                        CONF_CLIENT_SECRET: client_secret,
                        CONF_BASE_URL: base_url,
                        CONF_GOVEE_API_KEY: user_input.get(CONF_GOVEE_API_KEY, ""),
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_CLIENT_ID): str,
                    vol.Required(CONF_CLIENT_SECRET): str,
                    vol.Required(CONF_BASE_URL, default=DEFAULT_BASE_URL): vol.In(
                        TUYA_BASE_URLS
                    ),
                    vol.Optional(CONF_GOVEE_API_KEY, default=""): str,
                }
            ),
            errors=errors,
        )
