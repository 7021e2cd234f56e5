from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant

from .api import TuyaApiClient, create_session_client
from .const import (
    CONF_BASE_URL,
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_GOVEE_API_KEY,
    DEFAULT_BASE_URL,
    DOMAIN,
)
from .govee import GoveeApiClient

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.LIGHT]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Lightdeck integration for entry %s", entry.entry_id)

    if CONF_CLIENT_ID not in entry.data or CONF_CLIENT_SECRET not in entry.data:
        _LOGGER.error("Missing Tuya credentials for entry %s", entry.entry_id)
        return False

    session = create_session_client(hass)
    tuya = TuyaApiClient(
        session,
        entry.data[CONF_CLIENT_ID],
        entry.data[CONF_CLIENT_SECRET],
        entry.data.get(CONF_BASE_URL, DEFAULT_BASE_URL),
    )
    govee = GoveeApiClient(session, entry.data.get(CONF_GOVEE_API_KEY))

    # Listing never raises; an empty result just means no entities
    tuya_devices = await tuya.async_list_devices()
    govee_devices = await govee.async_list_devices()
    _LOGGER.info(
        "Discovered %d Tuya and %d Govee devices for entry %s",
        len(tuya_devices),
        len(govee_devices),
        entry.entry_id,
    )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "tuya": tuya,
        "govee": govee,
        "tuya_devices": tuya_devices,
        "govee_devices": govee_devices,
    }

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info(
            "Successfully setup Lightdeck integration for entry %s", entry.entry_id
        )
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Lightdeck integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
    else:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)

    return unload_ok
