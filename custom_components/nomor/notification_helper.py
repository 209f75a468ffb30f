# File: notification_helper.py
"""Sends user-facing notifications for the Nomor integration.

Uses a configured notify service (e.g. "mobile_app_phone" or "notify.family")
when one is set; otherwise falls back to a persistent notification in the
Home Assistant UI. Notification failures never propagate: they run from
background tasks and timer callbacks.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components import persistent_notification
from homeassistant.core import HomeAssistant

from . import const

NOTIFY_DOMAIN = "notify"


async def async_send_notification(
    hass: HomeAssistant,
    notify_service: str | None,
    message: str,
    title: str = const.NOTIFY_TITLE,
    notification_id: str | None = None,
) -> None:
    """Send a notification through notify_service or as a persistent notification.

    Args:
        hass: Home Assistant instance
        notify_service: "<service>" or "<domain>.<service>"; empty for persistent
        message: Notification body
        title: Notification title
        notification_id: Suffix for the persistent notification id, so a newer
            message of the same kind replaces the older one
    """
    if not notify_service:
        persistent_notification.async_create(
            hass,
            message,
            title=title,
            notification_id=(
                f"{const.NOTIFICATION_ID_PREFIX}{notification_id}"
                if notification_id
                else None
            ),
        )
        return

    if "." not in notify_service:
        domain, service = NOTIFY_DOMAIN, notify_service
    else:
        domain, service = notify_service.split(".", 1)

    if not hass.services.has_service(domain, service):
        const.LOGGER.warning(
            "Notification service '%s.%s' not available, skipping notification",
            domain,
            service,
        )
        return

    payload: dict[str, Any] = {"title": title, "message": message}
    try:
        await hass.services.async_call(domain, service, payload, blocking=True)
        const.LOGGER.debug("Notification sent via '%s.%s'", domain, service)
    except Exception as err:  # pylint: disable=broad-exception-caught
        # Runs from fire-and-forget tasks; an exception here has no caller
        const.LOGGER.error(
            "Unexpected error sending notification via '%s.%s': %s",
            domain,
            service,
            err,
        )
