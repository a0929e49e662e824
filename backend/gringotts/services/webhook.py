"""Outbound webhooks notifying projects about subscription changes."""
import logging

import httpx

from gringotts.config import get_settings

logger = logging.getLogger(__name__)


def trigger_webhook(url: str | None, body: dict, token: str) -> bool:
    """POST ``body`` to a project's webhook URL.

    Returns True if the project acknowledged with a 2xx response. Failures are
    logged; the payment that caused the webhook is already persisted.
    """
    if not url:
        logger.debug("No webhook configured, skipping")
        return False

    settings = get_settings()
    try:
        response = httpx.post(
            url,
            json=body,
            headers={"Authorization": f"Bearer {token}"},
            timeout=settings.webhook_timeout_seconds,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Webhook to {url} failed: {e}")
        return False

    return True
