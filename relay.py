"""Inbound relay: validate a widget message and forward it to the webhook."""
import logging
import time
from typing import Callable, Optional

import httpx

from config import Settings
from errors import ConfigurationError, UpstreamForwardError, ValidationError

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("sessionId", "name", "phone", "page")


# ----------------------------
# Validation / sanitization
# ----------------------------
def _clean(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def sanitize_message(data, max_length: int = 1000) -> dict:
    """Return the outbound copy of a client submission or raise ValidationError."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Message is required")
    if len(message) > max_length:
        raise ValidationError("Message too long")

    utm = data.get("utm")
    if utm is None:
        utm = {}
    elif not isinstance(utm, dict):
        raise ValidationError("utm must be an object")

    payload = {field: _clean(data.get(field)) for field in OPTIONAL_FIELDS}
    payload["message"] = message.strip()
    payload["utm"] = utm
    return payload


# ----------------------------
# Forwarding
# ----------------------------
class WebhookRelay:
    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.settings = settings
        self.client = client or httpx.Client(follow_redirects=True)
        self.sleep = sleep

    def submit(self, data) -> bool:
        payload = sanitize_message(data, self.settings.max_message_length)
        return self.forward(payload)

    def forward(self, payload: dict) -> bool:
        url = self.settings.webhook_url
        if not url:
            logger.error("WEBHOOK_URL not configured")
            raise ConfigurationError("WEBHOOK_URL not configured")

        attempts = self.settings.forward_attempts
        for attempt in range(1, attempts + 1):
            if self._attempt(url, payload, attempt):
                logger.info("Message forwarded successfully for session %s", payload.get("sessionId", ""))
                return True
            if attempt < attempts:
                # linear: 1s, 2s, ...
                self.sleep(self.settings.forward_backoff * attempt)

        raise UpstreamForwardError()

    def _attempt(self, url: str, payload: dict, attempt: int) -> bool:
        try:
            res = self.client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.forward_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("Attempt %d failed: %s", attempt, e.__class__.__name__)
            return False

        if res.is_success:
            return True
        logger.warning("Attempt %d failed: webhook returned %d", attempt, res.status_code)
        return False

    def close(self):
        self.client.close()
