"""Client-side reply polling with a deadline.

Mirrors what the widget does in the browser: poll /api/response, take the
reply if one is waiting, otherwise back off and try again until the deadline.
"""
import logging
import threading
import time
from typing import Callable, Optional

import httpx

logger = logging.getLogger(__name__)


def wait_for_reply(base_url: str, session_id: str, *, timeout: float = 60.0,
                   interval: float = 1.0, max_interval: float = 5.0,
                   client: Optional[httpx.Client] = None,
                   sleep: Optional[Callable[[float], None]] = None,
                   clock: Callable[[], float] = time.monotonic,
                   cancel: Optional[threading.Event] = None) -> Optional[str]:
    """Return the reply for `session_id`, or None on timeout / cancel."""
    if sleep is None:
        # an Event wait wakes up as soon as cancel is set
        sleep = cancel.wait if cancel is not None else time.sleep
    own_client = client is None
    client = client or httpx.Client(timeout=10)
    url = f"{base_url.rstrip('/')}/api/response"
    deadline = clock() + timeout
    delay = interval

    try:
        while True:
            if cancel is not None and cancel.is_set():
                return None
            try:
                res = client.get(url, params={"sessionId": session_id})
                res.raise_for_status()
                data = res.json()
                if not isinstance(data, dict):
                    raise ValueError(f"unexpected response body: {type(data).__name__}")
                message = data.get("message")
                if message is not None:
                    return message
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Poll for session %s failed: %s", session_id, e)

            remaining = deadline - clock()
            if remaining <= 0:
                return None
            sleep(min(delay, remaining))
            delay = min(delay * 1.5, max_interval)
    finally:
        if own_client:
            client.close()
