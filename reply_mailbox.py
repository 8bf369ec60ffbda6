"""Session-keyed reply mailbox.

The automation webhook deposits one reply per session; the widget polls and
the first poll that sees it takes it. Entries never expire on their own.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class MailboxEntry:
    session_id: str
    payload: str
    stored_at: float = field(default_factory=time.time)


class Mailbox:
    """Interface for reply stores. Swap in a shared cache for multi-instance setups."""

    def deposit(self, session_id: str, payload: str) -> None:
        raise NotImplementedError

    def retrieve(self, session_id: str) -> Optional[str]:
        raise NotImplementedError


class InMemoryMailbox(Mailbox):
    def __init__(self):
        self._entries: Dict[str, MailboxEntry] = {}
        self._lock = threading.Lock()

    def deposit(self, session_id: str, payload: str) -> None:
        if not session_id or not payload:
            raise ValidationError("sessionId and response required")
        entry = MailboxEntry(session_id=session_id, payload=payload)
        with self._lock:
            # last write wins
            self._entries[session_id] = entry
        logger.info("Response stored for session %s (%d chars)", session_id, len(payload))

    def retrieve(self, session_id: str) -> Optional[str]:
        if not session_id:
            raise ValidationError("sessionId required")
        with self._lock:
            entry = self._entries.pop(session_id, None)
        if entry is None:
            return None
        return entry.payload

    def pending(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self):
        return self.pending()
