"""Configuration loaded from environment variables (and a local .env)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    webhook_url: str = ""
    host: str = "127.0.0.1"
    port: int = 3000
    allowed_origin: str = "http://localhost:8080"
    log_level: str = "INFO"

    # Forwarding
    forward_timeout: float = 10.0
    forward_attempts: int = 3
    forward_backoff: float = 1.0

    # Validation
    max_message_length: int = 1000
    max_body_bytes: int = 200 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            webhook_url=os.getenv("WEBHOOK_URL", "").strip(),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3000")),
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "http://localhost:8080"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            forward_timeout=float(os.getenv("FORWARD_TIMEOUT", "10")),
            forward_attempts=int(os.getenv("FORWARD_ATTEMPTS", "3")),
            forward_backoff=float(os.getenv("FORWARD_BACKOFF", "1.0")),
            max_message_length=int(os.getenv("MAX_MESSAGE_LENGTH", "1000")),
        )
