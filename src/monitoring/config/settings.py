"""
Configuration settings for the project monitoring engine.
Reads platform connection details from the environment (.env supported).
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import dotenv_values, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def load_environment() -> None:
    """Load `.env`, then fill still-missing keys from `.env.example`.

    Blank placeholders in `.env.example` never override real values.
    """
    load_dotenv(override=False)
    example_path = os.path.abspath(".env.example")
    if not os.path.exists(example_path):
        return
    for k, v in (dotenv_values(example_path) or {}).items():
        if not k or not v:
            continue
        if not os.environ.get(k):
            os.environ[k] = v


@dataclass(frozen=True, slots=True)
class D2Settings:
    """Connection settings for the platform API."""

    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def api_url(self) -> str:
        base = self.base_url.rstrip("/")
        return base if base.endswith("/api") else f"{base}/api"

    @property
    def auth(self) -> Optional[tuple[str, str]]:
        if self.username and self.password:
            return self.username, self.password
        return None

    @classmethod
    def from_env(cls) -> "D2Settings":
        load_environment()
        base_url = os.environ.get("D2_BASE_URL")
        if not base_url:
            raise ValueError("Missing D2_BASE_URL")

        timeout_seconds = float(
            os.environ.get("D2_HTTP_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        )
        settings = cls(
            base_url=base_url,
            username=os.environ.get("D2_USERNAME") or None,
            password=os.environ.get("D2_PASSWORD") or None,
            timeout_seconds=timeout_seconds,
        )
        logger.info(
            "D2 settings loaded - URL: %s, user: %s", settings.api_url, settings.username
        )
        return settings
