"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for PeanechEstate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. storage_url -> STORAGE_URL).

  @model_validator(mode="after"): cross-field checks once every field is
      resolved. Negative latencies and an empty session key are rejected at
      startup rather than surfacing as odd runtime behaviour.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, listings/, or storage/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("peanech.config")

_DEFAULT_STORAGE_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'peanech_storage.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    storage_url: str = _DEFAULT_STORAGE_URL
    session_storage_key: str = "auth_user"
    # Simulated backend latency. Tests set both to 0.
    login_delay_seconds: float = 1.0
    role_update_delay_seconds: float = 0.5

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:5173", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_session(self) -> "Settings":
        """Reject settings that would break the session lifecycle."""
        if not self.session_storage_key.strip():
            raise ValueError("SESSION_STORAGE_KEY must not be empty.")
        if self.login_delay_seconds < 0 or self.role_update_delay_seconds < 0:
            raise ValueError("Simulated latency settings must be zero or positive.")
        if self.debug:
            logger.warning("DEBUG mode enabled. Session storage at %s", self.storage_url)
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
