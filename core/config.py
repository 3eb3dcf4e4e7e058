"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for AuthLog happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. authlog_enabled -> AUTHLOG_ENABLED). Type coercion is built in, so
      AUTHLOG_ENABLED=false arrives as a real bool.

  Explicit injection: the audit listener receives a Settings instance at
      construction and reads the three authlog_* values once per event. Tests
      build their own Settings(...) instead of touching the process env.

Layer rule: core/ is the kernel. This module may not import from auth/ or
authlog/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("authlog.config")

_DATA_DIR = Path(__file__).resolve().parent.parent


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
    # Audit log
    # ------------------------------------------------------------------

    # Master switch for the authentication_logs table writes.
    authlog_enabled: bool = True
    # Independent switch for mirroring each event to the log channel.
    authlog_enable_channel: bool = True
    # Logger name the mirror writes to. Route it with ordinary logging config.
    authlog_channel: str = "security"
    authlog_db_url: str = f"sqlite:///{_DATA_DIR / 'authlog.db'}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    auth_db_url: str = f"sqlite:///{_DATA_DIR / 'authlog_users.db'}"
    # Failed attempts allowed per identity before Lockout fires.
    login_max_attempts: int = 5
    login_decay_seconds: int = 60

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("authlog_channel")
    @classmethod
    def validate_channel(cls, value: str) -> str:
        """Reject a blank channel name.

        logging.getLogger("") is the root logger, which would silently route
        audit warnings into every handler the host application configured.
        """
        value = value.strip()
        if not value:
            raise ValueError("AUTHLOG_CHANNEL must be a non-empty logger name.")
        return value

    @field_validator("login_max_attempts", "login_decay_seconds")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Login throttle settings must be positive integers.")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    settings = Settings()
    logger.debug(
        "Settings loaded (authlog_enabled=%s, authlog_enable_channel=%s, channel=%r)",
        settings.authlog_enabled,
        settings.authlog_enable_channel,
        settings.authlog_channel,
    )
    return settings
