"""OneLine runtime settings.

Values come from process environment variables first, then from the `.env`
family of files in the working directory (`.env`, `.env.local` and the
per-environment `.env.dev` / `.env.test` / `.env.prod`).

The API triple (endpoint, model, key) read here is only the *environment*
layer. Locally stored user overrides are merged in by `oneline.core.config`.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_MODEL = "gemini-2.0-flash-exp-search"


def _default_storage_dir() -> Path:
    return Path.home() / ".oneline"


class Settings(BaseSettings):
    """Environment-driven configuration of the CLI and the HTTP API.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `ONELINE_ENV`.
    log_level : LogLevelName
        Level name applied by `get_logger`; maps from `LOG_LEVEL`.
    api_endpoint : str
        Full URL of the chat-completions endpoint; maps from `ONELINE_API_ENDPOINT`.
    api_model : str
        Model name sent in every request; maps from `ONELINE_API_MODEL`.
    api_key : str
        Bearer token for the endpoint; maps from `ONELINE_API_KEY`.
    access_password : Optional[str]
        Shared secret gating the CLI/API; maps from `ONELINE_ACCESS_PASSWORD`.
    allow_user_config : bool
        Whether locally stored settings may override the environment;
        maps from `ONELINE_ALLOW_USER_CONFIG` (allowed when unset or `true`).
    storage_dir : Path
        Directory of the local key-value store; maps from `ONELINE_STORAGE_DIR`.
    request_timeout : float
        Network timeout in seconds; maps from `ONELINE_REQUEST_TIMEOUT`.
    """

    environment: EnvName = Field(default="dev", alias="ONELINE_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    api_endpoint: str = Field(default="", alias="ONELINE_API_ENDPOINT")
    api_model: str = Field(default=DEFAULT_MODEL, alias="ONELINE_API_MODEL")
    api_key: str = Field(default="", alias="ONELINE_API_KEY")
    access_password: str | None = Field(default=None, alias="ONELINE_ACCESS_PASSWORD")
    allow_user_config: bool = Field(default=True, alias="ONELINE_ALLOW_USER_CONFIG")

    storage_dir: Path = Field(default_factory=_default_storage_dir, alias="ONELINE_STORAGE_DIR")
    request_timeout: float = Field(default=60.0, gt=0, alias="ONELINE_REQUEST_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("allow_user_config", mode="before")
    @classmethod
    def _only_literal_true(cls, v: Any) -> bool:
        """Enabled only when unset or ``"true"`` (surrounding blanks ignored)."""
        if v is None:
            return True
        if isinstance(v, bool):
            return v
        return str(v).strip() == "true"

    @property
    def is_dev(self) -> bool:
        """Development mode (API server auto-reload)."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        return logging.getLevelName(self.log_level)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return the process-wide `Settings`, built on first use.

    Call `load_settings.cache_clear()` after changing the environment to
    rebuild it.
    """
    os.environ.setdefault("ONELINE_ENV", "dev")
    return Settings()


# Read once at import; code that must see later env changes calls load_settings().
settings: Settings = load_settings()


def get_logger(name: str = "oneline") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s [%(name)s] %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = ["DEFAULT_MODEL", "Settings", "get_logger", "load_settings", "settings"]
