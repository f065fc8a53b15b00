"""
FastAPI dependencies: settings, local store, and the access-password gate.

Tests replace :func:`get_settings` / :func:`get_store` through
``app.dependency_overrides`` instead of touching process environment.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from oneline.core.config import require_access
from oneline.core.settings import Settings, load_settings
from oneline.core.storage import KeyValueStore

PASSWORD_HEADER = "X-Access-Password"


def get_settings() -> Settings:
    return load_settings()


def get_store(settings: Annotated[Settings, Depends(get_settings)]) -> KeyValueStore:
    return KeyValueStore.from_settings(settings)


def check_access(
    settings: Annotated[Settings, Depends(get_settings)],
    x_access_password: Annotated[str | None, Header(alias=PASSWORD_HEADER)] = None,
) -> None:
    """Raise :class:`AccessDenied` (mapped to 401) on a wrong or missing password."""
    require_access(settings, x_access_password)


SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[KeyValueStore, Depends(get_store)]

__all__ = ["PASSWORD_HEADER", "SettingsDep", "StoreDep", "check_access", "get_settings", "get_store"]
