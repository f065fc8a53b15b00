"""Resolved API configuration and the shared-secret access check.

Layering
--------
1. Environment (``Settings.api_endpoint`` / ``api_model`` / ``api_key``).
2. Locally stored user configuration (key :data:`API_CONFIG_KEY`).
3. Explicit per-call overrides (CLI flags, request bodies).

Layers 2 and 3 only apply when ``Settings.allow_user_config`` is true; each
non-empty field replaces the one below it. Core functions never read any of
this themselves: they receive the resolved :class:`ApiConfig`.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from oneline.core.settings import Settings
from oneline.core.storage import KeyValueStore

#: Storage key of the user-entered API configuration.
API_CONFIG_KEY = "oneLine_apiConfig"

_FIELDS = ("endpoint", "model", "api_key")


class ConfigurationError(ValueError):
    """Raised when a request needs an endpoint/key that is not configured."""


class AccessDenied(PermissionError):
    """Raised when the configured access password does not match."""


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """The ``{endpoint, model, api_key}`` triple handed to the transport."""

    endpoint: str = ""
    model: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)

    def merged(self, overrides: Mapping[str, Any] | None) -> ApiConfig:
        """Return a copy where every non-empty override replaces the field.

        A key is only ever sent to the endpoint it was configured with: an
        override that moves ``endpoint`` without supplying ``api_key`` clears
        the key, so :meth:`require` fails instead.
        """
        if not overrides:
            return self
        changes = {
            field: str(overrides[field]).strip()
            for field in _FIELDS
            if overrides.get(field) and str(overrides[field]).strip()
        }
        if changes.get("endpoint", self.endpoint) != self.endpoint and "api_key" not in changes:
            changes["api_key"] = ""
        return replace(self, **changes) if changes else self

    def require(self) -> ApiConfig:
        """Return ``self`` or raise :class:`ConfigurationError` if incomplete."""
        missing = [name for name in ("endpoint", "api_key") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"API configuration incomplete; missing: {', '.join(missing)}")
        return self

    def masked(self) -> dict[str, str]:
        """Return a display-safe dict with the key shortened."""
        key = f"{self.api_key[:8]}..." if self.api_key else ""
        return {"endpoint": self.endpoint, "model": self.model, "api_key": key}


def env_api_config(settings: Settings) -> ApiConfig:
    """Return the environment layer of the API configuration."""
    return ApiConfig(
        endpoint=settings.api_endpoint.strip(),
        model=settings.api_model.strip(),
        api_key=settings.api_key.strip(),
    )


def _stored_overrides(store: KeyValueStore | None) -> Mapping[str, Any] | None:
    if store is None:
        return None
    stored = store.get(API_CONFIG_KEY)
    return stored if isinstance(stored, Mapping) else None


def resolve_api_config(
    settings: Settings,
    store: KeyValueStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ApiConfig:
    """Merge environment, stored and explicit configuration into one value."""
    config = env_api_config(settings)
    if not settings.allow_user_config:
        return config
    return config.merged(_stored_overrides(store)).merged(overrides)


def save_user_api_config(
    settings: Settings,
    store: KeyValueStore,
    **fields: str | None,
) -> dict[str, str]:
    """Merge ``fields`` into the stored user configuration and return it.

    Raises
    ------
    ConfigurationError
        If user configuration is disabled by the environment.
    """
    if not settings.allow_user_config:
        raise ConfigurationError("User configuration is disabled (ONELINE_ALLOW_USER_CONFIG)")

    unknown = set(fields) - set(_FIELDS)
    if unknown:
        raise ConfigurationError(f"Unknown API config field(s): {', '.join(sorted(unknown))}")

    current = dict(_stored_overrides(store) or {})
    for name, value in fields.items():
        if value is not None:
            current[name] = value.strip()
    store.put(API_CONFIG_KEY, current)
    return current


def clear_user_api_config(settings: Settings, store: KeyValueStore) -> bool:
    """Delete the stored user configuration; refused when user config is disabled."""
    if not settings.allow_user_config:
        raise ConfigurationError("User configuration is disabled (ONELINE_ALLOW_USER_CONFIG)")
    return store.delete(API_CONFIG_KEY)


def has_access_password(settings: Settings) -> bool:
    return bool(settings.access_password)


def validate_access_password(settings: Settings, password: str | None) -> bool:
    """Check ``password``; every password is valid when none is configured."""
    expected = settings.access_password
    if not expected:
        return True
    return hmac.compare_digest((password or "").encode("utf-8"), expected.encode("utf-8"))


def require_access(settings: Settings, password: str | None) -> None:
    """Raise :class:`AccessDenied` unless ``password`` passes the gate."""
    if not validate_access_password(settings, password):
        raise AccessDenied("Invalid access password")


__all__ = [
    "API_CONFIG_KEY",
    "AccessDenied",
    "ApiConfig",
    "ConfigurationError",
    "clear_user_api_config",
    "env_api_config",
    "has_access_password",
    "require_access",
    "resolve_api_config",
    "save_user_api_config",
    "validate_access_password",
]
