"""Tests for the local key-value store and API configuration layering."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from oneline.core.config import (
    API_CONFIG_KEY,
    AccessDenied,
    ApiConfig,
    ConfigurationError,
    clear_user_api_config,
    require_access,
    resolve_api_config,
    save_user_api_config,
    validate_access_password,
)
from oneline.core.settings import Settings, load_settings
from oneline.core.storage import KeyValueStore


def _settings(monkeypatch: Any, **env: str) -> Settings:
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    load_settings.cache_clear()
    return load_settings()


# ----------------------------- KeyValueStore --------------------------------


def test_store_round_trips_unicode_json(tmp_path: Path) -> None:
    store = KeyValueStore(tmp_path / "kv")
    path = store.put("greeting", {"text": "你好"})

    assert path == tmp_path / "kv" / "greeting.json"
    assert "你好" in path.read_text(encoding="utf-8")
    assert path.read_text(encoding="utf-8").endswith("\n")
    assert store.get("greeting") == {"text": "你好"}
    assert store.keys() == ("greeting",)


def test_store_missing_and_corrupt_entries_return_default(tmp_path: Path) -> None:
    store = KeyValueStore(tmp_path)
    assert store.get("absent", "fallback") == "fallback"

    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    assert store.get("broken") is None


def test_store_delete(tmp_path: Path) -> None:
    store = KeyValueStore(tmp_path)
    store.put("k", 1)
    assert store.delete("k") is True
    assert store.delete("k") is False
    assert store.keys() == ()


@pytest.mark.parametrize("key", ["../escape", "a/b", "", "空格 key"])
def test_store_rejects_unsafe_keys(tmp_path: Path, key: str) -> None:
    with pytest.raises(ValueError):
        KeyValueStore(tmp_path).put(key, 1)


def test_store_defaults_to_settings_dir(tmp_path: Path) -> None:
    assert KeyValueStore().base_dir == tmp_path / "store"


# ----------------------------- ApiConfig ------------------------------------


def test_merged_ignores_blank_overrides() -> None:
    base = ApiConfig(endpoint="https://a", model="m1", api_key="k1")
    merged = base.merged({"model": "  ", "api_key": " k2 ", "endpoint": None})
    assert merged == ApiConfig(endpoint="https://a", model="m1", api_key="k2")
    assert base.merged(None) is base


def test_moving_endpoint_without_key_drops_key() -> None:
    base = ApiConfig(endpoint="https://a", model="m", api_key="k")
    assert base.merged({"endpoint": "https://b"}) == ApiConfig(endpoint="https://b", model="m")
    assert base.merged({"endpoint": "https://a"}).api_key == "k"
    assert base.merged({"endpoint": "https://b", "api_key": "k2"}).api_key == "k2"
    with pytest.raises(ConfigurationError, match="api_key"):
        base.merged({"endpoint": "https://b"}).require()


def test_require_lists_missing_fields() -> None:
    with pytest.raises(ConfigurationError, match="endpoint, api_key"):
        ApiConfig(model="m").require()


def test_masked_shortens_key() -> None:
    masked = ApiConfig(endpoint="e", model="m", api_key="sk-1234567890").masked()
    assert masked["api_key"] == "sk-12345..."
    assert ApiConfig().masked()["api_key"] == ""


# ----------------------------- Layering -------------------------------------


def test_stored_config_overrides_environment(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(
        monkeypatch, ONELINE_API_ENDPOINT="https://env", ONELINE_API_KEY="env-key"
    )
    store = KeyValueStore(tmp_path)
    save_user_api_config(settings, store, model="stored-model", api_key="stored-key")

    assert store.get(API_CONFIG_KEY) == {"model": "stored-model", "api_key": "stored-key"}
    resolved = resolve_api_config(settings, store, {"model": "flag-model"})
    assert resolved == ApiConfig(endpoint="https://env", model="flag-model", api_key="stored-key")


def test_stored_endpoint_without_key_does_not_inherit_env_key(
    monkeypatch: Any, tmp_path: Path
) -> None:
    settings = _settings(
        monkeypatch, ONELINE_API_ENDPOINT="https://env", ONELINE_API_KEY="env-key"
    )
    store = KeyValueStore(tmp_path)
    save_user_api_config(settings, store, endpoint="https://stored")

    resolved = resolve_api_config(settings, store)
    assert resolved.endpoint == "https://stored"
    assert resolved.api_key == ""
    assert not resolved.is_configured


def test_user_config_disabled_uses_environment_only(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(
        monkeypatch,
        ONELINE_API_ENDPOINT="https://env",
        ONELINE_API_KEY="env-key",
        ONELINE_ALLOW_USER_CONFIG="false",
    )
    store = KeyValueStore(tmp_path)
    store.put(API_CONFIG_KEY, {"api_key": "stored-key"})

    resolved = resolve_api_config(settings, store, {"api_key": "flag-key"})
    assert resolved.api_key == "env-key"
    with pytest.raises(ConfigurationError):
        save_user_api_config(settings, store, api_key="x")
    with pytest.raises(ConfigurationError):
        clear_user_api_config(settings, store)


def test_save_rejects_unknown_fields(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(monkeypatch)
    with pytest.raises(ConfigurationError):
        save_user_api_config(settings, KeyValueStore(tmp_path), base_url="x")


def test_clear_user_config(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(monkeypatch)
    store = KeyValueStore(tmp_path)
    save_user_api_config(settings, store, endpoint="https://user")
    assert clear_user_api_config(settings, store) is True
    assert clear_user_api_config(settings, store) is False


# ----------------------------- Access password ------------------------------


def test_any_password_is_valid_without_configured_secret(monkeypatch: Any) -> None:
    settings = _settings(monkeypatch)
    assert validate_access_password(settings, None)
    assert validate_access_password(settings, "whatever")
    require_access(settings, "")


def test_configured_password_is_enforced(monkeypatch: Any) -> None:
    settings = _settings(monkeypatch, ONELINE_ACCESS_PASSWORD="s3cret")
    assert validate_access_password(settings, "s3cret")
    assert not validate_access_password(settings, "wrong")
    assert not validate_access_password(settings, None)
    with pytest.raises(AccessDenied):
        require_access(settings, "wrong")
