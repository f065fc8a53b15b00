from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from oneline.core.settings import load_settings

_ENV_VARS = (
    "ONELINE_API_ENDPOINT",
    "ONELINE_API_MODEL",
    "ONELINE_API_KEY",
    "ONELINE_ACCESS_PASSWORD",
    "ONELINE_ALLOW_USER_CONFIG",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: Any, tmp_path: Path) -> Iterator[None]:
    """Give every test a clean environment and its own storage directory."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ONELINE_STORAGE_DIR", str(tmp_path / "store"))
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()
