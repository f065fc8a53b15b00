"""Disk-backed local key-value storage.

OneLine keeps a very small amount of per-user state (the API configuration a
user entered themselves). This module stores each key as one JSON file:

- Default directory: ``Settings.storage_dir`` (``ONELINE_STORAGE_DIR`` or ``~/.oneline``)
- Filename pattern:  ``<key>.json`` (key restricted to a safe character set)
- Content:           the JSON-encoded value, UTF-8, with a trailing newline

Usage
-----
>>> store = KeyValueStore(tmp_dir)  # doctest: +SKIP
>>> store.put("oneLine_apiConfig", {"model": "gpt-4o-mini"})  # doctest: +SKIP
>>> store.get("oneLine_apiConfig")  # doctest: +SKIP
{'model': 'gpt-4o-mini'}
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from oneline.core.settings import Settings, get_logger, load_settings

logger = get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore:
    """Persist small JSON values under string keys."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir: Path = base_dir if base_dir is not None else load_settings().storage_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> KeyValueStore:
        return cls(settings.storage_dir)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.base_dir / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key`` or ``default``.

        A file that cannot be decoded is logged and treated as missing.
        """
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage entry %s: %s", path, exc)
            return default

    def put(self, key: str, value: Any) -> Path:
        """Write ``value`` under ``key`` and return the file path."""
        path = self._path(key)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False, indent=2)
            f.write("\n")
        return path

    def delete(self, key: str) -> bool:
        """Remove ``key``; return whether something was deleted."""
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> tuple[str, ...]:
        """Return the stored keys, sorted."""
        if not self.base_dir.is_dir():
            return ()
        return tuple(sorted(p.stem for p in self.base_dir.glob("*.json")))


__all__ = ["KeyValueStore"]
