"""In-memory JSON object backing a key-value settings file."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Iterator

from .errors import SettingsParseError


def read_settings_text(path: Path) -> str:
    """Read a settings file as UTF-8, tolerating a leading byte order mark."""
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SettingsParseError(f"not a UTF-8 text file: {exc}") from exc


class SettingsDocument:
    """A mutable mapping of string keys to JSON nodes.

    Values are stored as given; callers convert Python objects with
    `convert.to_node` first.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data) if data else {}

    # ── Parsing / serialization ─────────────────────────────────────

    @classmethod
    def parse(cls, text: str) -> SettingsDocument:
        """Parse *text* as a JSON object.

        Raises `SettingsParseError` on invalid JSON or a non-object root.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SettingsParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsParseError(
                f"settings document must be a JSON object, got {type(data).__name__}"
            )
        return cls(data)

    def to_text(self, indent: int | None = 2) -> str:
        return json.dumps(self._data, indent=indent, ensure_ascii=False) + "\n"

    # ── Access ──────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, node: Any) -> None:
        self._data[key] = node

    def remove(self, key: str) -> bool:
        """Delete *key*. Returns True if it was present."""
        if key in self._data:
            del self._data[key]
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SettingsDocument({self._data!r})"
