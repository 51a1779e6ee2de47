"""Key-value settings files: arbitrary keys stored in one JSON object.

Usage:
    settings = KeyValueSettingsFile("data/config/settings.json")
    settings.add_default("theme", "dark")
    settings.load()
    theme = settings.get("theme", str)
    settings.set("theme", "light")
    settings.save()
"""

from __future__ import annotations

import abc
import logging
import types
from pathlib import Path
from typing import Any, Mapping

from .convert import from_node, to_node
from .document import SettingsDocument, read_settings_text
from .errors import (
    DuplicateKeyError,
    KeyNotFoundError,
    SettingsFileNotFoundError,
    SettingsParseError,
)

log = logging.getLogger(__name__)

# Sentinel for "no fallback supplied"; None is a valid fallback.
_MISSING = object()


class BaseKeyValueSettingsFile(abc.ABC):
    """File handling shared by the key-value settings classes.

    Build from a full path, or from a folder and a file name, in which case
    the folder (and any parents) is created immediately.
    """

    def __init__(self, location: Path | str, file_name: str | None = None) -> None:
        if file_name is not None:
            folder = Path(location)
            folder.mkdir(parents=True, exist_ok=True)
            self._file_location = folder / file_name
        else:
            self._file_location = Path(location)
        self.document = SettingsDocument()

    @property
    def file_location(self) -> Path:
        return self._file_location

    # ── Getters / setters ───────────────────────────────────────────

    @abc.abstractmethod
    def get(self, key: str, type_: Any = None, fallback: Any = _MISSING) -> Any:
        ...

    def get_string(self, key: str) -> str:
        return self.get(key, str)

    def get_bool(self, key: str) -> bool:
        return self.get(key, bool)

    def set(self, key: str, value: Any) -> None:
        """Store a copy of *value* under *key*, replacing any previous value."""
        self.document.set(key, to_node(value).unwrap())

    def contains_key(self, key: str) -> bool:
        """True if *key* is stored in the document. Defaults are not consulted."""
        return key in self.document

    def __contains__(self, key: object) -> bool:
        return key in self.document

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    # ── File I/O ────────────────────────────────────────────────────

    def exists(self) -> bool:
        return self._file_location.is_file()

    def load(self, throw_on_fail: bool = False) -> bool:
        """Replace the document with the file's contents.

        Returns False and leaves the document untouched when the file is
        missing, unless *throw_on_fail* is set.
        """
        if not self.exists():
            if throw_on_fail:
                raise SettingsFileNotFoundError(
                    f"No settings file was located at path: {self._file_location}"
                )
            log.debug("no settings file at %s", self._file_location)
            return False

        try:
            text = read_settings_text(self._file_location)
            self.document = SettingsDocument.parse(text)
        except SettingsParseError as exc:
            raise SettingsParseError(f"{self._file_location}: {exc}") from exc
        log.debug("loaded %d keys from %s", len(self.document), self._file_location)
        return True

    def save(self) -> None:
        """Write the document to disk, replacing the file."""
        self._file_location.write_text(self.document.to_text(), encoding="utf-8")
        log.debug("saved %d keys to %s", len(self.document), self._file_location)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._file_location)!r})"


class BasicSettingsFile(BaseKeyValueSettingsFile):
    """A settings file without declared defaults.

    Missing keys resolve to the caller's fallback, None when omitted.
    """

    def get(self, key: str, type_: Any = None, fallback: Any = None) -> Any:
        if key not in self.document:
            return fallback
        return from_node(self.document.get(key), type_).unwrap()


class KeyValueSettingsFile(BaseKeyValueSettingsFile):
    """A settings file with declared default values.

    Lookups prefer the stored value, then the declared default. Defaults
    are never written to the document except by
    `KeyValueSettingsFileBuilder.ensure_created(use_defaults=True)`.
    """

    def __init__(self, location: Path | str, file_name: str | None = None) -> None:
        super().__init__(location, file_name)
        self._defaults: dict[str, Any] = {}

    @property
    def defaults(self) -> Mapping[str, Any]:
        """Read-only view of the declared defaults."""
        return types.MappingProxyType(self._defaults)

    def get(self, key: str, type_: Any = None, fallback: Any = _MISSING) -> Any:
        """Resolve *key* as *type_*: stored value, then default, then *fallback*.

        Raises `KeyNotFoundError` when nothing matches and no fallback was
        given, and `ConversionError` when the value does not fit *type_*.
        """
        if key in self.document:
            node = self.document.get(key)
        elif key in self._defaults:
            node = self._defaults[key]
        elif fallback is not _MISSING:
            return fallback
        else:
            raise KeyNotFoundError(f"No entry or default entry was found with key {key}.")
        return from_node(node, type_).unwrap()

    def add_default(self, key: str, value: Any) -> None:
        if key in self._defaults:
            raise DuplicateKeyError(f"A default value with key {key} already exists.")
        self._defaults[key] = to_node(value).unwrap()

    def remove_default(self, key: str) -> None:
        self._defaults.pop(key, None)
