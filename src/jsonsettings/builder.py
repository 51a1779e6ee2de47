"""KeyValueSettingsFileBuilder — fluent setup for key-value settings files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from .errors import SettingsError
from .keyvalue import KeyValueSettingsFile

log = logging.getLogger(__name__)


class KeyValueSettingsFileBuilder:
    """Fluent builder for `KeyValueSettingsFile`.

    Usage:
        settings = (KeyValueSettingsFileBuilder.from_file("settings.json")
            .with_default("isTest", True)
            .load_or_create()
            .build())

    `build()` hands the store to the caller; the builder cannot be used
    afterwards.
    """

    def __init__(self, store: KeyValueSettingsFile) -> None:
        self._value: KeyValueSettingsFile | None = store
        self._loaded = False

    @classmethod
    def from_file(
        cls,
        file_path: Path | str,
        settings_class: type[KeyValueSettingsFile] = KeyValueSettingsFile,
    ) -> KeyValueSettingsFileBuilder:
        """Start a builder for *file_path*. Does not touch the filesystem."""
        return cls(settings_class(file_path))

    @property
    def _store(self) -> KeyValueSettingsFile:
        if self._value is None:
            raise SettingsError("builder has already been built")
        return self._value

    # ── Defaults ────────────────────────────────────────────────────

    def with_default(self, key: str, value: Any) -> KeyValueSettingsFileBuilder:
        self._store.add_default(key, value)
        return self

    def with_defaults(
        self,
        defaults: Mapping[str, Any] | Iterable[tuple[str, Any]],
    ) -> KeyValueSettingsFileBuilder:
        items = defaults.items() if isinstance(defaults, Mapping) else defaults
        for key, value in items:
            self._store.add_default(key, value)
        return self

    # ── Loading / creation ──────────────────────────────────────────

    def load_if_exists(self) -> KeyValueSettingsFileBuilder:
        """Load the file if present. Parse errors still propagate."""
        if self._store.load(throw_on_fail=False):
            self._loaded = True
        return self

    def ensure_created(self, use_defaults: bool = False) -> KeyValueSettingsFileBuilder:
        """Write the in-memory document to disk.

        When the file does not exist yet and *use_defaults* is set, declared
        defaults are first copied into the document for keys it lacks;
        existing keys are never overwritten.

        When the file already exists, *use_defaults* is ignored and the file
        is overwritten with the in-memory document. Call `load_if_exists()`
        first (or use `load_or_create()`), otherwise stored settings are
        replaced by whatever is in memory, possibly nothing.
        """
        store = self._store
        if not store.exists():
            if use_defaults:
                for key, node in store.defaults.items():
                    if not store.contains_key(key):
                        store.set(key, node)
            log.info("creating settings file %s", store.file_location)
        elif not self._loaded:
            log.warning(
                "overwriting %s with a document that was never loaded from it",
                store.file_location,
            )
        store.save()
        self._loaded = True
        return self

    def load_or_create(self, use_defaults: bool = True) -> KeyValueSettingsFileBuilder:
        """Load the file if present, otherwise create it.

        A newly created file is seeded with the declared defaults unless
        *use_defaults* is False.
        """
        return self.load_if_exists().ensure_created(use_defaults)

    def build(self) -> KeyValueSettingsFile:
        store = self._store
        self._value = None
        return store
