"""TypedSettingsBuilder — fluent setup for schema-bound settings records."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Generic, TypeVar

from .convert import JsonConverter
from .document import read_settings_text
from .errors import SettingsError, SettingsParseError
from .typed import (
    DefaultValueHandling,
    NullValueHandling,
    SerializerOptions,
    TypedSettings,
    schema_for,
)

log = logging.getLogger(__name__)

S = TypeVar("S", bound=TypedSettings)


class FileNotFoundBehavior(enum.Enum):
    """What `TypedSettingsBuilder.build()` returns when the file is missing."""

    RETURN_NULL = "return_null"
    RETURN_DEFAULT = "return_default"


class TypedSettingsBuilder(Generic[S]):
    """Fluent builder for `TypedSettings` records.

    Usage:
        settings = (TypedSettingsBuilder.from_file(AppSettings, "data", "app.json")
            .with_null_value_handling(NullValueHandling.INCLUDE)
            .with_file_not_found_behavior(FileNotFoundBehavior.RETURN_DEFAULT)
            .build())

    `with_default_value_handling`, `with_null_value_handling` and
    `with_json_converter` edit the current options bundle, so a later
    `with_serializer_options` call discards them. Replace the bundle first.

    Each record receives its own copy of the options; editing the builder
    afterwards does not affect records it already produced.
    """

    def __init__(self, settings_type: type[S], file_location: Path | str | None = None) -> None:
        self._settings_type = settings_type
        self._file_location = Path(file_location) if file_location is not None else None
        self._serializer_options = SerializerOptions()
        self._not_found_behavior = FileNotFoundBehavior.RETURN_NULL

    @classmethod
    def from_file(cls, settings_type: type[S], *path_parts: Path | str) -> TypedSettingsBuilder[S]:
        """Start a builder for the file at the joined *path_parts*."""
        if not path_parts:
            raise ValueError("from_file needs at least one path component")
        return cls(settings_type, Path(*path_parts))

    @property
    def file_location(self) -> Path | None:
        return self._file_location

    @property
    def serializer_options(self) -> SerializerOptions:
        return self._serializer_options

    @property
    def not_found_behavior(self) -> FileNotFoundBehavior:
        return self._not_found_behavior

    # ── Options ─────────────────────────────────────────────────────

    def with_serializer_options(self, options: SerializerOptions) -> TypedSettingsBuilder[S]:
        self._serializer_options = options
        return self

    def with_default_value_handling(self, mode: DefaultValueHandling) -> TypedSettingsBuilder[S]:
        self._serializer_options.default_value_handling = mode
        return self

    def with_null_value_handling(self, mode: NullValueHandling) -> TypedSettingsBuilder[S]:
        self._serializer_options.null_value_handling = mode
        return self

    def with_json_converter(self, converter: JsonConverter) -> TypedSettingsBuilder[S]:
        self._serializer_options.converters.append(converter)
        return self

    def with_file_not_found_behavior(self, mode: FileNotFoundBehavior) -> TypedSettingsBuilder[S]:
        self._not_found_behavior = mode
        return self

    # ── Terminal operations ─────────────────────────────────────────

    def _require_location(self) -> Path:
        if self._file_location is None:
            raise SettingsError("no file location was given to the builder")
        return self._file_location

    def create_default(self) -> S:
        """Return a new bound record holding default values. Nothing is saved.

        Declared defaults are applied only when the default value handling
        populates; otherwise every field keeps its zero value.
        """
        path = self._require_location()
        options = self._serializer_options.copy()
        record = self._settings_type()
        record.bind(path, options)
        if options.default_value_handling.populates:
            schema_for(self._settings_type).populate(record)
        return record

    def build(self) -> S | None:
        """Load the record from its file.

        A missing file yields `create_default()` or None, depending on the
        file-not-found behavior.
        """
        path = self._require_location()
        if not path.is_file():
            if self._not_found_behavior is FileNotFoundBehavior.RETURN_DEFAULT:
                log.info("no settings file at %s, using defaults", path)
                return self.create_default()
            log.debug("no settings file at %s", path)
            return None

        options = self._serializer_options.copy()
        try:
            text = read_settings_text(path)
            record = self._settings_type.from_text(text, options)
        except SettingsParseError as exc:
            raise SettingsParseError(f"{path}: {exc}") from exc
        record.bind(path, options)
        log.debug("loaded %s from %s", self._settings_type.__name__, path)
        return record
