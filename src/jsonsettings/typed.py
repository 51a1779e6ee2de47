"""Schema-bound settings records.

A record is a pydantic model deriving from `TypedSettings`. Each field may
declare a default with `setting()`; the declared defaults of a record class
are collected once into a `SettingsSchema` and cached.

Usage:
    class AppSettings(TypedSettings):
        name: str | None = None
        retries: int = setting(3, zero=0)
        debug_only: bool = setting(ignore=True, zero=False)

    settings = TypedSettingsBuilder.from_file(AppSettings, "app.json").build()
"""

from __future__ import annotations

import copy
import dataclasses
import enum
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError
from pydantic import field_serializer, field_validator
from pydantic_core import PydanticSerializationError

from .convert import JsonConverter, adapter_for, converting_type, describe_errors, to_node
from .errors import ConversionError, SettingsParseError, UnboundSettingsError

log = logging.getLogger(__name__)

S = TypeVar("S", bound="TypedSettings")

_DEFAULT_KEY = "default_value"
_CONVERTERS_KEY = "converters"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


# ── Serializer options ──────────────────────────────────────────────


class DefaultValueHandling(enum.Enum):
    """How declared defaults take part in reading and writing records."""

    INCLUDE = "include"
    IGNORE = "ignore"
    POPULATE = "populate"
    IGNORE_AND_POPULATE = "ignore_and_populate"

    @property
    def populates(self) -> bool:
        """Missing fields receive their declared default."""
        return self in (DefaultValueHandling.POPULATE, DefaultValueHandling.IGNORE_AND_POPULATE)

    @property
    def ignores(self) -> bool:
        """Fields equal to their default are left out of the file."""
        return self in (DefaultValueHandling.IGNORE, DefaultValueHandling.IGNORE_AND_POPULATE)


class NullValueHandling(enum.Enum):
    INCLUDE = "include"
    IGNORE = "ignore"


@dataclass
class SerializerOptions:
    """Options for reading and writing typed records."""

    default_value_handling: DefaultValueHandling = DefaultValueHandling.POPULATE
    null_value_handling: NullValueHandling = NullValueHandling.INCLUDE
    indented: bool = True
    indent: int = 2
    converters: list[JsonConverter] = field(default_factory=list)

    def copy(self) -> SerializerOptions:
        return dataclasses.replace(self, converters=list(self.converters))

    def context(self) -> dict[str, Any]:
        return {_CONVERTERS_KEY: tuple(self.converters)}


# ── Field declarations ──────────────────────────────────────────────


def setting(
    default_value: Any = UNSET,
    *,
    zero: Any = None,
    zero_factory: Callable[[], Any] | None = None,
    key: str | None = None,
    ignore: bool = False,
) -> Any:
    """Declare a settings field.

    *default_value* is assigned when defaults are populated. *zero* (or
    *zero_factory* for mutable values) is what the field holds otherwise.
    *key* renames the field in the file; *ignore* keeps it out of the file.
    """
    extra = {} if default_value is UNSET else {_DEFAULT_KEY: default_value}
    kwargs: dict[str, Any] = {"alias": key, "exclude": ignore, "json_schema_extra": extra}
    if zero_factory is not None:
        return Field(default_factory=zero_factory, **kwargs)
    return Field(default=zero, **kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """One field of a record class as seen by the serializer."""

    name: str
    key: str
    type: Any
    zero: Callable[[], Any]
    default_value: Any = UNSET
    ignore: bool = False

    @property
    def has_default(self) -> bool:
        return self.default_value is not UNSET

    def reference_default(self) -> Any:
        """The declared default, or the zero value when none is declared."""
        if self.has_default:
            return self.default_value
        return self.zero()


@dataclass(frozen=True)
class SettingsSchema:
    """The serializable fields of a record class and their defaults."""

    record_type: type
    fields: tuple[FieldSpec, ...]

    @property
    def declared_defaults(self) -> dict[str, Any]:
        return {f.name: f.default_value for f in self.fields if f.has_default}

    @property
    def ignored_keys(self) -> frozenset[str]:
        return frozenset(k for f in self.fields if f.ignore for k in (f.name, f.key))

    def populate(self, record: TypedSettings, skip: set[str] | frozenset[str] = frozenset()) -> None:
        """Assign every declared default to *record*, except fields in *skip*."""
        for spec in self.fields:
            if spec.has_default and spec.name not in skip:
                setattr(record, spec.name, copy.deepcopy(spec.default_value))


_SCHEMAS: dict[type, SettingsSchema] = {}


def schema_for(record_type: type) -> SettingsSchema:
    """Return the cached schema of *record_type*, building it on first use."""
    schema = _SCHEMAS.get(record_type)
    if schema is None:
        schema = _build_schema(record_type)
        _SCHEMAS[record_type] = schema
    return schema


def _build_schema(record_type: type) -> SettingsSchema:
    if not (isinstance(record_type, type) and issubclass(record_type, BaseModel)):
        raise TypeError(f"{getattr(record_type, '__name__', record_type)!r} is not a settings model")
    specs = []
    for name, info in record_type.model_fields.items():
        if info.is_required():
            raise TypeError(f"{record_type.__name__}.{name} needs a default value")
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        specs.append(FieldSpec(
            name=name,
            key=info.alias or name,
            type=info.annotation,
            zero=lambda info=info: info.get_default(call_default_factory=True),
            default_value=extra.get(_DEFAULT_KEY, UNSET),
            ignore=bool(info.exclude),
        ))
    return SettingsSchema(record_type=record_type, fields=tuple(specs))


def _converters(context: Any) -> tuple[JsonConverter, ...]:
    if isinstance(context, dict):
        return context.get(_CONVERTERS_KEY, ())
    return ()


# ── Records ─────────────────────────────────────────────────────────


class TypedSettings(BaseModel):
    """Base class for schema-bound settings records.

    Subclasses are pydantic models whose fields all have defaults. A record
    is bound to a file and serializer options by `TypedSettingsBuilder`;
    only bound records can `save()` or check `exists()`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    _file_location: Path | None = PrivateAttr(default=None)
    _serializer_options: SerializerOptions | None = PrivateAttr(default=None)

    @field_validator("*", mode="wrap")
    @classmethod
    def read_with_converters(cls, value, handler, info):
        converters = _converters(info.context)
        annotation = cls.model_fields[info.field_name].annotation
        if not converters or converting_type(annotation, converters) is annotation:
            return handler(value)
        return adapter_for(annotation, converters).validate_python(value)

    @field_serializer("*", mode="wrap")
    def write_with_converters(self, value, handler, info):
        converters = _converters(info.context)
        if not converters:
            return handler(value)
        return to_node(value, converters).unwrap()

    @property
    def file_location(self) -> Path | None:
        return self._file_location

    @property
    def serializer_options(self) -> SerializerOptions | None:
        return self._serializer_options

    @property
    def is_bound(self) -> bool:
        return self._file_location is not None and self._serializer_options is not None

    def bind(self, file_location: Path | str, options: SerializerOptions) -> None:
        """Attach the file and options used by `save()` and `exists()`."""
        self._file_location = Path(file_location)
        self._serializer_options = options

    def _require_bound(self) -> Path:
        if not self.is_bound:
            raise UnboundSettingsError(
                f"{type(self).__name__} is not bound to a settings file"
            )
        return self._file_location

    def exists(self) -> bool:
        return self._require_bound().is_file()

    def save(self) -> None:
        """Write the record to its file, replacing the previous contents."""
        path = self._require_bound()
        path.write_text(self.to_text(self._serializer_options), encoding="utf-8")
        log.debug("saved %s to %s", type(self).__name__, path)

    # ── Codec ───────────────────────────────────────────────────────

    def to_dict(self, options: SerializerOptions | None = None) -> dict[str, Any]:
        """Return the JSON object written for this record under *options*."""
        options = options or self._serializer_options or SerializerOptions()
        exclude = set()
        if options.default_value_handling.ignores:
            for spec in schema_for(type(self)).fields:
                if getattr(self, spec.name) == spec.reference_default():
                    exclude.add(spec.name)
        try:
            return self.model_dump(
                mode="json",
                by_alias=True,
                exclude=exclude,
                exclude_none=options.null_value_handling is NullValueHandling.IGNORE,
                context=options.context(),
                warnings=False,
            )
        except (PydanticSerializationError, ConversionError) as exc:
            raise ConversionError(f"cannot write {type(self).__name__}: {exc}") from exc

    def to_text(self, options: SerializerOptions | None = None) -> str:
        options = options or self._serializer_options or SerializerOptions()
        indent = options.indent if options.indented else None
        return json.dumps(self.to_dict(options), indent=indent, ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls: type[S], data: dict[str, Any], options: SerializerOptions | None = None) -> S:
        """Build an unbound record from a JSON object.

        Raises `SettingsParseError` when a value does not fit its field.
        """
        options = options or SerializerOptions()
        schema = schema_for(cls)
        ignored = schema.ignored_keys
        skip_nulls = options.null_value_handling is NullValueHandling.IGNORE
        values = {
            k: v for k, v in data.items()
            if k not in ignored and not (v is None and skip_nulls)
        }
        try:
            record = cls.model_validate(values, context=options.context())
        except ValidationError as exc:
            raise SettingsParseError(describe_errors(exc)) from exc
        if options.default_value_handling.populates:
            schema.populate(record, skip=record.model_fields_set)
        return record

    @classmethod
    def from_text(cls: type[S], text: str, options: SerializerOptions | None = None) -> S:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SettingsParseError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsParseError(
                f"{cls.__name__} must be stored as a JSON object, got {type(data).__name__}"
            )
        return cls.from_dict(data, options)
