"""Conversion between Python values and JSON nodes.

A node is any value the json module round-trips: None, bool, int, float,
str, a list of nodes, or a dict of str to node. Typed reads go through a
pydantic `TypeAdapter` in lax mode; writes go through pydantic's JSON-mode
serializer. Conversions report failure through `Converted` instead of
raising; call `Converted.unwrap()` to turn a failure into a `ConversionError`.

Usage:
    to_node({"retries": 3}).unwrap()          # {"retries": 3}
    from_node([1, 2], list[int]).unwrap()     # [1, 2]
    from_node("x", int).ok                    # False
"""

from __future__ import annotations

import copy
import functools
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePath
from typing import Annotated, Any, Generic, Iterable, TypeVar, Union

from pydantic import PlainValidator, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .errors import ConversionError

T = TypeVar("T")


@dataclass(frozen=True)
class Converted(Generic[T]):
    """Outcome of a conversion: either a value or an error message."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the converted value, raising `ConversionError` on failure."""
        if self.error is not None:
            raise ConversionError(self.error)
        return self.value

    @classmethod
    def fail(cls, error: str) -> Converted[Any]:
        return cls(error=error)


# ── Custom converters ───────────────────────────────────────────────


class JsonConverter:
    """Base class for custom value converters.

    A converter claims Python types through `can_convert` and translates
    values in both directions. ValueError or TypeError raised by `read` or
    `write` is reported as a conversion failure.
    """

    def can_convert(self, type_: Any) -> bool:
        raise NotImplementedError

    def write(self, value: Any) -> Any:
        raise NotImplementedError

    def read(self, node: Any, type_: Any) -> Any:
        raise NotImplementedError


class IsoDateTimeConverter(JsonConverter):
    """Stores datetimes as strings, ISO 8601 unless *fmt* is given."""

    def __init__(self, fmt: str | None = None) -> None:
        self.fmt = fmt

    def can_convert(self, type_: Any) -> bool:
        return type_ is datetime

    def write(self, value: datetime) -> str:
        if self.fmt:
            return value.strftime(self.fmt)
        return value.isoformat()

    def read(self, node: Any, type_: Any) -> datetime:
        if not isinstance(node, str):
            raise TypeError(f"expected a string, got {_kind(node)}")
        if self.fmt:
            return datetime.strptime(node, self.fmt)
        return datetime.fromisoformat(node)


class PathConverter(JsonConverter):
    """Stores paths relative to *base* when they live under it."""

    def __init__(self, base: Path | str) -> None:
        self.base = Path(base)

    def can_convert(self, type_: Any) -> bool:
        return isinstance(type_, type) and issubclass(type_, PurePath)

    def write(self, value: PurePath) -> str:
        path = Path(value)
        try:
            return path.relative_to(self.base).as_posix()
        except ValueError:
            return str(path)

    def read(self, node: Any, type_: Any) -> Path:
        if not isinstance(node, str):
            raise TypeError(f"expected a string, got {_kind(node)}")
        path = Path(node)
        return path if path.is_absolute() else self.base / path


def _claiming(type_: Any, converters: tuple[JsonConverter, ...]) -> JsonConverter | None:
    if typing.get_origin(type_) is not None:
        return None
    for conv in converters:
        if conv.can_convert(type_):
            return conv
    return None


def _reader(conv: JsonConverter, type_: Any):
    def read(node: Any) -> Any:
        try:
            return conv.read(node, type_)
        except (ValueError, TypeError) as exc:
            raise ValueError(
                f"{type(conv).__name__} could not read {_describe(type_)}: {exc}"
            ) from exc
    return read


def converting_type(type_: Any, converters: tuple[JsonConverter, ...]) -> Any:
    """Return *type_* with every member claimed by a converter swapped for a
    validator that calls it. Returns *type_* itself when nothing is claimed.
    """
    if not converters:
        return type_
    conv = _claiming(type_, converters)
    if conv is not None:
        return Annotated[type_, PlainValidator(_reader(conv, type_))]

    origin = typing.get_origin(type_)
    args = typing.get_args(type_)
    if origin is None or not args or origin in (Annotated, typing.Literal):
        return type_
    new_args = tuple(
        arg if arg is Ellipsis else converting_type(arg, converters) for arg in args
    )
    if all(new is old for new, old in zip(new_args, args)):
        return type_
    if origin is Union or origin is types.UnionType:
        return Union[new_args]
    return origin[new_args]


@functools.lru_cache(maxsize=256)
def adapter_for(type_: Any, converters: tuple[JsonConverter, ...] = ()) -> TypeAdapter:
    """Cached `TypeAdapter` for *type_* with *converters* applied."""
    return TypeAdapter(converting_type(type_, converters))


# ── Python value -> node ────────────────────────────────────────────


def to_node(value: Any, converters: Iterable[JsonConverter] = ()) -> Converted[Any]:
    """Convert *value* into a freshly built JSON node."""
    try:
        written = _apply_writers(value, tuple(converters))
        return Converted(to_jsonable_python(written, fallback=_plain_object))
    except (ConversionError, PydanticSerializationError) as exc:
        return Converted.fail(str(exc))


def _apply_writers(value: Any, converters: tuple[JsonConverter, ...]) -> Any:
    if not converters:
        return value
    conv = _claiming(type(value), converters)
    if conv is not None:
        try:
            return conv.write(value)
        except (ValueError, TypeError) as exc:
            raise ConversionError(
                f"{type(conv).__name__} could not write {_kind(value)}: {exc}"
            ) from exc
    if isinstance(value, Mapping):
        return {k: _apply_writers(v, converters) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_apply_writers(item, converters) for item in value]
    return value


def _plain_object(value: Any) -> Any:
    # Objects pydantic does not know are written as their public attributes.
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise ConversionError(f"cannot convert {_kind(value)} to a JSON value")


# ── node -> Python value ────────────────────────────────────────────


def from_node(
    node: Any,
    target: Any = None,
    converters: Iterable[JsonConverter] = (),
) -> Converted[Any]:
    """Convert a JSON node into an instance of *target*.

    A *target* of None, `Any` or `object` returns a deep copy of the node.
    """
    if target is None or target is Any or target is object:
        return Converted(copy.deepcopy(node))
    try:
        adapter = adapter_for(target, tuple(converters))
    except PydanticSchemaGenerationError:
        return Converted.fail(f"unsupported target type {_describe(target)}")
    try:
        return Converted(adapter.validate_python(node))
    except ValidationError as exc:
        return Converted.fail(describe_errors(exc))


def describe_errors(exc: ValidationError) -> str:
    """One line per validation error, prefixed by its location when it has one."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


# ── Helpers ─────────────────────────────────────────────────────────


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _describe(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)
