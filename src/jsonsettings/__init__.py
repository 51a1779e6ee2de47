"""jsonsettings: file-backed application settings in JSON."""

from .builder import KeyValueSettingsFileBuilder
from .convert import (
    Converted,
    IsoDateTimeConverter,
    JsonConverter,
    PathConverter,
    from_node,
    to_node,
)
from .document import SettingsDocument
from .errors import (
    ConversionError,
    DuplicateKeyError,
    KeyNotFoundError,
    SettingsError,
    SettingsFileNotFoundError,
    SettingsParseError,
    UnboundSettingsError,
)
from .keyvalue import BasicSettingsFile, KeyValueSettingsFile
from .paths import Paths
from .typed import (
    DefaultValueHandling,
    NullValueHandling,
    SerializerOptions,
    SettingsSchema,
    TypedSettings,
    schema_for,
    setting,
)
from .typed_builder import FileNotFoundBehavior, TypedSettingsBuilder

__all__ = [
    "BasicSettingsFile",
    "ConversionError",
    "Converted",
    "DefaultValueHandling",
    "DuplicateKeyError",
    "FileNotFoundBehavior",
    "IsoDateTimeConverter",
    "JsonConverter",
    "KeyNotFoundError",
    "KeyValueSettingsFile",
    "KeyValueSettingsFileBuilder",
    "NullValueHandling",
    "PathConverter",
    "Paths",
    "SerializerOptions",
    "SettingsDocument",
    "SettingsError",
    "SettingsFileNotFoundError",
    "SettingsParseError",
    "SettingsSchema",
    "TypedSettings",
    "TypedSettingsBuilder",
    "UnboundSettingsError",
    "from_node",
    "schema_for",
    "setting",
    "to_node",
]
