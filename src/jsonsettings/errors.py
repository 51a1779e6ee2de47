"""Exception hierarchy for settings files.

Every error derives from `SettingsError` and from the builtin it most
resembles, so callers may catch either.
"""

from __future__ import annotations


class SettingsError(Exception):
    """Base class for all settings errors."""


class SettingsFileNotFoundError(SettingsError, FileNotFoundError):
    """Raised by a strict load when no settings file exists."""


class SettingsParseError(SettingsError, ValueError):
    """Raised when a file cannot be parsed or mapped onto a record."""


class KeyNotFoundError(SettingsError, KeyError):
    """Raised when neither stored data nor defaults contain a key."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class DuplicateKeyError(SettingsError, KeyError):
    """Raised when a default is declared twice for the same key."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ConversionError(SettingsError, TypeError):
    """Raised when a value cannot be converted to or from a JSON node."""


class UnboundSettingsError(SettingsError, RuntimeError):
    """Raised when a typed record is used before it is bound to a file."""
