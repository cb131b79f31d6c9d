"""Domain-specific exception hierarchy for legacymod."""

from __future__ import annotations

from .safety import is_secret_name


class LegacyModError(Exception):
    """Base class for all domain-specific errors raised by legacymod."""


class ArgumentError(LegacyModError):
    """Base class for problems found while reading a plugin argument line."""


class MalformedArgumentLineError(ArgumentError):
    """Raised when a quoted value is never closed."""

    def __init__(self, name: str | None, remainder: str) -> None:
        label = name if name is not None else "<positional>"
        shown = "[redacted]" if name is not None and is_secret_name(name) else remainder
        super().__init__(f"unterminated quote while parsing '{label}' near: {shown}")
        self.name = name
        self.remainder = remainder


class UnsupportedArgumentError(ArgumentError):
    """Raised when a named argument is not present in the allow-list."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unsupported argument: {name}")
        self.name = name


class UnsupportedPositionalError(ArgumentError):
    """Raised when a positional argument is supplied but not accepted."""

    def __init__(self, value: str) -> None:
        super().__init__("positional arguments are not supported")
        self.value = value


class InvocationError(LegacyModError):
    """Base class for failures while setting up a plugin invocation."""


class InvalidInvocationError(InvocationError):
    """Raised when the plugin is started with options it does not recognise."""


class ResponseError(LegacyModError):
    """Base class for issues with the JSON response channel."""


class ResponseAlreadyEmittedError(ResponseError):
    """Raised when a second response is requested for the same invocation."""


class ResponseValidationError(ResponseError):
    """Raised when plugin output is not a valid protocol response."""


class ConfigurationError(LegacyModError):
    """Raised when runtime settings cannot be loaded or are invalid."""


__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "InvalidInvocationError",
    "InvocationError",
    "LegacyModError",
    "MalformedArgumentLineError",
    "ResponseAlreadyEmittedError",
    "ResponseError",
    "ResponseValidationError",
    "UnsupportedArgumentError",
    "UnsupportedPositionalError",
]
