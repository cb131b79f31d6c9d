"""Core building blocks: errors, JSON text helpers, settings and schema."""

from .errors import (
    ArgumentError,
    ConfigurationError,
    InvalidInvocationError,
    InvocationError,
    LegacyModError,
    MalformedArgumentLineError,
    ResponseAlreadyEmittedError,
    ResponseError,
    ResponseValidationError,
    UnsupportedArgumentError,
    UnsupportedPositionalError,
)
from .escaping import escape, quote, unescape
from .formatting import (
    FieldSpec,
    Raw,
    ResponseField,
    StringLiteral,
    VariableRef,
    format_array,
    format_object,
    parse_field,
)

__all__ = [
    "ArgumentError",
    "ConfigurationError",
    "FieldSpec",
    "InvalidInvocationError",
    "InvocationError",
    "LegacyModError",
    "MalformedArgumentLineError",
    "Raw",
    "ResponseAlreadyEmittedError",
    "ResponseError",
    "ResponseField",
    "ResponseValidationError",
    "StringLiteral",
    "UnsupportedArgumentError",
    "UnsupportedPositionalError",
    "VariableRef",
    "escape",
    "format_array",
    "format_object",
    "parse_field",
    "quote",
    "unescape",
]
