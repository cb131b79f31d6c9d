"""Helpers for writing plugins against the legacy key=value argument protocol."""

from .args import POSITIONAL_MARKER, AllowList, ArgumentToken, ParsedArguments, parse_arguments
from .core.errors import (
    LegacyModError,
    MalformedArgumentLineError,
    UnsupportedArgumentError,
    UnsupportedPositionalError,
)
from .core.escaping import escape, unescape
from .core.formatting import Raw, StringLiteral, VariableRef, format_array, format_object
from .runtime import ModuleSession, ResponseEmitter, run_module

__version__ = "0.1.0"

__all__ = [
    "POSITIONAL_MARKER",
    "AllowList",
    "ArgumentToken",
    "LegacyModError",
    "MalformedArgumentLineError",
    "ModuleSession",
    "ParsedArguments",
    "Raw",
    "ResponseEmitter",
    "StringLiteral",
    "UnsupportedArgumentError",
    "UnsupportedPositionalError",
    "VariableRef",
    "__version__",
    "escape",
    "format_array",
    "format_object",
    "parse_arguments",
    "run_module",
    "unescape",
]
