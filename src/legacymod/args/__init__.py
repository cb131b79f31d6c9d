"""Parsing of legacy plugin argument lines."""

from .lexer import ArgumentToken, lex_arguments
from .validator import (
    POSITIONAL_MARKER,
    AllowList,
    ParsedArguments,
    bind_arguments,
    parse_arguments,
)

__all__ = [
    "POSITIONAL_MARKER",
    "AllowList",
    "ArgumentToken",
    "ParsedArguments",
    "bind_arguments",
    "lex_arguments",
    "parse_arguments",
]
