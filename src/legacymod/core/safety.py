"""Utilities for keeping plugin argument secrets out of log records."""

from __future__ import annotations

import re
import typing
from collections.abc import Mapping, Sequence
from typing import Any

_REDACTION_PLACEHOLDER = "[redacted]"
_ELLIPSIS = "…"

_SECRET_NAME_PATTERN = re.compile(r"(?i)(pass(word|wd)?|secret|token|api_?key|private_?key|credential)")
_SECRET_ASSIGNMENT_PATTERN = re.compile(
    r"(?i)\b([^\s=\"]*(?:pass(?:word|wd)?|secret|token|api_?key|private_?key|credential)[^\s=\"]*)="
    r"(\"(?:[^\"\\]|\\.)*\"?|\S*)",
)
_TOKEN_PATTERN = re.compile(r"\b[A-Za-z0-9]{32,}\b")


def is_secret_name(name: str) -> bool:
    """Return ``True`` when an argument called *name* likely holds a secret."""
    return bool(_SECRET_NAME_PATTERN.search(name))


def mask_secrets(text: str, *, max_length: int = 512) -> str:
    """Redact secret-looking assignments and opaque tokens from *text*."""
    masked = _SECRET_ASSIGNMENT_PATTERN.sub(rf"\1={_REDACTION_PLACEHOLDER}", text)
    masked = _TOKEN_PATTERN.sub(_REDACTION_PLACEHOLDER, masked)

    if max_length > 0 and len(masked) > max_length:
        return masked[:max_length] + _ELLIPSIS
    return masked


def redact_bindings(bindings: Mapping[str, str], *, max_length: int = 512) -> dict[str, str]:
    """Return a copy of *bindings* with secret values replaced."""
    redacted: dict[str, str] = {}
    for name, value in bindings.items():
        if is_secret_name(name):
            redacted[name] = _REDACTION_PLACEHOLDER
        else:
            redacted[name] = mask_secrets(value, max_length=max_length)
    return redacted


def scrub_for_logging(value: Any, *, max_length: int = 512) -> Any:
    """Return a structure safe for logging by masking nested string values."""
    if isinstance(value, str):
        processed: Any = mask_secrets(value, max_length=max_length)
    elif isinstance(value, bytes):
        processed = mask_secrets(value.decode("utf-8", errors="ignore"), max_length=max_length)
    elif isinstance(value, Mapping):
        processed_mapping: dict[Any, Any] = {}
        mapping_items = typing.cast("Mapping[Any, Any]", value)
        for key, item in mapping_items.items():
            if isinstance(key, str) and is_secret_name(key):
                processed_mapping[key] = _REDACTION_PLACEHOLDER
                continue
            processed_mapping[key] = scrub_for_logging(item, max_length=max_length)
        processed = processed_mapping
    elif isinstance(value, tuple):
        tuple_items = typing.cast("tuple[Any, ...]", value)
        processed = tuple(
            scrub_for_logging(item, max_length=max_length) for item in tuple_items
        )
    elif isinstance(value, Sequence):
        sequence_items = typing.cast("Sequence[Any]", value)
        processed = [
            scrub_for_logging(item, max_length=max_length) for item in sequence_items
        ]
    else:
        processed = value
    return processed


__all__ = ["is_secret_name", "mask_secrets", "redact_bindings", "scrub_for_logging"]
