"""Runtime settings resolved from the environment and an optional JSON file."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError

type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_ENV_CAPTURE_DIR = "LEGACYMOD_CAPTURE_DIR"
_ENV_REDIRECT_FDS = "LEGACYMOD_REDIRECT_FDS"
_ENV_LOG_LEVEL = "LEGACYMOD_LOG_LEVEL"
_ENV_CONFIG = "LEGACYMOD_CONFIG"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class RuntimeSettings(BaseModel):
    """Knobs controlling output capture and diagnostics for one invocation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    capture_dir: Path | None = None
    redirect_fds: bool = True
    log_level: LogLevel = "WARNING"


def load_settings(env: Mapping[str, str] | None = None) -> RuntimeSettings:
    """Resolve settings: environment first, then the config file, then defaults."""
    environment = os.environ if env is None else env
    values: dict[str, Any] = dict(_load_config_file(environment) or {})

    capture_dir = environment.get(_ENV_CAPTURE_DIR)
    if capture_dir:
        values["capture_dir"] = capture_dir
    redirect_fds = environment.get(_ENV_REDIRECT_FDS)
    if redirect_fds:
        values["redirect_fds"] = _parse_flag(redirect_fds, _ENV_REDIRECT_FDS)
    log_level = environment.get(_ENV_LOG_LEVEL)
    if log_level:
        values["log_level"] = log_level.strip().upper()

    try:
        return RuntimeSettings.model_validate(values)
    except ValidationError as error:
        message = f"Invalid legacymod settings: {error}"
        raise ConfigurationError(message) from error


def _parse_flag(raw: str, source: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    message = f"{source} must be a boolean flag, got {raw!r}"
    raise ConfigurationError(message)


def _load_config_file(environment: Mapping[str, str]) -> Mapping[str, Any] | None:
    config_env = environment.get(_ENV_CONFIG)
    config_path = (
        Path(config_env).expanduser()
        if config_env
        else Path.home() / ".config" / "legacymod" / "config.json"
    )

    if not config_path.exists():
        return None

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as error:
        message = f"Failed to read legacymod configuration from {config_path}: {error}"
        raise ConfigurationError(message) from error

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        message = f"Failed to parse legacymod configuration from {config_path}: {error}"
        raise ConfigurationError(message) from error

    if not isinstance(payload, Mapping):
        message = f"legacymod configuration at {config_path} must be a JSON object"
        raise ConfigurationError(message)

    return cast("Mapping[str, Any]", payload)


__all__ = ["LogLevel", "RuntimeSettings", "load_settings"]
