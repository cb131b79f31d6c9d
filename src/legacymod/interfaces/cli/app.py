"""Command-line diagnostics for legacy plugin arguments and responses."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, cast

from legacymod import __version__
from legacymod.args import ArgumentToken, ParsedArguments, parse_arguments
from legacymod.args.validator import POSITIONAL_MARKER, AllowList
from legacymod.core.config import load_settings
from legacymod.core.errors import (
    ArgumentError,
    ConfigurationError,
    ResponseValidationError,
)
from legacymod.core.escaping import escape, unescape
from legacymod.core.safety import mask_secrets, scrub_for_logging
from legacymod.core.schema import build_response_json_schema, validate_response_line


class CliError(RuntimeError):
    """Exception raised for anticipated CLI failures."""

    def __init__(self, message: str, *, exit_code: int = 1, details: Any | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.details = details


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, execute the requested command and return the exit code."""
    parser = _build_parser()
    args_namespace = parser.parse_args(argv)
    command = getattr(args_namespace, "command", None)
    if command is None:
        parser.print_help()
        return 1
    try:
        _configure_logging()
        exit_code = command(args_namespace)
    except CliError as error:
        _emit_error(error)
        exit_code = error.exit_code
    except KeyboardInterrupt as error:  # pragma: no cover - manual interruption
        cli_error = CliError("Aborted by user", exit_code=130, details=str(error))
        _emit_error(cli_error)
        exit_code = cli_error.exit_code
    except (ArgumentError, ResponseValidationError, ConfigurationError) as error:
        cli_error = CliError(str(error), exit_code=1, details=type(error).__name__)
        _emit_error(cli_error)
        exit_code = cli_error.exit_code
    except Exception as error:  # pragma: no cover - defensive guard
        cli_error = CliError("Unexpected error", exit_code=1, details=str(error))
        _emit_error(cli_error)
        exit_code = cli_error.exit_code
    return exit_code


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legacymod",
        description="Inspect legacy plugin argument lines and JSON responses.",
    )
    parser.add_argument("--version", action="version", version=f"legacymod {__version__}")
    subparsers = parser.add_subparsers(dest="command_name")

    _configure_parse(subparsers)
    _configure_escape(subparsers)
    _configure_check(subparsers)
    _configure_schema(subparsers)

    return parser


def _configure_parse(subparsers: Any) -> None:
    parser = subparsers.add_parser(
        "parse",
        help="Tokenize and validate an argument line against an allow-list.",
    )
    parser.set_defaults(command=_command_parse)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--line",
        dest="line",
        help="Argument line given inline.",
    )
    source.add_argument(
        "--file",
        dest="file_path",
        help="File containing the argument line ('-' for stdin).",
    )
    parser.add_argument(
        "--allow",
        dest="allow",
        action="append",
        default=[],
        help="Accepted keyword name; repeat or separate with commas.",
    )
    parser.add_argument(
        "--positional",
        dest="positional",
        action="store_true",
        help=f"Accept positional arguments (same as --allow '{POSITIONAL_MARKER}').",
    )


def _configure_escape(subparsers: Any) -> None:
    escape_parser = subparsers.add_parser(
        "escape",
        help="Print TEXT as the body of a JSON string literal.",
    )
    escape_parser.set_defaults(command=_command_escape)
    escape_parser.add_argument("text", help="Text to escape ('-' for stdin).")

    unescape_parser = subparsers.add_parser(
        "unescape",
        help="Decode the body of a JSON string literal.",
    )
    unescape_parser.set_defaults(command=_command_unescape)
    unescape_parser.add_argument("text", help="Escaped text to decode ('-' for stdin).")


def _configure_check(subparsers: Any) -> None:
    parser = subparsers.add_parser(
        "check",
        help="Validate the output of a plugin run as a protocol response.",
    )
    parser.set_defaults(command=_command_check)
    parser.add_argument(
        "--input",
        "--in",
        dest="input_path",
        default="-",
        help="File holding the plugin output (default: stdin).",
    )


def _configure_schema(subparsers: Any) -> None:
    schema_parser = subparsers.add_parser(
        "schema",
        help="Interact with the response JSON Schema.",
    )
    schema_subparsers = schema_parser.add_subparsers(dest="schema_command")

    export_parser = schema_subparsers.add_parser(
        "export",
        help="Export the response JSON Schema to a file (default: stdout).",
    )
    export_parser.set_defaults(command=_command_schema_export)
    export_parser.add_argument(
        "--output",
        "--out",
        dest="output_path",
        default="-",
        help="Destination file for the JSON Schema or '-' for stdout.",
    )


def _command_parse(args: argparse.Namespace) -> int:
    line = args.line if args.line is not None else _read_text(Path(args.file_path)).rstrip("\n")
    declaration = _split_names(cast("Sequence[str]", args.allow))
    if args.positional:
        declaration.append(POSITIONAL_MARKER)
    parsed = parse_arguments(line, AllowList.from_declaration(declaration))
    _write_json_output(_parsed_payload(parsed), None)
    return 0


def _command_escape(args: argparse.Namespace) -> int:
    sys.stdout.write(escape(_text_argument(args.text)) + "\n")
    return 0


def _command_unescape(args: argparse.Namespace) -> int:
    sys.stdout.write(unescape(_text_argument(args.text)) + "\n")
    return 0


def _command_check(args: argparse.Namespace) -> int:
    text = _read_text(Path(args.input_path))
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) != 1:
        message = f"Expected exactly one response line, found {len(lines)}."
        raise CliError(message)
    payload = validate_response_line(lines[0])
    _write_json_output({"status": "ok", "failed": bool(payload.get("failed", False))}, None)
    return 0


def _command_schema_export(args: argparse.Namespace) -> int:
    schema = build_response_json_schema()
    _write_json_output(schema, args.output_path)
    return 0


def _split_names(raw_values: Sequence[str]) -> list[str]:
    names: list[str] = []
    for raw in raw_values:
        names.extend(item.strip() for item in raw.split(",") if item.strip())
    return names


def _parsed_payload(parsed: ParsedArguments) -> dict[str, Any]:
    return {
        "bindings": dict(parsed.bindings),
        "positionals": list(parsed.positionals),
        "tokens": [_token_payload(token) for token in parsed.tokens],
    }


def _token_payload(token: ArgumentToken) -> dict[str, Any]:
    return {"name": token.name, "raw_value": token.raw_value}


def _text_argument(value: str) -> str:
    if value == "-":
        return sys.stdin.read().rstrip("\n")
    return value


def _read_text(path: Path) -> str:
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as error:
        message = f"File not found: {path}"
        raise CliError(message) from error
    except OSError as error:
        message = f"Unable to read {path}: {error}"  # pragma: no cover - defensive guard
        raise CliError(message) from error


def _write_json_output(payload: Any, output_path: str | None) -> None:
    serialized = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
    if output_path in {None, "", "-"}:
        sys.stdout.write(serialized + "\n")
        sys.stdout.flush()
        return
    path = Path(cast("str", output_path))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialized + "\n", encoding="utf-8")


def _configure_logging() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _emit_error(error: CliError) -> None:
    payload = {
        "status": "error",
        "message": mask_secrets(str(error)),
        "type": type(error).__name__,
    }
    if error.details is not None:
        payload["details"] = scrub_for_logging(error.details)
    safe_payload = scrub_for_logging(payload)
    serialized = json.dumps(safe_payload, ensure_ascii=False, sort_keys=True)
    sys.stderr.write(serialized + "\n")
    sys.stderr.flush()


__all__ = ["CliError", "main"]
