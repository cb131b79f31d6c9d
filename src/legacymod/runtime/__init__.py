"""Invocation lifecycle: output capture, response emission and failure trapping."""

from .capture import CapturedOutput, OutputCapture
from .emitter import InvocationContext, ResponseEmitter, SourceLocation, describe_failure
from .invocation import InvocationSource, parse_invocation
from .session import (
    INTERRUPTED_EXIT_CODE,
    NO_RESPONSE_MESSAGE,
    ModuleSession,
    response_field,
    run_module,
)

__all__ = [
    "INTERRUPTED_EXIT_CODE",
    "NO_RESPONSE_MESSAGE",
    "CapturedOutput",
    "InvocationContext",
    "InvocationSource",
    "ModuleSession",
    "OutputCapture",
    "ResponseEmitter",
    "SourceLocation",
    "describe_failure",
    "parse_invocation",
    "response_field",
    "run_module",
]
