"""Tools package - command-line front ends for the built-in heuristics."""

from .cli import (
    EXIT_INVALID_INPUT,
    EXIT_LOAD_FAILURE,
    EXIT_OK,
    EXIT_VALIDATION_ERROR,
    ToolSpec,
    build_parser,
    format_error,
    run_tool,
)

__all__ = [
    "EXIT_INVALID_INPUT",
    "EXIT_LOAD_FAILURE",
    "EXIT_OK",
    "EXIT_VALIDATION_ERROR",
    "ToolSpec",
    "build_parser",
    "format_error",
    "run_tool",
]
