"""
Shared runner for the single-heuristic command-line tools.

Each tool reads one JSON context (``--input FILE``, ``--json STRING`` or
``--stdin``), validates it against the heuristic's strict input model,
runs the compiled decision function and prints the result as JSON.

Exit codes:
    0  success
    1  invalid or malformed input, or execution failure
    2  input failed schema validation
    3  configuration or compiler could not be loaded
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, TextIO

from pydantic import BaseModel, ValidationError

from hybridops import __version__
from hybridops.configuration import ConfigStore, heuristic_section, resolve_config
from hybridops.core import get_settings
from hybridops.errors import HybridOpsError
from hybridops.heuristics import STRICT_INPUTS, HeuristicCompiler
from hybridops.observability import Telemetry, configure_logging

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_VALIDATION_ERROR = 2
EXIT_LOAD_FAILURE = 3


@dataclass(frozen=True)
class ToolSpec:
    """Identity of one command-line tool."""

    prog: str
    title: str
    heuristic_id: str
    heuristic_name: str
    examples: tuple[str, ...] = ()

    @property
    def input_model(self) -> type[BaseModel]:
        return STRICT_INPUTS[self.heuristic_id]


class _UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """argparse that reports usage errors instead of exiting with 2."""

    def error(self, message: str) -> None:
        raise _UsageError(message)


def format_error(code: str, message: str, details: dict[str, Any] | None = None) -> str:
    return json.dumps({"error": code, "message": message, "details": details or {}}, indent=2)


def build_parser(spec: ToolSpec) -> argparse.ArgumentParser:
    epilog = "examples:\n" + "\n".join(f"  {line}" for line in spec.examples) if spec.examples else None
    parser = _ArgumentParser(
        prog=spec.prog,
        description=f"{spec.title} - runs heuristic {spec.heuristic_id} ({spec.heuristic_name}).",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", metavar="FILE", help="read the JSON context from a file")
    source.add_argument("--json", metavar="STRING", help="parse an inline JSON string")
    source.add_argument("--stdin", action="store_true", help="read the JSON context from stdin")
    parser.add_argument("--version", action="store_true", help="show version information")
    return parser


def _read_input(args: argparse.Namespace, stdin: TextIO) -> Any:
    if args.input:
        try:
            text = Path(args.input).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ValueError(f"File not found: {args.input}") from None
        except OSError as e:
            raise ValueError(f"Could not read {args.input}: {e}") from None
        where = "in file"
    elif args.json is not None:
        text = args.json
        where = "in --json argument"
    else:
        text = stdin.read()
        where = "from stdin"
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON {where}: {e}") from None


def _validation_details(error: ValidationError) -> dict[str, Any]:
    problems = error.errors(include_url=False)
    first = problems[0]
    return {
        "field": ".".join(str(part) for part in first["loc"]) or None,
        "error": first["msg"],
        "errors": [
            {"field": ".".join(str(part) for part in p["loc"]), "message": p["msg"]}
            for p in problems
        ],
    }


def run_tool(
    spec: ToolSpec,
    argv: list[str] | None = None,
    *,
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run one tool invocation and return its exit code."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    parser = build_parser(spec)
    try:
        args = parser.parse_args(argv)
    except _UsageError as e:
        print(format_error("INVALID_ARGUMENTS", str(e)), file=stderr)
        return EXIT_INVALID_INPUT
    except SystemExit as e:
        # --help
        return int(e.code or 0)

    if args.version:
        print(f"{spec.title} v{__version__}", file=stdout)
        print(f"Heuristic: {spec.heuristic_id} ({spec.heuristic_name})", file=stdout)
        return EXIT_OK

    if not (args.input or args.json is not None or args.stdin):
        print(format_error(
            "INVALID_INPUT",
            "No input method specified. Use --input, --json, or --stdin",
        ), file=stderr)
        return EXIT_INVALID_INPUT

    try:
        data = _read_input(args, stdin)
    except ValueError as e:
        print(format_error("INVALID_INPUT", str(e)), file=stderr)
        return EXIT_INVALID_INPUT

    if not isinstance(data, dict):
        print(format_error(
            "VALIDATION_ERROR", "Input must be a JSON object", {"received": type(data).__name__}
        ), file=stderr)
        return EXIT_VALIDATION_ERROR

    try:
        validated = spec.input_model.from_context(data)
    except ValidationError as e:
        details = _validation_details(e)
        print(format_error("VALIDATION_ERROR", details["error"], details), file=stderr)
        return EXIT_VALIDATION_ERROR

    telemetry = Telemetry()
    try:
        path = config_path if config_path is not None else get_settings().config_path
        config, source = resolve_config(ConfigStore(path, telemetry=telemetry).load(), environ, telemetry)
        fn = HeuristicCompiler(telemetry=telemetry).compile(
            spec.heuristic_id, heuristic_section(config, spec.heuristic_id)
        )
    except (HybridOpsError, OSError) as e:
        print(format_error(
            "MIND_LOADING_FAILURE",
            f"Failed to load heuristic compiler: {e}",
            {"heuristicId": spec.heuristic_id},
        ), file=stderr)
        return EXIT_LOAD_FAILURE

    try:
        result = fn(validated.model_dump())
    except HybridOpsError as e:
        print(format_error(
            "EXECUTION_ERROR",
            f"Heuristic execution failed: {e}",
            {"heuristicId": spec.heuristic_id, "configSource": source},
        ), file=stderr)
        return EXIT_INVALID_INPUT

    print(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False), file=stdout)
    return EXIT_OK


def main(spec: ToolSpec, argv: list[str] | None = None) -> int:
    """Console entry point body: quiet logging, then ``run_tool``."""
    configure_logging("ERROR")
    return run_tool(spec, argv)
