"""Command line entry points: `schemagen gen.schema` and `schemagen gen.embedded`."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from . import codegen
from .config import load_config
from .errors import GeneratorError
from .schema import build_schema, validate_args

_COMMANDS: dict[str, dict[str, object]] = {
    "gen.schema": {
        "help": "Generate an Ecto schema and migration file",
        "embedded": False,
    },
    "gen.embedded": {
        "help": "Generate an Ecto embedded schema file",
        "embedded": True,
    },
}


def _parser(command: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=f"schemagen {command}",
        description=str(_COMMANDS[command]["help"]),
    )
    parser.add_argument("args", nargs="*", metavar="ARG",
                        help="Module name, plural name, then name:type attributes")
    parser.add_argument("--migration", action=argparse.BooleanOptionalAction, default=None,
                        help="Generate a migration (default from project config)")
    parser.add_argument("--binary-id", action=argparse.BooleanOptionalAction, default=None,
                        help="Use binary ids for the primary key and references")
    parser.add_argument("--table", default=None, help="Table name, defaults to the plural name")
    parser.add_argument("--web", default=None, help="Web namespace, e.g. Admin")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _usage() -> str:
    lines = ["usage: schemagen <command> [options] <Module> <plural> [attrs...]", "", "commands:"]
    for name, info in _COMMANDS.items():
        lines.append(f"  {name:<14} {info['help']}")
    return "\n".join(lines)


def run(command: str, argv: Sequence[str], root: Path | None = None) -> int:
    """Run one generator command; returns the process exit code."""
    opts = _parser(command).parse_intermixed_args(list(argv))
    if opts.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    root = root or Path.cwd()
    try:
        module_path, plural, attrs = validate_args(opts.args)
        config = load_config(root)
        schema = build_schema(
            module_path,
            plural,
            attrs,
            config,
            migration=opts.migration,
            binary_id=opts.binary_id,
            table=opts.table,
            web=opts.web,
            embedded=bool(_COMMANDS[command]["embedded"]),
        )
        codegen.check_module_name_availability(schema, root)

        ts = codegen.timestamp()
        if not codegen.prompt_for_conflicts(codegen.files_to_be_generated(schema, ts), root):
            return 0
        codegen.generate(schema, root, ts)
    except GeneratorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    codegen.print_shell_instructions(schema)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in ("-h", "--help"):
        print(_usage())
        return 0 if argv else 1
    command, rest = argv[0], argv[1:]
    if command not in _COMMANDS:
        print(f"Error: unknown command {command!r}\n\n{_usage()}", file=sys.stderr)
        return 1
    return run(command, rest)
