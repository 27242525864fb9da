"""Text commands for inspecting and resetting the parameter database."""

from __future__ import annotations

import sys
from typing import Callable

from vcucore.errors import ErrorLog
from vcucore.params import ParamStore, ParamType


def format_list(params: ParamStore) -> str:
    """List the names and units of all visible entries."""
    lines = ["Available parameters and values\r\n"]
    for name in params:
        attr = params.attributes(name)
        if not attr.hidden:
            lines.append(f"{attr.name} [{attr.unit}]\r\n")
    return "".join(lines)


def format_attributes(params: ParamStore) -> str:
    """List min, max and default of every visible parameter."""
    lines = ["Parameter attributes\r\n", "Name\t\tmin - max [default]\r\n"]
    for name in params:
        attr = params.attributes(name)
        if attr.type in (ParamType.PARAM, ParamType.TESTPARAM) and not attr.hidden:
            lines.append(f"{attr.name}\t\t{attr.min:f} - {attr.max:f} [{attr.default:f}]\r\n")
    return "".join(lines)


def load_defaults(params: ParamStore) -> str:
    """Reset all parameters to their defaults."""
    params.load_defaults()
    return "Defaults loaded\r\n"


def format_all(params: ParamStore) -> str:
    """List the current value of every entry."""
    return "".join(f"{name}\t\t{params[name]:f}\r\n" for name in params)


def format_errors(log: ErrorLog) -> str:
    """List the recorded errors."""
    return log.format_all()


_COMMANDS: dict[str, Callable[[ParamStore, ErrorLog], str]] = {
    "defaults": lambda params, log: load_defaults(params),
    "all": lambda params, log: format_all(params),
    "list": lambda params, log: format_list(params),
    "atr": lambda params, log: format_attributes(params),
    "errors": lambda params, log: format_errors(log),
}


def run_command(line: str, params: ParamStore, log: ErrorLog) -> str:
    """Run one command line and return its output.

    Raises ValueError for an empty line or an unknown command.
    """
    words = line.split()
    if not words:
        raise ValueError("empty command")
    try:
        handler = _COMMANDS[words[0]]
    except KeyError:
        raise ValueError(f"unknown command: {words[0]}") from None
    return handler(params, log)


def main(argv: list[str] | None = None) -> int:
    """Run the commands given as arguments, or one per line from standard input."""
    args = sys.argv[1:] if argv is None else list(argv)
    params = ParamStore()
    log = ErrorLog()
    commands = args if args else (line for line in sys.stdin if line.strip())
    status = 0
    for command in commands:
        try:
            sys.stdout.write(run_command(command, params, log))
        except ValueError as exc:
            sys.stderr.write(f"{exc}\n")
            status = 1
    return status


if __name__ == "__main__":
    raise SystemExit(main())