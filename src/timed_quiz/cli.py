"""``timed-quiz`` entry point: routes the first argument to a subcommand."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import import_module, metadata
from typing import Optional, Sequence, TextIO

_QUIZ_CLI = "timed_quiz.quiz.cli"


@dataclass(frozen=True)
class Subcommand:
    name: str
    summary: str
    entry: str

    def invoke(self, argv: Sequence[str]) -> int:
        """Import the handler lazily and turn ``SystemExit`` into a code."""

        handler = getattr(import_module(_QUIZ_CLI), self.entry)
        try:
            code = handler(list(argv))
        except SystemExit as exc:
            return _exit_code(exc)
        return code if isinstance(code, int) else 0


SUBCOMMANDS: dict[str, Subcommand] = {
    sub.name: sub
    for sub in (
        Subcommand(
            "run", "Run a timed quiz from a question/answer file.", "main"
        ),
        Subcommand(
            "check",
            "Validate a problem file and list skipped rows.",
            "check_main",
        ),
        Subcommand(
            "config",
            "Write the default quiz.toml configuration.",
            "config_main",
        ),
    )
}


def command_table() -> str:
    width = max(map(len, SUBCOMMANDS))
    rows = [
        f"  {sub.name:<{width}}  {sub.summary}"
        for sub in SUBCOMMANDS.values()
    ]
    return "\n".join(["Available commands:", *rows])


def usage() -> str:
    return (
        "Usage: timed-quiz <command> [args...]\n"
        "Run `timed-quiz list` for commands or `timed-quiz help <name>` "
        "for details.\n\n" + command_table()
    )


def _say(text: str, stream: Optional[TextIO] = None) -> None:
    (stream or sys.stdout).write(text + "\n")


def _unknown(name: str) -> int:
    _say(f"Unknown command '{name}'.", sys.stderr)
    _say(command_table(), sys.stderr)
    return 2


def _version() -> str:
    try:
        return metadata.version("timed-quiz")
    except metadata.PackageNotFoundError:
        return "unknown"


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _say(usage())
        return 2

    head, rest = args[0], args[1:]
    if head in ("-h", "--help"):
        _say(usage())
        return 0
    if head in ("-V", "--version", "version"):
        _say(_version())
        return 0
    if head == "list":
        _say(command_table())
        return 0
    if head == "help":
        if not rest:
            _say(usage())
            return 0
        sub = SUBCOMMANDS.get(rest[0])
        if sub is None:
            return _unknown(rest[0])
        _say(f"{sub.name}: {sub.summary}")
        _say(f"Run `timed-quiz {sub.name} --help` for command options.")
        return 0

    sub = SUBCOMMANDS.get(head)
    if sub is None:
        return _unknown(head)
    return sub.invoke(rest)


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    _say(str(exc.code), sys.stderr)
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
