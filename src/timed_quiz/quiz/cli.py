"""CLI entry points for running and checking timed quizzes."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .config import (
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
    write_config_template,
)
from .home import locate_home
from .logs import setup_quiz_logger
from .problems import (
    ProblemFileError,
    ProblemSet,
    load_problems,
    shuffle_problems,
)
from .session import (
    QuizInputError,
    render_review,
    render_score,
    run_timed_session,
)


def _read_stdin_line() -> str:
    line = sys.stdin.readline()
    if not line:
        raise EOFError("stdin closed")
    return line.rstrip("\r\n")


def _build_console() -> Console:
    return Console(highlight=False)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--csv",
        type=Path,
        help=(
            "Problem file in the format 'question,answer' "
            "(defaults to problems.csv)."
        ),
    )
    parser.add_argument(
        "--delimiter",
        help="Single-character field delimiter (defaults to ',').",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the data home holding config and log files.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timed-quiz run",
        description=(
            "Ask the problems from a delimited file against a time limit and "
            "report the final score."
        ),
        epilog=(
            "Run `timed-quiz config init` to scaffold the default quiz.toml "
            "template."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--limit",
        type=float,
        help="Time limit for the whole quiz in seconds (defaults to 30).",
    )
    parser.add_argument(
        "--shuffle",
        dest="shuffle",
        action="store_true",
        help="Ask problems in random order.",
    )
    parser.add_argument(
        "--no-shuffle",
        dest="shuffle",
        action="store_false",
        help="Ask problems in file order.",
    )
    parser.set_defaults(shuffle=None)
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for a reproducible shuffle.",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Start the timer immediately instead of waiting for Enter.",
    )
    parser.add_argument(
        "--review",
        action="store_true",
        help="Show every answered problem after the score.",
    )
    return parser


def _build_check_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timed-quiz check",
        description=(
            "Load a problem file and report usable problems and skipped rows "
            "without starting a quiz."
        ),
    )
    _add_common_arguments(parser)
    return parser


def _load(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    overrides: ConfigOverrides,
) -> LoadResult:
    try:
        return load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = ConfigOverrides(
        csv_path=args.csv,
        time_limit=args.limit,
        shuffle=args.shuffle,
        delimiter=args.delimiter,
        wait_for_start=False if args.no_wait else None,
        log_level=args.log_level,
    )
    load_result = _load(parser, args, overrides)
    config = load_result.config

    logger, log_path = setup_quiz_logger(
        load_result.home.log_dir,
        level=config.log_level,
        verbose=args.verbose,
    )
    logger.debug(
        "quiz run invoked",
        extra={
            "config_path": load_result.config_path,
            "csv": config.csv_path,
            "time_limit": config.time_limit,
            "shuffle": config.shuffle,
        },
    )

    try:
        problem_set = load_problems(
            config.csv_path, delimiter=config.delimiter, logger=logger
        )
    except ProblemFileError as exc:
        logger.error(
            "Failed to load problems",
            extra={"source": config.csv_path, "error": str(exc)},
        )
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    console = _build_console()
    _print_skipped_notice(console, problem_set, log_path)

    problems = list(problem_set.problems)
    if config.shuffle:
        problems = shuffle_problems(problems, seed=args.seed)

    try:
        result = run_timed_session(
            problems,
            console,
            _read_stdin_line,
            time_limit=config.time_limit,
            wait_for_start=config.wait_for_start,
            logger=logger,
        )
    except QuizInputError as exc:
        logger.error("Quiz aborted", extra={"error": str(exc)})
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    render_score(console, result)
    if args.review:
        render_review(console, result)
    return 0


def check_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_check_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    overrides = ConfigOverrides(
        csv_path=args.csv,
        delimiter=args.delimiter,
        log_level=args.log_level,
    )
    load_result = _load(parser, args, overrides)
    config = load_result.config

    logger, _ = setup_quiz_logger(
        load_result.home.log_dir,
        level=config.log_level,
        verbose=args.verbose,
    )

    try:
        problem_set = load_problems(
            config.csv_path, delimiter=config.delimiter, logger=logger
        )
    except ProblemFileError as exc:
        logger.error(
            "Failed to load problems",
            extra={"source": config.csv_path, "error": str(exc)},
        )
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    console = _build_console()
    console.print(
        Text(
            f"{config.csv_path}: {len(problem_set)} problem(s), "
            f"{len(problem_set.skipped)} skipped row(s)"
        ),
        soft_wrap=True,
    )
    if problem_set.skipped:
        table = Table(title="Skipped rows", box=box.SIMPLE, expand=False)
        table.add_column("Line", justify="right")
        table.add_column("Fields", justify="right")
        table.add_column("Reason")
        for row in problem_set.skipped:
            table.add_row(str(row.line), str(row.field_count), row.reason)
        console.print(table)
    return 0 if len(problem_set) else 1


def _print_skipped_notice(
    console: Console, problem_set: ProblemSet, log_path: Path
) -> None:
    if not problem_set.skipped:
        return
    console.print(
        Text(
            f"Skipped {len(problem_set.skipped)} malformed row(s); "
            f"details in {log_path}",
            style="yellow",
        ),
        soft_wrap=True,
    )


def config_main(argv: Sequence[str] | None = None) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timed-quiz config",
        description="Manage configuration files for timed quizzes.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default quiz.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help=(
            "Workspace root override used when resolving the default config "
            "path."
        ),
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    if args.path is not None:
        target = args.path.expanduser().resolve()
    else:
        target = locate_home(override=args.workspace).config_file

    try:
        written = write_config_template(target, overwrite=args.force)
    except QuizConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1

    sys.stdout.write(f"Wrote quiz config to {written}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
