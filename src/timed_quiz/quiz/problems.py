"""Problem model and delimited-file loader for timed quizzes.

Problem files are header-less, two-column delimited text::

    5+5,10
    "what is 2, plus 2",4

Each row is a question followed by its expected answer. Rows with any
other number of fields are skipped and reported; blank lines are ignored.
Answers are normalized once at load time so comparisons during a session
stay trivial.
"""

from __future__ import annotations

import csv
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

__all__ = [
    "DEFAULT_DELIMITER",
    "Problem",
    "ProblemFileError",
    "ProblemSet",
    "SkippedRow",
    "load_problems",
    "normalize_answer",
    "parse_problems",
    "shuffle_problems",
]

DEFAULT_DELIMITER = ","
_FIELDS_PER_ROW = 2


class ProblemFileError(RuntimeError):
    """Raised when a problem file cannot be opened or parsed."""


def normalize_answer(text: str) -> str:
    """Trim surrounding whitespace and lower-case ``text``."""

    return text.strip().lower()


@dataclass(frozen=True)
class Problem:
    """A single question with its normalized expected answer."""

    question: str
    answer: str

    @classmethod
    def from_row(cls, question: str, answer: str) -> "Problem":
        return cls(question=question, answer=normalize_answer(answer))

    def matches(self, response: Optional[str]) -> bool:
        if response is None:
            return False
        return normalize_answer(response) == self.answer


@dataclass(frozen=True)
class SkippedRow:
    """A row rejected while loading a problem file."""

    line: int
    field_count: int
    reason: str


@dataclass(frozen=True)
class ProblemSet:
    """Problems loaded from a source together with any rejected rows."""

    problems: tuple[Problem, ...]
    skipped: tuple[SkippedRow, ...] = ()
    source: Optional[Path] = None

    def __len__(self) -> int:
        return len(self.problems)


def parse_problems(
    lines: Iterable[str],
    *,
    delimiter: str = DEFAULT_DELIMITER,
    source: Optional[Path] = None,
    logger: Optional[logging.Logger] = None,
) -> ProblemSet:
    """Parse delimited ``lines`` into a :class:`ProblemSet`.

    Quoting errors abort the parse with :class:`ProblemFileError`; rows
    with the wrong number of fields are skipped and logged as warnings.
    """

    log = logger or logging.getLogger(__name__)
    label = str(source) if source is not None else "<input>"
    reader = csv.reader(lines, delimiter=delimiter, strict=True)

    problems: list[Problem] = []
    skipped: list[SkippedRow] = []
    try:
        for row in reader:
            if not row:
                continue
            if len(row) != _FIELDS_PER_ROW:
                entry = SkippedRow(
                    line=reader.line_num,
                    field_count=len(row),
                    reason=(
                        f"expected {_FIELDS_PER_ROW} fields, "
                        f"found {len(row)}"
                    ),
                )
                skipped.append(entry)
                log.warning(
                    "Skipping malformed row on line %d",
                    entry.line,
                    extra={
                        "source": label,
                        "line": entry.line,
                        "field_count": entry.field_count,
                    },
                )
                continue
            question, answer = row
            problems.append(Problem.from_row(question, answer))
    except csv.Error as exc:
        raise ProblemFileError(
            f"error reading {label} near line {reader.line_num}: {exc}"
        ) from exc

    log.debug(
        "Parsed problem rows",
        extra={
            "source": label,
            "problem_count": len(problems),
            "skipped_count": len(skipped),
        },
    )
    return ProblemSet(
        problems=tuple(problems),
        skipped=tuple(skipped),
        source=source,
    )


def load_problems(
    path: Path,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    encoding: str = "utf-8-sig",
    logger: Optional[logging.Logger] = None,
) -> ProblemSet:
    """Load problems from the delimited file at ``path``."""

    try:
        with Path(path).open("r", encoding=encoding, newline="") as handle:
            return parse_problems(
                handle,
                delimiter=delimiter,
                source=Path(path),
                logger=logger,
            )
    except FileNotFoundError as exc:
        raise ProblemFileError(
            f"unable to open '{path}': file not found"
        ) from exc
    except IsADirectoryError as exc:
        raise ProblemFileError(
            f"unable to open '{path}': is a directory"
        ) from exc
    except PermissionError as exc:
        raise ProblemFileError(
            f"unable to open '{path}': permission denied"
        ) from exc
    except UnicodeDecodeError as exc:
        raise ProblemFileError(
            f"unable to decode '{path}' as {encoding}: {exc.reason}"
        ) from exc


def shuffle_problems(
    problems: Sequence[Problem], *, seed: Optional[int] = None
) -> list[Problem]:
    """Return a shuffled copy of ``problems`` without mutating the input."""

    shuffled = list(problems)
    random.Random(seed).shuffle(shuffled)
    return shuffled
