"""Rich-powered timed quiz session.

A background thread prompts for each problem and reads answers through an
injected ``input_provider`` while the calling thread races those answers
against a wall-clock deadline. Whichever finishes first ends the session:
every problem answered, the time limit reached, input closed, or the user
interrupting with Ctrl-C. Answers that arrive after the session ended are
discarded.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence, Union

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .problems import Problem

__all__ = [
    "AnswerRecord",
    "InputProvider",
    "QuizInputError",
    "QuizResult",
    "SessionOutcome",
    "render_review",
    "render_score",
    "run_timed_session",
]

InputProvider = Callable[[], str]
SessionOutcome = Literal["completed", "expired", "input_closed", "interrupted"]

START_PROMPT = "Press Enter to start the quiz"


class QuizInputError(RuntimeError):
    """Raised when reading an answer fails for a reason other than EOF."""


@dataclass(frozen=True)
class AnswerRecord:
    """A single answered problem."""

    number: int
    question: str
    expected: str
    response: str
    is_correct: bool


@dataclass(frozen=True)
class QuizResult:
    """Outcome of a timed session."""

    total: int
    correct: int
    answered: int
    outcome: SessionOutcome
    responses: tuple[AnswerRecord, ...] = ()
    elapsed: float = 0.0

    @property
    def unanswered(self) -> int:
        return self.total - self.answered


@dataclass(frozen=True)
class _Finished:
    outcome: SessionOutcome


@dataclass(frozen=True)
class _Failed:
    error: BaseException


_Event = Union[AnswerRecord, _Finished, _Failed]


class _AnswerReader(threading.Thread):
    """Prompt for each problem and post answers to ``events``."""

    def __init__(
        self,
        problems: Sequence[Problem],
        console: Console,
        input_provider: InputProvider,
        events: "queue.Queue[_Event]",
    ) -> None:
        super().__init__(name="timed-quiz-reader", daemon=True)
        self._problems = problems
        self._console = console
        self._input = input_provider
        self._events = events
        self.stopped = threading.Event()

    def run(self) -> None:
        for number, problem in enumerate(self._problems, start=1):
            if self.stopped.is_set():
                return
            self._console.print(
                f"Problem #{number}: {problem.question} = ",
                end="",
                markup=False,
                emoji=False,
                highlight=False,
            )
            try:
                raw = self._input()
            except (EOFError, StopIteration):
                self._post(_Finished("input_closed"))
                return
            except Exception as exc:  # handed to the session thread
                self._post(_Failed(exc))
                return
            self._post(
                AnswerRecord(
                    number=number,
                    question=problem.question,
                    expected=problem.answer,
                    response=raw,
                    is_correct=problem.matches(raw),
                )
            )
        self._post(_Finished("completed"))

    def _post(self, event: _Event) -> None:
        if not self.stopped.is_set():
            self._events.put(event)


def run_timed_session(
    problems: Sequence[Problem],
    console: Console,
    input_provider: InputProvider,
    *,
    time_limit: float,
    wait_for_start: bool = True,
    logger: Optional[logging.Logger] = None,
) -> QuizResult:
    """Ask ``problems`` in order until done or ``time_limit`` seconds pass."""

    log = logger or logging.getLogger(__name__)
    total = len(problems)

    if not problems:
        log.info("No problems to ask")
        return QuizResult(0, 0, 0, "completed")

    if wait_for_start:
        console.print(START_PROMPT, end="", markup=False, emoji=False)
        try:
            input_provider()
        except (EOFError, StopIteration):
            console.print()
            log.info("Input closed before the quiz started")
            return QuizResult(total, 0, 0, "input_closed")
        except KeyboardInterrupt:
            console.print()
            return QuizResult(total, 0, 0, "interrupted")

    events: "queue.Queue[_Event]" = queue.Queue()
    reader = _AnswerReader(problems, console, input_provider, events)
    records: list[AnswerRecord] = []
    started = time.monotonic()
    deadline = started + time_limit

    log.info(
        "Quiz started",
        extra={"total": total, "time_limit": time_limit},
    )
    reader.start()
    try:
        outcome = _collect(events, records, deadline)
    except KeyboardInterrupt:
        outcome = "interrupted"
    finally:
        reader.stopped.set()
    elapsed = time.monotonic() - started

    if outcome != "completed":
        # The prompt line is left open when the session is cut short.
        console.print()

    result = QuizResult(
        total=total,
        correct=sum(1 for record in records if record.is_correct),
        answered=len(records),
        outcome=outcome,
        responses=tuple(records),
        elapsed=elapsed,
    )
    log.info(
        "Quiz finished",
        extra={
            "outcome": result.outcome,
            "correct": result.correct,
            "answered": result.answered,
            "total": result.total,
            "elapsed": round(result.elapsed, 3),
        },
    )
    return result


def _collect(
    events: "queue.Queue[_Event]",
    records: list[AnswerRecord],
    deadline: float,
) -> SessionOutcome:
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return "expired"
        try:
            event = events.get(timeout=remaining)
        except queue.Empty:
            return "expired"
        if isinstance(event, AnswerRecord):
            records.append(event)
        elif isinstance(event, _Finished):
            return event.outcome
        else:
            raise QuizInputError(
                f"error reading from input: {event.error}"
            ) from event.error


def render_score(console: Console, result: QuizResult) -> None:
    if result.outcome == "expired":
        console.print(Text("Time's up!", style="bold yellow"))
    console.print(
        f"You scored {result.correct} out of {result.total}.",
        highlight=False,
    )


def render_review(console: Console, result: QuizResult) -> None:
    """Print a table of every answered problem."""

    table = Table(title="Review", box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right")
    table.add_column("Problem", overflow="fold")
    table.add_column("Your answer")
    table.add_column("Expected")
    table.add_column("Result", justify="center")
    for record in result.responses:
        table.add_row(
            str(record.number),
            Text(record.question),
            Text(record.response.strip() or "-"),
            Text(record.expected),
            "correct" if record.is_correct else "wrong",
        )
    console.print(table)
    if result.unanswered:
        console.print(
            Text(f"{result.unanswered} problem(s) not answered.", style="dim")
        )
