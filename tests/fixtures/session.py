"""Scripted input providers for timed session tests."""

from __future__ import annotations

import threading
from typing import Callable, Iterable


class LineFeeder:
    """Return scripted answers, then raise ``EOFError`` like closed stdin."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = list(lines)
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if not self._lines:
            raise EOFError
        return self._lines.pop(0)


def blocking_provider(
    answers: Iterable[str], release: threading.Event
) -> Callable[[], str]:
    """Return ``answers`` in order, then block until ``release`` is set.

    Models a user who stops typing; the quiz timer has to end the session.
    """

    pending = list(answers)

    def _provider() -> str:
        if pending:
            return pending.pop(0)
        release.wait(timeout=5)
        return "late answer"

    return _provider
