"""Shared testing fixtures for the timed_quiz test suite."""

from .files import QuizFiles  # noqa: F401
from .logs import detach_handlers  # noqa: F401
from .session import LineFeeder, blocking_provider  # noqa: F401

__all__ = [
    "LineFeeder",
    "QuizFiles",
    "blocking_provider",
    "detach_handlers",
]
