"""Public APIs for timed quiz sessions."""

from __future__ import annotations

from .config import (
    ConfigOverrides,
    LoadResult,
    QuizConfig,
    QuizConfigError,
    config_template,
    load_config,
    write_config_template,
)
from .home import QuizHome, QuizHomeError, locate_home
from .logs import JsonLinesFormatter, setup_quiz_logger
from .problems import (
    Problem,
    ProblemFileError,
    ProblemSet,
    SkippedRow,
    load_problems,
    normalize_answer,
    parse_problems,
    shuffle_problems,
)
from .session import (
    AnswerRecord,
    QuizInputError,
    QuizResult,
    render_review,
    render_score,
    run_timed_session,
)

__all__ = [
    "ConfigOverrides",
    "LoadResult",
    "QuizConfig",
    "QuizConfigError",
    "config_template",
    "load_config",
    "write_config_template",
    "QuizHome",
    "QuizHomeError",
    "locate_home",
    "JsonLinesFormatter",
    "setup_quiz_logger",
    "Problem",
    "ProblemFileError",
    "ProblemSet",
    "SkippedRow",
    "load_problems",
    "normalize_answer",
    "parse_problems",
    "shuffle_problems",
    "AnswerRecord",
    "QuizInputError",
    "QuizResult",
    "render_review",
    "render_score",
    "run_timed_session",
]
