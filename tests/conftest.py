from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import QuizFiles, detach_handlers  # noqa: E402

from timed_quiz.quiz.logs import QUIZ_LOGGER  # noqa: E402

_ENV_KEYS = (
    "TIMED_QUIZ_DATA_HOME",
    "TIMED_QUIZ_CONFIG",
    "TIMED_QUIZ_CSV",
    "TIMED_QUIZ_LIMIT",
    "TIMED_QUIZ_SHUFFLE",
    "TIMED_QUIZ_DELIMITER",
    "TIMED_QUIZ_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def data_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the data home at tmp and clear any TIMED_QUIZ_* settings."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    home = tmp_path / "data-home"
    monkeypatch.setenv("TIMED_QUIZ_DATA_HOME", str(home))
    yield home
    detach_handlers(logging.getLogger(QUIZ_LOGGER))


@pytest.fixture
def quiz_files(tmp_path: Path) -> QuizFiles:
    return QuizFiles(tmp_path)
