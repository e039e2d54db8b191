"""Where quiz settings and run logs live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

HOME_ENV = "TIMED_QUIZ_DATA_HOME"
DEFAULT_HOME = Path.home() / ".timed-quiz-data"
CONFIG_FILENAME = "quiz.toml"


class QuizHomeError(RuntimeError):
    """Raised when the data home cannot be used."""


@dataclass(frozen=True)
class QuizHome:
    """Data home holding ``config/quiz.toml`` and the ``logs/`` directory."""

    root: Path

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def log_dir(self) -> Path:
        return self.root / "logs"

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    def prepare(self) -> "QuizHome":
        """Create the home and its subdirectories if they are missing."""

        for directory in (self.root, self.config_dir, self.log_dir):
            if directory.exists() and not directory.is_dir():
                raise QuizHomeError(
                    f"{directory} exists but is not a directory"
                )
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise QuizHomeError(
                    f"unable to create {directory}: {exc.strerror or exc}"
                ) from exc
        return self


def locate_home(
    *,
    env: Optional[Mapping[str, str]] = None,
    override: Optional[Path] = None,
) -> QuizHome:
    """Pick the data home: ``override``, then ``TIMED_QUIZ_DATA_HOME``, then
    ``~/.timed-quiz-data``. Nothing is created here; see
    :meth:`QuizHome.prepare`.
    """

    env_map = os.environ if env is None else env
    if override is not None:
        root = override
    else:
        raw = (env_map.get(HOME_ENV) or "").strip()
        root = Path(raw) if raw else DEFAULT_HOME
    return QuizHome(root.expanduser().resolve())
