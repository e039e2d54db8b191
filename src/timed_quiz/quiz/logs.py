"""JSON-lines run log for quiz commands.

Every record becomes one JSON object in ``<home>/logs/quiz.log``. Values
passed through ``extra=`` are collected under an ``"extra"`` key so the
problem loader can attach the source file and line of a skipped row.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

QUIZ_LOGGER = "timed_quiz.quiz"
LOG_FILENAME = "quiz.log"

_MAX_BYTES = 512 * 1024
_BACKUP_COUNT = 3

_BUILTIN_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
}


class JsonLinesFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _BUILTIN_FIELDS
        }
        if context:
            entry["extra"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_quiz_logger(
    log_dir: Path,
    *,
    level: str = "INFO",
    verbose: bool = False,
    name: str = QUIZ_LOGGER,
) -> tuple[logging.Logger, Path]:
    """Attach a fresh JSON file handler (and, when ``verbose``, a stderr
    echo) to the quiz logger and return it with the log file path.

    Handlers from an earlier call are replaced, so the stderr echo always
    writes to the current ``sys.stderr``.
    """

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    file_handler, log_path = _open_log_file(log_dir)
    file_handler.setLevel(logging.DEBUG if verbose else _level_number(level))
    file_handler.setFormatter(JsonLinesFormatter())
    logger.addHandler(file_handler)

    if verbose:
        echo = logging.StreamHandler(sys.stderr)
        echo.setLevel(logging.DEBUG)
        echo.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(echo)

    return logger, log_path


def _open_log_file(log_dir: Path) -> tuple[RotatingFileHandler, Path]:
    try:
        return _rotating_handler(log_dir)
    except PermissionError:
        # Unwritable home; keep the run going with a log in the temp dir.
        return _rotating_handler(fallback_log_dir())


def _rotating_handler(log_dir: Path) -> tuple[RotatingFileHandler, Path]:
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / LOG_FILENAME
    handler = RotatingFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    return handler, path


def fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "timed-quiz-logs"


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.strip().upper())
    return number if isinstance(number, int) else logging.INFO


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    return repr(value)
