"""Configuration loader for timed quiz sessions."""

from __future__ import annotations

import logging
import math
import os
import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from .home import CONFIG_FILENAME, QuizHome, QuizHomeError, locate_home

CONFIG_ENV = "TIMED_QUIZ_CONFIG"
ENV_PREFIX = "TIMED_QUIZ_"

_DEFAULT_CSV = "problems.csv"
_DEFAULT_LIMIT = 30
_DEFAULT_LOG_LEVEL = "INFO"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved settings for a quiz run."""

    csv_path: Path
    time_limit: float
    shuffle: bool
    delimiter: str
    wait_for_start: bool
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    csv_path: Optional[Path] = None
    time_limit: Optional[float] = None
    shuffle: Optional[bool] = None
    delimiter: Optional[str] = None
    wait_for_start: Optional[bool] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved settings plus the data home and the file they came from."""

    config: QuizConfig
    home: QuizHome
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        home = locate_home(env=env_map, override=workspace_path).prepare()
    except QuizHomeError as exc:
        raise QuizConfigError(str(exc)) from exc

    explicit = config_path is not None or bool(
        env_map.get(CONFIG_ENV, "").strip()
    )
    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=home.config_file,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    csv_from_file = False
    if requested_path.is_file():
        loaded_path = requested_path
        parsed = _read_config_file(requested_path)
        _apply_file_settings(table, parsed, source=requested_path)
        csv_from_file = "csv" in parsed.get("quiz", {})
    elif explicit:
        raise QuizConfigError(f"Config file not found: {requested_path}")

    quiz_table = table["quiz"]

    csv_path = _resolve_csv_path(
        override=overrides.csv_path,
        env_value=_parse_env_string(env_map, "CSV"),
        file_value=quiz_table["csv"],
        config_dir=loaded_path.parent if csv_from_file else None,
    )
    time_limit = _validate_limit(
        _pick_first(
            overrides.time_limit,
            _parse_env_number(env_map, "LIMIT"),
            quiz_table["limit"],
        )
    )
    shuffle = _validate_bool(
        "quiz.shuffle",
        _pick_first(
            overrides.shuffle,
            _parse_env_bool(env_map, "SHUFFLE"),
            quiz_table["shuffle"],
        ),
    )
    delimiter = _validate_delimiter(
        _pick_first(
            overrides.delimiter,
            _parse_env_string(env_map, "DELIMITER"),
            quiz_table["delimiter"],
        )
    )
    wait_for_start = _validate_bool(
        "quiz.wait_for_start",
        _pick_first(overrides.wait_for_start, quiz_table["wait_for_start"]),
    )
    log_level = _resolve_log_level(
        _pick_first(
            overrides.log_level,
            _parse_env_string(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        )
    )

    config = QuizConfig(
        csv_path=csv_path,
        time_limit=time_limit,
        shuffle=shuffle,
        delimiter=delimiter,
        wait_for_start=wait_for_start,
        log_level=log_level,
    )
    return LoadResult(config=config, home=home, config_path=loaded_path)


def config_template() -> str:
    """Return the commented ``quiz.toml`` shipped with the package."""

    return (
        resources.files(__package__)
        .joinpath(CONFIG_FILENAME)
        .read_text(encoding="utf-8")
    )


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write :func:`config_template` to ``path``.

    An existing file is only replaced when ``overwrite`` is set.
    """

    if path.exists() and not overwrite:
        raise QuizConfigError(
            f"Config already exists: {path} (pass --force to replace it)"
        )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise QuizConfigError(
            f"unable to write {path}: {exc.strerror or exc}"
        ) from exc
    return path


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "quiz": {
            "csv": _DEFAULT_CSV,
            "limit": _DEFAULT_LIMIT,
            "shuffle": False,
            "delimiter": ",",
            "wait_for_start": True,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise QuizConfigError(
            f"unable to read {path}: {exc.strerror or exc}"
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise QuizConfigError(f"invalid TOML in {path}: {exc}") from exc


def _apply_file_settings(
    table: MutableMapping[str, MutableMapping[str, Any]],
    parsed: Mapping[str, Any],
    *,
    source: Path,
) -> None:
    for section, values in parsed.items():
        if section not in table:
            raise QuizConfigError(f"{source}: unknown section '{section}'.")
        if not isinstance(values, Mapping):
            raise QuizConfigError(f"{source}: '{section}' must be a table.")
        unknown = sorted(set(values) - set(table[section]))
        if unknown:
            names = ", ".join(f"{section}.{key}" for key in unknown)
            raise QuizConfigError(f"{source}: unknown key(s) {names}.")
        table[section].update(values)


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV, "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_csv_path(
    *,
    override: Optional[Path],
    env_value: Optional[str],
    file_value: object,
    config_dir: Optional[Path],
) -> Path:
    if override is not None:
        return override.expanduser()
    if env_value is not None:
        return Path(env_value).expanduser()
    if not isinstance(file_value, str) or not file_value.strip():
        raise QuizConfigError("quiz.csv must be a non-empty string.")
    candidate = Path(file_value.strip()).expanduser()
    # Relative paths in a config file are relative to that file.
    if config_dir is not None and not candidate.is_absolute():
        return config_dir / candidate
    return candidate


def _validate_limit(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError("quiz.limit must be a number of seconds.")
    if not math.isfinite(value):
        raise QuizConfigError(
            f"quiz.limit must be a finite number, got {value}."
        )
    if value <= 0:
        raise QuizConfigError(
            f"quiz.limit must be greater than zero, got {value}."
        )
    return float(value)


def _validate_bool(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise QuizConfigError(f"{name} must be true or false.")
    return value


def _validate_delimiter(value: object) -> str:
    if not isinstance(value, str):
        raise QuizConfigError("quiz.delimiter must be a string.")
    if value == "\\t":
        value = "\t"
    if len(value) != 1 or value in {'"', "\r", "\n"}:
        raise QuizConfigError(
            f"quiz.delimiter must be a single character, got {value!r}."
        )
    return value


def _resolve_log_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError("logging.level must be a non-empty string.")
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise QuizConfigError(
            f"logging.level must be a logging level name, got '{value}'."
        )
    return level


def _parse_env_string(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    # Delimiters may legitimately be whitespace.
    if key == "DELIMITER":
        return raw or None
    value = raw.strip()
    return value or None


def _parse_env_number(
    env_map: Mapping[str, str], key: str
) -> Optional[float]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{key} must be a number, got '{raw}'."
        ) from exc


def _parse_env_bool(env_map: Mapping[str, str], key: str) -> Optional[bool]:
    raw = _parse_env_string(env_map, key)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise QuizConfigError(
        f"{ENV_PREFIX}{key} must be a boolean (true/false), got '{raw}'."
    )


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
