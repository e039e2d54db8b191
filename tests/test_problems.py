from __future__ import annotations

import logging

import pytest

from timed_quiz.quiz.problems import (
    Problem,
    ProblemFileError,
    load_problems,
    normalize_answer,
    parse_problems,
    shuffle_problems,
)


def test_normalize_answer_trims_and_lowercases() -> None:
    assert normalize_answer("  Paris \t") == "paris"
    assert normalize_answer("") == ""


def test_problem_matches_normalized_response() -> None:
    problem = Problem.from_row("Capital of France?", " PARIS ")

    assert problem.answer == "paris"
    assert problem.matches("paris")
    assert problem.matches("  Paris\n")
    assert not problem.matches("london")
    assert not problem.matches(None)


def test_parse_problems_keeps_order_and_question_text() -> None:
    result = parse_problems(["5+5,10\n", " 7+3 ,10\n", "1+1,2\n"])

    assert [p.question for p in result.problems] == ["5+5", " 7+3 ", "1+1"]
    assert [p.answer for p in result.problems] == ["10", "10", "2"]
    assert result.skipped == ()


def test_parse_problems_handles_quoted_delimiters() -> None:
    result = parse_problems(['"what 2+2, sir?",4\n'])

    assert result.problems == (Problem("what 2+2, sir?", "4"),)


def test_parse_problems_skips_malformed_rows_with_warning(caplog) -> None:
    lines = [
        "1+1,2\n",
        "only-one-field\n",
        "a,b,c\n",
        "2+2,4\n",
    ]

    with caplog.at_level(logging.WARNING, logger="timed_quiz.quiz.problems"):
        result = parse_problems(lines)

    assert len(result) == 2
    assert [row.line for row in result.skipped] == [2, 3]
    assert [row.field_count for row in result.skipped] == [1, 3]
    assert "expected 2 fields, found 3" in result.skipped[1].reason
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert warnings[0].line == 2


def test_parse_problems_ignores_blank_lines() -> None:
    result = parse_problems(["1+1,2\n", "\n", "2+2,4\n"])

    assert len(result) == 2
    assert result.skipped == ()


def test_parse_problems_reports_line_numbers_after_multiline_field() -> None:
    lines = ['"first\n', 'line",1\n', "bad\n"]

    result = parse_problems(lines)

    assert result.problems[0].question == "first\nline"
    assert result.skipped[0].line == 3


def test_parse_problems_quote_error_is_fatal() -> None:
    with pytest.raises(ProblemFileError) as excinfo:
        parse_problems(['"5+5"x,10\n'])

    assert "line 1" in str(excinfo.value)


def test_parse_problems_custom_delimiter() -> None:
    result = parse_problems(["5+5;10\n", "a,b;c\n"], delimiter=";")

    assert [p.question for p in result.problems] == ["5+5", "a,b"]


def test_load_problems_reads_file(quiz_files) -> None:
    path = quiz_files.rows(["5+5,10", "capital of peru?, Lima "])

    result = load_problems(path)

    assert result.source == path
    assert [p.answer for p in result.problems] == ["10", "lima"]


def test_load_problems_strips_byte_order_mark(quiz_files) -> None:
    path = quiz_files.raw("bom.csv", "\ufeff5+5,10\n".encode("utf-8"))

    result = load_problems(path)

    assert result.problems[0].question == "5+5"


def test_load_problems_missing_file(tmp_path) -> None:
    missing = tmp_path / "nope.csv"

    with pytest.raises(ProblemFileError) as excinfo:
        load_problems(missing)

    assert "unable to open" in str(excinfo.value)
    assert str(missing) in str(excinfo.value)


def test_load_problems_directory_is_fatal(tmp_path) -> None:
    with pytest.raises(ProblemFileError):
        load_problems(tmp_path)


def test_load_problems_decode_error(quiz_files) -> None:
    path = quiz_files.raw("latin.csv", b"caf\xe9,coffee\n")

    with pytest.raises(ProblemFileError) as excinfo:
        load_problems(path)

    assert "unable to decode" in str(excinfo.value)


def test_load_problems_uses_given_logger(quiz_files, caplog) -> None:
    path = quiz_files.rows(["bad-row"])
    logger = logging.getLogger("tests.problems")

    with caplog.at_level(logging.WARNING, logger="tests.problems"):
        result = load_problems(path, logger=logger)

    assert len(result) == 0
    assert any(r.name == "tests.problems" for r in caplog.records)
    assert caplog.records[0].source == str(path)


def test_shuffle_problems_is_seeded_and_non_mutating() -> None:
    problems = [Problem(str(i), str(i)) for i in range(20)]
    original = list(problems)

    first = shuffle_problems(problems, seed=7)
    second = shuffle_problems(problems, seed=7)

    assert problems == original
    assert first == second
    assert sorted(first, key=lambda p: int(p.question)) == original
    assert first != original
