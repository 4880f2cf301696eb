"""Tests for the file-level VCL001 check."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from varcleaner.check import VarCleanerCheck, display_literal, get_ignored_lines

FIXTURES = Path(__file__).parent / "fixtures"


def _check(source: str, **kwargs: list[str]) -> list:
    tree = ast.parse(source)
    return VarCleanerCheck(**kwargs).check(Path("test.py"), tree, source)


def test_violation_anchored_at_def() -> None:
    """Test violation fields for a single offending function."""
    source = """
def hello():
    greeting = "Hello"
    print(greeting)
"""
    violations = _check(source)

    assert len(violations) == 1
    violation = violations[0]
    assert violation.check_id == "varcleaner"
    assert violation.error_code == "VCL001"
    assert violation.line == 2
    assert violation.col == 0
    assert violation.function_name == "hello"
    assert violation.message == "No need to define these variables: greeting"


def test_clean_function_not_reported() -> None:
    """Test that a function with nothing to report yields no violation."""
    source = """
def hello_loud():
    greeting = "Hello"
    print(greeting)
    print(greeting.upper())
"""
    assert _check(source) == []


def test_module_level_code_not_analyzed() -> None:
    """Test that only function bodies are analyzed."""
    source = """
value = "x"
print(value, "x")
"""
    assert _check(source) == []


def test_nested_functions_reported_separately() -> None:
    """Test that nested functions get their own violation."""
    source = """
def outer():
    def inner():
        value = compute()
        return value
    return inner()
"""
    violations = _check(source)

    assert [(v.function_name, v.line) for v in violations] == [
        ("outer", 2),
        ("inner", 3),
    ]
    assert violations[0].message == "No need to define these variables: inner, value"
    assert violations[1].message == "No need to define these variables: value"


def test_method_column_offset() -> None:
    """Test that methods report the column of their def."""
    source = """
class Greeter:
    def greet(self):
        text = "hi"
        return text
"""
    violations = _check(source)

    assert len(violations) == 1
    assert (violations[0].line, violations[0].col) == (3, 4)


def test_inline_suppression_respected() -> None:
    """Test that an ignore comment on the def line skips the function."""
    source = """
def hello():  # varcleaner: ignore
    greeting = "Hello"
    print(greeting)
"""
    assert _check(source) == []


def test_inline_suppression_case_insensitive() -> None:
    """Test that ignore comments are case-insensitive."""
    source = """
def hello():  # VARCLEANER: IGNORE
    print("Hello")
    print("Hello")
"""
    assert _check(source) == []


def test_suppression_only_on_def_line() -> None:
    """Test that an ignore comment inside the body does not skip the function."""
    source = """
def hello():
    greeting = "Hello"  # varcleaner: ignore
    print(greeting)
"""
    assert len(_check(source)) == 1


def test_ignore_functions_glob() -> None:
    """Test that configured function globs are skipped."""
    source = """
def test_hello():
    print("Hello")
    print("Hello")

def hello():
    print("Hello")
    print("Hello")
"""
    violations = _check(source, ignore_functions=["test_*"])

    assert [v.function_name for v in violations] == ["hello"]


def test_ignore_literals_filtered() -> None:
    """Test that ignored literals are dropped from the message."""
    source = """
def f():
    a = "Hello"
    print(a, 0, 0)
    b = "Hello"
    print(b)
"""
    violations = _check(source, ignore_literals=['"Hello"'])

    assert len(violations) == 1
    assert violations[0].message == (
        "No need to define these variables: a, b\n"
        "Used same consts multiple times, replace with variable: 0"
    )


def test_ignore_literals_can_empty_diagnostic() -> None:
    """Test that a function with only ignored literals is not reported."""
    source = """
def f():
    print("")
    print("")
"""
    assert _check(source, ignore_literals=['""']) == []


def test_multiline_literal_reported_on_one_line() -> None:
    """Test that a literal spanning lines is shown with its breaks collapsed."""
    source = """
def f():
    print("x"
          "y")
    print("x"
          "y")
"""
    violations = _check(source)

    assert len(violations) == 1
    assert violations[0].message == (
        'Used same consts multiple times, replace with variable: "x" "y"'
    )


def test_multiline_literal_ignored_by_display_text() -> None:
    """Test that the one-line form of a literal can be ignored."""
    source = """
def f():
    print("x"
          "y")
    print("x"
          "y")
"""
    assert _check(source, ignore_literals=['"x" "y"']) == []


def test_display_literal() -> None:
    """Test collapsing of line breaks in literal text."""
    assert display_literal('"x"\n          "y"') == '"x" "y"'
    assert display_literal("'a  b'") == "'a  b'"


def test_get_ignored_lines() -> None:
    """Test collection of inline ignore comment lines."""
    source = "def a():  # varcleaner: ignore\n    pass\ndef b():\n    pass\n"

    assert get_ignored_lines(source) == {1}


@pytest.mark.parametrize(
    "fixture", sorted((FIXTURES / "bad").glob("*.py")), ids=lambda p: p.stem
)
def test_bad_fixtures_reported(fixture: Path) -> None:
    """Test that every bad fixture produces a violation."""
    source = fixture.read_text(encoding="utf-8")

    assert _check(source)


@pytest.mark.parametrize(
    "fixture", sorted((FIXTURES / "good").glob("*.py")), ids=lambda p: p.stem
)
def test_good_fixtures_clean(fixture: Path) -> None:
    """Test that no good fixture produces a violation."""
    source = fixture.read_text(encoding="utf-8")

    assert _check(source) == []


def test_repeated_status_message() -> None:
    """Test the combined message for a fixture with both findings."""
    source = (FIXTURES / "bad" / "repeated_status.py").read_text(encoding="utf-8")

    violations = _check(source)

    assert violations[0].message == (
        "No need to define these variables: code\n"
        "Used same consts multiple times, replace with variable: 404"
    )
