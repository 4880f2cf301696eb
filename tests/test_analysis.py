"""Tests for per-function analysis and message formatting."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from varcleaner.analysis import (
    Diagnostic,
    analyze,
    analyze_source,
    count_occurrences,
    format_message,
    iter_functions,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def scenarios() -> dict[str, Diagnostic]:
    """Analyze the scenario fixture file."""
    source = (FIXTURES / "scenarios.py").read_text(encoding="utf-8")
    return analyze_source(source)


def test_single_use_variable(scenarios: dict[str, Diagnostic]) -> None:
    """Test ``a = "Hello"; print(a)``."""
    diagnostic = scenarios["f1"]

    assert diagnostic.unnecessary_variables == ("a",)
    assert diagnostic.repeated_literals == ()
    assert diagnostic.message == "No need to define these variables: a"


def test_two_single_use_variables_same_literal(
    scenarios: dict[str, Diagnostic],
) -> None:
    """Test two single-use variables initialized with the same literal."""
    diagnostic = scenarios["f2"]

    assert diagnostic.unnecessary_variables == ("a", "b")
    assert diagnostic.repeated_literals == ('"Hello"',)
    assert diagnostic.message == (
        "No need to define these variables: a, b\n"
        'Used same consts multiple times, replace with variable: "Hello"'
    )


def test_repeated_literal_only(scenarios: dict[str, Diagnostic]) -> None:
    """Test ``print("Hello"); print("Hello")``."""
    diagnostic = scenarios["f3"]

    assert diagnostic.unnecessary_variables == ()
    assert diagnostic.repeated_literals == ('"Hello"',)
    assert diagnostic.message == (
        'Used same consts multiple times, replace with variable: "Hello"'
    )


def test_variable_used_twice_not_reported(scenarios: dict[str, Diagnostic]) -> None:
    """Test that a variable declared and used twice is kept."""
    diagnostic = scenarios["f4"]

    assert diagnostic.is_empty
    assert diagnostic.message is None


def test_unused_variable_not_reported(scenarios: dict[str, Diagnostic]) -> None:
    """Test that a variable declared but never used is not reported."""
    assert scenarios["f5"].is_empty


def test_empty_function(scenarios: dict[str, Diagnostic]) -> None:
    """Test that a function without names or literals reports nothing."""
    assert scenarios["f6"] == Diagnostic()


def test_analysis_is_idempotent() -> None:
    """Test that repeated runs on the same tree give identical results."""
    source = (FIXTURES / "scenarios.py").read_text(encoding="utf-8")
    tree = ast.parse(source)
    f2 = next(f for f in iter_functions(tree) if f.name == "f2")

    first = analyze(f2, source)
    second = analyze(f2, source)

    assert first == second
    assert list(first.unnecessary_variables) == list(second.unnecessary_variables)


def test_counts_are_fresh_per_call() -> None:
    """Test that counters are never shared between analyses."""
    source = """
def f():
    x = 1
    return x
"""
    function = ast.parse(source).body[0]
    assert isinstance(function, ast.FunctionDef)

    first = count_occurrences(function, source)
    second = count_occurrences(function, source)

    assert first.names is not second.names
    assert first.names == second.names == {"x": 2}


def test_iter_functions_source_order() -> None:
    """Test that functions, methods and nested functions come in source order."""
    source = """
class A:
    def method(self):
        pass

def outer():
    def inner():
        pass

async def later():
    pass
"""
    names = [f.name for f in iter_functions(ast.parse(source))]

    assert names == ["method", "outer", "inner", "later"]


def test_nested_global_does_not_hide_outer_variable() -> None:
    """Test that a nested ``global x`` leaves the outer ``x`` countable."""
    source = """
def outer():
    x = compute()
    def inner():
        global x
        x = 2
        return x
    inner()
    return x
"""
    result = analyze_source(source)

    assert result["outer"].unnecessary_variables == ("x", "inner")
    assert result["inner"].is_empty


def test_nested_nonlocal_counts_for_outer_variable() -> None:
    """Test that a nested ``nonlocal`` use counts toward the outer binding."""
    source = """
def outer():
    total = compute()
    def inner():
        nonlocal total
        return total
    return inner
"""
    result = analyze_source(source)

    assert result["outer"].unnecessary_variables == ("total", "inner")
    assert result["inner"].is_empty


@pytest.mark.parametrize(
    ("unnecessary", "repeated", "expected"),
    [
        ((), (), None),
        (("a",), (), "No need to define these variables: a"),
        (
            (),
            ("1", "'x'"),
            "Used same consts multiple times, replace with variable: 1, 'x'",
        ),
        (
            ("a", "b"),
            ("2",),
            "No need to define these variables: a, b\n"
            "Used same consts multiple times, replace with variable: 2",
        ),
    ],
)
def test_format_message_shapes(
    unnecessary: tuple[str, ...], repeated: tuple[str, ...], expected: str | None
) -> None:
    """Test the three message shapes and the empty case."""
    assert format_message(unnecessary, repeated) == expected
