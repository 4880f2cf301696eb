"""File-level check: report unnecessary variables and repeated literals.

Every ``def`` / ``async def`` in a module is analyzed on its own and produces
at most one violation, anchored at the ``def`` line.

Inline ignore: # varcleaner: ignore

Examples:
    # ❌ Reported: No need to define these variables: greeting
    def hello():
        greeting = "Hello"
        print(greeting)

    # ❌ Reported: Used same consts multiple times, replace with variable: "Hello"
    def hello_twice():
        print("Hello")
        print("Hello")

    # ✅ Not reported: the variable is used more than once
    def hello_loud():
        greeting = "Hello"
        print(greeting)
        print(greeting.upper())
"""

from __future__ import annotations

import ast
import fnmatch
import re
from collections.abc import Iterable
from pathlib import Path

from ._base import ANALYZER, Violation
from .analysis import analyze, format_message, iter_functions

__all__ = ["IGNORE_PATTERN", "VarCleanerCheck", "display_literal", "get_ignored_lines"]

# Regex pattern for inline ignore comments
# Format: # varcleaner: ignore
IGNORE_PATTERN = re.compile(r"#\s*varcleaner:\s*ignore\b", re.IGNORECASE)

# Line breaks inside a literal (implicit concatenation, triple quotes)
LINE_BREAK_PATTERN = re.compile(r"\s*\n\s*")


def get_ignored_lines(source: str) -> set[int]:
    """Get line numbers with inline ignore comments.

    Args:
        source: Source code

    Returns:
        Set of line numbers (1-indexed) with ignore comments
    """
    ignored = set()
    for i, line in enumerate(source.splitlines(), start=1):
        if IGNORE_PATTERN.search(line):
            ignored.add(i)
    return ignored


def display_literal(text: str) -> str:
    """Return a literal text on one line for reporting.

    A literal spanning several lines keeps its exact spelling as counter key,
    but each line break and the indentation around it become one space, so a
    literal never splits a message line.
    """
    return LINE_BREAK_PATTERN.sub(" ", text)


class VarCleanerCheck:
    """Check for single-use variables and repeated literals (VCL001)."""

    def __init__(
        self,
        ignore_functions: Iterable[str] = (),
        ignore_literals: Iterable[str] = (),
    ) -> None:
        """Initialize the check.

        Args:
            ignore_functions: Glob patterns of function names to skip
            ignore_literals: Literal texts never reported as repeated
        """
        self.ignore_functions = list(ignore_functions)
        self.ignore_literals = set(ignore_literals)

    @property
    def check_id(self) -> str:
        """Return the check identifier."""
        return ANALYZER.name

    @property
    def error_code(self) -> str:
        """Return the error code."""
        return ANALYZER.error_code

    def get_prefilter_pattern(self) -> str | None:
        """Return pattern for git grep pre-filtering.

        Returns:
            Pattern matching function definitions
        """
        return "def "

    def is_function_ignored(self, name: str) -> bool:
        """Check if a function name matches one of the ignore globs."""
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.ignore_functions)

    def is_literal_ignored(self, text: str) -> bool:
        """Check a literal key, or its one-line display form, against the ignores."""
        return (
            text in self.ignore_literals
            or display_literal(text) in self.ignore_literals
        )

    def check(self, filepath: Path, tree: ast.Module, source: str) -> list[Violation]:
        """Run the check on a file.

        Args:
            filepath: Path to file being checked
            tree: Parsed AST tree
            source: Original source code

        Returns:
            List of violations found, in source order
        """
        ignored_lines = get_ignored_lines(source)
        violations: list[Violation] = []

        for function in iter_functions(tree):
            if function.lineno in ignored_lines:
                continue
            if self.is_function_ignored(function.name):
                continue

            diagnostic = analyze(function, source)
            repeated = [
                display_literal(text)
                for text in diagnostic.repeated_literals
                if not self.is_literal_ignored(text)
            ]
            message = format_message(diagnostic.unnecessary_variables, repeated)
            if message is None:
                continue

            violations.append(
                Violation(
                    check_id=self.check_id,
                    error_code=self.error_code,
                    line=function.lineno,
                    col=function.col_offset,
                    message=message,
                    function_name=function.name,
                )
            )

        return violations
