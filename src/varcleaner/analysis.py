"""Per-function analysis: walk, evaluate, format."""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .rules import find_repeated_literals, find_unnecessary_variables
from .walker import FunctionNode, Occurrences, OccurrenceWalker

__all__ = [
    "Diagnostic",
    "analyze",
    "analyze_source",
    "count_occurrences",
    "format_message",
    "iter_functions",
]

logger = logging.getLogger("varcleaner.analysis")

UNNECESSARY_VARIABLES_PREFIX = "No need to define these variables: "
REPEATED_LITERALS_PREFIX = "Used same consts multiple times, replace with variable: "
SEPARATOR = ", "


@dataclass(frozen=True)
class Diagnostic:
    """Result of analyzing one function.

    Attributes:
        unnecessary_variables: Names assigned once and used once
        repeated_literals: Literal texts that appear two or more times
    """

    unnecessary_variables: tuple[str, ...] = ()
    repeated_literals: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to report."""
        return not self.unnecessary_variables and not self.repeated_literals

    @property
    def message(self) -> str | None:
        """Formatted message, or None when there is nothing to report."""
        return format_message(self.unnecessary_variables, self.repeated_literals)


def count_occurrences(function: FunctionNode, source: str | None = None) -> Occurrences:
    """Count resolved-binding names and literals of a function.

    Args:
        function: Function definition node
        source: Source code the tree was parsed from

    Returns:
        Occurrence counters, fresh for every call
    """
    return OccurrenceWalker.count(function, source)


def analyze(function: FunctionNode, source: str | None = None) -> Diagnostic:
    """Analyze a single function.

    Args:
        function: Function definition node
        source: Source code the tree was parsed from. Without it literal
            keys fall back to ``repr()`` of their value

    Returns:
        Unnecessary variables and repeated literals of the function
    """
    occurrences = count_occurrences(function, source)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "%s: names=%s literals=%s",
            function.name,
            dict(occurrences.names),
            dict(occurrences.literals),
        )
    return Diagnostic(
        unnecessary_variables=tuple(find_unnecessary_variables(occurrences.names)),
        repeated_literals=tuple(find_repeated_literals(occurrences.literals)),
    )


def analyze_source(source: str) -> dict[str, Diagnostic]:
    """Analyze every function of a source string.

    Args:
        source: Python source code

    Returns:
        Diagnostics keyed by function name, in source order. A later
        function with the same name replaces an earlier one
    """
    tree = ast.parse(source)
    return {
        function.name: analyze(function, source)
        for function in iter_functions(tree)
    }


def iter_functions(tree: ast.AST) -> list[FunctionNode]:
    """Return all function definitions of a tree in source order.

    Args:
        tree: Parsed module (or any node)

    Returns:
        Top-level functions, methods and nested functions sorted by position
    """
    functions = [
        node
        for node in ast.walk(tree)
        if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef)
    ]
    return sorted(functions, key=lambda node: (node.lineno, node.col_offset))


def format_message(
    unnecessary_variables: Sequence[str], repeated_literals: Sequence[str]
) -> str | None:
    """Format the diagnostic message for one function.

    Args:
        unnecessary_variables: Names to report
        repeated_literals: Literal texts to report

    Returns:
        Message text, or None if both sequences are empty
    """
    parts = []
    if unnecessary_variables:
        parts.append(UNNECESSARY_VARIABLES_PREFIX + SEPARATOR.join(unnecessary_variables))
    if repeated_literals:
        parts.append(REPEATED_LITERALS_PREFIX + SEPARATOR.join(repeated_literals))
    if not parts:
        return None
    return "\n".join(parts)
