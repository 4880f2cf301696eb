"""Threshold rules applied to finished occurrence counts.

Both rules are pure and keep the iteration order of the mapping they are
given. The walker fills its counters in first-occurrence order, so results
come out in the order names and literals first appear in the function.

The unnecessary-variable rule is a blunt heuristic: a count of exactly two is
read as "assigned once, used once". It cannot tell that apart from a name
used twice without a counted declaration, e.g. a parameter referenced twice
in the body. That case is reported as well; keep it that way unless the
reported behavior is meant to change.
"""

from __future__ import annotations

from collections.abc import Mapping

__all__ = [
    "REPEATED_LITERAL_MIN_COUNT",
    "UNNECESSARY_VARIABLE_COUNT",
    "find_repeated_literals",
    "find_unnecessary_variables",
]

# Declaration plus exactly one use
UNNECESSARY_VARIABLE_COUNT = 2

REPEATED_LITERAL_MIN_COUNT = 2


def find_unnecessary_variables(name_counts: Mapping[str, int]) -> list[str]:
    """Return names that occur exactly twice.

    Args:
        name_counts: Name occurrence counts of one function

    Returns:
        Names in the mapping's iteration order
    """
    return [
        name for name, count in name_counts.items()
        if count == UNNECESSARY_VARIABLE_COUNT
    ]


def find_repeated_literals(literal_counts: Mapping[str, int]) -> list[str]:
    """Return literal texts that occur two or more times.

    Args:
        literal_counts: Literal occurrence counts of one function

    Returns:
        Literal texts in the mapping's iteration order
    """
    return [
        text for text, count in literal_counts.items()
        if count >= REPEATED_LITERAL_MIN_COUNT
    ]
