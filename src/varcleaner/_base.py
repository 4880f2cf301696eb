"""Base data structures shared by the analyzer and the file check."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Analyzer:
    """Static description of the pass.

    Attributes:
        name: Pass name, also used as check id and cache namespace
        doc: One-line description shown by ``--help``
        error_code: Code printed in front of every message
    """

    name: str
    doc: str
    error_code: str


ANALYZER = Analyzer(
    name="varcleaner",
    doc="varcleaner is a tool to make codes more readable and scalable",
    error_code="VCL001",
)


@dataclass
class Violation:
    """Represents a single diagnostic reported for one function.

    Attributes:
        check_id: Unique identifier for the check (e.g., "varcleaner")
        error_code: Error code for the violation (e.g., "VCL001")
        line: Line number of the ``def`` statement
        col: Column offset of the ``def`` statement
        message: Human-readable description of the violation
        function_name: Name of the analyzed function
    """

    check_id: str
    error_code: str
    line: int
    col: int
    message: str
    function_name: str = ""
