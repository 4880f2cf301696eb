"""Find single-use variables and repeated literals in Python functions.

This module wires the per-function analysis into a command line tool:
pre-filtering candidate files, caching results, parsing each file once and
reporting one message per offending function.
"""

from __future__ import annotations

import argparse
import ast
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from ._base import ANALYZER, Analyzer, Violation
from ._cache import ResultCache
from ._config import ConfigError, VarCleanerConfig, load_config
from ._prefilter import filter_candidates
from .analysis import Diagnostic, analyze, analyze_source, format_message
from .check import VarCleanerCheck

__all__ = [
    "ANALYZER",
    "Analyzer",
    "CheckOrchestrator",
    "Diagnostic",
    "VarCleanerCheck",
    "Violation",
    "analyze",
    "analyze_source",
    "format_message",
    "main",
]

__version__ = "0.1.0"

logger = logging.getLogger("varcleaner")


class CheckOrchestrator:
    """Runs the check over a set of files.

    This class manages the workflow of:
    1. Pre-filtering files that contain no function definition
    2. Caching check results
    3. Parsing each file once and running the check
    4. Collecting violations per file
    """

    def __init__(self, check: VarCleanerCheck, cache: ResultCache | None = None) -> None:
        """Initialize the orchestrator.

        Args:
            check: Configured check instance
            cache: Result cache, or None to always re-check
        """
        self.check = check
        self.cache = cache

    def process_files(self, filepaths: Sequence[str]) -> dict[str, list[Violation]]:
        """Process files and return violations for each file.

        Args:
            filepaths: List of file paths to check

        Returns:
            Dict mapping filepath to its non-empty list of violations
        """
        candidate_files = filter_candidates(filepaths, self.check.get_prefilter_pattern())

        all_violations: dict[str, list[Violation]] = {}
        for filepath_str in candidate_files:
            filepath = Path(filepath_str)

            violations = self._get_cached_violations(filepath)
            if violations is None:
                violations = self._check_file(filepath)
                if violations is not None:
                    self._cache_violations(filepath, violations)

            if violations:
                all_violations[filepath_str] = violations

        return all_violations

    def _get_cached_violations(self, filepath: Path) -> list[Violation] | None:
        """Retrieve cached violations for a file.

        Returns:
            List of violations if cache hit, None if cache miss
        """
        if self.cache is None:
            return None

        cached = self.cache.get(filepath)
        if cached is None:
            return None

        try:
            return [Violation(**v_dict) for v_dict in cached]
        except TypeError as error:
            logger.debug("Cache deserialization failed: %s", repr(error))
            return None

    def _cache_violations(self, filepath: Path, violations: list[Violation]) -> None:
        if self.cache is None:
            return
        serialized: list[dict[str, Any]] = [
            {
                "check_id": v.check_id,
                "error_code": v.error_code,
                "line": v.line,
                "col": v.col,
                "message": v.message,
                "function_name": v.function_name,
            }
            for v in violations
        ]
        self.cache.set(filepath, serialized)

    def _check_file(self, filepath: Path) -> list[Violation] | None:
        """Check a single file.

        Returns:
            List of violations, or None if the file couldn't be processed
        """
        try:
            source = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            logger.error("Failed to read %s: %s", filepath, repr(error))
            return None

        try:
            tree = ast.parse(source, filename=str(filepath))
        except SyntaxError as syntax_error:
            logger.error("Failed to parse %s: %s", filepath, repr(syntax_error))
            return None

        return self.check.check(filepath, tree, source)


def _settings_key(config: VarCleanerConfig) -> str:
    """Fingerprint of the settings that change reported violations."""
    return json.dumps(
        [
            ANALYZER.name,
            __version__,
            sorted(config.ignore_functions),
            sorted(config.ignore_literals),
        ]
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=ANALYZER.name, description=ANALYZER.doc)
    parser.add_argument("filenames", nargs="*", help="Python files to check")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to pyproject.toml (default: ./pyproject.toml)",
    )
    parser.add_argument(
        "--ignore-function",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip functions whose name matches this glob (repeatable)",
    )
    parser.add_argument(
        "--ignore-literal",
        action="append",
        default=[],
        metavar="TEXT",
        help="Never report this literal text as repeated (repeatable)",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not read or write the result cache",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete cached results before checking",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output, including raw occurrence counts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments

    Returns:
        Exit code (0 if no violations, 1 if violations found, 2 on bad config)
    """
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except ConfigError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 2

    config.ignore_functions.extend(args.ignore_function)
    config.ignore_literals.update(args.ignore_literal)
    if args.no_cache:
        config.cache = False

    if args.clear_cache:
        # Cleared even when this run does not use the cache
        removed = ResultCache().clear()
        logger.debug("Removed %d cache entries", removed)

    cache = ResultCache(settings_key=_settings_key(config)) if config.cache else None

    if not args.filenames:
        return 0

    check = VarCleanerCheck(
        ignore_functions=config.ignore_functions,
        ignore_literals=config.ignore_literals,
    )
    orchestrator = CheckOrchestrator(check=check, cache=cache)
    all_violations = orchestrator.process_files(args.filenames)

    exit_code = 0
    for filepath, violations in sorted(all_violations.items()):
        for v in violations:
            print(f"{filepath}:{v.line}: {v.error_code}: {v.message}", file=sys.stderr)
            exit_code = 1

    return exit_code
