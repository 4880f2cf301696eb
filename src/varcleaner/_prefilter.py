"""Candidate file pre-filtering with git grep.

Files that cannot contain a function definition are dropped before they are
read and parsed. Falls back to a Python substring search when git is not
available or the files are outside a repository.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

__all__ = ["filter_candidates"]

logger = logging.getLogger("varcleaner.prefilter")


def filter_candidates(filepaths: Sequence[str], pattern: str | None) -> list[str]:
    """Return the files that contain ``pattern``, keeping input order.

    Example:
        >>> candidates = filter_candidates(all_files, "def ")
        >>> for filepath in candidates:
        ...     check_file(filepath)

    Args:
        filepaths: Paths as given on the command line
        pattern: Fixed string to look for; None keeps every file

    Returns:
        Matching paths, spelled as in ``filepaths``
    """
    if not filepaths:
        return []
    if pattern is None:
        return list(filepaths)

    try:
        cmd = [
            "git",
            "grep",
            "--files-with-matches",
            "--null",
            "--untracked",
            "--fixed-strings",
            "-e",
            pattern,
            "--",
            *filepaths,
        ]
        result = subprocess.run(
            cmd, capture_output=True, text=True, check=False, timeout=30
        )
    except (subprocess.SubprocessError, FileNotFoundError) as error:
        logger.debug("git grep unavailable: %s", repr(error))
        return _python_fallback_filter(filepaths, pattern)

    if result.returncode == 0:  # pragma: no cover
        # git prints repo-relative paths, map them back to the input spelling
        matched = {Path(p).resolve() for p in result.stdout.split("\0") if p}
        return [fp for fp in filepaths if Path(fp).resolve() in matched]
    if result.returncode == 1:  # pragma: no cover
        return []

    # Not a repository or paths outside of it
    logger.debug("git grep failed: %s", result.stderr.strip())
    return _python_fallback_filter(filepaths, pattern)


def _python_fallback_filter(filepaths: Sequence[str], pattern: str) -> list[str]:
    matches = []
    for filepath in filepaths:
        try:
            with open(filepath, encoding="utf-8") as f:
                if pattern in f.read():
                    matches.append(filepath)
        except (OSError, UnicodeDecodeError) as error:
            logger.error("File: %s, error: %s", filepath, repr(error))
            # Keep unreadable files so the read error is reported later
            matches.append(filepath)
    return matches
