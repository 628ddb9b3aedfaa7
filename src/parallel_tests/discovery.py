"""Test file discovery.

This module finds the work items of a run: test files under the framework's
default folder, or files and folders named explicitly, optionally filtered by
a regular expression.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    import re


logger = logging.getLogger(__name__)


def _matches_any(path: Path, file_patterns: Sequence[str]) -> bool:
    return any(path.match(pattern) for pattern in file_patterns)


def _relative(path: Path, root: Path | None) -> str:
    if root is not None and path.is_relative_to(root):
        return str(path.relative_to(root))
    return str(path)


def find_test_files(
    paths: Iterable[str],
    file_patterns: Sequence[str],
    *,
    root: Path | None = None,
    pattern: re.Pattern[str] | None = None,
) -> list[str]:
    """Find the test files for a run.

    Folders are searched recursively for files matching ``file_patterns``.
    Files given explicitly are kept even if they do not match the patterns.
    Paths are resolved against ``root`` and reported relative to it.

    Args:
        paths: Files and folders to search.
        file_patterns: Glob patterns that identify test files inside folders.
        root: Directory the paths are relative to. Defaults to the current one.
        pattern: If given, keep only files whose path it matches.

    Returns:
        Test file paths in discovery order, without duplicates.
    """
    base = root if root is not None else Path()
    found: list[str] = []

    for entry in paths:
        candidate = base / entry
        if candidate.is_dir():
            matches = sorted(
                path for path in candidate.rglob('*') if path.is_file() and _matches_any(path, file_patterns)
            )
            found.extend(_relative(path, root) for path in matches)
        elif candidate.exists():
            found.append(entry)
        else:
            logger.warning('Skipping %s: no such file or directory', candidate)

    if pattern is not None:
        found = [path for path in found if pattern.search(path)]

    unique = list(dict.fromkeys(found))
    logger.debug('Discovered %d test file(s) in %s', len(unique), base)
    return unique
