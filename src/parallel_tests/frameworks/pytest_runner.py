"""pytest support.

Workers run ``python -m pytest`` over their files. The parser reads the
final summary line of each worker, for example::

    ========= 1 failed, 12 passed, 1 error in 0.42s =========

and the ``FAILED``/``ERROR`` lines of the short test summary.
"""

from __future__ import annotations

import re
import sys
from typing import TYPE_CHECKING

from parallel_tests.reporting.results import TestCounts


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.parallel.grouping import Group


_SUMMARY_LINE = re.compile(r'^=*\s*(?P<body>\d+ [a-z]+(?:, \d+ [a-z]+)*) in \d+(?:\.\d+)?s\b', re.MULTILINE)
_COUNT = re.compile(r'(\d+) ([a-z]+)')
_DETAIL_LINE = re.compile(r'^(?:FAILED|ERROR) .+$', re.MULTILINE)

_RAN_OUTCOMES = frozenset(('passed', 'failed', 'skipped', 'xfailed', 'xpassed'))


class PytestParser:
    """Extracts test counts from pytest output.

    Example:
        >>> counts = PytestParser().parse('==== 1 failed, 2 passed in 0.10s ====')
        >>> counts.tests, counts.failures
        (3, 1)
    """

    def parse(self, output: str) -> TestCounts:
        """Sum the counts of every pytest summary line in the output."""
        tests = failures = errors = 0
        for summary in _SUMMARY_LINE.finditer(output):
            for number, outcome in _COUNT.findall(summary.group('body')):
                count = int(number)
                if outcome in ('error', 'errors'):
                    errors += count
                elif outcome == 'failed':
                    failures += count
                    tests += count
                elif outcome in _RAN_OUTCOMES:
                    tests += count

        details = tuple(match.group(0).strip() for match in _DETAIL_LINE.finditer(output))
        return TestCounts(tests=tests, failures=failures, errors=errors, failure_details=details)


class PytestCommand:
    """Builds ``python -m pytest [options] files`` for a group."""

    def __init__(self, options: Sequence[str] = ()) -> None:
        self._options = tuple(options)

    def build(self, group: Group) -> list[str]:
        return [sys.executable, '-m', 'pytest', *self._options, *group.items]
