"""unittest support.

Workers run ``python -m unittest`` over their files. unittest reports on
standard error, which the worker pool merges into the captured output. The
parser reads::

    Ran 4 tests in 0.003s

    FAILED (failures=1, errors=1, skipped=1)

and the ``FAIL:``/``ERROR:`` headers of each failure.
"""

from __future__ import annotations

import re
import sys
from typing import TYPE_CHECKING

from parallel_tests.reporting.results import TestCounts


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.parallel.grouping import Group


_RAN_LINE = re.compile(r'^Ran (\d+) tests? in ', re.MULTILINE)
_FAILED_LINE = re.compile(r'^FAILED \((?P<body>[^)]*)\)', re.MULTILINE)
_COUNT = re.compile(r'(\w+)=(\d+)')
_DETAIL_LINE = re.compile(r'^(?:FAIL|ERROR): .+$', re.MULTILINE)


class UnittestParser:
    """Extracts test counts from unittest output.

    Example:
        >>> counts = UnittestParser().parse('Ran 3 tests in 0.01s\\n\\nFAILED (errors=2)\\n')
        >>> counts.tests, counts.errors
        (3, 2)
    """

    def parse(self, output: str) -> TestCounts:
        """Sum the counts of every unittest run in the output."""
        tests = sum(int(number) for number in _RAN_LINE.findall(output))

        failures = errors = 0
        for summary in _FAILED_LINE.finditer(output):
            for name, number in _COUNT.findall(summary.group('body')):
                if name == 'failures':
                    failures += int(number)
                elif name == 'errors':
                    errors += int(number)

        details = tuple(match.group(0).strip() for match in _DETAIL_LINE.finditer(output))
        return TestCounts(tests=tests, failures=failures, errors=errors, failure_details=details)


class UnittestCommand:
    """Builds ``python -m unittest [options] files`` for a group."""

    def __init__(self, options: Sequence[str] = ()) -> None:
        self._options = tuple(options)

    def build(self, group: Group) -> list[str]:
        return [sys.executable, '-m', 'unittest', *self._options, *group.items]
