"""behave support.

Workers run ``python -m behave`` over their feature files. Counts are taken
from the scenario summary line::

    3 scenarios passed, 1 failed, 0 skipped

and failure details from the ``Failing scenarios:`` block.
"""

from __future__ import annotations

import re
import sys
from typing import TYPE_CHECKING

from parallel_tests.reporting.results import TestCounts


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.parallel.grouping import Group


_SCENARIO_LINE = re.compile(r'^\d+ scenarios? passed(?:, \d+ [a-z]+)*$', re.MULTILINE)
_COUNT = re.compile(r'(\d+) ([a-z]+)')


def _failing_scenarios(output: str) -> list[str]:
    """Collect the indented lines following each 'Failing scenarios:' header."""
    details: list[str] = []
    collecting = False
    for line in output.splitlines():
        if line.strip() == 'Failing scenarios:':
            collecting = True
            continue
        if collecting:
            if line.startswith((' ', '\t')) and line.strip():
                details.append(line.strip())
            else:
                collecting = False
    return details


class BehaveParser:
    """Extracts scenario counts from behave output.

    Example:
        >>> counts = BehaveParser().parse('2 scenarios passed, 1 failed, 0 skipped\\n')
        >>> counts.tests, counts.failures
        (3, 1)
    """

    def parse(self, output: str) -> TestCounts:
        """Sum the scenario counts of every behave run in the output."""
        tests = failures = errors = 0
        for summary in _SCENARIO_LINE.finditer(output):
            for number, outcome in _COUNT.findall(summary.group(0)):
                count = int(number)
                if outcome != 'untested':
                    tests += count
                if outcome == 'failed':
                    failures += count
                elif outcome in ('error', 'errors'):
                    errors += count

        return TestCounts(
            tests=tests,
            failures=failures,
            errors=errors,
            failure_details=tuple(_failing_scenarios(output)),
        )


class BehaveCommand:
    """Builds ``python -m behave [options] files`` for a group."""

    def __init__(self, options: Sequence[str] = ()) -> None:
        self._options = tuple(options)

    def build(self, group: Group) -> list[str]:
        return [sys.executable, '-m', 'behave', *self._options, *group.items]
