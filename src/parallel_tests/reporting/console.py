"""Console reporter for parallel test runs.

Produces human-readable output for terminal display: the run plan, the
merged summary and the final verdict.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.parallel.grouping import Group
    from parallel_tests.parallel.pool import ExecutionResult
    from parallel_tests.reporting.results import AggregateOutcome


class ConsoleReporter:
    """Reporter that writes run progress and results to the console.

    Produces output in the following format:

        3 processes for 14 tests, ~ 4 tests per process

        14 tests, 1 failure, 0 errors

        Failures:
          FAILED tests/test_api.py::test_timeout - AssertionError

        Took 3.21 seconds
        Tests Failed

    Attributes:
        output: The file-like object to write to.
    """

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize the console reporter.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout

    def write_plan(self, groups: Sequence[Group], noun: str) -> None:
        """Write how many processes run how many tests.

        Args:
            groups: The groups of the run.
            noun: What the framework calls a test.
        """
        num_items = sum(len(group) for group in groups)
        per_process = num_items // len(groups) if groups else 0
        self._write_line(f'{len(groups)} processes for {num_items} {noun}s, ~ {per_process} {noun}s per process')

    def write_outputs(self, results: Sequence[ExecutionResult]) -> None:
        """Write the captured output of every worker in group order.

        Output already echoed while a worker was silent is not written again.
        """
        for result in results:
            text = result.unechoed_output
            if text:
                self.output.write(text)
                if not text.endswith('\n'):
                    self._write_blank_line()

    def write_outcome(self, outcome: AggregateOutcome, noun: str = 'test') -> None:
        """Write the merged summary and, if the run failed, the verdict.

        Args:
            outcome: The aggregated outcome of the run.
            noun: What the framework calls a test.
        """
        self._write_blank_line()
        self._write_line(outcome.summary_text)
        if outcome.any_failed:
            self._write_line(f'{noun.capitalize()}s Failed')
        self.output.flush()

    def _write_blank_line(self) -> None:
        """Write a blank line."""
        self.output.write('\n')

    def _write_line(self, text: str) -> None:
        """Write a line of text followed by newline."""
        self.output.write(text + '\n')
