"""Protocol definitions for test framework support.

Each supported framework provides a ResultParser, which extracts test counts
from captured output, and a WorkerCommand, which builds the command a worker
runs for its group.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Protocol,
    runtime_checkable,
)


if TYPE_CHECKING:
    from parallel_tests.parallel.grouping import Group
    from parallel_tests.reporting.results import TestCounts


@runtime_checkable
class ResultParser(Protocol):
    """Protocol for framework output parsers."""

    def parse(self, output: str) -> TestCounts:
        """Extract test counts from raw output.

        The output is the concatenation of every worker's output, so parsers
        must add up the summaries of all workers.

        Args:
            output: Captured text from one or more test runs.

        Returns:
            Totals over every summary found in the output.
        """
        ...


@runtime_checkable
class WorkerCommand(Protocol):
    """Protocol for building the command a worker runs."""

    def build(self, group: Group) -> list[str] | str:
        """Return the command for a group.

        Args:
            group: The group the worker runs.

        Returns:
            An argument list, or a string to run through the shell.
        """
        ...
