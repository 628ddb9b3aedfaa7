"""Result aggregation for parallel test runs.

This module provides the ResultAggregator class that merges the results of
all workers into a single AggregateOutcome, and resolve_exit_code, which maps
that outcome to the process exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from parallel_tests.reporting.results import AggregateOutcome, TestCounts


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.frameworks.protocol import ResultParser
    from parallel_tests.parallel.pool import ExecutionResult


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def resolve_exit_code(any_failed: bool) -> int:
    """Return the process exit status for a run.

    Example:
        >>> resolve_exit_code(False), resolve_exit_code(True)
        (0, 1)
    """
    return EXIT_FAILURE if any_failed else EXIT_SUCCESS


def _plural(count: int, noun: str) -> str:
    return f'{count} {noun}' if count == 1 else f'{count} {noun}s'


class ResultAggregator:
    """Merges worker results into one verdict and summary.

    The aggregator knows nothing about test frameworks: counts come from the
    injected parser, which sees the output of every worker concatenated in
    group order.

    Attributes:
        parser: Extracts test counts from output. None skips parsing, leaving
            exit statuses as the only failure signal.
        noun: What the framework calls a test ('test', 'scenario').

    Example:
        >>> aggregator = ResultAggregator(parser=None)
        >>> outcome = aggregator.summarize([], elapsed_seconds=0.5)
        >>> outcome.any_failed
        False
    """

    def __init__(self, parser: ResultParser | None, noun: str = 'test') -> None:
        """Initialize the aggregator.

        Args:
            parser: Framework output parser, or None.
            noun: Singular name of a test for the summary.
        """
        self._parser = parser
        self._noun = noun

    @property
    def parser(self) -> ResultParser | None:
        """Return the output parser."""
        return self._parser

    @property
    def noun(self) -> str:
        """Return the name used for tests in the summary."""
        return self._noun

    def summarize(self, results: Sequence[ExecutionResult], elapsed_seconds: float) -> AggregateOutcome:
        """Merge worker results.

        Args:
            results: Results in group order.
            elapsed_seconds: Wall-clock time of the whole run.

        Returns:
            AggregateOutcome whose any_failed flag is set when the parser
            reports failures or errors, or when any worker exited non-zero.
        """
        combined = ''.join(result.output for result in results)
        counts = self._parser.parse(combined) if self._parser is not None else TestCounts()

        failed_workers = [result for result in results if result.failed]
        any_failed = counts.has_failures or bool(failed_workers)

        return AggregateOutcome(
            summary_text=self._format_summary(counts, failed_workers, elapsed_seconds),
            any_failed=any_failed,
            counts=counts,
        )

    def _format_summary(
        self,
        counts: TestCounts,
        failed_workers: list[ExecutionResult],
        elapsed_seconds: float,
    ) -> str:
        """Build the human-readable summary."""
        lines: list[str] = []
        if self._parser is not None:
            lines.append(
                f'{_plural(counts.tests, self._noun)}, '
                f'{_plural(counts.failures, "failure")}, '
                f'{_plural(counts.errors, "error")}'
            )
            if counts.failure_details:
                lines.append('')
                lines.append('Failures:')
                lines.extend(f'  {detail}' for detail in counts.failure_details)

        for result in failed_workers:
            if result.spawn_error is not None:
                lines.append(f'Worker {result.position} could not be started: {result.spawn_error}')
            else:
                lines.append(f'Worker {result.position} exited with status {result.exit_status}')

        if lines:
            lines.append('')
        lines.append(f'Took {elapsed_seconds:.2f} seconds')
        return '\n'.join(lines)
