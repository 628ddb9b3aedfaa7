"""Result data structures for parallel test runs.

TestCounts holds what a framework parser extracted from captured output.
AggregateOutcome is the run-level verdict produced by the ResultAggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self


@dataclass(frozen=True)
class TestCounts:
    """Test counts extracted from captured worker output.

    Attributes:
        tests: Number of tests (or scenarios) that ran.
        failures: Number of failed tests.
        errors: Number of tests that errored.
        failure_details: One line per failure or error, in output order.
    """

    __test__ = False

    tests: int = 0
    failures: int = 0
    errors: int = 0
    failure_details: tuple[str, ...] = ()

    def __add__(self, other: Self) -> Self:
        return type(self)(
            tests=self.tests + other.tests,
            failures=self.failures + other.failures,
            errors=self.errors + other.errors,
            failure_details=self.failure_details + other.failure_details,
        )

    @property
    def has_failures(self) -> bool:
        """Return True if any failure or error was reported."""
        return self.failures > 0 or self.errors > 0


@dataclass(frozen=True)
class AggregateOutcome:
    """The merged result of all workers in a run.

    Attributes:
        summary_text: Human-readable multi-line summary.
        any_failed: True if any worker failed or any test failed or errored.
        counts: Parsed counts over the output of every worker.
    """

    summary_text: str
    any_failed: bool
    counts: TestCounts = TestCounts()
