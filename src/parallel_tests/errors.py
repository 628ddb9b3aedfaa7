"""Exceptions raised by parallel-tests.

Worker failures are not exceptions: a worker that exits non-zero, reports
failing tests or could not be started is recorded on its ExecutionResult and
only contributes to the aggregate verdict.
"""

from __future__ import annotations


class ParallelTestsError(Exception):
    """Base class for all parallel-tests errors."""


class ConfigurationError(ParallelTestsError, ValueError):
    """Options are invalid or conflict with each other.

    Raised before any worker process is spawned.
    """


class NoWorkItemsError(ParallelTestsError):
    """No work items were found or specified."""
