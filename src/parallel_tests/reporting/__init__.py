"""Reporting module for parallel-tests.

This module provides the result data structures of a run and the console
reporter that presents them.
"""

from parallel_tests.reporting.console import ConsoleReporter
from parallel_tests.reporting.results import AggregateOutcome, TestCounts


__all__ = [
    'AggregateOutcome',
    'ConsoleReporter',
    'TestCounts',
]
