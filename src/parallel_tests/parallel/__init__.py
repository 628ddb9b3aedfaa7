"""Parallel execution module for parallel-tests.

This module provides the components of a parallel run:

- Grouper: Partitions work items into balanced groups
- resolve_process_count: Decides how many worker processes to use
- WorkerPool: Runs one process per group and collects results in group order
- ResultAggregator: Merges worker results into a single verdict
"""

from __future__ import annotations
