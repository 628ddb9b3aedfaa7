"""pytest plugin exposing the parallel-tests worker identity.

Tests running inside a parallel-tests worker can use these fixtures to route
to per-worker resources, for example a database per process::

    def test_query(worker_suffix):
        db = connect(f'app_test{worker_suffix}')
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from parallel_tests.parallel.pool import ENV_NUMBER_VAR


if TYPE_CHECKING:
    from collections.abc import Mapping


def worker_suffix_from_env(environ: Mapping[str, str] | None = None) -> str:
    """Return the raw TEST_ENV_NUMBER, or '' outside of a worker."""
    environ = os.environ if environ is None else environ
    return environ.get(ENV_NUMBER_VAR, '')


def worker_index_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Return the 0-based position of the current worker.

    Example:
        >>> worker_index_from_env({'TEST_ENV_NUMBER': '3'})
        2
        >>> worker_index_from_env({})
        0
    """
    suffix = worker_suffix_from_env(environ)
    return int(suffix) - 1 if suffix else 0


def pytest_report_header(config: pytest.Config) -> str | None:  # noqa: ARG001
    """Name the parallel-tests worker in the session header."""
    if ENV_NUMBER_VAR not in os.environ:
        return None
    return f'parallel-tests worker: {worker_index_from_env()} ({ENV_NUMBER_VAR}={worker_suffix_from_env()!r})'


@pytest.fixture
def worker_suffix() -> str:
    """The TEST_ENV_NUMBER of this worker: '' for the first, '2', '3', ... for the rest."""
    return worker_suffix_from_env()


@pytest.fixture
def worker_index() -> int:
    """The 0-based position of this worker."""
    return worker_index_from_env()
