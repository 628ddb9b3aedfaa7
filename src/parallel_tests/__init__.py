"""parallel-tests: Run test files in parallel across CPU cores.

parallel-tests splits a batch of test files into balanced groups, runs one
process per group and merges the results into a single verdict. Each worker
process receives a ``TEST_ENV_NUMBER`` environment variable ('' for the first
worker, '2', '3', ... for the rest) so tests can route to per-worker
resources such as databases.

Example:
    Run the test suite on all available CPUs::

        $ parallel_test

    Run selected files in 4 processes, isolating slow files::

        $ parallel_test -n 4 --single slow tests/test_a.py tests/test_slow.py

    Run an arbitrary command once per worker::

        $ parallel_test -n 3 --exec 'createdb app_test$TEST_ENV_NUMBER'
"""

from __future__ import annotations


__version__ = '0.4.0'
__all__ = ['__version__']
