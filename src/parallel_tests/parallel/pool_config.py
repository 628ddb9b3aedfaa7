"""Configuration for the worker pool.

This module provides:

- **resolve_process_count**: How many worker processes to run, from an explicit
  request, the ``PARALLEL_TEST_PROCESSORS`` environment variable or the CPU
  count, optionally scaled by a multiplier.

- **DispatchMode**: Whether workers run concurrently or one after another.

- **PoolConfig**: Immutable settings for a WorkerPool run.

Example:
    >>> config = PoolConfig(mode=DispatchMode.SEQUENTIAL, chunk_timeout=5.0)
    >>> config.mode
    <DispatchMode.SEQUENTIAL: 'sequential'>
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
import os

from parallel_tests.errors import ConfigurationError


PROCESSORS_ENV_VAR = 'PARALLEL_TEST_PROCESSORS'


def _default_process_count() -> int:
    """Return the process count to use when none is requested."""
    from_env = os.environ.get(PROCESSORS_ENV_VAR, '').strip()
    if from_env:
        try:
            count = int(from_env)
        except ValueError:
            msg = f'{PROCESSORS_ENV_VAR} must be an integer, got {from_env!r}'
            raise ConfigurationError(msg) from None
        if count <= 0:
            msg = f'{PROCESSORS_ENV_VAR} must be positive, got {count}'
            raise ConfigurationError(msg)
        return count
    return os.cpu_count() or 4


def resolve_process_count(requested: int | None = None, multiplier: float | None = None) -> int:
    """Determine the number of worker processes.

    Args:
        requested: Explicit process count. Defaults to ``PARALLEL_TEST_PROCESSORS``
            or the number of CPUs.
        multiplier: Optional factor applied to the base count. Values below 1
            under-subscribe the host, values above 1 over-subscribe it.

    Returns:
        A positive number of processes. Scaled counts are rounded half up and
        never drop below 1.

    Raises:
        ConfigurationError: If requested or multiplier is not positive.

    Example:
        >>> resolve_process_count(8, 0.5)
        4
        >>> resolve_process_count(3, 0.1)
        1
    """
    if requested is not None and requested <= 0:
        msg = f'Process count must be positive, got {requested}'
        raise ConfigurationError(msg)
    if multiplier is not None and multiplier <= 0:
        msg = f'Process multiplier must be positive, got {multiplier}'
        raise ConfigurationError(msg)

    base = requested if requested is not None else _default_process_count()
    if multiplier is None:
        return base
    return max(1, math.floor(base * multiplier + 0.5))


class DispatchMode(Enum):
    """How the worker pool starts its processes.

    Attributes:
        PARALLEL: Start every worker at once.
        SEQUENTIAL: Start each worker after the previous one has exited.
    """

    PARALLEL = 'parallel'
    SEQUENTIAL = 'sequential'


@dataclass(frozen=True, eq=True)
class PoolConfig:
    """Settings for a WorkerPool run.

    Attributes:
        mode: Parallel or sequential dispatch. Defaults to parallel.
        chunk_timeout: Seconds of worker silence after which its pending output
            is echoed. None disables echoing.
        cwd: Working directory for worker processes. None uses the current one.
        env_vars: Extra environment variables for every worker.
    """

    mode: DispatchMode = DispatchMode.PARALLEL
    chunk_timeout: float | None = None
    cwd: str | None = None
    env_vars: dict[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any configuration value is invalid.
        """
        if not isinstance(self.mode, DispatchMode):
            msg = f'Invalid dispatch mode: {self.mode!r}. Valid modes are: {[m.value for m in DispatchMode]}'
            raise ConfigurationError(msg)

        if self.chunk_timeout is not None and self.chunk_timeout <= 0:
            msg = f'chunk_timeout must be positive, got {self.chunk_timeout}'
            raise ConfigurationError(msg)
