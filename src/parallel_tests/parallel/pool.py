"""Worker pool for parallel group execution.

This module provides the WorkerPool class that runs one child process per
non-empty group and collects an ExecutionResult for every group, at the
group's position.

Each child gets a ``TEST_ENV_NUMBER`` environment variable identifying its
worker: '' for position 0, '2' for position 1, '3' for position 2, and so on.

Child processes are driven from a thread pool. The children are already
separate OS processes, so the threads only wait on them.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
import os
import queue
import subprocess
import sys
import threading
import time
from typing import IO, TYPE_CHECKING, TextIO, cast

from parallel_tests.parallel.pool_config import DispatchMode, PoolConfig


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.frameworks.protocol import WorkerCommand
    from parallel_tests.parallel.grouping import Group


logger = logging.getLogger(__name__)

ENV_NUMBER_VAR = 'TEST_ENV_NUMBER'
SPAWN_FAILURE_EXIT_STATUS = 127


def env_number(position: int) -> str:
    """Return the TEST_ENV_NUMBER value for a worker position.

    Example:
        >>> [env_number(i) for i in range(3)]
        ['', '2', '3']
    """
    return '' if position == 0 else str(position + 1)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of running one group.

    Attributes:
        position: Position of the group this result belongs to.
        output: Captured standard output (with standard error merged in).
        exit_status: Exit status of the worker process.
        duration_seconds: Wall-clock time the worker ran, if it was started.
        spawn_error: Description of the OS error if the worker could not start.
        echoed_chars: Length of the leading part of output already echoed while
            the worker was silent.
    """

    position: int
    output: str = ''
    exit_status: int = 0
    duration_seconds: float | None = None
    spawn_error: str | None = None
    echoed_chars: int = 0

    @property
    def unechoed_output(self) -> str:
        """Return the output that was not echoed while the worker ran."""
        return self.output[self.echoed_chars :]

    @property
    def failed(self) -> bool:
        """Return True if the worker exited non-zero or could not start."""
        return self.exit_status != 0


def _pump(stream: IO[str], chunks: queue.Queue[str | None]) -> None:
    """Move lines from a worker's stdout into a queue until EOF."""
    try:
        for line in stream:
            chunks.put(line)
    finally:
        chunks.put(None)


def _capture_with_echo(process: subprocess.Popen[str], chunk_timeout: float, echo: TextIO) -> tuple[str, int]:
    """Capture all output of a process, echoing it whenever the process stalls.

    Args:
        process: The running worker process.
        chunk_timeout: Seconds of silence before pending output is echoed.
        echo: Stream that receives the pending output.

    Returns:
        The complete captured output and how many of its leading characters
        were echoed.
    """
    chunks: queue.Queue[str | None] = queue.Queue()
    reader = threading.Thread(target=_pump, args=(process.stdout, chunks), daemon=True)
    reader.start()

    captured: list[str] = []
    pending: list[str] = []
    echoed = 0
    while True:
        try:
            chunk = chunks.get(timeout=chunk_timeout)
        except queue.Empty:
            if pending:
                text = ''.join(pending)
                echo.write(text)
                echoed += len(text)
                echo.flush()
                pending.clear()
            continue
        if chunk is None:
            break
        captured.append(chunk)
        pending.append(chunk)

    reader.join()
    return ''.join(captured), echoed


def run_group(
    group: Group,
    command: list[str] | str,
    config: PoolConfig,
    echo: TextIO | None = None,
) -> ExecutionResult:
    """Run one group's command in a child process and wait for it.

    Args:
        group: The group being run.
        command: Argument list, or a string to run through the shell.
        config: Pool settings (working directory, environment, chunk timeout).
        echo: Stream for output of stalled workers. Defaults to sys.stdout.

    Returns:
        ExecutionResult with the full output and exit status. If the process
        cannot be started, the result carries the OS error and a non-zero
        exit status instead.
    """
    env = os.environ.copy()
    env.update(config.env_vars)
    env[ENV_NUMBER_VAR] = env_number(group.position)

    start_time = time.monotonic()
    try:
        process = subprocess.Popen(  # noqa: S603
            command,
            cwd=config.cwd,
            env=env,
            shell=isinstance(command, str),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding='utf-8',
            errors='replace',
        )
    except OSError as exc:
        logger.warning('Could not start worker %d: %s', group.position, exc)
        return ExecutionResult(
            position=group.position,
            exit_status=SPAWN_FAILURE_EXIT_STATUS,
            spawn_error=str(exc),
        )

    logger.debug('Worker %d started (pid %d) with %d item(s)', group.position, process.pid, len(group))
    echoed = 0
    with process:
        if config.chunk_timeout is None:
            output, _ = process.communicate()
        else:
            output, echoed = _capture_with_echo(process, config.chunk_timeout, echo or sys.stdout)
            process.wait()

    duration = time.monotonic() - start_time
    logger.debug('Worker %d exited with status %d after %.2fs', group.position, process.returncode, duration)
    return ExecutionResult(
        position=group.position,
        output=output,
        exit_status=process.returncode,
        duration_seconds=duration,
        echoed_chars=echoed,
    )


class WorkerPool:
    """Runs groups in worker processes and collects their results in order.

    The pool starts one process per non-empty group. Empty groups get an
    empty, successful result without a process. A failing worker never stops
    its siblings.

    Attributes:
        command: Builds the command for each group.
        config: The PoolConfig used for every worker.

    Example:
        >>> pool = WorkerPool(command, PoolConfig(mode=DispatchMode.PARALLEL))  # doctest: +SKIP
        >>> results = pool.run(groups)  # doctest: +SKIP
        >>> [r.position for r in results] == [g.position for g in groups]  # doctest: +SKIP
        True
    """

    def __init__(
        self,
        command: WorkerCommand,
        config: PoolConfig | None = None,
        *,
        output: TextIO | None = None,
    ) -> None:
        """Initialize the worker pool.

        Args:
            command: Builds the command for each group.
            config: Pool settings. Defaults to parallel dispatch.
            output: Stream for output of stalled workers. Defaults to sys.stdout.
        """
        self._command = command
        self._config = config if config is not None else PoolConfig()
        self._output = output

    @property
    def command(self) -> WorkerCommand:
        """Return the worker command builder."""
        return self._command

    @property
    def config(self) -> PoolConfig:
        """Return the PoolConfig used by this pool."""
        return self._config

    def run(self, groups: Sequence[Group]) -> list[ExecutionResult]:
        """Run every group and return results aligned with the groups.

        Args:
            groups: Groups to run. ``results[i]`` corresponds to ``groups[i]``.

        Returns:
            One ExecutionResult per group, in group order regardless of the
            order in which workers finish.
        """
        results: list[ExecutionResult | None] = [None] * len(groups)
        busy: list[int] = []
        for index, group in enumerate(groups):
            if group.is_empty:
                results[index] = ExecutionResult(position=group.position)
            else:
                busy.append(index)

        if self._config.mode is DispatchMode.SEQUENTIAL:
            for index in busy:
                results[index] = self._run_one(groups[index])
        elif busy:
            with ThreadPoolExecutor(max_workers=len(busy), thread_name_prefix='worker') as executor:
                futures = {executor.submit(self._run_one, groups[index]): index for index in busy}
                for future in as_completed(futures):
                    results[futures[future]] = future.result()

        # every slot is filled, empty groups above and the rest by their worker
        return cast('list[ExecutionResult]', results)

    def _run_one(self, group: Group) -> ExecutionResult:
        """Build the command for a group and run it."""
        return run_group(group, self._command.build(group), self._config, self._output)
