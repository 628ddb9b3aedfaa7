"""Arbitrary shell commands, run once per worker.

Used by command execution mode (``--exec``), where the groups hold synthetic
worker indexes and only the ``TEST_ENV_NUMBER`` of each worker differs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from parallel_tests.parallel.grouping import Group


class ShellCommand:
    """Runs the same shell command for every group.

    Example:
        >>> ShellCommand('echo $TEST_ENV_NUMBER').build(group)  # doctest: +SKIP
        'echo $TEST_ENV_NUMBER'
    """

    def __init__(self, command: str) -> None:
        self._command = command

    @property
    def command(self) -> str:
        """Return the shell command."""
        return self._command

    def build(self, group: Group) -> str:  # noqa: ARG002
        return self._command
