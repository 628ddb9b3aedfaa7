"""Registry of supported test frameworks.

Each FrameworkKind maps to a Framework describing how to find its test files,
how to build a worker command and how to parse the output. The default
registry is built once and looked up by kind, never by evaluating names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cache
from typing import TYPE_CHECKING

from parallel_tests.errors import ConfigurationError
from parallel_tests.frameworks.behave_runner import BehaveCommand, BehaveParser
from parallel_tests.frameworks.pytest_runner import PytestCommand, PytestParser
from parallel_tests.frameworks.unittest_runner import UnittestCommand, UnittestParser


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from parallel_tests.frameworks.protocol import ResultParser, WorkerCommand


class FrameworkKind(Enum):
    """Supported test frameworks."""

    PYTEST = 'pytest'
    UNITTEST = 'unittest'
    BEHAVE = 'behave'

    @classmethod
    def from_name(cls, name: str) -> FrameworkKind:
        """Look up a kind by its name.

        Raises:
            ConfigurationError: If the name is not a supported framework.
        """
        try:
            return cls(name)
        except ValueError:
            msg = f'Unknown test framework: {name!r}. Supported frameworks are: {[k.value for k in cls]}'
            raise ConfigurationError(msg) from None


@dataclass(frozen=True)
class Framework:
    """How parallel-tests drives one test framework.

    Attributes:
        kind: The framework this describes.
        noun: What the framework calls a single test, for summaries.
        item_noun: What the framework calls one of its files.
        default_folder: Folder searched for test files when none are given.
        file_patterns: Glob patterns matching the framework's test files.
        parser: Extracts counts from captured output.
        command_factory: Builds a WorkerCommand from extra test options.
    """

    kind: FrameworkKind
    noun: str
    item_noun: str
    default_folder: str
    file_patterns: tuple[str, ...]
    parser: ResultParser
    command_factory: Callable[[Sequence[str]], WorkerCommand]

    def command(self, options: Sequence[str] = ()) -> WorkerCommand:
        """Return a WorkerCommand passing the given options to the framework."""
        return self.command_factory(options)


class FrameworkRegistry:
    """Maps framework kinds to their Framework definitions.

    Example:
        >>> registry = default_registry()
        >>> registry.get(FrameworkKind.BEHAVE).noun
        'scenario'
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._frameworks: dict[FrameworkKind, Framework] = {}

    def register(self, framework: Framework) -> None:
        """Register a framework under its kind."""
        self._frameworks[framework.kind] = framework

    def get(self, kind: FrameworkKind) -> Framework:
        """Get the framework registered for a kind.

        Raises:
            ConfigurationError: If nothing is registered for the kind.
        """
        if kind not in self._frameworks:
            msg = f'No framework registered for {kind.value!r}'
            raise ConfigurationError(msg)
        return self._frameworks[kind]

    def available(self) -> list[FrameworkKind]:
        """List the registered kinds."""
        return list(self._frameworks)


@cache
def default_registry() -> FrameworkRegistry:
    """Return the registry of built-in frameworks."""
    registry = FrameworkRegistry()
    registry.register(
        Framework(
            kind=FrameworkKind.PYTEST,
            noun='test',
            item_noun='test',
            default_folder='tests',
            file_patterns=('test_*.py', '*_test.py'),
            parser=PytestParser(),
            command_factory=PytestCommand,
        )
    )
    registry.register(
        Framework(
            kind=FrameworkKind.UNITTEST,
            noun='test',
            item_noun='test',
            default_folder='tests',
            file_patterns=('test*.py',),
            parser=UnittestParser(),
            command_factory=UnittestCommand,
        )
    )
    registry.register(
        Framework(
            kind=FrameworkKind.BEHAVE,
            noun='scenario',
            item_noun='feature',
            default_folder='features',
            file_patterns=('*.feature',),
            parser=BehaveParser(),
            command_factory=BehaveCommand,
        )
    )
    return registry
