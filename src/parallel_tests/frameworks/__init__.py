"""Test framework support for parallel-tests.

This package provides the output parsers and worker commands for each
supported framework, and the registry that maps a FrameworkKind to them.
"""

from parallel_tests.frameworks.behave_runner import BehaveCommand, BehaveParser
from parallel_tests.frameworks.protocol import ResultParser, WorkerCommand
from parallel_tests.frameworks.pytest_runner import PytestCommand, PytestParser
from parallel_tests.frameworks.registry import Framework, FrameworkKind, FrameworkRegistry, default_registry
from parallel_tests.frameworks.shell import ShellCommand
from parallel_tests.frameworks.unittest_runner import UnittestCommand, UnittestParser


__all__ = [
    'BehaveCommand',
    'BehaveParser',
    'Framework',
    'FrameworkKind',
    'FrameworkRegistry',
    'PytestCommand',
    'PytestParser',
    'ResultParser',
    'ShellCommand',
    'UnittestCommand',
    'UnittestParser',
    'WorkerCommand',
    'default_registry',
]
