"""Configuration loading for parallel-tests.

This module reads configuration from the [tool.parallel-tests] section of
pyproject.toml, merges it with command-line options and produces the
immutable RunConfig that is passed through a run.

Example pyproject.toml section::

    [tool.parallel-tests]
    type = "pytest"
    processes = 4
    single = ["slow", "integration"]
    test_options = "-x -q"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import shlex
import tomllib
from typing import TYPE_CHECKING, Any

from parallel_tests.errors import ConfigurationError
from parallel_tests.frameworks.registry import FrameworkKind
from parallel_tests.parallel.pool_config import DispatchMode, PoolConfig


if TYPE_CHECKING:
    import argparse
    from collections.abc import Sequence


TOOL_SECTION = 'parallel-tests'


@dataclass
class FileConfig:
    """Configuration read from pyproject.toml.

    All fields default to None, meaning the option was not set in the file.

    Attributes:
        type: Test framework name.
        processes: Number of worker processes.
        multiply: Multiplier applied to the process count.
        single: Patterns of files to run in an isolated process.
        pattern: Pattern selecting which test files to run.
        no_sort: Whether to keep files in discovery order.
        test_options: Extra options passed to the test framework.
        chunk_timeout: Seconds of worker silence before its output is echoed.
    """

    type: str | None = None
    processes: int | None = None
    multiply: float | None = None
    single: list[str] | None = None
    pattern: str | None = None
    no_sort: bool | None = None
    test_options: str | None = None
    chunk_timeout: float | None = None


def _expect(table: dict[str, Any], key: str, kinds: type | tuple[type, ...]) -> Any:
    """Return table[key] if it has one of the expected types."""
    value = table.get(key)
    if value is None:
        return None
    expected = kinds if isinstance(kinds, tuple) else (kinds,)
    # bool is an int subclass
    if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
        msg = f'[tool.{TOOL_SECTION}] {key} has invalid value {value!r}'
        raise ConfigurationError(msg)
    return value


def load_config(rootdir: Path) -> FileConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.parallel-tests] section from pyproject.toml in the given
    directory. Returns default configuration if the file or section does not
    exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        FileConfig with values from pyproject.toml or defaults.

    Raises:
        ConfigurationError: If the file is not valid TOML or a value has the
            wrong type.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return FileConfig()

    with pyproject_path.open('rb') as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            msg = f'Invalid {pyproject_path}: {exc}'
            raise ConfigurationError(msg) from exc

    tool_config = data.get('tool', {}).get(TOOL_SECTION, {})

    single = _expect(tool_config, 'single', (list, str))
    if isinstance(single, str):
        single = [single]
    test_options = _expect(tool_config, 'test_options', (list, str))
    if isinstance(test_options, list):
        test_options = shlex.join(str(option) for option in test_options)

    return FileConfig(
        type=_expect(tool_config, 'type', str),
        processes=_expect(tool_config, 'processes', int),
        multiply=_expect(tool_config, 'multiply', (int, float)),
        single=single,
        pattern=_expect(tool_config, 'pattern', str),
        no_sort=_expect(tool_config, 'no_sort', bool),
        test_options=test_options,
        chunk_timeout=_expect(tool_config, 'chunk_timeout', (int, float)),
    )


def compile_pattern(text: str) -> re.Pattern[str]:
    """Compile a user-supplied regular expression.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.

    Example:
        >>> compile_pattern('slow').search('tests/test_slow.py') is not None
        True
    """
    try:
        return re.compile(text)
    except re.error as exc:
        msg = f'Invalid pattern {text!r}: {exc}'
        raise ConfigurationError(msg) from exc


@dataclass(frozen=True)
class RunConfig:
    """Validated settings for one parallel run.

    Attributes:
        framework: Test framework whose files are run.
        processes: Requested process count, or None for the default.
        multiplier: Factor applied to the process count, or None.
        files: Files and folders to run. Empty means the framework's default folder.
        pattern: Only files matching this pattern are run.
        pin_patterns: Files matching any of these run in an isolated process.
        sort: Whether files are sorted before grouping.
        root: Directory test commands run from.
        exec_command: Shell command for command execution mode, or None.
        test_options: Extra arguments passed to the test framework.
        non_parallel: Run workers one after another.
        chunk_timeout: Seconds of worker silence before its output is echoed.
    """

    framework: FrameworkKind = FrameworkKind.PYTEST
    processes: int | None = None
    multiplier: float | None = None
    files: tuple[str, ...] = ()
    pattern: re.Pattern[str] | None = None
    pin_patterns: tuple[re.Pattern[str], ...] = ()
    sort: bool = True
    root: Path | None = None
    exec_command: str | None = None
    test_options: tuple[str, ...] = ()
    non_parallel: bool = False
    chunk_timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate option combinations.

        Raises:
            ConfigurationError: If options are invalid or conflict.
        """
        if not self.sort and self.pin_patterns:
            msg = '--no-sort and --single are not supported together'
            raise ConfigurationError(msg)

        if self.non_parallel and self.exec_command is None:
            msg = '--non-parallel requires --exec'
            raise ConfigurationError(msg)

        if self.processes is not None and self.processes <= 0:
            msg = f'processes must be positive, got {self.processes}'
            raise ConfigurationError(msg)

        if self.multiplier is not None and self.multiplier <= 0:
            msg = f'multiply must be positive, got {self.multiplier}'
            raise ConfigurationError(msg)

        if self.chunk_timeout is not None and self.chunk_timeout <= 0:
            msg = f'chunk_timeout must be positive, got {self.chunk_timeout}'
            raise ConfigurationError(msg)

    @property
    def cwd(self) -> str | None:
        """Return the working directory for worker processes."""
        return str(self.root) if self.root is not None else None

    def pool_config(self) -> PoolConfig:
        """Build the WorkerPool settings for this run."""
        return PoolConfig(
            mode=DispatchMode.SEQUENTIAL if self.non_parallel else DispatchMode.PARALLEL,
            chunk_timeout=self.chunk_timeout,
            cwd=self.cwd,
        )


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    return next((value for value in values if value is not None), None)


def _split_options(options: str | Sequence[str] | None) -> tuple[str, ...]:
    if options is None:
        return ()
    if isinstance(options, str):
        try:
            return tuple(shlex.split(options))
        except ValueError as exc:
            msg = f'Invalid test options {options!r}: {exc}'
            raise ConfigurationError(msg) from exc
    return tuple(options)


def merge_configs(file_config: FileConfig, cli: argparse.Namespace) -> RunConfig:
    """Merge command-line options with file configuration.

    Command-line options take precedence over pyproject.toml. Options left at
    None on the command line fall back to the file, then to built-in defaults.
    Pin patterns from both sources are combined.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        cli: Parsed command-line options.

    Returns:
        The validated RunConfig.

    Raises:
        ConfigurationError: If a pattern is invalid or options conflict.
    """
    framework_name = _first(cli.type, file_config.type, FrameworkKind.PYTEST.value)

    pattern_text = _first(cli.pattern, file_config.pattern)
    single = [*(file_config.single or []), *(cli.single or [])]

    no_sort = bool(cli.no_sort) or bool(file_config.no_sort)
    chunk_timeout = _first(cli.chunk_timeout, file_config.chunk_timeout)
    multiplier = _first(cli.multiply, file_config.multiply)

    return RunConfig(
        framework=FrameworkKind.from_name(framework_name),
        processes=_first(cli.processes, file_config.processes),
        multiplier=float(multiplier) if multiplier is not None else None,
        files=tuple(cli.files or ()),
        pattern=compile_pattern(pattern_text) if pattern_text is not None else None,
        pin_patterns=tuple(compile_pattern(text) for text in single),
        sort=not no_sort,
        root=Path(cli.root) if cli.root else None,
        exec_command=cli.exec_command,
        test_options=_split_options(_first(cli.test_options, file_config.test_options)),
        non_parallel=bool(cli.non_parallel),
        chunk_timeout=float(chunk_timeout) if chunk_timeout is not None else None,
    )
