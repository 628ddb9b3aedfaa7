"""Command-line interface for parallel-tests.

Runs test files, or an arbitrary command, in parallel processes::

    parallel_test [options] [files or folders ...]

Each process receives ENV['TEST_ENV_NUMBER'] ('', '2', '3', ...).
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
import time
from typing import TYPE_CHECKING

from parallel_tests import __version__
from parallel_tests.config import load_config, merge_configs
from parallel_tests.discovery import find_test_files
from parallel_tests.errors import ConfigurationError, NoWorkItemsError
from parallel_tests.frameworks.registry import FrameworkKind, default_registry
from parallel_tests.frameworks.shell import ShellCommand
from parallel_tests.parallel.aggregator import EXIT_FAILURE, ResultAggregator, resolve_exit_code
from parallel_tests.parallel.grouping import group_items
from parallel_tests.parallel.pool import WorkerPool
from parallel_tests.parallel.pool_config import resolve_process_count
from parallel_tests.reporting.console import ConsoleReporter


if TYPE_CHECKING:
    from collections.abc import Sequence

    from parallel_tests.config import RunConfig
    from parallel_tests.reporting.results import AggregateOutcome


logger = logging.getLogger(__name__)

EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the parallel_test command."""
    parser = argparse.ArgumentParser(
        prog='parallel_test',
        description=(
            "Run all tests in parallel, giving each process ENV['TEST_ENV_NUMBER'] ('', '2', '3', ...). "
            'Only the given files and folders are run if any are named.'
        ),
    )
    parser.add_argument('files', nargs='*', help='test files or folders to run')
    parser.add_argument(
        '-n',
        '--processes',
        type=int,
        default=None,
        help='how many processes to use, default: available CPUs',
    )
    parser.add_argument('-p', '--pattern', default=None, help='run tests matching this pattern')
    parser.add_argument('--no-sort', action='store_true', help='do not sort files before running them')
    parser.add_argument(
        '-m',
        '--multiply-processes',
        dest='multiply',
        type=float,
        default=None,
        help='use given number as a multiplier of processes to run',
    )
    parser.add_argument('-r', '--root', default=None, help='execute test commands from this path')
    parser.add_argument(
        '-s',
        '--single',
        action='append',
        default=None,
        metavar='PATTERN',
        help='run all matching files in only one process (repeatable)',
    )
    parser.add_argument(
        '-e',
        '--exec',
        dest='exec_command',
        default=None,
        metavar='COMMAND',
        help="execute this command in parallel, with ENV['TEST_ENV_NUMBER']",
    )
    parser.add_argument('-o', '--test-options', default=None, help='execute test commands with those options')
    parser.add_argument(
        '-t',
        '--type',
        choices=[kind.value for kind in FrameworkKind],
        default=None,
        help='which type of tests to run, default: pytest',
    )
    parser.add_argument(
        '--non-parallel',
        action='store_true',
        help='execute same commands but not in parallel, needs --exec',
    )
    parser.add_argument(
        '--chunk-timeout',
        type=float,
        default=None,
        metavar='SECONDS',
        help='timeout before re-printing the output of a child process',
    )
    parser.add_argument('--verbose', action='store_true', help='log grouping and worker details')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def run_tests(config: RunConfig, reporter: ConsoleReporter) -> AggregateOutcome:
    """Run the configured test files in parallel and report the outcome.

    Raises:
        NoWorkItemsError: If no test files are found.
    """
    framework = default_registry().get(config.framework)
    start = time.monotonic()

    paths = config.files or (framework.default_folder,)
    files = find_test_files(paths, framework.file_patterns, root=config.root, pattern=config.pattern)
    if not files:
        msg = f'no {framework.item_noun}s found!'
        raise NoWorkItemsError(msg)

    num_processes = resolve_process_count(config.processes, config.multiplier)
    groups = group_items(files, num_processes, sort=config.sort, pin_patterns=config.pin_patterns)
    reporter.write_plan(groups, framework.item_noun)

    pool = WorkerPool(framework.command(config.test_options), config.pool_config(), output=reporter.output)
    results = pool.run(groups)
    reporter.write_outputs(results)

    aggregator = ResultAggregator(framework.parser, noun=framework.noun)
    outcome = aggregator.summarize(results, elapsed_seconds=time.monotonic() - start)
    reporter.write_outcome(outcome, framework.item_noun)
    return outcome


def execute_command(config: RunConfig, reporter: ConsoleReporter) -> AggregateOutcome:
    """Run the configured shell command once per process and report the outcome."""
    if config.exec_command is None:
        msg = 'No command to execute'
        raise ConfigurationError(msg)

    start = time.monotonic()
    num_processes = resolve_process_count(config.processes, config.multiplier)
    groups = group_items([str(i) for i in range(num_processes)], num_processes, sort=False)

    pool = WorkerPool(ShellCommand(config.exec_command), config.pool_config(), output=reporter.output)
    results = pool.run(groups)
    reporter.write_outputs(results)

    outcome = ResultAggregator(parser=None).summarize(results, elapsed_seconds=time.monotonic() - start)
    reporter.write_outcome(outcome, 'command')
    return outcome


def run(config: RunConfig, reporter: ConsoleReporter | None = None) -> int:
    """Run a configured parallel run and return its exit code."""
    reporter = reporter or ConsoleReporter()
    if config.exec_command is not None:
        outcome = execute_command(config, reporter)
    else:
        outcome = run_tests(config, reporter)
    return resolve_exit_code(outcome.any_failed)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the parallel_test command.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].

    Returns:
        0 if every worker and test passed, 1 if anything failed or no tests
        were found, 2 for invalid options.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        rootdir = Path(args.root) if args.root else Path.cwd()
        config = merge_configs(load_config(rootdir), args)
        logger.debug('Run configuration: %s', config)
        return run(config)
    except ConfigurationError as exc:
        sys.stderr.write(f'parallel_test: error: {exc}\n')
        return EXIT_USAGE
    except NoWorkItemsError as exc:
        sys.stderr.write(f'parallel_test: {exc}\n')
        return EXIT_FAILURE
