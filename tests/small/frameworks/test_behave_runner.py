"""Tests for behave output parsing and command building."""

from __future__ import annotations

import sys

from parallel_tests.frameworks.behave_runner import BehaveCommand, BehaveParser
from parallel_tests.parallel.grouping import Group


PASSING_WORKER = """\
Feature: Login

  Scenario: Valid password
    Given a user
    Then the user is logged in

1 feature passed, 0 failed, 0 skipped
2 scenarios passed, 0 failed, 0 skipped
6 steps passed, 0 failed, 0 skipped, 0 undefined
Took 0m0.012s
"""

FAILING_WORKER = """\
Failing scenarios:
  features/cart.feature:12  Checkout with empty cart
  features/cart.feature:20  Apply expired coupon

0 features passed, 1 failed, 0 skipped
1 scenario passed, 2 failed, 1 error, 1 skipped, 3 untested
4 steps passed, 2 failed, 1 skipped, 0 undefined
Took 0m0.020s
"""


class TestBehaveParser:
    """Tests for BehaveParser."""

    def test_passing_run(self) -> None:
        counts = BehaveParser().parse(PASSING_WORKER)
        assert (counts.tests, counts.failures, counts.errors) == (2, 0, 0)
        assert counts.failure_details == ()

    def test_failing_run(self) -> None:
        counts = BehaveParser().parse(FAILING_WORKER)
        assert counts.tests == 5
        assert counts.failures == 2
        assert counts.errors == 1

    def test_failing_scenarios_become_details(self) -> None:
        counts = BehaveParser().parse(FAILING_WORKER)
        assert counts.failure_details == (
            'features/cart.feature:12  Checkout with empty cart',
            'features/cart.feature:20  Apply expired coupon',
        )

    def test_feature_and_step_lines_are_ignored(self) -> None:
        counts = BehaveParser().parse('1 feature passed, 0 failed, 0 skipped\n5 steps passed, 1 failed\n')
        assert counts.tests == 0
        assert not counts.has_failures

    def test_sums_every_worker(self) -> None:
        counts = BehaveParser().parse(PASSING_WORKER + FAILING_WORKER)
        assert counts.tests == 7
        assert counts.failures == 2


class TestBehaveCommand:
    """Tests for BehaveCommand."""

    def test_runs_behave_module_over_group_items(self) -> None:
        group = Group(position=2, items=('features/a.feature', 'features/b.feature'))
        assert BehaveCommand().build(group) == [
            sys.executable,
            '-m',
            'behave',
            'features/a.feature',
            'features/b.feature',
        ]
