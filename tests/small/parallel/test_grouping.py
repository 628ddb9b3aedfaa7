"""Tests for work item grouping.

These tests verify that items are split into balanced, deterministic groups
and that pinned items are isolated.
"""

from __future__ import annotations

import itertools
import re

import pytest

from parallel_tests.errors import ConfigurationError
from parallel_tests.parallel.grouping import Group, Grouper, group_items, split_evenly


def items_of(groups: list[Group]) -> list[list[str]]:
    return [list(group.items) for group in groups]


class TestSplitEvenly:
    """Tests for the balanced chunking helper."""

    def test_first_chunks_get_the_extra_items(self) -> None:
        """Five items in two chunks split 3/2."""
        assert split_evenly(['a', 'b', 'c', 'd', 'e'], 2) == [['a', 'b', 'c'], ['d', 'e']]

    def test_even_split(self) -> None:
        """Six items in three chunks split 2/2/2."""
        assert split_evenly(list('abcdef'), 3) == [['a', 'b'], ['c', 'd'], ['e', 'f']]

    def test_more_chunks_than_items(self) -> None:
        """Extra chunks are empty."""
        assert split_evenly(['a', 'b'], 4) == [['a'], ['b'], [], []]

    def test_no_items(self) -> None:
        """Every chunk is empty when there is nothing to split."""
        assert split_evenly([], 3) == [[], [], []]


class TestGrouper:
    """Tests for Grouper without pinning."""

    def test_example_five_items_two_groups(self) -> None:
        """items=[a,b,c,d,e], P=2 gives [[a,b,c],[d,e]]."""
        groups = group_items(['a', 'b', 'c', 'd', 'e'], 2)
        assert items_of(groups) == [['a', 'b', 'c'], ['d', 'e']]

    def test_positions_follow_group_order(self) -> None:
        """Each group's position is its index."""
        groups = group_items(list('abcdefg'), 3)
        assert [group.position for group in groups] == [0, 1, 2]

    def test_sorts_items(self) -> None:
        """Items are sorted lexicographically before splitting."""
        groups = group_items(['c', 'a', 'd', 'b'], 2)
        assert items_of(groups) == [['a', 'b'], ['c', 'd']]

    def test_no_sort_keeps_given_order(self) -> None:
        """With sorting disabled, the input order is kept."""
        groups = group_items(['c', 'a', 'd', 'b'], 2, sort=False)
        assert items_of(groups) == [['c', 'a'], ['d', 'b']]

    def test_duplicates_are_dropped(self) -> None:
        """Each item lands in exactly one group once."""
        groups = group_items(['a', 'b', 'a', 'c'], 2)
        assert items_of(groups) == [['a', 'b'], ['c']]

    def test_more_groups_than_items_leaves_empty_groups(self) -> None:
        """Excess groups are empty but keep their position."""
        groups = group_items(['a', 'b'], 4)
        assert len(groups) == 4
        assert items_of(groups) == [['a'], ['b'], [], []]
        assert groups[3].is_empty
        assert groups[3].position == 3

    def test_no_items(self) -> None:
        """Grouping nothing gives only empty groups."""
        groups = group_items([], 2)
        assert all(group.is_empty for group in groups)
        assert len(groups) == 2

    @pytest.mark.parametrize('num_groups', [0, -1])
    def test_rejects_non_positive_group_count(self, num_groups: int) -> None:
        """The number of groups must be positive."""
        with pytest.raises(ConfigurationError, match='must be positive'):
            group_items(['a'], num_groups)

    @pytest.mark.parametrize(
        ('num_items', 'num_groups'),
        [(0, 1), (1, 1), (5, 2), (7, 3), (10, 4), (3, 8), (100, 7), (64, 8)],
    )
    def test_sizes_are_conserved_and_balanced(self, num_items: int, num_groups: int) -> None:
        """All items are assigned once and sizes differ by at most one."""
        items = [f'test_{i:03d}.py' for i in range(num_items)]
        groups = group_items(items, num_groups)

        assert len(groups) == num_groups
        assigned = [item for group in groups for item in group.items]
        assert sorted(assigned) == sorted(items)
        sizes = [len(group) for group in groups if not group.is_empty]
        if sizes:
            assert max(sizes) - min(sizes) <= 1

    def test_grouping_ignores_input_order_when_sorting(self) -> None:
        """Any permutation of the same items gives the same groups."""
        items = ['d.py', 'a.py', 'c.py', 'b.py', 'e.py']
        expected = group_items(items, 2)
        for permutation in itertools.permutations(items):
            assert group_items(list(permutation), 2) == expected

    def test_groups_are_immutable(self) -> None:
        """Groups cannot be modified after creation."""
        group = group_items(['a'], 1)[0]
        with pytest.raises(AttributeError):
            group.items = ('b',)  # type: ignore[misc]


class TestPinning:
    """Tests for isolating items that match pin patterns."""

    def test_example_slow_items_are_isolated(self) -> None:
        """Pinned slow1/slow2 share a group that never contains a or b."""
        groups = group_items(['a', 'b', 'slow1', 'slow2'], 2, pin_patterns=[re.compile('slow')])

        assert len(groups) == 3
        assert items_of(groups) == [['a'], ['b'], ['slow1', 'slow2']]
        for group in groups:
            if 'slow1' in group.items or 'slow2' in group.items:
                assert not {'a', 'b'} & set(group.items)

    def test_pinned_group_is_appended_last(self) -> None:
        """The pinned group comes after the requested groups."""
        groups = group_items(['a', 'slow'], 2, pin_patterns=[re.compile('slow')])
        assert groups[-1].pinned
        assert groups[-1].position == 2
        assert not any(group.pinned for group in groups[:-1])

    def test_items_matching_different_patterns_share_the_pinned_group(self) -> None:
        """Every pinned item goes to the same isolated group."""
        patterns = [re.compile('slow'), re.compile('^integration')]
        groups = group_items(['integration_db', 'unit', 'very_slow'], 1, pin_patterns=patterns)
        assert items_of(groups) == [['unit'], ['integration_db', 'very_slow']]

    def test_no_match_adds_no_group(self) -> None:
        """Without pinned items the group count is unchanged."""
        groups = group_items(['a', 'b'], 2, pin_patterns=[re.compile('slow')])
        assert len(groups) == 2
        assert not any(group.pinned for group in groups)

    def test_all_items_pinned(self) -> None:
        """When everything is pinned, the requested groups are empty."""
        groups = group_items(['slow_a', 'slow_b'], 2, pin_patterns=[re.compile('slow')])
        assert items_of(groups) == [[], [], ['slow_a', 'slow_b']]

    def test_pattern_matches_anywhere_in_item(self) -> None:
        """Patterns are searched, not anchored."""
        grouper = Grouper(pin_patterns=[re.compile('slow')])
        assert grouper.is_pinned('tests/test_slow_api.py')
        assert not grouper.is_pinned('tests/test_fast.py')

    def test_pinned_items_only_share_with_pinned_items(self) -> None:
        """Across a larger set, pinned items never mix with unpinned ones."""
        pattern = re.compile(r'_(slow|db)\.py$')
        items = [f'test_{i}.py' for i in range(20)] + [f'test_{i}_slow.py' for i in range(3)] + ['test_x_db.py']
        groups = group_items(items, 4, pin_patterns=[pattern])

        for group in groups:
            pinned = [item for item in group.items if pattern.search(item)]
            if pinned:
                assert len(pinned) == len(group.items)

    def test_disabling_sort_with_pinning_is_rejected(self) -> None:
        """Pinning requires sorted input."""
        with pytest.raises(ConfigurationError, match='cannot be combined'):
            Grouper(sort=False, pin_patterns=[re.compile('slow')])
