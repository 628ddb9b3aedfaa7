"""Work item grouping for parallel execution.

This module partitions work items (test files or synthetic indexes) into
ordered groups, one group per worker process. Grouping is deterministic:
items are sorted before they are split, so an unchanged set of files always
produces the same groups.

Items matching a pin pattern are isolated in an extra group of their own and
never share a worker with unrelated items.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from parallel_tests.errors import ConfigurationError


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    import re


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Group:
    """An ordered slice of work items assigned to one worker.

    Attributes:
        position: Index of the group in the run, starting at 0.
        items: Work items for this worker, in execution order.
        pinned: Whether this is the isolated group of pinned items.
    """

    position: int
    items: tuple[str, ...] = ()
    pinned: bool = False

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        """Return True if the group has no work items."""
        return not self.items


def split_evenly(items: Sequence[str], num_groups: int) -> list[list[str]]:
    """Split items into contiguous chunks whose sizes differ by at most one.

    The first ``len(items) % num_groups`` chunks get one extra item.

    Example:
        >>> split_evenly(['a', 'b', 'c', 'd', 'e'], 2)
        [['a', 'b', 'c'], ['d', 'e']]
        >>> split_evenly(['a'], 3)
        [['a'], [], []]
    """
    size, extra = divmod(len(items), num_groups)
    chunks: list[list[str]] = []
    start = 0
    for index in range(num_groups):
        end = start + size + (1 if index < extra else 0)
        chunks.append(list(items[start:end]))
        start = end
    return chunks


class Grouper:
    """Partitions work items into balanced groups.

    Attributes:
        sort: Whether to sort items before splitting them.
        pin_patterns: Compiled patterns selecting items to isolate.

    Example:
        >>> groups = Grouper().group(['c', 'a', 'b'], num_groups=2)
        >>> [g.items for g in groups]
        [('a', 'b'), ('c',)]
    """

    def __init__(self, *, sort: bool = True, pin_patterns: Sequence[re.Pattern[str]] = ()) -> None:
        """Initialize the grouper.

        Args:
            sort: Sort items lexicographically before grouping. Defaults to True.
            pin_patterns: Patterns whose matching items run in an isolated group.

        Raises:
            ConfigurationError: If sorting is disabled while pin patterns are given.
        """
        if not sort and pin_patterns:
            msg = 'Disabling sorting cannot be combined with pinning items to a single process'
            raise ConfigurationError(msg)
        self._sort = sort
        self._pin_patterns = tuple(pin_patterns)

    @property
    def sort(self) -> bool:
        """Return whether items are sorted before grouping."""
        return self._sort

    @property
    def pin_patterns(self) -> tuple[re.Pattern[str], ...]:
        """Return the pin patterns."""
        return self._pin_patterns

    def is_pinned(self, item: str) -> bool:
        """Return True if any pin pattern matches the item."""
        return any(pattern.search(item) for pattern in self._pin_patterns)

    def group(self, items: Iterable[str], num_groups: int) -> list[Group]:
        """Partition items into groups.

        Args:
            items: Work items to distribute. Duplicates are dropped.
            num_groups: Number of balanced groups to create.

        Returns:
            ``num_groups`` balanced groups, followed by one pinned group if any
            item matched a pin pattern.

        Raises:
            ConfigurationError: If num_groups is not positive.
        """
        if num_groups < 1:
            msg = f'Number of groups must be positive, got {num_groups}'
            raise ConfigurationError(msg)

        unique = list(dict.fromkeys(items))
        if self._sort:
            unique.sort()

        pinned = [item for item in unique if self.is_pinned(item)]
        remaining = [item for item in unique if not self.is_pinned(item)]

        groups = [
            Group(position=position, items=tuple(chunk))
            for position, chunk in enumerate(split_evenly(remaining, num_groups))
        ]
        if pinned:
            groups.append(Group(position=len(groups), items=tuple(pinned), pinned=True))

        for group in groups:
            logger.debug('Group %d%s: %s', group.position, ' (pinned)' if group.pinned else '', list(group.items))
        return groups


def group_items(
    items: Iterable[str],
    num_groups: int,
    *,
    sort: bool = True,
    pin_patterns: Sequence[re.Pattern[str]] = (),
) -> list[Group]:
    """Partition items into groups with a one-off Grouper.

    Args:
        items: Work items to distribute.
        num_groups: Number of balanced groups to create.
        sort: Sort items before grouping.
        pin_patterns: Patterns whose matching items run in an isolated group.

    Returns:
        The ordered list of groups.
    """
    return Grouper(sort=sort, pin_patterns=pin_patterns).group(items, num_groups)
