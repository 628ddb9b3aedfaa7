"""Shared pytest configuration and fixtures for parallel-tests tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from parallel_tests.parallel.grouping import Group


# Auto-mark tests based on directory
def pytest_collection_modifyitems(
    config: pytest.Config,  # noqa: ARG001
    items: list[pytest.Item],
) -> None:
    """Automatically apply markers based on test directory."""
    for item in items:
        path_parts = Path(str(item.fspath)).parts

        if 'small' in path_parts:
            item.add_marker(pytest.mark.small)
        elif 'medium' in path_parts:
            item.add_marker(pytest.mark.medium)
        elif 'large' in path_parts:
            item.add_marker(pytest.mark.large)


@pytest.fixture
def make_groups():
    """Build groups from lists of items, positioned in list order."""

    def _make(*item_lists: list[str]) -> list[Group]:
        return [Group(position=i, items=tuple(items)) for i, items in enumerate(item_lists)]

    return _make
