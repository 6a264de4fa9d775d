"""Grouping of spec files into runner-sized chunks."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cypress_parallel.adapters.base import TestFiles


def group_tests(count: int | None, paths: list[str]) -> list[str]:
    """Join *paths* into at most *count* comma-separated groups.

    Each group holds ``ceil(len(paths) / count)`` consecutive paths (the
    last one may hold fewer), so fewer than *count* groups can result.
    Order is preserved.  Without a positive *count* the paths are returned
    unchanged.

    Args:
        count: Requested number of runners.
        paths: Spec file paths in output order.

    Returns:
        One string per group.
    """
    if count is None or count <= 0 or not paths:
        return list(paths)
    chunk_size = math.ceil(len(paths) / count)
    return [",".join(paths[i : i + chunk_size]) for i in range(0, len(paths), chunk_size)]


def group_test_files(count: int | None, test_files: TestFiles) -> None:
    """Group both categories of *test_files* in place."""
    test_files.integration_tests = group_tests(count, test_files.integration_tests)
    if test_files.component_tests is not None:
        test_files.component_tests = group_tests(count, test_files.component_tests)
