"""Tests for cypress_parallel.sharding.splitter."""

from __future__ import annotations

import pytest

from cypress_parallel.adapters.base import TestFiles
from cypress_parallel.sharding.splitter import group_test_files, group_tests

PATHS = ["p1", "p2", "p3", "p4", "p5"]


class TestGroupTests:
    def test_two_runners(self) -> None:
        assert group_tests(2, PATHS) == ["p1,p2,p3", "p4,p5"]

    def test_one_runner_joins_everything(self) -> None:
        assert group_tests(1, PATHS) == ["p1,p2,p3,p4,p5"]

    def test_runner_per_file(self) -> None:
        assert group_tests(5, PATHS) == PATHS

    def test_more_runners_than_files(self) -> None:
        assert group_tests(10, PATHS) == PATHS

    def test_fewer_groups_than_runners(self) -> None:
        # chunk size ceil(5 / 4) = 2 leaves only three groups
        assert group_tests(4, PATHS) == ["p1,p2", "p3,p4", "p5"]

    @pytest.mark.parametrize("count", [None, 0, -3])
    def test_no_grouping_without_positive_count(self, count: int | None) -> None:
        assert group_tests(count, PATHS) == PATHS

    def test_empty_paths(self) -> None:
        assert group_tests(3, []) == []

    def test_order_preserved(self) -> None:
        paths = ["z", "a", "m", "b"]
        assert group_tests(2, paths) == ["z,a", "m,b"]

    def test_input_not_modified(self) -> None:
        paths = list(PATHS)
        group_tests(2, paths)
        assert paths == PATHS


class TestGroupTestFiles:
    def test_groups_both_categories(self) -> None:
        files = TestFiles(integration_tests=list(PATHS), component_tests=["c1", "c2", "c3"])
        group_test_files(2, files)

        assert files.integration_tests == ["p1,p2,p3", "p4,p5"]
        assert files.component_tests == ["c1,c2", "c3"]

    def test_absent_component_stays_absent(self) -> None:
        files = TestFiles(integration_tests=["a", "b"])
        group_test_files(2, files)

        assert files.integration_tests == ["a", "b"]
        assert files.component_tests is None
