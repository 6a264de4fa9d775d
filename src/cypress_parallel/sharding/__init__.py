"""Grouping of spec files for parallel runners."""

from cypress_parallel.sharding.splitter import group_test_files, group_tests

__all__ = ["group_test_files", "group_tests"]
