"""Tests for cypress_parallel.parsing.treesitter."""

from __future__ import annotations

import pytest

from cypress_parallel.parsing.treesitter import (
    collect_syntax_issues,
    get_parser,
    has_parse_errors,
    node_text,
    parse_code,
)


def test_parser_is_cached() -> None:
    assert get_parser("javascript") is get_parser("javascript")


def test_unsupported_language() -> None:
    with pytest.raises(ValueError, match="Unsupported language: python"):
        get_parser("python")


def test_valid_source_has_no_issues() -> None:
    tree = parse_code(b"module.exports = { a: 1 };\n", "javascript")

    assert not has_parse_errors(tree.root_node)
    assert collect_syntax_issues(tree.root_node) == []


def test_issue_positions_are_one_based() -> None:
    tree = parse_code(b"const a = 1;\nconst b = ;\n", "typescript")

    issues = collect_syntax_issues(tree.root_node)

    assert has_parse_errors(tree.root_node)
    assert issues
    assert issues[0].line == 2


def test_node_text() -> None:
    tree = parse_code(b"const answer = 42;", "javascript")

    assert node_text(tree.root_node) == "const answer = 42;"
    assert node_text(None) == ""
