"""Tree-sitter wrapper for parsing Cypress config scripts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

import tree_sitter
import tree_sitter_language_pack as tslp

if TYPE_CHECKING:
    from tree_sitter_language_pack import SupportedLanguage

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = frozenset({"javascript", "typescript"})


@dataclass
class SyntaxIssue:
    """Location of an ``ERROR`` or ``MISSING`` node in a syntax tree."""

    line: int
    """One-based line number."""

    column: int
    """One-based column number."""

    text: str
    """Source text covered by the node (empty for missing nodes)."""

    missing: str | None = None
    """Node type the parser expected, for missing nodes."""


# ── Module-level caches ──────────────────────────────────────────
_parser_cache: dict[str, tree_sitter.Parser] = {}


def get_parser(language: str) -> tree_sitter.Parser:
    """Get a (cached) tree-sitter parser for the given language."""
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    cached = _parser_cache.get(language)
    if cached is not None:
        return cached
    parser = tslp.get_parser(cast("SupportedLanguage", language))
    _parser_cache[language] = parser
    return parser


def parse_code(source: bytes, language: str) -> tree_sitter.Tree:
    """Parse source code bytes into a tree-sitter AST."""
    return get_parser(language).parse(source)


def has_parse_errors(root: tree_sitter.Node) -> bool:
    """Check if the AST contains any parse errors."""
    return root.has_error


def collect_syntax_issues(root: tree_sitter.Node) -> list[SyntaxIssue]:
    """Collect every error and missing node below *root*, in source order."""
    issues: list[SyntaxIssue] = []
    _walk_errors(root, issues)
    return issues


def _walk_errors(node: tree_sitter.Node, issues: list[SyntaxIssue]) -> None:
    if node.is_missing:
        issues.append(
            SyntaxIssue(
                line=node.start_point.row + 1,
                column=node.start_point.column + 1,
                text="",
                missing=node.type,
            )
        )
        return
    if node.is_error:
        issues.append(
            SyntaxIssue(
                line=node.start_point.row + 1,
                column=node.start_point.column + 1,
                text=node_text(node),
            )
        )
    for child in node.children:
        _walk_errors(child, issues)


def node_text(node: tree_sitter.Node | None) -> str:
    """Decode node text from bytes."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace") if node.text else ""
