"""Transpile a TypeScript config module down to plain JavaScript.

Type-level syntax is erased and the runtime structure of the module is
left untouched, except for the two TypeScript constructs that carry
runtime meaning: ``enum`` declarations are lowered to plain objects and
``export = value`` becomes ``module.exports = value``.  Rewritten text is
padded with the newlines it replaced so line numbers stay aligned with the
original file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cypress_parallel.parsing.treesitter import (
    collect_syntax_issues,
    has_parse_errors,
    node_text,
    parse_code,
)

if TYPE_CHECKING:
    import tree_sitter

logger = logging.getLogger(__name__)

# Nodes that only exist at the type level and are dropped wholesale
_ERASED_NODES = frozenset(
    {
        "type_annotation",
        "asserts_annotation",
        "type_predicate_annotation",
        "type_arguments",
        "type_parameters",
        "interface_declaration",
        "type_alias_declaration",
        "ambient_declaration",
        "function_signature",
        "method_signature",
        "abstract_method_signature",
        "index_signature",
        "implements_clause",
        "accessibility_modifier",
        "override_modifier",
    }
)

# Type-level keywords and punctuation, by the node they appear in
_ERASED_TOKENS: dict[str, frozenset[str]] = {
    "abstract_class_declaration": frozenset({"abstract"}),
    "public_field_definition": frozenset({"readonly", "?", "!"}),
    "method_definition": frozenset({"?"}),
    "required_parameter": frozenset({"readonly"}),
    "optional_parameter": frozenset({"readonly", "?"}),
}

_TYPE_SUFFIX_NODES = frozenset({"as_expression", "satisfies_expression"})

_MAX_TOKEN_PREVIEW = 40

Edit = tuple[int, int, bytes]


@dataclass
class Diagnostic:
    """A problem reported while transpiling."""

    file_name: str
    line: int
    column: int
    message: str

    def format(self) -> str:
        """Render as ``Error <file> (<line>,<col>): <message>``."""
        return f"Error {self.file_name} ({self.line},{self.column}): {self.message}"


@dataclass
class TranspileOutput:
    """Result of :func:`transpile_module`."""

    output_text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


def transpile_module(source: str, *, file_name: str = "module.ts") -> TranspileOutput:
    """Transpile TypeScript *source* into JavaScript module text.

    Syntax errors are reported as diagnostics; in that case ``output_text``
    is empty and must not be used.
    """
    source_bytes = source.encode("utf-8")
    tree = parse_code(source_bytes, "typescript")

    if has_parse_errors(tree.root_node):
        diagnostics = [
            Diagnostic(
                file_name=file_name,
                line=issue.line,
                column=issue.column,
                message=_describe_issue(issue.missing, issue.text),
            )
            for issue in collect_syntax_issues(tree.root_node)
        ]
        return TranspileOutput(output_text="", diagnostics=diagnostics)

    edits: list[Edit] = []
    _collect_edits(tree.root_node, edits)
    return TranspileOutput(output_text=_splice(source_bytes, edits).decode("utf-8"))


def _describe_issue(missing: str | None, text: str) -> str:
    if missing is not None:
        return f"'{missing}' expected."
    preview = text.strip().splitlines()[0] if text.strip() else text
    if len(preview) > _MAX_TOKEN_PREVIEW:
        preview = preview[:_MAX_TOKEN_PREVIEW] + "..."
    return f"Unexpected token '{preview}'."


def _keyword(node: tree_sitter.Node, keyword: str) -> tree_sitter.Node | None:
    for child in node.children:
        if not child.is_named and child.type == keyword:
            return child
    return None


def _has_keyword(node: tree_sitter.Node, keyword: str) -> bool:
    return _keyword(node, keyword) is not None


def _is_type_only_export(node: tree_sitter.Node) -> bool:
    if _has_keyword(node, "type"):
        return True  # export type { Foo }
    if _has_keyword(node, "namespace"):
        return True  # export as namespace Foo
    declaration = node.child_by_field_name("declaration")
    return declaration is not None and declaration.type in _ERASED_NODES


def _erase(node: tree_sitter.Node, edits: list[Edit]) -> None:
    edits.append((node.start_byte, node.end_byte, b""))


def _erase_specifier(node: tree_sitter.Node, edits: list[Edit]) -> None:
    # ``{ a, type B, c }`` -> ``{ a, c }``
    end = node.end_byte
    following = node.next_sibling
    if following is not None and following.type == ",":
        end = following.end_byte
    edits.append((node.start_byte, end, b""))


def _lower_enum(node: tree_sitter.Node) -> bytes:
    """Render an ``enum`` as a ``const`` object with the same member values."""
    name = node_text(node.child_by_field_name("name"))
    body = node.child_by_field_name("body")
    members: list[str] = []
    counter: int | None = 0
    for member in body.named_children if body is not None else []:
        if member.type == "comment":
            continue
        if member.type == "enum_assignment":
            key = node_text(member.child_by_field_name("name"))
            value = node_text(member.child_by_field_name("value"))
            try:
                counter = int(value.replace(" ", ""), 0) + 1
            except ValueError:
                counter = None
        else:
            key = node_text(member)
            value = "undefined" if counter is None else str(counter)
            counter = None if counter is None else counter + 1
        members.append(f"{key}: {value}")
    return f"const {name} = {{ {', '.join(members)} }};".encode()


def _collect_edits(node: tree_sitter.Node, edits: list[Edit]) -> None:
    node_type = node.type

    if node_type in _ERASED_NODES:
        _erase(node, edits)
        return
    if node_type == "export_statement":
        assign = _keyword(node, "=")
        if assign is not None:
            # ``export = value`` -> ``module.exports = value``
            edits.append((node.start_byte, assign.end_byte, b"module.exports ="))
            for child in node.named_children:
                _collect_edits(child, edits)
            return
        if _is_type_only_export(node):
            _erase(node, edits)
            return
    if node_type == "import_statement" and _has_keyword(node, "type"):
        _erase(node, edits)
        return
    if node_type in ("import_specifier", "export_specifier") and _has_keyword(node, "type"):
        _erase_specifier(node, edits)
        return
    if node_type == "enum_declaration":
        edits.append((node.start_byte, node.end_byte, _lower_enum(node)))
        return
    if node_type == "public_field_definition" and (
        _has_keyword(node, "declare") or _has_keyword(node, "abstract")
    ):
        _erase(node, edits)
        return

    if node_type in _TYPE_SUFFIX_NODES and node.named_child_count:
        # ``expr as T`` / ``expr satisfies T`` -> ``expr``
        expression = node.named_children[0]
        edits.append((expression.end_byte, node.end_byte, b""))
        _collect_edits(expression, edits)
        return
    if node_type == "non_null_expression" and node.named_child_count:
        edits.append((node.end_byte - 1, node.end_byte, b""))
        _collect_edits(node.named_children[0], edits)
        return

    tokens = _ERASED_TOKENS.get(node_type)
    for child in node.children:
        if tokens is not None and not child.is_named and child.type in tokens:
            _erase(child, edits)
        else:
            _collect_edits(child, edits)


def _splice(source: bytes, edits: list[Edit]) -> bytes:
    out: list[bytes] = []
    cursor = 0
    for start, end, replacement in sorted(edits):
        if start < cursor:
            continue
        out.append(source[cursor:start])
        out.append(replacement + b"\n" * source.count(b"\n", start, end))
        cursor = end
    out.append(source[cursor:])
    return b"".join(out)
