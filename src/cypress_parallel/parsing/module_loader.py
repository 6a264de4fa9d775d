"""Load the exported value of a JavaScript config module without running it.

The module is parsed with tree-sitter and its exports are evaluated
statically.  Only literal data is understood: strings, numbers, booleans,
``null``/``undefined``, arrays, objects, top-level ``const``/``let``/``var``
bindings, string concatenation and member access on known objects.  Calls
are limited to ``defineConfig(...)``, which returns its argument unchanged.

Anything else evaluates to an :class:`Unresolved` placeholder so that
unrelated parts of a config (``setupNodeEvents`` hooks, plugin imports)
never stop the patterns from being read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NoReturn

from cypress_parallel.parsing.treesitter import (
    collect_syntax_issues,
    has_parse_errors,
    node_text,
    parse_code,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    import tree_sitter

logger = logging.getLogger(__name__)

ALLOWED_CALLS = frozenset({"defineConfig"})
"""Functions that may appear in a config; each returns its first argument."""

_MODULE_EXPORTS = ["module", "exports"]
_EXPORTS = ["exports"]
_NAMED_DECLARATIONS = ("function_declaration", "generator_function_declaration", "class_declaration")

_LITERALS: dict[str, Any] = {"true": True, "false": False, "null": None, "undefined": None}

_SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_MAX_REPORTED_ERRORS = 5


class ModuleEvaluationError(ValueError):
    """Raised when a module cannot be parsed or its exports cannot be read."""


class Unresolved:
    """Placeholder for an expression that cannot be evaluated statically."""

    __slots__ = ("kind", "line")

    def __init__(self, kind: str, line: int) -> None:
        self.kind = kind
        self.line = line

    def __repr__(self) -> str:
        return f"<unresolved {self.kind} at line {self.line}>"


def load_module_exports(source: str, *, origin: str = "<module>") -> Any:
    """Return the statically evaluated exports of a JavaScript module.

    ``module.exports = value`` replaces the export object; ``exports.name``
    and ``module.exports.name`` assignments add keys to it; ``export
    default value`` is stored under ``"default"``.

    Raises:
        ModuleEvaluationError: If the module has syntax errors or an export
            form that cannot be read statically, such as ``export * from``.
    """
    source_bytes = source.encode("utf-8")
    tree = parse_code(source_bytes, "javascript")
    root = tree.root_node

    if has_parse_errors(root):
        issues = collect_syntax_issues(root)
        lines = ", ".join(str(issue.line) for issue in issues[:_MAX_REPORTED_ERRORS])
        raise ModuleEvaluationError(f"Syntax error in {origin} (line {lines or '?'})")

    return _ModuleEvaluator(source_bytes, origin).run(root)


def _children(node: tree_sitter.Node) -> list[tree_sitter.Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _has_keyword(node: tree_sitter.Node, keyword: str) -> bool:
    return any(not child.is_named and child.type == keyword for child in node.children)


def _to_js_string(value: Any) -> str:
    """Coerce a primitive like JavaScript string conversion does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else _to_js_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if not body or body.startswith(("\n", "\r")):
        return ""  # line continuation
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    try:
        if body.startswith("u{"):
            return chr(int(body[2:-1], 16))
        if body[0] in "ux":
            return chr(int(body[1:], 16))
    except ValueError:
        return body
    return body


def _number_value(text: str) -> int | float:
    cleaned = text.replace("_", "").rstrip("n")
    lowered = cleaned.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(cleaned, 0)
    if "." in lowered or "e" in lowered:
        return float(cleaned)
    return int(cleaned)


class _ModuleEvaluator:
    def __init__(self, source: bytes, origin: str) -> None:
        self._source = source
        self._origin = origin
        self._bindings: dict[str, Any] = {}
        self._exports: Any = {}
        self._handlers: dict[str, Callable[[tree_sitter.Node], Any]] = {
            "string": self._string,
            "template_string": self._template,
            "number": self._number,
            "identifier": self._identifier,
            "parenthesized_expression": self._parenthesized,
            "array": self._array,
            "object": self._object,
            "call_expression": self._call,
            "member_expression": self._member,
            "subscript_expression": self._member,
            "binary_expression": self._binary,
            "unary_expression": self._unary,
        }

    # ── Statements ───────────────────────────────────────────────

    def run(self, root: tree_sitter.Node) -> Any:
        for statement in _children(root):
            kind = statement.type
            if kind in ("lexical_declaration", "variable_declaration"):
                self._declare(statement)
            elif kind in _NAMED_DECLARATIONS:
                name = statement.child_by_field_name("name")
                if name is not None:
                    self._bindings[node_text(name)] = self._unresolved(statement)
            elif kind == "expression_statement":
                expressions = _children(statement)
                if expressions and expressions[0].type == "assignment_expression":
                    self._assign(expressions[0])
            elif kind == "export_statement":
                self._export(statement)
        return self._exports

    def _declare(self, declaration: tree_sitter.Node) -> list[str]:
        declared: list[str] = []
        for declarator in _children(declaration):
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is None or name.type != "identifier":
                # destructuring such as ``const { defineConfig } = require("cypress")``
                continue
            identifier = node_text(name)
            self._bindings[identifier] = None if value is None else self.evaluate(value)
            declared.append(identifier)
        return declared

    def _assign(self, assignment: tree_sitter.Node) -> None:
        left = assignment.child_by_field_name("left")
        right = assignment.child_by_field_name("right")
        if left is None or right is None:
            return
        target = self._member_path(left)

        if target == _MODULE_EXPORTS:
            self._exports = self.evaluate(right)
        elif target[:-1] in (_MODULE_EXPORTS, _EXPORTS):
            self._set_export(target[-1], self.evaluate(right))

    def _export(self, statement: tree_sitter.Node) -> None:
        if _has_keyword(statement, "default"):
            value = statement.child_by_field_name("value")
            if value is not None:
                self._set_export("default", self.evaluate(value))
            else:
                self._set_export("default", self._unresolved(statement))
            return

        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            if declaration.type in ("lexical_declaration", "variable_declaration"):
                for name in self._declare(declaration):
                    self._set_export(name, self._bindings[name])
                return
            if declaration.type in _NAMED_DECLARATIONS:
                name = node_text(declaration.child_by_field_name("name"))
                self._bindings[name] = self._unresolved(declaration)
                self._set_export(name, self._bindings[name])
                return
            self._unsupported_export(statement)

        clauses = [clause for clause in _children(statement) if clause.type == "export_clause"]
        if not clauses:
            self._unsupported_export(statement)

        # ``export { a } from "./other"`` names values this module cannot see
        from_other_module = statement.child_by_field_name("source") is not None
        for specifier in _children(clauses[0]):
            name = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if name is None:
                continue
            local = node_text(name)
            if from_other_module:
                value = self._unresolved(specifier)
            else:
                value = self._bindings.get(local)
            self._set_export(node_text(alias) if alias else local, value)

    def _unsupported_export(self, statement: tree_sitter.Node) -> NoReturn:
        line = statement.start_point.row + 1
        text = node_text(statement).splitlines()[0]
        raise ModuleEvaluationError(f"Unsupported export in {self._origin} (line {line}): {text}")

    def _set_export(self, name: str, value: Any) -> None:
        if isinstance(self._exports, dict):
            self._exports[name] = value
        else:
            logger.debug("Ignoring export %r in %s: module.exports is not an object", name, self._origin)

    def _member_path(self, node: tree_sitter.Node) -> list[str]:
        if node.type == "identifier":
            return [node_text(node)]
        if node.type == "member_expression":
            obj = node.child_by_field_name("object")
            prop = node.child_by_field_name("property")
            if obj is None or prop is None:
                return []
            base = self._member_path(obj)
            return [*base, node_text(prop)] if base else []
        return []

    # ── Expressions ──────────────────────────────────────────────

    def _unresolved(self, node: tree_sitter.Node) -> Unresolved:
        return Unresolved(node.type, node.start_point.row + 1)

    def evaluate(self, node: tree_sitter.Node) -> Any:
        """Evaluate *node*, returning :class:`Unresolved` for anything dynamic."""
        if node.type in _LITERALS:
            return _LITERALS[node.type]
        handler = self._handlers.get(node.type)
        if handler is None:
            return self._unresolved(node)
        return handler(node)

    def _number(self, node: tree_sitter.Node) -> int | float:
        return _number_value(node_text(node))

    def _identifier(self, node: tree_sitter.Node) -> Any:
        name = node_text(node)
        if name == "undefined":
            return None
        if name in self._bindings:
            return self._bindings[name]
        return self._unresolved(node)

    def _parenthesized(self, node: tree_sitter.Node) -> Any:
        inner = _children(node)
        return self.evaluate(inner[0]) if inner else None

    def _string(self, node: tree_sitter.Node) -> str:
        parts = _children(node)
        if not parts:
            return node_text(node)[1:-1]
        return "".join(
            _decode_escape(node_text(part)) if part.type == "escape_sequence" else node_text(part)
            for part in parts
        )

    def _template(self, node: tree_sitter.Node) -> str | Unresolved:
        out: list[str] = []
        cursor = node.start_byte + 1
        for child in _children(node):
            if child.type not in ("template_substitution", "escape_sequence"):
                continue
            out.append(self._source[cursor : child.start_byte].decode("utf-8"))
            if child.type == "escape_sequence":
                out.append(_decode_escape(node_text(child)))
            else:
                inner = _children(child)
                value = self.evaluate(inner[0]) if inner else None
                if isinstance(value, Unresolved):
                    return value
                out.append(_to_js_string(value))
            cursor = child.end_byte
        out.append(self._source[cursor : node.end_byte - 1].decode("utf-8"))
        return "".join(out)

    def _array(self, node: tree_sitter.Node) -> list[Any]:
        items: list[Any] = []
        for element in _children(node):
            if element.type == "spread_element":
                inner = _children(element)
                spread = self.evaluate(inner[0]) if inner else None
                if isinstance(spread, list | str):
                    items.extend(spread)
                else:
                    items.append(self._unresolved(element))
            else:
                items.append(self.evaluate(element))
        return items

    def _object(self, node: tree_sitter.Node) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for member in _children(node):
            kind = member.type
            if kind == "pair":
                key = self._property_key(member.child_by_field_name("key"))
                value = member.child_by_field_name("value")
                if key is not None and value is not None:
                    result[key] = self.evaluate(value)
            elif kind == "shorthand_property_identifier":
                name = node_text(member)
                result[name] = self._bindings.get(name, self._unresolved(member))
            elif kind == "spread_element":
                inner = _children(member)
                spread = self.evaluate(inner[0]) if inner else None
                if isinstance(spread, dict):
                    result.update(spread)
            elif kind == "method_definition":
                key = self._property_key(member.child_by_field_name("name"))
                if key is not None:
                    result[key] = self._unresolved(member)
        return result

    def _property_key(self, node: tree_sitter.Node | None) -> str | None:
        if node is None:
            return None
        if node.type in ("property_identifier", "private_property_identifier"):
            return node_text(node)
        if node.type == "string":
            return self._string(node)
        if node.type == "number":
            return _to_js_string(_number_value(node_text(node)))
        if node.type == "computed_property_name":
            inner = _children(node)
            value = self.evaluate(inner[0]) if inner else None
            if isinstance(value, str | int | float) and not isinstance(value, bool):
                return _to_js_string(value)
        return None

    def _call(self, node: tree_sitter.Node) -> Any:
        callee = node.child_by_field_name("function")
        name = ""
        if callee is not None and callee.type == "identifier":
            name = node_text(callee)
        elif callee is not None and callee.type == "member_expression":
            name = node_text(callee.child_by_field_name("property"))

        if name not in ALLOWED_CALLS:
            return self._unresolved(node)

        arguments = node.child_by_field_name("arguments")
        args = _children(arguments) if arguments is not None else []
        return self.evaluate(args[0]) if args else None

    def _member(self, node: tree_sitter.Node) -> Any:
        obj_node = node.child_by_field_name("object")
        if obj_node is None:
            return self._unresolved(node)
        obj = self.evaluate(obj_node)

        if node.type == "member_expression":
            key: Any = node_text(node.child_by_field_name("property"))
        else:
            index = node.child_by_field_name("index")
            key = self.evaluate(index) if index is not None else None

        if isinstance(obj, dict) and isinstance(key, str):
            return obj.get(key)
        if isinstance(obj, list) and isinstance(key, int) and not isinstance(key, bool):
            return obj[key] if 0 <= key < len(obj) else None
        if isinstance(obj, list | str) and key == "length":
            return len(obj)
        return self._unresolved(node)

    def _binary(self, node: tree_sitter.Node) -> Any:
        operator = node.child_by_field_name("operator")
        left_node = node.child_by_field_name("left")
        right_node = node.child_by_field_name("right")
        if operator is None or left_node is None or right_node is None:
            return self._unresolved(node)
        if node_text(operator) != "+":
            return self._unresolved(node)

        left = self.evaluate(left_node)
        right = self.evaluate(right_node)
        if isinstance(left, str) or isinstance(right, str):
            if isinstance(left, Unresolved) or isinstance(right, Unresolved):
                return self._unresolved(node)
            return _to_js_string(left) + _to_js_string(right)
        numeric = (int, float)
        if (
            isinstance(left, numeric)
            and isinstance(right, numeric)
            and not isinstance(left, bool)
            and not isinstance(right, bool)
        ):
            return left + right
        return self._unresolved(node)

    def _unary(self, node: tree_sitter.Node) -> Any:
        operator = node.child_by_field_name("operator")
        argument = node.child_by_field_name("argument")
        if operator is None or argument is None:
            return self._unresolved(node)
        value = self.evaluate(argument)
        op = node_text(operator)
        if op == "-" and isinstance(value, int | float) and not isinstance(value, bool):
            return -value
        if op == "!" and not isinstance(value, Unresolved):
            return not value
        return self._unresolved(node)
