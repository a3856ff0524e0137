# Bulwark — Smart-Contract Risk Analyzer
# Copyright (C) 2026 Bulwark Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Rust syntax layer built on tree-sitter.

Parses Rust source into a concrete syntax tree and provides a small
visitor base class modelled on ``ast.NodeVisitor``: subclasses define
``visit_<node_type>`` methods and call ``generic_visit`` to descend.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import tree_sitter_rust
from tree_sitter import Language, Node, Parser, Tree

from bulwark.errors import ParseFailure

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tree_sitter_rust.language())

# Comments are "extra" nodes and may appear between any two siblings
COMMENT_NODE_TYPES = frozenset({"line_comment", "block_comment"})


def parse_rust(content: str, path: str = "<memory>") -> Tree:
    """Parse Rust source text.

    Raises:
        ParseFailure: if the source contains syntax errors.
    """
    parser = Parser(RUST_LANGUAGE)
    tree = parser.parse(content.encode("utf-8"))
    if tree.root_node.has_error:
        line = _first_error_line(tree.root_node)
        raise ParseFailure(path, f"syntax error near line {line}")
    return tree


def _first_error_line(root: Node) -> int:
    """1-based line of the first ERROR or MISSING node."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return root.start_point[0] + 1


class RustTreeVisitor:
    """Depth-first walker dispatching on tree-sitter node types."""

    def visit(self, node: Node) -> Any:
        method = getattr(self, f"visit_{node.type}", None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: Node) -> None:
        for child in node.children:
            self.visit(child)


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def line_range(node: Node) -> tuple[int, int]:
    """1-based, inclusive (start, end) lines of a node."""
    return node.start_point[0] + 1, node.end_point[0] + 1


def _callee(call: Node) -> Optional[Node]:
    function = call.child_by_field_name("function")
    # Turbofish: `x.parse::<u64>()` or `invoke::<T>(...)`
    if function is not None and function.type == "generic_function":
        function = function.child_by_field_name("function")
    return function


def method_call_name(call: Node) -> Optional[str]:
    """Method name of ``receiver.method(...)``, or None for other calls."""
    function = _callee(call)
    if function is None or function.type != "field_expression":
        return None
    field = function.child_by_field_name("field")
    if field is None or field.type != "field_identifier":
        return None
    return node_text(field)


def callee_path(call: Node) -> Optional[list[str]]:
    """Path segments of ``name(...)`` or ``a::b::name(...)`` calls."""
    function = _callee(call)
    if function is None:
        return None
    if function.type == "identifier":
        return [node_text(function)]
    if function.type == "scoped_identifier":
        return [segment.strip() for segment in node_text(function).split("::") if segment.strip()]
    return None


def call_arguments(call: Node) -> list[Node]:
    """Argument expressions of a call, comments excluded."""
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return []
    return [child for child in arguments.named_children if child.type not in COMMENT_NODE_TYPES]
