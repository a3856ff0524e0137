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

"""Function count and visibility factor.

Counts item-level functions: free functions (top level and inside
``mod`` blocks), ``impl`` methods and trait default methods. Functions
declared inside function bodies are not items of the module API and are
not counted here.
"""

from __future__ import annotations

from tree_sitter import Node, Tree

from bulwark.models.factors import FunctionVisibilityProfile
from bulwark.scanner.syntax import RustTreeVisitor, node_text

# Restricted visibilities that still export the function
PUBLIC_VISIBILITIES = frozenset({"pub", "pub(crate)"})


def _is_public(function: Node) -> bool:
    for child in function.children:
        if child.type == "visibility_modifier":
            return "".join(node_text(child).split()) in PUBLIC_VISIBILITIES
    return False


class FunctionVisibilityCounter(RustTreeVisitor):
    def __init__(self) -> None:
        self.total = 0
        self.public = 0
        self.free = 0
        self.associated = 0

    def _count(self, associated: bool, public: bool) -> None:
        self.total += 1
        if associated:
            self.associated += 1
        else:
            self.free += 1
        if public:
            self.public += 1

    def visit_function_item(self, node: Node) -> None:
        self._count(associated=False, public=_is_public(node))

    def visit_impl_item(self, node: Node) -> None:
        for item in _body_items(node):
            if item.type == "function_item":
                self._count(associated=True, public=_is_public(item))

    def visit_trait_item(self, node: Node) -> None:
        # Only default methods have bodies; they inherit the trait's visibility
        for item in _body_items(node):
            if item.type == "function_item":
                self._count(associated=True, public=False)

    def profile(self) -> FunctionVisibilityProfile:
        return FunctionVisibilityProfile(
            total_functions=self.total,
            public_functions=self.public,
            private_functions=self.total - self.public,
            free_functions=self.free,
            associated_functions=self.associated,
        ).scored()


def _body_items(node: Node) -> list[Node]:
    body = node.child_by_field_name("body")
    return body.named_children if body is not None else []


def analyze_function_visibility(tree: Tree, content: str = "") -> FunctionVisibilityProfile:
    counter = FunctionVisibilityCounter()
    counter.visit(tree.root_node)
    return counter.profile()
