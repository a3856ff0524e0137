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

"""Per-function metric extraction for Rust syntax trees.

One depth-first pass over a parsed file yields a ``FunctionRecord`` for
every ``fn`` with a body: free functions, functions in ``mod`` blocks,
``impl`` methods, trait default methods and functions declared inside
other function bodies.

Open functions are kept on a stack. A function declared inside another
function's body gets its own record; everything inside it (counters,
nesting depths, decision points) is attributed to the inner function
only. Records are returned in source-declaration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from tree_sitter import Node, Tree

from bulwark.models.metrics import (
    ArithmeticProfile,
    ControlFlowProfile,
    FunctionRecord,
    MathFunctionProfile,
    SafetyProfile,
)
from bulwark.scanner.pattern_detector import PatternRegistry
from bulwark.scanner.syntax import (
    RustTreeVisitor,
    callee_path,
    line_range,
    method_call_name,
    node_text,
)

logger = logging.getLogger(__name__)

# Method name -> (profile, counter)
METHOD_COUNTERS: dict[str, tuple[str, str]] = {
    # Checked arithmetic
    "checked_add": ("arithmetic", "checked_add"),
    "checked_sub": ("arithmetic", "checked_sub"),
    "checked_mul": ("arithmetic", "checked_mul"),
    "checked_div": ("arithmetic", "checked_div"),
    "checked_rem": ("arithmetic", "checked_rem"),
    "checked_pow": ("arithmetic", "checked_pow"),
    # Saturating arithmetic
    "saturating_add": ("arithmetic", "saturating_add"),
    "saturating_sub": ("arithmetic", "saturating_sub"),
    "saturating_mul": ("arithmetic", "saturating_mul"),
    # Wrapping arithmetic
    "wrapping_add": ("arithmetic", "wrapping_add"),
    "wrapping_sub": ("arithmetic", "wrapping_sub"),
    "wrapping_mul": ("arithmetic", "wrapping_mul"),
    "wrapping_div": ("arithmetic", "wrapping_div"),
    # Special operations
    "checked_ceil_div": ("arithmetic", "ceil_div"),
    "integer_sqrt": ("arithmetic", "integer_sqrt"),
    # Math functions
    "sqrt": ("math_functions", "sqrt"),
    "pow": ("math_functions", "pow"),
    "powf": ("math_functions", "pow"),
    "powi": ("math_functions", "pow"),
    "exp": ("math_functions", "exp"),
    "exp2": ("math_functions", "exp"),
    "ln": ("math_functions", "log"),
    "log": ("math_functions", "log"),
    "log2": ("math_functions", "log"),
    "log10": ("math_functions", "log"),
    "sin": ("math_functions", "trig_functions"),
    "cos": ("math_functions", "trig_functions"),
    "tan": ("math_functions", "trig_functions"),
    "asin": ("math_functions", "trig_functions"),
    "acos": ("math_functions", "trig_functions"),
    "atan": ("math_functions", "trig_functions"),
    "atan2": ("math_functions", "trig_functions"),
    "floor": ("math_functions", "floor"),
    "ceil": ("math_functions", "ceil"),
    "round": ("math_functions", "round"),
    "abs": ("math_functions", "abs"),
    "min": ("math_functions", "min_max"),
    "max": ("math_functions", "min_max"),
    # Abort risk
    "unwrap": ("safety", "unwrap_calls"),
    "expect": ("safety", "expect_calls"),
}

# Binary operator token -> arithmetic counter
OPERATOR_COUNTERS = {
    "+": "raw_add",
    "-": "raw_sub",
    "*": "raw_mul",
    "/": "raw_div",
    "%": "raw_rem",
    "<<": "bitwise_ops",
    ">>": "bitwise_ops",
    "&": "bitwise_ops",
    "|": "bitwise_ops",
    "^": "bitwise_ops",
}

# Plain function calls that abort execution
ABORT_CALL_COUNTERS = {
    "panic": "panic_calls",
    "todo": "todo_calls",
    "unimplemented": "todo_calls",
}

ARITHMETIC_WEIGHT = 1.0
MATH_WEIGHT = 1.2
CYCLOMATIC_WEIGHT = 0.8
ABORT_WEIGHT = 2.0


class DecisionPointCounter(RustTreeVisitor):
    """Count decision points in one function body.

    ``if``, ``while`` and ``for`` add one each; a ``match`` adds one per
    arm plus one per guarded arm. Nested ``fn`` items are not entered.
    """

    def __init__(self) -> None:
        self.decision_points = 0

    def visit_if_expression(self, node: Node) -> None:
        self.decision_points += 1
        self.generic_visit(node)

    def visit_while_expression(self, node: Node) -> None:
        self.decision_points += 1
        self.generic_visit(node)

    def visit_for_expression(self, node: Node) -> None:
        self.decision_points += 1
        self.generic_visit(node)

    def visit_match_arm(self, node: Node) -> None:
        self.decision_points += 1
        pattern = node.child_by_field_name("pattern")
        if pattern is not None and pattern.child_by_field_name("condition") is not None:
            self.decision_points += 1  # guard
        self.generic_visit(node)

    def visit_function_item(self, node: Node) -> None:
        return


def count_decision_points(body: Optional[Node]) -> int:
    if body is None:
        return 0
    counter = DecisionPointCounter()
    counter.visit(body)
    return counter.decision_points


def function_complexity_score(record: FunctionRecord) -> float:
    """Weighted complexity of a single function."""
    return (
        record.arithmetic.total_ops() * ARITHMETIC_WEIGHT
        + record.math_functions.total_calls() * MATH_WEIGHT
        + record.control_flow.cyclomatic_complexity * CYCLOMATIC_WEIGHT
        + (record.safety.unwrap_calls + record.safety.panic_calls) * ABORT_WEIGHT
    )


@dataclass
class _OpenFunction:
    """Accumulator for a function whose body is being walked."""

    node: Node
    arithmetic: ArithmeticProfile = field(default_factory=ArithmeticProfile)
    math_functions: MathFunctionProfile = field(default_factory=MathFunctionProfile)
    safety: SafetyProfile = field(default_factory=SafetyProfile)
    loop_depth: int = 0
    max_loop_depth: int = 0
    loop_count: int = 0
    conditional_depth: int = 0
    max_conditional_depth: int = 0
    conditional_count: int = 0

    def bump(self, profile: str, counter: str) -> None:
        target = getattr(self, profile)
        setattr(target, counter, getattr(target, counter) + 1)


class FunctionTraversalVisitor(RustTreeVisitor):
    """Walk a file once and collect a ``FunctionRecord`` per function."""

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        score_complexity: bool = True,
    ) -> None:
        self.registry = registry
        self.score_complexity = score_complexity
        self._open: list[_OpenFunction] = []
        self._closed: list[tuple[int, FunctionRecord]] = []

    @property
    def functions(self) -> list[FunctionRecord]:
        """Closed records in source-declaration order."""
        return [record for _, record in sorted(self._closed, key=lambda item: item[0])]

    @property
    def _current(self) -> Optional[_OpenFunction]:
        return self._open[-1] if self._open else None

    # ── Function boundaries ──

    def visit_function_item(self, node: Node) -> None:
        if node.child_by_field_name("body") is None:
            self.generic_visit(node)
            return
        self._open.append(_OpenFunction(node=node))
        self.generic_visit(node)
        acc = self._open.pop()
        self._closed.append((node.start_byte, self._close(acc)))

    def _close(self, acc: _OpenFunction) -> FunctionRecord:
        node = acc.node
        name = node_text(node.child_by_field_name("name"))
        decision_points = count_decision_points(node.child_by_field_name("body"))

        record = FunctionRecord(
            name=name,
            signature=_signature_text(node),
            line_range=line_range(node),
            arithmetic=acc.arithmetic,
            math_functions=acc.math_functions,
            control_flow=ControlFlowProfile(
                cyclomatic_complexity=1 + decision_points,
                decision_points=decision_points,
                max_loop_depth=acc.max_loop_depth,
                loop_count=acc.loop_count,
                max_conditional_depth=acc.max_conditional_depth,
                conditional_count=acc.conditional_count,
            ),
            safety=acc.safety,
            semantic_tags=self.registry.detect_in_function_name(name) if self.registry else [],
        )
        if self.score_complexity:
            record.complexity_score = function_complexity_score(record)
        logger.debug("Closed function %s at lines %d-%d", name, *record.line_range)
        return record

    # ── Calls and operators ──

    def visit_call_expression(self, node: Node) -> None:
        acc = self._current
        if acc is not None:
            method = method_call_name(node)
            if method is not None:
                if method in METHOD_COUNTERS:
                    acc.bump(*METHOD_COUNTERS[method])
            else:
                path = callee_path(node)
                if path and path[-1] in ABORT_CALL_COUNTERS:
                    acc.bump("safety", ABORT_CALL_COUNTERS[path[-1]])
        self.generic_visit(node)

    def visit_binary_expression(self, node: Node) -> None:
        acc = self._current
        if acc is not None:
            operator = node.child_by_field_name("operator")
            counter = OPERATOR_COUNTERS.get(operator.type) if operator is not None else None
            if counter is not None:
                acc.bump("arithmetic", counter)
        self.generic_visit(node)

    # ── Safety ──

    def visit_unsafe_block(self, node: Node) -> None:
        if self._current is not None:
            self._current.bump("safety", "unsafe_blocks")
        self.generic_visit(node)

    def visit_pointer_type(self, node: Node) -> None:
        if self._current is not None:
            self._current.bump("safety", "raw_pointers")
        self.generic_visit(node)

    # ── Nesting ──

    def visit_loop_expression(self, node: Node) -> None:
        self._visit_loop(node)

    def visit_while_expression(self, node: Node) -> None:
        self._visit_loop(node)

    def visit_for_expression(self, node: Node) -> None:
        self._visit_loop(node)

    def visit_if_expression(self, node: Node) -> None:
        acc = self._current
        if acc is None:
            self.generic_visit(node)
            return
        acc.conditional_count += 1
        acc.conditional_depth += 1
        acc.max_conditional_depth = max(acc.max_conditional_depth, acc.conditional_depth)
        self.generic_visit(node)
        acc.conditional_depth -= 1

    def _visit_loop(self, node: Node) -> None:
        acc = self._current
        if acc is None:
            self.generic_visit(node)
            return
        acc.loop_count += 1
        acc.loop_depth += 1
        acc.max_loop_depth = max(acc.max_loop_depth, acc.loop_depth)
        self.generic_visit(node)
        acc.loop_depth -= 1


def _signature_text(node: Node) -> str:
    """Source of a function item up to its body, whitespace-collapsed."""
    body = node.child_by_field_name("body")
    raw = node.text or b""
    if body is not None:
        raw = raw[: body.start_byte - node.start_byte]
    return " ".join(raw.decode("utf-8", errors="replace").split())


def collect_functions(
    tree: Tree,
    registry: Optional[PatternRegistry] = None,
    score_complexity: bool = True,
) -> list[FunctionRecord]:
    """Extract one ``FunctionRecord`` per function definition in ``tree``."""
    visitor = FunctionTraversalVisitor(registry=registry, score_complexity=score_complexity)
    visitor.visit(tree.root_node)
    return visitor.functions
