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

"""Cross-program invocation (CPI) call classification.

Counts calls that hand control to another on-chain program: SPL token,
system and associated-token program helpers (``token::transfer(...)``,
``ctx.accounts.mint_to(...)``) and the low-level ``invoke`` family.
A classified call is not descended into, so a CPI nested in the
arguments of another CPI is counted once.
"""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Node, Tree

from bulwark.models.factors import CallClassificationProfile
from bulwark.scanner.syntax import RustTreeVisitor, call_arguments, callee_path, method_call_name

logger = logging.getLogger(__name__)

TOKEN_PROGRAM = "token_program"
SYSTEM_PROGRAM = "system_program"
ASSOCIATED_TOKEN_PROGRAM = "associated_token_program"
OTHER_PROGRAM = "other_program"
NATIVE_INVOKE = "native_invoke"

_TOKEN_METHODS = (
    "transfer",
    "transfer_checked",
    "mint_to",
    "mint_to_checked",
    "burn",
    "burn_checked",
    "close_account",
    "initialize_account",
    "initialize_account2",
    "initialize_account3",
    "initialize_mint",
    "initialize_mint2",
    "approve",
    "approve_checked",
    "revoke",
    "freeze_account",
    "thaw_account",
    "sync_native",
    "set_authority",
)
_SYSTEM_METHODS = ("create_account", "assign", "allocate", "transfer_lamports")
_ASSOCIATED_TOKEN_METHODS = ("create_associated_token_account", "create_idempotent", "get_account_data_size")

# Method / function name -> program bucket
PROGRAM_BUCKETS: dict[str, str] = {
    **{name: TOKEN_PROGRAM for name in _TOKEN_METHODS},
    **{name: SYSTEM_PROGRAM for name in _SYSTEM_METHODS},
    **{name: ASSOCIATED_TOKEN_PROGRAM for name in _ASSOCIATED_TOKEN_METHODS},
}

# Low-level invocation functions from solana_program::program
INVOKE_NAMES = frozenset({"invoke", "invoke_signed", "invoke_unchecked", "invoke_signed_unchecked"})

# Path qualifiers that mark `module::fn(...)` as a program helper
PROGRAM_MODULES = frozenset({"token", "token_interface", "token_2022", "system_program", "associated_token"})

_BUCKET_COUNTERS = {
    TOKEN_PROGRAM: "token_program_calls",
    SYSTEM_PROGRAM: "system_program_calls",
    ASSOCIATED_TOKEN_PROGRAM: "associated_token_program_calls",
    OTHER_PROGRAM: "other_program_calls",
}


def classify_call(node: Node) -> Optional[tuple[str, str]]:
    """Return ``(bucket, target)`` for a CPI call expression, else None."""
    method = method_call_name(node)
    if method is not None:
        bucket = PROGRAM_BUCKETS.get(method)
        return (bucket, bucket) if bucket else None

    path = callee_path(node)
    if not path:
        return None
    name = path[-1]
    if name in INVOKE_NAMES:
        return OTHER_PROGRAM, NATIVE_INVOKE
    if len(path) > 1 and name in PROGRAM_BUCKETS and PROGRAM_MODULES.intersection(path[:-1]):
        bucket = PROGRAM_BUCKETS[name]
        return bucket, bucket
    return None


class CallClassifier(RustTreeVisitor):
    def __init__(self) -> None:
        self.total = 0
        self.signed = 0
        self.counts = dict.fromkeys(_BUCKET_COUNTERS.values(), 0)
        self.targets: set[str] = set()

    def visit_call_expression(self, node: Node) -> None:
        classified = classify_call(node)
        if classified is None:
            self.generic_visit(node)
            return
        bucket, target = classified
        self.total += 1
        # At least one argument is taken as carrying authority or seeds
        if call_arguments(node):
            self.signed += 1
        self.counts[_BUCKET_COUNTERS[bucket]] += 1
        self.targets.add(target)

    def profile(self) -> CallClassificationProfile:
        return CallClassificationProfile(
            total_calls=self.total,
            signed_calls=self.signed,
            unsigned_calls=self.total - self.signed,
            program_targets=list(self.targets),
            **self.counts,
        ).scored()


def analyze_call_classification(tree: Tree, content: str = "") -> CallClassificationProfile:
    """Classify every CPI call in a parsed file."""
    classifier = CallClassifier()
    classifier.visit(tree.root_node)
    return classifier.profile()
