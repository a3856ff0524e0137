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

"""Source lines of code (SLOC) counter.

A line counts when it holds code outside ``//`` and ``/* ... */``
comments. Blank lines, comment-only lines and lines inside a block
comment are skipped; a line with code before or after a comment counts
once. The scan is textual, so comment markers inside string literals
are treated as comments.
"""

from __future__ import annotations

from typing import Optional

from tree_sitter import Tree

from bulwark.models.factors import LinesOfCodeProfile


def _scan_line(line: str, in_block_comment: bool) -> tuple[bool, bool]:
    """Return ``(has_code, in_block_comment)`` after consuming ``line``."""
    has_code = False
    rest = line
    while rest:
        if in_block_comment:
            end = rest.find("*/")
            if end == -1:
                break
            rest = rest[end + 2:]
            in_block_comment = False
            continue

        block = rest.find("/*")
        single = rest.find("//")
        if single != -1 and (block == -1 or single < block):
            has_code = has_code or bool(rest[:single].strip())
            break
        if block == -1:
            has_code = has_code or bool(rest.strip())
            break

        has_code = has_code or bool(rest[:block].strip())
        rest = rest[block + 2:]
        in_block_comment = True
    return has_code, in_block_comment


def count_lines_of_code(content: str) -> int:
    """Count source lines of code in Rust text."""
    code_lines = 0
    in_block_comment = False

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        has_code, in_block_comment = _scan_line(line, in_block_comment)
        if has_code:
            code_lines += 1

    return code_lines


def analyze_lines_of_code(tree: Optional[Tree], content: str) -> LinesOfCodeProfile:
    return LinesOfCodeProfile(lines_of_code=count_lines_of_code(content), files_counted=1)
