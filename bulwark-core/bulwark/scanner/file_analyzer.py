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

"""Single-file analysis: parse, traverse, count and aggregate."""

from __future__ import annotations

import logging
from typing import Optional

from tree_sitter import Tree

from bulwark.errors import ParseFailure
from bulwark.models.config import AnalysisConfig
from bulwark.models.factors import FactorReport
from bulwark.models.metrics import FileRecord
from bulwark.scanner.aggregation import aggregate_functions
from bulwark.scanner.factors.call_classifier import analyze_call_classification
from bulwark.scanner.factors.function_visibility import analyze_function_visibility
from bulwark.scanner.factors.lines_of_code import analyze_lines_of_code, count_lines_of_code
from bulwark.scanner.function_visitor import collect_functions
from bulwark.scanner.pattern_detector import PatternRegistry
from bulwark.scanner.syntax import parse_rust

logger = logging.getLogger(__name__)


def analyze_factors(tree: Tree, content: str) -> FactorReport:
    """Run every factor analyzer over one parsed file."""
    return FactorReport(
        call_classification=analyze_call_classification(tree, content),
        function_visibility=analyze_function_visibility(tree, content),
        lines_of_code=analyze_lines_of_code(tree, content),
    )


def analyze_source(
    path: str,
    content: str,
    registry: Optional[PatternRegistry] = None,
    analysis: Optional[AnalysisConfig] = None,
) -> FileRecord:
    """Analyze one Rust source file held in memory.

    Args:
        path: Display path recorded in the result.
        content: Full source text.
        registry: Semantic patterns; None disables tagging.
        analysis: Stage switches (all enabled by default).

    Raises:
        ParseFailure: if the content does not parse, or is nested too
            deeply to walk.
    """
    analysis = analysis or AnalysisConfig()
    if not analysis.semantic_patterns:
        registry = None

    tree = parse_rust(content, path)
    try:
        functions = collect_functions(tree, registry, score_complexity=analysis.complexity_scoring)
        factors = analyze_factors(tree, content) if analysis.factor_analysis else FactorReport()
    except RecursionError as e:
        raise ParseFailure(path, "syntax tree nested too deeply to analyze") from e

    record = FileRecord(
        path=path,
        lines_of_code=count_lines_of_code(content),
        function_count=len(functions),
        functions=functions,
        aggregated=aggregate_functions(functions),
        semantic_tags=registry.detect_in_content(content) if registry else [],
        factors=factors,
    )
    logger.debug("Analyzed %s: %d functions, %d LOC", path, record.function_count, record.lines_of_code)
    return record
