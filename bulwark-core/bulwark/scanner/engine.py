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

"""Analysis engine: maps files to records and folds them into a verdict.

Each file is analyzed independently (``analyze_source`` is a pure
function of path and content), optionally in a process pool. A file that
cannot be read or parsed becomes a ``FileFailure`` and contributes
nothing to the totals; the run always continues.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import ProcessPoolExecutor
from functools import reduce
from pathlib import Path
from typing import Optional, Union

from bulwark.errors import IOFailure, ParseFailure, SingleFileModeFailure
from bulwark.models.config import AnalysisConfig, AnalyzerConfig
from bulwark.models.factors import FactorReport
from bulwark.models.metrics import (
    FailureKind,
    FileFailure,
    FileRecord,
    PatternRisk,
    RepositoryMetrics,
    RiskVerdict,
)
from bulwark.scanner.aggregation import aggregate_profiles, assess_risk
from bulwark.scanner.coordinator import discover_rust_files, display_path, read_source
from bulwark.scanner.file_analyzer import analyze_source
from bulwark.scanner.pattern_detector import PatternRegistry, assess_patterns, load_registry

logger = logging.getLogger(__name__)

FileOutcome = Union[FileRecord, FileFailure]


def _analyze_pair(
    path: str,
    content: str,
    registry: Optional[PatternRegistry],
    analysis: AnalysisConfig,
) -> FileOutcome:
    """Worker entry point; returns failures instead of raising them."""
    try:
        return analyze_source(path, content, registry, analysis)
    except ParseFailure as e:
        return FileFailure(path=path, kind=FailureKind.PARSE, message=e.reason)


class AnalyzerEngine:
    """Runs repository, source-list and single-file analyses for one config."""

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        registry: Optional[PatternRegistry] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        # Raises ConfigurationFailure for a bad custom registry
        self.registry = registry if registry is not None else load_registry(self.config.analysis.pattern_registry)

    @property
    def analysis(self) -> AnalysisConfig:
        return self.config.analysis

    def _map(self, sources: list[tuple[str, str]]) -> list[FileOutcome]:
        workers = min(self.config.workers, len(sources))
        if workers <= 1:
            return [_analyze_pair(path, content, self.registry, self.analysis) for path, content in sources]

        logger.debug("Analyzing %d files with %d worker processes", len(sources), workers)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            return list(
                executor.map(
                    _analyze_pair,
                    [path for path, _ in sources],
                    [content for _, content in sources],
                    [self.registry] * len(sources),
                    [self.analysis] * len(sources),
                )
            )

    def analyze_sources(
        self,
        sources: Iterable[tuple[str, str]],
        failures: Optional[list[FileFailure]] = None,
        root_path: Optional[str] = None,
    ) -> RepositoryMetrics:
        """Analyze ``(path, content)`` pairs and build the repository result.

        Args:
            sources: Files to analyze. Order is kept in the output.
            failures: Failures already recorded upstream (e.g. unreadable files).
            root_path: Root identifier for the result (config root by default).
        """
        outcomes = self._map(list(sources))

        files: list[FileRecord] = []
        all_failures = list(failures or [])
        for outcome in outcomes:
            if isinstance(outcome, FileFailure):
                logger.warning("Skipping %s: %s", outcome.path, outcome.message)
                all_failures.append(outcome)
            else:
                files.append(outcome)

        return self._build_repository(files, all_failures, root_path or self.config.root_path)

    def _build_repository(
        self,
        files: list[FileRecord],
        failures: list[FileFailure],
        root_path: str,
    ) -> RepositoryMetrics:
        aggregated = aggregate_profiles(f.aggregated for f in files)

        tag_counts: Counter[str] = Counter()
        file_tags: set[str] = set()
        for file_record in files:
            file_tags.update(file_record.semantic_tags)
            for function in file_record.functions:
                tag_counts.update(function.semantic_tags)
        semantic_patterns = dict(sorted(tag_counts.items()))

        if self.analysis.semantic_patterns:
            detected = sorted(set(semantic_patterns) | file_tags)
            pattern_risk = assess_patterns(detected, self.registry)
        else:
            pattern_risk = PatternRisk()

        risk = assess_risk(aggregated) if self.analysis.risk_assessment else RiskVerdict()
        factors = reduce(lambda a, b: a.merge(b), (f.factors for f in files), FactorReport())

        logger.info(
            "Analyzed %d files (%d skipped): risk %s (%.1f)",
            len(files),
            len(failures),
            risk.risk_level.value,
            risk.risk_score,
        )
        return RepositoryMetrics(
            root_path=root_path,
            file_count=len(files),
            total_lines_of_code=sum(f.lines_of_code for f in files),
            total_function_count=sum(f.function_count for f in files),
            files=files,
            aggregated=aggregated,
            semantic_patterns=semantic_patterns,
            pattern_risk=pattern_risk,
            factors=factors,
            risk_summary=risk,
            failures=failures,
        )

    def analyze_repository(self) -> RepositoryMetrics:
        """Discover, read and analyze every Rust file under the configured root."""
        root = Path(self.config.root_path).resolve()
        paths = discover_rust_files(self.config)

        sources: list[tuple[str, str]] = []
        failures: list[FileFailure] = []
        for path in paths:
            rel = display_path(path, root)
            try:
                sources.append((rel, read_source(path)))
            except IOFailure as e:
                logger.warning("Skipping %s: %s", rel, e.reason)
                failures.append(FileFailure(path=rel, kind=FailureKind.IO, message=e.reason))

        return self.analyze_sources(sources, failures=failures, root_path=root.as_posix())

    def analyze_single_file(self, path: str | Path) -> FileRecord:
        """Analyze exactly one file. Failures are raised, not recorded.

        Raises:
            SingleFileModeFailure: if ``path`` is not a regular file.
            IOFailure: if it cannot be read.
            ParseFailure: if it does not parse.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise SingleFileModeFailure(file_path)
        content = read_source(file_path)
        return analyze_source(file_path.as_posix(), content, self.registry, self.analysis)
