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

"""Semantic pattern detection for DeFi/AMM contract code.

Patterns are loaded from a YAML registry (bundled by default) into an
immutable ``PatternRegistry``. Detection is purely lexical: keyword
substrings and function-name globs. No semantic analysis is attempted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from bulwark.errors import ConfigurationFailure
from bulwark.models.metrics import PatternRisk, RiskLevel
from bulwark.models.patterns import PatternDefinition, PatternRegistryFile

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent / "rules" / "semantic_patterns.yaml"

# Contribution of one detected pattern to the pattern-risk score
PATTERN_WEIGHTS = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 3,
    RiskLevel.HIGH: 5,
    RiskLevel.CRITICAL: 10,
}


def glob_matches(text: str, pattern: str) -> bool:
    """Match a function name against a ``*`` glob.

    Each ``*`` matches any sequence of characters; every other character,
    including ``?`` and ``[``, matches itself. Without a ``*`` the match
    is exact.
    """
    if "*" not in pattern:
        return text == pattern
    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, text, flags=re.DOTALL) is not None


class PatternRegistry:
    """Read-only table of pattern definitions, keyed by id."""

    def __init__(self, definitions: Iterable[PatternDefinition]) -> None:
        self._definitions = tuple(definitions)
        self._by_id: dict[str, PatternDefinition] = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"duplicate pattern id: {definition.id}")
            self._by_id[definition.id] = definition

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[PatternDefinition]:
        return iter(self._definitions)

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._by_id

    def get(self, pattern_id: str) -> Optional[PatternDefinition]:
        return self._by_id.get(pattern_id)

    def detect_in_function_name(self, function_name: str) -> list[str]:
        """Pattern ids whose name globs or keywords match the function name."""
        name = function_name.lower()
        detected = []
        for definition in self._definitions:
            if any(glob_matches(name, p.lower()) for p in definition.function_patterns) or _has_keyword(
                name, definition
            ):
                detected.append(definition.id)
        return sorted(detected)

    def detect_in_content(self, content: str) -> list[str]:
        """Pattern ids with at least one keyword present in the text."""
        text = content.lower()
        return sorted(d.id for d in self._definitions if _has_keyword(text, d))


def _has_keyword(lowered_text: str, definition: PatternDefinition) -> bool:
    return any(keyword.lower() in lowered_text for keyword in definition.keywords)


def load_registry(path: Optional[str | Path] = None) -> PatternRegistry:
    """Load a pattern registry YAML file (the bundled one by default).

    Raises:
        ConfigurationFailure: if the file is unreadable or invalid.
    """
    registry_path = Path(path) if path is not None else DEFAULT_REGISTRY_PATH
    try:
        with open(registry_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationFailure(f"cannot read pattern registry: {e}", source=str(registry_path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationFailure(f"malformed pattern registry: {e}", source=str(registry_path)) from e

    if not isinstance(data, dict):
        raise ConfigurationFailure("pattern registry must be a mapping", source=str(registry_path))

    try:
        registry = PatternRegistry(PatternRegistryFile.model_validate(data).patterns)
    except (ValidationError, ValueError) as e:
        raise ConfigurationFailure(f"invalid pattern registry: {e}", source=str(registry_path)) from e

    logger.debug("Loaded %d semantic patterns from %s", len(registry), registry_path)
    return registry


def assess_patterns(pattern_ids: Iterable[str], registry: PatternRegistry) -> PatternRisk:
    """Weigh detected patterns into a qualitative pattern-risk level.

    Unknown ids are ignored. Factors follow the order of ``pattern_ids``.
    """
    score = 0
    factors: list[str] = []
    for pattern_id in pattern_ids:
        definition = registry.get(pattern_id)
        if definition is None:
            continue
        score += PATTERN_WEIGHTS[definition.risk_level]
        factors.append(f"{definition.name}: {definition.description}")

    if score <= 2:
        level = RiskLevel.LOW
    elif score <= 8:
        level = RiskLevel.MEDIUM
    elif score <= 15:
        level = RiskLevel.HIGH
    else:
        level = RiskLevel.CRITICAL

    return PatternRisk(risk_level=level, risk_factors=factors, pattern_score=score)
