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

"""Pydantic models for the semantic pattern registry."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from bulwark.models.metrics import RiskLevel


class PatternDefinition(BaseModel):
    """A named domain idiom detected by keywords or function-name globs."""

    id: str
    name: str
    description: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM
    keywords: list[str] = Field(default_factory=list)
    function_patterns: list[str] = Field(default_factory=list)  # e.g. "swap_*", "*_invariant"

    @field_validator("keywords", "function_patterns")
    @classmethod
    def _no_empty_entries(cls, values: list[str]) -> list[str]:
        if any(not v for v in values):
            raise ValueError("entries must be non-empty strings")
        return values


class PatternRegistryFile(BaseModel):
    """On-disk layout of a pattern registry YAML document."""

    patterns: list[PatternDefinition] = Field(default_factory=list)
