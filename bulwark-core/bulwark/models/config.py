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

"""Pydantic models for analyzer configuration.

Unknown keys are rejected so that a typo in a config file fails loudly
instead of silently falling back to a default.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXCLUDE_PATTERNS = ["target/**", "node_modules/**", ".git/**"]
DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1 MiB


class OutputFormat(str, Enum):
    """Serialization format for written reports."""

    JSON = "json"
    YAML = "yaml"


class OutputConfig(BaseModel):
    """How the report is serialized."""

    model_config = ConfigDict(extra="forbid")

    format: OutputFormat = OutputFormat.JSON
    pretty: bool = True
    include_function_details: bool = True


class AnalysisConfig(BaseModel):
    """Switches for the individual analysis stages."""

    model_config = ConfigDict(extra="forbid")

    semantic_patterns: bool = True
    complexity_scoring: bool = True
    risk_assessment: bool = True
    factor_analysis: bool = True
    pattern_registry: Optional[str] = None  # path to a custom registry YAML


class AnalyzerConfig(BaseModel):
    """Top-level analyzer configuration."""

    model_config = ConfigDict(extra="forbid")

    root_path: str = "."
    include_tests: bool = False
    include_benches: bool = False
    include_examples: bool = False
    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, gt=0)
    workers: int = Field(default=1, ge=1)
    output: OutputConfig = Field(default_factory=OutputConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    @field_validator("exclude_patterns")
    @classmethod
    def _patterns_not_blank(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            if not pattern.strip():
                raise ValueError("exclude patterns must not be empty")
        return patterns
