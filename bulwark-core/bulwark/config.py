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

"""Configuration loading.

Configuration files are YAML documents validated into ``AnalyzerConfig``.
Every problem (unreadable file, malformed YAML, unknown key, bad value)
is reported as ``ConfigurationFailure`` before any analysis starts.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from bulwark.errors import ConfigurationFailure
from bulwark.models.config import AnalyzerConfig

logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def parse_config(data: Any, source: Optional[str] = None) -> AnalyzerConfig:
    """Validate an already-loaded configuration mapping."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationFailure("configuration must be a mapping", source=source)
    try:
        return AnalyzerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationFailure(_format_validation_error(e), source=source, details=e.errors()) from e


def load_config(config_path: str | Path) -> AnalyzerConfig:
    """Load and validate a YAML configuration file."""
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationFailure(f"cannot read file: {e}", source=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationFailure(f"malformed YAML: {e}", source=str(path)) from e

    config = parse_config(data, source=str(path))
    logger.debug("Loaded configuration from %s", path)
    return config


def apply_overrides(config: AnalyzerConfig, **overrides: Any) -> AnalyzerConfig:
    """Return a copy of ``config`` with non-None overrides applied and revalidated."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    data = config.model_dump(mode="json")
    data.update(updates)
    return parse_config(data, source="command line")


def dump_config(config: AnalyzerConfig) -> str:
    """Serialize a configuration as YAML (used to print the defaults)."""
    return yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False)
