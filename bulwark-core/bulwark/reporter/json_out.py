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

"""Canonical JSON output for analysis reports.

Produces deterministic JSON output:
- Sorted keys
- 2-space indentation (or compact separators when not pretty)
- LF line endings
- Trailing newline
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bulwark.models.config import OutputFormat
from bulwark.reporter.yaml_out import to_yaml

logger = logging.getLogger(__name__)


def to_canonical_json(data: dict[str, Any] | Any, pretty: bool = True) -> str:
    """Convert data to canonical JSON string.

    Canonical JSON: sorted keys, 2-space indent, ensure LF, trailing newline.
    """
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    if pretty:
        result = json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False)
    else:
        result = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    # Ensure LF line endings
    result = result.replace("\r\n", "\n").replace("\r", "\n")
    # Ensure trailing newline
    if not result.endswith("\n"):
        result += "\n"
    return result


def render(data: Any, output_format: OutputFormat = OutputFormat.JSON, pretty: bool = True) -> str:
    """Serialize a model or mapping in the requested format."""
    if output_format == OutputFormat.YAML:
        return to_yaml(data)
    return to_canonical_json(data, pretty=pretty)


def write_report(
    report: Any,
    output_path: Path,
    output_format: OutputFormat = OutputFormat.JSON,
    pretty: bool = True,
) -> None:
    """Write a report to file in the requested format."""
    content = render(report, output_format, pretty)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8", newline="\n")
    logger.info("Wrote report to %s", output_path)
