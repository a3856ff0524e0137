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

"""YAML output for analysis reports."""

from __future__ import annotations

from typing import Any

import yaml


def to_yaml(data: dict[str, Any] | Any) -> str:
    """Convert data to YAML with sorted keys and block style."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    return yaml.safe_dump(data, sort_keys=True, default_flow_style=False, allow_unicode=True)
