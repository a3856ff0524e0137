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

"""Exception hierarchy for the analyzer.

Per-file failures (parse, IO) are recovered by the engine and recorded as
``FileFailure`` entries; configuration and single-file-mode failures are
fatal and surface to the caller before any partial result exists.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class BulwarkError(Exception):
    """Base exception for all analyzer errors."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ParseFailure(BulwarkError):
    """Source content could not be turned into a syntax tree."""

    def __init__(self, path: str | Path, message: str, details: Any = None) -> None:
        super().__init__(f"Failed to parse Rust file {path}: {message}", details)
        self.path = str(path)
        self.reason = message


class IOFailure(BulwarkError):
    """Source content could not be read."""

    def __init__(self, path: str | Path, message: str, details: Any = None) -> None:
        super().__init__(f"Could not read {path}: {message}", details)
        self.path = str(path)
        self.reason = message


class ConfigurationFailure(BulwarkError):
    """Invalid analysis configuration. Raised before any file is processed."""

    def __init__(self, message: str, source: Optional[str | Path] = None, details: Any = None) -> None:
        prefix = f"Invalid configuration ({source})" if source else "Invalid configuration"
        super().__init__(f"{prefix}: {message}", details)
        self.source = str(source) if source else None


class SingleFileModeFailure(BulwarkError):
    """Single-file mode was pointed at something that is not a regular file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f"Path is not a file: {path}")
        self.path = str(path)
