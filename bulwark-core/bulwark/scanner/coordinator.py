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

"""File walker: discovers Rust source files to analyze.

Recursive directory walk of the analysis root, filtered by the
configured exclude globs, the test/bench/example switches and the
maximum file size. Paths are returned sorted so runs are reproducible.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path, PurePosixPath

from bulwark.errors import ConfigurationFailure, IOFailure
from bulwark.models.config import AnalyzerConfig

logger = logging.getLogger(__name__)

RUST_EXTENSIONS = {".rs"}


def _is_excluded(rel_path: PurePosixPath, patterns: list[str]) -> bool:
    """Check a root-relative path against exclude globs.

    A pattern may match the whole path or any trailing part of it that
    starts at a directory boundary, so ``target/**`` also skips nested
    ``programs/foo/target/`` build output.
    """
    parts = rel_path.parts
    for pattern in patterns:
        for i in range(len(parts)):
            if fnmatch.fnmatchcase("/".join(parts[i:]), pattern):
                return True
    return False


def _is_test_file(rel_path: PurePosixPath) -> bool:
    name = rel_path.name
    return "/tests/" in f"/{rel_path}" or name == "test.rs" or name.endswith("_test.rs")


def _is_bench_file(rel_path: PurePosixPath) -> bool:
    name = rel_path.name
    return "/benches/" in f"/{rel_path}" or name == "bench.rs" or name.endswith("_bench.rs")


def _is_example_file(rel_path: PurePosixPath) -> bool:
    return "/examples/" in f"/{rel_path}"


def should_skip(rel_path: PurePosixPath, config: AnalyzerConfig) -> bool:
    """Apply exclude patterns and include switches to a relative path."""
    if _is_excluded(rel_path, config.exclude_patterns):
        return True
    if not config.include_tests and _is_test_file(rel_path):
        return True
    if not config.include_benches and _is_bench_file(rel_path):
        return True
    if not config.include_examples and _is_example_file(rel_path):
        return True
    return False


def display_path(path: Path, root: Path) -> str:
    """Root-relative POSIX path for reports (the file name for a file root)."""
    if root.is_file():
        return path.name
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def discover_rust_files(config: AnalyzerConfig) -> list[Path]:
    """Discover Rust files under ``config.root_path``.

    Returns:
        Sorted absolute paths.

    Raises:
        ConfigurationFailure: if the root does not exist or is neither a
            directory nor a Rust file.
    """
    root = Path(config.root_path).resolve()

    if not root.exists():
        raise ConfigurationFailure(f"root path does not exist: {root}")

    if root.is_file():
        if root.suffix not in RUST_EXTENSIONS:
            raise ConfigurationFailure(f"root path is not a Rust file: {root}")
        return [root]

    if not root.is_dir():
        raise ConfigurationFailure(f"root path is not a directory: {root}")

    files = []
    for item in sorted(root.rglob("*")):
        if item.suffix not in RUST_EXTENSIONS or not item.is_file():
            continue
        rel_path = PurePosixPath(item.relative_to(root).as_posix())
        if should_skip(rel_path, config):
            logger.debug("Skipping file: %s", rel_path)
            continue
        try:
            size = item.stat().st_size
        except OSError as e:
            logger.warning("Could not stat %s: %s", rel_path, e)
            continue
        if size > config.max_file_size:
            logger.warning("Skipping large file: %s (%d bytes)", rel_path, size)
            continue
        files.append(item)

    logger.info("Discovered %d Rust files under %s", len(files), root)
    return files


def read_source(path: Path) -> str:
    """Read a source file as UTF-8.

    Raises:
        IOFailure: if the file cannot be read or decoded.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        raise IOFailure(path, str(e)) from e
