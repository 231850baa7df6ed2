"""Recursive discovery of node_modules directories.

The walker lists each directory once, classifies every entry, and only then
recurses into the remaining subdirectories. A node_modules directory is a leaf:
it is measured and reported but never entered, so nested dependency folders
are never counted twice.
"""

import os
from pathlib import Path
from typing import Iterable, Optional, Protocol

from modkill.filesystem import (
    can_write,
    get_directory_size,
    has_package_json,
    should_exclude,
    try_or_default,
)
from modkill.log import get_logger
from modkill.models import ModuleInfo, ScanResult

logger = get_logger(__name__)

TARGET_DIR_NAME = "node_modules"
DEFAULT_MAX_SCAN_DEPTH = 6


class ScanObserver(Protocol):
    """Receives progress notifications from the scanner."""

    def on_directory(self, path: str, found_count: int) -> None:
        """Called before each directory is listed. Must not raise."""


class NullScanObserver:
    """Observer that ignores progress."""

    def on_directory(self, path: str, found_count: int) -> None:
        pass


def build_module_info(path: Path, stat_result: os.stat_result) -> ModuleInfo:
    """Measure a node_modules directory and check its owning project."""
    return ModuleInfo(
        path=str(path),
        size_bytes=get_directory_size(path),
        mtime_ms=stat_result.st_mtime * 1000,
        has_package_json=has_package_json(path.parent),
    )


def scan_node_modules(
    root_path: Path | str,
    depth: int = DEFAULT_MAX_SCAN_DEPTH,
    exclude_globs: Optional[Iterable[str]] = None,
    follow_symlinks: bool = False,
    observer: Optional[ScanObserver] = None,
) -> ScanResult:
    """
    Find node_modules directories below a root.

    Args:
        root_path: Directory to start from (depth 0)
        depth: Deepest directory level whose entries are still listed
        exclude_globs: Extra entry-name globs to skip
        follow_symlinks: Walk into symlinked directories
        observer: Optional progress observer

    Returns:
        ScanResult with writable candidates and permission-denied paths
    """
    patterns = list(exclude_globs or [])
    observer = observer or NullScanObserver()
    modules: list[ModuleInfo] = []
    skipped_no_permission: list[str] = []
    visited: set[tuple[int, int]] = set()

    def _walk(current: Path, level: int) -> None:
        if level > depth:
            return

        if follow_symlinks:
            # Symlink cycles would otherwise recurse until the depth limit
            st = try_or_default(lambda: os.stat(current), None)
            if st is None:
                return
            key = (st.st_dev, st.st_ino)
            if key in visited:
                return
            visited.add(key)

        observer.on_directory(str(current), len(modules))

        try:
            with os.scandir(current) as it:
                entries = list(it)
        except (PermissionError, OSError) as e:
            logger.debug("Cannot list %s: %s", current, e)
            return

        subdirectories: list[Path] = []
        for entry in entries:
            if should_exclude(entry.name, patterns):
                continue

            try:
                if entry.is_symlink() and not follow_symlinks:
                    continue
                if not entry.is_dir(follow_symlinks=follow_symlinks):
                    continue
            except (PermissionError, OSError):
                continue

            entry_path = Path(entry.path)

            if entry.name == TARGET_DIR_NAME:
                _record_candidate(entry_path)
                continue

            subdirectories.append(entry_path)

        for subdirectory in subdirectories:
            _walk(subdirectory, level + 1)

    def _record_candidate(path: Path) -> None:
        stat_result = try_or_default(lambda: os.stat(path), None)
        if stat_result is None:
            logger.debug("Dropping %s: stat failed", path)
            return

        if not can_write(path):
            skipped_no_permission.append(str(path))
            return

        try:
            modules.append(build_module_info(path, stat_result))
        except (PermissionError, OSError, ValueError) as e:
            logger.debug("Dropping %s: %s", path, e)

    _walk(Path(os.path.abspath(root_path)), 0)
    return ScanResult(modules=modules, skipped_no_permission=skipped_no_permission)
