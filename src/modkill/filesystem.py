"""Best-effort filesystem helpers shared by the scanner and cleaner."""

import fnmatch
import os
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

# Never walked into: version control metadata and OS-managed trees
DEFAULT_EXCLUDES = frozenset(
    {
        ".git",
        ".svn",
        ".hg",
        "Library",  # macOS user/system library
        "Windows",
        "System32",
        "AppData",
    }
)


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


def try_or_default(operation: Callable[[], T], default: T) -> T:
    """
    Run a filesystem probe, returning default if it raises OSError.

    Args:
        operation: Zero-argument callable doing the I/O
        default: Value returned when the probe fails

    Returns:
        The probe's result, or default
    """
    try:
        return operation()
    except (PermissionError, OSError):
        return default


def should_exclude(name: str, custom_patterns: Optional[Iterable[str]] = None) -> bool:
    """
    Check whether a directory entry must be skipped during traversal.

    Built-in excludes always apply. Custom patterns are case-sensitive globs
    matched against the bare entry name; a leading dot needs no special
    handling, so '*' also matches '.cache'.

    Args:
        name: Entry name (not a path)
        custom_patterns: Optional extra glob patterns

    Returns:
        True if the entry should not be visited
    """
    if name in DEFAULT_EXCLUDES:
        return True
    if custom_patterns:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in custom_patterns)
    return False


def get_directory_size(path: Path | str) -> int:
    """
    Sum the sizes of all regular files below a directory.

    Uses os.scandir with an explicit stack. Symlinks are neither followed nor
    counted. Entries that vanish or cannot be read contribute nothing, so the
    result is a lower bound and this never raises.

    Args:
        path: Directory to measure

    Returns:
        Total bytes (0 if the directory itself cannot be read)
    """
    total_size = 0
    pending = [os.fspath(path)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total_size += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                    except (PermissionError, OSError):
                        continue
        except (PermissionError, OSError):
            continue

    return total_size


def has_package_json(directory: Path | str) -> bool:
    """Check for a package.json manifest directly inside directory."""
    manifest = os.path.join(os.fspath(directory), "package.json")
    return try_or_default(lambda: os.stat(manifest) is not None, False)


def can_write(path: Path | str) -> bool:
    """Probe the write permission bit without touching the directory."""
    return try_or_default(lambda: os.access(path, os.W_OK), False)
