"""Reversible removal by moving directories into the platform trash."""

import errno
import os
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import quote


def default_trash_dir() -> Path:
    """Home trash location for the current platform."""
    if sys.platform == "darwin":
        return Path.home() / ".Trash"
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "Trash"


def _device(path: Path) -> Optional[int]:
    """Device id of path, or of its nearest existing ancestor."""
    for candidate in (path, *path.parents):
        try:
            return os.stat(candidate).st_dev
        except OSError:
            continue
    return None


def _top_dir(path: Path) -> Path:
    """Mount point of the filesystem holding path."""
    device = _device(path)
    current = path
    while current.parent != current and _device(current.parent) == device:
        current = current.parent
    return current


def trash_dir_for(path: Path | str) -> Path:
    """
    Pick the trash for an item.

    Items on the home filesystem go to the home trash. On freedesktop
    systems, items on another filesystem go to $topdir/.Trash-$uid so the
    move stays a rename instead of a full copy.

    Args:
        path: Item about to be trashed

    Returns:
        Trash root directory
    """
    home_trash = default_trash_dir()
    if sys.platform == "darwin" or not hasattr(os, "getuid"):
        return home_trash

    parent = Path(os.path.abspath(path)).parent
    if _device(parent) == _device(home_trash):
        return home_trash
    return _top_dir(parent) / f".Trash-{os.getuid()}"


def _prepare(root: Path) -> bool:
    try:
        for sub in ("files", "info"):
            (root / sub).mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError:
        return False
    return True


def _is_freedesktop(trash_dir: Path) -> bool:
    # The macOS Finder trash is a flat directory
    return sys.platform != "darwin" or trash_dir.name != ".Trash"


def _unique_name(directory: Path, name: str) -> str:
    candidate = name
    counter = 1
    while os.path.lexists(directory / candidate):
        candidate = f"{name}-{counter}"
        counter += 1
    return candidate


def _discard(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, ignore_errors=True)
    elif os.path.lexists(path):
        path.unlink()


def _move(source: Path, destination: Path) -> None:
    try:
        os.rename(source, destination)
        return
    except OSError as e:
        # Only fall back to copy-then-delete across filesystems; any other
        # rename failure must leave the source untouched.
        if e.errno != errno.EXDEV:
            raise

    is_tree = source.is_dir() and not source.is_symlink()
    try:
        if is_tree:
            shutil.copytree(source, destination, symlinks=True)
        else:
            shutil.copy2(source, destination, follow_symlinks=False)
    except OSError:
        _discard(destination)
        raise

    # A failure here leaves a complete copy in the trash
    if is_tree:
        shutil.rmtree(source)
    else:
        source.unlink()


def move_to_trash(path: Path | str, trash_dir: Optional[Path | str] = None) -> Path:
    """
    Move a file or directory into the trash.

    On freedesktop layouts the item lands in files/ next to an
    info/<name>.trashinfo record so desktop trash tools can put it back.
    If the source cannot be fully removed after a cross-device copy, the
    copy and its record stay in the trash and the error is raised.

    Args:
        path: Item to trash
        trash_dir: Trash root (defaults to the trash for the item's filesystem)

    Returns:
        Where the item now lives

    Raises:
        FileNotFoundError: path does not exist
        OSError: the move failed
    """
    source = Path(os.path.abspath(path))
    os.lstat(source)

    if trash_dir:
        root = Path(trash_dir)
    else:
        root = trash_dir_for(source)
        if root != default_trash_dir() and not _prepare(root):
            root = default_trash_dir()

    if not _is_freedesktop(root):
        root.mkdir(parents=True, exist_ok=True)
        destination = root / _unique_name(root, source.name)
        _move(source, destination)
        return destination

    files_dir = root / "files"
    info_dir = root / "info"
    files_dir.mkdir(parents=True, exist_ok=True)
    info_dir.mkdir(parents=True, exist_ok=True)

    name = _unique_name(files_dir, source.name)
    info_file = info_dir / f"{name}.trashinfo"
    info_file.write_text(
        "[Trash Info]\n"
        f"Path={quote(str(source))}\n"
        f"DeletionDate={datetime.now().strftime('%Y-%m-%dT%H:%M:%S')}\n",
        encoding="utf-8",
    )

    destination = files_dir / name
    try:
        _move(source, destination)
    except OSError:
        if not os.path.lexists(destination):
            info_file.unlink(missing_ok=True)
        raise
    return destination
