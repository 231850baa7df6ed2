"""Batch deletion of node_modules directories with a restore log."""

import errno
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Iterable, Optional

from modkill.filesystem import get_directory_size, try_or_default
from modkill.log import get_logger
from modkill.models import DeletedEntry, DeleteResult, RestoreLogEntry, SkippedEntry, SkippedPath
from modkill.restore_log import write_restore_log
from modkill.trash import move_to_trash

logger = get_logger(__name__)

DRY_RUN_REASON = "dry-run mode"
REASON_PERMISSION = "permission denied"
REASON_IN_USE = "file in use"
REASON_NOT_FOUND = "path not found"
REASON_UNKNOWN = "unknown error"

ERRNO_REASONS = {
    errno.EACCES: REASON_PERMISSION,
    errno.EPERM: REASON_PERMISSION,
    errno.EBUSY: REASON_IN_USE,
    errno.ETXTBSY: REASON_IN_USE,
    errno.ENOENT: REASON_NOT_FOUND,
}


def classify_error(error: BaseException) -> tuple[str, Optional[str]]:
    """
    Map a removal failure to a human reason.

    Args:
        error: Exception raised while removing a path

    Returns:
        Tuple of (reason, error_code) where error_code is the symbolic errno
        name such as 'ENOENT', or None if the error carries no errno
    """
    code = getattr(error, "errno", None)
    if not isinstance(code, int):
        return REASON_UNKNOWN, None
    return ERRNO_REASONS.get(code, REASON_UNKNOWN), errno.errorcode.get(code)


def default_restore_log_path() -> Path:
    """Timestamped restore log location in the temp directory."""
    return Path(tempfile.gettempdir()) / f"modkill-restore-{int(time.time() * 1000)}.log"


def remove_permanently(path: Path | str) -> None:
    """Recursively delete a directory, or unlink a file or symlink."""
    path = Path(path)
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)


def delete_paths(
    paths: Iterable[Path | str],
    dry_run: bool = False,
    use_trash: bool = True,
    restore_log_path: Optional[Path | str] = None,
    trash_dir: Optional[Path | str] = None,
) -> DeleteResult:
    """
    Remove a batch of directories, one at a time.

    A failure on one path is recorded and the batch moves on. Every input
    path ends up in exactly one of deleted or skipped, and the restore log
    is written once the whole batch has been processed.

    Args:
        paths: Absolute directory paths to remove
        dry_run: Record every path as skipped without touching disk
        use_trash: Move to trash instead of deleting permanently
        restore_log_path: Where to write the restore log
        trash_dir: Trash root override (defaults to the platform trash)

    Returns:
        DeleteResult describing every path
    """
    log_path = Path(restore_log_path) if restore_log_path else default_restore_log_path()

    deleted: list[str] = []
    skipped: list[SkippedPath] = []
    entries: list[RestoreLogEntry] = []
    freed_bytes = 0

    for item in paths:
        path_str = os.fspath(item)

        if dry_run:
            skipped.append(SkippedPath(path=path_str, reason=DRY_RUN_REASON))
            entries.append(SkippedEntry(path=path_str, reason=DRY_RUN_REASON))
            continue

        # Removing a symlink frees nothing behind it
        if os.path.islink(path_str):
            size = 0
        else:
            size = try_or_default(lambda: get_directory_size(path_str), 0)

        try:
            if use_trash:
                move_to_trash(path_str, trash_dir=trash_dir)
            else:
                remove_permanently(path_str)
        except Exception as e:
            reason, code = classify_error(e)
            logger.debug("Could not remove %s: %s", path_str, e)
            skipped.append(SkippedPath(path=path_str, reason=reason, error_code=code))
            entries.append(SkippedEntry(path=path_str, reason=reason, error_code=code))
            continue

        deleted.append(path_str)
        entries.append(DeletedEntry(path=path_str))
        freed_bytes += size

    log_written = True
    try:
        write_restore_log(log_path, entries)
    except (PermissionError, OSError) as e:
        log_written = False
        logger.debug("Could not write restore log %s: %s", log_path, e)

    return DeleteResult(
        success=True,
        freed_bytes=freed_bytes,
        deleted=deleted,
        skipped=skipped,
        restore_log_path=str(log_path),
        restore_log_written=log_written,
    )
