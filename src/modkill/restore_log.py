"""Reading and writing the restore log.

Wire format, one line per processed path:

    DELETED<TAB>/abs/path
    SKIPPED<TAB>/abs/path<TAB>(reason)

No header and no trailing metadata. The errno code carried by SkippedEntry
is not written.
"""

from pathlib import Path
from typing import Iterable

from modkill.exceptions import RestoreLogError
from modkill.models import DeletedEntry, RestoreLogEntry, SkippedEntry

DELETED = "DELETED"
SKIPPED = "SKIPPED"


def encode_entry(entry: RestoreLogEntry) -> str:
    """Serialize one entry to a log line (without newline)."""
    if isinstance(entry, SkippedEntry):
        return f"{SKIPPED}\t{entry.path}\t({entry.reason})"
    return f"{DELETED}\t{entry.path}"


def decode_line(line: str) -> RestoreLogEntry:
    """
    Parse one log line.

    Args:
        line: A single line, trailing newline allowed

    Returns:
        DeletedEntry or SkippedEntry

    Raises:
        RestoreLogError: unknown tag or missing path
    """
    # Paths may contain tabs: the tag is the first field, the reason the last
    tag, _, rest = line.rstrip("\r\n").partition("\t")
    if tag not in (DELETED, SKIPPED):
        raise RestoreLogError(f"Unknown restore log entry type: {tag!r}")

    reason = ""
    if tag == SKIPPED and "\t" in rest:
        path, reason = rest.rsplit("\t", 1)
    else:
        path = rest
    if not path:
        raise RestoreLogError(f"Missing path in restore log line: {line!r}")

    if tag == DELETED:
        return DeletedEntry(path=path)
    if reason.startswith("(") and reason.endswith(")"):
        reason = reason[1:-1]
    return SkippedEntry(path=path, reason=reason)


def write_restore_log(path: Path | str, entries: Iterable[RestoreLogEntry]) -> None:
    """Write entries to path, replacing any existing file."""
    lines = [encode_entry(entry) for entry in entries]
    content = "\n".join(lines) + ("\n" if lines else "")
    Path(path).write_text(content, encoding="utf-8")


def read_restore_log(path: Path | str) -> list[RestoreLogEntry]:
    """Parse a restore log, ignoring blank lines."""
    content = Path(path).read_text(encoding="utf-8")
    return [decode_line(line) for line in content.split("\n") if line.strip()]
