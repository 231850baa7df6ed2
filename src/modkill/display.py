"""Rich terminal display for modkill."""

import os
import sys
from pathlib import PurePath
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from modkill.models import AnalyzedModule, DeletedEntry, DeleteResult, RestoreLogEntry, SkippedEntry

console = Console()

AGE_WARNING_DAYS = 30
AGE_ERROR_DAYS = 60
CELEBRATION_BYTES = 10 * 1024**3


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string (decimal units)."""
    if size_bytes >= 1000**3:
        return f"{size_bytes / (1000**3):.1f} GB"
    elif size_bytes >= 1000**2:
        return f"{size_bytes / (1000**2):.1f} MB"
    elif size_bytes >= 1000:
        return f"{size_bytes / 1000:.1f} KB"
    else:
        return f"{size_bytes} B"


def format_age(days: float) -> str:
    """Short relative age, e.g. 'today', '12d ago', '3mo ago'."""
    if days < 1:
        return "today"
    if days < 30:
        return f"{int(days)}d ago"
    return f"{int(days // 30)}mo ago"


def age_color(days: float) -> str:
    """Color for an age: older is more disposable."""
    if days > AGE_ERROR_DAYS:
        return "red"
    if days > AGE_WARNING_DAYS:
        return "yellow"
    return "green"


def _relative(path: str, root: Optional[str]) -> str:
    if not root:
        return path
    try:
        return os.path.relpath(path, root)
    except ValueError:
        return path


def show_candidates(modules: list[AnalyzedModule], root: Optional[str] = None) -> None:
    """Display the ranked candidate table and total reclaimable size."""
    if not modules:
        console.print("[yellow]No node_modules found matching criteria.[/yellow]")
        return

    table = Table(title="node_modules candidates", show_header=True, header_style="bold")
    table.add_column("Project", style="bold")
    table.add_column("Location")
    table.add_column("Size", justify="right")
    table.add_column("Age", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("", width=6)

    for module in modules:
        project = PurePath(module.project_dir).name or module.project_dir
        color = age_color(module.age_days)
        table.add_row(
            escape(project),
            f"[dim]{escape(_relative(module.project_dir, root))}[/dim]",
            format_size(module.size_bytes),
            f"[{color}]{format_age(module.age_days)}[/{color}]",
            f"{module.score:.1f}",
            "[magenta]orphan[/magenta]" if module.is_orphan else "",
        )

    console.print(table)
    total = sum(m.size_bytes for m in modules)
    console.print(f"[blue]Total potential to free: {format_size(total)}[/blue]")


def show_permission_skips(paths: list[str]) -> None:
    """List node_modules that were found but are not writable."""
    if not paths:
        return
    console.print(f"[yellow]! {len(paths)} node_modules skipped (no write permission):[/yellow]")
    for path in paths:
        console.print(f"  [dim]{escape(path)}[/dim]")


def show_delete_result(result: DeleteResult) -> None:
    """Display the outcome of a deletion batch."""
    console.print(
        f"[green]Deleted: {len(result.deleted)}, Skipped: {len(result.skipped)}[/green]"
    )
    for item in result.skipped:
        code = f" [{item.error_code}]" if item.error_code else ""
        console.print(f"  [red]✗[/red] {escape(item.path)} [dim]({item.reason}){escape(code)}[/dim]")
    console.print(f"[green]Freed: {format_size(result.freed_bytes)}[/green]")
    if result.restore_log_written:
        console.print(f"[dim]Restore log: {escape(result.restore_log_path)}[/dim]")
    else:
        console.print("[yellow]Restore log could not be written.[/yellow]")


def maybe_celebrate(freed_bytes: int) -> bool:
    """Celebrate big cleanups. Returns True if it did."""
    if freed_bytes <= CELEBRATION_BYTES:
        return False
    console.print(
        Panel(
            f"[bold]LEGENDARY KILL![/bold] {format_size(freed_bytes)} reclaimed.",
            border_style="magenta",
        )
    )
    return True


def show_restore_summary(log_file: str, entries: list[RestoreLogEntry]) -> None:
    """List what a restore log says was deleted and skipped."""
    deleted = [e for e in entries if isinstance(e, DeletedEntry)]
    skipped = [e for e in entries if isinstance(e, SkippedEntry)]

    console.print(f"Reading restore log: {escape(log_file)}")
    if not deleted:
        console.print("[yellow]No deleted items found in log file.[/yellow]")
        return

    console.print(f"Found {len(deleted)} deleted item(s) to restore")
    if skipped:
        console.print(
            f"[dim]({len(skipped)} item(s) were skipped during deletion "
            "and don't need restoration)[/dim]"
        )
    console.print()
    for entry in deleted:
        console.print(f"  • {escape(entry.path)}")
    console.print()


def trash_location_hint(platform: Optional[str] = None) -> str:
    """Where the user should look for trashed folders."""
    platform = platform or sys.platform
    if platform == "darwin":
        return "macOS: Open Finder → Go → Go to Folder → ~/.Trash"
    if platform.startswith("win"):
        return "Windows: Open Recycle Bin from Desktop"
    return "Linux: Check ~/.local/share/Trash/files or use trash-cli tools"


def show_restore_guidance(platform: Optional[str] = None) -> None:
    """Explain how to put trashed folders back."""
    console.print(
        Panel(
            "Programmatic trash restoration is not supported.\n\n"
            "To restore your files:\n"
            "  1. Open your system Trash/Recycle Bin\n"
            "  2. Search for the folder names shown above\n"
            "  3. Select \"Put Back\" or \"Restore\"\n\n"
            "To stay safe next time:\n"
            "  - Use --dry-run to preview before deleting\n"
            "  - Back up important projects before cleaning\n"
            "  - node_modules can always be rebuilt with npm install",
            title="[bold yellow]Restore limitations[/bold yellow]",
            border_style="yellow",
        )
    )
    console.print(f"[cyan]Tip: {trash_location_hint(platform)}[/cyan]")


def scanning_progress() -> Progress:
    """Create a spinner for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


class ProgressObserver:
    """Scan observer that updates a rich progress task."""

    def __init__(self, progress: Progress, task_id) -> None:
        self.progress = progress
        self.task_id = task_id

    def on_directory(self, path: str, found_count: int) -> None:
        try:
            self.progress.update(
                self.task_id,
                description=f"Scanning ({found_count} found) [dim]{escape(path)}[/dim]",
            )
        except Exception:
            # Rendering must never interrupt a scan
            pass


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message)
