"""CLI interface for modkill."""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from modkill import __version__
from modkill.analyzer import analyze_modules
from modkill.cleaner import delete_paths
from modkill.config import ModkillConfig, load_config
from modkill.display import (
    ProgressObserver,
    confirm_action,
    console,
    maybe_celebrate,
    scanning_progress,
    show_candidates,
    show_delete_result,
    show_permission_skips,
    show_restore_guidance,
    show_restore_summary,
)
from modkill.exceptions import ModkillError
from modkill.filesystem import expand_path
from modkill.log import setup_logging
from modkill.models import AnalyzedModule, DeletedEntry, ScanResult, SkippedEntry, SortBy
from modkill.restore_log import read_restore_log
from modkill.scanner import TARGET_DIR_NAME, scan_node_modules

AUTO_MIN_AGE_DAYS = 30

# Create Typer app
app = typer.Typer(
    name="modkill",
    help="Find and remove node_modules to free disk space safely",
    add_completion=False,
)

# Options shared by the scanning commands
PATH_OPTION = typer.Option(None, "--path", "-p", help="Root path to scan (defaults to CWD)")
DEPTH_OPTION = typer.Option(None, "--depth", "-d", min=0, help="Maximum scan depth (default 6)")
MIN_AGE_OPTION = typer.Option(None, "--min-age", min=0, help="Minimum age in days")
MIN_SIZE_OPTION = typer.Option(None, "--min-size", min=0, help="Minimum size in MB")
SORT_OPTION = typer.Option(None, "--sort", "-s", help="Sort by size, age, name or path")
EXCLUDE_OPTION = typer.Option(
    None, "--exclude", "-e", help="Glob of directory names to skip (repeatable)"
)
JSON_OPTION = typer.Option(False, "--json", help="Output JSON for scripting")
VERBOSE_OPTION = typer.Option(False, "--verbose", help="Verbose (debug) logging")
DRY_RUN_OPTION = typer.Option(False, "--dry-run", help="Preview without deleting")
NO_TRASH_OPTION = typer.Option(
    False, "--no-trash", help="Delete permanently instead of moving to trash"
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"modkill version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """modkill - find and remove node_modules safely."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _flag(value: bool) -> Optional[bool]:
    # An unset flag must not override the config file
    return True if value else None


def _resolve_config(**cli_values) -> ModkillConfig:
    """Merge CLI values with the nearest config file, exiting on bad config."""
    try:
        config = load_config(cli_values)
    except ModkillError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging(verbose=config.verbose)
    return config


def _base_dir(config: ModkillConfig) -> Path:
    if config.path:
        return Path(os.path.abspath(expand_path(config.path)))
    return Path(os.getcwd())


def _scan_root(config: ModkillConfig) -> Path:
    root = _base_dir(config)
    if not root.is_dir():
        console.print(f"[red]Path not found or not a directory: {escape(str(root))}[/red]")
        raise typer.Exit(1)
    return root


def _scan(config: ModkillConfig, root: Path) -> ScanResult:
    if config.json_output:
        return scan_node_modules(root, depth=config.depth, exclude_globs=config.exclude)

    with scanning_progress() as progress:
        task = progress.add_task(f"Scanning {escape(str(root))}...", total=None)
        result = scan_node_modules(
            root,
            depth=config.depth,
            exclude_globs=config.exclude,
            observer=ProgressObserver(progress, task),
        )
    return result


def _scan_and_analyze(
    config: ModkillConfig,
    default_min_age: float = 0,
) -> tuple[Path, ScanResult, list[AnalyzedModule]]:
    root = _scan_root(config)
    result = _scan(config, root)
    analyzed = analyze_modules(
        result.modules,
        min_age_days=config.min_age if config.min_age is not None else default_min_age,
        min_size_mb=config.min_size or 0,
        sort_by=config.sort,
    )
    if not config.json_output:
        console.print(f"[green]✓[/green] Scan complete: {len(analyzed)} candidate(s)")
    return root, result, analyzed


def _print_json(data) -> None:
    typer.echo(json.dumps(data, indent=2))


def _print_modules_json(modules: list[AnalyzedModule]) -> None:
    _print_json([m.model_dump(mode="json", by_alias=True) for m in modules])


@app.command()
def scan(
    path: Optional[str] = PATH_OPTION,
    depth: Optional[int] = DEPTH_OPTION,
    min_age: Optional[float] = MIN_AGE_OPTION,
    min_size: Optional[float] = MIN_SIZE_OPTION,
    sort: Optional[SortBy] = SORT_OPTION,
    exclude: Optional[list[str]] = EXCLUDE_OPTION,
    json_output: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List node_modules candidates without deleting anything."""
    config = _resolve_config(
        path=path,
        depth=depth,
        min_age=min_age,
        min_size=min_size,
        sort=sort,
        exclude=exclude,
        json_output=_flag(json_output),
        verbose=_flag(verbose),
    )
    root, result, analyzed = _scan_and_analyze(config)

    if config.json_output:
        _print_modules_json(analyzed)
        return

    show_candidates(analyzed, root=str(root))
    show_permission_skips(result.skipped_no_permission)


@app.command()
def clean(
    path: Optional[str] = PATH_OPTION,
    depth: Optional[int] = DEPTH_OPTION,
    min_age: Optional[float] = MIN_AGE_OPTION,
    min_size: Optional[float] = MIN_SIZE_OPTION,
    sort: Optional[SortBy] = SORT_OPTION,
    exclude: Optional[list[str]] = EXCLUDE_OPTION,
    json_output: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    no_trash: bool = NO_TRASH_OPTION,
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompts"),
    restore_log: Optional[Path] = typer.Option(
        None, "--restore-log", help="Where to write the restore log"
    ),
) -> None:
    """Scan, confirm, and delete node_modules candidates."""
    config = _resolve_config(
        path=path,
        depth=depth,
        min_age=min_age,
        min_size=min_size,
        sort=sort,
        exclude=exclude,
        json_output=_flag(json_output),
        verbose=_flag(verbose),
        yes=_flag(yes),
        use_trash=False if no_trash else None,
    )
    root, result, analyzed = _scan_and_analyze(config)

    if config.json_output:
        _print_modules_json(analyzed)
        return

    show_candidates(analyzed, root=str(root))
    show_permission_skips(result.skipped_no_permission)
    if not analyzed:
        raise typer.Exit(0)

    if dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]")
    elif not config.yes:
        mode = "move to trash" if config.use_trash else "permanently delete"
        if not confirm_action(f"Proceed to {mode} {len(analyzed)} folder(s)?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    _delete([m.path for m in analyzed], config, dry_run=dry_run, restore_log_path=restore_log)


@app.command()
def auto(
    path: Optional[str] = PATH_OPTION,
    depth: Optional[int] = DEPTH_OPTION,
    min_age: Optional[float] = MIN_AGE_OPTION,
    min_size: Optional[float] = MIN_SIZE_OPTION,
    sort: Optional[SortBy] = SORT_OPTION,
    exclude: Optional[list[str]] = EXCLUDE_OPTION,
    json_output: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    no_trash: bool = NO_TRASH_OPTION,
) -> None:
    """Clean node_modules older than 30 days (or --min-age) without prompting."""
    config = _resolve_config(
        path=path,
        depth=depth,
        min_age=min_age,
        min_size=min_size,
        sort=sort,
        exclude=exclude,
        json_output=_flag(json_output),
        verbose=_flag(verbose),
        use_trash=False if no_trash else None,
    )
    _, _, analyzed = _scan_and_analyze(config, default_min_age=AUTO_MIN_AGE_DAYS)

    if config.json_output:
        _print_modules_json(analyzed)
        return

    if not analyzed:
        console.print("[yellow]Nothing to auto-clean.[/yellow]")
        return

    _delete([m.path for m in analyzed], config, dry_run=dry_run)


@app.command()
def current(
    path: Optional[str] = typer.Option(
        None, "--path", "-p", help="Project directory (defaults to CWD)"
    ),
    json_output: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
    no_trash: bool = NO_TRASH_OPTION,
) -> None:
    """Clean the node_modules of the current project only."""
    config = _resolve_config(
        path=path,
        json_output=_flag(json_output),
        verbose=_flag(verbose),
        use_trash=False if no_trash else None,
    )
    target = _base_dir(config) / TARGET_DIR_NAME

    if not target.is_dir():
        console.print("[yellow]No node_modules in current directory.[/yellow]")
        return

    if config.json_output:
        _print_json({"path": str(target)})
        return

    _delete([str(target)], config, dry_run=dry_run)


def _delete(
    paths: list[str],
    config: ModkillConfig,
    dry_run: bool,
    restore_log_path: Optional[Path] = None,
) -> None:
    with console.status("Deleting selected node_modules..."):
        result = delete_paths(
            paths,
            dry_run=dry_run,
            use_trash=config.use_trash,
            restore_log_path=restore_log_path,
        )
    show_delete_result(result)
    maybe_celebrate(result.freed_bytes)


@app.command()
def restore(
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", "-l", help="Restore log written by a previous clean"
    ),
    json_output: bool = JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show what a restore log recorded and how to get it back."""
    setup_logging(verbose=verbose)

    if log_file is None:
        console.print("[red]Error: --log-file is required for restore command[/red]")
        raise typer.Exit(1)
    if not log_file.is_file():
        console.print(f"[red]Error: Log file not found: {escape(str(log_file))}[/red]")
        raise typer.Exit(1)

    try:
        entries = read_restore_log(log_file)
    except (ModkillError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        _print_json(
            {
                "logFile": str(log_file),
                "deleted": [e.path for e in entries if isinstance(e, DeletedEntry)],
                "skipped": [
                    {"path": e.path, "reason": e.reason}
                    for e in entries
                    if isinstance(e, SkippedEntry)
                ],
            }
        )
        return

    show_restore_summary(str(log_file), entries)
    if any(isinstance(e, DeletedEntry) for e in entries):
        show_restore_guidance()


if __name__ == "__main__":
    app()
