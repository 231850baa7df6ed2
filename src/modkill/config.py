"""Configuration file discovery and layered settings for modkill.

Effective settings are resolved once, at the CLI boundary:
explicit command-line values, then the nearest .modkillrc file, then
built-in defaults. The scanner, analyzer and cleaner only ever see the
resolved values passed to them.
"""

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modkill.exceptions import ConfigError
from modkill.filesystem import expand_path
from modkill.log import get_logger
from modkill.models import SortBy
from modkill.scanner import DEFAULT_MAX_SCAN_DEPTH

logger = get_logger(__name__)

CONFIG_FILE_NAMES = (".modkillrc", ".modkillrc.json")


class ModkillConfig(BaseModel):
    """Settings accepted in a config file and on the command line."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_age: Optional[float] = Field(None, ge=0, alias="minAge", description="Minimum age in days")
    min_size: Optional[float] = Field(None, ge=0, alias="minSize", description="Minimum size in MB")
    sort: SortBy = Field(SortBy.SIZE, description="Sort key for results")
    depth: int = Field(DEFAULT_MAX_SCAN_DEPTH, ge=0, description="Maximum scan depth")
    yes: bool = Field(False, description="Assume yes for prompts")
    verbose: bool = Field(False, description="Debug logging")
    json_output: bool = Field(False, alias="json", description="Print JSON for scripting")
    exclude: list[str] = Field(default_factory=list, description="Extra exclude globs")
    path: Optional[str] = Field(None, description="Root path to scan (defaults to CWD)")
    use_trash: bool = Field(True, alias="useTrash", description="Move to trash instead of deleting")


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def find_config_file(start_dir: Optional[Path | str] = None) -> Optional[Path]:
    """
    Search start_dir and its parents for a config file.

    Args:
        start_dir: Where to start (defaults to the current directory)

    Returns:
        Path of the first config file found, or None
    """
    current = (expand_path(os.fspath(start_dir)) if start_dir else Path.cwd()).absolute()
    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def load_config_file(config_path: Path | str) -> ModkillConfig:
    """
    Read and validate a JSON config file.

    Raises:
        ConfigError: unreadable file, invalid JSON, or invalid values
    """
    try:
        data = json.loads(Path(config_path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")

    try:
        return ModkillConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Failed to load config file {config_path}: {_describe(e)}") from e


def merge_config(
    cli_values: Mapping[str, Any],
    file_config: Optional[ModkillConfig] = None,
) -> ModkillConfig:
    """
    Layer command-line values over a file config over defaults.

    Args:
        cli_values: Field name -> value; None means "not given on the CLI"
        file_config: Config loaded from disk, if any

    Returns:
        The effective configuration
    """
    explicit = {k: v for k, v in cli_values.items() if v is not None}

    if file_config is None:
        merged: dict[str, Any] = {}
        excludes: list[str] = []
    else:
        merged = file_config.model_dump(exclude_unset=True)
        excludes = list(file_config.exclude)

    excludes.extend(explicit.pop("exclude", None) or [])
    merged.update(explicit)
    merged["exclude"] = excludes
    try:
        return ModkillConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {_describe(e)}") from e


def load_config(
    cli_values: Mapping[str, Any],
    start_dir: Optional[Path | str] = None,
) -> ModkillConfig:
    """
    Discover the nearest config file and merge it with CLI values.

    The search starts at the CLI --path if given, else start_dir, else CWD.
    """
    search_from = cli_values.get("path") or start_dir
    config_path = find_config_file(search_from)
    if config_path is None:
        return merge_config(cli_values)

    logger.debug("Using config file %s", config_path)
    return merge_config(cli_values, load_config_file(config_path))
