"""Data models for modkill."""

import math
from enum import Enum
from pathlib import PurePath
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MS_PER_DAY = 1000 * 60 * 60 * 24
BYTES_PER_MB = 1024 * 1024


class SortBy(str, Enum):
    """Sort keys accepted by the analyzer."""

    SIZE = "size"  # Largest first
    AGE = "age"  # Oldest first
    NAME = "name"  # Final path segment, A-Z
    PATH = "path"  # Full path, A-Z


class _Record(BaseModel):
    """Base for records that serialize with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ModuleInfo(_Record):
    """A node_modules directory found by the scanner."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute path of the node_modules directory")
    size_bytes: int = Field(..., ge=0, description="Total size of regular files inside")
    mtime_ms: float = Field(..., description="Modification time in epoch milliseconds")
    has_package_json: bool = Field(
        ..., description="Whether the parent directory holds a package.json"
    )

    @property
    def project_dir(self) -> str:
        """Directory that owns this node_modules."""
        return str(PurePath(self.path).parent)

    @property
    def is_orphan(self) -> bool:
        """True when the owning project has no manifest anymore."""
        return not self.has_package_json


class ScanResult(_Record):
    """Everything a single scan discovered."""

    modules: list[ModuleInfo] = Field(default_factory=list)
    skipped_no_permission: list[str] = Field(
        default_factory=list,
        description="node_modules directories found but not writable",
    )

    @property
    def total_bytes(self) -> int:
        """Total size of writable candidates."""
        return sum(m.size_bytes for m in self.modules)


class AnalyzedModule(ModuleInfo):
    """A candidate with its age and removal priority."""

    age_days: float = Field(..., ge=0, description="Days since last modification")
    score: float = Field(..., description="Removal priority, higher means more disposable")


class ScoringWeights(BaseModel):
    """Tuning constants for the removal priority score."""

    model_config = ConfigDict(frozen=True)

    age: float = Field(0.5, ge=0)
    size: float = Field(0.4, ge=0)
    orphan: float = Field(0.1, ge=0)
    orphan_bonus: float = Field(10.0, ge=0, description="Points given to orphans before weighting")
    age_cap: float = Field(100.0, gt=0, description="Age in days beyond which score stops growing")
    size_cap: float = Field(100.0, gt=0)
    size_divisor_mb: float = Field(10.0, gt=0, description="MB per size point")

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> "ScoringWeights":
        total = self.age + self.size + self.orphan
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"weights must sum to 1, got {total}")
        return self


class SkippedPath(_Record):
    """A path the cleaner did not remove, and why."""

    path: str
    reason: str = Field(..., description="Human-readable reason, e.g. 'permission denied'")
    error_code: Optional[str] = Field(None, description="Symbolic errno name, e.g. 'ENOENT'")


class DeleteResult(_Record):
    """Outcome of one deletion batch."""

    success: bool = Field(True, description="The batch ran to completion")
    freed_bytes: int = Field(0, ge=0)
    deleted: list[str] = Field(default_factory=list)
    skipped: list[SkippedPath] = Field(default_factory=list)
    restore_log_path: str = Field(..., description="Where the restore log was written")
    restore_log_written: bool = Field(True, description="False if writing the log failed")

    @property
    def skipped_paths(self) -> list[str]:
        return [s.path for s in self.skipped]


class DeletedEntry(BaseModel):
    """Restore log record for a removed path."""

    type: Literal["DELETED"] = "DELETED"
    path: str


class SkippedEntry(BaseModel):
    """Restore log record for a path left in place."""

    type: Literal["SKIPPED"] = "SKIPPED"
    path: str
    reason: str
    error_code: Optional[str] = None


RestoreLogEntry = Union[DeletedEntry, SkippedEntry]
