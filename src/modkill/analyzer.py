"""Scoring, filtering and ranking of node_modules candidates."""

import time
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any, Iterable, Optional

from modkill.models import (
    BYTES_PER_MB,
    MS_PER_DAY,
    AnalyzedModule,
    ModuleInfo,
    ScoringWeights,
    SortBy,
)

DEFAULT_WEIGHTS = ScoringWeights()


def compute_age_days(mtime_ms: float, now_ms: float) -> float:
    """Days elapsed since mtime_ms, never negative."""
    return max(0.0, (now_ms - mtime_ms) / MS_PER_DAY)


def compute_score(
    age_days: float,
    size_bytes: int,
    has_package_json: bool,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """
    Compute removal priority for a candidate.

    Age and size are each capped so that neither dominates, and orphaned
    directories (no package.json next to them) get a fixed bonus.

    Args:
        age_days: Days since last modification
        size_bytes: Directory size
        has_package_json: Whether the owning project still has a manifest
        weights: Scoring constants

    Returns:
        Weighted score, higher means more disposable
    """
    size_mb = size_bytes / BYTES_PER_MB
    age_score = min(weights.age_cap, age_days)
    size_score = min(weights.size_cap, size_mb / weights.size_divisor_mb)
    orphan_score = 0.0 if has_package_json else weights.orphan_bonus
    return age_score * weights.age + size_score * weights.size + orphan_score * weights.orphan


def _coerce_module(module: ModuleInfo | Mapping[str, Any]) -> ModuleInfo:
    if isinstance(module, ModuleInfo):
        return module
    return ModuleInfo.model_validate(module)


def _sort_key(sort_by: SortBy):
    if sort_by == SortBy.AGE:
        return lambda m: -m.age_days
    if sort_by == SortBy.NAME:
        return lambda m: PurePath(m.path).name
    if sort_by == SortBy.PATH:
        return lambda m: m.path
    return lambda m: -m.size_bytes


def analyze_modules(
    modules: Iterable[ModuleInfo | Mapping[str, Any]],
    min_age_days: float = 0,
    min_size_mb: float = 0,
    include_orphans: bool = True,
    sort_by: SortBy | str = SortBy.SIZE,
    now_ms: Optional[float] = None,
    weights: Optional[ScoringWeights] = None,
) -> list[AnalyzedModule]:
    """
    Score, filter and sort scanned modules.

    Args:
        modules: ModuleInfo records (or mappings with the same fields)
        min_age_days: Drop modules modified more recently than this
        min_size_mb: Drop modules smaller than this many MiB
        include_orphans: When False, drop modules without a package.json
        sort_by: size, age, name or path
        now_ms: Reference time in epoch milliseconds (defaults to now)
        weights: Scoring constants

    Returns:
        New list of AnalyzedModule, ordered by sort_by
    """
    now_ms = time.time() * 1000 if now_ms is None else now_ms
    weights = weights or DEFAULT_WEIGHTS
    sort_by = SortBy(sort_by)
    min_size_bytes = min_size_mb * BYTES_PER_MB

    analyzed = []
    for module in map(_coerce_module, modules):
        age_days = compute_age_days(module.mtime_ms, now_ms)
        if age_days < min_age_days or module.size_bytes < min_size_bytes:
            continue
        if not include_orphans and not module.has_package_json:
            continue

        analyzed.append(
            AnalyzedModule(
                path=module.path,
                size_bytes=module.size_bytes,
                mtime_ms=module.mtime_ms,
                has_package_json=module.has_package_json,
                age_days=age_days,
                score=compute_score(age_days, module.size_bytes, module.has_package_json, weights),
            )
        )

    return sorted(analyzed, key=_sort_key(sort_by))


def total_size(modules: Iterable[ModuleInfo]) -> int:
    """Sum of size_bytes across modules."""
    return sum(m.size_bytes for m in modules)
