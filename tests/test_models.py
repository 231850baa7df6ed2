"""Tests for data models."""

import pytest
from pydantic import ValidationError

from modkill.models import (
    AnalyzedModule,
    DeletedEntry,
    DeleteResult,
    ModuleInfo,
    ScanResult,
    SkippedEntry,
    SkippedPath,
    SortBy,
)


def make_info(**overrides) -> ModuleInfo:
    values = {
        "path": "/home/dev/app/node_modules",
        "size_bytes": 1024,
        "mtime_ms": 1_700_000_000_000.0,
        "has_package_json": True,
    }
    values.update(overrides)
    return ModuleInfo(**values)


class TestSortBy:
    def test_values(self):
        assert [s.value for s in SortBy] == ["size", "age", "name", "path"]

    def test_from_string(self):
        assert SortBy("age") is SortBy.AGE


class TestModuleInfo:
    def test_project_dir(self):
        assert make_info().project_dir == "/home/dev/app"

    def test_orphan(self):
        assert make_info(has_package_json=False).is_orphan
        assert not make_info().is_orphan

    def test_frozen(self):
        info = make_info()
        with pytest.raises(ValidationError):
            info.size_bytes = 0

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            make_info(size_bytes=-1)

    def test_camel_case_dump(self):
        data = make_info().model_dump(by_alias=True)
        assert set(data) == {"path", "sizeBytes", "mtimeMs", "hasPackageJson"}

    def test_accepts_aliases(self):
        info = ModuleInfo.model_validate(
            {"path": "/x", "sizeBytes": 1, "mtimeMs": 0, "hasPackageJson": False}
        )
        assert info.size_bytes == 1


class TestAnalyzedModule:
    def test_extends_module_info(self):
        analyzed = AnalyzedModule(**make_info().model_dump(), age_days=12.5, score=7.0)
        assert isinstance(analyzed, ModuleInfo)
        data = analyzed.model_dump(mode="json", by_alias=True)
        assert data["ageDays"] == 12.5
        assert data["score"] == 7.0

    def test_negative_age_rejected(self):
        with pytest.raises(ValidationError):
            AnalyzedModule(**make_info().model_dump(), age_days=-1, score=0)


class TestScanResult:
    def test_defaults(self):
        result = ScanResult()
        assert result.modules == []
        assert result.skipped_no_permission == []
        assert result.total_bytes == 0

    def test_total_bytes(self):
        result = ScanResult(modules=[make_info(size_bytes=10), make_info(path="/b", size_bytes=5)])
        assert result.total_bytes == 15


class TestDeleteResult:
    def test_skipped_paths(self):
        result = DeleteResult(
            deleted=["/a"],
            skipped=[SkippedPath(path="/b", reason="permission denied", error_code="EACCES")],
            restore_log_path="/tmp/log",
        )
        assert result.skipped_paths == ["/b"]
        assert result.success
        assert result.restore_log_written

    def test_restore_log_path_required(self):
        with pytest.raises(ValidationError):
            DeleteResult()

    def test_json_keys(self):
        result = DeleteResult(restore_log_path="/tmp/log")
        data = result.model_dump(by_alias=True)
        assert "freedBytes" in data
        assert "restoreLogPath" in data


class TestLogEntries:
    def test_discriminating_types(self):
        assert DeletedEntry(path="/a").type == "DELETED"
        assert SkippedEntry(path="/a", reason="x").type == "SKIPPED"

    def test_wrong_literal_rejected(self):
        with pytest.raises(ValidationError):
            DeletedEntry(type="SKIPPED", path="/a")
