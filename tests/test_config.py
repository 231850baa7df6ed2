"""Tests for configuration loading and merging."""

import json

import pytest

from modkill.config import (
    ModkillConfig,
    find_config_file,
    load_config,
    load_config_file,
    merge_config,
)
from modkill.exceptions import ConfigError, ModkillError
from modkill.models import SortBy


def write_rc(directory, data, name=".modkillrc"):
    path = directory / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestDefaults:
    def test_built_in_defaults(self):
        config = ModkillConfig()
        assert config.depth == 6
        assert config.sort == SortBy.SIZE
        assert config.use_trash is True
        assert config.exclude == []
        assert config.min_age is None
        assert not config.yes


class TestFindConfigFile:
    def test_in_start_dir(self, tmp_path):
        rc = write_rc(tmp_path, {})
        assert find_config_file(tmp_path) == rc

    def test_in_parent(self, tmp_path):
        rc = write_rc(tmp_path, {})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == rc

    def test_nearest_wins(self, tmp_path):
        write_rc(tmp_path, {})
        inner_dir = tmp_path / "inner"
        inner_dir.mkdir()
        inner = write_rc(inner_dir, {})
        assert find_config_file(inner_dir) == inner

    def test_json_extension(self, tmp_path):
        rc = write_rc(tmp_path, {}, name=".modkillrc.json")
        assert find_config_file(tmp_path) == rc

    def test_directory_named_like_config_ignored(self, tmp_path):
        (tmp_path / ".modkillrc").mkdir()
        found = find_config_file(tmp_path)
        assert found != tmp_path / ".modkillrc"


class TestLoadConfigFile:
    def test_camel_case_keys(self, tmp_path):
        rc = write_rc(
            tmp_path,
            {"minAge": 30, "minSize": 50, "sort": "age", "depth": 3, "useTrash": False},
        )

        config = load_config_file(rc)

        assert config.min_age == 30
        assert config.min_size == 50
        assert config.sort == SortBy.AGE
        assert config.depth == 3
        assert config.use_trash is False

    def test_unknown_keys_ignored(self, tmp_path):
        rc = write_rc(tmp_path, {"colour": "blue", "depth": 2})
        assert load_config_file(rc).depth == 2

    def test_invalid_json(self, tmp_path):
        rc = write_rc(tmp_path, "{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config_file(rc)

    def test_not_an_object(self, tmp_path):
        rc = write_rc(tmp_path, [1, 2, 3])
        with pytest.raises(ConfigError, match="JSON object"):
            load_config_file(rc)

    def test_invalid_sort(self, tmp_path):
        rc = write_rc(tmp_path, {"sort": "colour"})
        with pytest.raises(ConfigError, match="sort"):
            load_config_file(rc)

    def test_negative_values(self, tmp_path):
        rc = write_rc(tmp_path, {"minAge": -1})
        with pytest.raises(ConfigError):
            load_config_file(rc)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Failed to read"):
            load_config_file(tmp_path / "absent")

    def test_config_error_is_modkill_error(self, tmp_path):
        rc = write_rc(tmp_path, "{")
        with pytest.raises(ModkillError):
            load_config_file(rc)


class TestMergeConfig:
    def test_cli_overrides_file(self):
        file_config = ModkillConfig(min_age=30, sort=SortBy.AGE)

        config = merge_config({"min_age": 5, "sort": None}, file_config)

        assert config.min_age == 5
        assert config.sort == SortBy.AGE

    def test_file_overrides_defaults(self):
        file_config = ModkillConfig.model_validate({"depth": 2})
        config = merge_config({"depth": None}, file_config)
        assert config.depth == 2

    def test_defaults_when_nothing_given(self):
        config = merge_config({"depth": None, "min_age": None})
        assert config.depth == 6
        assert config.min_age is None

    def test_unset_flags_do_not_override_file(self):
        file_config = ModkillConfig.model_validate({"yes": True, "useTrash": False})

        config = merge_config({"yes": None, "use_trash": None}, file_config)

        assert config.yes is True
        assert config.use_trash is False

    def test_explicit_false_overrides_file(self):
        file_config = ModkillConfig.model_validate({"useTrash": True})
        config = merge_config({"use_trash": False}, file_config)
        assert config.use_trash is False

    def test_excludes_are_combined(self):
        file_config = ModkillConfig(exclude=["archive*"])

        config = merge_config({"exclude": ["tmp*"]}, file_config)

        assert config.exclude == ["archive*", "tmp*"]

    def test_invalid_cli_value(self):
        with pytest.raises(ConfigError, match="Invalid settings"):
            merge_config({"depth": -2})


class TestLoadConfig:
    def test_searches_from_cli_path(self, tmp_path):
        write_rc(tmp_path, {"minAge": 60})
        project = tmp_path / "project"
        project.mkdir()

        config = load_config({"path": str(project)})

        assert config.min_age == 60
        assert config.path == str(project)

    def test_start_dir(self, tmp_path):
        write_rc(tmp_path, {"depth": 1})
        assert load_config({}, start_dir=tmp_path).depth == 1

    def test_cli_wins_over_discovered_file(self, tmp_path):
        write_rc(tmp_path, {"sort": "path"})
        config = load_config({"sort": SortBy.NAME}, start_dir=tmp_path)
        assert config.sort == SortBy.NAME

    def test_bad_file_raises(self, tmp_path):
        write_rc(tmp_path, "oops")
        with pytest.raises(ConfigError):
            load_config({}, start_dir=tmp_path)
