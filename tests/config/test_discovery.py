"""Tests for config discovery and loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from crudgen.config.discovery import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    PYPROJECT_FILENAME,
    find_config,
    load_config,
)
from crudgen.config.models import CrudgenConfig
from crudgen.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_finds_in_current_dir(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text('[database]\nurl = "sqlite://"\n')
        assert find_config(tmp_path) == config_file

    def test_walks_up(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        child = tmp_path / "a" / "b" / "c"
        child.mkdir(parents=True)
        assert find_config(child) == config_file

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        child = tmp_path / "empty"
        child.mkdir()
        assert find_config(child) is None

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert find_config(tmp_path) == config_file

    def test_env_var_pointing_nowhere(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        with pytest.raises(ConfigurationError, match="not a file"):
            find_config(tmp_path)

    def test_finds_pyproject_with_crudgen_table(self, tmp_path: Path) -> None:
        pyproject = tmp_path / PYPROJECT_FILENAME
        pyproject.write_text('[tool.crudgen.database]\nurl = "sqlite:///app.db"\n')
        child = tmp_path / "src"
        child.mkdir()
        assert find_config(child) == pyproject

    def test_skips_pyproject_without_crudgen_table(self, tmp_path: Path) -> None:
        (tmp_path / PYPROJECT_FILENAME).write_text('[project]\nname = "app"\n')
        assert find_config(tmp_path) is None

    def test_crudgen_toml_preferred_in_same_dir(self, tmp_path: Path) -> None:
        (tmp_path / PYPROJECT_FILENAME).write_text("[tool.crudgen]\n")
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert find_config(tmp_path) == config_file

    def test_nearest_directory_wins(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")
        child = tmp_path / "app"
        child.mkdir()
        pyproject = child / PYPROJECT_FILENAME
        pyproject.write_text("[tool.crudgen]\n")
        assert find_config(child) == pyproject


class TestLoadConfig:
    def test_loads_from_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text(
            '[database]\nurl = "sqlite:///app.db"\n'
            '[save.sql_error_messages]\n"check constraint" = "A value is out of range."\n'
        )
        cfg = load_config(config_file)
        assert cfg.database.url == "sqlite:///app.db"
        assert cfg.database.echo is False
        assert cfg.save.describe_sql_error("CHECK constraint failed") == "A value is out of range."

    def test_returns_defaults_when_no_file(self, tmp_path: Path) -> None:
        assert load_config(cwd=tmp_path) == CrudgenConfig()

    def test_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert load_config(config_file) == CrudgenConfig()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("[database\n")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(config_file)

    def test_reads_crudgen_table_of_pyproject(self, tmp_path: Path) -> None:
        pyproject = tmp_path / PYPROJECT_FILENAME
        pyproject.write_text(
            '[project]\nname = "app"\n'
            '[tool.crudgen.database]\nurl = "sqlite:///app.db"\necho = true\n'
        )
        cfg = load_config(cwd=tmp_path)
        assert cfg.database.url == "sqlite:///app.db"
        assert cfg.database.echo is True

    def test_pyproject_without_table_gives_defaults(self, tmp_path: Path) -> None:
        pyproject = tmp_path / PYPROJECT_FILENAME
        pyproject.write_text('[project]\nname = "app"\n')
        assert load_config(pyproject) == CrudgenConfig()
