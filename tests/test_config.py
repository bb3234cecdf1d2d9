"""
Tests for configuration loading — assetinfo.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from assetinfo.core.config.loader import (
    CONFIG_ENV,
    ConfigError,
    find_config_file,
    load_config,
)


@pytest.fixture
def valid_config_yml(tmp_path: Path) -> Path:
    """Create a valid assetinfo.yml in a temp directory."""
    content = textwrap.dedent("""\
        database_folder: db
        update_url: "https://db.example.org/latest"
        log_level: info
        endoflife_base_url: "http://eol.internal/api"
        command_timeout: 10
        http_timeout: 5
        hash_databases:
          - hashes/linux.json
          - /srv/hashes/extra.json
        hash_database_url: "https://hashes.example.org/v1"
    """)
    path = tmp_path / "assetinfo.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_valid_config(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.update_url == "https://db.example.org/latest"
        assert config.log_level == "info"
        assert config.endoflife_base_url == "http://eol.internal/api"
        assert config.command_timeout == 10
        assert config.http_timeout == 5
        assert config.hash_database_url == "https://hashes.example.org/v1"

    def test_relative_paths_anchor_at_config_dir(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        base = valid_config_yml.parent.resolve()
        assert config.database_folder == base / "db"
        assert config.hash_databases == [
            base / "hashes" / "linux.json",
            Path("/srv/hashes/extra.json"),
        ]

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "assetinfo.yml"
        path.write_text("")
        config = load_config(path)
        assert config.database_folder == tmp_path.resolve() / "database"
        assert config.update_url == ""
        assert config.endoflife_base_url == "https://endoflife.date/api"
        assert config.command_timeout == 30

    def test_json_config(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text('{"database_folder": "/var/lib/assetinfo"}')
        assert load_config(path).database_folder == Path("/var/lib/assetinfo")

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nonexistent.yml")

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = tmp_path / "assetinfo.yml"
        path.write_text(":: invalid: yaml: [")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "assetinfo.yml"
        path.write_text("- just\n- a\n- list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_invalid_value_raises(self, tmp_path: Path):
        path = tmp_path / "assetinfo.yml"
        path.write_text("command_timeout: 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_env_var(self, valid_config_yml: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(CONFIG_ENV, str(valid_config_yml))
        assert load_config().update_url == "https://db.example.org/latest"

    def test_auto_search(self, valid_config_yml: Path, monkeypatch: pytest.MonkeyPatch):
        subdir = valid_config_yml.parent / "a" / "b"
        subdir.mkdir(parents=True)
        monkeypatch.chdir(subdir)
        assert load_config().command_timeout == 10

    def test_no_file_anywhere(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Without any assetinfo.yml, defaults relative to the cwd apply."""
        isolated = tmp_path / "isolated"
        isolated.mkdir()
        monkeypatch.chdir(isolated)
        monkeypatch.setattr("assetinfo.core.config.loader.find_config_file", lambda: None)
        config = load_config()
        assert config.database_folder == isolated.resolve() / "database"
        assert config.hash_databases == []


class TestFindConfigFile:
    """Tests for find_config_file()."""

    def test_find_in_current_dir(self, tmp_path: Path):
        (tmp_path / "assetinfo.yml").write_text("update_url: x\n")
        result = find_config_file(tmp_path)
        assert result is not None
        assert result.name == "assetinfo.yml"

    def test_find_in_parent_dir(self, tmp_path: Path):
        (tmp_path / "assetinfo.yml").write_text("update_url: x\n")
        subdir = tmp_path / "src" / "core"
        subdir.mkdir(parents=True)
        result = find_config_file(subdir)
        assert result is not None
        assert result.parent == tmp_path.resolve()

    def test_not_found_returns_none(self, tmp_path: Path):
        subdir = tmp_path / "deep" / "nested"
        subdir.mkdir(parents=True)
        assert find_config_file(subdir) is None
