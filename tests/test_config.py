"""Tests for configuration loading and validation."""

import os

import pytest

from usage_tree.config import DEFAULT_CONFIG, TreeConfig, load_config
from usage_tree.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep home/project config files and USAGE_TREE_* variables out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("USAGE_TREE_"):
            monkeypatch.delenv(key)


class TestTreeConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.chunk_size == 1000
        assert DEFAULT_CONFIG.delimiters == (".", "$")
        assert DEFAULT_CONFIG.constructor_name == "<init>"
        assert DEFAULT_CONFIG.db_path.name == "tree.db"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"chunk_size": 0},
            {"delimiters": ()},
            {"delimiters": ("..",)},
            {"delimiters": ("(",)},
            {"constructor_name": ""},
            {"verbosity": "loud"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            TreeConfig(**kwargs)


class TestLoadConfig:
    def test_no_sources_gives_defaults(self):
        assert load_config() == DEFAULT_CONFIG

    def test_project_file(self, tmp_path):
        (tmp_path / "usage-tree.toml").write_text("chunk_size = 250\n")
        assert load_config().chunk_size == 250

    def test_section_table_and_delimiter_string(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('[usage-tree]\ndelimiters = "./"\nskip_invalid_signatures = true\n')
        config = load_config(config_file=path)
        assert config.delimiters == (".", "/")
        assert config.skip_invalid_signatures is True

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "usage-tree.toml").write_text("chunk_size = 250\n")
        monkeypatch.setenv("USAGE_TREE_CHUNK_SIZE", "10")
        monkeypatch.setenv("USAGE_TREE_SKIP_INVALID_SIGNATURES", "yes")
        config = load_config()
        assert config.chunk_size == 10
        assert config.skip_invalid_signatures is True

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("USAGE_TREE_DB_DIR", "/from/env")
        assert load_config(db_dir=None).db_dir == "/from/env"
        assert load_config(db_dir="/from/cli").db_dir == "/from/cli"

    def test_verbose_and_quiet_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False).verbosity == "normal"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(config_file=tmp_path / "nope.toml")

    def test_unknown_key(self, tmp_path):
        (tmp_path / "usage-tree.toml").write_text("pagerank_damping = 0.5\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("USAGE_TREE_CHUNK_SIZE", "many")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_invalid_toml(self, tmp_path):
        (tmp_path / "usage-tree.toml").write_text("chunk_size = = 3\n")
        with pytest.raises(ConfigurationError):
            load_config()
