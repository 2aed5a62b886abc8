"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from termlog.config import (
    TermlogConfig,
    dict_to_config,
    find_config_file,
    load_config,
    load_json_config,
    load_toml_config,
)
from termlog.errors import ConfigError


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_finds_toml_config(self, temp_dir):
        """TOML config wins over JSON."""
        (temp_dir / "termlog.toml").write_text("")
        (temp_dir / "termlog.json").write_text("{}")

        assert find_config_file(temp_dir).name == "termlog.toml"

    def test_finds_json_config(self, temp_dir):
        (temp_dir / "termlog.json").write_text("{}")

        assert find_config_file(temp_dir).name == "termlog.json"

    def test_finds_dotfile_config(self, temp_dir):
        """Dotfile configs are found."""
        (temp_dir / ".termlog.toml").write_text("")

        assert find_config_file(temp_dir).name == ".termlog.toml"

    def test_plain_name_wins_over_dotfile(self, temp_dir):
        (temp_dir / ".termlog.toml").write_text("")
        (temp_dir / "termlog.json").write_text("{}")

        assert find_config_file(temp_dir).name == "termlog.json"

    def test_returns_none_if_no_config(self, temp_dir):
        assert find_config_file(temp_dir) is None


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_defaults(self, temp_dir):
        config = dict_to_config({}, temp_dir)

        assert config.server.port == 3000
        assert config.client.api_url == "http://localhost:3000"
        assert config.client.timezone == "Europe/Istanbul"
        assert config.export.format == "markdown"
        assert config.log_level is None

    def test_all_sections(self, temp_dir):
        config = dict_to_config({
            "server": {"host": "0.0.0.0", "port": "8080", "database": "data/logs.db"},
            "client": {"api_url": "http://logs.local:8080/", "timeout": 3, "exit_delay": 0, "timezone": "UTC"},
            "export": {"output": "report.txt", "format": "text"},
            "logging": {"level": "debug"},
        }, temp_dir)

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8080
        assert config.get_database_path() == temp_dir / "data" / "logs.db"
        assert config.client.api_url == "http://logs.local:8080"
        assert config.client.timeout == 3.0
        assert config.client.exit_delay == 0.0
        assert config.client.timezone == "UTC"
        assert config.export.output == "report.txt"
        assert config.export.format == "text"
        assert config.log_level == "DEBUG"

    def test_absolute_database_path(self, temp_dir):
        db = temp_dir / "elsewhere.db"
        config = dict_to_config({"server": {"database": str(db)}}, Path("/unused"))

        assert config.get_database_path() == db

    def test_bad_port(self, temp_dir):
        with pytest.raises(ConfigError):
            dict_to_config({"server": {"port": "eighty"}}, temp_dir)

    def test_unknown_export_format(self, temp_dir):
        with pytest.raises(ConfigError, match="Unsupported export format"):
            dict_to_config({"export": {"format": "pdf"}}, temp_dir)

    def test_negative_exit_delay(self, temp_dir):
        with pytest.raises(ConfigError):
            dict_to_config({"client": {"exit_delay": -1}}, temp_dir)


class TestLoaders:

    def test_load_toml(self, temp_dir):
        path = temp_dir / "termlog.toml"
        path.write_text('[server]\nport = 4000\n\n[client]\ntimezone = "UTC"\n')

        data = load_toml_config(path)
        assert data == {"server": {"port": 4000}, "client": {"timezone": "UTC"}}

    def test_load_json(self, temp_dir):
        path = temp_dir / "termlog.json"
        path.write_text(json.dumps({"export": {"format": "text"}}))

        assert load_json_config(path) == {"export": {"format": "text"}}


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file_gives_defaults(self, temp_dir):
        config = load_config(temp_dir)

        assert isinstance(config, TermlogConfig)
        assert config.base_dir == temp_dir
        assert config.get_database_path() == temp_dir / "logs.db"

    def test_discovers_file(self, temp_dir):
        (temp_dir / "termlog.toml").write_text("[server]\nport = 5000\n")

        assert load_config(temp_dir).server.port == 5000

    def test_explicit_path_sets_base_dir(self, temp_dir):
        nested = temp_dir / "conf"
        nested.mkdir()
        path = nested / "custom.json"
        path.write_text(json.dumps({"server": {"database": "x.db"}}))

        config = load_config(temp_dir, config_path=path)

        assert config.get_database_path() == nested.resolve() / "x.db"

    def test_unsupported_suffix(self, temp_dir):
        path = temp_dir / "termlog.yaml"
        path.write_text("server: {}")

        with pytest.raises(ConfigError, match="Unsupported config file type"):
            load_config(config_path=path)

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(config_path=temp_dir / "absent.toml")

    def test_malformed_toml(self, temp_dir):
        (temp_dir / "termlog.toml").write_text("[server\nport = ")

        with pytest.raises(ConfigError):
            load_config(temp_dir)

    def test_malformed_json(self, temp_dir):
        (temp_dir / "termlog.json").write_text("{not json")

        with pytest.raises(ConfigError):
            load_config(temp_dir)
