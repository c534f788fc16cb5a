"""Tests for loading retailpos.ini."""

from pathlib import Path

import pytest

from retailpos.infrastructure.config import (
    CONFIG_ENV_VAR,
    ConfigurationError,
    DatabaseSettings,
    find_config_file,
    read_settings,
)


def _write_config(directory: Path, body: str) -> Path:
    path = directory / "retailpos.ini"
    path.write_text(body, encoding="utf-8")
    return path


class TestFindConfigFile:

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.ini"))
        explicit = tmp_path / "explicit.ini"
        assert find_config_file(explicit) == explicit

    def test_environment_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.ini"))
        assert find_config_file() == tmp_path / "env.ini"

    def test_searches_parent_directories(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = _write_config(tmp_path, "[database]\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(start=nested) == config.resolve()


class TestReadSettings:

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = read_settings(None)
        assert settings.pool_initial_size == 2
        assert settings.pool_max_size == 10
        assert settings.url == f"sqlite:///{(tmp_path / 'data' / 'retailpos.db').resolve()}"

    def test_reads_database_section(self, tmp_path):
        config = _write_config(
            tmp_path,
            "[database]\n"
            "url = sqlite:///store/pos.db\n"
            "username = till\n"
            "password = secret\n"
            "pool_initial_size = 1\n"
            "pool_max_size = 3\n",
        )
        settings = read_settings(config)
        assert settings == DatabaseSettings(
            url=f"sqlite:///{(tmp_path / 'store' / 'pos.db').resolve()}",
            username="till",
            password="secret",
            pool_initial_size=1,
            pool_max_size=3,
        )

    def test_memory_database_kept_as_is(self, tmp_path):
        config = _write_config(tmp_path, "[database]\nurl = sqlite:///:memory:\n")
        assert read_settings(config).url == "sqlite:///:memory:"

    def test_missing_section_uses_defaults(self, tmp_path):
        config = _write_config(tmp_path, "[other]\nkey = value\n")
        assert read_settings(config).pool_max_size == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            read_settings(tmp_path / "absent.ini")

    @pytest.mark.parametrize(
        "body, message",
        [
            ("pool_max_size = many\n", "must be an integer"),
            ("pool_max_size = 0\n", "at least 1"),
            ("pool_initial_size = 5\npool_max_size = 2\n", "between 0 and pool_max_size"),
            ("url = postgres://db/pos\n", "sqlite:///"),
        ],
    )
    def test_invalid_values_rejected(self, tmp_path, body, message):
        config = _write_config(tmp_path, "[database]\n" + body)
        with pytest.raises(ConfigurationError, match=message):
            read_settings(config)

    def test_unparseable_file(self, tmp_path):
        config = _write_config(tmp_path, "no section header\n")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            read_settings(config)
