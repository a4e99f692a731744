"""Tests for Settings loading."""

from pathlib import Path

import pytest

from schema_explorer.config import DEFAULT_FAN_OUT_LIMIT, Settings, default_cache_dir
from schema_explorer.errors import InvalidArgumentError


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings.load(environ={})

        assert settings.connection_string is None
        assert settings.schema_owner is None
        assert settings.fan_out_limit == DEFAULT_FAN_OUT_LIMIT
        assert settings.resolve_cache_dir() == default_cache_dir()
        assert default_cache_dir().name == "metadata"

    def test_normalization(self):
        settings = Settings(
            connection_string="  hr/secret@db:1521/ORCL ",
            schema_owner=" hr ",
            cache_dir="/tmp/snapshots",
            fan_out_limit="3",
        )

        assert settings.connection_string == "hr/secret@db:1521/ORCL"
        assert settings.schema_owner == "HR"
        assert settings.cache_dir == Path("/tmp/snapshots")
        assert settings.fan_out_limit == 3

    def test_blank_values_become_unset(self):
        settings = Settings(connection_string=" ", schema_owner="", cache_dir="")

        assert settings.connection_string is None
        assert settings.schema_owner is None
        assert settings.cache_dir is None

    @pytest.mark.parametrize("limit", [-1, "many"])
    def test_invalid_fan_out_limit(self, limit):
        with pytest.raises(InvalidArgumentError):
            Settings(fan_out_limit=limit)

    def test_precedence(self, tmp_path):
        config = tmp_path / "explorer.yaml"
        config.write_text(
            "connection_string: file/pwd@filehost:1521/ORCL\n"
            "schema_owner: file_owner\n"
            "fan_out_limit: 2\n"
            "cache_dir: /from/file\n",
            encoding="utf-8",
        )
        environ = {
            "SCHEMA_EXPLORER_SCHEMA_OWNER": "env_owner",
            "SCHEMA_EXPLORER_FAN_OUT_LIMIT": "7",
        }

        settings = Settings.load(config, environ=environ, fan_out_limit=9, schema_owner=None)

        assert settings.connection_string == "file/pwd@filehost:1521/ORCL"
        assert settings.schema_owner == "ENV_OWNER"
        assert settings.fan_out_limit == 9
        assert settings.cache_dir == Path("/from/file")

    def test_unknown_keys_ignored(self, tmp_path):
        config = tmp_path / "explorer.yaml"
        config.write_text("schema_owner: hr\ncolour: blue\n", encoding="utf-8")

        assert Settings.load(config, environ={}).schema_owner == "HR"

    def test_non_mapping_file_rejected(self, tmp_path):
        config = tmp_path / "explorer.yaml"
        config.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(InvalidArgumentError):
            Settings.load(config, environ={})

    def test_empty_file(self, tmp_path):
        config = tmp_path / "explorer.yaml"
        config.write_text("", encoding="utf-8")

        assert Settings.load(config, environ={}) == Settings()

    def test_non_text_values_from_file(self, tmp_path):
        config = tmp_path / "explorer.yaml"
        config.write_text("schema_owner: 123\nconnection_string: 42\n", encoding="utf-8")

        settings = Settings.load(config, environ={})

        assert settings.schema_owner == "123"
        assert settings.connection_string == "42"
