"""
Tests for config resolution: file, flags, prompts and persistence.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dbcontest.config import ConfigOverrides, ConnectionConfig, save_config
from dbcontest.exceptions import ConfigLoadError
from dbcontest.resolve import parse_port, prompt_missing, resolve_config


def read_json(path: Path) -> dict:
    return json.loads(path.read_text())


class TestParsePort:
    """Tests for port answers."""

    @pytest.mark.parametrize("raw,expected", [
        ("3306", 3306),
        (" 3307 ", 3307),
        ("65535", 65535),
        ("", None),
        ("abc", None),
        ("0", None),
        ("65536", None),
    ])
    def test_parse(self, raw: str, expected: int | None) -> None:
        assert parse_port(raw) == expected


class TestPromptMissing:
    """Tests for interactive prompting."""

    def test_complete_config_asks_nothing(self, make_io, complete_config) -> None:
        io = make_io()
        assert prompt_missing(complete_config, io) is complete_config
        assert io.prompts == []

    def test_prompts_in_order_and_trims(self, make_io) -> None:
        io = make_io(["  db.local \n", " root", " pw ", "3310"])

        config = prompt_missing(ConnectionConfig(), io)

        assert io.prompts == ["DB Host", "DB User", "DB Password", "DB Port (default 3306)"]
        assert config == ConnectionConfig(server="db.local", user="root", password="pw", port=3310)

    def test_only_missing_fields_are_prompted(self, make_io) -> None:
        io = make_io(["pw"])
        config = prompt_missing(ConnectionConfig(server="db", user="root", port=3306), io)

        assert io.prompts == ["DB Password"]
        assert config.password == "pw"

    def test_blank_port_defaults_to_3306(self, make_io) -> None:
        io = make_io([""])
        config = prompt_missing(ConnectionConfig(server="db", user="u", password="p"), io)

        assert config.port == 3306
        assert io.lines == []

    def test_unparsable_port_defaults_to_3306(self, make_io) -> None:
        io = make_io(["mysql"])
        config = prompt_missing(ConnectionConfig(server="db", user="u", password="p"), io)

        assert config.port == 3306
        assert "Invalid port, using default 3306" in io.lines


class TestResolveConfig:
    """Tests for resolve_config."""

    def test_flags_only_creates_file_without_prompting(self, make_io, config_path) -> None:
        io = make_io()
        overrides = ConfigOverrides(server="10.0.0.5", user="app", password="pw", port=3307)

        config = resolve_config(overrides, config_path, io)

        assert io.prompts == []
        assert read_json(config_path) == {
            "server": "10.0.0.5",
            "user": "app",
            "pass": "pw",
            "port": 3307,
        }
        assert config.is_complete

    def test_complete_file_used_verbatim(self, make_io, config_path, complete_config) -> None:
        save_config(config_path, complete_config)
        io = make_io()

        config = resolve_config(ConfigOverrides(), config_path, io)

        assert config == complete_config
        assert io.prompts == []

    def test_flag_overrides_persisted_value(self, make_io, config_path, complete_config) -> None:
        save_config(config_path, complete_config)

        config = resolve_config(
            ConfigOverrides(server="db.other", user="admin"), config_path, make_io()
        )

        assert config.server == "db.other"
        assert config.user == "admin"
        assert read_json(config_path)["server"] == "db.other"
        assert read_json(config_path)["pass"] == "s3cr3t-pass"

    def test_reconfigure_prompts_for_everything(
        self, make_io, config_path, complete_config
    ) -> None:
        save_config(config_path, complete_config)
        io = make_io(["new-host", "new-user", "new-pass", "3308"])

        config = resolve_config(ConfigOverrides(reconfigure=True), config_path, io)

        assert len(io.prompts) == 4
        assert config == ConnectionConfig(
            server="new-host", user="new-user", password="new-pass", port=3308
        )
        assert read_json(config_path)["server"] == "new-host"

    def test_reconfigure_keeps_explicit_flags(self, make_io, config_path, complete_config) -> None:
        save_config(config_path, complete_config)
        io = make_io(["new-user", "new-pass", ""])

        config = resolve_config(
            ConfigOverrides(server="flag-host", reconfigure=True), config_path, io
        )

        assert "DB Host" not in io.prompts
        assert config.server == "flag-host"
        assert config.port == 3306

    def test_invalid_file_raises(self, make_io, config_path) -> None:
        config_path.write_text("not json at all")

        with pytest.raises(ConfigLoadError):
            resolve_config(ConfigOverrides(), config_path, make_io())

    def test_reports_saved_path(self, make_io, config_path) -> None:
        io = make_io()
        resolve_config(
            ConfigOverrides(server="h", user="u", password="p", port=1), config_path, io
        )
        assert io.lines == [f"Config saved to {config_path}"]

    def test_source_without_path_is_not_persisted(self, make_io, tmp_path) -> None:
        io = make_io(["pw"])
        source = ConnectionConfig(server="envhost", user="envuser", port=3306)

        config = resolve_config(ConfigOverrides(), None, io, source=source)

        assert config.password == "pw"
        assert list(tmp_path.iterdir()) == []

    def test_incomplete_config_is_not_saved(self, make_io, config_path) -> None:
        # Prompt answers are empty when input ends early
        io = make_io(["db.local", "", "", ""])

        config = resolve_config(ConfigOverrides(), config_path, io)

        assert not config.is_complete
        assert config.port == 3306
        assert not config_path.exists()
        assert any(line.startswith("Config is incomplete") for line in io.lines)
        assert f"Config not saved to {config_path}" in io.lines
