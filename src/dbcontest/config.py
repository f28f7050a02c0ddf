"""
Connection configuration for dbcontest.

The config is assembled from, in precedence order:
- Explicit command-line flags (ConfigOverrides)
- The persisted JSON file (dbcontest.json by default)
- Interactive prompts for whatever is still missing (see dbcontest.resolve)

The earliest form of the tool read DBHOST/DBUSER/DBPASS/DBPORT straight
from the environment; load_config_from_env() keeps that path available.

Usage:
    from dbcontest.config import ConnectionConfig, load_config, save_config

    config = load_config(Path("dbcontest.json"))  # empty if file is missing
    if not config.is_complete:
        ...
    save_config(Path("dbcontest.json"), config)
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from dbcontest.exceptions import ConfigLoadError, ConfigSaveError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "dbcontest.json"
DEFAULT_PORT = 3306
MAX_PORT = 65535


class MaskStyle(str, Enum):
    """How the password is rendered in output."""

    FULL = "full"
    PREFIX = "prefix"


class ConnectionConfig(BaseModel):
    """
    Connection parameters for a MySQL-compatible server.

    Serialized with the keys server/user/pass/port. The older "host" key
    is accepted when loading. A port of 0 means "not set".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    server: str = Field(
        default="",
        validation_alias=AliasChoices("server", "host"),
        description="Database server IP or domain",
    )
    user: str = Field(default="", description="Database user")
    password: str = Field(default="", alias="pass", description="Database password")
    port: int = Field(default=0, ge=0, le=MAX_PORT, description="Database port (0 = unset)")

    @property
    def is_complete(self) -> bool:
        """All four fields are set."""
        return bool(self.server and self.user and self.password and self.port)

    def masked_password(self, style: MaskStyle = MaskStyle.FULL) -> str:
        return mask_secret(self.password, style)

    def to_json(self) -> str:
        """Render as the on-disk JSON document (two-space indent)."""
        return json.dumps(self.model_dump(by_alias=True), indent=2) + "\n"


@dataclass(frozen=True)
class ConfigOverrides:
    """
    Values given explicitly on the command line.

    Empty strings and None mean "not given". A given value always wins
    over the persisted one.
    """

    server: str = ""
    user: str = ""
    password: str = ""
    port: int | None = None
    reconfigure: bool = False

    def apply(self, config: ConnectionConfig) -> ConnectionConfig:
        """Overlay the given values onto a config."""
        update: dict[str, Any] = {}
        if self.server:
            update["server"] = self.server
        if self.user:
            update["user"] = self.user
        if self.password:
            update["password"] = self.password
        if self.port:
            update["port"] = self.port
        if not update:
            return config
        return config.model_copy(update=update)


def mask_secret(value: str, style: MaskStyle = MaskStyle.FULL) -> str:
    """
    Mask a secret for display.

    FULL replaces every character with '*'. PREFIX keeps the first two
    characters of secrets longer than four characters and appends '***';
    shorter secrets are fully masked.
    """
    if style == MaskStyle.PREFIX and len(value) > 4:
        return value[:2] + "***"
    return "*" * len(value)


def _format_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    if loc:
        return f"{loc}: {first['msg']}"
    return first["msg"]


def load_config(path: Path) -> ConnectionConfig:
    """
    Load a config from a JSON file.

    A missing file yields an empty config. A file that exists but cannot
    be read, is not valid JSON, or holds invalid values raises
    ConfigLoadError.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Config file %s not found, starting empty", path)
        return ConnectionConfig()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Cannot read config file {path}: {e}", path=path) from e

    try:
        config = ConnectionConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigLoadError(
            f"Invalid config file {path}: {_format_validation_error(e)}",
            path=path,
        ) from e

    logger.debug("Loaded config from %s (complete=%s)", path, config.is_complete)
    return config


def save_config(path: Path, config: ConnectionConfig) -> None:
    """Write the config to a JSON file, replacing any existing one."""
    try:
        path.write_text(config.to_json(), encoding="utf-8")
    except OSError as e:
        raise ConfigSaveError(f"Cannot write config file {path}: {e}", path=path) from e
    logger.debug("Saved config to %s", path)


def _parse_env_int(value: str | None, default: int) -> int:
    """Parse integer from environment variable."""
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def load_config_from_env(environ: Mapping[str, str] | None = None) -> ConnectionConfig:
    """
    Load configuration from environment variables.

    Variables:
    - DBHOST: server address
    - DBUSER: user
    - DBPASS: password
    - DBPORT: port (ignored if not an integer in 1-65535)
    """
    env = os.environ if environ is None else environ

    port = _parse_env_int(env.get("DBPORT"), 0)
    if not 0 <= port <= MAX_PORT:
        logger.warning("Ignoring out-of-range DBPORT=%s", env.get("DBPORT"))
        port = 0

    return ConnectionConfig(
        server=env.get("DBHOST", "").strip(),
        user=env.get("DBUSER", "").strip(),
        password=env.get("DBPASS", ""),
        port=port,
    )
