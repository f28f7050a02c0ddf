"""
Config resolution: persisted file, then flags, then interactive prompts.

A complete config is written back to the file it came from, so the
next run is non-interactive. An incomplete one is reported and not saved.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dbcontest.config import (
    DEFAULT_PORT,
    MAX_PORT,
    ConfigOverrides,
    ConnectionConfig,
    load_config,
    save_config,
)
from dbcontest.console import ConsoleIO

logger = logging.getLogger(__name__)


def parse_port(raw: str) -> int | None:
    """Parse a port answer. Returns None unless it is an integer in 1-65535."""
    try:
        port = int(raw.strip())
    except ValueError:
        return None
    if 0 < port <= MAX_PORT:
        return port
    return None


def _prompt_if_empty(io: ConsoleIO, label: str, current: str, secret: bool = False) -> str:
    if current:
        return current
    return io.prompt(label, secret=secret).strip()


def prompt_missing(config: ConnectionConfig, io: ConsoleIO) -> ConnectionConfig:
    """Ask for every field that is still unset."""
    if config.is_complete:
        return config

    server = _prompt_if_empty(io, "DB Host", config.server)
    user = _prompt_if_empty(io, "DB User", config.user)
    password = _prompt_if_empty(io, "DB Password", config.password, secret=True)

    port = config.port
    if not port:
        raw = io.prompt(f"DB Port (default {DEFAULT_PORT})").strip()
        parsed = parse_port(raw) if raw else None
        if parsed is None:
            if raw:
                io.echo(f"Invalid port, using default {DEFAULT_PORT}")
            port = DEFAULT_PORT
        else:
            port = parsed

    resolved = config.model_copy(
        update={"server": server, "user": user, "password": password, "port": port}
    )
    if not resolved.is_complete:
        logger.warning("Config is still incomplete after prompting")
    return resolved


def resolve_config(
    overrides: ConfigOverrides,
    path: Path | None,
    io: ConsoleIO,
    source: ConnectionConfig | None = None,
) -> ConnectionConfig:
    """
    Build the connection config for this run.

    Args:
        overrides: Values given on the command line.
        path: Config file to read from and write back to. None disables
            both (used with environment-sourced configs).
        io: Where prompts are asked and status is printed.
        source: Starting config instead of the file (e.g. from the
            environment).

    Raises:
        ConfigLoadError: The file exists but is unreadable or invalid.
        ConfigSaveError: The file could not be written.
    """
    if overrides.reconfigure:
        config = ConnectionConfig()
    elif source is not None:
        config = source
    elif path is not None:
        config = load_config(path)
    else:
        config = ConnectionConfig()

    config = overrides.apply(config)
    config = prompt_missing(config, io)

    if not config.is_complete:
        io.echo("Config is incomplete (server, user, password and port are required)")
        if path is not None:
            io.echo(f"Config not saved to {path}")
    elif path is not None:
        save_config(path, config)
        io.echo(f"Config saved to {path}")

    return config
