"""Shared fixtures for dbcontest tests."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from pathlib import Path

import pytest

from dbcontest.config import ConnectionConfig


class ScriptedIO:
    """ConsoleIO fake: answers prompts from a script and records output."""

    def __init__(self, answers: list[str] | None = None) -> None:
        self.answers = list(answers or [])
        self.prompts: list[str] = []
        self.lines: list[str] = []

    def echo(self, message: str = "", style: str | None = None) -> None:
        self.lines.append(message)

    def prompt(self, label: str, secret: bool = False) -> str:
        self.prompts.append(label)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {label}")
        return self.answers.pop(0)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


@pytest.fixture
def scripted_io() -> ScriptedIO:
    return ScriptedIO()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "dbcontest.json"


@pytest.fixture
def complete_config() -> ConnectionConfig:
    return ConnectionConfig(
        server="127.0.0.1",
        user="app",
        password="s3cr3t-pass",
        port=3306,
    )


@pytest.fixture
def listening_port() -> Iterator[int]:
    """A local TCP port that accepts connections."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port() -> int:
    """A local TCP port with nothing listening on it."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


@pytest.fixture
def make_io() -> type[ScriptedIO]:
    """Factory for ScriptedIO with canned answers."""
    return ScriptedIO
