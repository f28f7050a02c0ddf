"""
dbcontest CLI - MySQL connectivity checker.

On first run asks for connection data and saves it to dbcontest.json;
later runs reuse it.

Usage:
    dbcontest
    dbcontest --server db.example.com --user app --port 3306
    dbcontest --reconfigure
    dbcontest --env --skip-probe
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from dbcontest import __version__
from dbcontest.config import CONFIG_FILENAME, ConfigOverrides, MaskStyle
from dbcontest.console import RichConsoleIO
from dbcontest.engine import ConnectionProbe, ProbeOptions
from dbcontest.exceptions import ConfigError

app = typer.Typer(
    name="dbcontest",
    help="App to test sql connection. On first run asks connection data and saves it.",
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dbcontest version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route package logs to stderr; debug tracing only with --verbose."""
    handler = RichHandler(console=error_console, show_time=False, show_path=False)
    package_logger = logging.getLogger("dbcontest")
    package_logger.handlers[:] = [handler]
    package_logger.propagate = False
    package_logger.setLevel(logging.DEBUG if verbose else logging.ERROR)


@app.command()
def main(
    server: Annotated[
        str,
        typer.Option("--server", "-s", help="Database server IP/Domain"),
    ] = "",
    user: Annotated[
        str,
        typer.Option("--user", "-u", help="Database user"),
    ] = "",
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", min=1, max=65535, help="Database port"),
    ] = None,
    password: Annotated[
        str,
        typer.Option(
            "--password",
            help="Database password (prompted without echo when omitted)",
        ),
    ] = "",
    reconfigure: Annotated[
        bool,
        typer.Option("--reconfigure", "-r", help="Prompt for config values again"),
    ] = False,
    config_file: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path of the saved connection config"),
    ] = Path(CONFIG_FILENAME),
    use_env: Annotated[
        bool,
        typer.Option(
            "--env",
            help="Read DBHOST/DBUSER/DBPASS/DBPORT instead of the config file",
        ),
    ] = False,
    skip_probe: Annotated[
        bool,
        typer.Option("--skip-probe", help="Skip DNS resolution and the TCP check"),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Exit non-zero when DNS, connect or ping fails",
        ),
    ] = False,
    mask: Annotated[
        MaskStyle,
        typer.Option("--mask", help="How the password is shown in output"),
    ] = MaskStyle.FULL,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Log each step to stderr"),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Check that a MySQL server is reachable and print basic diagnostics.

    Values given as options override the saved config; anything still
    missing is asked for interactively. The result is saved back to the
    config file (not with --env).

    Examples:

        $ dbcontest -s 10.0.0.5 -u app
        $ dbcontest --reconfigure
        $ DBHOST=db DBUSER=app DBPASS=secret dbcontest --env
    """
    configure_logging(verbose)

    overrides = ConfigOverrides(
        server=server.strip(),
        user=user.strip(),
        password=password,
        port=port,
        reconfigure=reconfigure,
    )
    options = ProbeOptions(
        config_path=config_file,
        use_env=use_env,
        skip_probe=skip_probe,
        mask=mask,
    )
    probe = ConnectionProbe(io=RichConsoleIO(console), options=options)

    try:
        report = probe.run(overrides)
    except ConfigError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}", soft_wrap=True)
        raise typer.Exit(code=1)

    if strict and report.has_failures:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
