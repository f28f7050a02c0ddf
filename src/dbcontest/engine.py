"""
ConnectionProbe - orchestration layer for dbcontest.

Runs the connectivity check as a strict linear pipeline:
1. Resolve the config (file / environment, flags, prompts) and persist it
2. Resolve the host and dial host:port (optional)
3. Open a database session and run the diagnostic queries

Fatal steps end the run early and are recorded on the report:
- DNS resolution failure
- Connection open failure
- Ping / authentication failure

A failed TCP dial and failed individual queries are reported and the run
continues. Config errors (unreadable or unwritable file) propagate to the
caller.

Usage:
    from dbcontest.engine import ConnectionProbe, ProbeOptions
    from dbcontest.config import ConfigOverrides
    from dbcontest.console import RichConsoleIO

    probe = ConnectionProbe(io=RichConsoleIO())
    report = probe.run(ConfigOverrides(server="db.example.com"))
    if report.fatal_error:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dbcontest.config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ConnectionConfig,
    MaskStyle,
    load_config_from_env,
)
from dbcontest.console import ConsoleIO
from dbcontest.db.diagnostics import (
    DEFAULT_QUERIES,
    DiagnosticQuery,
    DiagnosticsResult,
    EngineFactory,
    QueryOutcome,
    render_dsn,
    run_diagnostics,
)
from dbcontest.exceptions import (
    DBContestError,
    DiagnosticsError,
    ReachabilityError,
    ResolutionError,
)
from dbcontest.network import (
    PROBE_TIMEOUT_SECONDS,
    ReachabilityResult,
    is_ip_literal,
    probe_reachability,
)
from dbcontest.resolve import resolve_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeOptions:
    """How a run is carried out (as opposed to what it connects to)."""

    config_path: Path = Path(CONFIG_FILENAME)
    use_env: bool = False
    skip_probe: bool = False
    mask: MaskStyle = MaskStyle.FULL
    timeout_seconds: float = PROBE_TIMEOUT_SECONDS


@dataclass
class ProbeReport:
    """
    Everything a run found out.

    errors holds every reported problem, fatal or not; fatal_error is the
    one that ended the run early, if any.
    """

    config: ConnectionConfig
    reachability: ReachabilityResult | None = None
    diagnostics: DiagnosticsResult | None = None
    errors: list[DBContestError] = field(default_factory=list)
    fatal_error: DBContestError | None = None

    @property
    def connected(self) -> bool:
        return self.diagnostics is not None and self.diagnostics.connected

    @property
    def has_failures(self) -> bool:
        return self.fatal_error is not None

    def to_summary_dict(self) -> dict[str, Any]:
        """Export summary as dictionary. The password is never included."""
        return {
            "server": self.config.server,
            "user": self.config.user,
            "port": self.config.port,
            "reachability": self.reachability.to_dict() if self.reachability else None,
            "connected": self.connected,
            "errors": [e.to_dict() for e in self.errors],
            "fatal": self.fatal_error.to_dict() if self.fatal_error else None,
        }


class ConnectionProbe:
    """
    Single entry point for a connectivity check.

    The CLI is a thin adapter around this class; all terminal I/O goes
    through the injected ConsoleIO.
    """

    def __init__(
        self,
        io: ConsoleIO,
        options: ProbeOptions | None = None,
        engine_factory: EngineFactory | None = None,
        queries: tuple[DiagnosticQuery, ...] = DEFAULT_QUERIES,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.io = io
        self.options = options or ProbeOptions()
        self._engine_factory = engine_factory
        self._queries = queries
        self._environ = environ

    def resolve_config(self, overrides: ConfigOverrides) -> ConnectionConfig:
        """
        Resolve the config for this run.

        With use_env, DBHOST/DBUSER/DBPASS/DBPORT are the starting point and
        nothing is written to disk.
        """
        if self.options.use_env:
            return resolve_config(
                overrides,
                path=None,
                io=self.io,
                source=load_config_from_env(self._environ),
            )
        return resolve_config(overrides, path=self.options.config_path, io=self.io)

    def run(self, overrides: ConfigOverrides) -> ProbeReport:
        """
        Run the whole pipeline.

        Raises:
            ConfigError: The config file could not be loaded or saved.
        """
        config = self.resolve_config(overrides)
        report = ProbeReport(config=config)
        self._print_config(config)

        if not self.options.skip_probe:
            try:
                report.reachability = self.check_reachability(config, report)
            except ResolutionError as e:
                self.io.echo(e.message)
                report.errors.append(e)
                report.fatal_error = e
                return report

        report.diagnostics = self.run_diagnostics(config, report)
        return report

    def check_reachability(
        self, config: ConnectionConfig, report: ProbeReport
    ) -> ReachabilityResult:
        """Resolve and dial; a failed dial is recorded as a non-fatal error."""
        result = probe_reachability(config, timeout=self.options.timeout_seconds)

        if not is_ip_literal(config.server):
            self.io.echo(
                f"Domain {config.server} resolved to IP(s): {', '.join(result.addresses)}"
            )

        if result.reachable:
            self.io.echo(f"Host reachable: {result.endpoint}", style="green")
            self.io.echo(f"Client source address: {result.source_address}")
        else:
            error = ReachabilityError(
                f"TCP connection failed to {result.endpoint}: {result.error}",
                host=result.address,
                port=result.port,
            )
            self.io.echo(error.message, style="yellow")
            report.errors.append(error)

        return result

    def run_diagnostics(
        self, config: ConnectionConfig, report: ProbeReport
    ) -> DiagnosticsResult:
        """Open the session and print each diagnostic query's result."""
        result = run_diagnostics(
            config,
            engine_factory=self._engine_factory,
            queries=self._queries,
        )

        if result.error is not None:
            self._print_connect_error(result.error)
            report.errors.append(result.error)
            report.fatal_error = result.error
            return result

        self.io.echo("Connected successfully!", style="green")
        for outcome in result.outcomes:
            self._print_outcome(config, outcome)
            if outcome.error is not None:
                report.errors.append(outcome.error)
        return result

    # ── Output ───────────────────────────────────────────────────────────

    def _print_config(self, config: ConnectionConfig) -> None:
        mask = self.options.mask
        self.io.echo(f"DBHOST: {config.server}")
        self.io.echo(f"DBUSER: {config.user}")
        self.io.echo(f"DBPASS: {config.masked_password(mask)}")
        self.io.echo(f"DBPORT: {config.port}")
        self.io.echo()
        self.io.echo(f"Database DSN: {render_dsn(config, mask)}")

    def _print_connect_error(self, error: DiagnosticsError) -> None:
        self.io.echo(error.message, style="red")
        if error.detail is None:
            return
        if error.detail.code is not None:
            self.io.echo(f"MySQL error code: {error.detail.code}")
        if error.detail.sqlstate:
            self.io.echo(f"MySQL SQLState: {error.detail.sqlstate}")
        if error.detail.message:
            self.io.echo(f"MySQL message: {error.detail.message}")

    def _print_outcome(self, config: ConnectionConfig, outcome: QueryOutcome) -> None:
        name = outcome.query.name
        self.io.echo()

        if name == "port":
            self.io.echo(f"Running {outcome.query.sql}...")
        elif name == "grants":
            self.io.echo(f"Grants for {config.user}:")
        elif name == "databases":
            self.io.echo("Printing available databases:")
        else:
            self.io.echo(f"{name}:")

        if outcome.error is not None:
            self.io.echo(outcome.error.message, style="red")
            return

        if name == "port":
            self.io.echo(f"MySQL is running on port: {outcome.scalar}")
        elif name == "grants":
            for row in outcome.rows:
                self.io.echo(row)
        else:
            for row in outcome.rows:
                self.io.echo(f" - {row}")
