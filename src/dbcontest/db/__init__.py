"""
Database diagnostics module.

Opens a read-only session against the configured server and runs the
fixed diagnostic queries:
- Server port (SELECT @@port)
- Grants of the connected user
- Visible databases
"""

from dbcontest.db.diagnostics import (
    DEFAULT_QUERIES,
    DiagnosticQuery,
    DiagnosticsResult,
    DiagnosticsRunner,
    QueryKind,
    QueryOutcome,
    build_url,
    driver_error_detail,
    render_dsn,
    run_diagnostics,
)

__all__ = [
    "DEFAULT_QUERIES",
    "DiagnosticQuery",
    "DiagnosticsResult",
    "DiagnosticsRunner",
    "QueryKind",
    "QueryOutcome",
    "build_url",
    "driver_error_detail",
    "render_dsn",
    "run_diagnostics",
]
