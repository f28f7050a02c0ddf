"""
Database diagnostics - read-only session checks against a MySQL server.

Opens a session through SQLAlchemy (pymysql driver), which performs the
connection handshake (the "ping"), then runs a fixed set of read-only
queries:
- SELECT @@port: the port the server believes it listens on
- SHOW GRANTS: privileges of the connected user
- SHOW DATABASES: schemas visible to that user

Safety requirements:
- Read-only: only SELECT/SHOW statements
- Scoped: the connection and engine are released on every path
- Per-query isolation: a failing query is recorded and the next one runs

Usage:
    from dbcontest.db import run_diagnostics

    result = run_diagnostics(config)
    if result.error:
        print(result.error.message)
    for outcome in result.outcomes:
        print(outcome.query.name, outcome.rows)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import NullPool

from dbcontest.config import ConnectionConfig, MaskStyle
from dbcontest.exceptions import (
    AuthenticationError,
    ConnectionOpenError,
    DiagnosticsError,
    DriverErrorDetail,
    QueryError,
)

logger = logging.getLogger(__name__)

DRIVERNAME = "mysql+pymysql"

EngineFactory = Callable[[URL], Engine]


class QueryKind(str, Enum):
    """How a diagnostic query's result is read."""

    SCALAR = "scalar"
    ROWS = "rows"


@dataclass(frozen=True)
class DiagnosticQuery:
    """A fixed read-only query."""

    name: str
    sql: str
    kind: QueryKind = QueryKind.ROWS


DEFAULT_QUERIES: tuple[DiagnosticQuery, ...] = (
    DiagnosticQuery("port", "SELECT @@port", QueryKind.SCALAR),
    DiagnosticQuery("grants", "SHOW GRANTS"),
    DiagnosticQuery("databases", "SHOW DATABASES"),
)


@dataclass(frozen=True)
class QueryOutcome:
    """Result of one diagnostic query: the first column of each row, or an error."""

    query: DiagnosticQuery
    rows: tuple[str, ...] = ()
    error: QueryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def scalar(self) -> str | None:
        return self.rows[0] if self.rows else None


@dataclass
class DiagnosticsResult:
    """Outcome of a diagnostics run."""

    connected: bool = False
    outcomes: list[QueryOutcome] = field(default_factory=list)
    error: DiagnosticsError | None = None

    def outcome(self, name: str) -> QueryOutcome | None:
        for outcome in self.outcomes:
            if outcome.query.name == name:
                return outcome
        return None

    @property
    def failed_queries(self) -> list[QueryOutcome]:
        return [o for o in self.outcomes if not o.ok]


def build_url(config: ConnectionConfig, password: str | None = None) -> URL:
    """
    Build the connection URL. URL.create escapes special characters in
    credentials. No default schema is selected.
    """
    return URL.create(
        drivername=DRIVERNAME,
        username=config.user,
        password=config.password if password is None else password,
        host=config.server,
        port=config.port,
    )


def render_dsn(config: ConnectionConfig, mask: MaskStyle = MaskStyle.FULL) -> str:
    """The DSN for display, with the password masked."""
    url = build_url(config, password=config.masked_password(mask))
    return url.render_as_string(hide_password=False)


def default_engine_factory(url: URL) -> Engine:
    # One-shot tool: no pooling, the connection is closed on release.
    return create_engine(url, poolclass=NullPool)


def driver_error_detail(error: BaseException) -> DriverErrorDetail | None:
    """
    Extract the driver's error code / SQLSTATE / message, if any.

    pymysql errors carry (code, message) in args; other MySQL drivers
    expose errno/sqlstate/msg attributes.
    """
    orig: object = error.orig if isinstance(error, DBAPIError) else error
    if orig is None:
        return None

    args = getattr(orig, "args", ())
    code: int | None = None
    message: str | None = None
    if args and isinstance(args[0], int):
        code = args[0]
        if len(args) > 1:
            message = str(args[1])

    if code is None:
        errno = getattr(orig, "errno", None)
        if isinstance(errno, int):
            code = errno

    sqlstate = getattr(orig, "sqlstate", None)
    if code is None and sqlstate is None:
        return None

    if message is None:
        message = getattr(orig, "msg", None) or str(orig)

    return DriverErrorDetail(code=code, sqlstate=sqlstate, message=message)


def _error_text(error: BaseException) -> str:
    # SQLAlchemy's own str() appends a background link; the driver's is enough.
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error) or error.__class__.__name__


class DiagnosticsRunner:
    """
    Runs the diagnostic queries for one config.

    The engine factory is injectable so tests can substitute an
    in-memory engine.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        engine_factory: EngineFactory | None = None,
        queries: Sequence[DiagnosticQuery] = DEFAULT_QUERIES,
    ) -> None:
        self.config = config
        self._engine_factory = engine_factory or default_engine_factory
        self.queries = tuple(queries)

    def run(self) -> DiagnosticsResult:
        """Open, ping and query. Never raises for database errors."""
        result = DiagnosticsResult()

        try:
            engine = self._engine_factory(build_url(self.config))
        except (SQLAlchemyError, ImportError) as e:
            logger.warning("Failed to open connection: %s", _error_text(e))
            result.error = ConnectionOpenError(
                f"Failed to open connection: {_error_text(e)}",
                detail=driver_error_detail(e),
                original_error=e,
            )
            return result

        try:
            try:
                conn = engine.connect()
            except SQLAlchemyError as e:
                logger.warning("Cannot connect: %s", _error_text(e))
                result.error = AuthenticationError(
                    f"Cannot connect: {_error_text(e)}",
                    detail=driver_error_detail(e),
                    original_error=e,
                )
                return result
            except UnicodeError as e:
                # Host names are IDNA-encoded by the socket layer before any
                # driver error wrapping applies.
                logger.warning("Cannot connect: %s", e)
                result.error = ConnectionOpenError(
                    f"Cannot connect: invalid host {self.config.server!r}: {e}",
                    original_error=e,
                )
                return result

            result.connected = True
            with conn:
                for query in self.queries:
                    result.outcomes.append(self._run_query(conn, query))
        finally:
            engine.dispose()

        return result

    def _run_query(self, conn: Connection, query: DiagnosticQuery) -> QueryOutcome:
        logger.debug("Running %s", query.sql)
        try:
            cursor = conn.execute(text(query.sql))
            if query.kind == QueryKind.SCALAR:
                value = cursor.scalar_one()
                rows: tuple[str, ...] = (str(value),)
            else:
                rows = tuple(str(row[0]) for row in cursor)
        except SQLAlchemyError as e:
            logger.warning("Query %s failed: %s", query.sql, _error_text(e))
            conn.rollback()
            return QueryOutcome(
                query=query,
                error=QueryError(
                    f"Query: {query.sql} failed: {_error_text(e)}",
                    sql=query.sql,
                    detail=driver_error_detail(e),
                    original_error=e,
                ),
            )
        return QueryOutcome(query=query, rows=rows)


def run_diagnostics(
    config: ConnectionConfig,
    engine_factory: EngineFactory | None = None,
    queries: Sequence[DiagnosticQuery] = DEFAULT_QUERIES,
) -> DiagnosticsResult:
    """Run the diagnostic queries against the configured server."""
    return DiagnosticsRunner(config, engine_factory=engine_factory, queries=queries).run()
