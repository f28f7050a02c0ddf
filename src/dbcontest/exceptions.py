"""
Package-level exception hierarchy for dbcontest.

All exceptions inherit from DBContestError, enabling:
- Catching all dbcontest errors with a single except clause
- Context fields for reporting (path, host, port, driver detail)
- Structured serialization via to_dict()

Hierarchy:
    DBContestError
    ├── ConfigError            – Config file could not be read or written
    │   ├── ConfigLoadError    – Unreadable file or invalid JSON / values
    │   └── ConfigSaveError    – File could not be created or overwritten
    ├── ProbeError             – Network reachability checks
    │   ├── ResolutionError    – Host name could not be resolved
    │   └── ReachabilityError  – TCP dial to host:port failed
    └── DiagnosticsError       – Database session and diagnostic queries
        ├── ConnectionOpenError – Engine / connection could not be created
        ├── AuthenticationError – Ping (connect + handshake) was rejected
        └── QueryError          – A single diagnostic query failed
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class DBContestError(Exception):
    """
    Base exception for all dbcontest errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Configuration Errors ─────────────────────────────────────────────────


class ConfigError(DBContestError):
    """
    Error reading or writing the connection config file.

    Attributes:
        path: The config file involved.
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = str(path) if path is not None else None
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["path"] = self.path
        return result


class ConfigLoadError(ConfigError):
    """Config file exists but could not be read or parsed."""
    pass


class ConfigSaveError(ConfigError):
    """Config file could not be created or overwritten."""
    pass


# ── Probe Errors ─────────────────────────────────────────────────────────


class ProbeError(DBContestError):
    """Errors from the network reachability probe."""
    pass


class ResolutionError(ProbeError):
    """
    Host name could not be resolved to an address.

    Attributes:
        host: The name that failed to resolve.
    """

    def __init__(self, message: str, host: str) -> None:
        self.host = host
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["host"] = self.host
        return result


class ReachabilityError(ProbeError):
    """
    TCP connection to host:port failed.

    Attributes:
        host: Address that was dialed.
        port: Port that was dialed.
    """

    def __init__(self, message: str, host: str, port: int) -> None:
        self.host = host
        self.port = port
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["host"] = self.host
        result["port"] = self.port
        return result


# ── Diagnostics Errors ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DriverErrorDetail:
    """
    Driver-specific error payload, decoupled from any driver's types.

    MySQL drivers report a numeric error code (e.g. 1045 access denied)
    and, depending on the driver, a five-character SQLSTATE.
    """

    code: int | None = None
    sqlstate: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "sqlstate": self.sqlstate,
            "message": self.message,
        }


class DiagnosticsError(DBContestError):
    """
    Errors while opening the database session or running diagnostics.

    Attributes:
        detail: Structured driver error, when the driver provided one.
        original_error: The underlying exception.
    """

    def __init__(
        self,
        message: str,
        detail: DriverErrorDetail | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.detail = detail
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["detail"] = self.detail.to_dict() if self.detail else None
        if self.original_error is not None:
            result["original_error_type"] = self.original_error.__class__.__name__
        return result


class ConnectionOpenError(DiagnosticsError):
    """The engine or connection object could not be created."""
    pass


class AuthenticationError(DiagnosticsError):
    """The server rejected the connection (ping failed)."""
    pass


class QueryError(DiagnosticsError):
    """
    A single diagnostic query failed.

    Attributes:
        sql: The statement that failed.
    """

    def __init__(
        self,
        message: str,
        sql: str,
        detail: DriverErrorDetail | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.sql = sql
        super().__init__(message, detail=detail, original_error=original_error)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["sql"] = self.sql
        return result
