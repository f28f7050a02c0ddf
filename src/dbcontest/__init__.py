"""dbcontest - MySQL connectivity checker and diagnostics CLI."""

__version__ = "0.3.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from dbcontest.exceptions import (
    DBContestError,
    ConfigError,
    ConfigLoadError,
    ConfigSaveError,
    ProbeError,
    ResolutionError,
    ReachabilityError,
    DiagnosticsError,
    ConnectionOpenError,
    AuthenticationError,
    QueryError,
    DriverErrorDetail,
)

from dbcontest.config import (
    CONFIG_FILENAME,
    DEFAULT_PORT,
    ConfigOverrides,
    ConnectionConfig,
    MaskStyle,
    load_config,
    load_config_from_env,
    mask_secret,
    save_config,
)
from dbcontest.console import ConsoleIO, RichConsoleIO
from dbcontest.db import DiagnosticsResult, run_diagnostics
from dbcontest.engine import ConnectionProbe, ProbeOptions, ProbeReport
from dbcontest.network import ReachabilityResult, probe_reachability, resolve_host
from dbcontest.resolve import resolve_config

__all__ = [
    # Exception hierarchy
    "DBContestError",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSaveError",
    "ProbeError",
    "ResolutionError",
    "ReachabilityError",
    "DiagnosticsError",
    "ConnectionOpenError",
    "AuthenticationError",
    "QueryError",
    "DriverErrorDetail",
    # Configuration
    "CONFIG_FILENAME",
    "DEFAULT_PORT",
    "ConfigOverrides",
    "ConnectionConfig",
    "MaskStyle",
    "load_config",
    "load_config_from_env",
    "mask_secret",
    "save_config",
    "resolve_config",
    # I/O
    "ConsoleIO",
    "RichConsoleIO",
    # Probe steps
    "ReachabilityResult",
    "probe_reachability",
    "resolve_host",
    "DiagnosticsResult",
    "run_diagnostics",
    # Orchestration
    "ConnectionProbe",
    "ProbeOptions",
    "ProbeReport",
    # Metadata
    "__version__",
    "__license__",
]
