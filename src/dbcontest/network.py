"""
Network reachability probe.

Resolves the configured host and attempts a timed TCP connect-and-close
to host:port. This only tells whether something accepts connections on
that port; it says nothing about database authentication.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass, field
from typing import Any

from dbcontest.config import ConnectionConfig
from dbcontest.exceptions import ResolutionError

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class ReachabilityResult:
    """Outcome of a TCP reachability probe."""

    host: str
    port: int
    address: str
    addresses: tuple[str, ...] = field(default_factory=tuple)
    reachable: bool = False
    source_address: str = "unknown"
    error: str | None = None

    @property
    def endpoint(self) -> str:
        return format_endpoint(self.address, self.port)

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "address": self.address,
            "addresses": list(self.addresses),
            "reachable": self.reachable,
            "source_address": self.source_address,
            "error": self.error,
        }


def is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def format_endpoint(address: str, port: int) -> str:
    """host:port, with IPv6 addresses bracketed."""
    if ":" in address:
        return f"[{address}]:{port}"
    return f"{address}:{port}"


def resolve_host(host: str) -> tuple[str, ...]:
    """
    Resolve a host to its addresses, in resolver order.

    IP literals are returned as-is without a lookup.

    Raises:
        ResolutionError: The name does not resolve.
    """
    if is_ip_literal(host):
        return (host,)

    try:
        infos = socket.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(
            f"DNS resolution failed for domain {host}: {e}", host=host
        ) from e

    addresses: list[str] = []
    for info in infos:
        address = str(info[4][0])
        if address not in addresses:
            addresses.append(address)

    if not addresses:
        raise ResolutionError(f"No addresses found for domain {host}", host=host)

    logger.debug("Resolved %s to %s", host, addresses)
    return tuple(addresses)


def probe_reachability(
    config: ConnectionConfig,
    timeout: float = PROBE_TIMEOUT_SECONDS,
) -> ReachabilityResult:
    """
    Resolve config.server and dial the first address on config.port.

    A failed dial is reported on the result, not raised.

    Raises:
        ResolutionError: The host does not resolve.
    """
    addresses = resolve_host(config.server)
    address = addresses[0]

    try:
        with socket.create_connection((address, config.port), timeout=timeout) as sock:
            local = sock.getsockname()
    except OSError as e:
        logger.warning(
            "TCP connection failed to %s: %s", format_endpoint(address, config.port), e
        )
        return ReachabilityResult(
            host=config.server,
            port=config.port,
            address=address,
            addresses=addresses,
            reachable=False,
            error=str(e) or e.__class__.__name__,
        )

    source = format_endpoint(str(local[0]), int(local[1]))
    logger.debug("Reached %s from %s", format_endpoint(address, config.port), source)
    return ReachabilityResult(
        host=config.server,
        port=config.port,
        address=address,
        addresses=addresses,
        reachable=True,
        source_address=source,
    )
