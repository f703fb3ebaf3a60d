"""Data models for the master server registry and the A2S_INFO protocol.

This module defines the ServerRecord kept for every announcing game server,
the ServerStatus decoded from a status query response, and the SweepResult
produced by one liveness sweep.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import ClassVar

logger = logging.getLogger(__name__)


def parse_address(address: str) -> tuple[str, int]:
    """Parse an address string in format 'host:port' to a (host, port) tuple."""
    if ":" not in address:
        msg = f"Invalid address format: {address}. Expected 'host:port'"
        raise ValueError(msg)

    host, port_str = address.rsplit(":", 1)
    try:
        port = int(port_str)
    except ValueError as e:
        msg = f"Invalid port in address: {address}"
        raise ValueError(msg) from e

    if port <= 0 or port > 65535:
        msg = f"Port out of range (1-65535): {port}"
        raise ValueError(msg)

    return host.strip("[]"), port


def format_address(host: str, port: int) -> str:
    """Format a (host, port) pair as the registry key."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


@dataclass(frozen=True)
class ServerStatus:
    """Descriptive fields decoded from an A2S_INFO response."""

    name: str
    map: str
    players: int = 0
    max_players: int = 0

    def __str__(self) -> str:
        """Return string representation of this status."""
        return f"{self.name} [{self.map}] {self.players}/{self.max_players}"


@dataclass
class ServerRecord:
    """A ServerRecord represents one announcing game server.

    The address is the record's identity. ``last_seen`` moves only when a
    heartbeat arrives; the descriptive fields move only when a status query
    completes.
    """

    PLACEHOLDER_NAME: ClassVar[str] = "Scanning..."

    address: str
    last_seen: datetime = field(default_factory=lambda: datetime.now(UTC))

    # Descriptive fields
    name: str = PLACEHOLDER_NAME
    map: str = ""
    players: int = 0
    max_players: int = 0

    def apply(self, status: ServerStatus) -> None:
        """Overwrite the descriptive fields from a decoded status."""
        self.name = status.name
        self.map = status.map
        self.players = status.players
        self.max_players = status.max_players

    def copy(self) -> "ServerRecord":
        """Return a detached copy of this record."""
        return replace(self)

    def to_dict(self) -> dict[str, str | int]:
        """Return a JSON-serializable mapping of this record."""
        return {
            "address": self.address,
            "name": self.name,
            "map": self.map,
            "players": self.players,
            "max_players": self.max_players,
            "last_seen": self.last_seen.isoformat(),
        }

    def __str__(self) -> str:
        """Return string representation of this record."""
        return (
            f"[ServerRecord] "
            f"Address={self.address} "
            f"Name={self.name} "
            f"Map={self.map} "
            f"Players={self.players}/{self.max_players} "
            f"LastSeen={self.last_seen.isoformat()}"
        )


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one eviction pass over the registry."""

    evicted: tuple[str, ...] = ()
    live: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        """Return True if the sweep touched any address."""
        return bool(self.evicted or self.live)
