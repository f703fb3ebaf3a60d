"""Master server composing the registry, heartbeat listener, sweeper and status page.

This module provides the MasterServer class, which is the primary interface for
running a game-server master: it owns one ServerRegistry and injects it into
every component that reads or writes it.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from hlds_master.ingest import HeartbeatListener
from hlds_master.protocol.models import ServerRecord
from hlds_master.query import StatusQueryClient
from hlds_master.registry import ServerRegistry
from hlds_master.sweeper import Sweeper
from hlds_master.web import StatusPage

logger = logging.getLogger(__name__)


@dataclass
class MasterServerOptions:
    """Configuration options for MasterServer."""

    host: str = "0.0.0.0"  # noqa: S104
    """Interface for the heartbeat socket."""
    port: int = 27010
    """UDP port game servers send heartbeats to."""
    web_host: str = "0.0.0.0"  # noqa: S104
    """Interface for the status page."""
    web_port: int = 8080
    """TCP port for the status page."""
    enable_web: bool = True
    """Serve the HTTP status page."""
    sweep_interval: float = 30.0
    """Seconds between liveness sweeps."""
    stale_threshold: float = 300.0
    """Seconds without a heartbeat before a server is evicted."""
    dial_timeout: float = 3.0
    """Timeout in seconds for opening a status query endpoint."""
    read_timeout: float = 2.0
    """Timeout in seconds for a status query reply."""
    max_concurrent_queries: int = 64
    """Maximum status queries in flight at once."""
    heartbeat_prefixes: tuple[bytes, ...] = ()
    """Accepted heartbeat payload prefixes; empty accepts any non-empty datagram."""

    def __post_init__(self) -> None:
        """Validate option values."""
        for name in ("sweep_interval", "stale_threshold", "dial_timeout", "read_timeout"):
            if getattr(self, name) <= 0:
                msg = f"{name} must be positive, got {getattr(self, name)}"
                raise ValueError(msg)

        if self.max_concurrent_queries < 1:
            msg = f"max_concurrent_queries must be at least 1, got {self.max_concurrent_queries}"
            raise ValueError(msg)

        for name in ("port", "web_port"):
            value = getattr(self, name)
            if value < 0 or value > 65535:
                msg = f"Port out of range (0-65535): {name}={value}"
                raise ValueError(msg)

        self.heartbeat_prefixes = tuple(self.heartbeat_prefixes)


class MasterServer:
    """Game-server master: heartbeat admission, liveness sweeps and status queries."""

    def __init__(
        self,
        options: MasterServerOptions | None = None,
        registry: ServerRegistry | None = None,
    ) -> None:
        """Initialize master server.

        Args:
            options: Configuration options for the server
            registry: Registry to use, a new empty one if None

        """
        self._options = options or MasterServerOptions()
        self._registry = registry if registry is not None else ServerRegistry()

        # Core components
        self._listener = HeartbeatListener(
            self._registry,
            host=self._options.host,
            port=self._options.port,
            prefixes=self._options.heartbeat_prefixes,
        )
        self._query_client = StatusQueryClient(
            self._registry,
            dial_timeout=self._options.dial_timeout,
            read_timeout=self._options.read_timeout,
        )
        self._sweeper = Sweeper(
            self._registry,
            self._query_client.refresh,
            interval=self._options.sweep_interval,
            stale_threshold=timedelta(seconds=self._options.stale_threshold),
            max_concurrent_queries=self._options.max_concurrent_queries,
        )
        self._status_page: StatusPage | None = None
        if self._options.enable_web:
            self._status_page = StatusPage(
                self._registry,
                host=self._options.web_host,
                port=self._options.web_port,
            )

        self._running = False

    async def start(self) -> None:
        """Start the master server.

        Raises:
            OSError: If the heartbeat socket or the status page cannot be bound

        """
        if self._running:
            logger.warning("Master server already running")
            return

        logger.info("Starting master server")
        await self._listener.start()
        try:
            if self._status_page is not None:
                await self._status_page.start()
        except OSError:
            await self._listener.stop()
            raise

        await self._sweeper.start()
        self._running = True

    async def stop(self) -> None:
        """Stop the master server."""
        if not self._running:
            return

        logger.info("Stopping master server")
        self._running = False

        await self._sweeper.stop()
        await self._listener.stop()
        if self._status_page is not None:
            await self._status_page.stop()
        logger.info("Master server stopped")

    def snapshot(self) -> list[ServerRecord]:
        """Get the current server list, most recently seen first."""
        return self._registry.snapshot()

    @property
    def registry(self) -> ServerRegistry:
        """The server registry."""
        return self._registry

    @property
    def listener(self) -> HeartbeatListener:
        """The heartbeat listener."""
        return self._listener

    @property
    def sweeper(self) -> Sweeper:
        """The liveness sweeper."""
        return self._sweeper

    @property
    def query_client(self) -> StatusQueryClient:
        """The status query client."""
        return self._query_client

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def server_count(self) -> int:
        """Get number of registered servers."""
        return self._registry.count

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"MasterServer("
            f"port={self._options.port}, "
            f"running={self._running}, "
            f"servers={self._registry.count})"
        )
