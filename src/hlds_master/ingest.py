"""Heartbeat listener admitting announcing game servers into the registry."""

import asyncio
import logging
from collections.abc import Sequence

from hlds_master.protocol.models import format_address
from hlds_master.registry import ServerRegistry

logger = logging.getLogger(__name__)


def accept_heartbeat(payload: bytes, prefixes: Sequence[bytes] = ()) -> bool:
    """Check if a datagram counts as a heartbeat.

    Any non-empty payload is accepted unless prefixes are given, in which case
    the payload must start with one of them.

    Args:
        payload: Raw datagram contents
        prefixes: Accepted payload prefixes, empty to accept anything

    Returns:
        True if the sender should be admitted or touched

    """
    if not payload:
        return False
    if not prefixes:
        return True
    return any(payload.startswith(prefix) for prefix in prefixes)


class HeartbeatProtocol(asyncio.DatagramProtocol):
    """Datagram protocol touching the registry for every heartbeat received."""

    def __init__(
        self,
        registry: ServerRegistry,
        prefixes: Sequence[bytes] = (),
    ) -> None:
        """Initialize heartbeat protocol.

        Args:
            registry: Registry to admit senders into
            prefixes: Accepted payload prefixes, empty to accept anything

        """
        self._registry = registry
        self._prefixes = tuple(prefixes)
        self._transport: asyncio.DatagramTransport | None = None
        self.received = 0
        self.rejected = 0

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Store the listening transport."""
        if not isinstance(transport, asyncio.DatagramTransport):
            msg = "Expected asyncio.DatagramTransport"
            raise TypeError(msg)
        self._transport = transport

    def connection_lost(self, exc: Exception | None) -> None:
        """Forget the transport when the socket closes."""
        self._transport = None
        if exc:
            logger.warning("Heartbeat socket closed with error: %s", exc)

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        """Admit or touch the sender of a heartbeat."""
        self.received += 1
        address = format_address(addr[0], addr[1])
        if not accept_heartbeat(data, self._prefixes):
            self.rejected += 1
            logger.debug("Ignoring datagram from %s: %r", address, data[:16])
            return
        self._registry.touch(address)

    def error_received(self, exc: Exception) -> None:
        """Log socket read errors and keep listening."""
        logger.warning("Heartbeat socket error: %s", exc)


class HeartbeatListener:
    """Owns the announcement socket and its HeartbeatProtocol."""

    def __init__(
        self,
        registry: ServerRegistry,
        host: str = "0.0.0.0",  # noqa: S104
        port: int = 27010,
        prefixes: Sequence[bytes] = (),
    ) -> None:
        """Initialize heartbeat listener.

        Args:
            registry: Registry to admit senders into
            host: Interface to bind
            port: Announcement port
            prefixes: Accepted payload prefixes, empty to accept anything

        """
        self._registry = registry
        self._host = host
        self._port = port
        self._prefixes = tuple(prefixes)
        self._transport: asyncio.DatagramTransport | None = None
        self._protocol: HeartbeatProtocol | None = None

    async def start(self) -> None:
        """Bind the announcement socket.

        Raises:
            OSError: If the socket cannot be bound

        """
        if self._transport is not None:
            logger.warning("Heartbeat listener already running")
            return

        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: HeartbeatProtocol(self._registry, self._prefixes),
            local_addr=(self._host, self._port),
        )
        self._transport = transport
        self._protocol = protocol
        logger.info("Master server (UDP) listening on %s:%d", *self.local_address)

    async def stop(self) -> None:
        """Close the announcement socket."""
        if self._transport is None:
            return
        self._transport.close()
        self._transport = None
        self._protocol = None
        logger.info("Heartbeat listener stopped")

    @property
    def is_running(self) -> bool:
        """Check if the socket is bound."""
        return self._transport is not None

    @property
    def protocol(self) -> HeartbeatProtocol | None:
        """Get the active protocol instance."""
        return self._protocol

    @property
    def local_address(self) -> tuple[str, int]:
        """Get the bound (host, port), resolving an ephemeral port."""
        if self._transport is None:
            return self._host, self._port
        sockname = self._transport.get_extra_info("sockname")
        return sockname[0], sockname[1]
