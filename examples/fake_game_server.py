#!/usr/bin/env python3
"""Fake game server for trying out the master server locally.

This script announces itself to a master server with periodic heartbeats and
answers A2S_INFO status queries with a canned response, so the status page
fills in a name, map and player count.
"""

import asyncio
import logging
import random
import signal
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hlds_master.protocol.decoder import PACKET_MAGIC, encode_info_request

logger = logging.getLogger(__name__)

MASTER_ADDRESS = ("127.0.0.1", 27010)
HEARTBEAT_INTERVAL = 20.0


def build_info_response(name: str, map_name: str, players: int, max_players: int) -> bytes:
    """Build an A2S_INFO reply the way a GoldSrc server would."""
    return (
        PACKET_MAGIC
        + b"I\x30"
        + name.encode() + b"\x00"
        + map_name.encode() + b"\x00"
        + b"cstrike\x00"
        + b"Counter-Strike\x00"
        + b"\x0a\x00"
        + bytes([players, max_players])
    )


class FakeServerProtocol(asyncio.DatagramProtocol):
    """Answers status queries arriving on the game server's socket."""

    def __init__(self, name: str, map_name: str) -> None:
        """Initialize with the advertised name and map."""
        self.name = name
        self.map_name = map_name
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Store the transport."""
        if isinstance(transport, asyncio.DatagramTransport):
            self.transport = transport

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        """Reply to A2S_INFO requests."""
        if data != encode_info_request() or self.transport is None:
            return
        players = random.randint(0, 32)  # noqa: S311
        self.transport.sendto(build_info_response(self.name, self.map_name, players, 32), addr)
        logger.info("Answered status query from %s:%d", *addr)


async def main() -> None:
    """Run the fake game server until interrupted."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        lambda: FakeServerProtocol("Fake Server", "de_dust2"),
        local_addr=("127.0.0.1", 0),
    )
    logger.info("Fake game server on %s:%d", *transport.get_extra_info("sockname")[:2])

    shutdown_event = asyncio.Event()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_event.set)

    try:
        while not shutdown_event.is_set():
            transport.sendto(b"q", MASTER_ADDRESS)
            logger.info("Heartbeat sent to %s:%d", *MASTER_ADDRESS)
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=HEARTBEAT_INTERVAL)
            except TimeoutError:
                pass
    finally:
        transport.close()


if __name__ == "__main__":
    asyncio.run(main())
