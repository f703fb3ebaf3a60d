"""Status query client for A2S_INFO requests.

Each query opens its own UDP endpoint, sends one request, waits for one reply
and closes the endpoint. Transport and decode failures abandon the query and
leave the registry untouched.
"""

import asyncio
import logging

from hlds_master.protocol.decoder import decode_info_response, encode_info_request
from hlds_master.protocol.models import ServerStatus, parse_address
from hlds_master.registry import ServerRegistry

logger = logging.getLogger(__name__)


class QueryProtocol(asyncio.DatagramProtocol):
    """Datagram protocol resolving a future with the first reply received."""

    def __init__(self) -> None:
        """Initialize query protocol."""
        self._response: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()

    @property
    def response(self) -> asyncio.Future[bytes]:
        """Future resolved with the reply datagram."""
        return self._response

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        """Resolve the response future with the first datagram."""
        if not self._response.done():
            self._response.set_result(data)

    def error_received(self, exc: Exception) -> None:
        """Fail the pending read (e.g. ICMP port unreachable)."""
        if not self._response.done():
            self._response.set_exception(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        """Fail the pending read if the endpoint closes first."""
        if not self._response.done():
            self._response.set_exception(exc or ConnectionError("Query endpoint closed"))


class StatusQueryClient:
    """Queries game servers for their status and records the results."""

    def __init__(
        self,
        registry: ServerRegistry,
        dial_timeout: float = 3.0,
        read_timeout: float = 2.0,
    ) -> None:
        """Initialize status query client.

        Args:
            registry: Registry receiving decoded status
            dial_timeout: Timeout in seconds for opening the endpoint
            read_timeout: Timeout in seconds for the reply

        """
        self._registry = registry
        self._dial_timeout = dial_timeout
        self._read_timeout = read_timeout

    async def query(self, address: str) -> ServerStatus | None:
        """Send one A2S_INFO request and decode the reply.

        Args:
            address: Target in 'host:port' form

        Returns:
            Decoded status, or None if the query failed for any reason

        """
        try:
            host, port = parse_address(address)
        except ValueError as e:
            logger.debug("Skipping query to %s: %s", address, e)
            return None

        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await asyncio.wait_for(
                loop.create_datagram_endpoint(QueryProtocol, remote_addr=(host, port)),
                timeout=self._dial_timeout,
            )
        except (TimeoutError, OSError) as e:
            logger.debug("Dial to %s failed: %s", address, e)
            return None

        try:
            transport.sendto(encode_info_request())
            data = await asyncio.wait_for(protocol.response, timeout=self._read_timeout)
        except (TimeoutError, OSError) as e:
            logger.debug("No response from %s: %s", address, e)
            return None
        finally:
            transport.close()

        result = decode_info_response(data)
        if not result.ok:
            logger.debug("Undecodable response from %s: %s", address, result.error)
            return None
        return result.status

    async def refresh(self, address: str) -> bool:
        """Query a server and write the result into the registry.

        Returns:
            True if the registry record was updated

        """
        status = await self.query(address)
        if status is None:
            return False
        return self._registry.apply_status(address, status)
