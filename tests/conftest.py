"""Global fixtures for master server tests."""

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from hlds_master.registry import ServerRegistry
from tests.fakes import INFO_RESPONSE, FakeClock, FakeGameServer, GameServerFactory


@pytest.fixture
def clock() -> FakeClock:
    """Fixture for a fake clock."""
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> ServerRegistry:
    """Fixture for a ServerRegistry driven by the fake clock."""
    return ServerRegistry(clock=clock)


@pytest.fixture
def info_response() -> bytes:
    """Fixture for a well-formed A2S_INFO response."""
    return INFO_RESPONSE


@pytest_asyncio.fixture
async def game_server() -> AsyncIterator[GameServerFactory]:
    """Fixture starting loopback game server stubs, closed after the test."""
    servers: list[FakeGameServer] = []

    async def start(response: bytes | None = INFO_RESPONSE) -> FakeGameServer:
        loop = asyncio.get_running_loop()
        _, protocol = await loop.create_datagram_endpoint(
            lambda: FakeGameServer(response),
            local_addr=("127.0.0.1", 0),
        )
        servers.append(protocol)
        return protocol

    yield start

    for server in servers:
        if server.transport is not None:
            server.transport.close()
