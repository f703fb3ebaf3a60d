"""hlds_master - Python implementation of a game-server master server.

This package tracks game servers that announce themselves with UDP heartbeats,
evicts servers that stop announcing, and periodically queries every live server
with A2S_INFO for its name, map and player counts.

Example usage:
    ```python
    import asyncio

    from hlds_master import MasterServer, MasterServerOptions

    async def main() -> None:
        options = MasterServerOptions(port=27010, web_port=8080)
        server = MasterServer(options)

        await server.start()
        try:
            while True:
                await asyncio.sleep(30)
                for record in server.snapshot():
                    print(record)
        finally:
            await server.stop()

    if __name__ == "__main__":
        asyncio.run(main())
    ```
"""

from hlds_master.ingest import HeartbeatListener, HeartbeatProtocol, accept_heartbeat
from hlds_master.protocol.decoder import (
    DecodeError,
    DecodeResult,
    decode_info_response,
    encode_info_request,
)
from hlds_master.protocol.models import ServerRecord, ServerStatus, SweepResult
from hlds_master.query import StatusQueryClient
from hlds_master.registry import ServerRegistry
from hlds_master.server import MasterServer, MasterServerOptions
from hlds_master.sweeper import Sweeper

__version__ = "1.0.0"

__all__ = [
    "DecodeError",
    "DecodeResult",
    "HeartbeatListener",
    "HeartbeatProtocol",
    "MasterServer",
    "MasterServerOptions",
    "ServerRecord",
    "ServerRegistry",
    "ServerStatus",
    "StatusQueryClient",
    "SweepResult",
    "Sweeper",
    "accept_heartbeat",
    "decode_info_response",
    "encode_info_request",
]
