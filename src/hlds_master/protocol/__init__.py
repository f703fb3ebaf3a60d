"""Master server protocol package.

This package contains the A2S_INFO status query codec and the data models
shared by the registry, the heartbeat listener and the query client.
"""

from hlds_master.protocol.decoder import (
    DecodeError,
    DecodeResult,
    PacketReader,
    decode_info_response,
    encode_info_request,
)
from hlds_master.protocol.models import (
    ServerRecord,
    ServerStatus,
    SweepResult,
    format_address,
    parse_address,
)

__all__ = [
    "DecodeError",
    "DecodeResult",
    "PacketReader",
    "ServerRecord",
    "ServerStatus",
    "SweepResult",
    "decode_info_response",
    "encode_info_request",
    "format_address",
    "parse_address",
]
