"""A2S_INFO codec for status queries.

This module builds the fixed status query request and decodes the reply into a
ServerStatus. Decoding never raises on malformed input: every step reports
exhaustion to the caller, and the outcome is a DecodeResult carrying either
the decoded status or the reason decoding stopped.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from hlds_master.protocol.models import ServerStatus

logger = logging.getLogger(__name__)

# Protocol constants
PACKET_MAGIC = b"\xff\xff\xff\xff"
INFO_REQUEST_TYPE = b"T"
INFO_REQUEST_PAYLOAD = b"Source Engine Query\x00"
HEADER_SIZE = 5
MAX_RESPONSE_SIZE = 1400

_INFO_REQUEST = PACKET_MAGIC + INFO_REQUEST_TYPE + INFO_REQUEST_PAYLOAD


class DecodeError(Enum):
    """Reasons an A2S_INFO response could not be decoded."""

    SHORT_HEADER = "SHORT_HEADER"
    MISSING_PROTOCOL = "MISSING_PROTOCOL"
    UNTERMINATED_NAME = "UNTERMINATED_NAME"
    UNTERMINATED_MAP = "UNTERMINATED_MAP"
    UNTERMINATED_FOLDER = "UNTERMINATED_FOLDER"
    UNTERMINATED_GAME = "UNTERMINATED_GAME"
    MISSING_APP_ID = "MISSING_APP_ID"
    MISSING_PLAYER_COUNTS = "MISSING_PLAYER_COUNTS"


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding one response: a status or an error, never both."""

    status: ServerStatus | None = None
    error: DecodeError | None = None

    def __post_init__(self) -> None:
        """Validate that exactly one of status and error is set."""
        if (self.status is None) == (self.error is None):
            msg = "DecodeResult needs exactly one of status or error"
            raise ValueError(msg)

    @property
    def ok(self) -> bool:
        """Check if decoding succeeded."""
        return self.status is not None

    @classmethod
    def success(cls, status: ServerStatus) -> "DecodeResult":
        """Create a successful result."""
        return cls(status=status)

    @classmethod
    def failure(cls, error: DecodeError) -> "DecodeResult":
        """Create a failed result."""
        return cls(error=error)


class PacketReader:
    """Sequential cursor over a response buffer.

    Every read reports exhaustion instead of raising, and leaves the cursor
    where it was when it fails.
    """

    def __init__(self, data: bytes, offset: int = 0) -> None:
        """Initialize reader.

        Args:
            data: Buffer to read from
            offset: Starting position

        """
        self._data = bytes(data)
        self._pos = offset

    def available(self) -> int:
        """Get number of unread bytes."""
        return max(len(self._data) - self._pos, 0)

    def skip(self, count: int) -> bool:
        """Advance past count bytes. Returns False if fewer remain."""
        if self.available() < count:
            return False
        self._pos += count
        return True

    def read_byte(self) -> int | None:
        """Read one unsigned byte, or None if exhausted."""
        if self.available() < 1:
            return None
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_cstring(self) -> str | None:
        """Read a null-terminated string, or None if the terminator is missing."""
        end = self._data.find(b"\x00", self._pos)
        if end < 0:
            return None
        raw = self._data[self._pos : end]
        self._pos = end + 1
        return raw.decode("utf-8", errors="replace")


def encode_info_request() -> bytes:
    """Build the A2S_INFO request packet."""
    return _INFO_REQUEST


def decode_info_response(data: bytes) -> DecodeResult:
    """Decode an A2S_INFO response into a ServerStatus.

    The 4-byte magic and 1-byte type code must be present but are not checked.
    Folder, game description and application id are read and discarded.

    Args:
        data: Raw response datagram

    Returns:
        DecodeResult with the status, or the step that ran out of bytes

    """
    if len(data) < HEADER_SIZE:
        return DecodeResult.failure(DecodeError.SHORT_HEADER)

    reader = PacketReader(data, HEADER_SIZE)

    if not reader.skip(1):
        return DecodeResult.failure(DecodeError.MISSING_PROTOCOL)

    name = reader.read_cstring()
    if name is None:
        return DecodeResult.failure(DecodeError.UNTERMINATED_NAME)

    map_name = reader.read_cstring()
    if map_name is None:
        return DecodeResult.failure(DecodeError.UNTERMINATED_MAP)

    if reader.read_cstring() is None:
        return DecodeResult.failure(DecodeError.UNTERMINATED_FOLDER)

    if reader.read_cstring() is None:
        return DecodeResult.failure(DecodeError.UNTERMINATED_GAME)

    if not reader.skip(2):
        return DecodeResult.failure(DecodeError.MISSING_APP_ID)

    if reader.available() < 2:
        return DecodeResult.failure(DecodeError.MISSING_PLAYER_COUNTS)

    players = reader.read_byte()
    max_players = reader.read_byte()
    if players is None or max_players is None:
        return DecodeResult.failure(DecodeError.MISSING_PLAYER_COUNTS)

    status = ServerStatus(
        name=name,
        map=map_name,
        players=players,
        max_players=max_players,
    )
    logger.debug("Decoded status: %s", status)
    return DecodeResult.success(status)
