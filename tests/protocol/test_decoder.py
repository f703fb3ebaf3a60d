# pyright: reportPrivateUsage=false
"""Tests for the A2S_INFO codec.

Covers the fixed request encoding, decoding of well-formed responses, and the
failure result reported for every way a response can run out of bytes.
"""

import pytest

from hlds_master.protocol.decoder import (
    HEADER_SIZE,
    DecodeError,
    DecodeResult,
    PacketReader,
    decode_info_response,
    encode_info_request,
)
from hlds_master.protocol.models import ServerStatus


def build_response(
    name: bytes = b"Alpha",
    map_name: bytes = b"de_dust2",
    folder: bytes = b"cstrike",
    game: bytes = b"Counter-Strike",
    app_id: bytes = b"\x00\x00",
    players: int = 16,
    max_players: int = 32,
    header: bytes = b"\xff\xff\xff\xff\x49",
    protocol: bytes = b"\x02",
) -> bytes:
    """Assemble an A2S_INFO response from its fields."""
    return (
        header
        + protocol
        + name
        + b"\x00"
        + map_name
        + b"\x00"
        + folder
        + b"\x00"
        + game
        + b"\x00"
        + app_id
        + bytes([players, max_players])
    )


class TestEncodeInfoRequest:
    """Test cases for the status query request."""

    def test_encode_info_request_when_called_then_returns_fixed_packet(self) -> None:
        """Test that the request is magic, 'T', the query string and a null."""
        assert encode_info_request() == b"\xff\xff\xff\xffTSource Engine Query\x00"

    def test_encode_info_request_when_called_twice_then_identical(self) -> None:
        """Test that the request never changes between calls."""
        assert encode_info_request() == encode_info_request()
        assert len(encode_info_request()) == 25


class TestDecodeInfoResponse:
    """Test cases for decoding A2S_INFO responses."""

    def test_decode_when_well_formed_then_returns_status(self, info_response: bytes) -> None:
        """Test decoding of the canonical response."""
        result = decode_info_response(info_response)

        assert result.ok
        assert result.error is None
        assert result.status == ServerStatus(
            name="Alpha",
            map="de_dust2",
            players=16,
            max_players=32,
        )

    def test_decode_when_trailing_bytes_then_ignored(self) -> None:
        """Test that bytes after the player counts are ignored."""
        data = build_response() + b"\x00dl\x00\x01extra"

        result = decode_info_response(data)

        assert result.ok
        assert result.status is not None
        assert result.status.players == 16
        assert result.status.max_players == 32

    def test_decode_when_header_content_arbitrary_then_not_validated(self) -> None:
        """Test that the magic and type code are required but not checked."""
        data = build_response(header=b"\x00\x01\x02\x03m")

        result = decode_info_response(data)

        assert result.ok
        assert result.status is not None
        assert result.status.name == "Alpha"

    def test_decode_when_empty_strings_then_returns_empty_fields(self) -> None:
        """Test that empty name and map decode as empty strings."""
        result = decode_info_response(build_response(name=b"", map_name=b""))

        assert result.status == ServerStatus(name="", map="", players=16, max_players=32)

    def test_decode_when_invalid_utf8_then_replaces_characters(self) -> None:
        """Test that undecodable name bytes do not fail decoding."""
        result = decode_info_response(build_response(name=b"Caf\xe9"))

        assert result.ok
        assert result.status is not None
        assert result.status.name == "Caf\ufffd"

    def test_decode_when_max_byte_values_then_unsigned(self) -> None:
        """Test that player counts are read as unsigned bytes."""
        result = decode_info_response(build_response(players=255, max_players=255))

        assert result.status is not None
        assert result.status.players == 255
        assert result.status.max_players == 255

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"", DecodeError.SHORT_HEADER),
            (b"\xff\xff\xff\xff", DecodeError.SHORT_HEADER),
            (b"\xff\xff\xff\xffI", DecodeError.MISSING_PROTOCOL),
            (b"\xff\xff\xff\xffI\x02Alpha", DecodeError.UNTERMINATED_NAME),
            (b"\xff\xff\xff\xffI\x02Alpha\x00de_dust2", DecodeError.UNTERMINATED_MAP),
            (
                b"\xff\xff\xff\xffI\x02Alpha\x00de_dust2\x00cstrike",
                DecodeError.UNTERMINATED_FOLDER,
            ),
            (
                b"\xff\xff\xff\xffI\x02Alpha\x00de_dust2\x00cstrike\x00Counter",
                DecodeError.UNTERMINATED_GAME,
            ),
            (
                b"\xff\xff\xff\xffI\x02Alpha\x00de_dust2\x00cstrike\x00Counter-Strike\x00\x00",
                DecodeError.MISSING_APP_ID,
            ),
            (
                b"\xff\xff\xff\xffI\x02Alpha\x00de_dust2\x00cstrike\x00Counter-Strike\x00\x00\x00\x10",
                DecodeError.MISSING_PLAYER_COUNTS,
            ),
        ],
    )
    def test_decode_when_truncated_then_reports_failing_step(
        self, data: bytes, expected: DecodeError
    ) -> None:
        """Test that each truncation point yields the matching failure."""
        result = decode_info_response(data)

        assert not result.ok
        assert result.status is None
        assert result.error is expected

    def test_decode_when_any_prefix_of_valid_response_then_never_raises(
        self, info_response: bytes
    ) -> None:
        """Test that every strict prefix of a valid response fails cleanly."""
        for length in range(len(info_response)):
            result = decode_info_response(info_response[:length])

            assert not result.ok, f"prefix of length {length} decoded"
            assert isinstance(result.error, DecodeError)

    def test_decode_when_bytearray_then_accepted(self, info_response: bytes) -> None:
        """Test that mutable buffers decode like bytes."""
        assert decode_info_response(bytearray(info_response)).ok


class TestDecodeResult:
    """Test cases for DecodeResult."""

    def test_failure_when_created_then_not_ok(self) -> None:
        """Test that failure results carry the error and no status."""
        result = DecodeResult.failure(DecodeError.SHORT_HEADER)

        assert not result.ok
        assert result.error is DecodeError.SHORT_HEADER
        assert result.status is None

    def test_success_when_created_then_ok(self) -> None:
        """Test that success results carry the status and no error."""
        status = ServerStatus(name="Alpha", map="de_dust2", players=3, max_players=16)

        result = DecodeResult.success(status)

        assert result.ok
        assert result.status == status
        assert result.error is None

    def test_init_when_neither_set_then_raises(self) -> None:
        """Test that an empty result is rejected."""
        with pytest.raises(ValueError, match="exactly one"):
            DecodeResult()

    def test_init_when_both_set_then_raises(self) -> None:
        """Test that a result cannot carry a status and an error together."""
        status = ServerStatus(name="Alpha", map="de_dust2", players=3, max_players=16)

        with pytest.raises(ValueError, match="exactly one"):
            DecodeResult(status=status, error=DecodeError.SHORT_HEADER)


class TestPacketReader:
    """Test cases for the PacketReader cursor."""

    def test_read_cstring_when_terminated_then_advances_past_null(self) -> None:
        """Test reading consecutive null-terminated strings."""
        reader = PacketReader(b"ab\x00cd\x00")

        assert reader.read_cstring() == "ab"
        assert reader.read_cstring() == "cd"
        assert reader.available() == 0

    def test_read_cstring_when_unterminated_then_none_and_position_kept(self) -> None:
        """Test that a missing terminator does not move the cursor."""
        reader = PacketReader(b"abc")

        assert reader.read_cstring() is None
        assert reader.available() == 3

    def test_skip_when_insufficient_then_false(self) -> None:
        """Test that skipping past the end fails without moving."""
        reader = PacketReader(b"\x01")

        assert not reader.skip(2)
        assert reader.available() == 1
        assert reader.skip(1)
        assert reader.available() == 0

    def test_read_byte_when_exhausted_then_none(self) -> None:
        """Test reading a byte from an empty reader."""
        reader = PacketReader(b"\x07")

        assert reader.read_byte() == 7
        assert reader.read_byte() is None

    def test_offset_when_given_then_reading_starts_there(self) -> None:
        """Test that the initial offset skips the header."""
        reader = PacketReader(b"\xff\xff\xff\xffIx\x00", HEADER_SIZE)

        assert reader.read_byte() == ord("x")
        assert reader._pos == HEADER_SIZE + 1
