"""
Header Unit Tests
=================

Tests for the bounded text field and the fixed-size recording header.

Test Categories
---------------
1. BoundedString: truncation, termination and read-back
2. Header: field setters, init(), serialization
"""

import struct

import pytest

from input_recording import (
    AUTHOR_CAPACITY,
    EMULATOR_VERSION_CAPACITY,
    GAME_NAME_CAPACITY,
    HEADER_SIZE,
    SUPPORTED_VERSION,
    BoundedString,
    Header,
    RecordingConfig,
    RecordingFormatError,
    set_config,
)


@pytest.fixture
def host_config():
    """Install a known host application configuration for the test."""
    set_config(RecordingConfig(app_name="Emu", app_version=(1, 7, 42)))
    yield
    set_config(None)


# =============================================================================
# Bounded String Tests
# =============================================================================

class TestBoundedString:
    """Tests for the fixed-capacity null-padded field."""

    def test_short_value(self):
        """Short values are stored with a zero-filled tail."""
        field = BoundedString(8, "abc")
        assert field.value == "abc"
        assert field.to_bytes() == b"abc\x00\x00\x00\x00\x00"

    def test_always_full_capacity(self):
        """The raw field is the same size whatever its content."""
        assert len(BoundedString(16).to_bytes()) == 16
        assert len(BoundedString(16, "x" * 100).to_bytes()) == 16

    def test_truncation(self):
        """Long values keep capacity - 1 bytes and a terminating zero."""
        field = BoundedString(8, "ABCDEFGHIJKL")
        raw = field.to_bytes()
        assert raw == b"ABCDEFG\x00"
        assert field.value == "ABCDEFG"

    def test_exactly_capacity_is_truncated(self):
        """A value of exactly capacity bytes loses its last byte."""
        field = BoundedString(4, "WXYZ")
        assert field.value == "WXY"
        assert field.to_bytes()[-1] == 0

    def test_overwrite_clears_previous_tail(self):
        """Setting a shorter value leaves no bytes from the old one."""
        field = BoundedString(8, "longer!")
        field.set("ab")
        assert field.to_bytes() == b"ab" + bytes(6)

    def test_clear(self):
        field = BoundedString(8, "abc")
        field.clear()
        assert field.value == ""
        assert field.to_bytes() == bytes(8)

    def test_read_without_terminator(self):
        """Raw data with no zero byte reads back at full capacity."""
        field = BoundedString.from_bytes(4, b"ABCD")
        assert field.value == "ABCD"

    def test_split_multibyte_character_dropped(self):
        """A UTF-8 character cut by truncation does not appear in the value."""
        field = BoundedString(3, "aé")  # 'a' + 2-byte character
        assert field.to_bytes() == b"a\xc3\x00"
        assert field.value == "a"

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            BoundedString(0)

    def test_from_bytes_wrong_size(self):
        with pytest.raises(ValueError):
            BoundedString.from_bytes(4, b"abc")


# =============================================================================
# Header Tests
# =============================================================================

class TestHeader:
    """Tests for the recording header."""

    def test_size(self):
        """Header is version byte plus three fixed text fields."""
        assert HEADER_SIZE == 1 + EMULATOR_VERSION_CAPACITY + AUTHOR_CAPACITY + GAME_NAME_CAPACITY
        assert len(Header().to_bytes()) == HEADER_SIZE

    def test_defaults(self):
        header = Header()
        assert header.version == SUPPORTED_VERSION
        assert header.is_supported()
        assert header.author.value == ""

    def test_setters(self):
        header = Header()
        header.set_author("Tester")
        header.set_game_name("Example Game")
        header.set_emulator_version("Emu-2.0.0")

        assert header.author.value == "Tester"
        assert header.game_name.value == "Example Game"
        assert header.emulator_version.value == "Emu-2.0.0"

    def test_author_truncation(self):
        """An over-long author keeps exactly capacity - 1 bytes."""
        header = Header()
        header.set_author("A" * 1000)
        assert header.author.value == "A" * (AUTHOR_CAPACITY - 1)
        assert header.author.to_bytes()[-1] == 0

    def test_default_emulator_version(self, host_config):
        """With no argument the version is composed from the host app."""
        header = Header()
        header.set_emulator_version()
        assert header.emulator_version.value == "Emu-1.7.42"

    def test_init_clears_author_and_game(self):
        """init() zeroes author and game name only."""
        header = Header(version=7)
        header.set_emulator_version("Emu-1.0.0")
        header.set_author("someone")
        header.set_game_name("something")

        header.init()

        assert header.author.value == ""
        assert header.game_name.value == ""
        assert header.emulator_version.value == "Emu-1.0.0"
        assert header.version == 7

    def test_layout(self):
        """Fields are laid out in version, emulator, author, game order."""
        header = Header()
        header.set_emulator_version("E")
        header.set_author("A")
        header.set_game_name("G")
        data = header.to_bytes()

        assert data[0] == SUPPORTED_VERSION
        assert data[1:2] == b"E"
        assert data[1 + EMULATOR_VERSION_CAPACITY] == ord("A")
        assert data[1 + EMULATOR_VERSION_CAPACITY + AUTHOR_CAPACITY] == ord("G")

    def test_from_bytes(self):
        header = Header()
        header.set_author("Tester")
        header.set_game_name("Example Game")
        header.set_emulator_version("Emu-2.0.0")

        parsed = Header.from_bytes(header.to_bytes())
        assert parsed == header
        assert parsed.game_name.value == "Example Game"

    def test_from_bytes_keeps_unsupported_version(self):
        """Parsing does not reject versions; is_supported() reports them."""
        data = struct.pack("<B", 2) + bytes(HEADER_SIZE - 1)
        header = Header.from_bytes(data)
        assert header.version == 2
        assert not header.is_supported()

    def test_from_bytes_too_short(self):
        with pytest.raises(RecordingFormatError):
            Header.from_bytes(bytes(HEADER_SIZE - 1))
