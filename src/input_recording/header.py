"""
Recording File Header
=====================

This module defines the fixed-size header stored at the start of every
input recording file.

Header Structure
----------------
    Offset  Size    Description
    ------  ----    -----------
    0       1       Format version (must be SUPPORTED_VERSION)
    1       50      Emulator version string (null-padded)
    51      255     Author (null-padded)
    306     255     Game name (null-padded)

Text fields always occupy their full capacity. A value is truncated to
capacity - 1 bytes on write so the field always ends with a zero byte,
and read back up to the first zero byte.
"""

from dataclasses import dataclass, field
from typing import Optional
import struct

from input_recording.errors import RecordingFormatError


# =============================================================================
# Format Constants
# =============================================================================

SUPPORTED_VERSION = 1

EMULATOR_VERSION_CAPACITY = 50
AUTHOR_CAPACITY = 255
GAME_NAME_CAPACITY = 255

_VERSION_FORMAT = "<B"
_VERSION_SIZE = struct.calcsize(_VERSION_FORMAT)

HEADER_SIZE = (
    _VERSION_SIZE
    + EMULATOR_VERSION_CAPACITY
    + AUTHOR_CAPACITY
    + GAME_NAME_CAPACITY
)

TEXT_ENCODING = "utf-8"


# =============================================================================
# Bounded String Field
# =============================================================================

class BoundedString:
    """
    Fixed-capacity, null-padded text field.

    The backing buffer is always exactly ``capacity`` bytes. Writes copy at
    most ``capacity - 1`` bytes and zero the remainder, so the stored value
    is always terminated. Excess input is silently dropped.
    """

    def __init__(self, capacity: int, text: str = ""):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._buffer = bytearray(capacity)
        if text:
            self.set(text)

    @property
    def capacity(self) -> int:
        return self._capacity

    def set(self, text: str) -> None:
        """Copy text into the field, truncating to capacity - 1 bytes."""
        encoded = text.encode(TEXT_ENCODING)[: self._capacity - 1]
        self._buffer[:] = bytes(self._capacity)
        self._buffer[: len(encoded)] = encoded

    def clear(self) -> None:
        self._buffer[:] = bytes(self._capacity)

    @property
    def value(self) -> str:
        """Text up to the first zero byte, or the full capacity."""
        end = self._buffer.find(0)
        if end < 0:
            end = self._capacity
        # A multi-byte character split by truncation is dropped.
        return self._buffer[:end].decode(TEXT_ENCODING, errors="ignore")

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    @classmethod
    def from_bytes(cls, capacity: int, data: bytes) -> "BoundedString":
        """Load a field verbatim from its raw on-disk bytes."""
        if len(data) != capacity:
            raise ValueError(f"expected {capacity} bytes, got {len(data)}")
        result = cls(capacity)
        result._buffer[:] = data
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedString):
            return NotImplemented
        return self._capacity == other._capacity and self._buffer == other._buffer

    def __repr__(self) -> str:
        return f"BoundedString({self._capacity}, {self.value!r})"


# =============================================================================
# Header
# =============================================================================

@dataclass
class Header:
    """
    Recording file header (HEADER_SIZE bytes at file offset 0).

    Attributes:
        version: Format version; files with any other value are rejected
        emulator_version: Host emulator name and version
        author: Who made the recording
        game_name: Title of the recorded game
    """
    version: int = SUPPORTED_VERSION
    emulator_version: BoundedString = field(
        default_factory=lambda: BoundedString(EMULATOR_VERSION_CAPACITY)
    )
    author: BoundedString = field(
        default_factory=lambda: BoundedString(AUTHOR_CAPACITY)
    )
    game_name: BoundedString = field(
        default_factory=lambda: BoundedString(GAME_NAME_CAPACITY)
    )

    def init(self) -> None:
        """Reset the fields of a brand-new recording (author, game name)."""
        self.author.clear()
        self.game_name.clear()

    def set_author(self, author: str) -> None:
        self.author.set(author)

    def set_game_name(self, game_name: str) -> None:
        self.game_name.set(game_name)

    def set_emulator_version(self, version: Optional[str] = None) -> None:
        """
        Set the emulator version string.

        Args:
            version: Explicit version text. When omitted, the string is
                composed from the configured host application name and
                three-part version, e.g. "input-recording-1.0.0".
        """
        if version is None:
            from input_recording.config import get_config
            version = get_config().emulator_version_string()
        self.emulator_version.set(version)

    def is_supported(self) -> bool:
        return self.version == SUPPORTED_VERSION

    def to_bytes(self) -> bytes:
        """Serialize the header to exactly HEADER_SIZE bytes."""
        return (
            struct.pack(_VERSION_FORMAT, self.version)
            + self.emulator_version.to_bytes()
            + self.author.to_bytes()
            + self.game_name.to_bytes()
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Header":
        """
        Deserialize a header from bytes.

        The version is not checked here; see is_supported().

        Raises:
            RecordingFormatError: If fewer than HEADER_SIZE bytes are given
        """
        if len(data) < HEADER_SIZE:
            raise RecordingFormatError(
                f"Header too short: need {HEADER_SIZE} bytes, got {len(data)}"
            )

        (version,) = struct.unpack_from(_VERSION_FORMAT, data, 0)
        offset = _VERSION_SIZE

        fields = []
        for capacity in (EMULATOR_VERSION_CAPACITY, AUTHOR_CAPACITY, GAME_NAME_CAPACITY):
            fields.append(BoundedString.from_bytes(capacity, bytes(data[offset:offset + capacity])))
            offset += capacity

        emulator_version, author, game_name = fields
        return cls(
            version=version,
            emulator_version=emulator_version,
            author=author,
            game_name=game_name,
        )
