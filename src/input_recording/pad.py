"""
Controller Input Buffer
=======================

PadData holds one frame of one controller port's raw input bytes. The
meaning of each byte (button bits, analog axes, pressure values) belongs
to the controller emulation; this library only stores and retrieves them.
"""

from typing import Iterable, Optional

# Per-port buffer size and port count are format constants: changing
# either requires a new header version.
CONTROLLER_INPUT_BYTES = 18
CONTROLLER_PORTS = 2
INPUT_BYTES_PER_FRAME = CONTROLLER_INPUT_BYTES * CONTROLLER_PORTS


class PadData:
    """
    Fixed-size raw input buffer for one controller port.

    Example:
        >>> pad = PadData()
        >>> pad.update_controller_data(0, 0x7F)
        >>> pad.poll_controller_data(0)
        127
    """

    def __init__(self, data: Optional[Iterable[int]] = None):
        self._buffer = bytearray(CONTROLLER_INPUT_BYTES)
        if data is not None:
            data = bytes(data)
            if len(data) != CONTROLLER_INPUT_BYTES:
                raise ValueError(
                    f"PadData needs {CONTROLLER_INPUT_BYTES} bytes, got {len(data)}"
                )
            self._buffer[:] = data

    def update_controller_data(self, index: int, value: int) -> None:
        """Store one byte of input at the given buffer index."""
        self._buffer[index] = value

    def poll_controller_data(self, index: int) -> int:
        """Fetch one byte of input from the given buffer index."""
        return self._buffer[index]

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PadData":
        return cls(data)

    def __len__(self) -> int:
        return CONTROLLER_INPUT_BYTES

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PadData):
            return NotImplemented
        return self._buffer == other._buffer

    def __repr__(self) -> str:
        return f"PadData({self._buffer.hex()})"
