"""
Input Recording File
====================

This module provides RecordingFile, which owns one open recording file and
performs all positioned reads and writes on it.

File Layout
-----------
    Offset  Size    Description
    ------  ----    -----------
    0       561     Header (see input_recording.header)
    561     4       Total frames (i32, high-water mark)
    565     4       Undo count (u32)
    569     1       Recording started from a savestate (bool)
    570     36*N    Frame data

All integers are little-endian. Within the frame-data region each frame
is one block of INPUT_BYTES_PER_FRAME bytes, holding the input buffer of
port 0 followed by port 1:

    offset = HEADER_REGION_SIZE + 1
             + frame * INPUT_BYTES_PER_FRAME
             + port * CONTROLLER_INPUT_BYTES
             + index

Error Reporting
---------------
Operations report failure through their return value and never raise for
I/O errors. The reason for the most recent failure is kept in
RecordingFile.last_failure and a line is written to the logger.

Usage Examples
--------------
Recording:
    >>> rec = RecordingFile()
    >>> rec.open_new("run.p2m2", from_savestate=False)
    >>> rec.header.set_emulator_version()
    >>> rec.header.set_author("me")
    >>> rec.write_header()
    >>> rec.write_frame(0, 0, pad)
    >>> rec.set_total_frames(1)
    >>> rec.close()

Playback:
    >>> with RecordingFile() as rec:
    ...     if rec.open_existing("run.p2m2"):
    ...         frames = rec.bulk_read_pad_data(0, rec.total_frames, 0)
"""

from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Tuple, Union
import logging
import os
import struct

from input_recording.errors import RecordingFailure
from input_recording.header import HEADER_SIZE, Header
from input_recording.pad import (
    CONTROLLER_INPUT_BYTES,
    CONTROLLER_PORTS,
    INPUT_BYTES_PER_FRAME,
    PadData,
)


# =============================================================================
# Layout Constants
# =============================================================================

_TOTAL_FRAMES_FORMAT = "<i"
_UNDO_COUNT_FORMAT = "<I"
_SAVESTATE_FORMAT = "<?"

SEEKPOINT_TOTAL_FRAMES = HEADER_SIZE
SEEKPOINT_UNDO_COUNT = SEEKPOINT_TOTAL_FRAMES + struct.calcsize(_TOTAL_FRAMES_FORMAT)
SEEKPOINT_SAVESTATE = SEEKPOINT_UNDO_COUNT + struct.calcsize(_UNDO_COUNT_FORMAT)

# Header plus the two counters; the savestate flag byte follows it.
HEADER_REGION_SIZE = SEEKPOINT_SAVESTATE
SAVESTATE_FLAG_SIZE = struct.calcsize(_SAVESTATE_FORMAT)
FRAME_DATA_OFFSET = HEADER_REGION_SIZE + SAVESTATE_FLAG_SIZE

_UNDO_COUNT_MASK = 0xFFFFFFFF
_TOTAL_FRAMES_MAX = 0x7FFFFFFF


def is_valid_address(frame: int, port: int, index: int) -> bool:
    """Check that (frame, port, index) addresses a byte in the frame-data region."""
    return (
        frame >= 0
        and 0 <= port < CONTROLLER_PORTS
        and 0 <= index < CONTROLLER_INPUT_BYTES
    )


def block_offset(frame: int) -> int:
    """Get the file offset of the first byte of a frame's input block."""
    return HEADER_REGION_SIZE + SAVESTATE_FLAG_SIZE + frame * INPUT_BYTES_PER_FRAME


def key_offset(frame: int, port: int, index: int) -> int:
    """Get the file offset of one input byte of one port in one frame."""
    return block_offset(frame) + CONTROLLER_INPUT_BYTES * port + index


PathLike = Union[str, Path]


# =============================================================================
# Recording File
# =============================================================================

class RecordingFile:
    """
    One input recording file and its counters.

    The instance is either closed or open on exactly one file. The header
    and counters held in memory are authoritative while the file is open;
    they reach disk only through write_header(), increment_undo_count()
    and set_total_frames().

    Args:
        logger: Where diagnostics are reported. Defaults to this module's
            logger.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._file: Optional[BinaryIO] = None
        self._filename = ""
        self._header = Header()
        self._total_frames = 0
        self._undo_count = 0
        self._from_savestate = False
        self._last_failure = RecordingFailure.NONE

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def filename(self) -> str:
        """Path of the open file, or "" when closed."""
        return self._filename

    @property
    def header(self) -> Header:
        return self._header

    @property
    def total_frames(self) -> int:
        return self._total_frames

    @property
    def undo_count(self) -> int:
        return self._undo_count

    @property
    def from_savestate(self) -> bool:
        return self._from_savestate

    @property
    def is_open(self) -> bool:
        return self._file is not None

    @property
    def last_failure(self) -> RecordingFailure:
        """Why the most recent failing operation failed."""
        return self._last_failure

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open_new(self, path: PathLike, from_savestate: bool) -> bool:
        """
        Create (or truncate) a recording file for a new session.

        The header is initialized in memory only; call write_header() to
        persist it.

        Args:
            path: File to create
            from_savestate: True if the session starts from a savestate
                rather than a cold boot

        Returns:
            True if the file was created
        """
        if not self._open(path, new_recording=True):
            return False
        self._from_savestate = bool(from_savestate)
        return True

    def open_existing(self, path: PathLike) -> bool:
        """
        Open an existing recording file and verify its header.

        On verification failure the file is closed untouched and the
        in-memory state is left as it was.

        Returns:
            True if the file was opened and verified
        """
        return self._open(path, new_recording=False)

    def _open(self, path: PathLike, new_recording: bool) -> bool:
        if self._file is not None:
            self.close()

        mode = "w+b" if new_recording else "r+b"
        try:
            handle = open(path, mode)
        except OSError as e:
            self._last_failure = RecordingFailure.OPEN
            self._logger.error(
                f"Input recording file opening failed. Error - {e.strerror or e}"
            )
            return False

        if new_recording:
            self._file = handle
            self._filename = str(path)
            self._total_frames = 0
            self._undo_count = 0
            self._header.init()
            return True

        with ExitStack() as stack:
            stack.enter_context(handle)
            preamble = self._read_preamble(handle)
            if preamble is None:
                self._last_failure = RecordingFailure.VERIFY
                self._logger.error("Input recording file header is invalid")
                return False
            stack.pop_all()

        self._file = handle
        self._filename = str(path)
        self._adopt(preamble)
        return True

    def verify(self) -> bool:
        """
        Re-read and check the header and counters of the open file.

        On success the values read from disk replace the in-memory ones.
        """
        if self._file is None:
            self._last_failure = RecordingFailure.NOT_OPEN
            return False
        preamble = self._read_preamble(self._file)
        if preamble is None:
            self._last_failure = RecordingFailure.VERIFY
            return False
        self._adopt(preamble)
        return True

    def _read_preamble(self, handle: BinaryIO) -> Optional[Tuple[Header, int, int, bool]]:
        """Read header, total frames, undo count and savestate flag, in order."""
        try:
            handle.seek(0)
            header_data = handle.read(HEADER_SIZE)
            if len(header_data) != HEADER_SIZE:
                self._logger.debug(
                    f"Header truncated: need {HEADER_SIZE} bytes, got {len(header_data)}"
                )
                return None
            header = Header.from_bytes(header_data)

            values = []
            for fmt in (_TOTAL_FRAMES_FORMAT, _UNDO_COUNT_FORMAT, _SAVESTATE_FORMAT):
                size = struct.calcsize(fmt)
                data = handle.read(size)
                if len(data) != size:
                    self._logger.debug("Recording counters truncated")
                    return None
                values.append(struct.unpack(fmt, data)[0])
        except OSError as e:
            self._logger.debug(f"Reading recording header failed: {e}")
            return None

        if not header.is_supported():
            self._logger.error(
                f"Input recording file is not a supported version - {header.version}"
            )
            return None

        total_frames, undo_count, from_savestate = values
        return header, total_frames, undo_count, from_savestate

    def _adopt(self, preamble: Tuple[Header, int, int, bool]) -> None:
        self._header, self._total_frames, self._undo_count, self._from_savestate = preamble

    def write_header(self) -> bool:
        """
        Write header, total frames, undo count and savestate flag at
        offset 0, then flush.

        A failure part-way leaves the preamble partially written.
        """
        if self._file is None:
            self._last_failure = RecordingFailure.NOT_OPEN
            return False

        chunks = (
            self._header.to_bytes(),
            struct.pack(_TOTAL_FRAMES_FORMAT, self._total_frames),
            struct.pack(_UNDO_COUNT_FORMAT, self._undo_count),
            struct.pack(_SAVESTATE_FORMAT, self._from_savestate),
        )
        if not self._seek(0):
            return False
        for chunk in chunks:
            if not self._write(chunk):
                return False
        return self._flush()

    def close(self) -> bool:
        """
        Close the file.

        Returns:
            False if the file was already closed, True otherwise
        """
        if self._file is None:
            return False
        self._file.close()
        self._file = None
        self._filename = ""
        return True

    def __enter__(self) -> "RecordingFile":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    def increment_undo_count(self) -> bool:
        """
        Count one undo/rerecord action.

        The counter is incremented even when the file is closed, but is
        only persisted when it is open.

        Returns:
            True if the new value was written to disk
        """
        self._undo_count = (self._undo_count + 1) & _UNDO_COUNT_MASK
        if self._file is None:
            return False
        return (
            self._seek(SEEKPOINT_UNDO_COUNT)
            and self._write(struct.pack(_UNDO_COUNT_FORMAT, self._undo_count))
            and self._flush()
        )

    def set_total_frames(self, frame: int) -> bool:
        """
        Raise the total-frames high-water mark.

        Nothing happens if the file is closed or frame does not exceed the
        current value. Values beyond the stored i32 range are rejected.

        Returns:
            True if the mark was raised and written to disk
        """
        if self._file is None or self._total_frames >= frame:
            return False
        if frame > _TOTAL_FRAMES_MAX:
            self._last_failure = RecordingFailure.OUT_OF_RANGE
            self._logger.debug(f"Total frames {frame} exceeds {_TOTAL_FRAMES_MAX}")
            return False
        data = struct.pack(_TOTAL_FRAMES_FORMAT, frame)
        self._total_frames = frame
        return (
            self._seek(SEEKPOINT_TOTAL_FRAMES)
            and self._write(data)
            and self._flush()
        )

    # -------------------------------------------------------------------------
    # Frame Data
    # -------------------------------------------------------------------------

    def read_key_buffer(self, frame: int, port: int, index: int) -> Optional[int]:
        """
        Read one input byte.

        Returns:
            The byte value, or None if the file is closed, the address is
            out of range, the seek failed, or the byte lies past the end of
            the file
        """
        if self._file is None:
            self._last_failure = RecordingFailure.NOT_OPEN
            return None
        if not self._check_address(frame, port, index):
            return None
        if not self._seek(key_offset(frame, port, index)):
            return None
        data = self._read(1)
        if data is None:
            return None
        return data[0]

    def write_key_buffer(self, frame: int, port: int, index: int, value: int) -> bool:
        """Write one input byte and flush."""
        if self._file is None:
            self._last_failure = RecordingFailure.NOT_OPEN
            return False
        if not self._check_address(frame, port, index):
            return False
        return (
            self._seek(key_offset(frame, port, index))
            and self._write(bytes((value,)))
            and self._flush()
        )

    def write_frame(self, frame: int, port: int, pad_data: PadData) -> bool:
        """
        Write a port's whole input buffer for one frame.

        Bytes are written in index order. The first failing byte aborts the
        write; bytes before it stay written.
        """
        if self._file is None:
            self._last_failure = RecordingFailure.NOT_OPEN
            return False
        if not self._check_address(frame, port, 0):
            return False
        for index in range(CONTROLLER_INPUT_BYTES):
            if not self.write_key_buffer(frame, port, index, pad_data.poll_controller_data(index)):
                return False
        return True

    def bulk_read_pad_data(self, frame_start: int, frame_end: int, port: int) -> Dict[int, PadData]:
        """
        Read a port's input for the frames in [frame_start, frame_end).

        Frames whose buffer cannot be read in full (past the end of a
        truncated file) are left out of the result rather than reported.

        Returns:
            Mapping of frame number to PadData, in ascending frame order.
            Empty if the file is closed or the port does not exist.
        """
        data: Dict[int, PadData] = {}
        if self._file is None:
            return data
        if not self._check_address(0, port, 0):
            return data

        try:
            file_size = self._file.seek(0, os.SEEK_END)
        except OSError as e:
            self._logger.debug(f"Cannot size recording file: {e}")
            return data

        frame_start = max(frame_start, 0)
        for frame in range(frame_start, frame_end):
            offset = key_offset(frame, port, 0)
            # Every later frame starts further past the end of the file.
            if offset >= file_size:
                break
            try:
                self._file.seek(offset)
                pad_bytes = self._file.read(CONTROLLER_INPUT_BYTES)
            except (OSError, ValueError) as e:
                self._logger.debug(f"Frame {frame} port {port} unreadable: {e}")
                continue
            if len(pad_bytes) == CONTROLLER_INPUT_BYTES:
                data[frame] = PadData.from_bytes(pad_bytes)
        return data

    # -------------------------------------------------------------------------
    # Low-level I/O
    # -------------------------------------------------------------------------

    def _check_address(self, frame: int, port: int, index: int) -> bool:
        if is_valid_address(frame, port, index):
            return True
        self._last_failure = RecordingFailure.OUT_OF_RANGE
        self._logger.debug(
            f"Address out of range: frame {frame}, port {port}, index {index}"
        )
        return False

    def _seek(self, offset: int) -> bool:
        try:
            self._file.seek(offset)
        except (OSError, ValueError) as e:
            self._last_failure = RecordingFailure.SEEK
            self._logger.debug(f"Seek to {offset} failed: {e}")
            return False
        return True

    def _read(self, size: int) -> Optional[bytes]:
        try:
            data = self._file.read(size)
        except OSError as e:
            self._logger.debug(f"Read of {size} bytes failed: {e}")
            data = b""
        if len(data) != size:
            self._last_failure = RecordingFailure.READ_SHORT
            return None
        return data

    def _write(self, data: bytes) -> bool:
        try:
            written = self._file.write(data)
        except OSError as e:
            self._logger.debug(f"Write of {len(data)} bytes failed: {e}")
            written = 0
        if written != len(data):
            self._last_failure = RecordingFailure.WRITE_SHORT
            return False
        return True

    def _flush(self) -> bool:
        try:
            self._file.flush()
        except OSError as e:
            self._last_failure = RecordingFailure.WRITE_SHORT
            self._logger.debug(f"Flush failed: {e}")
            return False
        return True
