"""
Input Recording - Deterministic Replay Input Logs
=================================================

This package reads and writes input recording files: binary logs of the
controller input fed to an emulated console on every frame, so that a
session can be replayed bit-for-bit or resumed and rerecorded from any
frame.

Main Components
---------------
- **header**: Fixed-size file header (version, emulator, author, game)
- **pad**: Raw per-port controller input buffer
- **file**: RecordingFile, the open/verify/close lifecycle and all
  frame-addressed reads and writes
- **cli**: The recinfo command-line tool

Quick Start
-----------
Start a new recording:
    >>> from input_recording import RecordingFile, PadData
    >>> rec = RecordingFile()
    >>> rec.open_new("session.p2m2", from_savestate=False)
    >>> rec.header.set_emulator_version()
    >>> rec.header.set_game_name("Example Game")
    >>> rec.write_header()
    >>> rec.write_frame(0, 0, PadData())
    >>> rec.set_total_frames(1)
    >>> rec.close()

Or use the command-line tool:
    $ recinfo info session.p2m2
    $ recinfo dump session.p2m2 --port 0 --start 0 --end 60
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from input_recording.errors import (
    RecordingError,
    RecordingFormatError,
    RecordingOpenError,
    RecordingFailure,
)
from input_recording.config import (
    RecordingConfig,
    get_config,
    set_config,
)
from input_recording.header import (
    SUPPORTED_VERSION,
    HEADER_SIZE,
    EMULATOR_VERSION_CAPACITY,
    AUTHOR_CAPACITY,
    GAME_NAME_CAPACITY,
    BoundedString,
    Header,
)
from input_recording.pad import (
    CONTROLLER_INPUT_BYTES,
    CONTROLLER_PORTS,
    INPUT_BYTES_PER_FRAME,
    PadData,
)
from input_recording.file import (
    HEADER_REGION_SIZE,
    FRAME_DATA_OFFSET,
    SEEKPOINT_TOTAL_FRAMES,
    SEEKPOINT_UNDO_COUNT,
    SEEKPOINT_SAVESTATE,
    RecordingFile,
    block_offset,
    is_valid_address,
    key_offset,
)

__all__ = [
    "__version__",
    # Errors
    "RecordingError",
    "RecordingFormatError",
    "RecordingOpenError",
    "RecordingFailure",
    # Configuration
    "RecordingConfig",
    "get_config",
    "set_config",
    # Header
    "SUPPORTED_VERSION",
    "HEADER_SIZE",
    "EMULATOR_VERSION_CAPACITY",
    "AUTHOR_CAPACITY",
    "GAME_NAME_CAPACITY",
    "BoundedString",
    "Header",
    # Controller input
    "CONTROLLER_INPUT_BYTES",
    "CONTROLLER_PORTS",
    "INPUT_BYTES_PER_FRAME",
    "PadData",
    # Recording file
    "HEADER_REGION_SIZE",
    "FRAME_DATA_OFFSET",
    "SEEKPOINT_TOTAL_FRAMES",
    "SEEKPOINT_UNDO_COUNT",
    "SEEKPOINT_SAVESTATE",
    "RecordingFile",
    "block_offset",
    "is_valid_address",
    "key_offset",
]
