"""
Input Recording Error Hierarchy
===============================

This module defines the error types used by the input recording library.

File-level operations on a RecordingFile never raise for I/O problems.
They return a failure result and record *why* they failed as a
RecordingFailure value, so a recording controller can keep driving the
emulator without unwinding through its frame loop.

Exceptions are reserved for parse boundaries (decoding a header from raw
bytes) and for the command-line tools.

Exception Hierarchy
-------------------
RecordingError (base)
├── RecordingFormatError - header bytes are truncated or malformed
└── RecordingOpenError - a file could not be opened or verified (CLI only)

Failure Kinds
-------------
RecordingFailure.OPEN        - path unreachable, permission denied, ...
RecordingFailure.VERIFY      - premature EOF or unsupported version
RecordingFailure.SEEK        - seek to a computed offset failed
RecordingFailure.READ_SHORT  - fewer bytes read than requested
RecordingFailure.WRITE_SHORT - fewer bytes written than requested
RecordingFailure.NOT_OPEN    - operation attempted on a closed file
RecordingFailure.OUT_OF_RANGE - frame, port, index or counter value out of range
"""

from enum import IntEnum


# =============================================================================
# Base Exception Class
# =============================================================================

class RecordingError(Exception):
    """
    Base exception for all input recording errors.

    Callers can catch every library error with a single except clause:

        try:
            header = Header.from_bytes(data)
        except RecordingError as e:
            print(f"Error: {e}")
    """
    pass


class RecordingFormatError(RecordingError):
    """
    Invalid recording file format.

    Raised when decoding a header from a buffer that is shorter than the
    fixed header size.
    """
    pass


class RecordingOpenError(RecordingError):
    """
    A recording file could not be opened.

    Raised by the command-line tools when RecordingFile reports an open
    or verification failure. Carries the failure kind for exit reporting.
    """

    def __init__(self, path, failure: "RecordingFailure"):
        self.path = path
        self.failure = failure
        super().__init__(f"cannot open recording '{path}': {failure.describe()}")


# =============================================================================
# Failure Kinds
# =============================================================================

class RecordingFailure(IntEnum):
    """Reason the most recent RecordingFile operation failed."""
    NONE = 0
    OPEN = 1
    VERIFY = 2
    SEEK = 3
    READ_SHORT = 4
    WRITE_SHORT = 5
    NOT_OPEN = 6
    OUT_OF_RANGE = 7

    def describe(self) -> str:
        """Get a human-readable description of the failure."""
        descriptions = {
            RecordingFailure.NONE: "no failure",
            RecordingFailure.OPEN: "file could not be opened",
            RecordingFailure.VERIFY: "header is invalid or unsupported",
            RecordingFailure.SEEK: "seek failed",
            RecordingFailure.READ_SHORT: "read past end of file",
            RecordingFailure.WRITE_SHORT: "write failed",
            RecordingFailure.NOT_OPEN: "file is not open",
            RecordingFailure.OUT_OF_RANGE: "value out of range",
        }
        return descriptions[self]
