"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    RECORDING_ERROR = 1  # File could not be opened, verified or written
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Unified exception handler for the CLI tools.

    Formats the error message, optionally prints a traceback for internal
    errors in verbose mode, and exits with the matching exit code.

    Raises:
        SystemExit: Always
    """
    from input_recording.errors import RecordingError

    if isinstance(error, RecordingError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.RECORDING_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
