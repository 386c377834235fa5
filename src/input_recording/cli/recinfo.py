"""
recinfo - Input Recording File Tool
===================================

Command-line interface for creating and inspecting input recording files.

Commands
--------
- **create**: Start a new, empty recording and write its header
- **info**: Show the header and counters of a recording
- **dump**: Print the raw input bytes of a range of frames
- **validate**: Check that a recording can be opened

Usage Examples
--------------
Create an empty recording:
    $ recinfo create -a "me" -g "Example Game" run.p2m2

Show recording information:
    $ recinfo info run.p2m2

Dump port 1 for the first second of play:
    $ recinfo dump run.p2m2 --port 1 --start 0 --end 60

Exit Codes
----------
0 - Success
1 - Recording could not be opened, verified or written
2 - Invalid arguments
"""

import logging
from pathlib import Path
from typing import Optional

import click

from input_recording import __version__
from input_recording.cli.errors import ExitCode, handle_cli_exception
from input_recording.config import get_config
from input_recording.errors import RecordingOpenError
from input_recording.file import RecordingFile
from input_recording.pad import CONTROLLER_PORTS

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def open_recording(path: Path) -> RecordingFile:
    """Open and verify an existing recording, raising on failure."""
    recording = RecordingFile()
    if not recording.open_existing(path):
        raise RecordingOpenError(path, recording.last_failure)
    return recording


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="recinfo")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Input recording file tool.

    \b
    Commands:
      create    Start a new empty recording
      info      Show header and counters
      dump      Print raw input bytes for a frame range
      validate  Check a recording opens cleanly
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Create Command
# =============================================================================

@main.command("create")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-a", "--author", default=None, help="Author (default: from configuration)")
@click.option("-g", "--game", "game_name", default="", help="Game name")
@click.option(
    "-e", "--emulator-version",
    default=None,
    help="Emulator version string (default: host application name and version)",
)
@click.option(
    "--from-savestate",
    is_flag=True,
    help="Mark the recording as starting from a savestate",
)
@pass_context
def cmd_create(
    ctx: Context,
    path: Path,
    author: Optional[str],
    game_name: str,
    emulator_version: Optional[str],
    from_savestate: bool,
) -> None:
    """
    Start a new recording at PATH with no frames.

    An existing file at PATH is overwritten.
    """
    try:
        with RecordingFile() as recording:
            if not recording.open_new(path, from_savestate):
                raise RecordingOpenError(path, recording.last_failure)

            header = recording.header
            header.set_emulator_version(emulator_version)
            header.set_author(author if author is not None else get_config().default_author)
            header.set_game_name(game_name)

            if not recording.write_header():
                raise RecordingOpenError(path, recording.last_failure)

        click.echo(f"Created {path}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
def cmd_info(ctx: Context, path: Path) -> None:
    """Show the header and counters of the recording at PATH."""
    try:
        with open_recording(path) as recording:
            header = recording.header
            click.echo(f"Recording Information: {path}")
            click.echo("=" * 40)
            click.echo(f"Version:        {header.version}")
            click.echo(f"Emulator:       {header.emulator_version.value}")
            click.echo(f"Author:         {header.author.value}")
            click.echo(f"Game:           {header.game_name.value}")
            click.echo(f"Total Frames:   {recording.total_frames}")
            click.echo(f"Undo Count:     {recording.undo_count}")
            start = "savestate" if recording.from_savestate else "power-on"
            click.echo(f"Starts From:    {start}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Dump Command
# =============================================================================

@main.command("dump")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-p", "--port",
    type=click.IntRange(0, CONTROLLER_PORTS - 1),
    default=0,
    help="Controller port (default: 0)",
)
@click.option("-s", "--start", type=int, default=0, help="First frame (default: 0)")
@click.option(
    "-e", "--end",
    type=int,
    default=None,
    help="Frame after the last one to print (default: total frames)",
)
@pass_context
def cmd_dump(ctx: Context, path: Path, port: int, start: int, end: Optional[int]) -> None:
    """
    Print the input bytes of one port for a range of frames.

    Frames with no recorded data are reported as missing.
    """
    try:
        with open_recording(path) as recording:
            if end is None:
                end = recording.total_frames
            frames = recording.bulk_read_pad_data(start, end, port)

            for frame in range(max(start, 0), end):
                pad = frames.get(frame)
                if pad is None:
                    click.echo(f"{frame:>8}: <missing>")
                else:
                    click.echo(f"{frame:>8}: {pad.to_bytes().hex(' ')}")

            logger.debug(f"Read {len(frames)} frames from port {port}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Validate Command
# =============================================================================

@main.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
def cmd_validate(ctx: Context, path: Path) -> None:
    """Check that the recording at PATH has a valid, supported header."""
    recording = RecordingFile()
    if recording.open_existing(path):
        recording.close()
        click.echo(f"{path}: valid")
        return

    click.echo(f"{path}: invalid ({recording.last_failure.describe()})", err=True)
    raise SystemExit(ExitCode.RECORDING_ERROR)


if __name__ == "__main__":
    main()
