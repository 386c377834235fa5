"""
Tests for recinfo - Input Recording File Tool
=============================================

These tests drive the command-line tool through click's CliRunner.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from input_recording import FRAME_DATA_OFFSET, PadData, RecordingFile
from input_recording.cli.errors import ExitCode
from input_recording.cli.recinfo import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def recorded_file(tmp_path: Path) -> Path:
    """A recording with three frames of port 0 input."""
    path = tmp_path / "run.p2m2"
    rec = RecordingFile()
    assert rec.open_new(path, from_savestate=True)
    rec.header.set_emulator_version("Emu-1.2.3")
    rec.header.set_author("Tester")
    rec.header.set_game_name("Example Game")
    rec.write_header()
    for frame in range(3):
        rec.write_frame(frame, 0, PadData(bytes([frame]) * 18))
    rec.set_total_frames(3)
    rec.increment_undo_count()
    rec.close()
    return path


class TestRecinfoCli:
    """Tests for the recinfo commands."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "create" in result.output
        assert "dump" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "recinfo" in result.output

    def test_create(self, runner, tmp_path: Path):
        path = tmp_path / "new.p2m2"
        result = runner.invoke(
            main,
            ["create", "-a", "Me", "-g", "Some Game", "-e", "Emu-9.9.9", "--from-savestate", str(path)],
        )
        assert result.exit_code == 0, result.output
        assert path.stat().st_size == FRAME_DATA_OFFSET

        rec = RecordingFile()
        assert rec.open_existing(path)
        assert rec.header.author.value == "Me"
        assert rec.header.game_name.value == "Some Game"
        assert rec.header.emulator_version.value == "Emu-9.9.9"
        assert rec.from_savestate
        rec.close()

    def test_create_bad_path(self, runner, tmp_path: Path):
        path = tmp_path / "missing" / "new.p2m2"
        result = runner.invoke(main, ["create", str(path)])
        assert result.exit_code == ExitCode.RECORDING_ERROR

    def test_info(self, runner, recorded_file: Path):
        result = runner.invoke(main, ["info", str(recorded_file)])
        assert result.exit_code == 0, result.output
        assert "Emu-1.2.3" in result.output
        assert "Tester" in result.output
        assert "Example Game" in result.output
        assert "Total Frames:   3" in result.output
        assert "Undo Count:     1" in result.output
        assert "savestate" in result.output

    def test_info_rejects_bad_version(self, runner, tmp_path: Path):
        path = tmp_path / "old.p2m2"
        data = bytearray(FRAME_DATA_OFFSET)
        data[0] = 3
        path.write_bytes(bytes(data))

        result = runner.invoke(main, ["info", str(path)])
        assert result.exit_code == ExitCode.RECORDING_ERROR

    def test_dump(self, runner, recorded_file: Path):
        result = runner.invoke(main, ["dump", str(recorded_file), "--end", "5"])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0].strip().startswith("0: 00 00")
        assert lines[2].strip().startswith("2: 02 02")
        assert "<missing>" in lines[3]
        assert len(lines) == 5

    def test_dump_defaults_to_total_frames(self, runner, recorded_file: Path):
        result = runner.invoke(main, ["dump", str(recorded_file)])
        assert result.exit_code == 0, result.output
        assert len(result.output.splitlines()) == 3

    def test_dump_invalid_port(self, runner, recorded_file: Path):
        result = runner.invoke(main, ["dump", str(recorded_file), "--port", "5"])
        assert result.exit_code == 2

    def test_validate(self, runner, recorded_file: Path):
        result = runner.invoke(main, ["validate", str(recorded_file)])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_validate_truncated(self, runner, tmp_path: Path):
        path = tmp_path / "short.p2m2"
        path.write_bytes(b"\x01" * 10)
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == ExitCode.RECORDING_ERROR
