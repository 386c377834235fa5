"""
Input Recording - Configuration
===============================

Library configuration. Values come from:
- Default values (defined here)
- Environment variables

The configuration only carries host-application details. The binary format
constants (field capacities, per-port buffer size, port count) live in
the header and file modules, because changing them changes the format.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging
import os

from input_recording import __version__

logger = logging.getLogger(__name__)


def _parse_version(text: str) -> Tuple[int, int, int]:
    """Parse a "major.mid.lo" string into a three-part version tuple."""
    parts = text.strip().split(".")
    if len(parts) != 3:
        raise ValueError(f"expected major.mid.lo, got '{text}'")
    major, mid, lo = (int(p) for p in parts)
    return major, mid, lo


@dataclass
class RecordingConfig:
    """
    Configuration for recording files.

    Attributes:
        app_name: Host application name used in the default emulator
            version string
        app_version: Host application (major, mid, lo) version
        default_author: Author written into new recordings by the CLI
    """

    app_name: str = "input-recording"
    app_version: Tuple[int, int, int] = _parse_version(__version__)
    default_author: str = ""

    def emulator_version_string(self) -> str:
        """Compose the default emulator version, e.g. "app-1.7.0"."""
        major, mid, lo = self.app_version
        return f"{self.app_name}-{major}.{mid}.{lo}"

    @classmethod
    def from_env(cls) -> "RecordingConfig":
        """
        Create RecordingConfig from environment variables.

        Environment variables (all optional):
            INPUT_RECORDING_APP_NAME: Host application name
            INPUT_RECORDING_APP_VERSION: Host version as "major.mid.lo"
            INPUT_RECORDING_AUTHOR: Default author for new recordings

        Returns:
            RecordingConfig with values from environment variables
        """
        config = cls()

        if app_name := os.environ.get("INPUT_RECORDING_APP_NAME"):
            config.app_name = app_name

        if app_version := os.environ.get("INPUT_RECORDING_APP_VERSION"):
            try:
                config.app_version = _parse_version(app_version)
            except ValueError:
                logger.warning(f"Ignoring invalid INPUT_RECORDING_APP_VERSION: {app_version!r}")

        if author := os.environ.get("INPUT_RECORDING_AUTHOR"):
            config.default_author = author

        return config


_config: Optional[RecordingConfig] = None


def get_config() -> RecordingConfig:
    """
    Get the process-wide configuration.

    Creates from environment variables on first access.
    """
    global _config
    if _config is None:
        _config = RecordingConfig.from_env()
    return _config


def set_config(config: Optional[RecordingConfig]) -> None:
    """Replace the process-wide configuration (None resets to environment)."""
    global _config
    _config = config
