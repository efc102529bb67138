"""
Linager Data Paths

Location of the data directory holding config.yaml and the global
ignore file.
"""

import os
from pathlib import Path

DEFAULT_DATA_PATH = Path.home() / ".linager"


def get_data_path() -> Path:
    """Get the Linager data directory path.

    LINAGER_DATA_PATH overrides the default ~/.linager.

    Returns:
        Path to the data directory
    """
    override = os.environ.get("LINAGER_DATA_PATH")
    if override:
        return Path(override).expanduser()
    return DEFAULT_DATA_PATH


def ensure_data_dir() -> Path:
    """Ensure the data directory exists and return it."""
    data_path = get_data_path()
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path
