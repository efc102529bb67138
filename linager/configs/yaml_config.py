"""
Linager YAML Configuration

Loading, saving, and defaults for ~/.linager/config.yaml.
"""

from pathlib import Path

import yaml

from linager.configs.logging import get_logger
from linager.configs.paths import ensure_data_dir, get_data_path

logger = get_logger("configs.yaml")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# Linager Configuration
# Edit this file to customize extraction behavior.

# Enable debug logging
debug: false

# Source inspection
inspector:
  # Keep unexported (lowercase / private) declarations
  include_unexported: true

  # Skip test files (*_test.go, *Test.java, *.test.js, test_*.py)
  skip_tests: true

  # Do not collect non-source files as assets
  skip_asset: false

  # Treat nested Java directories as part of the parent package
  recursive_packages: false

  # Extract what tree-sitter recovered instead of failing on syntax errors
  tolerate_syntax_errors: false

  # Parallel package scans for whole projects (1 = sequential)
  max_workers: 1

# Document export
documents:
  # Stop exporting once the cumulative document size reaches this (0 = no limit)
  max_total_size: 0
"""


def get_config_path() -> Path:
    """Get the path to config.yaml."""
    return get_data_path() / "config.yaml"


def load_yaml_config() -> dict:
    """
    Load configuration from ~/.linager/config.yaml.

    Returns:
        Configuration dictionary (empty if file doesn't exist or is invalid)
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        content = config_path.read_text()
        return yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return {}


def save_yaml_config(config: dict) -> bool:
    """
    Save configuration to ~/.linager/config.yaml.

    Args:
        config: Configuration dictionary to save

    Returns:
        True if successful
    """
    config_path = get_config_path()
    ensure_data_dir()

    try:
        content = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
        config_path.write_text(content)
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config {config_path}: {e}")
        return False


def create_default_config() -> bool:
    """
    Create default config.yaml if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = get_config_path()
    if config_path.exists():
        return False

    ensure_data_dir()
    config_path.write_text(DEFAULT_CONFIG_YAML)
    return True
