"""
Linager Configuration Module

Re-exports commonly used functions for cleaner imports across the codebase.
"""

# Logging (most commonly used)
from linager.configs.logging import get_logger, setup_logging

# Paths
from linager.configs.paths import get_data_path, ensure_data_dir

# Constants
from linager.configs.constants import (
    BINARY_EXTENSIONS,
    CHUNK_SIZE,
    MAX_ASSET_DOCUMENT_SIZE,
)

# Ignore patterns
from linager.configs.ignore_patterns import (
    DEFAULT_IGNORE_PATTERNS,
    is_ignored,
    load_ignore_patterns,
)

# YAML config
from linager.configs.yaml_config import (
    DEFAULT_CONFIG_YAML,
    get_config_path,
    load_yaml_config,
    save_yaml_config,
    create_default_config,
)

# Runtime
from linager.configs.runtime import (
    DEFAULT_CONFIG,
    InspectorConfig,
    get_max_total_size,
    load_inspector_config,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Paths
    "get_data_path",
    "ensure_data_dir",
    # Constants
    "BINARY_EXTENSIONS",
    "CHUNK_SIZE",
    "MAX_ASSET_DOCUMENT_SIZE",
    # Ignore patterns
    "DEFAULT_IGNORE_PATTERNS",
    "is_ignored",
    "load_ignore_patterns",
    # YAML config
    "DEFAULT_CONFIG_YAML",
    "get_config_path",
    "load_yaml_config",
    "save_yaml_config",
    "create_default_config",
    # Runtime
    "DEFAULT_CONFIG",
    "InspectorConfig",
    "get_max_total_size",
    "load_inspector_config",
]
