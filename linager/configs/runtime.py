"""
Linager Runtime Configuration

Inspector options merged from defaults, YAML config and environment
variables.
"""

import os
from dataclasses import dataclass, fields

from linager.configs.yaml_config import load_yaml_config
from linager.exceptions import ConfigurationError

# --- Default Inspector Configuration ---

DEFAULT_CONFIG = {
    "include_unexported": True,
    "skip_tests": True,
    "skip_asset": False,
    "recursive_packages": False,
    "tolerate_syntax_errors": False,
    "max_workers": 1,
}


@dataclass
class InspectorConfig:
    """Options shared by every language inspector."""

    include_unexported: bool = True
    skip_tests: bool = True
    skip_asset: bool = False
    recursive_packages: bool = False  # Java: nested directories join the parent package
    tolerate_syntax_errors: bool = False
    max_workers: int = 1


def _coerce(name: str, raw, default):
    """Convert an env/YAML value to the type of its default."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).lower() in ("true", "1", "yes")
    if isinstance(default, int):
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid value for {name}: {raw!r}") from e
    return raw


def load_inspector_config(**overrides) -> InspectorConfig:
    """
    Build the inspector configuration.

    Priority:
    1. Explicit keyword overrides
    2. LINAGER_<OPTION> env vars (e.g. LINAGER_SKIP_TESTS=false)
    3. inspector section of config.yaml
    4. DEFAULT_CONFIG

    Returns:
        InspectorConfig instance
    """
    yaml_section = load_yaml_config().get("inspector") or {}
    if not isinstance(yaml_section, dict):
        raise ConfigurationError("inspector section of config.yaml must be a mapping")

    values = {}
    for option in fields(InspectorConfig):
        name = option.name
        default = DEFAULT_CONFIG[name]
        if name in overrides and overrides[name] is not None:
            values[name] = overrides[name]
            continue
        env_value = os.environ.get(f"LINAGER_{name.upper()}")
        if env_value is not None and env_value != "":
            values[name] = _coerce(name, env_value, default)
        elif name in yaml_section:
            values[name] = _coerce(name, yaml_section[name], default)
        else:
            values[name] = default

    if values["max_workers"] < 1:
        raise ConfigurationError("max_workers must be at least 1")
    return InspectorConfig(**values)


def get_max_total_size() -> int:
    """Cumulative document size limit for exports (0 = unlimited)."""
    env_value = os.environ.get("LINAGER_MAX_TOTAL_SIZE")
    if env_value:
        return _coerce("max_total_size", env_value, 0)
    documents = load_yaml_config().get("documents") or {}
    return _coerce("max_total_size", documents.get("max_total_size", 0), 0)
