"""
Asset Collection

Non-source files below a package directory are captured verbatim. A
subdirectory holding source files is a package of its own, so its assets
are left to it.
"""

import os
from typing import Callable, Iterable

from linager.configs.constants import BINARY_EXTENSIONS
from linager.configs.ignore_patterns import DEFAULT_IGNORE_PATTERNS, is_ignored
from linager.exceptions import InspectError
from linager.graph.package import Asset


def has_source_files(directory: str, is_source: Callable[[str], bool]) -> bool:
    """Check whether ``directory`` directly contains a file accepted by ``is_source``."""
    try:
        entries = os.listdir(directory)
    except OSError:
        return False
    return any(
        is_source(name) and os.path.isfile(os.path.join(directory, name))
        for name in entries
    )


def read_assets(
    directory: str,
    source_extensions: Iterable[str],
    import_path: str = "",
    is_root: bool = True,
    ignore: set[str] | frozenset[str] = DEFAULT_IGNORE_PATTERNS,
) -> list[Asset]:
    """
    Collect non-source files recursively.

    Args:
        directory: Directory to scan
        source_extensions: Extensions of the inspected language (".go", ...)
        import_path: Import path recorded on each asset
        is_root: The package directory itself (always collected)
        ignore: Directory/file name patterns to skip

    Returns:
        Assets with absolute paths; empty for a non-root source directory
    """
    extensions = {ext.lower() for ext in source_extensions}
    try:
        entries = sorted(os.listdir(directory))
    except OSError as e:
        raise InspectError(f"failed to read directory {directory}: {e}", {"path": directory}) from e

    assets: list[Asset] = []
    subdirs: list[str] = []
    has_sources = False
    for name in entries:
        path = os.path.join(directory, name)
        if os.path.isdir(path):
            if not name.startswith(".") and not is_ignored(name, ignore):
                subdirs.append(path)
            continue
        ext = os.path.splitext(name)[1].lower()
        if ext in extensions:
            has_sources = True
            continue
        if ext in BINARY_EXTENSIONS or name.startswith(".") or is_ignored(name, ignore):
            continue
        try:
            with open(path, "rb") as fh:
                content = fh.read()
        except OSError as e:
            raise InspectError(f"failed to read asset {path}: {e}", {"path": path}) from e
        assets.append(Asset(path=path, name=name, import_path=import_path, content=content))

    if has_sources and not is_root:
        return []

    for subdir in subdirs:
        assets.extend(read_assets(subdir, extensions, import_path, is_root=False, ignore=ignore))
    return assets
