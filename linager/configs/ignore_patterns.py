"""
Linager Ignore Patterns

Directory names matching a pattern are skipped while scanning packages and
collecting assets. Patterns are fnmatch globs read from the defaults below,
the global ``linagerignore`` in the data directory and a project's
``.linagerignore``.
"""

import fnmatch
from pathlib import Path

from linager.configs.paths import get_data_path

IGNORE_FILE_NAME = ".linagerignore"

DEFAULT_IGNORE_PATTERNS = frozenset({
    ".git", ".svn", ".hg",
    "node_modules", "vendor", "bower_components",
    ".venv", "venv", "__pycache__", ".tox", ".eggs", "*.egg-info",
    ".pytest_cache", ".mypy_cache", ".ruff_cache",
    "dist", "build", "out", "target", "bin",
    ".idea", ".vscode", ".cache", "coverage",
})


def read_ignore_file(path: Path) -> set[str]:
    """Patterns of one ignore file: one per line, ``#`` comments, trailing ``/`` dropped."""
    if not path.is_file():
        return set()
    lines = (line.strip().rstrip("/") for line in path.read_text().splitlines())
    return {line for line in lines if line and not line.startswith("#")}


def load_ignore_patterns(root_path: str, use_linagerignore: bool = True) -> set[str]:
    """
    Ignore patterns for a scan rooted at ``root_path``.

    Args:
        root_path: Project or package root
        use_linagerignore: Read the global and project ignore files too

    Returns:
        Set of fnmatch patterns
    """
    patterns = set(DEFAULT_IGNORE_PATTERNS)
    if use_linagerignore:
        patterns |= read_ignore_file(get_data_path() / IGNORE_FILE_NAME.lstrip("."))
        patterns |= read_ignore_file(Path(root_path) / IGNORE_FILE_NAME)
    return patterns


def is_ignored(name: str, patterns: set[str]) -> bool:
    return any(fnmatch.fnmatch(name, p) for p in patterns)
