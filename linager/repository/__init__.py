"""
Repository Module

Project/repository detection and non-source asset collection.
"""

from linager.repository.assets import has_source_files, read_assets
from linager.repository.detector import (
    PROJECT_MARKERS,
    ProjectInfo,
    RepositoryInfo,
    detect_project,
    detect_repository,
    extract_project_name,
    find_go_module,
)

__all__ = [
    "PROJECT_MARKERS",
    "ProjectInfo",
    "RepositoryInfo",
    "detect_project",
    "detect_repository",
    "extract_project_name",
    "find_go_module",
    "has_source_files",
    "read_assets",
]
