"""
Inspector Factory

Selects the language inspector for a file, package directory or project,
based on file extensions and the detected project type.
"""

import os
from collections import Counter
from pathlib import Path
from typing import Optional

from linager.configs.logging import get_logger
from linager.configs.runtime import InspectorConfig
from linager.exceptions import InspectError, UnsupportedFileTypeError
from linager.graph.file import File
from linager.graph.package import Package
from linager.graph.project import Project
from linager.inspector.base import Inspector, get_inspector_class
from linager.repository.detector import ProjectInfo, detect_project

logger = get_logger("inspector.factory")

# Project type (from the detector) -> extension of its inspector
PROJECT_TYPE_EXTENSIONS = {
    "go": ".go",
    "java": ".java",
    "javascript": ".js",
    "python": ".py",
}


class Factory:
    """Creates inspectors sharing one configuration."""

    def __init__(self, config: Optional[InspectorConfig] = None):
        self.config = config or InspectorConfig()

    def get_inspector(self, filename: str) -> Inspector:
        """
        Inspector for a file name.

        Raises:
            UnsupportedFileTypeError: No inspector handles the extension
        """
        return self.inspector_for_extension(Path(filename).suffix)

    def inspector_for_extension(self, extension: str) -> Inspector:
        """Inspector registered for ``extension`` (with the dot)."""
        ext = extension.lower()
        inspector_cls = get_inspector_class(ext)
        if inspector_cls is None:
            raise UnsupportedFileTypeError(ext)
        return inspector_cls(self.config)

    def inspect_file(self, filename: str) -> File:
        return self.get_inspector(filename).inspect_file(filename)

    def inspect_source(self, source: bytes | str, filename: str) -> File:
        """Extract source text, choosing the language from ``filename``."""
        return self.get_inspector(filename).inspect_source(source, filename)

    def inspect_package(self, directory: str) -> Package:
        """
        Inspect one package directory with the inspector of its first source file.

        Raises:
            InspectError: No file in the directory has a supported extension
        """
        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            raise InspectError(f"failed to read package directory: {directory}: {e}") from e

        for entry in entries:
            if get_inspector_class(Path(entry).suffix.lower()) is not None:
                return self.get_inspector(entry).inspect_package(directory)
        raise InspectError(f"unable to determine language for package: {directory}")

    def inspect_project(self, root: str, info: Optional[ProjectInfo] = None) -> Project:
        """
        Inspect a project with the inspector of its ecosystem.

        The project type comes from ``info`` (detected when omitted); for an
        unknown type the most common supported extension below the root
        decides.
        """
        info = info or detect_project(root)
        ext = PROJECT_TYPE_EXTENSIONS.get(info.type) or self._dominant_extension(root)
        if not ext:
            raise InspectError(f"unable to determine language for project: {root}", {"type": info.type})
        logger.info(f"Inspecting {info.type} project at {root} as {ext}")
        return self.inspector_for_extension(ext).inspect_project(root)

    def _dominant_extension(self, root: str) -> str:
        counts: Counter = Counter()
        for _, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not d.startswith(".")]
            for name in filenames:
                ext = Path(name).suffix.lower()
                if get_inspector_class(ext) is not None:
                    counts[ext] += 1
        if not counts:
            return ""
        return counts.most_common(1)[0][0]
