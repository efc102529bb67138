"""
Base Inspector Interface

Abstract base class that all language inspectors implement, plus the
tree-walking helpers they share. Each inspector turns a tree-sitter parse
tree into graph entities; package and project scans are implemented here
once on top of the per-file extraction.
"""

import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tree_sitter import Node

from linager.configs.ignore_patterns import is_ignored, load_ignore_patterns
from linager.configs.logging import get_logger
from linager.configs.runtime import InspectorConfig
from linager.exceptions import InspectError, ParseError
from linager.graph.file import File
from linager.graph.location import Location, LocationNode
from linager.graph.package import Package
from linager.graph.project import Project
from linager.inspector.parser import get_parser
from linager.repository.assets import has_source_files, read_assets
from linager.repository.detector import detect_project, detect_repository

logger = get_logger("inspector")

COMMENT_TYPES = {"comment", "line_comment", "block_comment"}

# Statement terminators some grammars keep as anonymous siblings (Go "\n")
SEPARATOR_TYPES = {"\n", ";"}

# A comment after an opening delimiter documents what follows it
OPENING_TYPES = {"{", "(", "["}


@dataclass
class FileContext:
    """Per-call extraction state; never shared between inspect calls."""

    source: bytes
    path: str
    file: File
    imports: dict[str, str] = field(default_factory=dict)  # local name -> import path


class Inspector(ABC):
    """
    Abstract base class for language-specific inspectors.

    Subclasses implement ``extract_file``; source, file, package and project
    inspection are built on it.
    """

    extensions: tuple[str, ...] = ()
    default_filename = "source"

    def __init__(self, config: Optional[InspectorConfig] = None):
        self.config = config or InspectorConfig()

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the language name (e.g., 'go', 'java')."""
        pass

    @abstractmethod
    def extract_file(self, root: Node, ctx: FileContext) -> None:
        """
        Populate ``ctx.file`` from a parse tree.

        Args:
            root: Root node of the parse tree
            ctx: Per-call state holding the source bytes and the File
        """
        pass

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def inspect_source(self, source: bytes | str, path: str = "") -> File:
        """
        Extract a File from source code.

        Args:
            source: Source code (bytes or str)
            path: Path used for names and error context

        Returns:
            File entity

        Raises:
            ParseError: The source has syntax errors and they are not tolerated
        """
        if isinstance(source, str):
            source = source.encode("utf-8")
        tree = get_parser().parse(source, self.language)
        if tree is None:
            raise InspectError(f"no grammar for language {self.language}")
        root = tree.root_node
        display = path or self.default_filename
        if root.has_error and not self.config.tolerate_syntax_errors:
            raise ParseError(display, line=first_error_line(root))

        file = File(
            name=os.path.basename(display),
            path=display,
            language=self.language,
        )
        ctx = FileContext(source=source, path=display, file=file)
        self.extract_file(root, ctx)
        for t in file.types:
            t.seal_layout()
        logger.debug(
            f"Inspected {display}: {len(file.types)} types, "
            f"{len(file.functions)} functions"
        )
        return file

    def inspect_file(self, path: str) -> File:
        """Read and extract one file; I/O errors carry the path."""
        try:
            source = Path(path).read_bytes()
        except OSError as e:
            raise InspectError(f"failed to read file {path}: {e}", {"path": path}) from e
        return self.inspect_source(source, os.path.abspath(path))

    def inspect_package(self, directory: str, root: Optional[str] = None) -> Package:
        """
        Extract every source file of one package directory.

        Args:
            directory: Package directory
            root: Project root, used to derive import paths

        Returns:
            Package with files and (unless skipped) assets
        """
        abs_dir = os.path.abspath(directory)
        names = self.source_files(abs_dir)
        if not names:
            raise InspectError(f"no {self.language} files found in package: {directory}")

        files = [self.inspect_file(os.path.join(abs_dir, name)) for name in names]
        import_path = self.import_path(abs_dir, root)
        pkg = Package(
            name=self.package_name(abs_dir, files),
            path=abs_dir,
            import_path=import_path,
        )
        for f in files:
            if not f.package:
                f.package = pkg.name
            if not f.import_path:
                f.import_path = import_path
            pkg.add_file(f)

        if not self.config.skip_asset:
            for asset in read_assets(abs_dir, self.extensions, import_path):
                pkg.add_asset(asset)
        return pkg

    def inspect_packages(self, root: str) -> list[Package]:
        """
        Extract every package below ``root``.

        Packages that fail to extract are logged and skipped so one bad
        directory does not abort a whole scan.
        """
        abs_root = os.path.abspath(root)
        directories = self.package_directories(abs_root)

        def scan(directory: str) -> Optional[Package]:
            try:
                return self.inspect_package(directory, abs_root)
            except InspectError as e:
                logger.warning(f"Skipping package {directory}: {e}")
                return None

        if self.config.max_workers > 1 and len(directories) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(scan, directories))
        else:
            results = [scan(d) for d in directories]
        return [pkg for pkg in results if pkg is not None]

    def inspect_project(self, root: str) -> Project:
        """Extract all packages below ``root`` and normalize paths."""
        location = os.path.abspath(root)
        project = Project(path=location)

        info = detect_project(location)
        project.name = info.name
        project.type = info.type
        project.path = info.root_path or location

        repo = detect_repository(location)
        project.repository_url = repo.origin

        for pkg in self.inspect_packages(location):
            project.add_package(pkg)
        project.init()
        logger.info(f"Inspected project {project.name}: {len(project.packages)} packages")
        return project

    # ------------------------------------------------------------------
    # Layout hooks
    # ------------------------------------------------------------------

    def is_test_file(self, name: str) -> bool:
        """Check if a file is a test file based on its name."""
        return False

    def is_source_file(self, name: str) -> bool:
        if Path(name).suffix.lower() not in self.extensions:
            return False
        if self.config.skip_tests and self.is_test_file(name):
            return False
        return True

    def source_files(self, directory: str) -> list[str]:
        """
        Source files of a package directory, relative to it.

        With ``recursive_packages`` the files of nested directories belong to
        the package too.
        """
        if self.config.recursive_packages:
            names = []
            ignore = load_ignore_patterns(directory)
            for current, dirnames, filenames in os.walk(directory):
                dirnames[:] = sorted(
                    d for d in dirnames if not d.startswith(".") and not is_ignored(d, ignore)
                )
                rel = os.path.relpath(current, directory)
                for name in sorted(filenames):
                    if self.is_source_file(name):
                        names.append(name if rel == "." else os.path.join(rel, name))
            return names

        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            raise InspectError(f"failed to read directory {directory}: {e}") from e
        return [
            name for name in entries
            if self.is_source_file(name) and os.path.isfile(os.path.join(directory, name))
        ]

    def package_directories(self, root: str) -> list[str]:
        """Directories below ``root`` that hold at least one source file."""
        ignore = load_ignore_patterns(root)
        directories = []
        for current, dirnames, _ in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".")
                and not is_ignored(d, ignore)
                and not self.is_test_directory(os.path.join(current, d))
            )
            if has_source_files(current, self.is_source_file):
                directories.append(current)
                if self.config.recursive_packages:
                    # Nested directories are part of this package
                    dirnames[:] = []
        return directories

    def is_test_directory(self, path: str) -> bool:
        """Directories skipped entirely when tests are skipped."""
        return False

    def package_name(self, directory: str, files: list[File]) -> str:
        for f in files:
            if f.package:
                return f.package
        return os.path.basename(directory)

    def import_path(self, directory: str, root: Optional[str] = None) -> str:
        """Root-relative, slash-separated directory path."""
        if root:
            rel = os.path.relpath(directory, root)
            if rel != ".":
                return rel.replace(os.sep, "/")
        return os.path.basename(directory)

    # ------------------------------------------------------------------
    # Helper methods for AST traversal
    # ------------------------------------------------------------------

    def get_node_text(self, node: Optional[Node], source: bytes) -> str:
        """Extract the text content of an AST node."""
        if node is None:
            return ""
        return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def find_children(self, node: Node, type_name: str) -> list[Node]:
        """Find all direct children of a specific type."""
        return [child for child in node.children if child.type == type_name]

    def find_child(self, node: Node, type_name: str) -> Optional[Node]:
        """Find the first direct child of a specific type."""
        for child in node.children:
            if child.type == type_name:
                return child
        return None

    def location(self, node: Node, source: bytes, start: Optional[Node] = None) -> Location:
        """Span of ``node`` (optionally starting at ``start``) with its raw text."""
        first = start or node
        return Location(
            start=first.start_byte,
            end=node.end_byte,
            line=first.start_point[0] + 1,
            raw=source[first.start_byte:node.end_byte].decode("utf-8", errors="replace"),
        )

    def leading_comment(self, node: Node, source: bytes) -> Optional[LocationNode]:
        """
        Comment block directly above ``node``.

        Consecutive comment siblings count when no blank line separates
        them from the node. A comment trailing code on its own line is not
        a doc comment.
        """
        comments: list[Node] = []
        row = node.start_point[0]
        prev = node.prev_sibling
        while prev is not None and prev.type in COMMENT_TYPES and prev.end_point[0] >= row - 1:
            before = prev.prev_sibling
            while before is not None and before.type in SEPARATOR_TYPES:
                before = before.prev_sibling
            if (
                before is not None
                and before.type not in COMMENT_TYPES
                and before.type not in OPENING_TYPES
                and before.end_point[0] == prev.start_point[0]
            ):
                break
            comments.insert(0, prev)
            row = prev.start_point[0]
            prev = before
        if not comments:
            return None
        return self._comment_node(comments, source)

    def trailing_comment(self, node: Node, source: bytes) -> Optional[LocationNode]:
        """Comment on the same line right after ``node``."""
        nxt = node.next_sibling
        if nxt is not None and nxt.type in COMMENT_TYPES and nxt.start_point[0] == node.end_point[0]:
            return self._comment_node([nxt], source)
        return None

    def _comment_node(self, comments: list[Node], source: bytes) -> LocationNode:
        text = "\n".join(clean_comment(self.get_node_text(c, source)) for c in comments)
        return LocationNode(
            text=text.strip(),
            location=self.location(comments[-1], source, start=comments[0]),
        )


def clean_comment(text: str) -> str:
    """Strip comment markers (//, #, /* */, leading *) from comment text."""
    lines = []
    for line in text.splitlines():
        s = line.strip()
        if s.startswith("//"):
            s = s[2:]
        elif s.startswith("#"):
            s = s[1:]
        else:
            if s.startswith("/**"):
                s = s[3:]
            elif s.startswith("/*"):
                s = s[2:]
            if s.endswith("*/"):
                s = s[:-2]
            s = s.strip()
            if s.startswith("*"):
                s = s[1:]
        lines.append(s.strip())
    return "\n".join(lines).strip()


def split_annotations(comment: str) -> tuple[str, str]:
    """Separate ``@annotation`` lines from the rest of a comment."""
    annotations = []
    comments = []
    for line in comment.splitlines():
        line = line.strip()
        if line.startswith("@"):
            annotations.append(line)
        elif line:
            comments.append(line)
    return "\n".join(comments), "\n".join(annotations)


def first_error_line(root: Node) -> Optional[int]:
    """1-based line of the first ERROR or MISSING node, if any."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


# Registry of inspectors by file extension
_inspectors: dict[str, type[Inspector]] = {}


def register_inspector(inspector_cls: type[Inspector]) -> type[Inspector]:
    """Register an inspector class for each of its extensions."""
    for ext in inspector_cls.extensions:
        _inspectors[ext] = inspector_cls
    return inspector_cls


def get_inspector_class(extension: str) -> Optional[type[Inspector]]:
    """
    Get the inspector class for a file extension.

    Args:
        extension: Extension including the dot

    Returns:
        Inspector class or None if unsupported
    """
    return _inspectors.get(extension.lower())
