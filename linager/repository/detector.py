"""
Project and Repository Detection

Best-effort discovery of a project's root, ecosystem type and name by
walking upward for marker files, and of the enclosing git repository and
its origin URL. Detection never raises: when nothing is found the caller
gets the absolute path and type "unknown".
"""

import json
import os
import re
import tomllib
from dataclasses import dataclass, field
from typing import Optional

from linager.configs.logging import get_logger

logger = get_logger("repository.detector")

# Marker file -> project type, in lookup order
PROJECT_MARKERS = [
    ("go.mod", "go"),
    ("pom.xml", "java"),
    ("build.gradle", "java"),
    ("package.json", "javascript"),
    ("composer.json", "php"),
    ("Cargo.toml", "rust"),
    ("pyproject.toml", "python"),
    ("requirements.txt", "python"),
    ("Gemfile", "ruby"),
    (".git", "git"),
]

_GO_MODULE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)
_MAVEN_ARTIFACT = re.compile(r"<artifactId>([^<]+)</artifactId>")
_GRADLE_NAME = re.compile(r"(?:rootProject|project)\.name\s*=\s*['\"]([^'\"]+)['\"]")
_SETUP_NAME = re.compile(r"name\s*=\s*['\"]([^'\"]+)['\"]")


@dataclass
class ProjectInfo:
    root_path: str
    type: str = "unknown"
    name: str = ""
    relative_path: str = ""  # From root_path to the inspected path
    go_module: str = ""


@dataclass
class RepositoryInfo:
    kind: str = ""
    root: str = ""
    origin: str = ""
    info: Optional[ProjectInfo] = field(default=None)


def _start_dir(abs_path: str) -> str:
    if os.path.isdir(abs_path):
        return abs_path
    return os.path.dirname(abs_path)


def _read_text(path: str) -> str:
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except OSError:
        return ""


def find_project_root(start_dir: str) -> tuple[str, str]:
    """Walk upward for the first directory holding a marker; ("", "") if none."""
    current = start_dir
    while True:
        for marker, project_type in PROJECT_MARKERS:
            if os.path.exists(os.path.join(current, marker)):
                return current, project_type
        parent = os.path.dirname(current)
        if parent == current:
            return "", ""
        current = parent


def find_git_root(start_dir: str) -> str:
    """Walk upward for a .git directory, never climbing past $HOME."""
    home = os.environ.get("HOME", "")
    current = start_dir
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return current
        parent = os.path.dirname(current)
        if parent == current or parent == home:
            return ""
        current = parent


def extract_git_origin(git_root: str) -> str:
    """Origin URL from .git/config via a plain line scan."""
    found_remote = False
    for line in _read_text(os.path.join(git_root, ".git", "config")).splitlines():
        line = line.strip()
        if '[remote "origin"]' in line:
            found_remote = True
            continue
        if found_remote and line.startswith("["):
            break
        if found_remote and line.startswith("url = "):
            return line[len("url = "):]
    return ""


def go_module_path(go_mod: str) -> str:
    match = _GO_MODULE.search(_read_text(go_mod))
    return match.group(1) if match else ""


def find_go_module(directory: str) -> tuple[str, str]:
    """(module path, module root) of the go.mod governing ``directory``."""
    current = os.path.abspath(directory)
    while True:
        go_mod = os.path.join(current, "go.mod")
        if os.path.isfile(go_mod):
            return go_module_path(go_mod), current
        parent = os.path.dirname(current)
        if parent == current:
            return "", ""
        current = parent


def _toml_name(path: str, *sections: tuple[str, ...]) -> str:
    text = _read_text(path)
    if not text:
        return ""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        logger.debug(f"Unparseable {path}: {e}")
        return ""
    for section in sections:
        node = data
        for key in section:
            node = node.get(key, {}) if isinstance(node, dict) else {}
        if isinstance(node, dict) and isinstance(node.get("name"), str):
            return node["name"]
    return ""


def extract_project_name(root: str, project_type: str) -> str:
    """Project name from the ecosystem's manifest, else the directory name."""
    fallback = os.path.basename(root)
    if project_type == "go":
        return go_module_path(os.path.join(root, "go.mod")) or fallback
    if project_type == "javascript":
        try:
            data = json.loads(_read_text(os.path.join(root, "package.json")) or "{}")
        except json.JSONDecodeError:
            data = {}
        name = data.get("name") if isinstance(data, dict) else None
        return name if isinstance(name, str) and name else fallback
    if project_type == "java":
        match = _MAVEN_ARTIFACT.search(_read_text(os.path.join(root, "pom.xml")))
        if match:
            return match.group(1)
        match = _GRADLE_NAME.search(_read_text(os.path.join(root, "build.gradle")))
        return match.group(1) if match else fallback
    if project_type == "python":
        name = _toml_name(os.path.join(root, "pyproject.toml"), ("project",), ("tool", "poetry"))
        if name:
            return name
        match = _SETUP_NAME.search(_read_text(os.path.join(root, "setup.py")))
        return match.group(1) if match else fallback
    if project_type == "rust":
        return _toml_name(os.path.join(root, "Cargo.toml"), ("package",)) or fallback
    if project_type == "git":
        origin = extract_git_origin(root)
        if origin:
            return origin.rstrip("/").removesuffix(".git").split("/")[-1] or fallback
    return fallback


def detect_project(path: str, base_url: str = "") -> ProjectInfo:
    """
    Identify the project containing ``path``.

    Args:
        path: File or directory inside the project
        base_url: Root to report when no marker is found

    Returns:
        ProjectInfo; type "unknown" and the path itself when undetected
    """
    abs_path = os.path.abspath(path)
    info = ProjectInfo(root_path=abs_path)
    if not os.path.exists(abs_path):
        logger.debug(f"Cannot detect project for missing path {abs_path}")
        return info

    root, project_type = find_project_root(_start_dir(abs_path))
    if root:
        info.root_path = root
        info.type = project_type
        info.name = extract_project_name(root, project_type)
        if project_type == "go":
            info.go_module = info.name
    elif base_url:
        info.root_path = base_url
    if not info.name:
        info.name = os.path.basename(info.root_path)

    rel = os.path.relpath(abs_path, info.root_path) if os.path.isabs(info.root_path) else abs_path
    info.relative_path = rel.replace(os.sep, "/")
    return info


def detect_repository(path: str) -> RepositoryInfo:
    """Identify the git repository (or, failing that, the project) holding ``path``."""
    abs_path = os.path.abspath(path)
    if not os.path.exists(abs_path):
        return RepositoryInfo(root=abs_path)

    git_root = find_git_root(_start_dir(abs_path))
    info = detect_project(abs_path)
    if git_root:
        return RepositoryInfo(
            kind="git",
            root=git_root,
            origin=extract_git_origin(git_root),
            info=info,
        )
    return RepositoryInfo(kind=info.type, root=info.root_path, info=info)
