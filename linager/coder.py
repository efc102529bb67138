"""
Structural Editor

Coder creates and removes packages, files, types, fields, methods and
functions of a Project in place, loads a project through the inspector
factory and writes it back to disk through the language emitters.

Create operations raise NotFoundError when the named parent is missing;
remove operations return False instead.
The Coder is not safe for concurrent writers: serialize edits to one
Project.
"""

import os
from pathlib import Path
from typing import Optional

from linager.configs.logging import get_logger
from linager.configs.runtime import InspectorConfig
from linager.exceptions import NotFoundError, StoreError
from linager.graph.emitter import get_emitter
from linager.graph.file import File
from linager.graph.location import LocationNode
from linager.graph.package import Package
from linager.graph.project import Project
from linager.graph.types import Field, Function, Kind, Parameter, Type, is_exported_name
from linager.inspector.factory import Factory
from linager.repository.detector import detect_project

logger = get_logger("coder")


class Coder:
    """In-place editor over one Project."""

    def __init__(self, project: Optional[Project] = None, config: Optional[InspectorConfig] = None):
        self.project = project or Project()
        self.config = config

    # -------------------------------------------------------------------------
    # Packages and files
    # -------------------------------------------------------------------------

    def create_package(self, name: str, import_path: str = "", path: str = "") -> Package:
        pkg = Package(name=name, path=path or name, import_path=import_path or name)
        return self.project.add_package(pkg)

    def remove_package(self, name: str) -> bool:
        return self.project.remove_package(name)

    def create_file(self, package_name: str, file_name: str, file_path: str = "") -> File:
        """
        Add an empty file to a package.

        Args:
            package_name: Owning package
            file_name: File name, including its extension
            file_path: Root-relative path; defaults to package path + name

        Returns:
            The new File
        """
        pkg = self._package(package_name)
        if not file_path:
            file_path = f"{pkg.path}/{file_name}" if pkg.path else file_name
        f = File(
            name=file_name,
            path=file_path,
            package=pkg.name,
            import_path=pkg.import_path,
        )
        return pkg.add_file(f)

    def remove_file(self, package_name: str, file_name: str) -> bool:
        pkg = self.project.lookup_package(package_name)
        if pkg is None:
            return False
        return pkg.remove_file(file_name)

    # -------------------------------------------------------------------------
    # Types and members
    # -------------------------------------------------------------------------

    def create_type(self, package_name: str, file_name: str, type_name: str, kind: Kind = Kind.STRUCT) -> Type:
        pkg, f = self._file(package_name, file_name)
        t = Type(
            name=type_name,
            kind=kind,
            package=pkg.name,
            package_path=pkg.import_path,
            is_exported=is_exported_name(type_name),
        )
        return f.add_type(t)

    def remove_type(self, package_name: str, file_name: str, type_name: str) -> bool:
        f = self._find_file(package_name, file_name)
        if f is None:
            return False
        return f.remove_type(type_name)

    def create_field(
        self,
        package_name: str,
        file_name: str,
        type_name: str,
        field_name: str,
        field_type: Optional[Type] = None,
        tag: str = "",
    ) -> Field:
        t = self._type(package_name, file_name, type_name)
        f = Field(
            name=field_name,
            type=field_type,
            tag=tag,
            is_exported=is_exported_name(field_name),
        )
        logger.debug(f"Adding field {type_name}.{field_name}")
        return t.add_field(f)

    def remove_field(self, package_name: str, file_name: str, type_name: str, field_name: str) -> bool:
        t = self._find_type(package_name, file_name, type_name)
        if t is None:
            return False
        return t.remove_field(field_name)

    def create_method(
        self,
        package_name: str,
        file_name: str,
        type_name: str,
        method_name: str,
        parameters: Optional[list[Parameter]] = None,
        results: Optional[list[Parameter]] = None,
        body: str = "",
    ) -> Function:
        t = self._type(package_name, file_name, type_name)
        method = Function(
            name=method_name,
            receiver=type_name,
            parameters=list(parameters or []),
            results=list(results or []),
            body=LocationNode(text=body) if body else None,
            is_exported=is_exported_name(method_name),
        )
        return t.add_method(method)

    def remove_method(self, package_name: str, file_name: str, type_name: str, method_name: str) -> bool:
        t = self._find_type(package_name, file_name, type_name)
        if t is None:
            return False
        return t.remove_method(method_name)

    def create_function(
        self,
        package_name: str,
        file_name: str,
        function_name: str,
        parameters: Optional[list[Parameter]] = None,
        results: Optional[list[Parameter]] = None,
        body: str = "",
    ) -> Function:
        _, f = self._file(package_name, file_name)
        function = Function(
            name=function_name,
            parameters=list(parameters or []),
            results=list(results or []),
            body=LocationNode(text=body) if body else None,
            is_exported=is_exported_name(function_name),
        )
        return f.add_function(function)

    def add_function_to_file(self, package_name: str, file_name: str, function: Function) -> Function:
        """Attach an existing function; one with a receiver goes to its type."""
        _, f = self._file(package_name, file_name)
        return f.add_function(function)

    def remove_function(self, package_name: str, file_name: str, function_name: str) -> bool:
        f = self._find_file(package_name, file_name)
        if f is None:
            return False
        return f.remove_function(function_name)

    # -------------------------------------------------------------------------
    # Load and store
    # -------------------------------------------------------------------------

    def load_project(self, location: str) -> Project:
        """Detect the project at ``location`` and inspect it with the matching front-end."""
        info = detect_project(location)
        factory = Factory(self.config)
        self.project = factory.inspect_project(info.root_path or location, info)
        return self.project

    def store_project(self, destination: str) -> list[str]:
        """
        Write every file and asset under ``destination``.

        Files without a registered emitter and empty assets are skipped.

        Returns:
            Paths written

        Raises:
            StoreError: The first write or mkdir failure
        """
        written = []
        for pkg in self.project.packages:
            for f in pkg.files:
                emitter = get_emitter(f.extension)
                if emitter is None:
                    logger.debug(f"No emitter for {f.path}, skipping")
                    continue
                written.append(self._write(destination, f.path or f.name, emitter.emit(f)))
            for asset in pkg.assets:
                if not asset.content:
                    continue
                written.append(self._write(destination, asset.path or asset.name, asset.content))
        logger.info(f"Stored {len(written)} files to {destination}")
        return written

    def _write(self, destination: str, rel_path: str, content: bytes) -> str:
        target = os.path.join(destination, rel_path)
        try:
            os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
            Path(target).write_bytes(content)
        except OSError as e:
            raise StoreError(target, f"failed to store {target}: {e}") from e
        return target

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _package(self, name: str) -> Package:
        pkg = self.project.lookup_package(name)
        if pkg is None:
            raise NotFoundError("package", name)
        return pkg

    def _file(self, package_name: str, file_name: str) -> tuple[Package, File]:
        pkg = self._package(package_name)
        f = pkg.lookup_file(file_name)
        if f is None:
            raise NotFoundError("file", f"{package_name}/{file_name}")
        return pkg, f

    def _type(self, package_name: str, file_name: str, type_name: str) -> Type:
        _, f = self._file(package_name, file_name)
        t = f.lookup_type(type_name)
        if t is None:
            raise NotFoundError("type", type_name)
        return t

    def _find_file(self, package_name: str, file_name: str) -> Optional[File]:
        pkg = self.project.lookup_package(package_name)
        if pkg is None:
            return None
        return pkg.lookup_file(file_name)

    def _find_type(self, package_name: str, file_name: str, type_name: str) -> Optional[Type]:
        f = self._find_file(package_name, file_name)
        if f is None:
            return None
        return f.lookup_type(type_name)
