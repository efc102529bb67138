"""
Project Model

Root of the graph: packages discovered below one project root.
"""

import os
from dataclasses import dataclass, field
from typing import Iterator, Optional

from linager.graph.collection import IndexedList, as_indexed
from linager.graph.file import File
from linager.graph.package import Package


@dataclass(eq=False)
class Project:
    name: str = ""
    type: str = ""
    path: str = ""  # Root path
    repository_url: str = ""
    packages: IndexedList[Package] = field(default_factory=IndexedList)

    def __post_init__(self):
        self.packages = as_indexed(self.packages)

    def add_package(self, pkg: Package) -> Package:
        return self.packages.add(pkg)

    def remove_package(self, name: str) -> bool:
        return self.packages.remove(name) is not None

    def lookup_package(self, name: str) -> Optional[Package]:
        """Find a package by name, falling back to its import path or directory."""
        pkg = self.packages.get(name)
        if pkg is not None:
            return pkg
        for candidate in self.packages:
            if name in (candidate.import_path, candidate.path):
                return candidate
        return None

    def files(self) -> Iterator[tuple[Package, File]]:
        for pkg in self.packages:
            for f in pkg.files:
                yield pkg, f

    def init(self) -> None:
        """
        Normalize an assembled project.

        File and asset paths become relative to the project root, file names
        are path basenames, missing file import paths come from the package,
        and types without a package are attributed to the one holding them.
        """
        if not self.path:
            return
        root = os.path.abspath(self.path)
        for pkg in self.packages:
            if pkg.path and os.path.isabs(pkg.path):
                rel = os.path.relpath(pkg.path, root)
                pkg.path = "" if rel == "." else rel.replace(os.sep, "/")
            for f in pkg.files:
                if not f.import_path:
                    f.import_path = pkg.import_path
                if f.path and os.path.isabs(f.path):
                    f.name = os.path.basename(f.path)
                    f.path = os.path.relpath(f.path, root).replace(os.sep, "/")
                    if f.import_path.endswith("/" + f.name):
                        f.import_path = f.import_path[: -len(f.name) - 1]
                for t in f.types:
                    if not t.package:
                        t.package = pkg.name
                    if not t.package_path:
                        t.package_path = pkg.import_path
            for asset in pkg.assets:
                if asset.path and os.path.isabs(asset.path):
                    asset.name = os.path.basename(asset.path)
                    asset.path = os.path.relpath(asset.path, root).replace(os.sep, "/")
