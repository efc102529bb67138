"""
Package Model

Packages group files from one directory and carry the non-source assets
found beneath it.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

from linager.graph.collection import IndexedList, as_indexed
from linager.graph.file import File
from linager.graph.types import Function, Type


@dataclass
class Asset:
    """A non-source file kept verbatim."""

    path: str
    name: str = ""
    import_path: str = ""
    content: bytes = b""

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass(eq=False)
class Package:
    """Files of one package plus a lazily derived type index."""

    name: str = ""
    path: str = ""
    import_path: str = ""
    files: IndexedList[File] = field(default_factory=IndexedList)
    assets: list[Asset] = field(default_factory=list)
    _type_index: dict = field(default_factory=dict, repr=False)
    _type_index_key: Optional[tuple] = field(default=None, repr=False)

    def __post_init__(self):
        self.files = as_indexed(self.files)

    def _index_key(self) -> tuple:
        return (self.files.generation,) + tuple((id(f), f.types.generation) for f in self.files)

    def index_types(self) -> dict[str, list[int]]:
        """
        Map of type name -> positions of the files declaring it.

        Rebuilt whenever the file list or any file's type list changed since
        the last call, so callers never re-index by hand.
        """
        key = self._index_key()
        if key != self._type_index_key:
            index: dict[str, list[int]] = {}
            for pos, f in enumerate(self.files):
                for t in f.types:
                    index.setdefault(t.name, []).append(pos)
            self._type_index = index
            self._type_index_key = key
        return self._type_index

    def lookup_type(self, name: str) -> Optional[Type]:
        positions = self.index_types().get(name)
        if not positions:
            return None
        return self.files[positions[0]].lookup_type(name)

    def lookup_type_file(self, name: str) -> Optional[File]:
        positions = self.index_types().get(name)
        if not positions:
            return None
        return self.files[positions[0]]

    def lookup_method(self, type_name: str, method_name: str) -> Optional[Function]:
        for pos in self.index_types().get(type_name, []):
            t = self.files[pos].lookup_type(type_name)
            if t is not None:
                method = t.get_method(method_name)
                if method is not None:
                    return method
        return None

    def types(self) -> Iterator[Type]:
        for f in self.files:
            yield from f.types

    # --- files and assets ---

    def add_file(self, f: File) -> File:
        return self.files.add(f)

    def remove_file(self, name: str) -> bool:
        return self.files.remove(name) is not None

    def lookup_file(self, name: str) -> Optional[File]:
        return self.files.get(name)

    def add_asset(self, asset: Asset) -> Asset:
        self.assets.append(asset)
        return asset
