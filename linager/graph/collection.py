"""
Indexed Collections

Ordered, name-addressable collections used for every named member list in
the graph (packages, files, types, fields, methods, functions, constants,
variables). The list is the source of truth for order; the position map is
patched on every mutation so lookups can never go stale.
"""

from typing import Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class IndexedList(Generic[T]):
    """
    A list of named items plus a name -> position map.

    Items must expose a ``name`` attribute. When several items share a name
    the map points at the first one. ``generation`` increments on every
    structural change so derived indices elsewhere can detect staleness.
    """

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: list[T] = []
        self._index: dict[str, int] = {}
        self.generation = 0
        for item in items or ():
            self.add(item)

    def add(self, item: T) -> T:
        """Append an item and index it if its name is new."""
        self._items.append(item)
        name = item.name
        if name not in self._index:
            self._index[name] = len(self._items) - 1
        self.generation += 1
        return item

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def remove(self, name: str) -> Optional[T]:
        """Remove the first item called ``name``; returns it or None."""
        pos = self._index.get(name)
        if pos is None:
            return None
        return self._remove_at(pos)

    def remove_item(self, item: T) -> bool:
        """Remove a specific item instance (for unnamed or duplicate entries)."""
        for pos, candidate in enumerate(self._items):
            if candidate is item:
                self._remove_at(pos)
                return True
        return False

    def _remove_at(self, pos: int) -> T:
        item = self._items.pop(pos)
        for key, idx in list(self._index.items()):
            if idx > pos:
                self._index[key] = idx - 1
            elif idx == pos:
                del self._index[key]
        name = item.name
        if name not in self._index:
            # A later duplicate becomes the addressable one
            for idx in range(pos, len(self._items)):
                if self._items[idx].name == name:
                    self._index[name] = idx
                    break
        self.generation += 1
        return item

    def clear(self) -> None:
        self._items.clear()
        self._index.clear()
        self.generation += 1

    def get(self, name: str) -> Optional[T]:
        pos = self._index.get(name)
        if pos is None:
            return None
        return self._items[pos]

    def index_of(self, name: str) -> int:
        """Position of ``name`` or -1."""
        return self._index.get(name, -1)

    def names(self) -> list[str]:
        return [item.name for item in self._items]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __getitem__(self, pos):
        return self._items[pos]

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IndexedList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"IndexedList({self._items!r})"


def as_indexed(value) -> IndexedList:
    """Coerce a plain iterable into an IndexedList (dataclass __post_init__ helper)."""
    if isinstance(value, IndexedList):
        return value
    return IndexedList(value or ())
