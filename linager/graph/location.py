"""Source anchors for extracted entities."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Location:
    """Half-open byte range into a file's UTF-8 source, with captured text."""

    start: int = 0
    end: int = 0
    line: int = 0  # 1-based line of start
    raw: str = ""

    @property
    def size(self) -> int:
        return self.end - self.start

    def contains(self, other: "Location") -> bool:
        return self.start <= other.start and other.end <= self.end

    def slice(self, start: int, end: Optional[int] = None) -> str:
        """Return raw text between two absolute byte offsets inside this span."""
        data = self.raw.encode("utf-8")
        lo = max(start - self.start, 0)
        hi = len(data) if end is None else max(end - self.start, lo)
        return data[lo:hi].decode("utf-8", errors="replace")


@dataclass
class LocationNode:
    """Text attached to an entity (comment, annotation, body) and where it came from."""

    text: str = ""
    location: Optional[Location] = None

    @property
    def raw(self) -> str:
        if self.location is not None and self.location.raw:
            return self.location.raw
        return self.text
