"""
Data Points

An identifier together with where it is defined and every place it is
read, written or called. Data points serialize to the camelCase YAML
layout used by lineage consumers.
"""

from dataclasses import dataclass, field
from enum import Enum

import yaml

from linager.graph.identity import Identity, IdentityRef


class AccessKind(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    CALL = "CALL"


@dataclass
class CodeLocation:
    file_path: str
    line_number: int
    column_start: int = 0  # 1-based
    column_end: int = 0

    def to_dict(self) -> dict:
        data = {"filePath": self.file_path, "lineNumber": self.line_number}
        if self.column_start:
            data["columnStart"] = self.column_start
        if self.column_end:
            data["columnEnd"] = self.column_end
        return data


@dataclass
class TouchContext:
    """Enclosing function, or method and its holder type."""

    function: str = ""
    method: str = ""
    holder_type: str = ""

    def to_dict(self) -> dict:
        data = {}
        if self.function:
            data["function"] = self.function
        if self.method:
            data["method"] = self.method
        if self.holder_type:
            data["holderType"] = self.holder_type
        return data


@dataclass
class TouchPoint:
    """One access to an identifier."""

    location: CodeLocation
    kind: AccessKind
    context: TouchContext = field(default_factory=TouchContext)
    dependencies: list[IdentityRef] = field(default_factory=list)  # Refs a write takes its value from

    def add_dependency(self, ref: IdentityRef) -> None:
        if ref not in self.dependencies:
            self.dependencies.append(ref)

    def to_dict(self) -> dict:
        data = {"codeLocation": self.location.to_dict()}
        context = self.context.to_dict()
        if context:
            data["context"] = context
        if self.dependencies:
            data["dependencies"] = [str(ref) for ref in self.dependencies]
        return data


@dataclass
class DataPoint:
    identity: Identity
    definition: CodeLocation
    metadata: dict = field(default_factory=dict)
    writes: list[TouchPoint] = field(default_factory=list)
    reads: list[TouchPoint] = field(default_factory=list)
    calls: list[TouchPoint] = field(default_factory=list)

    @property
    def ref(self) -> IdentityRef:
        return self.identity.ref

    def touch(self, point: TouchPoint) -> TouchPoint:
        """Record an access under the list matching its kind."""
        if point.kind == AccessKind.WRITE:
            self.writes.append(point)
        elif point.kind == AccessKind.CALL:
            self.calls.append(point)
        else:
            self.reads.append(point)
        return point

    def to_dict(self) -> dict:
        ident = self.identity
        identity = {"ref": str(ident.ref), "kind": ident.kind, "name": ident.name}
        for key, value in (
            ("pkgPath", ident.pkg_path),
            ("package", ident.package),
            ("holderType", ident.holder_type),
            ("file", ident.file),
            ("function", ident.function),
            ("line", ident.line),
        ):
            if value:
                identity[key] = value
        data = {"identity": identity, "definition": self.definition.to_dict()}
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        for key, points in (("writes", self.writes), ("reads", self.reads), ("calls", self.calls)):
            if points:
                data[key] = [p.to_dict() for p in points]
        return data


def dump_data_points(points: list[DataPoint]) -> str:
    """YAML list of data points."""
    return yaml.safe_dump([p.to_dict() for p in points], default_flow_style=False, sort_keys=False)
