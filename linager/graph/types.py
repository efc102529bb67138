"""
Type Model

Types, their fields and methods, function signatures and the helpers used
to derive new types from existing ones.
"""

import copy
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from linager.graph.collection import IndexedList, as_indexed
from linager.graph.location import Location, LocationNode

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Kind(str, Enum):
    """Syntactic shape of a type declaration."""

    STRUCT = "struct"
    INTERFACE = "interface"
    SLICE = "slice"
    MAP = "map"
    CHAN = "chan"
    FUNC = "func"
    ALIAS = "alias"
    OTHER = "other"


def is_exported_name(name: str) -> bool:
    """Exported means the first character is uppercase."""
    return bool(name) and name[0].isupper()


@dataclass
class TypeParam:
    """Generic type parameter."""

    name: str
    constraint: str = ""


@dataclass(eq=False)
class Type:
    """A declared (or referenced) type."""

    name: str
    kind: Kind = Kind.OTHER
    tag: str = ""
    package: str = ""
    package_path: str = ""
    component_type: str = ""  # Element type for slices, maps, chans, pointers
    key_type: str = ""  # Map key type
    comment: Optional[LocationNode] = None
    annotation: Optional[LocationNode] = None
    is_exported: bool = False
    is_pointer: bool = False
    fields: IndexedList["Field"] = field(default_factory=IndexedList)
    methods: IndexedList["Function"] = field(default_factory=IndexedList)
    type_params: list[TypeParam] = field(default_factory=list)
    implements: list[str] = field(default_factory=list)
    extends: list[str] = field(default_factory=list)
    location: Optional[Location] = None
    body: Optional[Location] = None  # Member block, exclusive of delimiters
    inline_methods: bool = False  # Methods live inside the body (Java, JS, Python)
    _layout: Optional[tuple] = field(default=None, repr=False)

    def __post_init__(self):
        self.fields = as_indexed(self.fields)
        self.methods = as_indexed(self.methods)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def get_field(self, name: str) -> Optional["Field"]:
        return self.fields.get(name)

    def add_field(self, f: "Field") -> "Field":
        return self.fields.add(f)

    def remove_field(self, name: str) -> bool:
        return self.fields.remove(name) is not None

    def get_method(self, name: str) -> Optional["Function"]:
        return self.methods.get(name)

    def add_method(self, method: "Function") -> "Function":
        return self.methods.add(method)

    def remove_method(self, name: str) -> bool:
        return self.methods.remove(name) is not None

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def _members(self) -> list:
        members = list(self.fields)
        if self.inline_methods:
            members.extend(self.methods)
        return members

    def _member_layout(self) -> tuple:
        layout = []
        for member in self._members():
            loc = member.location
            layout.append((member.name, loc.start, loc.end) if loc else (member.name, None, None))
        return tuple(layout)

    def seal_layout(self) -> None:
        """Record the member layout as extracted; content() stays verbatim until it changes."""
        self._layout = self._member_layout()

    @property
    def is_modified(self) -> bool:
        return self._layout is not None and self._layout != self._member_layout()

    def content(
        self,
        render_member: Optional[Callable[[object], str]] = None,
        indent: str = "\t",
    ) -> str:
        """
        Source text of the declaration.

        The captured span is returned verbatim while the member list is the
        one seen at extraction. After fields (or inline methods) are added or
        removed, the declaration is rebuilt as header + members + trailer
        around the recorded body span; members without a span are rendered
        by ``render_member``.

        Args:
            render_member: Synthesizes text for a member that has no span
            indent: Prefix for each rebuilt member line

        Returns:
            Declaration text, or "" when nothing was captured
        """
        if self.location is None or not self.location.raw:
            return ""
        raw = self.location.raw
        if self.body is None or not self.is_modified:
            return raw

        head = self.location.slice(self.location.start, self.body.start).rstrip()
        tail = self.location.slice(self.body.end).strip()
        render = render_member or _default_member_text

        # Members declared together (a, b int) share one span; the span is
        # only reusable while every name declared in it is still present
        sealed = Counter((start, end) for _, start, end in self._layout if start is not None)
        members = self._members()
        current = Counter(
            (m.location.start, m.location.end) for m in members if m.location is not None
        )

        lines = []
        seen = set()
        documented = set()
        for member in members:
            loc = member.location
            if loc is not None and loc.raw:
                if not self.body.contains(loc):
                    # Declared in the header (record components)
                    continue
                span = (loc.start, loc.end)
                if span in seen:
                    continue
                if current[span] == sealed[span]:
                    seen.add(span)
                    text = loc.raw
                else:
                    text = render(member)
            else:
                text = render(member)
            if not text:
                continue
            doc = _member_doc(member)
            if doc is not None and doc.raw and self.body.contains(doc):
                doc_span = (doc.start, doc.end)
                if doc_span not in documented:
                    documented.add(doc_span)
                    lines.append(indent + doc.raw)
            lines.append(indent + text)
        body = "\n".join(lines)
        if tail:
            return f"{head}\n{body}\n{tail}"
        return f"{head}\n{body}\n"

    def clone(self) -> "Type":
        """Copy the type header without fields or methods."""
        cloned = Type(
            name=self.name,
            kind=self.kind,
            tag=self.tag,
            package=self.package,
            package_path=self.package_path,
            component_type=self.component_type,
            key_type=self.key_type,
            comment=copy.deepcopy(self.comment),
            annotation=copy.deepcopy(self.annotation),
            is_exported=self.is_exported,
            is_pointer=self.is_pointer,
            type_params=[TypeParam(p.name, p.constraint) for p in self.type_params],
            implements=list(self.implements),
            extends=list(self.extends),
            location=copy.deepcopy(self.location),
            inline_methods=self.inline_methods,
        )
        return cloned


@dataclass
class Field:
    """A struct/class member variable. Embedded fields have no name."""

    name: str
    type: Optional[Type] = None
    tag: str = ""
    location: Optional[Location] = None
    comment: str = ""
    annotation: str = ""
    is_exported: bool = False
    is_embedded: bool = False
    is_static: bool = False
    is_constant: bool = False
    doc: Optional[Location] = None  # Leading comment span, kept when the type is rebuilt

    @property
    def type_name(self) -> str:
        return self.type.name if self.type is not None else ""

    def content(self) -> str:
        if self.location is None:
            return ""
        return self.location.raw


@dataclass
class Parameter:
    name: str
    type: Optional[Type] = None

    @property
    def type_name(self) -> str:
        return self.type.name if self.type is not None else ""


@dataclass
class Function:
    """A free function or a method (receiver set)."""

    name: str
    receiver: str = ""
    comment: Optional[LocationNode] = None
    annotation: Optional[LocationNode] = None
    type_params: list[TypeParam] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    results: list[Parameter] = field(default_factory=list)
    body: Optional[LocationNode] = None
    is_exported: bool = False
    is_static: bool = False
    is_constructor: bool = False
    signature: str = ""
    location: Optional[Location] = None

    @property
    def is_method(self) -> bool:
        return bool(self.receiver)

    def content(self) -> str:
        if self.location is None:
            return ""
        return self.location.raw


def _member_doc(member) -> Optional[Location]:
    """Span of the comment written above a member, if one was captured."""
    if isinstance(member, Field):
        return member.doc
    if isinstance(member, Function) and member.comment is not None:
        return member.comment.location
    return None


def _default_member_text(member) -> str:
    if isinstance(member, Field):
        text = f"{member.name} {member.type_name}".strip()
        if member.tag:
            text += f" `{member.tag}`"
        return text
    if isinstance(member, Function):
        return member.signature or f"{member.name}()"
    return ""


# -----------------------------------------------------------------------------
# Derived types
# -----------------------------------------------------------------------------


def create_type_from_fields(name: str, source: Type, field_names: list[str]) -> Type:
    """New type named ``name`` with the header of ``source`` and a subset of its fields."""
    new_type = source.clone()
    new_type.name = name
    new_type.location = None
    for field_name in field_names:
        f = source.get_field(field_name)
        if f is not None:
            new_type.add_field(f)
    return new_type


def create_type_from_methods(name: str, source: Type, method_names: list[str]) -> Type:
    """New type named ``name`` with the header of ``source`` and a subset of its methods."""
    new_type = source.clone()
    new_type.name = name
    new_type.location = None
    for method_name in method_names:
        method = source.get_method(method_name)
        if method is not None:
            new_type.add_method(method)
    return new_type


def create_composite_type(
    name: str,
    sources: list[Type],
    field_names: list[list[str]],
    method_names: list[list[str]],
) -> Optional[Type]:
    """
    Merge selected fields and methods of several types into one.

    ``field_names[i]`` and ``method_names[i]`` select members of
    ``sources[i]``. The kind and package come from the first source.
    """
    if not sources:
        return None

    first = sources[0]
    new_type = Type(
        name=name,
        kind=first.kind,
        package=first.package,
        package_path=first.package_path,
        is_exported=True,
    )
    for i, source in enumerate(sources):
        if i < len(field_names):
            for field_name in field_names[i]:
                f = source.get_field(field_name)
                if f is not None:
                    new_type.add_field(f)
    for i, source in enumerate(sources):
        if i < len(method_names):
            for method_name in method_names[i]:
                method = source.get_method(method_name)
                if method is not None:
                    new_type.add_method(method)
    return new_type


def extract_base_type_name(expr: str) -> str:
    """
    Base name of a receiver/type expression.

    Strips leading pointer markers, then a generic parameter list, then a
    package qualifier: ``*pkg.List[T]`` -> ``List``. Returns "" when the
    remainder is not an identifier.
    """
    name = expr.strip().lstrip("*").strip()
    bracket = name.find("[")
    if bracket >= 0:
        name = name[:bracket]
    dot = name.rfind(".")
    if dot >= 0:
        name = name[dot + 1:]
    name = name.strip()
    if not _IDENTIFIER.match(name):
        return ""
    return name
