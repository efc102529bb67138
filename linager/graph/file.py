"""
File Model

A source file with its imports and top-level declarations.
"""

from dataclasses import dataclass, field
from typing import Optional

from linager.graph.collection import IndexedList, as_indexed
from linager.graph.location import Location
from linager.graph.types import Function, Kind, Type, extract_base_type_name, is_exported_name


@dataclass
class Import:
    """An import; name is the local alias and may be empty."""

    path: str
    name: str = ""
    location: Optional[Location] = None


@dataclass
class Variable:
    """A package-level variable (or constant, see Constant)."""

    name: str
    type: Optional[Type] = None
    value: str = ""
    comment: str = ""
    annotation: str = ""
    is_exported: bool = False
    is_const: bool = False
    location: Optional[Location] = None
    file: Optional["File"] = field(default=None, repr=False, compare=False)

    @property
    def type_name(self) -> str:
        return self.type.name if self.type is not None else ""

    def content(self) -> str:
        if self.location is not None and self.location.raw:
            return self.location.raw
        return self.value


@dataclass
class Constant(Variable):
    is_const: bool = True


@dataclass(eq=False)
class File:
    """Top-level declarations of one source file."""

    name: str = ""
    path: str = ""
    package: str = ""
    import_path: str = ""
    language: str = ""
    imports: list[Import] = field(default_factory=list)
    types: IndexedList[Type] = field(default_factory=IndexedList)
    constants: IndexedList[Constant] = field(default_factory=IndexedList)
    variables: IndexedList[Variable] = field(default_factory=IndexedList)
    functions: IndexedList[Function] = field(default_factory=IndexedList)

    def __post_init__(self):
        self.types = as_indexed(self.types)
        self.constants = as_indexed(self.constants)
        self.variables = as_indexed(self.variables)
        self.functions = as_indexed(self.functions)
        for item in list(self.constants) + list(self.variables):
            item.file = self

    # --- lookups ---

    def lookup_type(self, name: str) -> Optional[Type]:
        return self.types.get(name)

    def lookup_function(self, name: str) -> Optional[Function]:
        return self.functions.get(name)

    def lookup_variable(self, name: str) -> Optional[Variable]:
        return self.variables.get(name)

    def lookup_constant(self, name: str) -> Optional[Constant]:
        return self.constants.get(name)

    def has_function(self, name: str) -> bool:
        return name in self.functions

    # --- mutation ---

    def add_type(self, t: Type) -> Type:
        return self.types.add(t)

    def remove_type(self, name: str) -> bool:
        return self.types.remove(name) is not None

    def ensure_type(self, name: str) -> Type:
        """
        Resolve a type by name, inserting a synthetic struct on first sighting.

        Every receiver binding goes through here so all methods on the same
        receiver share one Type instance.
        """
        existing = self.lookup_type(name)
        if existing is not None:
            return existing
        return self.add_type(Type(
            name=name,
            kind=Kind.STRUCT,
            is_exported=is_exported_name(name),
            package=self.package,
            package_path=self.import_path,
        ))

    def add_function(self, function: Function) -> Function:
        """Add a function; methods are attached to their receiver type."""
        if not function.receiver:
            return self.functions.add(function)
        base = extract_base_type_name(function.receiver) or function.receiver
        return self.ensure_type(base).add_method(function)

    def remove_function(self, name: str) -> bool:
        return self.functions.remove(name) is not None

    def add_constant(self, constant: Constant) -> Constant:
        constant.file = self
        return self.constants.add(constant)

    def add_variable(self, variable: Variable) -> Variable:
        variable.file = self
        return self.variables.add(variable)

    def add_import(self, imp: Import) -> Import:
        self.imports.append(imp)
        return imp

    @property
    def extension(self) -> str:
        source = self.name or self.path
        dot = source.rfind(".")
        return source[dot:].lower() if dot >= 0 else ""
