"""
Go Data Lineage

Collects a data point for every struct field, package-level variable and
constant, function, method, parameter and local variable of a Go package,
and records where each one is read, written or called.

Declarations come from the inspected graph; function bodies are walked
with tree-sitter. Identifiers resolve lexically: locals (innermost block
first), then package variables. ``x.f`` resolves to a struct field when the
type of ``x`` is known from its declaration, a composite literal or the
single result of a package function, including fields promoted through
one or more embedded structs.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tree_sitter import Node

from linager.analyzer.datapoint import AccessKind, CodeLocation, DataPoint, TouchContext, TouchPoint
from linager.configs.logging import get_logger
from linager.configs.runtime import InspectorConfig
from linager.exceptions import InspectError
from linager.graph.file import File
from linager.graph.identity import (
    Identity,
    IdentityRef,
    make_function_ref,
    make_struct_field_ref,
    make_var_ref,
    parse_identity,
)
from linager.graph.package import Package
from linager.graph.project import Project
from linager.graph.types import Kind, extract_base_type_name
from linager.inspector.golang import GoInspector
from linager.inspector.parser import get_parser

logger = get_logger("analyzer.golang")

# Nodes that open a lexical block
_SCOPE_TYPES = {
    "block",
    "for_statement",
    "if_statement",
    "expression_switch_statement",
    "type_switch_statement",
    "select_statement",
    "communication_case",
    "expression_case",
    "type_case",
    "default_case",
}

# Nodes that never contain value identifiers
_OPAQUE_TYPES = {
    "type_identifier",
    "qualified_type",
    "field_identifier",
    "package_identifier",
    "label_name",
    "comment",
    "interpreted_string_literal",
    "raw_string_literal",
    "type_declaration",
}


@dataclass
class _Symbol:
    point: DataPoint
    type_name: str = ""  # Base type name, "" when unknown
    element_type: str = ""  # Base type of slice, array or map values


def element_type_name(expr: str) -> str:
    """Base type of the values of a slice, array or map type: ``map[string]*Item`` -> ``Item``."""
    expr = expr.strip().lstrip("*")
    if expr.startswith("map["):
        depth = 0
        for i, ch in enumerate(expr[3:], start=3):
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    return extract_base_type_name(expr[i + 1:])
        return ""
    if expr.startswith("["):
        close = expr.find("]")
        return extract_base_type_name(expr[close + 1:]) if close >= 0 else ""
    return ""


class _PackageModel:
    """Package-wide symbols taken from the inspected graph."""

    def __init__(self, pkg: Package):
        self.pkg_path = pkg.import_path or pkg.name
        self.package = pkg.name
        self.points: dict[str, DataPoint] = {}
        self.variables: dict[str, _Symbol] = {}
        self.functions: dict[str, DataPoint] = {}  # "Name" or "Type.Method"
        self.returns: dict[str, str] = {}  # function key -> base type of a single result
        self.fields: dict[str, dict[str, _Symbol]] = {}  # struct -> field -> symbol
        self.embedded: dict[str, list[str]] = {}  # struct -> embedded base types

        for f in pkg.files:
            if f.extension != ".go":
                continue
            self._add_types(f)
            self._add_values(f)
            self._add_functions(f)

    def add(self, point: DataPoint) -> DataPoint:
        return self.points.setdefault(str(point.ref), point)

    def _add_types(self, f: File) -> None:
        for t in f.types:
            if t.kind != Kind.STRUCT:
                continue
            members = self.fields.setdefault(t.name, {})
            for fld in t.fields:
                name = fld.name or extract_base_type_name(fld.type_name)
                if not name:
                    continue
                if fld.is_embedded:
                    self.embedded.setdefault(t.name, []).append(name)
                line = fld.location.line if fld.location is not None else 0
                metadata = {"type": fld.type_name}
                if fld.tag:
                    metadata["tag"] = fld.tag
                point = self.add(DataPoint(
                    identity=parse_identity(make_struct_field_ref(self.pkg_path, t.name, name)),
                    definition=CodeLocation(file_path=f.path, line_number=line),
                    metadata=metadata,
                ))
                members[name] = _Symbol(
                    point,
                    extract_base_type_name(fld.type_name),
                    element_type_name(fld.type_name),
                )

    def _add_values(self, f: File) -> None:
        for value in list(f.constants) + list(f.variables):
            line = value.location.line if value.location is not None else 0
            identity = parse_identity(make_var_ref(self.pkg_path, f.name, "", line, value.name))
            identity.package = self.package
            if value.is_const:
                identity.kind = "constant"
            metadata = {"type": value.type_name} if value.type_name else {}
            point = self.add(DataPoint(
                identity=identity,
                definition=CodeLocation(file_path=f.path, line_number=line),
                metadata=metadata,
            ))
            self.variables[value.name] = _Symbol(
                point,
                extract_base_type_name(value.type_name),
                element_type_name(value.type_name),
            )

    def _add_functions(self, f: File) -> None:
        entries = [("", fn) for fn in f.functions]
        for t in f.types:
            entries.extend((t.name, m) for m in t.methods if m.is_method)
        for holder, fn in entries:
            key = f"{holder}.{fn.name}" if holder else fn.name
            ref = make_function_ref(self.pkg_path, key)
            point = self.add(DataPoint(
                identity=Identity(
                    ref=ref,
                    pkg_path=self.pkg_path,
                    package=self.package,
                    holder_type=holder,
                    file=f.name,
                    name=key,
                    kind="func",
                ),
                definition=CodeLocation(
                    file_path=f.path,
                    line_number=fn.location.line if fn.location is not None else 0,
                ),
                metadata={"signature": fn.signature} if fn.signature else {},
            ))
            self.functions[key] = point
            if len(fn.results) == 1:
                self.returns[key] = extract_base_type_name(fn.results[0].type_name)

    def lookup_field(self, type_name: str, name: str, seen: Optional[set] = None) -> Optional[_Symbol]:
        """Field declared on ``type_name`` or promoted from an embedded struct."""
        symbol = self.fields.get(type_name, {}).get(name)
        if symbol is not None:
            return symbol
        seen = seen or set()
        seen.add(type_name)
        for embedded in self.embedded.get(type_name, []):
            if embedded in seen:
                continue
            symbol = self.lookup_field(embedded, name, seen)
            if symbol is not None:
                return symbol
        return None


class _FileAnalysis:
    """Walks the function bodies of one file."""

    def __init__(self, model: _PackageModel, file: File, source: bytes):
        self.model = model
        self.file = file
        self.source = source
        self.scopes: list[dict[str, _Symbol]] = []
        self.collectors: list[list[IdentityRef]] = []
        self.context = TouchContext()
        self.function = ""

    def run(self, root: Node) -> None:
        for node in root.children:
            if node.type in ("function_declaration", "method_declaration"):
                self._function(node)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def _location(self, node: Node) -> CodeLocation:
        column = node.start_point[1] + 1
        return CodeLocation(
            file_path=self.file.path,
            line_number=node.start_point[0] + 1,
            column_start=column,
            column_end=column + (node.end_byte - node.start_byte),
        )

    def _touch(self, symbol: _Symbol, node: Node, kind: AccessKind, deps=()) -> None:
        point = TouchPoint(location=self._location(node), kind=kind, context=self.context)
        for ref in deps:
            point.add_dependency(ref)
        symbol.point.touch(point)
        if kind != AccessKind.WRITE:
            for collected in self.collectors:
                collected.append(symbol.point.ref)

    def _reads(self, node: Optional[Node]) -> list[IdentityRef]:
        """Visit ``node`` and return the refs it reads or calls."""
        collected: list[IdentityRef] = []
        if node is None:
            return collected
        self.collectors.append(collected)
        try:
            self._visit(node)
        finally:
            self.collectors.pop()
        return collected

    def _resolve(self, name: str) -> Optional[_Symbol]:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return self.model.variables.get(name)

    def _declare(
        self,
        name_node: Node,
        type_name: str = "",
        kind: str = "variable",
        element_type: str = "",
    ) -> Optional[_Symbol]:
        name = self._text(name_node)
        if not name or name == "_":
            return None
        line = name_node.start_point[0] + 1
        identity = parse_identity(make_var_ref(self.model.pkg_path, self.file.name, self.function, line, name))
        identity.package = self.model.package
        identity.kind = kind
        point = self.model.add(DataPoint(
            identity=identity,
            definition=self._location(name_node),
            metadata={"type": type_name} if type_name else {},
        ))
        symbol = _Symbol(point, type_name, element_type)
        self.scopes[-1][name] = symbol
        return symbol

    def _declare_parameters(self, params: Optional[Node], kind: str = "parameter") -> None:
        if params is None:
            return
        for decl in params.named_children:
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            type_text = self._text(decl.child_by_field_name("type"))
            if decl.type == "variadic_parameter_declaration":
                type_text = "[]" + type_text
            for name_node in decl.children_by_field_name("name"):
                self._declare(name_node, extract_base_type_name(type_text), kind, element_type_name(type_text))

    def _expr_type(self, node: Optional[Node]) -> str:
        """Base type name of an expression, "" when it cannot be inferred."""
        if node is None:
            return ""
        if node.type == "identifier":
            symbol = self._resolve(self._text(node))
            return symbol.type_name if symbol is not None else ""
        if node.type == "selector_expression":
            symbol = self._field(node)
            return symbol.type_name if symbol is not None else ""
        if node.type == "composite_literal":
            return extract_base_type_name(self._text(node.child_by_field_name("type")))
        if node.type in ("unary_expression", "parenthesized_expression"):
            inner = node.child_by_field_name("operand") or (node.named_children[0] if node.named_children else None)
            return self._expr_type(inner)
        if node.type == "call_expression":
            key = self._callee(node.child_by_field_name("function"))
            return self.model.returns.get(key, "") if key else ""
        return ""

    def _expr_element_type(self, node: Optional[Node]) -> str:
        """Base type of the values an expression ranges over."""
        if node is None:
            return ""
        if node.type == "identifier":
            symbol = self._resolve(self._text(node))
            return symbol.element_type if symbol is not None else ""
        if node.type == "selector_expression":
            symbol = self._field(node)
            return symbol.element_type if symbol is not None else ""
        if node.type == "composite_literal":
            return element_type_name(self._text(node.child_by_field_name("type")))
        if node.type == "parenthesized_expression" and node.named_children:
            return self._expr_element_type(node.named_children[0])
        return ""

    def _field(self, node: Node) -> Optional[_Symbol]:
        type_name = self._expr_type(node.child_by_field_name("operand"))
        if not type_name:
            return None
        return self.model.lookup_field(type_name, self._text(node.child_by_field_name("field")))

    def _callee(self, node: Optional[Node]) -> str:
        """Function key of a call target in this package, or ""."""
        if node is None:
            return ""
        if node.type == "identifier":
            name = self._text(node)
            if self._resolve(name) is None and name in self.model.functions:
                return name
            return ""
        if node.type == "selector_expression":
            type_name = self._expr_type(node.child_by_field_name("operand"))
            key = f"{type_name}.{self._text(node.child_by_field_name('field'))}"
            if type_name and key in self.model.functions:
                return key
        return ""

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _function(self, node: Node) -> None:
        name = self._text(node.child_by_field_name("name"))
        receiver = node.child_by_field_name("receiver")
        holder = ""
        if receiver is not None:
            for decl in receiver.named_children:
                if decl.type == "parameter_declaration":
                    holder = extract_base_type_name(self._text(decl.child_by_field_name("type")))
                    break
        self.function = f"{holder}.{name}" if holder else name
        if holder:
            self.context = TouchContext(method=name, holder_type=holder)
        else:
            self.context = TouchContext(function=name)

        self.scopes = [{}]
        self._declare_parameters(receiver, "receiver")
        self._declare_parameters(node.child_by_field_name("parameters"))
        result = node.child_by_field_name("result")
        if result is not None and result.type == "parameter_list":
            self._declare_parameters(result, "result")
        body = node.child_by_field_name("body")
        if body is not None:
            self._visit(body)
        self.scopes = []

    def _value_specs(self, node: Node) -> list[Node]:
        specs = [c for c in node.named_children if c.type in ("var_spec", "const_spec")]
        for spec_list in node.named_children:
            if spec_list.type == "var_spec_list":
                specs.extend(c for c in spec_list.named_children if c.type == "var_spec")
        return specs

    def _local_values(self, node: Node) -> None:
        kind = "constant" if node.type == "const_declaration" else "variable"
        for spec in self._value_specs(node):
            type_node = spec.child_by_field_name("type")
            value = spec.child_by_field_name("value")
            values = value.named_children if value is not None else []
            deps = self._reads(value)
            type_text = self._text(type_node)
            for i, name_node in enumerate(spec.children_by_field_name("name")):
                type_name = extract_base_type_name(type_text)
                element = element_type_name(type_text)
                if not type_text and i < len(values):
                    type_name = self._expr_type(values[i])
                    element = self._expr_element_type(values[i])
                symbol = self._declare(name_node, type_name, kind, element)
                if symbol is not None and value is not None:
                    self._touch(symbol, name_node, AccessKind.WRITE, deps)

    # ------------------------------------------------------------------
    # Statements and expressions
    # ------------------------------------------------------------------

    def _visit(self, node: Node) -> None:
        handler = getattr(self, f"_visit_{node.type}", None)
        if handler is not None:
            handler(node)
            return
        if node.type in _OPAQUE_TYPES:
            return
        if node.type in _SCOPE_TYPES:
            self.scopes.append({})
            try:
                self._visit_children(node)
            finally:
                self.scopes.pop()
            return
        self._visit_children(node)

    def _visit_children(self, node: Node) -> None:
        for child in node.named_children:
            self._visit(child)

    def _visit_identifier(self, node: Node) -> None:
        symbol = self._resolve(self._text(node))
        if symbol is not None:
            self._touch(symbol, node, AccessKind.READ)

    def _visit_selector_expression(self, node: Node) -> None:
        self._visit(node.child_by_field_name("operand"))
        symbol = self._field(node)
        if symbol is not None:
            self._touch(symbol, node, AccessKind.READ)

    def _visit_call_expression(self, node: Node) -> None:
        function = node.child_by_field_name("function")
        key = self._callee(function)
        if key:
            if function.type == "selector_expression":
                self._visit(function.child_by_field_name("operand"))
            self._touch(_Symbol(self.model.functions[key]), node, AccessKind.CALL)
        elif function is not None:
            self._visit(function)
        arguments = node.child_by_field_name("arguments")
        if arguments is not None:
            self._visit(arguments)

    def _visit_short_var_declaration(self, node: Node) -> None:
        right = node.child_by_field_name("right")
        deps = self._reads(right)
        values = right.named_children if right is not None else []
        left = node.child_by_field_name("left")
        targets = left.named_children if left is not None else []
        for i, target in enumerate(targets):
            if target.type != "identifier":
                continue
            symbol = self.scopes[-1].get(self._text(target))
            if symbol is None:
                value = values[i] if len(values) == len(targets) else None
                symbol = self._declare(
                    target,
                    self._expr_type(value),
                    element_type=self._expr_element_type(value),
                )
            if symbol is not None:
                self._touch(symbol, target, AccessKind.WRITE, deps)

    def _visit_assignment_statement(self, node: Node) -> None:
        deps = self._reads(node.child_by_field_name("right"))
        compound = self._text(node.child_by_field_name("operator")) != "="
        left = node.child_by_field_name("left")
        for target in left.named_children if left is not None else []:
            if compound:
                deps = deps + self._reads(target)
            self._write(target, deps)

    def _visit_inc_dec_statement(self, node: Node) -> None:
        if not node.named_children:
            return
        target = node.named_children[0]
        self._write(target, self._reads(target))

    def _visit_var_declaration(self, node: Node) -> None:
        self._local_values(node)

    def _visit_const_declaration(self, node: Node) -> None:
        self._local_values(node)

    def _visit_range_clause(self, node: Node) -> None:
        right = node.child_by_field_name("right")
        deps = self._reads(right)
        left = node.child_by_field_name("left")
        if left is None:
            return
        declares = any(c.type == ":=" for c in node.children)
        for i, target in enumerate(left.named_children):
            if declares and target.type == "identifier":
                # The second target ranges over element values
                element = self._expr_element_type(right) if i == 1 else ""
                symbol = self._declare(target, element)
                if symbol is not None:
                    self._touch(symbol, target, AccessKind.WRITE, deps)
            else:
                self._write(target, deps)

    def _visit_type_switch_statement(self, node: Node) -> None:
        self.scopes.append({})
        try:
            value = node.child_by_field_name("value")
            deps = self._reads(value)
            alias = node.child_by_field_name("alias")
            for target in alias.named_children if alias is not None else []:
                if target.type == "identifier":
                    symbol = self._declare(target)
                    if symbol is not None:
                        self._touch(symbol, target, AccessKind.WRITE, deps)
            skip = {n.id for n in (value, alias) if n is not None}
            for child in node.named_children:
                if child.id not in skip:
                    self._visit(child)
        finally:
            self.scopes.pop()

    def _visit_func_literal(self, node: Node) -> None:
        self.scopes.append({})
        try:
            self._declare_parameters(node.child_by_field_name("parameters"))
            body = node.child_by_field_name("body")
            if body is not None:
                self._visit(body)
        finally:
            self.scopes.pop()

    def _visit_composite_literal(self, node: Node) -> None:
        type_name = extract_base_type_name(self._text(node.child_by_field_name("type")))
        body = node.child_by_field_name("body")
        if body is None:
            return
        for element in body.named_children:
            if element.type != "keyed_element" or not type_name:
                self._visit(element)
                continue
            key, value = element.named_children[0], element.named_children[-1]
            if key.type == "literal_element" and key.named_children:
                key = key.named_children[0]
            symbol = None
            if key.type in ("identifier", "field_identifier"):
                symbol = self.model.lookup_field(type_name, self._text(key))
            if symbol is None:
                self._visit(element)
                continue
            self._touch(symbol, key, AccessKind.WRITE, self._reads(value))

    def _write(self, target: Node, deps: list[IdentityRef]) -> None:
        if target.type == "identifier":
            symbol = self._resolve(self._text(target))
            if symbol is not None:
                self._touch(symbol, target, AccessKind.WRITE, deps)
        elif target.type == "selector_expression":
            self._visit(target.child_by_field_name("operand"))
            symbol = self._field(target)
            if symbol is not None:
                self._touch(symbol, target, AccessKind.WRITE, deps)
        elif target.type == "index_expression":
            self._visit(target.child_by_field_name("index"))
            operand = target.child_by_field_name("operand")
            if operand is not None:
                self._write(operand, deps)
        elif target.type in ("unary_expression", "parenthesized_expression"):
            inner = target.child_by_field_name("operand") or (target.named_children[0] if target.named_children else None)
            if inner is not None:
                self._write(inner, deps)
        else:
            self._visit(target)


class GoAnalyzer:
    """Data-lineage pass over inspected Go packages."""

    def __init__(self, config: Optional[InspectorConfig] = None):
        self.inspector = GoInspector(config)

    def analyze_source(self, source: bytes | str, path: str = "", pkg_path: str = "") -> list[DataPoint]:
        """
        Analyze one Go source file as a package of its own.

        Args:
            source: Go source code
            path: File path recorded in code locations
            pkg_path: Import path used in identity refs (defaults to the package name)

        Returns:
            Data points sorted by ref
        """
        if isinstance(source, str):
            source = source.encode("utf-8")
        file = self.inspector.inspect_source(source, path)
        pkg = Package(name=file.package, import_path=pkg_path or file.package)
        pkg.add_file(file)
        return self.analyze_package(pkg, sources={file.name: source})

    def analyze_package(
        self,
        pkg: Package,
        root: str = "",
        sources: Optional[dict[str, bytes]] = None,
    ) -> list[DataPoint]:
        """
        Analyze the Go files of an inspected package.

        Args:
            pkg: Package from the Go inspector
            root: Directory file paths are relative to
            sources: Source bytes by file name; other files are read from disk

        Returns:
            Data points sorted by ref
        """
        model = _PackageModel(pkg)
        sources = sources or {}
        for f in pkg.files:
            if f.extension != ".go":
                continue
            source = sources.get(f.name)
            if source is None:
                path = os.path.join(root, f.path) if root else f.path
                try:
                    source = Path(path).read_bytes()
                except OSError as e:
                    raise InspectError(f"failed to read file {path}: {e}", {"path": path}) from e
            tree = get_parser().parse(source, "go")
            _FileAnalysis(model, f, source).run(tree.root_node)

        points = sorted(model.points.values(), key=lambda p: str(p.ref))
        logger.debug(f"Analyzed package {model.pkg_path}: {len(points)} data points")
        return points

    def analyze_project(self, project: Project, package_path: str = "") -> list[DataPoint]:
        """Data points of every package (optionally under a path prefix), in package order."""
        points: list[DataPoint] = []
        for pkg in project.packages:
            if package_path and not (
                pkg.path.startswith(package_path) or pkg.import_path.startswith(package_path)
            ):
                continue
            points.extend(self.analyze_package(pkg, project.path))
        logger.info(f"Analyzed project {project.name}: {len(points)} data points")
        return points
