"""
Go Inspector

Extracts packages, files, types, fields, methods, functions, constants and
variables from Go source using tree-sitter.

Extraction runs in three passes over the top-level declarations:

1. collect type specs with their doc comments and spans;
2. resolve every type's shape, then constants, variables and free functions;
3. bind methods to their receiver types, creating a synthetic struct for a
   receiver that is never declared in the file.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

from tree_sitter import Node

from linager.configs.logging import get_logger
from linager.graph.file import Constant, File, Import, Variable
from linager.graph.location import Location, LocationNode
from linager.graph.types import (
    Field,
    Function,
    Kind,
    Parameter,
    Type,
    TypeParam,
    extract_base_type_name,
    is_exported_name,
)
from linager.inspector.base import FileContext, Inspector, register_inspector, split_annotations
from linager.repository.detector import find_go_module

logger = get_logger("inspector.golang")

# Shape of a type expression node
_SHAPES = {
    "struct_type": Kind.STRUCT,
    "interface_type": Kind.INTERFACE,
    "slice_type": Kind.SLICE,
    "array_type": Kind.SLICE,
    "implicit_length_array_type": Kind.SLICE,
    "map_type": Kind.MAP,
    "channel_type": Kind.CHAN,
    "function_type": Kind.FUNC,
}

# Named type references: a declaration on one of these is an alias
_NAMED_TYPES = {"type_identifier", "qualified_type", "generic_type"}

_METHOD_ELEMS = {"method_elem", "method_spec"}
_EMBEDDED_ELEMS = {"type_elem", "constraint_elem", "interface_type_name", "type_identifier", "qualified_type"}

_GOPATH_SRC = re.compile(r"[/\\]src[/\\](.+)$")


@dataclass
class _TypeDecl:
    """A type spec seen in the collection pass."""

    name: str
    node: Node
    comment: Optional[LocationNode]
    location: Location


@register_inspector
class GoInspector(Inspector):
    """Go inspector."""

    extensions = (".go",)
    default_filename = "source.go"

    @property
    def language(self) -> str:
        return "go"

    def is_test_file(self, name: str) -> bool:
        return name.endswith("_test.go")

    def import_path(self, directory: str, root: Optional[str] = None) -> str:
        """Module-qualified import path, GOPATH layout, then the generic rule."""
        module, module_root = find_go_module(directory)
        if module:
            rel = os.path.relpath(directory, module_root)
            if rel == ".":
                return module
            return f"{module}/{rel.replace(os.sep, '/')}"
        match = _GOPATH_SRC.search(directory)
        if match:
            return match.group(1).replace(os.sep, "/")
        return super().import_path(directory, root)

    def extract_file(self, root: Node, ctx: FileContext) -> None:
        file = ctx.file
        source = ctx.source

        type_decls: list[Node] = []
        value_decls: list[Node] = []
        functions: list[Node] = []
        methods: list[Node] = []

        for node in root.children:
            if node.type == "package_clause":
                name = self.find_child(node, "package_identifier")
                file.package = self.get_node_text(name, source)
            elif node.type == "import_declaration":
                self._extract_imports(node, ctx)
            elif node.type == "type_declaration":
                type_decls.append(node)
            elif node.type in ("const_declaration", "var_declaration"):
                value_decls.append(node)
            elif node.type == "function_declaration":
                functions.append(node)
            elif node.type == "method_declaration":
                methods.append(node)

        # Pass 1: type specs, keyed by name
        collected: dict[str, _TypeDecl] = {}
        for decl in type_decls:
            for spec in self._collect_type_specs(decl, source):
                collected.setdefault(spec.name, spec)

        # Pass 2: shapes, values, free functions
        for spec in collected.values():
            if not self._keep(spec.name):
                continue
            file.add_type(self._resolve_type(spec, file, source))

        for decl in value_decls:
            self._extract_values(decl, file, source)

        for node in functions:
            function = self._extract_function(node, source)
            if function is not None and self._keep(function.name):
                file.add_function(function)

        # Pass 3: methods onto their receivers
        for node in methods:
            method = self._extract_method(node, source)
            if method is None or not self._keep(method.name):
                continue
            base = extract_base_type_name(method.receiver)
            if not base:
                logger.debug(f"Unresolvable receiver {method.receiver!r} in {ctx.path}")
                continue
            if not self._keep(base):
                continue
            file.ensure_type(base).add_method(method)

    # -------------------------------------------------------------------------
    # Private helper methods
    # -------------------------------------------------------------------------

    def _keep(self, name: str) -> bool:
        return self.config.include_unexported or is_exported_name(name)

    def _text(self, node: Optional[Node], source: bytes) -> str:
        return self.get_node_text(node, source)

    def _extract_imports(self, node: Node, ctx: FileContext) -> None:
        specs = self.find_children(node, "import_spec")
        for spec_list in self.find_children(node, "import_spec_list"):
            specs.extend(self.find_children(spec_list, "import_spec"))

        for spec in specs:
            path = self._text(spec.child_by_field_name("path"), ctx.source).strip("\"`")
            if not path:
                continue
            alias = self._text(spec.child_by_field_name("name"), ctx.source)
            local = alias or path.rsplit("/", 1)[-1]
            ctx.imports[local] = path
            ctx.file.add_import(Import(path=path, name=alias, location=self.location(spec, ctx.source)))

    def _collect_type_specs(self, decl: Node, source: bytes) -> list[_TypeDecl]:
        """
        Type specs of one declaration.

        A spec's own doc comment wins over the comment of its group. Grouped
        specs are anchored at the spec; a lone spec at the whole declaration
        so its span keeps the ``type`` keyword.
        """
        grouped = self.find_child(decl, "(") is not None
        group_comment = self.leading_comment(decl, source)
        specs = []
        for spec in decl.children:
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name = self._text(spec.child_by_field_name("name"), source)
            if not name:
                continue
            comment = self.leading_comment(spec, source) if grouped else None
            if comment is None and group_comment is not None:
                # Shared by the group; text only so it is not written once per spec
                comment = group_comment if not grouped else LocationNode(text=group_comment.text)
            specs.append(_TypeDecl(
                name=name,
                node=spec,
                comment=comment,
                location=self.location(spec if grouped else decl, source),
            ))
        return specs

    def _resolve_type(self, spec: _TypeDecl, file: File, source: bytes) -> Type:
        t = Type(
            name=spec.name,
            package=file.package,
            package_path=file.import_path,
            is_exported=is_exported_name(spec.name),
            comment=spec.comment,
            location=spec.location,
            type_params=self._type_params(spec.node.child_by_field_name("type_parameters"), source),
        )
        if t.comment is not None:
            text, annotation = split_annotations(t.comment.text)
            if annotation:
                t.annotation = LocationNode(text=annotation)
                t.comment = LocationNode(text=text, location=t.comment.location)

        type_node = spec.node.child_by_field_name("type")
        if type_node is None:
            return t

        if spec.node.type == "type_alias" or type_node.type in _NAMED_TYPES:
            t.kind = Kind.ALIAS
            t.component_type = self._text(type_node, source)
            if t.comment is None:
                t.comment = LocationNode(text=f"{t.name} is a type alias for {t.component_type}")
            return t

        self._resolve_shape(t, type_node, source)
        return t

    def _resolve_shape(self, t: Type, node: Node, source: bytes) -> None:
        if node.type == "pointer_type":
            t.is_pointer = True
            target = node.named_children[-1] if node.named_children else None
            t.component_type = self._text(target, source)
            if target is not None:
                t.kind = _SHAPES.get(target.type, Kind.OTHER)
            return

        t.kind = _SHAPES.get(node.type, Kind.OTHER)
        if node.type == "struct_type":
            self._extract_struct(t, node, source)
        elif node.type == "interface_type":
            self._extract_interface(t, node, source)
        elif node.type in ("slice_type", "array_type", "implicit_length_array_type"):
            t.component_type = self._text(node.child_by_field_name("element"), source)
        elif node.type == "map_type":
            t.key_type = self._text(node.child_by_field_name("key"), source)
            t.component_type = self._text(node.child_by_field_name("value"), source)
        elif node.type == "channel_type":
            t.component_type = self._text(node.child_by_field_name("value"), source)

    def _extract_struct(self, t: Type, node: Node, source: bytes) -> None:
        field_list = self.find_child(node, "field_declaration_list")
        if field_list is None:
            return
        t.body = self._interior(field_list)

        for decl in field_list.named_children:
            if decl.type != "field_declaration":
                continue
            type_node = decl.child_by_field_name("type")
            type_text = self._text(type_node, source)
            names = [self._text(n, source) for n in decl.children_by_field_name("name")]

            tag = self._text(decl.child_by_field_name("tag"), source)
            if len(tag) >= 2:
                tag = tag[1:-1]

            leading = self.leading_comment(decl, source)
            comment_node = leading or self.trailing_comment(decl, source)
            comment, annotation = split_annotations(comment_node.text) if comment_node else ("", "")
            doc = leading.location if leading is not None else None
            location = self.location(decl, source)

            if not names:
                if self.find_child(decl, "*") is not None:
                    type_text = "*" + type_text
                t.add_field(Field(
                    name="",
                    type=self._type_ref(type_node, source, type_text),
                    tag=tag,
                    location=location,
                    comment=comment,
                    annotation=annotation,
                    is_exported=is_exported_name(extract_base_type_name(type_text)),
                    is_embedded=True,
                    doc=doc,
                ))
                continue

            for name in names:
                t.add_field(Field(
                    name=name,
                    type=self._type_ref(type_node, source),
                    tag=tag,
                    location=location,
                    comment=comment,
                    annotation=annotation,
                    is_exported=is_exported_name(name),
                    doc=doc,
                ))

    def _extract_interface(self, t: Type, node: Node, source: bytes) -> None:
        t.inline_methods = True
        t.body = self._interior(node)

        for elem in node.named_children:
            if elem.type in _METHOD_ELEMS:
                name = self._text(elem.child_by_field_name("name"), source)
                if not name:
                    continue
                comment = self.leading_comment(elem, source) or self.trailing_comment(elem, source)
                t.add_method(Function(
                    name=name,
                    receiver=t.name,
                    comment=comment,
                    parameters=self._parameters(elem.child_by_field_name("parameters"), source),
                    results=self._results(elem.child_by_field_name("result"), source),
                    is_exported=is_exported_name(name),
                    signature=" ".join(self._text(elem, source).split()),
                    location=self.location(elem, source),
                ))
            elif elem.type in _EMBEDDED_ELEMS:
                type_text = self._text(elem, source)
                t.add_field(Field(
                    name="",
                    type=Type(name=type_text, kind=Kind.INTERFACE),
                    location=self.location(elem, source),
                    is_exported=is_exported_name(extract_base_type_name(type_text)),
                    is_embedded=True,
                ))

    def _interior(self, node: Node) -> Optional[Location]:
        """Span between a node's braces."""
        open_brace = self.find_child(node, "{")
        close_brace = self.find_child(node, "}")
        if open_brace is None or close_brace is None:
            return None
        return Location(
            start=open_brace.end_byte,
            end=close_brace.start_byte,
            line=open_brace.start_point[0] + 1,
        )

    def _type_ref(self, node: Optional[Node], source: bytes, name: str = "") -> Type:
        """A referenced (not declared) type: its text and shape."""
        name = name or self._text(node, source)
        ref = Type(name=name)
        if node is None:
            return ref
        if node.type == "pointer_type":
            ref.is_pointer = True
            target = node.named_children[-1] if node.named_children else None
            ref.component_type = self._text(target, source)
        else:
            ref.kind = _SHAPES.get(node.type, Kind.OTHER)
            if node.type == "map_type":
                ref.key_type = self._text(node.child_by_field_name("key"), source)
                ref.component_type = self._text(node.child_by_field_name("value"), source)
            elif node.type in ("slice_type", "array_type"):
                ref.component_type = self._text(node.child_by_field_name("element"), source)
        return ref

    def _type_params(self, node: Optional[Node], source: bytes) -> list[TypeParam]:
        if node is None:
            return []
        params = []
        for decl in node.named_children:
            if decl.type not in ("type_parameter_declaration", "parameter_declaration"):
                continue
            constraint = self._text(decl.child_by_field_name("type"), source)
            for name in decl.children_by_field_name("name"):
                params.append(TypeParam(name=self._text(name, source), constraint=constraint))
        return params

    def _parameters(self, node: Optional[Node], source: bytes) -> list[Parameter]:
        if node is None:
            return []
        params = []
        for decl in node.named_children:
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            type_node = decl.child_by_field_name("type")
            type_text = self._text(type_node, source)
            if decl.type == "variadic_parameter_declaration":
                type_text = "..." + type_text
            names = decl.children_by_field_name("name")
            if not names:
                params.append(Parameter(name="", type=self._type_ref(type_node, source, type_text)))
            for name in names:
                params.append(Parameter(
                    name=self._text(name, source),
                    type=self._type_ref(type_node, source, type_text),
                ))
        return params

    def _results(self, node: Optional[Node], source: bytes) -> list[Parameter]:
        if node is None:
            return []
        if node.type == "parameter_list":
            return self._parameters(node, source)
        return [Parameter(name="", type=self._type_ref(node, source))]

    def _extract_values(self, decl: Node, file: File, source: bytes) -> None:
        is_const = decl.type == "const_declaration"
        spec_type = "const_spec" if is_const else "var_spec"

        specs = self.find_children(decl, spec_type)
        grouped = self.find_child(decl, "(") is not None
        for spec_list in self.find_children(decl, "var_spec_list"):
            specs.extend(self.find_children(spec_list, spec_type))
            grouped = True

        group_comment = self.leading_comment(decl, source)
        for spec in specs:
            comment_node = self.leading_comment(spec, source) if grouped else None
            comment_node = comment_node or self.trailing_comment(spec, source) or group_comment
            comment, annotation = split_annotations(comment_node.text) if comment_node else ("", "")

            type_node = spec.child_by_field_name("type")
            value_node = spec.child_by_field_name("value")
            values = value_node.named_children if value_node is not None else []
            location = self.location(spec if grouped else decl, source)

            for i, name_node in enumerate(spec.children_by_field_name("name")):
                name = self._text(name_node, source)
                if name == "_" or not self._keep(name):
                    continue
                cls = Constant if is_const else Variable
                value = cls(
                    name=name,
                    type=self._type_ref(type_node, source) if type_node is not None else None,
                    value=self._text(values[i], source) if i < len(values) else "",
                    comment=comment,
                    annotation=annotation,
                    is_exported=is_exported_name(name),
                    location=location,
                )
                if is_const:
                    file.add_constant(value)
                else:
                    file.add_variable(value)

    def _signature(self, node: Node, source: bytes) -> str:
        """Declaration header up to the body, whitespace normalized."""
        body = node.child_by_field_name("body")
        end = body.start_byte if body is not None else node.end_byte
        header = source[node.start_byte:end].decode("utf-8", errors="replace")
        return " ".join(header.split())

    def _extract_function(self, node: Node, source: bytes) -> Optional[Function]:
        name = self._text(node.child_by_field_name("name"), source)
        if not name:
            return None
        body = node.child_by_field_name("body")
        comment = self.leading_comment(node, source)
        annotation = None
        if comment is not None:
            text, annotations = split_annotations(comment.text)
            if annotations:
                annotation = LocationNode(text=annotations)
                comment = LocationNode(text=text, location=comment.location)
        return Function(
            name=name,
            comment=comment,
            annotation=annotation,
            type_params=self._type_params(node.child_by_field_name("type_parameters"), source),
            parameters=self._parameters(node.child_by_field_name("parameters"), source),
            results=self._results(node.child_by_field_name("result"), source),
            body=LocationNode(
                text=self._text(body, source),
                location=self.location(body, source),
            ) if body is not None else None,
            is_exported=is_exported_name(name),
            signature=self._signature(node, source),
            location=self.location(node, source),
        )

    def _extract_method(self, node: Node, source: bytes) -> Optional[Function]:
        method = self._extract_function(node, source)
        if method is None:
            return None
        receiver = node.child_by_field_name("receiver")
        if receiver is not None:
            for decl in receiver.named_children:
                if decl.type == "parameter_declaration":
                    method.receiver = self._text(decl.child_by_field_name("type"), source)
                    break
        if not method.receiver:
            return None
        return method
