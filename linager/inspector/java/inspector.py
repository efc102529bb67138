"""
Java Inspector

Extracts classes, interfaces, enums, records and annotation types from Java
source using tree-sitter. Methods and constructors live inside their type's
body; static final fields (and enum constants) are also file constants.
"""

import os
from typing import Optional

from tree_sitter import Node

from linager.configs.logging import get_logger
from linager.graph.file import Constant, File, Import
from linager.graph.location import Location, LocationNode
from linager.graph.types import Field, Function, Kind, Parameter, Type, TypeParam
from linager.inspector.base import FileContext, Inspector, register_inspector

logger = get_logger("inspector.java")

_TYPE_DECLARATIONS = {
    "class_declaration": Kind.STRUCT,
    "interface_declaration": Kind.INTERFACE,
    "enum_declaration": Kind.STRUCT,
    "record_declaration": Kind.STRUCT,
    "annotation_type_declaration": Kind.INTERFACE,
}

_ANNOTATIONS = {"marker_annotation", "annotation"}


@register_inspector
class JavaInspector(Inspector):
    """Java inspector."""

    extensions = (".java",)
    default_filename = "Source.java"

    @property
    def language(self) -> str:
        return "java"

    def is_test_file(self, name: str) -> bool:
        base = os.path.basename(name)
        return base.endswith("Test.java") or base.endswith("Tests.java")

    def is_test_directory(self, path: str) -> bool:
        if not self.config.skip_tests:
            return False
        normalized = path.replace(os.sep, "/")
        return normalized.endswith("/src/test") or "/src/test/" in normalized

    def extract_file(self, root: Node, ctx: FileContext) -> None:
        file = ctx.file
        source = ctx.source

        for node in root.children:
            if node.type == "package_declaration":
                for child in node.named_children:
                    if child.type in ("scoped_identifier", "identifier"):
                        file.package = self.get_node_text(child, source)
                        break
            elif node.type == "import_declaration":
                self._extract_import(node, ctx)

        for node in root.children:
            if node.type not in _TYPE_DECLARATIONS:
                continue
            t = self._extract_type(node, ctx)
            if t is not None:
                file.add_type(t)

    # -------------------------------------------------------------------------
    # Private helper methods
    # -------------------------------------------------------------------------

    def _extract_import(self, node: Node, ctx: FileContext) -> None:
        is_static = self.find_child(node, "static") is not None
        name_node = None
        for child in node.named_children:
            if child.type in ("scoped_identifier", "identifier"):
                name_node = child
                break
        if name_node is None:
            return
        path = self.get_node_text(name_node, ctx.source)
        if self.find_child(node, "asterisk") is not None:
            path += ".*"
        else:
            ctx.imports[path.rsplit(".", 1)[-1]] = path
        # Static imports are marked through the alias slot
        ctx.file.add_import(Import(
            path=path,
            name="static" if is_static else "",
            location=self.location(node, ctx.source),
        ))

    def _qualify(self, name: str, ctx: FileContext) -> str:
        """Fully qualify a simple type name through the file's imports."""
        simple = name.split("<", 1)[0].strip()
        if simple in ctx.imports:
            return ctx.imports[simple] + name[len(simple):]
        return name

    def _modifiers(self, node: Node, source: bytes) -> tuple[set[str], list[Node]]:
        """Modifier keywords and annotation nodes of a declaration."""
        keywords = set()
        annotations = []
        modifiers = self.find_child(node, "modifiers")
        if modifiers is not None:
            for child in modifiers.children:
                if child.type in _ANNOTATIONS:
                    annotations.append(child)
                else:
                    keywords.add(self.get_node_text(child, source))
        return keywords, annotations

    def _documentation(self, node: Node, source: bytes) -> tuple[Optional[LocationNode], Optional[LocationNode]]:
        """Javadoc above a declaration and the annotations in its modifiers."""
        comment = self.leading_comment(node, source)
        _, annotations = self._modifiers(node, source)
        annotation = None
        if annotations:
            annotation = LocationNode(
                text="\n".join(self.get_node_text(a, source) for a in annotations),
                location=self.location(annotations[-1], source, start=annotations[0]),
            )
        return comment, annotation

    def _type_params(self, node: Node, source: bytes) -> list[TypeParam]:
        params_node = node.child_by_field_name("type_parameters")
        if params_node is None:
            return []
        params = []
        for param in params_node.named_children:
            if param.type != "type_parameter":
                continue
            name = ""
            constraint = "any"
            for child in param.named_children:
                if child.type in ("type_identifier", "identifier") and not name:
                    name = self.get_node_text(child, source)
                elif child.type == "type_bound":
                    constraint = " & ".join(
                        self.get_node_text(b, source) for b in child.named_children
                    )
            if name:
                params.append(TypeParam(name=name, constraint=constraint))
        return params

    def _type_list(self, node: Optional[Node], ctx: FileContext) -> list[str]:
        if node is None:
            return []
        names = []
        for child in node.named_children:
            if child.type == "type_list":
                names.extend(self._type_list(child, ctx))
            else:
                names.append(self._qualify(self.get_node_text(child, ctx.source), ctx))
        return names

    def _extract_type(self, node: Node, ctx: FileContext) -> Optional[Type]:
        source = ctx.source
        name = self.get_node_text(node.child_by_field_name("name"), source)
        if not name:
            return None

        keywords, _ = self._modifiers(node, source)
        if not self.config.include_unexported and "public" not in keywords:
            logger.debug(f"Skipping non-public type {name}")
            return None
        comment, annotation = self._documentation(node, source)
        t = Type(
            name=name,
            kind=_TYPE_DECLARATIONS[node.type],
            package=ctx.file.package,
            comment=comment,
            annotation=annotation,
            is_exported="public" in keywords,
            type_params=self._type_params(node, source),
            location=self.location(node, source),
            inline_methods=True,
        )

        superclass = node.child_by_field_name("superclass")
        if superclass is not None:
            t.extends = self._type_list(superclass, ctx)
        if node.type == "interface_declaration":
            t.extends = self._type_list(self.find_child(node, "extends_interfaces"), ctx)
        else:
            t.implements = self._type_list(node.child_by_field_name("interfaces"), ctx)

        if node.type == "record_declaration":
            for param, param_node in self._parameters(node, ctx):
                t.add_field(Field(
                    name=param.name,
                    type=param.type,
                    location=self.location(param_node, source),
                    is_exported=True,
                ))

        body = node.child_by_field_name("body")
        if body is None:
            return t
        t.body = self._interior(body)

        members = list(body.named_children)
        if node.type == "enum_declaration":
            for member in list(members):
                if member.type == "enum_body_declarations":
                    members.extend(member.named_children)
            for member in members:
                if member.type == "enum_constant":
                    self._add_enum_constant(t, member, ctx)

        interface = t.kind == Kind.INTERFACE
        for member in members:
            if member.type in ("field_declaration", "constant_declaration"):
                self._add_fields(t, member, ctx, interface)
            elif member.type in ("method_declaration", "constructor_declaration", "compact_constructor_declaration"):
                method = self._extract_method(member, t, ctx, interface)
                if method is not None and (self.config.include_unexported or method.is_exported):
                    t.add_method(method)
        return t

    def _interior(self, body: Node) -> Optional[Location]:
        open_brace = self.find_child(body, "{")
        close_brace = self.find_child(body, "}")
        if open_brace is None or close_brace is None:
            return None
        return Location(
            start=open_brace.end_byte,
            end=close_brace.start_byte,
            line=open_brace.start_point[0] + 1,
        )

    def _add_enum_constant(self, t: Type, node: Node, ctx: FileContext) -> None:
        source = ctx.source
        name = self.get_node_text(node.child_by_field_name("name"), source)
        if not name:
            return
        comment = self.leading_comment(node, source)
        f = t.add_field(Field(
            name=name,
            type=Type(name=t.name, kind=t.kind),
            location=self.location(node, source),
            comment=comment.text if comment else "",
            is_exported=True,
            is_static=True,
            is_constant=True,
            doc=comment.location if comment else None,
        ))
        self._add_constant(ctx.file, f, self.get_node_text(node.child_by_field_name("arguments"), source))

    def _add_fields(self, t: Type, node: Node, ctx: FileContext, interface: bool) -> None:
        source = ctx.source
        keywords, _ = self._modifiers(node, source)
        comment, annotation = self._documentation(node, source)
        # Interface fields are implicitly public static final
        is_static = interface or "static" in keywords
        is_final = interface or "final" in keywords
        is_public = interface or "public" in keywords
        if not self.config.include_unexported and not is_public:
            return

        field_type = self._java_type(node.child_by_field_name("type"), ctx)
        location = self.location(node, source)
        for declarator in node.children_by_field_name("declarator"):
            name = self.get_node_text(declarator.child_by_field_name("name"), source)
            if not name:
                continue
            f = t.add_field(Field(
                name=name,
                type=field_type,
                location=location,
                comment=comment.text if comment else "",
                annotation=annotation.text if annotation else "",
                is_exported=is_public,
                is_static=is_static,
                is_constant=is_static and is_final,
                doc=comment.location if comment else None,
            ))
            if f.is_constant:
                value = self.get_node_text(declarator.child_by_field_name("value"), source)
                self._add_constant(ctx.file, f, value)

    def _add_constant(self, file: File, f: Field, value: str) -> None:
        """Static final fields are visible as file constants too."""
        file.add_constant(Constant(
            name=f.name,
            type=f.type,
            value=value,
            comment=f.comment,
            annotation=f.annotation,
            is_exported=f.is_exported,
            location=f.location,
        ))

    def _java_type(self, node: Optional[Node], ctx: FileContext) -> Optional[Type]:
        if node is None:
            return None
        name = self.get_node_text(node, ctx.source)
        kind = Kind.OTHER
        component = ""
        if node.type == "array_type":
            kind = Kind.SLICE
            component = self.get_node_text(node.child_by_field_name("element"), ctx.source)
        qualified = self._qualify(name, ctx)
        package_path = qualified.rsplit(".", 1)[0] if qualified != name and "." in qualified else ""
        return Type(name=name, kind=kind, component_type=component, package_path=package_path)

    def _parameters(self, node: Node, ctx: FileContext) -> list[tuple[Parameter, Node]]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return []
        params = []
        for param in params_node.named_children:
            if param.type == "formal_parameter":
                type_node = param.child_by_field_name("type")
                name = self.get_node_text(param.child_by_field_name("name"), ctx.source)
                params.append((Parameter(name=name, type=self._java_type(type_node, ctx)), param))
            elif param.type == "spread_parameter":
                type_node = None
                name = ""
                for child in param.named_children:
                    if child.type == "variable_declarator":
                        name = self.get_node_text(child.child_by_field_name("name"), ctx.source)
                    elif type_node is None and child.type != "modifiers":
                        type_node = child
                param_type = self._java_type(type_node, ctx)
                if param_type is not None:
                    param_type.name = param_type.name + "..."
                    param_type.kind = Kind.SLICE
                params.append((Parameter(name=name, type=param_type), param))
        return params

    def _signature(self, name: str, node: Node, params: list[Parameter], ctx: FileContext) -> str:
        """``ReturnType name<T extends X>(Type a) throws E`` with imported names qualified."""
        parts = []
        return_type = node.child_by_field_name("type")
        if node.type == "method_declaration" and return_type is not None:
            parts.append(self._qualify(self.get_node_text(return_type, ctx.source), ctx) + " ")
        parts.append(name)

        type_params = self._type_params(node, ctx.source)
        if type_params:
            rendered = []
            for p in type_params:
                if p.constraint == "any":
                    rendered.append(p.name)
                else:
                    bounds = " & ".join(self._qualify(b.strip(), ctx) for b in p.constraint.split("&"))
                    rendered.append(f"{p.name} extends {bounds}")
            parts.append("<" + ", ".join(rendered) + ">")

        rendered_params = []
        for p in params:
            type_name = self._qualify(p.type_name, ctx)
            rendered_params.append(f"{type_name} {p.name}".strip())
        parts.append("(" + ", ".join(rendered_params) + ")")

        throws = self.find_child(node, "throws")
        if throws is not None:
            names = [self._qualify(self.get_node_text(e, ctx.source), ctx) for e in throws.named_children]
            parts.append(" throws " + ", ".join(names))
        return "".join(parts)

    def _extract_method(self, node: Node, owner: Type, ctx: FileContext, interface: bool) -> Optional[Function]:
        source = ctx.source
        is_constructor = node.type != "method_declaration"
        name = owner.name if is_constructor else self.get_node_text(node.child_by_field_name("name"), source)
        if not name:
            return None

        keywords, _ = self._modifiers(node, source)
        comment, annotation = self._documentation(node, source)
        params = [p for p, _ in self._parameters(node, ctx)]

        results = []
        if is_constructor:
            results = [Parameter(name="", type=Type(name=owner.name, kind=owner.kind))]
        else:
            return_type = self._java_type(node.child_by_field_name("type"), ctx)
            if return_type is not None and return_type.name != "void":
                results = [Parameter(name="", type=return_type)]

        body = node.child_by_field_name("body")
        return Function(
            name=name,
            receiver=owner.name,
            comment=comment,
            annotation=annotation,
            type_params=self._type_params(node, source),
            parameters=params,
            results=results,
            body=LocationNode(
                text=self.get_node_text(body, source),
                location=self.location(body, source),
            ) if body is not None else None,
            is_exported=interface or "public" in keywords,
            is_static="static" in keywords,
            is_constructor=is_constructor,
            signature=self._signature(name, node, params, ctx),
            location=self.location(node, source),
        )

