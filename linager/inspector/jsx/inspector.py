"""
JSX Inspector

Extracts components, classes, functions, constants and variables from
JavaScript/JSX source using tree-sitter.

Classes and components (functions or arrow functions returning JSX) become
types; a component's props become its fields. Methods assigned through
``X.prototype.m = function`` are bound to ``X`` after the whole file has
been read, so the assignment may come before or without a class.
"""

import os
from typing import Optional

from tree_sitter import Node

from linager.configs.logging import get_logger
from linager.graph.file import Constant, Import, Variable
from linager.graph.location import Location, LocationNode
from linager.graph.types import Field, Function, Kind, Parameter, Type
from linager.inspector.base import FileContext, Inspector, register_inspector

logger = get_logger("inspector.jsx")

_JSX_NODES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}
_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_TEST_SUFFIXES = (".test.js", ".spec.js", ".test.jsx", ".spec.jsx")


@register_inspector
class JSXInspector(Inspector):
    """JavaScript / JSX inspector."""

    extensions = (".jsx", ".js")
    default_filename = "source.jsx"

    @property
    def language(self) -> str:
        return "javascript"

    def is_test_file(self, name: str) -> bool:
        return name.endswith(_TEST_SUFFIXES)

    def is_test_directory(self, path: str) -> bool:
        return self.config.skip_tests and os.path.basename(path) == "__tests__"

    def extract_file(self, root: Node, ctx: FileContext) -> None:
        file = ctx.file
        prototype_methods: list[tuple[str, Function]] = []

        for node in root.children:
            statement = node
            exported = False
            if node.type == "export_statement":
                exported = True
                node = node.child_by_field_name("declaration")
                if node is None:
                    continue

            if node.type == "import_statement":
                self._extract_import(node, ctx)
            elif node.type == "class_declaration":
                t = self._extract_class(node, statement, ctx, exported)
                if t is not None and self._keep(t.is_exported):
                    file.add_type(t)
            elif node.type in _FUNCTION_DECLARATIONS:
                self._extract_function_declaration(node, statement, ctx, exported)
            elif node.type in ("lexical_declaration", "variable_declaration"):
                self._extract_declaration(node, statement, ctx, exported)
            elif node.type == "expression_statement":
                bound = self._prototype_method(node, ctx)
                if bound is not None:
                    prototype_methods.append(bound)

        # Deferred: prototype assignments onto their (possibly synthetic) type
        for receiver, method in prototype_methods:
            logger.debug(f"Binding {receiver}.prototype.{method.name} in {ctx.path}")
            file.ensure_type(receiver).add_method(method)

    # -------------------------------------------------------------------------
    # Private helper methods
    # -------------------------------------------------------------------------

    def _keep(self, exported: bool) -> bool:
        return self.config.include_unexported or exported

    def _contains_jsx(self, node: Optional[Node]) -> bool:
        if node is None:
            return False
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in _JSX_NODES:
                return True
            stack.extend(current.children)
        return False

    def _extract_import(self, node: Node, ctx: FileContext) -> None:
        source_node = node.child_by_field_name("source")
        path = self.get_node_text(source_node, ctx.source).strip("'\"`")
        if not path:
            return
        location = self.location(node, ctx.source)

        names = []
        clause = self.find_child(node, "import_clause")
        if clause is not None:
            for child in clause.named_children:
                if child.type == "identifier":
                    names.append(self.get_node_text(child, ctx.source))
                elif child.type == "namespace_import":
                    alias = self.find_child(child, "identifier")
                    if alias is not None:
                        names.append(self.get_node_text(alias, ctx.source))
                elif child.type == "named_imports":
                    for spec in self.find_children(child, "import_specifier"):
                        local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        names.append(self.get_node_text(local, ctx.source))

        if not names:
            ctx.file.add_import(Import(path=path, location=location))
            return
        for name in names:
            ctx.imports[name] = path
            ctx.file.add_import(Import(path=path, name=name, location=location))

    def _props(self, params: Optional[Node], source: bytes) -> list[Field]:
        """Props of a component: its first parameter, or the names destructured from it."""
        if params is None:
            return []
        if params.type == "formal_parameters":
            first = params.named_children[0] if params.named_children else None
        else:
            first = params
        if first is None:
            return []
        if first.type == "assignment_pattern":
            first = first.child_by_field_name("left") or first

        names = []
        if first.type == "identifier":
            names.append(self.get_node_text(first, source))
        elif first.type == "object_pattern":
            for prop in first.named_children:
                if prop.type in ("shorthand_property_identifier_pattern", "shorthand_property_identifier", "identifier"):
                    names.append(self.get_node_text(prop, source))
                elif prop.type == "object_assignment_pattern":
                    names.append(self.get_node_text(prop.child_by_field_name("left"), source))
                elif prop.type == "pair_pattern":
                    names.append(self.get_node_text(prop.child_by_field_name("key"), source))
        return [
            Field(name=name, type=Type(name="any"), comment="prop", is_exported=True)
            for name in names if name
        ]

    def _parameters(self, params: Optional[Node], source: bytes) -> list[Parameter]:
        if params is None:
            return []
        result = []
        for param in params.named_children:
            if param.type == "comment":
                continue
            target = param
            if param.type == "assignment_pattern":
                target = param.child_by_field_name("left") or param
            result.append(Parameter(name=self.get_node_text(target, source)))
        return result

    def _signature(self, statement: Node, body: Optional[Node], source: bytes) -> str:
        end = body.start_byte if body is not None else statement.end_byte
        header = source[statement.start_byte:end].decode("utf-8", errors="replace")
        return " ".join(header.split())

    def _component(
        self,
        name: str,
        params: Optional[Node],
        statement: Node,
        ctx: FileContext,
        exported: bool,
    ) -> Type:
        t = Type(
            name=name,
            kind=Kind.STRUCT,
            package=ctx.file.package,
            comment=self.leading_comment(statement, ctx.source),
            is_exported=exported,
            location=self.location(statement, ctx.source),
        )
        for prop in self._props(params, ctx.source):
            t.add_field(prop)
        return t

    def _function(
        self,
        name: str,
        value: Node,
        statement: Node,
        ctx: FileContext,
        exported: bool,
    ) -> Function:
        body = value.child_by_field_name("body")
        params = value.child_by_field_name("parameters")
        if params is not None:
            parameters = self._parameters(params, ctx.source)
        else:
            # Single unparenthesized arrow parameter
            single = value.child_by_field_name("parameter")
            parameters = [Parameter(name=self.get_node_text(single, ctx.source))] if single is not None else []
        return Function(
            name=name,
            comment=self.leading_comment(statement, ctx.source),
            parameters=parameters,
            body=LocationNode(
                text=self.get_node_text(body, ctx.source),
                location=self.location(body, ctx.source),
            ) if body is not None else None,
            is_exported=exported,
            signature=self._signature(statement, body, ctx.source),
            location=self.location(statement, ctx.source),
        )

    def _extract_function_declaration(self, node: Node, statement: Node, ctx: FileContext, exported: bool) -> None:
        name = self.get_node_text(node.child_by_field_name("name"), ctx.source)
        if not name or not self._keep(exported):
            return
        if self._contains_jsx(node.child_by_field_name("body")):
            ctx.file.add_type(self._component(
                name, node.child_by_field_name("parameters"), statement, ctx, exported
            ))
            return
        ctx.file.add_function(self._function(name, node, statement, ctx, exported))

    def _extract_declaration(self, node: Node, statement: Node, ctx: FileContext, exported: bool) -> None:
        source = ctx.source
        is_const = self.get_node_text(node.children[0], source) == "const" if node.children else False
        comment = self.leading_comment(statement, source)
        location = self.location(statement, source)

        for declarator in self.find_children(node, "variable_declarator"):
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            name = self.get_node_text(name_node, source)
            value = declarator.child_by_field_name("value")
            if not self._keep(exported):
                continue

            if value is not None and value.type in _FUNCTION_VALUES:
                if self._contains_jsx(value.child_by_field_name("body")):
                    params = value.child_by_field_name("parameters") or value.child_by_field_name("parameter")
                    ctx.file.add_type(self._component(name, params, statement, ctx, exported))
                else:
                    ctx.file.add_function(self._function(name, value, statement, ctx, exported))
                continue

            value_text = self.get_node_text(value, source)
            entry_comment = comment.text if comment else ""
            if value is not None and value.type == "call_expression":
                callee = self.get_node_text(value.child_by_field_name("function"), source)
                if callee == "useState":
                    entry_comment = entry_comment or "state variable"

            cls = Constant if is_const else Variable
            entry = cls(
                name=name,
                value=value_text,
                comment=entry_comment,
                is_exported=exported,
                location=location,
            )
            if is_const:
                ctx.file.add_constant(entry)
            else:
                ctx.file.add_variable(entry)

    def _extract_class(self, node: Node, statement: Node, ctx: FileContext, exported: bool) -> Optional[Type]:
        source = ctx.source
        name = self.get_node_text(node.child_by_field_name("name"), source)
        if not name:
            return None

        t = Type(
            name=name,
            kind=Kind.STRUCT,
            package=ctx.file.package,
            comment=self.leading_comment(statement, source),
            is_exported=exported,
            location=self.location(statement, source),
            inline_methods=True,
        )
        heritage = self.find_child(node, "class_heritage")
        if heritage is not None:
            t.extends = [self.get_node_text(c, source) for c in heritage.named_children]

        body = node.child_by_field_name("body")
        if body is None:
            return t
        t.body = self._interior(body)

        for member in body.named_children:
            is_static = self.find_child(member, "static") is not None
            if member.type == "method_definition":
                method_name = self.get_node_text(member.child_by_field_name("name"), source)
                if not method_name:
                    continue
                method = self._function(method_name, member, member, ctx, True)
                method.receiver = name
                method.is_static = is_static
                method.is_constructor = method_name == "constructor"
                t.add_method(method)
            elif member.type in ("field_definition", "public_field_definition"):
                prop = member.child_by_field_name("property") or member.child_by_field_name("name")
                field_name = self.get_node_text(prop, source)
                if not field_name:
                    continue
                value = member.child_by_field_name("value")
                if value is not None and value.type in _FUNCTION_VALUES:
                    # Arrow-function class fields behave as methods
                    method = self._function(field_name, value, member, ctx, True)
                    method.receiver = name
                    method.is_static = is_static
                    t.add_method(method)
                    continue
                t.add_field(Field(
                    name=field_name,
                    type=Type(name="any"),
                    location=self.location(member, source),
                    is_exported=not field_name.startswith("#"),
                    is_static=is_static,
                ))
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

    def _prototype_method(self, statement: Node, ctx: FileContext) -> Optional[tuple[str, Function]]:
        """``Receiver.prototype.name = function`` as (receiver, method)."""
        expr = statement.named_children[0] if statement.named_children else None
        if expr is None or expr.type != "assignment_expression":
            return None
        left = expr.child_by_field_name("left")
        right = expr.child_by_field_name("right")
        if left is None or right is None or left.type != "member_expression" or right.type not in _FUNCTION_VALUES:
            return None
        target = left.child_by_field_name("object")
        if target is None or target.type != "member_expression":
            return None
        if self.get_node_text(target.child_by_field_name("property"), ctx.source) != "prototype":
            return None

        receiver_node = target.child_by_field_name("object")
        if receiver_node is None or receiver_node.type != "identifier":
            return None
        receiver = self.get_node_text(receiver_node, ctx.source)
        name = self.get_node_text(left.child_by_field_name("property"), ctx.source)
        if not name:
            return None

        method = self._function(name, right, statement, ctx, True)
        method.receiver = receiver
        return receiver, method
