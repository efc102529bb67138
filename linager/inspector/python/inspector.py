"""
Python Inspector

Extracts classes, functions, module constants and variables from Python
source files using tree-sitter.
"""

import re
from pathlib import Path
from typing import Optional

from tree_sitter import Node

from linager.configs.logging import get_logger
from linager.graph.file import Constant, Import, Variable
from linager.graph.location import Location, LocationNode
from linager.graph.types import Field, Function, Kind, Parameter, Type, TypeParam
from linager.inspector.base import FileContext, Inspector, register_inspector

logger = get_logger("inspector.python")

_CONSTANT_NAME = re.compile(r"^_*[A-Z][A-Z0-9_]*$")
_STATIC_DECORATORS = {"staticmethod", "classmethod"}


@register_inspector
class PythonInspector(Inspector):
    """Python inspector."""

    extensions = (".py",)
    default_filename = "source.py"

    @property
    def language(self) -> str:
        return "python"

    def is_test_file(self, name: str) -> bool:
        base = Path(name).name
        return base.startswith("test_") or base.endswith("_test.py") or base == "conftest.py"

    def is_test_directory(self, path: str) -> bool:
        return self.config.skip_tests and Path(path).name in ("tests", "test")

    def extract_file(self, root: Node, ctx: FileContext) -> None:
        for node in root.children:
            definition = node
            if node.type == "decorated_definition":
                definition = node.child_by_field_name("definition")
                if definition is None:
                    continue

            if node.type in ("import_statement", "import_from_statement"):
                self._extract_import(node, ctx)
            elif definition.type == "class_definition":
                t = self._extract_class(definition, node, ctx)
                if t is not None:
                    ctx.file.add_type(t)
            elif definition.type == "function_definition":
                function = self._extract_function(definition, node, ctx)
                if function is not None:
                    ctx.file.add_function(function)
            elif node.type == "expression_statement":
                self._extract_assignment(node, ctx)

    # -------------------------------------------------------------------------
    # Private helper methods
    # -------------------------------------------------------------------------

    def _keep(self, name: str) -> bool:
        return self.config.include_unexported or _is_public(name)

    def _extract_import(self, node: Node, ctx: FileContext) -> None:
        """Record ``import x``, ``import x as y`` and ``from x import y``."""
        source = ctx.source
        location = self.location(node, source)

        if node.type == "import_statement":
            for child in node.named_children:
                if child.type == "dotted_name":
                    path = self.get_node_text(child, source)
                    ctx.imports[path.split(".")[0]] = path
                    ctx.file.add_import(Import(path=path, location=location))
                elif child.type == "aliased_import":
                    path = self.get_node_text(child.child_by_field_name("name"), source)
                    alias = self.get_node_text(child.child_by_field_name("alias"), source)
                    ctx.imports[alias] = path
                    ctx.file.add_import(Import(path=path, name=alias, location=location))
            return

        module = self.get_node_text(node.child_by_field_name("module_name"), source)
        names = []
        for child in node.children_by_field_name("name"):
            if child.type == "aliased_import":
                alias = self.get_node_text(child.child_by_field_name("alias"), source)
                names.append((self.get_node_text(child.child_by_field_name("name"), source), alias))
            else:
                text = self.get_node_text(child, source)
                names.append((text, text))
        if self.find_child(node, "wildcard_import") is not None:
            names.append(("*", "*"))

        for name, local in names:
            if local != "*":
                ctx.imports[local] = f"{module}.{name}"
            ctx.file.add_import(Import(path=module, name=name, location=location))

    def _docstring(self, block: Optional[Node], source: bytes) -> tuple[Optional[LocationNode], Optional[Node]]:
        """Docstring of a class or function body and the statement holding it."""
        if block is None:
            return None, None
        first = block.named_children[0] if block.named_children else None
        if first is None or first.type != "expression_statement":
            return None, None
        string = first.named_children[0] if first.named_children else None
        if string is None or string.type != "string":
            return None, None

        text = self.get_node_text(string, source)
        for quote in ('"""', "'''", '"', "'"):
            if text.startswith(quote) and text.endswith(quote) and len(text) >= 2 * len(quote):
                text = text[len(quote):-len(quote)]
                break
        # Docstrings stay inside the declaration span
        return LocationNode(text=_dedent(text)), first

    def _comment(self, definition: Node, statement: Node, source: bytes) -> Optional[LocationNode]:
        docstring, _ = self._docstring(definition.child_by_field_name("body"), source)
        if docstring is not None:
            return docstring
        return self.leading_comment(statement, source)

    def _decorators(self, statement: Node, source: bytes) -> list[str]:
        """Decorator names without ``@`` and call arguments."""
        if statement.type != "decorated_definition":
            return []
        names = []
        for child in self.find_children(statement, "decorator"):
            text = self.get_node_text(child, source).lstrip("@").strip()
            names.append(text.split("(")[0])
        return names

    def _annotation(self, statement: Node, source: bytes) -> Optional[LocationNode]:
        decorators = self.find_children(statement, "decorator") if statement.type == "decorated_definition" else []
        if not decorators:
            return None
        return LocationNode(
            text="\n".join(self.get_node_text(d, source) for d in decorators),
            location=self.location(decorators[-1], source, start=decorators[0]),
        )

    def _type_params(self, node: Optional[Node], source: bytes) -> list[TypeParam]:
        if node is None:
            return []
        params = []
        for child in node.named_children:
            text = self.get_node_text(child, source)
            name, _, constraint = text.partition(":")
            params.append(TypeParam(name=name.strip(), constraint=constraint.strip() or "any"))
        return params

    def _parameters(self, node: Optional[Node], source: bytes) -> list[Parameter]:
        """Parameters of a def, without ``self``/``cls``."""
        if node is None:
            return []
        params = []
        for child in node.named_children:
            if child.type == "identifier":
                name, type_node = self.get_node_text(child, source), None
            elif child.type in ("typed_parameter", "default_parameter", "typed_default_parameter"):
                name_node = child.child_by_field_name("name") or self.find_child(child, "identifier")
                name = self.get_node_text(name_node, source)
                type_node = child.child_by_field_name("type")
            elif child.type in ("list_splat_pattern", "dictionary_splat_pattern"):
                name, type_node = self.get_node_text(child, source), None
            else:
                continue
            if not name or name in ("self", "cls"):
                continue
            type_name = self.get_node_text(type_node, source)
            params.append(Parameter(name=name, type=Type(name=type_name) if type_name else None))
        return params

    def _signature(self, definition: Node, source: bytes) -> str:
        body = definition.child_by_field_name("body")
        end = body.start_byte if body is not None else definition.end_byte
        header = source[definition.start_byte:end].decode("utf-8", errors="replace")
        return " ".join(header.split()).rstrip(":").rstrip()

    def _extract_function(
        self,
        definition: Node,
        statement: Node,
        ctx: FileContext,
        receiver: str = "",
    ) -> Optional[Function]:
        source = ctx.source
        name = self.get_node_text(definition.child_by_field_name("name"), source)
        if not name or not self._keep(name):
            return None

        return_type = self.get_node_text(definition.child_by_field_name("return_type"), source)
        body = definition.child_by_field_name("body")
        decorators = self._decorators(statement, source)
        return Function(
            name=name,
            receiver=receiver,
            comment=self._comment(definition, statement, source),
            annotation=self._annotation(statement, source),
            type_params=self._type_params(definition.child_by_field_name("type_parameters"), source),
            parameters=self._parameters(definition.child_by_field_name("parameters"), source),
            results=[Parameter(name="", type=Type(name=return_type))] if return_type else [],
            body=LocationNode(
                text=self.get_node_text(body, source),
                location=self.location(body, source),
            ) if body is not None else None,
            is_exported=_is_public(name),
            is_static=bool(receiver) and any(d in _STATIC_DECORATORS for d in decorators),
            is_constructor=bool(receiver) and name == "__init__",
            signature=self._signature(definition, source),
            location=self.location(statement, source),
        )

    def _extract_class(self, definition: Node, statement: Node, ctx: FileContext) -> Optional[Type]:
        source = ctx.source
        name = self.get_node_text(definition.child_by_field_name("name"), source)
        if not name:
            return None
        if not self._keep(name):
            logger.debug(f"Skipping private class {name} in {ctx.path}")
            return None

        t = Type(
            name=name,
            kind=Kind.STRUCT,
            package=ctx.file.package,
            comment=self._comment(definition, statement, source),
            annotation=self._annotation(statement, source),
            is_exported=_is_public(name),
            type_params=self._type_params(definition.child_by_field_name("type_parameters"), source),
            location=self.location(statement, source),
            inline_methods=True,
        )

        superclasses = definition.child_by_field_name("superclasses")
        if superclasses is not None:
            for base in superclasses.named_children:
                if base.type in ("identifier", "attribute", "subscript"):
                    t.extends.append(self.get_node_text(base, source))

        block = definition.child_by_field_name("body")
        if block is None:
            return t
        _, docstring = self._docstring(block, source)
        t.body = self._interior(block, docstring)

        for member in block.named_children:
            if member is docstring:
                continue
            inner = member
            if member.type == "decorated_definition":
                inner = member.child_by_field_name("definition")
                if inner is None:
                    continue
            if inner.type == "function_definition":
                method = self._extract_function(inner, member, ctx, receiver=name)
                if method is not None:
                    t.add_method(method)
            elif member.type == "expression_statement":
                f = self._class_attribute(member, source)
                if f is not None and self._keep(f.name):
                    t.add_field(f)
        return t

    def _interior(self, block: Node, docstring: Optional[Node]) -> Location:
        """Member span of a class block, after the docstring when there is one."""
        start = docstring.end_byte if docstring is not None else block.start_byte
        line = docstring.end_point[0] + 1 if docstring is not None else block.start_point[0] + 1
        return Location(start=start, end=block.end_byte, line=line)

    def _class_attribute(self, statement: Node, source: bytes) -> Optional[Field]:
        """``name: T`` or ``name = value`` in a class body."""
        assignment = statement.named_children[0] if statement.named_children else None
        if assignment is None or assignment.type != "assignment":
            return None
        left = assignment.child_by_field_name("left")
        if left is None or left.type != "identifier":
            return None

        name = self.get_node_text(left, source)
        type_name = self.get_node_text(assignment.child_by_field_name("type"), source)
        annotated = bool(type_name)
        return Field(
            name=name,
            type=Type(name=type_name) if annotated else None,
            location=self.location(statement, source),
            comment=_trailing_text(self.trailing_comment(statement, source)),
            is_exported=_is_public(name),
            # Unannotated assignments are class-level attributes
            is_static=not annotated,
            is_constant=bool(_CONSTANT_NAME.match(name)),
        )

    def _extract_assignment(self, statement: Node, ctx: FileContext) -> None:
        """Module-level ``NAME = value``: UPPER_CASE names are constants."""
        source = ctx.source
        assignment = statement.named_children[0] if statement.named_children else None
        if assignment is None or assignment.type != "assignment":
            return
        left = assignment.child_by_field_name("left")
        if left is None or left.type != "identifier":
            return

        name = self.get_node_text(left, source)
        if not self._keep(name):
            return
        type_name = self.get_node_text(assignment.child_by_field_name("type"), source)
        comment = self.leading_comment(statement, source) or self.trailing_comment(statement, source)

        cls = Constant if _CONSTANT_NAME.match(name) else Variable
        entry = cls(
            name=name,
            type=Type(name=type_name) if type_name else None,
            value=self.get_node_text(assignment.child_by_field_name("right"), source),
            comment=comment.text if comment else "",
            is_exported=_is_public(name),
            location=self.location(statement, source),
        )
        if isinstance(entry, Constant):
            ctx.file.add_constant(entry)
        else:
            ctx.file.add_variable(entry)


def _is_public(name: str) -> bool:
    return not name.startswith("_") or (name.startswith("__") and name.endswith("__"))


def _trailing_text(comment: Optional[LocationNode]) -> str:
    return comment.text if comment is not None else ""


def _dedent(text: str) -> str:
    lines = text.strip().splitlines()
    return "\n".join(line.strip() for line in lines)
