"""
Java Emitter

Rebuilds a Java compilation unit: package, imports, then types. Constants
and fields are written inside their type, never at file level.
"""

from linager.graph.emitter import SourceEmitter
from linager.graph.file import File, Import, Variable
from linager.graph.types import Field, Function, Kind, Type


class JavaEmitter(SourceEmitter):
    """Java emitter."""

    member_indent = "    "

    def header(self, file: File) -> str:
        if not file.package:
            return ""
        return f"package {file.package};\n\n"

    def render_imports(self, imports: list[Import]) -> str:
        if not imports:
            return ""
        lines = []
        for imp in imports:
            if imp.name == "static":
                lines.append(f"import static {imp.path};")
            else:
                lines.append(f"import {imp.path};")
        return "\n".join(lines) + "\n\n"

    def emit_values(self, values: list[Variable]) -> list[str]:
        return []

    def render_type(self, t: Type) -> str:
        keyword = "interface" if t.kind == Kind.INTERFACE else "class"
        head = f"public {keyword} {t.name}" if t.is_exported else f"{keyword} {t.name}"
        if t.type_params:
            head += "<" + ", ".join(p.name for p in t.type_params) + ">"
        if t.extends:
            head += " extends " + ", ".join(t.extends)
        if t.implements:
            head += " implements " + ", ".join(t.implements)

        members = [self.render_member(f) for f in t.fields]
        members.extend(self.render_member(m) for m in t.methods)
        lines = [f"{self.member_indent}{m}" for m in members if m]
        if not lines:
            return head + " {\n}"
        return head + " {\n" + "\n".join(lines) + "\n}"

    def render_member(self, member) -> str:
        if isinstance(member, (Field, Function)) and member.location is not None and member.location.raw:
            return member.location.raw
        return super().render_member(member)

    def render_field(self, f: Field) -> str:
        modifiers = ["public" if f.is_exported else "private"]
        if f.is_static:
            modifiers.append("static")
        if f.is_constant:
            modifiers.append("final")
        type_name = f.type_name or "Object"
        return f"{' '.join(modifiers)} {type_name} {f.name};"

    def render_function(self, function: Function) -> str:
        modifiers = ["public" if function.is_exported else "private"]
        if function.is_static:
            modifiers.append("static")
        if function.is_constructor:
            head = function.name
        else:
            result = function.results[0].type_name if function.results else "void"
            head = f"{result} {function.name}"
        params = ", ".join(f"{p.type_name} {p.name}".strip() for p in function.parameters)
        body = function.body.text if function.body is not None and function.body.text else "{\n    }"
        return f"{' '.join(modifiers)} {head}({params}) {body}"
