"""
Python Emitter

Rebuilds a Python module: imports, module-level values, classes, then
functions. Synthesized defs get a ``pass`` body when none was captured.
"""

from linager.graph.emitter import SourceEmitter
from linager.graph.file import Constant, Import, Variable
from linager.graph.types import Field, Function, Type


class PythonEmitter(SourceEmitter):
    """Python emitter."""

    member_indent = "    "

    def render_imports(self, imports: list[Import]) -> str:
        if not imports:
            return ""
        lines = []
        seen = set()
        for imp in imports:
            if imp.location is not None and imp.location.raw:
                span = (imp.location.start, imp.location.end)
                if span not in seen:
                    seen.add(span)
                    lines.append(imp.location.raw)
            elif imp.name:
                lines.append(f"from {imp.path} import {imp.name}")
            else:
                lines.append(f"import {imp.path}")
        return "\n".join(lines) + "\n\n"

    def render_constant(self, constant: Constant) -> str:
        return self.render_variable(constant)

    def render_variable(self, variable: Variable) -> str:
        head = variable.name
        if variable.type_name:
            head += f": {variable.type_name}"
        return f"{head} = {variable.value or 'None'}"

    def render_type(self, t: Type) -> str:
        head = f"class {t.name}"
        if t.extends:
            head += "(" + ", ".join(t.extends) + ")"
        members = [self.render_member(f) for f in t.fields]
        members.extend(self.render_member(m) for m in t.methods)
        lines = [f"{self.member_indent}{m}" for m in members if m]
        if not lines:
            lines = [f"{self.member_indent}pass"]
        return head + ":\n" + "\n".join(lines)

    def render_member(self, member) -> str:
        if isinstance(member, (Field, Function)) and member.location is not None and member.location.raw:
            return member.location.raw
        text = super().render_member(member)
        # Continuation lines of a synthesized def belong to the class body
        return text.replace("\n", "\n" + self.member_indent)

    def render_field(self, f: Field) -> str:
        text = f.name
        if f.type_name:
            text += f": {f.type_name}"
        return text

    def render_function(self, function: Function) -> str:
        params = [f"{p.name}: {p.type_name}" if p.type_name else p.name for p in function.parameters]
        if function.receiver and not function.is_static:
            params.insert(0, "self")
        head = f"def {function.name}({', '.join(params)})"
        if function.results and function.results[0].type_name:
            head += f" -> {function.results[0].type_name}"
        if function.body is not None and function.body.text:
            return f"{head}:\n    {function.body.text}"
        return f"{head}:\n    pass"
