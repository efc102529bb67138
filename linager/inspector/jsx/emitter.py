"""
JSX Emitter

Rebuilds JavaScript/JSX source. Import statements are written once per
captured statement; components created without a span are synthesized as
function or class components, and the last type becomes the default export
unless the source already declares one.
"""

from linager.graph.emitter import SourceEmitter
from linager.graph.file import Constant, File, Import, Variable
from linager.graph.types import Field, Function, Type


class JSXEmitter(SourceEmitter):
    """JavaScript / JSX emitter."""

    member_indent = "  "

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
                lines.append(f"import {imp.name} from '{imp.path}';")
            else:
                lines.append(f"import '{imp.path}';")
        return "\n".join(lines) + "\n\n"

    def render_constant(self, constant: Constant) -> str:
        return f"const {constant.name} = {constant.value or 'undefined'};"

    def render_variable(self, variable: Variable) -> str:
        if variable.value:
            return f"let {variable.name} = {variable.value};"
        return f"let {variable.name};"

    def render_type(self, t: Type) -> str:
        if not t.fields and t.methods and all(m.location is not None for m in t.methods):
            # Synthetic prototype holder; the methods carry the source
            return ""
        if "Component" in t.name or t.methods:
            members = [self.render_member(m) for m in t.methods]
            body = "\n".join(f"{self.member_indent}{m}" for m in members if m)
            if not body:
                body = (
                    "  render() {\n    return (\n      <div>\n        {/* JSX content */}\n"
                    "      </div>\n    );\n  }"
                )
            return f"// Component: {t.name}\nclass {t.name} extends React.Component {{\n{body}\n}}"
        props = ", ".join(f.name for f in t.fields if f.name)
        params = f"{{ {props} }}" if props else "props"
        return (
            f"// Component: {t.name}\nfunction {t.name}({params}) {{\n"
            "  return (\n    <div>\n      {/* JSX content */}\n    </div>\n  );\n}"
        )

    def render_field(self, f: Field) -> str:
        return f"{f.name};"

    def render_function(self, function: Function) -> str:
        params = ", ".join(p.name for p in function.parameters)
        body = "{\n  // Function implementation\n}"
        if function.body is not None and function.body.text:
            body = function.body.text
        if function.receiver and not function.is_static:
            return f"{function.name}({params}) {body}"
        return f"function {function.name}({params}) {body}"

    def footer(self, file: File) -> str:
        if len(file.types) == 0:
            return ""
        for t in file.types:
            if t.location is not None and "export default" in t.location.raw:
                return ""
        located = [t for t in file.types if t.location is not None]
        last = located[-1] if located else file.types[-1]
        return f"export default {last.name};\n"
