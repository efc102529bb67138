"""
Go Emitter

Rebuilds Go source from a File. Captured spans are written verbatim;
specs captured from a grouped declaration get their keyword back, and
consecutive grouped constants or variables are written as one block.
"""

import re

from linager.graph.emitter import SourceEmitter
from linager.graph.file import Constant, File, Import, Variable
from linager.graph.types import Field, Function, Kind, Type, extract_base_type_name


def _keyword(value: Variable) -> str:
    return "const" if value.is_const else "var"


class GoEmitter(SourceEmitter):
    """Go emitter."""

    member_indent = "\t"

    def header(self, file: File) -> str:
        return f"package {file.package}\n\n"

    def render_imports(self, imports: list[Import]) -> str:
        if not imports:
            return ""
        lines = ["import ("]
        for imp in imports:
            if imp.name:
                lines.append(f'\t{imp.name} "{imp.path}"')
            else:
                lines.append(f'\t"{imp.path}"')
        lines.append(")")
        return "\n".join(lines) + "\n\n"

    def emit_values(self, values: list[Variable]) -> list[str]:
        out = []
        block: list[str] = []
        block_keyword = ""

        def flush():
            if block:
                body = "\n".join(f"\t{line}" for line in block)
                out.append(f"{block_keyword} (\n{body}\n){self.separator}")
                block.clear()

        for value in values:
            keyword = _keyword(value)
            raw = value.location.raw if value.location is not None else ""
            if raw and not re.match(rf"{keyword}\b", raw):
                # A new group starts where iota restarts
                if keyword != block_keyword or "iota" in value.value:
                    flush()
                block_keyword = keyword
                block.append(raw)
                continue
            flush()
            render = self.render_constant if value.is_const else self.render_variable
            out.append(self._entry(value, None, render))
        flush()
        return out

    def type_text(self, t: Type, content: str) -> str:
        if content.startswith("type "):
            return content
        return f"type {content}"

    def render_constant(self, constant: Constant) -> str:
        return self._render_value(constant)

    def render_variable(self, variable: Variable) -> str:
        return self._render_value(variable)

    def _render_value(self, value: Variable) -> str:
        text = f"{_keyword(value)} {value.name}"
        if value.type_name:
            text += f" {value.type_name}"
        if value.value:
            text += f" = {value.value}"
        return text

    def render_type(self, t: Type) -> str:
        params = ""
        if t.type_params:
            params = "[" + ", ".join(f"{p.name} {p.constraint}".strip() for p in t.type_params) + "]"
        head = f"type {t.name}{params}"

        if t.kind == Kind.STRUCT:
            members = [self.render_field(f) for f in t.fields]
            return self._block(f"{head} struct", members)
        if t.kind == Kind.INTERFACE:
            members = [self.render_field(f) for f in t.fields]
            members.extend(self.render_member(m) for m in t.methods)
            return self._block(f"{head} interface", members)
        if t.kind == Kind.ALIAS:
            return f"{head} {t.component_type}"
        if t.kind == Kind.SLICE:
            return f"{head} []{t.component_type}"
        if t.kind == Kind.MAP:
            return f"{head} map[{t.key_type}]{t.component_type}"
        if t.kind == Kind.CHAN:
            return f"{head} chan {t.component_type}"
        if t.is_pointer:
            return f"{head} *{t.component_type}"
        return ""

    def _block(self, head: str, members: list[str]) -> str:
        lines = [f"{self.member_indent}{m}" for m in members if m]
        if not lines:
            return head + " {}"
        return head + " {\n" + "\n".join(lines) + "\n}"

    def render_member(self, member) -> str:
        if isinstance(member, Function) and member.location is None:
            # Interface method: name and signature only
            params = ", ".join(f"{p.name} {p.type_name}".strip() for p in member.parameters)
            results = ", ".join(f"{p.name} {p.type_name}".strip() for p in member.results)
            if len(member.results) > 1 or (member.results and member.results[0].name):
                results = f"({results})"
            return f"{member.name}({params}) {results}".rstrip()
        return super().render_member(member)

    def render_field(self, f: Field) -> str:
        text = f.type_name if f.is_embedded else f"{f.name} {f.type_name}".strip()
        if f.tag:
            text += f" `{f.tag}`"
        return text

    def render_function(self, function: Function) -> str:
        if function.signature:
            body = function.body.text if function.body is not None and function.body.text else "{\n}"
            return f"{function.signature} {body}"
        params = ", ".join(f"{p.name} {p.type_name}".strip() for p in function.parameters)
        results = ", ".join(f"{p.name} {p.type_name}".strip() for p in function.results)
        if len(function.results) > 1:
            results = f"({results})"
        receiver = ""
        if function.receiver:
            base = extract_base_type_name(function.receiver) or "r"
            receiver = f"({base[:1].lower()} {function.receiver}) "
        head = f"func {receiver}{function.name}({params}) {results}".rstrip()
        body = function.body.text if function.body is not None and function.body.text else "{\n}"
        return f"{head} {body}"
