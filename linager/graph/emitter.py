"""
Content Reconstruction

Emitters rebuild source text from a File. The generic SourceEmitter writes,
in fixed order, the package header, imports, constants, variables, types,
and free functions, preferring each entity's captured raw span and falling
back to the language's synthesized form only when nothing was captured.
"""

from abc import ABC, abstractmethod
from typing import Optional

from linager.graph.file import Constant, File, Import, Variable
from linager.graph.location import LocationNode
from linager.graph.types import Field, Function, Type


class Emitter(ABC):
    """Rebuilds the text of one file."""

    @abstractmethod
    def emit(self, file: File) -> bytes:
        """
        Render a file.

        Args:
            file: File entity to render

        Returns:
            UTF-8 encoded source
        """
        pass


def _raw(entity) -> str:
    location = getattr(entity, "location", None)
    if location is None:
        return ""
    return location.raw


def _comment_raw(comment: Optional[LocationNode]) -> str:
    if comment is None or comment.location is None:
        return ""
    return comment.location.raw


def _declared_outside(t: Type, method: Function) -> bool:
    """A method bound to the type from outside its declaration (JS prototype assignment)."""
    if t.location is None or method.location is None or not method.location.raw:
        return False
    return not t.location.contains(method.location)


def unique_values(file: File) -> list[Variable]:
    """Constants then variables, keeping one entry per captured span."""
    values = []
    seen = set()
    for value in list(file.constants) + list(file.variables):
        # Names declared in one statement share its span
        if value.location is not None and value.location.raw:
            span = (value.location.start, value.location.end)
            if span in seen:
                continue
            seen.add(span)
        values.append(value)
    return values


class SourceEmitter(Emitter):
    """
    Fixed-order emitter; languages override the render_* hooks.

    Hooks are only called for entities without a captured span (or, for
    imports, always: imports are re-rendered from path and alias).
    """

    member_indent = "\t"
    separator = "\n\n"

    def emit(self, file: File) -> bytes:
        out = [self.header(file)]

        imports = self.render_imports(file.imports)
        if imports:
            out.append(imports)

        out.extend(self.emit_values(unique_values(file)))
        for t in file.types:
            out.append(self.emit_type(t))
            for method in t.methods:
                if not t.inline_methods or _declared_outside(t, method):
                    out.append(self._entry(method, method.comment, self.render_function))
        for function in file.functions:
            out.append(self._entry(function, function.comment, self.render_function))

        out.append(self.footer(file))
        return "".join(part for part in out if part).encode("utf-8")

    def _entry(self, entity, comment: Optional[LocationNode], render) -> str:
        text = self.raw_text(entity)
        if not text:
            text = render(entity)
        if not text:
            return ""
        prefix = _comment_raw(comment)
        if prefix:
            text = f"{prefix}\n{text}"
        return text + self.separator

    def emit_values(self, values: list[Variable]) -> list[str]:
        """Render constants then variables, one entry each."""
        out = []
        for value in values:
            render = self.render_constant if value.is_const else self.render_variable
            out.append(self._entry(value, None, render))
        return out

    def emit_type(self, t: Type) -> str:
        text = t.content(self.render_member, self.member_indent)
        if text:
            text = self.type_text(t, text)
        else:
            text = self.render_type(t)
        if not text:
            return ""
        prefix = _comment_raw(t.comment)
        if prefix:
            text = f"{prefix}\n{text}"
        return text + self.separator

    def raw_text(self, entity) -> str:
        """Captured text for a constant, variable or function."""
        return _raw(entity)

    def type_text(self, t: Type, content: str) -> str:
        """Adjust a type's captured content (e.g. restore a declaration keyword)."""
        return content

    def render_member(self, member) -> str:
        if isinstance(member, Field):
            return self.render_field(member)
        if isinstance(member, Function):
            return self.render_function(member)
        return ""

    # --- hooks ---

    def header(self, file: File) -> str:
        return ""

    def footer(self, file: File) -> str:
        return ""

    def render_imports(self, imports: list[Import]) -> str:
        return ""

    def render_constant(self, constant: Constant) -> str:
        return ""

    def render_variable(self, variable: Variable) -> str:
        return ""

    def render_type(self, t: Type) -> str:
        return ""

    def render_field(self, f: Field) -> str:
        return ""

    def render_function(self, function: Function) -> str:
        return ""


# Registry of emitters by file extension
_emitters: dict[str, Emitter] = {}


def register_emitter(extension: str, emitter: Emitter) -> None:
    """Register an emitter for a file extension (e.g. ".go")."""
    _emitters[extension.lower()] = emitter


def get_emitter(extension: str) -> Optional[Emitter]:
    """
    Get the emitter for a file extension.

    Args:
        extension: Extension including the dot

    Returns:
        Emitter or None when no language claims the extension
    """
    return _emitters.get(extension.lower())
