"""JavaScript / JSX front-end: inspector and emitter."""

from linager.graph.emitter import register_emitter
from linager.inspector.jsx.emitter import JSXEmitter
from linager.inspector.jsx.inspector import JSXInspector

_emitter = JSXEmitter()
for _ext in JSXInspector.extensions:
    register_emitter(_ext, _emitter)

__all__ = ["JSXEmitter", "JSXInspector"]
