"""Go front-end: inspector and emitter."""

from linager.graph.emitter import register_emitter
from linager.inspector.golang.emitter import GoEmitter
from linager.inspector.golang.inspector import GoInspector

register_emitter(".go", GoEmitter())

__all__ = ["GoEmitter", "GoInspector"]
