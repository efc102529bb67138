"""Java front-end: inspector and emitter."""

from linager.graph.emitter import register_emitter
from linager.inspector.java.emitter import JavaEmitter
from linager.inspector.java.inspector import JavaInspector

register_emitter(".java", JavaEmitter())

__all__ = ["JavaEmitter", "JavaInspector"]
