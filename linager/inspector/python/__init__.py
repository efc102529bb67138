"""Python front-end: inspector and emitter."""

from linager.graph.emitter import register_emitter
from linager.inspector.python.emitter import PythonEmitter
from linager.inspector.python.inspector import PythonInspector

register_emitter(".py", PythonEmitter())

__all__ = ["PythonEmitter", "PythonInspector"]
