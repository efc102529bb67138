"""
Source Inspectors

Language front-ends that turn source files into the graph model. Importing
this package registers every inspector and emitter by file extension.
"""

from linager.inspector.base import (
    FileContext,
    Inspector,
    get_inspector_class,
    register_inspector,
)
from linager.inspector.parser import ASTParser, get_parser

# Import front-ends to trigger registration
from linager.inspector.golang import GoEmitter, GoInspector
from linager.inspector.java import JavaEmitter, JavaInspector
from linager.inspector.jsx import JSXEmitter, JSXInspector
from linager.inspector.python import PythonEmitter, PythonInspector

from linager.inspector.factory import Factory

__all__ = [
    "ASTParser",
    "get_parser",
    "FileContext",
    "Inspector",
    "get_inspector_class",
    "register_inspector",
    "Factory",
    "GoEmitter",
    "GoInspector",
    "JavaEmitter",
    "JavaInspector",
    "JSXEmitter",
    "JSXInspector",
    "PythonEmitter",
    "PythonInspector",
]
