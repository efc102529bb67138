"""
Linager

Extracts a language-agnostic structural model (packages, files, types,
fields, methods, functions, constants, variables) from Go, Java,
JavaScript/JSX and Python source trees, rebuilds source from it and
projects it into size-bounded documents for indexing, and traces Go
data lineage.
"""

__version__ = "0.1.0"

from linager.exceptions import LinagerError
from linager.inspector import Factory, Inspector
from linager.coder import Coder
from linager.graph.document import Documents, create_documents
from linager.analyzer import GoAnalyzer

__all__ = [
    "__version__",
    "Coder",
    "Documents",
    "Factory",
    "GoAnalyzer",
    "Inspector",
    "LinagerError",
    "create_documents",
]
