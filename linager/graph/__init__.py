"""
Source Graph Model

Language-agnostic representation of a project: packages, files, types,
fields, functions, constants, variables and assets, plus the document
projection used for indexing.
"""

from linager.graph.collection import IndexedList
from linager.graph.location import Location, LocationNode
from linager.graph.types import (
    Field,
    Function,
    Kind,
    Parameter,
    Type,
    TypeParam,
    create_composite_type,
    create_type_from_fields,
    create_type_from_methods,
    extract_base_type_name,
    is_exported_name,
)
from linager.graph.file import Constant, File, Import, Variable
from linager.graph.package import Asset, Package
from linager.graph.project import Project
from linager.graph.hash import hash_content
from linager.graph.identity import (
    Identity,
    IdentityRef,
    make_function_ref,
    make_struct_field_ref,
    make_var_ref,
    parse_identity,
)
from linager.graph.emitter import Emitter, SourceEmitter, get_emitter, register_emitter
from linager.graph.document import (
    Document,
    DocumentKind,
    Documents,
    create_documents,
    split_document,
)

__all__ = [
    # Model
    "IndexedList",
    "Location",
    "LocationNode",
    "Field",
    "Function",
    "Kind",
    "Parameter",
    "Type",
    "TypeParam",
    "Constant",
    "File",
    "Import",
    "Variable",
    "Asset",
    "Package",
    "Project",
    # Type helpers
    "create_composite_type",
    "create_type_from_fields",
    "create_type_from_methods",
    "extract_base_type_name",
    "is_exported_name",
    # Identity
    "Identity",
    "IdentityRef",
    "make_function_ref",
    "make_struct_field_ref",
    "make_var_ref",
    "parse_identity",
    # Emitters
    "Emitter",
    "SourceEmitter",
    "get_emitter",
    "register_emitter",
    # Documents
    "hash_content",
    "Document",
    "DocumentKind",
    "Documents",
    "create_documents",
    "split_document",
]
