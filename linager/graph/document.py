"""
Document Pipeline

Projects a Project into flat, size-bounded, content-hashed documents for an
embedding/indexing backend, and regroups documents back into per-file
pseudo-documents.

Document identity is ``kind:path:(signature or name):``. Oversized documents
are split into parts numbered from 1; part 0 means unsplit.
"""

import json
import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional

from linager.configs.constants import (
    CHUNK_SIZE,
    DOCUMENT_SIZE_OVERHEAD,
    MAX_ASSET_DOCUMENT_SIZE,
)
from linager.configs.logging import get_logger
from linager.graph.hash import hash_content
from linager.graph.location import LocationNode
from linager.graph.project import Project
from linager.graph.types import Type

logger = get_logger("graph.document")


class DocumentKind(str, Enum):
    CONSTANT = "Constant"
    VARIABLE = "Variable"
    FUNCTION = "Function"
    TYPE = "Type"
    METHOD = "Method"
    FIELD = "Field"
    ASSET = "Asset"
    CODE = "Code"  # Regrouped file


# Package header written by group_by, per file extension
_PACKAGE_HEADERS = {
    ".go": "package {package}\n\n",
    ".java": "package {package};\n\n",
}


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogateescape"))


@dataclass
class Document:
    """One graph entity (or one chunk of it) as seen by the indexer."""

    kind: DocumentKind
    path: str
    content: str
    project: str = ""
    package: str = ""
    name: str = ""
    type: str = ""
    signature: str = ""
    hash: int = 0
    part: int = 0

    def __post_init__(self):
        self.kind = DocumentKind(self.kind)
        if not self.hash:
            self.hash = hash_content(self.content)

    @property
    def id(self) -> str:
        return f"{self.kind.value}:{self.path}:{self.signature or self.name}:"

    def size(self) -> int:
        """Approximate serialized size in UTF-8 bytes, used for budget filtering."""
        size = sum(_byte_len(s) for s in (self.content, self.type, self.signature, self.path))
        if self.kind == DocumentKind.TYPE:
            size += _byte_len(self.name)
        return size + DOCUMENT_SIZE_OVERHEAD

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "project": self.project,
            "path": self.path,
            "package": self.package,
            "name": self.name,
            "type": self.type,
            "hash": self.hash,
            "signature": self.signature,
            "content": self.content,
            "part": self.part,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        return cls(
            kind=DocumentKind(data["kind"]),
            path=data.get("path", ""),
            content=data.get("content", ""),
            project=data.get("project", ""),
            package=data.get("package", ""),
            name=data.get("name", ""),
            type=data.get("type", ""),
            signature=data.get("signature", ""),
            hash=data.get("hash", 0),
            part=data.get("part", 0),
        )


def split_document(doc: Document, chunk_size: int = CHUNK_SIZE) -> list[Document]:
    """
    Split a document whose UTF-8 content exceeds ``chunk_size`` bytes.

    Chunks are the consecutive ``chunk_size`` byte ranges of the encoded
    content, numbered from 1, so there are exactly ceil(L / chunk_size) of
    them. A character cut at a boundary is carried as surrogate escapes and
    re-encodes to the original bytes.
    """
    data = doc.content.encode("utf-8", "surrogateescape")
    if len(data) <= chunk_size:
        return [doc]

    chunks = []
    for part, start in enumerate(range(0, len(data), chunk_size), start=1):
        piece = data[start:start + chunk_size]
        text = piece.decode("utf-8", "surrogateescape")
        chunks.append(replace(doc, content=text, part=part, hash=hash_content(piece)))
    return chunks


class Documents(list):
    """Ordered documents; appending splits oversized ones into chunks."""

    def append(self, doc: Optional[Document]) -> None:
        if doc is None:
            return
        super().extend(split_document(doc))

    def extend(self, docs: Iterable[Document]) -> None:
        for doc in docs:
            self.append(doc)

    def size(self) -> int:
        return sum(doc.size() for doc in self)

    def filter_by_size(self, total_size: int) -> "Documents":
        """Leading documents whose cumulative size stays below ``total_size``."""
        result = Documents()
        size = 0
        for doc in self:
            size += doc.size()
            if size >= total_size:
                break
            list.append(result, doc)
        return result

    def group_by(self) -> "Documents":
        """
        Regroup documents into one Code document per file path.

        Sections are constants, variables, types, free functions, then
        methods grouped by receiver in first-seen order, each entry
        followed by a blank line. Asset documents pass through unchanged.
        Field documents are covered by their type and are not repeated.
        """
        by_path: dict[str, list[Document]] = {}
        for doc in self:
            by_path.setdefault(doc.path, []).append(doc)

        result = Documents()
        for path, docs in by_path.items():
            assets = [d for d in docs if d.kind == DocumentKind.ASSET]
            if assets:
                for asset in assets:
                    list.append(result, asset)
                continue

            first = docs[0]
            if not first.package:
                continue

            sections: dict[DocumentKind, list[str]] = {
                DocumentKind.CONSTANT: [],
                DocumentKind.VARIABLE: [],
                DocumentKind.TYPE: [],
                DocumentKind.FUNCTION: [],
            }
            methods: dict[str, list[str]] = {}
            for doc in docs:
                if doc.kind == DocumentKind.METHOD:
                    methods.setdefault(doc.type, []).append(doc.content)
                elif doc.kind in sections:
                    sections[doc.kind].append(doc.content)

            ext = os.path.splitext(path)[1].lower()
            parts = [_PACKAGE_HEADERS.get(ext, "").format(package=first.package)]
            for kind in (
                DocumentKind.CONSTANT,
                DocumentKind.VARIABLE,
                DocumentKind.TYPE,
                DocumentKind.FUNCTION,
            ):
                for content in sections[kind]:
                    parts.append(content + "\n\n")
            for receiver_methods in methods.values():
                for content in receiver_methods:
                    parts.append(content + "\n\n")

            name = path
            if name.startswith(first.package + "/"):
                name = name[len(first.package) + 1:]
            name = os.path.splitext(name)[0]
            result.append(Document(
                kind=DocumentKind.CODE,
                project=first.project,
                path=path,
                package=first.package,
                name=name,
                content="".join(parts),
            ))
        return result

    def to_json_lines(self) -> str:
        return "\n".join(doc.to_json() for doc in self)


def _with_comment(comment: Optional[LocationNode], content: str) -> str:
    if comment is None or not comment.raw:
        return content
    return f"{comment.raw}\n{content}"


def create_documents(project: Project, package_path: str = "") -> Documents:
    """
    Convert a project into documents.

    Args:
        project: Inspected project
        package_path: Only packages whose path or import path starts with
                      this prefix are converted (empty = all)

    Returns:
        Documents in package, file and declaration order
    """
    docs = Documents()
    for pkg in project.packages:
        if package_path and not (
            pkg.path.startswith(package_path) or pkg.import_path.startswith(package_path)
        ):
            continue

        for asset in pkg.assets:
            if not asset.content or len(asset.content) > MAX_ASSET_DOCUMENT_SIZE:
                continue
            docs.append(Document(
                kind=DocumentKind.ASSET,
                project=project.name,
                path=asset.path,
                package=pkg.name,
                name=asset.name,
                content=asset.text(),
            ))

        fielded = set()
        empty: list[tuple[str, Type]] = []
        for f in pkg.files:
            common = {"project": project.name, "path": f.path, "package": pkg.name}

            for constant in f.constants:
                docs.append(Document(
                    kind=DocumentKind.CONSTANT,
                    name=constant.name,
                    type=constant.type_name,
                    content=constant.content(),
                    **common,
                ))
            for variable in f.variables:
                docs.append(Document(
                    kind=DocumentKind.VARIABLE,
                    name=variable.name,
                    type=variable.type_name,
                    content=variable.content(),
                    **common,
                ))
            for function in f.functions:
                docs.append(Document(
                    kind=DocumentKind.FUNCTION,
                    name=function.name,
                    signature=function.signature,
                    content=_with_comment(function.comment, function.content()),
                    **common,
                ))

            for t in f.types:
                if len(t.fields) > 0:
                    fielded.add(t.name)
                    docs.append(Document(
                        kind=DocumentKind.TYPE,
                        name=t.name,
                        type=t.kind.value,
                        content=_with_comment(t.comment, t.content()),
                        **common,
                    ))
                    for fld in t.fields:
                        if fld.location is None:
                            continue
                        docs.append(Document(
                            kind=DocumentKind.FIELD,
                            name=fld.name or fld.type_name,
                            type=t.name,
                            content=fld.content(),
                            **common,
                        ))
                else:
                    empty.append((f.path, t))

                for method in t.methods:
                    docs.append(Document(
                        kind=DocumentKind.METHOD,
                        name=method.name,
                        type=t.name,
                        signature=method.signature,
                        content=_with_comment(method.comment, method.content()),
                        **common,
                    ))

        # Zero-field types, once per package, only when no declaration of the name has fields
        emitted = set()
        for path, t in empty:
            if t.name in fielded or t.name in emitted:
                continue
            emitted.add(t.name)
            content = _with_comment(t.comment, t.content())
            if not content:
                continue
            docs.append(Document(
                kind=DocumentKind.TYPE,
                project=project.name,
                path=path,
                package=pkg.name,
                name=t.name,
                type=t.kind.value,
                content=content,
            ))

    logger.debug(f"Created {len(docs)} documents for project {project.name}")
    return docs
