"""
Tests for the document pipeline

Tests document identity, chunking, size filtering, regrouping and the
conversion of an inspected project into documents.
"""

import json
import math

from linager.configs.constants import CHUNK_SIZE, DOCUMENT_SIZE_OVERHEAD
from linager.graph.document import (
    Document,
    DocumentKind,
    Documents,
    create_documents,
    split_document,
)
from linager.graph.file import File
from linager.graph.hash import hash_content
from linager.graph.package import Asset, Package
from linager.graph.project import Project
from linager.graph.types import Kind, Type
from linager.inspector.golang import GoInspector


def _doc(kind=DocumentKind.FUNCTION, path="util/util.go", content="func A() {}", **kwargs) -> Document:
    kwargs.setdefault("package", "util")
    kwargs.setdefault("name", "A")
    return Document(kind=kind, path=path, content=content, **kwargs)


class TestDocument:
    """Test single documents."""

    def test_id_uses_signature_then_name(self):
        """The id is kind:path:signature-or-name:."""
        assert _doc().id == "Function:util/util.go:A:"
        assert _doc(signature="func A() error").id == "Function:util/util.go:func A() error:"

    def test_hash_from_content(self):
        """Documents hash their content unless a hash is given."""
        doc = _doc()
        assert doc.hash == hash_content("func A() {}")
        assert _doc(hash=7).hash == 7

    def test_hash_is_stable(self):
        """Hashing is deterministic, 64-bit and content-sensitive."""
        assert hash_content("abc") == hash_content(b"abc")
        assert hash_content("abc") != hash_content("abd")
        assert 0 <= hash_content("abc") < 2 ** 64

    def test_size(self):
        """Size counts content, type, signature and path plus overhead; names only for types."""
        func = _doc(type="x", signature="sig")
        assert func.size() == len("func A() {}") + 1 + 3 + len("util/util.go") + DOCUMENT_SIZE_OVERHEAD
        t = _doc(kind=DocumentKind.TYPE, name="Config", content="c")
        assert t.size() == 1 + len("util/util.go") + len("Config") + DOCUMENT_SIZE_OVERHEAD

    def test_size_counts_bytes(self):
        """Multi-byte text is measured in UTF-8 bytes."""
        doc = _doc(content="é€", path="ü.go")
        assert doc.size() == 5 + 5 + DOCUMENT_SIZE_OVERHEAD

    def test_json_round_trip(self):
        """to_dict carries the id; from_dict restores the document."""
        doc = _doc(project="app", type="T", part=2)
        data = json.loads(doc.to_json())
        assert data["id"] == doc.id
        assert data["kind"] == "Function"
        assert Document.from_dict(data) == doc


class TestChunking:
    """Test splitting of oversized documents."""

    def test_small_document_unsplit(self):
        """Documents within the chunk size stay whole with part 0."""
        doc = _doc(content="x" * CHUNK_SIZE)
        assert split_document(doc) == [doc]
        assert doc.part == 0

    def test_parts_cover_content(self):
        """ceil(L / chunk) parts numbered from 1 that concatenate to the original."""
        content = "y" * (CHUNK_SIZE * 2 + 10)
        chunks = split_document(_doc(content=content))
        assert len(chunks) == math.ceil(len(content) / CHUNK_SIZE)
        assert [c.part for c in chunks] == [1, 2, 3]
        assert "".join(c.content for c in chunks) == content
        assert all(c.hash == hash_content(c.content) for c in chunks)
        assert chunks[0].id == chunks[1].id

    def test_multibyte_boundary(self):
        """Chunks are exact byte ranges; a cut character re-encodes to its bytes."""
        content = "a" + "é" * 10
        chunks = split_document(_doc(content=content), chunk_size=4)
        data = content.encode("utf-8")
        assert len(chunks) == math.ceil(len(data) / 4)
        pieces = [c.content.encode("utf-8", "surrogateescape") for c in chunks]
        assert pieces == [data[i:i + 4] for i in range(0, len(data), 4)]
        assert b"".join(pieces) == data
        assert all(c.hash == hash_content(p) for c, p in zip(chunks, pieces))

    def test_chunk_count_by_bytes(self):
        """Multi-byte content splits into ceil(bytes / chunk) parts."""
        content = "ab" + "€" * 5290
        chunks = split_document(_doc(content=content))
        assert len(content.encode("utf-8")) == 2 * CHUNK_SIZE
        assert [c.part for c in chunks] == [1, 2]
        pieces = [c.content.encode("utf-8", "surrogateescape") for c in chunks]
        assert [len(p) for p in pieces] == [CHUNK_SIZE, CHUNK_SIZE]
        assert b"".join(pieces) == content.encode("utf-8")

    def test_documents_append_splits(self):
        """Appending to Documents splits automatically and ignores None."""
        docs = Documents()
        docs.append(_doc(content="z" * (CHUNK_SIZE + 1)))
        docs.append(None)
        assert [d.part for d in docs] == [1, 2]


class TestDocuments:
    """Test collection operations."""

    def test_filter_by_size(self):
        """Leading documents are kept while the running total stays below the budget."""
        docs = Documents()
        docs.extend(_doc(name=n) for n in ("A", "B", "C"))
        one = docs[0].size()
        assert [d.name for d in docs.filter_by_size(one * 2 + 1)] == ["A", "B"]
        assert [d.name for d in docs.filter_by_size(one * 2)] == ["A"]
        assert len(docs.filter_by_size(0)) == 0

    def test_group_by(self):
        """One Code document per file: constants, variables, types, functions, then methods."""
        docs = Documents()
        docs.extend([
            _doc(kind=DocumentKind.METHOD, name="Run", type="Server", content="func (s Server) Run() {}"),
            _doc(kind=DocumentKind.FUNCTION, name="New", content="func New() {}"),
            _doc(kind=DocumentKind.TYPE, name="Server", content="type Server struct{}"),
            _doc(kind=DocumentKind.FIELD, name="addr", type="Server", content="addr string"),
            _doc(kind=DocumentKind.VARIABLE, name="v", content="var v int"),
            _doc(kind=DocumentKind.CONSTANT, name="C", content="const C = 1"),
            _doc(kind=DocumentKind.ASSET, path="util/data.json", name="data.json", content="{}"),
        ])
        grouped = docs.group_by()
        assert [d.kind for d in grouped] == [DocumentKind.CODE, DocumentKind.ASSET]

        code = grouped[0]
        assert code.name == "util"
        assert code.path == "util/util.go"
        assert code.content == (
            "package util\n\n"
            "const C = 1\n\n"
            "var v int\n\n"
            "type Server struct{}\n\n"
            "func New() {}\n\n"
            "func (s Server) Run() {}\n\n"
        )

    def test_group_by_java_header(self):
        """Java files get a package statement with a semicolon."""
        docs = Documents()
        docs.append(_doc(kind=DocumentKind.TYPE, path="src/App.java", package="com.example", content="class App {}"))
        code = docs.group_by()[0]
        assert code.content == "package com.example;\n\nclass App {}\n\n"
        assert code.name == "src/App"


class TestCreateDocuments:
    """Test conversion of an inspected project."""

    SOURCE = b'''package util

const Limit = 3

var debug bool

// Config holds settings
type Config struct {
	Name string
}

type Marker interface{}

// Run starts the app
func Run() {}

func (c *Config) Validate() error {
	return nil
}
'''

    def _project(self, extra_asset: bytes = b"") -> Project:
        f = GoInspector().inspect_source(self.SOURCE, "util.go")
        f.path = "util/util.go"
        pkg = Package(name="util", path="util", import_path="example.com/app/util")
        pkg.add_file(f)
        pkg.add_asset(Asset(path="util/data.json", name="data.json", content=b'{"a": 1}'))
        pkg.add_asset(Asset(path="util/empty.txt", name="empty.txt", content=b""))
        if extra_asset:
            pkg.add_asset(Asset(path="util/big.txt", name="big.txt", content=extra_asset))
        project = Project(name="example.com/app")
        project.add_package(pkg)
        return project

    def test_kinds_in_order(self):
        """Assets first, then values, functions, types with fields and methods."""
        docs = create_documents(self._project())
        assert [(d.kind, d.name) for d in docs] == [
            (DocumentKind.ASSET, "data.json"),
            (DocumentKind.CONSTANT, "Limit"),
            (DocumentKind.VARIABLE, "debug"),
            (DocumentKind.FUNCTION, "Run"),
            (DocumentKind.TYPE, "Config"),
            (DocumentKind.FIELD, "Name"),
            (DocumentKind.METHOD, "Validate"),
            (DocumentKind.TYPE, "Marker"),
        ]

    def test_content_and_metadata(self):
        """Comments are prepended; project and package are recorded."""
        docs = create_documents(self._project())
        by_name = {d.name: d for d in docs}
        assert by_name["Run"].content == "// Run starts the app\nfunc Run() {}"
        assert by_name["Run"].signature == "func Run()"
        assert by_name["Config"].content.startswith("// Config holds settings\ntype Config struct {")
        assert by_name["Config"].type == Kind.STRUCT.value
        assert by_name["Validate"].type == "Config"
        assert all(d.project == "example.com/app" for d in docs)
        assert all(d.package == "util" for d in docs)

    def test_large_assets_skipped(self):
        """Assets over the document limit produce no document."""
        docs = create_documents(self._project(extra_asset=b"x" * (17 * 1024)))
        assert [d.name for d in docs if d.kind == DocumentKind.ASSET] == ["data.json"]

    def test_package_filter(self):
        """Only packages under the prefix are converted."""
        project = self._project()
        assert len(create_documents(project, "util")) > 0
        assert len(create_documents(project, "example.com/app/util")) > 0
        assert len(create_documents(project, "other")) == 0

    def test_zero_field_types_once(self):
        """A zero-field type declared in several files yields one document."""
        pkg = Package(name="p", path="p")
        for name in ("a.go", "b.go"):
            f = GoInspector().inspect_source(b"package p\n\ntype Empty struct{}\n", name)
            f.path = f"p/{name}"
            pkg.add_file(f)
        project = Project(name="proj")
        project.add_package(pkg)
        docs = create_documents(project)
        assert [(d.kind, d.name, d.path) for d in docs] == [(DocumentKind.TYPE, "Empty", "p/a.go")]

    def test_fielded_declaration_wins(self):
        """No zero-field document when another declaration of the name has fields."""
        pkg = Package(name="p", path="p")
        empty = File(name="a.go", path="p/a.go")
        empty.add_type(Type(name="Shared", kind=Kind.STRUCT))
        pkg.add_file(empty)
        full = GoInspector().inspect_source(b"package p\n\ntype Shared struct {\n\tX int\n}\n", "b.go")
        full.path = "p/b.go"
        pkg.add_file(full)
        project = Project(name="proj")
        project.add_package(pkg)
        kinds = [(d.kind, d.path) for d in create_documents(project)]
        assert kinds == [(DocumentKind.TYPE, "p/b.go"), (DocumentKind.FIELD, "p/b.go")]
