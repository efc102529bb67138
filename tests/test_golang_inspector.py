"""
Tests for the Go Inspector

Tests type resolution, receiver binding, values, functions, package
assembly and source reconstruction.
"""

import pytest

from linager.configs.runtime import InspectorConfig
from linager.exceptions import ParseError
from linager.graph.emitter import get_emitter
from linager.graph.types import Kind
from linager.inspector.golang import GoEmitter, GoInspector

SAMPLE = b'''package sample

import (
	"fmt"
	str "strings"
)

// MaxSize is the limit
const MaxSize = 10

var counter int

type UserID string

// Label names a thing
type Label string

// User is a user
type User struct {
	ID UserID `json:"id"`
	// Name is shown to others
	Name string
	*Base
}

type Store interface {
	Get(id UserID) (*User, error)
	fmt.Stringer
}

type Pair[K comparable, V any] struct {
	Key   K
	Value V
}

type Names []string

type Index map[string]int

func (u *User) Greet() string {
	return fmt.Sprintf("hi %s", str.ToUpper(u.Name))
}

func Helper(a, b int) int {
	return a + b
}
'''


@pytest.fixture
def inspector() -> GoInspector:
    return GoInspector()


@pytest.fixture
def sample(inspector):
    return inspector.inspect_source(SAMPLE, "sample.go")


# =============================================================================
# Declarations
# =============================================================================


class TestGoDeclarations:
    """Test extraction of top-level declarations."""

    def test_package_and_imports(self, sample):
        """Package clause and both imports are recorded."""
        assert sample.package == "sample"
        assert [(i.path, i.name) for i in sample.imports] == [("fmt", ""), ("strings", "str")]

    def test_every_type_is_found(self, sample):
        """Each declared type can be looked up by name."""
        for name in ("UserID", "Label", "User", "Store", "Pair", "Names", "Index"):
            t = sample.lookup_type(name)
            assert t is not None
            assert t.name == name

    def test_struct_fields(self, sample):
        """Struct fields keep names, types, tags and comments."""
        user = sample.lookup_type("User")
        assert user.kind == Kind.STRUCT
        assert user.fields.names() == ["ID", "Name", ""]

        id_field = user.get_field("ID")
        assert id_field.type_name == "UserID"
        assert id_field.tag == 'json:"id"'
        assert id_field.is_exported

        assert user.get_field("Name").comment == "Name is shown to others"

    def test_embedded_field(self, sample):
        """An embedded pointer field has no name and keeps the star."""
        embedded = sample.lookup_type("User").fields[2]
        assert embedded.name == ""
        assert embedded.is_embedded
        assert embedded.type_name == "*Base"

    def test_interface_methods_and_embeds(self, sample):
        """Interface methods are inline methods; embedded interfaces are fields."""
        store = sample.lookup_type("Store")
        assert store.kind == Kind.INTERFACE
        assert store.inline_methods
        get = store.get_method("Get")
        assert get is not None
        assert get.receiver == "Store"
        assert [p.type_name for p in get.results] == ["*User", "error"]
        assert [f.type_name for f in store.fields] == ["fmt.Stringer"]

    def test_generic_type_params(self, sample):
        """Type parameters keep their constraints."""
        pair = sample.lookup_type("Pair")
        assert [(p.name, p.constraint) for p in pair.type_params] == [
            ("K", "comparable"),
            ("V", "any"),
        ]
        assert pair.fields.names() == ["Key", "Value"]

    def test_containers(self, sample):
        """Slices and maps carry element and key type names."""
        names = sample.lookup_type("Names")
        assert names.kind == Kind.SLICE
        assert names.component_type == "string"

        index = sample.lookup_type("Index")
        assert index.kind == Kind.MAP
        assert index.key_type == "string"
        assert index.component_type == "int"

    def test_constants_and_variables(self, sample):
        """Constants keep value and doc comment; variables keep their type."""
        max_size = sample.lookup_constant("MaxSize")
        assert max_size.value == "10"
        assert max_size.comment == "MaxSize is the limit"
        assert max_size.file is sample

        counter = sample.lookup_variable("counter")
        assert counter.type_name == "int"
        assert not counter.is_exported

    def test_function_signature(self, sample):
        """Free functions keep parameters, results and a normalized signature."""
        helper = sample.lookup_function("Helper")
        assert [p.name for p in helper.parameters] == ["a", "b"]
        assert [p.type_name for p in helper.parameters] == ["int", "int"]
        assert helper.signature == "func Helper(a, b int) int"
        assert helper.body.text.startswith("{")

    def test_unexported_filtered(self):
        """include_unexported=False drops lowercase declarations."""
        file = GoInspector(InspectorConfig(include_unexported=False)).inspect_source(SAMPLE, "sample.go")
        assert file.lookup_variable("counter") is None
        assert file.lookup_constant("MaxSize") is not None


# =============================================================================
# Aliases
# =============================================================================


class TestGoAliases:
    """Test named-type declarations."""

    def test_alias_comment_generated(self, sample):
        """An undocumented named type gets a generated comment."""
        user_id = sample.lookup_type("UserID")
        assert user_id.kind == Kind.ALIAS
        assert user_id.component_type == "string"
        assert user_id.comment.text == "UserID is a type alias for string"
        assert user_id.comment.location is None

    def test_alias_keeps_doc_comment(self, sample):
        """An explicit doc comment is not replaced."""
        assert sample.lookup_type("Label").comment.text == "Label names a thing"

    def test_single_alias_declaration(self, inspector):
        """A file with only `type UserID string` yields exactly one type."""
        file = inspector.inspect_source(b"package p\n\ntype UserID string\n")
        assert len(file.types) == 1
        assert file.types[0].comment.text == "UserID is a type alias for string"

    def test_alias_with_equals(self, inspector):
        """`type A = B` is an alias too."""
        file = inspector.inspect_source(b"package p\n\ntype A = B\n")
        assert file.lookup_type("A").kind == Kind.ALIAS
        assert file.lookup_type("A").component_type == "B"


# =============================================================================
# Receiver binding
# =============================================================================


class TestGoReceivers:
    """Test deferred binding of methods to receiver types."""

    def test_generic_and_plain_receivers_share_one_type(self, inspector):
        """Methods on *R[T] and R attach to the same single Type."""
        file = inspector.inspect_source(b'''package p

func (r *R[T]) First() T {
	var zero T
	return zero
}

func (r *R[T]) Second() {}

func (r R) Third() {}
''')
        matching = [t for t in file.types if t.name == "R"]
        assert len(matching) == 1
        assert matching[0].methods.names() == ["First", "Second", "Third"]

    def test_synthetic_receiver(self, inspector):
        """Pointer and value receivers without a declaration yield one struct."""
        file = inspector.inspect_source(b'''package p

func (s *Service) Start() error { return nil }

func (s Service) Name() string { return "svc" }
''')
        assert len(file.types) == 1
        service = file.types[0]
        assert service.name == "Service"
        assert service.kind == Kind.STRUCT
        assert service.is_exported
        assert len(service.methods) == 2
        assert service.location is None

    def test_method_before_declaration(self, inspector):
        """A method declared before its type binds to the declared type."""
        file = inspector.inspect_source(b'''package p

func (c *Counter) Inc() { c.n++ }

type Counter struct {
	n int
}
''')
        assert len(file.types) == 1
        counter = file.lookup_type("Counter")
        assert counter.location is not None
        assert counter.fields.names() == ["n"]
        assert counter.methods.names() == ["Inc"]
        assert counter.get_method("Inc").receiver == "*Counter"

    def test_method_not_a_free_function(self, sample):
        """Methods are not listed among free functions."""
        assert sample.lookup_function("Greet") is None
        assert sample.lookup_type("User").get_method("Greet") is not None


# =============================================================================
# Errors
# =============================================================================


class TestGoErrors:
    """Test syntax error handling."""

    BROKEN = b"package p\n\nfunc broken( {\n"

    def test_syntax_error_raises(self, inspector):
        """Malformed source raises ParseError with the path."""
        with pytest.raises(ParseError) as exc:
            inspector.inspect_source(self.BROKEN, "broken.go")
        assert exc.value.path == "broken.go"

    def test_syntax_error_tolerated(self):
        """tolerate_syntax_errors extracts what was recovered."""
        inspector = GoInspector(InspectorConfig(tolerate_syntax_errors=True))
        file = inspector.inspect_source(self.BROKEN, "broken.go")
        assert file.package == "p"


# =============================================================================
# Reconstruction
# =============================================================================


class TestGoEmitter:
    """Test source reconstruction."""

    def test_registered(self):
        """The Go emitter is registered for .go files."""
        assert isinstance(get_emitter(".go"), GoEmitter)

    def test_spans_in_section_order(self, sample):
        """Every captured span appears unmodified, in section order."""
        output = GoEmitter().emit(sample).decode("utf-8")

        expected = [c.location.raw for c in sample.constants]
        expected += [v.location.raw for v in sample.variables]
        for t in sample.types:
            expected.append(t.location.raw)
            expected += [m.location.raw for m in t.methods if not t.inline_methods]
        expected += [f.location.raw for f in sample.functions]

        position = 0
        for raw in expected:
            found = output.find(raw, position)
            assert found >= 0, raw
            position = found + len(raw)

    def test_header_and_imports(self, sample):
        """The package clause and imports are written first."""
        output = GoEmitter().emit(sample).decode("utf-8")
        assert output.startswith("package sample\n\nimport (\n\t\"fmt\"\n\tstr \"strings\"\n)")

    def test_doc_comment_before_type(self, sample):
        """A captured doc comment precedes its type."""
        output = GoEmitter().emit(sample).decode("utf-8")
        assert "// User is a user\ntype User struct {" in output

    def test_grouped_constants_regrouped(self, inspector):
        """Grouped specs are written back inside one block."""
        file = inspector.inspect_source(b'''package p

const (
	A = iota
	B
)
''')
        assert file.constants.names() == ["A", "B"]
        output = GoEmitter().emit(file).decode("utf-8")
        assert "const (\n\tA = iota\n\tB\n)" in output

    def test_added_field_rebuilds_struct(self, sample):
        """Adding a field rebuilds the struct around the captured members."""
        from linager.graph.types import Field, Type

        user = sample.lookup_type("User")
        user.add_field(Field(name="Email", type=Type(name="string"), is_exported=True))
        output = GoEmitter().emit(sample).decode("utf-8")
        assert "\tEmail string\n}" in output
        assert '\tID UserID `json:"id"`' in output

    def test_removed_field_from_shared_declaration(self, inspector):
        """Removing one of several names declared together keeps the others and the field docs."""
        file = inspector.inspect_source(
            b"package p\n\ntype S struct {\n\t// doc for N\n\tN string\n\ta, b int\n}\n", "s.go"
        )
        s = file.lookup_type("S")
        assert s.remove_field("a")
        output = GoEmitter().emit(file).decode("utf-8")
        assert "type S struct {\n\t// doc for N\n\tN string\n\tb int\n}" in output

    def test_comment_after_opening_brace(self, inspector):
        """A comment on the brace line documents the first field."""
        file = inspector.inspect_source(b"package p\n\ntype S struct { // doc for N\n\tN string\n\tM int\n}\n")
        s = file.lookup_type("S")
        assert s.get_field("N").comment == "doc for N"
        s.remove_field("M")
        output = GoEmitter().emit(file).decode("utf-8")
        assert "type S struct {\n\t// doc for N\n\tN string\n}" in output

    def test_synthesized_function(self, inspector):
        """A function without a span is rendered from its parts."""
        from linager.graph.location import LocationNode
        from linager.graph.types import Function, Parameter, Type

        file = inspector.inspect_source(b"package p\n")
        file.add_function(Function(
            name="Sum",
            parameters=[Parameter(name="a", type=Type(name="int"))],
            results=[Parameter(name="", type=Type(name="int"))],
            body=LocationNode(text="{\n\treturn a\n}"),
        ))
        output = GoEmitter().emit(file).decode("utf-8")
        assert "func Sum(a int) int {\n\treturn a\n}" in output


# =============================================================================
# Packages and projects
# =============================================================================


class TestGoProject:
    """Test package and project assembly."""

    def test_inspect_package(self, go_project):
        """Test files are skipped and the module import path is used."""
        pkg = GoInspector().inspect_package(str(go_project))
        assert pkg.name == "main"
        assert pkg.import_path == "example.com/app"
        assert pkg.files.names() == ["main.go"]

    def test_inspect_project(self, go_project):
        """Packages get root-relative paths and module import paths."""
        project = GoInspector().inspect_project(str(go_project))
        assert project.name == "example.com/app"
        assert project.type == "go"

        util = project.lookup_package("util")
        assert util.import_path == "example.com/app/util"
        assert util.path == "util"
        assert util.files[0].path == "util/util.go"

        config = util.lookup_type("Config")
        assert config.package == "util"
        assert config.package_path == "example.com/app/util"
        assert config.methods.names() == ["Validate"]

    def test_assets(self, go_project):
        """Non-source files are assets of the nearest package."""
        project = GoInspector().inspect_project(str(go_project))
        root = project.lookup_package("main")
        assert sorted(a.path for a in root.assets) == ["README.md", "go.mod"]
        util = project.lookup_package("util")
        assert sorted(a.path for a in util.assets) == ["util/data.json", "util/empty.txt"]

    def test_skip_asset(self, go_project):
        """skip_asset disables asset collection."""
        project = GoInspector(InspectorConfig(skip_asset=True)).inspect_project(str(go_project))
        assert all(not pkg.assets for pkg in project.packages)

    def test_parallel_scan(self, go_project):
        """A threaded scan yields the same packages."""
        project = GoInspector(InspectorConfig(max_workers=4)).inspect_project(str(go_project))
        assert sorted(project.packages.names()) == ["main", "util"]

    def test_broken_package_skipped(self, go_project):
        """A package with a syntax error is skipped by the project scan."""
        broken = go_project / "broken"
        broken.mkdir()
        (broken / "bad.go").write_text("package broken\n\nfunc {\n")
        project = GoInspector().inspect_project(str(go_project))
        assert sorted(project.packages.names()) == ["main", "util"]
