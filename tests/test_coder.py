"""
Tests for the structural editor

Tests create/remove operations, project loading and storing.
"""

import pytest

from linager.coder import Coder
from linager.exceptions import NotFoundError, StoreError
from linager.graph.emitter import get_emitter
from linager.graph.types import Function, Kind, Parameter, Type


@pytest.fixture
def coder():
    c = Coder()
    c.create_package("util", import_path="example.com/app/util", path="util")
    c.create_file("util", "util.go")
    return c


class TestCoderEdits:
    """Test in-place edits."""

    def test_create_package_and_file(self, coder):
        """Files inherit the package's path and import path."""
        pkg = coder.project.lookup_package("util")
        f = pkg.lookup_file("util.go")
        assert f.path == "util/util.go"
        assert f.package == "util"
        assert f.import_path == "example.com/app/util"

    def test_create_type_and_members(self, coder):
        """Types, fields and methods are created under their parents."""
        t = coder.create_type("util", "util.go", "Config")
        assert t.kind == Kind.STRUCT
        assert t.is_exported
        assert t.package_path == "example.com/app/util"

        f = coder.create_field("util", "util.go", "Config", "Name", Type(name="string"), tag='json:"name"')
        assert f.is_exported
        assert t.get_field("Name") is f

        m = coder.create_method(
            "util", "util.go", "Config", "validate",
            parameters=[Parameter(name="strict", type=Type(name="bool"))],
            results=[Parameter(name="", type=Type(name="error"))],
            body="return nil",
        )
        assert m.receiver == "Config"
        assert not m.is_exported
        assert m.body.text == "return nil"
        assert coder.project.lookup_package("util").lookup_method("Config", "validate") is m

    def test_create_function(self, coder):
        """Free functions go to the file; receivers route to types."""
        fn = coder.create_function("util", "util.go", "Run", body="fmt.Println()")
        f = coder.project.lookup_package("util").lookup_file("util.go")
        assert f.lookup_function("Run") is fn

        method = coder.add_function_to_file("util", "util.go", Function(name="Stop", receiver="*Server"))
        assert f.lookup_type("Server").get_method("Stop") is method
        assert "Stop" not in f.functions

    def test_missing_parents_raise(self, coder):
        """Create operations report the missing parent."""
        with pytest.raises(NotFoundError) as exc:
            coder.create_file("missing", "a.go")
        assert exc.value.kind == "package"

        with pytest.raises(NotFoundError) as exc:
            coder.create_type("util", "other.go", "T")
        assert exc.value.kind == "file"

        with pytest.raises(NotFoundError) as exc:
            coder.create_field("util", "util.go", "Ghost", "X")
        assert exc.value.kind == "type"
        assert exc.value.name == "Ghost"

    def test_remove(self, coder):
        """Removes report whether something was removed."""
        coder.create_type("util", "util.go", "Config")
        coder.create_field("util", "util.go", "Config", "Name")
        coder.create_method("util", "util.go", "Config", "Validate")
        coder.create_function("util", "util.go", "Run")

        assert coder.remove_field("util", "util.go", "Config", "Name")
        assert not coder.remove_field("util", "util.go", "Config", "Name")
        assert coder.remove_method("util", "util.go", "Config", "Validate")
        assert coder.remove_function("util", "util.go", "Run")
        assert coder.remove_type("util", "util.go", "Config")
        assert not coder.remove_type("util", "util.go", "Config")
        assert not coder.remove_method("util", "util.go", "Config", "Validate")
        assert coder.remove_file("util", "util.go")
        assert not coder.remove_function("util", "util.go", "Run")
        assert coder.remove_package("util")
        assert not coder.remove_package("util")
        assert not coder.remove_file("util", "util.go")

    def test_index_follows_edits(self, coder):
        """Package type lookups see types created and removed through the coder."""
        pkg = coder.project.lookup_package("util")
        coder.create_type("util", "util.go", "Config")
        assert pkg.lookup_type("Config") is not None
        coder.remove_type("util", "util.go", "Config")
        assert pkg.lookup_type("Config") is None


class TestCoderRendering:
    """Test edits through the emitters."""

    def test_synthesized_go_file(self, coder):
        """A file built only from edits renders as Go."""
        coder.create_type("util", "util.go", "Config")
        coder.create_field("util", "util.go", "Config", "Name", Type(name="string"))
        coder.create_function(
            "util", "util.go", "Add",
            parameters=[Parameter(name="a", type=Type(name="int"))],
            results=[Parameter(name="", type=Type(name="int"))],
            body="{\n\treturn a\n}",
        )
        f = coder.project.lookup_package("util").lookup_file("util.go")
        output = get_emitter(".go").emit(f).decode("utf-8")
        assert output.startswith("package util\n")
        assert "type Config struct {\n\tName string\n}" in output
        assert "func Add(a int) int {\n\treturn a\n}" in output

    def test_functions_without_body(self, coder):
        """Functions and methods created without a body still get braces."""
        coder.create_type("util", "util.go", "Cfg")
        method = coder.create_method("util", "util.go", "Cfg", "Validate")
        function = coder.create_function("util", "util.go", "Run")
        assert method.body is None
        assert function.body is None

        f = coder.project.lookup_package("util").lookup_file("util.go")
        output = get_emitter(".go").emit(f).decode("utf-8")
        assert "func (c Cfg) Validate() {\n}" in output
        assert "func Run() {\n}" in output

    def test_javascript_function_without_body(self, coder):
        """The JavaScript emitter also supplies a body."""
        coder.create_file("util", "app.js")
        coder.create_function("util", "app.js", "start")
        f = coder.project.lookup_package("util").lookup_file("app.js")
        output = get_emitter(".js").emit(f).decode("utf-8")
        assert "function start() {\n  // Function implementation\n}" in output


class TestLoadAndStore:
    """Test loading a project from disk and writing it back."""

    def test_load_project(self, go_project):
        """load_project detects the ecosystem and inspects every package."""
        coder = Coder()
        project = coder.load_project(str(go_project))
        assert coder.project is project
        assert project.type == "go"
        assert sorted(project.packages.names()) == ["main", "util"]

    def test_store_project(self, go_project, tmp_path):
        """Sources are re-emitted and non-empty assets copied."""
        coder = Coder()
        coder.load_project(str(go_project))
        destination = tmp_path / "out"
        written = coder.store_project(str(destination))

        main = (destination / "main.go").read_text()
        assert main.startswith('package main\n\nimport (\n\t"example.com/app/util"\n)\n\n')
        assert "func main() {\n\tutil.Run()\n}" in main
        util = (destination / "util" / "util.go").read_text()
        assert "// Config holds settings\ntype Config struct {" in util
        assert "func (c *Config) Validate() error {" in util
        assert (destination / "util" / "data.json").read_text() == '{"a": 1}\n'
        assert not (destination / "util" / "empty.txt").exists()
        assert (destination / "go.mod").exists()
        assert str(destination / "util" / "data.json") in written

    def test_store_after_edit(self, go_project, tmp_path):
        """Edits made after loading are visible in the stored source."""
        coder = Coder()
        coder.load_project(str(go_project))
        coder.create_field("util", "util.go", "Config", "Port", Type(name="int"))
        coder.store_project(str(tmp_path / "out"))
        util = (tmp_path / "out" / "util" / "util.go").read_text()
        assert "type Config struct {\n\tName string\n\tPort int\n}" in util

    def test_store_error(self, tmp_path):
        """Write failures surface as StoreError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory")
        coder = Coder()
        coder.create_package("util", path="util")
        coder.create_file("util", "util.go")
        with pytest.raises(StoreError):
            coder.store_project(str(blocker))
