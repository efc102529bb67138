"""
Tests for the Go data-lineage pass

Tests data point collection for fields, package values, functions and
locals, and the read, write and call touch points recorded for them.
"""

import pytest
import yaml

from linager.analyzer import CodeLocation, GoAnalyzer, dump_data_points
from linager.analyzer.golang import element_type_name
from linager.coder import Coder

PKG = "example.com/shop/store"

STORE_SOURCE = '''package store

// Limit caps results
const Limit = 10

var count int

type Base struct {
	ID string
}

type Item struct {
	Base
	Name  string `json:"name"`
	Price float64
}

func NewItem(name string) *Item {
	item := &Item{Name: name}
	count++
	return item
}

func (i *Item) Rename(name string) {
	i.Name = name
	i.ID = i.Name
}

func Total(items []*Item) float64 {
	var sum float64
	for _, it := range items {
		sum += it.Price
	}
	if sum > Limit {
		sum = Limit
	}
	n := NewItem("x")
	n.Rename("y")
	return sum
}
'''


def _local(function: str, line: int, name: str) -> str:
    return f"{PKG}:item.go:[{function}]:{line}:{name}"


@pytest.fixture
def points():
    found = GoAnalyzer().analyze_source(STORE_SOURCE, "store/item.go", PKG)
    return {str(p.ref): p for p in found}


class TestDataPoints:
    """Test which identifiers become data points."""

    def test_declarations(self, points):
        """Fields, package values, functions and locals all get refs."""
        expected = [
            f"{PKG}:Base:ID",
            f"{PKG}:Item:Base",
            f"{PKG}:Item:Name",
            f"{PKG}:Item:Price",
            f"{PKG}:item.go:4:Limit",
            f"{PKG}:item.go:6:count",
            f"{PKG}:NewItem",
            f"{PKG}:Item.Rename",
            f"{PKG}:Total",
            _local("NewItem", 18, "name"),
            _local("NewItem", 19, "item"),
            _local("Item.Rename", 24, "i"),
            _local("Item.Rename", 24, "name"),
            _local("Total", 29, "items"),
            _local("Total", 30, "sum"),
            _local("Total", 31, "it"),
            _local("Total", 37, "n"),
        ]
        for ref in expected:
            assert ref in points
        assert len(points) == len(expected)

    def test_sorted_by_ref(self):
        """Results come back ordered by ref."""
        refs = [str(p.ref) for p in GoAnalyzer().analyze_source(STORE_SOURCE, "store/item.go", PKG)]
        assert refs == sorted(refs)

    def test_identity_parts(self, points):
        """Refs parse back into their parts."""
        field = points[f"{PKG}:Item:Name"].identity
        assert field.kind == "field"
        assert field.holder_type == "Item"
        assert field.name == "Item.Name"

        local = points[_local("Total", 30, "sum")].identity
        assert local.kind == "variable"
        assert local.function == "Total"
        assert local.line == 30
        assert local.package == "store"

        assert points[f"{PKG}:item.go:4:Limit"].identity.kind == "constant"
        assert points[_local("Item.Rename", 24, "i")].identity.kind == "receiver"
        method = points[f"{PKG}:Item.Rename"].identity
        assert method.kind == "func"
        assert method.holder_type == "Item"

    def test_definitions(self, points):
        """Definitions carry the file path and position."""
        assert points[f"{PKG}:Item:Name"].definition.line_number == 14
        assert points[f"{PKG}:Item:Name"].metadata == {"type": "string", "tag": 'json:"name"'}
        assert points[_local("NewItem", 19, "item")].definition == CodeLocation(
            file_path="store/item.go", line_number=19, column_start=2, column_end=6,
        )
        assert points[f"{PKG}:Total"].definition.line_number == 29


class TestTouchPoints:
    """Test recorded reads, writes and calls."""

    def test_field_writes(self, points):
        """Keyed literals and assignments write fields; values become dependencies."""
        name = points[f"{PKG}:Item:Name"]
        assert [w.location.line_number for w in name.writes] == [19, 25]
        assert name.writes[0].dependencies == [_local("NewItem", 18, "name")]
        assert name.writes[1].dependencies == [_local("Item.Rename", 24, "name")]
        assert name.writes[1].context.method == "Rename"
        assert name.writes[1].context.holder_type == "Item"
        assert [r.location.line_number for r in name.reads] == [26]

    def test_promoted_field(self, points):
        """Fields of embedded structs resolve through the embedding type."""
        field_id = points[f"{PKG}:Base:ID"]
        assert len(field_id.writes) == 1
        write = field_id.writes[0]
        assert write.location.line_number == 26
        assert write.dependencies == [_local("Item.Rename", 24, "i"), f"{PKG}:Item:Name"]

    def test_package_variable(self, points):
        """Increments read and write the package variable."""
        count = points[f"{PKG}:item.go:6:count"]
        assert [w.location.line_number for w in count.writes] == [20]
        assert [r.location.line_number for r in count.reads] == [20]
        assert count.writes[0].context.function == "NewItem"

    def test_local_variable(self, points):
        """Compound assignments read their target; range values take the element type."""
        total = points[_local("Total", 30, "sum")]
        assert [w.location.line_number for w in total.writes] == [32, 35]
        assert [r.location.line_number for r in total.reads] == [32, 34, 39]
        assert total.writes[0].dependencies == [
            _local("Total", 31, "it"),
            f"{PKG}:Item:Price",
            _local("Total", 30, "sum"),
        ]
        assert total.writes[1].dependencies == [f"{PKG}:item.go:4:Limit"]

        it = points[_local("Total", 31, "it")]
        assert it.writes[0].dependencies == [_local("Total", 29, "items")]

    def test_calls(self, points):
        """Calls resolve to functions and to methods through the result type."""
        assert [c.location.line_number for c in points[f"{PKG}:NewItem"].calls] == [37]
        assert [c.location.line_number for c in points[f"{PKG}:Item.Rename"].calls] == [38]
        n = points[_local("Total", 37, "n")]
        assert n.writes[0].dependencies == [f"{PKG}:NewItem"]
        assert [r.location.line_number for r in n.reads] == [38]

    def test_shadowing(self):
        """A local declared with := shadows the package variable from that point."""
        source = "package p\n\nvar x int\n\nfunc F() {\n\tx = 1\n\tx := 2\n\tx = 3\n\t_ = x\n}\n"
        found = {str(p.ref): p for p in GoAnalyzer().analyze_source(source, "p.go")}
        package_x = found["p:p.go:3:x"]
        local_x = found["p:p.go:[F]:7:x"]
        assert [w.location.line_number for w in package_x.writes] == [6]
        assert [w.location.line_number for w in local_x.writes] == [7, 8]
        assert [r.location.line_number for r in local_x.reads] == [9]


class TestOutput:
    """Test serialization and project-level analysis."""

    def test_dump_yaml(self, points):
        """Data points dump to YAML with camelCase keys."""
        loaded = yaml.safe_load(dump_data_points([points[f"{PKG}:Item:Name"]]))
        assert len(loaded) == 1
        entry = loaded[0]
        assert entry["identity"]["ref"] == f"{PKG}:Item:Name"
        assert entry["identity"]["holderType"] == "Item"
        assert entry["definition"] == {"filePath": "store/item.go", "lineNumber": 14}
        assert entry["writes"][0]["codeLocation"]["lineNumber"] == 19
        assert entry["writes"][0]["dependencies"] == [_local("NewItem", 18, "name")]
        assert entry["reads"][0]["context"] == {"method": "Rename", "holderType": "Item"}

    def test_analyze_project(self, go_project):
        """Every Go package of a loaded project is analyzed from disk."""
        project = Coder().load_project(str(go_project))
        refs = {str(p.ref) for p in GoAnalyzer().analyze_project(project)}
        assert "example.com/app/util:Config:Name" in refs
        assert "example.com/app/util:Config.Validate" in refs
        assert "example.com/app:main" in refs

        util_only = GoAnalyzer().analyze_project(project, "util")
        assert all(str(p.ref).startswith("example.com/app/util:") for p in util_only)

    def test_element_type_name(self):
        """Element types of slices, arrays and maps."""
        assert element_type_name("[]*Item") == "Item"
        assert element_type_name("[4]Item") == "Item"
        assert element_type_name("map[string][]int") == ""
        assert element_type_name("map[Key]*pkg.Item") == "Item"
        assert element_type_name("Item") == ""
