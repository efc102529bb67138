"""
Tests for the command line
"""

import json

import yaml

from linager.cli import build_parser, main


class TestCLI:
    """Test the linager subcommands."""

    def test_parser(self):
        """Subcommands carry their own options."""
        parser = build_parser()
        args = parser.parse_args(["inspect", "."])
        assert args.command == "inspect"
        assert not args.json

    def test_inspect_json(self, go_project, capsys):
        """inspect --json prints the project outline."""
        assert main(["inspect", str(go_project), "--json"]) == 0
        outline = json.loads(capsys.readouterr().out)
        assert outline["name"] == "example.com/app"
        assert outline["type"] == "go"
        util = next(p for p in outline["packages"] if p["name"] == "util")
        assert util["files"][0]["types"] == [
            {"name": "Config", "kind": "struct", "methods": ["Validate"]}
        ]
        assert util["files"][0]["functions"] == ["Run"]

    def test_inspect_text(self, go_project, capsys):
        """inspect prints one line per package."""
        assert main(["inspect", str(go_project)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("example.com/app (go)\n")
        assert "util: 1 files, 1 types, 1 functions" in out

    def test_documents(self, go_project, capsys):
        """documents prints JSON lines."""
        assert main(["documents", str(go_project), "--package", "util"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        docs = [json.loads(line) for line in lines]
        assert {d["kind"] for d in docs} >= {"Asset", "Type", "Function", "Method"}
        assert all(d["package"] == "util" for d in docs)

    def test_documents_grouped(self, go_project, capsys):
        """--group regroups per file."""
        assert main(["documents", str(go_project), "--package", "util", "--group"]) == 0
        docs = [json.loads(line) for line in capsys.readouterr().out.strip().splitlines()]
        code = [d for d in docs if d["kind"] == "Code"]
        assert [d["path"] for d in code] == ["util/util.go"]
        assert code[0]["content"].startswith("package util\n\n")

    def test_store(self, go_project, tmp_path, capsys):
        """store writes the project under the destination."""
        destination = tmp_path / "copy"
        assert main(["store", str(go_project), str(destination)]) == 0
        assert (destination / "util" / "util.go").exists()
        assert "Stored" in capsys.readouterr().out

    def test_lineage(self, go_project, capsys):
        """lineage prints the data points of the selected packages as YAML."""
        assert main(["lineage", str(go_project), "--package", "util"]) == 0
        points = yaml.safe_load(capsys.readouterr().out)
        refs = [p["identity"]["ref"] for p in points]
        assert "example.com/app/util:Config:Name" in refs
        assert "example.com/app/util:Run" in refs
        assert all(ref.startswith("example.com/app/util:") for ref in refs)

    def test_detect(self, js_project, capsys):
        """detect prints project and repository metadata."""
        assert main(["detect", str(js_project)]) == 0
        info = json.loads(capsys.readouterr().out)
        assert info["project"]["name"] == "web-app"
        assert info["project"]["type"] == "javascript"
        assert info["repository"]["kind"] == "javascript"

    def test_error_exit_code(self, temp_dir, capsys):
        """Linager errors are reported with exit code 1."""
        (temp_dir / "notes.txt").write_text("nothing to inspect")
        assert main(["inspect", str(temp_dir)]) == 1
