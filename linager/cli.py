"""
Linager Command Line

Subcommands:
  inspect PATH      Summarize the packages, types and functions of a project
  documents PATH    Print the project's documents as JSON lines
  lineage PATH      Print data points of a Go project as YAML
  store SRC DEST    Re-emit a project's source files under DEST
  detect PATH       Print detected project and repository metadata

Environment variables:
    LINAGER_DEBUG: Enable debug logging (default: config.yaml debug)
    LINAGER_LOG_FILE: Log file path (default: stderr only)
"""

import argparse
import json
import sys
from dataclasses import asdict
from typing import Optional

from linager.analyzer import GoAnalyzer, dump_data_points
from linager.coder import Coder
from linager.configs.logging import get_logger, setup_logging
from linager.configs.runtime import get_max_total_size, load_inspector_config
from linager.exceptions import LinagerError
from linager.graph.document import create_documents
from linager.graph.project import Project
from linager.repository.detector import detect_project, detect_repository

logger = get_logger("cli")


def summarize(project: Project) -> dict:
    """Name-level outline of a project."""
    packages = []
    for pkg in project.packages:
        files = []
        for f in pkg.files:
            files.append({
                "path": f.path,
                "types": [
                    {"name": t.name, "kind": t.kind.value, "methods": t.methods.names()}
                    for t in f.types
                ],
                "functions": f.functions.names(),
                "constants": f.constants.names(),
                "variables": f.variables.names(),
            })
        packages.append({
            "name": pkg.name,
            "path": pkg.path,
            "import_path": pkg.import_path,
            "files": files,
            "assets": [a.path for a in pkg.assets],
        })
    return {
        "name": project.name,
        "type": project.type,
        "repository_url": project.repository_url,
        "packages": packages,
    }


def _load(path: str) -> Project:
    return Coder(config=load_inspector_config()).load_project(path)


def cmd_inspect(args) -> int:
    project = _load(args.path)
    if args.json:
        print(json.dumps(summarize(project), indent=2))
        return 0
    print(f"{project.name} ({project.type})")
    for pkg in project.packages:
        types = sum(len(f.types) for f in pkg.files)
        functions = sum(len(f.functions) for f in pkg.files)
        print(f"  {pkg.import_path or pkg.name}: {len(pkg.files)} files, {types} types, {functions} functions")
    return 0


def cmd_documents(args) -> int:
    project = _load(args.path)
    docs = create_documents(project, args.package or "")
    if args.group:
        docs = docs.group_by()
    max_size = args.max_size or get_max_total_size()
    if max_size:
        docs = docs.filter_by_size(max_size)
    if docs:
        print(docs.to_json_lines())
    logger.info(f"Wrote {len(docs)} documents")
    return 0


def cmd_lineage(args) -> int:
    project = _load(args.path)
    if project.type != "go":
        logger.warning(f"Lineage covers Go packages only; {project.name} is a {project.type or 'unknown'} project")
    points = GoAnalyzer(load_inspector_config()).analyze_project(project, args.package or "")
    if points:
        print(dump_data_points(points), end="")
    logger.info(f"Wrote {len(points)} data points")
    return 0


def cmd_store(args) -> int:
    coder = Coder(config=load_inspector_config())
    coder.load_project(args.source)
    written = coder.store_project(args.destination)
    print(f"Stored {len(written)} files to {args.destination}")
    return 0


def cmd_detect(args) -> int:
    info = {
        "project": asdict(detect_project(args.path)),
        "repository": asdict(detect_repository(args.path)),
    }
    print(json.dumps(info, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linager", description="Source structure extractor")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("inspect", help="Summarize a project")
    p.add_argument("path")
    p.add_argument("--json", action="store_true", help="Print the outline as JSON")
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("documents", help="Print documents as JSON lines")
    p.add_argument("path")
    p.add_argument("--package", help="Only packages under this path prefix")
    p.add_argument("--group", action="store_true", help="Regroup documents per file")
    p.add_argument("--max-size", type=int, default=0, help="Cumulative size budget (default from config)")
    p.set_defaults(func=cmd_documents)

    p = sub.add_parser("lineage", help="Print Go data points as YAML")
    p.add_argument("path")
    p.add_argument("--package", help="Only packages under this path prefix")
    p.set_defaults(func=cmd_lineage)

    p = sub.add_parser("store", help="Re-emit a project under a destination")
    p.add_argument("source")
    p.add_argument("destination")
    p.set_defaults(func=cmd_store)

    p = sub.add_parser("detect", help="Print project and repository metadata")
    p.add_argument("path")
    p.set_defaults(func=cmd_detect)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug=True if args.debug else None)
    try:
        return args.func(args)
    except LinagerError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
