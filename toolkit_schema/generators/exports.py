"""Regenerates the ``exports`` map of the package manifest."""

from __future__ import annotations

import json
from pathlib import Path

from toolkit_schema.generators.base import ArtifactGenerator
from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import SchemaGraph
from toolkit_schema.utils import dump_json, load_json


class ExportMapGenerator(ArtifactGenerator):
    """Rebuilds ``package.json`` ``exports`` wholesale from the graph.

    Every namespace and every tool gets a subpath entry pointing at its
    compiled entry file. Other manifest fields are kept as they are.
    """

    name = "exports"

    def __init__(self, package_path: str | Path, dist_dir: str = "./dist") -> None:
        self.package_path = Path(package_path)
        self.dist_dir = dist_dir.rstrip("/")

    def dist_entry(self, *segments: str) -> str:
        return "/".join([self.dist_dir, *segments, "index.js"])

    def build_exports(self, graph: SchemaGraph) -> dict[str, str]:
        exports = {".": self.dist_entry()}
        for ns_name, namespace in graph.namespaces.items():
            exports[f"./{ns_name}"] = self.dist_entry(ns_name)
            for tool_name in namespace.tools:
                exports[f"./{ns_name}/{tool_name}"] = self.dist_entry(ns_name, tool_name)
        return exports

    def generate(self, graph: SchemaGraph, ledger: ChangeLedger) -> list[Path]:
        try:
            manifest = load_json(self.package_path)
        except FileNotFoundError:
            raise self.error(self.package_path, "file not found") from None
        except json.JSONDecodeError as exc:
            raise self.error(self.package_path, f"invalid JSON ({exc})") from exc

        if not isinstance(manifest, dict):
            raise self.error(self.package_path, "top-level value must be an object")

        manifest["exports"] = self.build_exports(graph)
        if ledger.record_if_changed(self.package_path, dump_json(manifest)):
            return [self.package_path]
        return []
