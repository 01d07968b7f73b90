"""Regenerates the tool option lists of the issue intake forms."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml

from toolkit_schema.config import OptionLayout, OptionListConfig
from toolkit_schema.generators.base import ArtifactGenerator
from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import DeclarationKind, Export, SchemaGraph
from toolkit_schema.utils import read_text


# ---------------------------------------------------------------------------
# Option layouts
# ---------------------------------------------------------------------------

def _export_option(ns_name: str, export_name: str, export: Export) -> str:
    suffix = "()" if export.type is DeclarationKind.FUNCTION else ""
    return f"`{ns_name}/{export_name}{suffix}`"


def tool_options(graph: SchemaGraph) -> list[str]:
    """Every tool followed by its exports."""
    options: list[str] = []
    for ns_name, tool_name, tool in graph.iter_tools():
        options.append(f"`{ns_name}/{tool_name}`")
        for export_name, export in tool.exports.items():
            options.append(f"  - {_export_option(ns_name, export_name, export)}")
    return options


def catalog_options(graph: SchemaGraph, tail: Iterable[str] = ()) -> list[str]:
    """Namespaces, then tools with their exports, then the fixed *tail*."""
    options = ["Toolkit Namespaces"]
    options.extend(f"  - `{ns_name}`" for ns_name in graph.namespaces)
    options.append("Toolkit Tools")
    for ns_name, tool_name, tool in graph.iter_tools():
        options.append(f"  - `{ns_name}/{tool_name}`")
        for export_name, export in tool.exports.items():
            options.append(f"    + {_export_option(ns_name, export_name, export)}")
    options.extend(tail)
    return options


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class OptionListGenerator(ArtifactGenerator):
    """Rewrites the ``options`` of one body field in each configured form."""

    name = "issue-templates"

    def __init__(self, template_dir: str | Path, option_lists: list[OptionListConfig]) -> None:
        self.template_dir = Path(template_dir)
        self.option_lists = option_lists

    def build_options(self, graph: SchemaGraph, option_list: OptionListConfig) -> list[str]:
        if option_list.layout is OptionLayout.CATALOG:
            return catalog_options(graph, option_list.tail)
        return tool_options(graph) + list(option_list.tail)

    def _find_field(self, path: Path, document: Any, field_id: str) -> dict[str, Any]:
        body = document.get("body") if isinstance(document, dict) else None
        if not isinstance(body, list):
            raise self.error(path, "template has no 'body' list")
        for item in body:
            if isinstance(item, dict) and item.get("id") == field_id:
                return item
        raise self.error(path, f"no body field with id '{field_id}'")

    def render(self, graph: SchemaGraph, option_list: OptionListConfig) -> tuple[Path, str]:
        """Return the destination path and the rewritten form text."""
        path = self.template_dir / option_list.file
        try:
            document = yaml.safe_load(read_text(path))
        except FileNotFoundError:
            raise self.error(path, "file not found") from None
        except yaml.YAMLError as exc:
            raise self.error(path, f"invalid YAML ({exc})") from exc

        field = self._find_field(path, document, option_list.field_id)
        options = self.build_options(graph, option_list)
        attributes = field.setdefault("attributes", {})
        if field.get("type") == "checkboxes":
            attributes["options"] = [{"label": option} for option in options]
        else:
            attributes["options"] = options

        return path, yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

    def generate(self, graph: SchemaGraph, ledger: ChangeLedger) -> list[Path]:
        recorded: list[Path] = []
        for option_list in self.option_lists:
            path, content = self.render(graph, option_list)
            if ledger.record_if_changed(path, content):
                recorded.append(path)
        return recorded
