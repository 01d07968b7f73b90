"""Regenerates the cross-referenced sections of the toolkit READMEs.

Three levels of README are kept in sync with the graph:

* ``toolkit/README.md``: the namespace index under ``## Namespaces``;
* ``toolkit/<ns>/README.md``: the tool index under ``## Tool List``;
* ``toolkit/<ns>/<tool>/README.md``: the ``Depends On`` and ``Dependents``
  link lists, for tools that have either.

Each section runs from its marker line up to the next heading (or, for
``Depends On``, up to the ``Dependents`` marker). Everything outside the
sections is left untouched.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from toolkit_schema.config import DocsConfig
from toolkit_schema.generators.base import ArtifactGenerator
from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import DependencyReference, SchemaGraph
from toolkit_schema.templates import TemplateRenderer
from toolkit_schema.utils import read_text

_HEADING = re.compile(r"^#", re.MULTILINE)


class CrossReferenceDocGenerator(ArtifactGenerator):
    """Rewrites README index and dependency sections from the graph."""

    name = "readmes"

    def __init__(
        self,
        toolkit_path: str | Path,
        docs: DocsConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.toolkit_path = Path(toolkit_path)
        self.docs = docs or DocsConfig()
        self.renderer = renderer or TemplateRenderer()
        self._dependents_boundary = re.compile(
            r"^[ \t]*" + re.escape(self.docs.dependents_marker.rstrip(":")),
            re.MULTILINE,
        )

    # -- Section editing ---------------------------------------------------

    def replace_section(
        self,
        path: Path,
        text: str,
        marker: str,
        body: str,
        boundary: re.Pattern[str] = _HEADING,
        separate: bool = False,
    ) -> str:
        """Replace the section following *marker* with *body*.

        With *separate*, a blank line is kept between the marker and the
        body. A blank line is always kept before a following heading.

        Raises:
            GeneratorError: If *marker* is missing, or *boundary* is missing
                for a section that is not heading-bounded.
        """
        match = re.search(r"^[ \t]*" + re.escape(marker), text, re.MULTILINE)
        if match is None:
            raise self.error(path, f"missing section '{marker}'")

        start = match.end()
        end_match = boundary.search(text, start)
        if end_match is None and boundary is not _HEADING:
            raise self.error(path, f"section '{marker}' is not followed by '{boundary.pattern}'")
        end = end_match.start() if end_match else len(text)

        section = ("\n\n" if separate else "\n") + body
        if end_match is not None and boundary is _HEADING:
            section += "\n"
        return text[:start] + section + text[end:]

    def _read(self, path: Path) -> str:
        try:
            return read_text(path)
        except FileNotFoundError:
            raise self.error(path, "file not found") from None

    # -- Renderers ---------------------------------------------------------

    def render_index(self, entries: list[tuple[str, str]]) -> str:
        return self.renderer.render(
            "index_section.md.j2",
            {"entries": [{"name": name, "summary": summary} for name, summary in entries]},
        )

    def render_links(self, origin: str, names: list[str]) -> str:
        return self.renderer.render("link_list.md.j2", {"origin": origin, "links": names})

    # -- README documents --------------------------------------------------

    def root_readme(self, graph: SchemaGraph) -> tuple[Path, str]:
        path = self.toolkit_path / self.docs.readme_name
        entries = [(name, ns.summary) for name, ns in graph.namespaces.items()]
        text = self.replace_section(
            path, self._read(path), self.docs.namespace_heading,
            self.render_index(entries), separate=True,
        )
        return path, text

    def namespace_readme(self, graph: SchemaGraph, ns_name: str) -> tuple[Path, str]:
        path = self.toolkit_path / ns_name / self.docs.readme_name
        tools = graph.namespaces[ns_name].tools
        entries = [(name, tool.summary) for name, tool in tools.items()]
        text = self.replace_section(
            path, self._read(path), self.docs.tool_heading,
            self.render_index(entries), separate=True,
        )
        return path, text

    def tool_readme(
        self, ns_name: str, tool_name: str, dependencies: list[str], dependents: list[str]
    ) -> Optional[tuple[Path, str]]:
        """Both dependency sections of one tool, composed into one document."""
        if not dependencies and not dependents:
            return None

        origin = f"{ns_name}/{tool_name}"
        path = self.toolkit_path / ns_name / tool_name / self.docs.readme_name
        text = self._read(path)
        if dependencies:
            text = self.replace_section(
                path, text, self.docs.depends_on_marker,
                self.render_links(origin, dependencies),
                boundary=self._dependents_boundary,
            )
        if dependents:
            text = self.replace_section(
                path, text, self.docs.dependents_marker,
                self.render_links(origin, dependents),
            )
        return path, text

    def generate(self, graph: SchemaGraph, ledger: ChangeLedger) -> list[Path]:
        inverted = graph.dependents()

        documents = [self.root_readme(graph)]
        documents.extend(self.namespace_readme(graph, ns_name) for ns_name in graph.namespaces)
        for ns_name, tool_name, tool in graph.iter_tools():
            dependencies = [str(DependencyReference.parse(dep)) for dep in tool.dependencies]
            document = self.tool_readme(
                ns_name, tool_name, dependencies, inverted.get(f"{ns_name}/{tool_name}", [])
            )
            if document is not None:
                documents.append(document)

        return [path for path, text in documents if ledger.record_if_changed(path, text)]
