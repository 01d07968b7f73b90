"""Resolution of dependency directives to extracted declaration text.

The :class:`ExportExtractor` checks a directive's dotted path against the
schema graph, picks the source file of the dependency tool, and cuts the
declaration out of it with the grammar for the export's kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from toolkit_schema.bundler.directives import DependencyDirective, Dialect, ImportMode
from toolkit_schema.bundler.patterns import find_declaration
from toolkit_schema.schema.models import DeclarationKind, SchemaGraph
from toolkit_schema.utils import read_text


class ResolutionFailure(str, Enum):
    """Why a directive could not be resolved."""
    MALFORMED = "malformed"
    UNKNOWN_NAMESPACE = "unknown namespace"
    UNKNOWN_TOOL = "unknown tool"
    UNKNOWN_EXPORT = "unknown export"
    NON_IMPORTABLE = "non-importable export"
    NO_SOURCE_FILE = "no source file"
    PATTERN_NOT_FOUND = "pattern not found"


class DependencyResolutionError(Exception):
    """Raised when a dependency directive cannot be satisfied.

    Carries as much of the ``namespace.tool.export`` triple as was resolved
    before the failure.
    """

    def __init__(
        self,
        reason: ResolutionFailure,
        dependent: Path,
        mode: ImportMode,
        dependency: str,
        namespace: Optional[str] = None,
        tool: Optional[str] = None,
        export: Optional[str] = None,
        source_file: Optional[Path] = None,
    ) -> None:
        self.reason = reason
        self.dependent = dependent
        self.mode = mode
        self.dependency = dependency
        self.namespace = namespace
        self.tool = tool
        self.export = export
        self.source_file = source_file
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = f"@{self.mode.value}Dependency {self.dependency} in {self.dependent}"
        details = {
            ResolutionFailure.MALFORMED: "expected 'namespace.tool.export'",
            ResolutionFailure.UNKNOWN_NAMESPACE: f"namespace '{self.namespace}' does not exist",
            ResolutionFailure.UNKNOWN_TOOL: (
                f"namespace '{self.namespace}' has no tool '{self.tool}'"
            ),
            ResolutionFailure.UNKNOWN_EXPORT: (
                f"tool '{self.namespace}/{self.tool}' has no export '{self.export}'"
            ),
            ResolutionFailure.NON_IMPORTABLE: (
                f"export '{self.export}' is a global and cannot be imported"
            ),
            ResolutionFailure.NO_SOURCE_FILE: (
                f"no source file found for '{self.namespace}/{self.tool}'"
            ),
            ResolutionFailure.PATTERN_NOT_FOUND: (
                f"declaration of '{self.export}' not found in {self.source_file}"
            ),
        }
        return f"Cannot resolve {where}: {details[self.reason]}"


@dataclass(frozen=True)
class ResolvedDependency:
    """A directive paired with the text that replaces it."""

    directive: DependencyDirective
    namespace: str
    tool: str
    export: str
    kind: DeclarationKind
    source_file: Path
    text: str


# ---------------------------------------------------------------------------
# Candidate lookup
# ---------------------------------------------------------------------------

def candidate_paths(
    dialect_dir: Path, dialect: Dialect, mode: ImportMode, current_file: Path
) -> list[Path]:
    """Ordered source file candidates inside a dependency's dialect directory.

    1. a file named like *current_file*;
    2. the aggregate file for *mode*;
    3. the dialect's entry file.
    """
    candidates = [
        dialect_dir / Path(current_file).name,
        dialect_dir / f"{mode.aggregate_file_stem}{dialect.extension}",
        dialect_dir / dialect.entry_file,
    ]
    return list(dict.fromkeys(candidates))


def locate_source_file(
    dialect_dir: Path, dialect: Dialect, mode: ImportMode, current_file: Path
) -> Optional[Path]:
    """First existing candidate, or ``None`` when there is nothing to read."""
    if not dialect_dir.is_dir():
        return None
    for candidate in candidate_paths(dialect_dir, dialect, mode, current_file):
        if candidate.is_file():
            return candidate
    return None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

class ExportExtractor:
    """Resolves directives against the graph and the toolkit tree."""

    def __init__(self, graph: SchemaGraph, toolkit_path: str | Path) -> None:
        self.graph = graph
        self.toolkit_path = Path(toolkit_path)

    def resolve(
        self, directive: DependencyDirective, dependent_file: Path, dialect: Dialect
    ) -> ResolvedDependency:
        """Resolve *directive*, found in *dependent_file*, to its declaration text.

        Raises:
            DependencyResolutionError: On the first check that fails.
        """
        def fail(reason: ResolutionFailure, **found) -> DependencyResolutionError:
            return DependencyResolutionError(
                reason, dependent_file, directive.mode, directive.path, **found
            )

        segments = directive.segments
        if len(segments) != 3 or not all(segments):
            raise fail(ResolutionFailure.MALFORMED)
        ns_name, tool_name, export_name = segments

        namespace = self.graph.namespaces.get(ns_name)
        if namespace is None:
            raise fail(ResolutionFailure.UNKNOWN_NAMESPACE, namespace=ns_name)

        tool = namespace.tools.get(tool_name)
        if tool is None:
            raise fail(ResolutionFailure.UNKNOWN_TOOL, namespace=ns_name, tool=tool_name)

        found = {"namespace": ns_name, "tool": tool_name, "export": export_name}
        export = tool.exports.get(export_name)
        if export is None:
            raise fail(ResolutionFailure.UNKNOWN_EXPORT, **found)
        if not export.type.importable:
            raise fail(ResolutionFailure.NON_IMPORTABLE, **found)

        dialect_dir = self.toolkit_path / ns_name / tool_name / dialect.directory
        source_file = locate_source_file(dialect_dir, dialect, directive.mode, dependent_file)
        if source_file is None:
            raise fail(ResolutionFailure.NO_SOURCE_FILE, **found)

        source = read_text(source_file)
        span = find_declaration(export.type, dialect, source, export_name)
        if span is None:
            raise fail(ResolutionFailure.PATTERN_NOT_FOUND, source_file=source_file, **found)

        start, end = span
        return ResolvedDependency(
            directive=directive,
            namespace=ns_name,
            tool=tool_name,
            export=export_name,
            kind=export.type,
            source_file=source_file,
            text=source[start:end],
        )
