"""Bundling driver: scanner -> extractor -> rewriter, once per source file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from toolkit_schema.bundler.directives import (
    Dialect,
    destination_for,
    iter_source_files,
    scan_text,
)
from toolkit_schema.bundler.locator import ExportExtractor, ResolvedDependency
from toolkit_schema.bundler.rewriter import DEFAULT_INLINE_MARKER, DirectiveRewriter
from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import SchemaGraph
from toolkit_schema.utils import console, pretty_path, read_text

if TYPE_CHECKING:
    from toolkit_schema.config import Config


class DependencyBundler:
    """Rewrites every tool source file that contains dependency directives.

    Each file is resolved completely before anything is recorded, so a
    failing directive never leaves a partly bundled file in the ledger.
    """

    def __init__(
        self,
        graph: SchemaGraph,
        toolkit_path: str | Path,
        ledger: ChangeLedger,
        dialects: Iterable[str | Dialect] = (Dialect.TYPESCRIPT, Dialect.JAVASCRIPT),
        source_subdir: str = "src",
        inline_marker: str = DEFAULT_INLINE_MARKER,
    ) -> None:
        self.graph = graph
        self.toolkit_path = Path(toolkit_path)
        self.ledger = ledger
        self.dialects = [Dialect(d) for d in dialects]
        self.source_subdir = source_subdir
        self.extractor = ExportExtractor(graph, self.toolkit_path)
        self.rewriter = DirectiveRewriter(inline_marker)

    @classmethod
    def from_config(
        cls, config: "Config", graph: SchemaGraph, ledger: ChangeLedger
    ) -> "DependencyBundler":
        return cls(
            graph,
            config.toolkit_path,
            ledger,
            dialects=config.bundle.dialects,
            source_subdir=config.bundle.source_subdir,
            inline_marker=config.bundle.inline_marker,
        )

    def run(self) -> list[Path]:
        """Bundle every tool in the graph.

        Returns:
            Destination paths recorded in the ledger.
        """
        recorded: list[Path] = []
        for ns_name, tool_name, _tool in self.graph.iter_tools():
            tool_dir = self.toolkit_path / ns_name / tool_name
            for dialect in self.dialects:
                dialect_dir = tool_dir / dialect.directory
                for source_file in iter_source_files(dialect_dir, dialect, self.source_subdir):
                    destination = self.bundle_file(source_file, dialect_dir, dialect)
                    if destination is not None:
                        recorded.append(destination)
        return recorded

    def resolve_file(self, source_file: Path, dialect: Dialect) -> tuple[str, list[ResolvedDependency]]:
        """Read *source_file* and resolve each of its directives."""
        text = read_text(source_file)
        resolved = [
            self.extractor.resolve(directive, source_file, dialect)
            for directive in scan_text(text)
        ]
        return text, resolved

    def bundle_file(self, source_file: Path, dialect_dir: Path, dialect: Dialect) -> Path | None:
        """Rewrite one source file into the ledger.

        Returns:
            The destination path, or ``None`` when the file has no directives
            or its bundled output is already up to date.

        Raises:
            DependencyResolutionError: If any directive cannot be resolved.
            LedgerConflictError: If the destination was already recorded.
        """
        text, resolved = self.resolve_file(source_file, dialect)
        if not resolved:
            return None

        destination = destination_for(source_file, dialect_dir, self.source_subdir)
        if not self.ledger.record_if_changed(destination, self.rewriter.rewrite(text, resolved)):
            return None
        console.print(
            f"  [blue]~[/blue] Bundled {len(resolved)} "
            f"{'dependency' if len(resolved) == 1 else 'dependencies'} into "
            f"{pretty_path(destination, self.ledger.root)}",
            highlight=False,
        )
        return destination
