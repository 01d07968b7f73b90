"""Dependency directive bundling.

Finds ``@bundleDependency`` / ``@inlineDependency`` directives in tool source
files, extracts the referenced declarations from other tools, and records the
rewritten files in a :class:`~toolkit_schema.ledger.ChangeLedger`.
"""

from toolkit_schema.bundler.directives import (
    DependencyDirective,
    Dialect,
    ImportMode,
    destination_for,
    iter_source_files,
    scan_text,
)
from toolkit_schema.bundler.engine import DependencyBundler
from toolkit_schema.bundler.locator import (
    DependencyResolutionError,
    ExportExtractor,
    ResolutionFailure,
    ResolvedDependency,
    candidate_paths,
    locate_source_file,
)
from toolkit_schema.bundler.patterns import GRAMMARS, find_declaration
from toolkit_schema.bundler.rewriter import DirectiveRewriter, reindent

__all__ = [
    "DependencyBundler",
    "DependencyDirective",
    "DependencyResolutionError",
    "Dialect",
    "DirectiveRewriter",
    "ExportExtractor",
    "GRAMMARS",
    "ImportMode",
    "ResolutionFailure",
    "ResolvedDependency",
    "candidate_paths",
    "destination_for",
    "find_declaration",
    "iter_source_files",
    "locate_source_file",
    "reindent",
    "scan_text",
]
