"""Structural validation of the schema graph against the toolkit directory.

Validation stops at the first problem it finds. Run it again after fixing
an issue to see the next one.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from toolkit_schema.schema.models import DependencyReference, SchemaGraph


class ValidationErrorKind(str, Enum):
    """Whether the schema content or the directory layout needs fixing."""
    SYNTAX = "syntaxError"
    DIRECTORY = "directoryError"


class SchemaValidationError(Exception):
    """Raised when the schema graph is inconsistent."""

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str,
        namespace: str,
        tool: Optional[str] = None,
        dependency: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.namespace = namespace
        self.tool = tool
        self.dependency = dependency
        super().__init__(f"[{kind.value}] {message}")


class DirectoryOracle:
    """Read-only directory existence probe.

    Not cached: the filesystem is the source of truth.
    """

    def exists(self, path: Path) -> bool:
        return Path(path).is_dir()


class SchemaValidator:
    """Cross-checks a :class:`SchemaGraph` against itself and the disk."""

    def __init__(self, toolkit_path: str | Path, oracle: DirectoryOracle | None = None) -> None:
        self.toolkit_path = Path(toolkit_path)
        self.oracle = oracle or DirectoryOracle()

    def validate(self, graph: SchemaGraph) -> None:
        """Validate *graph*, raising on the first problem.

        Raises:
            SchemaValidationError: ``syntaxError`` when a dependency does not
                resolve inside the graph, ``directoryError`` when a namespace
                or tool directory is missing.
        """
        for ns_name, namespace in graph.namespaces.items():
            ns_dir = self.toolkit_path / ns_name
            if not self.oracle.exists(ns_dir):
                raise SchemaValidationError(
                    ValidationErrorKind.DIRECTORY,
                    f"Namespace '{ns_name}' has no directory at {ns_dir}",
                    namespace=ns_name,
                )

            for tool_name, tool in namespace.tools.items():
                for dependency in tool.dependencies:
                    self._check_dependency(graph, ns_name, tool_name, dependency)

                tool_dir = ns_dir / tool_name
                if not self.oracle.exists(tool_dir):
                    raise SchemaValidationError(
                        ValidationErrorKind.DIRECTORY,
                        f"Tool '{ns_name}/{tool_name}' has no directory at {tool_dir}",
                        namespace=ns_name,
                        tool=tool_name,
                    )

    def _check_dependency(
        self, graph: SchemaGraph, ns_name: str, tool_name: str, dependency: str
    ) -> None:
        owner = f"{ns_name}/{tool_name}"
        try:
            ref = DependencyReference.parse(dependency)
        except ValueError as exc:
            raise SchemaValidationError(
                ValidationErrorKind.SYNTAX,
                f"Tool '{owner}': {exc}",
                namespace=ns_name,
                tool=tool_name,
                dependency=dependency,
            ) from None

        target_ns = graph.namespaces.get(ref.namespace)
        if target_ns is None:
            raise SchemaValidationError(
                ValidationErrorKind.SYNTAX,
                f"Tool '{owner}' depends on '{dependency}' but namespace "
                f"'{ref.namespace}' does not exist",
                namespace=ref.namespace,
                tool=ref.tool,
                dependency=dependency,
            )
        if ref.tool not in target_ns.tools:
            raise SchemaValidationError(
                ValidationErrorKind.SYNTAX,
                f"Tool '{owner}' depends on '{dependency}' but namespace "
                f"'{ref.namespace}' has no tool '{ref.tool}'",
                namespace=ref.namespace,
                tool=ref.tool,
                dependency=dependency,
            )
