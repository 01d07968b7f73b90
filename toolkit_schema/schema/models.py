"""Pydantic v2 models for the toolkit schema graph.

Defines the three-level hierarchy (namespace -> tool -> export) described by
``toolkit/schema.json`` together with the dependency edges between tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field


RESERVED_PREFIX = "$"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class DeclarationKind(str, Enum):
    """The kind of declaration a toolkit export is."""
    TYPE = "type"
    INTERFACE = "interface"
    CLASS = "class"
    FUNCTION = "function"
    CONSTANT = "constant"
    VARIABLE = "variable"
    GLOBAL = "global"

    @property
    def importable(self) -> bool:
        """Global exports mutate the global namespace and cannot be imported."""
        return self is not DeclarationKind.GLOBAL


# ---------------------------------------------------------------------------
# Dependency references
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DependencyReference:
    """A declared edge ``namespace/tool`` from one tool to another."""

    namespace: str
    tool: str

    @classmethod
    def parse(cls, value: str) -> "DependencyReference":
        """Parse ``"namespace/tool"``.

        Raises:
            ValueError: If *value* does not have exactly two non-empty segments.
        """
        parts = value.split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Malformed dependency reference '{value}' (expected 'namespace/tool')")
        return cls(namespace=parts[0].strip(), tool=parts[1].strip())

    def __str__(self) -> str:
        return f"{self.namespace}/{self.tool}"


# ---------------------------------------------------------------------------
# Graph models
# ---------------------------------------------------------------------------

class _Described(BaseModel):
    """Common optional description fields."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    description: Optional[str] = Field(default=None)
    markdown_description: Optional[str] = Field(default=None, alias="markdownDescription")

    @property
    def summary(self) -> str:
        """Markdown description, falling back to the plain description."""
        return self.markdown_description or self.description or ""


class Export(_Described):
    """A declaration exported by a tool."""
    type: DeclarationKind = Field(..., description="Declaration kind of the export")


class Tool(_Described):
    """A tool inside a namespace."""
    exports: dict[str, Export] = Field(default_factory=dict)
    dependencies: list[str] = Field(
        default_factory=list, description="References to other tools, 'namespace/tool'"
    )


class Namespace(_Described):
    """A namespace grouping related tools."""
    tools: dict[str, Tool] = Field(default_factory=dict)


class SchemaGraph(BaseModel):
    """The complete toolkit schema: namespaces keyed by name, in authoring order."""

    namespaces: dict[str, Namespace] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "SchemaGraph":
        """Build a graph from a parsed schema document.

        Reserved keys (those starting with ``$``) are skipped.
        """
        return cls.model_validate({
            "namespaces": {
                key: value
                for key, value in document.items()
                if not key.startswith(RESERVED_PREFIX)
            }
        })

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready document form.

        Keys use their camelCase spelling; fields that were never set, or are
        ``None``, are left out so the authored shape is kept.
        """
        return {
            name: namespace.model_dump(
                mode="json", by_alias=True, exclude_unset=True, exclude_none=True
            )
            for name, namespace in self.namespaces.items()
        }

    # -- Lookup helpers ----------------------------------------------------

    def get_tool(self, namespace: str, tool: str) -> Tool | None:
        ns = self.namespaces.get(namespace)
        if ns is None:
            return None
        return ns.tools.get(tool)

    def iter_tools(self) -> Iterator[tuple[str, str, Tool]]:
        """Yield ``(namespace, tool_name, tool)`` for every tool in order."""
        for ns_name, namespace in self.namespaces.items():
            for tool_name, tool in namespace.tools.items():
                yield ns_name, tool_name, tool

    def dependents(self) -> dict[str, list[str]]:
        """Invert every dependency edge in a single pass.

        Keys are normalized through :meth:`DependencyReference.parse`, so
        the graph must have passed validation.

        Returns:
            Mapping of ``"namespace/tool"`` to the ordered list of tools
            that declare a dependency on it.
        """
        inverted: dict[str, list[str]] = {}
        for ns_name, tool_name, tool in self.iter_tools():
            for dependency in tool.dependencies:
                key = str(DependencyReference.parse(dependency))
                inverted.setdefault(key, []).append(f"{ns_name}/{tool_name}")
        return inverted
