"""Toolkit schema graph: models, persistence and validation.

Usage::

    from toolkit_schema.schema import SchemaStore, SchemaValidator

    store = SchemaStore("toolkit/schema.json")
    graph = store.load()
    SchemaValidator("toolkit").validate(graph)
"""

from toolkit_schema.schema.models import (
    DeclarationKind,
    DependencyReference,
    Export,
    Namespace,
    SchemaGraph,
    Tool,
)
from toolkit_schema.schema.store import SchemaLoadError, SchemaStore
from toolkit_schema.schema.validator import (
    DirectoryOracle,
    SchemaValidationError,
    SchemaValidator,
    ValidationErrorKind,
)

__all__ = [
    "DeclarationKind",
    "DependencyReference",
    "Export",
    "Namespace",
    "SchemaGraph",
    "Tool",
    "SchemaStore",
    "SchemaLoadError",
    "SchemaValidator",
    "SchemaValidationError",
    "ValidationErrorKind",
    "DirectoryOracle",
]
