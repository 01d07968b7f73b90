"""Loading and persisting the toolkit schema document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from toolkit_schema.schema.models import RESERVED_PREFIX, SchemaGraph
from toolkit_schema.utils import dump_json, load_json, write_atomically

if TYPE_CHECKING:
    from toolkit_schema.ledger import ChangeLedger


SCHEMA_MARKER_KEY = "$schema"


class SchemaLoadError(Exception):
    """Raised when the schema document is missing or malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load the toolkit schema {path}: {reason}")


class SchemaStore:
    """Reads and writes ``schema.json``.

    Reserved ``$``-prefixed keys are stripped on load and kept as metadata so
    that :meth:`dumps` can put them back in front of the namespaces.
    """

    def __init__(self, path: str | Path, marker: str | None = None) -> None:
        self.path = Path(path)
        self.marker = marker
        self.metadata: dict[str, Any] = {}

    def load(self) -> SchemaGraph:
        try:
            document = load_json(self.path)
        except FileNotFoundError:
            raise SchemaLoadError(self.path, "file not found") from None
        except json.JSONDecodeError as exc:
            raise SchemaLoadError(self.path, f"invalid JSON ({exc})") from exc

        if not isinstance(document, dict):
            raise SchemaLoadError(self.path, "top-level value must be an object")

        try:
            graph = SchemaGraph.from_document(document)
        except ValidationError as exc:
            raise SchemaLoadError(self.path, str(exc)) from exc

        self.metadata = {
            key: value for key, value in document.items() if key.startswith(RESERVED_PREFIX)
        }
        return graph

    def dumps(self, graph: SchemaGraph) -> str:
        """Serialise *graph* deterministically, metadata keys first."""
        metadata = dict(self.metadata)
        if self.marker and SCHEMA_MARKER_KEY not in metadata:
            metadata = {SCHEMA_MARKER_KEY: self.marker, **metadata}
        return dump_json({**metadata, **graph.to_document()})

    def save(self, graph: SchemaGraph, ledger: "ChangeLedger | None" = None) -> bool:
        """Persist *graph*.

        With a *ledger* the new content is recorded there (only when it
        differs from the file on disk) and nothing is written yet.
        Otherwise the file is replaced atomically.

        Returns:
            ``True`` if a change was recorded or written.
        """
        content = self.dumps(graph)
        if ledger is not None:
            return ledger.record_if_changed(self.path, content)
        write_atomically(self.path, content)
        return True
