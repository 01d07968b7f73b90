"""Common interface of the derived artifact generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import SchemaGraph


class GeneratorError(Exception):
    """Raised when a generator's input document is missing or malformed."""

    def __init__(self, generator: str, path: Path, message: str) -> None:
        self.generator = generator
        self.path = path
        super().__init__(f"{generator}: {path}: {message}")


class ArtifactGenerator(ABC):
    """Derives one family of files from the schema graph.

    Generators only read from disk. Every rewritten file is recorded in the
    ledger, and only when its content actually changes.
    """

    name: str = "generator"

    @abstractmethod
    def generate(self, graph: SchemaGraph, ledger: ChangeLedger) -> list[Path]:
        """Record regenerated files in *ledger*.

        Returns:
            Paths recorded in this call.

        Raises:
            GeneratorError: If an input document cannot be used.
        """

    def error(self, path: Path, message: str) -> GeneratorError:
        return GeneratorError(self.name, path, message)
