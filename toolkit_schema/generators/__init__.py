"""Derived artifact generators: package exports, issue templates, READMEs."""

from toolkit_schema.generators.base import ArtifactGenerator, GeneratorError
from toolkit_schema.generators.exports import ExportMapGenerator
from toolkit_schema.generators.issue_templates import (
    OptionListGenerator,
    catalog_options,
    tool_options,
)
from toolkit_schema.generators.readmes import CrossReferenceDocGenerator

__all__ = [
    "ArtifactGenerator",
    "CrossReferenceDocGenerator",
    "ExportMapGenerator",
    "GeneratorError",
    "OptionListGenerator",
    "catalog_options",
    "tool_options",
]
