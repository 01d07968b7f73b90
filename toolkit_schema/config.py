"""Toolkit Schema configuration.

Centralised, typed configuration for the schema pipeline. All settings use
Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, Field, field_validator


class Stage(str, Enum):
    """A selectable pipeline stage, declared in execution order."""

    VALIDATE = "validate"
    SCHEMA = "schema"
    EXPORTS = "exports"
    ISSUE_TEMPLATES = "issue-templates"
    READMES = "readmes"
    BUNDLE = "bundle"


STAGE_ORDER: list[Stage] = list(Stage)


class OptionLayout(str, Enum):
    """How an issue-template option list is laid out."""

    TOOLS = "tools"
    CATALOG = "catalog"


DEFAULT_HOUSEKEEPING_OPTIONS: list[str] = [
    "Project Documentation",
    "API Documentation Wiki",
    "Project Layout, Organization, or Architecture",
    "Code Snippet Usage",
    "NPM Package Installation, Deployment, or Usage",
    "Contributing",
    "Other",
]


class OptionListConfig(BaseModel):
    """One issue template whose option list is derived from the schema."""

    file: str = Field(..., description="File name inside the issue template directory")
    field_id: str = Field(..., description="The ``id`` of the body field to rewrite")
    layout: OptionLayout = Field(default=OptionLayout.TOOLS)
    tail: list[str] = Field(
        default_factory=list,
        description="Options appended verbatim after the schema-derived ones",
    )


def _default_option_lists() -> list[OptionListConfig]:
    return [
        OptionListConfig(
            file="1-toolkit-tool-issue.yml",
            field_id="tools",
            layout=OptionLayout.TOOLS,
        ),
        OptionListConfig(
            file="3-requests-and-suggestions.yml",
            field_id="type",
            layout=OptionLayout.CATALOG,
            tail=list(DEFAULT_HOUSEKEEPING_OPTIONS),
        ),
    ]


class BundleConfig(BaseModel):
    """Settings for dependency directive bundling."""

    dialects: list[str] = Field(
        default=["ts", "js"],
        description="Dialect directories to scan, in order",
    )
    source_subdir: str = Field(
        default="src",
        description="Subdirectory of a dialect directory holding unbundled sources",
    )
    inline_marker: str = Field(
        default="// Inlined TypeScript Toolkit Dependency",
        description="Comment line placed above every inlined dependency",
    )

    @field_validator("dialects")
    @classmethod
    def _known_dialects(cls, value: list[str]) -> list[str]:
        unknown = [d for d in value if d not in ("ts", "js")]
        if unknown:
            raise ValueError(f"Unknown dialect(s): {', '.join(unknown)}")
        return value


class DocsConfig(BaseModel):
    """Markers delimiting the README sections rewritten from the schema."""

    readme_name: str = Field(default="README.md")
    namespace_heading: str = Field(default="## Namespaces")
    tool_heading: str = Field(default="## Tool List")
    depends_on_marker: str = Field(default="- **Depends On**:")
    dependents_marker: str = Field(default="- **Dependents**:")


class Config(BaseModel):
    """Global Toolkit Schema configuration.

    Holds every tuneable parameter and derived path used by the pipeline.
    Instances are typically created once by the CLI entry point and then
    passed to ``Pipeline``.
    """

    root_dir: Path = Field(default=Path("."))
    toolkit_dir: str = Field(default="toolkit")
    schema_file: str = Field(default="schema.json")
    schema_marker: str = Field(
        default="./schema.schema.json",
        description="Value of the ``$schema`` key written when none was loaded",
    )
    package_file: str = Field(default="package.json")
    dist_dir: str = Field(default="./dist")
    issue_template_dir: str = Field(default=".github/ISSUE_TEMPLATE")
    issue_templates: list[OptionListConfig] = Field(default_factory=_default_option_lists)
    bundle: BundleConfig = Field(default_factory=BundleConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)

    # Stage control -- which pipeline stages to execute.
    stages: list[Stage] = Field(default_factory=lambda: list(STAGE_ORDER))
    dry_run: bool = Field(default=False, description="Report changes instead of writing them")

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def toolkit_path(self) -> Path:
        """Root of the toolkit source tree."""
        return self.root_dir / self.toolkit_dir

    @property
    def schema_path(self) -> Path:
        """Path to the toolkit schema document."""
        return self.toolkit_path / self.schema_file

    @property
    def package_path(self) -> Path:
        """Path to the package manifest holding the export map."""
        return self.root_dir / self.package_file

    @property
    def issue_template_path(self) -> Path:
        """Directory holding the issue intake forms."""
        return self.root_dir / self.issue_template_dir

    # ------------------------------------------------------------------
    # Stage selection
    # ------------------------------------------------------------------

    def is_enabled(self, stage: Stage) -> bool:
        return stage in self.stages

    @staticmethod
    def select_stages(names: Iterable[str], skip: bool = False) -> list[Stage]:
        """Resolve CLI stage names into an ordered stage list.

        With no names every stage is selected. Otherwise only the named
        stages run, or, when *skip* is set, every stage except the named
        ones.

        Raises:
            ValueError: If a name is not a known stage.
        """
        requested: set[Stage] = set()
        for name in names:
            try:
                requested.add(Stage(name.strip().lower()))
            except ValueError:
                valid = ", ".join(s.value for s in STAGE_ORDER)
                raise ValueError(f"Unknown stage '{name}' (expected one of: {valid})") from None

        if not requested:
            return list(STAGE_ORDER)
        if skip:
            return [s for s in STAGE_ORDER if s not in requested]
        return [s for s in STAGE_ORDER if s in requested]

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            TOOLKIT_ROOT, TOOLKIT_DIR, TOOLKIT_DIST_DIR, TOOLKIT_STAGES,
            TOOLKIT_DRY_RUN, TOOLKIT_INLINE_MARKER.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("TOOLKIT_ROOT"):
            kwargs["root_dir"] = Path(os.environ["TOOLKIT_ROOT"])
        if os.environ.get("TOOLKIT_DIR"):
            kwargs["toolkit_dir"] = os.environ["TOOLKIT_DIR"]
        if os.environ.get("TOOLKIT_DIST_DIR"):
            kwargs["dist_dir"] = os.environ["TOOLKIT_DIST_DIR"]
        if os.environ.get("TOOLKIT_INLINE_MARKER"):
            kwargs["bundle"] = BundleConfig(inline_marker=os.environ["TOOLKIT_INLINE_MARKER"])

        stages_str = os.environ.get("TOOLKIT_STAGES", "")
        kwargs["stages"] = cls.select_stages(s for s in stages_str.split(",") if s.strip())

        dry_run = os.environ.get("TOOLKIT_DRY_RUN", "").strip().lower()
        kwargs["dry_run"] = dry_run in ("1", "true", "yes", "on")

        return cls(**kwargs)
