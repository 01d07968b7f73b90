"""Toolkit Schema Pipeline Orchestrator.

Runs the schema-driven stages in a fixed order, all writing into one
shared change ledger:

validate        -- Check the graph against itself and the toolkit directory.
schema          -- Re-serialise ``schema.json`` in canonical form.
exports         -- Rebuild the ``package.json`` export map.
issue-templates -- Rebuild the tool option lists of the issue forms.
readmes         -- Rebuild the cross-referenced README sections.
bundle          -- Splice dependency declarations into tool sources.

The ledger is committed once every selected stage has succeeded. In dry-run
mode it is reported instead, including after a failure.

Usage::

    python -m toolkit_schema.pipeline
    python -m toolkit_schema.pipeline readmes exports --dry-run
    python -m toolkit_schema.pipeline bundle --skip --root ../my-toolkit
"""

from __future__ import annotations

import sys
import time
import traceback
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from rich.panel import Panel

from toolkit_schema.bundler import DependencyBundler, DependencyResolutionError
from toolkit_schema.config import STAGE_ORDER, Config, Stage
from toolkit_schema.generators import (
    CrossReferenceDocGenerator,
    ExportMapGenerator,
    GeneratorError,
    OptionListGenerator,
)
from toolkit_schema.ledger import ChangeLedger, LedgerConflictError
from toolkit_schema.schema import (
    SchemaGraph,
    SchemaLoadError,
    SchemaStore,
    SchemaValidationError,
    SchemaValidator,
)
from toolkit_schema.utils import (
    console,
    format_duration,
    pretty_path,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)

# Errors raised for bad schema or toolkit content. They end the run with a
# plain message; anything else is reported with a traceback.
FATAL_ERRORS: tuple[type[Exception], ...] = (
    SchemaLoadError,
    SchemaValidationError,
    DependencyResolutionError,
    LedgerConflictError,
    GeneratorError,
)


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Toolkit Schema Pipeline Orchestrator.

    Attributes:
        config: Pipeline configuration.
        ledger: Pending file changes shared by every stage.
        state: Results accumulated while running, returned by :meth:`run`.
    """

    def __init__(self, config: Config, ledger: ChangeLedger | None = None) -> None:
        self.config = config
        self.ledger = ledger if ledger is not None else ChangeLedger(root=config.root_dir)
        self.store = SchemaStore(config.schema_path, marker=config.schema_marker)
        self.graph: Optional[SchemaGraph] = None
        self.state: dict[str, Any] = {
            "stages_completed": [],
            "stages_failed": [],
            "changes": [],
            "error": None,
            "success": False,
        }

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def stage_validate(self, graph: SchemaGraph) -> list[Path]:
        SchemaValidator(self.config.toolkit_path).validate(graph)
        console.print(
            f"  [green]+[/green] {len(graph.namespaces)} namespace(s), "
            f"{sum(1 for _ in graph.iter_tools())} tool(s) checked"
        )
        return []

    def stage_schema(self, graph: SchemaGraph) -> list[Path]:
        if self.store.save(graph, self.ledger):
            return [self.store.path]
        return []

    def stage_exports(self, graph: SchemaGraph) -> list[Path]:
        generator = ExportMapGenerator(self.config.package_path, self.config.dist_dir)
        return generator.generate(graph, self.ledger)

    def stage_issue_templates(self, graph: SchemaGraph) -> list[Path]:
        generator = OptionListGenerator(
            self.config.issue_template_path, self.config.issue_templates
        )
        return generator.generate(graph, self.ledger)

    def stage_readmes(self, graph: SchemaGraph) -> list[Path]:
        generator = CrossReferenceDocGenerator(self.config.toolkit_path, self.config.docs)
        return generator.generate(graph, self.ledger)

    def stage_bundle(self, graph: SchemaGraph) -> list[Path]:
        return DependencyBundler.from_config(self.config, graph, self.ledger).run()

    def _stage_method(self, stage: Stage) -> Callable[[SchemaGraph], list[Path]]:
        return getattr(self, f"stage_{stage.name.lower()}")

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> dict[str, Any]:
        """Execute the selected stages, then commit or report the ledger.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean.
        """
        pipeline_start = time.monotonic()
        stages = [s for s in STAGE_ORDER if self.config.is_enabled(s)]

        console.print(
            Panel(
                f"[bold bright_cyan]Toolkit Schema Pipeline[/bold bright_cyan]\n"
                f"Root    : {self.config.root_dir.resolve()}\n"
                f"Schema  : {pretty_path(self.config.schema_path, self.config.root_dir)}\n"
                f"Stages  : {', '.join(s.value for s in stages) or 'none'}\n"
                f"Mode    : {'dry run' if self.config.dry_run else 'write'}",
                title="[bold]Pipeline Start[/bold]",
                border_style="bright_cyan",
            )
        )

        all_success = self._run_stages(stages)

        if all_success:
            all_success = self._commit()
        elif self.config.dry_run and len(self.ledger):
            print_warning("Changes recorded before the failure:")
            self.ledger.commit(preview=True)

        self.state["success"] = all_success
        self.state["total_duration"] = format_duration(time.monotonic() - pipeline_start)
        self._print_final_summary()
        return self.state

    def _run_stages(self, stages: Sequence[Stage]) -> bool:
        try:
            self.graph = self.store.load()
        except SchemaLoadError as exc:
            self.state["error"] = str(exc)
            print_error(str(exc))
            return False

        for stage in stages:
            print_stage_header(stage.value)
            stage_start = time.monotonic()
            try:
                recorded = self._stage_method(stage)(self.graph)
            except FATAL_ERRORS as exc:
                self._fail(stage, stage_start, exc)
                return False
            except Exception as exc:
                self._fail(stage, stage_start, exc)
                console.print(traceback.format_exc(), style="dim", markup=False)
                return False

            self.state["stages_completed"].append(stage.value)
            self.state["changes"].extend(str(p) for p in recorded)
            print_success(
                f"{stage.value}: {len(recorded)} change(s) recorded in "
                f"{format_duration(time.monotonic() - stage_start)}"
            )
        return True

    def _fail(self, stage: Stage, stage_start: float, exc: Exception) -> None:
        self.state["stages_failed"].append(stage.value)
        self.state["error"] = str(exc)
        print_error(
            f"{stage.value} FAILED after "
            f"{format_duration(time.monotonic() - stage_start)}: {exc}"
        )

    def _commit(self) -> bool:
        if not len(self.ledger):
            console.print("  Everything is up to date.")
            return True
        try:
            self.ledger.commit(preview=self.config.dry_run)
        except OSError as exc:
            self.state["error"] = str(exc)
            print_error(f"Failed to write changes: {exc}")
            return False
        return True

    def _print_final_summary(self) -> None:
        summary = {
            "Status": "succeeded" if self.state["success"] else "FAILED",
            "Completed": ", ".join(self.state["stages_completed"]) or "none",
            "Changes": str(len(self.state["changes"])),
            "Mode": "dry run" if self.config.dry_run else "write",
            "Duration": self.state["total_duration"],
        }
        if self.state["stages_failed"]:
            summary["Failed"] = ", ".join(self.state["stages_failed"])
        console.print()
        print_summary_table(summary, title="Toolkit Schema")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``toolkit-schema`` / ``python -m toolkit_schema.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="toolkit-schema",
        description=(
            "Validate the toolkit schema (toolkit/schema.json) and update the "
            "project files derived from it."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Stages: " + ", ".join(s.value for s in STAGE_ORDER) + "\n\n"
            "Examples:\n"
            "  toolkit-schema\n"
            "  toolkit-schema readmes exports --dry-run\n"
            "  toolkit-schema bundle --skip\n"
        ),
    )
    parser.add_argument(
        "stages",
        nargs="*",
        metavar="STAGE",
        help="Stages to run (default: all stages)",
    )
    parser.add_argument(
        "--skip",
        action="store_true",
        help="Run every stage except the named ones",
    )
    parser.add_argument(
        "-d", "--dry-run",
        action="store_true",
        help="Show what changes would be made without writing them",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root holding the toolkit directory (default: .)",
    )

    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
        if args.stages or args.skip:
            config.stages = Config.select_stages(args.stages, skip=args.skip)
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}", highlight=False)
        sys.exit(1)

    if args.root is not None:
        config.root_dir = Path(args.root)
    if args.dry_run:
        config.dry_run = True

    result = Pipeline(config).run()

    if result.get("success"):
        console.print("[bold green]Pipeline completed successfully![/bold green]")
    else:
        console.print("[bold red]Pipeline failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
