"""Pipeline smoke tests for Toolkit Schema.

These tests run every stage of the orchestrator against the sample project
tree from ``conftest.py`` and check the files it leaves behind.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from conftest import BUNDLED_HELPER
from toolkit_schema.bundler import scan_text
from toolkit_schema.config import Config
from toolkit_schema.pipeline import Pipeline


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.mark.integration
class TestPipelineSmoke:
    """Full runs over the sample toolkit."""

    def test_full_run_updates_every_artifact(self, config: Config, project_root: Path) -> None:
        state = Pipeline(config).run()
        assert state["success"] is True, state["error"]
        assert state["stages_completed"] == [
            "validate", "schema", "exports", "issue-templates", "readmes", "bundle",
        ]

        toolkit = project_root / "toolkit"
        manifest = json.loads(_read(project_root / "package.json"))
        assert manifest["exports"]["./core/util"] == "./dist/core/util/index.js"

        form = yaml.safe_load(_read(project_root / ".github" / "ISSUE_TEMPLATE" / "1-toolkit-tool-issue.yml"))
        labels = [o["label"] for o in form["body"][1]["attributes"]["options"]]
        assert labels[:2] == ["`core/util`", "  - `core/helper()`"]

        assert "- [`core`](core): Core helpers" in _read(toolkit / "README.md")
        assert "[`app/main`](../../app/main)" in _read(toolkit / "core" / "util" / "README.md")

        bundled = _read(toolkit / "app" / "main" / "ts" / "index.ts")
        assert bundled.startswith(BUNDLED_HELPER + "\n\n")
        assert scan_text(bundled) == []
        assert (toolkit / "app" / "main" / "js" / "index.js").is_file()

        assert not list(project_root.rglob("*.tmp"))

    def test_second_run_is_a_no_op(self, config: Config, project_root: Path) -> None:
        assert Pipeline(config).run()["success"] is True
        snapshot = {p: _read(p) for p in project_root.rglob("*") if p.is_file()}

        state = Pipeline(config).run()

        assert state["success"] is True
        assert state["changes"] == []
        assert {p: _read(p) for p in project_root.rglob("*") if p.is_file()} == snapshot

    def test_dry_run_writes_nothing(self, config: Config, project_root: Path) -> None:
        snapshot = {p: _read(p) for p in project_root.rglob("*") if p.is_file()}
        config.dry_run = True

        pipeline = Pipeline(config)
        state = pipeline.run()

        assert state["success"] is True
        assert len(pipeline.ledger) == len(state["changes"]) > 0
        assert {p: _read(p) for p in project_root.rglob("*") if p.is_file()} == snapshot

    def test_unknown_export_aborts_bundling(self, config: Config, project_root: Path) -> None:
        source = project_root / "toolkit" / "app" / "main" / "ts" / "src" / "index.ts"
        source.write_text("// @bundleDependency core.util.nonexistentExport\n", encoding="utf-8")

        pipeline = Pipeline(config)
        state = pipeline.run()

        assert state["success"] is False
        assert state["stages_failed"] == ["bundle"]
        assert "nonexistentExport" in state["error"]
        assert not (project_root / "toolkit" / "app" / "main" / "ts" / "index.ts").exists()
