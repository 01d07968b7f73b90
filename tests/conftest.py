"""Shared pytest fixtures for the Toolkit Schema test suite.

Provides reusable fixtures for:
- The sample schema document and its parsed graph
- A throw-away project tree (toolkit sources, READMEs, package manifest,
  issue templates) built under ``tmp_path``
- A ``Config`` and ``ChangeLedger`` rooted at that tree
"""

from __future__ import annotations

import copy
import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from toolkit_schema.config import Config
from toolkit_schema.ledger import ChangeLedger
from toolkit_schema.schema.models import SchemaGraph


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

SAMPLE_SCHEMA: dict[str, Any] = {
    "$schema": "./schema.schema.json",
    "core": {
        "description": "Core helpers",
        "tools": {
            "util": {
                "description": "Utility functions",
                "exports": {
                    "helper": {"type": "function", "description": "Doubles a number"},
                    "Helper": {"type": "type"},
                    "VERSION": {"type": "constant"},
                    "install": {"type": "global"},
                },
            },
        },
    },
    "app": {
        "markdownDescription": "The `app` namespace",
        "tools": {
            "main": {
                "description": "Entry point",
                "exports": {"run": {"type": "function"}},
                "dependencies": ["core/util"],
            },
        },
    },
}

UTIL_TS = """\
/**
 * Doubles a number.
 */
export function helper(value: number): number {
    return value * 2;
}

/** A helper signature. */
export type Helper = (value: number) => number;

export const VERSION = "1.0";
"""

UTIL_JS = """\
// Helper Type
/**
 * @typedef {(value: number) => number} Helper
 */

/**
 * Doubles a number.
 * @param {number} value
 */
export function helper(value) {
    return value * 2;
}
"""

MAIN_TS_SRC = """\
/// @bundleDependency core.util.helper

export function run(): number {
    return helper(21);
}
"""

MAIN_JS_SRC = """\
/* @inlineDependency core.util.Helper */

/** @type {Helper} */
export const run = (value) => value;
"""

BUNDLED_HELPER = """\
/**
 * Doubles a number.
 */
export function helper(value: number): number {
    return value * 2;
}"""

ROOT_README = """\
# Toolkit

Intro.

## Namespaces

- stale

## License

MIT
"""

CORE_README = """\
# core

## Tool List

- old

## Notes
"""

APP_README = """\
# app

## Tool List
"""

UTIL_README = """\
# util

- **Depends On**:
- **Dependents**:
  - stale

## Usage
"""

MAIN_README = """\
# main

- **Depends On**: None
- **Dependents**:

## Usage
"""

TOOL_ISSUE_TEMPLATE = """\
name: Toolkit Tool Issue Report
description: Report an Issue with a Tool.
labels: ["bug", "toolkit tool"]
body:
  - type: textarea
    id: searchTerms
    attributes:
      label: Search Terms
  - type: checkboxes
    id: tools
    attributes:
      label: Affected Tools
      options:
        - label: "`old/tool`"
    validations:
      required: true
"""

REQUESTS_TEMPLATE = """\
name: Feature Request or Suggestion
description: Suggest an idea.
body:
  - type: dropdown
    id: type
    attributes:
      label: Request Type
      multiple: true
      options:
        - Other
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write(path: Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def schema_document() -> dict[str, Any]:
    """A deep copy of the sample schema document."""
    return copy.deepcopy(SAMPLE_SCHEMA)


@pytest.fixture
def graph(schema_document: dict[str, Any]) -> SchemaGraph:
    return SchemaGraph.from_document(schema_document)


@pytest.fixture
def project_root(tmp_path: Path, schema_document: dict[str, Any]) -> Path:
    """A complete sample project tree.

    Layout::

        package.json
        .github/ISSUE_TEMPLATE/{1-toolkit-tool-issue,3-requests-and-suggestions}.yml
        toolkit/schema.json, README.md
        toolkit/core/README.md, util/{README.md, ts/index.ts, js/index.js}
        toolkit/app/README.md, main/{README.md, ts/src/index.ts, js/src/index.js}
    """
    root = tmp_path / "project"
    toolkit = root / "toolkit"

    write(toolkit / "schema.json", json.dumps(schema_document, indent=2) + "\n")
    write(toolkit / "README.md", ROOT_README)
    write(toolkit / "core" / "README.md", CORE_README)
    write(toolkit / "core" / "util" / "README.md", UTIL_README)
    write(toolkit / "core" / "util" / "ts" / "index.ts", UTIL_TS)
    write(toolkit / "core" / "util" / "js" / "index.js", UTIL_JS)
    write(toolkit / "app" / "README.md", APP_README)
    write(toolkit / "app" / "main" / "README.md", MAIN_README)
    write(toolkit / "app" / "main" / "ts" / "src" / "index.ts", MAIN_TS_SRC)
    write(toolkit / "app" / "main" / "js" / "src" / "index.js", MAIN_JS_SRC)

    write(
        root / "package.json",
        json.dumps(
            {
                "name": "toolkit",
                "version": "1.0.0",
                "exports": {".": "./dist/index.js"},
                "scripts": {"build": "tsc"},
            },
            indent=2,
        ) + "\n",
    )
    templates = root / ".github" / "ISSUE_TEMPLATE"
    write(templates / "1-toolkit-tool-issue.yml", TOOL_ISSUE_TEMPLATE)
    write(templates / "3-requests-and-suggestions.yml", REQUESTS_TEMPLATE)
    yield root


@pytest.fixture
def toolkit_path(project_root: Path) -> Path:
    return project_root / "toolkit"


@pytest.fixture
def config(project_root: Path) -> Config:
    """Configuration rooted at the sample project."""
    return Config(root_dir=project_root)


@pytest.fixture
def ledger(project_root: Path) -> ChangeLedger:
    return ChangeLedger(root=project_root)
