"""Shared utility functions for the Toolkit Schema pipeline.

Provides JSON/text I/O, the atomic stage-then-replace file writer, path
prettifying, and Rich-based console reporting used by every stage.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Text & JSON I/O
# ---------------------------------------------------------------------------


def read_text(path: str | Path) -> str:
    """Read a UTF-8 text file."""
    return Path(path).read_text(encoding="utf-8")


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(read_text(path))


def dump_json(data: Any) -> str:
    """Serialise *data* as 2-space indented JSON terminated by a newline.

    Key order is preserved, so the output is deterministic for a given
    mapping.
    """
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def stage_file(path: Path, content: str) -> Path:
    """Write *content* to a private temporary file beside *path*.

    The temporary lives in the target's directory so that a later
    ``os.replace`` stays on one filesystem and is atomic.

    Returns:
        Path of the staged temporary file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, staged = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
    except BaseException:
        Path(staged).unlink(missing_ok=True)
        raise
    return Path(staged)


def write_atomically(path: str | Path, content: str) -> Path:
    """Replace *path* with *content* without ever leaving it half-written."""
    target = Path(path)
    staged = stage_file(target, content)
    try:
        os.replace(staged, target)
    except BaseException:
        staged.unlink(missing_ok=True)
        raise
    return target


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def indent_output(output: str, prefix: str = "\t") -> str:
    """Indent every line of *output*, including empty ones."""
    return "\n".join(prefix + line for line in output.split("\n"))


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(0.42)   -> "0.4s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


def pretty_path(path: str | Path, root: str | Path | None = None) -> str:
    """Return *path* relative to *root* (default: the working directory).

    Paths outside *root* are returned absolute.
    """
    resolved = Path(path).resolve()
    base = Path(root).resolve() if root is not None else Path.cwd().resolve()
    try:
        return resolved.relative_to(base).as_posix()
    except ValueError:
        return str(resolved)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_COLORS: dict[str, str] = {
    "validate": "bright_cyan",
    "schema": "bright_white",
    "exports": "bright_green",
    "issue-templates": "bright_yellow",
    "readmes": "bright_magenta",
    "bundle": "bright_blue",
}


def print_stage_header(stage: str) -> None:
    """Print a full-width rule announcing a pipeline stage."""
    color = STAGE_COLORS.get(stage, "white")
    console.print(
        Rule(
            f"[bold {color}] {stage.upper()} [/bold {color}]",
            style=color,
        )
    )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
