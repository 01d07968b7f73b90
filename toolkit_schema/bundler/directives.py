"""Discovery of dependency directives inside tool source files.

A directive is a comment line of the form::

    /// @bundleDependency arrays.toListString.toListString
    /* @inlineDependency types.isAny.IsAny */

It asks the bundler to splice the named declaration of another tool into
the file at the directive's position.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Dialect(str, Enum):
    """Source-text flavours a tool can be written in."""
    TYPESCRIPT = "ts"
    JAVASCRIPT = "js"

    @property
    def directory(self) -> str:
        """Name of the dialect directory inside a tool."""
        return self.value

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def entry_file(self) -> str:
        """Default entry file of a tool for this dialect."""
        return f"index{self.extension}"


class ImportMode(str, Enum):
    """How an extracted declaration is spliced into the dependent file."""
    BUNDLE = "bundle"
    INLINE = "inline"

    @property
    def aggregate_file_stem(self) -> str:
        """Stem of the per-mode aggregate file a tool may provide."""
        return _AGGREGATE_STEMS[self]


_AGGREGATE_STEMS: dict[ImportMode, str] = {
    ImportMode.BUNDLE: "bundled-deps",
    ImportMode.INLINE: "inlined-deps",
}


# ---------------------------------------------------------------------------
# Directive model
# ---------------------------------------------------------------------------

_DIRECTIVE_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?:"
    r"///?[ \t]*@(?P<line_mode>bundle|inline)Dependency[ \t]+(?P<line_path>\S+)[ \t]*"
    r"|"
    r"/\*\*?[ \t]*@(?P<block_mode>bundle|inline)Dependency[ \t]+(?P<block_path>[^\s*]+)[ \t]*\*/[ \t]*"
    r")$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class DependencyDirective:
    """A single directive found in a source file.

    ``start``/``end`` delimit the directive line (without its newline).
    """

    indent: str
    mode: ImportMode
    path: str
    start: int
    end: int
    line: int

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")


def scan_text(text: str) -> list[DependencyDirective]:
    """Return every directive in *text*, in order of appearance."""
    directives: list[DependencyDirective] = []
    for match in _DIRECTIVE_PATTERN.finditer(text):
        mode = match.group("line_mode") or match.group("block_mode")
        path = match.group("line_path") or match.group("block_path")
        directives.append(
            DependencyDirective(
                indent=match.group("indent"),
                mode=ImportMode(mode),
                path=path,
                start=match.start(),
                end=match.end(),
                line=text.count("\n", 0, match.start()) + 1,
            )
        )
    return directives


# ---------------------------------------------------------------------------
# Source tree helpers
# ---------------------------------------------------------------------------

def iter_source_files(dialect_dir: Path, dialect: Dialect, source_subdir: str = "src") -> list[Path]:
    """List every source file of *dialect* under ``<dialect_dir>/<source_subdir>``."""
    source_dir = dialect_dir / source_subdir
    if not source_dir.is_dir():
        return []
    return sorted(p for p in source_dir.rglob(f"*{dialect.extension}") if p.is_file())


def destination_for(source_file: Path, dialect_dir: Path, source_subdir: str = "src") -> Path:
    """Map a file in the source subtree to its output path.

    ``<tool>/ts/src/a/b.ts`` is written to ``<tool>/ts/a/b.ts``.
    """
    return dialect_dir / source_file.relative_to(dialect_dir / source_subdir)
