"""Change Ledger: the staging map of every pending file rewrite in a run.

Generators and the bundler never touch disk directly. They record the full
replacement content of each destination file here, and the ledger is
committed (or previewed) once at the end of the run.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from toolkit_schema.utils import console, indent_output, pretty_path, read_text, stage_file


class LedgerConflictError(Exception):
    """Raised when two derivations target the same destination file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Conflicting changes: {path} was already recorded in this run"
        )


class ChangeLedger:
    """Pending file contents keyed by absolute destination path.

    A path may be recorded at most once per run.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root is not None else None
        self._changes: dict[Path, str] = {}

    # -- Recording ---------------------------------------------------------

    @staticmethod
    def _key(path: str | Path) -> Path:
        return Path(path).resolve()

    def record(self, path: str | Path, content: str) -> None:
        """Record the new *content* of *path*.

        Raises:
            LedgerConflictError: If *path* was already recorded.
        """
        key = self._key(path)
        if key in self._changes:
            raise LedgerConflictError(key)
        self._changes[key] = content

    def record_if_changed(self, path: str | Path, content: str) -> bool:
        """Record *content* only if it differs from what is on disk.

        The conflict check applies whether or not the content changed.

        Returns:
            ``True`` if the change was recorded.
        """
        key = self._key(path)
        if key in self._changes:
            raise LedgerConflictError(key)
        if key.is_file() and read_text(key) == content:
            return False
        self._changes[key] = content
        return True

    # -- Inspection --------------------------------------------------------

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self._key(path) in self._changes

    def __len__(self) -> int:
        return len(self._changes)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._changes)

    def get(self, path: str | Path) -> str | None:
        return self._changes.get(self._key(path))

    def items(self) -> list[tuple[Path, str]]:
        return list(self._changes.items())

    def clear(self) -> None:
        self._changes.clear()

    # -- Committing --------------------------------------------------------

    def render_report(self) -> str:
        """Human-readable listing of every pending change."""
        sections = []
        for path, content in self._changes.items():
            sections.append(
                f"Changes to be made to file {pretty_path(path, self.root)}:\n"
                f"{indent_output(content)}"
            )
        return "\n\n".join(sections)

    def commit(self, preview: bool = False) -> list[Path]:
        """Flush every recorded change.

        In preview mode nothing is written: the pending changes are printed
        and the ledger is left intact. Otherwise every file is first staged
        to a temporary file beside its target, then each target is replaced
        atomically and the ledger is cleared.

        Returns:
            The paths that were (or, in preview mode, would be) written.
        """
        paths = list(self._changes)

        if preview:
            if self._changes:
                console.print(self.render_report(), markup=False, highlight=False)
            return paths

        staged: dict[Path, Path] = {}
        try:
            for path, content in self._changes.items():
                staged[path] = stage_file(path, content)
            for path, temp in staged.items():
                os.replace(temp, path)
                console.print(f"  [green]+[/green] Updated {pretty_path(path, self.root)}")
        finally:
            for temp in staged.values():
                temp.unlink(missing_ok=True)

        self._changes.clear()
        return paths
