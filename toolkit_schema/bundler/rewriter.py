"""Splicing extracted declarations back over their directive lines."""

from __future__ import annotations

import textwrap
from collections import Counter
from typing import Callable, Sequence

from toolkit_schema.bundler.directives import ImportMode
from toolkit_schema.bundler.locator import ResolvedDependency

DEFAULT_INLINE_MARKER = "// Inlined TypeScript Toolkit Dependency"


def reindent(text: str, indent: str) -> str:
    """Dedent *text* and prefix each non-blank line with *indent*."""
    lines = textwrap.dedent(text).strip("\n").split("\n")
    return "\n".join(indent + line if line.strip() else "" for line in lines)


def _format_bundled(body: str, indent: str, index: int, marker: str) -> str:
    # Consecutive bundled declarations are separated by one blank line.
    return body if index == 0 else "\n" + body


def _format_inlined(body: str, indent: str, index: int, marker: str) -> str:
    return f"{indent}{marker}\n{body}"


_FORMATTERS: dict[ImportMode, Callable[[str, str, int, str], str]] = {
    ImportMode.BUNDLE: _format_bundled,
    ImportMode.INLINE: _format_inlined,
}


class DirectiveRewriter:
    """Replaces directive lines with re-indented declaration text."""

    def __init__(self, inline_marker: str = DEFAULT_INLINE_MARKER) -> None:
        self.inline_marker = inline_marker

    def render(self, resolved: ResolvedDependency, index: int) -> str:
        """Replacement text for one directive.

        *index* counts the earlier replacements in the file that share the
        directive's import mode.
        """
        directive = resolved.directive
        body = reindent(resolved.text, directive.indent)
        return _FORMATTERS[directive.mode](body, directive.indent, index, self.inline_marker)

    def rewrite(self, text: str, replacements: Sequence[ResolvedDependency]) -> str:
        """Return *text* with every resolved directive replaced.

        *replacements* must be in the order their directives appear.
        """
        parts: list[str] = []
        seen: Counter[ImportMode] = Counter()
        cursor = 0
        for resolved in replacements:
            directive = resolved.directive
            parts.append(text[cursor:directive.start])
            parts.append(self.render(resolved, seen[directive.mode]))
            seen[directive.mode] += 1
            cursor = directive.end
        parts.append(text[cursor:])
        return "".join(parts)
