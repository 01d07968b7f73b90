"""Unit tests for directive rewriting (toolkit_schema.bundler.rewriter)."""

from __future__ import annotations

from pathlib import Path

import pytest

from toolkit_schema.bundler.directives import scan_text
from toolkit_schema.bundler.locator import ResolvedDependency
from toolkit_schema.bundler.rewriter import DirectiveRewriter, reindent
from toolkit_schema.schema.models import DeclarationKind

pytestmark = pytest.mark.unit


def _resolve_all(text: str, bodies: list[str]) -> list[ResolvedDependency]:
    return [
        ResolvedDependency(
            directive=directive,
            namespace="ns",
            tool="tool",
            export="x",
            kind=DeclarationKind.FUNCTION,
            source_file=Path("index.ts"),
            text=body,
        )
        for directive, body in zip(scan_text(text), bodies)
    ]


class TestReindent:
    def test_dedents_and_prefixes(self):
        assert reindent("    a\n      b\n", "\t") == "\ta\n\t  b"

    def test_blank_lines_stay_bare(self):
        assert reindent("a\n\n  \nb", "  ") == "  a\n\n\n  b"


class TestBundleMode:
    def test_first_replacement_has_no_separator(self):
        text = "// @bundleDependency a.b.c\n\nrun();\n"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["function c() {}"]))
        assert out == "function c() {}\n\nrun();\n"

    def test_later_replacements_are_separated(self):
        text = "// @bundleDependency a.b.c\n// @bundleDependency a.b.d\n"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["const c = 1;", "const d = 2;"]))
        assert out == "const c = 1;\n\nconst d = 2;\n"

    def test_indented_directive(self):
        text = "namespace N {\n    // @bundleDependency a.b.c\n}\n"
        body = "/** Doc. */\nfunction c() {\n    return 1;\n}"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, [body]))
        assert out == (
            "namespace N {\n    /** Doc. */\n    function c() {\n        return 1;\n    }\n}\n"
        )

    def test_rewritten_text_has_no_directives_left(self):
        text = "// @bundleDependency a.b.c\ncode();\n/* @bundleDependency a.b.d */\n"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["c();", "d();"]))
        assert scan_text(out) == []


class TestInlineMode:
    def test_marker_precedes_every_replacement(self):
        text = "  /* @inlineDependency a.b.c */\n  /* @inlineDependency a.b.d */\n"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["type C = 1;", "type D = 2;"]))
        assert out == (
            "  // Inlined TypeScript Toolkit Dependency\n  type C = 1;\n"
            "  // Inlined TypeScript Toolkit Dependency\n  type D = 2;\n"
        )

    def test_custom_marker(self):
        text = "// @inlineDependency a.b.c"
        out = DirectiveRewriter("// vendored").rewrite(text, _resolve_all(text, ["type C = 1;"]))
        assert out == "// vendored\ntype C = 1;"

    def test_first_bundle_after_inline_has_no_separator(self):
        text = "// @inlineDependency a.b.c\n// @bundleDependency a.b.d\n"
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["c;", "d;"]))
        assert out == "// Inlined TypeScript Toolkit Dependency\nc;\nd;\n"

    def test_bundle_separators_skip_inline_replacements(self):
        text = (
            "// @bundleDependency a.b.c\n// @inlineDependency a.b.d\n// @bundleDependency a.b.e\n"
        )
        out = DirectiveRewriter().rewrite(text, _resolve_all(text, ["c;", "d;", "e;"]))
        assert out == "c;\n// Inlined TypeScript Toolkit Dependency\nd;\n\ne;\n"
