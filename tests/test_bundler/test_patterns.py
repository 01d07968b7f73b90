"""Unit tests for the declaration grammars (toolkit_schema.bundler.patterns)."""

from __future__ import annotations

import textwrap

import pytest

from toolkit_schema.bundler.directives import Dialect
from toolkit_schema.bundler.patterns import GRAMMARS, find_declaration
from toolkit_schema.schema.models import DeclarationKind

pytestmark = pytest.mark.unit

TS = Dialect.TYPESCRIPT
JS = Dialect.JAVASCRIPT


def extract(kind: DeclarationKind, dialect: Dialect, source: str, name: str) -> str | None:
    text = textwrap.dedent(source)
    span = find_declaration(kind, dialect, text, name)
    if span is None:
        return None
    return text[span[0]:span[1]]


class TestTable:
    def test_every_importable_kind_has_both_dialects(self):
        for kind in DeclarationKind:
            for dialect in Dialect:
                assert ((kind, dialect) in GRAMMARS) == kind.importable

    def test_global_rejected(self):
        with pytest.raises(ValueError, match="global"):
            find_declaration(DeclarationKind.GLOBAL, TS, "", "x")


class TestTypeGrammar:
    def test_type_alias_with_doc_block(self):
        source = """
            import x from "y";

            /**
             * Any value.
             */
            export type IsAny<T> = 0 extends (1 & T) ? true : false;

            export type Other = string;
        """
        assert extract(DeclarationKind.TYPE, TS, source, "IsAny") == (
            "/**\n * Any value.\n */\nexport type IsAny<T> = 0 extends (1 & T) ? true : false;"
        )

    def test_multiline_type_without_semicolon_ends_at_blank_line(self):
        source = """
            type Pair = {
                left: string;
                right: string;
            }

            type Next = number;
        """
        assert extract(DeclarationKind.TYPE, TS, source, "Pair") == (
            "type Pair = {\n    left: string;\n    right: string;\n}"
        )

    def test_interface_body(self):
        source = """
            export interface Shape {
                area(): number;
                meta: { name: string };
            }
            const after = 1;
        """
        assert extract(DeclarationKind.INTERFACE, TS, source, "Shape") == (
            "export interface Shape {\n    area(): number;\n    meta: { name: string };\n}"
        )

    def test_interface_extending_object_type_argument(self):
        source = """
            export interface Box extends Wrapper<{ id: string }> {
                size: number;
            }
        """
        assert extract(DeclarationKind.INTERFACE, TS, source, "Box") == (
            "export interface Box extends Wrapper<{ id: string }> {\n    size: number;\n}"
        )

    def test_name_must_match_whole_identifier(self):
        assert extract(DeclarationKind.TYPE, TS, "type IsAnyThing = 1;\n", "IsAny") is None

    def test_unrelated_comment_above_is_not_included(self):
        source = """
            /** Belongs to a. */
            const a = 1;
            type B = 2;
        """
        assert extract(DeclarationKind.TYPE, TS, source, "B") == "type B = 2;"

    def test_doc_block_separated_by_blank_line_is_not_included(self):
        source = """
            /** Loose comment. */

            type B = 2;
        """
        assert extract(DeclarationKind.TYPE, TS, source, "B") == "type B = 2;"


class TestTypedefGrammar:
    def test_typedef_with_label(self):
        source = """
            // Helper Type
            /**
             * @typedef {{ a: number, b: { c: string } }} Nested
             */
        """
        assert extract(DeclarationKind.TYPE, JS, source, "Nested") == (
            "// Helper Type\n/**\n * @typedef {{ a: number, b: { c: string } }} Nested\n */"
        )

    def test_triple_slash_line_is_not_a_label(self):
        source = """
            /// <reference types="node" />
            /** @callback Visitor */
        """
        assert extract(DeclarationKind.TYPE, JS, source, "Visitor") == "/** @callback Visitor */"

    def test_interface_tag(self):
        source = """
            /**
             * @interface Shape
             */
            /**
             * @typedef {string} Other
             */
        """
        assert extract(DeclarationKind.INTERFACE, JS, source, "Shape") == (
            "/**\n * @interface Shape\n */"
        )

    def test_missing_typedef(self):
        assert extract(DeclarationKind.TYPE, JS, "/** @typedef {string} A */\n", "B") is None


class TestClassAndFunctionGrammars:
    def test_class_with_nested_braces_and_strings(self):
        source = """
            /** A counter. */
            export class Counter {
                count = 0;
                label = "}";
                inc() { if (this.count) { this.count++; } }
            }

            class Other {}
        """
        assert extract(DeclarationKind.CLASS, TS, source, "Counter") == (
            '/** A counter. */\nexport class Counter {\n    count = 0;\n    label = "}";\n'
            "    inc() { if (this.count) { this.count++; } }\n}"
        )

    def test_function_with_destructured_parameters(self):
        source = """
            export async function load({ path }: { path: string } = { path: "" }): Promise<void> {
                await read(path);
            }
        """
        assert extract(DeclarationKind.FUNCTION, TS, source, "load") == (
            'export async function load({ path }: { path: string } = { path: "" }): Promise<void> {\n'
            "    await read(path);\n}"
        )

    def test_class_extending_object_type_argument(self):
        source = """
            export class Store extends Base<{ id: string }> {
                get(id: string) { return this.items[id]; }
            }
        """
        assert extract(DeclarationKind.CLASS, TS, source, "Store") == (
            "export class Store extends Base<{ id: string }> {\n"
            "    get(id: string) { return this.items[id]; }\n}"
        )

    def test_function_with_object_return_type(self):
        source = """
            /** Doc. */
            export function makePoint(x: number): { x: number; y: number } {
                return { x, y: 0 };
            }
        """
        assert extract(DeclarationKind.FUNCTION, TS, source, "makePoint") == (
            "/** Doc. */\nexport function makePoint(x: number): { x: number; y: number } {\n"
            "    return { x, y: 0 };\n}"
        )

    def test_function_with_union_and_arrow_return_types(self):
        source = """
            function pick(flag: boolean): { a: 1 } | { b: (v: number) => { c: 2 } } {
                return flag ? { a: 1 } : { b: () => ({ c: 2 }) };
            }
        """
        assert extract(DeclarationKind.FUNCTION, TS, source, "pick") == (
            "function pick(flag: boolean): { a: 1 } | { b: (v: number) => { c: 2 } } {\n"
            "    return flag ? { a: 1 } : { b: () => ({ c: 2 }) };\n}"
        )

    def test_comparison_in_default_parameter(self):
        source = "function clamp(v = a < b) {\n    return v;\n}\n"
        assert extract(DeclarationKind.FUNCTION, JS, source, "clamp") == (
            "function clamp(v = a < b) {\n    return v;\n}"
        )

    def test_generator_function(self):
        source = "function* ids() {\n    yield 1; // }\n}\n"
        assert extract(DeclarationKind.FUNCTION, JS, source, "ids") == (
            "function* ids() {\n    yield 1; // }\n}"
        )

    def test_arrow_function_falls_back_to_statement(self):
        source = """
            /**
             * Identity.
             * @param {unknown} v
             */
            export const identity = (v) => {
                return v;
            };
            export const other = 1;
        """
        assert extract(DeclarationKind.FUNCTION, JS, source, "identity") == (
            "/**\n * Identity.\n * @param {unknown} v\n */\n"
            "export const identity = (v) => {\n    return v;\n};"
        )

    def test_missing_function(self):
        assert extract(DeclarationKind.FUNCTION, TS, "function other() {}\n", "missing") is None


class TestBindingGrammars:
    def test_constant(self):
        source = 'export const VERSION = "1.0";\nexport const NEXT = 2;\n'
        assert extract(DeclarationKind.CONSTANT, TS, source, "VERSION") == 'export const VERSION = "1.0";'

    def test_constant_ignores_let(self):
        assert extract(DeclarationKind.CONSTANT, TS, "let counter = 0;\n", "counter") is None

    def test_variable_without_semicolon(self):
        source = """
            let settings = {
                debug: false
            }

            settings.debug = true
        """
        assert extract(DeclarationKind.VARIABLE, JS, source, "settings") == (
            "let settings = {\n    debug: false\n}"
        )

    def test_variable_at_end_of_text(self):
        assert extract(DeclarationKind.VARIABLE, JS, "var last = 1", "last") == "var last = 1"
