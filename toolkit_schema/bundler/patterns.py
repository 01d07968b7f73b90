"""Declaration grammars used to extract an export's source text.

Each grammar is a pure function ``(source_text, export_name) -> Span | None``
returning the character span of the declaration, including the
documentation block directly above it. Grammars are selected from
:data:`GRAMMARS` by declaration kind and dialect; ``global`` exports have
no grammar because they can never be imported.

Scanning is bracket-depth aware and skips string literals and comments, but
it is not a parser: it only needs to find where a declaration ends.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from toolkit_schema.bundler.directives import Dialect
from toolkit_schema.schema.models import DeclarationKind

Span = tuple[int, int]
Grammar = Callable[[str, str], Optional[Span]]


# ---------------------------------------------------------------------------
# Low-level scanning
# ---------------------------------------------------------------------------

def _line_start(text: str, index: int) -> int:
    return text.rfind("\n", 0, index) + 1


def _skip_non_code(text: str, i: int) -> int:
    """Return the index after a string literal or comment starting at *i*.

    Returns *i* unchanged when no literal or comment starts there.
    """
    ch = text[i]
    if ch in "\"'`":
        j = i + 1
        while j < len(text):
            if text[j] == "\\":
                j += 2
                continue
            if text[j] == ch:
                return j + 1
            if text[j] == "\n" and ch != "`":
                return j
            j += 1
        return len(text)
    if text.startswith("//", i):
        newline = text.find("\n", i)
        return len(text) if newline == -1 else newline
    if text.startswith("/*", i):
        close = text.find("*/", i + 2)
        return len(text) if close == -1 else close + 2
    return i


def _matching_brace(text: str, open_index: int) -> Optional[int]:
    """Index just past the ``}`` closing the ``{`` at *open_index*."""
    depth = 0
    i = open_index
    while i < len(text):
        j = _skip_non_code(text, i)
        if j != i:
            i = j
            continue
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


_CLOSERS = {")": "(", "]": "["}
_TYPE_LITERAL_AFTER = (":", "|", "&", "=>")


def _body_end(text: str, pos: int) -> Optional[int]:
    """End of the first brace-delimited body after *pos*.

    Braces nested in parentheses, brackets or type arguments (parameter
    destructuring, default values, ``Base<{ id: string }>``) are not taken
    as the body, nor is an object type following ``:``, ``|``, ``&`` or
    ``=>`` in a return type annotation.
    """
    stack: list[str] = []
    last = ""
    i = pos
    while i < len(text):
        j = _skip_non_code(text, i)
        if j != i:
            i = j
            continue
        ch = text[i]
        if ch in "([<":
            stack.append(ch)
        elif ch in ")]":
            while stack and stack.pop() != _CLOSERS[ch]:
                pass
        elif ch == ">":
            if last == "=":
                ch = "=>"
            elif stack and stack[-1] == "<":
                stack.pop()
        elif ch == "{":
            end = _matching_brace(text, i)
            if end is None or (not stack and last not in _TYPE_LITERAL_AFTER):
                return end
            i, last = end, "}"
            continue
        if not ch.isspace():
            last = ch
        i += 1
    return None


def _is_blank_line_after(text: str, newline: int) -> bool:
    nxt = text.find("\n", newline + 1)
    following = text[newline + 1:] if nxt == -1 else text[newline + 1:nxt]
    return not following.strip()


def _statement_end(text: str, pos: int) -> int:
    """End of the statement starting before *pos*.

    A statement ends after a ``;`` at bracket depth zero, before a blank
    line at depth zero, or at the end of the text.
    """
    depth = 0
    i = pos
    while i < len(text):
        j = _skip_non_code(text, i)
        if j != i:
            i = j
            continue
        ch = text[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif depth == 0:
            if ch == ";":
                return i + 1
            if ch == "\n" and _is_blank_line_after(text, i):
                return i
        i += 1
    return max(len(text.rstrip()), pos)


def _preceding_doc_block(text: str, start: int) -> int:
    """Start of the line holding a ``/** */`` block directly above *start*.

    Returns *start* when the declaration is undocumented.
    """
    before = text[:start].rstrip()
    if not before.endswith("*/") or text.count("\n", len(before), start) > 1:
        return start
    opening = before.rfind("/**")
    if opening == -1 or "*/" in before[opening + 3:-2]:
        return start
    block_line = _line_start(text, opening)
    if text[block_line:opening].strip():
        return start
    return block_line


_LABEL_COMMENT = re.compile(r"[ \t]*//(?!/)[^\n]*\n\Z")


def _preceding_label(text: str, start: int) -> int:
    """Include a single-line ``// Label`` comment directly above *start*."""
    if start == 0:
        return start
    label_line = _line_start(text, start - 1)
    if _LABEL_COMMENT.match(text[label_line:start]):
        return label_line
    return start


def _header(prefix: str, name: str) -> re.Pattern[str]:
    return re.compile(rf"^[ \t]*{prefix}{re.escape(name)}(?![\w$])", re.MULTILINE)


# ---------------------------------------------------------------------------
# Grammars
# ---------------------------------------------------------------------------

_EXPORT = r"(?:export[ \t]+)?(?:default[ \t]+)?(?:declare[ \t]+)?"


def find_type(text: str, name: str) -> Optional[Span]:
    """``type Name = ...;`` or ``interface Name { ... }`` (statically-typed dialect)."""
    pattern = _header(rf"{_EXPORT}(?P<keyword>type|interface)[ \t]+", name)
    for match in pattern.finditer(text):
        if match.group("keyword") == "interface":
            end = _body_end(text, match.end())
        else:
            end = _statement_end(text, match.end())
        if end is not None:
            return _preceding_doc_block(text, match.start()), end
    return None


_DOC_BLOCK = re.compile(r"/\*\*.*?\*/", re.DOTALL)
_TYPE_TAG = re.compile(r"@(?P<tag>typedef|interface|callback)\b")
_IDENTIFIER = re.compile(r"[\s*]*(?P<name>[A-Za-z_$][\w$.]*)")


def _tag_names(block: str) -> list[str]:
    """Names declared by ``@typedef``/``@interface``/``@callback`` tags in *block*."""
    names: list[str] = []
    for tag in _TYPE_TAG.finditer(block):
        pos = tag.end()
        while pos < len(block) and block[pos] in " \t":
            pos += 1
        if tag.group("tag") == "typedef" and block.startswith("{", pos):
            depth = 0
            while pos < len(block):
                if block[pos] == "{":
                    depth += 1
                elif block[pos] == "}":
                    depth -= 1
                    if depth == 0:
                        pos += 1
                        break
                pos += 1
        match = _IDENTIFIER.match(block, pos)
        if match:
            names.append(match.group("name"))
    return names


def find_typedef(text: str, name: str) -> Optional[Span]:
    """A JSDoc block whose type tag names the export (annotated dialect).

    An optional ``// Label`` comment directly above the block is included.
    """
    for block in _DOC_BLOCK.finditer(text):
        if name not in _tag_names(block.group()):
            continue
        start = block.start()
        block_line = _line_start(text, start)
        if not text[block_line:start].strip():
            start = _preceding_label(text, block_line)
        return start, block.end()
    return None


def find_class(text: str, name: str) -> Optional[Span]:
    pattern = _header(rf"{_EXPORT}(?:abstract[ \t]+)?class[ \t]+", name)
    for match in pattern.finditer(text):
        end = _body_end(text, match.end())
        if end is not None:
            return _preceding_doc_block(text, match.start()), end
    return None


def find_function(text: str, name: str) -> Optional[Span]:
    """A ``function`` declaration, or a function assigned to a binding."""
    pattern = _header(rf"{_EXPORT}(?:async[ \t]+)?function[ \t]*\*?[ \t]*", name)
    for match in pattern.finditer(text):
        end = _body_end(text, match.end())
        if end is not None:
            return _preceding_doc_block(text, match.start()), end
    return find_variable(text, name)


def find_constant(text: str, name: str) -> Optional[Span]:
    pattern = _header(rf"{_EXPORT}const[ \t]+", name)
    match = pattern.search(text)
    if match is None:
        return None
    return _preceding_doc_block(text, match.start()), _statement_end(text, match.end())


def find_variable(text: str, name: str) -> Optional[Span]:
    pattern = _header(rf"{_EXPORT}(?:const|let|var)[ \t]+", name)
    match = pattern.search(text)
    if match is None:
        return None
    return _preceding_doc_block(text, match.start()), _statement_end(text, match.end())


GRAMMARS: dict[tuple[DeclarationKind, Dialect], Grammar] = {
    (DeclarationKind.TYPE, Dialect.TYPESCRIPT): find_type,
    (DeclarationKind.INTERFACE, Dialect.TYPESCRIPT): find_type,
    (DeclarationKind.TYPE, Dialect.JAVASCRIPT): find_typedef,
    (DeclarationKind.INTERFACE, Dialect.JAVASCRIPT): find_typedef,
    (DeclarationKind.CLASS, Dialect.TYPESCRIPT): find_class,
    (DeclarationKind.CLASS, Dialect.JAVASCRIPT): find_class,
    (DeclarationKind.FUNCTION, Dialect.TYPESCRIPT): find_function,
    (DeclarationKind.FUNCTION, Dialect.JAVASCRIPT): find_function,
    (DeclarationKind.CONSTANT, Dialect.TYPESCRIPT): find_constant,
    (DeclarationKind.CONSTANT, Dialect.JAVASCRIPT): find_constant,
    (DeclarationKind.VARIABLE, Dialect.TYPESCRIPT): find_variable,
    (DeclarationKind.VARIABLE, Dialect.JAVASCRIPT): find_variable,
}


def find_declaration(
    kind: DeclarationKind, dialect: Dialect, text: str, name: str
) -> Optional[Span]:
    """Locate the declaration of *name* in *text* with the matching grammar.

    Raises:
        ValueError: If *kind* has no grammar (``global`` exports).
    """
    grammar = GRAMMARS.get((kind, dialect))
    if grammar is None:
        raise ValueError(f"'{kind.value}' declarations cannot be extracted")
    return grammar(text, name)
