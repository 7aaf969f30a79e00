"""Declarative structural edits for Gradle Kotlin DSL build scripts.

A block such as ``compileOptions { ... }`` is located by its name and an
opening brace, and its full span is found by brace matching. String and
char literals and comments are ignored while matching, so braces inside
``"${value}"`` templates, ``'{'`` or ``// }`` comments never confuse the
search.
An edit whose anchor block is missing raises ``BlockNotFoundError``
instead of silently leaving the script unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mtdevkit.errors import BlockNotFoundError

INDENT = "    "

# 'x', '\n', '{'
_CHAR_LITERAL = re.compile(r"'(?:\\u[0-9A-Fa-f]{4}|\\.|[^'\\\n])'")


@dataclass(frozen=True)
class Block:
    """Location of a named ``name { ... }`` block inside a script."""

    name: str
    start: int
    open_brace: int
    end: int
    indent: str

    def body(self, text: str) -> str:
        return text[self.open_brace + 1 : self.end - 1]


def _mask_literals(text: str) -> str:
    """Blank out comments, string and char literals, preserving offsets and newlines."""
    out = list(text)
    i, n = 0, len(text)
    while i < n:
        if text.startswith("//", i):
            j = text.find("\n", i)
            j = n if j == -1 else j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            j = n if j == -1 else j + 2
        elif text.startswith('"""', i):
            j = text.find('"""', i + 3)
            j = n if j == -1 else j + 3
        elif text[i] == '"':
            j = i + 1
            while j < n and text[j] not in '"\n':
                j += 2 if text[j] == "\\" else 1
            j = min(j + 1, n)
        elif text[i] == "'" and _CHAR_LITERAL.match(text, i):
            j = _CHAR_LITERAL.match(text, i).end()
        else:
            i += 1
            continue
        for k in range(i, j):
            if out[k] != "\n":
                out[k] = " "
        i = j
    return "".join(out)


def find_block(text: str, name: str) -> Block:
    """Return the first ``name { ... }`` block in *text*.

    Raises:
        BlockNotFoundError: No such block, or its braces never balance.
    """
    masked = _mask_literals(text)
    match = re.search(rf"(?<![\w.]){re.escape(name)}\s*\{{", masked)
    if match is None:
        raise BlockNotFoundError(name)

    open_brace = match.end() - 1
    depth = 0
    for pos in range(open_brace, len(masked)):
        char = masked[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                line_start = text.rfind("\n", 0, match.start()) + 1
                indent = re.match(r"[ \t]*", text[line_start:]).group(0)
                return Block(name, match.start(), open_brace, pos + 1, indent)

    raise BlockNotFoundError(name)


def _reindent(content: str, indent: str) -> str:
    """Indent every line after the first by *indent*."""
    lines = content.strip("\n").split("\n")
    return "\n".join([lines[0]] + [indent + line if line else line for line in lines[1:]])


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InsertFirstLine:
    """Insert *line* as the first statement inside *block*."""

    block: str
    line: str

    def apply(self, text: str) -> str:
        found = find_block(text, self.block)
        insertion = f"\n{found.indent}{INDENT}{self.line}"
        return text[: found.open_brace + 1] + insertion + text[found.open_brace + 1 :]


@dataclass(frozen=True)
class ReplaceBlock:
    """Replace the whole of *block*, name and braces included, with *content*."""

    block: str
    content: str

    def apply(self, text: str) -> str:
        found = find_block(text, self.block)
        return text[: found.start] + _reindent(self.content, found.indent) + text[found.end :]


@dataclass(frozen=True)
class AppendText:
    """Append *content* after a blank line at the end of the script."""

    content: str

    def apply(self, text: str) -> str:
        return text.rstrip() + "\n\n" + self.content.strip("\n") + "\n"


Edit = InsertFirstLine | ReplaceBlock | AppendText


def apply_edits(text: str, edits: list[Edit]) -> str:
    """Apply *edits* to *text* in order and return the result."""
    for edit in edits:
        text = edit.apply(text)
    return text
