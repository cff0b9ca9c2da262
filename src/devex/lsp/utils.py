"""Shared utility functions for the mixc LSP feature modules."""

from __future__ import annotations

import re
from typing import Optional

from lsprotocol import types as lsp

from src.composition.manifest import offset_to_position, unit_offset

_STRING_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')
_COLON_RE = re.compile(r'\s*:')
_OBJECT_OPEN_RE = re.compile(r'\s*:\s*\{')


def pos(line: int, col: int) -> lsp.Position:
    """Convert a 1-based manifest position to a 0-based LSP position."""
    return lsp.Position(line=max(0, line - 1), character=max(0, col - 1))


def get_line_text(source: str, line: int) -> str:
    """Get the text of a specific 0-based line."""
    lines = source.split("\n")
    if 0 <= line < len(lines):
        return lines[line]
    return ""


def string_at_position(source: str, position: lsp.Position) -> Optional[str]:
    """The JSON string literal under the cursor, without quotes."""
    text = get_line_text(source, position.line)
    for m in _STRING_RE.finditer(text):
        if m.start() <= position.character < m.end():
            return m.group(1)
    return None


def find_object_end(source: str, offset: int) -> int:
    """Offset of the brace closing the JSON object that contains `offset`."""
    depth = 1
    in_string = False
    escaped = False
    for i in range(offset, len(source)):
        ch = source[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return len(source)


def unit_range(source: str, name: str) -> Optional[lsp.Range]:
    """Range from a unit's "name" key to the end of its object."""
    start = unit_offset(source, name)
    if start is None:
        return None
    end = find_object_end(source, start)
    return lsp.Range(start=pos(*offset_to_position(source, start)),
                     end=pos(*offset_to_position(source, end + 1)))


def find_key(source: str, offset: int, key: str) -> Optional[int]:
    """Offset of `key` among the keys of the JSON object being read at
    `offset`, ignoring keys of nested objects and arrays."""
    depth = 0
    i = offset
    while i < len(source):
        ch = source[i]
        if ch == '"':
            m = _STRING_RE.match(source, i)
            if m is None:
                return None
            if (depth == 0 and m.group(1) == key
                    and _COLON_RE.match(source, m.end())):
                return i
            i = m.end()
            continue
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            if depth == 0:
                return None
            depth -= 1
        i += 1
    return None


def member_range(source: str, unit: str, member: str) -> Optional[lsp.Range]:
    """Range of a member key inside a unit's "members" object."""
    start = unit_offset(source, unit)
    if start is None:
        return None
    members = find_key(source, start, "members")
    if members is None:
        return None
    opening = _OBJECT_OPEN_RE.match(source, members + len('"members"'))
    if opening is None:
        return None
    key = find_key(source, opening.end(), member)
    if key is None:
        return None
    key_end = key + len(member) + 2
    return lsp.Range(start=pos(*offset_to_position(source, key)),
                     end=pos(*offset_to_position(source, key_end)))
