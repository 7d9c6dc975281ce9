"""Lexical queries over JavaScript text, backed by the tree-sitter JavaScript grammar.

The parse tree tells code apart from string, template, comment and regular
expression literals, and gives the exact extent of every ``{...}`` block.
Offsets exposed here are ``str`` indices; tree-sitter works in UTF-8 bytes.
"""

from __future__ import annotations

import bisect
import re
from functools import lru_cache
from typing import Iterator, List, Optional, Pattern, Set, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from ..models import Span, StructureError

_JAVASCRIPT = Language(tree_sitter_javascript.language())
_LITERAL_NODES = {"string", "comment", "regex", "html_comment"}
_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}


class ParsedSource:
    """A JavaScript text with its syntax tree and the spans of its literals."""

    def __init__(self, text: str, tree: Tree) -> None:
        self.text = text
        self.tree = tree
        encoded_length = len(text.encode("utf-8"))
        self._byte_to_char: Optional[List[int]] = None
        if encoded_length != len(text):
            table: List[int] = []
            for index, char in enumerate(text):
                table.extend([index] * len(char.encode("utf-8")))
            table.append(len(text))
            self._byte_to_char = table
        self.literal_spans = self._collect_literal_spans()
        self._literal_starts = [start for start, _ in self.literal_spans]

    @property
    def has_error(self) -> bool:
        return self.tree.root_node.has_error

    def to_char(self, byte: int) -> int:
        return byte if self._byte_to_char is None else self._byte_to_char[byte]

    def to_byte(self, index: int) -> int:
        if self._byte_to_char is None:
            return index
        return len(self.text[:index].encode("utf-8"))

    def is_code(self, index: int) -> bool:
        """True when ``index`` is outside every literal and comment."""
        position = bisect.bisect_right(self._literal_starts, index) - 1
        return position < 0 or index >= self.literal_spans[position][1]

    def node_at(self, index: int) -> Optional[Node]:
        """Return the smallest node (named or not) covering the character at ``index``."""
        start = self.to_byte(index)
        end = self.to_byte(index + 1)
        return self.tree.root_node.descendant_for_byte_range(start, end)

    def _collect_literal_spans(self) -> List[Span]:
        spans: List[Tuple[int, int]] = []
        stack = [self.tree.root_node]
        while stack:
            node = stack.pop()
            if node.type in _LITERAL_NODES:
                spans.append((node.start_byte, node.end_byte))
                continue
            if node.type == "template_string":
                cursor = node.start_byte
                for child in node.children:
                    if child.type != "template_substitution":
                        continue
                    # "${" and the closing "}" belong to the template text
                    spans.append((cursor, child.start_byte + 2))
                    stack.extend(child.children[1:-1])
                    cursor = child.end_byte - 1
                spans.append((cursor, node.end_byte))
                continue
            stack.extend(node.children)
        return sorted(
            (self.to_char(start), self.to_char(end)) for start, end in spans if end > start
        )


_PARSER = Parser(_JAVASCRIPT)


@lru_cache(maxsize=16)
def parse_source(text: str) -> ParsedSource:
    """Parse ``text`` as JavaScript; repeated queries on the same text reuse the tree."""
    return ParsedSource(text, _PARSER.parse(text.encode("utf-8")))


def line_of(text: str, index: int) -> int:
    """Return the 1-based line number of ``index`` in ``text``."""
    return text.count("\n", 0, index) + 1


def iter_code(text: str, start: int = 0, end: Optional[int] = None) -> Iterator[Tuple[int, str]]:
    """Yield ``(index, char)`` for every code character between ``start`` and ``end``.

    Characters inside string literals, template literal text, comments and
    regular expression literals are skipped. Code inside template
    substitutions (``${...}``) is yielded, but the substitution's own braces
    are not.
    """
    source = parse_source(text)
    stop = len(text) if end is None else min(end, len(text))
    spans = source.literal_spans
    position = max(bisect.bisect_right(source._literal_starts, start) - 1, 0)
    index = start
    while index < stop:
        while position < len(spans) and spans[position][1] <= index:
            position += 1
        if position < len(spans) and spans[position][0] <= index:
            index = spans[position][1]
            continue
        yield index, text[index]
        index += 1


def find_matching_brace(text: str, open_index: int, end: Optional[int] = None) -> int:
    """Return the index of the ``}`` closing the block opened at ``open_index``."""
    if text[open_index] != "{":
        raise ValueError(f"Expected '{{' at index {open_index}")
    source = parse_source(text)
    opener = source.node_at(open_index)
    block = opener.parent if opener is not None and opener.type == "{" else None
    closer = block.children[-1] if block is not None else None
    if (
        block is None
        or closer is None
        or block.type == "ERROR"
        or block.children[0].start_byte != opener.start_byte
        or closer.type != "}"
        or closer.is_missing
    ):
        raise StructureError(
            f"Unbalanced braces: block opened on line {line_of(text, open_index)} is never closed"
        )
    close_index = source.to_char(closer.start_byte)
    if end is not None and close_index >= end:
        raise StructureError(
            f"Block opened on line {line_of(text, open_index)} runs past its enclosing block"
        )
    return close_index


def top_level_indices(text: str, start: int, end: int) -> Set[int]:
    """Return indices of code characters at brace depth zero within ``[start, end)``."""
    depth = 0
    indices: Set[int] = set()
    for index, char in iter_code(text, start, end):
        if char == "{":
            depth += 1
            continue
        if char == "}":
            depth -= 1
            continue
        if depth == 0:
            indices.add(index)
    return indices


def search_top_level(pattern: Pattern[str], text: str, start: int, end: int) -> Optional[re.Match[str]]:
    """Return the first match of ``pattern`` that begins at brace depth zero."""
    candidates = list(pattern.finditer(text, start, end))
    if not candidates:
        return None
    indices = top_level_indices(text, start, end)
    for match in candidates:
        if match.start() in indices:
            return match
    return None


def find_unbalanced(text: str) -> Optional[Tuple[int, str]]:
    """Return ``(index, message)`` for the first bracket mismatch, or None."""
    stack: List[Tuple[str, int]] = []
    for index, char in iter_code(text):
        if char in _OPENERS:
            stack.append((char, index))
        elif char in _CLOSERS:
            if not stack:
                return index, f"unexpected '{char}' on line {line_of(text, index)}"
            opener, opened_at = stack.pop()
            if _OPENERS[opener] != char:
                return index, (
                    f"'{char}' on line {line_of(text, index)} closes '{opener}' "
                    f"opened on line {line_of(text, opened_at)}"
                )
    if stack:
        opener, opened_at = stack[-1]
        return opened_at, f"'{opener}' opened on line {line_of(text, opened_at)} is never closed"
    return None


__all__ = [
    "ParsedSource",
    "find_matching_brace",
    "find_unbalanced",
    "iter_code",
    "line_of",
    "parse_source",
    "search_top_level",
    "top_level_indices",
]
