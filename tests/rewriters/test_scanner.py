"""Tests for the tree-sitter backed JavaScript scanner."""

from __future__ import annotations

import re

import pytest

from animate_upgrade.models import StructureError
from animate_upgrade.rewriters.scanner import (
    find_matching_brace,
    find_unbalanced,
    iter_code,
    line_of,
    parse_source,
    search_top_level,
)


def test_line_of_is_one_based() -> None:
    text = "a\nb\nc"
    assert line_of(text, 0) == 1
    assert line_of(text, text.index("c")) == 3


def test_iter_code_skips_literals_and_comments() -> None:
    text = "a('{'); /* { */ b(\"}\"); // {\nc(`x${d}y`); e(/[}]/);"

    code = "".join(char for _, char in iter_code(text))

    assert "{" not in code
    assert "}" not in code
    assert "d" in code
    assert code.count("(") == code.count(")")


def test_division_is_not_mistaken_for_regex() -> None:
    text = "var x = (a / b) / c; { }"

    braces = [char for _, char in iter_code(text) if char in "{}"]

    assert braces == ["{", "}"]


def test_find_matching_brace_handles_nesting() -> None:
    text = "function f() { if (x) { y(); } var s = '}'; }"

    assert find_matching_brace(text, text.index("{")) == len(text) - 1


def test_find_matching_brace_raises_when_unclosed() -> None:
    with pytest.raises(StructureError):
        find_matching_brace("{ { }", 0)


def test_search_top_level_ignores_nested_matches() -> None:
    text = "{ inner(); } inner(); "
    pattern = re.compile(r"inner\(")

    match = search_top_level(pattern, text, 0, len(text))

    assert match is not None
    assert match.start() == text.rindex("inner(")


def test_find_unbalanced_reports_mismatch_and_unclosed() -> None:
    assert find_unbalanced("a({[]});") is None

    mismatch = find_unbalanced("a(]")
    assert mismatch is not None
    assert "closes '('" in mismatch[1]

    unclosed = find_unbalanced("{\n(")
    assert unclosed is not None
    assert "never closed" in unclosed[1]


def test_find_matching_brace_skips_template_substitutions() -> None:
    text = "function f() { return `${a}}` + b; }"

    assert find_matching_brace(text, text.index("{")) == len(text) - 1


def test_find_matching_brace_returns_character_offsets_after_non_ascii_text() -> None:
    text = "var s = 'café ☃'; function f() { g('ü'); }"

    close = find_matching_brace(text, text.index("{"))

    assert text[close] == "}"
    assert close == len(text) - 1


def test_find_matching_brace_rejects_closer_past_enclosing_block() -> None:
    text = "function f() { g(); }"

    with pytest.raises(StructureError, match="runs past"):
        find_matching_brace(text, text.index("{"), end=text.index("g"))


def test_is_code_distinguishes_literals_from_code() -> None:
    text = "var a = 'lib'; // lib\nlib.x = /lib/;"
    source = parse_source(text)

    assert source.is_code(text.index("var"))
    assert not source.is_code(text.index("lib"))
    assert not source.is_code(text.index("// lib") + 3)
    assert source.is_code(text.index("\nlib") + 1)
    assert not source.is_code(text.rindex("lib"))
