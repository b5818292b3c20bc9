"""Paragraph grouping."""

from __future__ import annotations

from conftest import tags, text_of, words

from texptx.ast import InlineMath, Parbreak, String, Whitespace, build_block
from texptx.pars import is_block, wrap_pars


class TestWrapPars:
    def test_single_paragraph(self) -> None:
        result = wrap_pars(words("hello world"))
        assert tags(result) == ["p"]
        assert text_of(result) == "hello world"

    def test_split_at_parbreak(self) -> None:
        result = wrap_pars(words("one\n\ntwo\n\nthree"))
        assert tags(result) == ["p", "p", "p"]
        assert [text_of(p.content) for p in result] == ["one", "two", "three"]

    def test_empty_input(self) -> None:
        assert wrap_pars(()) == ()

    def test_whitespace_only_dropped(self) -> None:
        assert wrap_pars((Whitespace(), Parbreak(), Whitespace())) == ()

    def test_edges_trimmed(self) -> None:
        result = wrap_pars((Whitespace(), String("x"), Whitespace()))
        assert result[0].content == (String("x"),)

    def test_block_breaks_paragraph(self) -> None:
        ul = build_block("ul", ())
        result = wrap_pars((String("before"), Whitespace(), ul, Whitespace(), String("after")))
        assert tags(result) == ["p", "ul", "p"]
        assert result[1] is ul

    def test_canonical_environment_blocks_not_wrapped(self) -> None:
        thm = build_block("theorem", ())
        assert wrap_pars((thm,)) == (thm,)

    def test_inline_elements_wrapped(self) -> None:
        term = build_block("term", (String("t"),))
        result = wrap_pars((term,))
        assert tags(result) == ["p"]

    def test_math_stays_inline(self) -> None:
        math = InlineMath((String("x"),))
        result = wrap_pars((String("a"), math))
        assert result[0].content == (String("a"), math)


class TestIsBlock:
    def test_strings_are_inline(self) -> None:
        assert not is_block(String("x"))

    def test_statement_is_block(self) -> None:
        assert is_block(build_block("statement", ()))
