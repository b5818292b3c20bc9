"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from texptx.ast import (
    Argument,
    Environment,
    HtmlLike,
    Macro,
    Node,
    Parbreak,
    Position,
    Span,
    String,
    Whitespace,
    absent_arg,
    optional_arg,
)
from texptx.errors import DiagnosticSink
from texptx.rules import RuleContext

# Convenience span for hand-built AST nodes
S = Span(Position(3, 1, 20), Position(3, 14, 33))


def words(text: str) -> tuple[Node, ...]:
    """Split *text* into String/Whitespace/Parbreak nodes.

    A blank line (two newlines) becomes a Parbreak.
    """
    nodes: list[Node] = []
    for i, para in enumerate(text.split("\n\n")):
        if i > 0:
            nodes.append(Parbreak())
        for j, word in enumerate(para.split()):
            if j > 0:
                nodes.append(Whitespace())
            nodes.append(String(word))
    return tuple(nodes)


def env(
    name: str,
    *content: Node,
    title: tuple[Node, ...] | None = None,
    args: tuple[Argument, ...] | None = None,
    render_info: dict | None = None,
) -> Environment:
    """Environment with an optional [title] argument slot."""
    if args is None:
        args = (optional_arg(*title),) if title is not None else (absent_arg(),)
    return Environment(name, content, args, S, render_info or {})


def item(*body: Node, label: tuple[Node, ...] | None = None) -> Macro:
    """An \\item with its body already attached as the last argument."""
    slot = optional_arg(*label) if label is not None else absent_arg()
    return Macro("item", (slot, Argument(body, "", "")), S)


def text_of(nodes: tuple[Node, ...]) -> str:
    """Concatenate String contents, recursing into elements."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, String):
            parts.append(node.content)
        elif isinstance(node, Whitespace):
            parts.append(" ")
        elif isinstance(node, HtmlLike):
            parts.append(text_of(node.content))
    return "".join(parts)


def tags(nodes: tuple[Node, ...]) -> list[str]:
    """Tags of the HtmlLike nodes in *nodes*."""
    return [n.tag for n in nodes if isinstance(n, HtmlLike)]


def assert_block(node: Node, tag: str) -> HtmlLike:
    """Assert *node* is an element with the given tag and return it."""
    assert isinstance(node, HtmlLike), f"Expected HtmlLike, got {type(node).__name__}"
    assert node.tag == tag, f"Expected tag '{tag}', got '{node.tag}'"
    return node


@pytest.fixture
def sink() -> DiagnosticSink:
    return DiagnosticSink("test.tex")


@pytest.fixture
def ctx(sink: DiagnosticSink) -> RuleContext:
    return RuleContext(file=sink)
