"""Group inline content into paragraph elements."""

from __future__ import annotations

from collections.abc import Iterable

from texptx.ast import HtmlLike, Node, Parbreak, Whitespace, build_block
from texptx.provides import ENV_ALIASES

# Elements that sit beside paragraphs rather than inside them
BLOCK_TAGS: frozenset[str] = frozenset(
    {
        "p",
        "ol",
        "ul",
        "dl",
        "li",
        "figure",
        "table",
        "tabular",
        "blockquote",
        "statement",
        "title",
        *ENV_ALIASES,
    }
)


def is_block(node: Node) -> bool:
    return isinstance(node, HtmlLike) and node.tag in BLOCK_TAGS


def wrap_pars(nodes: Iterable[Node]) -> tuple[Node, ...]:
    """Split *nodes* at paragraph breaks and wrap each inline run in a <p>.

    Block elements end the current paragraph and are passed through as-is.
    Runs that hold only whitespace are dropped.
    """
    result: list[Node] = []
    current: list[Node] = []

    def flush() -> None:
        _trim(current)
        if current:
            result.append(build_block("p", current))
        current.clear()

    for node in nodes:
        if isinstance(node, Parbreak):
            flush()
        elif is_block(node):
            flush()
            result.append(node)
        else:
            current.append(node)
    flush()
    return tuple(result)


def _trim(run: list[Node]) -> None:
    while run and isinstance(run[0], (Whitespace, Parbreak)):
        run.pop(0)
    while run and isinstance(run[-1], (Whitespace, Parbreak)):
        run.pop()
