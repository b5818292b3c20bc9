"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from texptx.ast import (
    Argument,
    Comment,
    DisplayMath,
    Environment,
    Group,
    HtmlLike,
    InlineMath,
    Macro,
    Node,
    Parbreak,
    Root,
    String,
    Whitespace,
)


def dump_ast(node: Node, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    _dump_node(node, 0, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(node, Root):
        f.write(f"{pad}Root\n")
        _dump_seq(node.content, depth + 1, f)
    elif isinstance(node, String):
        f.write(f"{pad}String({node.content!r})\n")
    elif isinstance(node, Whitespace):
        f.write(f"{pad}Whitespace\n")
    elif isinstance(node, Parbreak):
        f.write(f"{pad}Parbreak\n")
    elif isinstance(node, Comment):
        f.write(f"{pad}Comment({node.content!r})\n")
    elif isinstance(node, Macro):
        hints = f" hints={sorted(node.render_info)}" if node.render_info else ""
        f.write(f"{pad}Macro \\{node.name}{hints}\n")
        for arg in node.args or ():
            _dump_arg(arg, depth + 1, f)
    elif isinstance(node, Environment):
        f.write(f"{pad}Environment {node.name}\n")
        for arg in node.args or ():
            _dump_arg(arg, depth + 1, f)
        _dump_seq(node.content, depth + 1, f)
    elif isinstance(node, HtmlLike):
        attrs = "".join(f" {k}={v!r}" for k, v in node.attributes.items())
        f.write(f"{pad}<{node.tag}{attrs}>\n")
        _dump_seq(node.content, depth + 1, f)
    elif isinstance(node, (Group, InlineMath, DisplayMath)):
        f.write(f"{pad}{type(node).__name__}\n")
        _dump_seq(node.content, depth + 1, f)


def _dump_seq(nodes: tuple[Node, ...], depth: int, f: TextIO) -> None:
    for child in nodes:
        _dump_node(child, depth, f)


def _dump_arg(arg: Argument, depth: int, f: TextIO) -> None:
    marks = f"{arg.open_mark}{arg.close_mark}" or "(unmarked)"
    f.write(f"{_indent(depth)}Arg {marks}\n")
    _dump_seq(arg.content, depth + 1, f)
