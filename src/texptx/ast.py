"""AST node types for parsed LaTeX documents and target-vocabulary blocks."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class String:
    """A run of non-whitespace characters."""

    content: str
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Whitespace:
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Parbreak:
    """Blank-line paragraph separator."""

    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Comment:
    content: str
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Group:
    """Brace group {...}."""

    content: tuple[Node, ...]
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class InlineMath:
    content: tuple[Node, ...]
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class DisplayMath:
    content: tuple[Node, ...]
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Argument:
    """One argument slot of a macro or environment.

    Empty marks with no content means the optional argument was not supplied.
    """

    content: tuple[Node, ...]
    open_mark: str = "{"
    close_mark: str = "}"
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Macro:
    """A macro invocation: \\name followed by its attached arguments."""

    name: str
    args: tuple[Argument, ...] | None = None
    span: Span | None = None
    render_info: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Environment:
    """\\begin{name} ... \\end{name}.

    *math* marks environments typeset in math mode (``mathenv`` in JSON).
    """

    name: str
    content: tuple[Node, ...]
    args: tuple[Argument, ...] | None = None
    span: Span | None = None
    render_info: Mapping[str, Any] = field(default_factory=dict)
    math: bool = False


@dataclass(frozen=True, slots=True)
class HtmlLike:
    """Escape-hatch node rendered downstream as a literal target-format tag."""

    tag: str
    content: tuple[Node, ...]
    attributes: Mapping[str, Any] = field(default_factory=dict)
    span: Span | None = None


@dataclass(frozen=True, slots=True)
class Root:
    """Root document node."""

    content: tuple[Node, ...]
    span: Span | None = None


Node = Union[
    String,
    Whitespace,
    Parbreak,
    Comment,
    Group,
    InlineMath,
    DisplayMath,
    Macro,
    Environment,
    HtmlLike,
    Root,
]


def build_block(
    tag: str,
    content: tuple[Node, ...] | list[Node] = (),
    attributes: Mapping[str, Any] | None = None,
    span: Span | None = None,
) -> HtmlLike:
    """Construct a target-vocabulary element."""
    return HtmlLike(tag, tuple(content), dict(attributes or {}), span)


def with_render_info(node: Macro | Environment, **hints: Any) -> Macro | Environment:
    """Return a copy of *node* with *hints* merged into its render info."""
    merged = {**node.render_info, **hints}
    return dataclasses.replace(node, render_info=merged)


def arg(*content: Node, open_mark: str = "{", close_mark: str = "}") -> Argument:
    """Shorthand for a supplied argument."""
    return Argument(tuple(content), open_mark, close_mark)


def optional_arg(*content: Node) -> Argument:
    """Shorthand for a supplied [bracketed] argument."""
    return Argument(tuple(content), "[", "]")


def absent_arg() -> Argument:
    """An optional argument slot that was not supplied."""
    return Argument((), "", "")
