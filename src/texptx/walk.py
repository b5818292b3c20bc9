"""Depth-first, post-order tree rewriting and the \\item body pre-pass."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from texptx.ast import (
    Argument,
    DisplayMath,
    Environment,
    Group,
    HtmlLike,
    InlineMath,
    Macro,
    Node,
    Root,
)
from texptx.provides import MACROS, signature_arity

LIST_ENVIRONMENTS: frozenset[str] = frozenset({"itemize", "enumerate", "description"})


@dataclass(frozen=True, slots=True)
class VisitInfo:
    """Where a visited node sits in the tree."""

    parents: tuple[Node, ...] = ()
    key: str | None = None
    index: int | None = None

    @property
    def parent(self) -> Node | None:
        return self.parents[0] if self.parents else None


# Visitor result: None keeps the node, a node replaces it, a sequence is spliced
VisitResult = Node | Sequence[Node] | None
Visitor = Callable[[Node, VisitInfo], VisitResult]


def replace_nodes(root: Root, visitor: Visitor) -> Root:
    """Rewrite *root* bottom-up: children are replaced before their parent."""
    content = _replace_seq(root.content, visitor, (root,), "content")
    return dataclasses.replace(root, content=content)


def _replace_seq(
    nodes: tuple[Node, ...],
    visitor: Visitor,
    parents: tuple[Node, ...],
    key: str,
) -> tuple[Node, ...]:
    result: list[Node] = []
    for i, node in enumerate(nodes):
        rewritten = _rewrite_children(node, visitor, parents)
        replacement = visitor(rewritten, VisitInfo(parents, key, i))
        if replacement is None:
            result.append(rewritten)
        elif isinstance(replacement, Sequence):
            result.extend(replacement)
        else:
            result.append(replacement)
    return tuple(result)


def _rewrite_children(node: Node, visitor: Visitor, parents: tuple[Node, ...]) -> Node:
    inner = (node, *parents)
    if isinstance(node, Macro):
        if node.args is None:
            return node
        args = tuple(_rewrite_arg(a, visitor, inner) for a in node.args)
        return dataclasses.replace(node, args=args)
    if isinstance(node, Environment):
        args = node.args
        if args is not None:
            args = tuple(_rewrite_arg(a, visitor, inner) for a in args)
        content = _replace_seq(node.content, visitor, inner, "content")
        return dataclasses.replace(node, args=args, content=content)
    if isinstance(node, (Group, InlineMath, DisplayMath, HtmlLike)):
        return dataclasses.replace(node, content=_replace_seq(node.content, visitor, inner, "content"))
    return node


def _rewrite_arg(arg: Argument, visitor: Visitor, parents: tuple[Node, ...]) -> Argument:
    return dataclasses.replace(arg, content=_replace_seq(arg.content, visitor, parents, "args"))


# ---------------------------------------------------------------------------
# \item body attachment
# ---------------------------------------------------------------------------


def attach_item_bodies(root: Root) -> Root:
    """Move each \\item's trailing content into a synthetic last argument.

    Applies to list environments anywhere in the tree. Content before the
    first \\item stays in the environment.
    """

    def visit(node: Node, info: VisitInfo) -> VisitResult:
        if isinstance(node, Environment) and node.name in LIST_ENVIRONMENTS:
            return dataclasses.replace(node, content=_gather_items(node.content))
        return None

    return replace_nodes(root, visit)


def _gather_items(content: tuple[Node, ...]) -> tuple[Node, ...]:
    result: list[Node] = []
    item: Macro | None = None
    body: list[Node] = []

    def close() -> None:
        if item is None:
            return
        slots = item.args if item.args is not None else _default_item_slots()
        args = (*slots, Argument(tuple(body), "", ""))
        result.append(dataclasses.replace(item, args=args))

    for node in content:
        if isinstance(node, Macro) and node.name == "item":
            close()
            item = node
            body = []
        elif item is None:
            result.append(node)
        else:
            body.append(node)
    close()
    return tuple(result)


def _default_item_slots() -> tuple[Argument, ...]:
    """Unsupplied slots for an \\item that reached us without arguments."""
    arity = signature_arity(MACROS["item"].signature)
    return tuple(Argument((), "", "") for _ in range(arity))
