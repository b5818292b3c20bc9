"""Named and positional views over a node's attached arguments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from texptx.ast import Argument, Environment, Macro, Node
from texptx.errors import ArgumentSignatureError

# Slot signatures accepted for \item. The synthetic body argument attached
# by the driver comes last and is not part of either signature.
ITEM_ARG_NAMES_REG: tuple[str | None, ...] = ("label",)
ITEM_ARG_NAMES_BEAMER: tuple[str | None, ...] = (None, "label", None)


def arg_is_supplied(arg: Argument | None) -> bool:
    """Return True unless *arg* is an optional slot left empty in the source."""
    if arg is None:
        return False
    return not (arg.open_mark == "" and not arg.content)


def get_args_content(node: Macro | Environment) -> list[tuple[Node, ...] | None]:
    """Positional view: content per slot, None where the slot was not supplied.

    A supplied-but-empty argument (``[]`` or ``{}``) yields an empty tuple.
    """
    if node.args is None:
        return []
    return [a.content if arg_is_supplied(a) else None for a in node.args]


def get_named_args_content(
    node: Macro | Environment,
    names: Sequence[str | None],
) -> dict[str, tuple[Node, ...] | None]:
    """Map each declared slot name to its content. None names skip a position."""
    contents = get_args_content(node)
    result: dict[str, tuple[Node, ...] | None] = {}
    for i, name in enumerate(names):
        if name is None:
            continue
        result[name] = contents[i] if i < len(contents) else None
    return result


@dataclass(frozen=True, slots=True)
class ItemArgs:
    """Extracted slots of an \\item."""

    label: tuple[Node, ...] | None
    body: tuple[Node, ...]


def get_item_args(node: Macro) -> ItemArgs:
    """Extract the label and body of an \\item whose body is already attached."""
    if node.args is None or not node.args:
        raise ArgumentSignatureError(
            "cannot find \\item arguments; the item body must be attached before conversion",
            node.span,
        )
    slot_count = len(node.args) - 1
    if slot_count == len(ITEM_ARG_NAMES_BEAMER):
        names = ITEM_ARG_NAMES_BEAMER
    elif slot_count == len(ITEM_ARG_NAMES_REG):
        names = ITEM_ARG_NAMES_REG
    else:
        raise ArgumentSignatureError(
            f"\\item has {slot_count} argument(s); expected "
            f"{len(ITEM_ARG_NAMES_REG)} or {len(ITEM_ARG_NAMES_BEAMER)}",
            node.span,
        )
    named = get_named_args_content(node, names)
    return ItemArgs(label=named["label"], body=node.args[-1].content)
