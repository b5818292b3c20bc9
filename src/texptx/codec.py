"""JSON AST codec.

Nodes are encoded as objects with a ``type`` field::

    {"type": "macro", "content": "item", "args": [...], "position": {...}}
    {"type": "environment", "env": "thm", "args": [...], "content": [...]}
    {"type": "argument", "openMark": "[", "closeMark": "]", "content": [...]}

Render hints travel in ``_renderInfo``. Target-vocabulary elements are
encoded as macros named ``html-tag:<tag>`` with one argument holding their
content and ``_renderInfo.attributes`` holding their attributes.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

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
    Position,
    Root,
    Span,
    String,
    Whitespace,
)
from texptx.errors import CodecError

HTML_TAG_PREFIX = "html-tag:"

# JSON render-info key -> render_info key
_HINT_KEYS: dict[str, str] = {
    "additionalAttributes": "additional_attributes",
    "sysdelims": "sysdelims",
}
_HINT_KEYS_REVERSED: dict[str, str] = {v: k for k, v in _HINT_KEYS.items()}


def loads(text: str) -> Root:
    """Decode a JSON document whose top-level node is a root."""
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        pos = Position(exc.lineno, exc.colno, exc.pos)
        raise CodecError(f"invalid JSON: {exc.msg}", Span(pos, pos)) from None
    node = load_node(obj)
    if not isinstance(node, Root):
        raise CodecError(f"expected a root node, got {type(node).__name__}")
    return node


def dumps(node: Node, indent: int | None = 2) -> str:
    return json.dumps(dump_node(node), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def load_node(obj: Any) -> Node:
    if not isinstance(obj, Mapping):
        raise CodecError(f"expected a node object, got {type(obj).__name__}")
    kind = obj.get("type")
    span = _load_span(obj.get("position"))
    try:
        match kind:
            case "root":
                return Root(_load_nodes(obj.get("content", [])), span)
            case "string":
                return String(str(obj["content"]), span)
            case "whitespace":
                return Whitespace(span)
            case "parbreak":
                return Parbreak(span)
            case "comment":
                return Comment(str(obj.get("content", "")), span)
            case "group":
                return Group(_load_nodes(obj.get("content", [])), span)
            case "inlinemath":
                return InlineMath(_load_nodes(obj.get("content", [])), span)
            case "displaymath":
                return DisplayMath(_load_nodes(obj.get("content", [])), span)
            case "macro":
                return _load_macro(obj, span)
            case "environment" | "mathenv":
                return Environment(
                    str(obj["env"]),
                    _load_nodes(obj.get("content", [])),
                    _load_args(obj.get("args")),
                    span,
                    _load_render_info(obj.get("_renderInfo"), span),
                    math=kind == "mathenv",
                )
            case _:
                raise CodecError(f"unknown node type: {kind!r}", span)
    except KeyError as exc:
        raise CodecError(f"{kind} node is missing field {exc.args[0]!r}", span) from None


def _load_macro(obj: Mapping[str, Any], span: Span | None) -> Node:
    name = str(obj["content"])
    args = _load_args(obj.get("args"))
    if name.startswith(HTML_TAG_PREFIX):
        content = args[0].content if args else ()
        info = obj.get("_renderInfo") or {}
        if not isinstance(info, Mapping):
            raise CodecError("_renderInfo must be an object", span)
        attributes = _load_attributes(info.get("attributes"), "attributes", span)
        return HtmlLike(name[len(HTML_TAG_PREFIX) :], content, attributes, span)
    return Macro(name, args, span, _load_render_info(obj.get("_renderInfo"), span))


def _load_nodes(items: Any) -> tuple[Node, ...]:
    if not isinstance(items, list):
        raise CodecError(f"expected a list of nodes, got {type(items).__name__}")
    return tuple(load_node(item) for item in items)


def _load_args(items: Any) -> tuple[Argument, ...] | None:
    if items is None:
        return None
    if not isinstance(items, list):
        raise CodecError(f"expected a list of arguments, got {type(items).__name__}")
    args: list[Argument] = []
    for item in items:
        if not isinstance(item, Mapping) or item.get("type") != "argument":
            raise CodecError("expected an argument object")
        args.append(
            Argument(
                _load_nodes(item.get("content", [])),
                str(item.get("openMark", "")),
                str(item.get("closeMark", "")),
                _load_span(item.get("position")),
            )
        )
    return tuple(args)


def _load_render_info(info: Any, span: Span | None = None) -> dict[str, Any]:
    if not info:
        return {}
    if not isinstance(info, Mapping):
        raise CodecError("_renderInfo must be an object", span)
    result: dict[str, Any] = {}
    for key, value in info.items():
        name = _HINT_KEYS.get(key, key)
        if value is None:
            result[name] = value
        elif name == "sysdelims":
            result[name] = _load_sysdelims(value, span)
        elif name == "additional_attributes":
            result[name] = _load_attributes(value, key, span)
        else:
            result[name] = value
    return result


def _load_sysdelims(value: Any, span: Span | None) -> tuple[tuple[Node, ...], tuple[Node, ...]]:
    if not isinstance(value, list) or len(value) != 2:
        raise CodecError("sysdelims must be a list of two node lists", span)
    front, back = value
    return _load_nodes(front or []), _load_nodes(back or [])


def _load_attributes(value: Any, key: str, span: Span | None) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise CodecError(f"{key} must be an object, got {type(value).__name__}", span)
    return dict(value)


def _load_span(position: Any) -> Span | None:
    if not isinstance(position, Mapping):
        return None
    try:
        start = position["start"]
        end = position["end"]
        return Span(
            Position(int(start["line"]), int(start["column"]), int(start.get("offset", 0))),
            Position(int(end["line"]), int(end["column"]), int(end.get("offset", 0))),
        )
    except (KeyError, TypeError, ValueError):
        raise CodecError("malformed position") from None


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def dump_node(node: Node) -> dict[str, Any]:
    obj: dict[str, Any]
    match node:
        case Root():
            obj = {"type": "root", "content": _dump_nodes(node.content)}
        case String():
            obj = {"type": "string", "content": node.content}
        case Whitespace():
            obj = {"type": "whitespace"}
        case Parbreak():
            obj = {"type": "parbreak"}
        case Comment():
            obj = {"type": "comment", "content": node.content}
        case Group():
            obj = {"type": "group", "content": _dump_nodes(node.content)}
        case InlineMath():
            obj = {"type": "inlinemath", "content": _dump_nodes(node.content)}
        case DisplayMath():
            obj = {"type": "displaymath", "content": _dump_nodes(node.content)}
        case Macro():
            obj = {"type": "macro", "content": node.name}
            if node.args is not None:
                obj["args"] = [_dump_arg(a) for a in node.args]
            if node.render_info:
                obj["_renderInfo"] = _dump_render_info(node.render_info)
        case Environment():
            kind = "mathenv" if node.math else "environment"
            obj = {"type": kind, "env": node.name, "content": _dump_nodes(node.content)}
            if node.args is not None:
                obj["args"] = [_dump_arg(a) for a in node.args]
            if node.render_info:
                obj["_renderInfo"] = _dump_render_info(node.render_info)
        case HtmlLike():
            obj = {
                "type": "macro",
                "content": HTML_TAG_PREFIX + node.tag,
                "args": [_dump_arg(Argument(node.content))],
            }
            if node.attributes:
                obj["_renderInfo"] = {"attributes": dict(node.attributes)}
        case _:
            raise CodecError(f"cannot encode {type(node).__name__}")
    if node.span is not None:
        obj["position"] = _dump_span(node.span)
    return obj


def _dump_nodes(nodes: tuple[Node, ...]) -> list[dict[str, Any]]:
    return [dump_node(n) for n in nodes]


def _dump_arg(arg: Argument) -> dict[str, Any]:
    return {
        "type": "argument",
        "openMark": arg.open_mark,
        "closeMark": arg.close_mark,
        "content": _dump_nodes(arg.content),
    }


def _dump_render_info(info: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in info.items():
        if key == "sysdelims" and value is not None:
            value = [_dump_nodes(tuple(part)) for part in value]
        result[_HINT_KEYS_REVERSED.get(key, key)] = value
    return result


def _dump_span(span: Span) -> dict[str, Any]:
    return {
        "start": {"line": span.start.line, "column": span.start.column, "offset": span.start.offset},
        "end": {"line": span.end.line, "column": span.end.column, "offset": span.end.offset},
    }
