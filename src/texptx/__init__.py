"""LaTeX AST to PreTeXt substitution rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from texptx.convert import EngineOptions

__version__ = "0.1.0"


def rewrite(
    source: str,
    filename: str = "input.tex",
    options: EngineOptions | None = None,
) -> str:
    """Decode a JSON AST, apply the substitution rules, and encode the result."""
    from texptx.codec import dumps, loads
    from texptx.convert import convert

    root = loads(source)
    result = convert(root, filename, options)
    return dumps(result.root)
