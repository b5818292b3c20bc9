"""tabular -> <tabular><row><cell> conversion."""

from __future__ import annotations

from texptx.ast import Comment, Environment, HtmlLike, Macro, Node, Parbreak, String, Whitespace, build_block
from texptx.rules import RuleContext

# Rule macros carry no cell content
_RULE_MACROS = frozenset({"hline", "cline", "toprule", "midrule", "bottomrule"})


def create_table_from_tabular(env: Environment, ctx: RuleContext) -> HtmlLike:
    """Split a tabular body into rows at \\\\ and cells at &."""
    rows = _split_rows(env.content)

    row_nodes: list[Node] = []
    for row in rows:
        cells = [build_block("cell", cell) for cell in row]
        row_nodes.append(build_block("row", cells))
    return build_block("tabular", row_nodes, span=env.span)


def _split_rows(content: tuple[Node, ...]) -> list[list[list[Node]]]:
    # rows[i][j] = nodes of cell j of row i
    rows: list[list[list[Node]]] = [[[]]]

    for node in content:
        if isinstance(node, Macro) and node.name == "\\":
            rows.append([[]])
        elif isinstance(node, Macro) and node.name in _RULE_MACROS:
            continue
        elif isinstance(node, String) and node.content == "&":
            rows[-1].append([])
        elif isinstance(node, Comment):
            continue
        else:
            rows[-1][-1].append(node)

    for row in rows:
        for cell in row:
            _trim_cell(cell)

    # Drop rows where every cell is empty (e.g. after a final \\)
    return [r for r in rows if any(cell for cell in r)]


def _trim_cell(cell: list[Node]) -> None:
    """Strip whitespace at cell boundaries."""
    while cell and isinstance(cell[0], (Whitespace, Parbreak)):
        cell.pop(0)
    while cell and isinstance(cell[-1], (Whitespace, Parbreak)):
        cell.pop()
