"""\\systeme -> delimited array conversion and the \\sysdelim render-hint pass."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass

from texptx.args import get_args_content
from texptx.ast import (
    Argument,
    DisplayMath,
    Environment,
    Group,
    InlineMath,
    Macro,
    Node,
    Root,
    String,
    Whitespace,
    with_render_info,
)
from texptx.errors import ArgumentSignatureError, SystemeError, TexPtxError
from texptx.provides import MACROS, signature_arity
from texptx.rules import RuleContext

LEFT = Macro("left")
RIGHT = Macro("right")
DEFAULT_LEFT_DELIM = Macro("{")
DEFAULT_RIGHT_DELIM = String(".")

_SEPARATORS = frozenset({",", ";"})
_SIGNS = frozenset({"+", "-"})
_SINGLE_CHARS = frozenset("+-=,;")


@dataclass(frozen=True, slots=True)
class SystemeOutcome:
    """Result of converting one \\systeme macro."""

    ok: bool
    nodes: tuple[Node, ...] = ()
    reason: str = ""


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def convert_systeme(node: Macro) -> SystemeOutcome:
    """Convert a \\systeme macro, reporting failure instead of raising."""
    try:
        arity = signature_arity(MACROS["systeme"].signature)
        if node.args is None or len(node.args) != arity:
            count = 0 if node.args is None else len(node.args)
            raise ArgumentSignatureError(f"\\systeme expects {arity} arguments, got {count}", node.span)

        args = get_args_content(node)
        whitelisted_variables = args[1] or None
        equations = args[3] or ()
        array = systeme_contents_to_array(
            equations,
            proper_spacing=False,
            whitelisted_variables=whitelisted_variables,
        )

        sysdelims = node.render_info.get("sysdelims")
        if sysdelims:
            if len(sysdelims) != 2:
                raise SystemeError("sysdelims hint must hold a front and a back delimiter", node.span)
            front, back = sysdelims
            nodes = (LEFT, *(front or ()), array, RIGHT, *(back or ()))
        else:
            nodes = (LEFT, DEFAULT_LEFT_DELIM, array, RIGHT, DEFAULT_RIGHT_DELIM)
    except TexPtxError as exc:
        return SystemeOutcome(False, reason=exc.message)
    return SystemeOutcome(True, nodes)


def systeme_rule(node: Macro, ctx: RuleContext) -> Node | tuple[Node, ...]:
    outcome = convert_systeme(node)
    if not outcome.ok:
        return node
    return outcome.nodes


def sysdelim_rule(node: Macro, ctx: RuleContext) -> tuple[Node, ...]:
    # Its delimiters were already attached to the \systeme macros that follow
    return ()


# ---------------------------------------------------------------------------
# Render-hint pre-pass
# ---------------------------------------------------------------------------


def attach_systeme_render_info(root: Root) -> Root:
    """Attach the delimiters of the governing \\sysdelim to each \\systeme.

    A \\sysdelim applies to later \\systeme macros in its own scope and in
    nested groups and environments, never outside them.
    """
    return dataclasses.replace(root, content=_attach(root.content, None))


def _attach(
    nodes: tuple[Node, ...],
    delims: tuple[tuple[Node, ...], tuple[Node, ...]] | None,
) -> tuple[Node, ...]:
    result: list[Node] = []
    current = delims
    for node in nodes:
        if isinstance(node, Macro) and node.name == "sysdelim":
            args = get_args_content(node)
            if len(args) >= 2:
                current = (args[0] or (), args[1] or ())
            result.append(node)
        elif isinstance(node, Macro):
            if node.name == "systeme" and current is not None:
                node = with_render_info(node, sysdelims=current)
            if node.args is not None:
                node = dataclasses.replace(node, args=_attach_args(node.args, current))
            result.append(node)
        elif isinstance(node, Environment):
            args = _attach_args(node.args, current) if node.args is not None else None
            result.append(dataclasses.replace(node, args=args, content=_attach(node.content, current)))
        elif isinstance(node, (Group, InlineMath, DisplayMath)):
            result.append(dataclasses.replace(node, content=_attach(node.content, current)))
        else:
            result.append(node)
    return tuple(result)


def _attach_args(
    args: tuple[Argument, ...],
    delims: tuple[tuple[Node, ...], tuple[Node, ...]] | None,
) -> tuple[Argument, ...]:
    return tuple(dataclasses.replace(a, content=_attach(a.content, delims)) for a in args)


# ---------------------------------------------------------------------------
# Array building
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Term:
    sign: str
    atoms: tuple[Node, ...]
    variable: str | None


def systeme_contents_to_array(
    equations: Iterable[Node],
    *,
    proper_spacing: bool = True,
    whitelisted_variables: Iterable[Node] | None = None,
) -> Environment:
    """Lay out a system of linear equations as an ``array``.

    Equations are separated by ``,`` or ``;``. Each gets one column per
    variable, then ``=`` and its right-hand side.
    """
    whitelist = _variable_names(whitelisted_variables) if whitelisted_variables is not None else None
    atoms = _tokenize(equations)

    rows: list[tuple[list[_Term], tuple[Node, ...]]] = []
    for equation in _split(atoms, _SEPARATORS):
        if not equation:
            continue
        sides = _split(equation, frozenset({"="}))
        if len(sides) != 2:
            raise SystemeError(f"equation must contain exactly one '=', found {len(sides) - 1}")
        lhs, rhs = sides
        rows.append((_terms(lhs, whitelist), tuple(rhs)))

    if not rows:
        raise SystemeError("\\systeme has no equations")

    if whitelist is not None:
        variables = list(whitelist)
    else:
        variables = []
        for terms, _ in rows:
            for term in terms:
                if term.variable is not None and term.variable not in variables:
                    variables.append(term.variable)
    has_constants = any(t.variable is None for terms, _ in rows for t in terms)

    content: list[Node] = []
    for i, (terms, rhs) in enumerate(rows):
        if i > 0:
            content.append(Macro("\\"))
        cells: list[list[Node]] = [[] for _ in range(len(variables) + int(has_constants))]
        seen: set[str] = set()
        for term in terms:
            if term.variable is None:
                column = len(variables)
            else:
                if term.variable in seen:
                    raise SystemeError(f"variable {term.variable!r} appears twice in one equation")
                seen.add(term.variable)
                column = variables.index(term.variable)
            cells[column].extend(_signed(term, proper_spacing))
        _drop_leading_plus(cells)
        for j, cell in enumerate(cells):
            if j > 0:
                content.append(String("&"))
            content.extend(cell)
        content.extend([String("&"), String("="), String("&"), *rhs])

    spec = "r" * (len(variables) + int(has_constants)) + "cl"
    return Environment("array", tuple(content), args=(Argument((String(spec),)),))


def _tokenize(nodes: Iterable[Node]) -> list[Node]:
    """Split strings into signs, separators, letters and digit runs; drop whitespace."""
    atoms: list[Node] = []
    for node in nodes:
        if isinstance(node, Whitespace):
            continue
        if not isinstance(node, String):
            atoms.append(node)
            continue
        digits = ""
        for ch in node.content:
            if ch.isdigit() or ch == ".":
                digits += ch
                continue
            if digits:
                atoms.append(String(digits, node.span))
                digits = ""
            if not ch.isspace():
                atoms.append(String(ch, node.span))
        if digits:
            atoms.append(String(digits, node.span))
    return atoms


def _split(atoms: list[Node], marks: frozenset[str]) -> list[list[Node]]:
    parts: list[list[Node]] = [[]]
    for atom in atoms:
        if isinstance(atom, String) and atom.content in marks:
            parts.append([])
        else:
            parts[-1].append(atom)
    return parts


def _atom_key(atom: Node) -> str | None:
    if isinstance(atom, String):
        return atom.content
    if isinstance(atom, Macro):
        return "\\" + atom.name
    return None


def _flat_text(nodes: Iterable[Node]) -> str:
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, String):
            parts.append(node.content)
        elif isinstance(node, Macro):
            parts.append("\\" + node.name)
            for a in node.args or ():
                parts.append(_flat_text(a.content))
        elif isinstance(node, Group):
            parts.append(_flat_text(node.content))
    return "".join(parts)


def _subscript(atoms: list[Node], i: int) -> tuple[str | None, int]:
    """Subscript text starting at atoms[i] and the number of atoms it spans."""
    if i >= len(atoms):
        return None, 0
    atom = atoms[i]
    if isinstance(atom, String) and atom.content == "_" and i + 1 < len(atoms):
        return _flat_text(atoms[i + 1 : i + 2]), 2
    if isinstance(atom, Macro) and atom.name == "_" and atom.args:
        return _flat_text(atom.args[-1].content), 1
    return None, 0


def _variable_keys(atoms: list[Node]) -> list[tuple[str, bool]]:
    """Key of each atom, with subscripts folded into the atom they follow.

    ``x_1`` yields the single key ``"x_1"``. The flag is True for keys that
    look like unknowns: a single letter, or a subscripted letter or macro.
    """
    keys: list[tuple[str, bool]] = []
    i = 0
    while i < len(atoms):
        atom = atoms[i]
        key = _atom_key(atom)
        i += 1
        if key is None:
            continue
        letter = isinstance(atom, String) and len(key) == 1 and key.isalpha()
        if letter or (isinstance(atom, Macro) and atom.name != "_"):
            subscript, used = _subscript(atoms, i)
            if subscript is not None:
                keys.append((f"{key}_{subscript}", True))
                i += used
                continue
        keys.append((key, letter))
    return keys


def _variable_names(nodes: Iterable[Node]) -> list[str]:
    names: list[str] = []
    for key, _ in _variable_keys(_tokenize(nodes)):
        if key not in _SEPARATORS and key not in names:
            names.append(key)
    return names


def _terms(lhs: list[Node], whitelist: list[str] | None) -> list[_Term]:
    terms: list[_Term] = []
    sign = "+"
    current: list[Node] = []

    def close() -> None:
        if current:
            terms.append(_Term(sign, tuple(current), _find_variable(current, whitelist)))

    for atom in lhs:
        if isinstance(atom, String) and atom.content in _SIGNS:
            close()
            sign = atom.content
            current = []
        else:
            current.append(atom)
    close()
    return terms


def _find_variable(atoms: list[Node], whitelist: list[str] | None) -> str | None:
    for key, is_unknown in _variable_keys(atoms):
        if whitelist is not None:
            if key in whitelist:
                return key
        elif is_unknown:
            return key
    return None


def _signed(term: _Term, proper_spacing: bool) -> list[Node]:
    if proper_spacing:
        return [Group(()), String(term.sign), Group(()), *term.atoms]
    return [String(term.sign), *term.atoms]


def _drop_leading_plus(cells: list[list[Node]]) -> None:
    """The first non-empty cell of a row does not show a '+' sign."""
    for cell in cells:
        if not cell:
            continue
        for i, node in enumerate(cell):
            if isinstance(node, String) and node.content in _SIGNS:
                if node.content == "+":
                    del cell[i]
                    # Spacing groups around a dropped sign are dropped with it
                    if i < len(cell) and isinstance(cell[i], Group) and not cell[i].content:
                        del cell[i]
                    if i > 0 and isinstance(cell[i - 1], Group) and not cell[i - 1].content:
                        del cell[i - 1]
                break
        return
