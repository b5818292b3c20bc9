"""Static capability registry: recognised environments, their aliases, and
argument signatures of the macros the conversion rules handle."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AliasEntry:
    """A target block kind and the source spellings that map onto it."""

    name: str
    requires_statement: bool
    aliases: frozenset[str]


def _make_env_aliases() -> dict[str, AliasEntry]:
    table: dict[str, AliasEntry] = {}
    seen: dict[str, str] = {}

    def e(name: str, requires_statement: bool, *aliases: str) -> None:
        for spelling in (name, *aliases):
            if spelling in seen:
                raise ValueError(f"alias {spelling!r} used by both {seen[spelling]} and {name}")
            seen[spelling] = name
        table[name] = AliasEntry(name, requires_statement, frozenset(aliases))

    e("abstract", False, "abs", "abstr")
    e("acknowledgement", False, "ack")
    e("algorithm", True, "algo", "alg")
    e("answer", False, "ans")
    e("assumption", True, "assu", "ass")
    e("axiom", True, "axm")
    e("claim", True, "cla")
    e("conjecture", True, "con", "conj", "conjec")
    e("construction", False)
    e("convention", False, "conv")
    e("corollary", True, "cor", "corr", "coro", "corol", "corss")
    e("definition", True, "def", "defn", "dfn", "defi", "defin", "de")
    e("example", True, "exam", "exa", "eg", "exmp", "expl", "exm")
    e("exercise", True, "exer", "exers")
    e("exploration", False)
    e("fact", True)
    e("heuristic", True)
    e("hint", False)
    e("hypothesis", True, "hyp")
    e("identity", True, "idnty")
    e("insight", False)
    e("investigation", False)
    e("lemma", True, "lem", "lma", "lemm", "lm")
    e("notation", False, "no", "nota", "ntn", "nt", "notn", "notat")
    e("note", False, "notes")
    e("observation", False, "obs")
    e("principle", True)
    e("problem", True, "prob", "prb")
    e("project", False)
    e("proof", False, "pf", "prf", "demo")
    e("proposition", True, "prop", "pro", "prp", "props")
    e("question", True, "qu", "ques", "quest", "qsn")
    e("remark", False, "rem", "rmk", "rema", "bem", "subrem")
    e("task", True)
    e("theorem", True, "thm", "theo", "theor", "thmss", "thrm")
    e("solution", False, "sol")
    e("warning", False, "warn", "wrn")

    return table


ENV_ALIASES: dict[str, AliasEntry] = _make_env_aliases()

# Alias map: alternate spelling -> canonical name
ALIASES: dict[str, str] = {
    alias: entry.name for entry in ENV_ALIASES.values() for alias in entry.aliases
}


def resolve_name(name: str) -> str:
    """Resolve an environment alias to its canonical name."""
    return ALIASES.get(name, name)


@dataclass(frozen=True, slots=True)
class MacroInfo:
    """Argument signature of a recognised macro or environment.

    Signatures use the xparse letters: ``m`` mandatory, ``o`` optional,
    ``s`` star.
    """

    name: str
    signature: str


def signature_arity(signature: str) -> int:
    """Number of argument slots a signature declares."""
    return len(signature.split())


def _make_macros() -> dict[str, MacroInfo]:
    defs: dict[str, MacroInfo] = {}

    def d(name: str, signature: str) -> None:
        defs[name] = MacroInfo(name, signature)

    d("term", "m")
    d("systeme", "s o o m")
    d("sysdelim", "m m")
    d("item", "o")

    return defs


def _make_environments() -> dict[str, MacroInfo]:
    defs: dict[str, MacroInfo] = {}
    for entry in ENV_ALIASES.values():
        for spelling in (entry.name, *sorted(entry.aliases)):
            defs[spelling] = MacroInfo(spelling, "o")
    return defs


MACROS: dict[str, MacroInfo] = _make_macros()
ENVIRONMENTS: dict[str, MacroInfo] = _make_environments()
