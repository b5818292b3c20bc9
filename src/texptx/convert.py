"""SubstitutionEngine: runs the pre-passes, then rewrites the tree bottom-up
by looking up a rule for every macro and environment."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from texptx.ast import DisplayMath, Environment, InlineMath, Macro, Node, Root
from texptx.environments import ENVIRONMENT_REPLACEMENTS, remove_env
from texptx.errors import Diagnostic, DiagnosticSink, TexPtxError
from texptx.macros import MACRO_REPLACEMENTS
from texptx.rules import Rule, RuleContext
from texptx.systeme import attach_systeme_render_info
from texptx.walk import VisitInfo, VisitResult, attach_item_bodies, replace_nodes

logger = logging.getLogger(__name__)

UNKNOWN_ENV_POLICIES = ("keep", "remove")


@dataclass(frozen=True, slots=True)
class EngineOptions:
    """What to do with constructs that have no registered rule."""

    unknown_environments: str = "keep"
    remove_environments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.unknown_environments not in UNKNOWN_ENV_POLICIES:
            raise ValueError(
                f"unknown_environments must be one of {', '.join(UNKNOWN_ENV_POLICIES)}, "
                f"got {self.unknown_environments!r}"
            )


@dataclass(frozen=True, slots=True)
class ConversionResult:
    root: Root
    diagnostics: tuple[Diagnostic, ...]


class SubstitutionEngine:
    """Holds the macro and environment registries consulted during a rewrite."""

    def __init__(self, options: EngineOptions | None = None) -> None:
        self.options = options or EngineOptions()
        self.macros = MACRO_REPLACEMENTS.copy()
        self.environments = ENVIRONMENT_REPLACEMENTS.copy()
        for name in self.options.remove_environments:
            self.environments.add(name, remove_env)

    def lookup(self, node: Node, info: VisitInfo | None = None) -> Rule | None:
        """Rule for *node*, or None when it passes through unchanged.

        The ``remove`` policy never strips environments in math mode.
        """
        if isinstance(node, Macro):
            return self.macros.lookup(node.name)
        if isinstance(node, Environment):
            rule = self.environments.lookup(node.name)
            if (
                rule is None
                and self.options.unknown_environments == "remove"
                and not in_math_mode(node, info)
            ):
                return remove_env
            return rule
        return None

    def convert(self, root: Root, filename: str = "input.tex") -> ConversionResult:
        sink = DiagnosticSink(filename)
        root = attach_item_bodies(root)
        root = attach_systeme_render_info(root)

        def visit(node: Node, info: VisitInfo) -> VisitResult:
            rule = self.lookup(node, info)
            if rule is None:
                return None
            try:
                return rule(node, RuleContext(info, sink))
            except TexPtxError as exc:
                name = node.name if isinstance(node, (Macro, Environment)) else type(node).__name__
                logger.warning("Rule for %s failed: %s", name, exc.message)
                sink.add(Diagnostic(f"could not convert {name}: {exc.message}", node.span, "engine"))
                return None

        result = replace_nodes(root, visit)
        return ConversionResult(result, sink.messages)


def in_math_mode(node: Node, info: VisitInfo | None = None) -> bool:
    """True if *node* is a math environment or sits inside math."""
    if isinstance(node, Environment) and node.math:
        return True
    parents = info.parents if info is not None else ()
    return any(
        isinstance(p, (InlineMath, DisplayMath)) or (isinstance(p, Environment) and p.math)
        for p in parents
    )


def convert(
    root: Root,
    filename: str = "input.tex",
    options: EngineOptions | None = None,
) -> ConversionResult:
    """Rewrite *root* with the default registries."""
    return SubstitutionEngine(options).convert(root, filename)
