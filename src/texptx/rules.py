"""RuleRegistry: selector name -> substitution rule.

A rule receives the node being replaced and a RuleContext, and returns the
replacement: one node, or a sequence of nodes (empty to delete).

Register with the decorator::

    @registry.register("term")
    def term(node, ctx):
        return build_block("term", get_args_content(node)[0] or ())
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from texptx.ast import Node
from texptx.errors import DiagnosticSink
from texptx.walk import VisitInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Traversal position and the diagnostic sink of the file being converted."""

    info: VisitInfo = field(default_factory=VisitInfo)
    file: DiagnosticSink | None = None


Rule = Callable[[Node, RuleContext], Node | Sequence[Node]]


class RuleRegistry:
    def __init__(self, kind: str = "rule") -> None:
        self.kind = kind
        self._rules: dict[str, Rule] = {}

    # ---------------------------------------------------------------- register

    def register(self, *names: str) -> Callable[[Rule], Rule]:
        """Decorator that registers a rule under one or more selector names."""

        def decorator(fn: Rule) -> Rule:
            for name in names:
                self.add(name, fn)
            return fn

        return decorator

    def add(self, name: str, rule: Rule) -> None:
        """Register *rule* for *name*. A later registration replaces an earlier one."""
        if name in self._rules:
            logger.debug("Overriding %s rule: %s", self.kind, name)
        else:
            logger.debug("Registered %s rule: %s", self.kind, name)
        self._rules[name] = rule

    def update(self, rules: Mapping[str, Rule] | RuleRegistry) -> None:
        items = rules._rules if isinstance(rules, RuleRegistry) else rules
        for name, rule in items.items():
            self.add(name, rule)

    # ------------------------------------------------------------------ lookup

    def lookup(self, name: str) -> Rule | None:
        return self._rules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def copy(self) -> RuleRegistry:
        clone = RuleRegistry(self.kind)
        clone._rules = dict(self._rules)
        return clone

    # ---------------------------------------------------------- introspection

    def registered_names(self) -> list[str]:
        return sorted(self._rules)
