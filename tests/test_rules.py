"""RuleRegistry registration and lookup."""

from __future__ import annotations

import logging

from texptx.ast import String
from texptx.rules import RuleRegistry


def _const(value: str):
    return lambda node, ctx: String(value)


class TestRuleRegistry:
    def test_register_decorator(self) -> None:
        reg = RuleRegistry()

        @reg.register("a", "b")
        def rule(node, ctx):
            return ()

        assert reg.lookup("a") is rule
        assert reg.lookup("b") is rule

    def test_lookup_missing(self) -> None:
        assert RuleRegistry().lookup("nope") is None

    def test_last_write_wins(self) -> None:
        reg = RuleRegistry()
        first, second = _const("1"), _const("2")
        reg.add("x", first)
        reg.add("x", second)
        assert reg.lookup("x") is second
        assert len(reg) == 1

    def test_update_from_mapping_and_registry(self) -> None:
        reg = RuleRegistry()
        reg.update({"a": _const("a")})
        other = RuleRegistry()
        other.add("b", _const("b"))
        reg.update(other)
        assert reg.registered_names() == ["a", "b"]

    def test_copy_is_independent(self) -> None:
        reg = RuleRegistry()
        reg.add("a", _const("a"))
        clone = reg.copy()
        clone.add("b", _const("b"))
        assert "b" in clone
        assert "b" not in reg

    def test_iteration_order(self) -> None:
        reg = RuleRegistry()
        for name in ("z", "a", "m"):
            reg.add(name, _const(name))
        assert list(reg) == ["z", "a", "m"]

    def test_override_logged(self, caplog) -> None:
        reg = RuleRegistry("environment")
        reg.add("x", _const("1"))
        with caplog.at_level(logging.DEBUG, logger="texptx.rules"):
            reg.add("x", _const("2"))
        assert "Overriding environment rule: x" in caplog.text
