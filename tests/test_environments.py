"""Block composition, alias expansion, and environment removal."""

from __future__ import annotations

import pytest
from conftest import assert_block, env, tags, text_of, words

from texptx.ast import Argument, HtmlLike, String, build_block, optional_arg
from texptx.environments import (
    ENVIRONMENT_REPLACEMENTS,
    BlockConfig,
    compose_block,
    env_factory,
    gen_environment_replacements,
    remove_env,
)
from texptx.provides import ENV_ALIASES


class TestComposeBlock:
    def test_theorem_alias_with_title(self, ctx) -> None:
        rule = ENVIRONMENT_REPLACEMENTS.lookup("thm")
        node = env("thm", *words("The sum of squares."), title=(String("Pythagoras"),))
        result = assert_block(rule(node, ctx), "theorem")

        assert tags(result.content) == ["title", "statement"]
        title, statement = result.content
        assert text_of(title.content) == "Pythagoras"
        assert tags(statement.content) == ["p"]
        assert text_of(statement.content) == "The sum of squares."

    def test_no_title_when_argument_absent(self, ctx) -> None:
        rule = env_factory("remark")
        result = rule(env("remark", *words("Note this.")), ctx)
        assert tags(result.content) == ["p"]

    def test_empty_title_argument_still_supplied(self, ctx) -> None:
        rule = env_factory("remark")
        result = rule(env("remark", *words("Body"), title=()), ctx)
        assert tags(result.content) == ["title", "p"]
        assert result.content[0].content == ()

    def test_title_not_extracted_when_disabled(self, ctx) -> None:
        rule = env_factory("figure", extract_title_from_args=False, wrap_content_in_pars=False)
        result = rule(env("figure", String("x"), title=(String("T"),)), ctx)
        assert tags(result.content) == []
        assert result.content == (String("x"),)

    def test_title_precedes_statement(self, ctx) -> None:
        rule = env_factory("lemma", requires_statement=True)
        result = rule(env("lemma", *words("a"), title=(String("L"),)), ctx)
        assert tags(result.content) == ["title", "statement"]

    def test_paragraph_grouping(self, ctx) -> None:
        rule = env_factory("note")
        result = rule(env("note", *words("one two\n\nthree")), ctx)
        assert tags(result.content) == ["p", "p"]
        assert text_of(result.content[0].content) == "one two"
        assert text_of(result.content[1].content) == "three"

    def test_raw_content_when_wrapping_disabled(self, ctx) -> None:
        inner = build_block("image", ())
        rule = env_factory("figure", wrap_content_in_pars=False, extract_title_from_args=False)
        result = rule(env("figure", inner), ctx)
        assert result.content == (inner,)

    def test_additional_attributes_copied(self, ctx) -> None:
        rule = env_factory("theorem", requires_statement=True)
        node = env("theorem", *words("x"), render_info={"additional_attributes": {"xml:id": "thm-1"}})
        result = rule(node, ctx)
        assert result.attributes == {"xml:id": "thm-1"}

    def test_no_attributes_by_default(self, ctx) -> None:
        result = env_factory("theorem")(env("theorem", *words("x")), ctx)
        assert result.attributes == {}

    def test_warning_message_emitted(self, ctx, sink) -> None:
        rule = env_factory("blockquote", warning_message="centering is not supported")
        result = rule(env("center", *words("x")), ctx)
        assert result.tag == "blockquote"
        assert len(sink) == 1
        d = sink.messages[0]
        assert "centering is not supported" in d.message
        assert d.origin == "env-subs"

    def test_warning_without_sink(self) -> None:
        from texptx.rules import RuleContext

        rule = env_factory("blockquote", warning_message="dropped")
        result = rule(env("center", *words("x")), RuleContext())
        assert isinstance(result, HtmlLike)

    def test_span_preserved(self, ctx) -> None:
        node = env("proof", *words("x"))
        result = env_factory("proof")(node, ctx)
        assert result.span == node.span

    def test_compose_block_directly(self, ctx) -> None:
        config = BlockConfig(requires_statement=True, extract_title_from_args=False)
        result = compose_block("axiom", config, env("axm", *words("x"), title=(String("T"),)), ctx)
        assert result.tag == "axiom"
        assert tags(result.content) == ["statement"]

    def test_title_consumed_once(self, ctx) -> None:
        # The produced element is not an Environment, so no rule applies twice
        from texptx.ast import Root
        from texptx.convert import convert

        node = env("thm", *words("x"), title=(String("P"),))
        once = convert(Root((node,))).root
        twice = convert(once).root
        assert once == twice
        assert tags(twice.content[0].content) == ["title", "statement"]


class TestAliasExpansion:
    @pytest.mark.parametrize(
        "alias,canonical",
        [
            ("thm", "theorem"),
            ("theorem", "theorem"),
            ("defn", "definition"),
            ("lem", "lemma"),
            ("pf", "proof"),
            ("rmk", "remark"),
            ("sol", "solution"),
            ("warn", "warning"),
            ("eg", "example"),
        ],
    )
    def test_alias_produces_canonical_tag(self, ctx, alias: str, canonical: str) -> None:
        rule = ENVIRONMENT_REPLACEMENTS.lookup(alias)
        assert rule is not None
        result = rule(env(alias, *words("x")), ctx)
        assert result.tag == canonical

    def test_every_alias_registered_with_canonical_tag(self, ctx) -> None:
        for entry in ENV_ALIASES.values():
            for spelling in (entry.name, *entry.aliases):
                rule = ENVIRONMENT_REPLACEMENTS.lookup(spelling)
                assert rule is not None, spelling
                result = rule(env(spelling, *words("x")), ctx)
                assert result.tag == entry.name

    def test_statement_flag_follows_table(self, ctx) -> None:
        for entry in ENV_ALIASES.values():
            result = ENVIRONMENT_REPLACEMENTS.lookup(entry.name)(env(entry.name, *words("x")), ctx)
            has_statement = tags(result.content) == ["statement"]
            assert has_statement == entry.requires_statement, entry.name

    def test_generated_count(self) -> None:
        reps = gen_environment_replacements()
        expected = sum(1 + len(e.aliases) for e in ENV_ALIASES.values())
        assert len(reps) == expected


class TestHandWrittenEntries:
    def test_center_and_quote_are_blockquotes(self, ctx) -> None:
        for name in ("center", "quote"):
            result = ENVIRONMENT_REPLACEMENTS.lookup(name)(env(name, *words("x")), ctx)
            assert result.tag == "blockquote"
            assert tags(result.content) == ["p"]

    @pytest.mark.parametrize("name", ["figure", "table"])
    def test_containers_keep_raw_content(self, ctx, name: str) -> None:
        inner = (String("a"), String("b"))
        node = env(name, *inner, args=(optional_arg(String("h")),))
        result = ENVIRONMENT_REPLACEMENTS.lookup(name)(node, ctx)
        assert result.tag == name
        assert result.content == inner

    def test_list_environments_registered(self) -> None:
        for name in ("itemize", "enumerate", "description", "tabular"):
            assert name in ENVIRONMENT_REPLACEMENTS


class TestRemoveEnv:
    def test_content_preserved(self, ctx, sink) -> None:
        content = words("keep all of this\n\nand this")
        result = remove_env(env("minipage", *content), ctx)
        assert result == content
        assert len(result) == len(content)

    def test_one_diagnostic(self, ctx, sink) -> None:
        remove_env(env("minipage", String("x")), ctx)
        assert len(sink) == 1
        d = sink.messages[0]
        assert '"minipage"' in d.message
        assert "removed" in d.message
        assert d.origin == "environment-subs"

    def test_empty_environment(self, ctx, sink) -> None:
        assert remove_env(env("minipage"), ctx) == ()
        assert len(sink) == 1

    def test_argument_nodes_not_in_output(self, ctx) -> None:
        node = env("minipage", String("x"), args=(Argument((String("5cm"),)),))
        assert remove_env(node, ctx) == (String("x"),)
