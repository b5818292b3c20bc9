"""Environment substitution rules and the factories that generate them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from texptx.args import get_args_content, get_item_args
from texptx.ast import Environment, HtmlLike, Macro, Node, build_block
from texptx.errors import make_warning_message
from texptx.pars import wrap_pars
from texptx.provides import ENV_ALIASES
from texptx.rules import Rule, RuleContext, RuleRegistry
from texptx.tables import create_table_from_tabular

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Block composition
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BlockConfig:
    """How an environment's content is composed into a target block."""

    requires_statement: bool = False
    wrap_content_in_pars: bool = True
    extract_title_from_args: bool = True
    warning_message: str = ""


def compose_block(tag: str, config: BlockConfig, env: Environment, ctx: RuleContext) -> HtmlLike:
    """Build one *tag* element from *env*.

    Content is paragraph-grouped, optionally nested in a <statement>, and
    preceded by a <title> when the first optional argument was supplied.
    Attributes attached by earlier passes are copied onto the element.
    """
    if config.warning_message and ctx.file is not None:
        ctx.file.add(make_warning_message(env, config.warning_message, "env-subs"))

    content: list[Node] = list(wrap_pars(env.content) if config.wrap_content_in_pars else env.content)

    if config.requires_statement:
        content = [build_block("statement", content)]

    if config.extract_title_from_args:
        args = get_args_content(env)
        if args and args[0] is not None:
            content.insert(0, build_block("title", args[0]))

    attributes = dict(env.render_info.get("additional_attributes") or {})
    return build_block(tag, content, attributes, env.span)


def env_factory(
    tag: str,
    *,
    requires_statement: bool = False,
    wrap_content_in_pars: bool = True,
    extract_title_from_args: bool = True,
    warning_message: str = "",
) -> Rule:
    """Rule that wraps an environment's content in a *tag* block."""
    config = BlockConfig(
        requires_statement=requires_statement,
        wrap_content_in_pars=wrap_content_in_pars,
        extract_title_from_args=extract_title_from_args,
        warning_message=warning_message,
    )
    return partial(compose_block, tag, config)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def enumerate_factory(parent_tag: str = "ol") -> Rule:
    """Rule converting a list environment to <ol>/<ul>, or <dl> if any item is labelled."""

    def enumerate_to_list(env: Environment, ctx: RuleContext) -> HtmlLike:
        # Item bodies are already attached to the \item macros as a last argument
        items = [n for n in env.content if isinstance(n, Macro) and n.name == "item"]

        is_description_list = False
        content: list[Node] = []
        for node in items:
            if node.args is None:
                continue
            named = get_item_args(node)

            # Wrap the body before adding the title so the label stays out of <p>
            body = list(wrap_pars(named.body))
            if named.label is not None:
                is_description_list = True
                body.insert(0, build_block("title", named.label))

            content.append(build_block("li", body, span=node.span))

        return build_block("dl" if is_description_list else parent_tag, content, span=env.span)

    return enumerate_to_list


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------


def remove_env(env: Environment, ctx: RuleContext) -> tuple[Node, ...]:
    """Drop the environment wrapper and keep its content."""
    logger.debug("Removing environment: %s", env.name)
    if ctx.file is not None:
        ctx.file.add(
            make_warning_message(
                env,
                f'There is no equivalent tag for "{env.name}", so the {env.name} environment was removed.',
                "environment-subs",
            )
        )
    return env.content


# ---------------------------------------------------------------------------
# Alias expansion
# ---------------------------------------------------------------------------


def gen_environment_replacements() -> dict[str, Rule]:
    """One rule per canonical name and per alias, each producing the canonical tag."""
    reps: dict[str, Rule] = {}
    for entry in ENV_ALIASES.values():
        for spelling in (entry.name, *sorted(entry.aliases)):
            reps[spelling] = env_factory(entry.name, requires_statement=entry.requires_statement)
    return reps


def _make_environment_replacements() -> RuleRegistry:
    registry = RuleRegistry("environment")
    registry.update(gen_environment_replacements())

    # Hand-written entries win over generated aliases of the same name
    container = {
        "requires_statement": False,
        "wrap_content_in_pars": False,
        "extract_title_from_args": False,
    }
    registry.add("enumerate", enumerate_factory("ol"))
    registry.add("itemize", enumerate_factory("ul"))
    registry.add("description", enumerate_factory("dl"))
    registry.add("tabular", create_table_from_tabular)
    registry.add("center", env_factory("blockquote"))
    registry.add("quote", env_factory("blockquote"))
    registry.add("figure", env_factory("figure", **container))
    registry.add("table", env_factory("table", **container))
    return registry


ENVIRONMENT_REPLACEMENTS: RuleRegistry = _make_environment_replacements()
