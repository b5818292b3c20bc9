"""Macro substitution rules."""

from __future__ import annotations

from texptx.args import get_args_content
from texptx.ast import HtmlLike, Macro, build_block
from texptx.rules import RuleContext, RuleRegistry
from texptx.systeme import sysdelim_rule, systeme_rule

MACRO_REPLACEMENTS = RuleRegistry("macro")

MACRO_REPLACEMENTS.add("systeme", systeme_rule)
MACRO_REPLACEMENTS.add("sysdelim", sysdelim_rule)


@MACRO_REPLACEMENTS.register("term")
def term(node: Macro, ctx: RuleContext) -> HtmlLike:
    args = get_args_content(node)
    content = args[0] if args and args[0] is not None else ()
    return build_block("term", content, span=node.span)
