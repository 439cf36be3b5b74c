from __future__ import annotations

from typing import Iterator

from clean_lint.models import Match, Rule, RuleContext, RuleSettings, Severity
from clean_lint.rules.options import number_tuple_option
from clean_lint.syntax.nodes import (
    Call,
    Function,
    IfStatement,
    Member,
    Node,
    NodeKind,
    NumberLiteral,
    Other,
)


def _numeric_argument(argument: Node, context: RuleContext) -> tuple[int | float | None, str] | None:
    """Value and text of a numeric literal argument, with a leading ``-`` folded in."""
    if isinstance(argument, NumberLiteral):
        return argument.value, argument.raw
    if (
        isinstance(argument, Other)
        and argument.type_name == "unary_expression"
        and len(argument.nodes) == 1
        and isinstance(argument.nodes[0], NumberLiteral)
        and context.text(argument).startswith("-")
    ):
        operand = argument.nodes[0]
        value = -operand.value if operand.value is not None else None
        return value, f"-{operand.raw}"
    return None


def magic_numbers_rule(settings: RuleSettings) -> Rule:
    allowed = set(number_tuple_option(settings, "allowed_numbers", (-1, 0, 1, 2)))

    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Call):
            return
        callee = context.snippet(node.callee)
        for argument in node.arguments:
            numeric = _numeric_argument(argument, context)
            if numeric is None or numeric[0] in allowed:
                continue
            raw = numeric[1]
            yield Match(
                message=(
                    f"Magic number {raw} passed to {callee}(); "
                    "declare it as a named constant so it can be searched for"
                ),
                subject=raw,
                span=argument.span,
            )

    return Rule(
        rule_id="no-magic-numbers",
        description="Use searchable names instead of unexplained numeric literals",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.CALL,),
        matcher=matcher,
    )


def explanatory_variables_rule(settings: RuleSettings) -> Rule:
    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Member) or not isinstance(node.index, NumberLiteral):
            return
        if not isinstance(node.object, Call):
            return
        call_text = context.snippet(node.object)
        yield Match(
            message=(
                f"Result of {call_text} is indexed by position [{node.index.raw}]; "
                "destructure it into explanatory variables"
            ),
            subject=call_text,
            span=node.span,
            hint=f"const [...] = {call_text} || [];",
        )

    return Rule(
        rule_id="use-explanatory-variables",
        description="Use explanatory variables instead of positional indexing",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.MEMBER,),
        matcher=matcher,
        fixer=lambda match: match.hint,
    )


def filter_before_foreach_rule(settings: RuleSettings) -> Rule:
    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Call) or not node.arguments:
            return
        if not isinstance(node.callee, Member) or node.callee.property != "forEach":
            return
        callback = node.arguments[0]
        if not isinstance(callback, Function) or not isinstance(callback.body, Other):
            return
        statements = callback.body.nodes
        if callback.body.type_name != "statement_block" or not statements:
            return
        last = statements[-1]
        if not isinstance(last, IfStatement) or last.alternate is not None:
            return
        receiver = context.snippet(node.callee.object)
        yield Match(
            message=(
                f"forEach callback on {receiver} only acts under a condition; "
                "filter the collection first so each function does one thing"
            ),
            subject=receiver,
            span=last.span,
        )

    return Rule(
        rule_id="prefer-filter-before-foreach",
        description="Functions should do one thing",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.CALL,),
        matcher=matcher,
    )
