"""Function-design rules: argument count, flag arguments, default parameters."""

from __future__ import annotations

from typing import Iterator

from clean_lint.models import Match, Rule, RuleContext, RuleSettings, Severity
from clean_lint.rules.options import int_option
from clean_lint.syntax.nodes import (
    Function,
    Identifier,
    IfStatement,
    Logical,
    Node,
    NodeKind,
    Other,
    VariableDeclarator,
    walk_scope,
)


def _label(node: Function) -> str:
    if node.name:
        return f"Function '{node.name}'"
    if node.callback_of:
        return f"Callback of {node.callback_of}()"
    return "Anonymous function"


def max_params_rule(settings: RuleSettings) -> Rule:
    max_params = int_option(settings, "max_params", 2)

    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Function) or len(node.params) <= max_params:
            return
        names = node.param_names()
        simple = len(names) == len(node.params) and all(param.default is None for param in node.params)
        yield Match(
            message=(
                f"{_label(node)} takes {len(node.params)} parameters (max {max_params}); "
                "pass a single object and destructure it"
            ),
            subject=", ".join(context.snippet(param) for param in node.params),
            span=node.name_span or node.span,
            hint="{ " + ", ".join(names) + " }" if simple else None,
        )

    return Rule(
        rule_id="function-max-params",
        description="Limit the number of function parameters",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.FUNCTION,),
        matcher=matcher,
        fixer=lambda match: match.hint,
    )


def _flag_test(test: Node) -> str | None:
    if isinstance(test, Identifier):
        return test.name
    # !flag
    if isinstance(test, Other) and test.type_name == "unary_expression" and len(test.nodes) == 1:
        operand = test.nodes[0]
        if isinstance(operand, Identifier):
            return operand.name
    return None


def flag_params_rule(settings: RuleSettings) -> Rule:
    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Function) or node.body is None:
            return
        params = {param.name: param for param in node.params if param.name is not None}
        reported: set[str] = set()
        for inner in walk_scope(node.body):
            if not isinstance(inner, IfStatement):
                continue
            name = _flag_test(inner.test)
            if name is None or name not in params or name in reported:
                continue
            if context.text(inner.test).lstrip("!").strip() != name:
                continue
            reported.add(name)
            yield Match(
                message=(
                    f"Parameter '{name}' is used as a flag; {_label(node).lower()} does more than one "
                    "thing, split it instead"
                ),
                subject=name,
                span=params[name].span,
            )

    return Rule(
        rule_id="no-flag-parameters",
        description="Don't use flags as function parameters",
        severity=Severity.ERROR,
        node_kinds=(NodeKind.FUNCTION,),
        matcher=matcher,
    )


def default_params_rule(settings: RuleSettings) -> Rule:
    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Function) or node.body is None:
            return
        candidates = {param.name for param in node.params if param.name is not None and param.default is None}
        if not candidates:
            return
        for inner in walk_scope(node.body):
            if not isinstance(inner, VariableDeclarator) or not isinstance(inner.value, Logical):
                continue
            logical = inner.value
            if logical.operator not in ("||", "??") or not isinstance(logical.left, Identifier):
                continue
            name = logical.left.name
            if name not in candidates:
                continue
            fallback = context.snippet(logical.right)
            yield Match(
                message=f"'{name} {logical.operator} {fallback}' short-circuits a missing argument; "
                "use a default parameter",
                subject=name,
                span=inner.span,
                hint=f"{name} = {fallback}",
            )

    return Rule(
        rule_id="prefer-default-parameters",
        description="Use default parameters instead of short circuiting or conditionals",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.FUNCTION,),
        matcher=matcher,
        fixer=lambda match: match.hint,
    )
