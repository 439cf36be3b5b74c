"""
Naming rules.

- prefer-descriptive-names: meaningful, pronounceable variable names
- avoid-mental-mapping: no single-letter callback parameters
- no-redundant-context: object keys should not repeat the object's name
"""

from __future__ import annotations

import re
from typing import Iterator

from clean_lint.models import Match, Rule, RuleContext, RuleSettings, Severity
from clean_lint.rules.options import int_option, str_tuple_option
from clean_lint.syntax.nodes import (
    Binding,
    Function,
    Identifier,
    Member,
    Node,
    NodeKind,
    ObjectLiteral,
    VariableDeclarator,
)

WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")
CONSONANT_RUN = re.compile(r"[bcdfghjklmnpqrstvwxyz]{5,}")
VOWELS = set("aeiouy")


def split_words(name: str) -> list[str]:
    return WORD_PATTERN.findall(name)


def is_abbreviated(name: str) -> bool:
    """True when a word of the name reads like a contraction (``yymmdstr``, ``str``)."""
    for word in split_words(name):
        if word.isdigit() or (word.isupper() and len(word) > 1):
            continue
        lowered = word.lower()
        if len(lowered) >= 3 and not VOWELS.intersection(lowered):
            return True
        if CONSONANT_RUN.search(lowered):
            return True
    return False


def descriptive_names_rule(settings: RuleSettings) -> Rule:
    min_length = int_option(settings, "min_length", 4)
    allowed = set(str_tuple_option(settings, "allowed_names", ("_", "i", "j", "k", "id")))

    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Binding) or node.origin == "parameter":
            return
        name = node.name
        if name in allowed or not name.strip("_$"):
            return
        if len(name) < min_length:
            reason = f"is shorter than {min_length} characters"
        elif is_abbreviated(name):
            reason = "looks like an abbreviation"
        else:
            return
        yield Match(
            message=f"Variable name '{name}' {reason}; use a meaningful, pronounceable name",
            subject=name,
            span=node.span,
        )

    return Rule(
        rule_id="prefer-descriptive-names",
        description="Use meaningful and pronounceable variable names",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.BINDING,),
        matcher=matcher,
    )


def mental_mapping_rule(settings: RuleSettings) -> Rule:
    allowed = set(str_tuple_option(settings, "allowed_names", ("_",)))

    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if not isinstance(node, Function) or node.callback_of is None:
            return
        for param in node.params:
            if param.name is None or len(param.name) != 1 or param.name in allowed:
                continue
            yield Match(
                message=(
                    f"Callback parameter '{param.name}' of {node.callback_of}() forces the reader "
                    "to remember what it stands for; name it explicitly"
                ),
                subject=param.name,
                span=param.span,
                hint=_singular_of_receiver(node.callback_of),
            )

    return Rule(
        rule_id="avoid-mental-mapping",
        description="Avoid mental mapping: explicit is better than implicit",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.FUNCTION,),
        matcher=matcher,
        fixer=lambda match: match.hint,
    )


def _singular_of_receiver(callee: str) -> str | None:
    # "locations.forEach" -> "location"
    receiver, _, method = callee.rpartition(".")
    if not receiver or not method:
        return None
    last = receiver.rpartition(".")[2].strip()
    if not last.isidentifier():
        return None
    if last.endswith("ies") and len(last) > 4:
        return last[:-3] + "y"
    if last.endswith("s") and not last.endswith("ss") and len(last) > 2:
        return last[:-1]
    return None


def redundant_context_rule(settings: RuleSettings) -> Rule:
    def matcher(node: Node, context: RuleContext) -> Iterator[Match]:
        if isinstance(node, VariableDeclarator):
            if node.destructured or len(node.targets) != 1 or not isinstance(node.value, ObjectLiteral):
                return
            owner = node.targets[0].name
            for prop in node.value.properties():
                stripped = strip_context(owner, prop.key)
                if stripped is None:
                    continue
                yield Match(
                    message=f"Key '{prop.key}' repeats the name of object '{owner}'",
                    subject=prop.key,
                    span=prop.key_span,
                    hint=stripped,
                )
        elif isinstance(node, Member) and isinstance(node.object, Identifier):
            stripped = strip_context(node.object.name, node.property)
            if stripped is None:
                return
            yield Match(
                message=f"Property '{node.property}' repeats the name of object '{node.object.name}'",
                subject=node.property,
                span=node.span,
                hint=stripped,
            )

    return Rule(
        rule_id="no-redundant-context",
        description="Don't add unneeded context to property names",
        severity=Severity.WARNING,
        node_kinds=(NodeKind.VARIABLE, NodeKind.MEMBER),
        matcher=matcher,
        fixer=lambda match: match.hint,
    )


def strip_context(owner: str, key: str | None) -> str | None:
    """Return ``key`` without the ``owner`` prefix, or None when it has none."""
    if not key or len(key) <= len(owner) or not key.lower().startswith(owner.lower()):
        return None
    rest = key[len(owner) :]
    if rest[0] == "_":
        rest = rest.lstrip("_")
    elif not rest[0].isupper():
        return None
    if not rest:
        return None
    return rest[0].lower() + rest[1:]
