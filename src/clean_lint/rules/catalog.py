from __future__ import annotations

from typing import Iterator

from clean_lint.errors import CatalogFrozenError, DuplicateRuleError
from clean_lint.models import Rule
from clean_lint.syntax.nodes import NodeKind


class RuleCatalog:
    """Ordered registry of rules, keyed by rule id.

    The catalog is passed explicitly to the analyzer and reporter. Once frozen
    it rejects registration, so every run against it sees the same rules in
    the same order.
    """

    def __init__(self, rules: tuple[Rule, ...] | list[Rule] = ()):
        self._rules: dict[str, Rule] = {}
        self._by_kind: dict[NodeKind, tuple[Rule, ...]] | None = None
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if self._by_kind is not None:
            raise CatalogFrozenError(f"Cannot register {rule.rule_id}: catalog is frozen")
        if rule.rule_id in self._rules:
            raise DuplicateRuleError(rule.rule_id)
        self._rules[rule.rule_id] = rule
        return rule

    def freeze(self) -> RuleCatalog:
        if self._by_kind is None:
            by_kind: dict[NodeKind, list[Rule]] = {kind: [] for kind in NodeKind}
            for rule in self._rules.values():
                for kind in rule.node_kinds:
                    by_kind[kind].append(rule)
            self._by_kind = {kind: tuple(items) for kind, items in by_kind.items()}
        return self

    @property
    def frozen(self) -> bool:
        return self._by_kind is not None

    def all(self) -> tuple[Rule, ...]:
        return tuple(self._rules.values())

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def rules_for(self, kind: NodeKind) -> tuple[Rule, ...]:
        if self._by_kind is None:
            self.freeze()
        return self._by_kind[kind]

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._rules)
