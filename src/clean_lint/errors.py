from __future__ import annotations


class LintError(Exception):
    pass


class ParseError(LintError):
    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class DuplicateRuleError(LintError):
    def __init__(self, rule_id: str):
        super().__init__(f"Rule already registered: {rule_id}")
        self.rule_id = rule_id


class InvariantViolation(LintError):
    """Internal consistency failure; points at a defect in the analyzer or a rule."""


class CatalogFrozenError(InvariantViolation):
    pass
