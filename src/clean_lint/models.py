from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from clean_lint.syntax.nodes import Node, NodeKind, Program, Span


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.WARNING: 1, Severity.ERROR: 2}


@dataclass(frozen=True)
class RuleContext:
    """Read-only view of the file a matcher is looking at."""

    path: str
    source: bytes

    def text(self, node: Node) -> str:
        return self.source[node.span.start_byte : node.span.end_byte].decode("utf-8", errors="replace")

    def snippet(self, node: Node) -> str:
        """Source text of ``node`` on a single line, for messages and suggestions."""
        return " ".join(self.text(node).split())


@dataclass(frozen=True)
class Match:
    message: str
    subject: str
    span: Span | None = None
    hint: str | None = None


Matcher = Callable[[Node, RuleContext], Iterable[Match]]
Fixer = Callable[[Match], "str | None"]


@dataclass(frozen=True)
class Rule:
    rule_id: str
    description: str
    severity: Severity
    node_kinds: tuple[NodeKind, ...]
    matcher: Matcher = field(compare=False)
    fixer: Fixer | None = field(default=None, compare=False)

    def suggest(self, match: Match) -> str | None:
        if self.fixer is None:
            return None
        return self.fixer(match)


@dataclass(frozen=True)
class Finding:
    rule_id: str
    path: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AnalysisRun:
    path: str
    tree: Program
    findings: tuple[Finding, ...]


@dataclass(frozen=True)
class FileFailure:
    path: str
    kind: str
    message: str
    line: int = 1
    column: int = 1

    @property
    def rule_id(self) -> str:
        return f"{self.kind}-error"

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass(frozen=True)
class BatchResult:
    runs: tuple[AnalysisRun, ...]
    failures: tuple[FileFailure, ...]
    files_scanned: int

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(finding for run in self.runs for finding in run.findings)


@dataclass(frozen=True)
class LintSettings:
    include_exts: tuple[str, ...] = (".js", ".jsx", ".mjs", ".cjs")
    exclude_dirs: tuple[str, ...] = (".git", "node_modules", "dist", "build", "coverage")
    max_file_size_bytes: int = 500_000
    max_files: int = 40_000
    workers: int = 4


@dataclass(frozen=True)
class RuleSettings:
    rule_id: str
    enabled: bool = True
    severity: Severity | None = None
    options: tuple[tuple[str, Any], ...] = ()

    def option(self, name: str, default: Any) -> Any:
        return dict(self.options).get(name, default)


@dataclass(frozen=True)
class AppConfig:
    lint: LintSettings = LintSettings()
    rules: tuple[RuleSettings, ...] = ()

    def rule_settings(self, rule_id: str) -> RuleSettings:
        for item in self.rules:
            if item.rule_id == rule_id:
                return item
        return RuleSettings(rule_id=rule_id)
