from __future__ import annotations

import csv
import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Sequence

from clean_lint.errors import InvariantViolation
from clean_lint.models import BatchResult, FileFailure, Finding, Severity
from clean_lint.rules.catalog import RuleCatalog

FORMATS = ("human", "machine")
NO_FINDINGS = "No findings."


def report(
    findings: Sequence[Finding],
    fmt: str,
    catalog: RuleCatalog,
    failures: Sequence[FileFailure] = (),
) -> str:
    records = [_finding_record(finding, catalog) for finding in findings]

    if fmt == "human":
        return _render_human(records, failures)
    if fmt == "machine":
        return _render_machine(records, failures)
    raise ValueError(f"Unsupported report format: {fmt} (expected one of: {', '.join(FORMATS)})")


def exit_code(
    findings: Iterable[Finding],
    catalog: RuleCatalog,
    failures: Sequence[FileFailure] = (),
) -> int:
    """0 when the run is clean, 1 when findings or file failures were reported."""
    if failures:
        return 1
    for finding in findings:
        if _severity_of(finding, catalog).rank >= Severity.WARNING.rank:
            return 1
    return 0


def write_report_files(batch: BatchResult, catalog: RuleCatalog, output_dir: str | Path) -> dict:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    records = [_finding_record(finding, catalog) for finding in batch.findings]
    by_rule_counts = Counter((record["rule_id"], record["severity"]) for record in records)
    by_rule = [
        {"rule_id": rule_id, "severity": severity, "findings_count": count}
        for (rule_id, severity), count in sorted(by_rule_counts.items(), key=lambda item: (-item[1], item[0][0]))
    ]

    summary: dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "status": "findings" if records or batch.failures else "no_findings",
        "counts": {
            "files_scanned": batch.files_scanned,
            "files_analyzed": len(batch.runs),
            "files_failed": len(batch.failures),
            "findings_total": len(records),
            "rules_triggered": len(by_rule),
        },
        "exit_code": exit_code(batch.findings, catalog, batch.failures),
        "failures": [failure.to_dict() for failure in batch.failures],
        "files": {},
    }

    summary_json = out / "summary.json"
    findings_csv = out / "findings.csv"
    by_rule_csv = out / "findings_by_rule.csv"

    _write_csv(findings_csv, records)
    _write_csv(by_rule_csv, by_rule)

    summary["files"] = {
        "summary": str(summary_json.resolve()),
        "findings": str(findings_csv.resolve()),
        "findings_by_rule": str(by_rule_csv.resolve()),
    }
    _write_json(summary_json, summary)
    return summary


def _severity_of(finding: Finding, catalog: RuleCatalog) -> Severity:
    rule = catalog.get(finding.rule_id)
    if rule is None:
        raise InvariantViolation(
            f"Finding at {finding.path}:{finding.line}:{finding.column} references unknown rule {finding.rule_id}"
        )
    return rule.severity


def _finding_record(finding: Finding, catalog: RuleCatalog) -> dict[str, Any]:
    severity = _severity_of(finding, catalog)
    return {
        "path": finding.path,
        "line": finding.line,
        "column": finding.column,
        "end_line": finding.end_line,
        "end_column": finding.end_column,
        "severity": severity.value,
        "rule_id": finding.rule_id,
        "message": finding.message,
        "suggestion": finding.suggestion,
    }


def _render_human(records: list[dict[str, Any]], failures: Sequence[FileFailure]) -> str:
    if not records and not failures:
        return NO_FINDINGS

    lines: list[str] = []
    for failure in failures:
        lines.append(
            f"{failure.path}:{failure.line}:{failure.column} [{Severity.ERROR.value}] "
            f"{failure.rule_id} — {_one_line(failure.message)}"
        )
    for record in records:
        line = (
            f"{record['path']}:{record['line']}:{record['column']} [{record['severity']}] "
            f"{record['rule_id']} — {_one_line(record['message'])}"
        )
        if record["suggestion"]:
            line += f" (suggestion: {_one_line(record['suggestion'])})"
        lines.append(line)

    summary = f"{len(records)} finding{'s' if len(records) != 1 else ''}"
    if failures:
        summary += f", {len(failures)} file{'s' if len(failures) != 1 else ''} failed"
    lines.append(summary)
    return "\n".join(lines)


def _one_line(text: str) -> str:
    return " ".join(text.splitlines())


def _render_machine(records: list[dict[str, Any]], failures: Sequence[FileFailure]) -> str:
    payload = {
        "status": "findings" if records or failures else "no_findings",
        "finding_count": len(records),
        "failure_count": len(failures),
        "findings": records,
        "failures": [failure.to_dict() for failure in failures],
    }
    return json.dumps(payload, indent=2, ensure_ascii=True)


def _write_json(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=True)


def _write_csv(path: Path, rows: list[dict]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        if not rows:
            handle.write("")
            return

        fieldnames: list[str] = []
        seen = set()
        for row in rows:
            for key in row:
                if key not in seen:
                    seen.add(key)
                    fieldnames.append(key)

        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
