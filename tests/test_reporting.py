import csv
import json
import re
from pathlib import Path

import pytest

from clean_lint.analyzer import analyze, analyze_paths
from clean_lint.errors import InvariantViolation
from clean_lint.models import FileFailure, Finding
from clean_lint.reporting import NO_FINDINGS, exit_code, report, write_report_files
from clean_lint.rules import build_catalog

HUMAN_LINE = re.compile(
    r"^(?P<path>.+?):(?P<line>\d+):(?P<column>\d+) \[(?P<severity>\w+)\] (?P<rule_id>[\w-]+) — (?P<message>.+)$"
)

SAMPLE = (
    'const yymmdstr = moment().format("YYYY/MM/DD");\n'
    "setTimeout(blastOff, 86400000);\n"
    "function createMenu(title, body, buttonText, cancellable) {}\n"
    "function createFile(name, temp) { if (temp) { a(); } else { b(); } }\n"
)


@pytest.fixture()
def catalog():
    return build_catalog()


@pytest.fixture()
def findings(catalog):
    return analyze(SAMPLE, catalog, path="src/sample.js").findings


def test_human_report_has_one_line_per_finding(findings, catalog):
    output = report(findings, "human", catalog)
    lines = output.splitlines()

    assert len(lines) == len(findings) + 1
    assert lines[0].startswith("src/sample.js:1:7 [warning] prefer-descriptive-names — ")
    assert any("[error] no-flag-parameters" in line for line in lines)
    assert any("(suggestion: { title, body, buttonText, cancellable })" in line for line in lines)
    assert lines[-1] == f"{len(findings)} findings"


def test_machine_report_has_stable_fields(findings, catalog):
    payload = json.loads(report(findings, "machine", catalog))

    assert list(payload) == ["status", "finding_count", "failure_count", "findings", "failures"]
    assert payload["status"] == "findings"
    assert payload["finding_count"] == len(findings)
    assert list(payload["findings"][0]) == [
        "path",
        "line",
        "column",
        "end_line",
        "end_column",
        "severity",
        "rule_id",
        "message",
        "suggestion",
    ]
    assert payload["findings"][0]["rule_id"] == "prefer-descriptive-names"


def test_human_and_machine_describe_the_same_findings(findings, catalog):
    human_pairs = set()
    for line in report(findings, "human", catalog).splitlines():
        matched = HUMAN_LINE.match(line)
        if matched:
            human_pairs.add((matched["rule_id"], matched["path"], int(matched["line"]), int(matched["column"])))

    machine = json.loads(report(findings, "machine", catalog))
    machine_pairs = {
        (record["rule_id"], record["path"], record["line"], record["column"]) for record in machine["findings"]
    }

    assert human_pairs == machine_pairs
    assert len(human_pairs) == len(findings)


def test_empty_input_is_explicit(catalog):
    assert report([], "human", catalog) == NO_FINDINGS

    payload = json.loads(report([], "machine", catalog))
    assert payload["status"] == "no_findings"
    assert payload["findings"] == []
    assert exit_code([], catalog) == 0


def test_findings_produce_exit_code_one(findings, catalog):
    assert exit_code(findings, catalog) == 1


def test_failures_are_reported_as_diagnostics(catalog):
    failure = FileFailure(path="broken.js", kind="parse", message="unexpected ';'", line=3, column=9)

    human = report([], "human", catalog, [failure])
    machine = json.loads(report([], "machine", catalog, [failure]))

    assert human.splitlines()[0] == "broken.js:3:9 [error] parse-error — unexpected ';'"
    assert machine["status"] == "findings"
    assert machine["failures"] == [
        {"path": "broken.js", "line": 3, "column": 9, "kind": "parse", "message": "unexpected ';'"}
    ]
    assert exit_code([], catalog, [failure]) == 1


def test_dangling_rule_reference_is_an_invariant_violation(catalog):
    dangling = Finding(
        rule_id="not-in-catalog",
        path="a.js",
        line=1,
        column=1,
        end_line=1,
        end_column=2,
        message="orphan",
    )

    for fmt in ("human", "machine"):
        with pytest.raises(InvariantViolation):
            report([dangling], fmt, catalog)
    with pytest.raises(InvariantViolation):
        exit_code([dangling], catalog)


def test_unknown_format_is_rejected(findings, catalog):
    with pytest.raises(ValueError):
        report(findings, "xml", catalog)


def test_write_report_files(tmp_path: Path, catalog):
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    (source_dir / "sample.js").write_text(SAMPLE, encoding="utf-8")
    (source_dir / "broken.js").write_text("const broken = {;\n", encoding="utf-8")
    batch = analyze_paths([source_dir], catalog)

    summary = write_report_files(batch, catalog, tmp_path / "report")

    assert summary["counts"]["files_scanned"] == 2
    assert summary["counts"]["files_failed"] == 1
    assert summary["counts"]["findings_total"] == len(batch.findings)
    assert summary["exit_code"] == 1
    assert Path(summary["files"]["summary"]).exists()

    with (tmp_path / "report" / "findings.csv").open(encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == len(batch.findings)
    assert rows[0]["rule_id"] == "prefer-descriptive-names"

    with (tmp_path / "report" / "findings_by_rule.csv").open(encoding="utf-8", newline="") as handle:
        by_rule = list(csv.DictReader(handle))
    assert {row["rule_id"] for row in by_rule} == {finding.rule_id for finding in batch.findings}


def test_human_report_keeps_one_line_per_finding_for_multiline_source(catalog):
    source = (
        "function make(options) {\n"
        "  const config = options || {\n"
        "    title: 'Foo',\n"
        "  };\n"
        "  return fetchAll(\n"
        "    config,\n"
        "    86400000\n"
        "  );\n"
        "}\n"
    )
    multiline = analyze(source, catalog).findings
    stray = Finding(
        rule_id="no-magic-numbers",
        path="a.js",
        line=1,
        column=1,
        end_line=2,
        end_column=2,
        message="first\nsecond",
        suggestion="const a =\n  1;",
    )
    findings = (*multiline, stray)

    lines = report(findings, "human", catalog).splitlines()

    assert len(lines) == len(findings) + 1
    assert all(HUMAN_LINE.match(line) for line in lines[:-1])
    assert lines[-2].endswith("— first second (suggestion: const a =   1;)")
