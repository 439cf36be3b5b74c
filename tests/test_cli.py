import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from clean_lint import cli
from clean_lint.errors import DuplicateRuleError


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_clean_file_exits_zero(tmp_path: Path, capsys):
    source = _write(tmp_path / "clean.js", "const currentDate = moment();\n")

    code = cli.main(["lint", str(source)])

    assert code == 0
    assert capsys.readouterr().out.strip() == "No findings."


def test_findings_exit_one(tmp_path: Path, capsys):
    source = _write(tmp_path / "dates.js", "var yymmdstr = 1;\n")

    code = cli.main(["lint", str(source)])

    out = capsys.readouterr().out
    assert code == 1
    assert f"{source}:1:5 [warning] prefer-descriptive-names" in out


def test_machine_format_and_parse_failure(tmp_path: Path, capsys):
    _write(tmp_path / "good.js", "var yymmdstr = 1;\n")
    _write(tmp_path / "broken.js", "const broken = {;\n")

    code = cli.main(["lint", str(tmp_path), "--format", "machine", "--workers", "2"])

    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert payload["finding_count"] == 1
    assert payload["failure_count"] == 1
    assert payload["failures"][0]["kind"] == "parse"


def test_output_dir_writes_reports(tmp_path: Path, capsys):
    source = _write(tmp_path / "dates.js", "var yymmdstr = 1;\n")
    out_dir = tmp_path / "report"

    cli.main(["lint", str(source), "--output-dir", str(out_dir)])

    summary = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["counts"]["findings_total"] == 1
    assert (out_dir / "findings.csv").exists()


def test_config_disables_rules(tmp_path: Path, capsys):
    source = _write(tmp_path / "dates.js", "var yymmdstr = 1;\n")
    config = _write(
        tmp_path / "config.json",
        json.dumps({"rules": {"prefer-descriptive-names": {"enabled": False}}}),
    )

    code = cli.main(["lint", str(source), "--config", str(config)])

    assert code == 0


def test_rules_command_lists_catalog(capsys):
    code = cli.main(["rules", "--format", "machine"])

    rows = json.loads(capsys.readouterr().out)
    assert code == 0
    assert rows[0]["rule_id"] == "prefer-descriptive-names"
    assert {row["severity"] for row in rows} == {"warning", "error"}


def test_bad_config_is_a_usage_error(tmp_path: Path):
    config = _write(tmp_path / "config.json", json.dumps({"rules": {"no-such-rule": {}}}))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["lint", str(tmp_path), "--config", str(config)])

    assert excinfo.value.code == 2


def test_duplicate_rules_exit_two(tmp_path: Path, monkeypatch):
    def broken_catalog(config):
        raise DuplicateRuleError("prefer-descriptive-names")

    monkeypatch.setattr(cli, "build_catalog", broken_catalog)

    assert cli.main(["lint", str(tmp_path)]) == 2


def test_module_entry_point(tmp_path: Path):
    root = Path(__file__).resolve().parents[1]
    source = _write(tmp_path / "dates.js", "var yymmdstr = 1;\n")

    env = os.environ.copy()
    env["PYTHONPATH"] = str(root / "src")

    result = subprocess.run(
        [sys.executable, "-m", "clean_lint.cli", "lint", str(source), "--format", "machine"],
        cwd=root,
        text=True,
        capture_output=True,
        env=env,
    )

    assert result.returncode == 1
    payload = json.loads(result.stdout)
    assert payload["findings"][0]["rule_id"] == "prefer-descriptive-names"
