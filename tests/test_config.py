import json
from pathlib import Path

import pytest

from clean_lint.config import ConfigError, load_config, parse_severity
from clean_lint.models import LintSettings, Severity
from clean_lint.rules import build_catalog


def test_example_config_loads_and_builds_catalog():
    root = Path(__file__).resolve().parents[1]
    config = load_config(root / "configs" / "config.example.json")

    assert config.lint.workers == 4
    assert ".js" in config.lint.include_exts
    assert config.rule_settings("function-max-params").option("max_params", 2) == 3

    catalog = build_catalog(config)
    assert catalog.get("no-flag-parameters").severity is Severity.ERROR


def test_no_config_means_defaults():
    config = load_config(None)

    assert config.lint == LintSettings()
    assert config.rules == ()


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_invalid_json(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"lint": []},
        {"lint": {"workers": 0}},
        {"lint": {"include_exts": ".js"}},
        {"rules": []},
        {"rules": {"no-magic-numbers": True}},
        {"rules": {"no-magic-numbers": {"severity": "fatal"}}},
        {"rules": {"no-magic-numbers": {"options": []}}},
        {"rules": {"no-magic-numbers": {"enabled": "false"}}},
        {"rules": {"no-magic-numbers": {"enabled": 0}}},
    ],
)
def test_invalid_config_shapes(tmp_path: Path, payload):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_rule_settings_are_loaded(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "lint": {"include_exts": [".JS", ".ts"], "max_files": 10},
                "rules": {
                    "no-magic-numbers": {"enabled": False},
                    "prefer-descriptive-names": {"severity": "ERROR", "options": {"min_length": 3}},
                },
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.lint.include_exts == (".js", ".ts")
    assert config.lint.max_files == 10
    assert not config.rule_settings("no-magic-numbers").enabled
    assert config.rule_settings("prefer-descriptive-names").severity is Severity.ERROR
    assert config.rule_settings("prefer-descriptive-names").option("min_length", 4) == 3
    assert config.rule_settings("function-max-params").enabled


def test_parse_severity():
    assert parse_severity(" Warning ") is Severity.WARNING
    with pytest.raises(ConfigError):
        parse_severity("info")
