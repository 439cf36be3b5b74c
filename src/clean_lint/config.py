from __future__ import annotations

import json
import logging
from pathlib import Path

from clean_lint.models import AppConfig, LintSettings, RuleSettings, Severity

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


def load_config(path: str | Path | None) -> AppConfig:
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    config = AppConfig(
        lint=_load_lint_settings(raw.get("lint", {})),
        rules=_load_rule_settings(raw.get("rules", {})),
    )
    logger.info(f"Loaded config from {config_path}")
    return config


def _load_lint_settings(lint_raw: object) -> LintSettings:
    if not isinstance(lint_raw, dict):
        raise ConfigError("'lint' must be an object")

    defaults = LintSettings()
    include_exts = lint_raw.get("include_exts")
    exclude_dirs = lint_raw.get("exclude_dirs")
    settings = LintSettings(
        include_exts=(
            tuple(item.lower() for item in _ensure_string_list(include_exts))
            if include_exts is not None
            else defaults.include_exts
        ),
        exclude_dirs=tuple(_ensure_string_list(exclude_dirs)) if exclude_dirs is not None else defaults.exclude_dirs,
        max_file_size_bytes=_positive_int(lint_raw, "max_file_size_bytes", defaults.max_file_size_bytes),
        max_files=_positive_int(lint_raw, "max_files", defaults.max_files),
        workers=_positive_int(lint_raw, "workers", defaults.workers),
    )
    return settings


def _load_rule_settings(rules_raw: object) -> tuple[RuleSettings, ...]:
    if not isinstance(rules_raw, dict):
        raise ConfigError("'rules' must be an object keyed by rule id")

    rules: list[RuleSettings] = []
    for rule_id, item in rules_raw.items():
        if not isinstance(item, dict):
            raise ConfigError(f"Settings for rule {rule_id} must be an object")

        options = item.get("options", {})
        if not isinstance(options, dict):
            raise ConfigError(f"'options' of rule {rule_id} must be an object")

        rules.append(
            RuleSettings(
                rule_id=str(rule_id),
                enabled=_bool(item, "enabled", True, rule_id),
                severity=parse_severity(item["severity"]) if "severity" in item else None,
                options=tuple(options.items()),
            )
        )
    return tuple(rules)


def parse_severity(value: object) -> Severity:
    text = str(value).strip().lower()
    try:
        return Severity(text)
    except ValueError as exc:
        choices = ", ".join(item.value for item in Severity)
        raise ConfigError(f"Invalid severity {value!r}; expected one of: {choices}") from exc


def _bool(raw: dict, key: str, default: bool, rule_id: object) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' of rule {rule_id} must be true or false")
    return value


def _positive_int(raw: dict, key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{key}' must be a positive integer")
    return value


def _ensure_string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError("Expected a list of strings")
    return [str(item) for item in value]
