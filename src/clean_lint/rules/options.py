from __future__ import annotations

from clean_lint.config import ConfigError
from clean_lint.models import RuleSettings


def int_option(settings: RuleSettings, name: str, default: int) -> int:
    value = settings.option(name, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"Option '{name}' of rule {settings.rule_id} must be a non-negative integer")
    return value


def str_tuple_option(settings: RuleSettings, name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = settings.option(name, default)
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"Option '{name}' of rule {settings.rule_id} must be a list of strings")
    return tuple(value)


def number_tuple_option(
    settings: RuleSettings, name: str, default: tuple[float, ...]
) -> tuple[float, ...]:
    value = settings.option(name, default)
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, (int, float)) and not isinstance(item, bool) for item in value
    ):
        raise ConfigError(f"Option '{name}' of rule {settings.rule_id} must be a list of numbers")
    return tuple(value)
