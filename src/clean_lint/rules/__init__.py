from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from clean_lint.config import ConfigError
from clean_lint.models import AppConfig, Rule, RuleSettings
from clean_lint.rules.catalog import RuleCatalog
from clean_lint.rules.expressions import (
    explanatory_variables_rule,
    filter_before_foreach_rule,
    magic_numbers_rule,
)
from clean_lint.rules.functions import default_params_rule, flag_params_rule, max_params_rule
from clean_lint.rules.naming import descriptive_names_rule, mental_mapping_rule, redundant_context_rule

logger = logging.getLogger(__name__)

# Registration order is the order findings on the same node are reported in.
BUILTIN_RULES: dict[str, Callable[[RuleSettings], Rule]] = {
    "prefer-descriptive-names": descriptive_names_rule,
    "avoid-mental-mapping": mental_mapping_rule,
    "no-redundant-context": redundant_context_rule,
    "no-magic-numbers": magic_numbers_rule,
    "use-explanatory-variables": explanatory_variables_rule,
    "prefer-default-parameters": default_params_rule,
    "function-max-params": max_params_rule,
    "no-flag-parameters": flag_params_rule,
    "prefer-filter-before-foreach": filter_before_foreach_rule,
}


def build_catalog(config: AppConfig | None = None) -> RuleCatalog:
    config = config or AppConfig()

    unknown = [item.rule_id for item in config.rules if item.rule_id not in BUILTIN_RULES]
    if unknown:
        raise ConfigError(f"Unknown rule ids in config: {', '.join(sorted(unknown))}")

    catalog = RuleCatalog()
    for rule_id, factory in BUILTIN_RULES.items():
        settings = config.rule_settings(rule_id)
        if not settings.enabled:
            logger.info(f"Rule disabled by config: {rule_id}")
            continue
        rule = factory(settings)
        if settings.severity is not None:
            rule = replace(rule, severity=settings.severity)
        catalog.register(rule)

    logger.debug(f"Catalog built with {len(catalog)} rules")
    return catalog


__all__ = ["BUILTIN_RULES", "RuleCatalog", "build_catalog"]
