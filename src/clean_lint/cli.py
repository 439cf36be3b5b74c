from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace

from clean_lint.analyzer import analyze_paths
from clean_lint.config import ConfigError, load_config
from clean_lint.errors import DuplicateRuleError, InvariantViolation
from clean_lint.reporting import FORMATS, exit_code, report, write_report_files
from clean_lint.rules import build_catalog

logger = logging.getLogger(__name__)

EXIT_INTERNAL_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clean-lint",
        description="Clean-code style linter for JavaScript sources",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lint_parser = subparsers.add_parser("lint", help="Lint files or directories")
    lint_parser.add_argument("paths", nargs="+", help="Files or directories to lint")
    lint_parser.add_argument("--config", default=None, help="JSON config path")
    lint_parser.add_argument("--format", choices=FORMATS, default="human")
    lint_parser.add_argument("--workers", type=int, default=None)
    lint_parser.add_argument("--output-dir", default=None, help="Also write summary.json and CSV reports here")

    rules_parser = subparsers.add_parser("rules", help="List the active rules")
    rules_parser.add_argument("--config", default=None, help="JSON config path")
    rules_parser.add_argument("--format", choices=FORMATS, default="human")

    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        catalog = build_catalog(config)
    except ConfigError as exc:
        parser.error(str(exc))
        return EXIT_INTERNAL_FAILURE
    except DuplicateRuleError as exc:
        logger.error(f"Rule catalog misconfigured: {exc}")
        return EXIT_INTERNAL_FAILURE

    if args.command == "rules":
        rows = [
            {
                "rule_id": rule.rule_id,
                "severity": rule.severity.value,
                "description": rule.description,
            }
            for rule in catalog.all()
        ]
        if args.format == "machine":
            print(json.dumps(rows, indent=2, ensure_ascii=True))
        else:
            for row in rows:
                print(f"{row['rule_id']:<30} [{row['severity']}] {row['description']}")
        return 0

    if args.command == "lint":
        settings = config.lint
        if args.workers is not None:
            if args.workers <= 0:
                parser.error("--workers must be a positive integer")
                return EXIT_INTERNAL_FAILURE
            settings = replace(settings, workers=args.workers)

        try:
            batch = analyze_paths(args.paths, catalog, settings)
            output = report(batch.findings, args.format, catalog, batch.failures)
            if args.output_dir:
                write_report_files(batch, catalog, args.output_dir)
        except InvariantViolation as exc:
            logger.error(f"Internal failure: {exc}")
            return EXIT_INTERNAL_FAILURE

        print(output)
        return exit_code(batch.findings, catalog, batch.failures)

    parser.error(f"Unsupported command: {args.command}")
    return EXIT_INTERNAL_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
