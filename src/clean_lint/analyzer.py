from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import FrozenInstanceError
from pathlib import Path
from typing import Iterable, Iterator

from clean_lint.errors import InvariantViolation, ParseError
from clean_lint.models import AnalysisRun, BatchResult, FileFailure, Finding, LintSettings, Match, Rule, RuleContext
from clean_lint.rules.catalog import RuleCatalog
from clean_lint.syntax.nodes import Node, walk
from clean_lint.syntax.parser import parse

logger = logging.getLogger(__name__)


def analyze(source_text: str, catalog: RuleCatalog, *, path: str = "<text>") -> AnalysisRun:
    """Parse ``source_text`` and run every catalog rule over the tree.

    Findings come out in pre-order tree position, then catalog order for rules
    matching the same node. Raises ParseError for malformed input.
    """
    catalog.freeze()
    source = source_text.encode("utf-8")
    tree = parse(source)
    context = RuleContext(path=path, source=source)

    findings: list[Finding] = []
    for node in walk(tree):
        for rule in catalog.rules_for(node.kind):
            for match in _run_matcher(rule, node, context):
                findings.append(_to_finding(rule, match, node, path))

    return AnalysisRun(path=path, tree=tree, findings=tuple(findings))


def analyze_file(path: str | Path, catalog: RuleCatalog, *, display_path: str | None = None) -> AnalysisRun:
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    return analyze(text, catalog, path=display_path or str(file_path))


def analyze_paths(
    paths: Iterable[str | Path],
    catalog: RuleCatalog,
    settings: LintSettings | None = None,
) -> BatchResult:
    """Analyze every source file under ``paths``, one worker task per file.

    A file that cannot be read or parsed becomes a FileFailure and the batch
    continues; InvariantViolation aborts the whole batch.
    """
    settings = settings or LintSettings()
    # Freeze before fanning out so workers only ever read the catalog.
    catalog.freeze()

    files = list(iter_source_files(paths, settings))
    logger.info(f"Analyzing {len(files)} files with {settings.workers} workers")

    with ThreadPoolExecutor(max_workers=settings.workers) as executor:
        outcomes = list(executor.map(lambda item: _analyze_one(item, catalog), files))

    runs = tuple(item for item in outcomes if isinstance(item, AnalysisRun))
    failures = tuple(item for item in outcomes if isinstance(item, FileFailure))
    return BatchResult(runs=runs, failures=failures, files_scanned=len(files))


def iter_source_files(paths: Iterable[str | Path], settings: LintSettings) -> Iterator[Path]:
    include = {ext.lower() for ext in settings.include_exts}
    exclude = set(settings.exclude_dirs)
    seen: set[Path] = set()
    count = 0

    for raw_path in paths:
        root = Path(raw_path)
        if root.is_dir():
            candidates = (
                path
                for path in sorted(root.rglob("*"))
                if path.is_file()
                and path.suffix.lower() in include
                and not any(part in exclude for part in path.relative_to(root).parts)
            )
        else:
            # Explicitly named files are analyzed whatever their extension.
            candidates = iter([root])

        for file_path in candidates:
            if count >= settings.max_files:
                logger.warning(f"File limit of {settings.max_files} reached; remaining files skipped")
                return
            if file_path in seen:
                continue
            seen.add(file_path)

            try:
                if file_path.stat().st_size > settings.max_file_size_bytes:
                    logger.info(f"Skipping {file_path}: larger than {settings.max_file_size_bytes} bytes")
                    continue
            except OSError:
                # Let the worker report it as a read failure.
                pass

            count += 1
            yield file_path


def _analyze_one(file_path: Path, catalog: RuleCatalog) -> AnalysisRun | FileFailure:
    display = str(file_path)
    try:
        run = analyze_file(file_path, catalog, display_path=display)
    except ParseError as exc:
        logger.warning(f"Parse error in {display}: {exc}")
        return FileFailure(path=display, kind="parse", message=exc.message, line=exc.line, column=exc.column)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Could not read {display}: {exc}")
        return FileFailure(path=display, kind="read", message=f"could not read file: {exc}")

    logger.debug(f"{display}: {len(run.findings)} findings")
    return run


def _run_matcher(rule: Rule, node: Node, context: RuleContext) -> list[Match]:
    try:
        return list(rule.matcher(node, context))
    except FrozenInstanceError as exc:
        raise InvariantViolation(f"Rule {rule.rule_id} tried to modify the syntax tree") from exc


def _to_finding(rule: Rule, match: Match, node: Node, path: str) -> Finding:
    span = match.span or node.span
    return Finding(
        rule_id=rule.rule_id,
        path=path,
        line=span.line,
        column=span.column,
        end_line=span.end_line,
        end_column=span.end_column,
        message=match.message,
        suggestion=rule.suggest(match),
    )
