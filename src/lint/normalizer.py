"""
Turns the lint tool's JSON report into `Violation` objects.
"""

import json
import os
from pathlib import Path
from typing import Any

import structlog

from src.core.models import Severity, Violation

logger = structlog.get_logger(__name__)


def relative_path(file_path: str, root: str | Path) -> str:
    """Strip the working-copy root (and its trailing separator) from a reported path."""
    prefix = str(root).rstrip(os.sep) + os.sep
    return file_path.removeprefix(prefix)


def normalize_report(report: list[dict[str, Any]], root: str | Path) -> list[Violation]:
    """
    Flatten per-file report entries into violations, keeping the report's order.

    Entries without messages are dropped. A missing end position collapses to
    the start position. Messages without a position (e.g. "file ignored"
    warnings) are anchored at line 1, column 1.
    """
    violations: list[Violation] = []

    for entry in report or []:
        messages = entry.get("messages") or []
        if not messages:
            continue

        path = relative_path(entry.get("filePath", ""), root)
        for message in messages:
            start_line = message.get("line") or 1
            start_column = message.get("column") or 1
            violations.append(
                Violation(
                    file_path=path,
                    message=message.get("message", ""),
                    rule_id=message.get("ruleId"),
                    start_line=start_line,
                    start_column=start_column,
                    end_line=message.get("endLine") or start_line,
                    end_column=message.get("endColumn") or start_column,
                    severity=Severity(message.get("severity", Severity.WARNING)),
                )
            )

    return violations


def read_report(report_file: str | Path, root: str | Path) -> list[Violation]:
    """
    Read and normalise a report file.

    A missing report yields an empty list; callers tell "tool never wrote a
    report" apart from "no findings" by the tool's exit code.
    """
    path = Path(report_file)
    if not path.exists():
        logger.info("lint_report_missing", report_file=str(path))
        return []

    report = json.loads(path.read_text(encoding="utf-8"))
    violations = normalize_report(report, root)
    logger.info("lint_report_parsed", files=len(report or []), violations=len(violations))
    return violations
