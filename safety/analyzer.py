"""Static safety screening of candidate fragments."""

from __future__ import annotations

from collections.abc import Iterable

from evaluator.schemas import SafetyReport
from safety.patterns import PATTERN_LIBRARY, PatternRule, Severity


def analyze(source_text: str, rules: Iterable[PatternRule] = PATTERN_LIBRARY) -> SafetyReport:
    """
    Scan ``source_text`` against the pattern library.

    Every matching rule contributes its message once, to ``issues`` for
    blocking rules and to ``warnings`` for advisory ones. The text is treated
    as plain text, so fragments that do not parse are still screened.
    """
    issues: list[str] = []
    warnings: list[str] = []

    text = source_text or ""
    for rule in rules:
        if not rule.matcher(text):
            continue
        if rule.severity is Severity.ISSUE:
            issues.append(rule.message)
        else:
            warnings.append(rule.message)

    return SafetyReport(safe=not issues, issues=issues, warnings=warnings)


def format_blocking_issues(report: SafetyReport) -> str:
    lines = ["Code safety check failed:"]
    lines.extend(f"- {issue}" for issue in report.issues)
    return "\n".join(lines)
