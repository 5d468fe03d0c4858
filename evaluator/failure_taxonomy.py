"""Classify failed test cases by the diagnostic the sandbox reported."""

from __future__ import annotations

from collections import Counter
from enum import Enum


class FailureType(str, Enum):
    TIMEOUT = "timeout"
    IMPORT_BLOCKED = "import_blocked"
    BLOCKED_BUILTIN = "blocked_builtin"
    SYNTAX_ERROR = "syntax_error"
    RUNTIME_ERROR = "runtime_error"
    MISMATCH = "mismatch"
    OTHER = "other"


class FailureAnalyzer:
    """Tally of failure types for a single test run."""

    def __init__(self) -> None:
        self.counts: Counter[FailureType] = Counter()

    @staticmethod
    def classify_error(message: str) -> FailureType:
        lowered = message.lower()
        if "timed out" in lowered or "timeout" in lowered:
            return FailureType.TIMEOUT
        if "import" in lowered and ("blocked" in lowered or "allowlisted" in lowered):
            return FailureType.IMPORT_BLOCKED
        if "blocked by sandbox policy" in lowered:
            return FailureType.BLOCKED_BUILTIN
        if "syntaxerror" in lowered or "indentationerror" in lowered:
            return FailureType.SYNTAX_ERROR
        if any(marker in lowered for marker in ("error", "exception", "failed")):
            return FailureType.RUNTIME_ERROR
        return FailureType.OTHER

    def record(self, failure_type: FailureType) -> None:
        self.counts[failure_type] += 1

    def get_top_failures(self, n: int = 5) -> list[tuple[str, int]]:
        # Equal counts keep the order in which they were first recorded.
        return [(ft.value, count) for ft, count in self.counts.most_common(n)]
