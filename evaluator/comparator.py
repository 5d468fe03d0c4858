"""Run declared test cases against a candidate fragment and build the report."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from evaluator.discovery import discover_entry_points
from evaluator.equality import deep_equal
from evaluator.failure_taxonomy import FailureAnalyzer, FailureType
from evaluator.schemas import SafetyReport, TestCase, TestCaseResult, TestRunReport
from harness.config import DEFAULT_MAX_CODE_SIZE, HarnessConfig
from safety.analyzer import analyze, format_blocking_issues
from safety.sanitizer import sanitize
from sandbox.executor import Completed, ExecutionOutcome, SandboxExecutor, TimedOut
from sandbox.protocol import to_wire

logger = logging.getLogger(__name__)

MISSING_ENTRY_POINT = (
    "Could not find function to test. Make sure your function is defined and named correctly."
)


def _as_test_case(case: TestCase | Mapping[str, Any]) -> TestCase:
    if isinstance(case, TestCase):
        return case
    return TestCase.from_dict(case)


def _wire_expected(value: object) -> object:
    # Expected values go through the same encoding as results so that tuples,
    # sets and non-string keys compare the way the child reports them.
    try:
        return to_wire(value)
    except (TypeError, ValueError):
        return value


class TestComparator:
    """
    Evaluate a fragment case by case.

    A run is gated on the safety report: blocked fragments produce a report
    with no results and the executor is never called. Otherwise each case is
    invoked in declaration order and a failing case never stops the run.
    """

    __test__ = False

    def __init__(
        self,
        executor: SandboxExecutor | None = None,
        time_limit_ms: int | None = None,
        max_code_size: int = DEFAULT_MAX_CODE_SIZE,
    ) -> None:
        self.executor = executor or SandboxExecutor()
        self.time_limit_ms = time_limit_ms
        self.max_code_size = max_code_size

    def run(
        self,
        fragment: str,
        entry_point: str | None,
        test_cases: Iterable[TestCase | Mapping[str, Any]],
        safety_report: SafetyReport,
    ) -> TestRunReport:
        cases = [_as_test_case(case) for case in test_cases]

        if not safety_report.safe:
            logger.info("Fragment blocked by %d safety issue(s)", len(safety_report.issues))
            return self._terminal(safety_report, format_blocking_issues(safety_report))

        if not fragment or not fragment.strip():
            return self._terminal(safety_report, "No code provided")

        code_size = len(fragment.encode("utf-8"))
        if code_size > self.max_code_size:
            return self._terminal(
                safety_report,
                f"Code too large ({code_size} bytes). Maximum is {self.max_code_size} bytes.",
            )

        if not entry_point:
            try:
                discovered = discover_entry_points(fragment)
            except SyntaxError as exc:
                return self._terminal(safety_report, sanitize(f"SyntaxError: {exc}"))
            if not discovered:
                return self._terminal(safety_report, MISSING_ENTRY_POINT)
            entry_point = discovered[0]

        failures = FailureAnalyzer()
        results = [
            self._run_case(fragment, entry_point, index, case, failures)
            for index, case in enumerate(cases)
        ]
        passed_count = sum(1 for result in results if result.passed)
        logger.info(
            "Ran %d test case(s) against %s: %d passed",
            len(results),
            entry_point,
            passed_count,
        )
        return TestRunReport(
            total_count=len(results),
            passed_count=passed_count,
            results=results,
            safety_report=safety_report,
            failure_stats=failures.get_top_failures(len(FailureType)),
        )

    def _run_case(
        self,
        fragment: str,
        entry_point: str,
        index: int,
        case: TestCase,
        failures: FailureAnalyzer,
    ) -> TestCaseResult:
        description = case.description or f"Test case {index + 1}"
        expected = _wire_expected(case.expected_output)
        outcome: ExecutionOutcome = self.executor.invoke(
            fragment, entry_point, case.input, self.time_limit_ms
        )

        if isinstance(outcome, Completed):
            passed = deep_equal(outcome.value, expected)
            if not passed:
                failures.record(FailureType.MISMATCH)
            return TestCaseResult(
                description=description,
                passed=passed,
                input=case.input,
                actual=outcome.value,
                expected=expected,
                failure_type=None if passed else FailureType.MISMATCH.value,
                console_output=outcome.console_output,
                runtime_ms=outcome.runtime_ms,
            )

        if isinstance(outcome, TimedOut):
            failure_type = FailureType.TIMEOUT
        else:
            failure_type = failures.classify_error(outcome.message)
        failures.record(failure_type)
        return TestCaseResult(
            description=description,
            passed=False,
            input=case.input,
            actual=None,
            expected=expected,
            error=sanitize(outcome.message),
            failure_type=failure_type.value,
            console_output=outcome.console_output,
            runtime_ms=outcome.runtime_ms,
        )

    @staticmethod
    def _terminal(safety_report: SafetyReport, error: str) -> TestRunReport:
        return TestRunReport(
            total_count=0,
            passed_count=0,
            results=(),
            safety_report=safety_report,
            error=error,
        )


def run_tests(
    fragment: str,
    test_cases: Iterable[TestCase | Mapping[str, Any]],
    entry_point: str | None = None,
    config: HarnessConfig | None = None,
    executor: SandboxExecutor | None = None,
) -> TestRunReport:
    """Screen ``fragment`` and, when it is safe, run every test case against it."""
    config = config or HarnessConfig()
    executor = executor or SandboxExecutor(
        memory_limit_mb=config.memory_limit_mb,
        default_time_limit_ms=config.time_limit_ms,
        allowed_modules=config.allowed_modules,
    )
    comparator = TestComparator(
        executor=executor,
        time_limit_ms=config.time_limit_ms,
        max_code_size=config.max_code_size,
    )
    return comparator.run(fragment, entry_point, test_cases, analyze(fragment))
