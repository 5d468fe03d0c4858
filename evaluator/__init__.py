"""
Evaluator Module

Test case evaluation for candidate fragments.

This module provides:
- Report and test case schemas
- Deep structural equality for results
- Entry point discovery
- The test comparator that drives the sandbox case by case
- Failure classification
"""

__version__ = "0.1.0"

from .schemas import (
    BaseSchema,
    SafetyReport,
    TestCase,
    TestCaseResult,
    TestRunReport,
)

__all__ = [
    "BaseSchema",
    "SafetyReport",
    "TestCase",
    "TestCaseResult",
    "TestRunReport",
]
