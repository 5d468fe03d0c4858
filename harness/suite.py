"""Test suite files: an entry point plus an ordered list of test cases."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import Field

from evaluator.schemas import BaseSchema, TestCase


class TestSuite(BaseSchema):
    __test__ = False

    entry_point: str | None = None
    test_cases: list[TestCase] = Field(default_factory=list)


def load_suite(yaml_path: str | Path) -> TestSuite:
    """Load a test suite from a YAML file.

    The file holds an optional ``entry_point`` and a ``test_cases`` list whose
    items have ``input``, ``expected_output`` and an optional ``description``.

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or missing required fields
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Suite file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not data or not isinstance(data, dict):
        raise ValueError(f"Empty or invalid suite file: {yaml_path}")

    try:
        return TestSuite.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid suite in {yaml_path}: {e}") from e
