from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class SafetyReport(BaseSchema):
    safe: bool
    issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class TestCase(BaseSchema):
    __test__ = False

    input: tuple[Any, ...] = ()
    expected_output: Any = None
    description: str | None = None

    @field_validator("input", mode="before")
    @classmethod
    def wrap_single_argument(cls, value: object) -> object:
        # A bare value is passed as the only positional argument.
        if isinstance(value, (list, tuple)):
            return tuple(value)
        return (value,)


class TestCaseResult(BaseSchema):
    __test__ = False

    description: str
    passed: bool
    input: tuple[Any, ...] = ()
    actual: Any = None
    expected: Any = None
    error: str | None = None
    failure_type: str | None = None
    console_output: str = ""
    runtime_ms: float | None = None


class TestRunReport(BaseSchema):
    __test__ = False

    total_count: int = Field(ge=0)
    passed_count: int = Field(ge=0)
    results: tuple[TestCaseResult, ...] = ()
    safety_report: SafetyReport
    error: str | None = None
    # Failure type counts for this run only, most frequent first.
    failure_stats: tuple[tuple[str, int], ...] = ()

    @property
    def all_passed(self) -> bool:
        return self.total_count > 0 and self.passed_count == self.total_count
