"""
Subprocess-based sandbox executor for candidate fragments.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union, cast

from safety.sanitizer import sanitize
from sandbox import policy
from sandbox import protocol

logger = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT_MS: int = 5000


@dataclass(frozen=True)
class Completed:
    value: Any
    runtime_ms: float = 0.0
    console_output: str = ""


@dataclass(frozen=True)
class Faulted:
    message: str
    runtime_ms: float = 0.0
    console_output: str = ""


@dataclass(frozen=True)
class TimedOut:
    time_limit_ms: int
    runtime_ms: float = 0.0
    console_output: str = ""

    @property
    def message(self) -> str:
        return f"Test execution timed out after {self.time_limit_ms / 1000:g} seconds"


ExecutionOutcome = Union[Completed, Faulted, TimedOut]


class SandboxExecutor:
    """
    Invoke a fragment's entry point in a child interpreter with a hard deadline.

    Every invocation gets its own process, so a runaway fragment is killed at
    the deadline instead of blocking the caller. On Unix platforms, CPU and
    memory limits are enforced via resource.setrlimit. On Windows, these limits
    degrade gracefully and only the wall-clock deadline applies.
    """

    DEFAULT_MEMORY_LIMIT_MB: int = 256

    def __init__(
        self,
        memory_limit_mb: int | None = None,
        default_time_limit_ms: int | None = None,
        allowed_modules: Iterable[str] | None = None,
    ) -> None:
        self.memory_limit_mb: int = memory_limit_mb or self.DEFAULT_MEMORY_LIMIT_MB
        self.default_time_limit_ms: int = default_time_limit_ms or DEFAULT_TIME_LIMIT_MS
        self.allowed_modules: list[str] = list(allowed_modules or policy.ALLOWED_MODULES)

    def invoke(
        self,
        fragment: str,
        entry_point: str,
        args: Sequence[object],
        time_limit_ms: int | None = None,
    ) -> ExecutionOutcome:
        time_limit_ms = time_limit_ms or self.default_time_limit_ms
        try:
            payload = protocol.dumps_wire(
                {
                    "code": fragment,
                    "entry_point": entry_point,
                    "args": protocol.encode_args(args),
                    "allowed_modules": self.allowed_modules,
                }
            )
        except (TypeError, ValueError, SyntaxError) as exc:
            return Faulted(sanitize(f"Invalid test input: {exc}"))

        timeout_seconds = time_limit_ms / 1000
        logger.debug("Invoking %s with %d argument(s), limit %d ms", entry_point, len(args), time_limit_ms)

        start = time.perf_counter()
        try:
            completed = subprocess.run(
                [sys.executable, "-c", protocol.CHILD_TEMPLATE],
                input=payload,
                text=True,
                capture_output=True,
                timeout=timeout_seconds,
                env=self._child_env(),
                preexec_fn=self._limit_resources(timeout_seconds) if os.name != "nt" else None,
            )
        except subprocess.TimeoutExpired:
            runtime_ms = (time.perf_counter() - start) * 1000
            logger.warning("Invocation of %s timed out after %d ms", entry_point, time_limit_ms)
            return TimedOut(time_limit_ms=time_limit_ms, runtime_ms=runtime_ms)
        except (OSError, subprocess.SubprocessError) as exc:
            runtime_ms = (time.perf_counter() - start) * 1000
            logger.error("Failed to start sandbox process: %s", exc)
            return Faulted(sanitize(f"Sandbox failed to start: {exc}"), runtime_ms)

        runtime_ms = (time.perf_counter() - start) * 1000
        return self._parse_response(completed, runtime_ms)

    def _parse_response(
        self,
        completed: subprocess.CompletedProcess[str],
        runtime_ms: float,
    ) -> ExecutionOutcome:
        if not completed.stdout:
            if completed.returncode < 0:
                error = f"Sandbox process terminated by signal {-completed.returncode}"
            else:
                error = completed.stderr.strip() or "Empty response from sandbox"
            logger.warning("Sandbox produced no response: %s", error.splitlines()[-1])
            return Faulted(sanitize(error), runtime_ms)

        try:
            loaded = cast(object, json.loads(completed.stdout))
        except json.JSONDecodeError as exc:
            return Faulted(sanitize(f"Invalid JSON from sandbox: {exc}"), runtime_ms)

        if not isinstance(loaded, dict):
            return Faulted("Invalid response type from sandbox", runtime_ms)
        data = cast(dict[str, object], loaded)

        console = str(data.get("console") or "")
        runtime_value = data.get("runtime_ms")
        if isinstance(runtime_value, (int, float)):
            runtime_ms = float(runtime_value)

        if data.get("status") == "completed":
            return Completed(data.get("result"), runtime_ms, console)

        error_value = data.get("error")
        error = str(error_value) if error_value is not None else "Unknown error occurred"
        return Faulted(sanitize(error), runtime_ms, console)

    def _child_env(self) -> dict[str, str]:
        env = os.environ.copy()
        project_root = str(Path(__file__).resolve().parents[1])
        existing_pythonpath = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = (
            f"{project_root}{os.pathsep}{existing_pythonpath}"
            if existing_pythonpath
            else project_root
        )
        return env

    def _limit_resources(self, timeout_seconds: float):
        """Return a preexec_fn to enforce resource limits on Unix."""
        def _apply_limits():
            try:
                import resource
            except ImportError:
                return
            cpu_seconds = max(1, int(timeout_seconds) + 1)
            memory_bytes = int(self.memory_limit_mb * 1024 * 1024)
            resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds + 1))
            if hasattr(resource, "RLIMIT_AS"):
                resource.setrlimit(resource.RLIMIT_AS, (memory_bytes, memory_bytes))
            elif hasattr(resource, "RLIMIT_DATA"):
                resource.setrlimit(resource.RLIMIT_DATA, (memory_bytes, memory_bytes))

        return _apply_limits


def invoke(
    fragment: str,
    entry_point: str,
    args: Sequence[object],
    time_limit_ms: int | None = None,
) -> ExecutionOutcome:
    """Invoke ``entry_point`` once with a default executor."""
    return SandboxExecutor().invoke(fragment, entry_point, args, time_limit_ms)
