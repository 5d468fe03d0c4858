"""
Child process protocol for sandbox execution.

The parent writes one JSON payload to the child's stdin and reads one JSON
response from its stdout. Arguments travel as a Python literal so their types
survive intact; results come back in their wire form (see ``to_wire``).
"""

from __future__ import annotations

import ast
import asyncio
import contextlib
import inspect
import io
import json
import sys
import time
from collections.abc import Sequence
from typing import Any, Callable, cast

from sandbox import policy

CHILD_TEMPLATE = """
from sandbox.protocol import child_main
child_main()
""".strip()

MAX_CONSOLE_CHARS = 10_000


def _encode_extra(value: object) -> object:
    if isinstance(value, (set, frozenset)):
        items = list(value)
        try:
            return sorted(items)
        except TypeError:
            return items
    raise TypeError(f"Result of type '{type(value).__name__}' is not JSON-serializable")


def dumps_wire(value: object) -> str:
    return json.dumps(value, default=_encode_extra)


def to_wire(value: object) -> Any:
    """Return ``value`` as it looks after crossing the child/parent boundary."""
    return json.loads(dumps_wire(value))


def encode_args(args: Sequence[object]) -> str:
    """Encode call arguments as a literal the child can rebuild exactly."""
    text = repr(list(args))
    decode_args(text)
    return text


def decode_args(text: str) -> list[object]:
    value = ast.literal_eval(text)
    if not isinstance(value, list):
        raise ValueError("Arguments must be a list literal")
    return cast(list[object], value)


def _load_payload() -> dict[str, object]:
    raw = sys.stdin.read()
    if not raw:
        return {}
    try:
        return cast(dict[str, object], json.loads(raw))
    except json.JSONDecodeError:
        return {}


def _format_error(exc: BaseException) -> str:
    return f"{exc.__class__.__name__}: {exc}"


async def _await(value: Any) -> Any:
    return await value


def call_entry_point(
    code: str,
    entry_point: str,
    args: list[object],
    allowed_modules: list[str] | None = None,
) -> object:
    """Bind the fragment in a fresh namespace and call its entry point."""
    namespace = policy.build_namespace(allowed_modules=allowed_modules)
    compiled = compile(code, "<candidate>", "exec")
    exec(compiled, namespace, namespace)

    func = namespace.get(entry_point)
    if not callable(func):
        raise NameError(
            f"Could not find function '{entry_point}' to test. "
            "Make sure your function is defined and named correctly."
        )

    result = cast(Callable[..., object], func)(*args)
    if inspect.isawaitable(result):
        result = asyncio.run(_await(result))
    return result


def child_main() -> None:
    """Entry point for the sandbox child process."""
    start = time.perf_counter()
    payload = _load_payload()
    code = str(payload.get("code", ""))
    entry_point = str(payload.get("entry_point", ""))
    allowed_modules = cast(list[str], payload.get("allowed_modules", list(policy.ALLOWED_MODULES)))

    console = io.StringIO()
    response: dict[str, object]
    try:
        args = decode_args(str(payload.get("args", "[]")))
        with contextlib.redirect_stdout(console), contextlib.redirect_stderr(console):
            result = call_entry_point(code, entry_point, args, allowed_modules)
        response = {
            "status": "completed",
            "result": to_wire(result),
            "error": None,
        }
    except BaseException as exc:  # noqa: BLE001 - capture all child errors
        response = {
            "status": "faulted",
            "result": None,
            "error": _format_error(exc),
        }

    response["console"] = console.getvalue()[:MAX_CONSOLE_CHARS]
    response["runtime_ms"] = (time.perf_counter() - start) * 1000
    _ = sys.__stdout__.write(dumps_wire(response))
    sys.__stdout__.flush()


if __name__ == "__main__":
    child_main()
