"""
Sandbox policy definitions: import guard and restricted builtins for fragments.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable, Iterable, Sequence
from types import ModuleType
from typing import cast

BLOCKED_MODULES = [
    "os",
    "sys",
    "subprocess",
    "socket",
    "shutil",
    "pathlib",
    "urllib",
    "requests",
    "http",
    "ctypes",
    "importlib",
    "multiprocessing",
    "threading",
    "signal",
    "pickle",
    "builtins",
]

BLOCKED_BUILTINS = [
    "eval",
    "exec",
    "compile",
    "open",
    "input",
    "breakpoint",
    "exit",
    "quit",
    "help",
    "globals",
    "vars",
]

ALLOWED_MODULES = [
    "math",
    "cmath",
    "random",
    "itertools",
    "functools",
    "operator",
    "collections",
    "heapq",
    "bisect",
    "string",
    "re",
    "statistics",
    "fractions",
    "decimal",
    "copy",
    "json",
    "datetime",
    "typing",
    "dataclasses",
    "enum",
    "abc",
]

CANDIDATE_MODULE_NAME = "__candidate__"

ImportHook = Callable[
    [str, dict[str, object] | None, dict[str, object] | None, Sequence[str], int],
    ModuleType,
]


def _normalize_modules(modules: Iterable[str] | None) -> set[str]:
    return {name for name in (modules or [])}


def build_import_guard(
    allowed_modules: Iterable[str] | None = None,
    blocked_modules: Iterable[str] | None = None,
) -> ImportHook:
    """
    Build a restricted __import__ hook that only allows allowlisted modules
    and explicitly blocks denied modules.
    """
    allowed = _normalize_modules(allowed_modules or ALLOWED_MODULES)
    blocked = _normalize_modules(blocked_modules or BLOCKED_MODULES)
    original_import = cast(ImportHook, builtins.__import__)

    def guarded_import(
        name: str,
        globals: dict[str, object] | None = None,
        locals: dict[str, object] | None = None,
        fromlist: Sequence[str] = (),
        level: int = 0,
    ) -> ModuleType:
        if level:
            raise ImportError("Relative imports are blocked by sandbox policy")
        root = name.split(".")[0]
        if root in blocked or name in blocked:
            raise ImportError(f"Import of '{root}' blocked by sandbox policy")
        if root not in allowed:
            raise ImportError(f"Import of '{root}' is not allowlisted")
        return original_import(name, globals, locals, fromlist, level)

    return guarded_import


def _blocked_builtin(name: str) -> Callable[..., None]:
    def _blocked(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError(f"{name}() is blocked by sandbox policy")

    return _blocked


def build_restricted_builtins(
    allowed_modules: Iterable[str] | None = None,
    blocked_names: Iterable[str] | None = None,
) -> dict[str, object]:
    """
    Return a builtins mapping for the fragment namespace.

    Dangerous builtins are replaced with stubs that raise and ``__import__``
    is the allowlisting guard. The interpreter's own builtins are left
    untouched, so the child's protocol code keeps working normally.
    """
    restricted = dict(vars(builtins))
    for name in _normalize_modules(blocked_names or BLOCKED_BUILTINS):
        if name in restricted:
            restricted[name] = _blocked_builtin(name)
    restricted["__import__"] = build_import_guard(allowed_modules=allowed_modules)
    return restricted


def build_namespace(allowed_modules: Iterable[str] | None = None) -> dict[str, object]:
    """Fresh globals for a fragment."""
    return {
        "__builtins__": build_restricted_builtins(allowed_modules=allowed_modules),
        "__name__": CANDIDATE_MODULE_NAME,
    }
