"""Entry point discovery for fragments submitted without an explicit name."""

from __future__ import annotations

import ast


def discover_entry_points(fragment: str) -> list[str]:
    """
    Return top-level callable names in definition order.

    Covers ``def``, ``async def`` and ``name = lambda ...`` assignments.

    Raises:
        SyntaxError: If the fragment does not parse
    """
    tree = ast.parse(fragment)
    names: list[str] = []
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            names.append(node.name)
        elif isinstance(node, ast.Assign) and isinstance(node.value, ast.Lambda):
            names.extend(
                target.id for target in node.targets if isinstance(target, ast.Name)
            )
    return names
