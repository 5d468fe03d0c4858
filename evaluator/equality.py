"""Deep structural equality between actual and expected results."""

from __future__ import annotations

import math
from collections.abc import Mapping


def _is_ordered_container(value: object) -> bool:
    return isinstance(value, (list, tuple))


def deep_equal(a: object, b: object) -> bool:
    """
    Compare two values structurally.

    Lists and tuples are compared element-wise in order, mappings by key set
    and per-key value. NaN equals NaN, and booleans never equal numbers.
    """
    if a is b:
        return True

    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b

    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True

    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if set(a.keys()) != set(b.keys()):
            return False
        return all(deep_equal(a[key], b[key]) for key in a)

    if _is_ordered_container(a) or _is_ordered_container(b):
        if not (_is_ordered_container(a) and _is_ordered_container(b)):
            return False
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if a is None or b is None:
        return False

    return bool(a == b)
