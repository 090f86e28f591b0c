"""
Equality predicates used to decide whether a derived value changed.

``strict_equal`` is the default. Containers and other objects compare by
identity, which is what a rendering layer compares snapshots with; immutable
scalars (numbers, strings, bytes, booleans, None) compare by value, so a
selector deriving ``count * 2`` keeps its snapshot when ``count`` did not move.
NaN equals NaN.

``shallow_equal`` treats two containers as equal when their top-level members
are identical, so a selector that builds a fresh tuple or dict each time can
still keep a stable snapshot.
"""

import math
from typing import Any, Callable, Mapping

EqualityFn = Callable[[Any, Any], bool]

_SCALAR_TYPES = (int, float, complex, str, bytes, bool, type(None))


def strict_equal(a: Any, b: Any) -> bool:
    """Identity for objects, value equality for immutable scalars of the same type."""
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALAR_TYPES):
        return False
    if a == b:
        return True
    # NaN != NaN, but an unchanged NaN result is not a change
    if isinstance(a, float):
        return math.isnan(a) and math.isnan(b)
    return False


def shallow_equal(a: Any, b: Any) -> bool:
    """
    Compare two values one level deep.

    Mappings are equal when they have the same keys and each value is
    identical. Lists and tuples are equal when they have the same type and
    length and their members are identical position by position. Anything
    else, sets included, falls back to ``==``.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False

    if isinstance(a, Mapping):
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or b[key] is not value:
                return False
        return True

    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(x is y for x, y in zip(a, b))

    return a == b
