"""
structdiff.values — Value shapes and scalar comparison.

Every node of a compared structure falls into exactly one shape:

    Map       → any collections.abc.Mapping     {"a": 1}
    Sequence  → list or tuple                   [1, 2, 3]
    Scalar    → None, bool, real number,        42, "x", None
                Decimal, str, bytes
    Unsupported → anything else (sets, custom objects, ...)

Decimal is registered only as numbers.Number, so it is named
alongside numbers.Real wherever a number is recognised.

The differ matches on Shape at every dispatch point instead of probing
types ad hoc.  Strings and bytes are scalars even though Python treats
them as sequences.
"""

import decimal
import math
import numbers
from collections.abc import Mapping
from enum import Enum, auto
from typing import Any

from .options import ComparisonOptions


class Shape(Enum):
    """Closed set of value shapes."""
    MAP = auto()
    SEQUENCE = auto()
    SCALAR = auto()
    UNSUPPORTED = auto()


NUMBER_TYPES = (numbers.Real, decimal.Decimal)


def shape_of(obj: Any) -> Shape:
    """Classify a value into its Shape."""
    if obj is None or isinstance(obj, (bool, str, bytes)):
        return Shape.SCALAR
    if isinstance(obj, NUMBER_TYPES):
        return Shape.SCALAR
    if isinstance(obj, Mapping):
        return Shape.MAP
    if isinstance(obj, (list, tuple)):
        return Shape.SEQUENCE
    return Shape.UNSUPPORTED


def is_numeric(obj: Any) -> bool:
    """Real numbers and Decimals, excluding bool (an int subclass)."""
    return isinstance(obj, NUMBER_TYPES) and not isinstance(obj, bool)


# ═══════════════════════════════════════════════════════════════════
#  COMPARABILITY
# ═══════════════════════════════════════════════════════════════════

def comparable(obj1: Any, obj2: Any, options: ComparisonOptions) -> bool:
    """
    Whether two values may be compared structurally.

    Maps compare with maps and sequences with sequences.  Scalars must
    share their exact type under strict mode; numbers of different
    types (1 vs 1.0) become comparable when strict is off or a numeric
    tolerance is configured.
    """
    s1, s2 = shape_of(obj1), shape_of(obj2)
    if s1 is not s2:
        return False
    if s1 in (Shape.MAP, Shape.SEQUENCE):
        return True
    if is_numeric(obj1) and is_numeric(obj2):
        if not options.strict or options.numeric_tolerance > 0:
            return True
    return type(obj1) is type(obj2)


# ═══════════════════════════════════════════════════════════════════
#  SCALAR EQUALITY
# ═══════════════════════════════════════════════════════════════════

def _within_tolerance(obj1: Any, obj2: Any, tolerance: Any) -> bool:
    builtin = (int, float)
    if type(obj1) is not type(obj2) and not (isinstance(obj1, builtin) and isinstance(obj2, builtin)):
        # Decimal refuses to mix with float in arithmetic
        obj1, obj2 = float(obj1), float(obj2)
    delta = abs(obj1 - obj2)
    if delta <= tolerance:
        return True
    # x + t can land an ulp or two past t in binary floating point;
    # the slack is rounding error of the operands, never more
    if isinstance(delta, float) or isinstance(tolerance, float):
        slack = 2 * math.ulp(max(abs(float(obj1)), abs(float(obj2)), float(tolerance)))
        return float(delta) - float(tolerance) <= slack
    return False


def _is_nan(obj: Any) -> bool:
    if isinstance(obj, decimal.Decimal):
        return obj.is_nan()
    return isinstance(obj, float) and math.isnan(obj)


def compare_values(obj1: Any, obj2: Any, options: ComparisonOptions) -> bool:
    """
    Default equality for two leaf values.

    Order of rules:
        1. Same object → equal.
        2. Both numbers → NaN equals NaN and nothing else.
        3. Both numbers → |a - b| <= tolerance when a tolerance > 0 is
           set, otherwise numeric equality.
        4. strip enabled and both strings → compare trimmed.
        5. Otherwise exact equality, with the type required to match
           under strict mode so that True never equals 1.
    """
    if obj1 is obj2:
        return True

    if is_numeric(obj1) and is_numeric(obj2):
        if _is_nan(obj1) or _is_nan(obj2):
            return _is_nan(obj1) and _is_nan(obj2)
        if options.numeric_tolerance > 0:
            return _within_tolerance(obj1, obj2, options.numeric_tolerance)
        if options.strict and type(obj1) is not type(obj2):
            return False
        return obj1 == obj2

    if isinstance(obj1, bool) != isinstance(obj2, bool):
        return False

    if options.strip and isinstance(obj1, str) and isinstance(obj2, str):
        return obj1.strip() == obj2.strip()

    if options.strict and type(obj1) is not type(obj2):
        return False
    return obj1 == obj2
