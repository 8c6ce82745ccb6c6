"""
Loose value coercion shared by the equality and ordering strategies.

Callers compare what the database returns with what a test harness sent as JSON,
so types rarely line up ("100" vs 100, Decimal vs float, timestamp vs string).
The rules, applied to a pair of operands:

1. If either side is a bool, or exactly one side is None and the other is not a
   string, both sides compare by truthiness ("", "0", 0 and None are falsy).
2. If both sides are numbers or numeric strings, they compare numerically
   (as floats when either side is a float, exactly otherwise).
3. Otherwise both sides are rendered as text (None -> "", datetimes in ISO
   format with a space separator) and compared as strings.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple, Union

Number = Union[int, float, Decimal]

_INT_STRING = re.compile(r"^\s*[+-]?[0-9]+\s*$")
_NUMERIC_STRING = re.compile(r"^\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\s*$")


def to_number(value: Any) -> Optional[Number]:
    """Return a numeric view of `value`, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        if _INT_STRING.match(value):
            return int(value)
        if _NUMERIC_STRING.match(value):
            try:
                return Decimal(value.strip())
            except InvalidOperation:
                return None
    return None


def to_text(value: Any) -> str:
    """Render a scalar the way it would read as a column value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, dt.datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def coerce_pair(left: Any, right: Any) -> Tuple[Any, Any]:
    """Bring two operands into mutually comparable form."""
    if isinstance(left, bool) or isinstance(right, bool):
        return is_truthy(left), is_truthy(right)
    if (left is None) != (right is None):
        other = right if left is None else left
        if not isinstance(other, str):
            return is_truthy(left), is_truthy(right)
    if left is None and right is None:
        return False, False

    left_number, right_number = to_number(left), to_number(right)
    if left_number is not None and right_number is not None:
        if isinstance(left_number, float) or isinstance(right_number, float):
            return float(left_number), float(right_number)
        return left_number, right_number

    return to_text(left), to_text(right)


def loose_equals(left: Any, right: Any) -> bool:
    """Equality after coercion: "100" == 100, None == "", True == "yes"."""
    coerced_left, coerced_right = coerce_pair(left, right)
    return coerced_left == coerced_right


__all__ = ["to_number", "to_text", "is_truthy", "coerce_pair", "loose_equals"]
