"""Comparators over records.

An order is a plain ``(a, b) -> int`` callable: negative when ``a`` sorts
first, zero when both rank the same, positive otherwise. The same comparator
drives every local shard sort and both merge phases.
"""

import functools
from typing import Callable, Optional

from .errors import FieldTypeError
from .records import FieldKind, Record

Comparator = Callable[[Record, Record], int]
RecordFilter = Callable[[Record], bool]
Transform = Callable[[Record], Record]


def _compare_values(name: str, left: Record, right: Record) -> int:
    left_kind = left.kind(name)
    right_kind = right.kind(name)
    if left_kind is FieldKind.ABSENT or right_kind is FieldKind.ABSENT:
        raise FieldTypeError(f"cannot order by '{name}': field is absent")
    if left_kind != right_kind and not (left_kind.is_integer and right_kind.is_integer):
        raise FieldTypeError(
            f"cannot order by '{name}': {left_kind.value} vs {right_kind.value}"
        )
    a, b = left[name], right[name]
    return (a > b) - (a < b)


def field_order(name: str, descending: bool = False) -> Comparator:
    def compare(left: Record, right: Record) -> int:
        result = _compare_values(name, left, right)
        return -result if descending else result
    return compare


def chain(*comparators: Comparator) -> Comparator:
    """First non-zero result wins."""
    def compare(left: Record, right: Record) -> int:
        for comparator in comparators:
            result = comparator(left, right)
            if result:
                return result
        return 0
    return compare


def order_by(*fields: str) -> Comparator:
    """``order_by("-age", "id")``: age descending, then id ascending."""
    if not fields:
        raise ValueError("order_by needs at least one field")
    comparators = []
    for spec in fields:
        if spec.startswith("-"):
            comparators.append(field_order(spec[1:], descending=True))
        else:
            comparators.append(field_order(spec))
    return chain(*comparators)


def with_tiebreak(order: Comparator, unique_field: Optional[str]) -> Comparator:
    """Complete ``order`` so that only records sharing ``unique_field`` tie."""
    if not unique_field:
        return order
    return chain(order, field_order(unique_field))


def sort_key(order: Comparator):
    return functools.cmp_to_key(order)
