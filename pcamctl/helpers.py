"""Small collection helpers."""

from __future__ import annotations

from contextlib import contextmanager
from itertools import groupby
from typing import Any, Iterable, Iterator

_UNSET = object()


def second_smaller(a: tuple, b: tuple) -> bool:
    """Order pairs by their second element, then by their first."""
    if a[1] < b[1]:
        return True
    if a[1] > b[1]:
        return False
    return a[0] < b[0]


def remove_duplicates(items: Iterable) -> list:
    """Return the items sorted with equal neighbours collapsed to one."""
    return [key for key, _ in groupby(sorted(items))]


@contextmanager
def var_scope(obj: Any, attr: str, value_at_end: Any, value_within: Any = _UNSET) -> Iterator[Any]:
    """Set ``obj.attr`` to ``value_at_end`` when the block ends, even on error.

    If ``value_within`` is given the attribute holds it inside the block.
    """
    if value_within is not _UNSET:
        setattr(obj, attr, value_within)
    try:
        yield obj
    finally:
        setattr(obj, attr, value_at_end)