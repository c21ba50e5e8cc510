"""
Ranking utilities
=================

Small, explicit sorting/selection primitives used to rank group summaries.

Included:
- Merge Sort (stable, O(n log n)): ranking relies on stability so rows with
  equal metric keep the order they were given in (catalog order).
- rank_groups: descending ranking of GroupSummary rows
- top_k: heap-based selection of the k largest rows
"""

from __future__ import annotations
import heapq
from typing import TYPE_CHECKING, Callable, List, Sequence, TypeVar

if TYPE_CHECKING:
    from .models import GroupSummary

T = TypeVar("T")


def merge_sort(arr: List[T], key: Callable[[T], object] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort (equal keys keep their input order, also when reverse=True)."""
    if len(arr) <= 1:
        return arr[:]
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)


def _merge(left: List[T], right: List[T], key: Callable[[T], object], reverse: bool) -> List[T]:
    out: List[T] = []
    # i and j are pointers into each sorted list
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        take_left = (a >= b) if reverse else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out


def rank_groups(rows: Sequence[GroupSummary]) -> List[GroupSummary]:
    """Rank rows descending by value; ties keep input order."""
    return merge_sort(list(rows), key=lambda r: r.value, reverse=True)


def top_k(rows: Sequence[GroupSummary], k: int) -> List[GroupSummary]:
    """The k largest rows, descending; ties resolved by input position."""
    if k <= 0:
        return []
    # (value, -position) makes the earlier row win a tie
    best = heapq.nlargest(k, enumerate(rows), key=lambda p: (p[1].value, -p[0]))
    return [r for _, r in best]
