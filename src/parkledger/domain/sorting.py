# File: src/parkledger/domain/sorting.py
"""
Stable ordering for reports

Reports must list equal keys in the order the items were recorded, so every
report goes through this explicit merge sort instead of relying on the
built-in sort.
"""

from typing import Callable, List, Sequence, TypeVar

T = TypeVar('T')


def stable_sort(items: Sequence[T], key: Callable[[T], object]) -> List[T]:
    """
    Return a new list with items ordered by key
    Items with equal keys keep their original relative order.
    """
    result = list(items)
    if len(result) < 2:
        return result

    middle = len(result) // 2
    left = stable_sort(result[:middle], key)
    right = stable_sort(result[middle:], key)
    return _merge(left, right, key)


def _merge(left: List[T], right: List[T], key: Callable[[T], object]) -> List[T]:
    merged: List[T] = []
    i = j = 0

    while i < len(left) and j < len(right):
        # Take from the right only when strictly smaller
        if key(right[j]) < key(left[i]):
            merged.append(right[j])
            j += 1
        else:
            merged.append(left[i])
            i += 1

    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged
