"""
Vector arithmetic helpers for resource vectors.

All vectors are 1-D integer numpy arrays indexed by resource type.
"""

import numbers
from typing import Iterable, List

import numpy as np

from models.errors import InvalidResourceVector

# Largest count that fits the platform integer used by every matrix
MAX_COUNT = int(np.iinfo(int).max)


def as_vector(values: Iterable, length: int, label: str = "vector") -> np.ndarray:
    """
    Validate and convert a sequence of counts into a resource vector.

    Args:
        values: Sequence of non-negative integers
        length: Expected number of resource types
        label: Name used in error messages

    Returns:
        New integer numpy array of shape (length,)

    Raises:
        InvalidResourceVector: If values is not a sequence, has the wrong
            length, or holds non-integer, negative or oversized entries
    """
    if values is None:
        raise InvalidResourceVector(f"{label} is missing")

    try:
        items = list(values)
    except TypeError:
        raise InvalidResourceVector(f"{label} must be a sequence of integers, got {values!r}")

    if len(items) != length:
        raise InvalidResourceVector(
            f"{label} has length {len(items)}, expected {length}"
        )

    for j, item in enumerate(items):
        # bool is an Integral subclass but never a valid count
        if isinstance(item, bool) or not isinstance(item, numbers.Integral):
            raise InvalidResourceVector(f"{label}[{j}] is not an integer: {item!r}")
        if item < 0:
            raise InvalidResourceVector(f"{label}[{j}] is negative: {item}")
        if item > MAX_COUNT:
            raise InvalidResourceVector(f"{label}[{j}] is too large: {item}")

    return np.array(items, dtype=int).reshape(length)


def fits(a: np.ndarray, b: np.ndarray) -> bool:
    """True if a[j] <= b[j] for every component."""
    return bool(np.all(a <= b))


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a + b


def subtract(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a - b


def is_zero(a: np.ndarray) -> bool:
    return not bool(np.any(a))


def to_list(a: np.ndarray) -> List[int]:
    """Convert numpy ints to native Python ints for payloads and display."""
    return [int(x) for x in a]


def to_rows(matrix: np.ndarray) -> List[List[int]]:
    return [to_list(row) for row in matrix]


def frozen(a: np.ndarray) -> np.ndarray:
    """Return a read-only copy of an array."""
    result = np.array(a, dtype=int, copy=True)
    result.setflags(write=False)
    return result
