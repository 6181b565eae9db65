"""Shuffling and mini-batch partitioning."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np

from .errors import InvalidArgumentError

T = TypeVar("T")


def permutation(n: int, rng: np.random.Generator) -> np.ndarray:
    """Return a uniformly random permutation of ``0..n-1``."""

    return rng.permutation(n)


def batch_count(n: int, size: int) -> int:
    """Number of batches for ``n`` items: ``n / size`` rounded half up.

    At least one batch is produced whenever ``n > 0``.
    """

    if size <= 0:
        raise InvalidArgumentError(f"Batch size must be positive, got {size}")
    if n <= 0:
        return 0
    return max(1, int(n / size + 0.5))


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into contiguous batches of ``size``.

    The last batch absorbs whatever is left once :func:`batch_count` batches
    exist, so it may be larger or smaller than ``size``.
    """

    count = batch_count(len(items), size)
    batches: List[List[T]] = []
    for idx in range(count):
        start = idx * size
        if idx == count - 1:
            batches.append(list(items[start:]))
        else:
            batches.append(list(items[start : start + size]))
    return batches


def shuffled_batches(
    items: Sequence[T], size: int, rng: np.random.Generator
) -> List[List[T]]:
    """Reshuffle ``items`` with ``rng`` and partition the result."""

    order = permutation(len(items), rng)
    return partition([items[int(i)] for i in order], size)


__all__ = ["permutation", "batch_count", "partition", "shuffled_batches"]
