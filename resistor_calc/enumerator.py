"""
Exhaustive enumeration of resistor value combinations.

Combinations are ordered like nested loops: the first slot varies slowest
and the last slot varies fastest. The position of an assignment in that
order is its enumeration index, which is also the tie-break between
results with equal error, so the order must never change.
"""

import itertools
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from resistor_calc.errors import SearchSpaceTooLargeError

# Largest index the vectorized decode can address
MAX_INDEX = int(np.iinfo(np.int64).max)


class CombinationEnumerator:
    """Lazy, restartable cartesian product over per-slot value series."""

    def __init__(self, series: Sequence[Sequence[float]]):
        self._series: List[Tuple[float, ...]] = [tuple(s) for s in series]
        self._shape = tuple(len(s) for s in self._series)
        self._arrays = [np.asarray(s, dtype=np.float64) for s in self._series]

    @property
    def slots(self) -> int:
        return len(self._series)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    def combinations(self) -> int:
        """
        Total number of combinations, without enumerating them.

        Accumulates in Python ints, which are unbounded, so the product is
        exact however many slots there are. No slots means no combinations.
        """
        if not self._shape:
            return 0
        total = 1
        for size in self._shape:
            total *= size
        return total

    def __iter__(self) -> Iterator[Tuple[float, ...]]:
        if not self._shape:
            return iter(())
        return itertools.product(*self._series)

    def _digits(self, index: int) -> List[int]:
        total = self.combinations()
        if not 0 <= index < total:
            raise IndexError(f"Combination index {index} out of range [0, {total})")
        digits = []
        for size in reversed(self._shape):
            index, digit = divmod(index, size)
            digits.append(digit)
        digits.reverse()
        return digits

    def assignment_at(self, index: int) -> Tuple[float, ...]:
        """Decode one enumeration index into its assignment."""
        return tuple(s[d] for s, d in zip(self._series, self._digits(index)))

    def iter_range(self, start: int, stop: int) -> Iterator[Tuple[float, ...]]:
        """Yield the assignments with index in [start, stop), in order."""
        stop = min(stop, self.combinations())
        if start >= stop:
            return iter(())
        return itertools.islice(self._odometer(start), stop - start)

    def _odometer(self, start: int) -> Iterator[Tuple[float, ...]]:
        digits = self._digits(start)
        while True:
            yield tuple(s[d] for s, d in zip(self._series, digits))
            for pos in reversed(range(len(digits))):
                digits[pos] += 1
                if digits[pos] < self._shape[pos]:
                    break
                digits[pos] = 0
            else:
                return

    def block(self, start: int, stop: int) -> np.ndarray:
        """
        Values for a contiguous index range as a (slots, n) float64 array.

        Row k holds the values of slot k for indices start..stop-1, in the
        same order the iterator yields them.
        """
        self.check_vectorizable()
        stop = min(stop, self.combinations())
        indices = np.arange(start, stop, dtype=np.int64)
        digits = np.unravel_index(indices, self._shape)
        return np.stack([arr[d] for arr, d in zip(self._arrays, digits)])

    def ranges(self, chunk_size: int) -> Iterator[Tuple[int, int]]:
        """
        Lazily split [0, combinations()) into disjoint contiguous chunks.

        Spans are produced on demand, so splitting a space of any size
        costs nothing up front.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        total = self.combinations()
        return ((start, min(start + chunk_size, total)) for start in range(0, total, chunk_size))

    def chunk_count(self, chunk_size: int) -> int:
        """Number of spans ranges(chunk_size) yields."""
        return -(-self.combinations() // chunk_size)

    def check_vectorizable(self) -> None:
        """Raise SearchSpaceTooLargeError if indices do not fit in int64."""
        if self.combinations() > MAX_INDEX:
            raise SearchSpaceTooLargeError(
                f"{self.combinations()} combinations exceed the 64-bit index limit ({MAX_INDEX})"
            )
