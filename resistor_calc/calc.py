"""
Exhaustive resistor value search.

RCalc enumerates every combination of values from the series chosen for
each resistor slot, scores each one against a constraint set, and ranks
the results by ascending error. Ties keep enumeration order (first slot
slowest, last slot fastest), so the output is fully deterministic.

Scoring runs in contiguous chunks of the combination index range. Chunks
may be scored by a thread pool; each returns its own ranking and the
rankings are merged in one pass on (error, index), so the result does not
depend on the worker count or on which chunk finished first.

Example:
    rcalc = RCalc([E24, E6, E24])
    constraints = (ConstraintBuilder()
                   .bound("R1+R2+R3 <= 1e6")
                   .bound("R1+R2+R3 >= 1e4")
                   .bound("0.8 * (1 + R1/R3) ~ 6.0")
                   .bound("0.8 * (1 + (R1+R2)/R3) ~ 12.0")
                   .finish())
    res = rcalc.calc(constraints)
    res.top(2)  # R1=13K R2=15K R3=2K, then R1=130K R2=150K R3=20K
"""

import itertools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from resistor_calc import config
from resistor_calc.constraints import ConstraintSet
from resistor_calc.enumerator import CombinationEnumerator
from resistor_calc.errors import DegenerateSearchError, NoAcceptableCombinationError
from resistor_calc.expression import VARIABLE_PATTERN
from resistor_calc.formatting import format_matches, format_values
from resistor_calc.series import E3, E6, E12, E24, E48, E96, RSeries, custom_series, get_series

logger = logging.getLogger(__name__)

SeriesLike = Union[RSeries, str, Sequence[float]]
ScoreFunction = Callable[['RSet'], Optional[float]]

# (errors, indices) of one scored chunk, sorted by (error, index)
_Partial = Tuple[np.ndarray, np.ndarray]


@dataclass(frozen=True)
class RSet:
    """One concrete value per resistor slot."""
    values: Tuple[float, ...]
    names: Tuple[str, ...]
    index: Optional[int] = field(default=None, compare=False)

    def r(self, idx: int) -> float:
        """Value of the idx-th resistor, counting from 1 like R1, R2, ..."""
        if idx < 1:
            raise IndexError(f"Resistor numbers start at 1, got {idx}")
        return self.values[idx - 1]

    def __getitem__(self, name: str) -> float:
        try:
            return self.values[self.names.index(name)]
        except ValueError:
            raise KeyError(name) from None

    def __len__(self) -> int:
        return len(self.values)

    def sum(self) -> float:
        """Sum of all values; handy for overall bounds on dividers."""
        return sum(self.values)

    def as_dict(self) -> Dict[str, float]:
        return dict(zip(self.names, self.values))

    def format(self, notation: str = 'rkm', sep: str = ', ') -> str:
        return format_values(zip(self.names, self.values), notation=notation, sep=sep)

    def __str__(self) -> str:
        return self.format()


class RRes:
    """
    Ranked search results, lowest error first.

    Entries are materialized into RSet objects only when accessed, so a
    result over millions of combinations stays two flat arrays.
    """

    def __init__(
        self,
        enumerator: CombinationEnumerator,
        names: Tuple[str, ...],
        errors: np.ndarray,
        indices: np.ndarray,
        explored: int,
        total: int,
    ):
        self._enumerator = enumerator
        self._names = names
        self._errors = errors
        self._indices = indices
        self.explored = explored
        self.total = total

    @property
    def complete(self) -> bool:
        """False when the search stopped before covering every combination."""
        return self.explored == self.total

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def errors(self) -> np.ndarray:
        return self._errors

    @property
    def indices(self) -> np.ndarray:
        return self._indices

    def __len__(self) -> int:
        return len(self._errors)

    def _entry(self, pos: int) -> Tuple[float, RSet]:
        index = int(self._indices[pos])
        rset = RSet(self._enumerator.assignment_at(index), self._names, index)
        return float(self._errors[pos]), rset

    def __getitem__(self, pos: int) -> Tuple[float, RSet]:
        if pos < 0:
            pos += len(self)
        if not 0 <= pos < len(self):
            raise IndexError(f"Result {pos} out of range for {len(self)} results")
        return self._entry(pos)

    def __iter__(self) -> Iterator[Tuple[float, RSet]]:
        for pos in range(len(self)):
            yield self._entry(pos)

    def top(self, k: int) -> List[Tuple[float, RSet]]:
        """The k best (error, RSet) pairs in ascending-error order."""
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        return [self._entry(pos) for pos in range(min(k, len(self)))]

    def best(self) -> List[Tuple[float, RSet]]:
        """Every entry sharing the lowest error."""
        if not len(self):
            return []
        count = int(np.searchsorted(self._errors, self._errors[0], side='right'))
        return self.top(count)

    def format_best(self, notation: str = 'rkm') -> str:
        return format_matches(self.best(), notation=notation)

    def format_top(self, k: int, notation: str = 'rkm') -> str:
        return format_matches(self.top(k), notation=notation)

    def __repr__(self) -> str:
        return f"RRes(results={len(self)}, explored={self.explored}, total={self.total})"


def _resolve_series(series: SeriesLike) -> RSeries:
    if isinstance(series, RSeries):
        return series
    if isinstance(series, str):
        return get_series(series)
    return custom_series(series)


def _merge(partials: List[_Partial], keep: Optional[int]) -> _Partial:
    """Merge per-chunk rankings into one, ordered by (error, index)."""
    if not partials:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.int64)
    errors = np.concatenate([p[0] for p in partials])
    indices = np.concatenate([p[1] for p in partials])
    order = np.lexsort((indices, errors))
    if keep is not None:
        order = order[:keep]
    return errors[order], indices[order]


class RCalc:
    """
    Resistor value calculator over a fixed list of slots.

    Args:
        series: One entry per slot: an RSeries, a standard series name
            ('E24'), or an explicit sequence of values.
        names: Variable name per slot. Defaults to R1, R2, ..., Rn.
    """

    def __init__(self, series: Sequence[SeriesLike], names: Optional[Sequence[str]] = None):
        self.series: List[RSeries] = [_resolve_series(s) for s in series]
        if names is None:
            names = [f"R{i}" for i in range(1, len(self.series) + 1)]
        names = tuple(names)
        if len(names) != len(self.series):
            raise ValueError(f"Got {len(names)} names for {len(self.series)} slots")
        for name in names:
            if not VARIABLE_PATTERN.match(name):
                raise ValueError(f"Slot name '{name}' must be a letter followed by digits")
        if len(set(names)) != len(names):
            raise ValueError(f"Slot names must be unique, got {list(names)}")
        self.names: Tuple[str, ...] = names
        self._enumerator = CombinationEnumerator([s.values for s in self.series])

    @classmethod
    def e3(cls, count: int) -> 'RCalc':
        """`count` resistors drawn from the E3 series."""
        return cls([E3] * count)

    @classmethod
    def e6(cls, count: int) -> 'RCalc':
        return cls([E6] * count)

    @classmethod
    def e12(cls, count: int) -> 'RCalc':
        return cls([E12] * count)

    @classmethod
    def e24(cls, count: int) -> 'RCalc':
        return cls([E24] * count)

    @classmethod
    def e48(cls, count: int) -> 'RCalc':
        return cls([E48] * count)

    @classmethod
    def e96(cls, count: int) -> 'RCalc':
        return cls([E96] * count)

    @property
    def enumerator(self) -> CombinationEnumerator:
        return self._enumerator

    def combinations(self) -> int:
        """
        Number of value combinations for the configured slots. Maps fairly
        directly to the time a search takes.
        """
        return self._enumerator.combinations()

    def __repr__(self) -> str:
        slots = ', '.join(f"{n}={s.name}" for n, s in zip(self.names, self.series))
        return f"RCalc({slots})"

    # --- Scoring ---

    def _score_chunk(self, constraints: ConstraintSet, keep: Optional[int], span: Tuple[int, int]) -> _Partial:
        start, stop = span
        block = self._enumerator.block(start, stop)
        columns = dict(zip(self.names, block))
        errors = constraints.score_block(columns)
        indices = np.arange(start, stop, dtype=np.int64)
        order = np.argsort(errors, kind='stable')
        if keep is not None:
            order = order[:keep]
        logger.debug("Scored combinations [%d, %d)", start, stop)
        return errors[order], indices[order]

    def _score_chunk_with(self, func: ScoreFunction, keep: Optional[int], span: Tuple[int, int]) -> _Partial:
        start, stop = span
        errors: List[float] = []
        indices: List[int] = []
        for index, values in enumerate(self._enumerator.iter_range(start, stop), start=start):
            err = func(RSet(values, self.names, index))
            if err is None:
                continue
            errors.append(float(err))
            indices.append(index)
        err_arr = np.asarray(errors, dtype=np.float64)
        idx_arr = np.asarray(indices, dtype=np.int64)
        order = np.argsort(err_arr, kind='stable')
        if keep is not None:
            order = order[:keep]
        return err_arr[order], idx_arr[order]

    # --- Search ---

    def calc(
        self,
        constraints: Union[ConstraintSet, ScoreFunction],
        workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        keep: Optional[int] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        timeout: Optional[float] = None,
    ) -> RRes:
        """
        Score every combination and rank the results.

        Args:
            constraints: A ConstraintSet, or a function mapping an RSet to
                its error, or to None to reject the combination.
            workers: Scoring threads (default config.DEFAULT_WORKERS).
            chunk_size: Combinations per chunk (default config.DEFAULT_CHUNK_SIZE).
            keep: Retain only the best `keep` results.
            should_stop: Polled between chunk waves; True ends the search early.
            timeout: Seconds after which the search ends early.

        Returns:
            RRes sorted by (error, enumeration index). An early stop returns
            the ranking of the contiguous prefix explored so far, identical
            to a full search over that prefix.

        Raises:
            DegenerateSearchError: if there are zero combinations.
            NoAcceptableCombinationError: if a score function rejected all.
            UnboundVariableError: if a bound names an unknown slot.
            DivisionByZeroError: if a divisor evaluates to zero.
            SearchSpaceTooLargeError: if a ConstraintSet search has more
                combinations than a 64-bit index can address.
        """
        total = self.combinations()
        if total == 0:
            empty = [n for n, s in zip(self.names, self.series) if len(s) == 0]
            if empty:
                raise DegenerateSearchError(f"No combinations: empty series for slot(s) {', '.join(empty)}")
            raise DegenerateSearchError("No combinations: no resistor slots configured")

        workers = config.DEFAULT_WORKERS if workers is None else workers
        chunk_size = config.DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size
        if workers < 1:
            raise ValueError(f"workers must be positive, got {workers}")
        if keep is not None and keep < 1:
            raise ValueError(f"keep must be positive, got {keep}")

        if isinstance(constraints, ConstraintSet):
            constraints.validate(self.names)
            self._enumerator.check_vectorizable()

            def score(span):
                return self._score_chunk(constraints, keep, span)
        elif callable(constraints):
            def score(span):
                return self._score_chunk_with(constraints, keep, span)
        else:
            raise TypeError(f"Expected ConstraintSet or callable, got {type(constraints).__name__}")

        deadline = time.monotonic() + timeout if timeout is not None else None

        def stopping() -> bool:
            if should_stop is not None and should_stop():
                return True
            return deadline is not None and time.monotonic() >= deadline

        spans = self._enumerator.ranges(chunk_size)
        logger.info(
            "Searching %d combinations in %d chunk(s) with %d worker(s)",
            total, self._enumerator.chunk_count(chunk_size), workers,
        )
        started = time.perf_counter()

        partials: List[_Partial] = []
        explored = 0
        executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        try:
            while True:
                wave = list(itertools.islice(spans, workers))
                if not wave:
                    break
                if stopping():
                    logger.warning("Search stopped early after %d of %d combinations", explored, total)
                    break
                if executor is not None:
                    partials.extend(executor.map(score, wave))
                else:
                    partials.extend(map(score, wave))
                explored = wave[-1][1]
                if keep is not None and len(partials) > 1:
                    partials = [_merge(partials, keep)]
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        errors, indices = _merge(partials, keep)
        logger.info(
            "Ranked %d result(s) from %d combinations in %.2fs",
            len(errors), explored, time.perf_counter() - started,
        )

        if len(errors) == 0 and explored == total and not isinstance(constraints, ConstraintSet):
            raise NoAcceptableCombinationError("Every combination was rejected by the score function")
        return RRes(self._enumerator, self.names, errors, indices, explored, total)
