"""
E-series standard resistor values.

Provides the IEC 60063 preferred-number tables as ready-to-search
series, spread across the decades from 1 Ohm to the megohm range.
The tables are module constants built once at import time and never
mutated afterwards.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

# E-series base values (multiplied by decades to get full range)
# These are the standard IEC 60063 values per decade (1.0 to <10.0)

E3_BASE = [1.0, 2.2, 4.7]

E6_BASE = [1.0, 1.5, 2.2, 3.3, 4.7, 6.8]

E12_BASE = [1.0, 1.2, 1.5, 1.8, 2.2, 2.7, 3.3, 3.9, 4.7, 5.6, 6.8, 8.2]

E24_BASE = [
    1.0, 1.1, 1.2, 1.3, 1.5, 1.6, 1.8, 2.0, 2.2, 2.4, 2.7, 3.0,
    3.3, 3.6, 3.9, 4.3, 4.7, 5.1, 5.6, 6.2, 6.8, 7.5, 8.2, 9.1,
]

E48_BASE = [
    1.00, 1.05, 1.10, 1.15, 1.21, 1.27, 1.33, 1.40, 1.47, 1.54, 1.62, 1.69,
    1.78, 1.87, 1.96, 2.05, 2.15, 2.26, 2.37, 2.49, 2.61, 2.74, 2.87, 3.01,
    3.16, 3.32, 3.48, 3.65, 3.83, 4.02, 4.22, 4.42, 4.64, 4.87, 5.11, 5.36,
    5.62, 5.90, 6.19, 6.49, 6.81, 7.15, 7.50, 7.87, 8.25, 8.66, 9.09, 9.53,
]

E96_BASE = [
    1.00, 1.02, 1.05, 1.07, 1.10, 1.13, 1.15, 1.18, 1.21, 1.24, 1.27, 1.30,
    1.33, 1.37, 1.40, 1.43, 1.47, 1.50, 1.54, 1.58, 1.62, 1.65, 1.69, 1.74,
    1.78, 1.82, 1.87, 1.91, 1.96, 2.00, 2.05, 2.10, 2.15, 2.21, 2.26, 2.32,
    2.37, 2.43, 2.49, 2.55, 2.61, 2.67, 2.74, 2.80, 2.87, 2.94, 3.01, 3.09,
    3.16, 3.24, 3.32, 3.40, 3.48, 3.57, 3.65, 3.74, 3.83, 3.92, 4.02, 4.12,
    4.22, 4.32, 4.42, 4.53, 4.64, 4.75, 4.87, 4.99, 5.11, 5.23, 5.36, 5.49,
    5.62, 5.76, 5.90, 6.04, 6.19, 6.34, 6.49, 6.65, 6.81, 6.98, 7.15, 7.32,
    7.50, 7.68, 7.87, 8.06, 8.25, 8.45, 8.66, 8.87, 9.09, 9.31, 9.53, 9.76,
]

# Decade multipliers: 1 Ohm through the 1 MOhm decade
POWERS = (1e0, 1e1, 1e2, 1e3, 1e4, 1e5, 1e6)

# Digits kept when scaling a mantissa, enough to drop float noise such as
# 1.1 * 100 == 110.00000000000001 without touching real E96 digits.
_VALUE_PRECISION = 6


@dataclass(frozen=True)
class RSeries:
    """An ordered, strictly increasing set of purchasable resistor values."""
    name: str
    values: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float]:
        return iter(self.values)

    def __getitem__(self, idx: int) -> float:
        return self.values[idx]

    @property
    def minimum(self) -> float:
        return self.values[0]

    @property
    def maximum(self) -> float:
        return self.values[-1]


def build_series(name: str, mantissas: Iterable[float], decades: Sequence[float] = POWERS) -> RSeries:
    """
    Expand per-decade mantissas into a full series.

    Args:
        name: Label for the series (e.g. 'E24').
        mantissas: Base values, normally 1.0 <= m < 10.0.
        decades: Multipliers applied to every mantissa.

    Returns:
        RSeries with values sorted ascending.

    Raises:
        ValueError: if any value is not strictly positive or values repeat.
    """
    values = sorted(
        round(m * d, _VALUE_PRECISION)
        for m in mantissas
        for d in decades
    )
    if values and values[0] <= 0:
        raise ValueError(f"Series '{name}' values must be positive, got {values[0]}")
    for lo, hi in zip(values, values[1:]):
        if lo == hi:
            raise ValueError(f"Series '{name}' contains duplicate value {lo}")
    return RSeries(name=name, values=tuple(values))


def custom_series(values: Iterable[float], name: str = 'custom') -> RSeries:
    """Wrap an explicit list of values (no decade expansion) as a series."""
    return build_series(name, values, decades=(1.0,))


E3 = build_series('E3', E3_BASE)
E6 = build_series('E6', E6_BASE)
E12 = build_series('E12', E12_BASE)
E24 = build_series('E24', E24_BASE)
E48 = build_series('E48', E48_BASE)
E96 = build_series('E96', E96_BASE)

STANDARD_SERIES: Dict[str, RSeries] = {
    s.name: s for s in (E3, E6, E12, E24, E48, E96)
}


def get_series(name: str) -> RSeries:
    """Look up a standard series by name ('e24' and 'E24' both work)."""
    key = name.strip().upper()
    if key not in STANDARD_SERIES:
        raise ValueError(f"Unknown series '{name}'. Must be one of: {list(STANDARD_SERIES.keys())}")
    return STANDARD_SERIES[key]


def list_series() -> List[RSeries]:
    """All standard series, coarsest first."""
    return list(STANDARD_SERIES.values())
