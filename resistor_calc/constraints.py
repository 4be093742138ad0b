"""
Constraint sets and combination scoring.

A ConstraintSet is an immutable, ordered collection of Relations. Each
relation contributes a penalty to the combination error:

    at-most   (a <= b):  max(0, a - b)
    at-least  (a >= b):  max(0, b - a)
    approx    (a ~ b):   |a - b|
    exact     (a = b):   |a - b|

The combination error is the plain sum of the penalties, in relation
order. It is not normalized, so relations with larger magnitudes weigh
more in the ranking.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from resistor_calc.errors import UnboundVariableError
from resistor_calc.expression import Relation, RelationKind, Value, parse_relation

logger = logging.getLogger(__name__)


def penalty(kind: RelationKind, left: Value, right: Value) -> Value:
    """Violation penalty of one relation given its evaluated sides."""
    if kind is RelationKind.AT_MOST:
        return np.maximum(left - right, 0.0)
    if kind is RelationKind.AT_LEAST:
        return np.maximum(right - left, 0.0)
    # '~' and '=' share the same penalty; neither carries a tolerance
    return abs(left - right)


def relation_penalty(relation: Relation, values: Mapping[str, Value]) -> Value:
    left, right = relation.sides(values)
    return penalty(relation.kind, left, right)


@dataclass(frozen=True)
class ConstraintSet:
    """Immutable ordered bounds. Duplicates are kept and each one counts."""
    relations: Tuple[Relation, ...] = ()

    @classmethod
    def from_bounds(cls, bounds: Iterable[str], variables: Optional[Iterable[str]] = None) -> 'ConstraintSet':
        builder = ConstraintBuilder(variables=variables)
        for text in bounds:
            builder.bound(text)
        return builder.finish()

    def __len__(self) -> int:
        return len(self.relations)

    def __iter__(self) -> Iterator[Relation]:
        return iter(self.relations)

    @property
    def variables(self) -> FrozenSet[str]:
        """Every variable name referenced by any relation."""
        names = frozenset()
        for rel in self.relations:
            names |= rel.variables()
        return names

    def validate(self, variables: Iterable[str]) -> None:
        """
        Check once that every referenced variable is a known slot name.

        Raises:
            UnboundVariableError: listing every missing name.
        """
        known = list(variables)
        missing = self.variables - set(known)
        if missing:
            raise UnboundVariableError(missing, known=known)

    def score(self, values: Mapping[str, float]) -> float:
        """Combination error of one assignment (name -> value)."""
        total = 0.0
        for rel in self.relations:
            total += relation_penalty(rel, values)
        return float(total)

    def score_block(self, columns: Mapping[str, np.ndarray]) -> np.ndarray:
        """
        Combination errors for a block of assignments.

        Args:
            columns: name -> 1-D array of values, all the same length n.

        Returns:
            float64 array of n errors. Entry i equals score() of the i-th
            assignment bit for bit; the accumulation order is the same.
        """
        n = len(next(iter(columns.values()))) if columns else 1
        total = np.zeros(n, dtype=np.float64)
        for rel in self.relations:
            total = total + relation_penalty(rel, columns)
        return total

    def penalties(self, values: Mapping[str, float]) -> List[Tuple[Relation, float]]:
        """Per-relation breakdown of score(), for reporting."""
        return [(rel, float(relation_penalty(rel, values))) for rel in self.relations]


class ConstraintBuilder:
    """
    Accumulates bounds, then finishes into an immutable ConstraintSet.

    Bounds are parsed as they are added, so a malformed bound fails
    immediately instead of silently changing the problem:

        constraints = (ConstraintBuilder()
                       .bound("R1+R2+R3 <= 1e6")
                       .bound("0.8 * (1 + R1/R3) ~ 6.0")
                       .finish())
    """

    def __init__(self, variables: Optional[Iterable[str]] = None):
        self._variables = list(variables) if variables is not None else None
        self._relations: List[Relation] = []

    def bound(self, text: str) -> 'ConstraintBuilder':
        """Parse and append one bound string. Raises ParseError."""
        self._relations.append(parse_relation(text))
        return self

    def add(self, relation: Relation) -> 'ConstraintBuilder':
        """Append an already parsed Relation."""
        if not isinstance(relation, Relation):
            raise TypeError(f"Expected Relation, got {type(relation).__name__}")
        self._relations.append(relation)
        return self

    def extend(self, bounds: Sequence) -> 'ConstraintBuilder':
        for item in bounds:
            if isinstance(item, Relation):
                self.add(item)
            else:
                self.bound(item)
        return self

    def finish(self) -> ConstraintSet:
        constraints = ConstraintSet(tuple(self._relations))
        if self._variables is not None:
            constraints.validate(self._variables)
        logger.debug("Built constraint set with %d relation(s)", len(constraints))
        return constraints
