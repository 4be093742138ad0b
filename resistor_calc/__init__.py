"""
Resistor Calc

Resistor value optimiser for circuit design. Given bounds over resistors
R1, R2, ... it searches every combination of standard-series values and
presents them in order of increasing error.

All search is exhaustive and deterministic: equal-error results always
come back in the same order.
"""

from resistor_calc.series import RSeries, E3, E6, E12, E24, E48, E96, get_series, list_series
from resistor_calc.expression import Relation, RelationKind, parse_relation, parse_expression
from resistor_calc.constraints import ConstraintSet, ConstraintBuilder
from resistor_calc.enumerator import CombinationEnumerator
from resistor_calc.calc import RCalc, RRes, RSet
from resistor_calc.errors import (
    ResistorCalcError,
    ParseError,
    EvaluationError,
    UnboundVariableError,
    DivisionByZeroError,
    DegenerateSearchError,
    NoAcceptableCombinationError,
    SearchSpaceTooLargeError,
)

__version__ = "0.1.0"
