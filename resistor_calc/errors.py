"""
Exception hierarchy for the resistor calculator.

Parse errors are raised while a constraint set is being built, evaluation
errors while a search is scoring combinations, and search errors when the
search space itself is unusable. Nothing here is retried automatically.
"""

from enum import Enum
from typing import Iterable, Optional


class ResistorCalcError(Exception):
    """Base class for every error raised by resistor_calc."""


class ParseErrorKind(str, Enum):
    UNKNOWN_TOKEN = "unknown_token"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    MISSING_OPERATOR = "missing_operator"
    DUPLICATE_OPERATOR = "duplicate_operator"
    EMPTY_EXPRESSION = "empty_expression"
    UNEXPECTED_TOKEN = "unexpected_token"


class ParseError(ResistorCalcError, ValueError):
    """
    A bound string could not be parsed.

    Attributes:
        text: The offending bound string.
        position: 0-based character offset of the problem.
        expected: Description of the token class that was expected.
        kind: Which class of failure this is.
    """

    def __init__(self, text: str, position: int, expected: str, kind: ParseErrorKind):
        self.text = text
        self.position = position
        self.expected = expected
        self.kind = kind
        super().__init__(
            f"{kind.value.replace('_', ' ')} at position {position} in {text!r}: expected {expected}"
        )

    def pointer(self) -> str:
        """Return the bound text with a caret line under the offending position."""
        return f"{self.text}\n{' ' * self.position}^"


class EvaluationError(ResistorCalcError, ArithmeticError):
    """An expression could not be evaluated against a binding."""


class UnboundVariableError(EvaluationError, KeyError):
    """One or more referenced variables have no value bound to them."""

    def __init__(self, names: Iterable[str], known: Optional[Iterable[str]] = None):
        self.names = tuple(sorted(names))
        self.known = tuple(known) if known is not None else None
        message = f"unbound variable(s): {', '.join(self.names)}"
        if self.known is not None:
            message += f" (known slots: {', '.join(self.known) or 'none'})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DivisionByZeroError(EvaluationError, ZeroDivisionError):
    """A divisor evaluated to exactly zero."""

    def __init__(self, expression: str):
        self.expression = expression
        super().__init__(f"division by zero in {expression!r}")


class DegenerateSearchError(ResistorCalcError):
    """The search space holds zero combinations."""


class NoAcceptableCombinationError(ResistorCalcError):
    """A custom scoring function rejected every combination."""


class SearchSpaceTooLargeError(ResistorCalcError):
    """The combination count does not fit a 64-bit enumeration index."""
