"""
Bound expressions: tokenizer, parser, and evaluator.

A bound is two arithmetic expressions joined by one relational operator:

    0.8 * (1 + R1/R3) ~ 6.0
    R1 + R2 + R3 <= 1e6

Grammar (standard precedence, left-to-right associativity):

    relation   := expression RELOP expression
    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := NUMBER | '-' NUMBER | VARIABLE | '(' expression ')'

RELOP is one of '<=', '>=', '~', '=' ('==' is read as '='). Variables are
a letter followed by digits (R1, R12, C3).

Expressions evaluate against a mapping of variable name to value. Values
may be floats or numpy arrays; a whole block of combinations can be
evaluated in one pass with results identical to evaluating each one alone.
"""

import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Mapping, NamedTuple, Tuple, Union

import numpy as np

from resistor_calc.errors import (
    DivisionByZeroError,
    ParseError,
    ParseErrorKind,
    UnboundVariableError,
)

Value = Union[float, np.ndarray]

VARIABLE_PATTERN = re.compile(r'^[A-Za-z]\d+$')

_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<variable>[A-Za-z]\d+)
  | (?P<relop><=|>=|==|~|=)
  | (?P<op>[-+*/])
  | (?P<lparen>\()
  | (?P<rparen>\))
""", re.VERBOSE)

_OPERAND = "number, variable or '('"


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


class Operator(str, Enum):
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'


class RelationKind(str, Enum):
    AT_MOST = '<='
    AT_LEAST = '>='
    APPROX = '~'
    EXACT = '='


_RELOPS = {
    '<=': RelationKind.AT_MOST,
    '>=': RelationKind.AT_LEAST,
    '~': RelationKind.APPROX,
    '=': RelationKind.EXACT,
    '==': RelationKind.EXACT,
}

_APPLY: Dict[Operator, Callable[[Value, Value], Value]] = {
    Operator.ADD: operator.add,
    Operator.SUB: operator.sub,
    Operator.MUL: operator.mul,
}


# --- Expression tree ---

@dataclass(frozen=True)
class Number:
    value: float

    def evaluate(self, values: Mapping[str, Value]) -> Value:
        return self.value

    def variables(self) -> FrozenSet[str]:
        return frozenset()

    def __str__(self) -> str:
        if float(self.value).is_integer() and abs(self.value) < 1e15:
            return str(int(self.value))
        return repr(self.value)


@dataclass(frozen=True)
class Variable:
    name: str

    def evaluate(self, values: Mapping[str, Value]) -> Value:
        try:
            return values[self.name]
        except KeyError:
            raise UnboundVariableError([self.name]) from None

    def variables(self) -> FrozenSet[str]:
        return frozenset((self.name,))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BinaryOp:
    op: Operator
    left: 'Node'
    right: 'Node'

    def evaluate(self, values: Mapping[str, Value]) -> Value:
        lhs = self.left.evaluate(values)
        rhs = self.right.evaluate(values)
        if self.op is Operator.DIV:
            if np.any(np.equal(rhs, 0.0)):
                raise DivisionByZeroError(str(self))
            return lhs / rhs
        return _APPLY[self.op](lhs, rhs)

    def variables(self) -> FrozenSet[str]:
        return self.left.variables() | self.right.variables()

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


Node = Union[Number, Variable, BinaryOp]


@dataclass(frozen=True)
class Relation:
    """Two expressions compared by a relation kind, e.g. ``R1 + R2 <= 1e6``."""
    left: Node
    kind: RelationKind
    right: Node
    text: str = ''

    def sides(self, values: Mapping[str, Value]) -> Tuple[Value, Value]:
        """Evaluate both sides against one binding."""
        return self.left.evaluate(values), self.right.evaluate(values)

    def variables(self) -> FrozenSet[str]:
        return self.left.variables() | self.right.variables()

    def __str__(self) -> str:
        return self.text or f"{self.left} {self.kind.value} {self.right}"


# --- Tokenizer ---

def tokenize(text: str) -> List[Token]:
    """
    Split a bound string into tokens, dropping whitespace.

    Raises:
        ParseError: on any character sequence that is not a token.
    """
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ParseError(text, pos, _describe_unknown(text[pos]), ParseErrorKind.UNKNOWN_TOKEN)
        kind = match.lastgroup
        if kind != 'ws':
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    return tokens


def _describe_unknown(char: str) -> str:
    if char in '<>':
        return "'<=' or '>='"
    if char.isalpha():
        return 'variable name (a letter followed by digits)'
    return f"{_OPERAND}, operator or relational operator"


# --- Parser ---

class _Parser:
    """Recursive-descent parser over the tokens of one side of a bound."""

    def __init__(self, text: str, tokens: List[Token], end: int):
        self._text = text
        self._tokens = tokens
        self._end = end
        self._idx = 0

    def _error(self, pos: int, expected: str, kind: ParseErrorKind) -> ParseError:
        return ParseError(self._text, pos, expected, kind)

    def _peek(self):
        if self._idx < len(self._tokens):
            return self._tokens[self._idx]
        return None

    def _advance(self) -> Token:
        tok = self._tokens[self._idx]
        self._idx += 1
        return tok

    def parse(self) -> Node:
        node = self._expression()
        tok = self._peek()
        if tok is not None:
            if tok.kind == 'rparen':
                raise self._error(tok.pos, "a matching '(' before this ')'", ParseErrorKind.UNBALANCED_PARENTHESES)
            raise self._error(tok.pos, 'arithmetic operator', ParseErrorKind.UNEXPECTED_TOKEN)
        return node

    def _expression(self) -> Node:
        node = self._term()
        while True:
            tok = self._peek()
            if tok is None or tok.kind != 'op' or tok.text not in '+-':
                return node
            self._advance()
            node = BinaryOp(Operator(tok.text), node, self._term())

    def _term(self) -> Node:
        node = self._factor()
        while True:
            tok = self._peek()
            if tok is None or tok.kind != 'op' or tok.text not in '*/':
                return node
            self._advance()
            node = BinaryOp(Operator(tok.text), node, self._factor())

    def _factor(self) -> Node:
        tok = self._peek()
        if tok is None:
            raise self._error(self._end, _OPERAND, ParseErrorKind.UNEXPECTED_TOKEN)
        self._advance()

        if tok.kind == 'number':
            return Number(float(tok.text))
        if tok.kind == 'variable':
            return Variable(tok.text)
        if tok.kind == 'op' and tok.text == '-':
            nxt = self._peek()
            if nxt is None or nxt.kind != 'number':
                pos = nxt.pos if nxt is not None else self._end
                raise self._error(pos, "number after unary '-'", ParseErrorKind.UNEXPECTED_TOKEN)
            self._advance()
            return Number(-float(nxt.text))
        if tok.kind == 'lparen':
            inner = self._peek()
            if inner is not None and inner.kind == 'rparen':
                raise self._error(inner.pos, 'expression inside parentheses', ParseErrorKind.EMPTY_EXPRESSION)
            node = self._expression()
            close = self._peek()
            if close is None:
                raise self._error(tok.pos, "')' to close this '('", ParseErrorKind.UNBALANCED_PARENTHESES)
            if close.kind != 'rparen':
                raise self._error(close.pos, "arithmetic operator or ')'", ParseErrorKind.UNEXPECTED_TOKEN)
            self._advance()
            return node
        if tok.kind == 'rparen':
            raise self._error(tok.pos, "a matching '(' before this ')'", ParseErrorKind.UNBALANCED_PARENTHESES)
        raise self._error(tok.pos, _OPERAND, ParseErrorKind.UNEXPECTED_TOKEN)


def parse_expression(text: str) -> Node:
    """Parse a lone arithmetic expression (no relational operator)."""
    tokens = tokenize(text)
    for tok in tokens:
        if tok.kind == 'relop':
            raise ParseError(text, tok.pos, 'arithmetic expression without a relational operator',
                             ParseErrorKind.UNEXPECTED_TOKEN)
    if not tokens:
        raise ParseError(text, 0, 'expression', ParseErrorKind.EMPTY_EXPRESSION)
    return _Parser(text, tokens, len(text)).parse()


def parse_relation(text: str) -> Relation:
    """
    Parse a bound string into a Relation.

    Args:
        text: e.g. "0.8 * (1 + R1/R3) ~ 6.0"

    Returns:
        Relation with both sides parsed.

    Raises:
        ParseError: with the offending position and expected token class.
            Nothing is returned for a malformed bound.
    """
    tokens = tokenize(text)
    relops = [i for i, tok in enumerate(tokens) if tok.kind == 'relop']
    if not relops:
        raise ParseError(text, len(text), "relational operator ('<=', '>=', '~' or '=')",
                         ParseErrorKind.MISSING_OPERATOR)
    if len(relops) > 1:
        second = tokens[relops[1]]
        raise ParseError(text, second.pos, 'a single relational operator', ParseErrorKind.DUPLICATE_OPERATOR)

    split = relops[0]
    relop = tokens[split]
    left_tokens, right_tokens = tokens[:split], tokens[split + 1:]
    if not left_tokens:
        raise ParseError(text, relop.pos, f"expression before '{relop.text}'", ParseErrorKind.EMPTY_EXPRESSION)
    if not right_tokens:
        raise ParseError(text, len(text), f"expression after '{relop.text}'", ParseErrorKind.EMPTY_EXPRESSION)

    left = _Parser(text, left_tokens, relop.pos).parse()
    right = _Parser(text, right_tokens, len(text)).parse()
    return Relation(left=left, kind=_RELOPS[relop.text], right=right, text=text.strip())
