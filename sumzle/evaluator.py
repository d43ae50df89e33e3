"""
evaluator.py

Decides whether a finished tile string is a true equation or inequality.

Each side of the main comparison is reduced in three passes before the
arithmetic is evaluated:

1. floor brackets  [7/2] -> 3   (innermost first, at most FLOOR_PASS_LIMIT passes)
2. factorials      4!    -> 24  (left to right, operand 0..FACTORIAL_MAX)
3. permutations    5A2   -> 20  (left to right, 0 <= n <= m <= PERMUTATION_MAX)

The remaining `+ - * / % ^ ( )` expression is evaluated over floats with
the usual precedence (`^` binds tighter than unary minus and is right
associative). A side is valid only if its value is finite, integral and
fits in a signed 32-bit integer.

None of these functions raise on bad input: anything malformed or out of
range evaluates to None / False.
"""

from __future__ import annotations

import math
import operator
import re
from typing import Callable, Dict, List, Optional

from sumzle.alphabet import is_comparison, is_digit
from sumzle.config import (
    FACTORIAL_MAX,
    FLOOR_PASS_LIMIT,
    INT32_MAX,
    INT32_MIN,
    PERMUTATION_MAX,
)

_DIGIT_RUN = re.compile(r"[0-9]+")
_LEADING_ZERO = re.compile(r"(?<![0-9])0[0-9]")

_RELATIONS: Dict[str, Callable[[int, int], bool]] = {
    "=": operator.eq,
    ">": operator.gt,
}


def _parse_int32(text: str) -> Optional[int]:
    if not _DIGIT_RUN.fullmatch(text):
        return None
    value = int(text)
    if value > INT32_MAX:
        return None
    return value


# ---------- Reduction passes ----------

def _floor_value(inner: str) -> Optional[int]:
    """Value of the text between '[' and ']': a literal or a literal/literal."""
    if all(is_digit(c) for c in inner):
        return _parse_int32(inner)
    parts = inner.split("/")
    if len(parts) != 2:
        return None
    num, den = _parse_int32(parts[0]), _parse_int32(parts[1])
    if num is None or den is None or den == 0:
        return None
    # both operands are non-negative, so // is the floor
    return num // den


def _reduce_floor_brackets(expr: str) -> Optional[str]:
    passes = 0
    while "[" in expr and passes < FLOOR_PASS_LIMIT:
        start = expr.index("[")
        depth = 1
        end = start + 1
        while end < len(expr) and depth > 0:
            if expr[end] == "[":
                depth += 1
            elif expr[end] == "]":
                depth -= 1
            if depth > 0:
                end += 1
        if depth != 0:
            return None

        value = _floor_value(expr[start + 1:end])
        if value is None:
            return None
        expr = expr[:start] + str(value) + expr[end + 1:]
        passes += 1

    if "[" in expr:
        return None
    return expr


def _digits_before(expr: str, pos: int) -> int:
    """Start index of the token that ends just before `pos`."""
    start = pos - 1
    while start > 0 and is_digit(expr[start - 1]):
        start -= 1
    return start


def _reduce_factorials(expr: str) -> Optional[str]:
    while "!" in expr:
        pos = expr.index("!")
        if pos == 0:
            return None
        start = _digits_before(expr, pos)
        n = _parse_int32(expr[start:pos])
        if n is None or n > FACTORIAL_MAX:
            return None
        expr = expr[:start] + str(math.factorial(n)) + expr[pos + 1:]
    return expr


def _reduce_permutations(expr: str) -> Optional[str]:
    while "A" in expr:
        pos = expr.index("A")
        if pos == 0 or pos == len(expr) - 1:
            return None
        m_start = _digits_before(expr, pos)
        n_end = pos + 1
        while n_end < len(expr) and is_digit(expr[n_end]):
            n_end += 1

        m = _parse_int32(expr[m_start:pos])
        n = _parse_int32(expr[pos + 1:n_end])
        if m is None or n is None or m > PERMUTATION_MAX or n > m:
            return None
        expr = expr[:m_start] + str(math.perm(m, n)) + expr[n_end:]
    return expr


# ---------- Arithmetic ----------

class _ParseError(Exception):
    pass


def _div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _mod(a: float, b: float) -> float:
    # remainder takes the sign of the dividend, like C fmod
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b.is_integer() and int(b) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0 and b < 0:
            return math.inf
        return math.nan


_BINARY = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _div,
    "%": _mod,
}


class _Arithmetic:
    """
    Recursive descent over:

        expr    := term (('+' | '-') term)*
        term    := unary (('*' | '/' | '%') unary)*
        unary   := ('+' | '-') unary | power
        power   := primary ('^' unary)?
        primary := NUMBER | '(' expr ')'
    """

    def __init__(self, text: str) -> None:
        self.tokens: List[str] = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        tokens: List[str] = []
        i = 0
        while i < len(text):
            m = _DIGIT_RUN.match(text, i)
            if m:
                tokens.append(m.group())
                i = m.end()
            elif text[i] in "+-*/%^()":
                tokens.append(text[i])
                i += 1
            else:
                raise _ParseError(f"unexpected symbol {text[i]!r}")
        return tokens

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        tok = self._peek()
        if tok is None:
            raise _ParseError("unexpected end of expression")
        self.pos += 1
        return tok

    def parse(self) -> float:
        value = self._expr()
        if self._peek() is not None:
            raise _ParseError(f"unexpected token {self._peek()!r}")
        return value

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            op = self._take()
            value = _BINARY[op](value, self._term())
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._peek() in ("*", "/", "%"):
            op = self._take()
            value = _BINARY[op](value, self._unary())
        return value

    def _unary(self) -> float:
        if self._peek() in ("+", "-"):
            op = self._take()
            value = self._unary()
            return -value if op == "-" else value
        return self._power()

    def _power(self) -> float:
        base = self._primary()
        if self._peek() == "^":
            self._take()
            return _pow(base, self._unary())
        return base

    def _primary(self) -> float:
        tok = self._take()
        if tok == "(":
            value = self._expr()
            if self._take() != ")":
                raise _ParseError("expected ')'")
            return value
        if _DIGIT_RUN.fullmatch(tok):
            return float(tok)
        raise _ParseError(f"unexpected token {tok!r}")


def _evaluate_arithmetic(expr: str) -> Optional[int]:
    if "NaN" in expr:
        return None
    if _LEADING_ZERO.search(expr):
        return None
    try:
        value = _Arithmetic(expr).parse()
    except _ParseError:
        return None
    if not math.isfinite(value) or not value.is_integer():
        return None
    if not INT32_MIN <= value <= INT32_MAX:
        return None
    return int(value)


# ---------- Public API ----------

def evaluate(expression: str) -> Optional[int]:
    """Integer value of one side of an equation, or None if it is not one."""
    if not isinstance(expression, str) or not expression:
        return None
    reduced: Optional[str] = expression
    for reduce in (_reduce_floor_brackets, _reduce_factorials, _reduce_permutations):
        reduced = reduce(reduced)
        if reduced is None:
            return None
    return _evaluate_arithmetic(reduced)


def check_brackets(expression: str) -> bool:
    """True iff '()' and '[]' are properly nested and closed."""
    stack: List[str] = []
    for c in expression:
        if c == "(":
            stack.append(")")
        elif c == "[":
            stack.append("]")
        elif c in ")]":
            if not stack or stack.pop() != c:
                return False
    return not stack


def is_valid_equation(expression: str) -> bool:
    """
    True iff `expression` is `<left> = <right>` or `<left> > <right>` with
    both sides evaluating and the relation holding. `<left> >= <right>` is
    read as `<left> > <right>`.

    The main operator is the first '=' or '>' outside brackets. A '=' after
    a '>' folds into it; any other mix of '=' and '>' at the top level is
    rejected.
    """
    if not isinstance(expression, str) or not check_brackets(expression):
        return False

    main_op: Optional[str] = None
    main_index = 0
    depth = 0
    for i, c in enumerate(expression):
        if c in "([":
            depth += 1
        elif c in ")]":
            depth -= 1
        elif depth == 0 and is_comparison(c):
            if main_op is None:
                main_op, main_index = c, i
            elif main_op == ">" and c == "=":
                continue
            elif main_op != c:
                return False

    if main_op is None or main_index == 0 or main_index == len(expression) - 1:
        return False

    right_start = main_index + 1
    # an adjacent ">=" is two tiles for one strict ">"
    if main_op == ">" and expression[right_start] == "=":
        right_start += 1

    left, right = expression[:main_index], expression[right_start:]
    if not left or not right:
        return False

    left_value = evaluate(left)
    right_value = evaluate(right)
    if left_value is None or right_value is None:
        return False
    return _RELATIONS[main_op](left_value, right_value)
