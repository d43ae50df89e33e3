"""
search.py

Depth-first construction of every equation of a fixed length that agrees
with the compiled feedback.

The candidate is built left to right, one tile per call frame. At each
tile a heuristic proposes symbols in a fixed order (which is also the
order results are discovered in), a legality predicate prunes anything
that breaks the feedback or the local grammar, and every completed
candidate is handed to the evaluator before it is accepted.

Usage
-----
    solver = EquationSolver(length=8, max_operand_value=999)
    row = make_row("12+35=47", parse_feedback("bbgybgbb", 8))
    solver.search([row])
"""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from itertools import chain
from typing import Iterator, List, NamedTuple, Optional, Sequence, Union

from sumzle.alphabet import (
    DIGITS,
    is_binary_operator,
    is_close_bracket,
    is_comparison,
    is_digit,
    is_open_bracket,
    is_operator,
    is_postfix_operator,
    matching_bracket,
)
from sumzle.config import (
    DEFAULT_LENGTH,
    DEFAULT_MAX_OPERAND_VALUE,
    FLOOR_TAIL_RESERVE,
)
from sumzle.errors import ConstraintConflict
from sumzle.evaluator import check_brackets, evaluate, is_valid_equation
from sumzle.knowledge import GlobalKnowledge, compile_knowledge
from sumzle.logging_utils import get_logger

logger = get_logger(__name__)

# Symbol orders tried at a free tile, keyed on what precedes it
_FLOOR_BEFORE_SLASH = "0123456789/"
_FLOOR_AFTER_SLASH = "0123456789]"
_RIGHT_AFTER_EQUALS = "-0123456789"
_FIRST = "123456789(["
_AFTER_DIGIT = "0123456789+-*/%^A!)]=>["
_AFTER_OPERATOR = "1234567890(["
_AFTER_CLOSER = "+-*/%^A!)]=>["
_ANYTHING = "1234567890+-*/=()[]%^!A>"
_LAST = "0123456789)]!"


class FloorContext(NamedTuple):
    """Whether the prefix is inside an open '[' and whether its '/' is used."""

    in_floor: bool = False
    has_slash: bool = False

    def after(self, symbol: str) -> "FloorContext":
        if symbol == "[":
            return FloorContext(True, False)
        if symbol == "]" and self.in_floor:
            return FloorContext(False, False)
        if symbol == "/" and self.in_floor:
            return FloorContext(True, True)
        return self


@dataclass
class SearchReport:
    results: List[str] = field(default_factory=list)
    visited: int = 0  # completed candidates checked at the leaves
    conflict: Optional[str] = None


class _Candidate:
    """The prefix under construction and its running symbol counts."""

    def __init__(self, length: int) -> None:
        self.symbols: List[str] = [""] * length
        self.counts: Counter = Counter()

    @contextmanager
    def placed(self, index: int, symbol: str) -> Iterator[None]:
        self.symbols[index] = symbol
        self.counts[symbol] += 1
        try:
            yield
        finally:
            self.counts[symbol] -= 1
            if self.counts[symbol] == 0:
                del self.counts[symbol]
            self.symbols[index] = ""

    def previous(self, index: int) -> Optional[str]:
        return self.symbols[index - 1] if index > 0 else None

    def text(self) -> str:
        return "".join(self.symbols)


class EquationSolver:
    """
    Enumerates equations of `length` tiles consistent with guess feedback.

    Parameters
    ----------
    length : int
        Number of tiles in every candidate.
    max_operand_value : int
        Upper bound for any number that starts left of '='.
    """

    def __init__(
        self,
        length: int = DEFAULT_LENGTH,
        max_operand_value: int = DEFAULT_MAX_OPERAND_VALUE,
    ) -> None:
        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            raise ValueError("length must be a positive integer")
        if (
            isinstance(max_operand_value, bool)
            or not isinstance(max_operand_value, int)
            or max_operand_value <= 0
        ):
            raise ValueError("max_operand_value must be a positive integer")
        self.length = length
        self.max_operand_value = max_operand_value

    # -------------------------
    # Single-expression helpers
    # -------------------------
    @staticmethod
    def evaluate(expression: str) -> Optional[int]:
        return evaluate(expression)

    @staticmethod
    def is_valid_equation(expression: str) -> bool:
        return is_valid_equation(expression)

    def compile(self, feedback: Sequence) -> GlobalKnowledge:
        return compile_knowledge(feedback, self.length)

    # -------------------------
    # Search API
    # -------------------------
    def search(self, feedback: Union[Sequence, GlobalKnowledge] = ()) -> List[str]:
        """All equations consistent with `feedback`, in discovery order."""
        return self.search_report(feedback).results

    def search_report(self, feedback: Union[Sequence, GlobalKnowledge] = ()) -> SearchReport:
        """
        Run one query and return the results with their diagnostics.

        `feedback` is a sequence of guess rows (see sumzle.feedback) or an
        already compiled GlobalKnowledge of the same length. Contradictory
        or malformed feedback is not an error here: the report comes back
        empty with the conflict message set.
        """
        if isinstance(feedback, GlobalKnowledge):
            if feedback.length != self.length:
                raise ValueError(
                    f"knowledge is for length {feedback.length}, solver length is {self.length}"
                )
            knowledge = feedback
            logger.debug("Searching length %d with precompiled knowledge", self.length)
        else:
            try:
                knowledge = compile_knowledge(feedback, self.length)
            except ConstraintConflict as e:
                logger.warning("Error preprocessing constraints: %s", e)
                return SearchReport(conflict=str(e))
            logger.debug("Searching length %d with %d feedback rows", self.length, len(feedback))

        report = SearchReport()
        self._extend(0, _Candidate(self.length), None, FloorContext(), knowledge, report)
        logger.info(
            "Search completed. Found %d results. Searched %d expressions.",
            len(report.results),
            report.visited,
        )
        return report

    # -------------------------
    # Recursion
    # -------------------------
    def _extend(
        self,
        index: int,
        cand: _Candidate,
        main_op: Optional[str],
        floor: FloorContext,
        knowledge: GlobalKnowledge,
        report: SearchReport,
    ) -> None:
        if index == self.length:
            report.visited += 1
            if self._accept(cand, main_op, knowledge):
                report.results.append(cand.text())
            return

        fixed = knowledge.fixed_chars[index]
        if fixed is not None:
            order: Sequence[str] = (fixed,)
        else:
            order = self._char_order(index, cand, main_op, floor, knowledge)

        for ch in order:
            if not self._can_place(ch, index, cand, main_op, floor, knowledge):
                continue
            with cand.placed(index, ch):
                self._extend(
                    index + 1,
                    cand,
                    ch if is_comparison(ch) else main_op,
                    floor.after(ch),
                    knowledge,
                    report,
                )

    def _accept(self, cand: _Candidate, main_op: Optional[str], knowledge: GlobalKnowledge) -> bool:
        if main_op is None:
            return False
        text = cand.text()
        if not check_brackets(text):
            return False

        exact = knowledge.must_appear_exact_count
        for ch, count in exact.items():
            if cand.counts[ch] != count:
                return False
        for ch, minimum in knowledge.must_appear_min_count.items():
            if ch not in exact and cand.counts[ch] < minimum:
                return False

        return is_valid_equation(text)

    # -------------------------
    # Heuristic order
    # -------------------------
    def _char_order(
        self,
        index: int,
        cand: _Candidate,
        main_op: Optional[str],
        floor: FloorContext,
        knowledge: GlobalKnowledge,
    ) -> List[str]:
        prev = cand.previous(index) or ""

        if floor.in_floor:
            order = _FLOOR_AFTER_SLASH if floor.has_slash else _FLOOR_BEFORE_SLASH
        elif main_op == "=":
            order = _RIGHT_AFTER_EQUALS if prev == "=" else DIGITS
        elif index == 0:
            order = _FIRST
        elif is_digit(prev):
            order = _AFTER_DIGIT
        elif is_binary_operator(prev) or prev == ">":
            order = _AFTER_OPERATOR
        elif is_open_bracket(prev):
            order = _AFTER_OPERATOR
        elif is_close_bracket(prev) or is_postfix_operator(prev):
            order = _AFTER_CLOSER
        else:
            order = _ANYTHING

        if index == self.length - 1 and not floor.in_floor:
            order = "".join(c for c in order if c in _LAST)
            if not order and prev:
                order = _LAST
            elif not order and index == 0:
                order = DIGITS

        banned = knowledge.globally_forbidden | knowledge.cannot_be_at[index]
        out: List[str] = []
        for c in order:
            if c not in out and c not in banned:
                out.append(c)
        return out

    # -------------------------
    # Legality
    # -------------------------
    def _can_place(
        self,
        ch: str,
        index: int,
        cand: _Candidate,
        main_op: Optional[str],
        floor: FloorContext,
        knowledge: GlobalKnowledge,
    ) -> bool:
        last = self.length - 1
        prev = cand.previous(index)

        # Feedback
        if ch in knowledge.globally_forbidden:
            return False
        fixed = knowledge.fixed_chars[index]
        if fixed is not None and fixed != ch:
            return False
        if ch in knowledge.cannot_be_at[index]:
            return False
        exact = knowledge.must_appear_exact_count.get(ch)
        if exact is not None and cand.counts[ch] >= exact:
            return False

        # Inside [..]: digits, then one '/' after a digit, then ']' after a digit
        if floor.in_floor:
            if ch == "/":
                if floor.has_slash or prev is None or not is_digit(prev):
                    return False
            elif ch == "]":
                if prev is None or not is_digit(prev) or not floor.has_slash:
                    return False
            elif not is_digit(ch):
                return False

        if ch == "[" and (floor.in_floor or index >= self.length - FLOOR_TAIL_RESERVE):
            return False
        if ch == "]" and not floor.in_floor:
            return False

        # Numbers left of '=': no leading zero, bounded value
        if is_digit(ch) and main_op != "=":
            k = index - 1
            while k >= 0 and is_digit(cand.symbols[k]):
                k -= 1
            run = "".join(cand.symbols[k + 1:index]) + ch
            if len(run) > 1 and run[0] == "0":
                return False
            before = cand.symbols[k] if k >= 0 else None
            if before is None or is_operator(before) or is_open_bracket(before) or is_comparison(before):
                if int(run) > self.max_operand_value:
                    return False

        # Adjacency
        if index == 0:
            if is_binary_operator(ch) or is_close_bracket(ch) or is_comparison(ch) or is_postfix_operator(ch):
                return False

        if prev is not None:
            if is_digit(prev):
                if ch == "(":
                    return False
            elif is_operator(prev):
                if is_binary_operator(ch) and not is_postfix_operator(prev):
                    return False
                if is_close_bracket(ch):
                    return False
                if is_comparison(ch) and not is_postfix_operator(prev):
                    return False
                if is_postfix_operator(prev) and (is_digit(ch) or is_open_bracket(ch)):
                    return False
            elif is_open_bracket(prev):
                if prev == "[" and ch == "(":
                    return False
                if is_binary_operator(ch) or is_comparison(ch) or is_postfix_operator(ch):
                    return False
                if is_close_bracket(ch) and matching_bracket(prev) != ch:
                    return False
            elif is_close_bracket(prev):
                if is_digit(ch) or is_open_bracket(ch):
                    return False
            elif is_comparison(prev):
                if prev == "=":
                    if not is_digit(ch) and ch != "-":
                        return False
                elif is_comparison(ch) or is_close_bracket(ch):
                    return False

        # Right of '=': digits, plus one sign right after the '='
        if main_op == "=":
            if not is_digit(ch) and ch != "-":
                return False
            if ch == "-" and (prev != "=" or index >= last):
                return False

        if index == last:
            if is_binary_operator(ch) or is_open_bracket(ch) or is_comparison(ch):
                return False

        # Bracket nesting over the prefix plus this symbol
        stack: List[str] = []
        for c in chain(cand.symbols[:index], (ch,)):
            if c == "(" or c == "[":
                stack.append(c)
            elif c == ")" or c == "]":
                if not stack or matching_bracket(stack.pop()) != c:
                    return False
        if index == last and stack:
            return False

        # Main operator: one of them, or '=' after an earlier '>'
        if is_comparison(ch):
            if main_op is not None and not (main_op == ">" and ch == "="):
                return False
            if index == 0 or index >= last:
                return False

        if ch == "A":
            if prev is None or not (is_digit(prev) or is_close_bracket(prev)):
                return False
        if prev == "A":
            if not (is_digit(ch) or is_open_bracket(ch)):
                return False

        if ch == "!":
            if prev is None:
                return False
            if is_digit(prev):
                if prev == "0" and evaluate("0!") is None:
                    return False
            elif prev != ")":
                # factorial of a floor result is not allowed
                return False

        return True
