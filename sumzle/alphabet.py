"""
alphabet.py

The 24 tile symbols and the syntax classes the search and the evaluator
reason about.
"""

from __future__ import annotations

from typing import Optional

ALPHABET = "0123456789+-*/%^=()![]>A"

DIGITS = "0123456789"
BINARY_OPERATORS = "+-*/%^A"
POSTFIX_OPERATORS = "!"
OPEN_BRACKETS = "(["
CLOSE_BRACKETS = ")]"
COMPARISONS = "=>"

_INDEX = {c: i for i, c in enumerate(ALPHABET)}
_MATCHING = {"(": ")", "[": "]"}


def symbol_index(c: str) -> int:
    """Map a symbol to 0..23; raise KeyError for anything outside the alphabet."""
    try:
        return _INDEX[c]
    except KeyError:
        raise KeyError(f"unknown symbol: {c!r}") from None


def in_alphabet(c: str) -> bool:
    return isinstance(c, str) and len(c) == 1 and c in _INDEX


def is_digit(c: str) -> bool:
    return len(c) == 1 and "0" <= c <= "9"


def is_binary_operator(c: str) -> bool:
    # 'A' (permutation) is an infix operator too
    return c != "" and c in BINARY_OPERATORS


def is_postfix_operator(c: str) -> bool:
    return c == "!"


def is_operator(c: str) -> bool:
    return is_binary_operator(c) or is_postfix_operator(c)


def is_open_bracket(c: str) -> bool:
    return c == "(" or c == "["


def is_close_bracket(c: str) -> bool:
    return c == ")" or c == "]"


def is_comparison(c: str) -> bool:
    return c == "=" or c == ">"


def matching_bracket(c: str) -> Optional[str]:
    return _MATCHING.get(c)
