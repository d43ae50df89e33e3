"""
feedback.py

Tile-level feedback for equation guesses.

A guess row is a list of tiles; every tile carries the symbol that was
played at that position and one of three states:

- correct : the symbol sits at exactly this position in the answer
- present : the symbol is in the answer, but not here
- empty   : every further copy of the symbol is already accounted for
            by the correct/present tiles of the same row
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from sumzle.alphabet import in_alphabet
from sumzle.errors import MalformedFeedback

CORRECT = "correct"
PRESENT = "present"
EMPTY = "empty"
STATES = (CORRECT, PRESENT, EMPTY)

# Wordle-style integer codes: 2 = green, 1 = yellow, 0 = gray
STATE_FROM_CODE = {2: CORRECT, 1: PRESENT, 0: EMPTY}
CODE_FROM_STATE = {v: k for k, v in STATE_FROM_CODE.items()}


@dataclass(frozen=True)
class Tile:
    symbol: Optional[str]
    state: str


def _coerce_state(state: Any) -> str:
    if isinstance(state, bool):
        raise MalformedFeedback(f"invalid tile state: {state!r}")
    if isinstance(state, int):
        try:
            return STATE_FROM_CODE[state]
        except KeyError:
            raise MalformedFeedback(f"invalid tile state code: {state}") from None
    if isinstance(state, str) and state in STATES:
        return state
    raise MalformedFeedback(f"invalid tile state: {state!r}")


def _coerce_symbol(symbol: Any) -> Optional[str]:
    if symbol is None or symbol == "":
        return None
    if not in_alphabet(symbol):
        raise MalformedFeedback(f"invalid tile symbol: {symbol!r}")
    return symbol


def coerce_tile(entry: Any) -> Tile:
    """
    Build a Tile from any of the accepted shapes:

    - a Tile
    - a (symbol, state) pair
    - a mapping with 'char' (or 'symbol') and 'state' keys
    """
    if isinstance(entry, Tile):
        return Tile(_coerce_symbol(entry.symbol), _coerce_state(entry.state))
    if isinstance(entry, Mapping):
        if "state" not in entry:
            raise MalformedFeedback(f"tile is missing a state: {dict(entry)!r}")
        symbol = entry.get("char", entry.get("symbol"))
        return Tile(_coerce_symbol(symbol), _coerce_state(entry["state"]))
    if isinstance(entry, (tuple, list)) and len(entry) == 2:
        return Tile(_coerce_symbol(entry[0]), _coerce_state(entry[1]))
    raise MalformedFeedback(f"unrecognised tile: {entry!r}")


def coerce_row(row: Any) -> List[Tile]:
    """Validate one guess row and return it as a list of Tiles."""
    if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
        raise MalformedFeedback(f"a row must be a sequence of tiles, got {type(row).__name__}")
    return [coerce_tile(entry) for entry in row]


def make_row(guess: str, pattern: Sequence[Union[str, int]]) -> List[Tile]:
    """Zip a guessed equation with its pattern (state tags or 2/1/0 codes)."""
    if not isinstance(guess, str):
        raise TypeError("guess must be a string")
    if len(guess) != len(pattern):
        raise ValueError("guess and pattern must have the same length")
    return [Tile(_coerce_symbol(ch), _coerce_state(p)) for ch, p in zip(guess, pattern)]


def score_pattern(guess: str, target: str) -> List[str]:
    """
    Compute the feedback `target` gives to `guess`.

    Returns
    -------
    list[str]
        One state per position. Duplicates follow the two-pass rule:
        greens are marked first and consume their copy of the symbol,
        then yellows are handed out left to right while the target still
        has unmatched copies; everything else is empty.
    """
    if not isinstance(guess, str) or not isinstance(target, str):
        raise TypeError("guess and target must be strings")
    if len(guess) != len(target):
        raise ValueError("guess and target must have the same length")
    if not all(in_alphabet(c) for c in guess + target):
        raise ValueError("guess and target must only use tile symbols")

    pattern: List[str] = [EMPTY] * len(guess)
    remaining = Counter(target)

    # Pass 1: greens
    for i, (g, t) in enumerate(zip(guess, target)):
        if g == t:
            pattern[i] = CORRECT
            remaining[g] -= 1

    # Pass 2: yellows where copies remain
    for i, g in enumerate(guess):
        if pattern[i] == EMPTY and remaining[g] > 0:
            pattern[i] = PRESENT
            remaining[g] -= 1

    return pattern


def parse_feedback(s: str, length: int) -> List[str]:
    """Parse typed feedback into state tags.
    Accepted forms:
      - letters: g/y/b  (green/yellow/black)
      - digits:  2/1/0
      - list:   [0, 1, 2, 2, 0, ...]
    Raises ValueError on invalid input.
    """
    s = s.strip().lower()
    if s.startswith("[") and s.endswith("]"):
        nums = re.findall(r"[012]", s)
        if len(nums) != length:
            raise ValueError(f"list form must contain exactly {length} 0/1/2 values")
        return [STATE_FROM_CODE[int(x)] for x in nums]

    mapping = {"g": CORRECT, "y": PRESENT, "b": EMPTY, "2": CORRECT, "1": PRESENT, "0": EMPTY}
    if len(s) != length:
        raise ValueError(f"feedback must be length {length} (g/y/b, 2/1/0 or [..])")
    try:
        return [mapping[ch] for ch in s]
    except KeyError as e:
        raise ValueError("feedback must use only g/y/b or 2/1/0") from e
