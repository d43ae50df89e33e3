"""
knowledge.py

Compiles guess feedback into one read-only GlobalKnowledge object that the
search consults at every tile.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from sumzle.alphabet import ALPHABET
from sumzle.errors import ConstraintConflict, MalformedFeedback
from sumzle.feedback import CORRECT, EMPTY, PRESENT, Tile, coerce_row


@dataclass(frozen=True)
class GlobalKnowledge:
    fixed_chars: Tuple[Optional[str], ...]
    cannot_be_at: Tuple[FrozenSet[str], ...]
    must_appear_min_count: Mapping[str, int]
    must_appear_exact_count: Mapping[str, int]
    globally_forbidden: FrozenSet[str]

    @property
    def length(self) -> int:
        return len(self.fixed_chars)

    @classmethod
    def empty(cls, length: int) -> "GlobalKnowledge":
        return compile_knowledge([], length)


def _normalise_rows(feedback: Sequence, length: int) -> List[List[Tile]]:
    if isinstance(feedback, (str, bytes)) or not isinstance(feedback, Sequence):
        raise MalformedFeedback("feedback must be a sequence of rows")
    rows = []
    for r, row in enumerate(feedback, start=1):
        try:
            tiles = coerce_row(row)
        except MalformedFeedback as e:
            raise MalformedFeedback(f"row {r}: {e}") from None
        # tiles past the equation length carry no information
        rows.append(tiles[:length])
    return rows


def compile_knowledge(feedback: Sequence, length: int) -> GlobalKnowledge:
    """
    Fold every guess row into positional and count constraints.

    - correct : pin the symbol here, forbid every other symbol here
    - present : forbid the symbol here
    - empty   : forbid the symbol here; the row's green+yellow count of that
                symbol becomes its exact total

    Raises ConstraintConflict (MalformedFeedback for shape errors) naming
    the symbol and 1-based positions when the rows contradict each other.
    """
    if not isinstance(length, int) or length <= 0:
        raise ValueError("length must be a positive integer")
    rows = _normalise_rows(feedback, length)

    fixed: List[Optional[str]] = [None] * length
    cannot_be_at: List[Set[str]] = [set() for _ in range(length)]
    min_counts: Dict[str, int] = {}
    exact_counts: Dict[str, int] = {}
    forbidden: Set[str] = set()

    # Pass 1: positional constraints
    for row in rows:
        for i, tile in enumerate(row):
            ch = tile.symbol
            if ch is None:
                continue
            if tile.state == CORRECT:
                if fixed[i] is not None and fixed[i] != ch:
                    raise ConstraintConflict(
                        f"position {i + 1} is fixed to both {fixed[i]!r} and {ch!r}"
                    )
                fixed[i] = ch
                cannot_be_at[i].update(c for c in ALPHABET if c != ch)
            else:
                # present and empty both rule this exact slot out
                cannot_be_at[i].add(ch)

    # Pass 2: per-symbol counts
    seen = sorted({t.symbol for row in rows for t in row if t.symbol is not None}, key=ALPHABET.index)
    for ch in seen:
        min_required = 0
        derived_exact: Optional[int] = None

        for row in rows:
            mine = [t for t in row if t.symbol == ch]
            if not mine:
                continue
            k = sum(1 for t in mine if t.state in (CORRECT, PRESENT))
            min_required = max(min_required, k)

            if any(t.state == EMPTY for t in mine):
                if derived_exact is not None and derived_exact != k:
                    raise ConstraintConflict(
                        f"symbol {ch!r} has different exact counts in different rows "
                        f"({derived_exact} vs {k})"
                    )
                derived_exact = k

        min_counts[ch] = min_required
        if derived_exact is not None:
            if derived_exact < min_required:
                raise ConstraintConflict(
                    f"symbol {ch!r} exact count ({derived_exact}) is less than "
                    f"minimum required ({min_required})"
                )
            exact_counts[ch] = derived_exact
            if derived_exact == 0 and min_required == 0:
                forbidden.add(ch)

    # Pass 3: cross-checks
    for i, ch in enumerate(fixed):
        if ch is None:
            continue
        if ch in forbidden:
            raise ConstraintConflict(
                f"symbol {ch!r} is fixed at position {i + 1} but also globally forbidden"
            )
        if ch in cannot_be_at[i]:
            positions = [j + 1 for j, s in enumerate(cannot_be_at) if ch in s]
            raise ConstraintConflict(
                f"symbol {ch!r} is fixed at position {i + 1} but also ruled out "
                f"at positions {positions}"
            )
        min_counts[ch] = max(min_counts.get(ch, 0), 1)
        if ch in exact_counts and exact_counts[ch] < min_counts[ch]:
            raise ConstraintConflict(
                f"symbol {ch!r} exact count ({exact_counts[ch]}) is less than its "
                f"fixed position {i + 1} requires"
            )

    for ch, exact in exact_counts.items():
        if exact < min_counts.get(ch, 0):
            raise ConstraintConflict(
                f"symbol {ch!r} exact count ({exact}) is less than minimum required "
                f"({min_counts[ch]})"
            )

    for ch in sorted(forbidden, key=ALPHABET.index):
        if min_counts.get(ch, 0) > 0:
            raise ConstraintConflict(f"symbol {ch!r} is globally forbidden but also required")
        if exact_counts.get(ch, 0) > 0:
            raise ConstraintConflict(
                f"symbol {ch!r} is globally forbidden but also required exactly "
                f"{exact_counts[ch]} times"
            )

    return GlobalKnowledge(
        fixed_chars=tuple(fixed),
        cannot_be_at=tuple(frozenset(s) for s in cannot_be_at),
        must_appear_min_count=MappingProxyType(dict(min_counts)),
        must_appear_exact_count=MappingProxyType(dict(exact_counts)),
        globally_forbidden=frozenset(forbidden),
    )
