"""
summary.py

Symbol statistics over a result list. Results keep their discovery order;
these only describe which symbols the remaining candidates use where.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from sumzle.alphabet import ALPHABET, symbol_index


def positional_frequencies(results: Sequence[str], length: int) -> np.ndarray:
    """
    Fraction of results holding each symbol at each position.

    Returns
    -------
    np.ndarray
        float array of shape (length, len(ALPHABET)); every row sums to 1
        when `results` is non-empty and to 0 otherwise.
    """
    counts = np.zeros((length, len(ALPHABET)), dtype=np.float64)
    for r in results:
        if len(r) != length:
            raise ValueError(f"result {r!r} does not have length {length}")
        for pos, ch in enumerate(r):
            counts[pos, symbol_index(ch)] += 1
    if results:
        counts /= len(results)
    return counts


def symbol_totals(results: Sequence[str]) -> np.ndarray:
    """Total occurrences of each symbol across all results, shape (len(ALPHABET),)."""
    totals = np.zeros(len(ALPHABET), dtype=np.int64)
    for r in results:
        for ch in r:
            totals[symbol_index(ch)] += 1
    return totals


def most_likely_symbols(results: Sequence[str], length: int) -> List[str]:
    """Per position, the most frequent symbol ('' when there are no results)."""
    if not results:
        return [""] * length
    freqs = positional_frequencies(results, length)
    # argmax returns the first maximum, i.e. alphabet order breaks ties
    return [ALPHABET[i] for i in np.argmax(freqs, axis=1)]
