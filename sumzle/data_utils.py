from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from sumzle.feedback import Tile, make_row, parse_feedback


def load_feedback_history(csv_path: str, length: int) -> List[List[Tile]]:
    """
    Load guess rows from a CSV with 'guess' and 'pattern' columns.
    Patterns may use any form parse_feedback accepts (g/y/b, 2/1/0, [..]).
    """
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    for column in ("guess", "pattern"):
        if column not in df.columns:
            raise KeyError(f"column '{column}' not found in {csv_path}")

    rows: List[List[Tile]] = []
    for guess, pattern in zip(df["guess"].str.strip(), df["pattern"]):
        if len(guess) != length:
            raise ValueError(f"guess {guess!r} does not have length {length}")
        rows.append(make_row(guess, parse_feedback(pattern, length)))
    return rows


def write_results(results: Sequence[str], csv_path: str) -> None:
    """Write results, in discovery order, to a one-column CSV."""
    pd.DataFrame({"equation": list(results)}).to_csv(csv_path, index=False)
