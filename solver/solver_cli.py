"""
solver/solver_cli.py

Equation-guessing helper (human-in-the-loop):
- Give the feedback you already have with --csv and/or --row, or
- play interactively: YOU type each guessed equation and the feedback you saw,
  the solver re-runs and shows what is still possible.
- Feedback accepted as: 'gybbg...', '21001...', or a list '[2, 1, 0, ...]'.

Run:
  python -m solver.solver_cli --length 8 --row "12+35=47:bbgybgbb"
  python -m solver.solver_cli --length 8 --csv history.csv --out remaining.csv

Shortcuts:
  quit / q / exit  -> exit
"""
from __future__ import annotations

import argparse
from typing import List, Optional, Sequence

from sumzle.alphabet import ALPHABET, in_alphabet
from sumzle.config import DEFAULT_LENGTH, DEFAULT_MAX_OPERAND_VALUE, MAX_PRINTED_CANDIDATES
from sumzle.data_utils import load_feedback_history, write_results
from sumzle.feedback import CORRECT, Tile, make_row, parse_feedback
from sumzle.search import EquationSolver
from sumzle.summary import most_likely_symbols

_QUIT = {"q", "quit", "exit"}


def parse_row_arg(text: str, length: int) -> List[Tile]:
    """Parse a 'GUESS:PATTERN' argument into a feedback row."""
    guess, sep, pattern = text.rpartition(":")
    if not sep or not guess:
        raise argparse.ArgumentTypeError("rows must look like GUESS:PATTERN")
    if len(guess) != length:
        raise argparse.ArgumentTypeError(f"guess {guess!r} must have length {length}")
    try:
        return make_row(guess, parse_feedback(pattern, length))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _report(solver: EquationSolver, history: List[List[Tile]], show_stats: bool) -> List[str]:
    report = solver.search_report(history)
    if report.conflict:
        print("Feedback is contradictory:", report.conflict)
        return []
    results = report.results
    print(f"Remaining candidates: {len(results)} (checked {report.visited})")
    if results and len(results) <= MAX_PRINTED_CANDIDATES:
        print("Candidates:", ", ".join(results))
    elif results:
        print("First candidates:", ", ".join(results[:MAX_PRINTED_CANDIDATES]))
    if show_stats and results:
        print("Most likely per position:", " ".join(most_likely_symbols(results, solver.length)))
    return results


def _interactive(solver: EquationSolver, history: List[List[Tile]], show_stats: bool) -> None:
    print("\nEquation helper: after EACH guess, paste the feedback here.")
    print("Accepted: g/y/b, 2/1/0, or [2,1,0,...]. Type 'quit' to exit.\n")

    while True:
        guess = input("Enter your guess: ").strip()
        if guess.lower() in _QUIT:
            print("bye!")
            return
        if len(guess) != solver.length:
            print(f"Please enter an equation of length {solver.length}.")
            continue
        if not all(in_alphabet(c) for c in guess):
            print(f"Please use only these symbols: {ALPHABET}")
            continue

        while True:
            fb = input("Feedback for that guess (g/y/b or 2/1/0 or [..]): ").strip()
            if fb.lower() in _QUIT:
                print("bye!")
                return
            try:
                row = make_row(guess, parse_feedback(fb, solver.length))
                break
            except ValueError as e:
                print("Invalid feedback:", e)

        history.append(row)
        if all(t.state == CORRECT for t in row):
            print("Solved!")
            return

        if not _report(solver, history, show_stats):
            print("No candidates remain. Check your feedback inputs.")
            return


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Equation guessing solver (manual feedback)")
    ap.add_argument("--length", type=int, default=DEFAULT_LENGTH, help="Number of tiles")
    ap.add_argument(
        "--max-operand",
        type=int,
        default=DEFAULT_MAX_OPERAND_VALUE,
        help="Largest number allowed left of '='",
    )
    ap.add_argument("--csv", help="CSV with 'guess' and 'pattern' columns")
    ap.add_argument("--row", action="append", default=[], help="GUESS:PATTERN (repeatable)")
    ap.add_argument("--out", help="Write remaining candidates to this CSV")
    ap.add_argument("--stats", action="store_true", help="Show the most likely symbol per position")
    args = ap.parse_args(argv)

    solver = EquationSolver(args.length, args.max_operand)

    history: List[List[Tile]] = []
    if args.csv:
        try:
            history.extend(load_feedback_history(args.csv, args.length))
        except (KeyError, ValueError) as e:
            ap.error(f"--csv {args.csv}: {e}")
    try:
        history.extend(parse_row_arg(r, args.length) for r in args.row)
    except argparse.ArgumentTypeError as e:
        ap.error(str(e))

    if not history:
        _interactive(solver, history, args.stats)
        return

    results = _report(solver, history, args.stats)
    if args.out:
        write_results(results, args.out)
        print(f"Wrote {len(results)} candidates to {args.out}")


if __name__ == "__main__":
    main()
