"""
config.py

Shared constants for the equation solver. Edit these to change the
defaults used by the CLI and by `EquationSolver` when no argument is given.
"""

from __future__ import annotations

# ---------- Construction defaults ----------

# Number of tiles in one equation
DEFAULT_LENGTH: int = 8

# Largest value a freshly started operand may take (left of '=')
DEFAULT_MAX_OPERAND_VALUE: int = 999

# ---------- Grammar bounds ----------

# Floor brackets are reduced at most this many times per side
FLOOR_PASS_LIMIT: int = 10

# n! is only defined for 0 <= n <= FACTORIAL_MAX (12! still fits in int32)
FACTORIAL_MAX: int = 12

# mAn requires 0 <= n <= m <= PERMUTATION_MAX
PERMUTATION_MAX: int = 10

INT32_MIN: int = -(2 ** 31)
INT32_MAX: int = 2 ** 31 - 1

# ---------- Search shaping ----------

# '[' cannot open within this many tiles of the end ("[d]" plus a closer)
FLOOR_TAIL_RESERVE: int = 3

# ---------- CLI ----------

MAX_PRINTED_CANDIDATES: int = 10
