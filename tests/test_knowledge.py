from collections import Counter

import pytest

from sumzle.alphabet import ALPHABET
from sumzle.errors import ConstraintConflict, MalformedFeedback
from sumzle.feedback import CORRECT, EMPTY, PRESENT, make_row, score_pattern
from sumzle.knowledge import GlobalKnowledge, compile_knowledge


def _admits(gk: GlobalKnowledge, target: str) -> bool:
    counts = Counter(target)
    for i, ch in enumerate(target):
        if gk.fixed_chars[i] is not None and gk.fixed_chars[i] != ch:
            return False
        if ch in gk.cannot_be_at[i] or ch in gk.globally_forbidden:
            return False
    if any(counts[c] != k for c, k in gk.must_appear_exact_count.items()):
        return False
    return all(counts[c] >= k for c, k in gk.must_appear_min_count.items())


def test_no_feedback_means_no_constraints():
    gk = compile_knowledge([], 5)
    assert gk.length == 5
    assert gk.fixed_chars == (None,) * 5
    assert all(not s for s in gk.cannot_be_at)
    assert not gk.must_appear_min_count
    assert not gk.must_appear_exact_count
    assert not gk.globally_forbidden
    assert GlobalKnowledge.empty(5) == gk


def test_correct_tile_pins_position():
    gk = compile_knowledge([[("5", CORRECT)]], 5)
    assert gk.fixed_chars[0] == "5"
    assert gk.cannot_be_at[0] == frozenset(ALPHABET) - {"5"}
    assert gk.must_appear_min_count["5"] == 1
    assert "5" not in gk.must_appear_exact_count


def test_duplicates_raise_minimum_and_empty_forbids():
    row = make_row("1+1=2", [PRESENT, EMPTY, CORRECT, CORRECT, EMPTY])
    gk = compile_knowledge([row], 5)
    assert gk.must_appear_min_count["1"] == 2
    assert "1" not in gk.must_appear_exact_count
    assert "1" in gk.cannot_be_at[0]
    assert gk.fixed_chars[2] == "1"
    assert gk.globally_forbidden == frozenset({"+", "2"})
    assert gk.must_appear_exact_count["+"] == 0


def test_empty_tile_fixes_exact_count():
    row = make_row("11=11", [CORRECT, EMPTY, CORRECT, PRESENT, EMPTY])
    gk = compile_knowledge([row], 5)
    assert gk.must_appear_exact_count["1"] == 2
    assert gk.must_appear_min_count["1"] == 2
    assert "1" not in gk.globally_forbidden
    assert "1" in gk.cannot_be_at[1] and "1" in gk.cannot_be_at[3]


def test_minimum_is_max_over_rows():
    rows = [
        make_row("1+2=3", [PRESENT, EMPTY, EMPTY, EMPTY, EMPTY]),
        make_row("11-1=", [PRESENT, PRESENT, EMPTY, EMPTY, EMPTY]),
    ]
    gk = compile_knowledge(rows, 5)
    assert gk.must_appear_min_count["1"] == 2


def test_tiles_past_length_are_ignored():
    gk = compile_knowledge([[("1", CORRECT), ("=", CORRECT), ("1", CORRECT), ("9", CORRECT)]], 3)
    assert gk.fixed_chars == ("1", "=", "1")
    assert "9" not in gk.must_appear_min_count


def test_tiles_without_symbol_are_ignored():
    gk = compile_knowledge([[(None, CORRECT), ("", EMPTY), ("=", CORRECT)]], 3)
    assert gk.fixed_chars == (None, None, "=")


def test_conflicting_fixed_positions():
    with pytest.raises(ConstraintConflict, match="position 1"):
        compile_knowledge([[("5", CORRECT)], [("6", CORRECT)]], 5)


def test_conflicting_exact_counts():
    rows = [
        [("1", CORRECT), ("1", EMPTY)],
        [("1", PRESENT), ("2", CORRECT), ("1", PRESENT), ("1", EMPTY)],
    ]
    with pytest.raises(ConstraintConflict, match="different exact counts"):
        compile_knowledge(rows, 5)


def test_exact_below_minimum():
    rows = [[("5", CORRECT)], [("2", PRESENT), ("5", EMPTY)]]
    with pytest.raises(ConstraintConflict, match="less than minimum"):
        compile_knowledge(rows, 5)


def test_fixed_but_ruled_out_here():
    rows = [[("5", CORRECT)], [("5", PRESENT)]]
    with pytest.raises(ConstraintConflict, match="'5' is fixed at position 1"):
        compile_knowledge(rows, 5)


@pytest.mark.parametrize("feedback", ["1+2=3", 7, [[("1", "green")]], [["12"]]])
def test_malformed_feedback(feedback):
    with pytest.raises(MalformedFeedback):
        compile_knowledge(feedback, 5)


def test_length_must_be_positive():
    with pytest.raises(ValueError):
        compile_knowledge([], 0)


@pytest.mark.parametrize(
    "guess, target",
    [
        ("1+1=2", "2-1=1"),
        ("12+35=47", "10+37=47"),
        ("9*9=81", "72/8=9"),
        ("11=11", "12=12"),
        ("[7/2]=3", "3!-3=3"),
    ],
)
def test_knowledge_from_scored_guess_admits_target(guess, target):
    gk = compile_knowledge([make_row(guess, score_pattern(guess, target))], len(target))
    assert _admits(gk, target)


def test_more_feedback_never_loosens():
    target = "10+37=47"
    r1 = make_row("12+35=47", score_pattern("12+35=47", target))
    r2 = make_row("19-3=16+", score_pattern("19-3=16+", target))
    one = compile_knowledge([r1], 8)
    two = compile_knowledge([r1, r2], 8)
    for a, b in zip(one.cannot_be_at, two.cannot_be_at):
        assert a <= b
    for ch, k in one.must_appear_min_count.items():
        assert two.must_appear_min_count[ch] >= k
    assert one.globally_forbidden <= two.globally_forbidden
    assert _admits(two, target)
