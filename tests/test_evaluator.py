import pytest

from sumzle.evaluator import check_brackets, evaluate, is_valid_equation


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("[7/2]", 3),
        ("[5]", 5),
        ("[7/0]", None),
        ("[0/3]", 0),
        ("2*[9/4]", 4),
        ("[7/2]+[9/2]", 7),
        ("[[1]]", None),
        ("[1/2/3]", None),
        ("[]", None),
        ("[7/2", None),
    ],
)
def test_floor_brackets(expr, expected):
    assert evaluate(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("4!", 24),
        ("0!", 1),
        ("12!", 479001600),
        ("13!", None),
        ("3!!", 720),
        ("2*3!", 12),
        ("!3", None),
        ("(3)!", None),
    ],
)
def test_factorial(expr, expected):
    assert evaluate(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("5A2", 20),
        ("2A5", None),
        ("5A0", 1),
        ("10A10", 3628800),
        ("11A2", None),
        ("A3", None),
        ("3A", None),
        ("3!A2", 30),
        ("1+4A2*2", 25),
    ],
)
def test_permutation(expr, expected):
    assert evaluate(expr) == expected


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("2+3*4", 14),
        ("(2+3)*4", 20),
        ("2^3^2", 512),
        ("-2^2", -4),
        ("2^-1", None),
        ("8/2", 4),
        ("7/2", None),
        ("7%3", 1),
        ("-7%3", -1),
        ("1/0", None),
        ("0/0", None),
        ("10-0", 10),
        ("05+1", None),
        ("1+05", None),
        ("0", 0),
        ("2147483647", 2147483647),
        ("2147483648", None),
        ("-2147483648", -2147483648),
        ("()", None),
        ("1+", None),
        ("", None),
        ("1=1", None),
        ("1/(2^2000)", 0),
    ],
)
def test_arithmetic(expr, expected):
    assert evaluate(expr) == expected


def test_evaluate_rejects_non_strings():
    assert evaluate(None) is None
    assert evaluate(12) is None


def test_check_brackets():
    assert check_brackets("([1])")
    assert check_brackets("1+2")
    assert not check_brackets("([1)]")
    assert not check_brackets("(1")
    assert not check_brackets("1)")


@pytest.mark.parametrize(
    "expr",
    ["1+2=3", "5>3", "5>=3", "[7/2]=3", "4!=24", "5A2=20", "12=12", "2*(3+4)=14", "10-12=-2"],
)
def test_valid_equations(expr):
    assert is_valid_equation(expr)


@pytest.mark.parametrize(
    "expr",
    [
        "1+2=4",
        "3>5",
        "5>=6",
        "=1",
        "1=",
        "1>",
        "1=1=1",
        "2=2>1",
        "1>2=0",
        "(1=1)",
        "(1+2=3",
        "12",
        "01=1",
        "5=05",
    ],
)
def test_invalid_equations(expr):
    assert not is_valid_equation(expr)


def test_greater_equals_is_strict_greater():
    assert is_valid_equation("6>=5")
    assert not is_valid_equation("5>=5")
    assert not is_valid_equation("1>=")
