import math

import pytest

from stormrank.magnitude import decode, exponent_for, is_recognized


@pytest.mark.parametrize("code, exp", [
    ("H", 2), ("h", 2), ("K", 3), ("k", 3), ("M", 6), ("m", 6), ("B", 9), ("b", 9),
    ("+", 1), ("?", 0), ("-", 0), (" ", 0), ("", 0), (None, 0),
    ("0", 0), ("5", 5), ("8", 8),
])
def test_exponent_table(code, exp):
    assert exponent_for(code) == exp


def test_missing_float_code_is_absent():
    assert exponent_for(float("nan")) == 0


def test_unrecognized_code():
    assert exponent_for("X") is None
    assert exponent_for("KK") is None
    assert not is_recognized("!")
    assert is_recognized("k")


def test_named_multipliers():
    c = 2.5
    assert decode(c, "K") == c * 1000
    assert decode(c, "M") == c * 1_000_000
    assert decode(c, "B") == c * 1_000_000_000
    assert decode(c, None) == c
    assert decode(c, "") == c


def test_digit_and_plus_codes():
    assert decode(3, "2") == 300
    assert decode(4, "+") == 40


def test_unrecognized_code_defaults_to_exponent_zero():
    assert decode(7, "X") == 7
    assert decode(7, "*") == 7


@pytest.mark.parametrize("code", ["H", "K", "M", "B", "+", "?", "3", None, "X"])
def test_decode_is_linear_in_coefficient(code):
    for c in (0.0, 1.0, 12.5, 999.99):
        assert decode(2 * c, code) == 2 * decode(c, code)


def test_decode_returns_float():
    v = decode(1, "K")
    assert isinstance(v, float)
    assert math.isclose(v, 1000.0)
