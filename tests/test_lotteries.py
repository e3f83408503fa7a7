"""
Unit tests for sdsvoting/lotteries.py.
"""

import pytest
from fractions import Fraction

from sdsvoting.lotteries import (
    InvalidLotteryException,
    Lottery,
    make_lottery,
    point_mass,
    uniform_lottery,
)
from sdsvoting.preferences import Agenda


def test_exact_probabilities():
    lottery = Lottery({"a": 0.5, "b": "1/4", "c": Fraction(1, 4)})
    assert lottery.probability("a") == Fraction(1, 2)
    assert lottery.probability("b") == Fraction(1, 4)
    assert lottery.probability("d") == 0
    assert lottery.probability_of_set({"a", "b"}) == Fraction(3, 4)
    assert lottery.probability_of_set(["a", "a"]) == Fraction(1, 2)
    assert lottery.probability_of_set([]) == 0
    assert str(lottery) == "{a: 1/2, b: 1/4, c: 1/4}"


def test_decimal_floats():
    # 0.1 + 0.2 + 0.7 is not 1.0 in binary floating point, but the decimals are
    lottery = Lottery({"a": 0.1, "b": 0.2, "c": 0.7})
    assert lottery.probability("a") == Fraction(1, 10)
    assert sum(prob for _, prob in lottery.items()) == 1


def test_inexact_floats_are_normalized():
    lottery = Lottery({"a": 1 / 3, "b": 1 / 3, "c": 1 / 3})
    assert lottery == uniform_lottery("abc")
    assert sum(prob for _, prob in lottery.items()) == 1


def test_support():
    lottery = Lottery({"a": 1, "b": 0})
    assert lottery.support() == frozenset({"a"})
    assert lottery == point_mass("a")
    assert lottery == Lottery.point_mass("a")
    assert Lottery([("x", "1/2"), ("y", "1/2")]).support() == frozenset("xy")


@pytest.mark.parametrize(
    "probabilities",
    [
        {"a": "1/2"},
        {"a": "1/2", "b": "1/3"},
        {"a": -0.5, "b": 1.5},
        {"a": 0.5, "b": 0.4999},
        {},
        {"a": float("nan")},
        {"a": True},
        {"a": "not a number"},
        {"a": None},
    ],
)
def test_invalid_lotteries(probabilities):
    with pytest.raises(InvalidLotteryException):
        Lottery(probabilities)


def test_equality_and_hash():
    p = Lottery({"a": "1/2", "b": "1/2"})
    q = Lottery({"b": 0.5, "a": 0.5, "c": 0})
    assert p == q
    assert hash(p) == hash(q)
    assert p != Lottery({"a": 1})
    assert Lottery(p) == p


def test_map_alternatives():
    lottery = Lottery({"a": "1/2", "b": "1/3", "c": "1/6"})
    permuted = lottery.map_alternatives({"a": "b", "b": "c", "c": "a"})
    assert permuted == Lottery({"b": "1/2", "c": "1/3", "a": "1/6"})
    merged = lottery.map_alternatives(lambda alt: "x" if alt in "ab" else alt)
    assert merged == Lottery({"x": "5/6", "c": "1/6"})


def test_uniform_lottery():
    lottery = uniform_lottery([0, 1, 2, 3])
    assert all(lottery.probability(alt) == Fraction(1, 4) for alt in range(4))
    with pytest.raises(InvalidLotteryException):
        uniform_lottery([])


def test_make_lottery():
    agenda = Agenda([1, 2], "abc")
    assert make_lottery(agenda, {"a": 1}) == point_mass("a")
    with pytest.raises(InvalidLotteryException):
        make_lottery(agenda, {"d": 1})
    with pytest.raises(InvalidLotteryException):
        make_lottery(agenda, {"a": 1, "d": 0})
    with pytest.raises(InvalidLotteryException):
        make_lottery(agenda, {"a": 0.3})
