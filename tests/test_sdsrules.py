"""
Unit tests for sdsvoting/sdsrules.py.
"""

import pytest

from sdsvoting import sdsrules
from sdsvoting.lotteries import Lottery, point_mass, uniform_lottery
from sdsvoting.output import output, INFO
from sdsvoting.preferences import Agenda, Profile


@pytest.mark.parametrize("rule_id", sdsrules.MAIN_RULE_IDS)
def test_rule_attributes(rule_id):
    rule = sdsrules.Rule(rule_id)
    assert rule.rule_id == rule_id
    assert rule.shortname
    assert rule.longname
    assert "standard" in rule.algorithms


def test_unknown_rule():
    with pytest.raises(sdsrules.UnknownRuleIDError):
        sdsrules.Rule("borda")
    with pytest.raises(sdsrules.UnknownRuleIDError):
        sdsrules.compute("borda", None)


@pytest.mark.parametrize("rule_id", sdsrules.MAIN_RULE_IDS)
def test_unknown_algorithm(rule_id):
    profile = Profile(Agenda([1, 2], "ab"), [["a", "b"], ["b", "a"]])
    with pytest.raises(sdsrules.UnknownAlgorithm):
        sdsrules.compute(rule_id, profile, algorithm="exhaustive")


@pytest.mark.parametrize("rule_id", sdsrules.MAIN_RULE_IDS)
def test_algorithms_of_rule(rule_id):
    rule = sdsrules.Rule(rule_id)
    rankings = [["a", "b", "c"], ["b", "c", "a"], ["c", "a", "b"]]
    profile = Profile(Agenda([1, 2, 3], "abc"), rankings)
    assert rule.fastest_available_algorithm() in rule.algorithms
    expected = rule.compute(profile, algorithm="fastest")
    for algorithm in rule.algorithms:
        assert rule.compute(profile, algorithm=algorithm) == expected


@pytest.mark.parametrize(
    "rankings, expected",
    [
        ([["c", "b", "a"], [{"b", "c"}, "a"]], {"b": "1/4", "c": "3/4"}),
        ([["a", "b", "c"], ["b", "a", "c"]], {"a": "1/2", "b": "1/2"}),
        ([[{"a", "b", "c"}], ["c", "a", "b"]], {"a": "1/6", "b": "1/6", "c": "2/3"}),
    ],
)
def test_random_dictatorship(rankings, expected):
    profile = Profile(Agenda([1, 2], "abc"), rankings)
    assert sdsrules.compute("random-dictatorship", profile) == Lottery(expected)


@pytest.mark.parametrize(
    "rankings, expected",
    [
        ([["c", "b", "a"], [{"b", "c"}, "a"]], {"c": 1}),
        ([["a", "b", "c"], ["b", "a", "c"]], {"a": "1/2", "b": "1/2"}),
        ([[{"a", "b"}, "c"], [{"b", "c"}, "a"]], {"b": 1}),
        ([[{"a", "b"}, "c"], [{"a", "b"}, "c"]], {"a": "1/2", "b": "1/2"}),
    ],
)
def test_rsd(rankings, expected):
    profile = Profile(Agenda([1, 2], "abc"), rankings)
    assert sdsrules.compute("rsd", profile) == Lottery(expected)


def test_rsd_three_agents():
    profile = Profile(
        Agenda([1, 2, 3], "abc"),
        [["a", "b", "c"], ["b", "c", "a"], ["c", "a", "b"]],
    )
    assert sdsrules.compute("rsd", profile) == uniform_lottery("abc")

    profile = Profile(
        Agenda([1, 2, 3], "abcd"),
        [[{"a", "b"}, "c", "d"], [{"b", "c"}, "a", "d"], ["d", "c", "a", "b"]],
    )
    assert sdsrules.compute("rsd", profile) == Lottery(
        {"a": "1/6", "b": "1/3", "c": "1/6", "d": "1/3"}
    )


def test_uniform_pareto():
    profile = Profile(Agenda([1, 2], "abcd"), [["a", "b", "c", "d"], ["b", "a", "d", "c"]])
    assert sdsrules.compute("uniform-pareto", profile) == uniform_lottery("ab")


def test_uniform():
    profile = Profile(Agenda([1, 2], "abcd"), [["a", "b", "c", "d"], ["b", "a", "d", "c"]])
    assert sdsrules.compute("uniform", profile) == uniform_lottery("abcd")


def test_compute_with_result():
    profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], [{"b", "c"}, "a"]])
    sdsrules.compute("rsd", profile, result=point_mass("c"))
    with pytest.raises(ValueError):
        sdsrules.compute("rsd", profile, result=point_mass("b"))


def test_rule_is_callable():
    profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], [{"b", "c"}, "a"]])
    rule = sdsrules.Rule("random-dictatorship")
    assert rule(profile) == rule.compute(profile)


def test_output(capfd):
    profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], [{"b", "c"}, "a"]])
    output.set_verbosity(INFO)
    try:
        sdsrules.compute("random-dictatorship", profile)
    finally:
        output.set_verbosity()
    stdout = capfd.readouterr().out
    assert "Random Dictatorship (RD)" in stdout
    assert "Lottery: {b: 1/4, c: 3/4}" in stdout
