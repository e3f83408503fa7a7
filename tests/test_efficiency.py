"""
Unit tests for sdsvoting/efficiency.py.
"""

import itertools
from fractions import Fraction
import pytest

from sdsvoting import efficiency
from sdsvoting.dominance import (
    pareto_dominates,
    pareto_losers,
    stochastically_dominates,
    strictly_stochastically_dominates,
)
from sdsvoting.lotteries import Lottery, point_mass
from sdsvoting.misc import OutOfDomainException
from sdsvoting.output import output, DETAILS, DEBUG2
from sdsvoting.preferences import Agenda, Profile, all_weak_rankings

MARKS = {
    "mip-gurobi": [pytest.mark.mip, pytest.mark.gurobipy],
    "mip-cbc": [pytest.mark.mip],
    "ortools-glop": [pytest.mark.ortools],
    "brute-force": [],
}

algorithms = [
    pytest.param(algorithm, marks=MARKS[algorithm])
    for algorithm in efficiency.SD_EFFICIENCY_ALGORITHMS
]


def _example_profile():
    return Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], ["b", "c", "a"]])


def _ex_post_efficient_but_sd_inefficient():
    # the lottery 1/2 c + 1/2 d is SD-dominated by 1/2 a + 1/2 b
    profile = Profile(
        Agenda([1, 2, 3, 4], "abcd"),
        [
            ["a", "c", "b", "d"],
            ["b", "d", "a", "c"],
            ["b", "c", "a", "d"],
            ["a", "d", "b", "c"],
        ],
    )
    return profile, Lottery({"c": "1/2", "d": "1/2"})


def test_available_algorithms():
    assert efficiency.fastest_available_algorithm() in efficiency.SD_EFFICIENCY_ALGORITHMS
    assert "mip-cbc" in efficiency.available_algorithms
    assert "brute-force" in efficiency.available_algorithms
    for algorithm in efficiency.SD_EFFICIENCY_ALGORITHMS:
        assert algorithm in efficiency.ALGORITHM_NAMES


@pytest.mark.parametrize("algorithm", algorithms + ["fastest"])
def test_example_profile(algorithm):
    profile = _example_profile()
    assert pareto_dominates(profile, "a", "b")
    assert "a" in pareto_losers(profile)
    assert not efficiency.check_sd_efficiency(profile, point_mass("a"), algorithm=algorithm)
    assert efficiency.check_sd_efficiency(
        profile, Lottery({"b": 0.5, "c": 0.5}), algorithm=algorithm
    )
    assert efficiency.check_sd_efficiency(profile, point_mass("b"), algorithm=algorithm)
    assert not efficiency.check_sd_efficiency(
        profile, Lottery({"a": "1/3", "b": "1/3", "c": "1/3"}), algorithm=algorithm
    )


@pytest.mark.parametrize("algorithm", algorithms + ["fastest"])
def test_point_masses_and_pareto_losers(algorithm):
    agenda = Agenda([1, 2], "abc")
    for ranking1, ranking2 in itertools.product(all_weak_rankings("abc"), repeat=2):
        profile = Profile(agenda, [ranking1, ranking2])
        losers = pareto_losers(profile)
        for alt in agenda.alternatives:
            assert efficiency.check_sd_efficiency(
                profile, point_mass(alt), algorithm=algorithm
            ) == (alt not in losers)


@pytest.mark.parametrize("algorithm", algorithms)
def test_ex_post_efficient_but_not_sd_efficient(algorithm):
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    assert efficiency.check_ex_post_efficiency(profile, lottery)
    assert not efficiency.check_sd_efficiency(profile, lottery, algorithm=algorithm)
    assert efficiency.check_sd_efficiency(
        profile, Lottery({"a": "1/2", "b": "1/2"}), algorithm=algorithm
    )


@pytest.mark.parametrize("algorithm", algorithms)
def test_find_sd_dominating_lottery(algorithm):
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    dominating = efficiency.find_sd_dominating_lottery(profile, lottery, algorithm=algorithm)
    assert dominating is not None
    for agent in profile:
        assert stochastically_dominates(profile[agent], dominating, lottery)
    assert any(
        strictly_stochastically_dominates(profile[agent], dominating, lottery)
        for agent in profile
    )
    assert efficiency.find_sd_dominating_lottery(profile, dominating, algorithm=algorithm) is None


@pytest.mark.parametrize("algorithm", algorithms + ["fastest"])
def test_tiny_probability_on_pareto_loser(algorithm):
    profile = _example_profile()
    epsilon = Fraction(1, 10**9)
    lottery = Lottery({"a": epsilon, "b": (1 - epsilon) / 2, "c": (1 - epsilon) / 2})
    assert not efficiency.check_ex_post_efficiency(profile, lottery)
    assert not efficiency.check_sd_efficiency(profile, lottery, algorithm=algorithm)
    dominating = efficiency.find_sd_dominating_lottery(profile, lottery, algorithm=algorithm)
    assert dominating == Lottery({"b": (1 + epsilon) / 2, "c": (1 - epsilon) / 2})
    assert efficiency.is_sd_improvement(profile, dominating, lottery)


def test_is_sd_improvement():
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    better = Lottery({"a": "1/2", "b": "1/2"})
    assert efficiency.is_sd_improvement(profile, better, lottery)
    assert not efficiency.is_sd_improvement(profile, lottery, better)
    assert not efficiency.is_sd_improvement(profile, lottery, lottery)


@pytest.mark.parametrize(
    "algorithm", [param for param in algorithms if param.values[0] != "brute-force"]
)
def test_unverified_lp_witness_falls_back_to_brute_force(algorithm, monkeypatch):
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    # a rounded solution that does not dominate the original lottery
    monkeypatch.setattr(efficiency, "_lottery_from_solution", lambda solution: lottery)
    dominating = efficiency.find_sd_dominating_lottery(profile, lottery, algorithm=algorithm)
    assert dominating == Lottery({"a": "1/2", "b": "1/2"})


def test_brute_force_witness_is_exact():
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    dominating = efficiency.find_sd_dominating_lottery(profile, lottery, algorithm="brute-force")
    # the total improvement of 1/2 a + 1/2 b is maximal
    assert dominating == Lottery({"a": "1/2", "b": "1/2"})


@pytest.mark.parametrize("algorithm", algorithms)
def test_algorithms_agree_with_brute_force(algorithm):
    agenda = Agenda([1, 2], "abc")
    lotteries = [
        Lottery({"a": "1/2", "b": "1/2"}),
        Lottery({"a": "1/3", "b": "1/3", "c": "1/3"}),
        Lottery({"b": "1/4", "c": "3/4"}),
        Lottery({"a": "1/10", "c": "9/10"}),
    ]
    rankings = list(all_weak_rankings("abc"))
    for ranking1, ranking2 in itertools.islice(itertools.product(rankings, repeat=2), 0, None, 5):
        profile = Profile(agenda, [ranking1, ranking2])
        for lottery in lotteries:
            expected = efficiency.check_sd_efficiency(profile, lottery, algorithm="brute-force")
            result = efficiency.check_sd_efficiency(profile, lottery, algorithm=algorithm)
            assert result == expected


@pytest.mark.parametrize("algorithm", algorithms)
def test_sd_efficiency_implies_ex_post_efficiency(algorithm):
    agenda = Agenda([1, 2], "abc")
    lotteries = [
        Lottery({"a": "1/2", "b": "1/2"}),
        Lottery({"b": "1/2", "c": "1/2"}),
        Lottery({"a": "1/3", "b": "1/3", "c": "1/3"}),
    ]
    rankings = list(all_weak_rankings("abc"))
    for ranking1, ranking2 in itertools.islice(itertools.product(rankings, repeat=2), 0, None, 4):
        profile = Profile(agenda, [ranking1, ranking2])
        for lottery in lotteries:
            if efficiency.check_sd_efficiency(profile, lottery, algorithm=algorithm):
                assert efficiency.check_ex_post_efficiency(profile, lottery)


@pytest.mark.parametrize("algorithm", algorithms)
def test_full_indifference(algorithm):
    profile = Profile(Agenda([1, 2], "abc"), [[{"a", "b", "c"}], [{"a", "b", "c"}]])
    assert efficiency.check_sd_efficiency(profile, point_mass("a"), algorithm=algorithm)
    assert efficiency.check_sd_efficiency(
        profile, Lottery({"a": "1/2", "c": "1/2"}), algorithm=algorithm
    )


def test_single_alternative():
    profile = Profile(Agenda([1, 2], ["a"]), [["a"], ["a"]])
    assert efficiency.check_sd_efficiency(profile, point_mass("a"))
    assert efficiency.check_ex_post_efficiency(profile, point_mass("a"))


def test_lottery_outside_agenda():
    profile = _example_profile()
    with pytest.raises(OutOfDomainException):
        efficiency.check_sd_efficiency(profile, point_mass("z"))
    with pytest.raises(OutOfDomainException):
        efficiency.check_ex_post_efficiency(profile, point_mass("z"))


def test_unknown_algorithm():
    profile = _example_profile()
    with pytest.raises(efficiency.UnknownAlgorithm):
        efficiency.check_sd_efficiency(profile, Lottery({"b": 0.5, "c": 0.5}), algorithm="gurobi")


def test_check_and_full_analysis():
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    assert efficiency.check("ex-post-efficiency", profile, lottery)
    assert not efficiency.check("sd-efficiency", profile, lottery, algorithm="brute-force")
    assert efficiency.full_analysis(profile, lottery) == {
        "ex-post-efficiency": True,
        "sd-efficiency": False,
    }
    with pytest.raises(ValueError):
        efficiency.check("pareto-optimality", profile, lottery)


def test_output(capfd):
    profile = _example_profile()
    output.set_verbosity(DETAILS)
    try:
        efficiency.check_sd_efficiency(profile, point_mass("a"))
        efficiency.check_ex_post_efficiency(profile, Lottery({"a": "1/2", "b": "1/2"}))
    finally:
        output.set_verbosity()
    stdout = capfd.readouterr().out
    assert "Lottery {a: 1} is not SD-efficient." in stdout
    assert "(It is SD-dominated by the lottery {b: 1}.)" in stdout
    assert "Lottery {a: 1/2, b: 1/2} is not ex-post efficient." in stdout
    assert "(Alternative a in its support is Pareto-dominated by alternative b.)" in stdout


@pytest.mark.parametrize(
    "algorithm", [param for param in algorithms if param.values[0] != "brute-force"]
)
def test_solver_output(capfd, algorithm):
    profile, lottery = _ex_post_efficient_but_sd_inefficient()
    output.set_verbosity(DEBUG2)
    try:
        efficiency.check_sd_efficiency(profile, lottery, algorithm=algorithm)
    finally:
        output.set_verbosity()
    stdout = capfd.readouterr().out
    assert "LP with 4 variables and 12 SD-constraints." in stdout
    assert "returned status" in stdout
    assert "Maximal total SD-improvement found by" in stdout
