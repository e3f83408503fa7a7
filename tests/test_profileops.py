"""
Unit tests for sdsvoting/profileops.py.
"""

import itertools
import pytest

from sdsvoting import profileops
from sdsvoting.dominance import pareto_dominates
from sdsvoting.lotteries import Lottery
from sdsvoting.misc import OutOfDomainException
from sdsvoting.preferences import Agenda, InvalidOrderException, PreferenceOrder, Profile


@pytest.fixture
def profile():
    return Profile(
        Agenda([1, 2, 3], "abcd"),
        [["c", "b", "a", "d"], ["b", {"c", "d"}, "a"], [{"a", "b"}, "d", "c"]],
    )


def test_permute_agents(profile):
    permuted = profileops.permute_agents(profile, {1: 2, 2: 3, 3: 1})
    assert permuted[1] == profile[2]
    assert permuted[2] == profile[3]
    assert permuted[3] == profile[1]
    assert permuted.anonymous_profile() == profile.anonymous_profile()
    identity = profileops.permute_agents(profile, lambda agent: agent)
    assert identity == profile


def test_permute_alternatives(profile):
    permutation = {"a": "b", "b": "c", "c": "d", "d": "a"}
    permuted = profileops.permute_alternatives(profile, permutation)
    assert permuted[1] == PreferenceOrder(["d", "c", "b", "a"])
    assert permuted[2] == PreferenceOrder(["c", {"d", "a"}, "b"])
    assert permuted[3] == PreferenceOrder([{"b", "c"}, "a", "d"])


def test_permute_alternatives_round_trip(profile):
    for permutation in profileops.all_permutations(profile.alternatives):
        inverse = profileops.inverse_permutation(permutation)
        permuted = profileops.permute_alternatives(profile, permutation)
        assert profileops.permute_alternatives(permuted, inverse) == profile


def test_map_alternatives_round_trip():
    lottery = Lottery({"a": "1/2", "b": "1/3", "c": "1/6"})
    for permutation in profileops.all_permutations("abc"):
        inverse = profileops.inverse_permutation(permutation)
        assert lottery.map_alternatives(permutation).map_alternatives(inverse) == lottery


def test_pareto_dominance_is_neutral(profile):
    for permutation in profileops.all_permutations(profile.alternatives):
        permuted = profileops.permute_alternatives(profile, permutation)
        for x, y in itertools.product(profile.alternatives, repeat=2):
            assert pareto_dominates(permuted, permutation[x], permutation[y]) == (
                pareto_dominates(profile, x, y)
            )


@pytest.mark.parametrize(
    "permutation",
    [{"a": "a", "b": "a", "c": "c", "d": "d"}, {"a": "b", "b": "a"}, {"a": "z"}],
)
def test_invalid_permutations(profile, permutation):
    with pytest.raises(ValueError):
        profileops.permute_alternatives(profile, permutation)


def test_update_agent(profile):
    updated = profileops.update_agent(profile, 2, ["a", "b", "c", "d"])
    assert updated[2] == PreferenceOrder(["a", "b", "c", "d"])
    assert updated[1] == profile[1] and updated[3] == profile[3]
    assert profile[2] == PreferenceOrder(["b", {"c", "d"}, "a"])
    with pytest.raises(OutOfDomainException):
        profileops.update_agent(profile, 4, ["a", "b", "c", "d"])
    with pytest.raises(InvalidOrderException):
        profileops.update_agent(profile, 2, ["a", "b", "c"])


def test_inverse_permutation():
    assert profileops.inverse_permutation({1: 2, 2: 3, 3: 1}) == {2: 1, 3: 2, 1: 3}
    with pytest.raises(ValueError):
        profileops.inverse_permutation({1: 2, 2: 2})


def test_all_permutations():
    permutations = list(profileops.all_permutations([1, 2, 3]))
    assert len(permutations) == 6
    assert {1: 1, 2: 2, 3: 3} in permutations
    assert all(sorted(permutation.values()) == [1, 2, 3] for permutation in permutations)
