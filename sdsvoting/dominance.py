"""
Pareto dominance between alternatives and stochastic dominance (SD) between lotteries.

Pareto dominance is queried from the perspective of the dominated alternative:
`pareto_dominates(profile, x, y)` tests whether `x` is Pareto-dominated by `y`.
Stochastic dominance is queried from the perspective of the dominating lottery:
`stochastically_dominates(order, p, q)` tests whether `p` is weakly SD-preferred to `q`.
"""

import itertools
from fractions import Fraction

from sdsvoting.misc import OutOfDomainException


def pareto_dominates(profile, x, y):
    """
    Test whether alternative `x` is Pareto-dominated by alternative `y`.

    That is, test whether every agent weakly prefers `y` to `x` and at least one agent
    strictly prefers `y` to `x`. In particular, no alternative is Pareto-dominated by itself.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    x : object
        The alternative that is possibly dominated.
    y : object
        The alternative that possibly dominates `x`.

    Returns
    -------
    bool

    Examples
    --------
    .. doctest::

        >>> from sdsvoting.preferences import Agenda, Profile
        >>> profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], ["b", "c", "a"]])
        >>> pareto_dominates(profile, "a", "b")
        True
        >>> pareto_dominates(profile, "b", "a")
        False
        >>> pareto_dominates(profile, "c", "b")
        False
    """
    profile.agenda.check_alternative(x)
    profile.agenda.check_alternative(y)

    # every agent has to weakly prefer `y` to `x`
    for agent in profile:
        if not profile[agent].weakly_prefers(y, x):
            return False

    # and some agent has to strictly prefer `y`
    return any(profile[agent].strictly_prefers(y, x) for agent in profile)


def pareto_losers(profile):
    """
    All alternatives that are Pareto-dominated by some other alternative.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    frozenset
    """
    return frozenset(
        x
        for x, y in itertools.permutations(profile.alternatives, 2)
        if pareto_dominates(profile, x, y)
    )


def _check_support(order, lottery):
    for alt in lottery.support():
        if alt not in order.alternatives:
            raise OutOfDomainException(alt, kind="alternative")


def stochastically_dominates(order, p, q):
    """
    Test whether lottery `p` stochastically dominates lottery `q` with respect to `order`.

    That is, for every alternative `x`, the probability that `p` selects an alternative
    at least as good as `x` is at least as large as the corresponding probability for `q`.
    This relation (SD) is reflexive and transitive.

    It suffices to compare the cumulative probabilities of the indifference classes.

    Parameters
    ----------
    order : sdsvoting.preferences.PreferenceOrder
        The preference order of an agent.
    p, q : sdsvoting.lotteries.Lottery
        Two lotteries over the alternatives of `order`.

    Returns
    -------
    bool

    Examples
    --------
    .. doctest::

        >>> from sdsvoting.preferences import PreferenceOrder
        >>> from sdsvoting.lotteries import Lottery
        >>> order = PreferenceOrder(["a", "b", "c"])
        >>> stochastically_dominates(order, Lottery({"a": 0.5, "c": 0.5}), Lottery({"b": 1}))
        False
        >>> stochastically_dominates(order, Lottery({"a": 0.5, "b": 0.5}), Lottery({"b": 1}))
        True
    """
    _check_support(order, p)
    _check_support(order, q)

    p_cumulative = Fraction(0)
    q_cumulative = Fraction(0)
    for indifference_class in order.weak_ranking():
        p_cumulative += p.probability_of_set(indifference_class)
        q_cumulative += q.probability_of_set(indifference_class)
        if p_cumulative < q_cumulative:
            return False
    return True


def strictly_stochastically_dominates(order, p, q):
    """
    Test whether `p` strictly stochastically dominates `q` with respect to `order`.

    Parameters
    ----------
    order : sdsvoting.preferences.PreferenceOrder
        The preference order of an agent.
    p, q : sdsvoting.lotteries.Lottery
        Two lotteries.

    Returns
    -------
    bool
    """
    return stochastically_dominates(order, p, q) and not stochastically_dominates(order, q, p)


def sd_comparison_sets(order):
    """
    The upper contour sets that have to be compared to decide SD.

    The full set of alternatives is omitted, since every lottery assigns it probability 1.

    Parameters
    ----------
    order : sdsvoting.preferences.PreferenceOrder
        A preference order.

    Returns
    -------
    tuple of frozenset
    """
    return order.upper_contour_sets()[:-1]


def expected_utility(lottery, utility):
    """
    Expected utility of a lottery.

    Parameters
    ----------
    lottery : sdsvoting.lotteries.Lottery
        A lottery.
    utility : dict
        Maps alternatives to (numeric) utilities.

    Returns
    -------
    Fraction or float
    """
    return sum(prob * utility[alt] for alt, prob in lottery.items())


def is_consistent_utility(order, utility):
    """
    Test whether a utility function represents a preference order.

    That is, `utility[x] >= utility[y]` iff `x` is weakly preferred to `y`.

    Parameters
    ----------
    order : sdsvoting.preferences.PreferenceOrder
        A preference order.
    utility : dict
        Maps alternatives to (numeric) utilities.

    Returns
    -------
    bool
    """
    for x, y in itertools.product(order.alternatives, repeat=2):
        if (utility[x] >= utility[y]) != order.weakly_prefers(x, y):
            return False
    return True
