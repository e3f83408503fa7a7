"""Social decision schemes (SDS), i.e., functions mapping preference profiles to lotteries.

Any function mapping a `Profile` to a `Lottery` can be used as a social decision scheme in
`sdsvoting.axioms`. This module contains a few standard schemes.

Module Attributes
-----------------
MAIN_RULE_IDS : list of str
    List of rule identifiers (`rule_id`) of the social decision schemes in this module.
"""

import functools
from fractions import Fraction

from sdsvoting.dominance import pareto_losers
from sdsvoting.lotteries import Lottery, uniform_lottery
from sdsvoting.misc import header
from sdsvoting.output import output


MAIN_RULE_IDS = ["random-dictatorship", "rsd", "uniform-pareto", "uniform"]


class Rule:
    """
    A class that contains the main information about a social decision scheme.

    Parameters
    ----------
        rule_id : str
            The rule identifier.
    """

    def __init__(self, rule_id):
        self.rule_id = rule_id
        self.algorithms = ("standard",)
        if rule_id == "random-dictatorship":
            self.shortname = "RD"
            self.longname = "Random Dictatorship (RD)"
            self.compute_fct = compute_random_dictatorship
        elif rule_id == "rsd":
            self.shortname = "RSD"
            self.longname = "Random Serial Dictatorship (RSD)"
            self.compute_fct = compute_rsd
        elif rule_id == "uniform-pareto":
            self.shortname = "Uniform-Pareto"
            self.longname = "Uniform lottery over Pareto-undominated alternatives"
            self.compute_fct = compute_uniform_pareto
        elif rule_id == "uniform":
            self.shortname = "Uniform"
            self.longname = "Uniform lottery over all alternatives"
            self.compute_fct = compute_uniform
        else:
            raise UnknownRuleIDError(rule_id)

    def fastest_available_algorithm(self):
        """
        Return the fastest algorithm for this rule.

        Returns
        -------
            str
        """
        # `self.algorithms` is sorted by speed
        return self.algorithms[0]

    def compute(self, profile, **kwargs):
        """
        Compute the lottery returned by this rule.

        Parameters
        ----------
            profile : sdsvoting.preferences.Profile
                A profile.

            **kwargs : dict
                Optional arguments for computing the rule (e.g., `algorithm`).

        Returns
        -------
            sdsvoting.lotteries.Lottery
        """
        return self.compute_fct(profile, **kwargs)

    def __call__(self, profile):
        return self.compute(profile)


class UnknownRuleIDError(ValueError):
    """
    Error: unknown rule id.

    Parameters
    ----------
        rule_id : str
            The unknown rule identifier.
    """

    def __init__(self, rule_id):
        message = f'Rule ID "{rule_id}" is not known.'
        super().__init__(message)


class UnknownAlgorithm(ValueError):
    """
    Error: unknown algorithm for a given rule.

    Parameters
    ----------
        rule_id : str
            The rule for which the algorithm is not known.

        algorithm : str
            The unknown algorithm.
    """

    def __init__(self, rule_id, algorithm):
        message = f"Algorithm {algorithm} not specified for rule {rule_id}."
        super().__init__(message)


def compute(rule_id, profile, result=None, **kwargs):
    """
    Compute the lottery returned by the rule given by `rule_id`.

    Parameters
    ----------
        rule_id : str
            The rule identifier.

        profile : sdsvoting.preferences.Profile
            A profile.

        result : sdsvoting.lotteries.Lottery, optional
            Expected lottery.

            This is used in unit tests to verify correctness. Raises `ValueError` if
            `result` is different from the actual lottery.

        **kwargs : dict
            Optional arguments for computing the rule.

    Returns
    -------
        sdsvoting.lotteries.Lottery
    """
    rule = Rule(rule_id)
    lottery = rule.compute(profile, **kwargs)
    if result is not None and lottery != result:
        raise ValueError(f"{rule.shortname} returns {lottery}, expected {result}")
    return lottery


def _output(rule, lottery):
    output.info(header(rule.longname), wrap=False)
    output.info(f"Lottery: {lottery}\n")


def compute_random_dictatorship(profile, algorithm="fastest"):
    """
    Compute the lottery returned by Random Dictatorship.

    Every agent is selected with equal probability, the selected agent chooses uniformly at
    random among their most preferred alternatives.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        algorithm : str, optional
            The algorithm to be used ("standard" or "fastest").

    Returns
    -------
        sdsvoting.lotteries.Lottery

    Examples
    --------
    .. doctest::

        >>> from sdsvoting.preferences import Agenda, Profile
        >>> profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], [{"b", "c"}, "a"]])
        >>> print(compute_random_dictatorship(profile))
        {b: 1/4, c: 3/4}
    """
    rule = Rule("random-dictatorship")
    if algorithm == "fastest":
        algorithm = rule.fastest_available_algorithm()
    if algorithm not in rule.algorithms:
        raise UnknownAlgorithm(rule.rule_id, algorithm)

    probabilities = {}
    for agent in profile:
        top = profile[agent].top()
        for alt in top:
            probabilities[alt] = probabilities.get(alt, Fraction(0)) + Fraction(
                1, len(profile) * len(top)
            )
    lottery = Lottery(probabilities)

    _output(rule, lottery)
    return lottery


def compute_rsd(profile, algorithm="fastest"):
    """
    Compute the lottery returned by Random Serial Dictatorship.

    A random order of agents is chosen (uniformly). Starting with all alternatives, each agent
    (in this order) restricts the set of remaining alternatives to their most preferred ones
    among them. Finally, one of the remaining alternatives is chosen uniformly at random.

    The probabilities are computed exactly via a recursion over the sets of agents that
    have not yet been dictators, which avoids enumerating all orders of agents.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        algorithm : str, optional
            The algorithm to be used ("standard" or "fastest").

    Returns
    -------
        sdsvoting.lotteries.Lottery
    """
    rule = Rule("rsd")
    if algorithm == "fastest":
        algorithm = rule.fastest_available_algorithm()
    if algorithm not in rule.algorithms:
        raise UnknownAlgorithm(rule.rule_id, algorithm)

    @functools.lru_cache(maxsize=None)
    def _rsd(remaining_agents, remaining_alternatives):
        if len(remaining_alternatives) == 1 or not remaining_agents:
            share = Fraction(1, len(remaining_alternatives))
            return {alt: share for alt in remaining_alternatives}
        probabilities = {}
        for agent in remaining_agents:
            order = profile[agent]
            best_rank = min(order.rank(alt) for alt in remaining_alternatives)
            best = frozenset(
                alt for alt in remaining_alternatives if order.rank(alt) == best_rank
            )
            for alt, prob in _rsd(remaining_agents - {agent}, best).items():
                probabilities[alt] = probabilities.get(alt, Fraction(0)) + prob / len(
                    remaining_agents
                )
        return probabilities

    lottery = Lottery(_rsd(frozenset(profile.agents), frozenset(profile.alternatives)))
    output.details(f"Computed {_rsd.cache_info().currsize} subproblems.")

    _output(rule, lottery)
    return lottery


def compute_uniform_pareto(profile, algorithm="fastest"):
    """
    Compute the uniform lottery over all alternatives that are not Pareto-dominated.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        algorithm : str, optional
            The algorithm to be used ("standard" or "fastest").

    Returns
    -------
        sdsvoting.lotteries.Lottery
    """
    rule = Rule("uniform-pareto")
    if algorithm == "fastest":
        algorithm = rule.fastest_available_algorithm()
    if algorithm not in rule.algorithms:
        raise UnknownAlgorithm(rule.rule_id, algorithm)

    losers = pareto_losers(profile)
    lottery = uniform_lottery(alt for alt in profile.alternatives if alt not in losers)

    _output(rule, lottery)
    return lottery


def compute_uniform(profile, algorithm="fastest"):
    """
    Compute the uniform lottery over all alternatives (ignoring the preferences).

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        algorithm : str, optional
            The algorithm to be used ("standard" or "fastest").

    Returns
    -------
        sdsvoting.lotteries.Lottery
    """
    rule = Rule("uniform")
    if algorithm == "fastest":
        algorithm = rule.fastest_available_algorithm()
    if algorithm not in rule.algorithms:
        raise UnknownAlgorithm(rule.rule_id, algorithm)

    lottery = uniform_lottery(profile.alternatives)

    _output(rule, lottery)
    return lottery
