"""
Random generation of preference profiles and lotteries.

Strict preferences are sampled with the package
`prefsampling <https://github.com/COMSOC-Community/prefsampling>`_.
"""

from fractions import Fraction

import prefsampling.ordinal as ord_samplers
from numpy.random import default_rng
from sdsvoting.lotteries import Lottery
from sdsvoting.preferences import Agenda, Profile


def prefsampling_wrapper(sampler, sampler_params, tie_probability=0.0):
    """
    Wrapper for prefsampling functions to map the outcome of the samplers to an sdsvoting profile.

    Agents are `0, 1, ..., num_voters - 1` and alternatives are
    `0, 1, ..., num_candidates - 1`.

    Parameters
    ----------
        sampler : Callable
            The prefsampling function (returning strict orders).
        sampler_params : dict
            The arguments passed to the sampler, all are passed as kwargs.
        tie_probability : float, default=0.0
            Probability with which two neighbouring positions of a sampled strict order are
            merged into one indifference class.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    samples = sampler(seed=int(rng.integers(2**31)), **sampler_params)
    agenda = Agenda(range(sampler_params["num_voters"]), range(sampler_params["num_candidates"]))
    rankings = [
        _merge_neighbours([int(alt) for alt in sample], tie_probability) for sample in samples
    ]
    return Profile(agenda, rankings)


def _merge_neighbours(strict_order, tie_probability):
    ranking = [[strict_order[0]]]
    for alt in strict_order[1:]:
        if tie_probability > 0 and rng.random() < tie_probability:
            ranking[-1].append(alt)
        else:
            ranking.append([alt])
    return ranking


def random_profile(num_agents, num_alternatives, prob_distribution):
    """
    Generate a random profile using the probability distribution `prob_distribution`.

    The following probability distributions are supported:

    .. doctest::

        >>> PROBABILITY_DISTRIBUTION_IDS
        ('IC', 'Urn', 'Mallows', 'IC weak orders')

    Parameters
    ----------
        num_agents : int
            The desired number of agents in the profile.

        num_alternatives : int
            The desired number of alternatives in the profile.

        prob_distribution : dict
            Specification of the probability distribution.

    Returns
    -------
        sdsvoting.preferences.Profile

    Examples
    --------
    Generate a profile via the Mallows distribution with dispersion `0.5`.

    .. doctest::

        >>> prob_distribution = {"id": "Mallows", "dispersion": 0.5}
        >>> profile = random_profile(
        ...     num_agents=5, num_alternatives=4, prob_distribution=prob_distribution
        ... )
        >>> print(len(profile))
        5
    """
    if "id" not in prob_distribution:
        raise KeyError('Probability distribution requires key "id".')
    if prob_distribution["id"] not in PROBABILITY_DISTRIBUTION_IDS:
        raise ValueError(f"Probability distribution id {prob_distribution} unknown.")
    kwargs = {key: value for key, value in prob_distribution.items() if key != "id"}
    return PROBABILITY_DISTRIBUTIONS[prob_distribution["id"]](
        num_agents, num_alternatives, **kwargs
    )


# Impartial Culture
def random_ic_profile(num_agents, num_alternatives):
    """
    Generate a random profile using the *Impartial Culture (IC)* probability distribution.

    Every agent has a strict order drawn uniformly at random.

    Parameters
    ----------
        num_agents : int
            The desired number of agents in the profile.

        num_alternatives : int
            The desired number of alternatives in the profile.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    return prefsampling_wrapper(
        ord_samplers.impartial,
        {"num_voters": num_agents, "num_candidates": num_alternatives},
    )


def random_urn_profile(num_agents, num_alternatives, replace):
    """
    Generate a random profile using the *Polya Urn* probability distribution.

    Parameters
    ----------
        num_agents : int
            The desired number of agents in the profile.

        num_alternatives : int
            The desired number of alternatives in the profile.

        replace : float
            New balls added to the urn in each iteration, relative to the original number.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    return prefsampling_wrapper(
        ord_samplers.urn,
        {"num_voters": num_agents, "num_candidates": num_alternatives, "alpha": replace},
    )


def random_mallows_profile(num_agents, num_alternatives, dispersion):
    """
    Generate a random profile using the *Mallows* probability distribution.

    Parameters
    ----------
        num_agents : int
            The desired number of agents in the profile.

        num_alternatives : int
            The desired number of alternatives in the profile.

        dispersion : float in [0, 1]
            Dispersion parameter of the Mallows model.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    return prefsampling_wrapper(
        ord_samplers.mallows,
        {"num_voters": num_agents, "num_candidates": num_alternatives, "phi": dispersion},
    )


def random_ic_weak_order_profile(num_agents, num_alternatives, tie_probability=0.5):
    """
    Generate a random profile with weak orders.

    A strict order is drawn via Impartial Culture, and afterwards each pair of neighbouring
    positions is merged into one indifference class with probability `tie_probability`.

    Parameters
    ----------
        num_agents : int
            The desired number of agents in the profile.

        num_alternatives : int
            The desired number of alternatives in the profile.

        tie_probability : float in [0, 1], default=0.5
            Probability of merging neighbouring positions.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    if not 0 <= tie_probability <= 1:
        raise ValueError("Parameter tie_probability must be in [0, 1].")
    return prefsampling_wrapper(
        ord_samplers.impartial,
        {"num_voters": num_agents, "num_candidates": num_alternatives},
        tie_probability=tie_probability,
    )


def random_lottery(alternatives, support_size=None, denominator=100):
    """
    Generate a random lottery with exact (rational) probabilities.

    All probabilities are positive multiples of `1 / denominator`.

    Parameters
    ----------
        alternatives : iterable
            The alternatives.

        support_size : int, optional
            The number of alternatives with positive probability.

            If not specified, it is chosen uniformly at random.

        denominator : int, default=100
            Common denominator of the probabilities.

    Returns
    -------
        sdsvoting.lotteries.Lottery
    """
    alternatives = list(alternatives)
    if not alternatives:
        raise ValueError("A lottery requires at least one alternative.")
    if support_size is None:
        support_size = int(rng.integers(1, min(len(alternatives), denominator) + 1))
    if not 1 <= support_size <= len(alternatives):
        raise ValueError(f"Parameter support_size must be between 1 and {len(alternatives)}.")
    if support_size > denominator:
        raise ValueError("Parameter denominator must be at least support_size.")

    support = rng.choice(len(alternatives), size=support_size, replace=False)
    cuts = sorted(rng.choice(denominator - 1, size=support_size - 1, replace=False) + 1)
    bounds = [0] + [int(cut) for cut in cuts] + [denominator]
    return Lottery(
        {
            alternatives[int(index)]: Fraction(bounds[i + 1] - bounds[i], denominator)
            for i, index in enumerate(support)
        }
    )


PROBABILITY_DISTRIBUTIONS = {
    "IC": random_ic_profile,
    "Urn": random_urn_profile,
    "Mallows": random_mallows_profile,
    "IC weak orders": random_ic_weak_order_profile,
}
PROBABILITY_DISTRIBUTION_IDS = tuple(PROBABILITY_DISTRIBUTIONS.keys())

rng = default_rng()  # random number generator
