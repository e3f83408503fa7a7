"""
Transformations of preference profiles.

These functions are used to state (and test) anonymity, neutrality and strategyproofness
of social decision schemes: renaming agents, renaming alternatives, and letting a single
agent misrepresent their preferences. All functions return new profiles.
"""

import itertools

from sdsvoting import misc
from sdsvoting.preferences import Profile, InvalidOrderException


def permute_agents(profile, permutation):
    """
    Permute the agents of a profile.

    The new profile assigns to agent `i` the preference order of agent `permutation(i)`.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        permutation : dict or callable
            A bijection over the agents.

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    mapping = misc.check_permutation(permutation, profile.agents)
    return Profile(profile.agenda, {agent: profile[mapping[agent]] for agent in profile.agents})


def permute_alternatives(profile, permutation):
    """
    Permute the alternatives in all preference orders of a profile.

    If an agent prefers `x` to `y` in `profile`, the agent prefers `permutation(x)` to
    `permutation(y)` in the new profile.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        permutation : dict or callable
            A bijection over the alternatives.

    Returns
    -------
        sdsvoting.preferences.Profile

    Examples
    --------
    .. doctest::

        >>> from sdsvoting.preferences import Agenda
        >>> profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], ["b", "c", "a"]])
        >>> print(permute_alternatives(profile, {"a": "b", "b": "c", "c": "a"}))
        profile with 2 agents and 3 alternatives:
         agent 1:  a > c > b,
         agent 2:  c > a > b
    """
    mapping = misc.check_permutation(permutation, profile.alternatives)
    return Profile(
        profile.agenda, {agent: profile[agent].permute(mapping) for agent in profile.agents}
    )


def update_agent(profile, agent, order):
    """
    Replace the preference order of a single agent.

    Parameters
    ----------
        profile : sdsvoting.preferences.Profile
            A profile.

        agent : object
            An agent of the profile.

        order : sdsvoting.preferences.PreferenceOrder or list
            The new preferences of `agent` (any input accepted by `make_order()`).

    Returns
    -------
        sdsvoting.preferences.Profile
    """
    profile.agenda.check_agent(agent)
    orders = {other: profile[other] for other in profile.agents}
    orders[agent] = order
    try:
        return Profile(profile.agenda, orders)
    except InvalidOrderException as error:
        raise InvalidOrderException(f"Invalid preferences for agent {agent}: {error}") from error


def inverse_permutation(permutation):
    """
    The inverse of a permutation given as dictionary.

    Parameters
    ----------
        permutation : dict
            A bijection.

    Returns
    -------
        dict
    """
    inverse = {image: element for element, image in permutation.items()}
    if len(inverse) != len(permutation):
        raise ValueError(f"{permutation} is not a bijection.")
    return inverse


def all_permutations(elements):
    """
    Yield all permutations of a finite set as dictionaries.

    Parameters
    ----------
        elements : iterable
            A finite set.

    Yields
    ------
        dict
    """
    elements = list(elements)
    for images in itertools.permutations(elements):
        yield dict(zip(elements, images))
