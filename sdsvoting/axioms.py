"""
Axiomatic properties of social decision schemes (SDS).

A social decision scheme is any function that maps a `Profile` to a `Lottery`, e.g.,
`sdsvoting.sdsrules.Rule("rsd")`. The functions in this module test whether a scheme
satisfies an axiom *for a given profile* (and all profiles derived from it by renaming
agents or alternatives, or by a single agent changing their preferences).
"""

from sdsvoting import efficiency
from sdsvoting.dominance import strictly_stochastically_dominates
from sdsvoting.output import output, WARNING
from sdsvoting.preferences import all_weak_rankings
from sdsvoting.profileops import (
    all_permutations,
    permute_agents,
    permute_alternatives,
    update_agent,
)


AXIOM_NAMES = [
    "anonymity",
    "neutrality",
    "sd-strategyproofness",
    "ex-post-efficiency",
    "sd-efficiency",
]


def _silently(sds, profile):
    # schemes may print their results, which is not helpful for hundreds of calls
    current_verbosity = output.verbosity
    output.set_verbosity(max(current_verbosity, WARNING))
    try:
        return sds(profile)
    finally:
        output.set_verbosity(current_verbosity)


def check(axiom_name, sds, profile, **kwargs):
    """
    Test whether a social decision scheme satisfies a given axiom at `profile`.

    Parameters
    ----------
    axiom_name : str
        Name of an axiom, see `AXIOM_NAMES`.
    sds : callable
        A social decision scheme (a function mapping profiles to lotteries).
    profile : sdsvoting.preferences.Profile
        A profile.
    **kwargs : dict
        Optional arguments (`algorithm` for "sd-efficiency").

    Returns
    -------
    bool
    """
    if axiom_name not in AXIOM_NAMES:
        raise ValueError(f"Axiom {axiom_name} not known.")

    if axiom_name == "anonymity":
        return check_anonymity(sds, profile)
    elif axiom_name == "neutrality":
        return check_neutrality(sds, profile)
    elif axiom_name == "sd-strategyproofness":
        return check_sd_strategyproofness(sds, profile)
    elif axiom_name == "ex-post-efficiency":
        return check_ex_post_efficiency(sds, profile)
    elif axiom_name == "sd-efficiency":
        return check_sd_efficiency(sds, profile, **kwargs)
    else:
        raise NotImplementedError(f"Axiom {axiom_name} not implemented.")


def check_anonymity(sds, profile):
    """
    Test whether the outcome of `sds` does not change when agents are renamed.

    All permutations of agents are tested, so this is only feasible for few agents.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    bool
    """
    lottery = _silently(sds, profile)
    for permutation in all_permutations(profile.agents):
        permuted_lottery = _silently(sds, permute_agents(profile, permutation))
        if permuted_lottery != lottery:
            output.info("The social decision scheme is not anonymous.")
            output.details(
                f"(Permuting agents via {permutation} changes the lottery from {lottery} "
                f"to {permuted_lottery}.)"
            )
            return False
    output.info("The social decision scheme is anonymous (for the given profile).")
    return True


def check_neutrality(sds, profile):
    """
    Test whether renaming alternatives renames the outcome of `sds` in the same way.

    That is, `sds(permute_alternatives(profile, sigma))` has to equal
    `sds(profile).map_alternatives(sigma)` for all permutations `sigma`.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    bool
    """
    lottery = _silently(sds, profile)
    for permutation in all_permutations(profile.alternatives):
        expected_lottery = lottery.map_alternatives(permutation)
        permuted_lottery = _silently(sds, permute_alternatives(profile, permutation))
        if permuted_lottery != expected_lottery:
            output.info("The social decision scheme is not neutral.")
            output.details(
                f"(Permuting alternatives via {permutation} yields the lottery "
                f"{permuted_lottery} instead of {expected_lottery}.)"
            )
            return False
    output.info("The social decision scheme is neutral (for the given profile).")
    return True


def find_manipulation(sds, profile):
    """
    Find a profitable misrepresentation of preferences (with respect to SD).

    A manipulation consists of an agent `i` and a preference order `order` such that
    `sds(update_agent(profile, i, order))` strictly SD-dominates `sds(profile)`
    with respect to the true preferences of `i`.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    tuple or None
        A pair `(agent, order)`, or None if no agent can manipulate.
    """
    lottery = _silently(sds, profile)
    for agent in profile:
        true_order = profile[agent]
        for order in all_weak_rankings(profile.alternatives):
            if order == true_order:
                continue
            manipulated_lottery = _silently(sds, update_agent(profile, agent, order))
            if strictly_stochastically_dominates(true_order, manipulated_lottery, lottery):
                return agent, order
    return None


def check_sd_strategyproofness(sds, profile):
    """
    Test whether no agent can obtain a strictly SD-preferred lottery by lying.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    bool
    """
    manipulation = find_manipulation(sds, profile)
    if manipulation is None:
        output.info("The social decision scheme is SD-strategyproof (for the given profile).")
        return True
    agent, order = manipulation
    output.info("The social decision scheme is not SD-strategyproof.")
    output.details(f"(Agent {agent} can manipulate by reporting {order}.)")
    return False


def check_ex_post_efficiency(sds, profile):
    """
    Test whether the lottery returned by `sds` is ex-post efficient.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.

    Returns
    -------
    bool
    """
    return efficiency.check_ex_post_efficiency(profile, _silently(sds, profile))


def check_sd_efficiency(sds, profile, algorithm="fastest"):
    """
    Test whether the lottery returned by `sds` is SD-efficient.

    Parameters
    ----------
    sds : callable
        A social decision scheme.
    profile : sdsvoting.preferences.Profile
        A profile.
    algorithm : str, optional
        The algorithm to be used, see `efficiency.check_sd_efficiency()`.

    Returns
    -------
    bool
    """
    return efficiency.check_sd_efficiency(profile, _silently(sds, profile), algorithm=algorithm)
