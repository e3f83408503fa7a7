"""
Efficiency of lotteries: ex-post efficiency and SD-efficiency.

A lottery `p` is SD-efficient if there is no lottery `q` such that every agent weakly
prefers `q` to `p` with respect to stochastic dominance and at least one agent does so
strictly. This is decided by the linear program

    maximize    sum over agents i and proper upper contour sets U of i:  q(U) - p(U)
    subject to  q(U) >= p(U)  for all such i and U,
                q(x) >= 0, sum_x q(x) = 1.

`p` itself is feasible, hence `p` is SD-efficient iff the optimum is 0.

Lotteries with a Pareto-dominated alternative in their support are recognized as
SD-inefficient before any LP is solved. Witnesses found by LP solvers are rounded to exact
lotteries and verified; if verification fails, the brute-force algorithm is used instead.

Module Attributes
-----------------
ALGORITHM_NAMES : dict of str to str
    Valid algorithm identifiers for `check_sd_efficiency()` and their descriptions.

ACCURACY : float
    Tolerance passed to the LP solvers.

CMP_ACCURACY : float
    An LP optimum larger than `CMP_ACCURACY` counts as strict improvement.
"""

import itertools
from fractions import Fraction

from sdsvoting import efficiency_mip, efficiency_ortools
from sdsvoting.dominance import (
    pareto_dominates,
    pareto_losers,
    sd_comparison_sets,
    stochastically_dominates,
    strictly_stochastically_dominates,
)
from sdsvoting.lotteries import Lottery
from sdsvoting.misc import OutOfDomainException
from sdsvoting.output import output, WARNING

try:
    import gurobipy
except ImportError:
    gurobipy = None


ACCURACY = efficiency_mip.ACCURACY
CMP_ACCURACY = 10 * ACCURACY  # when comparing float numbers obtained from an LP
FRACTION_LIMIT_DENOMINATOR = 10**9  # for converting LP solutions to exact lotteries

PROPERTY_NAMES = ["ex-post-efficiency", "sd-efficiency"]

ALGORITHM_NAMES = {
    "mip-gurobi": "Gurobi LP solver via Python MIP library",
    "mip-cbc": "CBC LP solver via Python MIP library",
    "ortools-glop": "OR-Tools GLOP LP solver",
    "brute-force": "Exact enumeration of vertices of the LP (brute-force)",
}

# algorithms sorted by speed
SD_EFFICIENCY_ALGORITHMS = ("mip-gurobi", "mip-cbc", "ortools-glop", "brute-force")


class UnknownAlgorithm(ValueError):
    """
    Error: unknown algorithm for deciding SD-efficiency.

    Parameters
    ----------
        algorithm : str
            The unknown algorithm.
    """

    def __init__(self, algorithm):
        message = f"Algorithm {algorithm} not specified for check_sd_efficiency."
        super().__init__(message)


def _available_algorithms():
    """Verify which algorithms are supported on the current machine."""
    available = []
    for algorithm in SD_EFFICIENCY_ALGORITHMS:
        if "gurobi" in algorithm and gurobipy is None:
            continue
        available.append(algorithm)
    return available


available_algorithms = _available_algorithms()


def fastest_available_algorithm():
    """
    The fastest algorithm for deciding SD-efficiency that is available on this machine.

    Returns
    -------
    str
    """
    return available_algorithms[0]


def full_analysis(profile, lottery):
    """
    Test all implemented efficiency notions for the given lottery.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    lottery : sdsvoting.lotteries.Lottery
        A lottery.

    Returns
    -------
    dict
        Maps "ex-post-efficiency" and "sd-efficiency" to `True` or `False`.
    """
    results = {}

    # temporarily no output
    current_verbosity = output.verbosity
    output.set_verbosity(WARNING)

    for property_name in PROPERTY_NAMES:
        results[property_name] = check(property_name, profile, lottery)

    description = {
        "ex-post-efficiency": "Ex-post efficiency",
        "sd-efficiency": "SD-efficiency",
    }

    # restore output verbosity
    output.set_verbosity(current_verbosity)

    for prop, value in results.items():
        output.info(f"{description[prop]:50s} : {value}")

    return results


def check(property_name, profile, lottery, algorithm="fastest"):
    """
    Test whether a lottery satisfies a given efficiency notion.

    Parameters
    ----------
    property_name : str
        Either "ex-post-efficiency" or "sd-efficiency".
    profile : sdsvoting.preferences.Profile
        A profile.
    lottery : sdsvoting.lotteries.Lottery
        A lottery.
    algorithm : str, optional
        The algorithm to be used (only relevant for "sd-efficiency").

    Returns
    -------
    bool
    """
    if property_name not in PROPERTY_NAMES:
        raise ValueError(f"Property {property_name} not known.")

    if property_name == "ex-post-efficiency":
        return check_ex_post_efficiency(profile, lottery)
    elif property_name == "sd-efficiency":
        return check_sd_efficiency(profile, lottery, algorithm=algorithm)
    else:
        raise NotImplementedError(f"Property {property_name} not implemented.")


def _check_lottery(profile, lottery):
    for alt in lottery.support():
        if alt not in profile.agenda.alternative_set:
            raise OutOfDomainException(alt, kind="alternative")


def check_ex_post_efficiency(profile, lottery):
    """
    Test whether a lottery is ex-post efficient.

    A lottery is ex-post efficient if no alternative in its support is Pareto-dominated.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    lottery : sdsvoting.lotteries.Lottery
        A lottery.

    Returns
    -------
    bool
    """
    _check_lottery(profile, lottery)
    dominated = sorted(lottery.support() & pareto_losers(profile), key=str)

    if not dominated:
        output.info(f"Lottery {lottery} is ex-post efficient.")
        return True

    loser = dominated[0]
    winner = next(alt for alt in profile.alternatives if pareto_dominates(profile, loser, alt))
    output.info(f"Lottery {lottery} is not ex-post efficient.")
    output.details(
        f"(Alternative {loser} in its support is Pareto-dominated by alternative {winner}.)"
    )
    return False


def check_sd_efficiency(profile, lottery, algorithm="fastest"):
    """
    Test whether a lottery is SD-efficient.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    lottery : sdsvoting.lotteries.Lottery
        A lottery.
    algorithm : str, optional
        The algorithm to be used.

        The available algorithms are "mip-gurobi" (if Gurobi is installed), "mip-cbc",
        "ortools-glop" and "brute-force". With "fastest", point masses are decided
        combinatorially via `pareto_losers()` and all other lotteries with the fastest
        available LP solver.

    Returns
    -------
    bool

    References
    ----------
    Universal Pareto Dominance and Welfare for Plausible Utility Functions.
    Haris Aziz, Florian Brandl, and Felix Brandt.
    Journal of Mathematical Economics, 60:123-133, 2015.

    Examples
    --------
    .. doctest::

        >>> from sdsvoting.preferences import Agenda, Profile
        >>> from sdsvoting.output import output, DETAILS

        >>> profile = Profile(Agenda([1, 2], "abc"), [["c", "b", "a"], ["b", "c", "a"]])
        >>> output.set_verbosity(DETAILS)  # enable output for check_sd_efficiency
        >>> result = check_sd_efficiency(profile, Lottery({"a": 1}))
        Lottery {a: 1} is not SD-efficient.
        (It is SD-dominated by the lottery {b: 1}.)
        >>> result = check_sd_efficiency(profile, Lottery({"b": 0.5, "c": 0.5}))
        Lottery {b: 1/2, c: 1/2} is SD-efficient.

    .. testcleanup::

        output.set_verbosity()
    """
    _check_lottery(profile, lottery)

    if algorithm == "fastest" and len(lottery.support()) == 1:
        (alternative,) = lottery.support()
        result, detailed_information = _check_point_mass_sd_efficiency(profile, alternative)
    else:
        if algorithm == "fastest":
            algorithm = fastest_available_algorithm()
        result, detailed_information = _check_sd_efficiency(profile, lottery, algorithm)

    if result:
        output.info(f"Lottery {lottery} is SD-efficient.")
    else:
        output.info(f"Lottery {lottery} is not SD-efficient.")
        output.details(
            f"(It is SD-dominated by the lottery {detailed_information['dominating_lottery']}.)"
        )

    return result


def find_sd_dominating_lottery(profile, lottery, algorithm="fastest"):
    """
    Find a lottery that SD-dominates the given one (if there is one).

    The returned lottery is weakly SD-preferred by all agents and strictly SD-preferred by at
    least one agent.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    lottery : sdsvoting.lotteries.Lottery
        A lottery.
    algorithm : str, optional
        The algorithm to be used, see `check_sd_efficiency()`.

        Only "brute-force" guarantees an exact witness. Solutions of LP solvers are rounded
        to fractions.

    Returns
    -------
    sdsvoting.lotteries.Lottery or None
        A dominating lottery, or None if `lottery` is SD-efficient.
    """
    _check_lottery(profile, lottery)
    if algorithm == "fastest":
        algorithm = fastest_available_algorithm()
    result, detailed_information = _check_sd_efficiency(profile, lottery, algorithm)
    if result:
        return None
    return detailed_information["dominating_lottery"]


def _check_point_mass_sd_efficiency(profile, alternative):
    """
    Test whether the point mass on `alternative` is SD-efficient.

    This is the case iff `alternative` is not Pareto-dominated.
    """
    for other in profile.alternatives:
        if pareto_dominates(profile, alternative, other):
            detailed_information = {"dominating_lottery": Lottery.point_mass(other)}
            return False, detailed_information
    detailed_information = {}
    return True, detailed_information


def _sd_constraints(profile, lottery):
    """
    Lower bounds on the probabilities of all proper upper contour sets of all agents.

    Returns
    -------
    list of tuple
        Pairs `(upper_contour_set, probability under lottery)`, with one entry per agent
        and proper upper contour set (duplicates are kept since they count towards the
        total improvement).
    """
    return [
        (upper_contour_set, lottery.probability_of_set(upper_contour_set))
        for agent in profile
        for upper_contour_set in sd_comparison_sets(profile[agent])
    ]


def _check_sd_efficiency(profile, lottery, algorithm):
    if algorithm not in SD_EFFICIENCY_ALGORITHMS:
        raise UnknownAlgorithm(algorithm)
    if algorithm not in available_algorithms:
        raise ValueError(f"Algorithm {algorithm} is not available (solver not installed).")

    losers = lottery.support() & pareto_losers(profile)
    if losers:
        dominating_lottery = _pareto_improvement(profile, lottery, losers)
        return False, {"dominating_lottery": dominating_lottery}

    alternatives = list(profile.alternatives)
    constraints = _sd_constraints(profile, lottery)
    if not constraints:
        # all agents are indifferent between all alternatives
        return True, {}

    if algorithm == "brute-force":
        return _check_sd_efficiency_brute_force(alternatives, constraints)

    if algorithm == "mip-gurobi":
        improvement, solution = efficiency_mip._find_sd_improvement_mip(
            alternatives, constraints, solver_id="gurobi"
        )
    elif algorithm == "mip-cbc":
        improvement, solution = efficiency_mip._find_sd_improvement_mip(
            alternatives, constraints, solver_id="cbc"
        )
    elif algorithm == "ortools-glop":
        improvement, solution = efficiency_ortools._find_sd_improvement_ortools(
            alternatives, constraints
        )
    else:
        raise UnknownAlgorithm(algorithm)

    output.debug(f"Maximal total SD-improvement found by {algorithm}: {improvement}")
    if improvement <= CMP_ACCURACY:
        return True, {}

    output.debug2(f"Solution of {algorithm}: {solution}")
    dominating_lottery = _lottery_from_solution(solution)
    if not is_sd_improvement(profile, dominating_lottery, lottery):
        output.debug(
            f"Rounded solution {dominating_lottery} of {algorithm} does not SD-dominate "
            f"{lottery}, falling back to brute-force."
        )
        return _check_sd_efficiency_brute_force(alternatives, constraints)
    return False, {"dominating_lottery": dominating_lottery}


def _pareto_improvement(profile, lottery, losers):
    """
    Move the probability of Pareto-dominated alternatives to undominated alternatives.

    Every alternative in `losers` is mapped to an alternative that Pareto-dominates it and
    is not Pareto-dominated itself (such an alternative exists since Pareto dominance is
    transitive and irreflexive).
    """
    all_losers = pareto_losers(profile)
    replacement = {}
    for loser in losers:
        replacement[loser] = next(
            alt
            for alt in profile.alternatives
            if alt not in all_losers and pareto_dominates(profile, loser, alt)
        )
    return lottery.map_alternatives(lambda alt: replacement.get(alt, alt))


def is_sd_improvement(profile, q, p):
    """
    Test whether lottery `q` SD-dominates lottery `p` with respect to a profile.

    That is, every agent weakly SD-prefers `q` to `p` and at least one agent strictly
    SD-prefers `q` to `p`. This test is exact.

    Parameters
    ----------
    profile : sdsvoting.preferences.Profile
        A profile.
    q, p : sdsvoting.lotteries.Lottery
        Two lotteries.

    Returns
    -------
    bool
    """
    if not all(stochastically_dominates(profile[agent], q, p) for agent in profile):
        return False
    return any(strictly_stochastically_dominates(profile[agent], q, p) for agent in profile)


def _lottery_from_solution(solution):
    """Round an LP solution (floats) to a lottery with exact probabilities."""
    rounded = {
        alt: Fraction(value).limit_denominator(FRACTION_LIMIT_DENOMINATOR)
        for alt, value in solution.items()
        if value > CMP_ACCURACY
    }
    total = sum(rounded.values())
    return Lottery({alt: prob / total for alt, prob in rounded.items()})


def _solve_linear_system(matrix, rhs):
    """
    Solve a square system of linear equations with exact fractions (Gaussian elimination).

    Returns None if the system is singular.
    """
    size = len(matrix)
    rows = [
        [Fraction(entry) for entry in row] + [Fraction(value)] for row, value in zip(matrix, rhs)
    ]
    for col in range(size):
        pivot = next((r for r in range(col, size) if rows[r][col] != 0), None)
        if pivot is None:
            return None
        rows[col], rows[pivot] = rows[pivot], rows[col]
        pivot_value = rows[col][col]
        rows[col] = [entry / pivot_value for entry in rows[col]]
        for r in range(size):
            if r != col and rows[r][col] != 0:
                factor = rows[r][col]
                rows[r] = [
                    entry - factor * pivot_entry for entry, pivot_entry in zip(rows[r], rows[col])
                ]
    return [row[-1] for row in rows]


def _check_sd_efficiency_brute_force(alternatives, constraints):
    """
    Decide SD-efficiency exactly by enumerating all vertices of the feasible polytope.

    A vertex is determined by the equation `sum_x q(x) = 1` together with `n - 1` linearly
    independent tight inequalities (`n` being the number of alternatives). Since the objective
    is linear and the polytope is bounded and non-empty, the optimum is attained at a vertex.
    The running time is exponential in the number of alternatives, hence this algorithm is only
    suitable for small instances.
    """
    num_alt = len(alternatives)
    index = {alt: i for i, alt in enumerate(alternatives)}

    # inequalities `row * q >= bound`: non-negativity and SD-constraints (without duplicates)
    inequalities = []
    for alt in alternatives:
        row = [0] * num_alt
        row[index[alt]] = 1
        inequalities.append((tuple(row), Fraction(0)))
    for upper_contour_set, lower_bound in constraints:
        row = [0] * num_alt
        for alt in upper_contour_set:
            row[index[alt]] = 1
        inequalities.append((tuple(row), lower_bound))
    inequalities = list(dict.fromkeys(inequalities))

    objective = [0] * num_alt
    for upper_contour_set, _ in constraints:
        for alt in upper_contour_set:
            objective[index[alt]] += 1
    constant = sum(lower_bound for _, lower_bound in constraints)

    best_improvement = Fraction(0)
    best_vertex = None
    for tight in itertools.combinations(inequalities, num_alt - 1):
        matrix = [[1] * num_alt] + [row for row, _ in tight]
        rhs = [1] + [bound for _, bound in tight]
        vertex = _solve_linear_system(matrix, rhs)
        if vertex is None:
            continue
        if any(
            sum(coeff * value for coeff, value in zip(row, vertex)) < bound
            for row, bound in inequalities
        ):
            continue
        improvement = sum(coeff * value for coeff, value in zip(objective, vertex)) - constant
        if improvement > best_improvement:
            best_improvement = improvement
            best_vertex = vertex

    output.debug(f"Maximal total SD-improvement (brute-force): {best_improvement}")
    if best_vertex is None:
        return True, {}
    dominating_lottery = Lottery({alt: best_vertex[index[alt]] for alt in alternatives})
    return False, {"dominating_lottery": dominating_lottery}
