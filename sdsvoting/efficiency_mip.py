"""
Search for SD-improvements of a lottery via a linear program (LP) with Python MIP.
"""

import mip
from sdsvoting.output import output


ACCURACY = 1e-8


def _find_sd_improvement_mip(alternatives, constraints, solver_id):
    """
    Maximize the total SD-improvement over a given lottery, using Python MIP.

    Parameters
    ----------
    alternatives : list
        The alternatives (one LP variable per alternative).
    constraints : list of tuple
        Pairs `(upper_contour_set, lower_bound)`, one for every agent and every proper upper
        contour set of this agent. The lower bound is the probability of the upper contour
        set under the given lottery.
    solver_id : str
        Either "cbc" or "gurobi".

    Returns
    -------
    improvement : float
        The maximum of `sum(q(U) - p(U))` over all lotteries `q` that weakly SD-dominate `p`
        for every agent.
    solution : dict
        Probabilities (floats) of an optimal lottery `q`.
    """
    if solver_id not in ["gurobi", "cbc"]:
        raise ValueError(f"Solver {solver_id} not known in Python MIP.")

    model = mip.Model(solver_name=solver_id)
    # note: verbose = 1 causes issues with unittests, output is printed too late
    model.verbose = 0

    # `prob[alt]` is the probability of `alt` in the improving lottery
    prob = {
        alt: model.add_var(var_type=mip.CONTINUOUS, lb=0.0, ub=1.0, name=f"prob{i}")
        for i, alt in enumerate(alternatives)
    }

    # constraint: probabilities sum to 1
    model += mip.xsum(prob.values()) == 1

    # constraint: the new lottery weakly SD-dominates the old one for every agent
    for upper_contour_set, lower_bound in constraints:
        model += mip.xsum(prob[alt] for alt in upper_contour_set) >= float(lower_bound)

    model.objective = mip.maximize(
        mip.xsum(prob[alt] for upper_contour_set, _ in constraints for alt in upper_contour_set)
    )
    model.opt_tol = ACCURACY
    model.infeas_tol = ACCURACY

    output.debug2(
        f"LP with {len(alternatives)} variables and {len(constraints)} SD-constraints."
    )
    status = model.optimize()
    output.debug(f"Python MIP ({solver_id}) returned status {status}.")

    # the old lottery is always feasible and the feasible region is bounded
    if status != mip.OptimizationStatus.OPTIMAL:
        raise RuntimeError(f"Python MIP returned an unexpected status code: {status}")

    improvement = model.objective_value - float(sum(bound for _, bound in constraints))
    solution = {alt: prob[alt].x for alt in alternatives}
    return improvement, solution
