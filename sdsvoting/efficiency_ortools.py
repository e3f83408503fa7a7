"""
Search for SD-improvements of a lottery via a linear program (LP) with the OR-Tools GLOP solver.
"""

from ortools.linear_solver import pywraplp
from sdsvoting.output import output


def _find_sd_improvement_ortools(alternatives, constraints):
    """
    Maximize the total SD-improvement over a given lottery, using OR-Tools.

    See `efficiency_mip._find_sd_improvement_mip()` for the meaning of parameters and
    return values.
    """
    solver = pywraplp.Solver.CreateSolver("GLOP")
    if solver is None:
        raise RuntimeError("OR-Tools could not create the GLOP solver.")

    prob = {alt: solver.NumVar(0.0, 1.0, f"prob{i}") for i, alt in enumerate(alternatives)}

    solver.Add(solver.Sum(list(prob.values())) == 1)
    for upper_contour_set, lower_bound in constraints:
        solver.Add(solver.Sum([prob[alt] for alt in upper_contour_set]) >= float(lower_bound))

    solver.Maximize(
        solver.Sum(
            [prob[alt] for upper_contour_set, _ in constraints for alt in upper_contour_set]
        )
    )

    output.debug2(
        f"LP with {len(alternatives)} variables and {len(constraints)} SD-constraints."
    )
    status = solver.Solve()
    output.debug(f"OR-Tools (GLOP) returned status {status}.")

    if status != pywraplp.Solver.OPTIMAL:
        raise RuntimeError(f"OR-Tools returned an unexpected status code: {status}")

    improvement = solver.Objective().Value() - float(sum(bound for _, bound in constraints))
    solution = {alt: prob[alt].solution_value() for alt in alternatives}
    return improvement, solution
