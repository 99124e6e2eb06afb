import logging
from typing import List, Tuple

import numpy as np

from .standard_form import ARTIFICIAL, SLACK, Tableau
from ..errors import VerificationError
from ..schemas import LPProblem, SolveOptions

LOGGER = logging.getLogger("parallel_simplex.lp.extract")


def extract_solution(tableau: Tableau, problem: LPProblem, opts: SolveOptions) -> Tuple[np.ndarray, float]:
    """
    Read the optimal point and objective value off a post-optimal tableau and
    re-check it against the original (non-standardised) problem.
    """

    values = tableau.basic_solution()
    x = tableau.offsets + tableau.expansion @ values[: tableau.num_structural]
    x[np.abs(x) < 1e-12] = 0.0

    z = tableau.objective_value()
    if problem.maximize:
        fval = tableau.objective_constant + z
    else:
        fval = tableau.objective_constant - z

    violations = verify_solution(tableau, problem, x, opts.feasibility_tol)
    if violations:
        raise VerificationError(violations)
    return x, float(fval)


def verify_solution(tableau: Tableau, problem: LPProblem, x: np.ndarray, tol: float) -> List[str]:
    violations: List[str] = []

    lb = problem.lower_bounds()
    ub = problem.upper_bounds()
    for j in np.flatnonzero(x < lb - tol):
        violations.append(f"x[{j}] = {x[j]:.6g} below lower bound {lb[j]:.6g}")
    for j in np.flatnonzero(x > ub + tol):
        violations.append(f"x[{j}] = {x[j]:.6g} above upper bound {ub[j]:.6g}")

    if problem.A:
        lhs = np.array(problem.A, dtype=float) @ x
        b = np.array(problem.b, dtype=float)
        for i in np.flatnonzero(lhs > b + tol):
            violations.append(f"inequality {i}: {lhs[i]:.6g} > {b[i]:.6g}")

    if problem.Aeq:
        lhs = np.array(problem.Aeq, dtype=float) @ x
        beq = np.array(problem.beq, dtype=float)
        for i in np.flatnonzero(np.abs(lhs - beq) > tol):
            violations.append(f"equality {i}: {lhs[i]:.6g} != {beq[i]:.6g}")

    for i, j in enumerate(tableau.basis):
        kind = tableau.col_types[j]
        if kind == SLACK and tableau.rhs[i] < -tol:
            violations.append(f"basic slack in row {i} is negative ({tableau.rhs[i]:.6g})")
        elif kind == ARTIFICIAL:
            violations.append(f"artificial variable still basic in row {i}")

    if violations:
        LOGGER.debug("Verification found %s violation(s)", len(violations))
    return violations
