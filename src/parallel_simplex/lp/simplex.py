import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .extract import extract_solution
from .standard_form import Tableau, build_tableau
from ..errors import InvalidProblemError, VerificationError
from ..report import with_report
from ..schemas import ExitFlag, LPProblem, Solution, SolveOptions

LOGGER = logging.getLogger("parallel_simplex.lp.simplex")


class EngineStatus(str, Enum):
    RUNNING = "running"
    OPTIMAL = "optimal"
    UNBOUNDED = "unbounded"
    ITERATION_LIMIT = "iteration_limit"
    INFEASIBLE = "infeasible"


@dataclass
class EngineResult:
    status: EngineStatus
    iterations: int
    message: str = ""


class SimplexEngine:
    """
    Primal simplex over a single tableau using Dantzig's most-negative rule.
    Artificial columns never enter the basis.
    """

    def __init__(self, tableau: Tableau, opts: SolveOptions) -> None:
        self.tableau = tableau
        self.opts = opts
        self.status = EngineStatus.RUNNING
        self.iterations = 0

    def run(self) -> EngineResult:
        tableau = self.tableau
        while self.status is EngineStatus.RUNNING:
            col = self.pivot_column()
            if col is None:
                self.status = self._terminal_status()
                break
            if self.iterations >= self.opts.max_iters:
                self.status = EngineStatus.ITERATION_LIMIT
                break
            row = self.pivot_row(col)
            if row is None:
                self.status = EngineStatus.UNBOUNDED
                break
            LOGGER.debug(
                "phase %s iter %s: pivot (%s, %s), objective %.6g",
                tableau.phase,
                self.iterations,
                row,
                col,
                tableau.objective_value(),
            )
            tableau.pivot(row, col)
            self.iterations += 1
        return EngineResult(status=self.status, iterations=self.iterations)

    def pivot_column(self) -> Optional[int]:
        costs = self.tableau.objective_row.copy()
        costs[self.tableau.artificial_mask()] = np.inf
        if costs.size == 0:
            return None
        col = int(np.argmin(costs))
        if costs[col] >= -self.opts.tol:
            return None
        return col

    def pivot_row(self, col: int) -> Optional[int]:
        column = self.tableau.matrix[:-1, col]
        eligible = column > self.opts.tol
        if not np.any(eligible):
            return None
        ratios = np.full(column.shape, np.inf)
        ratios[eligible] = self.tableau.rhs[eligible] / column[eligible]
        return int(np.argmin(ratios))

    def _terminal_status(self) -> EngineStatus:
        if np.any(self.tableau.rhs < -self.opts.feasibility_tol):
            return EngineStatus.INFEASIBLE
        return EngineStatus.OPTIMAL


def solve_tableau(tableau: Tableau, opts: SolveOptions) -> EngineResult:
    """Run phase 1 (when artificials exist) and phase 2 on the same tableau."""

    iterations = 0
    if tableau.has_artificials:
        phase1 = SimplexEngine(tableau, opts).run()
        iterations += phase1.iterations
        if phase1.status is EngineStatus.ITERATION_LIMIT:
            return EngineResult(phase1.status, iterations, "Hit iteration limit in Phase I.")
        if phase1.status is EngineStatus.UNBOUNDED:
            return EngineResult(
                phase1.status,
                iterations,
                "Phase I detected unbounded auxiliary problem (likely modelling error).",
            )
        if phase1.status is EngineStatus.INFEASIBLE:
            return EngineResult(phase1.status, iterations, "Infeasible.")

        residual = [i for i in tableau.artificial_rows() if abs(tableau.rhs[i]) > opts.feasibility_tol]
        if residual:
            LOGGER.debug("Phase I left %s artificial(s) above tolerance", len(residual))
            return EngineResult(EngineStatus.INFEASIBLE, iterations, "Infeasible.")

        iterations += tableau.drive_out_artificials(opts.tol)
        tableau.drop_artificials()
        tableau.install_objective()

    phase2 = SimplexEngine(tableau, opts).run()
    iterations += phase2.iterations
    messages = {
        EngineStatus.OPTIMAL: "Optimal solution found.",
        EngineStatus.UNBOUNDED: "Unbounded.",
        EngineStatus.ITERATION_LIMIT: "Hit iteration limit in Phase II.",
        EngineStatus.INFEASIBLE: "Phase II ended with a negative basic value; treating as infeasible.",
    }
    return EngineResult(phase2.status, iterations, messages[phase2.status])


def simplex_solve(problem: LPProblem, opts: SolveOptions | None = None) -> Solution:
    """
    Two-phase tableau simplex for a single LP. Never raises for solver
    outcomes; failures are reported through ``exitflag`` and ``message``.
    """

    opts = opts or SolveOptions()
    start = time.perf_counter()
    n = problem.num_vars

    def elapsed() -> float:
        return (time.perf_counter() - start) * 1000

    try:
        tableau = build_tableau(problem)
    except InvalidProblemError as exc:
        LOGGER.warning("Rejected problem %r: %s", problem.name, exc)
        solution = Solution.failure(
            n, ExitFlag.UNBOUNDED_OR_INFEASIBLE, "invalid_input", str(exc), elapsed_ms=elapsed()
        )
        return with_report(problem, solution)

    result = solve_tableau(tableau, opts)
    if result.status is not EngineStatus.OPTIMAL:
        LOGGER.warning("Problem %r: %s", problem.name, result.message)
        solution = Solution.failure(
            n,
            ExitFlag.UNBOUNDED_OR_INFEASIBLE,
            result.status.value,
            result.message,
            iterations=result.iterations,
            elapsed_ms=elapsed(),
        )
        return with_report(problem, solution)

    try:
        x, fval = extract_solution(tableau, problem, opts)
    except VerificationError as exc:
        LOGGER.warning("Problem %r failed verification: %s", problem.name, exc)
        solution = Solution.failure(
            n,
            ExitFlag.INFEASIBLE_AFTER_VERIFICATION,
            "verification_failed",
            f"Solution failed verification: {exc}",
            iterations=result.iterations,
            elapsed_ms=elapsed(),
        )
        return with_report(problem, solution)

    solution = Solution(
        x=[float(v) for v in x],
        fval=fval,
        exitflag=ExitFlag.SUCCESS,
        status="optimal",
        message=result.message,
        iterations=result.iterations,
        elapsed_ms=elapsed(),
    )
    return with_report(problem, solution)

