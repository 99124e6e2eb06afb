"""Plain-text rendering of problems and solutions."""

from typing import List, Sequence

import numpy as np

from .schemas import LPProblem, Solution


def _format_expr(coeffs: Sequence[float]) -> str:
    parts: List[str] = []
    for j, coef in enumerate(coeffs):
        if coef == 0:
            continue
        sign = "-" if coef < 0 else "+"
        magnitude = abs(coef)
        term = f"x{j}" if magnitude == 1 else f"{magnitude:g} x{j}"
        if not parts:
            parts.append(term if sign == "+" else f"-{term}")
        else:
            parts.append(f"{sign} {term}")
    return " ".join(parts) if parts else "0"


def describe_problem(problem: LPProblem) -> List[str]:
    sense = "maximize" if problem.maximize else "minimize"
    lines = [f"{problem.name}: {sense} {_format_expr(problem.c)}"]
    if problem.A or problem.Aeq:
        lines.append("subject to")
    for row, rhs in zip(problem.A, problem.b):
        lines.append(f"  {_format_expr(row)} <= {rhs:g}")
    for row, rhs in zip(problem.Aeq, problem.beq):
        lines.append(f"  {_format_expr(row)} = {rhs:g}")

    lb = problem.lower_bounds()
    ub = problem.upper_bounds()
    for j in range(problem.num_vars):
        if lb[j] == 0 and np.isposinf(ub[j]):
            continue
        low = "-inf" if np.isneginf(lb[j]) else f"{lb[j]:g}"
        high = "+inf" if np.isposinf(ub[j]) else f"{ub[j]:g}"
        lines.append(f"  {low} <= x{j} <= {high}")
    return lines


def describe_solution(solution: Solution) -> List[str]:
    lines = [f"status: {solution.status} (exitflag {int(solution.exitflag)})"]
    if solution.message:
        lines.append(solution.message)
    if solution.success:
        lines.append(f"fval = {solution.fval:.6g}")
        lines.extend(f"x{j} = {value:.6g}" for j, value in enumerate(solution.x))
    lines.append(f"iterations: {solution.iterations}, elapsed: {solution.elapsed_ms:.3f} ms")
    return lines


def with_report(problem: LPProblem, solution: Solution) -> Solution:
    """Return a copy of ``solution`` carrying the rendered problem and answer lines."""
    return solution.model_copy(
        update={
            "problem_data": describe_problem(problem),
            "answer_data": describe_solution(solution),
        }
    )
