import logging
import threading
from typing import List

from mcp.server.fastmcp import FastMCP

from .dispatcher import ParallelSolver
from .schemas import LPProblem, PoolOptions, SolveOptions

LOGGER = logging.getLogger("parallel_simplex.server")

mcp = FastMCP("Parallel Simplex")

_solver: ParallelSolver | None = None
_solver_lock = threading.Lock()


def get_solver() -> ParallelSolver:
    global _solver
    with _solver_lock:
        if _solver is None:
            _solver = ParallelSolver(PoolOptions.from_env())
            LOGGER.info("Created shared solver with %s thread(s)", _solver.thread_count())
        return _solver


@mcp.tool()
def solve_lp(problem: LPProblem, options: SolveOptions | None = None) -> dict:
    "Solve one linear program with the two-phase simplex and return the solution dict."
    return get_solver().solve_problem(problem, options=options).model_dump(mode="json")


@mcp.tool()
def solve_lp_batch(problems: List[LPProblem], options: SolveOptions | None = None) -> list:
    "Solve several linear programs concurrently; results keep the input order."
    solutions = get_solver().solve_batch(problems, options=options)
    return [solution.model_dump(mode="json") for solution in solutions]


@mcp.tool()
def pool_status() -> dict:
    "Report worker and pending-task counts of the shared solver pool."
    solver = get_solver()
    return {"threads": solver.thread_count(), "pending_tasks": solver.pending_tasks()}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
    mcp.run()
