"""Two-phase simplex LP solving dispatched over a priority worker pool."""

from .dispatcher import ParallelSolver, as_problem
from .errors import InvalidProblemError, VerificationError
from .lp.simplex import simplex_solve
from .pool import Priority, PoolStoppedError, PriorityTaskQueue, WorkerPool
from .schemas import ExitFlag, LPProblem, PoolOptions, Solution, SolveOptions

__all__ = [
    "ExitFlag",
    "InvalidProblemError",
    "LPProblem",
    "ParallelSolver",
    "PoolOptions",
    "PoolStoppedError",
    "Priority",
    "PriorityTaskQueue",
    "Solution",
    "SolveOptions",
    "VerificationError",
    "WorkerPool",
    "as_problem",
    "simplex_solve",
]
