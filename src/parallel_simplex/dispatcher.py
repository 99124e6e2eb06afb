import logging
from concurrent.futures import Future
from typing import Any, List, Mapping, Optional, Sequence, Union

from .lp.simplex import simplex_solve
from .pool import Priority, WorkerPool
from .report import with_report
from .schemas import ExitFlag, LPProblem, PoolOptions, Solution, SolveOptions

LOGGER = logging.getLogger("parallel_simplex.dispatcher")

ProblemSpec = Union[LPProblem, Mapping[str, Any], Sequence[Any]]

_POSITIONAL_FIELDS = ("c", "A", "b", "Aeq", "beq", "lb", "ub", "maximize")


def as_problem(spec: ProblemSpec) -> LPProblem:
    """Accept an LPProblem, a field mapping, or a positional tuple in ``solve`` argument order."""
    if isinstance(spec, LPProblem):
        return spec
    if isinstance(spec, Mapping):
        return LPProblem.model_validate(dict(spec))
    values = list(spec)
    if len(values) > len(_POSITIONAL_FIELDS):
        raise ValueError(f"Expected at most {len(_POSITIONAL_FIELDS)} positional fields, got {len(values)}.")
    fields = {name: value for name, value in zip(_POSITIONAL_FIELDS, values) if value is not None}
    return LPProblem.model_validate(fields)


class ParallelSolver:
    """
    Solve LPs on a shared worker pool. Every task receives a private deep copy
    of its problem and builds its own tableau, so concurrent solves share no
    solver state.
    """

    def __init__(
        self,
        pool_options: Optional[PoolOptions] = None,
        solve_options: Optional[SolveOptions] = None,
    ) -> None:
        self.pool_options = pool_options or PoolOptions()
        self.solve_options = solve_options or SolveOptions()
        self._pool = WorkerPool(self.pool_options.threads)

    def solve(
        self,
        c: Sequence[float],
        A: Optional[Sequence[Sequence[float]]] = None,
        b: Optional[Sequence[float]] = None,
        Aeq: Optional[Sequence[Sequence[float]]] = None,
        beq: Optional[Sequence[float]] = None,
        lb: Optional[Sequence[float]] = None,
        ub: Optional[Sequence[float]] = None,
        maximize: bool = False,
        priority: int = Priority.NORMAL,
    ) -> Solution:
        problem = as_problem((c, A, b, Aeq, beq, lb, ub, maximize))
        return self.solve_problem(problem, priority=priority)

    def solve_problem(
        self,
        problem: LPProblem,
        priority: int = Priority.NORMAL,
        options: Optional[SolveOptions] = None,
    ) -> Solution:
        return self._resolve(problem, self.submit(problem, priority=priority, options=options))

    def submit(
        self,
        problem: LPProblem,
        priority: int = Priority.NORMAL,
        options: Optional[SolveOptions] = None,
    ) -> "Future[Solution]":
        private = problem.model_copy(deep=True)
        opts = (options or self.solve_options).model_copy()
        return self._pool.submit(lambda: simplex_solve(private, opts), priority=priority)

    def solve_batch(
        self,
        problems: Sequence[ProblemSpec],
        priority: int = Priority.NORMAL,
        options: Optional[SolveOptions] = None,
    ) -> List[Solution]:
        """Submit every problem, then collect results in submission order."""
        parsed = [as_problem(spec) for spec in problems]
        futures = [self.submit(problem, priority=priority, options=options) for problem in parsed]
        LOGGER.debug("Submitted batch of %s problem(s)", len(futures))
        return [self._resolve(problem, future) for problem, future in zip(parsed, futures)]

    def pending_tasks(self) -> int:
        return self._pool.pending_tasks()

    def thread_count(self) -> int:
        return self._pool.thread_count()

    def resize(self, threads: int) -> None:
        self._pool.resize(threads)

    def wait_all(self) -> None:
        self._pool.wait_all()

    def shutdown(self) -> None:
        self._pool.shutdown()

    def __enter__(self) -> "ParallelSolver":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    @staticmethod
    def _resolve(problem: LPProblem, future: "Future[Solution]") -> Solution:
        try:
            return future.result()
        except Exception as exc:
            LOGGER.error("Solve task for %r failed: %s", problem.name, exc)
            solution = Solution.failure(
                problem.num_vars,
                ExitFlag.UNBOUNDED_OR_INFEASIBLE,
                "pool_error",
                f"Solver task failed: {exc}",
            )
            return with_report(problem, solution)
