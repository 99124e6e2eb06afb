import os
from enum import IntEnum
from typing import List, Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

Status = Literal[
    "optimal",
    "infeasible",
    "unbounded",
    "iteration_limit",
    "invalid_input",
    "verification_failed",
    "pool_error",
]

THREADS_ENV = "PARALLEL_SIMPLEX_THREADS"


class ExitFlag(IntEnum):
    SUCCESS = 1
    UNBOUNDED_OR_INFEASIBLE = -1
    INFEASIBLE_AFTER_VERIFICATION = -2


class LPProblem(BaseModel):
    """
    min/max c'x  s.t.  A x <= b,  Aeq x == beq,  lb <= x <= ub.
    Empty lb/ub mean 0 and +inf for every variable.
    """

    name: str = "problem"
    c: List[float]
    A: List[List[float]] = Field(default_factory=list)
    b: List[float] = Field(default_factory=list)
    Aeq: List[List[float]] = Field(default_factory=list)
    beq: List[float] = Field(default_factory=list)
    lb: List[float] = Field(default_factory=list)
    ub: List[float] = Field(default_factory=list)
    maximize: bool = False

    @model_validator(mode="after")
    def _check_shapes(self) -> "LPProblem":
        n = len(self.c)
        for label, rows, rhs, rhs_label in (("A", self.A, self.b, "b"), ("Aeq", self.Aeq, self.beq, "beq")):
            if len(rows) != len(rhs):
                raise ValueError(f"{label} has {len(rows)} rows but {rhs_label} has {len(rhs)} entries.")
            for idx, row in enumerate(rows):
                if len(row) != n:
                    raise ValueError(f"{label} row {idx} has {len(row)} columns, expected {n}.")
        for label, bounds in (("lb", self.lb), ("ub", self.ub)):
            if bounds and len(bounds) != n:
                raise ValueError(f"{label} has {len(bounds)} entries, expected {n}.")
        return self

    @property
    def num_vars(self) -> int:
        return len(self.c)

    def lower_bounds(self) -> np.ndarray:
        return np.array(self.lb, dtype=float) if self.lb else np.zeros(self.num_vars)

    def upper_bounds(self) -> np.ndarray:
        return np.array(self.ub, dtype=float) if self.ub else np.full(self.num_vars, np.inf)


class SolveOptions(BaseModel):
    max_iters: int = Field(default=1000, ge=1)
    tol: float = 1e-9
    feasibility_tol: float = 1e-6


class PoolOptions(BaseModel):
    threads: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)

    @classmethod
    def from_env(cls) -> "PoolOptions":
        raw = os.environ.get(THREADS_ENV)
        if raw is None or not raw.strip():
            return cls()
        return cls(threads=int(raw))


class Solution(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: List[float]
    fval: float
    exitflag: ExitFlag
    status: Status
    message: str = ""
    iterations: int = 0
    elapsed_ms: float = 0.0
    problem_data: List[str] = Field(default_factory=list)
    answer_data: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.exitflag == ExitFlag.SUCCESS

    @classmethod
    def failure(
        cls,
        num_vars: int,
        exitflag: ExitFlag,
        status: Status,
        message: str,
        iterations: int = 0,
        elapsed_ms: float = 0.0,
    ) -> "Solution":
        return cls(
            x=[0.0] * num_vars,
            fval=0.0,
            exitflag=exitflag,
            status=status,
            message=message,
            iterations=iterations,
            elapsed_ms=elapsed_ms,
        )

