import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from ..errors import InvalidProblemError
from ..schemas import LPProblem

LOGGER = logging.getLogger("parallel_simplex.lp.standard_form")

STRUCTURAL = "structural"
SLACK = "slack"
SURPLUS = "surplus"
ARTIFICIAL = "artificial"

_UNIT_TOL = 1e-12


@dataclass
class Tableau:
    """
    Dense simplex tableau. Rows 0..m-1 are constraints, the last row is the
    (negated, maximise-form) objective; the last column is the right-hand side.
    Original variables are recovered as ``x = offsets + expansion @ x_struct``.
    """

    matrix: np.ndarray
    basis: List[int]
    col_types: List[str]
    row_sources: List[str]
    objective: np.ndarray
    objective_constant: float
    expansion: np.ndarray
    offsets: np.ndarray
    phase: int = 2
    dropped_rows: List[str] = field(default_factory=list)

    @property
    def num_rows(self) -> int:
        return self.matrix.shape[0] - 1

    @property
    def num_cols(self) -> int:
        return self.matrix.shape[1] - 1

    @property
    def num_structural(self) -> int:
        return self.expansion.shape[1]

    @property
    def rhs(self) -> np.ndarray:
        return self.matrix[:-1, -1]

    @property
    def objective_row(self) -> np.ndarray:
        return self.matrix[-1, :-1]

    def artificial_mask(self) -> np.ndarray:
        return np.array([kind == ARTIFICIAL for kind in self.col_types], dtype=bool)

    @property
    def has_artificials(self) -> bool:
        return ARTIFICIAL in self.col_types

    def pivot(self, row: int, col: int) -> None:
        T = self.matrix
        T[row] /= T[row, col]
        factors = T[:, col].copy()
        factors[row] = 0.0
        T -= np.outer(factors, T[row])
        T[:, col] = 0.0
        T[row, col] = 1.0
        self.basis[row] = col

    def artificial_rows(self) -> List[int]:
        return [i for i, j in enumerate(self.basis) if self.col_types[j] == ARTIFICIAL]

    def drive_out_artificials(self, tol: float) -> int:
        """
        Pivot zero-level artificials out of the basis. Rows with no usable
        non-artificial entry are linearly dependent and are removed.
        Returns the number of pivots performed.
        """

        pivots = 0
        for row in reversed(self.artificial_rows()):
            candidates = [
                j
                for j in range(self.num_cols)
                if self.col_types[j] != ARTIFICIAL and abs(self.matrix[row, j]) > tol
            ]
            if candidates:
                self.pivot(row, candidates[0])
                pivots += 1
                continue
            LOGGER.debug("Dropping redundant row %s (%s)", row, self.row_sources[row])
            self.dropped_rows.append(self.row_sources[row])
            self.matrix = np.delete(self.matrix, row, axis=0)
            del self.basis[row]
            del self.row_sources[row]
        return pivots

    def drop_artificials(self) -> None:
        keep = [j for j, kind in enumerate(self.col_types) if kind != ARTIFICIAL]
        if len(keep) == len(self.col_types):
            return
        if any(self.col_types[j] == ARTIFICIAL for j in self.basis):
            raise RuntimeError("Cannot drop artificial columns while one is basic.")
        remap = {old: new for new, old in enumerate(keep)}
        self.matrix = self.matrix[:, keep + [self.num_cols]]
        self.basis = [remap[j] for j in self.basis]
        self.col_types = [self.col_types[j] for j in keep]
        self.objective = self.objective[keep]

    def install_objective(self) -> None:
        """Replace the last row with the true objective, priced out against the basis."""

        row = np.zeros(self.num_cols + 1)
        row[: self.objective.size] = -self.objective
        for i, j in enumerate(self.basis):
            if row[j] != 0.0:
                row -= row[j] * self.matrix[i]
        self.matrix[-1] = row
        self.phase = 2

    def basic_solution(self) -> np.ndarray:
        values = np.zeros(self.num_cols)
        for i, j in enumerate(self.basis):
            values[j] = self.matrix[i, -1]
        return values

    def objective_value(self) -> float:
        return float(self.matrix[-1, -1])


def _expand_variables(problem: LPProblem) -> Tuple[np.ndarray, np.ndarray, List[Tuple[int, float]]]:
    """
    Map original variables onto non-negative structural columns.
    A finite lower bound shifts the variable, a free variable is split into
    a positive and a negative part. Returns (expansion, offsets, upper bounds).
    """

    lb = problem.lower_bounds()
    ub = problem.upper_bounds()
    n = problem.num_vars

    columns: List[Tuple[int, float]] = []
    offsets = np.zeros(n)
    upper: List[Tuple[int, float]] = []
    for j in range(n):
        if np.isposinf(lb[j]) or np.isneginf(ub[j]):
            raise InvalidProblemError(f"Variable {j} has an empty domain (lb {lb[j]}, ub {ub[j]}).")
        if lb[j] > ub[j]:
            raise InvalidProblemError(f"Variable {j} has inconsistent bounds (lb {lb[j]} > ub {ub[j]}).")
        if np.isneginf(lb[j]):
            columns.append((j, 1.0))
            columns.append((j, -1.0))
        else:
            columns.append((j, 1.0))
            offsets[j] = lb[j]
        if np.isfinite(ub[j]):
            upper.append((j, float(ub[j])))

    expansion = np.zeros((n, len(columns)))
    for k, (j, sign) in enumerate(columns):
        expansion[j, k] = sign
    return expansion, offsets, upper


def build_tableau(problem: LPProblem) -> Tableau:
    """
    Convert a general LP into a tableau whose rows all have a non-negative
    right-hand side and an explicit basic variable.
    """

    if problem.num_vars == 0:
        raise InvalidProblemError("Objective vector c is empty.")

    expansion, offsets, upper = _expand_variables(problem)
    n = problem.num_vars
    n_struct = expansion.shape[1]

    A = np.array(problem.A, dtype=float).reshape(len(problem.A), n)
    b = np.array(problem.b, dtype=float)
    Aeq = np.array(problem.Aeq, dtype=float).reshape(len(problem.Aeq), n)
    beq = np.array(problem.beq, dtype=float)

    if upper:
        bound_rows = np.zeros((len(upper), n))
        for k, (j, _) in enumerate(upper):
            bound_rows[k, j] = 1.0
        A = np.vstack([A, bound_rows])
        b = np.concatenate([b, [value for _, value in upper]])

    # Shift into structural space: A x <= b  ->  (A E) x' <= b - A offsets
    A_std = A @ expansion
    b_std = b - A @ offsets
    Aeq_std = Aeq @ expansion
    beq_std = beq - Aeq @ offsets

    m_ineq = A_std.shape[0]
    m_eq = Aeq_std.shape[0]
    m = m_ineq + m_eq

    row_sources = [f"ineq[{i}]" for i in range(len(problem.A))]
    row_sources += [f"bound[x{j}]" for j, _ in upper]
    row_sources += [f"eq[{i}]" for i in range(m_eq)]

    # One slack (<=) or surplus (flipped >=) column per inequality row.
    col_types = [STRUCTURAL] * n_struct + [SLACK] * m_ineq
    body = np.zeros((m, n_struct + m_ineq))
    rhs = np.zeros(m)
    basis: List[int] = [-1] * m

    for i in range(m_ineq):
        slack_col = n_struct + i
        if b_std[i] >= 0:
            body[i, :n_struct] = A_std[i]
            body[i, slack_col] = 1.0
            rhs[i] = b_std[i]
            basis[i] = slack_col
        else:
            body[i, :n_struct] = -A_std[i]
            body[i, slack_col] = -1.0
            rhs[i] = -b_std[i]
            col_types[slack_col] = SURPLUS

    for k in range(m_eq):
        i = m_ineq + k
        sign = -1.0 if beq_std[k] < 0 else 1.0
        body[i, :n_struct] = sign * Aeq_std[k]
        rhs[i] = sign * beq_std[k]

    for i in range(m_ineq, m):
        col = _identity_column(body, i, basis)
        if col is not None:
            basis[i] = col

    missing = [i for i in range(m) if basis[i] < 0]
    if missing:
        artificial = np.zeros((m, len(missing)))
        for k, i in enumerate(missing):
            artificial[i, k] = 1.0
            basis[i] = body.shape[1] + k
        body = np.hstack([body, artificial])
        col_types += [ARTIFICIAL] * len(missing)

    num_cols = body.shape[1]
    matrix = np.zeros((m + 1, num_cols + 1))
    matrix[:m, :num_cols] = body
    matrix[:m, -1] = rhs

    c = np.array(problem.c, dtype=float)
    c_struct = c @ expansion
    objective = np.zeros(num_cols)
    objective[:n_struct] = c_struct if problem.maximize else -c_struct

    tableau = Tableau(
        matrix=matrix,
        basis=basis,
        col_types=col_types,
        row_sources=row_sources,
        objective=objective,
        objective_constant=float(c @ offsets),
        expansion=expansion,
        offsets=offsets,
    )

    if missing:
        # Phase-1 row: maximise -sum(artificials), priced out against the artificial basis.
        phase1 = np.zeros(num_cols + 1)
        phase1[[basis[i] for i in missing]] = 1.0
        for i in missing:
            phase1 -= matrix[i]
        tableau.matrix[-1] = phase1
        tableau.phase = 1
    else:
        tableau.install_objective()

    LOGGER.debug(
        "Built %sx%s tableau (%s structural, %s slack/surplus, %s artificial)",
        m + 1,
        num_cols + 1,
        n_struct,
        m_ineq,
        len(missing),
    )
    return tableau


def _identity_column(body: np.ndarray, row: int, basis: List[int]) -> int | None:
    """First column that is 1 in ``row`` and 0 in every other constraint row."""

    taken = set(basis)
    for j in range(body.shape[1]):
        if j in taken or abs(body[row, j] - 1.0) > _UNIT_TOL:
            continue
        others = np.delete(body[:, j], row)
        if np.all(np.abs(others) <= _UNIT_TOL):
            return j
    return None
