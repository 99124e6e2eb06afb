import numpy as np
import pytest

from parallel_simplex.errors import VerificationError
from parallel_simplex.lp.extract import extract_solution, verify_solution
from parallel_simplex.lp.standard_form import ARTIFICIAL, SLACK, build_tableau
from parallel_simplex.schemas import LPProblem, SolveOptions

TOL = 1e-6


def test_feasible_point_has_no_violations():
    problem = LPProblem(c=[1.0, 1.0], A=[[1.0, 1.0]], b=[4.0], ub=[3.0, 3.0])
    tableau = build_tableau(problem)

    assert verify_solution(tableau, problem, np.array([1.0, 1.0]), TOL) == []


def test_bound_violations():
    problem = LPProblem(c=[1.0], ub=[2.0])
    tableau = build_tableau(problem)

    assert verify_solution(tableau, problem, np.array([-1.0]), TOL) == ["x[0] = -1 below lower bound 0"]
    assert verify_solution(tableau, problem, np.array([3.0]), TOL) == ["x[0] = 3 above upper bound 2"]


def test_small_drift_within_tolerance_is_accepted():
    problem = LPProblem(c=[1.0], A=[[1.0]], b=[1.0])
    tableau = build_tableau(problem)

    assert verify_solution(tableau, problem, np.array([1.0 + 5e-7]), TOL) == []
    assert verify_solution(tableau, problem, np.array([-5e-7]), TOL) == []


def test_inequality_violation():
    problem = LPProblem(c=[1.0], A=[[1.0]], b=[1.0])
    tableau = build_tableau(problem)

    assert verify_solution(tableau, problem, np.array([5.0]), TOL) == ["inequality 0: 5 > 1"]


def test_equality_violation():
    problem = LPProblem(c=[1.0, 1.0], Aeq=[[1.0, 1.0]], beq=[2.0])
    tableau = build_tableau(problem)

    assert verify_solution(tableau, problem, np.array([1.0, 0.0]), TOL) == ["equality 0: 1 != 2"]


def test_negative_basic_slack():
    problem = LPProblem(c=[1.0], A=[[1.0]], b=[1.0])
    tableau = build_tableau(problem)
    assert tableau.col_types[tableau.basis[0]] == SLACK
    tableau.matrix[0, -1] = -0.5

    assert verify_solution(tableau, problem, np.array([0.0]), TOL) == ["basic slack in row 0 is negative (-0.5)"]


def test_basic_artificial():
    problem = LPProblem(c=[1.0], A=[[-1.0]], b=[-5.0])
    tableau = build_tableau(problem)
    assert tableau.col_types[tableau.basis[0]] == ARTIFICIAL

    assert verify_solution(tableau, problem, np.array([5.0]), TOL) == ["artificial variable still basic in row 0"]


def test_extract_solution_raises_with_every_violation():
    problem = LPProblem(c=[1.0], A=[[-1.0]], b=[-5.0])
    tableau = build_tableau(problem)

    with pytest.raises(VerificationError) as excinfo:
        extract_solution(tableau, problem, SolveOptions())

    assert excinfo.value.violations == [
        "inequality 0: 0 > -5",
        "artificial variable still basic in row 0",
    ]
