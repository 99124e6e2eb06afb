import pytest

from parallel_simplex import server
from parallel_simplex.schemas import LPProblem, SolveOptions


@pytest.fixture(autouse=True)
def fresh_solver(monkeypatch):
    monkeypatch.setenv("PARALLEL_SIMPLEX_THREADS", "2")
    monkeypatch.setattr(server, "_solver", None)
    yield
    if server._solver is not None:
        server._solver.shutdown()


def test_solve_lp_tool_returns_json_payload():
    payload = server.solve_lp(LPProblem(c=[2.0, 3.0], A=[[1.0, 1.0], [1.0, 0.0]], b=[4.0, 2.0], maximize=True))

    assert payload["exitflag"] == 1
    assert payload["status"] == "optimal"
    assert payload["fval"] == pytest.approx(12.0, abs=1e-6)
    assert payload["answer_data"][0] == "status: optimal (exitflag 1)"


def test_solve_lp_batch_tool_keeps_order():
    problems = [
        LPProblem(name="first", c=[1.0], A=[[1.0]], b=[3.0], maximize=True),
        LPProblem(name="second", c=[1.0], maximize=True),
    ]
    first, second = server.solve_lp_batch(problems, SolveOptions())

    assert first["fval"] == pytest.approx(3.0)
    assert second["status"] == "unbounded"
    assert second["exitflag"] == -1


def test_pool_status_uses_env_thread_count():
    assert server.pool_status() == {"threads": 2, "pending_tasks": 0}
