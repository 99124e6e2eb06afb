"""Dense two-phase simplex for parallel_simplex."""

from .simplex import EngineStatus, SimplexEngine, simplex_solve, solve_tableau
from .standard_form import Tableau, build_tableau

__all__ = [
    "EngineStatus",
    "SimplexEngine",
    "Tableau",
    "build_tableau",
    "simplex_solve",
    "solve_tableau",
]
