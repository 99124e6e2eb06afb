#!/usr/bin/env python3
import argparse
import json
import os
import time
from pathlib import Path

from parallel_simplex import LPProblem, ParallelSolver, PoolOptions
from scripts.generate_instances import generate_random_lp


def load_example(name: str) -> LPProblem:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return LPProblem.model_validate(json.loads(path.read_text()))


def main() -> None:
    parser = argparse.ArgumentParser(description="Time a batch of random LPs for several pool sizes.")
    parser.add_argument("--count", type=int, default=200, help="Problems per batch")
    parser.add_argument("--vars", type=int, default=12, help="Variables per problem")
    parser.add_argument("--constraints", type=int, default=10, help="Constraints per problem")
    args = parser.parse_args()

    problems = [load_example("diet_lp.json")]
    problems += [generate_random_lp(args.vars, args.constraints, seed) for seed in range(args.count)]

    print("threads,problems,solved,total_iterations,time_ms")
    for threads in sorted({1, os.cpu_count() or 1}):
        with ParallelSolver(PoolOptions(threads=threads)) as solver:
            start = time.perf_counter()
            solutions = solver.solve_batch(problems)
            elapsed_ms = (time.perf_counter() - start) * 1000
        solved = sum(1 for solution in solutions if solution.success)
        iterations = sum(solution.iterations for solution in solutions)
        print(f"{threads},{len(problems)},{solved},{iterations},{elapsed_ms:.2f}")


if __name__ == "__main__":
    main()
