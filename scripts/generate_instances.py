#!/usr/bin/env python3
import argparse
import json
import random
from pathlib import Path
from typing import Optional

from parallel_simplex.schemas import LPProblem


def generate_random_lp(num_vars: int, num_constraints: int, seed: Optional[int] = None) -> LPProblem:
    rng = random.Random(seed)
    A = [[rng.uniform(0.5, 5.0) for _ in range(num_vars)] for _ in range(num_constraints)]
    b = [rng.uniform(num_vars * 2.0, num_vars * 6.0) for _ in range(num_constraints)]
    c = [rng.uniform(1.0, 4.0) for _ in range(num_vars)]
    return LPProblem(name=f"random-{seed}", c=c, A=A, b=b, maximize=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random feasible LP instances.")
    parser.add_argument("--vars", type=int, default=3, help="Number of variables")
    parser.add_argument("--constraints", type=int, default=3, help="Number of constraints")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Optional output file")
    args = parser.parse_args()

    instances = [
        generate_random_lp(args.vars, args.constraints, (args.seed or 0) + idx)
        for idx in range(args.count)
    ]
    payload = [instance.model_dump() for instance in instances]

    if args.out:
        Path(args.out).write_text(json.dumps(payload, indent=2))
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
