#!/usr/bin/env python3
"""
Single Snowflake Simulation Runner

Runs one hexagonal-lattice growth simulation and saves the attached cells
to a .npz file for plotting.
"""

import argparse
import sys
import time
from dataclasses import fields
from pathlib import Path

from snowflake_sim import SnowflakeParams, SnowflakeSimulator, utils


DEFAULT_STEPS = 2000
DEFAULT_SEED = 42


def build_params(args):
    """
    Merge an optional parameter file with command-line overrides.

    Command-line values win over the file; the file wins over the built-in
    defaults. Returns (params, n_steps).
    """
    values = {}
    if args.params is not None:
        values.update(utils.load_params(args.params))
    n_steps = values.pop("n_steps", DEFAULT_STEPS)
    if args.steps is not None:
        n_steps = args.steps

    for f in fields(SnowflakeParams):
        override = getattr(args, f.name, None)
        if override is not None:
            values[f.name] = override
    if args.grid_size is not None:
        values["size"] = args.grid_size // 2
    if values.get("seed") is None:
        values["seed"] = DEFAULT_SEED
    return SnowflakeParams(**values), int(n_steps)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a single snowflake growth simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--steps", type=int, default=None,
                        help=f"Number of steps to run (default: file n_steps, else {DEFAULT_STEPS})")
    parser.add_argument("--params", type=str, default=None, help="JSON or TOML parameter file")
    parser.add_argument("--size", type=int, default=None, help="Lattice radius in cells")
    parser.add_argument("--grid-size", type=int, default=None, help="Lattice diameter (odd); overrides --size")
    for name in ("beta", "theta", "alpha", "kappa", "mu", "upsilon", "sigma", "gamma"):
        parser.add_argument(f"--{name}", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None,
                        help=f"Random seed for the noise stream (default: file seed, else {DEFAULT_SEED})")
    parser.add_argument("--out", type=str, default=None, help="Output .npz file path (auto-generated if not provided)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    args.verbose = not args.quiet

    params, n_steps = build_params(args)

    print(f"Running snowflake simulation: radius={params.size}, steps={n_steps}, seed={params.seed}")
    start_time = time.time()
    sim = SnowflakeSimulator(params)
    sim.run(n_steps)
    result = sim.to_result()
    elapsed_time = time.time() - start_time

    if args.out is None:
        output_dir = Path("results")
        output_dir.mkdir(exist_ok=True)
        args.out = str(
            output_dir / f"snowflake_R{params.size}_T{n_steps}_S{params.seed}_{utils.now_str()}.npz"
        )

    utils.save_result(args.out, result)

    meta = result.meta
    print(f"\nSimulation completed successfully!")
    print(f"   Time elapsed: {elapsed_time:.2f} seconds")
    print(f"   Attached cells: {meta['num_attached']} (radius {meta['radius']})")
    print(f"   Output saved to: {args.out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
