#!/usr/bin/env python3
"""
Draw a snowflake as filled hexagons.

Reads a .npz written by run_snowflake.py, or runs a fresh simulation with
--steps. Attached cells are drawn in ice blue, the growth front in orange.
"""

import argparse
import os
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import PolyCollection

from snowflake_sim import SnowflakeParams, SnowflakeSimulator, hex_to_pixel, utils

ICE_COLOR = "#99ccff"
FRONT_COLOR = "#ffcc99"
BG_COLOR = "#222233"

# Flat-topped hexagon corners
_CORNER_ANGLES = np.deg2rad(np.arange(0, 360, 60))


def hex_polygons(coords: np.ndarray, scale: float, fill: float = 0.95) -> np.ndarray:
    """Return an (N, 6, 2) array of hexagon vertices centred on each axial coord."""
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
    cx, cy = hex_to_pixel(coords[:, 0], coords[:, 1], scale)
    radius = scale * fill
    vx = cx[:, None] + radius * np.cos(_CORNER_ANGLES)[None, :]
    vy = cy[:, None] + radius * np.sin(_CORNER_ANGLES)[None, :]
    return np.stack((vx, vy), axis=-1)


def render(result: utils.SnowflakeResult, scale=1.0, title=None, output=None, dpi=300, show=False):
    fig, ax = plt.subplots(figsize=(6, 6))
    fig.patch.set_facecolor(BG_COLOR)
    ax.set_facecolor(BG_COLOR)

    for coords, color in ((result.attached, ICE_COLOR), (result.boundary, FRONT_COLOR)):
        if coords is None or len(coords) == 0:
            continue
        ax.add_collection(PolyCollection(hex_polygons(coords, scale), facecolors=color, edgecolors="none"))

    if result.attached is None or len(result.attached) == 0:
        print("No attached cells to render")
    else:
        extent = hex_polygons(result.attached, scale).reshape(-1, 2)
        pad = 2.0 * scale
        ax.set_xlim(extent[:, 0].min() - pad, extent[:, 0].max() + pad)
        ax.set_ylim(extent[:, 1].min() - pad, extent[:, 1].max() + pad)

    ax.set_aspect("equal")
    ax.axis("off")
    if title:
        ax.set_title(title, pad=10, color="white")

    if output:
        os.makedirs(os.path.dirname(output) if os.path.dirname(output) else '.', exist_ok=True)
        plt.savefig(output, dpi=dpi, bbox_inches="tight", pad_inches=0.1, facecolor=BG_COLOR)
        print(f"Saved figure to {output} @ {dpi} DPI")
    if show:
        plt.show()
    plt.close(fig)


def format_title(meta) -> str:
    if not meta:
        return ""
    parts = [f"step {meta.get('steps', meta.get('step', '?'))}"]
    if "num_attached" in meta:
        parts.append(f"{meta['num_attached']:,} cells")
    params = meta.get("params") or {}
    if "beta" in params:
        parts.append(f"beta={params['beta']}")
    return ", ".join(parts)


def main():
    parser = argparse.ArgumentParser(description="Plot a snowflake as hexagons")
    parser.add_argument("file", nargs="?", default=None, help="Path to .npz result file")
    parser.add_argument("--steps", type=int, default=None, help="Run a fresh simulation instead of loading a file")
    parser.add_argument("--size", type=int, default=30, help="Lattice radius for --steps runs")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--scale", type=float, default=0.3, help="Hexagon size in plot units (default: 0.3)")
    parser.add_argument("--out", default=None, help="Output image path (PNG)")
    parser.add_argument("--dpi", type=int, default=300)
    parser.add_argument("--show", action="store_true", help="Show plot interactively")
    args = parser.parse_args()

    if args.steps is not None:
        sim = SnowflakeSimulator(SnowflakeParams(size=args.size, seed=args.seed))
        sim.run(args.steps)
        result = sim.to_result()
        default_out = Path("results") / f"snowflake_R{args.size}_T{args.steps}.png"
    elif args.file is not None:
        if not os.path.exists(args.file):
            print(f"Error: file not found: {args.file}")
            return 1
        result = utils.load_result(args.file)
        default_out = Path(args.file).with_suffix(".png")
    else:
        parser.error("give a result file or --steps")

    render(
        result,
        scale=args.scale,
        title=format_title(result.meta),
        output=args.out or str(default_out),
        dpi=args.dpi,
        show=args.show,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
