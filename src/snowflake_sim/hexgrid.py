"""
Axial-coordinate helpers for a hexagonal lattice of fixed radius.

Cells are stored in a flat table; neighbours are resolved once, at
construction, into a padded index array so the numba kernels never touch
Python objects.
"""

from __future__ import annotations

import math
from typing import Dict, List, Tuple

import numpy as np

# Six axial direction offsets (q, r)
HEX_DQ = np.array([1, 0, -1, -1, 0, 1], dtype=np.int64)
HEX_DR = np.array([0, 1, 1, 0, -1, -1], dtype=np.int64)

SQRT3 = math.sqrt(3.0)


def in_lattice(q: int, r: int, size: int) -> bool:
    return abs(q) <= size and abs(r) <= size and abs(q + r) <= size


def hex_coords(size: int) -> np.ndarray:
    """Return an (N, 2) array of every axial coordinate within radius `size`."""
    coords = []
    for q in range(-size, size + 1):
        for r in range(-size, size + 1):
            if abs(q + r) > size:
                continue
            coords.append((q, r))
    return np.array(coords, dtype=np.int64).reshape(-1, 2)


def num_cells(size: int) -> int:
    return 3 * size * (size + 1) + 1


def build_index(coords: np.ndarray) -> Dict[Tuple[int, int], int]:
    """Map (q, r) -> row in the flat cell table."""
    return {(int(q), int(r)): i for i, (q, r) in enumerate(coords)}


def neighbors(q: int, r: int, size: int) -> List[Tuple[int, int]]:
    """In-lattice neighbours of (q, r); edge cells have fewer than six."""
    out = []
    for dq, dr in zip(HEX_DQ, HEX_DR):
        nq, nr = q + int(dq), r + int(dr)
        if in_lattice(nq, nr, size):
            out.append((nq, nr))
    return out


def neighbor_table(
    coords: np.ndarray, index: Dict[Tuple[int, int], int]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Precompute neighbour indices for every cell.

    Returns:
        nbrs: (N, 6) int64, row i holds the table indices of cell i's
            neighbours, padded with -1.
        counts: (N,) int64, number of valid entries in each row.
    """
    n = coords.shape[0]
    nbrs = np.full((n, 6), -1, dtype=np.int64)
    counts = np.zeros(n, dtype=np.int64)
    for i in range(n):
        q, r = int(coords[i, 0]), int(coords[i, 1])
        k = 0
        for d in range(6):
            j = index.get((q + int(HEX_DQ[d]), r + int(HEX_DR[d])))
            if j is not None:
                nbrs[i, k] = j
                k += 1
        counts[i] = k
    return nbrs, counts


def hex_to_pixel(q, r, scale: float = 1.0):
    """
    Convert axial (q, r) to pixel (x, y) for a flat-topped layout.

    Works on scalars or numpy arrays.
    """
    x = scale * 1.5 * q
    y = scale * SQRT3 * (r + q / 2.0)
    return x, y


def hex_distance(q, r):
    """Axial distance from the origin."""
    return np.maximum(np.maximum(np.abs(q), np.abs(r)), np.abs(q + r))


__all__ = [
    "HEX_DQ",
    "HEX_DR",
    "build_index",
    "hex_coords",
    "hex_distance",
    "hex_to_pixel",
    "in_lattice",
    "neighbor_table",
    "neighbors",
    "num_cells",
]
