"""
Hexagonal snowflake lattice engine.

Implements a Gravner-Griffeath style crystal growth model: vapour diffuses
across a hexagonal lattice, freezes into quasi-liquid boundary mass at the
crystal surface, and boundary cells join the crystal once their boundary
mass passes a threshold that depends on how many attached neighbours they
have. The per-cell rule lives in `cell.py`; this module owns the cell
table and drives the three global passes of each step.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional

import numpy as np

from . import hexgrid, utils
from .cell import (
    Cell,
    attachment_pass,
    diffusion_pass,
    phase_pass,
    refresh_boundary,
)


class ConstructionError(ValueError):
    """Raised when a lattice cannot be built from the given radius."""


@dataclass
class SnowflakeParams:
    """
    Physical parameters of a run. Supplied once per lattice; build a new
    lattice to change any of them. Out-of-range physics (e.g. negative
    kappa) is not validated and gives meaningless, though finite, output.
    """

    size: int = 30           # lattice radius in cells
    beta: float = 1.3        # boundary mass needed to attach with 1-2 attached neighbours
    theta: float = 0.025     # ambient vapour ceiling for the low-mass 3-neighbour rule
    alpha: float = 0.08      # boundary mass floor for the low-mass 3-neighbour rule
    kappa: float = 0.003     # fraction of frozen vapour going straight to crystal
    mu: float = 0.07         # boundary mass melting rate
    upsilon: float = 0.00005 # crystal mass melting rate
    sigma: float = 0.00001   # amplitude of diffusive mass noise
    gamma: float = 0.5       # initial vapour density
    seed: Optional[int] = None
    verbose: bool = False

    @classmethod
    def from_grid_size(cls, grid_size: int, **kwargs: Any) -> "SnowflakeParams":
        """Build parameters from a grid diameter (odd by convention)."""
        return cls(size=int(grid_size) // 2, **kwargs)


def _check_size(size) -> int:
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        raise ConstructionError(f"Lattice radius must be an integer, got {size!r}")
    if size < 1:
        raise ConstructionError(f"Lattice radius must be >= 1, got {size}")
    return int(size)


class CrystalLattice:
    """
    Owns every cell of a hexagonal region and advances them in lockstep.

    Cells live in flat arrays indexed by table row; `coords[i]` is the
    axial coordinate of row i and `nbrs[i]` the rows of its neighbours.
    Exactly one cell, the origin, starts attached.
    """

    def __init__(
        self,
        size: Optional[int] = None,
        params: SnowflakeParams | None = None,
    ) -> None:
        params = params or SnowflakeParams()
        self.size = _check_size(params.size if size is None else size)
        self.params = params if params.size == self.size else replace(params, size=self.size)

        # Geometry is fixed for the lattice's lifetime
        self.coords = hexgrid.hex_coords(self.size)
        self.index = hexgrid.build_index(self.coords)
        self.nbrs, self.nbr_counts = hexgrid.neighbor_table(self.coords, self.index)
        n = self.coords.shape[0]

        self.diffusive_mass = np.full(n, float(self.params.gamma), dtype=np.float64)
        self.boundary_mass = np.zeros(n, dtype=np.float64)
        self.crystal_mass = np.zeros(n, dtype=np.float64)
        self.attached = np.zeros(n, dtype=np.bool_)
        self.boundary = np.zeros(n, dtype=np.bool_)
        self.age = np.zeros(n, dtype=np.int64)

        # Per-step scratch, overwritten every step
        self._next_diffusive = np.zeros(n, dtype=np.float64)
        self._attached_count = np.zeros(n, dtype=np.int64)
        self._attach_flag = np.zeros(n, dtype=np.bool_)

        self.origin = self.index[(0, 0)]
        self.attached[self.origin] = True

        self._rng = utils.make_rng(self.params.seed)
        self.step_count = 0

    def __len__(self) -> int:
        return self.coords.shape[0]

    # ------------------------------------------------------------------ update
    def _draw_noise(self) -> np.ndarray:
        sigma = float(self.params.sigma)
        if sigma == 0.0:
            return np.zeros(len(self), dtype=np.float64)
        return self._rng.uniform(-sigma, sigma, size=len(self))

    def step(self) -> None:
        """Advance the whole lattice by one time step."""
        p = self.params
        diffusion_pass(
            self.diffusive_mass,
            self.attached,
            self.boundary,
            self.age,
            self._next_diffusive,
            self._attached_count,
            self.nbrs,
            self.nbr_counts,
        )
        phase_pass(
            self.diffusive_mass,
            self.boundary_mass,
            self.crystal_mass,
            self.boundary,
            self._next_diffusive,
            self._attached_count,
            self._attach_flag,
            self.nbrs,
            self.nbr_counts,
            float(p.beta),
            float(p.theta),
            float(p.alpha),
            float(p.kappa),
            float(p.mu),
            float(p.upsilon),
        )
        attachment_pass(
            self.diffusive_mass,
            self.boundary_mass,
            self.crystal_mass,
            self.attached,
            self.boundary,
            self._attach_flag,
            self._draw_noise(),
        )
        refresh_boundary(self.attached, self.boundary, self.nbrs, self.nbr_counts)
        self.step_count += 1

    def run(self, n_steps: int) -> None:
        """Run `n_steps` steps, printing progress when params.verbose is set."""
        t_start = time.perf_counter()
        report_every = max(1, n_steps // 10)
        for i in range(1, n_steps + 1):
            self.step()
            if self.params.verbose and i % report_every == 0:
                elapsed = time.perf_counter() - t_start
                rate = i / elapsed if elapsed > 0 else 0.0
                print(f"[snowflake] step {i}/{n_steps}, {rate:.0f} steps/s, "
                      f"attached={int(self.attached.sum())}, "
                      f"radius={self.crystal_radius()}")
        if self.params.verbose:
            elapsed = time.perf_counter() - t_start
            print(f"Simulation completed: {n_steps} steps in {elapsed:.2f}s "
                  f"({int(self.attached.sum())} attached cells)")

    # ------------------------------------------------------------------ queries
    def _view(self, i: int) -> Cell:
        q, r = self.coords[i]
        return Cell(
            q=int(q),
            r=int(r),
            diffusive_mass=float(self.diffusive_mass[i]),
            boundary_mass=float(self.boundary_mass[i]),
            crystal_mass=float(self.crystal_mass[i]),
            attached=bool(self.attached[i]),
            boundary=bool(self.boundary[i]),
            age=int(self.age[i]),
        )

    def cell(self, q: int, r: int) -> Cell:
        try:
            i = self.index[(int(q), int(r))]
        except KeyError:
            raise KeyError(f"({q}, {r}) is outside a lattice of radius {self.size}") from None
        return self._view(i)

    def cells(self) -> List[Cell]:
        return [self._view(i) for i in range(len(self))]

    def attached_cells(self) -> List[Cell]:
        """Snapshot of every attached cell. Order is not meaningful."""
        return [self._view(i) for i in np.flatnonzero(self.attached)]

    def boundary_cells(self) -> List[Cell]:
        """Snapshot of the growth front. Order is not meaningful."""
        return [self._view(i) for i in np.flatnonzero(self.boundary & ~self.attached)]

    def attached_coords(self) -> np.ndarray:
        """(N, 2) axial coordinates of the attached cells."""
        return self.coords[self.attached].copy()

    def boundary_coords(self) -> np.ndarray:
        return self.coords[self.boundary & ~self.attached].copy()

    def mass_fields(self) -> Dict[str, np.ndarray]:
        return {
            "diffusive_mass": self.diffusive_mass.copy(),
            "boundary_mass": self.boundary_mass.copy(),
            "crystal_mass": self.crystal_mass.copy(),
        }

    def total_mass(self) -> float:
        return float(
            self.diffusive_mass.sum() + self.boundary_mass.sum() + self.crystal_mass.sum()
        )

    def crystal_radius(self) -> int:
        """Largest axial distance from the origin reached by the crystal."""
        q = self.coords[self.attached, 0]
        r = self.coords[self.attached, 1]
        return int(hexgrid.hex_distance(q, r).max())

    def snapshot(self) -> Dict[str, Any]:
        return {
            "step": self.step_count,
            "num_cells": len(self),
            "num_attached": int(self.attached.sum()),
            "num_boundary": int((self.boundary & ~self.attached).sum()),
            "radius": self.crystal_radius(),
            "diffusive_mass": float(self.diffusive_mass.sum()),
            "boundary_mass": float(self.boundary_mass.sum()),
            "crystal_mass": float(self.crystal_mass.sum()),
        }


def new_lattice(size: int, params: SnowflakeParams | None = None) -> CrystalLattice:
    """Build a fresh lattice of radius `size`; raises ConstructionError if size < 1."""
    return CrystalLattice(size=size, params=params)


class SnowflakeSimulator:
    """
    Run controller.

    Holds one parameter set and the current lattice. `reset()` discards the
    lattice wholesale and builds a new one; `advance()` steps it a frame at
    a time.
    """

    def __init__(self, params: SnowflakeParams | None = None, *, steps_per_frame: int = 5) -> None:
        self.params = params or SnowflakeParams()
        self.steps_per_frame = steps_per_frame
        self.lattice: Optional[CrystalLattice] = None
        self.current_step = 0

    def reset(self, params: SnowflakeParams | None = None) -> CrystalLattice:
        if params is not None:
            self.params = params
        self.lattice = CrystalLattice(params=self.params)
        self.current_step = 0
        return self.lattice

    def configure(self, **changes: Any) -> CrystalLattice:
        """Change parameters; always starts over on a new lattice."""
        return self.reset(replace(self.params, **changes))

    def advance(self, steps: Optional[int] = None) -> int:
        if self.lattice is None:
            self.reset()
        for _ in range(self.steps_per_frame if steps is None else steps):
            self.lattice.step()
            self.current_step += 1
        return self.current_step

    def run(self, n_steps: int) -> None:
        self.reset()
        self.lattice.run(n_steps)
        self.current_step = n_steps

    def get_attached_coords(self) -> np.ndarray:
        if self.lattice is None:
            raise RuntimeError("Simulation has not been run. Call run() first.")
        return self.lattice.attached_coords()

    def to_result(self) -> utils.SnowflakeResult:
        if self.lattice is None:
            raise RuntimeError("Simulation has not been run. Call run() first.")
        lat = self.lattice
        result = utils.SnowflakeResult(
            attached=lat.attached_coords(),
            crystal_mass=lat.crystal_mass[lat.attached].copy(),
            boundary=lat.boundary_coords(),
        )
        meta = result.ensure_meta()
        meta.update(lat.snapshot())
        meta["model"] = "snowflake"
        meta["steps"] = self.current_step
        meta["params"] = asdict(lat.params)
        return result


def run_model(
    params: SnowflakeParams | dict | None = None, n_steps: int = 1000
) -> utils.SnowflakeResult:
    """
    Run a snowflake simulation and return a SnowflakeResult.
    """
    if params is None:
        params = SnowflakeParams()
    elif isinstance(params, dict):
        config = dict(params)
        n_steps = int(config.pop("n_steps", n_steps))
        params = SnowflakeParams(**config)

    sim = SnowflakeSimulator(params)
    sim.run(n_steps)
    return sim.to_result()


__all__ = [
    "ConstructionError",
    "CrystalLattice",
    "SnowflakeParams",
    "SnowflakeSimulator",
    "new_lattice",
    "run_model",
]
