"""
Per-cell state and the three-pass update rule.

Cell state is kept as a structure of arrays owned by the lattice. Each pass
below is a full loop over every cell; the lattice calls them in order, so
a pass never begins before the previous one has finished for all cells.

Pass 1 (diffusion_pass)
    Recompute boundary status, snapshot the attached-neighbour count and
    compute the next diffusive mass by local averaging. Attached neighbours
    reflect: they contribute the cell's own diffusive mass.
Pass 2 (phase_pass)
    Commit the averaged field, then for boundary cells: freeze, decide
    attachment (post-freeze, pre-melt boundary mass), melt.
Pass 3 (attachment_pass)
    Attach the cells flagged in pass 2 and perturb the diffusive mass of
    the remaining free cells, flooring it at zero.
"""

from __future__ import annotations

from dataclasses import dataclass

from numba import njit


@dataclass(frozen=True)
class Cell:
    """Read-only view of one lattice site, handed out by lattice queries."""

    q: int
    r: int
    diffusive_mass: float
    boundary_mass: float
    crystal_mass: float
    attached: bool
    boundary: bool
    age: int = 0

    @property
    def coord(self):
        return (self.q, self.r)


@njit(cache=True)
def attachment_decision(
    boundary_mass: float,
    attached_count: int,
    ambient: float,
    beta: float,
    alpha: float,
    theta: float,
) -> bool:
    """
    Branch-count dependent attachment thresholds.

    1-2 attached neighbours: tip or flat spot, needs boundary mass > beta.
    3 attached neighbours: boundary mass >= 1, or >= alpha when the
    surrounding vapour (`ambient`) has dropped below theta.
    Anything else never attaches.
    """
    if attached_count == 1 or attached_count == 2:
        return boundary_mass > beta
    if attached_count == 3:
        if boundary_mass >= 1.0:
            return True
        return boundary_mass >= alpha and ambient < theta
    return False


@njit(cache=True)
def diffusion_pass(
    diffusive_mass,
    attached,
    boundary,
    age,
    next_diffusive,
    attached_count,
    nbrs,
    nbr_counts,
):
    n = diffusive_mass.shape[0]
    for i in range(n):
        own = diffusive_mass[i]
        if attached[i]:
            boundary[i] = False
            attached_count[i] = 0
            next_diffusive[i] = own
            continue
        age[i] += 1
        total = own
        count = 0
        for k in range(nbr_counts[i]):
            j = nbrs[i, k]
            if attached[j]:
                count += 1
                total += own
            else:
                total += diffusive_mass[j]
        boundary[i] = count > 0
        attached_count[i] = count
        next_diffusive[i] = total / (nbr_counts[i] + 1)


@njit(cache=True)
def phase_pass(
    diffusive_mass,
    boundary_mass,
    crystal_mass,
    boundary,
    next_diffusive,
    attached_count,
    attach_flag,
    nbrs,
    nbr_counts,
    beta,
    theta,
    alpha,
    kappa,
    mu,
    upsilon,
):
    n = diffusive_mass.shape[0]
    for i in range(n):
        diffusive_mass[i] = next_diffusive[i]
        attach_flag[i] = False

    for i in range(n):
        if not boundary[i]:
            continue

        # freezing
        dm = diffusive_mass[i]
        boundary_mass[i] += (1.0 - kappa) * dm
        crystal_mass[i] += kappa * dm
        diffusive_mass[i] = 0.0

        # neighbours contribute their committed, pre-freeze value
        ambient = diffusive_mass[i]
        for k in range(nbr_counts[i]):
            ambient += next_diffusive[nbrs[i, k]]
        attach_flag[i] = attachment_decision(
            boundary_mass[i], attached_count[i], ambient, beta, alpha, theta
        )

        # melting
        diffusive_mass[i] += mu * boundary_mass[i] + upsilon * crystal_mass[i]
        boundary_mass[i] *= 1.0 - mu
        crystal_mass[i] *= 1.0 - upsilon


@njit(cache=True)
def attachment_pass(
    diffusive_mass,
    boundary_mass,
    crystal_mass,
    attached,
    boundary,
    attach_flag,
    noise,
):
    n = diffusive_mass.shape[0]
    for i in range(n):
        if boundary[i] and attach_flag[i]:
            crystal_mass[i] += boundary_mass[i]
            boundary_mass[i] = 0.0
            attached[i] = True
        if not attached[i]:
            dm = diffusive_mass[i] + noise[i]
            diffusive_mass[i] = dm if dm > 0.0 else 0.0


@njit(cache=True)
def refresh_boundary(attached, boundary, nbrs, nbr_counts):
    """Recompute boundary flags from settled attachment state."""
    n = attached.shape[0]
    for i in range(n):
        flag = False
        if not attached[i]:
            for k in range(nbr_counts[i]):
                if attached[nbrs[i, k]]:
                    flag = True
                    break
        boundary[i] = flag


__all__ = [
    "Cell",
    "attachment_decision",
    "attachment_pass",
    "diffusion_pass",
    "phase_pass",
    "refresh_boundary",
]
