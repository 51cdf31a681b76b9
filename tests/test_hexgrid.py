"""
Tests for axial hex lattice geometry.
"""

import math

import numpy as np
import pytest

from snowflake_sim import hexgrid


@pytest.mark.parametrize("size", [1, 2, 5])
def test_hex_coords_count_and_bounds(size):
    coords = hexgrid.hex_coords(size)
    assert coords.shape == (hexgrid.num_cells(size), 2)
    q, r = coords[:, 0], coords[:, 1]
    assert np.all(np.abs(q) <= size)
    assert np.all(np.abs(r) <= size)
    assert np.all(np.abs(q + r) <= size)
    # no duplicated coordinates
    assert len({tuple(c) for c in coords}) == coords.shape[0]


def test_neighbor_table_edges_have_fewer_neighbors():
    coords = hexgrid.hex_coords(2)
    index = hexgrid.build_index(coords)
    nbrs, counts = hexgrid.neighbor_table(coords, index)

    assert counts[index[(0, 0)]] == 6
    assert counts[index[(2, 0)]] == 3   # corner
    assert counts[index[(2, -1)]] == 4  # edge
    # padding after the valid entries
    corner = index[(2, 0)]
    assert np.all(nbrs[corner, 3:] == -1)


def test_neighbor_table_is_symmetric():
    coords = hexgrid.hex_coords(3)
    index = hexgrid.build_index(coords)
    nbrs, counts = hexgrid.neighbor_table(coords, index)
    for i in range(len(coords)):
        for j in nbrs[i, :counts[i]]:
            assert i in nbrs[j, :counts[j]]


def test_neighbors_matches_table():
    size = 3
    coords = hexgrid.hex_coords(size)
    index = hexgrid.build_index(coords)
    nbrs, counts = hexgrid.neighbor_table(coords, index)
    for q, r in [(0, 0), (3, 0), (-3, 3), (1, -2)]:
        i = index[(q, r)]
        expected = {tuple(coords[j]) for j in nbrs[i, :counts[i]]}
        assert set(hexgrid.neighbors(q, r, size)) == expected


def test_hex_to_pixel():
    assert hexgrid.hex_to_pixel(0, 0, 1.0) == (0.0, 0.0)
    x, y = hexgrid.hex_to_pixel(1, 0, 2.0)
    assert x == pytest.approx(3.0)
    assert y == pytest.approx(math.sqrt(3.0))
    x, y = hexgrid.hex_to_pixel(0, 1, 1.0)
    assert x == pytest.approx(0.0)
    assert y == pytest.approx(math.sqrt(3.0))


def test_hex_to_pixel_neighbors_are_equidistant():
    scale = 0.3
    q = hexgrid.HEX_DQ
    r = hexgrid.HEX_DR
    x, y = hexgrid.hex_to_pixel(q, r, scale)
    dist = np.hypot(x, y)
    np.testing.assert_allclose(dist, scale * math.sqrt(3.0))


def test_hex_distance():
    assert hexgrid.hex_distance(0, 0) == 0
    assert hexgrid.hex_distance(2, -1) == 2
    assert hexgrid.hex_distance(-1, -2) == 3
