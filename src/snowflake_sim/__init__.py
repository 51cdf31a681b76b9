"""
Snowflake Simulation Library

Diffusion-limited crystal growth on a hexagonal lattice:
- CrystalLattice: the three-pass lattice engine
- SnowflakeSimulator: reset/advance controller around a lattice
- hex_to_pixel: axial coordinate to pixel transform for renderers
"""

from .cell import Cell
from .hexgrid import hex_to_pixel
from .lattice import (
    ConstructionError,
    CrystalLattice,
    SnowflakeParams,
    SnowflakeSimulator,
    new_lattice,
    run_model,
)
from . import utils

__all__ = [
    # Engine
    "CrystalLattice",
    "SnowflakeSimulator",
    "new_lattice",
    "run_model",
    # Data / configuration
    "Cell",
    "SnowflakeParams",
    "ConstructionError",
    # Geometry
    "hex_to_pixel",
    # Utilities
    "utils",
]
