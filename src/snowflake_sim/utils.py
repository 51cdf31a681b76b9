# src/snowflake_sim/utils.py
from __future__ import annotations

import json
import os
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np


@dataclass
class SnowflakeResult:
    """Common container for a finished snowflake run."""

    attached: Optional[np.ndarray] = None
    crystal_mass: Optional[np.ndarray] = None
    boundary: Optional[np.ndarray] = None
    meta: Optional[Dict[str, Any]] = None

    def ensure_meta(self) -> Dict[str, Any]:
        if self.meta is None:
            self.meta = {}
        return self.meta


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Independent generator for one lattice's noise stream."""
    return np.random.default_rng(seed)


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def save_result(
    path: str | os.PathLike[str], result: SnowflakeResult, *, overwrite: bool = True
) -> None:
    """Serialize a SnowflakeResult to a compressed .npz."""
    out_dir = Path(path).parent
    out_dir.mkdir(parents=True, exist_ok=True)
    out: Dict[str, Any] = {}
    if result.attached is not None:
        out["attached"] = np.asarray(result.attached, dtype=np.int64)
    if result.crystal_mass is not None:
        out["crystal_mass"] = np.asarray(result.crystal_mass, dtype=np.float64)
    if result.boundary is not None:
        out["boundary"] = np.asarray(result.boundary, dtype=np.int64)
    out["meta"] = dict(result.meta or {})

    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    np.savez_compressed(path, **out)


def load_result(path: str | os.PathLike[str]) -> SnowflakeResult:
    """
    Load a saved .npz into a SnowflakeResult.

    This is for plotting and analysis only; a result cannot be turned back
    into a running lattice.
    """
    data = np.load(path, allow_pickle=True)
    attached = data["attached"].astype(np.int64) if "attached" in data else None
    crystal_mass = data["crystal_mass"].astype(float) if "crystal_mass" in data else None
    boundary = data["boundary"].astype(np.int64) if "boundary" in data else None
    meta: Dict[str, Any] = {}
    if "meta" in data:
        meta_raw = data["meta"]
        if hasattr(meta_raw, "item"):
            try:
                meta = meta_raw.item()
            except ValueError:
                meta = {}
    return SnowflakeResult(
        attached=attached, crystal_mass=crystal_mass, boundary=boundary, meta=meta
    )


PARAMS_SECTION = "snowflake"


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Read run parameters from a JSON or TOML file.

    Keys may sit at the top level or under a `snowflake` table, e.g.

        [snowflake]
        size = 40
        beta = 1.6
        n_steps = 5000
    """
    path = Path(path)
    suffix = path.suffix.lower()
    text = path.read_bytes().decode("utf-8")
    if suffix in {".json", ""}:
        data = json.loads(text)
    elif suffix in {".toml", ".tml"}:
        data = tomllib.loads(text)
    else:
        raise ValueError(f"Unsupported parameter file format: {suffix}")
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a table of parameters, got {type(data).__name__}")
    section = data.get(PARAMS_SECTION, data)
    return dict(section)
