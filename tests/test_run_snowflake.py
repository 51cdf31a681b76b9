"""
Tests for the command-line runner's parameter merging.
"""

import json
import sys
from pathlib import Path

SCRIPTS = Path(__file__).resolve().parents[1] / "src" / "scripts"
if str(SCRIPTS) not in sys.path:
    sys.path.append(str(SCRIPTS))

import run_snowflake  # noqa: E402


def _params_file(tmp_path, values):
    path = tmp_path / "params.json"
    path.write_text(json.dumps(values))
    return str(path)


def test_file_values_survive_without_cli_overrides(tmp_path):
    path = _params_file(tmp_path, {"seed": 7, "size": 5, "beta": 1.6, "n_steps": 99})
    args = run_snowflake.make_parser().parse_args(["--params", path])

    params, n_steps = run_snowflake.build_params(args)

    assert params.seed == 7
    assert params.size == 5
    assert params.beta == 1.6
    assert n_steps == 99


def test_cli_overrides_file(tmp_path):
    path = _params_file(tmp_path, {"seed": 7, "size": 5, "n_steps": 99})
    args = run_snowflake.make_parser().parse_args(
        ["--params", path, "--seed", "3", "--steps", "10", "--grid-size", "21"]
    )

    params, n_steps = run_snowflake.build_params(args)

    assert params.seed == 3
    assert params.size == 10
    assert n_steps == 10


def test_defaults_without_file():
    args = run_snowflake.make_parser().parse_args([])

    params, n_steps = run_snowflake.build_params(args)

    assert params.seed == run_snowflake.DEFAULT_SEED
    assert n_steps == run_snowflake.DEFAULT_STEPS
    assert params.beta == 1.3
