from __future__ import annotations

import importlib.util
from pathlib import Path

from simplectic import PERLIN_PERMUTATION
from simplectic.map2d import noise_map_2d
from viz.export import array_to_png_bytes

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "render_noise.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("render_noise", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_render_defaults_to_perlin_table_3d_slice(tmp_path) -> None:
    out = tmp_path / "noise.png"
    assert _load_script().main(["--out", str(out), "--size", "24"]) == 0
    z = noise_map_2d(table=PERLIN_PERMUTATION, dim=3, width=24, height=24, scale=12.0)
    assert out.read_bytes() == array_to_png_bytes(z, normalize=False)


def test_render_seed_switches_to_shuffled_table(tmp_path) -> None:
    out = tmp_path / "noise.png"
    assert _load_script().main(["--out", str(out), "--size", "24", "--seed", "7"]) == 0
    z = noise_map_2d(seed=7, dim=3, width=24, height=24, scale=12.0)
    assert out.read_bytes() == array_to_png_bytes(z, normalize=False)
