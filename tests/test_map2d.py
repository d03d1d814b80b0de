from __future__ import annotations

import math

import numpy as np
import pytest

from simplectic import PERLIN_PERMUTATION, NoiseField
from simplectic.map2d import noise_map_2d


def test_noise_map_2d_shape_and_deterministic() -> None:
    z1 = noise_map_2d(seed=0, width=40, height=24, scale=12.0, octaves=3)
    z2 = noise_map_2d(seed=0, width=40, height=24, scale=12.0, octaves=3)
    assert z1.shape == (24, 40)
    assert np.array_equal(z1, z2)


def test_noise_map_samples_pixel_over_scale() -> None:
    z = noise_map_2d(seed=0, dim=3, width=6, height=5, scale=12.0, offset_x=1.0, z=0.5)
    field = NoiseField(0)
    for j in range(5):
        for i in range(6):
            assert z[j, i] == field.eval3(i / 12.0 + 1.0, j / 12.0, 0.5)


def test_noise_map_uses_supplied_table() -> None:
    z = noise_map_2d(table=PERLIN_PERMUTATION, dim=4, width=8, height=8, scale=4.0, z=0.3, w=-0.2)
    field = NoiseField(PERLIN_PERMUTATION)
    assert z[3, 5] == field.eval4(5 / 4.0, 3 / 4.0, 0.3, -0.2)


def test_noise_map_2d_normalize_bounds() -> None:
    z = noise_map_2d(seed=1, width=32, height=32, scale=8.0, octaves=2, variant="ridged", normalize=True)
    assert float(np.min(z)) == 0.0
    assert float(np.max(z)) == 1.0


def test_noise_map_2d_tileable_wraps_onto_next_tile() -> None:
    z = noise_map_2d(seed=0, dim=4, width=48, height=36, scale=10.0, octaves=2, offset_x=3.7, offset_y=-1.2, tileable=True)
    # The last column and row are neighbours of the next tile, not copies of it.
    assert not np.allclose(z[:, 0], z[:, -1])
    assert not np.allclose(z[0, :], z[-1, :])

    tiled = np.tile(z, (2, 2))
    steps_x = np.abs(np.diff(tiled, axis=1))
    steps_y = np.abs(np.diff(tiled, axis=0))
    assert float(np.max(steps_x[:, 47])) <= 2.0 * float(np.max(steps_x[:, :47]))
    assert float(np.max(steps_y[35, :])) <= 2.0 * float(np.max(steps_y[:35, :]))


def test_noise_map_2d_tileable_samples_a_torus() -> None:
    z = noise_map_2d(seed=0, dim=4, width=48, height=36, scale=10.0, offset_x=3.7, offset_y=-1.2, tileable=True)
    rx = (48 / 10.0) / (2.0 * math.pi)
    ry = (36 / 10.0) / (2.0 * math.pi)
    field = NoiseField(0)
    for j, i in [(0, 0), (9, 12), (18, 24), (35, 47)]:
        ax = 2.0 * math.pi * i / 48
        ay = 2.0 * math.pi * j / 36
        expected = field.eval4(
            3.7 + rx * math.cos(ax),
            3.7 + rx * math.sin(ax),
            -1.2 + ry * math.cos(ay),
            -1.2 + ry * math.sin(ay),
        )
        assert math.isclose(z[j, i], expected, abs_tol=1e-9)


def test_noise_map_2d_dtype() -> None:
    z = noise_map_2d(seed=0, width=8, height=8, scale=4.0, dtype=np.float32)
    assert z.dtype == np.float32


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(dim=5),
        dict(variant="warp"),
        dict(width=0),
        dict(dim=3, tileable=True),
    ],
)
def test_noise_map_2d_rejects_bad_arguments(kwargs) -> None:
    params = dict(seed=0, width=8, height=8, scale=4.0)
    params.update(kwargs)
    with pytest.raises(ValueError):
        noise_map_2d(**params)
