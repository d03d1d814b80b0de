from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from .field import NoiseField
from .fractal import fbm, ridged, turbulence

logger = logging.getLogger(__name__)

_VARIANTS = {"fbm": fbm, "turbulence": turbulence, "ridged": ridged}


def noise_map_2d(
    *,
    seed: int = 0,
    table: Sequence[int] | np.ndarray | None = None,
    dim: int = 2,
    width: int,
    height: int,
    scale: float,
    octaves: int = 1,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
    variant: str = "fbm",
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    z: float = 0.0,
    w: float = 0.0,
    normalize: bool = False,
    tileable: bool = False,
    dtype: np.dtype | None = None,
) -> np.ndarray:
    """Sample a (height, width) noise map.

    `dim` picks the field: the 2D noise directly, or the plane at fixed `z`
    (and `w`) through the 3D or 4D noise. `scale` is the feature size in
    pixels. With `tileable` the plane is wrapped onto a torus in 4D, so the
    map repeats seamlessly; `z` and `w` are unused then.
    """

    dim = int(dim)
    if dim not in (2, 3, 4):
        raise ValueError(f"unsupported dimension: {dim}")

    variant = str(variant)
    if variant not in _VARIANTS:
        raise ValueError(f"unknown variant: {variant}")

    width = int(width)
    height = int(height)
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")

    if bool(tileable) and dim != 4:
        raise ValueError("tileable maps are sampled in 4D, set dim=4")

    scale = float(scale)
    scale = max(scale, 1e-9)

    offset_x = float(offset_x)
    offset_y = float(offset_y)

    field = NoiseField(int(seed) if table is None else table)
    logger.debug(
        "noise map %dx%d dim=%d variant=%s tileable=%s",
        width,
        height,
        dim,
        variant,
        bool(tileable),
    )

    if bool(tileable):
        # One full turn per map, so pixel `width` lands back on pixel 0.
        period_x = float(width) / scale
        period_y = float(height) / scale
        ax = np.linspace(0.0, 2.0 * math.pi, width, endpoint=False, dtype=np.float64)
        ay = np.linspace(0.0, 2.0 * math.pi, height, endpoint=False, dtype=np.float64)
        axg, ayg = np.meshgrid(ax, ay)
        rx = period_x / (2.0 * math.pi)
        ry = period_y / (2.0 * math.pi)
        coords = (
            offset_x + rx * np.cos(axg),
            offset_x + rx * np.sin(axg),
            offset_y + ry * np.cos(ayg),
            offset_y + ry * np.sin(ayg),
        )
    else:
        xs = (np.arange(width, dtype=np.float64) / scale) + offset_x
        ys = (np.arange(height, dtype=np.float64) / scale) + offset_y
        xg, yg = np.meshgrid(xs, ys)
        coords = (xg, yg, np.full_like(xg, float(z)), np.full_like(xg, float(w)))[:dim]

    out = _VARIANTS[variant](
        field.sampler(dim),
        *coords,
        octaves=int(octaves),
        lacunarity=float(lacunarity),
        persistence=float(persistence),
    )

    if dtype is not None:
        out = np.asarray(out, dtype=dtype)

    if not bool(normalize):
        return out

    out = np.asarray(out, dtype=np.float64)
    zmin = float(np.min(out))
    zmax = float(np.max(out))
    if math.isclose(zmin, zmax):
        return np.zeros_like(out)
    return (out - zmin) / (zmax - zmin)
