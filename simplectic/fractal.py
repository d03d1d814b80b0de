from __future__ import annotations

from typing import Callable

import numpy as np

Sampler = Callable[..., np.ndarray]


def _octave_sum(
    sample: Sampler,
    coords: tuple[np.ndarray, ...],
    shape: Callable[[np.ndarray], np.ndarray],
    *,
    octaves: int,
    lacunarity: float,
    persistence: float,
) -> np.ndarray:
    coords = tuple(np.asarray(c, dtype=np.float64) for c in coords)
    if not coords:
        raise ValueError("at least one coordinate array is required")
    coords = np.broadcast_arrays(*coords)

    octaves = int(octaves)
    lacunarity = float(lacunarity)
    persistence = float(persistence)

    amp = 1.0
    freq = 1.0
    total = np.zeros(coords[0].shape, dtype=np.float64)
    amp_sum = 0.0

    for _ in range(max(octaves, 1)):
        total += amp * shape(sample(*(c * freq for c in coords)))
        amp_sum += amp
        amp *= persistence
        freq *= lacunarity

    if amp_sum == 0.0:
        return total
    return total / amp_sum


def fbm(
    sample: Sampler,
    *coords: np.ndarray,
    octaves: int = 4,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
) -> np.ndarray:
    """Fractal Brownian motion: amplitude-weighted octaves of `sample`.

    `sample` takes one array per axis, e.g. `NoiseField.noise3`.
    """

    return _octave_sum(
        sample,
        coords,
        lambda n: n,
        octaves=octaves,
        lacunarity=lacunarity,
        persistence=persistence,
    )


def turbulence(
    sample: Sampler,
    *coords: np.ndarray,
    octaves: int = 4,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
) -> np.ndarray:
    return _octave_sum(
        sample,
        coords,
        np.abs,
        octaves=octaves,
        lacunarity=lacunarity,
        persistence=persistence,
    )


def _ridge(n: np.ndarray) -> np.ndarray:
    signal = 1.0 - np.abs(n)
    return signal * signal


def ridged(
    sample: Sampler,
    *coords: np.ndarray,
    octaves: int = 4,
    lacunarity: float = 2.0,
    persistence: float = 0.5,
) -> np.ndarray:
    return _octave_sum(
        sample,
        coords,
        _ridge,
        octaves=octaves,
        lacunarity=lacunarity,
        persistence=persistence,
    )
